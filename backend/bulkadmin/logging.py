"""
Centralized logging configuration for the bulk SMS admin session core.

Provides:
- Console logging with colored, prefixed output by application area
- File logging with timestamps for post-mortem analysis
- Logger factory for the session, storage and auth areas
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional


class Colors:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"

    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_BLUE = "\033[94m"
    BRIGHT_MAGENTA = "\033[95m"
    BRIGHT_CYAN = "\033[96m"


# Area-specific colors and prefixes
AREA_CONFIG = {
    "main": {"color": Colors.BRIGHT_CYAN, "prefix": "BULKADMIN.main"},
    "session": {"color": Colors.BRIGHT_MAGENTA, "prefix": "BULKADMIN.session"},
    "session.refresh": {"color": Colors.MAGENTA, "prefix": "BULKADMIN.session.refresh"},
    "storage": {"color": Colors.BRIGHT_BLUE, "prefix": "BULKADMIN.storage"},
    "auth": {"color": Colors.BRIGHT_YELLOW, "prefix": "BULKADMIN.auth"},
    "api": {"color": Colors.BRIGHT_GREEN, "prefix": "BULKADMIN.api"},
    "ui": {"color": Colors.CYAN, "prefix": "BULKADMIN.ui"},
}

DEFAULT_AREA_CONFIG = {"color": Colors.WHITE, "prefix": "BULKADMIN"}

LOGGER_NAMESPACE = "bulkadmin"


class ColoredConsoleFormatter(logging.Formatter):
    """Adds colors and area prefixes to console output."""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.DIM,
        logging.INFO: Colors.RESET,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BRIGHT_RED + Colors.BOLD,
    }

    def __init__(self, area: str = "main"):
        super().__init__()
        config = AREA_CONFIG.get(area, DEFAULT_AREA_CONFIG)
        self.area_color = config["color"]
        self.area_prefix = config["prefix"]

    def format(self, record: logging.LogRecord) -> str:
        level_color = self.LEVEL_COLORS.get(record.levelno, Colors.RESET)
        timestamp = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")

        # Format: [BULKADMIN.area] HH:MM:SS LEVEL: message
        prefix = f"{self.area_color}[{self.area_prefix}]{Colors.RESET}"
        time_str = f"{Colors.DIM}{timestamp}{Colors.RESET}"
        level_str = f"{level_color}{record.levelname:<8}{Colors.RESET}"

        return f"{prefix} {time_str} {level_str} {record.getMessage()}"


class FileFormatter(logging.Formatter):
    """Plain file lines; the area prefix is taken from the logger name."""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S.%f")[:-3]
        area = record.name.removeprefix(f"{LOGGER_NAMESPACE}.")
        prefix = AREA_CONFIG[area]["prefix"] if area in AREA_CONFIG else record.name

        # Format: TIMESTAMP [AREA] LEVEL: message
        return f"{timestamp} [{prefix}] {record.levelname}: {record.getMessage()}"


_log_dir: Optional[Path] = None
_file_handler: Optional[logging.FileHandler] = None
_console_level: int = logging.INFO
# Area loggers handed out so far, re-wired whenever setup_logging runs
_area_loggers: dict[str, logging.Logger] = {}


def setup_logging(
    log_dir: Optional[str] = None,
    console_level: int = logging.INFO,
    file_level: int = logging.DEBUG,
) -> Path:
    """
    Start writing every area's log to a timestamped file.

    Module loggers are created at import time, usually before this runs,
    so loggers that already exist are re-wired here as well: each gets
    the shared file handler and the new console level.

    Args:
        log_dir: Directory for log files. Defaults to ./logs next to the backend
        console_level: Minimum level for console output
        file_level: Minimum level for file output

    Returns:
        Path to the log directory
    """
    global _log_dir, _file_handler, _console_level

    close_logging()

    _log_dir = Path(log_dir) if log_dir else Path(__file__).parent.parent / "logs"
    _log_dir.mkdir(parents=True, exist_ok=True)

    log_filename = datetime.now().strftime("bulkadmin_%Y%m%d_%H%M%S.log")
    log_path = _log_dir / log_filename

    latest_link = _log_dir / "latest.log"
    try:
        if latest_link.is_symlink() or latest_link.exists():
            latest_link.unlink()
        latest_link.symlink_to(log_filename)
    except OSError:
        pass  # Symlinks may not work on all systems

    _console_level = console_level
    _file_handler = logging.FileHandler(log_path, encoding="utf-8")
    _file_handler.setLevel(file_level)
    _file_handler.setFormatter(FileFormatter())

    # Third-party loggers (uvicorn, httpx) reach the file through the root
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.addHandler(_file_handler)

    for area_logger in _area_loggers.values():
        _wire(area_logger)

    get_logger("main").info(f"Logging initialized. Log file: {log_path}")

    return _log_dir


def close_logging() -> None:
    """Detach and close the log file, leaving console output in place."""
    global _file_handler

    if _file_handler is None:
        return
    logging.getLogger().removeHandler(_file_handler)
    for area_logger in _area_loggers.values():
        area_logger.removeHandler(_file_handler)
    _file_handler.close()
    _file_handler = None


def _wire(logger: logging.Logger) -> None:
    for handler in logger.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler):
            handler.setLevel(_console_level)
    if _file_handler is not None and _file_handler not in logger.handlers:
        logger.addHandler(_file_handler)


def get_logger(area: str = "main") -> logging.Logger:
    """
    Get a logger for a specific application area.

    Args:
        area: The application area (e.g., "session", "storage", "auth")

    Returns:
        Configured logger instance

    Example:
        logger = get_logger("session")
        logger.info("Session rehydrated")
        # Output: [BULKADMIN.session] 14:32:15 INFO     Session rehydrated
    """
    if area in _area_loggers:
        return _area_loggers[area]

    logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{area}")
    logger.setLevel(logging.DEBUG)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(ColoredConsoleFormatter(area))
    logger.addHandler(console_handler)

    # Don't propagate to root, which holds the same file handler
    logger.propagate = False

    _area_loggers[area] = logger
    _wire(logger)
    return logger


def get_recent_logs(lines: int = 100) -> list[str]:
    """Tail of latest.log, most recent last. Empty before setup_logging."""
    if _file_handler is not None:
        _file_handler.flush()
    if not _log_dir:
        return []

    latest = _log_dir / "latest.log"
    if not latest.exists():
        return []

    try:
        with open(latest, "r", encoding="utf-8") as f:
            return f.readlines()[-lines:]
    except OSError:
        return []
