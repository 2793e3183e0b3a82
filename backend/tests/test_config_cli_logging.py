from __future__ import annotations

import logging

import pytest

import bulkadmin.logging as bulk_logging
from bulkadmin.__main__ import main
from bulkadmin.config import DEFAULT_SESSION_TIMEOUT, SessionConfig
from bulkadmin.logging import ColoredConsoleFormatter, close_logging, get_logger, get_recent_logs, setup_logging
from bulkadmin.session.storage import FileStore, NamespacedStorage


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "BULKADMIN_API_URL",
        "BULKADMIN_STORAGE_DIR",
        "BULKADMIN_IDLE_TIMEOUT",
        "BULKADMIN_SESSION_TIMEOUT",
        "BULKADMIN_REFRESH_THRESHOLD",
        "BULKADMIN_PORT",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_config_defaults(clean_env):
    config = SessionConfig()

    assert config.api_url == "https://providusbulk.approot.ng"
    assert config.idle_timeout == 3600
    assert config.session_timeout == DEFAULT_SESSION_TIMEOUT == 108000
    assert config.refresh_threshold == 1200
    assert config.session_check_interval == 5
    assert config.refresh_check_interval == 30
    assert config.storage_prefix == "providus_"


def test_config_env_then_arguments(clean_env):
    clean_env.setenv("BULKADMIN_SESSION_TIMEOUT", "1800")
    clean_env.setenv("BULKADMIN_PORT", "9100")
    clean_env.setenv("BULKADMIN_API_URL", "https://env.example/")

    assert SessionConfig().session_timeout == 1800
    assert SessionConfig().port == 9100
    assert SessionConfig(session_timeout=60).session_timeout == 60
    assert SessionConfig().endpoint("/refresh_token.php") == "https://env.example/refresh_token.php"


def test_config_zero_timeout_means_unset(clean_env):
    assert SessionConfig(idle_timeout=0).idle_timeout == 3600

    clean_env.setenv("BULKADMIN_IDLE_TIMEOUT", "900")
    assert SessionConfig(idle_timeout=0).idle_timeout == 900
    assert SessionConfig(idle_timeout=120).idle_timeout == 120


def _store(tmp_path):
    config = SessionConfig(storage_dir=str(tmp_path))
    return NamespacedStorage(FileStore(config.storage_file), config.storage_prefix)


def test_cli_status_without_session(tmp_path, capsys, clean_env):
    assert main(["--storage-dir", str(tmp_path), "status"]) == 1
    assert "Not logged in" in capsys.readouterr().out


def test_cli_status_and_logout(tmp_path, capsys, clean_env):
    store = _store(tmp_path)
    store.update({"token": "t", "role": "admin", "email": "a@x.com", "login_time": "1700000000000"})
    store.store.write({"theme": "dark"})

    assert main(["--storage-dir", str(tmp_path), "status"]) == 0
    out = capsys.readouterr().out
    assert "a@x.com" in out
    assert "admin" in out

    assert main(["--storage-dir", str(tmp_path), "logout"]) == 0
    reopened = _store(tmp_path)
    assert reopened.names() == []
    assert reopened.store.get("theme") == "dark"


def test_console_formatter_prefixes_area():
    record = logging.LogRecord("bulkadmin.session", logging.INFO, __file__, 1, "Token refreshed", None, None)

    line = ColoredConsoleFormatter("session").format(record)

    assert "[BULKADMIN.session]" in line
    assert "Token refreshed" in line


def test_setup_logging_writes_latest_log(tmp_path, monkeypatch):
    monkeypatch.setattr(bulk_logging, "_log_dir", None)
    monkeypatch.setattr(bulk_logging, "_file_handler", None)
    monkeypatch.setattr(bulk_logging, "_console_level", logging.INFO)
    root = logging.getLogger()
    saved_level = root.level

    try:
        log_dir = setup_logging(str(tmp_path / "logs"))

        assert (log_dir / "latest.log").exists()
        assert any("Logging initialized" in line for line in get_recent_logs(10))
    finally:
        close_logging()
        root.setLevel(saved_level)


def test_setup_logging_rewires_module_loggers(tmp_path, monkeypatch):
    monkeypatch.setattr(bulk_logging, "_log_dir", None)
    monkeypatch.setattr(bulk_logging, "_file_handler", None)
    root = logging.getLogger()
    saved_level = root.level

    # Created at import time, before the log file exists
    from bulkadmin.session import manager as manager_module

    try:
        setup_logging(str(tmp_path / "logs"))
        manager_module.logger.info("Rehydrated session for a@x.com")
        get_logger("session.refresh").warning("Token expires in 90s, refreshing")

        lines = get_recent_logs(50)
    finally:
        close_logging()
        root.setLevel(saved_level)

    assert any("[BULKADMIN.session] INFO: Rehydrated session for a@x.com" in line for line in lines)
    assert any("[BULKADMIN.session.refresh] WARNING: Token expires in 90s" in line for line in lines)
    assert bulk_logging._file_handler is None
    assert all(not isinstance(h, logging.FileHandler) for h in manager_module.logger.handlers)


def test_cli_log_dir_captures_storage_logs(tmp_path, clean_env):
    log_dir = tmp_path / "logs"
    _store(tmp_path / "store").update({"token": "t", "role": "admin"})

    assert main(["--storage-dir", str(tmp_path / "store"), "--log-dir", str(log_dir), "logout"]) == 0

    text = (log_dir / "latest.log").read_text(encoding="utf-8")
    assert "Logging initialized" in text
    assert "[BULKADMIN.storage] DEBUG: Purged 2 key(s) under 'providus_'" in text
    assert bulk_logging._file_handler is None
