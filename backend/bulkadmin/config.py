"""Session configuration with CLI > env var > defaults precedence."""

import os
from dataclasses import dataclass
from pathlib import Path


BULKADMIN_DIR = Path.home() / ".bulkadmin"

DEFAULT_API_URL = "https://providusbulk.approot.ng"
DEFAULT_STORAGE_PREFIX = "providus_"

# Timeouts in seconds
DEFAULT_IDLE_TIMEOUT = 60 * 60
# 30 hours; override with BULKADMIN_SESSION_TIMEOUT
DEFAULT_SESSION_TIMEOUT = 30 * 60 * 60
DEFAULT_REFRESH_THRESHOLD = 20 * 60
DEFAULT_SESSION_CHECK_INTERVAL = 5
DEFAULT_REFRESH_CHECK_INTERVAL = 30


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value:
        return float(value)
    return default


@dataclass
class SessionConfig:
    """Configuration for the session core and its local HTTP surface."""
    api_url: str = ""
    storage_dir: str = ""
    storage_prefix: str = DEFAULT_STORAGE_PREFIX

    idle_timeout: float = 0
    session_timeout: float = 0
    refresh_threshold: float = 0
    session_check_interval: float = DEFAULT_SESSION_CHECK_INTERVAL
    refresh_check_interval: float = DEFAULT_REFRESH_CHECK_INTERVAL

    http_timeout: float = 10.0
    port: int = 8200

    # Remote endpoint paths, relative to api_url
    refresh_path: str = "refresh_token.php"
    public_key_path: str = "get_public_key.php"
    login_path: str = "login.php"
    otp_path: str = "otp.php"

    def __post_init__(self):
        # Apply env var defaults before CLI overrides. Empty strings and zero
        # timeouts mean "not given", so a timer cannot be configured as 0.
        if not self.api_url:
            self.api_url = os.getenv("BULKADMIN_API_URL", DEFAULT_API_URL)
        if not self.storage_dir:
            self.storage_dir = os.getenv("BULKADMIN_STORAGE_DIR", str(BULKADMIN_DIR))
        if not self.idle_timeout:
            self.idle_timeout = _env_float("BULKADMIN_IDLE_TIMEOUT", DEFAULT_IDLE_TIMEOUT)
        if not self.session_timeout:
            self.session_timeout = _env_float("BULKADMIN_SESSION_TIMEOUT", DEFAULT_SESSION_TIMEOUT)
        if not self.refresh_threshold:
            self.refresh_threshold = _env_float(
                "BULKADMIN_REFRESH_THRESHOLD", DEFAULT_REFRESH_THRESHOLD
            )
        if self.port == 8200:
            env_port = os.getenv("BULKADMIN_PORT")
            if env_port:
                self.port = int(env_port)

    def endpoint(self, path: str) -> str:
        return f"{self.api_url.rstrip('/')}/{path.lstrip('/')}"

    @property
    def storage_file(self) -> Path:
        """JSON file backing the persistent store."""
        return Path(self.storage_dir) / "local_storage.json"
