"""Notification and navigation sinks the session core reports to."""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Protocol

from ..logging import get_logger
from ..session.state import SessionEvent, SessionEventType

logger = get_logger("ui")

LOGIN_ROUTE = "/login"
OTP_ROUTE = "/otp"
DASHBOARD_ROUTE = "/dashboard"
ENTRY_ROUTE = "/"

SEVERITY_LEVELS = {
    "success": 20,
    "info": 20,
    "warning": 30,
    "error": 40,
}


class Navigator(Protocol):
    def navigate(self, route: str, replace: bool = False) -> None: ...


@dataclass
class Notification:
    severity: str
    message: str
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class LoggingNotifier:
    """Logs toasts and keeps the most recent ones for the UI to collect."""

    def __init__(self, maxlen: int = 50):
        self._pending: deque[Notification] = deque(maxlen=maxlen)

    def notify(self, severity: str, message: str) -> None:
        logger.log(SEVERITY_LEVELS.get(severity, 20), f"[{severity}] {message}")
        self._pending.append(Notification(severity=severity, message=message))

    def drain(self) -> list[Notification]:
        """Return and forget pending notifications, oldest first."""
        items = list(self._pending)
        self._pending.clear()
        return items


class LoggingNavigator:
    """Tracks the route the UI should be showing."""

    def __init__(self, location: str = ENTRY_ROUTE):
        self.location = location
        self.history: list[str] = [location]

    def navigate(self, route: str, replace: bool = False) -> None:
        if replace and self.history:
            self.history[-1] = route
        else:
            self.history.append(route)
        self.location = route
        logger.debug(f"Navigate to {route}{' (replace)' if replace else ''}")


class NavigationListener:
    """Sends the UI back to the entry point whenever a session ends."""

    def __init__(self, navigator: Navigator, target: str = ENTRY_ROUTE):
        self.navigator = navigator
        self.target = target

    def __call__(self, event: SessionEvent) -> None:
        if event.type is SessionEventType.LOGGED_OUT:
            self.navigator.navigate(self.target, replace=True)
