"""Route guards. They only read whether a session is live."""

from dataclasses import dataclass
from typing import Optional

from ..session.manager import EMAIL_KEY, SessionManager
from ..session.storage import NamespacedStorage
from .sinks import DASHBOARD_ROUTE, LOGIN_ROUTE

PUBLIC_ROUTES = frozenset({"/login", "/otp", "/reset-password"})


@dataclass(frozen=True)
class Redirect:
    route: str
    replace: bool = True


def protected_route(manager: SessionManager) -> Optional[Redirect]:
    """Dashboard pages: bounce to the login page without a session."""
    if not manager.is_authenticated:
        return Redirect(LOGIN_ROUTE)
    return None


def public_route(manager: SessionManager) -> Optional[Redirect]:
    """Login page: skip straight to the dashboard when already signed in."""
    if manager.is_authenticated:
        return Redirect(DASHBOARD_ROUTE)
    return None


def otp_route(manager: SessionManager, persistent: NamespacedStorage) -> Optional[Redirect]:
    """OTP page: needs a pending email from the login step."""
    redirect = public_route(manager)
    if redirect:
        return redirect
    if not persistent.get(EMAIL_KEY):
        return Redirect(LOGIN_ROUTE)
    return None


def guard_for(path: str, manager: SessionManager, persistent: NamespacedStorage) -> Optional[Redirect]:
    """Pick the guard that applies to a route path."""
    if path == "/otp":
        return otp_route(manager, persistent)
    if path in PUBLIC_ROUTES:
        # Password reset links are usable with or without a session
        return public_route(manager) if path == "/login" else None
    return protected_route(manager)
