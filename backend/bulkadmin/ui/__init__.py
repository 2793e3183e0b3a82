"""UI-facing collaborators: sinks, activity wiring, guards and the login flow."""

from .activity import ACTIVITY_EVENTS, ActivityMonitor, EventHub
from .guards import Redirect, guard_for, otp_route, protected_route, public_route
from .sinks import LoggingNavigator, LoggingNotifier, NavigationListener

__all__ = [
    'ACTIVITY_EVENTS',
    'ActivityMonitor',
    'EventHub',
    'Redirect',
    'guard_for',
    'otp_route',
    'protected_route',
    'public_route',
    'LoggingNavigator',
    'LoggingNotifier',
    'NavigationListener',
]
