"""Session lifecycle: state, persistence, timeouts and token refresh."""

from .manager import (
    DEFAULT_LOGOUT_MESSAGE,
    IDLE_LOGOUT_MESSAGE,
    REFRESH_FAILED_MESSAGE,
    SESSION_EXPIRED_MESSAGE,
    SessionManager,
)
from .scheduler import AsyncioScheduler, Scheduler
from .state import SessionEvent, SessionEventType, SessionState
from .storage import FileStore, MemoryStore, NamespacedStorage
from .token import decode_claims, token_expiry_ms

__all__ = [
    'SessionManager',
    'SessionState',
    'SessionEvent',
    'SessionEventType',
    'Scheduler',
    'AsyncioScheduler',
    'FileStore',
    'MemoryStore',
    'NamespacedStorage',
    'decode_claims',
    'token_expiry_ms',
    'DEFAULT_LOGOUT_MESSAGE',
    'IDLE_LOGOUT_MESSAGE',
    'SESSION_EXPIRED_MESSAGE',
    'REFRESH_FAILED_MESSAGE',
]
