"""Session state snapshot and the events published when it changes."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True)
class SessionState:
    """Immutable view of the signed-in principal."""

    token: Optional[str] = None
    role: Optional[str] = None
    user_email: Optional[str] = None
    login_time: Optional[int] = None  # epoch milliseconds

    @property
    def is_authenticated(self) -> bool:
        """True iff a non-empty token is held."""
        return bool(self.token)

    def to_dict(self) -> dict:
        # Token excluded; read it through SessionManager.token
        return {
            "is_authenticated": self.is_authenticated,
            "role": self.role,
            "user_email": self.user_email,
            "login_time": self.login_time,
        }


UNAUTHENTICATED = SessionState()


class SessionEventType(str, Enum):
    LOGGED_IN = "logged_in"
    TOKEN_REFRESHED = "token_refreshed"
    LOGGED_OUT = "logged_out"


@dataclass(frozen=True)
class SessionEvent:
    type: SessionEventType
    state: SessionState
    reason: Optional[str] = None
