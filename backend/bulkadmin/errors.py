"""Exception types raised by the session core and its HTTP clients."""


class SessionError(Exception):
    """Base class for session lifecycle failures."""


class TokenDecodeError(SessionError):
    """The bearer token does not carry a readable claims segment."""


class RefreshError(SessionError):
    """The refresh endpoint did not hand back a usable token."""


class LoginError(SessionError):
    """Credential or OTP exchange was rejected by the server."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message
