"""
SessionManager - the single owner of authentication state.

Holds the bearer token, role and email, persists them under the storage
prefix and runs three timer lines while a session is live:

- idle timer: one-shot, re-armed on every user activity event
- session check: interval comparing time since login with the absolute budget
- refresh check: interval inspecting the token's `exp` claim and refreshing
  it ahead of expiry

Every path out of a session goes through `logout`, which cancels the
timers, purges storage and publishes LOGGED_OUT. Navigation is left to
subscribers.
"""

from collections.abc import Callable
from dataclasses import replace
from typing import Optional, Protocol

from ..config import SessionConfig
from ..errors import TokenDecodeError
from ..logging import get_logger
from .scheduler import AsyncioScheduler, Cancellable, Scheduler
from .state import UNAUTHENTICATED, SessionEvent, SessionEventType, SessionState
from .storage import NamespacedStorage
from .token import token_expiry_ms

logger = get_logger("session")
refresh_logger = get_logger("session.refresh")

DEFAULT_LOGOUT_MESSAGE = "You have been logged out."
IDLE_LOGOUT_MESSAGE = "You were logged out due to inactivity."
SESSION_EXPIRED_MESSAGE = "Your session has expired. Please log in again."
REFRESH_FAILED_MESSAGE = "Session expired. Please log in again."
LOGIN_MESSAGE = "Logged in successfully!"
NO_TOKEN_MESSAGE = "No token found"

# Persisted key names, stored under the namespace prefix
TOKEN_KEY = "token"
ROLE_KEY = "role"
EMAIL_KEY = "email"
LOGIN_TIME_KEY = "login_time"

Listener = Callable[[SessionEvent], None]


class Notifier(Protocol):
    def notify(self, severity: str, message: str) -> None: ...


class TokenRefresher(Protocol):
    async def refresh_token(self, token: str) -> str: ...


class SessionManager:
    """Owns session state, its persistence and its timeout policies."""

    def __init__(
        self,
        persistent: NamespacedStorage,
        short_lived: NamespacedStorage,
        refresher: TokenRefresher,
        notifier: Notifier,
        scheduler: Optional[Scheduler] = None,
        config: Optional[SessionConfig] = None,
    ):
        self.config = config or SessionConfig()
        self._persistent = persistent
        self._short_lived = short_lived
        self._refresher = refresher
        self._notifier = notifier
        self._scheduler = scheduler or AsyncioScheduler()

        self._state: SessionState = UNAUTHENTICATED
        self._listeners: list[Listener] = []

        self._idle_timer: Optional[Cancellable] = None
        self._session_check: Optional[Cancellable] = None
        self._refresh_check: Optional[Cancellable] = None
        self._refresh_task: Optional[Cancellable] = None
        # Token a refresh request is currently running for
        self._refresh_in_flight: Optional[str] = None

    # --- State access ---

    def get_state(self) -> SessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state.is_authenticated

    @property
    def token(self) -> Optional[str]:
        return self._state.token

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener for session events. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event_type: SessionEventType, reason: Optional[str] = None) -> None:
        event = SessionEvent(type=event_type, state=self._state, reason=reason)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Session listener failed on {event_type.value}: {type(e).__name__}: {e}")

    def _now_ms(self) -> int:
        return int(self._scheduler.now() * 1000)

    # --- Lifecycle ---

    def start(self) -> SessionState:
        """Rehydrate from persistent storage and arm timers if a session survived."""
        token = self._persistent.get(TOKEN_KEY)
        raw_login_time = self._persistent.get(LOGIN_TIME_KEY)

        if token and not raw_login_time:
            raw_login_time = str(self._now_ms())
            self._persistent.set(LOGIN_TIME_KEY, raw_login_time)
            logger.info("Backfilled missing login time for rehydrated session")

        login_time: Optional[int] = None
        if raw_login_time:
            try:
                login_time = int(raw_login_time)
            except ValueError:
                logger.warning(f"Ignoring unparseable login time {raw_login_time!r}")

        self._state = SessionState(
            token=token or None,
            role=self._persistent.get(ROLE_KEY),
            user_email=self._persistent.get(EMAIL_KEY),
            login_time=login_time,
        )

        if self._state.is_authenticated:
            logger.info(f"Rehydrated session for {self._state.user_email}")
            self._activate()
        return self._state

    def shutdown(self) -> None:
        """
        Stop all timers and cancel a running refresh.

        Persisted state is left in place for the next start.
        """
        self._cancel_timers()
        self._cancel_interval("_refresh_task")
        self._refresh_in_flight = None

    async def aclose(self) -> None:
        """Shut down and wait for cancelled background work to unwind."""
        self.shutdown()
        await self._scheduler.aclose()

    def login(self, token: str, role: str, email: str) -> None:
        """Record a session obtained from the credential exchange."""
        now = self._now_ms()
        self._persistent.update({
            LOGIN_TIME_KEY: str(now),
            TOKEN_KEY: token,
            ROLE_KEY: role,
            EMAIL_KEY: email,
        })
        self._short_lived.clear()

        self._state = SessionState(token=token, role=role, user_email=email, login_time=now)
        logger.info(f"Logged in as {email}")
        self._notifier.notify("success", LOGIN_MESSAGE)

        self._activate()
        self._publish(SessionEventType.LOGGED_IN)

    def logout(self, reason: str = DEFAULT_LOGOUT_MESSAGE) -> None:
        """Tear the session down. Safe to call when already logged out."""
        self._cancel_timers()

        self._persistent.purge()
        self._short_lived.purge()

        was_authenticated = self._state.is_authenticated
        self._state = UNAUTHENTICATED
        self._refresh_in_flight = None

        if was_authenticated:
            logger.info(f"Logged out: {reason}")
        self._notifier.notify("info", reason)
        self._publish(SessionEventType.LOGGED_OUT, reason)

    async def refresh_token(self) -> None:
        """Swap the persisted token for a fresh one, or force logout on failure."""
        old_token = self._persistent.get(TOKEN_KEY)
        if not old_token:
            refresh_logger.error("Token refresh requested with no token stored")
            self._notifier.notify("error", NO_TOKEN_MESSAGE)
            return
        if self._refresh_in_flight == old_token:
            refresh_logger.info("Refresh already running for the current token, skipping")
            return

        self._refresh_in_flight = old_token
        await self._refresh(old_token)

    async def _refresh(self, old_token: str) -> None:
        try:
            new_token = await self._refresher.refresh_token(old_token)
        except Exception as e:
            if self._state.token != old_token:
                refresh_logger.info("Refresh failed after the session changed, ignoring")
                return
            refresh_logger.error(f"Token refresh failed: {type(e).__name__}: {e}")
            self.logout(REFRESH_FAILED_MESSAGE)
            return
        finally:
            if self._refresh_in_flight == old_token:
                self._refresh_in_flight = None

        if self._state.token != old_token:
            refresh_logger.info("Refreshed token arrived after the session changed, discarding")
            return

        self._persistent.set(TOKEN_KEY, new_token)
        self._state = replace(self._state, token=new_token)
        refresh_logger.info("Token refreshed")
        self._publish(SessionEventType.TOKEN_REFRESHED)

    # --- Timers ---

    def reset_inactivity_timer(self) -> None:
        """Restart the idle countdown. Only armed while authenticated."""
        self.cancel_inactivity_timer()
        if self._state.is_authenticated:
            self._idle_timer = self._scheduler.call_later(
                self.config.idle_timeout, self._on_idle_timeout
            )

    def cancel_inactivity_timer(self) -> None:
        if self._idle_timer is not None:
            self._idle_timer.cancel()
            self._idle_timer = None

    def _activate(self) -> None:
        """Arm the idle timer and both monitors, running each check once right away."""
        self.reset_inactivity_timer()

        self._cancel_interval("_session_check")
        self._run_safely("session check", self._check_session)
        if not self._state.is_authenticated:
            return
        self._session_check = self._scheduler.call_every(
            self.config.session_check_interval,
            lambda: self._run_safely("session check", self._check_session),
        )

        self._cancel_interval("_refresh_check")
        self._run_safely("refresh check", self._check_refresh_window)
        if not self._state.is_authenticated:
            return
        self._refresh_check = self._scheduler.call_every(
            self.config.refresh_check_interval,
            lambda: self._run_safely("refresh check", self._check_refresh_window),
        )

    def _cancel_interval(self, attr: str) -> None:
        handle = getattr(self, attr)
        if handle is not None:
            handle.cancel()
            setattr(self, attr, None)

    def _cancel_timers(self) -> None:
        self.cancel_inactivity_timer()
        self._cancel_interval("_session_check")
        self._cancel_interval("_refresh_check")

    def _run_safely(self, name: str, check: Callable[[], None]) -> None:
        try:
            check()
        except Exception as e:
            logger.error(f"{name} failed: {type(e).__name__}: {e}")

    def _on_idle_timeout(self) -> None:
        self._idle_timer = None
        self._run_safely("idle timeout", lambda: self.logout(IDLE_LOGOUT_MESSAGE))

    def _check_session(self) -> None:
        login_time = self._state.login_time
        if not self._state.is_authenticated or login_time is None:
            return
        if self._now_ms() - login_time > self.config.session_timeout * 1000:
            self.logout(SESSION_EXPIRED_MESSAGE)

    def _check_refresh_window(self) -> None:
        token = self._state.token
        if not token:
            return
        if self._refresh_in_flight is not None:
            refresh_logger.debug("Refresh already in flight, skipping check")
            return

        try:
            expires_at = token_expiry_ms(token)
        except TokenDecodeError as e:
            refresh_logger.warning(f"Failed to parse token: {e}")
            return
        if expires_at is None:
            return

        time_left = expires_at - self._now_ms()
        if 0 < time_left < self.config.refresh_threshold * 1000:
            refresh_logger.info(f"Token expires in {time_left // 1000}s, refreshing")
            self._refresh_in_flight = token
            self._refresh_task = self._scheduler.spawn(self._refresh(token), name="token-refresh")
