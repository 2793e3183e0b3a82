"""Two-step sign-in: credentials, then OTP, then SessionManager.login."""

from ..client import AuthClient
from ..errors import LoginError
from ..logging import get_logger
from ..session.manager import EMAIL_KEY, TOKEN_KEY, SessionManager
from ..session.storage import NamespacedStorage
from .sinks import DASHBOARD_ROUTE, ENTRY_ROUTE, LOGIN_ROUTE, OTP_ROUTE, Navigator

logger = get_logger("auth")


class LoginFlow:
    """Drives the credential and OTP exchange and hands the result to the manager."""

    def __init__(
        self,
        manager: SessionManager,
        client: AuthClient,
        persistent: NamespacedStorage,
        short_lived: NamespacedStorage,
        notifier,
        navigator: Navigator,
    ):
        self.manager = manager
        self.client = client
        self.persistent = persistent
        self.short_lived = short_lived
        self.notifier = notifier
        self.navigator = navigator

    async def start(self, email: str, password: str) -> bool:
        """Submit credentials. On success the OTP page takes over."""
        try:
            temp_token = await self.client.request_otp(email, password)
        except LoginError as e:
            self.notifier.notify("error", e.message)
            return False
        except Exception as e:
            logger.error(f"Login error: {type(e).__name__}: {e}")
            self.notifier.notify("error", "Encryption or login failed.")
            return False

        self.persistent.set(EMAIL_KEY, email)
        self.short_lived.set(TOKEN_KEY, temp_token)
        self.notifier.notify("success", "Successfully sent OTP to user")
        self.navigator.navigate(OTP_ROUTE)
        return True

    async def verify(self, otp: str) -> bool:
        """Verify the OTP and open the session."""
        email = self.persistent.get(EMAIL_KEY)
        temp_token = self.short_lived.get(TOKEN_KEY)
        if not email or not temp_token:
            self.notifier.notify("error", "No pending login. Please log in again.")
            self.navigator.navigate(LOGIN_ROUTE, replace=True)
            return False

        try:
            token, role = await self.client.verify_otp(temp_token, otp)
        except LoginError as e:
            self.notifier.notify("error", e.message)
            self.persistent.purge()
            self.short_lived.purge()
            if "otp has expired" in e.message.lower():
                self.notifier.notify("info", "Your OTP has expired. Please log in again.")
            self.navigator.navigate(ENTRY_ROUTE)
            return False
        except Exception as e:
            logger.error(f"OTP verification error: {type(e).__name__}: {e}")
            self.notifier.notify("error", "Verification failed. Please try again.")
            return False

        self.manager.login(token, role, email)
        self.notifier.notify("success", "OTP verified!")
        self.navigator.navigate(DASHBOARD_ROUTE)
        return True
