"""HTTP client for the dashboard's authentication endpoints."""

import logging
from typing import Optional

import httpx

from .config import SessionConfig
from .crypto import encrypt_password
from .errors import LoginError, RefreshError

logger = logging.getLogger("bulkadmin.auth.client")


class AuthClient:
    """Async HTTP client for login, OTP verification and token refresh."""

    def __init__(
        self,
        config: SessionConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._client = httpx.AsyncClient(timeout=config.http_timeout, transport=transport)

    async def close(self):
        await self._client.aclose()

    async def refresh_token(self, token: str) -> str:
        """Exchange the current bearer token for a new one. No retries."""
        resp = await self._client.post(
            self.config.endpoint(self.config.refresh_path),
            headers={"Authorization": f"Bearer {token}"},
        )
        resp.raise_for_status()
        data = resp.json()
        new_token = data.get("token") if isinstance(data, dict) else None
        if not isinstance(new_token, str) or not new_token:
            raise RefreshError("Invalid token response")
        return new_token

    async def fetch_public_key(self) -> str:
        resp = await self._client.get(self.config.endpoint(self.config.public_key_path))
        resp.raise_for_status()
        return resp.text

    async def request_otp(self, email: str, password: str) -> str:
        """Submit credentials; the server mails an OTP and returns a temporary token."""
        pem = await self.fetch_public_key()
        encrypted = encrypt_password(pem, password)

        resp = await self._client.post(
            self.config.endpoint(self.config.login_path),
            json={"email": email, "password": encrypted},
        )
        resp.raise_for_status()
        data = resp.json()

        if not (data.get("status") or data.get("success") == "success"):
            raise LoginError(data.get("message") or "Invalid credentials.")
        temp_token = data.get("token")
        if not temp_token:
            raise LoginError("Login response did not include a token.")
        logger.info(f"OTP requested for {email}")
        return temp_token

    async def verify_otp(self, temp_token: str, otp: str) -> tuple[str, str]:
        """Verify the OTP. Returns (session token, role)."""
        resp = await self._client.post(
            self.config.endpoint(self.config.otp_path),
            json={"otp": otp},
            headers={"Authorization": f"Bearer {temp_token}"},
        )
        resp.raise_for_status()
        data = resp.json()

        if not data.get("status"):
            raise LoginError(data.get("message") or "Invalid OTP.")
        token = data.get("token")
        if not token:
            raise LoginError("OTP response did not include a token.")
        return token, str(data.get("role") or "")
