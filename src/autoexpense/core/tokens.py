"""Bearer tokens for the Google APIs (mailbox and spreadsheet)."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod

import httpx

from autoexpense.config import Settings
from autoexpense.core.exceptions import SessionExpiredError

logger = logging.getLogger(__name__)

# Refresh slightly before the provider-reported expiry.
EXPIRY_SKEW_SECONDS = 60


class TokenProvider(ABC):
    """Source of access tokens for a signed-in account."""

    @abstractmethod
    async def get_access_token(self) -> str:
        """Return a token believed to be valid."""

    @abstractmethod
    async def refresh(self) -> str:
        """Force a silent re-authentication and return the new token.

        Raises:
            SessionExpiredError: If the account can no longer be refreshed
        """


class OAuthRefreshTokenProvider(TokenProvider):
    """Exchanges a stored OAuth refresh token for short-lived access tokens."""

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        token_uri: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._refresh_token = refresh_token
        self._token_uri = token_uri
        self._http = http_client or httpx.AsyncClient(timeout=timeout)
        self._access_token: str | None = None
        self._expires_at = 0.0
        self._lock = asyncio.Lock()

    @classmethod
    def from_settings(
        cls, settings: Settings, http_client: httpx.AsyncClient | None = None
    ) -> "OAuthRefreshTokenProvider | None":
        """Build a provider from settings, or None when sign-in is not configured."""
        if not (
            settings.gmail_client_id
            and settings.gmail_client_secret
            and settings.gmail_refresh_token
        ):
            return None
        return cls(
            client_id=settings.gmail_client_id,
            client_secret=settings.gmail_client_secret,
            refresh_token=settings.gmail_refresh_token,
            token_uri=settings.gmail_token_uri,
            http_client=http_client,
            timeout=settings.http_timeout_seconds,
        )

    async def get_access_token(self) -> str:
        if self._access_token and time.monotonic() < self._expires_at:
            return self._access_token
        return await self.refresh()

    async def refresh(self) -> str:
        async with self._lock:
            response = await self._http.post(
                self._token_uri,
                data={
                    "grant_type": "refresh_token",
                    "client_id": self._client_id,
                    "client_secret": self._client_secret,
                    "refresh_token": self._refresh_token,
                },
            )
            if response.status_code in (400, 401):
                logger.warning(
                    "Token refresh rejected", extra={"status_code": response.status_code}
                )
                raise SessionExpiredError(details={"status_code": response.status_code})
            response.raise_for_status()

            payload = response.json()
            self._access_token = payload["access_token"]
            expires_in = int(payload.get("expires_in", 3600))
            self._expires_at = time.monotonic() + max(expires_in - EXPIRY_SKEW_SECONDS, 0)
            logger.info("Access token refreshed", extra={"expires_in": expires_in})
            return self._access_token

    async def aclose(self) -> None:
        await self._http.aclose()
