"""Gmail REST client (search + message fetch)."""

import logging
from typing import Any

import httpx

from autoexpense.core.exceptions import SessionExpiredError
from autoexpense.core.tokens import TokenProvider

logger = logging.getLogger(__name__)


class GmailClient:
    """Minimal client for the two Gmail endpoints the retriever needs.

    A 401 raises SessionExpiredError so the caller can refresh the session;
    any other non-2xx raises httpx.HTTPStatusError.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        base_url: str,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = 15.0,
    ):
        self.token_provider = token_provider
        self._base_url = base_url.rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        token = await self.token_provider.get_access_token()
        response = await self._http.get(
            f"{self._base_url}{path}",
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        )
        if response.status_code == 401:
            raise SessionExpiredError(details={"api": "gmail", "path": path})
        response.raise_for_status()
        return response.json()

    async def search(self, query: str, max_results: int = 10) -> list[str]:
        """Return message ids matching a Gmail search query, newest first."""
        payload = await self._get(
            "/users/me/messages", params={"q": query, "maxResults": max_results}
        )
        return [m["id"] for m in payload.get("messages", []) if m.get("id")]

    async def get_message(self, message_id: str) -> dict[str, Any]:
        return await self._get(f"/users/me/messages/{message_id}", params={"format": "full"})

    async def aclose(self) -> None:
        await self._http.aclose()
