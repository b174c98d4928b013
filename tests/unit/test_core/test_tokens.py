"""Unit tests for the OAuth refresh-token provider."""

import httpx
import pytest

from autoexpense.config import Settings
from autoexpense.core.exceptions import SessionExpiredError
from autoexpense.core.tokens import OAuthRefreshTokenProvider

TOKEN_URI = "https://oauth.test/token"


def _provider(handler) -> OAuthRefreshTokenProvider:
    return OAuthRefreshTokenProvider(
        client_id="cid",
        client_secret="secret",
        refresh_token="refresh",
        token_uri=TOKEN_URI,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
    )


async def test_access_token_is_cached():
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.content.decode())
        return httpx.Response(200, json={"access_token": f"tok-{len(calls)}", "expires_in": 3600})

    provider = _provider(handler)

    assert await provider.get_access_token() == "tok-1"
    assert await provider.get_access_token() == "tok-1"
    assert len(calls) == 1
    assert "grant_type=refresh_token" in calls[0]
    await provider.aclose()


async def test_refresh_forces_new_token():
    count = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal count
        count += 1
        return httpx.Response(200, json={"access_token": f"tok-{count}", "expires_in": 3600})

    provider = _provider(handler)
    await provider.get_access_token()

    assert await provider.refresh() == "tok-2"
    await provider.aclose()


@pytest.mark.parametrize("status_code", [400, 401])
async def test_revoked_refresh_token_raises(status_code):
    provider = _provider(lambda request: httpx.Response(status_code, json={"error": "invalid_grant"}))

    with pytest.raises(SessionExpiredError):
        await provider.get_access_token()
    await provider.aclose()


def test_from_settings_requires_credentials():
    assert OAuthRefreshTokenProvider.from_settings(Settings(_env_file=None)) is None

    provider = OAuthRefreshTokenProvider.from_settings(
        Settings(
            _env_file=None,
            gmail_client_id="cid",
            gmail_client_secret="secret",
            gmail_refresh_token="refresh",
        )
    )
    assert isinstance(provider, OAuthRefreshTokenProvider)
