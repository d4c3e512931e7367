"""Unit tests for create_dispatcher wiring."""

from datetime import UTC, datetime
from pathlib import Path

import httpx
import pytest

from axm_mcp.client.axm_client import create_dispatcher
from axm_mcp.client.endpoints import TOKEN_URL
from axm_mcp.client.errors import AuthenticationError
from axm_mcp.config import AxmConfig
from axm_mcp.credential_store import CredentialStore
from axm_mcp.models.token import Token


class _Api:
    """Mock transport serving the token endpoint and one device listing."""

    def __init__(self, token_status: int = 200) -> None:
        self.token_status = token_status
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if str(request.url) == TOKEN_URL:
            if self.token_status != 200:
                return httpx.Response(self.token_status, json={"error": "invalid_client"})
            return httpx.Response(200, json={"access_token": "fresh", "token_type": "Bearer", "expires_in": 3600})
        return httpx.Response(200, json={"data": [], "meta": {"paging": {}}})


def _config(pem: str) -> AxmConfig:
    return AxmConfig(profile_name="acme", client_id="BUSINESSAPI.acme", key_id="kid", private_key=pem)


@pytest.mark.asyncio
async def test_dispatcher_is_primed_and_token_cached(tmp_path: Path, pkcs8_pem: str) -> None:
    """A token is fetched before the dispatcher is handed out and stored in the cache."""
    api = _Api()
    store = CredentialStore(tmp_path)

    async with create_dispatcher(_config(pkcs8_pem), store=store, transport=httpx.MockTransport(api)) as dispatcher:
        assert dispatcher.scope == "business.api"
        assert [str(request.url) for request in api.requests] == [TOKEN_URL]

    cached = store.load_cached_token("acme")
    assert cached is not None
    assert cached.access_token == "fresh"


@pytest.mark.asyncio
async def test_valid_cached_token_skips_token_endpoint(tmp_path: Path, pkcs8_pem: str) -> None:
    """A still-valid cached token is reused across dispatcher instances."""
    api = _Api()
    store = CredentialStore(tmp_path)
    store.cache_token(
        Token(access_token="from-disk", expires_in=3600, issued_at=datetime.now(UTC)),
        "acme",
        client_id="BUSINESSAPI.acme",
        scope="business.api",
    )

    async with create_dispatcher(_config(pkcs8_pem), store=store, transport=httpx.MockTransport(api)) as dispatcher:
        token = await dispatcher._token_manager.get_token()  # type: ignore[reportPrivateUsage]

    assert token.access_token == "from-disk"
    assert api.requests == []


@pytest.mark.asyncio
async def test_cached_token_for_previous_client_id_is_replaced(tmp_path: Path, pkcs8_pem: str) -> None:
    """Changing a profile's client id stops the old cached token from being used."""
    api = _Api()
    store = CredentialStore(tmp_path)
    store.cache_token(
        Token(access_token="stale", expires_in=3600, issued_at=datetime.now(UTC)),
        "acme",
        client_id="BUSINESSAPI.previous",
        scope="business.api",
    )

    async with create_dispatcher(_config(pkcs8_pem), store=store, transport=httpx.MockTransport(api)) as dispatcher:
        token = await dispatcher._token_manager.get_token()  # type: ignore[reportPrivateUsage]

    assert token.access_token == "fresh"
    assert [str(request.url) for request in api.requests] == [TOKEN_URL]
    assert store.load_cached_token("acme", client_id="BUSINESSAPI.acme", scope="business.api") == token


@pytest.mark.asyncio
async def test_rejected_credentials_fail_on_entry(tmp_path: Path, pkcs8_pem: str) -> None:
    """Authentication problems surface when the dispatcher is created."""
    api = _Api(token_status=400)

    with pytest.raises(AuthenticationError):
        async with create_dispatcher(
            _config(pkcs8_pem),
            store=CredentialStore(tmp_path),
            transport=httpx.MockTransport(api),
        ):
            pass
