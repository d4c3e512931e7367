"""Unit tests for TokenManager in client.token_manager.

Covers fetching, in-memory and on-disk caching, refresh and error handling.
Token endpoint traffic is served by ``httpx.MockTransport``.
"""

import asyncio
import json
from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock
from urllib.parse import parse_qs

import httpx
import jwt
import pytest

from axm_mcp.client.assertion import Credentials
from axm_mcp.client.endpoints import CLIENT_ASSERTION_TYPE, TOKEN_URL
from axm_mcp.client.errors import AuthenticationError, DecodeError, SigningError, TransientNetworkError
from axm_mcp.client.token_manager import TokenManager
from axm_mcp.models.token import Token


class _TokenEndpoint:
    """Mock token endpoint handing out sequentially numbered tokens."""

    def __init__(self, status: int = 200, body: str | None = None) -> None:
        self.status = status
        self.body = body
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is not None or self.status != 200:
            return httpx.Response(self.status, text=self.body or "")
        payload = {
            "access_token": f"token-{len(self.requests)}",
            "token_type": "Bearer",
            "expires_in": 3600,
        }
        return httpx.Response(200, json=payload)


def _manager(credentials: Credentials, endpoint: _TokenEndpoint, cache: object | None = None) -> TokenManager:
    client = httpx.AsyncClient(transport=httpx.MockTransport(endpoint))
    return TokenManager(credentials, http_client=client, cache=cache, profile="business")  # type: ignore[arg-type]


def _expired_token() -> Token:
    return Token(access_token="old", expires_in=3600, issued_at=datetime.now(UTC) - timedelta(hours=2))


@pytest.mark.asyncio
async def test_fetches_token_with_client_credentials_form(credentials: Credentials) -> None:
    """The token request is a client-credentials form with a signed assertion."""
    endpoint = _TokenEndpoint()
    token = await _manager(credentials, endpoint).get_token()

    assert token.access_token == "token-1"
    request = endpoint.requests[0]
    assert request.method == "POST"
    assert str(request.url) == TOKEN_URL
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    form = {key: values[0] for key, values in parse_qs(request.content.decode()).items()}
    assert form["grant_type"] == "client_credentials"
    assert form["client_id"] == "BUSINESSAPI.test-client"
    assert form["client_assertion_type"] == CLIENT_ASSERTION_TYPE
    assert form["scope"] == "business.api"
    assert jwt.get_unverified_header(form["client_assertion"])["kid"] == "key-1"


@pytest.mark.asyncio
async def test_reuses_token_until_expiry(credentials: Credentials) -> None:
    """A valid in-memory token is returned without another request."""
    endpoint = _TokenEndpoint()
    manager = _manager(credentials, endpoint)

    first = await manager.get_token()
    second = await manager.get_token()

    assert first is second
    assert len(endpoint.requests) == 1


@pytest.mark.asyncio
async def test_refreshes_expired_in_memory_token(credentials: Credentials) -> None:
    """An expired in-memory token triggers a new fetch."""
    endpoint = _TokenEndpoint()
    manager = _manager(credentials, endpoint)
    manager._token = _expired_token()  # type: ignore[reportPrivateUsage]
    manager._cache_checked = True  # type: ignore[reportPrivateUsage]

    token = await manager.get_token()

    assert token.access_token == "token-1"
    assert len(endpoint.requests) == 1


@pytest.mark.asyncio
async def test_uses_valid_cached_token(credentials: Credentials) -> None:
    """A valid token from the cache avoids the token endpoint entirely."""
    endpoint = _TokenEndpoint()
    cache = MagicMock()
    cache.load_cached_token.return_value = Token(access_token="cached", expires_in=3600)

    token = await _manager(credentials, endpoint, cache).get_token()

    assert token.access_token == "cached"
    assert endpoint.requests == []
    cache.load_cached_token.assert_called_once_with(
        "business",
        client_id="BUSINESSAPI.test-client",
        scope="business.api",
    )
    cache.cache_token.assert_not_called()


@pytest.mark.asyncio
async def test_expired_cached_token_is_replaced_and_cached(credentials: Credentials) -> None:
    """An expired cached token is refreshed and the new token written back."""
    endpoint = _TokenEndpoint()
    cache = MagicMock()
    cache.load_cached_token.return_value = _expired_token()

    token = await _manager(credentials, endpoint, cache).get_token()

    assert token.access_token == "token-1"
    cache.cache_token.assert_called_once_with(
        token,
        "business",
        client_id="BUSINESSAPI.test-client",
        scope="business.api",
    )


@pytest.mark.asyncio
async def test_cache_is_consulted_only_once(credentials: Credentials) -> None:
    """After the first lookup, refreshes go straight to the token endpoint."""
    endpoint = _TokenEndpoint()
    cache = MagicMock()
    cache.load_cached_token.return_value = None
    manager = _manager(credentials, endpoint, cache)

    await manager.get_token()
    manager.invalidate()
    token = await manager.get_token()

    assert token.access_token == "token-2"
    cache.load_cached_token.assert_called_once()


@pytest.mark.asyncio
async def test_concurrent_callers_share_one_fetch(credentials: Credentials) -> None:
    """Concurrent get_token calls never trigger duplicate fetches."""
    endpoint = _TokenEndpoint()
    manager = _manager(credentials, endpoint)

    tokens = await asyncio.gather(*(manager.get_token() for _ in range(5)))

    assert {token.access_token for token in tokens} == {"token-1"}
    assert len(endpoint.requests) == 1


@pytest.mark.asyncio
async def test_rejected_assertion_raises_authentication_error(credentials: Credentials) -> None:
    """A non-200 token response raises AuthenticationError with status and body."""
    endpoint = _TokenEndpoint(status=401, body=json.dumps({"error": "invalid_client"}))

    with pytest.raises(AuthenticationError, match="HTTP 401") as exc_info:
        await _manager(credentials, endpoint).get_token()

    assert exc_info.value.status == 401
    assert "invalid_client" in exc_info.value.body


@pytest.mark.asyncio
async def test_malformed_token_response_raises_decode_error(credentials: Credentials) -> None:
    """A 200 response without an access token is a DecodeError."""
    endpoint = _TokenEndpoint(body='{"token_type": "Bearer"}')

    with pytest.raises(DecodeError, match="access_token"):
        await _manager(credentials, endpoint).get_token()


@pytest.mark.asyncio
async def test_unreachable_token_endpoint_raises_transient_error(credentials: Credentials) -> None:
    """Transport failures reaching the token endpoint surface as TransientNetworkError."""

    def _fail(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = httpx.AsyncClient(transport=httpx.MockTransport(_fail))
    manager = TokenManager(credentials, http_client=client)

    with pytest.raises(TransientNetworkError, match="connection refused"):
        await manager.get_token()


@pytest.mark.asyncio
async def test_bad_key_raises_signing_error() -> None:
    """An unusable private key fails before any request is made."""
    endpoint = _TokenEndpoint()
    bad = Credentials(client_id="BUSINESSAPI.x", key_id="k", private_key_pem="not a pem", scope="business.api")

    with pytest.raises(SigningError):
        await _manager(bad, endpoint).get_token()

    assert endpoint.requests == []


@pytest.mark.asyncio
async def test_context_manager_drops_token(credentials: Credentials) -> None:
    """Leaving the context manager forgets the in-memory token."""
    endpoint = _TokenEndpoint()
    with _manager(credentials, endpoint) as manager:
        await manager.get_token()
        assert manager._token is not None  # type: ignore[reportPrivateUsage]
    assert manager._token is None  # type: ignore[reportPrivateUsage]


def test_exposes_profile_and_scope(credentials: Credentials) -> None:
    """Profile and scope are available for callers building requests."""
    manager = TokenManager(credentials, profile="school")
    assert manager.profile == "school"
    assert manager.scope == "business.api"
