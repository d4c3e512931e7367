"""Shared fixtures for the unit tests.

Provides freshly generated P-256 keys, signing credentials and a factory for
request dispatchers whose HTTP traffic is served by ``httpx.MockTransport``.
"""

from collections.abc import Callable, Iterator
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

import axm_mcp.config as config_module
from axm_mcp.client.assertion import Credentials
from axm_mcp.client.dispatcher import RequestDispatcher
from axm_mcp.client.token_manager import TokenManager
from axm_mcp.models.token import Token

type Handler = Callable[[httpx.Request], httpx.Response]
type DispatcherFactory = Callable[..., RequestDispatcher]


def _pem(key: ec.EllipticCurvePrivateKey, private_format: serialization.PrivateFormat) -> str:
    return key.private_bytes(
        serialization.Encoding.PEM,
        private_format,
        serialization.NoEncryption(),
    ).decode("utf-8")


@pytest.fixture(autouse=True)
def _isolate_config(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep profile selection and parsed config from leaking between tests."""
    monkeypatch.delenv("AXM_PROFILE", raising=False)
    config_module.clear_config_cache()
    yield
    config_module.clear_config_cache()


@pytest.fixture(scope="session")
def ec_private_key() -> ec.EllipticCurvePrivateKey:
    """Return a P-256 private key shared by the whole test session."""
    return ec.generate_private_key(ec.SECP256R1())


@pytest.fixture
def pkcs8_pem(ec_private_key: ec.EllipticCurvePrivateKey) -> str:
    """Return the shared key as PKCS#8 PEM (BEGIN PRIVATE KEY)."""
    return _pem(ec_private_key, serialization.PrivateFormat.PKCS8)


@pytest.fixture
def sec1_pem(ec_private_key: ec.EllipticCurvePrivateKey) -> str:
    """Return the shared key as SEC1 PEM (BEGIN EC PRIVATE KEY)."""
    return _pem(ec_private_key, serialization.PrivateFormat.TraditionalOpenSSL)


@pytest.fixture
def credentials(pkcs8_pem: str) -> Credentials:
    """Return business-scope credentials signed with the shared key."""
    return Credentials(
        client_id="BUSINESSAPI.test-client",
        key_id="key-1",
        private_key_pem=pkcs8_pem,
        scope="business.api",
    )


@pytest.fixture
def fake_sleep() -> AsyncMock:
    """Return an awaitable stand-in for asyncio.sleep that records delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def dispatcher_factory(fake_sleep: AsyncMock) -> DispatcherFactory:
    """Return a factory building dispatchers backed by a mock transport.

    The token manager is a mock that always hands out a valid ``tok`` token.
    """

    def _factory(handler: Handler, *, scope: str = "business.api") -> RequestDispatcher:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        token_manager = MagicMock(spec=TokenManager)
        token_manager.get_token = AsyncMock(return_value=Token(access_token="tok", expires_in=3600))
        return RequestDispatcher(client, token_manager, scope=scope, sleep=fake_sleep)

    return _factory
