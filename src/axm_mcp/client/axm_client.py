"""AxM API client setup and helpers.

Provides the async context manager that wires a shared ``httpx.AsyncClient``,
a ``TokenManager`` and a ``RequestDispatcher`` for one configured profile.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx

from ..config import AxmConfig
from ..credential_store import CredentialStore
from .dispatcher import RequestDispatcher
from .token_manager import TokenManager


@asynccontextmanager
async def create_dispatcher(
    config: AxmConfig,
    *,
    store: CredentialStore | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncIterator[RequestDispatcher]:
    """Create a configured request dispatcher.

    A cached token is reused if one is still valid; otherwise a new token is
    fetched before the dispatcher is handed out, so credential problems
    surface immediately.

    Args:
        config: The profile configuration (credentials, TLS verification, timeouts).
        store: Token cache; defaults to a ``CredentialStore`` in the default cache directory.
        transport: Optional transport override for the HTTP client.

    Yields:
        Configured RequestDispatcher instance.

    """
    timeout = httpx.Timeout(config.timeout_ms / 1000)
    # System proxy settings are not honored
    async with httpx.AsyncClient(
        verify=config.verify_ssl,
        timeout=timeout,
        trust_env=False,
        transport=transport,
    ) as client:
        with TokenManager(
            config.credentials(),
            http_client=client,
            cache=store or CredentialStore(),
            profile=config.profile_name,
            timeout=config.timeout_ms / 1000,
        ) as token_manager:
            await token_manager.get_token()
            yield RequestDispatcher(client, token_manager, scope=config.scope)


__all__ = ["create_dispatcher"]
