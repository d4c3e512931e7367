"""Token management for the Apple School/Business Manager API."""

import asyncio
import logging
from types import TracebackType
from typing import Protocol, Self

import httpx
from pydantic import ValidationError

from ..models.token import Token
from .assertion import Credentials, build_client_assertion
from .endpoints import CLIENT_ASSERTION_TYPE, TOKEN_URL
from .errors import AuthenticationError, DecodeError, TransientNetworkError, summarize_validation_error

logger = logging.getLogger("axm_mcp.client.token_manager")

HTTP_OK = 200
DEFAULT_TOKEN_TIMEOUT_SECONDS = 30.0


class TokenCache(Protocol):
    """Persistence for tokens across process invocations."""

    def load_cached_token(self, profile: str, *, client_id: str, scope: str) -> Token | None:
        """Return a token previously cached for this profile and client, if any."""
        ...

    def cache_token(self, token: Token, profile: str, *, client_id: str, scope: str) -> None:
        """Persist a freshly issued token."""
        ...


class TokenManager:
    """Manage bearer tokens for the AxM API, refreshing when necessary.

    All reads and writes of the cached token happen under one lock, so
    concurrent callers never trigger duplicate token fetches.
    """

    def __init__(
        self,
        credentials: Credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
        cache: TokenCache | None = None,
        profile: str = "default",
        timeout: float = DEFAULT_TOKEN_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the token manager.

        Args:
            credentials: Client identity and signing key.
            http_client: Shared HTTP client; a short-lived one is created per fetch if omitted.
            cache: Optional token cache used to reuse tokens across processes.
            profile: Profile name the cached token is stored under.
            timeout: Token request timeout in seconds.

        """
        self._credentials = credentials
        self._http_client = http_client
        self._cache = cache
        self._profile = profile
        self._timeout = timeout
        self._token: Token | None = None
        self._cache_checked = False
        self._lock: asyncio.Lock | None = None
        self._lock_loop: asyncio.AbstractEventLoop | None = None

    def __enter__(self) -> Self:
        """Return the token manager for context manager usage."""
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Drop the in-memory token when leaving a context manager block."""
        self.close()

    def close(self) -> None:
        """Forget the in-memory token. The on-disk cache is left untouched."""
        self._token = None

    @property
    def profile(self) -> str:
        """Profile name tokens are cached under."""
        return self._profile

    @property
    def scope(self) -> str:
        """API scope requested for tokens."""
        return self._credentials.scope

    def _ensure_lock(self) -> asyncio.Lock:
        """Return an asyncio lock bound to the current event loop.

        Creates a new lock if one does not exist or if the event loop has changed.
        """
        loop = asyncio.get_running_loop()
        if self._lock is None or self._lock_loop is not loop:
            self._lock = asyncio.Lock()
            self._lock_loop = loop
        return self._lock

    def invalidate(self) -> None:
        """Drop the in-memory token so the next request fetches a new one."""
        self._token = None
        self._cache_checked = True

    async def get_token(self) -> Token:
        """Return a valid bearer token, refreshing it if needed."""
        lock = self._ensure_lock()
        async with lock:
            if self._token is not None and not self._token.is_expired:
                return self._token

            if not self._cache_checked:
                self._cache_checked = True
                cached = self._load_cached_token()
                if cached is not None and not cached.is_expired:
                    logger.debug("Reusing cached token for profile '%s'.", self._profile)
                    self._token = cached
                    return cached

            self._token = await self._fetch_and_cache_token()
            return self._token

    def _load_cached_token(self) -> Token | None:
        if self._cache is None:
            return None
        return self._cache.load_cached_token(
            self._profile,
            client_id=self._credentials.client_id,
            scope=self._credentials.scope,
        )

    async def _fetch_and_cache_token(self) -> Token:
        """Exchange a fresh client assertion for a token and cache it.

        Returns:
            The newly issued token.

        Raises:
            SigningError: If the assertion cannot be signed.
            AuthenticationError: If the token endpoint does not return HTTP 200.
            DecodeError: If the token response is malformed.
            TransientNetworkError: If the token endpoint cannot be reached.

        """
        assertion = build_client_assertion(self._credentials)
        try:
            response = await self._request_token(assertion)
        except httpx.TransportError as exc:
            logger.exception("Failed to reach the token endpoint")
            raise TransientNetworkError(str(exc), method="POST", url=TOKEN_URL, attempts=1) from exc

        if response.status_code != HTTP_OK:
            logger.error("Token endpoint returned HTTP %s: %s", response.status_code, response.text)
            raise AuthenticationError(response.status_code, response.text)

        try:
            token = Token.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodeError(f"POST {TOKEN_URL}", summarize_validation_error(exc)) from exc

        if self._cache is not None:
            self._cache.cache_token(
                token,
                self._profile,
                client_id=self._credentials.client_id,
                scope=self._credentials.scope,
            )

        logger.debug("Fetched new bearer token for profile '%s' (expires in %ss).", self._profile, token.expires_in)
        return token

    async def _request_token(self, assertion: str) -> httpx.Response:
        """POST the client-credentials form to the token endpoint.

        Args:
            assertion: Signed JWT client assertion.

        Returns:
            The raw token endpoint response.

        """
        form = {
            "grant_type": "client_credentials",
            "client_id": self._credentials.client_id,
            "client_assertion_type": CLIENT_ASSERTION_TYPE,
            "client_assertion": assertion,
            "scope": self._credentials.scope,
        }
        headers = {"Accept": "application/json"}
        if self._http_client is not None:
            return await self._http_client.post(TOKEN_URL, data=form, headers=headers, timeout=self._timeout)
        async with httpx.AsyncClient(timeout=self._timeout, trust_env=False) as http_client:
            return await http_client.post(TOKEN_URL, data=form, headers=headers)


__all__ = ["TokenCache", "TokenManager"]
