"""Authenticated request dispatch with bounded retry and backoff.

``RequestDispatcher.send`` takes a ``Request`` descriptor, attaches a bearer
token from the ``TokenManager``, and retries rate-limited (429), timed-out
(408), server-side (5xx) and transient transport failures up to three times.
Successful (200/201) bodies are decoded into the request's Pydantic model;
decode failures are never retried. A 401 drops the current token and the
request is sent once more with a freshly fetched one.

Backoff:
    - 429 with a numeric ``Retry-After`` header: ``min(retry_after, 60)``
    - otherwise: ``min(1.0 * 2**attempt * uniform(0.8, 1.2), 60)``
"""

import asyncio
import logging
import math
import random
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import Literal
from urllib.parse import urljoin

import httpx
from pydantic import BaseModel, ValidationError

from .endpoints import base_url_for_scope
from .errors import AxmError, DecodeError, HTTPError, TransientNetworkError, summarize_validation_error
from .token_manager import TokenManager

logger = logging.getLogger("axm_mcp.client.dispatcher")

HTTP_OK = 200
HTTP_CREATED = 201
HTTP_UNAUTHORIZED = 401
HTTP_REQUEST_TIMEOUT = 408
HTTP_TOO_MANY_REQUESTS = 429

SUCCESS_STATUSES = frozenset({HTTP_OK, HTTP_CREATED})

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_SECONDS = 1.0
DEFAULT_MAX_DELAY_SECONDS = 60.0
JITTER_RANGE = (0.8, 1.2)

# Transport failures worth retrying: timeouts, connect/read/write failures and dropped connections
TRANSIENT_TRANSPORT_ERRORS: tuple[type[httpx.TransportError], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)

type HttpMethod = Literal["GET", "POST", "PATCH", "DELETE"]
type SleepFunc = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class Request[ResponseT: BaseModel]:
    """Description of one API call and the model its response decodes into.

    Attributes:
        method: HTTP method.
        path: Absolute ``https://`` URL or a path relative to the scope's host.
        scope: API scope selecting the host.
        response_model: Pydantic model for the decoded response body.
        body: Optional request body, sent as JSON using field aliases.
        params: Optional query parameters.

    """

    method: HttpMethod
    path: str
    scope: str
    response_model: type[ResponseT]
    body: BaseModel | None = None
    params: Mapping[str, str | int] = field(default_factory=dict)


def is_retryable_status(status: int) -> bool:
    """Return True for 429, 408 and any 5xx status."""
    return status in (HTTP_TOO_MANY_REQUESTS, HTTP_REQUEST_TIMEOUT) or 500 <= status <= 599  # noqa: PLR2004


def is_transient_error(exc: BaseException) -> bool:
    """Return True for transport errors that are worth retrying."""
    return isinstance(exc, TRANSIENT_TRANSPORT_ERRORS)


def _parse_retry_after(value: str | None) -> float | None:
    """Return the numeric ``Retry-After`` value in seconds, or None."""
    if value is None:
        return None
    try:
        seconds = float(value.strip())
    except ValueError:
        return None
    if not math.isfinite(seconds) or seconds < 0:
        return None
    return seconds


def compute_backoff_delay(
    attempt: int,
    *,
    status: int | None = None,
    retry_after: str | None = None,
    base_delay: float = DEFAULT_BASE_DELAY_SECONDS,
    max_delay: float = DEFAULT_MAX_DELAY_SECONDS,
) -> float:
    """Return the delay in seconds before retrying after ``attempt`` (0-based).

    Args:
        attempt: Index of the attempt that just failed.
        status: HTTP status of the failed response, if there was one.
        retry_after: Raw ``Retry-After`` header value, honored only for 429.
        base_delay: Delay for the first retry before jitter.
        max_delay: Upper bound for any delay.

    """
    if status == HTTP_TOO_MANY_REQUESTS:
        seconds = _parse_retry_after(retry_after)
        if seconds is not None:
            return min(seconds, max_delay)

    jitter = random.uniform(*JITTER_RANGE)  # noqa: S311
    return min(base_delay * (2**attempt) * jitter, max_delay)


class RequestDispatcher:
    """Send authenticated API requests with retry and decode their responses."""

    def __init__(  # noqa: PLR0913
        self,
        http_client: httpx.AsyncClient,
        token_manager: TokenManager,
        *,
        scope: str,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay: float = DEFAULT_BASE_DELAY_SECONDS,
        max_delay: float = DEFAULT_MAX_DELAY_SECONDS,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            http_client: Shared async HTTP client.
            token_manager: Source of bearer tokens.
            scope: Default API scope for requests built by resource operations.
            max_retries: Retries after the first attempt.
            base_delay: Backoff base in seconds.
            max_delay: Backoff cap in seconds.
            sleep: Awaitable used for backoff waits.

        """
        self._http = http_client
        self._token_manager = token_manager
        self._scope = scope
        self._max_retries = max_retries
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._sleep = sleep

    @property
    def scope(self) -> str:
        """Default API scope."""
        return self._scope

    def build_url(self, request: Request[BaseModel]) -> str:
        """Return the absolute URL for ``request``."""
        if request.path.startswith("https://"):
            return request.path
        return urljoin(base_url_for_scope(request.scope), request.path)

    async def send[ResponseT: BaseModel](self, request: Request[ResponseT]) -> ResponseT:
        """Send ``request`` and decode the response into its model.

        Raises:
            HTTPError: On a non-retryable status, or a retryable one after the last attempt.
            TransientNetworkError: When transient transport errors persist after the last attempt.
            DecodeError: When the body does not match the response model.
            AuthenticationError: When a token refresh is rejected.

        """
        url = self.build_url(request)
        content = request.body.model_dump_json(by_alias=True, exclude_none=True) if request.body is not None else None
        response = await self._perform_with_retry(request, url, content)
        return self._decode(request, url, response)

    async def _build_headers(self, *, has_body: bool) -> dict[str, str]:
        token = await self._token_manager.get_token()
        headers = {
            "Authorization": token.authorization,
            "Accept": "application/json",
        }
        if has_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def _perform_with_retry(
        self,
        request: Request[BaseModel],
        url: str,
        content: str | None,
    ) -> httpx.Response:
        total_attempts = self._max_retries + 1
        attempt = 0
        reauthenticated = False
        while True:
            is_last = attempt == self._max_retries
            headers = await self._build_headers(has_body=content is not None)
            try:
                response = await self._http.request(
                    request.method,
                    url,
                    headers=headers,
                    content=content,
                    params=dict(request.params) or None,
                )
            except httpx.TransportError as exc:
                if not is_transient_error(exc):
                    msg = f"Request {request.method} {url} failed: {exc}"
                    raise AxmError(msg) from exc
                if is_last:
                    raise TransientNetworkError(
                        str(exc) or type(exc).__name__,
                        method=request.method,
                        url=url,
                        attempts=total_attempts,
                    ) from exc
                delay = compute_backoff_delay(attempt, base_delay=self._base_delay, max_delay=self._max_delay)
                logger.warning(
                    "Network error - retrying in %.1fs (attempt %d/%d): %s",
                    delay,
                    attempt + 1,
                    total_attempts,
                    exc,
                )
                await self._sleep(delay)
                attempt += 1
                continue

            if response.status_code in SUCCESS_STATUSES:
                return response

            if response.status_code == HTTP_UNAUTHORIZED and not reauthenticated:
                logger.info("HTTP 401 for %s %s - refreshing token and retrying", request.method, url)
                self._token_manager.invalidate()
                reauthenticated = True
                continue

            if is_retryable_status(response.status_code) and not is_last:
                delay = compute_backoff_delay(
                    attempt,
                    status=response.status_code,
                    retry_after=response.headers.get("Retry-After"),
                    base_delay=self._base_delay,
                    max_delay=self._max_delay,
                )
                logger.warning(
                    "HTTP %d - retrying in %.1fs (attempt %d/%d)",
                    response.status_code,
                    delay,
                    attempt + 1,
                    total_attempts,
                )
                await self._sleep(delay)
                attempt += 1
                continue

            logger.error("HTTP %d for %s %s: %s", response.status_code, request.method, url, response.text)
            raise HTTPError(response.status_code, response.text, method=request.method, url=url)

    def _decode[ResponseT: BaseModel](
        self,
        request: Request[ResponseT],
        url: str,
        response: httpx.Response,
    ) -> ResponseT:
        try:
            return request.response_model.model_validate_json(response.content)
        except ValidationError as exc:
            raise DecodeError(f"{request.method} {url}", summarize_validation_error(exc)) from exc


__all__ = [
    "Request",
    "RequestDispatcher",
    "compute_backoff_delay",
    "is_retryable_status",
    "is_transient_error",
]
