"""Error taxonomy for the authenticated request pipeline.

Every error raised by the client derives from ``AxmError`` so callers can
catch the whole family at once. Messages carry enough context (status code,
response body, resource) to diagnose a failure without retrying blindly.

This module also turns Pydantic validation failures into short, readable
summaries for ``DecodeError``.
"""

import json
from dataclasses import dataclass
from typing import Any

from pydantic import ValidationError

# Maximum length for response bodies and input values embedded in messages
MAX_BODY_EXCERPT_LENGTH = 500

# Maximum number of validation problems listed in a DecodeError message
MAX_REPORTED_VALIDATION_ERRORS = 5


def _excerpt(text: str | None, max_length: int = MAX_BODY_EXCERPT_LENGTH) -> str:
    """Return a whitespace-trimmed excerpt of a response body."""
    if not text:
        return "<empty body>"
    text = text.strip()
    if len(text) > max_length:
        return text[: max_length - 3] + "..."
    return text


class AxmError(Exception):
    """Base class for every error raised by the AxM client."""


class ConfigError(AxmError):
    """Raised when credentials or configuration cannot be loaded."""


class SigningError(AxmError):
    """Raised when the private key cannot be parsed or used to sign an assertion."""


class AuthenticationError(AxmError):
    """Raised when the OAuth2 token endpoint rejects the client assertion.

    Attributes:
        status: HTTP status returned by the token endpoint.
        body: Raw response body.

    """

    def __init__(self, status: int, body: str) -> None:
        """Initialize with the token endpoint's status and body."""
        self.status = status
        self.body = body
        super().__init__(f"Authentication failed: HTTP {status} from token endpoint: {_excerpt(body)}")


class HTTPError(AxmError):
    """Raised for a non-retryable API status, or a retryable one after the last attempt.

    Attributes:
        status: HTTP status code of the final response.
        body: Raw response body.
        method: HTTP method of the request.
        url: Absolute URL of the request.

    """

    def __init__(self, status: int, body: str, *, method: str, url: str) -> None:
        """Initialize with the failing response details."""
        self.status = status
        self.body = body
        self.method = method
        self.url = url
        super().__init__(f"HTTP {status} for {method} {url}: {_excerpt(body)}")


class TransientNetworkError(AxmError):
    """Raised when a transient transport failure persists after every retry.

    Attributes:
        method: HTTP method of the request.
        url: Absolute URL of the request.
        attempts: Number of attempts made.

    """

    def __init__(self, message: str, *, method: str, url: str, attempts: int) -> None:
        """Initialize with the request that kept failing."""
        self.method = method
        self.url = url
        self.attempts = attempts
        super().__init__(f"Network error for {method} {url} after {attempts} attempt(s): {message}")


class DecodeError(AxmError):
    """Raised when a response body does not match the expected shape.

    Attributes:
        resource: Description of the resource being decoded.
        details: Human-readable summary of the decoding problems.

    """

    def __init__(self, resource: str, details: str) -> None:
        """Initialize with the resource and a summary of what failed."""
        self.resource = resource
        self.details = details
        super().__init__(f"Could not decode response from {resource}: {details}")


class NotFoundError(AxmError):
    """Raised when a name cannot be resolved to an id.

    Attributes:
        name: The name that was looked up.
        known_names: Names that were available.

    """

    def __init__(self, kind: str, name: str, known_names: list[str]) -> None:
        """Initialize with the unresolved name and the known alternatives."""
        self.name = name
        self.known_names = known_names
        available = ", ".join(known_names) if known_names else "(none)"
        super().__init__(f"{kind} '{name}' not found. Available: {available}")


@dataclass(frozen=True, slots=True)
class ValidationProblem:
    """A single flattened Pydantic validation problem.

    Attributes:
        location: Dotted path to the offending field (e.g. ``data.0.attributes.serialNumber``).
        error_type: The Pydantic error type (e.g. ``missing``, ``string_type``).
        message: The Pydantic error message.
        input_value: The input that failed, truncated for display.

    """

    location: str
    error_type: str
    message: str
    input_value: str | None


def _format_input_value(value: Any, max_length: int = 80) -> str | None:
    """Format an input value compactly for an error summary."""
    if value is None:
        return None
    try:
        formatted = json.dumps(value)
    except (TypeError, ValueError):
        formatted = str(value)
    if len(formatted) > max_length:
        return formatted[: max_length - 3] + "..."
    return formatted


def parse_validation_error(exc: ValidationError) -> list[ValidationProblem]:
    """Flatten a Pydantic ValidationError into a list of problems."""
    problems: list[ValidationProblem] = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ())) or "<root>"
        input_value = None if err.get("type") == "missing" else _format_input_value(err.get("input"))
        problems.append(
            ValidationProblem(
                location=location,
                error_type=str(err.get("type", "unknown")),
                message=str(err.get("msg", "")),
                input_value=input_value,
            )
        )
    return problems


def summarize_validation_error(exc: ValidationError, limit: int = MAX_REPORTED_VALIDATION_ERRORS) -> str:
    """Return a one-line summary of a Pydantic ValidationError."""
    problems = parse_validation_error(exc)
    parts = []
    for problem in problems[:limit]:
        part = f"{problem.location}: {problem.message}"
        if problem.input_value is not None:
            part += f" (got {problem.input_value})"
        parts.append(part)
    if len(problems) > limit:
        parts.append(f"... and {len(problems) - limit} more")
    return "; ".join(parts)


__all__ = [
    "AuthenticationError",
    "AxmError",
    "ConfigError",
    "DecodeError",
    "HTTPError",
    "NotFoundError",
    "SigningError",
    "TransientNetworkError",
    "ValidationProblem",
    "parse_validation_error",
    "summarize_validation_error",
]
