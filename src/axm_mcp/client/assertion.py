"""ES256 client assertions for the OAuth2 client-credentials grant.

The token endpoint authenticates the client with a short-lived JWT signed by
the client's P-256 private key instead of a client secret. Keys are accepted
in either PKCS#8 (``BEGIN PRIVATE KEY``) or SEC1 (``BEGIN EC PRIVATE KEY``)
PEM form; ``cryptography`` parses both directly.
"""

import logging
import time
import uuid
from dataclasses import dataclass

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec

from .endpoints import TOKEN_AUDIENCE
from .errors import SigningError

logger = logging.getLogger("axm_mcp.client.assertion")

ASSERTION_LIFETIME_SECONDS = 1200


@dataclass(frozen=True, slots=True)
class Credentials:
    """Long-lived client identity used to sign assertions.

    Attributes:
        client_id: OAuth2 client id (``BUSINESSAPI.…`` or ``SCHOOLAPI.…``).
        key_id: Id of the signing key registered with the client.
        private_key_pem: PEM text of the P-256 private key.
        scope: API scope, ``business.api`` or ``school.api``.

    """

    client_id: str
    key_id: str
    private_key_pem: str
    scope: str

    def __repr__(self) -> str:
        """Hide the private key from reprs and logs."""
        return f"Credentials(client_id={self.client_id!r}, key_id={self.key_id!r}, scope={self.scope!r})"


def load_signing_key(pem: str) -> ec.EllipticCurvePrivateKey:
    """Parse a PKCS#8 or SEC1 PEM private key into a P-256 signing key.

    Raises:
        SigningError: If the PEM cannot be parsed, is encrypted, or is not a P-256 EC key.

    """
    try:
        key = serialization.load_pem_private_key(pem.strip().encode("utf-8"), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        msg = f"Could not parse private key PEM (expected PKCS#8 or SEC1 EC key): {exc}"
        raise SigningError(msg) from exc

    if not isinstance(key, ec.EllipticCurvePrivateKey):
        msg = f"Private key must be an elliptic-curve key, got {type(key).__name__}"
        raise SigningError(msg)
    if not isinstance(key.curve, ec.SECP256R1):
        msg = f"Private key must use the P-256 curve, got {key.curve.name}"
        raise SigningError(msg)
    return key


def build_client_assertion(
    credentials: Credentials,
    *,
    now: int | None = None,
    jti: str | None = None,
) -> str:
    """Build a compact ES256 JWT client assertion.

    Args:
        credentials: Client identity and signing key.
        now: Issue time as a Unix timestamp; defaults to the current time.
        jti: Unique token id; defaults to a fresh UUID.

    Returns:
        The three-segment ``header.claims.signature`` string.

    Raises:
        SigningError: If the key is unusable or signing fails.

    """
    key = load_signing_key(credentials.private_key_pem)
    issued_at = int(time.time()) if now is None else now
    claims = {
        "iss": credentials.client_id,
        "sub": credentials.client_id,
        "aud": TOKEN_AUDIENCE,
        "iat": issued_at,
        "exp": issued_at + ASSERTION_LIFETIME_SECONDS,
        "jti": jti or str(uuid.uuid4()),
    }
    headers = {"kid": credentials.key_id, "typ": "JWT"}
    try:
        assertion = jwt.encode(claims, key, algorithm="ES256", headers=headers)
    except (jwt.PyJWTError, ValueError, TypeError) as exc:
        msg = f"Could not sign client assertion: {exc}"
        raise SigningError(msg) from exc

    logger.debug("Built client assertion for %s (kid=%s).", credentials.client_id, credentials.key_id)
    return assertion


__all__ = [
    "ASSERTION_LIFETIME_SECONDS",
    "Credentials",
    "build_client_assertion",
    "load_signing_key",
]
