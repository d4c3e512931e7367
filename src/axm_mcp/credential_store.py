"""Credential store: profile credentials plus a per-profile token cache.

Credentials come from ``AxmConfig`` profiles. Bearer tokens are cached as one
JSON file per profile so they can be reused across process invocations until
they expire. Each entry records the client id and scope it was issued for;
a token cached for a different identity, or a missing, unreadable or
corrupt cache file, is a cache miss.
"""

import hashlib
import logging
import os
import re
from pathlib import Path

from pydantic import BaseModel, ValidationError

from .client.assertion import Credentials
from .config import AxmConfig
from .models.token import Token

logger = logging.getLogger("axm_mcp.credential_store")

DEFAULT_CACHE_DIR = "~/.cache/axm-mcp"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]")
_PROFILE_DIGEST_LENGTH = 12


def default_cache_dir() -> Path:
    """Return the token cache directory from ``AXM_CACHE_DIR`` or the default location."""
    return Path(os.getenv("AXM_CACHE_DIR", DEFAULT_CACHE_DIR)).expanduser()


class CachedToken(BaseModel):
    """On-disk cache entry: a token and the identity it was issued for."""

    client_id: str | None = None
    scope: str | None = None
    token: Token

    def matches(self, client_id: str | None, scope: str | None) -> bool:
        """Return True if the entry was issued for ``client_id`` and ``scope``."""
        return (client_id is None or client_id == self.client_id) and (scope is None or scope == self.scope)


class CredentialStore:
    """Load profile credentials and cache bearer tokens on disk."""

    def __init__(self, cache_dir: Path | None = None) -> None:
        """Initialize the store.

        Args:
            cache_dir: Directory for cached tokens; defaults to ``default_cache_dir()``.

        """
        self._cache_dir = cache_dir or default_cache_dir()

    @property
    def cache_dir(self) -> Path:
        """Directory holding cached tokens."""
        return self._cache_dir

    def load(self, profile: str | None = None) -> Credentials:
        """Return the signing credentials for ``profile``."""
        return AxmConfig.resolve(profile).credentials()

    def _token_path(self, profile: str) -> Path:
        # The digest keeps names that sanitize alike ("a b", "a_b") in separate files
        key = profile.lower()
        safe_name = _UNSAFE_FILENAME_CHARS.sub("_", key) or "default"
        digest = hashlib.sha256(key.encode("utf-8")).hexdigest()[:_PROFILE_DIGEST_LENGTH]
        return self._cache_dir / f"{safe_name}-{digest}.token.json"

    def load_cached_token(
        self,
        profile: str,
        *,
        client_id: str | None = None,
        scope: str | None = None,
    ) -> Token | None:
        """Return the cached token for ``profile``, or None if there is none usable.

        When ``client_id`` or ``scope`` is given, a token cached for a different
        value is ignored.
        """
        path = self._token_path(profile)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.warning("Could not read cached token %s: %s", path, exc)
            return None
        try:
            entry = CachedToken.model_validate_json(raw)
        except ValidationError:
            logger.warning("Ignoring corrupt cached token at %s", path)
            return None
        if not entry.matches(client_id, scope):
            logger.info("Ignoring cached token for profile '%s' issued to a different client.", profile)
            return None
        return entry.token

    def cache_token(
        self,
        token: Token,
        profile: str,
        *,
        client_id: str | None = None,
        scope: str | None = None,
    ) -> None:
        """Persist ``token`` for ``profile`` with owner-only permissions.

        Failing to write the cache is logged and otherwise ignored; the token
        is still valid for the current process.
        """
        path = self._token_path(profile)
        entry = CachedToken(client_id=client_id, scope=scope, token=token)
        try:
            self._cache_dir.mkdir(parents=True, exist_ok=True, mode=0o700)
            fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(entry.model_dump_json())
        except OSError as exc:
            logger.warning("Could not cache token for profile '%s' at %s: %s", profile, path, exc)
            return
        logger.debug("Cached token for profile '%s' at %s", profile, path)

    def clear_cached_token(self, profile: str) -> bool:
        """Delete the cached token for ``profile``. Returns True if one existed."""
        try:
            self._token_path(profile).unlink()
        except FileNotFoundError:
            return False
        return True


__all__ = ["DEFAULT_CACHE_DIR", "CachedToken", "CredentialStore", "default_cache_dir"]
