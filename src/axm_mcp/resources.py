"""MCP resources for AxM configuration.

Exposes the configured credential profiles as a read-only resource. Private
key material is never included.
"""

# pyright: reportUnusedFunction=false

from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any

from fastmcp import FastMCP

from .client.errors import AxmError
from .config import AxmConfig


def describe_profile(config: AxmConfig) -> dict[str, Any]:
    """Return the non-secret description of a profile."""
    return {
        "name": config.profile_name,
        "client_id": config.client_id,
        "key_id": config.key_id,
        "scope": config.scope,
        "base_url": config.base_url,
        "key_source": "path" if config.private_key_path else "inline",
        "verify_ssl": config.verify_ssl,
        "timeout_ms": config.timeout_ms,
    }


def register(app: FastMCP, *, deps: SimpleNamespace) -> None:
    """Register resources on the provided app instance.

    Args:
        app: The FastMCP application instance to add resources to.
        deps: Dependencies namespace containing available_profiles and store.

    """

    @app.resource(
        uri="axm://profiles",
        name="AxM Profiles",
        description="Return a JSON list of the configured organization profiles (without keys).",
        mime_type="application/json",
        tags={"profiles", "config"},
    )
    async def get_profiles() -> dict[str, Any]:
        timestamp = datetime.now(UTC).isoformat()
        try:
            profiles = [describe_profile(config) for config in deps.available_profiles()]
        except AxmError as exc:
            return {
                "retrieved_at": timestamp,
                "status": "error",
                "error": str(exc),
                "error_type": exc.__class__.__name__,
            }
        return {
            "retrieved_at": timestamp,
            "token_cache_dir": str(deps.store.cache_dir),
            "profiles": profiles,
        }


__all__ = ["describe_profile", "register"]
