"""Configuration management for the AxM MCP server and CLI.

This module defines the ``AxmConfig`` model and helpers to load named
credential profiles from a TOML file. Each profile holds the long-lived
client identity (client id, key id and private key) for one Apple School or
Business Manager organization.

Example ``config.toml``::

    default_profile = "business"

    [defaults]
    timeout_ms = 30000

    [business]
    client_id = "BUSINESSAPI.0000-0000"
    key_id = "${ABM_KEY_ID}"
    private_key_path = "~/.config/axm-mcp/business.pem"

When no TOML file exists, a single ``default`` profile is built from the
``AXM_*`` environment variables.
"""

from __future__ import annotations

import os
import re
import tomllib
from functools import lru_cache
from pathlib import Path
from typing import Self, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator

from .client.assertion import Credentials
from .client.endpoints import base_url_for_scope, scope_for_client_id
from .client.errors import ConfigError

# Load variables from a local .env file for development convenience
load_dotenv()

type TomlValue = str | int | float | bool | list[TomlValue] | dict[str, TomlValue]
type TomlTable = dict[str, TomlValue]

CONFIG_PATH = Path(os.getenv("AXM_CONFIG", "~/.config/axm-mcp/config.toml")).expanduser()
DEFAULT_PROFILE_NAME = "default"
RESERVED_KEYS = frozenset({"defaults", "default_profile"})

_ENV_PLACEHOLDER = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class AxmConfig(BaseModel):
    """Configuration values required to talk to one AxM organization."""

    profile_name: str = DEFAULT_PROFILE_NAME
    client_id: str
    key_id: str
    private_key: str | None = None
    private_key_path: Path | None = None
    verify_ssl: bool = True
    timeout_ms: int = Field(default=30000, ge=1000, le=600000)

    @model_validator(mode="after")
    def _validate_key_source(self) -> Self:
        if bool(self.private_key) == bool(self.private_key_path):
            msg = "Set exactly one of private_key or private_key_path."
            raise ValueError(msg)
        if not self.client_id.strip():
            msg = "client_id must not be empty."
            raise ValueError(msg)
        return self

    @property
    def scope(self) -> str:
        """Return the API scope derived from the client id prefix."""
        return scope_for_client_id(self.client_id)

    @property
    def base_url(self) -> str:
        """Return the API host for this profile's scope."""
        return base_url_for_scope(self.scope)

    def load_private_key_pem(self) -> str:
        """Return the private key PEM text, reading it from disk if configured by path."""
        if self.private_key:
            return self.private_key
        path = cast("Path", self.private_key_path).expanduser()
        try:
            return path.read_text(encoding="utf-8")
        except OSError as exc:
            msg = f"Could not read private key file {path}: {exc}"
            raise ConfigError(msg) from exc

    def credentials(self) -> Credentials:
        """Build the signing credentials for this profile."""
        return Credentials(
            client_id=self.client_id,
            key_id=self.key_id,
            private_key_pem=self.load_private_key_pem(),
            scope=self.scope,
        )

    @classmethod
    def from_env(cls) -> Self:
        """Build a configuration object from ``AXM_*`` environment variables."""
        client_id = os.getenv("AXM_CLIENT_ID")
        key_id = os.getenv("AXM_KEY_ID")
        if not (client_id and key_id):
            msg = f"No config file at {CONFIG_PATH} and AXM_CLIENT_ID / AXM_KEY_ID are not set."
            raise ConfigError(msg)
        raw_config: dict[str, object] = {
            "profile_name": DEFAULT_PROFILE_NAME,
            "client_id": client_id,
            "key_id": key_id,
            "private_key": os.getenv("AXM_PRIVATE_KEY"),
            "private_key_path": os.getenv("AXM_PRIVATE_KEY_PATH"),
        }
        if timeout_ms := os.getenv("AXM_TIMEOUT_MS"):
            raw_config["timeout_ms"] = timeout_ms
        if verify_ssl := os.getenv("AXM_VERIFY_SSL"):
            raw_config["verify_ssl"] = verify_ssl
        try:
            return cls.model_validate(raw_config)
        except ValidationError as exc:
            messages = "; ".join(err["msg"] for err in exc.errors())
            msg = f"Invalid AxM configuration: {messages}"
            raise ConfigError(msg) from exc

    @classmethod
    def resolve(cls, profile: str | None = None) -> AxmConfig:
        """Return the configuration for ``profile`` (case-insensitive).

        Falls back to ``AXM_PROFILE``, then the file's ``default_profile``, then
        the only profile if exactly one is configured.
        """
        configs, default_profile = _load_configs()
        wanted = profile or os.getenv("AXM_PROFILE") or default_profile
        if wanted is None:
            if len(configs) == 1:
                return next(iter(configs.values()))
            msg = f"Multiple profiles configured; choose one of: {', '.join(sorted(configs))}"
            raise ConfigError(msg)
        for name, config in configs.items():
            if name.lower() == wanted.lower():
                return config
        msg = f"Unknown profile '{wanted}'. Available profiles: {', '.join(sorted(configs))}"
        raise ConfigError(msg)

    @classmethod
    def available_profiles(cls) -> list[AxmConfig]:
        """Return every configured profile."""
        configs, _ = _load_configs()
        return list(configs.values())


def _expand_env_placeholders(value: str) -> str:
    """Replace ``${VAR}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        name = match.group(1)
        env_value = os.getenv(name)
        if env_value is None:
            msg = f"Missing environment variable '{name}' referenced in config."
            raise ConfigError(msg)
        return env_value

    return _ENV_PLACEHOLDER.sub(_replace, value)


def _expand_config_values(value: TomlValue) -> TomlValue:
    """Recursively expand environment placeholders in every string value."""
    if isinstance(value, str):
        return _expand_env_placeholders(value)
    if isinstance(value, list):
        return [_expand_config_values(item) for item in value]
    if isinstance(value, dict):
        return {key: _expand_config_values(item) for key, item in value.items()}
    return value


def _is_profile_table(table: TomlTable) -> bool:
    """Return True if a table holds profile settings rather than nested profiles."""
    return any(not isinstance(value, dict) for value in table.values())


def _collect_profile_tables(tables: TomlTable, prefix: str = "") -> dict[str, TomlTable]:
    """Flatten nested tables into dotted profile names."""
    profiles: dict[str, TomlTable] = {}
    for name, value in tables.items():
        if not isinstance(value, dict):
            continue
        full_name = f"{prefix}.{name}" if prefix else name
        if _is_profile_table(value):
            profiles[full_name] = value
        else:
            profiles.update(_collect_profile_tables(value, full_name))
    return profiles


def _load_config_data() -> TomlTable:
    """Read and expand the TOML configuration file."""
    if not CONFIG_PATH.exists():
        msg = f"Config file not found: {CONFIG_PATH}"
        raise ConfigError(msg)
    try:
        with CONFIG_PATH.open("rb") as handle:
            raw = tomllib.load(handle)
    except tomllib.TOMLDecodeError as exc:
        msg = f"Invalid TOML in {CONFIG_PATH}: {exc}"
        raise ConfigError(msg) from exc
    expanded = _expand_config_values(cast("TomlValue", raw))
    if not isinstance(expanded, dict):
        msg = "Config file must contain a top-level table."
        raise ConfigError(msg)
    return expanded


@lru_cache(maxsize=1)
def _load_configs() -> tuple[dict[str, AxmConfig], str | None]:
    """Parse every profile, returning them with the file's default profile name."""
    if not CONFIG_PATH.exists():
        config = AxmConfig.from_env()
        return {config.profile_name: config}, config.profile_name

    data = _load_config_data()
    defaults = data.get("defaults", {})
    if not isinstance(defaults, dict):
        msg = "The [defaults] section must be a table."
        raise ConfigError(msg)
    default_profile = data.get("default_profile")
    if default_profile is not None and not isinstance(default_profile, str):
        msg = "default_profile must be a string."
        raise ConfigError(msg)

    tables = {key: value for key, value in data.items() if key not in RESERVED_KEYS}
    profile_tables = _collect_profile_tables(tables)
    if not profile_tables:
        msg = f"No profile configurations found in {CONFIG_PATH}."
        raise ConfigError(msg)

    configs: dict[str, AxmConfig] = {}
    for name, table in profile_tables.items():
        try:
            configs[name] = AxmConfig.model_validate({**defaults, **table, "profile_name": name})
        except ValidationError as exc:
            messages = "; ".join(err["msg"] for err in exc.errors())
            msg = f"Invalid AxM configuration for profile '{name}': {messages}"
            raise ConfigError(msg) from exc
    return configs, default_profile


def clear_config_cache() -> None:
    """Forget parsed profiles so the next lookup re-reads the config file."""
    _load_configs.cache_clear()


__all__ = ["CONFIG_PATH", "AxmConfig", "clear_config_cache"]
