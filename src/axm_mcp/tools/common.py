"""Common utilities for MCP tool registration.

Provides a generic runner so every tool resolves its profile, opens a
dispatcher, calls one operation and shapes the response the same way.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any

from fastmcp import Context
from fastmcp.exceptions import ToolError

from ..client.dispatcher import RequestDispatcher
from ..client.errors import AxmError
from ..config import AxmConfig
from ..operations.common import to_jsonable

type OperationFunc = Callable[[RequestDispatcher, Context], Awaitable[Any]]


@dataclass(frozen=True, slots=True)
class ToolConfig:
    """Configuration for a generic AxM tool."""

    section_name: str
    log_message: str


def build_tool_response(
    config: AxmConfig,
    section_name: str,
    data: object,
) -> dict[str, Any]:
    """Build a standard tool response with metadata.

    Args:
        config: The resolved profile configuration.
        section_name: Name of the data section (e.g., "devices", "mdm_servers").
        data: Collected data to include in the response.

    Returns:
        Standard response dictionary with metadata.

    """
    return {
        "retrieved_at": datetime.now(UTC).isoformat(),
        "profile": config.profile_name,
        "scope": config.scope,
        section_name: to_jsonable(data),
    }


async def run_tool(
    ctx: Context,
    deps: SimpleNamespace,
    tool_config: ToolConfig,
    operation: OperationFunc,
    *,
    profile: str | None = None,
) -> dict[str, Any]:
    """Generic implementation for AxM tools.

    Args:
        ctx: FastMCP context.
        deps: Dependencies namespace with resolve_config, create_dispatcher and store.
        tool_config: Configuration for the tool.
        operation: Coroutine function receiving the dispatcher and context.
        profile: Optional credential profile name.

    Returns:
        Tool response dictionary.

    Raises:
        ToolError: When the operation fails; the message carries the underlying error.

    """
    await ctx.info(tool_config.log_message)
    try:
        config: AxmConfig = deps.resolve_config(profile)
        async with deps.create_dispatcher(config, store=deps.store) as dispatcher:
            result = await operation(dispatcher, ctx)
    except (AxmError, ValueError) as exc:
        await ctx.error(str(exc))
        raise ToolError(str(exc)) from exc
    return build_tool_response(config, tool_config.section_name, result)


__all__ = [
    "OperationFunc",
    "ToolConfig",
    "build_tool_response",
    "run_tool",
]
