"""MCP tool: get_applecare."""

# pyright: reportUnusedFunction=false

from types import SimpleNamespace
from typing import Any

from fastmcp import Context, FastMCP

from ..client.dispatcher import RequestDispatcher
from .common import ToolConfig, run_tool


def register(app: FastMCP, *, deps: SimpleNamespace) -> None:
    """Register the get_applecare tool on the provided app instance.

    Args:
        app: The FastMCP application instance to add the tool to.
        deps: Dependencies namespace with resolve_config, create_dispatcher, store
              and get_apple_care_coverages.

    """

    @app.tool(
        name="get_applecare",
        description="Return AppleCare coverage records for the given device serial numbers.",
        annotations={
            "title": "Get AppleCare coverage",
            "readOnlyHint": True,
        },
    )
    async def get_applecare(ctx: Context, serials: list[str], profile: str | None = None) -> dict[str, Any]:
        async def operation(dispatcher: RequestDispatcher, _ctx: Context) -> object:
            return await deps.get_apple_care_coverages(dispatcher, serials)

        tool_config = ToolConfig(
            section_name="coverage",
            log_message=f"Looking up AppleCare coverage for {len(serials)} device(s).",
        )
        return await run_tool(ctx, deps, tool_config, operation, profile=profile)


__all__ = ["register"]
