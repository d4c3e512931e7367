"""MCP tools: list_mdm_servers and get_assigned_mdm."""

# pyright: reportUnusedFunction=false

from types import SimpleNamespace
from typing import Any

from fastmcp import Context, FastMCP

from ..client.dispatcher import RequestDispatcher
from .common import ToolConfig, run_tool


def register(app: FastMCP, *, deps: SimpleNamespace) -> None:
    """Register the MDM server tools on the provided app instance.

    Args:
        app: The FastMCP application instance to add the tools to.
        deps: Dependencies namespace with resolve_config, create_dispatcher, store,
              list_mdm_servers and get_assigned_mdm.

    """

    @app.tool(
        name="list_mdm_servers",
        description="Return JSON describing all device management (MDM) servers in the organization.",
        annotations={
            "title": "List MDM servers",
            "readOnlyHint": True,
        },
    )
    async def list_mdm_servers(ctx: Context, profile: str | None = None) -> dict[str, Any]:
        async def operation(dispatcher: RequestDispatcher, _ctx: Context) -> object:
            return await deps.list_mdm_servers(dispatcher)

        tool_config = ToolConfig(section_name="mdm_servers", log_message="Listing MDM servers.")
        return await run_tool(ctx, deps, tool_config, operation, profile=profile)

    @app.tool(
        name="get_assigned_mdm",
        description=(
            "Return the MDM server a device is assigned to, with the server's name and type. "
            "The data field is absent when the device is not assigned."
        ),
        annotations={
            "title": "Get assigned MDM server",
            "readOnlyHint": True,
        },
    )
    async def get_assigned_mdm(ctx: Context, device_id: str, profile: str | None = None) -> dict[str, Any]:
        async def operation(dispatcher: RequestDispatcher, _ctx: Context) -> object:
            return await deps.get_assigned_mdm(dispatcher, device_id)

        tool_config = ToolConfig(
            section_name="assigned_server",
            log_message=f"Looking up the assigned MDM server for {device_id}.",
        )
        return await run_tool(ctx, deps, tool_config, operation, profile=profile)


__all__ = ["register"]
