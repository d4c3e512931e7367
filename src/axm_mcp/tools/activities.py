"""MCP tools: assign_devices, unassign_devices and activity_status.

Assigning and unassigning create an ``orgDeviceActivities`` resource on the
API; the returned activity id can be polled with ``activity_status``.
"""

# pyright: reportUnusedFunction=false

from types import SimpleNamespace
from typing import Any

from fastmcp import Context, FastMCP

from ..client.dispatcher import RequestDispatcher
from .common import ToolConfig, run_tool


def register(app: FastMCP, *, deps: SimpleNamespace) -> None:
    """Register the device activity tools on the provided app instance.

    Args:
        app: The FastMCP application instance to add the tools to.
        deps: Dependencies namespace with resolve_config, create_dispatcher, store,
              assign_devices, unassign_devices and activity_status.

    """

    @app.tool(
        name="assign_devices",
        description="Assign devices (by serial number) to the MDM server with the given name.",
        annotations={
            "title": "Assign devices to an MDM server",
            "readOnlyHint": False,
            "destructiveHint": False,
        },
    )
    async def assign_devices(
        ctx: Context,
        serials: list[str],
        mdm_name: str,
        profile: str | None = None,
    ) -> dict[str, Any]:
        async def operation(dispatcher: RequestDispatcher, _ctx: Context) -> object:
            return await deps.assign_devices(dispatcher, serials=serials, mdm_name=mdm_name)

        tool_config = ToolConfig(
            section_name="activity",
            log_message=f"Assigning {len(serials)} device(s) to '{mdm_name}'.",
        )
        return await run_tool(ctx, deps, tool_config, operation, profile=profile)

    @app.tool(
        name="unassign_devices",
        description="Unassign devices (by serial number) from the MDM server with the given name.",
        annotations={
            "title": "Unassign devices from an MDM server",
            "readOnlyHint": False,
            "destructiveHint": True,
        },
    )
    async def unassign_devices(
        ctx: Context,
        serials: list[str],
        mdm_name: str,
        profile: str | None = None,
    ) -> dict[str, Any]:
        async def operation(dispatcher: RequestDispatcher, _ctx: Context) -> object:
            return await deps.unassign_devices(dispatcher, serials=serials, mdm_name=mdm_name)

        tool_config = ToolConfig(
            section_name="activity",
            log_message=f"Unassigning {len(serials)} device(s) from '{mdm_name}'.",
        )
        return await run_tool(ctx, deps, tool_config, operation, profile=profile)

    @app.tool(
        name="activity_status",
        description="Return the current status of a device assign/unassign activity.",
        annotations={
            "title": "Get activity status",
            "readOnlyHint": True,
        },
    )
    async def activity_status(ctx: Context, activity_id: str, profile: str | None = None) -> dict[str, Any]:
        async def operation(dispatcher: RequestDispatcher, _ctx: Context) -> object:
            return await deps.activity_status(dispatcher, activity_id)

        tool_config = ToolConfig(section_name="status", log_message=f"Checking activity {activity_id}.")
        return await run_tool(ctx, deps, tool_config, operation, profile=profile)


__all__ = ["register"]
