"""MCP tools: list_devices and get_devices_info.

``list_devices`` pages through every organization device, reporting page
progress through the tool context. ``get_devices_info`` returns full device
attributes enriched with AppleCare coverage and the assigned MDM server.
"""

# pyright: reportUnusedFunction=false

from types import SimpleNamespace
from typing import Any

from fastmcp import Context, FastMCP

from ..client.dispatcher import RequestDispatcher
from ..client.paginator import PageProgress
from .common import ToolConfig, run_tool


def register(app: FastMCP, *, deps: SimpleNamespace) -> None:
    """Register the device tools on the provided app instance.

    Args:
        app: The FastMCP application instance to add the tools to.
        deps: Dependencies namespace with resolve_config, create_dispatcher, store,
              list_devices and get_devices_info.

    """

    @app.tool(
        name="list_devices",
        description=(
            "Return JSON describing the devices in the Apple School or Business Manager organization. "
            "Optionally set devices_per_page (1-1000) and total_limit to cap the number of devices."
        ),
        annotations={
            "title": "List organization devices",
            "readOnlyHint": True,
        },
    )
    async def list_devices(
        ctx: Context,
        devices_per_page: int | None = None,
        total_limit: int | None = None,
        profile: str | None = None,
    ) -> dict[str, Any]:
        async def report(progress: PageProgress) -> None:
            await ctx.info(progress.describe())

        async def operation(dispatcher: RequestDispatcher, _ctx: Context) -> object:
            return await deps.list_devices(
                dispatcher,
                devices_per_page=devices_per_page,
                total_limit=total_limit,
                on_page=report,
            )

        tool_config = ToolConfig(section_name="devices", log_message="Listing organization devices.")
        return await run_tool(ctx, deps, tool_config, operation, profile=profile)

    @app.tool(
        name="get_devices_info",
        description=(
            "Return full attributes for the given device serial numbers, including AppleCare coverage "
            "and the assigned MDM server when available. Set mdm_only to return only the assigned server."
        ),
        annotations={
            "title": "Get device details",
            "readOnlyHint": True,
        },
    )
    async def get_devices_info(
        ctx: Context,
        serials: list[str],
        mdm_only: bool = False,
        profile: str | None = None,
    ) -> dict[str, Any]:
        async def operation(dispatcher: RequestDispatcher, _ctx: Context) -> object:
            return await deps.get_devices_info(dispatcher, serials, mdm_only=mdm_only)

        tool_config = ToolConfig(
            section_name="devices",
            log_message=f"Looking up {len(serials)} device(s).",
        )
        return await run_tool(ctx, deps, tool_config, operation, profile=profile)


__all__ = ["register"]
