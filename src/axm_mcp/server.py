"""Entry point for the AxM MCP server.

This module wires together the FastMCP app and registers tools, resources and
prompts. Implementation logic lives in focused modules under ``axm_mcp/``.

Registered tools:
- ``list_devices``: list organization devices with optional paging limits
- ``get_devices_info``: full device attributes with AppleCare and assigned server
- ``get_applecare``: AppleCare coverage for one or more devices
- ``list_mdm_servers``: list the organization's device management servers
- ``get_assigned_mdm``: the server a device is assigned to
- ``assign_devices`` / ``unassign_devices``: create device activities
- ``activity_status``: status of a device activity
"""

import logging
import os
import signal
import sys
from types import SimpleNamespace

from fastmcp import FastMCP

from . import prompts, resources
from .client.axm_client import create_dispatcher
from .config import AxmConfig
from .credential_store import CredentialStore
from .operations.activities import activity_status, assign_devices, unassign_devices
from .operations.applecare import get_apple_care_coverages
from .operations.devices import get_devices_info, list_devices
from .operations.mdm_servers import get_assigned_mdm, list_mdm_servers
from .tools.activities import register as register_activity_tools
from .tools.applecare import register as register_applecare_tools
from .tools.devices import register as register_device_tools
from .tools.mdm_servers import register as register_mdm_server_tools

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(name)s [%(levelname)s] %(message)s",
)
logger = logging.getLogger("axm_mcp.server")

app = FastMCP(
    name="axm-mcp",
    instructions=(
        "Expose tools that query and manage devices in Apple School Manager or Apple Business Manager. "
        "Every tool accepts an optional profile naming the configured organization."
    ),
)


def build_deps(store: CredentialStore | None = None) -> SimpleNamespace:
    """Return the dependency namespace shared by tools and resources."""
    return SimpleNamespace(
        resolve_config=AxmConfig.resolve,
        available_profiles=AxmConfig.available_profiles,
        create_dispatcher=create_dispatcher,
        store=store or CredentialStore(),
        list_devices=list_devices,
        get_devices_info=get_devices_info,
        get_apple_care_coverages=get_apple_care_coverages,
        list_mdm_servers=list_mdm_servers,
        get_assigned_mdm=get_assigned_mdm,
        assign_devices=assign_devices,
        unassign_devices=unassign_devices,
        activity_status=activity_status,
    )


def _register_capabilities() -> None:
    """Register tool, resource, and prompt modules with the app instance."""
    deps = build_deps()
    register_device_tools(app, deps=deps)
    register_applecare_tools(app, deps=deps)
    register_mdm_server_tools(app, deps=deps)
    register_activity_tools(app, deps=deps)
    resources.register(app, deps=deps)
    prompts.register(app)


# Register all capabilities with the app instance (after function is defined)
_register_capabilities()


def handle_interrupt(signum: int, frame: object) -> None:  # noqa: ARG001
    """Handle keyboard interrupt gracefully."""
    logger.info("Received interrupt signal, shutting down...")
    sys.exit(0)


def main() -> None:
    """Entry point for the axm-mcp console script."""
    signal.signal(signal.SIGINT, handle_interrupt)
    signal.signal(signal.SIGTERM, handle_interrupt)
    app.run()


__all__ = [
    "AxmConfig",
    "app",
    "build_deps",
    "create_dispatcher",
    "handle_interrupt",
    "main",
]


if __name__ == "__main__":
    main()
