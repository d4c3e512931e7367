"""MCP prompts for AxM device management.

Exposes common device management workflows as prompts.
"""

# pyright: reportUnusedFunction=false

from fastmcp import FastMCP


def register(app: FastMCP) -> None:
    """Register prompts on the provided app instance."""

    @app.prompt(
        name="Audit Device Assignments",
        description="Create a prompt to audit which MDM server each device is assigned to.",
        tags={"audit", "devices"},
    )
    def audit_device_assignments(mdm_name: str | None = None) -> str:
        focus = f" Pay particular attention to devices assigned to '{mdm_name}'." if mdm_name else ""
        return (
            "Please audit the device assignments in this organization. "
            "Use the list_mdm_servers tool to get the servers and the list_devices tool to get the devices, "
            "then use get_devices_info with mdm_only set to find each device's assigned server. "
            "Report devices that are not assigned to any server and summarize the counts per server."
            f"{focus}"
        )

    @app.prompt(
        name="Review AppleCare Coverage",
        description="Review AppleCare coverage for a set of devices and flag gaps.",
        tags={"applecare", "devices"},
    )
    def review_applecare(serials: str) -> str:
        return (
            f"Please review AppleCare coverage for these serial numbers: {serials}. "
            "Use the get_applecare tool to get the coverage records. "
            "List devices with no coverage, coverage that has expired, and coverage ending within 90 days."
        )


__all__ = ["register"]
