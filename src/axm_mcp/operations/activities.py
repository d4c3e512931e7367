"""Helpers for device assign/unassign activities."""

import logging

from ..client.dispatcher import RequestDispatcher
from ..client.endpoints import ORG_DEVICE_ACTIVITIES_PATH, org_device_activity_path
from ..client.errors import DecodeError
from ..models.activities import (
    DEFAULT_ACTIVITY_STATUS,
    ActivityDetails,
    ActivityResponse,
    ActivityType,
    CreateActivityRequest,
)
from .common import build_request
from .mdm_servers import find_server, get_mdm_server_id_by_name, list_mdm_servers

logger = logging.getLogger("axm_mcp.operations.activities")


async def create_device_activity(
    dispatcher: RequestDispatcher,
    *,
    activity_type: ActivityType,
    serials: list[str],
    server_id: str,
) -> ActivityDetails:
    """Create a device activity and return it enriched with the server's name and type.

    Args:
        dispatcher: The request dispatcher.
        activity_type: ``ASSIGN_DEVICES`` or ``UNASSIGN_DEVICES``.
        serials: Serial numbers of the devices to act on.
        server_id: Id of the target MDM server.

    Returns:
        The created activity with device and server details.

    Raises:
        ValueError: If no serial numbers are given.

    """
    if not serials:
        msg = "At least one serial number is required."
        raise ValueError(msg)

    body = CreateActivityRequest.build(activity_type, serials, server_id)
    response = await dispatcher.send(
        build_request(dispatcher, "POST", ORG_DEVICE_ACTIVITIES_PATH, ActivityResponse, body=body),
    )
    logger.info(
        "Created %s activity %s for %d device(s) on server %s.",
        activity_type.value,
        response.data.id,
        len(serials),
        server_id,
    )

    servers = await list_mdm_servers(dispatcher)
    server = find_server(servers, server_id)
    attrs = response.data.attributes
    return ActivityDetails(
        id=response.data.id,
        activity_type=attrs.activity_type or activity_type.value,
        status=attrs.status or DEFAULT_ACTIVITY_STATUS,
        created_date_time=attrs.created_date_time,
        updated_date_time=attrs.updated_date_time,
        device_count=len(serials),
        device_serials=list(serials),
        mdm_server_name=server.server_name if server else None,
        mdm_server_type=server.server_type if server else None,
        mdm_server_id=server_id,
    )


async def assign_devices(dispatcher: RequestDispatcher, *, serials: list[str], mdm_name: str) -> ActivityDetails:
    """Assign devices to the MDM server named ``mdm_name``."""
    server_id = await get_mdm_server_id_by_name(dispatcher, mdm_name)
    return await create_device_activity(
        dispatcher,
        activity_type=ActivityType.ASSIGN_DEVICES,
        serials=serials,
        server_id=server_id,
    )


async def unassign_devices(dispatcher: RequestDispatcher, *, serials: list[str], mdm_name: str) -> ActivityDetails:
    """Unassign devices from the MDM server named ``mdm_name``."""
    server_id = await get_mdm_server_id_by_name(dispatcher, mdm_name)
    return await create_device_activity(
        dispatcher,
        activity_type=ActivityType.UNASSIGN_DEVICES,
        serials=serials,
        server_id=server_id,
    )


async def activity_status(dispatcher: RequestDispatcher, activity_id: str) -> str:
    """Return the current status string of a device activity."""
    path = org_device_activity_path(activity_id)
    response = await dispatcher.send(build_request(dispatcher, "GET", path, ActivityResponse))
    status = response.data.attributes.status
    if status is None:
        raise DecodeError(f"GET {path}", "data.attributes.status: Field required")
    return status


__all__ = ["activity_status", "assign_devices", "create_device_activity", "unassign_devices"]
