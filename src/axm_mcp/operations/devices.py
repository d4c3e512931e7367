"""Helpers for listing and looking up organization devices."""

import logging

from ..client.dispatcher import RequestDispatcher
from ..client.endpoints import ORG_DEVICES_PATH, org_device_path
from ..client.errors import AxmError
from ..client.paginator import DEFAULT_PAGE_DELAY_SECONDS, Page, ProgressCallback, paginate
from ..models.applecare import AppleCareAttributes
from ..models.devices import (
    AssignedMdmInfo,
    DeviceAttributes,
    DeviceInfo,
    DeviceMdmInfo,
    OrgDeviceResponse,
    OrgDevicesResponse,
)
from .applecare import get_apple_care_coverage
from .common import build_request
from .mdm_servers import get_assigned_mdm

logger = logging.getLogger("axm_mcp.operations.devices")

MAX_DEVICES_PER_PAGE = 1000


async def list_devices(
    dispatcher: RequestDispatcher,
    *,
    devices_per_page: int | None = None,
    total_limit: int | None = None,
    on_page: ProgressCallback | None = None,
    page_delay: float = DEFAULT_PAGE_DELAY_SECONDS,
) -> list[DeviceAttributes]:
    """Return device attributes across all pages, in server order.

    Args:
        dispatcher: The request dispatcher.
        devices_per_page: Page size hint sent as the ``limit`` query parameter.
        total_limit: Maximum number of devices to return.
        on_page: Optional async progress callback.
        page_delay: Seconds to wait between page requests.

    Raises:
        ValueError: If ``devices_per_page`` is outside 1..1000 or ``total_limit`` is not positive.

    """
    if devices_per_page is not None and not 1 <= devices_per_page <= MAX_DEVICES_PER_PAGE:
        msg = f"devices_per_page must be between 1 and {MAX_DEVICES_PER_PAGE}"
        raise ValueError(msg)

    async def fetch_page(cursor: str | None) -> Page[DeviceAttributes]:
        params: dict[str, str | int] = {}
        if cursor:
            params["cursor"] = cursor
        if devices_per_page is not None:
            params["limit"] = devices_per_page
        response = await dispatcher.send(
            build_request(dispatcher, "GET", ORG_DEVICES_PATH, OrgDevicesResponse, params=params),
        )
        return Page(
            items=[item.attributes for item in response.data],
            next_cursor=response.next_cursor,
        )

    return await paginate(fetch_page, total_limit=total_limit, on_page=on_page, page_delay=page_delay)


async def get_device_attributes(dispatcher: RequestDispatcher, serial: str) -> DeviceAttributes:
    """Return the full attributes of a single device."""
    response = await dispatcher.send(
        build_request(dispatcher, "GET", org_device_path(serial), OrgDeviceResponse),
    )
    return response.data.attributes


async def _lookup_apple_care(dispatcher: RequestDispatcher, serial: str) -> list[AppleCareAttributes] | None:
    """Return coverage records, or None if there are none or the lookup failed."""
    try:
        coverage = await get_apple_care_coverage(dispatcher, serial)
    except AxmError as exc:
        logger.debug("No AppleCare coverage for %s: %s", serial, exc)
        return None
    return coverage.coverages or None


async def _lookup_assigned_mdm(dispatcher: RequestDispatcher, serial: str) -> AssignedMdmInfo | None:
    """Return the assigned server summary, or None if unassigned or the lookup failed."""
    try:
        assigned = await get_assigned_mdm(dispatcher, serial)
    except AxmError as exc:
        logger.debug("No assigned MDM server for %s: %s", serial, exc)
        return None
    if assigned.data is None:
        return None
    return AssignedMdmInfo(
        id=assigned.data.id,
        server_name=assigned.data.server_name,
        server_type=assigned.data.server_type,
    )


async def get_device(dispatcher: RequestDispatcher, serial: str) -> DeviceInfo:
    """Return a device's attributes enriched with AppleCare coverage and assigned server.

    Each enrichment is attempted independently; a failure in either one is
    logged and the corresponding field is left out instead of raising.
    """
    attributes = await get_device_attributes(dispatcher, serial)
    coverage = await _lookup_apple_care(dispatcher, serial)
    assigned_mdm = await _lookup_assigned_mdm(dispatcher, serial)
    return DeviceInfo(
        **attributes.model_dump(),
        apple_care_coverage=coverage,
        assigned_mdm=assigned_mdm,
    )


async def get_devices_info(
    dispatcher: RequestDispatcher,
    serials: list[str],
    *,
    mdm_only: bool = False,
) -> list[DeviceInfo] | list[DeviceMdmInfo]:
    """Return device info for several serials, one device after another.

    With ``mdm_only`` only the assigned server is looked up for each serial.
    """
    if mdm_only:
        return [
            DeviceMdmInfo(serial_number=serial, assigned_mdm=await _lookup_assigned_mdm(dispatcher, serial))
            for serial in serials
        ]
    return [await get_device(dispatcher, serial) for serial in serials]


__all__ = [
    "MAX_DEVICES_PER_PAGE",
    "get_device",
    "get_device_attributes",
    "get_devices_info",
    "list_devices",
]
