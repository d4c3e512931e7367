"""Pydantic models for organization devices.

Some identifier fields (EID, IMEI, MEID and the MAC addresses) arrive either
as a single string or, for devices with several radios or SIMs, as a list of
strings. ``StringOrList`` models both shapes and exposes them uniformly
through ``first`` and ``all_values``.
"""

from pydantic import RootModel

from .applecare import AppleCareAttributes
from .common import ApiModel, ListMeta


class SingleValue(RootModel[str]):
    """An identifier reported as a single string."""

    @property
    def first(self) -> str | None:
        """Return the value."""
        return self.root

    @property
    def all_values(self) -> list[str]:
        """Return the value as a one-element list."""
        return [self.root]


class MultipleValues(RootModel[list[str]]):
    """An identifier reported as a list of strings."""

    @property
    def first(self) -> str | None:
        """Return the first value, if any."""
        return self.root[0] if self.root else None

    @property
    def all_values(self) -> list[str]:
        """Return every value."""
        return list(self.root)


StringOrList = SingleValue | MultipleValues


class DeviceAttributes(ApiModel):
    """Attributes of an organization device. Only the serial number is guaranteed."""

    serial_number: str

    color: str | None = None
    device_capacity: str | None = None
    device_model: str | None = None
    model: str | None = None

    eid: StringOrList | None = None
    imei: StringOrList | None = None
    meid: StringOrList | None = None
    wifi_mac_address: StringOrList | None = None
    bluetooth_mac_address: StringOrList | None = None
    built_in_ethernet_mac_address: StringOrList | None = None

    order_date_time: str | None = None
    order_number: str | None = None
    part_number: str | None = None
    purchase_source_type: str | None = None
    purchase_source_id: str | None = None

    product_family: str | None = None
    product_type: str | None = None

    status: str | None = None
    added_to_org_date_time: str | None = None
    updated_date_time: str | None = None

    device_management_service_id: str | None = None


class DeviceData(ApiModel):
    """JSON:API resource object wrapping device attributes."""

    id: str | None = None
    type: str | None = None
    attributes: DeviceAttributes


class OrgDevicesResponse(ListMeta):
    """One page of ``GET /v1/orgDevices``."""

    data: list[DeviceData] = []


class OrgDeviceResponse(ApiModel):
    """Response of ``GET /v1/orgDevices/{serial}``."""

    data: DeviceData


class AssignedMdmInfo(ApiModel):
    """Assigned MDM server summary attached to a device."""

    id: str
    server_name: str | None = None
    server_type: str | None = None


class DeviceInfo(DeviceAttributes):
    """Device attributes flattened at top level, plus optional enrichments.

    Either enrichment is left as None when it could not be retrieved.
    """

    apple_care_coverage: list[AppleCareAttributes] | None = None
    assigned_mdm: AssignedMdmInfo | None = None


class DeviceMdmInfo(ApiModel):
    """Serial number paired with its assigned MDM server only."""

    serial_number: str
    assigned_mdm: AssignedMdmInfo | None = None


__all__ = [
    "AssignedMdmInfo",
    "DeviceAttributes",
    "DeviceData",
    "DeviceInfo",
    "DeviceMdmInfo",
    "MultipleValues",
    "OrgDeviceResponse",
    "OrgDevicesResponse",
    "SingleValue",
    "StringOrList",
]
