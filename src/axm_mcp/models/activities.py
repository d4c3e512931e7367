"""Pydantic models for organization device activities (assign / unassign).

The creation request is a JSON:API envelope::

    {"data": {"type": "orgDeviceActivities",
              "attributes": {"activityType": "ASSIGN_DEVICES"},
              "relationships": {
                  "mdmServer": {"data": {"type": "mdmServers", "id": "..."}},
                  "devices": {"data": [{"type": "orgDevices", "id": "SERIAL"}]}}}}

It is built from typed models rather than nested dictionaries.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Literal

from pydantic import Field

from .common import ApiModel, ResourceIdentifier


class ActivityType(StrEnum):
    """Supported device activity types."""

    ASSIGN_DEVICES = "ASSIGN_DEVICES"
    UNASSIGN_DEVICES = "UNASSIGN_DEVICES"


DEFAULT_ACTIVITY_STATUS = "PENDING"


class MdmServerRelationship(ApiModel):
    """To-one relationship to an MDM server."""

    data: ResourceIdentifier


class DevicesRelationship(ApiModel):
    """To-many relationship to devices."""

    data: list[ResourceIdentifier]


class ActivityRelationships(ApiModel):
    """Relationships of a new device activity."""

    mdm_server: MdmServerRelationship
    devices: DevicesRelationship


class ActivityRequestAttributes(ApiModel):
    """Attributes of a new device activity."""

    activity_type: ActivityType


class ActivityRequestData(ApiModel):
    """Primary data of a new device activity."""

    type: Literal["orgDeviceActivities"] = "orgDeviceActivities"
    attributes: ActivityRequestAttributes
    relationships: ActivityRelationships


class CreateActivityRequest(ApiModel):
    """Body of ``POST /v1/orgDeviceActivities``."""

    data: ActivityRequestData

    @classmethod
    def build(cls, activity_type: ActivityType, serials: list[str], server_id: str) -> CreateActivityRequest:
        """Build the request envelope for the given devices and server."""
        return cls(
            data=ActivityRequestData(
                attributes=ActivityRequestAttributes(activity_type=activity_type),
                relationships=ActivityRelationships(
                    mdm_server=MdmServerRelationship(
                        data=ResourceIdentifier(type="mdmServers", id=server_id),
                    ),
                    devices=DevicesRelationship(
                        data=[ResourceIdentifier(type="orgDevices", id=serial) for serial in serials],
                    ),
                ),
            )
        )


class ActivityAttributes(ApiModel):
    """Attributes of a device activity as returned by the API."""

    status: str | None = None
    activity_type: str | None = None
    created_date_time: str | None = None
    updated_date_time: str | None = None


class ActivityData(ApiModel):
    """JSON:API resource object for a device activity."""

    id: str
    type: str | None = None
    attributes: ActivityAttributes = Field(default_factory=ActivityAttributes)


class ActivityResponse(ApiModel):
    """Response of ``POST /v1/orgDeviceActivities`` and ``GET /v1/orgDeviceActivities/{id}``."""

    data: ActivityData


class ActivityDetails(ApiModel):
    """A created activity, enriched with the target server's name and type."""

    id: str
    activity_type: str
    status: str
    created_date_time: str | None = None
    updated_date_time: str | None = None
    device_count: int
    device_serials: list[str]
    mdm_server_name: str | None = None
    mdm_server_type: str | None = None
    mdm_server_id: str


__all__ = [
    "DEFAULT_ACTIVITY_STATUS",
    "ActivityAttributes",
    "ActivityData",
    "ActivityDetails",
    "ActivityRelationships",
    "ActivityRequestAttributes",
    "ActivityRequestData",
    "ActivityResponse",
    "ActivityType",
    "CreateActivityRequest",
    "DevicesRelationship",
    "MdmServerRelationship",
]
