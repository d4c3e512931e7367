"""Pydantic models for device management (MDM) servers and assignments."""

from __future__ import annotations

from pydantic import Field

from .common import ApiModel, Links, ListMeta


class MdmServerAttributes(ApiModel):
    """Attributes of an MDM server as returned by the API."""

    server_name: str | None = None
    server_type: str | None = None
    created_date_time: str | None = None
    updated_date_time: str | None = None


class MdmServerData(ApiModel):
    """JSON:API resource object for an MDM server."""

    id: str
    type: str | None = None
    attributes: MdmServerAttributes = Field(default_factory=MdmServerAttributes)


class MdmServersResponse(ListMeta):
    """One page of ``GET /v1/mdmServers``."""

    data: list[MdmServerData] = []


class MdmServer(ApiModel):
    """An MDM server with its id resolved to the top level."""

    id: str
    server_name: str | None = None
    server_type: str | None = None
    created_date_time: str | None = None
    updated_date_time: str | None = None

    @classmethod
    def from_data(cls, data: MdmServerData) -> MdmServer:
        """Flatten a JSON:API resource object."""
        attrs = data.attributes
        return cls(
            id=data.id,
            server_name=attrs.server_name,
            server_type=attrs.server_type,
            created_date_time=attrs.created_date_time,
            updated_date_time=attrs.updated_date_time,
        )


class AssignedServerData(ApiModel):
    """Relationship data pointing at the assigned MDM server."""

    type: str
    id: str
    server_name: str | None = None
    server_type: str | None = None


class AssignedServer(ApiModel):
    """Response of ``GET /v1/orgDevices/{id}/relationships/assignedServer``.

    ``data`` is None when the device has no assigned server. After enrichment
    the data also carries the server's name and type.
    """

    data: AssignedServerData | None = None
    links: Links | None = None


__all__ = [
    "AssignedServer",
    "AssignedServerData",
    "MdmServer",
    "MdmServerAttributes",
    "MdmServerData",
    "MdmServersResponse",
]
