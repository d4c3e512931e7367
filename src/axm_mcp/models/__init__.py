"""Pydantic models for Apple School/Business Manager API data structures.

This package provides type-safe models for devices, MDM servers, device
activities, AppleCare coverage, and OAuth2 tokens.
"""

from .activities import (
    ActivityDetails,
    ActivityResponse,
    ActivityType,
    CreateActivityRequest,
)
from .applecare import AppleCareAttributes, AppleCareCoverage, AppleCareResponse
from .devices import (
    AssignedMdmInfo,
    DeviceAttributes,
    DeviceInfo,
    DeviceMdmInfo,
    MultipleValues,
    OrgDeviceResponse,
    OrgDevicesResponse,
    SingleValue,
    StringOrList,
)
from .mdm_servers import AssignedServer, AssignedServerData, MdmServer, MdmServersResponse
from .token import Token

__all__ = [
    "ActivityDetails",
    "ActivityResponse",
    "ActivityType",
    "AppleCareAttributes",
    "AppleCareCoverage",
    "AppleCareResponse",
    "AssignedMdmInfo",
    "AssignedServer",
    "AssignedServerData",
    "CreateActivityRequest",
    "DeviceAttributes",
    "DeviceInfo",
    "DeviceMdmInfo",
    "MdmServer",
    "MdmServersResponse",
    "MultipleValues",
    "OrgDeviceResponse",
    "OrgDevicesResponse",
    "SingleValue",
    "StringOrList",
    "Token",
]
