"""Helpers for AppleCare coverage lookups."""

from ..client.dispatcher import RequestDispatcher
from ..client.endpoints import apple_care_coverage_path
from ..models.applecare import AppleCareCoverage, AppleCareResponse
from .common import build_request


async def get_apple_care_coverage(dispatcher: RequestDispatcher, serial: str) -> AppleCareCoverage:
    """Return the AppleCare coverage records (zero or more) for a device."""
    response = await dispatcher.send(
        build_request(dispatcher, "GET", apple_care_coverage_path(serial), AppleCareResponse),
    )
    return AppleCareCoverage(
        device_serial_number=serial,
        coverages=[item.attributes for item in response.data],
    )


async def get_apple_care_coverages(dispatcher: RequestDispatcher, serials: list[str]) -> list[AppleCareCoverage]:
    """Return AppleCare coverage for several devices, one request after another."""
    return [await get_apple_care_coverage(dispatcher, serial) for serial in serials]


__all__ = ["get_apple_care_coverage", "get_apple_care_coverages"]
