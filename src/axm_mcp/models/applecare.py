"""Pydantic models for AppleCare coverage."""

from .common import ApiModel


class AppleCareAttributes(ApiModel):
    """A single AppleCare coverage agreement."""

    agreement_number: str | None = None
    description: str | None = None
    start_date_time: str | None = None
    end_date_time: str | None = None
    status: str | None = None
    payment_type: str | None = None
    is_renewable: bool | None = None
    is_canceled: bool | None = None
    contract_cancel_date_time: str | None = None


class AppleCareData(ApiModel):
    """JSON:API resource object wrapping coverage attributes."""

    id: str | None = None
    type: str | None = None
    attributes: AppleCareAttributes


class AppleCareResponse(ApiModel):
    """Response of ``GET /v1/orgDevices/{serial}/appleCareCoverage``."""

    data: list[AppleCareData] = []


class AppleCareCoverage(ApiModel):
    """Coverage records for one device."""

    device_serial_number: str
    coverages: list[AppleCareAttributes] = []


__all__ = ["AppleCareAttributes", "AppleCareCoverage", "AppleCareData", "AppleCareResponse"]
