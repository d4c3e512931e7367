"""Fixed hosts, OAuth2 constants and resource paths for the Apple School/Business Manager API."""

from urllib.parse import quote

TOKEN_URL = "https://account.apple.com/auth/oauth2/token"
TOKEN_AUDIENCE = "https://account.apple.com/auth/oauth2/v2/token"
CLIENT_ASSERTION_TYPE = "urn:ietf:params:oauth:client-assertion-type:jwt-bearer"

BUSINESS_SCOPE = "business.api"
SCHOOL_SCOPE = "school.api"
SCHOOL_CLIENT_PREFIX = "SCHOOLAPI"

SCOPE_BASE_URLS: dict[str, str] = {
    BUSINESS_SCOPE: "https://api-business.apple.com/",
    SCHOOL_SCOPE: "https://api-school.apple.com/",
}

ORG_DEVICES_PATH = "/v1/orgDevices"
ORG_DEVICE_ACTIVITIES_PATH = "/v1/orgDeviceActivities"
MDM_SERVERS_PATH = "/v1/mdmServers"


def scope_for_client_id(client_id: str) -> str:
    """Return the API scope implied by the client id prefix."""
    return SCHOOL_SCOPE if client_id.startswith(SCHOOL_CLIENT_PREFIX) else BUSINESS_SCOPE


def base_url_for_scope(scope: str) -> str:
    """Return the API host for a scope.

    Raises:
        ValueError: If the scope is not one of the two supported deployments.

    """
    try:
        return SCOPE_BASE_URLS[scope]
    except KeyError:
        msg = f"Unknown API scope '{scope}'. Expected one of: {', '.join(SCOPE_BASE_URLS)}"
        raise ValueError(msg) from None


def _segment(value: str) -> str:
    return quote(value, safe="")


def org_device_path(serial: str) -> str:
    """Path of a single organization device."""
    return f"{ORG_DEVICES_PATH}/{_segment(serial)}"


def org_device_activity_path(activity_id: str) -> str:
    """Path of a single device activity."""
    return f"{ORG_DEVICE_ACTIVITIES_PATH}/{_segment(activity_id)}"


def assigned_server_path(device_id: str) -> str:
    """Path of a device's assigned-server relationship."""
    return f"{ORG_DEVICES_PATH}/{_segment(device_id)}/relationships/assignedServer"


def apple_care_coverage_path(serial: str) -> str:
    """Path of a device's AppleCare coverage collection."""
    return f"{ORG_DEVICES_PATH}/{_segment(serial)}/appleCareCoverage"


__all__ = [
    "BUSINESS_SCOPE",
    "CLIENT_ASSERTION_TYPE",
    "MDM_SERVERS_PATH",
    "ORG_DEVICES_PATH",
    "ORG_DEVICE_ACTIVITIES_PATH",
    "SCHOOL_CLIENT_PREFIX",
    "SCHOOL_SCOPE",
    "SCOPE_BASE_URLS",
    "TOKEN_AUDIENCE",
    "TOKEN_URL",
    "apple_care_coverage_path",
    "assigned_server_path",
    "base_url_for_scope",
    "org_device_activity_path",
    "org_device_path",
    "scope_for_client_id",
]
