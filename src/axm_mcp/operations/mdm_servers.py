"""Helpers for MDM servers and device-to-server assignments."""

import logging

from ..client.dispatcher import RequestDispatcher
from ..client.endpoints import MDM_SERVERS_PATH, assigned_server_path
from ..client.errors import NotFoundError
from ..client.paginator import Page, paginate
from ..models.mdm_servers import AssignedServer, AssignedServerData, MdmServer, MdmServersResponse
from .common import build_request

logger = logging.getLogger("axm_mcp.operations.mdm_servers")


async def list_mdm_servers(dispatcher: RequestDispatcher) -> list[MdmServer]:
    """Return every MDM server in the organization with its id resolved.

    Follows the paging cursor if the server list spans several pages.
    """

    async def fetch_page(cursor: str | None) -> Page[MdmServer]:
        params: dict[str, str | int] = {"cursor": cursor} if cursor else {}
        response = await dispatcher.send(
            build_request(dispatcher, "GET", MDM_SERVERS_PATH, MdmServersResponse, params=params),
        )
        return Page(
            items=[MdmServer.from_data(item) for item in response.data],
            next_cursor=response.next_cursor,
        )

    return await paginate(fetch_page)


def find_server(servers: list[MdmServer], server_id: str) -> MdmServer | None:
    """Return the server with ``server_id``, if present."""
    return next((server for server in servers if server.id == server_id), None)


async def get_mdm_server_id_by_name(dispatcher: RequestDispatcher, name: str) -> str:
    """Resolve an MDM server name to its id (case-insensitive).

    Raises:
        NotFoundError: If no server has that name; the message lists the known names.

    """
    servers = await list_mdm_servers(dispatcher)
    wanted = name.casefold()
    for server in servers:
        if server.server_name is not None and server.server_name.casefold() == wanted:
            return server.id
    known_names = [server.server_name for server in servers if server.server_name]
    raise NotFoundError("MDM server", name, known_names)


async def get_assigned_mdm(dispatcher: RequestDispatcher, device_id: str) -> AssignedServer:
    """Return the device's assigned MDM server, enriched with its name and type.

    A device without an assigned server is not an error: the returned record
    simply has no ``data``.
    """
    response = await dispatcher.send(
        build_request(dispatcher, "GET", assigned_server_path(device_id), AssignedServer),
    )
    if response.data is None:
        logger.debug("Device %s has no assigned MDM server.", device_id)
        return response

    servers = await list_mdm_servers(dispatcher)
    server = find_server(servers, response.data.id)
    return AssignedServer(
        data=AssignedServerData(
            type=response.data.type,
            id=response.data.id,
            server_name=server.server_name if server else None,
            server_type=server.server_type if server else None,
        ),
        links=response.links,
    )


__all__ = ["find_server", "get_assigned_mdm", "get_mdm_server_id_by_name", "list_mdm_servers"]
