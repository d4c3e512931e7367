"""Command-line interface for the AxM device management API.

Usage examples::

    axm-cli list-devices --total-limit 50 --show-pagination
    axm-cli --profile school get-devices-info --serials C02ABC,C02DEF
    axm-cli assign --csv-file devices.csv --mdm "Main MDM"
    axm-cli batch-status 7f0c...

Results are written to stdout as JSON (``batch-status`` prints the bare status
string). Diagnostics go to stderr and any API or input error exits with 1.
"""

import argparse
import asyncio
import csv
import json
import logging
import os
import sys
from collections.abc import Awaitable, Callable, Sequence
from pathlib import Path
from typing import Any

from .client.axm_client import create_dispatcher
from .client.dispatcher import RequestDispatcher
from .client.errors import AxmError
from .client.paginator import PageProgress
from .config import AxmConfig
from .credential_store import CredentialStore
from .operations.activities import activity_status, assign_devices, unassign_devices
from .operations.applecare import get_apple_care_coverages
from .operations.common import to_jsonable
from .operations.devices import MAX_DEVICES_PER_PAGE, get_devices_info, list_devices
from .operations.mdm_servers import get_assigned_mdm, list_mdm_servers

logger = logging.getLogger("axm_mcp.cli")

# Number of private key characters shown by ``config show``
KEY_PREVIEW_LENGTH = 30

type CommandHandler = Callable[[argparse.Namespace, RequestDispatcher], Awaitable[object]]


def read_serials_from_csv(path: Path) -> list[str]:
    """Return the trimmed first column of every non-empty row in a CSV file.

    Raises:
        ValueError: If the file cannot be read or contains no serial numbers.

    """
    try:
        with path.expanduser().open(newline="", encoding="utf-8") as handle:
            serials = [row[0].strip() for row in csv.reader(handle) if row and row[0].strip()]
    except OSError as exc:
        msg = f"Could not read CSV file {path}: {exc}"
        raise ValueError(msg) from exc
    if not serials:
        msg = f"No serial numbers found in {path}"
        raise ValueError(msg)
    return serials


def parse_serials(value: str) -> list[str]:
    """Split a comma-separated list of serial numbers, dropping blanks."""
    return [serial.strip() for serial in value.split(",") if serial.strip()]


def collect_serials(args: argparse.Namespace) -> list[str]:
    """Return the serial numbers selected by ``--serial``, ``--serials`` or ``--csv-file``.

    Raises:
        ValueError: If no serial numbers were given.

    """
    if getattr(args, "serial", None):
        return [args.serial.strip()]
    if args.csv_file is not None:
        return read_serials_from_csv(args.csv_file)
    serials = parse_serials(args.serials or "")
    if not serials:
        msg = "No serial numbers given."
        raise ValueError(msg)
    return serials


async def _print_progress(progress: PageProgress) -> None:
    sys.stderr.write(progress.describe() + "\n")


async def _list_devices(args: argparse.Namespace, dispatcher: RequestDispatcher) -> object:
    return await list_devices(
        dispatcher,
        devices_per_page=args.devices_per_page,
        total_limit=args.total_limit,
        on_page=_print_progress if args.show_pagination else None,
    )


async def _list_mdm_servers(args: argparse.Namespace, dispatcher: RequestDispatcher) -> object:  # noqa: ARG001
    return await list_mdm_servers(dispatcher)


async def _get_devices_info(args: argparse.Namespace, dispatcher: RequestDispatcher) -> object:
    return await get_devices_info(dispatcher, collect_serials(args), mdm_only=args.mdm)


async def _get_applecare(args: argparse.Namespace, dispatcher: RequestDispatcher) -> object:
    return await get_apple_care_coverages(dispatcher, collect_serials(args))


async def _get_assigned_mdm(args: argparse.Namespace, dispatcher: RequestDispatcher) -> object:
    return await get_assigned_mdm(dispatcher, args.device_id)


async def _assign(args: argparse.Namespace, dispatcher: RequestDispatcher) -> object:
    return await assign_devices(dispatcher, serials=collect_serials(args), mdm_name=args.mdm)


async def _unassign(args: argparse.Namespace, dispatcher: RequestDispatcher) -> object:
    return await unassign_devices(dispatcher, serials=collect_serials(args), mdm_name=args.mdm)


async def _batch_status(args: argparse.Namespace, dispatcher: RequestDispatcher) -> object:
    return await activity_status(dispatcher, args.activity_id)


def _config_show(config: AxmConfig) -> dict[str, Any]:
    pem = config.load_private_key_pem()
    return {
        "profile": config.profile_name,
        "client_id": config.client_id,
        "key_id": config.key_id,
        "scope": config.scope,
        "base_url": config.base_url,
        "private_key": f"{pem[:KEY_PREVIEW_LENGTH]}...",
    }


def _config_clear_token(config: AxmConfig, store: CredentialStore) -> str:
    if store.clear_cached_token(config.profile_name):
        return f"Cached token cleared for profile '{config.profile_name}'."
    return f"No cached token found for profile '{config.profile_name}'."


def _add_serial_source(parser: argparse.ArgumentParser, *, single: bool = False) -> None:
    group = parser.add_mutually_exclusive_group(required=True)
    if single:
        group.add_argument("--serial", help="A single device serial number")
    group.add_argument("--serials", help="Comma-separated device serial numbers")
    group.add_argument("--csv-file", type=Path, help="CSV file with serial numbers in the first column")


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for ``axm-cli``."""
    parser = argparse.ArgumentParser(
        prog="axm-cli",
        description="Query and manage devices in Apple School Manager or Apple Business Manager.",
    )
    parser.add_argument("--profile", help="Credential profile to use (see the config file)")
    sub = parser.add_subparsers(dest="command", required=True)

    devices = sub.add_parser("list-devices", help="List organization devices")
    devices.add_argument(
        "--devices-per-page",
        type=int,
        help=f"Devices requested per page (1-{MAX_DEVICES_PER_PAGE})",
    )
    devices.add_argument("--total-limit", type=int, help="Maximum number of devices to return")
    devices.add_argument("--show-pagination", action="store_true", help="Print page progress to stderr")
    devices.set_defaults(handler=_list_devices)

    servers = sub.add_parser("list-mdm-servers", help="List device management servers")
    servers.set_defaults(handler=_list_mdm_servers)

    info = sub.add_parser(
        "get-devices-info",
        aliases=["get-device-info", "get-device"],
        help="Show device details with AppleCare coverage and assigned server",
    )
    _add_serial_source(info)
    info.add_argument("--mdm", action="store_true", help="Only show the assigned MDM server")
    info.set_defaults(handler=_get_devices_info)

    applecare = sub.add_parser("get-applecare", help="Show AppleCare coverage")
    _add_serial_source(applecare, single=True)
    applecare.set_defaults(handler=_get_applecare)

    assigned = sub.add_parser("get-assigned-mdm", help="Show the MDM server a device is assigned to")
    assigned.add_argument("device_id", help="Device id (serial number)")
    assigned.set_defaults(handler=_get_assigned_mdm)

    assign = sub.add_parser("assign", help="Assign devices to an MDM server")
    _add_serial_source(assign)
    assign.add_argument("--mdm", required=True, help="MDM server name")
    assign.set_defaults(handler=_assign)

    unassign = sub.add_parser("unassign", help="Unassign devices from an MDM server")
    _add_serial_source(unassign)
    unassign.add_argument("--mdm", required=True, help="MDM server name")
    unassign.set_defaults(handler=_unassign)

    status = sub.add_parser("batch-status", help="Show the status of an assign/unassign activity")
    status.add_argument("activity_id", help="Activity id returned by assign or unassign")
    status.set_defaults(handler=_batch_status)

    config = sub.add_parser("config", help="Inspect the selected profile")
    config_sub = config.add_subparsers(dest="config_command", required=True)
    config_sub.add_parser("show", help="Show the profile's client id, key id and scope")
    config_sub.add_parser("clear-token", help="Delete the profile's cached bearer token")

    return parser


async def run_command(args: argparse.Namespace, *, store: CredentialStore) -> object:
    """Run the parsed command and return its result."""
    config = AxmConfig.resolve(args.profile)
    if args.command == "config":
        if args.config_command == "show":
            return _config_show(config)
        return _config_clear_token(config, store)

    handler: CommandHandler = args.handler
    async with create_dispatcher(config, store=store) as dispatcher:
        return await handler(args, dispatcher)


def _write_result(result: object) -> None:
    if isinstance(result, str):
        sys.stdout.write(result + "\n")
        return
    sys.stdout.write(json.dumps(to_jsonable(result), indent=2) + "\n")


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the axm-cli console script."""
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s %(name)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )
    args = build_parser().parse_args(argv)
    try:
        result = asyncio.run(run_command(args, store=CredentialStore()))
    except (AxmError, ValueError) as exc:
        sys.stderr.write(f"Error: {exc}\n")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted.")
        return 130
    _write_result(result)
    return 0


__all__ = ["build_parser", "collect_serials", "main", "parse_serials", "read_serials_from_csv", "run_command"]


if __name__ == "__main__":
    raise SystemExit(main())
