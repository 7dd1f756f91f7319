"""Command-line interface for the RouterOS API client.

Loads configuration from a file, environment variables and command-line
arguments (later overrides earlier), connects to one router and runs a
subcommand:

    routeros-api-client --host 192.168.88.1 --user admin --password x query /system/resource/print
    routeros-api-client -c lab.yaml query /interface/print --where type,=,ether --tag ifaces
    routeros-api-client -c lab.yaml export
    routeros-api-client -c lab.yaml leases
"""

import argparse
import asyncio
import json
import logging
import sys
import uuid
from pathlib import Path
from typing import Any

from routeros_api_client import __version__
from routeros_api_client.config import Settings, load_settings_from_file, set_settings
from routeros_api_client.domain.services.leases import LeaseReportService
from routeros_api_client.infra.observability.logging import set_correlation_id, setup_logging
from routeros_api_client.infra.routeros.api_client import RouterOSApiClient
from routeros_api_client.infra.routeros.exceptions import RouterOSError
from routeros_api_client.infra.routeros.parser import Reply
from routeros_api_client.infra.routeros.query import Query

logger = logging.getLogger(__name__)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create command-line argument parser.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="routeros-api-client",
        description="Query MikroTik RouterOS devices over the binary API",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--config", "-c", type=Path, help="Path to configuration file (YAML or TOML)"
    )

    # Connection
    parser.add_argument("--host", help="Router hostname or IP")
    parser.add_argument("--user", help="API user name")
    parser.add_argument("--password", help="API user password")
    parser.add_argument("--port", type=int, help="API port (8728, or 8729 with --ssl)")
    parser.add_argument("--ssl", action="store_true", help="Use the api-ssl service")
    parser.add_argument("--legacy", action="store_true", help="Force legacy MD5 login")
    parser.add_argument("--attempts", type=int, help="Connection attempts")
    parser.add_argument("--delay", type=float, help="Seconds between connection attempts")

    # Logging
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level",
    )
    parser.add_argument("--log-format", choices=["json", "text"], help="Log output format")

    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {__version__}")

    subparsers = parser.add_subparsers(dest="command", required=True)

    query_parser = subparsers.add_parser("query", help="Run one API command and print the reply")
    query_parser.add_argument("endpoint", help="Command path, e.g. /ip/address/print")
    query_parser.add_argument(
        "--attr",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Command attribute (repeatable)",
    )
    query_parser.add_argument(
        "--where",
        action="append",
        default=[],
        metavar="KEY[,OP[,VALUE]]",
        help="Filter condition (repeatable)",
    )
    query_parser.add_argument("--operations", help="Operations directive, e.g. '|'")
    query_parser.add_argument("--tag", help="Query tag")
    query_parser.add_argument("--raw", action="store_true", help="Print raw reply words")

    subparsers.add_parser("export", help="Print the router configuration export")
    subparsers.add_parser("leases", help="Print DHCP leases with ping results as JSON")

    return parser


def load_config_from_cli(parsed_args: argparse.Namespace) -> Settings:
    """Load configuration from parsed CLI arguments and environment.

    Args:
        parsed_args: Parsed command-line arguments

    Returns:
        Configured Settings instance
    """
    if parsed_args.config:
        settings = load_settings_from_file(parsed_args.config)
    else:
        settings = Settings()

    cli_overrides: dict[str, Any] = {}

    if parsed_args.host is not None:
        cli_overrides["router_host"] = parsed_args.host

    if parsed_args.user is not None:
        cli_overrides["router_user"] = parsed_args.user

    if parsed_args.password is not None:
        cli_overrides["router_password"] = parsed_args.password

    if parsed_args.port is not None:
        cli_overrides["router_port"] = parsed_args.port

    if parsed_args.ssl:
        cli_overrides["router_ssl"] = True

    if parsed_args.legacy:
        cli_overrides["router_legacy"] = True

    if parsed_args.attempts is not None:
        cli_overrides["router_attempts"] = parsed_args.attempts

    if parsed_args.delay is not None:
        cli_overrides["router_delay_seconds"] = parsed_args.delay

    if parsed_args.log_level is not None:
        cli_overrides["log_level"] = parsed_args.log_level

    if parsed_args.log_format is not None:
        cli_overrides["log_format"] = parsed_args.log_format

    if cli_overrides:
        settings = Settings(**{**settings.model_dump(), **cli_overrides})

    return settings


def parse_condition(text: str) -> tuple[str, ...]:
    """Split a --where argument ("key,op,value") into a condition tuple."""
    return tuple(text.split(",", 2))


def build_cli_query(args: argparse.Namespace) -> tuple[Query, list[tuple[str, ...]]]:
    """Build the query and filter conditions for the query subcommand."""
    query = Query(args.endpoint)
    for attr in args.attr:
        key, _, value = attr.partition("=")
        query.equal(key, value)
    return query, [parse_condition(item) for item in args.where]


def format_reply(reply: Reply | list[str]) -> str:
    if isinstance(reply, Reply):
        return json.dumps(reply.to_dict(), indent=2)
    return json.dumps(reply, indent=2)


async def run_command(args: argparse.Namespace, settings: Settings) -> str:
    """Connect to the router and run the selected subcommand.

    Returns:
        Text to print on stdout
    """
    async with RouterOSApiClient(settings.to_connection_parameters()) as client:
        if args.command == "query":
            query, where = build_cli_query(args)
            reply = await client.query_read(
                query, where, args.operations, args.tag, parse=not args.raw
            )
            return format_reply(reply)

        if args.command == "export":
            words = await client.query_read("/export", parse=False)
            return "\n".join(words)

        reports = await LeaseReportService(client).collect()
        return json.dumps([r.model_dump(by_alias=True) for r in reports], indent=2)


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the RouterOS API CLI.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        settings = load_config_from_cli(args)
        set_settings(settings)
        setup_logging(
            level=settings.log_level,
            json_format=settings.log_format == "json",
            log_file=settings.log_file,
        )
        set_correlation_id(str(uuid.uuid4()))

        output = asyncio.run(run_command(args, settings))
        print(output)
        return 0

    except FileNotFoundError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except RouterOSError as e:
        logger.error(f"RouterOS API error: {e}")
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except ValueError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
