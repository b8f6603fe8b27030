"""
Command-line interface for the IP filter system.

Commands:
- serve: Run the MCP server
- check: Evaluate one address locally and print the JSON verdict
- denylist: Fetch the exit-node denylist and report it
"""

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

from . import __version__
from .config import SystemConfig, load_config_from_env, validate_config
from .denylist_client import DenylistClient
from .enums import Transport
from .exceptions import ConfigurationError
from .i18n import SUPPORTED_LANGUAGES, get_message
from .server import build_evaluator, build_logger, handle_filter_ip, run_server


def _load_config(args: argparse.Namespace) -> SystemConfig:
    """Load configuration from the environment and apply command line overrides."""
    env_file = Path(args.env_file) if args.env_file else None
    config = load_config_from_env(env_file)

    if getattr(args, "language", None):
        config = replace(config, language=args.language)

    if args.command == "serve":
        server = config.server
        if args.transport:
            server = replace(server, transport=args.transport)
        if args.host:
            server = replace(server, host=args.host)
        if args.port is not None:
            server = replace(server, port=args.port)
        config = replace(config, server=server)

    errors = validate_config(config)
    if errors:
        raise ConfigurationError(
            code="invalid_config",
            message="; ".join(errors),
            details={"errors": errors},
        )
    return config


async def check_address(
    config: SystemConfig,
    ip_address: str,
    cidr_ranges: list[str],
    check_tor: bool,
) -> str:
    """Run one evaluation with a short-lived denylist client."""
    evaluator, client = build_evaluator(config, logger=build_logger(config))
    async with client:
        return await handle_filter_ip(evaluator, ip_address, cidr_ranges, check_tor)


async def fetch_denylist(config: SystemConfig) -> Optional[list[str]]:
    """Fetch the denylist once; None if the fetch failed."""
    async with DenylistClient(config.denylist) as client:
        response = await client.fetch()
    if not response.ok:
        message = response.error.message if response.error else "unknown error"
        print(get_message("denylist.fetch_failed", config.language, error=message), file=sys.stderr)
        return None
    return response.entries


def cmd_serve(args: argparse.Namespace) -> int:
    """Handle the 'serve' command."""
    config = _load_config(args)
    run_server(config)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Handle the 'check' command. Exit code 0 when admitted, 1 otherwise."""
    config = _load_config(args)
    payload = asyncio.run(check_address(
        config=config,
        ip_address=args.ip_address,
        cidr_ranges=args.ranges,
        check_tor=args.check_tor,
    ))
    print(payload)
    return 0 if json.loads(payload)["result"] else 1


def cmd_denylist(args: argparse.Namespace) -> int:
    """Handle the 'denylist' command."""
    config = _load_config(args)
    entries = asyncio.run(fetch_denylist(config))
    if entries is None:
        return 1

    if args.show:
        for entry in entries:
            print(entry)
    else:
        print(get_message(
            "cli.denylist_count", config.language,
            count=len(entries),
            url=config.denylist.url,
        ))
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="ip-filter",
        description="IP admissibility checks over MCP (CIDR ranges and Tor exit nodes)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--env-file", "-e",
        help="Path to a .env file (default: nearest .env)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # 'serve' command
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the MCP server",
    )
    serve_parser.add_argument(
        "--transport", "-t",
        choices=[t.value for t in Transport],
        help="MCP transport (default: MCP_TRANSPORT or sse)",
    )
    serve_parser.add_argument(
        "--host",
        help="Listen address for network transports",
    )
    serve_parser.add_argument(
        "--port", "-p",
        type=int,
        help="Listen port for network transports (default: PORT or 3000)",
    )
    serve_parser.set_defaults(func=cmd_serve)

    # 'check' command
    check_parser = subparsers.add_parser(
        "check",
        help="Check one address against CIDR ranges",
    )
    check_parser.add_argument(
        "ip_address",
        help="IPv4 or IPv6 address to check",
    )
    check_parser.add_argument(
        "ranges",
        nargs="*",
        help="CIDR ranges (or bare addresses) the address must fall into",
    )
    check_parser.add_argument(
        "--check-tor",
        action="store_true",
        help="Also reject Tor exit nodes",
    )
    check_parser.add_argument(
        "--language", "-l",
        choices=sorted(SUPPORTED_LANGUAGES),
        help="Diagnostic language (default: en)",
    )
    check_parser.set_defaults(func=cmd_check)

    # 'denylist' command
    denylist_parser = subparsers.add_parser(
        "denylist",
        help="Fetch the Tor exit-node denylist",
    )
    denylist_parser.add_argument(
        "--show",
        action="store_true",
        help="Print every entry instead of the count",
    )
    denylist_parser.set_defaults(func=cmd_denylist)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    try:
        return args.func(args)
    except ConfigurationError as e:
        print(get_message("cli.config_error", error=e.message), file=sys.stderr)
        return 2


if __name__ == "__main__":
    sys.exit(main())
