#!/usr/bin/env python3
"""Command-line wrapper around the interfaces engine.

Usage:
    ifedit read PATH IFACE
    ifedit write PATH IFACE key=value [key=value ...] [--dry-run]

Environment variables:
    IFEDIT_CONFIG       Settings file (see ifedit.config.settings)
    IFEDIT_LOG_LEVEL    Console log level (default: WARNING)
"""
import argparse
import asyncio
import json
import logging
import sys
from typing import Optional

from .config.settings import SettingsError, load_settings
from .interfaces import (
    InterfaceNotFound,
    InterfacesEngine,
    InterfacesError,
)
from .utils.audit_log import setup_audit_logging
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_NOT_FOUND = 2


def parse_assignments(assignments: list[str]) -> dict[str, str]:
    """Turn ["address=10.0.0.1", ...] into an ordered field dict."""
    fields = {}
    for item in assignments:
        key, sep, value = item.partition("=")
        if not sep:
            raise ValueError(f"Expected key=value, got {item!r}")
        fields[key.strip()] = value
    return fields


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ifedit",
        description="Read and edit iface stanzas in /etc/network/interfaces",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    ifedit read /etc/network/interfaces eth0
    ifedit write /etc/network/interfaces eth0 address=10.0.0.5 netmask=255.255.255.0
    ifedit write /etc/network/interfaces eth3 gateway=10.0.0.1 --dry-run
""",
    )
    parser.add_argument(
        "--config",
        type=str,
        help="Settings file (default: $IFEDIT_CONFIG or ./ifedit.yaml)",
    )
    parser.add_argument(
        "--audit-dir",
        type=str,
        help="Directory for the audit log (default: ~/.ifedit)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    read_cmd = sub.add_parser("read", help="Print an interface's fields as JSON")
    read_cmd.add_argument("path", help="Interfaces file")
    read_cmd.add_argument("interface", help="Interface name")

    write_cmd = sub.add_parser("write", help="Set fields on an interface")
    write_cmd.add_argument("path", help="Interfaces file")
    write_cmd.add_argument("interface", help="Interface name")
    write_cmd.add_argument("fields", nargs="+", metavar="key=value")
    write_cmd.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the changes without writing the file",
    )

    return parser


async def run(args: argparse.Namespace, engine: InterfacesEngine) -> str:
    """Execute a parsed command and return its output text."""
    if args.command == "read":
        view = await engine.read(args.path, args.interface)
        return json.dumps(view, indent=2)

    fields = parse_assignments(args.fields)
    if args.dry_run:
        return await engine.preview(args.path, args.interface, fields)

    view = await engine.write(args.path, args.interface, fields)
    return json.dumps(view, indent=2)


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the ifedit CLI."""
    args = build_parser().parse_args(argv)

    setup_logging(level=logging.DEBUG if args.verbose else None, log_to_file=False)

    try:
        if args.command == "write":
            setup_audit_logging(args.audit_dir)
        settings = load_settings(args.config)
        output = asyncio.run(run(args, InterfacesEngine(settings)))
    except InterfaceNotFound as e:
        logger.error(str(e))
        return EXIT_NOT_FOUND
    except (InterfacesError, SettingsError, OSError, ValueError) as e:
        logger.error(str(e))
        return EXIT_ERROR

    print(output)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
