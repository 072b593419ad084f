"""
Command-line interface for the application.

This module provides the main entry point for the CLI.
"""

from __future__ import annotations

import argparse
import logging
import sys

from pydantic import ValidationError

from commute_isochrones import __version__
from commute_isochrones.config import get_settings
from commute_isochrones.errors import BackendUnreachable, ProviderUnavailable
from commute_isochrones.flows.isochrone import generate_isochrones, get_service
from commute_isochrones.providers.registry import supported_provider_names
from commute_isochrones.schemas import IsochroneRequest, Location, ProviderName, TravelMode


def parse_location(value: str) -> Location:
    """Parse ``LAT,LNG`` into a Location (argparse ``type=``)."""
    parts = value.split(",")
    if len(parts) != 2:
        msg = f"expected LAT,LNG, got {value!r}"
        raise argparse.ArgumentTypeError(msg)
    try:
        return Location(lat=float(parts[0]), lng=float(parts[1]))
    except ValueError as e:
        msg = f"invalid coordinates {value!r}"
        raise argparse.ArgumentTypeError(msg) from e


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="commute-isochrones",
        description="Travel-time isochrones for commute destinations",
    )
    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("info", help="Show application info")
    subparsers.add_parser("providers", help="List supported and configured providers")

    iso_parser = subparsers.add_parser("isochrone", help="Generate isochrones as JSON")
    iso_parser.add_argument(
        "--provider",
        required=True,
        choices=sorted(p.value for p in ProviderName),
        help="Backend to use (required, no default)",
    )
    iso_parser.add_argument(
        "--mode",
        required=True,
        choices=[m.value for m in TravelMode],
        help="Travel mode",
    )
    iso_parser.add_argument(
        "--window",
        required=True,
        help="Departure window, HH:MM-HH:MM",
    )
    iso_parser.add_argument(
        "--minutes",
        type=float,
        required=True,
        help="Travel-time budget in minutes",
    )
    iso_parser.add_argument(
        "--dest",
        dest="destinations",
        type=parse_location,
        action="append",
        required=True,
        metavar="LAT,LNG",
        help="Destination (repeatable)",
    )
    iso_parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Skip the result cache",
    )

    return parser


def cmd_info(_args: argparse.Namespace) -> int:
    """Handle the 'info' command."""
    settings = get_settings()
    print(f"Application: {settings.app_name}")
    print(f"Version: {__version__}")
    print(f"Environment: {settings.app_env}")
    print(f"Debug: {settings.debug}")
    print(f"Cache: {settings.cache_dir}")
    return 0


def cmd_providers(_args: argparse.Namespace) -> int:
    """Handle the 'providers' command."""
    registry = get_service().registry
    configured = registry.available()
    print(f"Supported: {', '.join(sorted(supported_provider_names()))}")
    print(f"Configured: {', '.join(configured) if configured else '(none)'}")
    for warning in registry.warnings:
        print(f"Warning: {warning}", file=sys.stderr)
    return 0


def cmd_isochrone(args: argparse.Namespace) -> int:
    """Handle the 'isochrone' command: print the response JSON."""
    try:
        request = IsochroneRequest(
            destinations=tuple(args.destinations),
            mode=TravelMode(args.mode),
            window=args.window,
            minutes=args.minutes,
            provider=ProviderName(args.provider),
        )
    except ValidationError as e:
        print(f"Invalid request: {e}", file=sys.stderr)
        return 1

    try:
        response = generate_isochrones(request, use_cache=not args.no_cache)
    except ProviderUnavailable as e:
        print(f"Isochrone service unavailable: {e}", file=sys.stderr)
        return 1
    except BackendUnreachable as e:
        print(f"External mapping service temporarily unavailable: {e}", file=sys.stderr)
        return 1

    print(response.model_dump_json(indent=2))
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args()

    debug = getattr(args, "debug", False) or get_settings().debug
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "info": cmd_info,
        "providers": cmd_providers,
        "isochrone": cmd_isochrone,
    }

    handler = commands.get(args.command)
    if handler:
        return handler(args)
    else:
        parser.print_help()
        return 1


if __name__ == "__main__":
    sys.exit(main())
