"""
CLI argument parser.

This module contains the argument parser setup for the castroutes CLI.
"""

import argparse

from castroutes import __version__
from castroutes.config import DEFAULT_CONFIG_FILE

from .commands import (
    handle_launch_command,
    handle_resolve_command,
    handle_routes_command,
    handle_url_command,
)


def create_parser():
    """Create and configure the CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="castroutes",
        description="Inspect and serve the asciicast site's route table.",
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--config",
        "-c",
        help=f"Path to config file. Default: ./{DEFAULT_CONFIG_FILE}",
        default=DEFAULT_CONFIG_FILE,
    )

    subparsers = parser.add_subparsers(
        title="commands", dest="command", required=True, help="Command to execute"
    )

    # Routes parser
    routes_parser = subparsers.add_parser(
        "routes", help="List every route in declaration order."
    )
    routes_parser.add_argument(
        "--grep",
        "-g",
        help="Only show routes whose alias, method, pattern or handler contains this text.",
        default=None,
    )
    routes_parser.set_defaults(func=handle_routes_command)

    # Resolve parser
    resolve_parser = subparsers.add_parser(
        "resolve", help="Show which handler a request would reach."
    )
    resolve_parser.add_argument("method", help="HTTP method, e.g. GET")
    resolve_parser.add_argument("path", help="Request path, e.g. /a/42/raw")
    resolve_parser.set_defaults(func=handle_resolve_command)

    # URL parser
    url_parser = subparsers.add_parser(
        "url", help="Generate the path for a route alias."
    )
    url_parser.add_argument("alias", help="Route alias, e.g. category")
    url_parser.add_argument(
        "params",
        nargs="*",
        metavar="key=value",
        help="Route parameters, e.g. category=comedy",
    )
    url_parser.set_defaults(func=handle_url_command)

    # Launch parser
    launch_parser = subparsers.add_parser("launch", help="Serve the application.")
    launch_parser.add_argument(
        "--host",
        help="Bind socket to this host. Default: 127.0.0.1",
        default="127.0.0.1",
    )
    launch_parser.add_argument(
        "--port",
        "-p",
        type=int,
        help="Bind socket to this port. Default: 8000",
        default=8000,
    )
    launch_parser.add_argument(
        "--reload", action="store_true", help="Enable auto-reload."
    )
    launch_parser.add_argument(
        "--dev",
        action="store_true",
        help="Enable development mode for the application.",
    )
    launch_parser.set_defaults(func=handle_launch_command)

    return parser
