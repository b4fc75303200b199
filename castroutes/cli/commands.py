"""
CLI command handlers.

This module contains the command handlers for the castroutes CLI.
"""

import logging
import os
import sys

import uvicorn

from castroutes.config import load_config
from castroutes.exceptions import CastRoutesException, RoutingError
from castroutes.routes import load_route_table
from castroutes.routing import Route, RouteTable

logger = logging.getLogger("castroutes")


def _load_table(args_ns) -> RouteTable:
    try:
        config = load_config(args_ns.config)
        return load_route_table(config)
    except CastRoutesException as e:
        logger.error(f"Could not load routes: {e}")
        sys.exit(1)


def _route_matches(route: Route, needle: str) -> bool:
    needle = needle.lower()
    fields = (route.alias or "", route.method, route.pattern, str(route.handler))
    return any(needle in field.lower() for field in fields)


def _format_rows(rows: list[tuple[str, ...]]) -> list[str]:
    widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
    lines = []
    for row in rows:
        alias, *rest = row
        cells = [alias.rjust(widths[0])]
        cells.extend(cell.ljust(width) for cell, width in zip(rest, widths[1:]))
        lines.append("  ".join(cells).rstrip())
    return lines


def handle_routes_command(args_ns):
    """Handles the 'routes' command."""
    table = _load_table(args_ns)
    routes = list(table)
    if args_ns.grep:
        routes = [route for route in routes if _route_matches(route, args_ns.grep)]

    if not routes:
        print("No routes found.")
        return

    rows = [("Alias", "Verb", "Pattern", "Handler")]
    rows.extend(
        (route.alias or "", route.method, route.pattern, str(route.handler))
        for route in routes
    )
    for line in _format_rows(rows):
        print(line)


def handle_resolve_command(args_ns):
    """Handles the 'resolve' command."""
    table = _load_table(args_ns)
    method = args_ns.method.upper()
    route_match = table.resolve(method, args_ns.path)
    if not route_match:
        allowed = table.allowed_methods(args_ns.path)
        if allowed:
            print(
                f"No {method} route for {args_ns.path} (allowed: {', '.join(sorted(allowed))})",
                file=sys.stderr,
            )
        else:
            print(f"No route matches {method} {args_ns.path}", file=sys.stderr)
        sys.exit(1)

    print(f"{route_match.route.method} {route_match.route.pattern} -> {route_match.handler}")
    if route_match.route.alias:
        print(f"  alias: {route_match.route.alias}")
    for name, value in route_match.params.items():
        print(f"  {name}: {value}")


def _parse_params(pairs: list[str]) -> dict[str, str]:
    params = {}
    for pair in pairs:
        if "=" not in pair:
            logger.error(f"Invalid parameter '{pair}'. Expected key=value.")
            sys.exit(1)
        key, value = pair.split("=", 1)
        params[key] = value
    return params


def handle_url_command(args_ns):
    """Handles the 'url' command."""
    table = _load_table(args_ns)
    params = _parse_params(args_ns.params)
    try:
        print(table.url_for(args_ns.alias, params))
    except RoutingError as e:
        logger.error(f"Could not build URL: {e}")
        sys.exit(1)


def handle_launch_command(args_ns):
    """Handles the 'launch' command."""
    logger.debug("Launch command started.")

    # The factory reads these in the server process, including reload workers
    os.environ["CASTROUTES_CONFIG"] = str(args_ns.config)
    if args_ns.dev:
        os.environ["CASTROUTES_DEV"] = "1"

    logger.info(f"Starting castroutes application on {args_ns.host}:{args_ns.port}")
    try:
        uvicorn.run(
            "castroutes.app:create_app",
            factory=True,
            host=args_ns.host,
            port=args_ns.port,
            reload=args_ns.reload,
            log_level="debug" if os.getenv("CASTROUTES_DEBUG") else "info",
        )
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error(f"Error launching application: {e}")
        sys.exit(1)
