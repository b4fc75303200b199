"""Builds route tables from declarative (YAML) route entries."""

import logging
from pathlib import Path
from typing import Any

from castroutes.config import (
    ROUTE_VERBS,
    RouteConfig,
    RouteConfigError,
    load_config,
    validate_route_entries,
)
from castroutes.routing.router import RouteTable

logger = logging.getLogger(__name__)

_RESOURCE_OPTIONS = ("path", "controller", "only", "members", "collection", "singular")


class RouteTableBuilder:
    """Registers declarative route entries on a RouteTable, in order.

    Each entry declares exactly one of ``get``/``post``/``put``/``patch``/
    ``delete`` (with ``to``, and optionally ``as`` and ``defaults``), ``root``,
    ``resources``, ``resource`` or ``namespace`` (with nested ``routes``).
    """

    def __init__(self, routes: list[RouteConfig]):
        validate_route_entries(routes)
        self._routes = routes

    @classmethod
    def from_file(cls, path: str | Path) -> "RouteTableBuilder":
        config = load_config(path)
        if "routes" not in config:
            raise RouteConfigError(f"No 'routes' section in {path}")

        return cls(config["routes"])

    def build(self, table: RouteTable | None = None, *, freeze: bool = True) -> RouteTable:
        table = table if table is not None else RouteTable()
        self._register_entries(table, self._routes)
        logger.debug(f"Built route table with {len(table)} routes from declarations")
        if freeze:
            table.freeze()
        return table

    def _register_entries(self, table: RouteTable, entries: list[RouteConfig]):
        for entry in entries:
            self._register_entry(table, entry)

    def _register_entry(self, table: RouteTable, entry: RouteConfig):
        match entry:
            case {"namespace": str() as name}:
                with table.namespace(name):
                    self._register_entries(table, entry.get("routes", []))

            case {"resources": str() as name}:
                table.resources(name, **self._resource_options(entry, plural=True))

            case {"resource": str() as name}:
                table.resource(name, **self._resource_options(entry, plural=False))

            case {"root": str() as handler}:
                table.root(handler)

            case _:
                method = next(verb for verb in ROUTE_VERBS if verb in entry)
                table.register(
                    method.upper(),
                    str(entry[method]),
                    entry["to"],
                    alias=entry.get("as"),
                    defaults=entry.get("defaults"),
                )

    @staticmethod
    def _resource_options(entry: RouteConfig, *, plural: bool) -> dict[str, Any]:
        options = {key: entry[key] for key in _RESOURCE_OPTIONS if key in entry}
        if "except" in entry:
            options["except_"] = entry["except"]
        if not plural:
            options.pop("collection", None)
            options.pop("singular", None)
        return options
