import logging
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from castroutes.exceptions import ConfigurationError, UnknownAlias
from castroutes.routing.generation import build_url
from castroutes.routing.resources import RouteDefinition, expand_resource, expand_resources
from castroutes.routing.route import HTTP_METHODS, Handler, NotFound, NotFoundType, Route, RouteMatch

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class _Scope:
    path_prefix: str = ""
    module: str | None = None
    alias_prefix: str = ""


class RouteTable:
    """Ordered HTTP route table with first-match lookup and reverse URL generation.

    The table is filled once at startup through explicit registration calls
    and then frozen. After that it only answers read-only queries, so any
    number of request handlers may share it without locking.

    Features:
    - Path patterns with named segments (``/a/:id``), prefixed segments
      (``/~:nickname``) and a trailing glob (``/files/*path``)
    - Declaration order decides precedence, the first matching route wins
    - Static default parameters per route
    - Plural and singular resource expansion with member/collection routes
    - Namespaces that prefix paths, handlers and aliases
    - URL generation from aliases with ``url_for()``

    Examples:
        Basic table:

        ```python
        from castroutes.routing import RouteTable

        table = RouteTable()
        table.get("/browse", "asciicasts#index", alias="browse")
        table.get("/browse/:category", "asciicasts#index", alias="category")
        table.resources("asciicasts", path="a", members=["raw", "example"])
        table.freeze()

        match = table.resolve("GET", "/a/42/raw")
        # match.handler == Handler("asciicasts", "raw"), match.params == {"id": "42"}

        table.url_for("category", category="comedy")
        # "/browse/comedy"
        ```

        Namespaces:

        ```python
        with table.namespace("api"):
            table.resources("asciicasts")
        # GET /api/asciicasts -> api.asciicasts.index, alias "api_asciicasts"
        ```
    """

    def __init__(self):
        self._routes: list[Route] = []
        self._aliases: dict[str, Route] = {}
        self._scopes: list[_Scope] = [_Scope()]
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def routes(self) -> tuple[Route, ...]:
        """All routes in declaration order."""
        return tuple(self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(self.routes)

    def __contains__(self, alias: object) -> bool:
        return alias in self._aliases

    def freeze(self):
        """Stop accepting registrations. Safe to call more than once."""
        if not self._frozen:
            logger.debug(f"Route table frozen with {len(self._routes)} routes")
        self._frozen = True

    def register(
        self,
        method: str,
        pattern: str,
        handler: Handler | str,
        *,
        alias: str | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> Route:
        """Adds a route to the end of the table.

        The enclosing namespace, if any, prefixes the pattern, the handler
        resource and the alias.

        Args:
            method: The HTTP method, e.g. "GET"
            pattern: The path pattern, e.g. "/browse/:category"
            handler: A Handler or a "resource#action" string
            alias: Optional name used by url_for
            defaults: Static parameters merged into every match

        Returns:
            The registered Route.

        Raises:
            ConfigurationError: If the table is frozen, the method is unknown,
                the pattern is malformed or the alias is already taken.

        Examples:
            >>> table.register("GET", "/docs", "docs#show", alias="docs_index", defaults={"page": "getting-started"})
        """
        scope = self._scopes[-1]
        handler = Handler.parse(handler).namespaced(scope.module)
        if scope.path_prefix:
            pattern = scope.path_prefix.rstrip("/") + "/" + pattern.lstrip("/")
        if alias:
            alias = scope.alias_prefix + alias

        return self._add(method, pattern, handler, alias, defaults)

    def get(self, pattern: str, handler: Handler | str, **options) -> Route:
        return self.register("GET", pattern, handler, **options)

    def post(self, pattern: str, handler: Handler | str, **options) -> Route:
        return self.register("POST", pattern, handler, **options)

    def put(self, pattern: str, handler: Handler | str, **options) -> Route:
        return self.register("PUT", pattern, handler, **options)

    def patch(self, pattern: str, handler: Handler | str, **options) -> Route:
        return self.register("PATCH", pattern, handler, **options)

    def delete(self, pattern: str, handler: Handler | str, **options) -> Route:
        return self.register("DELETE", pattern, handler, **options)

    def root(self, handler: Handler | str) -> Route:
        """Routes ``GET /`` (within the current namespace) under the alias "root"."""
        return self.register("GET", "/", handler, alias="root")

    def resources(self, name: str, **options) -> list[Route]:
        """Registers the conventional routes of a plural resource.

        Accepts the options of ``castroutes.routing.resources.expand_resources``.

        Examples:
            >>> table.resources("asciicasts", path="a", members=["raw", "example"])
        """
        scope = self._scopes[-1]
        definitions = expand_resources(
            name,
            path_prefix=scope.path_prefix,
            module=scope.module,
            alias_prefix=scope.alias_prefix,
            **options,
        )
        return self._add_definitions(definitions)

    def resource(self, name: str, **options) -> list[Route]:
        """Registers the conventional routes of a singular resource.

        Accepts the options of ``castroutes.routing.resources.expand_resource``.

        Examples:
            >>> table.resource("user", only=["show", "edit", "update", "destroy"])
        """
        scope = self._scopes[-1]
        definitions = expand_resource(
            name,
            path_prefix=scope.path_prefix,
            module=scope.module,
            alias_prefix=scope.alias_prefix,
            **options,
        )
        return self._add_definitions(definitions)

    @contextmanager
    def namespace(self, name: str) -> Iterator["RouteTable"]:
        """Scopes the registrations made inside the block under ``/name``.

        Handlers become ``name.<resource>`` and aliases ``name_<alias>``.
        Namespaces nest.
        """
        name = name.strip("/")
        if not name:
            raise ConfigurationError("Namespace name must not be empty")

        parent = self._scopes[-1]
        module = name.replace("/", ".")
        self._scopes.append(
            _Scope(
                path_prefix=parent.path_prefix.rstrip("/") + "/" + name,
                module=f"{parent.module}.{module}" if parent.module else module,
                alias_prefix=f"{parent.alias_prefix}{module.replace('.', '_')}_",
            )
        )
        try:
            yield self
        finally:
            self._scopes.pop()

    def _add_definitions(self, definitions: Iterable[RouteDefinition]) -> list[Route]:
        return [
            self._add(definition.method, definition.pattern, definition.handler, definition.alias, None)
            for definition in definitions
        ]

    def _add(
        self,
        method: str,
        pattern: str,
        handler: Handler,
        alias: str | None,
        defaults: Mapping[str, Any] | None,
    ) -> Route:
        if self._frozen:
            raise ConfigurationError(
                f"Cannot register {method} {pattern} on a frozen route table"
            )

        if method.upper() not in HTTP_METHODS:
            raise ConfigurationError(f"Unsupported HTTP method '{method}' for {pattern}")

        if alias is not None and alias in self._aliases:
            existing = self._aliases[alias]
            raise ConfigurationError(
                f"Duplicate route alias '{alias}': already registered for "
                f"{existing.method} {existing.pattern} ({existing.handler})"
            )

        route = Route(method, pattern, handler, alias=alias, defaults=defaults or {})
        self._routes.append(route)
        if alias is not None:
            self._aliases[alias] = route

        logger.debug(f"Registered {route.method} {route.pattern} -> {route.handler}")
        return route

    def get_route(self, alias: str) -> Route:
        try:
            return self._aliases[alias]
        except KeyError:
            raise UnknownAlias(alias) from None

    def resolve(self, method: str, path: str) -> RouteMatch | NotFoundType:
        """Finds the first route that accepts the method and matches the path.

        Args:
            method: The HTTP method of the request
            path: The request path, without query string

        Returns:
            A RouteMatch with the bound parameters (route defaults included),
            or NotFound when no route matches. A miss is not an error.

        Examples:
            >>> table.resolve("GET", "/docs")
            RouteMatch(route=..., params={"page": "getting-started"})

            >>> table.resolve("GET", "/nonexistent")
            NotFound
        """
        for route in self._routes:
            if not route.accepts(method):
                continue

            params = route.match(path)
            if params is not None:
                return RouteMatch(route=route, params=params)

        return NotFound

    def allowed_methods(self, path: str) -> frozenset[str]:
        """Methods of every route whose pattern matches the path.

        An empty result means the path is unknown (404); a non-empty one that
        lacks the request method means 405.
        """
        methods = {route.method for route in self._routes if route.match(path) is not None}
        if "GET" in methods:
            methods.add("HEAD")
        return frozenset(methods)

    def url_for(self, alias: str, params: Mapping[str, Any] | None = None, /, **kwargs) -> str:
        """Builds the path of an aliased route.

        Args:
            alias: The route alias
            params: Parameter values, may also be given as keyword arguments

        Returns:
            The concrete path. Parameters the pattern does not use are added
            as a query string.

        Raises:
            UnknownAlias: If no route has this alias
            MissingParameter: If a named segment has no value

        Examples:
            >>> table.url_for("about")
            "/about"

            >>> table.url_for("category", {"category": "comedy"})
            "/browse/comedy"
        """
        route = self.get_route(alias)
        values = {**(params or {}), **kwargs}
        return build_url(route.compiled, values, route.defaults, alias=alias)

