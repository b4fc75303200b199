"""Route table entries and lookup results."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from castroutes.routing.patterns import PathPattern, compile_pattern

HTTP_METHODS = frozenset({"GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"})


@dataclass(frozen=True, slots=True)
class Handler:
    """Identifies the controller action that services a route.

    ``resource`` may be namespaced with dots, e.g. ``api.asciicasts``.
    """

    resource: str
    action: str

    @classmethod
    def parse(cls, value: "str | Handler") -> "Handler":
        """Parse ``"asciicasts#index"`` or ``"asciicasts.index"`` into a Handler.

        Examples:
            >>> Handler.parse("asciicasts#index")
            Handler(resource='asciicasts', action='index')

            >>> Handler.parse("api.asciicasts.show")
            Handler(resource='api.asciicasts', action='show')
        """
        if isinstance(value, Handler):
            return value

        separator = "#" if "#" in value else "."
        resource, _, action = value.rpartition(separator)
        if not resource or not action:
            raise ValueError(
                f"Invalid handler '{value}'. Expected 'resource#action' or 'resource.action'."
            )

        return cls(resource.replace("/", "."), action)

    def namespaced(self, module: str | None) -> "Handler":
        if not module:
            return self

        return Handler(f"{module}.{self.resource}", self.action)

    def __str__(self) -> str:
        return f"{self.resource}.{self.action}"


@dataclass(frozen=True, slots=True)
class Route:
    """A single entry in the route table."""

    method: str
    pattern: str
    handler: Handler
    alias: str | None = None
    defaults: Mapping[str, Any] = field(default_factory=dict, hash=False)
    compiled: PathPattern = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "defaults", MappingProxyType(dict(self.defaults)))
        object.__setattr__(self, "compiled", compile_pattern(self.pattern))
        object.__setattr__(self, "pattern", self.compiled.source)

    def accepts(self, method: str) -> bool:
        """HEAD requests are served by GET routes."""
        method = method.upper()
        return method == self.method or (method == "HEAD" and self.method == "GET")

    def match(self, path: str) -> dict[str, Any] | None:
        params = self.compiled.match(path)
        if params is None:
            return None

        return {**self.defaults, **params}


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful lookup."""

    route: Route
    params: dict[str, Any]

    @property
    def handler(self) -> Handler:
        return self.route.handler


class NotFoundType:
    """Type of the ``NotFound`` lookup result.

    An unmatched path is an expected outcome, so ``resolve`` returns this
    falsy value rather than raising.
    """

    __slots__ = ()
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "NotFound"


NotFound = NotFoundType()
