"""Resource expansion.

A single ``resources`` or ``resource`` declaration stands for a fixed,
conventional set of routes. The functions here expand a declaration into
concrete ``RouteDefinition`` entries once, at registration time, so that the
matcher never has to know about resources at all.
"""

from collections.abc import Iterable
from typing import NamedTuple

from castroutes.exceptions import ConfigurationError
from castroutes.routing.route import Handler

PLURAL_ACTIONS = ("index", "create", "new", "edit", "show", "update", "destroy")
SINGULAR_ACTIONS = ("create", "new", "edit", "show", "update", "destroy")

DEFAULT_PLURAL_ACTIONS = frozenset({"index", "show", "create", "update", "destroy"})
DEFAULT_SINGULAR_ACTIONS = frozenset({"show", "create", "update", "destroy"})


class RouteDefinition(NamedTuple):
    method: str
    pattern: str
    handler: Handler
    alias: str | None = None


def singularize(name: str) -> str:
    """Naive English singular for resource names.

    Examples:
        >>> singularize("asciicasts")
        "asciicast"

        >>> singularize("categories")
        "category"
    """
    if name.endswith("ies") and len(name) > 3:
        return name[:-3] + "y"
    if name.endswith(("sses", "xes", "ches", "shes")):
        return name[:-2]
    if name.endswith("s") and not name.endswith("ss"):
        return name[:-1]
    return name


def pluralize(name: str) -> str:
    """Naive English plural, the inverse of ``singularize`` for common names.

    Examples:
        >>> pluralize("user")
        "users"
    """
    if name.endswith("y") and name[-2:-1] not in ("a", "e", "i", "o", "u"):
        return name[:-1] + "ies"
    if name.endswith(("s", "x", "ch", "sh")):
        return name + "es"
    return name + "s"


def select_actions(
    available: Iterable[str],
    defaults: frozenset[str],
    only: Iterable[str] | None,
    except_: Iterable[str] | None,
) -> list[str]:
    """Pick the actions to generate, in conventional order."""
    available = tuple(available)
    only = _action_names(only, "only")
    except_ = _action_names(except_, "except")
    if only is not None and except_ is not None:
        raise ConfigurationError("Use either 'only' or 'except', not both")

    if only is not None:
        chosen = set(only)
        unknown = chosen.difference(available)
        if unknown:
            raise ConfigurationError(
                f"Unknown resource action(s): {', '.join(sorted(unknown))}"
            )
    else:
        chosen = set(defaults)
        if except_ is not None:
            chosen.difference_update(except_)

    return [action for action in available if action in chosen]


def _action_names(value: Iterable[str] | None, option: str) -> list[str] | None:
    if value is None:
        return None
    if isinstance(value, str):
        raise ConfigurationError(f"'{option}' must be a list of action names, got {value!r}")
    return list(value)


def _join(*parts: str) -> str:
    return "/" + "/".join(part.strip("/") for part in parts if part.strip("/"))


def _qualify(resource: str, module: str | None) -> str:
    return f"{module}.{resource}" if module else resource


class _Definitions(list):
    """Collects definitions, giving each path alias to the first route for that path."""

    def __init__(self, resource: str, alias_prefix: str):
        super().__init__()
        self.resource = resource
        self.alias_prefix = alias_prefix
        self.named_paths: set[str] = set()

    def add(self, method: str, pattern: str, action: str, alias: str, path_alias: bool = False):
        if path_alias:
            if pattern in self.named_paths:
                alias = None
            else:
                self.named_paths.add(pattern)
        if alias:
            alias = self.alias_prefix + alias
        self.append(RouteDefinition(method, pattern, Handler(self.resource, action), alias))


def expand_resources(
    name: str,
    *,
    path: str | None = None,
    controller: str | None = None,
    only: Iterable[str] | None = None,
    except_: Iterable[str] | None = None,
    members: Iterable[str] = (),
    collection: Iterable[str] = (),
    singular: str | None = None,
    path_prefix: str = "",
    module: str | None = None,
    alias_prefix: str = "",
) -> list[RouteDefinition]:
    """Expand a plural resource into its conventional routes.

    Member and collection extensions come first, followed by ``index``,
    ``create``, ``new``, ``edit``, ``show``, ``update`` (PATCH then PUT) and
    ``destroy``. Only the first route for a given path carries that path's
    alias.

    Args:
        name: The plural resource name, e.g. "asciicasts"
        path: The URL segment, defaults to name (e.g. "a")
        controller: Handler resource, defaults to name
        only: Generate only these actions
        except_: Generate the defaults minus these actions
        members: GET actions nested under the instance path (``/a/:id/raw``)
        collection: GET actions nested under the collection path
        singular: Singular name used in aliases, derived from name if omitted
        path_prefix: Prefix from an enclosing namespace
        module: Handler namespace from an enclosing namespace
        alias_prefix: Alias prefix from an enclosing namespace

    Examples:
        >>> [str(d.handler) for d in expand_resources("asciicasts", only=["index", "show"])]
        ["asciicasts.index", "asciicasts.show"]
    """
    singular = singular or singularize(name)
    collection_path = _join(path_prefix, path if path is not None else name)
    member_path = _join(collection_path, ":id")
    definitions = _Definitions(_qualify(controller or name, module), alias_prefix)

    for action in _action_names(members, "members"):
        definitions.add("GET", _join(member_path, action), action, f"{action}_{singular}")

    for action in _action_names(collection, "collection"):
        definitions.add("GET", _join(collection_path, action), action, f"{action}_{name}")

    for action in select_actions(PLURAL_ACTIONS, DEFAULT_PLURAL_ACTIONS, only, except_):
        match action:
            case "index":
                definitions.add("GET", collection_path, action, name, path_alias=True)
            case "create":
                definitions.add("POST", collection_path, action, name, path_alias=True)
            case "new":
                definitions.add("GET", _join(collection_path, "new"), action, f"new_{singular}")
            case "edit":
                definitions.add("GET", _join(member_path, "edit"), action, f"edit_{singular}")
            case "show":
                definitions.add("GET", member_path, action, singular, path_alias=True)
            case "update":
                definitions.add("PATCH", member_path, action, singular, path_alias=True)
                definitions.add("PUT", member_path, action, singular, path_alias=True)
            case "destroy":
                definitions.add("DELETE", member_path, action, singular, path_alias=True)

    return list(definitions)


def expand_resource(
    name: str,
    *,
    path: str | None = None,
    controller: str | None = None,
    only: Iterable[str] | None = None,
    except_: Iterable[str] | None = None,
    members: Iterable[str] = (),
    path_prefix: str = "",
    module: str | None = None,
    alias_prefix: str = "",
) -> list[RouteDefinition]:
    """Expand a singular resource (one instance, no ``:id``) into its routes.

    A singular resource is served by the plural controller, so ``user``
    routes to ``users``.

    Examples:
        >>> [(d.method, d.pattern, d.alias) for d in expand_resource("user", only=["show"])]
        [("GET", "/user", "user")]
    """
    resource_path = _join(path_prefix, path if path is not None else name)
    definitions = _Definitions(_qualify(controller or pluralize(name), module), alias_prefix)

    for action in _action_names(members, "members"):
        definitions.add("GET", _join(resource_path, action), action, f"{action}_{name}")

    for action in select_actions(SINGULAR_ACTIONS, DEFAULT_SINGULAR_ACTIONS, only, except_):
        match action:
            case "create":
                definitions.add("POST", resource_path, action, name, path_alias=True)
            case "new":
                definitions.add("GET", _join(resource_path, "new"), action, f"new_{name}")
            case "edit":
                definitions.add("GET", _join(resource_path, "edit"), action, f"edit_{name}")
            case "show":
                definitions.add("GET", resource_path, action, name, path_alias=True)
            case "update":
                definitions.add("PATCH", resource_path, action, name, path_alias=True)
                definitions.add("PUT", resource_path, action, name, path_alias=True)
            case "destroy":
                definitions.add("DELETE", resource_path, action, name, path_alias=True)

    return list(definitions)
