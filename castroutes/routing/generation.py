"""URL generation utilities for castroutes.

Builds concrete paths from compiled route patterns, enabling reverse URL
generation for aliased routes.
"""

from collections.abc import Mapping
from typing import Any
from urllib.parse import quote, urlencode

from castroutes.exceptions import MissingParameter
from castroutes.routing.patterns import Param, PathPattern, compile_pattern


def build_url(
    pattern: PathPattern | str,
    params: Mapping[str, Any] | None = None,
    defaults: Mapping[str, Any] | None = None,
    *,
    alias: str | None = None,
) -> str:
    """Build a URL by substituting path parameters.

    Parameters that the pattern does not use are appended as a query string,
    unless they equal the route's static default for the same key.

    Args:
        pattern: The compiled pattern or the template string
        params: Parameter values
        defaults: The route's static defaults
        alias: The alias being generated, used in error messages

    Returns:
        A URL string with path parameters filled in

    Raises:
        MissingParameter: If a named segment has no value in params

    Examples:
        >>> build_url("/browse/:category", {"category": "comedy"})
        "/browse/comedy"

        >>> build_url("/about", {"page": "about"}, {"page": "about"})
        "/about"

        >>> build_url("/a/:id", {"id": 42, "t": 30})
        "/a/42?t=30"
    """
    if isinstance(pattern, str):
        pattern = compile_pattern(pattern)

    params = dict(params or {})
    defaults = defaults or {}
    result_parts = []

    for part in pattern.parts:
        if isinstance(part, Param):
            value = params.pop(part.name, None)
            if value is None or value == "":
                raise MissingParameter(part.name, pattern.source, alias)
            result_parts.append(quote(str(value), safe="/" if part.glob else ""))
        else:
            result_parts.append(part)

    extras = {
        key: value
        for key, value in params.items()
        if value is not None and not (key in defaults and defaults[key] == value)
    }

    url = "".join(result_parts)
    if extras:
        url += "?" + urlencode(sorted(extras.items()), doseq=True)

    return url
