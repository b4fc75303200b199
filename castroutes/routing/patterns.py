"""URL pattern compilation and matching for castroutes.

This module provides the path template support used by the route table:
- Literal paths ("/browse")
- Named segments (":category"), bound to one path segment
- Named segments after a literal prefix in the same segment ("~:nickname")
- A trailing glob ("*path") that binds the remainder of the path
"""

import re
from dataclasses import dataclass
from typing import Any
from urllib.parse import unquote

from castroutes.exceptions import ConfigurationError

_TOKEN = re.compile(r"([:*])([A-Za-z_][A-Za-z0-9_]*)?")
SEGMENT_PATTERN = r"[^/]+"
GLOB_PATTERN = r".+"


@dataclass(frozen=True, slots=True)
class Param:
    """A named placeholder in a path pattern."""

    name: str
    glob: bool = False


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A compiled path template.

    ``parts`` holds literal strings and ``Param`` placeholders in order, which
    is what URL generation walks. ``regex`` is what matching uses.
    """

    source: str
    parts: tuple["str | Param", ...]
    regex: re.Pattern[str]

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(part.name for part in self.parts if isinstance(part, Param))

    @property
    def is_static(self) -> bool:
        return not self.param_names

    def match(self, path: str) -> dict[str, Any] | None:
        """Match a request path, returning the bound parameters or None.

        ``path`` is the percent-encoded request path, so an encoded "/" stays
        inside its segment. Bound values are decoded.
        """
        match = self.regex.match(normalize_path(path))
        if match is None:
            return None

        return {name: unquote(value) for name, value in match.groupdict().items()}


def normalize_path(path: str) -> str:
    """Ensure a leading slash and drop a trailing one, keeping the root as "/".

    Examples:
        >>> normalize_path("browse/")
        "/browse"

        >>> normalize_path("")
        "/"
    """
    return "/" + path.strip("/")


def compile_pattern(pattern: str) -> PathPattern:
    """Compile a route path template.

    Args:
        pattern: The template, e.g. "/a/:id/raw" or "/~:nickname"

    Returns:
        The compiled PathPattern.

    Raises:
        ConfigurationError: If a placeholder has no name, a name is bound twice,
            or a glob is not the last token.

    Examples:
        >>> compile_pattern("/browse/:category").match("/browse/comedy")
        {"category": "comedy"}

        >>> compile_pattern("/~:nickname").match("/~bob")
        {"nickname": "bob"}
    """
    source = normalize_path(pattern)
    parts: list[str | Param] = []
    regex_parts: list[str] = []
    seen: set[str] = set()
    position = 0

    for token in _TOKEN.finditer(source):
        kind, name = token.groups()
        if not name:
            raise ConfigurationError(
                f"Invalid route pattern '{pattern}': '{kind}' must be followed by a parameter name"
            )

        if name in seen:
            raise ConfigurationError(
                f"Invalid route pattern '{pattern}': parameter '{name}' appears more than once"
            )
        seen.add(name)

        literal = source[position : token.start()]
        if literal:
            parts.append(literal)
            regex_parts.append(re.escape(literal))

        glob = kind == "*"
        if glob and token.end() != len(source):
            raise ConfigurationError(
                f"Invalid route pattern '{pattern}': glob '*{name}' must be the last segment"
            )

        parts.append(Param(name, glob=glob))
        regex_parts.append(f"(?P<{name}>{GLOB_PATTERN if glob else SEGMENT_PATTERN})")
        position = token.end()

    literal = source[position:]
    if literal:
        parts.append(literal)
        regex_parts.append(re.escape(literal))

    return PathPattern(
        source=source,
        parts=tuple(parts),
        regex=re.compile("^" + "".join(regex_parts) + "$"),
    )


def match_path(request_path: str, path_pattern: str) -> dict[str, Any] | None:
    """Performs path matching against an uncompiled pattern.

    Returns:
        A dict of path parameters if matched, else None.

    Examples:
        >>> match_path("/a/42/raw", "/a/:id/raw")
        {"id": "42"}

        >>> match_path("/a/42", "/a/:id/raw") is None
        True
    """
    return compile_pattern(path_pattern).match(request_path)
