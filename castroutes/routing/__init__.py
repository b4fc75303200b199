"""Routing layer for castroutes - path patterns, resources, the route table."""

from castroutes.routing.builder import RouteTableBuilder
from castroutes.routing.generation import build_url
from castroutes.routing.patterns import PathPattern, compile_pattern, match_path
from castroutes.routing.resources import RouteDefinition, expand_resource, expand_resources
from castroutes.routing.route import Handler, NotFound, NotFoundType, Route, RouteMatch
from castroutes.routing.router import RouteTable

__all__ = [
    "Handler",
    "NotFound",
    "NotFoundType",
    "PathPattern",
    "Route",
    "RouteDefinition",
    "RouteMatch",
    "RouteTable",
    "RouteTableBuilder",
    "build_url",
    "compile_pattern",
    "expand_resource",
    "expand_resources",
    "match_path",
]
