"""castroutes - the route table of an asciicast sharing site, served over ASGI."""

__version__ = "0.1.0"

from castroutes.routing import Handler, NotFound, RouteTable  # noqa: E402

__all__ = ["Handler", "NotFound", "RouteTable", "__version__"]
