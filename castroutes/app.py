import inspect
import json
import logging
import os
import traceback
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from bevy.containers import Container
from bevy.registries import Registry
from starlette.requests import Request
from starlette.responses import JSONResponse, PlainTextResponse, Response
from starlette.types import Receive, Scope, Send

from castroutes.config import DEFAULT_CONFIG_FILE, CastRoutesConfig, load_config
from castroutes.controllers import ControllerRegistry
from castroutes.exceptions import (
    CastRoutesException,
    HTTPMethodNotAllowedException,
    HTTPNotFoundException,
    HTTPNotImplementedException,
    RoutingError,
)
from castroutes.routes import load_route_table
from castroutes.routing import RouteMatch, RouteTable

logger = logging.getLogger(__name__)


class App:
    """ASGI application that dispatches requests through a RouteTable.

    Each request is resolved against the table; the matched handler's
    controller action is called through a Bevy container branch holding the
    ``Request``, the ``RouteMatch``, the ``RouteTable`` and the ``App``, with
    the route parameters passed as keyword arguments.

    Examples:
        ```python
        from bevy import Inject, injectable
        from castroutes.app import App
        from castroutes.controllers import ControllerRegistry

        controllers = ControllerRegistry()

        @controllers.action("users#show")
        @injectable
        async def show_profile(nickname: str, app: Inject[App]):
            return {"nickname": nickname, "url": app.url_for("profile", nickname=nickname)}

        app = App(controllers=controllers)
        ```
    """

    def __init__(
        self,
        route_table: RouteTable | None = None,
        *,
        controllers: ControllerRegistry | None = None,
        config: str | Path | None = None,
        dev_mode: bool | None = None,
    ):
        """Initialize a new application.

        Args:
            route_table: The route table to serve. If omitted, the config's
                ``routes`` section is used, or the built-in site routes.
            controllers: Controller registry. If omitted, it is built from the
                config's ``controllers`` section.
            config: Path to a YAML configuration file (usually castroutes.config.yaml)
            dev_mode: Development mode: url_for errors raise and 500 responses
                include details. Overrides the config's ``dev_mode``.
        """
        self._config: CastRoutesConfig = load_config(config) if config else {}
        self._dev_mode = dev_mode if dev_mode is not None else self._config.get("dev_mode", False)
        self._route_table = route_table if route_table is not None else load_route_table(self._config)
        self._controllers = (
            controllers
            if controllers is not None
            else ControllerRegistry.from_config(self._config.get("controllers", {}))
        )
        self._registry = Registry()
        self._container = self._registry.create_container()

    @property
    def dev_mode(self) -> bool:
        return self._dev_mode

    @property
    def route_table(self) -> RouteTable:
        return self._route_table

    @property
    def controllers(self) -> ControllerRegistry:
        return self._controllers

    def url_for(
        self,
        alias: str,
        params: Mapping[str, Any] | None = None,
        /,
        *,
        fallback: str = "#",
        **kwargs,
    ) -> str:
        """Builds a path for an aliased route, for links rendered during a request.

        In development mode a bad alias or missing parameter raises. In
        production the error is logged and ``fallback`` is returned so a
        broken link does not fail the whole page.
        """
        try:
            return self._route_table.url_for(alias, params, **kwargs)
        except RoutingError:
            if self._dev_mode:
                raise

            logger.exception(f"Could not build URL for route alias '{alias}'")
            return fallback

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        match scope["type"]:
            case "lifespan":
                await self.handle_lifespan(scope, receive, send)
            case "http":
                await self._handle_request(scope, receive, send)
            case _:
                logger.warning(f"Unsupported ASGI scope type: {scope['type']}")

    async def handle_lifespan(self, scope: Scope, receive: Receive, send: Send):
        while True:
            event = await receive()
            match event:
                case {"type": "lifespan.startup"}:
                    self._route_table.freeze()
                    logger.info(f"Serving {len(self._route_table)} routes")
                    await send({"type": "lifespan.startup.complete"})

                case {"type": "lifespan.shutdown"}:
                    logger.debug("Lifespan shutdown event")
                    await send({"type": "lifespan.shutdown.complete"})
                    return

    async def _handle_request(self, scope: Scope, receive: Receive, send: Send):
        request = Request(scope, receive)
        try:
            response = await self._dispatch(request)
        except Exception as error:
            response = self._error_response(request, error)

        await response(scope, receive, send)

    async def _dispatch(self, request: Request) -> Response:
        method = request.method
        path = self._request_path(request)
        route_match = self._route_table.resolve(method, path)
        if not route_match:
            allowed = self._route_table.allowed_methods(path)
            if allowed:
                raise HTTPMethodNotAllowedException(
                    f"Method {method} not allowed for {path}",
                    allowed_methods=sorted(allowed),
                )
            raise HTTPNotFoundException(f"No route found for {method} {path}")

        logger.debug(f"{method} {path} -> {route_match.handler} {route_match.params}")
        action = self._controllers.get(route_match.handler)
        if action is None:
            raise HTTPNotImplementedException(f"No controller action registered for {route_match.handler}")

        with self._container.branch() as container:
            container.add(Request, request)
            container.add(RouteMatch, route_match)
            container.add(RouteTable, self._route_table)
            container.add(App, self)
            container.add(Container, container)

            result = container.call(action, **self._action_arguments(action, route_match.params))
            if inspect.isawaitable(result):
                result = await result

        return self._to_response(result)

    @staticmethod
    def _request_path(request: Request) -> str:
        """The still-encoded request path, so "%2F" inside a value is not a separator."""
        raw_path = request.scope.get("raw_path")
        if not raw_path:
            return request.url.path

        return raw_path.decode("latin-1").split("?", 1)[0]

    @staticmethod
    def _action_arguments(action, params: dict[str, Any]) -> dict[str, Any]:
        """Keeps only the route parameters the action can accept."""
        try:
            signature = inspect.signature(action)
        except (TypeError, ValueError):
            return params

        parameters = signature.parameters.values()
        if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in parameters):
            return params

        return {name: value for name, value in params.items() if name in signature.parameters}

    @staticmethod
    def _to_response(result: Any) -> Response:
        match result:
            case Response():
                return result
            case str():
                return PlainTextResponse(result)
            case dict() | list():
                return JSONResponse(result)
            case None:
                return Response(status_code=204)
            case _:
                raise ValueError(f"Unsupported controller return type: {type(result)}")

    def _error_response(self, request: Request, error: Exception) -> Response:
        if isinstance(error, CastRoutesException):
            status_code = error.status_code
        else:
            status_code = 500

        if status_code >= 500 and not isinstance(error, HTTPNotImplementedException):
            logger.exception("Unhandled exception during request processing", exc_info=error)
        else:
            logger.info(f"Request resulted in {type(error).__name__}: {error}")

        headers = {}
        if isinstance(error, HTTPMethodNotAllowedException) and error.allowed_methods:
            headers["Allow"] = ", ".join(error.allowed_methods)

        title = _STATUS_TITLES.get(status_code, "Error")
        if status_code == 500:
            message = f"{type(error).__name__}: {error}" if self._dev_mode else "An unexpected error occurred."
        else:
            message = str(error)

        accept_header = request.headers.get("accept", "")
        if "application/json" in accept_header:
            error_data = {
                "status_code": status_code,
                "error": title.replace(" ", ""),
                "message": message,
                "path": request.url.path,
                "method": request.method,
            }
            if isinstance(error, HTTPMethodNotAllowedException):
                error_data["allowed_methods"] = error.allowed_methods
            if status_code == 500 and self._dev_mode:
                error_data["traceback"] = traceback.format_exception(error)
            return Response(
                json.dumps(error_data),
                status_code=status_code,
                headers=headers,
                media_type="application/json",
            )

        return PlainTextResponse(f"{status_code} {title}: {message}", status_code=status_code, headers=headers)


_STATUS_TITLES = {
    404: "Not Found",
    405: "Method Not Allowed",
    500: "Internal Server Error",
    501: "Not Implemented",
}


def create_app() -> App:
    """Application factory for ASGI servers.

    Reads the config path from ``CASTROUTES_CONFIG`` (default
    ``castroutes.config.yaml``) and development mode from ``CASTROUTES_DEV``.
    """
    config_path = os.getenv("CASTROUTES_CONFIG", DEFAULT_CONFIG_FILE)
    dev_mode = os.getenv("CASTROUTES_DEV", "").lower() in ("1", "true", "yes", "on") or None
    return App(config=config_path, dev_mode=dev_mode)
