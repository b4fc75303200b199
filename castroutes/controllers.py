"""Controller registry: maps route handlers to the callables that serve them."""

import logging
from collections.abc import Callable, Mapping
from typing import Any

from castroutes.config import import_from_string
from castroutes.exceptions import ConfigurationError
from castroutes.routing.route import Handler

logger = logging.getLogger(__name__)


class ControllerRegistry:
    """Looks up the action callable for a Handler.

    Actions can be registered one at a time, or a whole controller object
    can be attached to a resource, in which case ``Handler("asciicasts",
    "raw")`` is served by ``controller.raw``. Explicit registrations win over
    controller attributes.

    Examples:
        ```python
        controllers = ControllerRegistry()

        @controllers.action("pages#show")
        async def show_page(page: str):
            return f"page {page}"

        controllers.add_controller("asciicasts", AsciicastsController())
        ```
    """

    def __init__(self):
        self._actions: dict[Handler, Callable[..., Any]] = {}
        self._controllers: dict[str, Any] = {}

    @classmethod
    def from_config(cls, controllers: Mapping[str, str]) -> "ControllerRegistry":
        """Builds a registry from ``{resource: "module.path:symbol"}`` entries."""
        registry = cls()
        for resource, import_str in controllers.items():
            controller = import_from_string(import_str)
            if isinstance(controller, type):
                controller = controller()
            registry.add_controller(resource, controller)
        return registry

    def register(self, handler: Handler | str, action: Callable[..., Any]):
        handler = Handler.parse(handler)
        if not callable(action):
            raise ConfigurationError(f"Action for {handler} is not callable: {action!r}")

        if handler in self._actions:
            logger.warning(f"Replacing action registered for {handler}")
        self._actions[handler] = action

    def action(self, handler: Handler | str) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Decorator form of ``register``."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self.register(handler, func)
            return func

        return decorator

    def add_controller(self, resource: str, controller: Any):
        self._controllers[resource] = controller
        logger.debug(f"Attached controller {controller!r} to '{resource}'")

    def get(self, handler: Handler | str) -> Callable[..., Any] | None:
        handler = Handler.parse(handler)
        if handler in self._actions:
            return self._actions[handler]

        controller = self._controllers.get(handler.resource)
        if controller is None or handler.action.startswith("_"):
            return None

        action = getattr(controller, handler.action, None)
        return action if callable(action) else None

    def __contains__(self, handler: object) -> bool:
        if not isinstance(handler, (Handler, str)):
            return False
        return self.get(handler) is not None
