import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from castroutes.app import App
from castroutes.controllers import ControllerRegistry
from castroutes.routes import build_route_table
from castroutes.routing import RouteTable
from tests.sample_controllers import (
    AsciicastsController,
    PagesController,
    broken_action,
    show_profile,
    unsupported_action,
)


@pytest.fixture
def route_table() -> RouteTable:
    return build_route_table()


@pytest.fixture
def controllers() -> ControllerRegistry:
    registry = ControllerRegistry()
    registry.add_controller("asciicasts", AsciicastsController())
    registry.add_controller("pages", PagesController())
    registry.register("users#show", show_profile)
    registry.register("sessions#failure", broken_action)
    registry.register("sessions#new", unsupported_action)
    return registry


@pytest_asyncio.fixture
async def app(route_table: RouteTable, controllers: ControllerRegistry) -> App:
    return App(route_table, controllers=controllers, dev_mode=True)


@pytest_asyncio.fixture
async def client(app: App) -> AsyncClient:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as c:
        yield c
