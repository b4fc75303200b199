import pytest

from castroutes.config import SITE_ROUTES_FILE
from castroutes.exceptions import MissingParameter
from castroutes.routes import STATIC_PAGES, build_route_table, draw, load_route_table
from castroutes.routing import Handler, NotFound, RouteTable, RouteTableBuilder, build_url

SITE_ROUTES = [
    ("GET", "/browse", "asciicasts.index", "browse"),
    ("GET", "/browse/:category", "asciicasts.index", "category"),
    ("GET", "/a/:id/raw", "asciicasts.raw", "raw_asciicast"),
    ("GET", "/a/:id/example", "asciicasts.example", "example_asciicast"),
    ("GET", "/a", "asciicasts.index", "asciicasts"),
    ("POST", "/a", "asciicasts.create", None),
    ("GET", "/a/:id", "asciicasts.show", "asciicast"),
    ("PATCH", "/a/:id", "asciicasts.update", None),
    ("PUT", "/a/:id", "asciicasts.update", None),
    ("DELETE", "/a/:id", "asciicasts.destroy", None),
    ("GET", "/~:nickname", "users.show", "profile"),
    ("GET", "/docs", "docs.show", "docs_index"),
    ("GET", "/docs/:page", "docs.show", "docs"),
    ("GET", "/auth/browser_id/callback", "sessions.create", None),
    ("GET", "/auth/:provider/callback", "account_merges.create", None),
    ("GET", "/auth/failure", "sessions.failure", None),
    ("GET", "/login", "sessions.new", None),
    ("GET", "/logout", "sessions.destroy", None),
    ("GET", "/connect/:user_token", "user_tokens.create", None),
    ("GET", "/user/edit", "users.edit", "edit_user"),
    ("GET", "/user", "users.show", "user"),
    ("PATCH", "/user", "users.update", None),
    ("PUT", "/user", "users.update", None),
    ("DELETE", "/user", "users.destroy", None),
    ("GET", "/api/asciicasts", "api.asciicasts.index", "api_asciicasts"),
    ("POST", "/api/asciicasts", "api.asciicasts.create", None),
    ("GET", "/api/asciicasts/:id", "api.asciicasts.show", "api_asciicast"),
    ("PATCH", "/api/asciicasts/:id", "api.asciicasts.update", None),
    ("PUT", "/api/asciicasts/:id", "api.asciicasts.update", None),
    ("DELETE", "/api/asciicasts/:id", "api.asciicasts.destroy", None),
    ("GET", "/", "home.show", "root"),
    ("GET", "/about", "pages.show", "about"),
    ("GET", "/privacy", "pages.show", "privacy"),
    ("GET", "/tos", "pages.show", "tos"),
    ("GET", "/contributing", "pages.show", "contributing"),
]


def _summary(table: RouteTable):
    return [(route.method, route.pattern, str(route.handler), route.alias) for route in table]


def _full_summary(table: RouteTable):
    return [
        (route.method, route.pattern, route.handler, route.alias, dict(route.defaults))
        for route in table
    ]


@pytest.fixture(scope="module")
def table():
    return build_route_table()


def test_site_routes_in_declaration_order(table):
    assert _summary(table) == SITE_ROUTES


def test_site_table_is_frozen(table):
    assert table.frozen


def test_draw_returns_the_table():
    table = RouteTable()
    assert draw(table) is table
    assert not table.frozen


def test_yaml_declarations_match_draw(table):
    yaml_table = RouteTableBuilder.from_file(SITE_ROUTES_FILE).build()
    assert _full_summary(yaml_table) == _full_summary(table)


def test_load_route_table_without_routes_uses_site_table(table):
    assert _full_summary(load_route_table({})) == _full_summary(table)


def test_load_route_table_from_config():
    config = {"routes": [{"get": "/ping", "to": "health#ping", "as": "ping"}]}
    loaded = load_route_table(config)
    assert loaded.frozen
    assert _summary(loaded) == [("GET", "/ping", "health.ping", "ping")]


@pytest.mark.parametrize(
    "method,path,handler,params",
    [
        ("GET", "/browse", "asciicasts.index", {}),
        ("GET", "/browse/comedy", "asciicasts.index", {"category": "comedy"}),
        ("GET", "/a", "asciicasts.index", {}),
        ("POST", "/a", "asciicasts.create", {}),
        ("GET", "/a/42", "asciicasts.show", {"id": "42"}),
        ("GET", "/a/42/raw", "asciicasts.raw", {"id": "42"}),
        ("GET", "/a/42/example", "asciicasts.example", {"id": "42"}),
        ("PATCH", "/a/42", "asciicasts.update", {"id": "42"}),
        ("PUT", "/a/42", "asciicasts.update", {"id": "42"}),
        ("DELETE", "/a/42", "asciicasts.destroy", {"id": "42"}),
        ("GET", "/~bob", "users.show", {"nickname": "bob"}),
        ("GET", "/docs", "docs.show", {"page": "getting-started"}),
        ("GET", "/docs/faq", "docs.show", {"page": "faq"}),
        ("GET", "/auth/browser_id/callback", "sessions.create", {}),
        ("GET", "/auth/github/callback", "account_merges.create", {"provider": "github"}),
        ("GET", "/auth/failure", "sessions.failure", {}),
        ("GET", "/login", "sessions.new", {}),
        ("GET", "/logout", "sessions.destroy", {}),
        ("GET", "/connect/abc123", "user_tokens.create", {"user_token": "abc123"}),
        ("GET", "/user", "users.show", {}),
        ("GET", "/user/edit", "users.edit", {}),
        ("PUT", "/user", "users.update", {}),
        ("DELETE", "/user", "users.destroy", {}),
        ("GET", "/api/asciicasts", "api.asciicasts.index", {}),
        ("GET", "/api/asciicasts/7", "api.asciicasts.show", {"id": "7"}),
        ("POST", "/api/asciicasts", "api.asciicasts.create", {}),
        ("GET", "/", "home.show", {}),
        ("GET", "/about", "pages.show", {"page": "about"}),
        ("GET", "/privacy", "pages.show", {"page": "privacy"}),
        ("GET", "/tos", "pages.show", {"page": "tos"}),
        ("GET", "/contributing", "pages.show", {"page": "contributing"}),
    ],
)
def test_resolve(table, method, path, handler, params):
    match = table.resolve(method, path)
    assert str(match.handler) == handler
    assert match.params == params


@pytest.mark.parametrize(
    "method,path",
    [
        ("GET", "/nonexistent"),
        ("GET", "/a/42/raw/extra"),
        ("POST", "/user"),
        ("GET", "/user/new"),
        ("GET", "/api/asciicasts/7/raw"),
        ("DELETE", "/about"),
    ],
)
def test_resolve_not_found(table, method, path):
    assert table.resolve(method, path) is NotFound


def test_literal_callback_precedes_parameterized_callback(table):
    match = table.resolve("GET", "/auth/browser_id/callback")
    assert match.handler == Handler("sessions", "create")
    assert "provider" not in match.params


def test_static_pages_share_one_handler(table):
    for page in STATIC_PAGES:
        assert table.url_for(page) == f"/{page}"
        assert table.resolve("GET", f"/{page}").params == {"page": page}


@pytest.mark.parametrize(
    "alias,params,expected",
    [
        ("about", {}, "/about"),
        ("browse", {}, "/browse"),
        ("category", {"category": "comedy"}, "/browse/comedy"),
        ("profile", {"nickname": "bob"}, "/~bob"),
        ("docs_index", {}, "/docs"),
        ("docs", {"page": "faq"}, "/docs/faq"),
        ("raw_asciicast", {"id": 42}, "/a/42/raw"),
        ("example_asciicast", {"id": 42}, "/a/42/example"),
        ("user", {}, "/user"),
        ("edit_user", {}, "/user/edit"),
        ("api_asciicast", {"id": 7}, "/api/asciicasts/7"),
        ("root", {}, "/"),
    ],
)
def test_url_for(table, alias, params, expected):
    assert table.url_for(alias, params) == expected


def test_url_for_missing_category(table):
    with pytest.raises(MissingParameter):
        table.url_for("category")


def test_every_route_resolves_from_its_own_url(table):
    for route in table:
        path = build_url(route.compiled, {name: "x1" for name in route.compiled.param_names})
        match = table.resolve(route.method, path)
        assert match, f"{route.method} {path} did not resolve"
        assert (match.route.method, match.route.pattern) == (route.method, route.pattern)
