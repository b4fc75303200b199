"""Route declarations for the asciicast sharing site.

Order matters: lookups take the first matching route, so literal paths are
declared before parameterized ones that could also match them.
"""

from castroutes.config import CastRoutesConfig
from castroutes.routing import RouteTable, RouteTableBuilder

STATIC_PAGES = ("about", "privacy", "tos", "contributing")


def draw(table: RouteTable) -> RouteTable:
    table.get("/browse", "asciicasts#index", alias="browse")
    table.get("/browse/:category", "asciicasts#index", alias="category")

    table.resources("asciicasts", path="a", members=["raw", "example"])

    table.get("/~:nickname", "users#show", alias="profile")

    table.get("/docs", "docs#show", defaults={"page": "getting-started"}, alias="docs_index")
    table.get("/docs/:page", "docs#show", alias="docs")

    table.get("/auth/browser_id/callback", "sessions#create")
    table.get("/auth/:provider/callback", "account_merges#create")
    table.get("/auth/failure", "sessions#failure")

    table.get("/login", "sessions#new")
    table.get("/logout", "sessions#destroy")

    table.get("/connect/:user_token", "user_tokens#create")

    table.resource("user", only=["show", "edit", "update", "destroy"])

    with table.namespace("api"):
        table.resources("asciicasts")

    table.root("home#show")

    for page in STATIC_PAGES:
        table.get(f"/{page}", "pages#show", defaults={"page": page}, alias=page)

    return table


def build_route_table() -> RouteTable:
    """Builds and freezes the site's route table."""
    table = draw(RouteTable())
    table.freeze()
    return table


def load_route_table(config: CastRoutesConfig) -> RouteTable:
    """Builds the table declared in a loaded config, or the site table when it declares none."""
    if "routes" in config:
        return RouteTableBuilder(config["routes"]).build()

    return build_route_table()
