import importlib
import logging
import os
import re
from pathlib import Path
from typing import Any, TypedDict

import yaml

from castroutes.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Default config file name
DEFAULT_CONFIG_FILE = "castroutes.config.yaml"

# Route declarations for the site, equivalent to castroutes.routes.draw
SITE_ROUTES_FILE = Path(__file__).parent / "data" / "routes.yaml"

ROUTE_VERBS = ("get", "post", "put", "patch", "delete")
ENTRY_KINDS = (*ROUTE_VERBS, "root", "resources", "resource", "namespace")
RESOURCE_LIST_OPTIONS = ("only", "except", "members", "collection")


class RouteConfig(TypedDict, total=False):
    get: str
    post: str
    put: str
    patch: str
    delete: str
    to: str
    defaults: dict[str, Any]
    root: str
    resources: str
    resource: str
    namespace: str
    path: str
    controller: str
    only: list[str]
    members: list[str]
    collection: list[str]
    singular: str
    routes: list["RouteConfig"]


class CastRoutesConfig(TypedDict, total=False):
    dev_mode: bool
    routes: list[RouteConfig]
    controllers: dict[str, str]


class RouteConfigError(ConfigurationError):
    """Raised when a configuration file cannot be loaded or is malformed."""


def import_from_string(import_str: str) -> Any:
    """Import a class, function, or variable from a module by string.

    Args:
        import_str: String in the format "module.path:symbol". The symbol may
            be a dotted attribute path.

    Returns:
        The imported object.

    Raises:
        RouteConfigError: If the string is malformed or the import fails.

    Examples:
        Import a controller module for the asciicasts resource:

        ```python
        controller = import_from_string("site.controllers:asciicasts")
        ```

        Import a nested attribute:

        ```python
        action = import_from_string("site.controllers:AsciicastsController.index")
        ```
    """
    if ":" not in import_str:
        raise RouteConfigError(
            f"Invalid import string format '{import_str}'. Expected 'module.path:symbol'."
        )

    module_path, object_path = import_str.split(":", 1)

    try:
        module = importlib.import_module(module_path)

        target = module
        for part in object_path.split("."):
            target = getattr(target, part)

        return target
    except (ImportError, AttributeError) as e:
        raise RouteConfigError(f"Failed to import '{import_str}': {str(e)}") from e


def load_raw_config(config_path: str | Path) -> dict[str, Any]:
    """
    Load a configuration file.

    A missing file is not an error, it loads as an empty configuration.

    Args:
        config_path: Path to the configuration file.

    Returns:
        Dictionary containing the configuration.

    Raises:
        RouteConfigError: If the configuration file could not be loaded.
    """
    try:
        config_path_obj = Path(config_path)
        if not config_path_obj.exists():
            logger.debug(f"No configuration file at {config_path_obj}, using defaults")
            return {}

        with open(config_path_obj) as f:
            config = yaml.safe_load(f)

        if config is None:  # Empty file
            config = {}

        if not isinstance(config, dict):
            raise RouteConfigError(
                f"Invalid configuration format in {config_path}. Expected a dictionary."
            )

        return config
    except Exception as e:
        if isinstance(e, RouteConfigError):
            raise
        raise RouteConfigError(
            f"Error loading configuration from {config_path}: {str(e)}"
        ) from e


def _substitute_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """
    Substitute environment variables in configuration values.

    Supports ${VAR_NAME} syntax.

    Raises:
        RouteConfigError: If a referenced environment variable is not set
    """
    env_pattern = re.compile(r"\$\{([^}]+)\}")

    def replace_env_var(match):
        env_var = match.group(1)
        env_value = os.getenv(env_var)

        if env_value is None:
            raise RouteConfigError(
                f"Required environment variable '{env_var}' is not set"
            )

        return env_value

    def substitute_value(value: Any) -> Any:
        if isinstance(value, str):
            return env_pattern.sub(replace_env_var, value)

        elif isinstance(value, dict):
            return {k: substitute_value(v) for k, v in value.items()}

        elif isinstance(value, list):
            return [substitute_value(item) for item in value]

        else:
            return value

    return substitute_value(config)


def _coerce_bool(value: Any, key: str) -> bool:
    match value:
        case bool():
            return value
        case str() if value.lower() in ("1", "true", "yes", "on"):
            return True
        case str() if value.lower() in ("0", "false", "no", "off", ""):
            return False
        case _:
            raise RouteConfigError(f"'{key}' must be a boolean, got {value!r}")


def validate_route_entries(entries: Any, location: str = "routes") -> None:
    """
    Check the shape of a ``routes`` list before anything is registered.

    Raises:
        RouteConfigError: If an entry is not a mapping or declares zero or
            several route kinds
    """
    if not isinstance(entries, list):
        raise RouteConfigError(f"'{location}' must be a list of route entries")

    for i, entry in enumerate(entries):
        if not isinstance(entry, dict):
            raise RouteConfigError(f"{location}[{i}] must be a dictionary")

        kinds = [kind for kind in ENTRY_KINDS if kind in entry]
        if len(kinds) != 1:
            raise RouteConfigError(
                f"{location}[{i}] must declare exactly one of: {', '.join(ENTRY_KINDS)}"
            )

        kind = kinds[0]
        if kind in ROUTE_VERBS and "to" not in entry:
            raise RouteConfigError(f"{location}[{i}] is missing required 'to' field")

        if kind in ("resources", "resource"):
            for option in RESOURCE_LIST_OPTIONS:
                value = entry.get(option)
                if option in entry and not (
                    isinstance(value, list) and all(isinstance(item, str) for item in value)
                ):
                    raise RouteConfigError(
                        f"{location}[{i}].{option} must be a list of action names, got {value!r}"
                    )

        if kind == "namespace":
            validate_route_entries(entry.get("routes", []), f"{location}[{i}].routes")


def load_config(config_path: str | Path) -> CastRoutesConfig:
    """
    Load and process a configuration file.

    Loads the raw configuration, substitutes environment variables and
    validates the known sections.

    Args:
        config_path: Path to the configuration file

    Returns:
        Processed configuration dictionary

    Raises:
        RouteConfigError: If the configuration is invalid
    """
    config = load_raw_config(config_path)
    config = _substitute_env_vars(config)

    if "dev_mode" in config:
        config["dev_mode"] = _coerce_bool(config["dev_mode"], "dev_mode")

    if "routes" in config:
        validate_route_entries(config["routes"])

    controllers = config.get("controllers", {})
    if not isinstance(controllers, dict) or not all(
        isinstance(value, str) for value in controllers.values()
    ):
        raise RouteConfigError(
            "'controllers' must map resource names to 'module.path:symbol' strings"
        )

    return config
