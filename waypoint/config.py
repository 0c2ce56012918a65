import importlib
import logging
import os
import re
from pathlib import Path
from typing import Any, TypedDict

import yaml

from waypoint.exceptions import WaypointException
from waypoint.routing.handlers import HandlerResolver
from waypoint.routing.router import RouteRegistrar, Router

logger = logging.getLogger(__name__)

# Default route file name
DEFAULT_CONFIG_FILE = "waypoint.routes.yaml"

_ENV_VAR = re.compile(r"\$\{([^}]+)\}")


class RouteConfig(TypedDict, total=False):
    path: str
    methods: str | list[str]
    handler: str


class GroupConfig(TypedDict, total=False):
    prefix: str
    routes: list[RouteConfig]
    before: list[RouteConfig]
    groups: list["GroupConfig"]


class RoutesConfig(TypedDict, total=False):
    routes: list[RouteConfig]
    before: list[RouteConfig]
    groups: list[GroupConfig]
    not_found: str


class WaypointConfigError(WaypointException):
    """Raised when a route file cannot be loaded or applied."""


def import_from_string(import_str: str) -> Any:
    """Import a class, function, or variable from a module by string.

    Args:
        import_str: String in the format "module.path:symbol". The symbol may
            be a nested attribute ("module.path:Class.attribute").

    Returns:
        The imported object.

    Raises:
        WaypointConfigError: If the string is malformed or the import failed.

    Examples:
        ```python
        show_user = import_from_string("myapp.handlers:show_user")
        ```
    """
    if ":" not in import_str:
        raise WaypointConfigError(
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
        raise WaypointConfigError(f"Failed to import '{import_str}': {str(e)}") from e


def load_raw_config(config_path: str | Path) -> dict[str, Any]:
    """
    Load a route file.

    Args:
        config_path: Path to the YAML route file.

    Returns:
        Dictionary containing the route configuration. A missing or empty
        file gives an empty dictionary.

    Raises:
        WaypointConfigError: If the file could not be read or parsed.
    """
    try:
        config_path_obj = Path(config_path)
        if not config_path_obj.exists():
            logger.warning(f"Route file {config_path} does not exist.")
            return {}

        with open(config_path_obj) as f:
            config = yaml.safe_load(f)

        if config is None:  # Empty file
            config = {}

        if not isinstance(config, dict):
            raise WaypointConfigError(
                f"Invalid route file format in {config_path}. Expected a dictionary."
            )

        return config
    except Exception as e:
        if isinstance(e, WaypointConfigError):
            raise
        raise WaypointConfigError(
            f"Error loading routes from {config_path}: {str(e)}"
        ) from e


def _substitute_env_vars(config: dict[str, Any]) -> dict[str, Any]:
    """
    Substitute ${VAR_NAME} references in every string value of the config.

    Raises:
        WaypointConfigError: If a referenced environment variable is not set.
    """
    def replace_env_var(match: re.Match[str]) -> str:
        env_var = match.group(1)
        env_value = os.getenv(env_var)
        if env_value is None:
            raise WaypointConfigError(
                f"Required environment variable '{env_var}' is not set"
            )

        return env_value

    def substitute_value(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_VAR.sub(replace_env_var, value)

        elif isinstance(value, dict):
            return {k: substitute_value(v) for k, v in value.items()}

        elif isinstance(value, list):
            return [substitute_value(item) for item in value]

        else:
            return value

    return substitute_value(config)


def load_config(config_path: str | Path) -> RoutesConfig:
    """Loads a route file and substitutes environment variables."""
    return _substitute_env_vars(load_raw_config(config_path))


def resolve_handler(handler: Any, where: str) -> Any:
    """Turns the handler entry of a route file into something the router accepts.

    "module.path:symbol" entries are imported. "Class@method" entries are
    passed through for the router to resolve at dispatch time.
    """
    if not isinstance(handler, str) or not handler:
        raise WaypointConfigError(f"{where} is missing a 'handler'.")

    if ":" in handler:
        return import_from_string(handler)

    if "@" in handler:
        return handler

    raise WaypointConfigError(
        f"{where} has an invalid handler '{handler}'. Expected 'module.path:symbol' or 'Class@method'."
    )


def _methods_of(entry: dict[str, Any], default: str, where: str) -> str | list[str]:
    methods = entry.get("methods", default)
    if isinstance(methods, str):
        return methods

    if isinstance(methods, list) and all(isinstance(m, str) for m in methods):
        return methods

    raise WaypointConfigError(
        f"{where} has invalid methods {methods!r}. Expected a method name or a list of method names."
    )


def _apply_entries(registrar: RouteRegistrar, config: RoutesConfig | GroupConfig, where: str) -> None:
    for i, route in enumerate(config.get("routes") or []):
        route_where = f"{where} route {i}"
        if not isinstance(route, dict) or "path" not in route:
            raise WaypointConfigError(f"{route_where} must be a dictionary with a 'path'.")

        registrar.add_route(
            _methods_of(route, "GET", route_where),
            str(route["path"]),
            resolve_handler(route.get("handler"), route_where),
        )

    for i, entry in enumerate(config.get("before") or []):
        entry_where = f"{where} before {i}"
        if not isinstance(entry, dict) or "path" not in entry:
            raise WaypointConfigError(f"{entry_where} must be a dictionary with a 'path'.")

        registrar.before(
            _methods_of(entry, "*", entry_where),
            str(entry["path"]),
            resolve_handler(entry.get("handler"), entry_where),
        )

    for i, group in enumerate(config.get("groups") or []):
        group_where = f"{where} group {i}"
        if not isinstance(group, dict) or not isinstance(group.get("prefix"), str):
            raise WaypointConfigError(f"{group_where} must be a dictionary with a 'prefix' string.")

        registrar.group(
            group["prefix"],
            lambda inner, group=group, group_where=group_where: _apply_entries(
                inner, group, group_where
            ),
        )


def build_router(config: RoutesConfig, router: Router | None = None) -> Router:
    """Registers the routes, middleware, groups and not-found handler of a config.

    Args:
        config: A route configuration, usually from ``load_config``.
        router: Router to register into. A new one is created when not given.

    Returns:
        The router the configuration was applied to.

    Raises:
        WaypointConfigError: If an entry is malformed or a handler can't be
            imported.
        InvalidRoute: If the router rejects a registration.
    """
    router = router or Router()
    _apply_entries(router, config, "routes file")

    if not_found := config.get("not_found"):
        router.set_route_not_found_handler(resolve_handler(not_found, "not_found"))

    logger.debug(f"Built router with {len(router.routes)} routes and {len(router.before_routes)} before entries")
    return router


def load_router(
    config_path: str | Path = DEFAULT_CONFIG_FILE, resolver: HandlerResolver | None = None
) -> Router:
    """Loads a YAML route file into a new router.

    Examples:
        ```yaml
        # waypoint.routes.yaml
        routes:
          - path: /users/{id}
            handler: myapp.handlers:show_user
          - path: /albums/{year}?
            methods: [GET, HEAD]
            handler: myapp.controllers.AlbumController@show
        groups:
          - prefix: /admin
            before:
              - path: .*
                handler: myapp.middleware:require_login
            routes:
              - path: /dashboard
                handler: myapp.handlers:dashboard
        not_found: myapp.handlers:not_found
        ```

        ```python
        router = load_router("waypoint.routes.yaml")
        Dispatcher(router).dispatch("GET", "/users/42")
        ```
    """
    return build_router(load_config(config_path), Router(resolver))
