import logging
from collections.abc import Callable
from typing import Any

from waypoint.exceptions import InvalidRoute
from waypoint.methods import ALLOWED_HTTP_METHODS, MethodSpec, normalize_method, validate_methods
from waypoint.routing.handlers import ContainerResolver, HandlerResolver, normalize_handler
from waypoint.routing.patterns import clean_uri, compile_pattern, join_prefix, match_pattern
from waypoint.routing.route import Route, RouteMatch

logger = logging.getLogger(__name__)

type Handler = Callable[..., Any] | str


class RouteRegistrar:
    """Registration API bound to a group prefix.

    Every route, middleware entry and nested group registered through a
    registrar has the registrar's prefix baked into its pattern. The prefix is
    held by the registrar itself, so leaving a group never needs to restore any
    shared state: the outer registrar still carries the outer prefix.

    Examples:
        ```python
        router = Router()

        def admin(group: RouteRegistrar):
            group.get("/users", list_users)  # admin/users

            def reports(inner: RouteRegistrar):
                inner.get("/daily", daily)  # admin/reports/daily

            group.group("/reports", reports)
            group.get("/settings", settings)  # admin/settings

        router.group("/admin", admin)
        ```
    """

    def __init__(self, router: "Router", prefix: str = ""):
        self._router = router
        self.prefix = prefix.strip().strip("/")

    @property
    def router(self) -> "Router":
        return self._router

    def add_route(self, methods: MethodSpec, pattern: str, handler: Handler) -> Route:
        """Adds a route for one or more HTTP methods.

        Args:
            methods: A method name, ``"*"`` for every supported method, or a
                list of method names. Case-insensitive.
            pattern: The URI pattern. Leading and trailing slashes are ignored.
            handler: A callable, or a ``"Class@method"`` reference resolved
                when the route is dispatched.

        Returns:
            The Route that was registered. It is shared by all of the methods.

        Raises:
            InvalidRoute: On an unknown method, a malformed handler, an invalid
                pattern or a pattern already registered for one of the methods.
        """
        return self._router._add(methods, join_prefix(self.prefix, pattern), handler)

    def any(self, pattern: str, handler: Handler) -> Route:
        return self.add_route("*", pattern, handler)

    def get(self, pattern: str, handler: Handler) -> Route:
        return self.add_route("GET", pattern, handler)

    def head(self, pattern: str, handler: Handler) -> Route:
        return self.add_route("HEAD", pattern, handler)

    def post(self, pattern: str, handler: Handler) -> Route:
        return self.add_route("POST", pattern, handler)

    def put(self, pattern: str, handler: Handler) -> Route:
        return self.add_route("PUT", pattern, handler)

    def patch(self, pattern: str, handler: Handler) -> Route:
        return self.add_route("PATCH", pattern, handler)

    def delete(self, pattern: str, handler: Handler) -> Route:
        return self.add_route("DELETE", pattern, handler)

    def options(self, pattern: str, handler: Handler) -> Route:
        return self.add_route("OPTIONS", pattern, handler)

    def before(self, methods: MethodSpec, pattern: str, handler: Handler) -> Route:
        """Adds a before-route middleware entry.

        Unlike routes, the same method and pattern may be registered any number
        of times. Every entry runs, in registration order, before the route
        is dispatched.
        """
        return self._router._add_before(methods, join_prefix(self.prefix, pattern), handler)

    def group(self, prefix: str, callback: Callable[["RouteRegistrar"], Any]) -> None:
        """Calls ``callback`` with a registrar scoped to ``prefix`` under this one."""
        callback(RouteRegistrar(self._router, join_prefix(self.prefix, prefix)))

    def set_route_not_found_handler(self, handler: Handler) -> None:
        self._router._set_route_not_found_handler(handler)


class Router(RouteRegistrar):
    """Table of (HTTP method, URI pattern) to handler bindings.

    Routes are kept per HTTP method, keyed by their full pattern, in
    registration order. Matching compiles each pattern on demand and returns
    every route that matches; picking the first one is left to the
    ``Dispatcher``.

    Examples:
        ```python
        router = Router()
        router.get("/users/{id}", show_user)
        router.add_route(["PUT", "PATCH"], "/users/(\\d+)", update_user)
        router.before("*", "/admin/.*", require_login)

        [found] = router.match("GET", "/users/42?tab=posts")
        found.params  # ("42",)
        ```

    Args:
        resolver: Resolver for ``"Class@method"`` handlers. Defaults to a
            ``ContainerResolver`` with a fresh bevy container.
    """

    def __init__(self, resolver: HandlerResolver | None = None):
        super().__init__(self)
        self.resolver = resolver or ContainerResolver()
        self._routes: dict[str, dict[str, Route]] = {}
        self._before_routes: dict[str, dict[str, list[Route]]] = {}
        self._route_not_found_handler: Callable[..., Any] | None = None

    @property
    def routes(self) -> list[tuple[str, Route]]:
        """All registered routes as (method, route) pairs, in registration order per method."""
        return [
            (method, route)
            for method, table in self._routes.items()
            for route in table.values()
        ]

    @property
    def before_routes(self) -> list[tuple[str, Route]]:
        """All before-route middleware entries as (method, route) pairs."""
        return [
            (method, route)
            for method, table in self._before_routes.items()
            for entries in table.values()
            for route in entries
        ]

    def get_route_not_found_handler(self) -> Callable[..., Any] | None:
        return self._route_not_found_handler

    def match(self, http_method: str, uri: str) -> list[RouteMatch]:
        """Finds every route registered for the method whose pattern matches the URI.

        The query string, fragment and surrounding slashes of the URI are
        ignored. Unknown methods and methods without routes give an empty list.

        Returns:
            The matches in registration order, each with its captured params.
        """
        method = normalize_method(http_method)
        if method not in ALLOWED_HTTP_METHODS or method not in self._routes:
            return []

        clean = clean_uri(uri)
        matches = []
        for pattern, route in self._routes[method].items():
            params = match_pattern(pattern, clean)
            if params is not None:
                matches.append(RouteMatch(route, params))

        return matches

    def get_before_middleware(self, http_method: str, uri: str) -> list[RouteMatch]:
        """Finds every before-route middleware entry matching the method and URI.

        Entries registered more than once for the same pattern are all
        returned, in registration order.
        """
        method = normalize_method(http_method)
        if method not in self._before_routes:
            return []

        clean = clean_uri(uri)
        matches = []
        for pattern, entries in self._before_routes[method].items():
            params = match_pattern(pattern, clean)
            if params is None:
                continue
            matches.extend(RouteMatch(route, params) for route in entries)

        return matches

    def _add(self, methods: MethodSpec, full_pattern: str, handler: Handler) -> Route:
        normalized = list(dict.fromkeys(validate_methods(methods, "route")))
        compile_pattern(full_pattern)

        for method in normalized:
            if full_pattern in self._routes.get(method, {}):
                raise InvalidRoute(f"Route already defined: '{method}' '{full_pattern}'.")

        route = Route(full_pattern, normalize_handler(handler, self.resolver))
        for method in normalized:
            self._routes.setdefault(method, {})[full_pattern] = route

        logger.debug(f"Registered route {', '.join(normalized)} '{full_pattern}'")
        return route

    def _add_before(self, methods: MethodSpec, full_pattern: str, handler: Handler) -> Route:
        normalized = list(dict.fromkeys(validate_methods(methods, "before")))
        compile_pattern(full_pattern)

        route = Route(full_pattern, normalize_handler(handler, self.resolver))
        for method in normalized:
            self._before_routes.setdefault(method, {}).setdefault(full_pattern, []).append(route)

        logger.debug(f"Registered before middleware {', '.join(normalized)} '{full_pattern}'")
        return route

    def _set_route_not_found_handler(self, handler: Handler) -> None:
        self._route_not_found_handler = normalize_handler(handler, self.resolver)
