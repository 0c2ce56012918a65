"""Request dispatch for Waypoint.

The dispatcher runs one request through three phases, in order and without
going back:

1. Every matching before-route middleware handler is called with no
   arguments. Results are discarded.
2. If any route matches, only the first one (in registration order) is
   called with its captured params, and its result is returned.
3. Otherwise the not-found handler is called and its result returned, or
   ``RouteNotFound`` is raised when there is none.

Middleware side effects are never undone, even when the request ends in
``RouteNotFound``.
"""

import logging
from typing import Any

from waypoint.exceptions import RouteNotFound
from waypoint.methods import normalize_method
from waypoint.routing.patterns import clean_uri
from waypoint.routing.router import Router

logger = logging.getLogger(__name__)


class Dispatcher:
    """Dispatches (method, URI) pairs to the handlers of a router.

    Examples:
        ```python
        router = Router()
        router.get("/users/{id}", lambda user_id: f"User {user_id}")

        dispatcher = Dispatcher(router)
        dispatcher.dispatch("GET", "/users/42")  # "User 42"
        ```
    """

    def __init__(self, router: Router):
        self.router = router

    def dispatch(self, http_method: str, uri: str) -> Any:
        """Runs the middleware for a request, then its first matching route.

        Returns:
            Whatever the selected route handler, or the not-found handler,
            returns.

        Raises:
            RouteNotFound: If no route matches and no not-found handler is
                registered.
        """
        for middleware in self.router.get_before_middleware(http_method, uri):
            logger.debug(f"Running before middleware '{middleware.route.pattern}' for {http_method} {uri}")
            middleware.route.handler()

        matches = self.router.match(http_method, uri)
        if not matches:
            return self._handle_route_not_found(http_method, uri)

        found = matches[0]
        logger.debug(
            f"Dispatching {http_method} {uri} to '{found.route.pattern}' with params {found.params}"
        )
        return found()

    def _handle_route_not_found(self, http_method: str, uri: str) -> Any:
        handler = self.router.get_route_not_found_handler()
        if handler is None:
            raise RouteNotFound(normalize_method(http_method), clean_uri(uri))

        logger.info(f"No route for {http_method} {uri}, using the not-found handler")
        return handler()
