class WaypointException(Exception):
    """Base exception for Waypoint."""
    message: str

    def __init__(self, message: str | None = None, *args):
        super().__init__(message, *args)
        if message is not None:
            self.message = message
        elif args and args[0]:
            self.message = str(args[0])
        else:
            self.message = self.__class__.__name__

    def __str__(self) -> str:
        return self.message


class InvalidRoute(WaypointException):
    """Raised at registration time for a route that cannot be added.

    Covers unknown or empty HTTP methods, malformed handler references,
    invalid raw regular expressions and patterns registered twice for the
    same method.
    """


class RouteNotFound(WaypointException):
    """Raised by the dispatcher when nothing matches and no not-found handler is set."""

    def __init__(self, method: str, uri: str):
        super().__init__(f"Route '{method}' '{uri}' not found.")
        self.method = method
        self.uri = uri


class HandlerResolutionError(WaypointException):
    """Raised when a deferred "Class@method" handler cannot be resolved at call time."""
