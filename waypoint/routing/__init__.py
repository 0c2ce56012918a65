"""Routing layer for Waypoint - URI patterns, route tables, handler references."""

from waypoint.routing.handlers import (
    ContainerResolver,
    DeferredHandler,
    HandlerReference,
    HandlerResolver,
)
from waypoint.routing.patterns import clean_uri, compile_pattern, match_pattern
from waypoint.routing.route import Route, RouteMatch
from waypoint.routing.router import RouteRegistrar, Router

__all__ = [
    "ContainerResolver",
    "DeferredHandler",
    "HandlerReference",
    "HandlerResolver",
    "Route",
    "RouteMatch",
    "RouteRegistrar",
    "Router",
    "clean_uri",
    "compile_pattern",
    "match_pattern",
]
