"""Waypoint - a synchronous HTTP request router and dispatcher."""

__version__ = '0.1.0'

from waypoint.config import load_router
from waypoint.dispatcher import Dispatcher
from waypoint.exceptions import (
    HandlerResolutionError,
    InvalidRoute,
    RouteNotFound,
    WaypointException,
)
from waypoint.routing import Route, RouteMatch, RouteRegistrar, Router

__all__ = [
    "Dispatcher",
    "HandlerResolutionError",
    "InvalidRoute",
    "Route",
    "RouteMatch",
    "RouteNotFound",
    "RouteRegistrar",
    "Router",
    "WaypointException",
    "load_router",
]
