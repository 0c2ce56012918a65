import argparse
import logging
import os
import sys

from waypoint.config import DEFAULT_CONFIG_FILE, WaypointConfigError, load_router
from waypoint.dispatcher import Dispatcher
from waypoint.exceptions import InvalidRoute, RouteNotFound
from waypoint.routing.router import Router

# Logging setup
logger = logging.getLogger("waypoint")
if not logger.hasHandlers():
    handler = logging.StreamHandler(sys.stderr)
    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    if os.getenv("WAYPOINT_DEBUG"):  # More verbose if WAYPOINT_DEBUG is set
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s')
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def handle_routes_command(router: Router, args: argparse.Namespace) -> int:
    """Prints every route and before-route middleware entry."""
    routes = router.routes
    if not routes:
        print("No routes registered.")

    for method, route in routes:
        print(f"{method:<8} /{route.pattern:<40} {route.handler!r}")

    for method, route in router.before_routes:
        print(f"{method:<8} /{route.pattern:<40} {route.handler!r} (before)")

    return 0


def handle_match_command(router: Router, args: argparse.Namespace) -> int:
    """Prints every route matching a method and URI, in match order."""
    matches = router.match(args.method, args.uri)
    if not matches:
        print(f"No routes match {args.method.upper()} {args.uri}")
        return 1

    for position, found in enumerate(matches, start=1):
        marker = "*" if position == 1 else " "
        print(f"{marker} {position}. /{found.route.pattern} params={list(found.params)}")

    return 0


def handle_dispatch_command(router: Router, args: argparse.Namespace) -> int:
    """Dispatches a request and prints what the handler returned."""
    try:
        result = Dispatcher(router).dispatch(args.method, args.uri)
    except RouteNotFound as e:
        logger.error(str(e))
        return 1

    if result is not None:
        print(result)
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="waypoint",
        description="Inspect and exercise a Waypoint route file.",
    )
    parser.add_argument(
        "--config", "-c", default=DEFAULT_CONFIG_FILE,
        help=f"Path to the route file (default: {DEFAULT_CONFIG_FILE}).",
    )
    parser.add_argument(
        "--debug", action="store_true",
        help="Enable debug logging.",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command", required=True)

    routes_parser = subparsers.add_parser("routes", help="List registered routes.")
    routes_parser.set_defaults(func=handle_routes_command)

    match_parser = subparsers.add_parser("match", help="Show every route matching a request.")
    match_parser.add_argument("method", help="HTTP method, e.g. GET.")
    match_parser.add_argument("uri", help="Request URI, e.g. /users/42?tab=posts.")
    match_parser.set_defaults(func=handle_match_command)

    dispatch_parser = subparsers.add_parser("dispatch", help="Dispatch a request and print the result.")
    dispatch_parser.add_argument("method", help="HTTP method, e.g. GET.")
    dispatch_parser.add_argument("uri", help="Request URI, e.g. /users/42.")
    dispatch_parser.set_defaults(func=handle_dispatch_command)

    args = parser.parse_args(argv)

    if args.debug:
        logger.setLevel(logging.DEBUG)

    try:
        router = load_router(args.config)
    except (WaypointConfigError, InvalidRoute) as e:
        logger.error(f"Could not load routes from '{args.config}': {e}")
        return 2

    return args.func(router, args)


if __name__ == "__main__":
    sys.exit(main())
