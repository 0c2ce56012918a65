"""Route and RouteMatch records."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True, eq=False)
class Route:
    """A registered (pattern, handler) binding.

    The pattern is stored fully qualified (group prefix included) and is not
    compiled until match time. Routes compare by identity.
    """

    pattern: str
    handler: Callable[..., Any]

    def __repr__(self) -> str:
        return f"<Route {self.pattern!r} {hex(id(self))}>"


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """A route that matched a request together with its positional captures."""

    route: Route
    params: tuple[str, ...] = ()

    def __call__(self) -> Any:
        return self.route.handler(*self.params)
