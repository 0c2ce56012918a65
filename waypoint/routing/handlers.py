"""Handler normalization for Waypoint routes.

A handler is either a direct callable or a deferred reference written as
``"Class@method"``. The class part may be a dotted import path
(``"myapp.controllers.UserController@show"``). Deferred references are
validated when the route is registered but only resolved when the handler is
invoked, through a pluggable ``HandlerResolver``.

The default resolver, ``ContainerResolver``, keeps a registry of known types
and falls back to importing dotted paths. Instances for non-static methods are
taken from a bevy container when one has been added there, otherwise a fresh
instance is created for each call.
"""

import importlib
import inspect
import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

from bevy import get_registry
from bevy.containers import Container

from waypoint.exceptions import HandlerResolutionError, InvalidRoute

logger = logging.getLogger(__name__)

_REFERENCE = re.compile(
    r"^(?P<type_name>[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*)@(?P<method_name>[A-Za-z_]\w*)$"
)


@dataclass(frozen=True, slots=True)
class HandlerReference:
    """A named operation on a type, resolved at call time."""

    type_name: str
    method_name: str

    @classmethod
    def parse(cls, reference: str) -> "HandlerReference":
        """Parses a ``"Class@method"`` string.

        Raises:
            InvalidRoute: If the string is not in the ``Class@method`` shape.
        """
        match = _REFERENCE.match(reference.strip())
        if match is None:
            raise InvalidRoute(
                f"Handler must be a callable or a string in the 'Class@method' format, got '{reference}'."
            )

        return cls(match.group("type_name"), match.group("method_name"))

    def __str__(self) -> str:
        return f"{self.type_name}@{self.method_name}"


class HandlerResolver(Protocol):
    """Turns a handler reference into something that can be called."""

    def resolve(self, reference: HandlerReference) -> Callable[..., Any]: ...


class ContainerResolver:
    """Resolves handler references by type name, using a bevy container for instances.

    Args:
        container: Container consulted for pre-built instances. A new one is
            created from the global registry when not provided.

    Examples:
        >>> resolver = ContainerResolver()
        >>> resolver.register(UserController)
        >>> handler = resolver.resolve(HandlerReference("UserController", "show"))
        >>> handler("42")
    """

    def __init__(self, container: Container | None = None):
        self.container = container or get_registry().create_container()
        self._types: dict[str, type] = {}

    def register(self, cls: type, name: str | None = None) -> None:
        """Makes a type resolvable by a short name (its class name by default)."""
        self._types[name or cls.__name__] = cls

    def find_type(self, type_name: str) -> type:
        if type_name in self._types:
            return self._types[type_name]

        target = _import_dotted(type_name)
        if not isinstance(target, type):
            raise HandlerResolutionError(f"'{type_name}' does not name a class.")

        return target

    def resolve(self, reference: HandlerReference) -> Callable[..., Any]:
        cls = self.find_type(reference.type_name)
        try:
            attribute = inspect.getattr_static(cls, reference.method_name)
        except AttributeError as e:
            raise HandlerResolutionError(
                f"'{cls.__name__}' has no method '{reference.method_name}'."
            ) from e

        if _is_static_call(attribute, reference.method_name):
            logger.debug(f"Resolved {reference} as a class-level call")
            return getattr(cls, reference.method_name)

        logger.debug(f"Resolved {reference} as an instance call")
        return getattr(self.instance_for(cls), reference.method_name)

    def instance_for(self, cls: type) -> Any:
        instance = self.container.instances.get(cls)
        if instance is not None:
            return instance

        try:
            return cls()
        except TypeError as e:
            raise HandlerResolutionError(
                f"Could not instantiate '{cls.__name__}': {e}"
            ) from e


class DeferredHandler:
    """Callable wrapper that resolves its reference every time it is invoked."""

    __slots__ = ("reference", "resolver")

    def __init__(self, reference: HandlerReference, resolver: HandlerResolver):
        self.reference = reference
        self.resolver = resolver

    def __call__(self, *args: Any) -> Any:
        return self.resolver.resolve(self.reference)(*args)

    def __repr__(self) -> str:
        return f"<DeferredHandler {self.reference}>"


def normalize_handler(
    handler: Callable[..., Any] | str | HandlerReference, resolver: HandlerResolver
) -> Callable[..., Any]:
    """Returns a callable for a handler given at registration time.

    Raises:
        InvalidRoute: If the handler is neither callable nor a well-formed
            ``"Class@method"`` reference.
    """
    match handler:
        case str():
            return DeferredHandler(HandlerReference.parse(handler), resolver)
        case HandlerReference():
            return DeferredHandler(handler, resolver)
        case _ if callable(handler):
            return handler
        case _:
            raise InvalidRoute(
                f"Handler must be a callable or a string in the 'Class@method' format, got {handler!r}."
            )


def _is_static_call(attribute: Any, name: str) -> bool:
    if not isinstance(attribute, staticmethod | classmethod):
        return False
    if getattr(attribute.__func__, "__isabstractmethod__", False):
        return False
    return not name.startswith("_")


def _import_dotted(path: str) -> Any:
    """Imports the object named by a dotted path, trying the longest module prefix first."""
    parts = path.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_path = ".".join(parts[:split])
        try:
            target = importlib.import_module(module_path)
        except ImportError:
            continue

        try:
            for part in parts[split:]:
                target = getattr(target, part)
        except AttributeError as e:
            raise HandlerResolutionError(f"Failed to resolve '{path}': {e}") from e

        return target

    raise HandlerResolutionError(f"Unknown handler class '{path}'.")
