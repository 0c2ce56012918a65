"""HTTP method vocabulary and normalization helpers."""

from collections.abc import Sequence

from waypoint.exceptions import InvalidRoute

ALLOWED_HTTP_METHODS: tuple[str, ...] = (
    "GET",
    "HEAD",
    "POST",
    "PUT",
    "DELETE",
    "PATCH",
    "OPTIONS",
)

ANY_METHOD = "*"

type MethodSpec = str | Sequence[str]


def normalize_method(method: str) -> str:
    return method.strip().upper()


def normalize_methods(methods: MethodSpec, context: str = "route") -> list[str]:
    """Turns a method spec into a list of upper-cased method names.

    Args:
        methods: A single method name, the wildcard ``"*"`` or a sequence of
            method names.
        context: Where the methods were given, for error messages.

    Returns:
        The normalized method names, in the order given. The wildcard expands
        to every allowed method.

    Raises:
        InvalidRoute: If ``methods`` is not a string or a sequence of strings.
    """
    if isinstance(methods, str):
        if methods.strip() == ANY_METHOD:
            return list(ALLOWED_HTTP_METHODS)
        methods = [methods]

    if not isinstance(methods, Sequence) or not all(isinstance(m, str) for m in methods):
        raise InvalidRoute(
            f"HTTP methods in '{context}' must be a string or a list of strings, got {methods!r}."
        )

    return [normalize_method(m) for m in methods]


def validate_methods(methods: MethodSpec, context: str = "route") -> list[str]:
    """Normalizes a method spec and checks it against the allowed vocabulary.

    Raises:
        InvalidRoute: If the normalized list is empty or contains a method
            outside ``ALLOWED_HTTP_METHODS``.
    """
    normalized = normalize_methods(methods, context)
    if not normalized:
        raise InvalidRoute(f"Unknown HTTP method '' in '{context}'.")

    for method in normalized:
        if method not in ALLOWED_HTTP_METHODS:
            raise InvalidRoute(f"Unknown HTTP method '{method}' in '{context}'.")

    return normalized
