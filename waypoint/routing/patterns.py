"""URI cleaning and pattern compilation for Waypoint routing.

Route patterns mix three kinds of tokens:
- Literal path segments, matched verbatim
- Placeholders (``{name}``), matched non-greedily and captured
- Raw regular-expression fragments such as ``(\\d+)`` or ``(/\\w+)?``,
  passed through to ``re`` unchanged

Every capture, from a placeholder or a raw group, is returned positionally
in left-to-right order. Placeholder names are not kept.
"""

import re

from waypoint.exceptions import InvalidRoute

# "{name}" at the start of the pattern or after a "/", optionally followed by "?"
_PLACEHOLDER = re.compile(r"(?P<lead>^|/)\{[A-Za-z_]\w*\}(?P<optional>\?)?")

# "{...}" in placeholder position must hold an identifier or a repetition count
_BRACED = re.compile(r"(?:^|/)\{(?P<name>[^{}/]*)\}")
_REPETITION = re.compile(r"\d+(?:,\d*)?|,\d+")
_NAME = re.compile(r"[A-Za-z_]\w*")


def clean_uri(uri: str) -> str:
    """Strips the query string, the fragment and surrounding slashes from a URI.

    Examples:
        >>> clean_uri(" /users/42/?page=2#top ")
        'users/42'

        >>> clean_uri("/")
        ''
    """
    uri = uri.strip()
    uri = uri.split("?", 1)[0]
    uri = uri.split("#", 1)[0]
    return uri.strip().strip("/")


def join_prefix(prefix: str, pattern: str) -> str:
    """Builds the effective pattern for a route registered under a group prefix.

    Both parts are trimmed of whitespace and slashes. An empty pattern inside a
    group resolves to the group prefix itself.

    Examples:
        >>> join_prefix("api/v1", "/users/")
        'api/v1/users'

        >>> join_prefix("", "/users")
        'users'
    """
    pattern = pattern.strip().strip("/")
    prefix = prefix.strip().strip("/")
    if not prefix:
        return pattern
    if not pattern:
        return prefix
    return f"{prefix}/{pattern}"


def _expand_placeholder(found: re.Match[str]) -> str:
    match found.group("lead"), found.group("optional"):
        case "/", "?":
            return "(?:/(.*?))?"
        case "/", None:
            return "/(.*?)"
        case _, "?":
            return "(.*?)?"
        case _:
            return "(.*?)"


def to_expression(pattern: str) -> str:
    """Translates placeholders in a pattern into capturing groups.

    ``/{name}`` becomes ``/(.*?)``. A placeholder followed by ``?`` makes the
    whole segment optional: ``/{name}?`` becomes ``(?:/(.*?))?``. Anything
    else is left for the regular-expression engine.

    Examples:
        >>> to_expression("users/{id}/posts/(\\d+)")
        'users/(.*?)/posts/(\\\\d+)'

        >>> to_expression("albums/{year}?")
        'albums(?:/(.*?))?'

    Raises:
        InvalidRoute: If a placeholder name is not an identifier, e.g.
            ``users/{user-id}``.
    """
    for found in _BRACED.finditer(pattern):
        name = found.group("name")
        if not _NAME.fullmatch(name) and not _REPETITION.fullmatch(name):
            raise InvalidRoute(
                f"Invalid placeholder '{{{name}}}' in route pattern '{pattern}'. "
                "Placeholder names must be identifiers."
            )

    return _PLACEHOLDER.sub(_expand_placeholder, pattern)


def compile_pattern(pattern: str) -> re.Pattern[str]:
    """Compiles a route pattern into an expression anchored at both ends.

    Raises:
        InvalidRoute: If the raw regular-expression parts of the pattern are
            not valid.
    """
    try:
        return re.compile(f"^(?:{to_expression(pattern)})$")
    except re.error as e:
        raise InvalidRoute(f"Invalid route pattern '{pattern}': {e}") from e


def extract_params(match: re.Match[str]) -> tuple[str, ...]:
    """Collects the captured groups of a successful match, in order.

    Groups that did not take part in the match are dropped when they are
    trailing, so the handler's default arguments apply. An absent group
    followed by a present one is passed as an empty string to keep positions
    stable.
    """
    groups = list(match.groups())
    while groups and groups[-1] is None:
        groups.pop()

    return tuple("" if group is None else group for group in groups)


def match_pattern(pattern: str, clean: str) -> tuple[str, ...] | None:
    """Tests a pattern against an already cleaned URI.

    Returns:
        The positional captures if the pattern matches, else None.

    Examples:
        >>> match_pattern("users/{id}", "users/42")
        ('42',)

        >>> match_pattern("users/(\\d+)", "users/adam") is None
        True
    """
    match = compile_pattern(pattern).fullmatch(clean)
    if match is None:
        return None

    return extract_params(match)
