"""Pattern compiler — bracket-notation route strings to ``RoutePattern``.

Route strings come from file paths, so parameters are written the way
file names can express them::

    /api/users                   literal segments only
    /api/users/[id]              one-segment capture named ``id``
    /api/products/[...segments]  catch-all, one or more segments
    /static/*                    catch-all bound to ``segments``

Compilation happens once per route when a route table is built. The
result is immutable and reused by every request.
"""

import re

from sprig.errors import MalformedPattern
from sprig.routing.classify import classify
from sprig.routing.match import build_matcher
from sprig.routing.route import ParameterDescriptor, ParamKind, PathToken, RoutePattern

# Name bound by a bare trailing ``*`` segment
DEFAULT_SPREAD_NAME = "segments"

_SLASHES_RE = re.compile(r"/+")

# Whole-segment bracket token: ``[name]`` or ``[...name]``
_BRACKET_RE = re.compile(r"^\[(\.\.\.)?([^\[\]/]*)\]$")


def normalize_path(path: str) -> str:
    """Collapse repeated separators, drop a trailing one, force a leading one.

    Examples::

        "api//users/"  -> "/api/users"
        "users"        -> "/users"
        ""             -> "/"
    """
    collapsed = _SLASHES_RE.sub("/", path.strip())
    if len(collapsed) > 1:
        collapsed = collapsed.rstrip("/")
    if not collapsed.startswith("/"):
        collapsed = "/" + collapsed
    return collapsed


def parse_pattern(route: str) -> tuple[PathToken, ...]:
    """Parse a route string into tokens.

    Raises ``MalformedPattern`` for unterminated or partial brackets,
    empty or duplicate parameter names, and catch-alls that are not the
    last segment.
    """
    normalized = normalize_path(route)
    parts = [p for p in normalized.split("/") if p]

    tokens: list[PathToken] = []
    seen: set[str] = set()
    last = len(parts) - 1

    for i, part in enumerate(parts):
        token = _parse_segment(route, part, is_last=i == last)
        if token.is_param:
            if token.value in seen:
                raise MalformedPattern(route, f"duplicate parameter name {token.value!r}")
            seen.add(token.value)
            if token.is_spread and i != last:
                raise MalformedPattern(
                    route, f"catch-all parameter {token.value!r} must be the last segment"
                )
        tokens.append(token)

    return tuple(tokens)


def _parse_segment(route: str, part: str, *, is_last: bool) -> PathToken:
    if part == "*":
        if not is_last:
            raise MalformedPattern(route, "wildcard '*' must be the last segment")
        return PathToken(DEFAULT_SPREAD_NAME, ParamKind.SPREAD)

    if "[" not in part and "]" not in part:
        return PathToken(part)

    match = _BRACKET_RE.match(part)
    if match is None:
        if part.count("[") != part.count("]") or part.rfind("[") > part.rfind("]"):
            raise MalformedPattern(route, f"unterminated bracket in segment {part!r}")
        raise MalformedPattern(route, f"bracket must span the whole segment, got {part!r}")

    spread, name = match.groups()
    if not name or name.startswith("."):
        raise MalformedPattern(route, f"invalid parameter name in segment {part!r}")
    return PathToken(name, ParamKind.SPREAD if spread else ParamKind.SINGLE)


def compile_pattern(route: str) -> RoutePattern:
    """Compile a bracket-notation route string.

    Deterministic: compiling the same string twice yields equal patterns
    whose matchers agree on every path.

    Raises:
        MalformedPattern: If the route string cannot be parsed.
    """
    tokens = parse_pattern(route)
    parameters = tuple(ParameterDescriptor(t.value, t.param) for t in tokens if t.param is not None)
    path = "/" + "/".join(_render(t) for t in tokens)
    return RoutePattern(
        original=route,
        path=path,
        tokens=tokens,
        parameters=parameters,
        type=classify(parameters),
        matcher=build_matcher(tokens),
    )


def _render(token: PathToken) -> str:
    if token.param is ParamKind.SPREAD:
        return f"[...{token.value}]"
    if token.param is ParamKind.SINGLE:
        return f"[{token.value}]"
    return token.value
