"""Matcher/extractor — binds request path segments to pattern tokens.

Matching is anchored to the whole path and works segment by segment:
each raw segment is percent-decoded on its own, so an encoded ``%2F``
stays inside its segment instead of splitting it. A segment that cannot
be decoded makes the candidate fail; it never raises.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass
from urllib.parse import unquote

from sprig.routing.route import ParamKind, ParamValue, PathToken, RoutePattern

# A ``%`` not followed by two hex digits
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def split_path(path: str) -> tuple[str, ...]:
    """Split a request path into raw segments, dropping empty ones.

    ``/api//users/`` and ``/api/users`` both give ``("api", "users")``.
    """
    return tuple(p for p in path.split("/") if p)


def decode_segment(segment: str) -> str | None:
    """Percent-decode one segment as UTF-8.

    Returns ``None`` for malformed escapes (``%zz``, ``%4``) or byte
    sequences that are not valid UTF-8.
    """
    if "%" not in segment:
        return segment
    if _BAD_ESCAPE_RE.search(segment):
        return None
    try:
        return unquote(segment, encoding="utf-8", errors="strict")
    except UnicodeDecodeError:
        return None


@dataclass(frozen=True, slots=True)
class SegmentMatcher:
    """Compiled matcher for one token sequence.

    Calling it with raw request segments returns the extracted parameters
    or ``None``. Holds no mutable state, so one instance serves any number
    of concurrent requests.
    """

    tokens: tuple[PathToken, ...]
    spread: bool

    def __call__(self, segments: Sequence[str]) -> dict[str, ParamValue] | None:
        fixed = len(self.tokens) - 1 if self.spread else len(self.tokens)

        if self.spread:
            # Catch-all needs at least one segment of its own
            if len(segments) <= fixed:
                return None
        elif len(segments) != fixed:
            return None

        params: dict[str, ParamValue] = {}
        for token, raw in zip(self.tokens[:fixed], segments, strict=False):
            value = decode_segment(raw)
            if value is None:
                return None
            if token.param is None:
                if value != token.value:
                    return None
            else:
                params[token.value] = value

        if self.spread:
            rest: list[str] = []
            for raw in segments[fixed:]:
                value = decode_segment(raw)
                if value is None:
                    return None
                rest.append(value)
            params[self.tokens[-1].value] = tuple(rest)

        return params


def build_matcher(tokens: tuple[PathToken, ...]) -> SegmentMatcher:
    """Build the matcher for a parsed token sequence."""
    spread = bool(tokens) and tokens[-1].param is ParamKind.SPREAD
    return SegmentMatcher(tokens=tokens, spread=spread)


def match_path(pattern: RoutePattern, path: str) -> dict[str, ParamValue] | None:
    """Match *path* against *pattern*.

    Returns a mapping of parameter name to value (a string for single
    parameters, a tuple of strings for catch-alls), or ``None``.
    """
    return pattern.matcher(split_path(path))


def matches(pattern: RoutePattern, path: str) -> bool:
    """True if *path* matches *pattern*."""
    return match_path(pattern, path) is not None
