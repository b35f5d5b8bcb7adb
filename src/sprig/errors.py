"""Sprig exception hierarchy.

Shared across the compiler, registry, discovery, and ASGI layer so every
module raises and catches the same types.

Build-time problems (malformed patterns, unloadable route files) are
raised by the low-level functions and converted into report records by
the registry. Request-time outcomes only become exceptions at the HTTP
boundary, where ``HTTPError`` subclasses map straight to responses.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from sprig.validation.result import ValidationError


class SprigError(Exception):
    """Base for all sprig-specific errors."""


class ConfigurationError(SprigError):
    """Raised when router configuration is invalid.

    Typically raised when an ``App`` is created for a routes directory
    that does not exist.
    """


class MalformedPattern(SprigError):
    """A route string that cannot be compiled.

    Raised by ``compile_pattern`` for unterminated brackets, duplicate
    parameter names, and catch-all tokens that are not last.
    """

    def __init__(self, route: str, reason: str) -> None:
        self.route = route
        self.reason = reason
        super().__init__(f"Malformed route pattern {route!r}: {reason}")


class RouteLoadError(SprigError):
    """A route file could not be imported."""

    def __init__(self, file_path: str, reason: str) -> None:
        self.file_path = file_path
        self.reason = reason
        super().__init__(f"Failed to load route file {file_path!r}: {reason}")


@dataclass(frozen=True, slots=True)
class HTTPError(SprigError):
    """An error that maps directly to an HTTP status code.

    Raised by the request pipeline, middleware, or handlers. The ASGI
    handler catches these and dispatches to the matching ``@app.error()``
    handler or the default JSON error body.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )

    @property
    def allowed(self) -> list[str]:
        """The allowed methods, sorted."""
        return [m.strip() for m in dict(self.headers)["Allow"].split(",") if m.strip()]


class ValidationFailed(HTTPError):  # noqa: N818
    """400 — path parameters failed their declared validation rules."""

    errors: tuple[ValidationError, ...]

    def __init__(
        self,
        errors: Sequence[ValidationError],
        detail: str = "One or more parameters failed validation",
    ) -> None:
        super().__init__(status=400, detail=detail)
        object.__setattr__(self, "errors", tuple(errors))
