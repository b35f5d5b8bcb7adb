"""Route data model — tokens, compiled patterns, registered routes.

Everything here is a frozen dataclass. Patterns and routes are built once
when a route table is compiled and shared read-only by every request.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from sprig.validation.rules import ValidationRule

# Extracted value of one path parameter: a segment, or the segments
# captured by a catch-all.
ParamValue: TypeAlias = str | tuple[str, ...]

# Route handler: a user function with any signature
Handler: TypeAlias = Callable[..., Any]

# Closed set of method names a route module may define handlers for
HTTP_METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")


class ParamKind(Enum):
    """How many path segments a parameter captures."""

    SINGLE = "single"
    SPREAD = "spread"


class RouteType(Enum):
    """Specificity category of a route, derived from its parameters."""

    SIMPLE = "simple"
    SINGLE_PARAM = "singleParam"
    NESTED = "nested"
    VARIABLE_SEGMENTS = "variableSegments"


@dataclass(frozen=True, slots=True)
class PathToken:
    """A parsed segment of a route pattern.

    Literal:  ``/users``        (param=None, value="users")
    Single:   ``/[id]``         (param=SINGLE, value="id")
    Spread:   ``/[...segments]`` (param=SPREAD, value="segments")
    """

    value: str
    param: ParamKind | None = None

    @property
    def is_param(self) -> bool:
        return self.param is not None

    @property
    def is_spread(self) -> bool:
        return self.param is ParamKind.SPREAD


@dataclass(frozen=True, slots=True)
class ParameterDescriptor:
    """Name and kind of one parameter declared by a pattern."""

    name: str
    kind: ParamKind


@dataclass(frozen=True, slots=True)
class RoutePattern:
    """A compiled route pattern.

    Attributes:
        original: The bracket-notation string as it was given.
        path: The normalized pattern (``/api/users/[id]``).
        tokens: Parsed tokens, one per path segment.
        parameters: Declared parameters in path order.
        type: Specificity category.
        matcher: Callable taking raw request segments and returning the
            extracted parameters, or ``None`` when the path does not match.
    """

    original: str
    path: str
    tokens: tuple[PathToken, ...]
    parameters: tuple[ParameterDescriptor, ...]
    type: RouteType
    matcher: Callable[[Sequence[str]], dict[str, ParamValue] | None] = field(
        repr=False, compare=False
    )

    @property
    def param_names(self) -> tuple[str, ...]:
        return tuple(p.name for p in self.parameters)

    @property
    def static_length(self) -> int:
        """Number of leading literal tokens."""
        count = 0
        for token in self.tokens:
            if token.is_param:
                break
            count += 1
        return count

    def match(self, path: str) -> dict[str, ParamValue] | None:
        """Match a request path against this pattern."""
        from sprig.routing.match import split_path

        return self.matcher(split_path(path))


def _freeze(mapping: Mapping[str, Any] | None) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True, slots=True)
class RegisteredRoute:
    """A compiled route with its handlers.

    ``handlers`` maps upper-case HTTP method names to handler references.
    The registry stores and returns these but never calls them.
    """

    pattern: RoutePattern
    handlers: Mapping[str, Handler]
    file_path: str = "manual"
    validation: Mapping[str, ValidationRule] = field(default_factory=dict)
    metadata: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "handlers", _freeze(self.handlers))
        object.__setattr__(self, "validation", _freeze(self.validation))
        object.__setattr__(self, "metadata", _freeze(self.metadata))

    @property
    def path(self) -> str:
        return self.pattern.path

    @property
    def type(self) -> RouteType:
        return self.pattern.type

    @property
    def methods(self) -> tuple[str, ...]:
        """Supported methods in canonical order."""
        return tuple(m for m in HTTP_METHODS if m in self.handlers)


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful resolution."""

    route: RegisteredRoute
    method: str
    params: dict[str, ParamValue]

    @property
    def handler(self) -> Handler:
        return self.route.handlers[self.method]
