"""Route registry — immutable route tables and atomic refresh.

A ``RouteTable`` is compiled from ``RouteDefinition``s in one pass:
patterns are compiled and classified, malformed ones are reported instead
of registered, and each method gets its candidates in specificity order:

1. ``simple`` routes, longest static path first
2. ``singleParam`` / ``nested`` routes, fewest parameters first
3. ``variableSegments`` routes last

Ties keep registration order. When two tied routes can match the same
path the later one is shadowed, which is logged as an ambiguity warning.

The ``Registry`` owns the current table. ``refresh()`` builds a complete
new table and publishes it with one reference assignment; ``resolve()``
reads that reference once, so a concurrent request always works on a
single consistent table without taking a lock.
"""

from __future__ import annotations

import logging
import re
import threading
import time
from collections import defaultdict
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, TypeAlias

from sprig.errors import MalformedPattern
from sprig.routing.match import split_path
from sprig.routing.pattern import compile_pattern, normalize_path
from sprig.routing.route import (
    HTTP_METHODS,
    Handler,
    PathToken,
    RegisteredRoute,
    RouteMatch,
    RoutePattern,
    RouteType,
)
from sprig.validation.rules import coerce_rule

logger = logging.getLogger("sprig.routing")


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """An uncompiled route as supplied by discovery or by hand."""

    pattern: str
    handlers: Mapping[str, Handler]
    file_path: str = "manual"
    validation: Mapping[str, Any] = field(default_factory=dict)
    metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BuildError:
    """A route that was rejected while building a table."""

    route: str
    file_path: str
    reason: str

    def __str__(self) -> str:
        return f"{self.route} ({self.file_path}): {self.reason}"


@dataclass(frozen=True, slots=True)
class RouteSet:
    """What a route source hands to the registry on each refresh."""

    definitions: tuple[RouteDefinition, ...]
    files_scanned: int | None = None
    errors: tuple[BuildError, ...] = ()


@dataclass(frozen=True, slots=True)
class AmbiguousRoute:
    """Two routes of equal specificity that can match the same path.

    ``winner`` was registered first and is the one requests resolve to.
    """

    method: str
    winner: str
    shadowed: str
    winner_file: str
    shadowed_file: str

    def __str__(self) -> str:
        return (
            f"{self.method} {self.shadowed} ({self.shadowed_file}) is ambiguous with "
            f"{self.winner} ({self.winner_file}); {self.winner} wins"
        )


@dataclass(frozen=True, slots=True)
class RouterStats:
    """Counters describing a route table."""

    total_files: int = 0
    total_routes: int = 0
    routes_by_type: Mapping[str, int] = field(
        default_factory=lambda: {t.value: 0 for t in RouteType}
    )
    routes_by_method: Mapping[str, int] = field(default_factory=dict)
    processing_time: float = 0.0
    last_scan_time: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalFiles": self.total_files,
            "totalRoutes": self.total_routes,
            "routesByType": dict(self.routes_by_type),
            "routesByMethod": dict(self.routes_by_method),
            "processingTime": self.processing_time,
            "lastScanTime": self.last_scan_time.isoformat() if self.last_scan_time else None,
        }


@dataclass(frozen=True, slots=True)
class BuildReport:
    """Outcome of building or refreshing a registry."""

    success: bool
    routes_registered: int
    errors: tuple[BuildError, ...] = ()
    warnings: tuple[AmbiguousRoute, ...] = ()
    stats: RouterStats | None = None
    error: str | None = None


def specificity(pattern: RoutePattern) -> tuple[int, int]:
    """Sort key for a pattern; lower sorts first."""
    if pattern.type is RouteType.SIMPLE:
        return (0, -len(pattern.tokens))
    if pattern.type is RouteType.VARIABLE_SEGMENTS:
        return (2, 0)
    return (1, len(pattern.parameters))


def patterns_overlap(a: tuple[PathToken, ...], b: tuple[PathToken, ...]) -> bool:
    """True if some request path could match both token sequences."""
    a_spread = bool(a) and a[-1].is_spread
    b_spread = bool(b) and b[-1].is_spread
    a_fixed = a[:-1] if a_spread else a
    b_fixed = b[:-1] if b_spread else b

    if not a_spread and not b_spread and len(a) != len(b):
        return False
    # A catch-all needs at least one segment beyond the other's fixed part
    if a_spread and not b_spread and len(b) <= len(a_fixed):
        return False
    if b_spread and not a_spread and len(a) <= len(b_fixed):
        return False

    for x, y in zip(a_fixed, b_fixed, strict=False):
        if not x.is_param and not y.is_param and x.value != y.value:
            return False
    return True


@dataclass(frozen=True, slots=True)
class RouteTable:
    """An immutable, fully ordered set of routes."""

    routes: tuple[RegisteredRoute, ...] = ()
    candidates: Mapping[str, tuple[RegisteredRoute, ...]] = field(default_factory=dict)
    errors: tuple[BuildError, ...] = ()
    warnings: tuple[AmbiguousRoute, ...] = ()
    stats: RouterStats = field(default_factory=RouterStats)

    def resolve(self, method: str, path: str) -> RouteMatch | None:
        """Find the most specific route for *method* and *path*.

        Returns ``None`` when no route for the method matches.
        """
        method = method.upper()
        segments = split_path(path)
        for route in self.candidates.get(method, ()):
            params = route.pattern.matcher(segments)
            if params is not None:
                return RouteMatch(route=route, method=method, params=params)
        return None

    def allowed_methods(self, path: str) -> frozenset[str]:
        """Methods with at least one route matching *path*."""
        segments = split_path(path)
        return frozenset(
            method
            for method, routes in self.candidates.items()
            if any(r.pattern.matcher(segments) is not None for r in routes)
        )

    def get(self, pattern: str) -> RegisteredRoute | None:
        """The first route registered under *pattern*, if any."""
        path = normalize_path(pattern)
        for route in self.routes:
            if route.path == path or route.pattern.original == pattern:
                return route
        return None

    def without(self, pattern: str) -> RouteTable:
        """A new table with every route registered under *pattern* removed."""
        path = normalize_path(pattern)
        kept = [r for r in self.routes if r.path != path and r.pattern.original != pattern]
        return _assemble(
            kept,
            errors=self.errors,
            total_files=self.stats.total_files,
            started=time.perf_counter(),
            log_warnings=False,
        )


def build_table(
    definitions: Iterable[RouteDefinition],
    *,
    files_scanned: int | None = None,
    errors: Sequence[BuildError] = (),
    verbose: bool = True,
) -> RouteTable:
    """Compile definitions into a ``RouteTable``.

    Malformed patterns, unsupported methods, and definitions without
    handlers are excluded and reported in ``table.errors``; nothing here
    raises for a bad route.
    """
    started = time.perf_counter()
    build_errors: list[BuildError] = list(errors)
    routes: list[RegisteredRoute] = []

    for definition in definitions:
        route = _register(definition, build_errors, verbose=verbose)
        if route is not None:
            routes.append(route)

    return _assemble(
        routes,
        errors=tuple(build_errors),
        total_files=files_scanned if files_scanned is not None else len(routes),
        started=started,
        log_warnings=True,
    )


def _register(
    definition: RouteDefinition,
    build_errors: list[BuildError],
    *,
    verbose: bool,
) -> RegisteredRoute | None:
    try:
        pattern = compile_pattern(definition.pattern)
    except MalformedPattern as exc:
        logger.error("Rejected route %s (%s): %s", exc.route, definition.file_path, exc.reason)
        build_errors.append(BuildError(definition.pattern, definition.file_path, exc.reason))
        return None

    handlers = {m.upper(): h for m, h in definition.handlers.items()}
    unknown = sorted(set(handlers) - set(HTTP_METHODS))
    if unknown:
        reason = f"unsupported HTTP method(s): {', '.join(unknown)}"
        logger.error("Rejected route %s (%s): %s", pattern.path, definition.file_path, reason)
        build_errors.append(BuildError(definition.pattern, definition.file_path, reason))
        return None
    if not handlers:
        reason = "no handlers defined"
        logger.warning("No handler found for route: %s (%s)", pattern.path, definition.file_path)
        build_errors.append(BuildError(definition.pattern, definition.file_path, reason))
        return None

    undeclared = sorted(set(definition.validation) - set(pattern.param_names))
    if undeclared:
        logger.warning(
            "Route %s declares validation for unknown parameter(s): %s",
            pattern.path,
            ", ".join(undeclared),
        )

    try:
        validation = {name: coerce_rule(rule) for name, rule in definition.validation.items()}
    except (re.error, TypeError) as exc:
        reason = f"invalid validation rule: {exc}"
        logger.error("Rejected route %s (%s): %s", pattern.path, definition.file_path, reason)
        build_errors.append(BuildError(definition.pattern, definition.file_path, reason))
        return None

    route = RegisteredRoute(
        pattern=pattern,
        handlers=handlers,
        file_path=definition.file_path,
        validation=validation,
        metadata=definition.metadata,
    )
    if verbose:
        logger.info("Registered route: %s %s", ", ".join(route.methods), route.path)
    return route


def _assemble(
    routes: Sequence[RegisteredRoute],
    *,
    errors: tuple[BuildError, ...],
    total_files: int,
    started: float,
    log_warnings: bool,
) -> RouteTable:
    """Order routes per method, detect ambiguity, and compute stats."""
    by_method: dict[str, list[RegisteredRoute]] = defaultdict(list)
    for route in routes:
        for method in route.methods:
            by_method[method].append(route)

    candidates: dict[str, tuple[RegisteredRoute, ...]] = {}
    warnings: list[AmbiguousRoute] = []
    for method in HTTP_METHODS:
        if method not in by_method:
            continue
        # sorted() is stable: equal keys keep registration order
        ordered = tuple(sorted(by_method[method], key=lambda r: specificity(r.pattern)))
        candidates[method] = ordered
        warnings.extend(_find_ambiguities(method, ordered))

    if log_warnings:
        for warning in warnings:
            logger.warning("Ambiguous route: %s", warning)

    routes_by_type = {t.value: 0 for t in RouteType}
    routes_by_method: dict[str, int] = {}
    for route in routes:
        routes_by_type[route.type.value] += 1
        for method in route.methods:
            routes_by_method[method] = routes_by_method.get(method, 0) + 1

    stats = RouterStats(
        total_files=total_files,
        total_routes=len(routes),
        routes_by_type=routes_by_type,
        routes_by_method=routes_by_method,
        processing_time=round((time.perf_counter() - started) * 1000, 3),
        last_scan_time=datetime.now(UTC),
    )
    return RouteTable(
        routes=tuple(routes),
        candidates=candidates,
        errors=errors,
        warnings=tuple(warnings),
        stats=stats,
    )


def _find_ambiguities(method: str, ordered: tuple[RegisteredRoute, ...]) -> list[AmbiguousRoute]:
    groups: dict[tuple[int, int], list[RegisteredRoute]] = defaultdict(list)
    for route in ordered:
        groups[specificity(route.pattern)].append(route)

    found: list[AmbiguousRoute] = []
    for group in groups.values():
        for i, winner in enumerate(group):
            for shadowed in group[i + 1 :]:
                if patterns_overlap(winner.pattern.tokens, shadowed.pattern.tokens):
                    found.append(
                        AmbiguousRoute(
                            method=method,
                            winner=winner.path,
                            shadowed=shadowed.path,
                            winner_file=winner.file_path,
                            shadowed_file=shadowed.file_path,
                        )
                    )
    return found


# A route source returns a RouteSet, or just the definitions
RouteSource: TypeAlias = Callable[[], RouteSet | Iterable[RouteDefinition]]


class Registry:
    """Holds the current route table and rebuilds it on request.

    Usage::

        registry = Registry(lambda: [RouteDefinition("/users/[id]", {"GET": get_user})])
        report = registry.refresh()
        match = registry.resolve("GET", "/users/42")

    Thread safety:
        ``refresh()`` and ``update()`` are serialized by a lock, so two
        rebuilds never interleave. ``resolve()`` takes no lock; it reads
        the table reference once and the table itself is immutable.
    """

    __slots__ = ("_lock", "_source", "_table", "_verbose")

    def __init__(self, source: RouteSource | None = None, *, verbose: bool = True) -> None:
        self._source = source
        self._verbose = verbose
        self._lock = threading.Lock()
        self._table = RouteTable()

    @property
    def table(self) -> RouteTable:
        """The currently published table."""
        return self._table

    def refresh(self) -> BuildReport:
        """Rebuild the table from the source and publish it.

        If the source itself fails (for instance the routes directory is
        gone), the previous table stays published and the report carries
        the error.
        """
        if self._source is None:
            msg = "Registry has no route source to refresh from."
            raise RuntimeError(msg)

        with self._lock:
            if self._verbose:
                logger.info("Building route table...")
            try:
                supplied = self._source()
            except OSError as exc:
                logger.error("Failed to build route table: %s", exc)
                return BuildReport(success=False, routes_registered=0, error=str(exc))

            route_set = supplied if isinstance(supplied, RouteSet) else RouteSet(tuple(supplied))
            table = build_table(
                route_set.definitions,
                files_scanned=route_set.files_scanned,
                errors=route_set.errors,
                verbose=self._verbose,
            )
            self._table = table

        if self._verbose:
            logger.info("Route table built with %d routes", len(table.routes))
        return _report(table)

    def update(self, change: Callable[[RouteTable], RouteTable | None]) -> bool:
        """Derive a new table from the current one and publish it.

        *change* runs under the refresh lock, so it always sees the latest
        table and no refresh can land between the read and the swap. It
        returns ``None`` to leave the table as it is.

        Returns whether a new table was published.
        """
        with self._lock:
            table = change(self._table)
            if table is None:
                return False
            self._table = table
        return True

    def resolve(self, method: str, path: str) -> RouteMatch | None:
        """Resolve against the current table; ``None`` means no route."""
        return self._table.resolve(method, path)

    def allowed_methods(self, path: str) -> frozenset[str]:
        return self._table.allowed_methods(path)


def _report(table: RouteTable) -> BuildReport:
    return BuildReport(
        success=True,
        routes_registered=len(table.routes),
        errors=table.errors,
        warnings=table.warnings,
        stats=table.stats,
    )
