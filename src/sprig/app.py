"""Sprig application class.

Routes come from the routes directory plus any added by hand. Middleware,
error handlers, and lifecycle hooks are registered during setup; the
route table is built on first use and can be rebuilt at any time with
``refresh()`` while requests keep being served.
"""

import platform
import re
import threading
import time
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import anyio.to_thread

from sprig._internal.asgi import Receive, Scope, Send
from sprig._internal.invoke import invoke
from sprig.config import RouterConfig
from sprig.discovery import discover_routes
from sprig.errors import ConfigurationError
from sprig.middleware.protocol import Middleware
from sprig.routing.pattern import normalize_path
from sprig.routing.registry import (
    BuildReport,
    Registry,
    RouteDefinition,
    RouterStats,
    RouteSet,
)
from sprig.routing.route import Handler, RegisteredRoute, RouteMatch
from sprig.server.handler import handle_request
from sprig.validation.rules import ValidationRule


class App:
    """The sprig application, an ASGI 3 callable.

    Usage::

        app = App(RouterConfig(routes_dir="routes", health_path="/health"))
        app.add_middleware(RequestLoggerMiddleware())

        @app.error(404)
        def not_found(request):
            return {"missing": request.path}

    Thread safety:
        Setup (middleware, error handlers, hooks) is single-threaded and
        closes once the app freezes. The freeze uses a Lock plus a double
        check so exactly one thread builds the first route table. After
        that, ``refresh()`` swaps whole tables atomically; in-flight
        requests finish on the table they started with.
    """

    __slots__ = (
        "_discover",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_manual_routes",
        "_middleware",
        "_middleware_list",
        "_registry",
        "_shutdown_hooks",
        "_started",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: RouterConfig | None = None, *, discover: bool = True) -> None:
        self.config: RouterConfig = config or RouterConfig()
        if discover and not Path(self.config.routes_dir).is_dir():
            msg = f"Routes directory does not exist: {self.config.routes_dir}"
            raise ConfigurationError(msg)

        self._discover = discover
        self._manual_routes: list[RouteDefinition] = []
        self._middleware_list: list[Middleware] = []
        self._error_handlers: dict[int | type, Callable[..., Any]] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()
        self._started = time.monotonic()
        self._registry = Registry(self._collect_routes, verbose=self.config.enable_logging)

        # Compiled state, set during _freeze()
        self._middleware: tuple[Callable[..., Any], ...] = ()

    # -- Route registration --

    def add_route(
        self,
        pattern: str,
        handlers: Handler | Mapping[str, Handler],
        *,
        methods: list[str] | None = None,
        validation: Mapping[str, ValidationRule | Mapping[str, Any]] | None = None,
        metadata: Mapping[str, Any] | None = None,
    ) -> None:
        """Register a route by hand.

        *handlers* is either one callable, served for *methods* (default
        ``["GET"]``), or a mapping of method name to callable. Manual
        routes survive ``refresh()``. Adding one after the app has frozen
        rebuilds the table.
        """
        if callable(handlers):
            table = {m.upper(): handlers for m in (methods or ["GET"])}
        else:
            table = {m.upper(): h for m, h in handlers.items()}

        self._manual_routes.append(
            RouteDefinition(
                pattern=pattern,
                handlers=table,
                validation=dict(validation or {}),
                metadata=dict(metadata or {}),
            )
        )
        if self._frozen:
            self._registry.refresh()

    def route(
        self,
        pattern: str,
        *,
        methods: list[str] | None = None,
        validation: Mapping[str, ValidationRule | Mapping[str, Any]] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a manual route via decorator."""

        def decorator(func: Handler) -> Handler:
            self.add_route(pattern, func, methods=methods, validation=validation)
            return func

        return decorator

    def remove_route(self, pattern: str) -> bool:
        """Remove every route registered under *pattern*.

        Applies to the current table. A file-based route comes back on the
        next ``refresh()`` if its file is still there; a manual one does not.
        """
        before = len(self._manual_routes)
        self._manual_routes[:] = [
            d for d in self._manual_routes if normalize_path(d.pattern) != normalize_path(pattern)
        ]
        dropped_manual = len(self._manual_routes) != before

        self._ensure_frozen()
        removed = self._registry.update(
            lambda table: table.without(pattern) if table.get(pattern) is not None else None
        )
        return removed or dropped_manual

    # -- Introspection --

    @property
    def routes(self) -> tuple[RegisteredRoute, ...]:
        """Every registered route, in registration order."""
        self._ensure_frozen()
        return self._registry.table.routes

    @property
    def stats(self) -> RouterStats:
        self._ensure_frozen()
        return self._registry.table.stats

    def has_route(self, pattern: str, method: str | None = None) -> bool:
        """Whether *pattern* is registered, optionally for *method*."""
        self._ensure_frozen()
        route = self._registry.table.get(pattern)
        if route is None:
            return False
        return method is None or method.upper() in route.handlers

    def find_routes(self, query: str | re.Pattern[str]) -> list[RegisteredRoute]:
        """Routes whose path contains *query*, or matches it if it is a regex."""
        self._ensure_frozen()
        if isinstance(query, re.Pattern):
            return [r for r in self._registry.table.routes if query.search(r.path)]
        return [r for r in self._registry.table.routes if query in r.path]

    def match(self, method: str, path: str) -> RouteMatch | None:
        """Resolve *method* and *path* without dispatching."""
        self._ensure_frozen()
        return self._registry.resolve(method, path)

    def health(self) -> dict[str, Any]:
        """A JSON-ready health summary of the router."""
        stats = self.stats
        return {
            "status": "healthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "router": {
                "totalRoutes": stats.total_routes,
                "lastScanTime": stats.last_scan_time.isoformat() if stats.last_scan_time else None,
                "routesDirectory": str(self.config.routes_dir) if self._discover else None,
            },
            "uptime": round(time.monotonic() - self._started, 3),
            "python": platform.python_version(),
        }

    # -- Refresh --

    def refresh(self) -> BuildReport:
        """Rescan the routes directory and atomically swap in the new table.

        If the directory cannot be read, the current table stays in place
        and the report carries the error.
        """
        with self._freeze_lock:
            if not self._frozen:
                return self._freeze()
        return self._registry.refresh()

    async def arefresh(self) -> BuildReport:
        """``refresh()`` in a worker thread, so the event loop keeps serving."""
        return await anyio.to_thread.run_sync(self.refresh)

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register an error handler via decorator.

        Keyed by exception type or by status code; the type wins when both
        are registered.
        """

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add a middleware to the pipeline."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()

        await handle_request(
            scope,
            receive,
            send,
            table=self._registry.table,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            config=self.config,
            health=self.health if self.config.health_path else None,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup, before the first HTTP request, then
        runs the startup and shutdown hooks.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    for hook in self._startup_hooks:
                        await invoke(hook)
                except Exception as exc:
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    await invoke(hook)
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _collect_routes(self) -> RouteSet:
        """Route source for the registry: discovered files, then manual routes."""
        if not self._discover:
            return RouteSet(tuple(self._manual_routes), files_scanned=0)
        found = discover_routes(self.config)
        return RouteSet(
            (*found.definitions, *self._manual_routes),
            files_scanned=found.files_scanned,
            errors=found.errors,
        )

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> BuildReport:
        """Build the first route table and capture the middleware.

        MUST only be called while holding _freeze_lock.
        """
        report = self._registry.refresh()
        self._middleware = tuple(self._middleware_list)
        self._frozen = True
        return report

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register middleware, error handlers, and hooks first."
            )
            raise RuntimeError(msg)
