"""Filesystem route discovery.

Scans the routes directory, imports each route file, and turns it into a
``RouteDefinition`` for the registry. ``discover_routes`` is the route
source an ``App`` refreshes from.
"""

import logging
import time

from sprig.config import RouterConfig
from sprig.discovery.loader import RouteModule, load_route_module
from sprig.discovery.scanner import RouteFile, route_path_from_file, scan_routes
from sprig.errors import RouteLoadError
from sprig.routing.registry import BuildError, RouteDefinition, RouteSet

__all__ = [
    "RouteFile",
    "RouteModule",
    "discover_routes",
    "load_route_module",
    "route_path_from_file",
    "scan_routes",
]

logger = logging.getLogger("sprig.discovery")


def discover_routes(config: RouterConfig) -> RouteSet:
    """Scan and load every route file under ``config.routes_dir``.

    A file that fails to import or defines no handler is logged, recorded
    in ``RouteSet.errors``, and skipped; the rest still register.

    Raises:
        FileNotFoundError: If the routes directory is missing.
    """
    started = time.perf_counter()
    files = scan_routes(config.routes_dir, extensions=config.extensions, ignore=config.ignore)
    if config.enable_logging:
        logger.info("Found %d route files in %s", len(files), config.routes_dir)

    definitions: list[RouteDefinition] = []
    errors: list[BuildError] = []

    for file in files:
        pattern = route_path_from_file(file.relative_path, config.base_prefix)
        try:
            module = load_route_module(file)
        except RouteLoadError as exc:
            logger.error("Error loading route %s: %s", file.file_path, exc.reason)
            errors.append(BuildError(pattern, file.file_path, exc.reason))
            continue

        if not module.handlers:
            logger.warning("No handler found for route: %s (%s)", pattern, file.file_path)
            errors.append(BuildError(pattern, file.file_path, "no handlers defined"))
            continue

        definitions.append(
            RouteDefinition(
                pattern=pattern,
                handlers=module.handlers,
                file_path=file.file_path,
                validation=module.validation,
                metadata=module.metadata,
            )
        )

    if config.enable_logging:
        logger.debug(
            "Loaded %d route modules in %.1fms",
            len(definitions),
            (time.perf_counter() - started) * 1000,
        )
    return RouteSet(tuple(definitions), files_scanned=len(files), errors=tuple(errors))
