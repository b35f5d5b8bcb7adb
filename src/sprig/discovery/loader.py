"""Import route files and extract their handlers.

A route file defines handlers as functions named after HTTP methods::

    # routes/api/users/[id].py
    from sprig.validation import integer

    param_validation = {"id": integer()}
    route_metadata = {"description": "A single user"}

    def get(id: str):
        return {"id": id}

    async def delete(id: str):
        return None

Alternatively a module-level ``handler`` object (or mapping) exposes the
method functions as attributes (or keys).
"""

import importlib.util
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field
from hashlib import sha1
from types import ModuleType
from typing import Any

from sprig.discovery.scanner import RouteFile
from sprig.errors import RouteLoadError
from sprig.routing.route import HTTP_METHODS, Handler


@dataclass(frozen=True, slots=True)
class RouteModule:
    """What a single route file contributes."""

    file: RouteFile
    handlers: Mapping[str, Handler]
    validation: Mapping[str, Any] = field(default_factory=dict)
    metadata: Mapping[str, Any] = field(default_factory=dict)


def load_route_module(file: RouteFile) -> RouteModule:
    """Import *file* and collect its handlers, validation, and metadata.

    The module is imported fresh every time so a refresh picks up edits.

    Raises:
        RouteLoadError: If the file cannot be imported or its exports have
            the wrong shape.
    """
    module = _import_file(file)

    handlers = _collect_handlers(module)
    validation = getattr(module, "param_validation", None) or {}
    metadata = getattr(module, "route_metadata", None) or {}

    if not isinstance(validation, Mapping):
        raise RouteLoadError(file.file_path, "param_validation must be a mapping")
    if not isinstance(metadata, Mapping):
        raise RouteLoadError(file.file_path, "route_metadata must be a mapping")

    return RouteModule(
        file=file,
        handlers=handlers,
        validation=dict(validation),
        metadata=dict(metadata),
    )


def _import_file(file: RouteFile) -> ModuleType:
    digest = sha1(file.file_path.encode(), usedforsecurity=False).hexdigest()[:12]
    module_name = f"_sprig_route_{file.file_name.strip('[].')}_{digest}"
    spec = importlib.util.spec_from_file_location(module_name, file.file_path)
    if spec is None or spec.loader is None:
        raise RouteLoadError(file.file_path, "not an importable Python file")

    module = importlib.util.module_from_spec(spec)
    # Registered so dataclasses and pickling inside route files resolve
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as exc:
        sys.modules.pop(module_name, None)
        raise RouteLoadError(file.file_path, f"{type(exc).__name__}: {exc}") from exc
    return module


def _collect_handlers(module: ModuleType) -> dict[str, Handler]:
    found: dict[str, Handler] = {}
    for method in HTTP_METHODS:
        func = getattr(module, method.lower(), None)
        if func is not None and callable(func):
            found[method] = func
    if found:
        return found

    container = getattr(module, "handler", None)
    if container is None:
        return found

    for method in HTTP_METHODS:
        if isinstance(container, Mapping):
            func = container.get(method.lower()) or container.get(method)
        else:
            func = getattr(container, method.lower(), None)
        if func is not None and callable(func):
            found[method] = func
    return found
