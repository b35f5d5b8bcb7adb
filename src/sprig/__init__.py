"""Sprig — file-based routing for ASGI applications.

The routes directory is the URL map. Bracket segments become parameters,
``[...name]`` catches the rest of the path, and every route file exports
handlers named after HTTP methods::

    # routes/api/users/[id].py
    def get(id: str):
        return {"id": id}

Basic usage::

    from sprig import App, RouterConfig

    app = App(RouterConfig(routes_dir="routes"))

The routing core works on its own, without the ASGI layer::

    from sprig import compile_pattern, match_path

    pattern = compile_pattern("/api/products/[...segments]")
    match_path(pattern, "/api/products/a/b")  # {"segments": ("a", "b")}
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "BuildReport",
    "CORSConfig",
    "CORSMiddleware",
    "ConfigurationError",
    "ErrorKind",
    "HTTPError",
    "MalformedPattern",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Registry",
    "Request",
    "RequestLoggerMiddleware",
    "Response",
    "RouteDefinition",
    "RouteLoadError",
    "RouteTable",
    "RouteType",
    "RouterConfig",
    "SprigError",
    "ValidationError",
    "ValidationFailed",
    "ValidationRule",
    "classify",
    "compile_pattern",
    "match_path",
    "validate",
]

# Public name -> module that defines it
_EXPORTS: dict[str, str] = {
    "App": "sprig.app",
    "RouterConfig": "sprig.config",
    "Request": "sprig.http.request",
    "Response": "sprig.http.response",
    "CORSConfig": "sprig.middleware.builtin",
    "CORSMiddleware": "sprig.middleware.builtin",
    "RequestLoggerMiddleware": "sprig.middleware.builtin",
    "Middleware": "sprig.middleware.protocol",
    "Next": "sprig.middleware.protocol",
    "compile_pattern": "sprig.routing.pattern",
    "classify": "sprig.routing.classify",
    "match_path": "sprig.routing.match",
    "RouteType": "sprig.routing.route",
    "BuildReport": "sprig.routing.registry",
    "Registry": "sprig.routing.registry",
    "RouteDefinition": "sprig.routing.registry",
    "RouteTable": "sprig.routing.registry",
    "ErrorKind": "sprig.validation.result",
    "ValidationError": "sprig.validation.result",
    "ValidationRule": "sprig.validation.rules",
    "validate": "sprig.validation",
    "SprigError": "sprig.errors",
    "ConfigurationError": "sprig.errors",
    "HTTPError": "sprig.errors",
    "MalformedPattern": "sprig.errors",
    "MethodNotAllowed": "sprig.errors",
    "NotFound": "sprig.errors",
    "RouteLoadError": "sprig.errors",
    "ValidationFailed": "sprig.errors",
}


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import sprig`` fast while providing a clean top-level API.
    """
    module_name = _EXPORTS.get(name)
    if module_name is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)

    import importlib

    return getattr(importlib.import_module(module_name), name)
