"""ASGI handler — translates ASGI scope/messages to sprig types.

The only component that touches raw ASGI directly. Builds the Request,
resolves it against the current route table, runs middleware, validation
and the handler, and sends the Response back through ASGI ``send()``.
"""

import inspect
from collections.abc import Callable, Mapping
from typing import Any

from sprig._internal.asgi import Receive, Scope, Send
from sprig._internal.invoke import invoke
from sprig.config import RouterConfig
from sprig.errors import HTTPError, MethodNotAllowed, NotFound, ValidationFailed
from sprig.http.request import Request
from sprig.http.response import Response
from sprig.middleware.protocol import Next
from sprig.routing.params import convert_to
from sprig.routing.pattern import normalize_path
from sprig.routing.registry import RouteTable
from sprig.routing.route import ParamValue, RouteMatch
from sprig.server.errors import ErrorHandlers, handle_http_error, handle_internal_error
from sprig.server.negotiation import negotiate
from sprig.server.sender import send_response
from sprig.validation import validate


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    table: RouteTable,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: ErrorHandlers,
    config: RouterConfig,
    health: Callable[[], dict[str, Any]] | None = None,
) -> None:
    """Process a single HTTP request through the full pipeline.

    *table* is read once by the caller, so the whole request sees one
    consistent set of routes even if a refresh lands mid-request.
    """
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    match = _resolve(table, request)
    if match is not None:
        request = request.with_route(match.route, match.params)

    health_path = normalize_path(config.health_path) if config.health_path else None

    async def dispatch(req: Request) -> Response:
        is_health = health is not None and normalize_path(req.path) == health_path
        if is_health and req.method in ("GET", "HEAD"):
            return Response.from_json(health())

        if match is None:
            raise _no_route(table, req, config)

        if config.validate_params and match.route.validation:
            errors = validate(match.params, match.route.validation)
            if errors:
                raise ValidationFailed(errors)

        return await _invoke_handler(match, req)

    # Wrap middleware around the dispatch
    handler: Next = dispatch
    for mw in reversed(middleware):

        async def make_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = make_next

    try:
        response = await handler(request)
    except HTTPError as exc:
        response = await handle_http_error(
            exc, request, error_handlers, handle_404=config.handle_404
        )
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug=config.debug)

    await send_response(response, send, method=request.method)


def _resolve(table: RouteTable, request: Request) -> RouteMatch | None:
    match = table.resolve(request.method, request.raw_path)
    # HEAD falls back to GET; the sender drops the body
    if match is None and request.method == "HEAD":
        match = table.resolve("GET", request.raw_path)
    return match


def _no_route(table: RouteTable, request: Request, config: RouterConfig) -> HTTPError:
    """404, or 405 when the path exists under other methods."""
    allowed = table.allowed_methods(request.raw_path)
    if allowed:
        return MethodNotAllowed(
            allowed, detail=f"Method {request.method} is not allowed for this route"
        )
    return NotFound(config.not_found_message or f"Route '{request.path}' not found")


async def _invoke_handler(match: RouteMatch, request: Request) -> Response:
    """Call the matched handler and negotiate its return value."""
    handler = match.handler
    kwargs = _build_handler_kwargs(handler, request, match.params)
    result = await invoke(handler, **kwargs)
    return negotiate(result)


def _build_handler_kwargs(
    handler: Callable[..., Any],
    request: Request,
    path_params: Mapping[str, ParamValue],
) -> dict[str, Any]:
    """Inspect the handler signature and build kwargs.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. ``params``, the full path parameter mapping
    3. Path parameters by name, converted to the annotated type if any
    4. ``**kwargs`` receives every path parameter not already bound
    """
    sig = inspect.signature(handler, eval_str=True)
    kwargs: dict[str, Any] = {}
    accepts_rest = False

    for name, param in sig.parameters.items():
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            accepts_rest = True
        elif name == "request" or param.annotation is Request:
            kwargs[name] = request
        elif name == "params" and name not in path_params:
            kwargs[name] = dict(path_params)
        elif name in path_params:
            kwargs[name] = convert_to(path_params[name], param.annotation)

    if accepts_rest:
        for name, value in path_params.items():
            kwargs.setdefault(name, value)
    return kwargs

