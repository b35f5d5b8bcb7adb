"""Error responses for the request pipeline.

Maps ``HTTPError`` exceptions and unexpected failures to JSON responses,
using handlers registered with ``@app.error()`` when there is one. Every
default body carries ``error``, ``message``, ``statusCode``, ``path``,
and ``timestamp``.
"""

import inspect
import logging
from collections.abc import Callable
from datetime import UTC, datetime
from http import HTTPStatus
from typing import Any, TypeAlias

from sprig._internal.invoke import invoke
from sprig.errors import HTTPError, MethodNotAllowed, ValidationFailed
from sprig.http.request import Request
from sprig.http.response import Response
from sprig.server.negotiation import negotiate

logger = logging.getLogger("sprig.server")

ErrorHandlers: TypeAlias = dict[int | type, Callable[..., Any]]


def _timestamp() -> str:
    now = datetime.now(UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _status_phrase(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return f"Error {status}"


def error_body(exc: HTTPError, request: Request) -> dict[str, Any]:
    """The JSON body for *exc*.

    ``ValidationFailed`` adds ``validationErrors``; ``MethodNotAllowed``
    adds ``allowedMethods``.
    """
    body: dict[str, Any] = {
        "error": _status_phrase(exc.status),
        "message": exc.detail or _status_phrase(exc.status),
        "statusCode": exc.status,
        "path": request.path,
        "timestamp": _timestamp(),
    }
    if isinstance(exc, ValidationFailed):
        body["error"] = "Validation Error"
        body["validationErrors"] = [error.to_dict() for error in exc.errors]
    elif isinstance(exc, MethodNotAllowed):
        body["allowedMethods"] = exc.allowed
    return body


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a user-registered error handler.

    Error handlers may accept zero, one (request), or two (request, exc)
    arguments, and may be sync or async.
    """
    params = list(inspect.signature(handler).parameters.values())
    args = (request, exc)[: len(params)]
    return negotiate(await invoke(handler, *args))


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: ErrorHandlers,
    *,
    handle_404: bool = True,
) -> Response:
    """Map an HTTPError to a Response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    # Exact exception type first, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # A plain return value keeps the error's status
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    if exc.status == 404 and not handle_404:
        response = Response(body=exc.detail or "Not Found", status=404)
    else:
        response = Response.from_json(error_body(exc, request), status=exc.status)
    return response.with_headers(dict(exc.headers))


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: ErrorHandlers,
    *,
    debug: bool = False,
) -> Response:
    """Handle an unexpected exception as a 500."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        if response.status == 200:
            response = response.with_status(500)
        return response

    body: dict[str, Any] = {
        "error": "Internal Server Error",
        "message": "An unexpected error occurred",
        "statusCode": 500,
        "path": request.path,
        "timestamp": _timestamp(),
    }
    if debug:
        body["details"] = str(exc)
        body["exception"] = type(exc).__name__
    return Response.from_json(body, status=500)
