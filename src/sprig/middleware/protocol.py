"""Middleware protocol and the ``Next`` alias.

A middleware is any callable shaped like::

    async def my_mw(request: Request, next: Next) -> Response: ...

It runs after routing, so ``request.route`` and ``request.path_params``
are already set when a route matched.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from sprig.http.request import Request
from sprig.http.response import Response

Next: TypeAlias = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Functions and callable objects both qualify::

    async def timing(request: Request, next: Next) -> Response:
        start = time.monotonic()
        response = await next(request)
        return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
