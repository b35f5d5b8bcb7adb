"""Built-in middleware: CORS and per-request logging."""

import logging
import time
from dataclasses import dataclass

from sprig.http.request import Request
from sprig.http.response import Response
from sprig.middleware.protocol import Next

request_logger = logging.getLogger("sprig.requests")


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS configuration.

    The defaults allow any origin for every routed method, with the
    ``Content-Type`` and ``Authorization`` request headers::

        CORSConfig(allow_origins=("https://example.com",), allow_credentials=True)
    """

    allow_origins: tuple[str, ...] = ("*",)
    allow_methods: tuple[str, ...] = ("GET", "POST", "PUT", "DELETE", "PATCH", "HEAD", "OPTIONS")
    allow_headers: tuple[str, ...] = ("Content-Type", "Authorization")
    expose_headers: tuple[str, ...] = ()
    allow_credentials: bool = False
    max_age: int = 600


class CORSMiddleware:
    """Answers preflight requests and decorates responses with CORS headers.

    An ``OPTIONS`` request carrying ``Access-Control-Request-Method`` is
    a preflight and gets a 204 without reaching the route. Requests from
    origins outside ``allow_origins`` pass through untouched.

    Usage::

        app.add_middleware(CORSMiddleware(CORSConfig(allow_origins=("https://a.example",))))
    """

    __slots__ = ("config",)

    def __init__(self, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()

    def _origin_allowed(self, origin: str) -> bool:
        return "*" in self.config.allow_origins or origin in self.config.allow_origins

    def _decorate(self, response: Response, origin: str) -> Response:
        cfg = self.config
        if "*" in cfg.allow_origins and not cfg.allow_credentials:
            response = response.with_header("Access-Control-Allow-Origin", "*")
        else:
            # Echoed origin varies per request
            response = response.with_header("Access-Control-Allow-Origin", origin)
            response = response.with_header("Vary", "Origin")

        if cfg.allow_credentials:
            response = response.with_header("Access-Control-Allow-Credentials", "true")
        if cfg.expose_headers:
            response = response.with_header(
                "Access-Control-Expose-Headers", ", ".join(cfg.expose_headers)
            )
        return response

    def _preflight(self, origin: str) -> Response:
        cfg = self.config
        response = self._decorate(Response(status=204), origin)
        response = response.with_header("Access-Control-Allow-Methods", ", ".join(cfg.allow_methods))
        if cfg.allow_headers:
            response = response.with_header(
                "Access-Control-Allow-Headers", ", ".join(cfg.allow_headers)
            )
        return response.with_header("Access-Control-Max-Age", str(cfg.max_age))

    async def __call__(self, request: Request, next: Next) -> Response:
        origin = request.headers.get("origin")
        if origin is None or not self._origin_allowed(origin):
            return await next(request)

        if request.method == "OPTIONS" and "access-control-request-method" in request.headers:
            return self._preflight(origin)

        return self._decorate(await next(request), origin)


class RequestLoggerMiddleware:
    """Logs each request as ``[sprig] GET /api/users/42 - 200 (3ms)``.

    Lines go to the ``sprig.requests`` logger at INFO.
    """

    __slots__ = ("prefix",)

    def __init__(self, prefix: str = "[sprig]") -> None:
        self.prefix = prefix

    async def __call__(self, request: Request, next: Next) -> Response:
        start = time.perf_counter()
        request_logger.info("%s %s %s - Start", self.prefix, request.method, request.path)
        response = await next(request)
        elapsed = (time.perf_counter() - start) * 1000
        request_logger.info(
            "%s %s %s - %d (%.0fms)",
            self.prefix,
            request.method,
            request.path,
            response.status,
            elapsed,
        )
        return response
