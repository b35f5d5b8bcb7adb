"""Request middleware: the protocol plus CORS and request logging."""

from sprig.middleware.builtin import CORSConfig, CORSMiddleware, RequestLoggerMiddleware
from sprig.middleware.protocol import Middleware, Next

__all__ = [
    "CORSConfig",
    "CORSMiddleware",
    "Middleware",
    "Next",
    "RequestLoggerMiddleware",
]
