"""Immutable HTTP request.

Metadata is frozen at creation; the body is read asynchronously and
cached after the first read.
"""

from __future__ import annotations

import json
from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

from sprig._internal.asgi import Receive, Scope
from sprig.http.headers import Headers
from sprig.http.query import QueryParams
from sprig.routing.params import coerce_params

if TYPE_CHECKING:
    from sprig.routing.route import ParamValue, RegisteredRoute

# RFC 3986 pchar plus "/", left unescaped when rebuilding a raw path
_PATH_SAFE = "/:@!$&'()*+,;=-._~"


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path`` is percent-decoded; ``raw_path`` is the path as sent, with any
    non-ASCII bytes percent-escaped. Routes match against ``raw_path``
    so each segment is decoded exactly once.
    ``path_params`` holds what the matched route extracted: strings for
    single parameters and tuples of strings for catch-alls. ``route`` is
    the matched ``RegisteredRoute`` once routing has happened.
    """

    method: str
    path: str
    raw_path: str
    headers: Headers
    query: QueryParams
    path_params: Mapping[str, ParamValue]
    route: RegisteredRoute | None
    client: tuple[str, int] | None

    _receive: Receive

    # Holds the body once read; the dict is mutable, the field is not
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    @property
    def typed_params(self) -> dict[str, Any]:
        """``path_params`` with numeric and boolean strings converted.

        ``{"id": "42"}`` becomes ``{"id": 42}``; catch-all tuples are left
        as they are.
        """
        return coerce_params(self.path_params)

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def url(self) -> str:
        """Path plus query string."""
        if self.query.raw:
            return f"{self.path}?{self.query.raw.decode('latin-1')}"
        return self.path

    async def body(self) -> bytes:
        """Read the full request body (cached after the first call)."""
        if "body" not in self._cache:
            self._cache["body"] = b"".join([chunk async for chunk in self.stream()])
        return self._cache["body"]

    async def stream(self) -> AsyncGenerator[bytes]:
        """Yield the request body in chunks as they arrive."""
        while True:
            message = await self._receive()
            chunk = message.get("body", b"")
            if chunk:
                yield chunk
            if not message.get("more_body", False):
                break

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    async def json(self) -> Any:
        """Parse the body as JSON."""
        return json.loads(await self.body())

    def with_route(self, route: RegisteredRoute, params: Mapping[str, ParamValue]) -> Request:
        """A copy bound to the matched route; the body cache is shared."""
        return Request(
            method=self.method,
            path=self.path,
            raw_path=self.raw_path,
            headers=self.headers,
            query=self.query,
            path_params=params,
            route=route,
            client=self.client,
            _receive=self._receive,
            _cache=self._cache,
        )

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        client = scope.get("client")
        raw_path = scope.get("raw_path")
        if raw_path:
            # Bytes outside ASCII are escaped, so each segment decodes as UTF-8
            raw = quote(raw_path.split(b"?", 1)[0], safe=_PATH_SAFE + "%")
        else:
            raw = quote(scope["path"], safe=_PATH_SAFE)
        return cls(
            method=scope["method"].upper(),
            path=scope["path"],
            raw_path=raw,
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            path_params={},
            route=None,
            client=tuple(client) if client else None,
            _receive=receive,
        )
