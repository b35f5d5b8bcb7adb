"""Async test client for sprig applications.

Sends requests through the ASGI interface directly and returns the same
``Response`` type handlers produce. No network involved.
"""

from __future__ import annotations

import json as json_module
from typing import Any
from urllib.parse import unquote

from sprig._internal.invoke import invoke
from sprig.app import App
from sprig.http.response import Response


class TestClient:
    """Async test client for sprig applications.

    Usage::

        async with TestClient(app) as client:
            response = await client.get("/api/users/42")
            assert response.status == 200
            assert response.json() == {"id": "42"}
    """

    __test__ = False  # Tell pytest this is not a test class

    __slots__ = ("app",)

    def __init__(self, app: App) -> None:
        self.app = app

    async def __aenter__(self) -> TestClient:
        self.app._ensure_frozen()
        for hook in self.app._startup_hooks:
            await invoke(hook)
        return self

    async def __aexit__(self, *args: object) -> None:
        for hook in self.app._shutdown_hooks:
            await invoke(hook)

    async def get(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        """Send a GET request."""
        return await self.request("GET", path, headers=headers)

    async def head(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("HEAD", path, headers=headers)

    async def options(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("OPTIONS", path, headers=headers)

    async def delete(self, path: str, *, headers: dict[str, str] | None = None) -> Response:
        return await self.request("DELETE", path, headers=headers)

    async def post(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send a POST request; *json* is encoded and sets the content type."""
        return await self.request("POST", path, headers=headers, body=body, json=json)

    async def put(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        return await self.request("PUT", path, headers=headers, body=body, json=json)

    async def patch(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        return await self.request("PATCH", path, headers=headers, body=body, json=json)

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        body: bytes | None = None,
        json: Any = None,
    ) -> Response:
        """Send an arbitrary request through the ASGI app.

        *path* is given as it would appear on the wire, percent-escapes
        included; the scope gets both the decoded ``path`` and ``raw_path``.
        """
        path_part, _, query_string = path.partition("?")

        merged = dict(headers or {})
        request_body = body or b""
        if json is not None:
            request_body = json_module.dumps(json).encode("utf-8")
            merged.setdefault("content-type", "application/json")

        raw_headers = [
            (name.lower().encode("latin-1"), value.encode("latin-1"))
            for name, value in merged.items()
        ]

        scope: dict[str, Any] = {
            "type": "http",
            "asgi": {"version": "3.0"},
            "http_version": "1.1",
            "method": method.upper(),
            "path": unquote(path_part),
            "raw_path": path_part.encode("utf-8"),
            "query_string": query_string.encode("utf-8"),
            "root_path": "",
            "headers": raw_headers,
            "server": ("testserver", 80),
            "client": ("127.0.0.1", 0),
        }

        body_sent = False

        async def receive() -> dict[str, Any]:
            nonlocal body_sent
            if not body_sent:
                body_sent = True
                return {"type": "http.request", "body": request_body, "more_body": False}
            return {"type": "http.disconnect"}

        status = 200
        response_headers: list[tuple[bytes, bytes]] = []
        body_parts: list[bytes] = []

        async def send(message: dict[str, Any]) -> None:
            nonlocal status, response_headers
            if message["type"] == "http.response.start":
                status = message["status"]
                response_headers = list(message.get("headers", []))
            elif message["type"] == "http.response.body":
                body_parts.append(message.get("body", b""))

        await self.app(scope, receive, send)

        content_type = ""
        extra_headers: list[tuple[str, str]] = []
        for name_b, value_b in response_headers:
            name = name_b.decode("latin-1")
            value = value_b.decode("latin-1")
            if name == "content-type":
                content_type = value
            elif name != "content-length":
                extra_headers.append((name, value))

        return Response(
            body=b"".join(body_parts),
            status=status,
            content_type=content_type,
            headers=tuple(extra_headers),
        )
