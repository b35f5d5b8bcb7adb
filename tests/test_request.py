"""Tests for Request construction and body access."""

from typing import Any

from sprig.http.request import Request
from sprig.routing.pattern import compile_pattern
from sprig.routing.route import RegisteredRoute


def _scope(**overrides: Any) -> dict[str, Any]:
    scope: dict[str, Any] = {
        "type": "http",
        "method": "get",
        "path": "/files/a b",
        "raw_path": b"/files/a%20b",
        "query_string": b"page=2&tag=x&tag=y",
        "headers": [(b"content-type", b"application/json"), (b"x-tag", b"1"), (b"x-tag", b"2")],
        "client": ("10.0.0.1", 5000),
    }
    scope.update(overrides)
    return scope


def _receive_chunks(*chunks: bytes):
    queue = list(chunks)

    async def receive() -> dict[str, Any]:
        body = queue.pop(0)
        return {"type": "http.request", "body": body, "more_body": bool(queue)}

    return receive


class TestFromAsgi:
    def test_fields(self) -> None:
        request = Request.from_asgi(_scope(), _receive_chunks(b""))
        assert request.method == "GET"
        assert request.path == "/files/a b"
        assert request.raw_path == "/files/a%20b"
        assert request.client == ("10.0.0.1", 5000)
        assert request.content_type == "application/json"
        assert request.route is None
        assert request.path_params == {}

    def test_headers_and_query(self) -> None:
        request = Request.from_asgi(_scope(), _receive_chunks(b""))
        assert request.headers["X-Tag"] == "1"
        assert request.headers.get_list("x-tag") == ["1", "2"]
        assert request.query.get_int("page") == 2
        assert request.query.get_list("tag") == ["x", "y"]
        assert request.url == "/files/a b?page=2&tag=x&tag=y"

    def test_raw_path_rebuilt_when_missing(self) -> None:
        scope = _scope()
        del scope["raw_path"]
        request = Request.from_asgi(scope, _receive_chunks(b""))
        assert request.raw_path == "/files/a%20b"

    def test_non_ascii_raw_bytes_escaped(self) -> None:
        request = Request.from_asgi(
            _scope(path="/echo/café", raw_path="/echo/café".encode()), _receive_chunks(b"")
        )
        assert request.raw_path == "/echo/caf%C3%A9"

    def test_existing_escapes_kept(self) -> None:
        request = Request.from_asgi(_scope(raw_path=b"/a%2Fb/caf%C3%A9"), _receive_chunks(b""))
        assert request.raw_path == "/a%2Fb/caf%C3%A9"

    def test_query_stripped_from_raw_path(self) -> None:
        request = Request.from_asgi(_scope(raw_path=b"/files/x?y=1"), _receive_chunks(b""))
        assert request.raw_path == "/files/x"


class TestBody:
    async def test_body_is_joined_and_cached(self) -> None:
        request = Request.from_asgi(_scope(), _receive_chunks(b'{"a":', b" 1}"))
        assert await request.json() == {"a": 1}
        assert await request.body() == b'{"a": 1}'

    async def test_text(self) -> None:
        request = Request.from_asgi(_scope(), _receive_chunks("café".encode()))
        assert await request.text() == "café"


class TestWithRoute:
    def test_binds_route_and_params(self) -> None:
        route = RegisteredRoute(
            pattern=compile_pattern("/orders/[id]"),
            handlers={"GET": lambda: None},
        )
        request = Request.from_asgi(_scope(), _receive_chunks(b""))
        bound = request.with_route(route, {"id": "12"})
        assert bound.route is route
        assert bound.typed_params == {"id": 12}
        assert request.route is None
