"""Tests for the immutable Response."""

from datetime import date

from sprig.http.response import JSON_CONTENT_TYPE, Response


class TestResponse:
    def test_defaults(self) -> None:
        response = Response()
        assert response.status == 200
        assert response.body_bytes == b""

    def test_with_methods_return_new_instances(self) -> None:
        original = Response("x")
        changed = original.with_status(404).with_header("X-A", "1")
        assert original.status == 200
        assert original.headers == ()
        assert changed.status == 404
        assert changed.headers == (("X-A", "1"),)

    def test_with_headers_appends(self) -> None:
        response = Response().with_header("A", "1").with_headers({"B": "2"})
        assert response.headers == (("A", "1"), ("B", "2"))

    def test_from_json(self) -> None:
        response = Response.from_json({"when": date(2024, 1, 2)}, status=201)
        assert response.status == 201
        assert response.content_type == JSON_CONTENT_TYPE
        assert response.json() == {"when": "2024-01-02"}

    def test_header_lookup_is_case_insensitive(self) -> None:
        response = Response().with_header("X-Request-Id", "abc")
        assert response.header("x-request-id") == "abc"
        assert response.header("missing") is None
        assert response.header("Content-Type") == response.content_type

    def test_text_of_bytes(self) -> None:
        assert Response(b"caf\xc3\xa9").text == "café"
