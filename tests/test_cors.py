"""Tests for CORS middleware."""

from sprig.app import App
from sprig.middleware.builtin import CORSConfig, CORSMiddleware
from sprig.testing import TestClient


def _make_cors_app(config: CORSConfig | None = None) -> App:
    """Helper: an app with CORS middleware and one GET/POST route."""
    app = App(discover=False)
    app.add_middleware(CORSMiddleware(config))
    app.add_route(
        "/api/items/[id]",
        {"get": lambda id: {"id": id}, "post": lambda: ("created", 201)},
    )
    return app


def _names(response) -> set[str]:
    return {name for name, _ in response.headers}


class TestCORSNonCorsRequests:
    """Requests without an Origin header pass through unaffected."""

    async def test_no_origin_header(self) -> None:
        async with TestClient(_make_cors_app()) as client:
            response = await client.get("/api/items/1")
        assert response.status == 200
        assert "access-control-allow-origin" not in _names(response)


class TestCORSSimpleRequests:
    async def test_wildcard_origin(self) -> None:
        async with TestClient(_make_cors_app()) as client:
            response = await client.get("/api/items/1", headers={"Origin": "https://a.example"})
        assert ("access-control-allow-origin", "*") in response.headers
        assert "vary" not in _names(response)

    async def test_listed_origin_is_echoed(self) -> None:
        config = CORSConfig(allow_origins=("https://a.example",))
        async with TestClient(_make_cors_app(config)) as client:
            response = await client.get("/api/items/1", headers={"Origin": "https://a.example"})
        assert ("access-control-allow-origin", "https://a.example") in response.headers
        assert ("vary", "Origin") in response.headers

    async def test_disallowed_origin(self) -> None:
        config = CORSConfig(allow_origins=("https://a.example",))
        async with TestClient(_make_cors_app(config)) as client:
            response = await client.get("/api/items/1", headers={"Origin": "https://evil.example"})
        assert response.status == 200
        assert "access-control-allow-origin" not in _names(response)

    async def test_credentials_echo_origin_even_with_wildcard(self) -> None:
        config = CORSConfig(allow_credentials=True)
        async with TestClient(_make_cors_app(config)) as client:
            response = await client.get("/api/items/1", headers={"Origin": "https://a.example"})
        assert ("access-control-allow-origin", "https://a.example") in response.headers
        assert ("access-control-allow-credentials", "true") in response.headers

    async def test_expose_headers(self) -> None:
        config = CORSConfig(expose_headers=("X-Total", "X-Page"))
        async with TestClient(_make_cors_app(config)) as client:
            response = await client.get("/api/items/1", headers={"Origin": "https://a.example"})
        assert ("access-control-expose-headers", "X-Total, X-Page") in response.headers


class TestCORSPreflight:
    async def test_preflight_short_circuits(self) -> None:
        async with TestClient(_make_cors_app()) as client:
            response = await client.options(
                "/api/items/1",
                headers={
                    "Origin": "https://a.example",
                    "Access-Control-Request-Method": "POST",
                },
            )
        assert response.status == 204
        assert response.body == b""
        assert ("access-control-max-age", "600") in response.headers
        assert (
            "access-control-allow-headers",
            "Content-Type, Authorization",
        ) in response.headers
        methods = dict(response.headers)["access-control-allow-methods"]
        assert "POST" in methods.split(", ")

    async def test_options_without_request_method_is_routed(self) -> None:
        async with TestClient(_make_cors_app()) as client:
            response = await client.options(
                "/api/items/1", headers={"Origin": "https://a.example"}
            )
        assert response.status == 405
