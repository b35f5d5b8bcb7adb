"""API — a JSON API routed entirely from the ``routes/`` directory.

Every file under ``routes/`` is a route: ``index.py`` serves its
directory, ``[id].py`` captures one segment, and ``[...segments].py``
captures the rest of the path. Module-level ``get``/``post``/... functions
are the handlers.

Run with any ASGI server:
    cd examples/api && uvicorn app:app
"""

from pathlib import Path

from sprig import App, RouterConfig
from sprig.middleware import CORSConfig, CORSMiddleware, RequestLoggerMiddleware

app = App(
    RouterConfig(
        routes_dir=Path(__file__).parent / "routes",
        health_path="/health",
    )
)

app.add_middleware(RequestLoggerMiddleware())
app.add_middleware(CORSMiddleware(CORSConfig(allow_headers=("Content-Type",))))


@app.error(404)
def not_found(request):
    return {"error": "Not Found", "path": request.path, "hint": "try /api/users"}
