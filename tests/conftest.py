"""Shared fixtures: route directories written into ``tmp_path``."""

import textwrap
from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

import pytest

WriteRoutes: TypeAlias = Callable[[dict[str, str]], Path]


@pytest.fixture
def write_routes(tmp_path: Path) -> WriteRoutes:
    """Write ``{relative_path: source}`` under ``tmp_path / "routes"``.

    Returns the routes directory. Can be called again to add or replace
    files in the same directory.
    """
    root = tmp_path / "routes"
    root.mkdir(exist_ok=True)

    def write(files: dict[str, str]) -> Path:
        for relative, source in files.items():
            target = root / relative
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(textwrap.dedent(source), encoding="utf-8")
        return root

    return write


USERS_INDEX = """
    USERS = [{"id": 1, "name": "Ada"}, {"id": 2, "name": "Grace"}]

    def get():
        return {"users": USERS}

    async def post(request):
        data = await request.json()
        return ({"created": data}, 201)
"""

USER_BY_ID = """
    from sprig.validation import integer

    param_validation = {"id": integer("User ID must be a number")}
    route_metadata = {"description": "A single user"}

    def get(id: str):
        return {"id": id}

    def delete(id: int):
        return None
"""

USER_PROFILE = """
    def get(request, id):
        return {"profile_of": id, "typed": request.typed_params["id"]}
"""

PRODUCT_SEGMENTS = """
    param_validation = {
        "segments": {"validator": lambda s: len(s) <= 3, "errorMessage": "Too deep"},
    }

    class handler:
        @staticmethod
        def get(segments):
            return {"segments": list(segments)}
"""


@pytest.fixture
def sample_routes(write_routes: WriteRoutes) -> Path:
    """A routes tree with one route of each type."""
    return write_routes(
        {
            "api/users/index.py": USERS_INDEX,
            "api/users/[id].py": USER_BY_ID,
            "api/users/[id]/profile.py": USER_PROFILE,
            "api/products/[...segments].py": PRODUCT_SEGMENTS,
        }
    )
