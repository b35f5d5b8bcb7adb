"""HTTP response with a chainable ``.with_*()`` API.

Every transformation returns a new Response; an instance never changes
after construction.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations.

    ::

        return Response.from_json({"id": 1}, status=201).with_header("Location", "/users/1")
    """

    body: str | bytes = ""
    status: int = 200
    content_type: str = TEXT_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_json(cls, data: Any, *, status: int = 200) -> Response:
        """A JSON response; values json can't encode are rendered with ``str``."""
        return cls(
            body=json.dumps(data, default=str),
            status=status,
            content_type=JSON_CONTENT_TYPE,
        )

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        """Return a new Response with every header in *headers* added."""
        return replace(self, headers=(*self.headers, *headers.items()))

    def with_content_type(self, content_type: str) -> Response:
        return replace(self, content_type=content_type)

    # -- Body helpers --

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.body_bytes)

    def header(self, name: str) -> str | None:
        """First value of header *name* (case-insensitive), if set."""
        wanted = name.lower()
        if wanted == "content-type":
            return self.content_type
        for key, value in self.headers:
            if key.lower() == wanted:
                return value
        return None
