"""HTTP primitives: immutable request, response, headers, and query."""

from sprig.http.headers import Headers
from sprig.http.query import QueryParams
from sprig.http.request import Request
from sprig.http.response import Response

__all__ = ["Headers", "QueryParams", "Request", "Response"]
