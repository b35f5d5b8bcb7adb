"""ASGI response sending: translate a Response into ASGI messages."""

from sprig._internal.asgi import Send
from sprig.http.response import Response


def _body_allowed(status: int, method: str) -> bool:
    """Whether a response body may be sent."""
    # 1xx, 204, and 304 carry no body; neither does any reply to HEAD
    if method == "HEAD":
        return False
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response, send: Send, *, method: str = "GET") -> None:
    """Send *response* as one ``http.response.start`` and one body message."""
    raw_headers: list[tuple[bytes, bytes]] = []
    if response.status not in {204, 304}:
        raw_headers.append((b"content-type", response.content_type.encode("latin-1")))
    raw_headers.extend(
        (name.lower().encode("latin-1"), value.encode("latin-1"))
        for name, value in response.headers
    )

    body = response.body_bytes if _body_allowed(response.status, method) else b""
    if response.status != 204:
        length = len(response.body_bytes) if method == "HEAD" else len(body)
        raw_headers.append((b"content-length", str(length).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send({"type": "http.response.body", "body": body})
