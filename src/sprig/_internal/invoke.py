"""Call route handlers and hooks whether they are ``def`` or ``async def``.

Usage::

    from sprig._internal.invoke import invoke

    result = await invoke(handler, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *handler* and await the result when it is awaitable."""
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
