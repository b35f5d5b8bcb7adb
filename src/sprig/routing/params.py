"""Path parameter type conversion.

Matched parameters are always strings (or tuples of strings for
catch-alls). Handlers that want numbers ask for them, either through an
annotated argument or through ``coerce_params``.
"""

import inspect
import re
from collections.abc import Mapping
from typing import Any

_INT_RE = re.compile(r"\d+")
_FLOAT_RE = re.compile(r"\d*\.\d+")

_TRUE = frozenset({"true", "1", "yes", "on"})


def coerce_value(value: str) -> str | int | float | bool:
    """Best-effort conversion of one segment.

    ``"42"`` → ``42``, ``"1.5"`` / ``".5"`` → float, ``"true"`` /
    ``"false"`` → bool, anything else unchanged.
    """
    if _INT_RE.fullmatch(value):
        return int(value)
    if _FLOAT_RE.fullmatch(value):
        return float(value)
    if value in ("true", "false"):
        return value == "true"
    return value


def coerce_params(params: Mapping[str, Any]) -> dict[str, Any]:
    """Apply ``coerce_value`` to every single-segment parameter.

    Catch-all values (tuples) are passed through untouched.
    """
    return {
        name: coerce_value(value) if isinstance(value, str) else value
        for name, value in params.items()
    }


def convert_to(value: Any, annotation: Any) -> Any:
    """Convert one extracted value to a handler's annotated type.

    Handles ``int``, ``float``, and ``bool``. Catch-all tuples, values
    that don't parse, and any other annotation come back unchanged.
    """
    if not isinstance(value, str) or annotation is inspect.Parameter.empty:
        return value
    if annotation in (int, float):
        try:
            return annotation(value)
        except ValueError:
            return value
    if annotation is bool:
        return value.lower() in _TRUE
    return value
