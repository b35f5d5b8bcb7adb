"""Validation result records — one per violated rule."""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorKind(Enum):
    """Which check produced a violation."""

    REQUIRED = "required"
    PATTERN = "pattern"
    VALIDATOR = "validator"


@dataclass(frozen=True, slots=True)
class ValidationError:
    """A single parameter validation violation.

    This is data, not an exception: ``validate()`` returns a list of these
    so a caller can report every problem at once.
    """

    param_name: str
    value: Any
    message: str
    kind: ErrorKind

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready form used in 400 response bodies."""
        value = list(self.value) if isinstance(self.value, tuple) else self.value
        return {
            "parameter": self.param_name,
            "value": value,
            "message": self.message,
            "type": self.kind.value,
        }
