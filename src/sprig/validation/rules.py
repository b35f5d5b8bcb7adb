"""Declarative validation rules for path parameters.

A rule bundles up to two checks plus presence::

    ValidationRule(pattern=r"^\\d+$", error_message="Must be a number")
    ValidationRule(predicate=lambda v: len(v) <= 5, required=False)

Factory helpers cover the common cases and return plain rules::

    param_validation = {
        "id": integer(),
        "segments": max_length(5),
    }

Route modules may also declare rules as plain dicts; ``from_dict``
converts them.
"""

import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

# Custom check over a parameter value (string or tuple of strings)
Predicate: TypeAlias = Callable[[Any], bool]

# Format patterns; \Z so a trailing newline never matches
INTEGER_RE = re.compile(r"\A[0-9]+\Z")
NUMBER_RE = re.compile(r"\A[0-9]+(?:\.[0-9]+)?\Z")
UUID_RE = re.compile(
    r"\A[0-9a-f]{8}-[0-9a-f]{4}-[1-5][0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}\Z",
    re.IGNORECASE,
)
EMAIL_RE = re.compile(r"\A[^\s@]+@[^\s@]+\.[^\s@]+\Z")
SLUG_RE = re.compile(r"\A[a-z0-9]+(?:-[a-z0-9]+)*\Z")
ALPHA_RE = re.compile(r"\A[a-zA-Z]+\Z")
ALPHANUMERIC_RE = re.compile(r"\A[a-zA-Z0-9]+\Z")

_SIGNED_INT_RE = re.compile(r"-?[0-9]+")


@dataclass(frozen=True, slots=True)
class ValidationRule:
    """Validation declared for one path parameter.

    Attributes:
        pattern: Regular expression tested against single-segment values.
            Strings are compiled on construction.
        predicate: Callable returning a truthy value when the parameter
            is valid. Exceptions it raises count as a failed check.
        required: Whether an absent value is a violation.
        error_message: Message used for pattern and predicate failures.
    """

    pattern: re.Pattern[str] | str | None = None
    predicate: Predicate | None = None
    required: bool = True
    error_message: str | None = None

    def __post_init__(self) -> None:
        if isinstance(self.pattern, str):
            object.__setattr__(self, "pattern", re.compile(self.pattern))


def from_dict(spec: Mapping[str, Any]) -> ValidationRule:
    """Build a rule from a plain mapping.

    Accepts ``pattern``, ``predicate`` (or its alias ``validator``),
    ``required``, and ``error_message`` (or ``errorMessage``). Unknown keys
    such as ``description`` are ignored.
    """
    predicate = spec.get("predicate", spec.get("validator"))
    if predicate is not None and not callable(predicate):
        msg = f"Validation predicate must be callable, got {type(predicate).__name__}"
        raise TypeError(msg)
    return ValidationRule(
        pattern=spec.get("pattern"),
        predicate=predicate,
        required=bool(spec.get("required", True)),
        error_message=spec.get("error_message", spec.get("errorMessage")),
    )


def coerce_rule(value: ValidationRule | Mapping[str, Any]) -> ValidationRule:
    """Return *value* as a ``ValidationRule``."""
    if isinstance(value, ValidationRule):
        return value
    if isinstance(value, Mapping):
        return from_dict(value)
    msg = f"Expected ValidationRule or mapping, got {type(value).__name__}"
    raise TypeError(msg)


# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------


def integer(message: str | None = None, *, required: bool = True) -> ValidationRule:
    """Value must be a non-negative whole number."""
    return ValidationRule(
        pattern=INTEGER_RE,
        required=required,
        error_message=message or "Must be a whole number",
    )


def number(message: str | None = None, *, required: bool = True) -> ValidationRule:
    """Value must be a non-negative decimal number."""
    return ValidationRule(
        pattern=NUMBER_RE,
        required=required,
        error_message=message or "Must be a number",
    )


def uuid(message: str | None = None, *, required: bool = True) -> ValidationRule:
    """Value must be a version 1-5 UUID in canonical hyphenated form."""
    return ValidationRule(
        pattern=UUID_RE,
        required=required,
        error_message=message or "Must be a valid UUID",
    )


def email(message: str | None = None, *, required: bool = True) -> ValidationRule:
    return ValidationRule(
        pattern=EMAIL_RE,
        required=required,
        error_message=message or "Must be a valid email address",
    )


def slug(message: str | None = None, *, required: bool = True) -> ValidationRule:
    """Lower-case letters and digits in hyphen-separated words (``my-post-2``)."""
    return ValidationRule(
        pattern=SLUG_RE,
        required=required,
        error_message=message or "Must be a lowercase slug",
    )


def alpha(message: str | None = None, *, required: bool = True) -> ValidationRule:
    return ValidationRule(
        pattern=ALPHA_RE,
        required=required,
        error_message=message or "Must contain only letters",
    )


def alphanumeric(message: str | None = None, *, required: bool = True) -> ValidationRule:
    return ValidationRule(
        pattern=ALPHANUMERIC_RE,
        required=required,
        error_message=message or "Must contain only letters and digits",
    )


def matches(pattern: str, message: str | None = None, *, required: bool = True) -> ValidationRule:
    """Value must match the given regex pattern."""
    return ValidationRule(
        pattern=pattern,
        required=required,
        error_message=message or f"Must match pattern: {pattern}",
    )


# ---------------------------------------------------------------------------
# Choice
# ---------------------------------------------------------------------------


def one_of(*choices: str, required: bool = True) -> ValidationRule:
    """Value must be one of the given choices."""
    allowed = frozenset(choices)
    options = ", ".join(sorted(allowed))
    return ValidationRule(
        predicate=lambda value: value in allowed,
        required=required,
        error_message=f"Must be one of: {options}",
    )


# ---------------------------------------------------------------------------
# Length (characters for a segment, segment count for a catch-all)
# ---------------------------------------------------------------------------


def min_length(n: int, *, required: bool = True) -> ValidationRule:
    """Value must have at least *n* characters or segments."""
    return ValidationRule(
        predicate=lambda value: len(value) >= n,
        required=required,
        error_message=f"Must have a length of at least {n}",
    )


def max_length(n: int, *, required: bool = True) -> ValidationRule:
    """Value must have at most *n* characters or segments."""
    return ValidationRule(
        predicate=lambda value: len(value) <= n,
        required=required,
        error_message=f"Must have a length of at most {n}",
    )


# ---------------------------------------------------------------------------
# Range
# ---------------------------------------------------------------------------


def in_range(
    low: int,
    high: int,
    message: str | None = None,
    *,
    required: bool = True,
) -> ValidationRule:
    """Value must be a whole number between *low* and *high*, inclusive.

    Accepts an optional leading ``-``. Anything else that is not digits,
    including a catch-all tuple, fails the check.
    """

    def check(value: Any) -> bool:
        if not isinstance(value, str) or not _SIGNED_INT_RE.fullmatch(value):
            return False
        return low <= int(value) <= high

    return ValidationRule(
        predicate=check,
        required=required,
        error_message=message or f"Must be a number between {low} and {high}",
    )
