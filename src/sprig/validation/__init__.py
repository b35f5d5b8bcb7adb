"""Path parameter validation — declarative rules, every violation reported.

Usage::

    from sprig.validation import ValidationRule, integer, validate

    errors = validate(match.params, {
        "id": integer(),
        "slug": ValidationRule(predicate=lambda v: len(v) >= 3),
    })
    if errors:
        raise ValidationFailed(errors)
"""

from collections.abc import Mapping
from typing import Any

from sprig.validation.result import ErrorKind, ValidationError
from sprig.validation.rules import (
    ValidationRule,
    alpha,
    alphanumeric,
    coerce_rule,
    email,
    from_dict,
    in_range,
    integer,
    matches,
    max_length,
    min_length,
    number,
    one_of,
    slug,
    uuid,
)

__all__ = [
    "ErrorKind",
    "ValidationError",
    "ValidationRule",
    "alpha",
    "alphanumeric",
    "coerce_rule",
    "email",
    "from_dict",
    "in_range",
    "integer",
    "matches",
    "max_length",
    "min_length",
    "number",
    "one_of",
    "slug",
    "uuid",
    "validate",
]


def validate(
    params: Mapping[str, Any],
    rules: Mapping[str, ValidationRule | Mapping[str, Any]],
) -> list[ValidationError]:
    """Validate extracted parameters against declared rules.

    Every rule is evaluated; violations are collected in rule order rather
    than stopping at the first one. Per parameter the checks run as
    required → pattern → predicate, and a missing value skips the rest.

    Args:
        params: Parameter name to value, as returned by the matcher.
        rules: Parameter name to rule. Plain dicts are accepted.

    Returns:
        The violations found; an empty list means the parameters are valid.

    Example::

        validate({"id": "abc"}, {"id": ValidationRule(pattern=r"^\\d+$")})
        # [ValidationError(param_name="id", value="abc", ..., kind=ErrorKind.PATTERN)]
    """
    errors: list[ValidationError] = []

    for name, declared in rules.items():
        rule = coerce_rule(declared)
        value = params.get(name)

        if value is None:
            if rule.required:
                errors.append(
                    ValidationError(
                        param_name=name,
                        value=value,
                        message=f"Parameter '{name}' is required",
                        kind=ErrorKind.REQUIRED,
                    )
                )
            continue

        if rule.pattern is not None and isinstance(value, str):
            if not rule.pattern.search(value):
                errors.append(
                    ValidationError(
                        param_name=name,
                        value=value,
                        message=rule.error_message
                        or f"Parameter '{name}' does not match required pattern",
                        kind=ErrorKind.PATTERN,
                    )
                )

        if rule.predicate is not None:
            try:
                valid = rule.predicate(value)
            except Exception as exc:
                errors.append(
                    ValidationError(
                        param_name=name,
                        value=value,
                        message=f"Validation error for parameter '{name}': {exc}",
                        kind=ErrorKind.VALIDATOR,
                    )
                )
                continue
            if not valid:
                errors.append(
                    ValidationError(
                        param_name=name,
                        value=value,
                        message=rule.error_message
                        or f"Parameter '{name}' failed custom validation",
                        kind=ErrorKind.VALIDATOR,
                    )
                )

    return errors
