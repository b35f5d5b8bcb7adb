"""Tests for sprig.validation — rule evaluation and error collection."""

import pytest

from sprig.validation import ErrorKind, ValidationRule, validate


class TestRequired:
    def test_missing_required(self) -> None:
        errors = validate({}, {"id": ValidationRule()})
        assert len(errors) == 1
        assert errors[0].kind is ErrorKind.REQUIRED
        assert errors[0].message == "Parameter 'id' is required"
        assert errors[0].value is None

    def test_missing_optional_is_fine(self) -> None:
        assert validate({}, {"id": ValidationRule(pattern=r"^\d+$", required=False)}) == []

    def test_missing_skips_other_checks(self) -> None:
        calls: list[object] = []
        rule = ValidationRule(pattern=r"^\d+$", predicate=lambda v: calls.append(v) or True)
        errors = validate({}, {"id": rule})
        assert [e.kind for e in errors] == [ErrorKind.REQUIRED]
        assert calls == []


class TestPattern:
    def test_pattern_violation(self) -> None:
        errors = validate({"id": "abc"}, {"id": {"pattern": r"^\d+$"}})
        assert len(errors) == 1
        assert errors[0].kind is ErrorKind.PATTERN
        assert errors[0].param_name == "id"
        assert errors[0].value == "abc"
        assert errors[0].message == "Parameter 'id' does not match required pattern"

    def test_pattern_pass(self) -> None:
        assert validate({"id": "42"}, {"id": {"pattern": r"^\d+$"}}) == []

    def test_unanchored_pattern_searches(self) -> None:
        assert validate({"slug": "my-post"}, {"slug": {"pattern": r"-"}}) == []

    def test_custom_message(self) -> None:
        rule = ValidationRule(pattern=r"^\d+$", error_message="ID must be numeric")
        errors = validate({"id": "x"}, {"id": rule})
        assert errors[0].message == "ID must be numeric"

    def test_pattern_ignored_for_spread_values(self) -> None:
        assert validate({"segments": ("a", "b")}, {"segments": {"pattern": r"^\d+$"}}) == []


class TestPredicate:
    def test_falsy_result(self) -> None:
        errors = validate({"id": "0"}, {"id": {"validator": lambda v: int(v) > 0}})
        assert len(errors) == 1
        assert errors[0].kind is ErrorKind.VALIDATOR
        assert errors[0].message == "Parameter 'id' failed custom validation"

    def test_exception_becomes_error(self) -> None:
        errors = validate({"id": "abc"}, {"id": {"validator": lambda v: int(v) > 0}})
        assert len(errors) == 1
        assert errors[0].kind is ErrorKind.VALIDATOR
        assert errors[0].message.startswith("Validation error for parameter 'id':")
        assert "invalid literal" in errors[0].message

    def test_spread_value_is_tuple(self) -> None:
        seen: list[object] = []

        def check(value: object) -> bool:
            seen.append(value)
            return True

        validate({"segments": ("a", "b")}, {"segments": ValidationRule(predicate=check)})
        assert seen == [("a", "b")]

    def test_pattern_and_predicate_both_reported(self) -> None:
        rule = ValidationRule(pattern=r"^\d+$", predicate=lambda v: len(v) > 5)
        errors = validate({"id": "abc"}, {"id": rule})
        assert [e.kind for e in errors] == [ErrorKind.PATTERN, ErrorKind.VALIDATOR]


class TestCollection:
    def test_every_violation_reported_in_rule_order(self) -> None:
        rules = {
            "a": {"pattern": r"^\d+$"},
            "b": ValidationRule(),
            "c": {"validator": lambda v: False},
        }
        errors = validate({"a": "x", "c": "y"}, rules)
        assert [(e.param_name, e.kind) for e in errors] == [
            ("a", ErrorKind.PATTERN),
            ("b", ErrorKind.REQUIRED),
            ("c", ErrorKind.VALIDATOR),
        ]

    def test_no_rules(self) -> None:
        assert validate({"id": "1"}, {}) == []

    def test_params_without_rules_ignored(self) -> None:
        assert validate({"id": "1", "extra": "?"}, {"id": {"pattern": r"^\d$"}}) == []

    def test_bad_rule_type(self) -> None:
        with pytest.raises(TypeError):
            validate({"id": "1"}, {"id": "^\\d+$"})  # type: ignore[dict-item]


class TestToDict:
    def test_shape(self) -> None:
        errors = validate({"id": "abc"}, {"id": {"pattern": r"^\d+$"}})
        assert errors[0].to_dict() == {
            "parameter": "id",
            "value": "abc",
            "message": "Parameter 'id' does not match required pattern",
            "type": "pattern",
        }

    def test_tuple_value_becomes_list(self) -> None:
        errors = validate({"s": ("a", "b")}, {"s": {"validator": lambda v: False}})
        assert errors[0].to_dict()["value"] == ["a", "b"]
