"""Tests for the condition evaluator."""

import pytest

from form_runtime.conditions import coerce_value, compile_conditions, strict_equals
from form_runtime.exceptions import ConditionEvaluationError
from form_runtime.models.field_definitions import FieldCondition, ModeCondition


def cond(field, operator, value=None, value_type=None):
    return FieldCondition(field=field, operator=operator, value=value, value_type=value_type)


class TestOrListStructure:
    """Tests for OR-of-AND evaluation."""

    def test_absent_and_empty_never_match(self):
        assert compile_conditions(None, "create")({}) is False
        assert compile_conditions([], "create")({"a": 1}) is False

    def test_empty_and_list_matches(self):
        assert compile_conditions([[]], "create")({}) is True

    def test_and_requires_all(self):
        predicate = compile_conditions([[cond("a", "=", 1), cond("b", "=", 2)]], "create")
        assert predicate({"a": 1, "b": 2}) is True
        assert predicate({"a": 1, "b": 3}) is False

    def test_or_requires_any(self):
        predicate = compile_conditions([[cond("a", "=", 1)], [cond("b", "=", 2)]], "create")
        assert predicate({"a": 0, "b": 2}) is True
        assert predicate({"a": 0, "b": 0}) is False

    def test_values_read_at_evaluation_time(self):
        """Test that a compiled predicate sees later data changes."""
        data = {"a": "x"}
        predicate = compile_conditions([[cond("a", "=", "y")]], "create")
        assert predicate(data) is False
        data["a"] = "y"
        assert predicate(data) is True

    def test_nested_key(self):
        predicate = compile_conditions([[cond("user.age", ">=", 18)]], "create")
        assert predicate({"user": {"age": 20}}) is True
        assert predicate({"user": {"age": 12}}) is False


class TestModeConditions:
    """Tests for create/edit mode conditions."""

    def test_mode_match(self):
        or_list = [[ModeCondition(mode="edit")]]
        assert compile_conditions(or_list, "edit")({}) is True
        assert compile_conditions(or_list, "create")({}) is False

    def test_callback_skips_mode_conditions(self):
        seen = []
        compile_conditions(
            [[ModeCondition(mode="create"), cond("a", "=", 1)], [cond("b", "!=", 2)]],
            "create",
            seen.append,
        )
        assert [c.field for c in seen] == ["a", "b"]


class TestOperators:
    """Tests for individual operators."""

    def test_equality_is_strict(self):
        predicate = compile_conditions([[cond("a", "=", True)]], "create")
        assert predicate({"a": 1}) is False
        assert predicate({"a": True}) is True

    def test_not_equal(self):
        predicate = compile_conditions([[cond("a", "!=", "")]], "create")
        assert predicate({"a": "US"}) is True
        assert predicate({"a": ""}) is False
        assert predicate({}) is True

    def test_greater_than_includes_equal(self):
        """Test that '>' shares the semantics of '>='."""
        predicate = compile_conditions([[cond("n", ">", 5)]], "create")
        assert predicate({"n": 5}) is True
        assert predicate({"n": 4}) is False

    def test_less_than(self):
        assert compile_conditions([[cond("n", "<", 5)]], "create")({"n": 4}) is True
        assert compile_conditions([[cond("n", "<", 5)]], "create")({"n": 5}) is False
        assert compile_conditions([[cond("n", "<=", 5)]], "create")({"n": 5}) is True

    def test_ordering_with_missing_value(self):
        assert compile_conditions([[cond("n", "<", 5)]], "create")({}) is False

    def test_ordering_incomparable(self):
        predicate = compile_conditions([[cond("n", "<", 3)]], "create")
        with pytest.raises(ConditionEvaluationError):
            predicate({"n": "abc"})

    def test_contains(self):
        predicate = compile_conditions([[cond("tags", "contains", "a")]], "create")
        assert predicate({"tags": ["a", "b"]}) is True
        assert predicate({"tags": "cat"}) is True
        assert predicate({"tags": ["b"]}) is False

    def test_not_contains(self):
        predicate = compile_conditions([[cond("tags", "not_contains", "c")]], "create")
        assert predicate({"tags": ["a", "b"]}) is True

    def test_contains_without_container_fails(self):
        predicate = compile_conditions([[cond("tags", "contains", "a")]], "create")
        with pytest.raises(ConditionEvaluationError) as exc_info:
            predicate({})
        assert exc_info.value.field == "tags"
        with pytest.raises(ConditionEvaluationError):
            predicate({"tags": 5})

    def test_empty_checks_literal(self):
        """Test that empty/not_empty look at the declared value."""
        empty = compile_conditions([[cond("a", "empty")]], "create")
        not_empty = compile_conditions([[cond("a", "not_empty", "x")]], "create")
        assert empty({"a": "filled"}) is True
        assert not_empty({}) is True


class TestCoercion:
    """Tests for value_type coercion."""

    def test_number(self):
        predicate = compile_conditions([[cond("n", "=", "3", "number")]], "create")
        assert predicate({"n": 3}) is True

    def test_coerce_values(self):
        assert coerce_value("2.5", "number") == 2.5
        assert coerce_value("", "number") == 0
        assert coerce_value(True, "number") == 1
        assert coerce_value("no", "boolean") is True
        assert coerce_value(0, "boolean") is False
        assert coerce_value("7", "string") == "7"
        assert coerce_value("7", None) == "7"

    def test_strict_equals(self):
        assert strict_equals(1, 1.0)
        assert not strict_equals(0, False)
        assert strict_equals(None, None)
