"""
Condition evaluator.

Compiles an OR-list of AND-lists of conditions into a predicate over the
whole form-data mapping. Field values are read when the predicate runs, so a
compiled predicate stays valid while the data changes.
"""

import logging
import math
from typing import Any, Callable, Iterable

from form_runtime.exceptions import ConditionEvaluationError
from form_runtime.models.field_definitions import (
    Condition,
    FieldCondition,
    Mode,
    ModeCondition,
    OrList,
)
from form_runtime.paths import get_path

logger = logging.getLogger(__name__)

Check = Callable[[Any], bool]
Predicate = Callable[[Any], bool]


def coerce_value(value: Any, value_type: str | None) -> Any:
    """Coerce a condition literal according to its declared type."""
    if value_type == "number":
        return _to_number(value)
    if value_type == "boolean":
        return bool(value)
    return value


def _to_number(value: Any) -> int | float:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return value
    if value is None:
        return math.nan
    text = str(value).strip()
    if not text:
        return 0
    try:
        return int(text)
    except ValueError:
        pass
    try:
        return float(text)
    except ValueError:
        return math.nan


def strict_equals(actual: Any, expected: Any) -> bool:
    """Equality that never treats booleans and numbers as the same value."""
    if isinstance(actual, bool) != isinstance(expected, bool):
        return False
    return actual == expected


def _ordering(condition: FieldCondition, compare: Callable[[Any, Any], bool], expected: Any) -> Check:
    def check(data: Any) -> bool:
        actual = get_path(data, condition.field)
        if actual is None or expected is None:
            return False
        try:
            return compare(actual, expected)
        except TypeError as exc:
            raise ConditionEvaluationError(
                f"Cannot compare {actual!r} with {expected!r}",
                field=condition.field,
                operator=condition.operator,
            ) from exc

    return check


def _containment(condition: FieldCondition, expected: Any, negate: bool) -> Check:
    def check(data: Any) -> bool:
        actual = get_path(data, condition.field)
        try:
            found = expected in actual
        except TypeError as exc:
            raise ConditionEvaluationError(
                f"Value {actual!r} does not support containment checks",
                field=condition.field,
                operator=condition.operator,
            ) from exc
        return not found if negate else found

    return check


def compile_condition(condition: Condition, mode: Mode) -> Check:
    """Compile one condition into a check over the form data."""
    if isinstance(condition, ModeCondition):
        matches = condition.mode == mode
        return lambda data: matches

    expected = coerce_value(condition.value, condition.value_type)
    field = condition.field
    operator = condition.operator

    if operator == "=":
        return lambda data: strict_equals(get_path(data, field), expected)
    if operator == "!=":
        return lambda data: not strict_equals(get_path(data, field), expected)
    # ">" deliberately shares ">=" semantics
    if operator in (">", ">="):
        return _ordering(condition, lambda a, b: a >= b, expected)
    if operator == "<":
        return _ordering(condition, lambda a, b: a < b, expected)
    if operator == "<=":
        return _ordering(condition, lambda a, b: a <= b, expected)
    if operator == "contains":
        return _containment(condition, expected, negate=False)
    if operator == "not_contains":
        return _containment(condition, expected, negate=True)
    # empty/not_empty look at the literal, not at the field value
    if operator == "empty":
        is_empty = expected is None
        return lambda data: is_empty
    if operator == "not_empty":
        is_set = expected is not None
        return lambda data: is_set
    raise ValueError(f"Unsupported operator: {operator!r}")


def compile_conditions(
    or_list: OrList | None,
    mode: Mode,
    on_each_condition: Callable[[FieldCondition], None] | None = None,
) -> Predicate:
    """
    Compile an OR-list into a predicate.

    Args:
        or_list: Sequence of AND-lists. ``None`` or ``[]`` never matches;
            an empty AND-list always matches.
        mode: Mode the form was mounted in, used by mode conditions.
        on_each_condition: Called once per field condition at compile time,
            typically to record a dependency edge.

    Returns:
        Callable taking the form data and returning a bool.
    """
    compiled: list[list[Check]] = []
    for and_list in or_list or []:
        checks: list[Check] = []
        for condition in and_list:
            checks.append(compile_condition(condition, mode))
            if isinstance(condition, FieldCondition) and on_each_condition is not None:
                on_each_condition(condition)
        compiled.append(checks)
    logger.debug(f"Compiled {len(compiled)} condition group(s) in {mode} mode")

    if not compiled:
        return never

    def predicate(data: Any) -> bool:
        return any(all(check(data) for check in checks) for checks in compiled)

    return predicate


def never(data: Any) -> bool:
    return False


def referenced_fields(or_list: OrList | None) -> Iterable[str]:
    """Keys of every field an OR-list reads, in declaration order."""
    for and_list in or_list or []:
        for condition in and_list:
            if isinstance(condition, FieldCondition):
                yield condition.field
