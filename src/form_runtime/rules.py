"""
Rule engine.

Turns a field's declarative rules into one ``validate(data)`` function.
Rules run in declaration order and every rule runs its sub-checks in a fixed
order; the first failing check wins. A check may return an awaitable, in
which case validation returns a pending result immediately and finishes in
the background.
"""

import asyncio
import inspect
import logging
import re
from typing import Any, Awaitable, Callable, NamedTuple

from form_runtime.config import get_config
from form_runtime.exceptions import FormRuntimeError
from form_runtime.models.field_definitions import Rule
from form_runtime.models.validation_result import (
    SUCCESS,
    ValidateResult,
    error,
    validating,
)
from form_runtime.paths import get_path

logger = logging.getLogger(__name__)

CheckFn = Callable[[Any, Rule, Any], Any]
Validate = Callable[[Any], ValidateResult]


def _length(value: Any) -> int | None:
    if value is None:
        return None
    try:
        return len(value)
    except TypeError:
        return None


def check_pattern(value: Any, rule: Rule, data: Any) -> tuple[bool, str]:
    matched = value is not None and re.search(rule.pattern, str(value)) is not None
    return matched, rule.msg or "not match pattern"


def check_enum(value: Any, rule: Rule, data: Any) -> tuple[bool, str]:
    return value in rule.enum, rule.msg or "not in enum"


def check_string(value: Any, rule: Rule, data: Any) -> tuple[bool, str]:
    return isinstance(value, str), rule.msg or "not a string"


def check_number(value: Any, rule: Rule, data: Any) -> tuple[bool, str]:
    is_number = isinstance(value, (int, float)) and not isinstance(value, bool)
    return is_number, rule.msg or "not a number"


def check_len(value: Any, rule: Rule, data: Any) -> tuple[bool, str]:
    return _length(value) == rule.len, rule.msg or f"length is not:{rule.len}"


def check_min(value: Any, rule: Rule, data: Any) -> tuple[bool, str]:
    length = _length(value)
    return length is not None and length >= rule.min, rule.msg or f"length is smaller than:{rule.min}"


def check_max(value: Any, rule: Rule, data: Any) -> tuple[bool, str]:
    length = _length(value)
    return length is not None and length <= rule.max, rule.msg or f"length is bigger than:{rule.max}"


def check_equal_with(value: Any, rule: Rule, data: Any) -> tuple[bool, str]:
    other = get_path(data, rule.equal_with)
    return value == other, rule.msg or f"not equal with:{other}"


def check_validator(value: Any, rule: Rule, data: Any) -> Any:
    return rule.validator(value, rule, data)


# Fixed checklist order
CHECKS: list[tuple[str, CheckFn]] = [
    ("pattern", check_pattern),
    ("enum", check_enum),
    ("string", check_string),
    ("number", check_number),
    ("len", check_len),
    ("min", check_min),
    ("max", check_max),
    ("equal_with", check_equal_with),
    ("validator", check_validator),
]


def get_check_list(rule: Rule) -> list[CheckFn]:
    """Checks enabled by ``rule``, in checklist order."""
    return [check for attribute, check in CHECKS if getattr(rule, attribute) is not None]


def interpret(raw: Any, rule: Rule) -> ValidateResult | None:
    """
    Map a check's ``(passed, message)`` answer to a verdict.

    Returns None when the check passed and validation should go on.
    """
    if isinstance(raw, bool):
        raw = (raw, rule.msg)
    passed = raw[0]
    if passed is False:
        message = raw[1] if len(raw) > 1 and raw[1] is not None else rule.msg or ""
        return error(message)
    if isinstance(passed, str):
        return tuple(raw)
    return None


class _Pending(NamedTuple):
    awaitable: Awaitable[Any]
    position: int


def compile_rules(
    key: str,
    rules: list[Rule],
    on_settle: Callable[[ValidateResult, Any], None] | None = None,
    pending_message: str | None = None,
) -> Validate:
    """
    Compile the rules of the field at ``key`` into a validate function.

    Args:
        key: Dot-path key of the validated field; its value is read from the
            data passed to ``validate``.
        rules: Rules in declaration order.
        on_settle: Called as ``on_settle(result, handle)`` once a pending
            validation settles, with the final result and the handle that
            was returned in the pending result.
        pending_message: Message of the pending result. Defaults to the
            configured ``pending_message``.

    Returns:
        ``validate(data) -> ValidateResult``.
    """
    steps = [(rule, check) for rule in rules for check in get_check_list(rule)]
    message = pending_message if pending_message is not None else get_config().pending_message

    def run_from(data: Any, start: int) -> ValidateResult | _Pending:
        value = get_path(data, key)
        for position in range(start, len(steps)):
            rule, check = steps[position]
            raw = check(value, rule, data)
            if inspect.isawaitable(raw):
                return _Pending(raw, position)
            verdict = interpret(raw, rule)
            if verdict is not None:
                return verdict
        return SUCCESS

    async def settle(pending: _Pending, data: Any) -> ValidateResult:
        while True:
            rule = steps[pending.position][0]
            try:
                raw = await pending.awaitable
            except Exception as exc:
                logger.info(f"Async check for '{key}' rejected: {exc!r}")
                return error(str(exc) or rule.msg or "validation failed")
            try:
                verdict = interpret(raw, rule)
            except (TypeError, IndexError):
                logger.warning(f"Async check for '{key}' resolved to an unusable result: {raw!r}")
                return error(rule.msg or "validation failed")
            if verdict is not None:
                return verdict
            outcome = run_from(data, pending.position + 1)
            if not isinstance(outcome, _Pending):
                return outcome
            pending = outcome

    def notify(task: "asyncio.Task[ValidateResult]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Async validation of '{key}' failed", exc_info=exc)
            return
        on_settle(task.result(), task)

    def validate(data: Any) -> ValidateResult:
        outcome = run_from(data, 0)
        if not isinstance(outcome, _Pending):
            return outcome
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(outcome.awaitable):
                outcome.awaitable.close()
            raise FormRuntimeError(
                "Asynchronous validators need a running event loop",
                {"key": key},
            ) from None
        handle = loop.create_task(settle(outcome, data))
        if on_settle is not None:
            handle.add_done_callback(notify)
        logger.debug(f"Validation of '{key}' is pending")
        return validating(message, handle)

    return validate
