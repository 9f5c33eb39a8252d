"""
Runtime record for a mounted field.

An ``InnerField`` is never edited in place once the store committed it:
updates go through ``dataclasses.replace`` so a changed field is always a new
object and an unchanged one keeps its identity.
"""

import copy
from dataclasses import dataclass, field
from typing import Any, Callable

from form_runtime.models.field_definitions import (
    FieldSchema,
    OrList,
    Rule,
    ValidateTrigger,
)
from form_runtime.models.validation_result import NOT_VALIDATED, ValidateResult


def _collect_callables(value: Any, found: list[Any]) -> None:
    if callable(value):
        found.append(value)
    elif isinstance(value, dict):
        for item in value.values():
            _collect_callables(item, found)
    elif isinstance(value, (list, tuple)):
        for item in value:
            _collect_callables(item, found)


def _schema_callables(schema: FieldSchema) -> list[Any]:
    found: list[Any] = []
    for rule in schema.rules:
        _collect_callables(rule.validator, found)
    _collect_callables(schema.fix_data, found)
    _collect_callables(schema.component_props, found)
    _collect_callables(schema.wrapper_props, found)
    return found


@dataclass
class InnerField:
    """Schema attributes plus the derived state of one field."""

    key: str
    index: int
    component: str
    label: str = ""
    label_tip: str | None = None
    value: Any = None
    default_value: Any = None
    initial_value: Any = None
    rules: list[Rule] = field(default_factory=list)
    required: bool = False
    validate_trigger: tuple[ValidateTrigger, ...] = (ValidateTrigger.ON_CHANGE,)
    component_props: dict[str, Any] = field(default_factory=dict)
    wrapper_props: dict[str, Any] = field(default_factory=dict)
    hide_when: OrList | None = None
    disable_when: OrList | None = None
    remove_when: OrList | None = None
    fix_data: Callable[[Any], Any] | None = None

    visible: bool = True
    removed: bool = False
    disabled: bool = False
    valid: ValidateResult = NOT_VALIDATED
    is_touched: bool = False

    # Mirrors of the dependency graphs, for display
    hide_watchers: tuple[str, ...] = ()
    hide_subscribers: tuple[str, ...] = ()
    disabled_watchers: tuple[str, ...] = ()
    disabled_subscribers: tuple[str, ...] = ()
    remove_watchers: tuple[str, ...] = ()
    remove_subscribers: tuple[str, ...] = ()

    required_check_registered: bool = False

    @classmethod
    def from_schema(cls, schema: FieldSchema) -> "InnerField":
        """
        Deep-copy a schema into a fresh runtime record.

        Callables (rule validators, ``fix_data``, prop handlers) stay shared
        with the schema; only the data around them is copied.
        """
        memo = {id(fn): fn for fn in _schema_callables(schema)}
        schema = copy.deepcopy(schema, memo)
        return cls(
            key=schema.key,
            index=schema.index,
            component=schema.component,
            label=schema.label,
            label_tip=schema.label_tip,
            value=schema.value,
            default_value=schema.default_value,
            initial_value=schema.initial_value,
            rules=list(schema.rules),
            required=schema.required,
            validate_trigger=tuple(schema.validate_trigger),
            component_props=dict(schema.component_props),
            wrapper_props=dict(schema.wrapper_props),
            hide_when=schema.hide_when,
            disable_when=schema.disable_when,
            remove_when=schema.remove_when,
            fix_data=schema.fix_data,
        )

    def triggers_on(self, trigger: ValidateTrigger) -> bool:
        return trigger in self.validate_trigger

    def register_required_check(self, check: Callable[[Any], Any], message: str | None = None) -> None:
        """
        Put the widget's required check in front of the rules.

        Only the first call has an effect, and only for required fields.
        ``check(value)`` returns ``(passed, message)``.
        """
        if self.required_check_registered:
            return
        self.required_check_registered = True
        if not self.required or not callable(check):
            return

        def required_validator(value: Any, rule: Rule, data: Any) -> Any:
            return check(value)

        self.rules.insert(0, Rule(msg=message, validator=required_validator))

    def get_data(self, fix_out: Callable[[Any], Any] | None = None) -> Any:
        """Value as exposed in the submitted data."""
        value = copy.deepcopy(self.value)
        if fix_out is not None:
            value = fix_out(value)
        return self.fix_data(value) if self.fix_data else value
