"""
Field definition models for declarative forms.

A form is described by an ordered list of ``FieldSchema`` objects. Each field
names the widget kind that renders it, its validation rules and the
conditions under which it is hidden, disabled or removed. Keys accept both
the camelCase spelling used by schema documents and snake_case.
"""

from enum import Enum
from typing import Any, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Operator = Literal[
    "=",
    "!=",
    ">",
    ">=",
    "<",
    "<=",
    "contains",
    "not_contains",
    "empty",
    "not_empty",
]

Mode = Literal["create", "edit"]


class ValidateTrigger(str, Enum):
    """Events that re-run a field's validation."""

    ON_CHANGE = "onChange"
    ON_BLUR = "onBlur"


class FieldCondition(BaseModel):
    """Compares the value of another field with a literal."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    field: str = Field(..., description="Dot-path key of the referenced field")
    operator: Operator = Field(..., description="Comparison operator")
    value: Any = Field(default=None, description="Literal to compare against")
    value_type: Literal["string", "number", "boolean"] | None = Field(
        default=None,
        alias="valueType",
        description="Coercion applied to value before comparing",
    )


class ModeCondition(BaseModel):
    """Matches whether the form was mounted to create or to edit a record."""

    model_config = ConfigDict(frozen=True)

    mode: Mode = Field(..., description="Form mode to match")


Condition = Union[FieldCondition, ModeCondition]

# OR of AND-lists: true when any inner list has all its conditions true
OrList = list[list[Condition]]


class Rule(BaseModel):
    """
    Declarative validation unit.

    Every sub-check that is set becomes one step of the rule's checklist,
    always in this order: pattern, enum, string, number, len, min, max,
    equal_with, validator.
    """

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    msg: str | None = Field(default=None, description="Message used when the rule fails")
    pattern: str | None = Field(default=None, description="Regex the value must match")
    enum: list[Any] | None = Field(default=None, description="Allowed values")
    string: bool | None = Field(default=None, description="Value must be a string")
    number: bool | None = Field(default=None, description="Value must be a number")
    len: int | None = Field(default=None, description="Exact length")
    min: int | None = Field(default=None, description="Minimum length")
    max: int | None = Field(default=None, description="Maximum length")
    equal_with: str | None = Field(
        default=None,
        alias="equalWith",
        description="Key of a field whose value must be equal",
    )
    validator: Callable[..., Any] | None = Field(
        default=None,
        description="Custom check called as validator(value, rule, data)",
    )


class FieldSchema(BaseModel):
    """Schema for a single form field."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    index: int = Field(..., description="Render order, unique per form")
    key: str = Field(..., description="Dot-path key, unique per form")
    label: str = Field(default="", description="Human-readable label")
    label_tip: str | None = Field(default=None, alias="labelTip")
    component: str = Field(..., description="Registered widget kind")

    value: Any = Field(default=None, description="Starting value")
    default_value: Any = Field(
        default=None,
        alias="defaultValue",
        description="Value restored by reset",
    )
    initial_value: Any = Field(
        default=None,
        alias="initialValue",
        description="Value applied at mount only, cleared by reset",
    )

    rules: list[Rule] = Field(default_factory=list)
    required: bool = Field(default=False)
    validate_trigger: list[ValidateTrigger] = Field(
        default_factory=lambda: [ValidateTrigger.ON_CHANGE],
        alias="validateTrigger",
    )

    component_props: dict[str, Any] = Field(default_factory=dict, alias="componentProps")
    wrapper_props: dict[str, Any] = Field(default_factory=dict, alias="wrapperProps")

    hide_when: OrList | None = Field(default=None, alias="hideWhen")
    disable_when: OrList | None = Field(default=None, alias="disableWhen")
    remove_when: OrList | None = Field(default=None, alias="removeWhen")

    fix_data: Callable[[Any], Any] | None = Field(
        default=None,
        alias="fixData",
        description="Transform applied to the value by get_data",
    )

    @field_validator("validate_trigger", mode="before")
    @classmethod
    def _normalize_trigger(cls, value: Any) -> Any:
        if value is None:
            return [ValidateTrigger.ON_CHANGE]
        if isinstance(value, (str, ValidateTrigger)):
            return [value]
        return value

    @field_validator("rules", mode="before")
    @classmethod
    def _normalize_rules(cls, value: Any) -> Any:
        return value if isinstance(value, list) else []

    @field_validator("component_props", "wrapper_props", mode="before")
    @classmethod
    def _normalize_props(cls, value: Any) -> Any:
        return value if value is not None else {}
