"""
Schema guardrails.

These guardrails validate a form definition before the store mounts it, so
an unusable schema fails at construction instead of on first interaction.
"""

from typing import Iterable

from pydantic import BaseModel, Field

from form_runtime.conditions import referenced_fields
from form_runtime.exceptions import SchemaError
from form_runtime.guardrails.constants import (
    CONDITION_ATTRIBUTES,
    MAX_KEY_LENGTH,
    VALID_FIELD_KEY,
)
from form_runtime.models.field_definitions import FieldSchema
from form_runtime.widgets import WidgetRegistry


class SchemaCheckResult(BaseModel):
    """Result of schema validation."""

    is_valid: bool = Field(..., description="Whether the schema is usable")
    errors: list[str] = Field(default_factory=list, description="List of validation errors")
    warnings: list[str] = Field(default_factory=list, description="List of warnings")


def _check_field_key(key: str) -> tuple[bool, str | None]:
    """Validate a field key."""
    if not key:
        return False, "Field key cannot be empty"
    if len(key) > MAX_KEY_LENGTH:
        return False, "Field key too long"
    if not VALID_FIELD_KEY.match(key):
        return False, "Invalid characters in field key"
    return True, None


def _overlapping_keys(keys: Iterable[str]) -> list[tuple[str, str]]:
    """Pairs where one key is a dot-path prefix of another."""
    ordered = sorted(set(keys))
    pairs = []
    for i, key in enumerate(ordered):
        for other in ordered[i + 1:]:
            if other.startswith(key + "."):
                pairs.append((key, other))
    return pairs


def check_schema(
    fields: list[FieldSchema],
    registry: WidgetRegistry | None = None,
) -> SchemaCheckResult:
    """
    Validate a form definition.

    Checks:
    1. Keys are valid dot paths and unique
    2. Indexes are unique
    3. Widget kinds are registered (when a registry is given)
    4. Conditions only reference declared fields
    5. ``equal_with`` targets exist (warning only)
    """
    errors = []
    warnings = []

    seen_keys: set[str] = set()
    seen_indexes: dict[int, str] = {}
    for item in fields:
        is_valid, error = _check_field_key(item.key)
        if not is_valid:
            errors.append(f"Invalid field key '{item.key}': {error}")
        if item.key in seen_keys:
            errors.append(f"Duplicate field key '{item.key}'")
        seen_keys.add(item.key)

        if item.index in seen_indexes:
            errors.append(
                f"Field '{item.key}' reuses index {item.index} of '{seen_indexes[item.index]}'"
            )
        else:
            seen_indexes[item.index] = item.key

        if registry is not None and item.component not in registry:
            errors.append(f"Field '{item.key}' uses unregistered widget kind '{item.component}'")

    for item in fields:
        for kind, attribute in CONDITION_ATTRIBUTES.items():
            for referenced in referenced_fields(getattr(item, attribute)):
                if referenced not in seen_keys:
                    errors.append(
                        f"{kind} condition of '{item.key}' references unknown field '{referenced}'"
                    )
        for rule in item.rules:
            if rule.equal_with is not None and rule.equal_with not in seen_keys:
                warnings.append(f"Rule of '{item.key}' compares with undeclared key '{rule.equal_with}'")

    for parent, child in _overlapping_keys(seen_keys):
        warnings.append(f"Field '{child}' is nested inside field '{parent}'")

    if not fields:
        warnings.append("Schema has no fields defined")

    return SchemaCheckResult(
        is_valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def enforce_schema(
    fields: list[FieldSchema],
    registry: WidgetRegistry | None = None,
) -> SchemaCheckResult:
    """
    Run ``check_schema`` and raise on errors.

    Raises:
        SchemaError: If the schema has any error.
    """
    result = check_schema(fields, registry)
    if not result.is_valid:
        raise SchemaError("Invalid form schema", issues=result.errors)
    return result
