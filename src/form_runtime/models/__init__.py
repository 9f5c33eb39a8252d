"""
Data models for form-runtime.

This module contains:
- Pydantic schema models (fields, conditions, rules)
- The runtime field record
- Validation results
"""

from form_runtime.models.field_definitions import (
    Condition,
    FieldCondition,
    FieldSchema,
    Mode,
    ModeCondition,
    Operator,
    OrList,
    Rule,
    ValidateTrigger,
)
from form_runtime.models.inner_field import InnerField
from form_runtime.models.validation_result import (
    NOT_VALIDATED,
    SUCCESS,
    FieldValidationError,
    ValidateResult,
    ValidateStatus,
    ValidationReport,
    is_pending,
)

__all__ = [
    # Schema input
    "FieldSchema",
    "FieldCondition",
    "ModeCondition",
    "Condition",
    "OrList",
    "Operator",
    "Mode",
    "Rule",
    "ValidateTrigger",
    # Runtime
    "InnerField",
    # Validation
    "ValidateResult",
    "ValidateStatus",
    "SUCCESS",
    "NOT_VALIDATED",
    "is_pending",
    "ValidationReport",
    "FieldValidationError",
]
