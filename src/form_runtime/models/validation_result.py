"""
Validation result models.

A single field validation yields a ``ValidateResult`` tuple:

- ``("success",)``
- ``("error", message)``
- ``("validating", message, handle)`` where ``handle`` resolves to the
  settled result

A field that has not been validated yet holds ``()``. ``ValidationReport``
summarizes the mapping returned by a bulk validation.
"""

from enum import Enum
from typing import Any, Mapping

from pydantic import BaseModel, Field


class ValidateStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    VALIDATING = "validating"


ValidateResult = tuple

SUCCESS: ValidateResult = (ValidateStatus.SUCCESS.value,)
NOT_VALIDATED: ValidateResult = ()


def error(message: str) -> ValidateResult:
    return (ValidateStatus.ERROR.value, message)


def validating(message: str, handle: Any) -> ValidateResult:
    return (ValidateStatus.VALIDATING.value, message, handle)


def is_pending(result: ValidateResult) -> bool:
    """Whether the result still waits on an asynchronous check."""
    return len(result) > 2 and result[0] == ValidateStatus.VALIDATING.value


def same_outcome(previous: ValidateResult, current: ValidateResult) -> bool:
    """Compare status and message, ignoring any pending handle."""
    return tuple(previous[:2]) == tuple(current[:2])


class FieldValidationError(BaseModel):
    """Validation error for a specific field."""

    field_key: str = Field(..., description="Key of the field with error")
    status: str = Field(..., description="Result status")
    message: str = Field(..., description="Human-readable error message")


class ValidationReport(BaseModel):
    """Result of validating a whole form."""

    is_valid: bool = Field(..., description="Whether every field passed")
    errors: list[FieldValidationError] = Field(
        default_factory=list, description="List of validation errors"
    )
    pending: list[str] = Field(
        default_factory=list, description="Keys still waiting on async checks"
    )

    @property
    def error_count(self) -> int:
        """Get the number of validation errors."""
        return len(self.errors)

    def get_field_errors(self, field_key: str) -> list[FieldValidationError]:
        """Get all errors for a specific field."""
        return [e for e in self.errors if e.field_key == field_key]

    def to_error_dict(self) -> dict[str, list[str]]:
        """Convert errors to a dict mapping field keys to error messages."""
        result: dict[str, list[str]] = {}
        for err in self.errors:
            result.setdefault(err.field_key, []).append(err.message)
        return result

    @classmethod
    def from_results(cls, results: Mapping[str, ValidateResult]) -> "ValidationReport":
        """
        Build a report from a ``{key: ValidateResult}`` mapping.

        Statuses other than success and validating count as errors,
        including custom statuses propagated by a validator.
        """
        errors: list[FieldValidationError] = []
        pending: list[str] = []
        for key, result in results.items():
            if not result or result[0] == ValidateStatus.SUCCESS.value:
                continue
            if result[0] == ValidateStatus.VALIDATING.value:
                pending.append(key)
                continue
            message = result[1] if len(result) > 1 else ""
            errors.append(
                FieldValidationError(field_key=key, status=str(result[0]), message=str(message))
            )
        return cls(is_valid=not errors and not pending, errors=errors, pending=pending)
