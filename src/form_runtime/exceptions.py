"""
Exception classes for form-runtime.

Validation failures are never raised: they are reported through a field's
``valid`` state. The exceptions below signal programming errors in a form
definition or misuse of the store and are meant to fail loudly.
"""

from typing import Any


class FormRuntimeError(Exception):
    """Base exception for all form-runtime errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """
        Initialize form-runtime exception.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({detail_str})"


class SchemaError(FormRuntimeError):
    """
    Raised when a form definition cannot be used.

    Examples:
        - Duplicate field keys or indexes
        - Unknown widget kind
        - A hide/disable/remove condition referencing a missing field
    """

    def __init__(self, message: str, key: str | None = None, issues: list[str] | None = None):
        details: dict[str, Any] = {}
        if key:
            details["key"] = key
        if issues:
            details["issues"] = "; ".join(issues)
        super().__init__(message, details)
        self.key = key
        self.issues = issues or []


class ConditionEvaluationError(FormRuntimeError):
    """Raised when a condition cannot be evaluated against the form data."""

    def __init__(self, message: str, field: str, operator: str):
        super().__init__(message, {"field": field, "operator": operator})
        self.field = field
        self.operator = operator


class UnknownFieldError(FormRuntimeError, KeyError):
    """Raised when the store is asked about a key no field declares."""

    def __init__(self, key: str):
        super().__init__(f"Unknown field key: {key!r}", {"key": key})
        self.key = key

    def __str__(self) -> str:
        return FormRuntimeError.__str__(self)


class UnknownWidgetError(FormRuntimeError, LookupError):
    """Raised when a widget kind is not registered."""

    def __init__(self, name: str):
        super().__init__(f"Widget kind not registered: {name!r}", {"kind": name})
        self.name = name


class RegistryFrozenError(FormRuntimeError):
    """Raised when registering a widget kind after a form mounted the registry."""
