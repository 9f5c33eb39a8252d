"""
Guardrails for form-runtime.

Checks run over a form definition before it mounts.
"""

from form_runtime.guardrails.schema_guardrails import (
    SchemaCheckResult,
    check_schema,
    enforce_schema,
)

__all__ = [
    "SchemaCheckResult",
    "check_schema",
    "enforce_schema",
]
