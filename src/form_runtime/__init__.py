"""
form-runtime: runtime state engine for declarative forms.

Give it a list of field schemas and the current data, and it keeps every
field's value, visibility, removal, disabled flag and validity consistent as
the data changes. Rendering is left to the caller's widgets.

Simple Usage:
    from form_runtime import FormStore

    store = FormStore(
        fields=[
            {"index": 0, "key": "password", "component": "input", "required": True},
            {
                "index": 1,
                "key": "confirm",
                "component": "input",
                "rules": [{"equalWith": "password", "msg": "passwords differ"}],
            },
        ],
        on_change=lambda data: print(data),
    )
    store.set_field_value("password", "s3cret")
    results = await store.validate()
    payload = store.get_data()

Conditions:
    A field is hidden, removed or disabled when any AND-list of its
    ``hideWhen`` / ``removeWhen`` / ``disableWhen`` conditions matches:

    {"hideWhen": [[{"field": "country", "operator": "=", "value": ""}]]}

Custom widgets:
    from form_runtime import WidgetKind, default_registry

    registry = default_registry()
    registry.register(WidgetKind(name="switch", required_check=lambda v: (v is not None, "required")))
    store = FormStore(fields, registry=registry)

Tracing:
    from form_runtime.tracing import setup_tracing

    setup_tracing(console=True, verbose=True)
"""

from form_runtime.conditions import compile_conditions
from form_runtime.exceptions import (
    ConditionEvaluationError,
    FormRuntimeError,
    RegistryFrozenError,
    SchemaError,
    UnknownFieldError,
    UnknownWidgetError,
)
from form_runtime.graph import DependencyGraph, FieldGraphs, GraphKind, build_graphs
from form_runtime.guardrails import SchemaCheckResult, check_schema
from form_runtime.models import (
    FieldCondition,
    FieldSchema,
    InnerField,
    ModeCondition,
    Rule,
    ValidateResult,
    ValidateStatus,
    ValidateTrigger,
    ValidationReport,
)
from form_runtime.rules import compile_rules
from form_runtime.store import FormRef, FormStore, apply_changes, mount_form
from form_runtime.tracing import (
    disable_tracing,
    enable_tracing,
    setup_tracing,
)
from form_runtime.widgets import WidgetKind, WidgetRegistry, default_registry

__all__ = [
    # Main interface
    "FormStore",
    "FormRef",
    "mount_form",
    "apply_changes",
    # Schema models
    "FieldSchema",
    "FieldCondition",
    "ModeCondition",
    "Rule",
    "ValidateTrigger",
    # Runtime
    "InnerField",
    "ValidateResult",
    "ValidateStatus",
    "ValidationReport",
    # Engines
    "compile_conditions",
    "compile_rules",
    "build_graphs",
    "DependencyGraph",
    "FieldGraphs",
    "GraphKind",
    # Widgets
    "WidgetKind",
    "WidgetRegistry",
    "default_registry",
    # Guardrails
    "check_schema",
    "SchemaCheckResult",
    # Errors
    "FormRuntimeError",
    "SchemaError",
    "ConditionEvaluationError",
    "UnknownFieldError",
    "UnknownWidgetError",
    "RegistryFrozenError",
    # Tracing
    "setup_tracing",
    "disable_tracing",
    "enable_tracing",
]

__version__ = "0.1.0"
