"""
Field state store.

The store owns the form-data mapping and the list of mounted fields. Every
mutation follows the same path: compute the patches, apply them in one batch
with ``apply_changes`` and notify the ``on_change`` callback with a detached
copy of the data.

Usage:
    store = FormStore(
        fields=[
            {"index": 0, "key": "country", "component": "select"},
            {
                "index": 1,
                "key": "state",
                "component": "select",
                "hideWhen": [[{"field": "country", "operator": "=", "value": ""}]],
            },
        ],
        on_change=print,
    )
    store.set_field_value("country", "US")
    store.get_field("state").visible  # True
    results = await store.validate()
"""

import asyncio
import copy
import dataclasses
import logging
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Mapping

from form_runtime.config import FormRuntimeConfig, get_config
from form_runtime.exceptions import UnknownFieldError
from form_runtime.graph import FieldGraphs, FieldPredicates, GraphKind, build_graphs
from form_runtime.guardrails import enforce_schema
from form_runtime.models.field_definitions import FieldSchema, Mode, ValidateTrigger
from form_runtime.models.inner_field import InnerField
from form_runtime.models.validation_result import (
    NOT_VALIDATED,
    ValidateResult,
    is_pending,
    same_outcome,
)
from form_runtime.paths import deep_merge, get_path, set_path
from form_runtime.rules import Validate, compile_rules
from form_runtime.tracing import setup_tracing, traced, traced_async
from form_runtime.widgets import WidgetRegistry, default_registry

logger = logging.getLogger(__name__)

FieldChanges = dict[str, dict[str, Any]]

# component_props keys a blur handler may be registered under
BLUR_HANDLER_KEYS = ("on_blur", "onBlur")

# (graph kind, InnerField attribute) in propagation order
_PROPAGATION = (
    (GraphKind.REMOVE, "removed"),
    (GraphKind.HIDE, "visible"),
    (GraphKind.DISABLE, "disabled"),
)


def apply_changes(
    fields: list[InnerField],
    changes: Mapping[str, Mapping[str, Any]],
) -> list[InnerField]:
    """
    Apply per-field patches and return the new field list.

    A patched field is replaced by a copy; a field without a patch, or whose
    patch changes nothing, is kept as the same object.
    """
    if not changes:
        return fields
    result = []
    for item in fields:
        patch = changes.get(item.key)
        if patch and any(getattr(item, name) != value for name, value in patch.items()):
            item = dataclasses.replace(item, **patch)
        result.append(item)
    return result


def _predicate_state(kind: GraphKind, predicates: FieldPredicates, data: Any) -> bool:
    if kind is GraphKind.HIDE:
        return not predicates.check_hide(data)
    if kind is GraphKind.REMOVE:
        return predicates.check_remove(data)
    return predicates.check_disabled(data)


@dataclass
class FormRef:
    """Handle the caller keeps to reach a mounted store."""

    current: "FormStore | None" = None


class FormStore:
    """
    Runtime state of one form instance.

    Args:
        fields: Field schemas, as ``FieldSchema`` objects or plain dicts.
        value: Externally supplied form data. A non-empty mapping mounts the
            form in edit mode, otherwise in create mode.
        on_change: Called with a deep copy of the form data after every
            committed value change.
        registry: Widget kinds available to the fields. Defaults to a fresh
            ``default_registry()``. The registry is frozen at mount.
        config: Settings; defaults to ``get_config()``.
    """

    def __init__(
        self,
        fields: Iterable[FieldSchema | Mapping[str, Any]],
        value: Mapping[str, Any] | None = None,
        on_change: Callable[[dict[str, Any]], Any] | None = None,
        registry: WidgetRegistry | None = None,
        config: FormRuntimeConfig | None = None,
    ):
        self.config = config or get_config()
        if self.config.enable_tracing:
            setup_tracing(
                console=True,
                verbose=self.config.verbose_output,
                file_path=self.config.trace_file,
                level=self.config.log_level,
            )
        self.registry = registry if registry is not None else default_registry(self.config.required_message)
        self.schemas = [
            item if isinstance(item, FieldSchema) else FieldSchema.model_validate(item)
            for item in fields
        ]
        self.mode: Mode = "edit" if value else "create"
        self.graphs = FieldGraphs()

        self._external_value = copy.deepcopy(dict(value)) if value else {}
        self._on_change = on_change
        self._form_ref: FormRef | None = None

        self._data: dict[str, Any] = {}
        self._defaults: dict[str, Any] = {}
        self._supplied: dict[str, Any] = {}
        self._fields: list[InnerField] = []
        self._by_key: dict[str, InnerField] = {}
        self._validators: dict[str, Validate] = {}
        self._predicates: dict[str, FieldPredicates] = {}
        self._latest_handles: dict[str, Any] = {}
        self._mounted = False

        self._mount()

    # Mount / unmount

    @traced("mount")
    def _mount(self) -> None:
        if self.config.validate_schema:
            enforce_schema(self.schemas, self.registry)
        self.registry.freeze()

        fields = [InnerField.from_schema(schema) for schema in self.schemas]

        initial: dict[str, Any] = {}
        schema_values: dict[str, Any] = {}
        for item in fields:
            if item.default_value is not None:
                set_path(self._defaults, item.key, copy.deepcopy(item.default_value))
            if item.initial_value is not None:
                set_path(initial, item.key, copy.deepcopy(item.initial_value))
            if item.value is not None:
                set_path(schema_values, item.key, copy.deepcopy(item.value))
        self._supplied = deep_merge(schema_values, self._external_value)
        self._data = deep_merge(self._defaults, initial, self._supplied)

        for item in fields:
            self._seed_widget_value(item)
            item.value = get_path(self._data, item.key)
            kind = self.registry.get(item.component)
            item.register_required_check(kind.required_check, self.config.required_message)
            if item.triggers_on(ValidateTrigger.ON_BLUR):
                self._wrap_on_blur(item)
            self._validators[item.key] = compile_rules(
                item.key,
                item.rules,
                on_settle=self._make_settle_callback(item.key),
                pending_message=self.config.pending_message,
            )

        self.graphs, self._predicates = build_graphs(fields, self.mode)
        self._set_field_list(
            [
                dataclasses.replace(
                    item,
                    valid=NOT_VALIDATED,
                    **self.graphs.mirror(item.key),
                    **self._predicates[item.key].evaluate(self._data),
                )
                for item in fields
            ]
        )
        self._mounted = True
        logger.info(f"Mounted form with {len(fields)} field(s) in {self.mode} mode")

    def unmount(self) -> None:
        """Drop the runtime fields and detach the form handle."""
        self._fields = []
        self._by_key = {}
        self._latest_handles.clear()
        self._mounted = False
        if self._form_ref is not None and self._form_ref.current is self:
            self._form_ref.current = None
        logger.info("Unmounted form")

    @property
    def mounted(self) -> bool:
        return self._mounted

    def _seed_widget_value(self, item: InnerField) -> None:
        """Normalize an absent value through the widget's ``fix_in``."""
        if get_path(self._data, item.key) is not None:
            return
        kind = self.registry.get(item.component)
        seeded = kind.fix_in(None, kind.options)
        if seeded is not None:
            set_path(self._data, item.key, seeded)

    def _wrap_on_blur(self, item: InnerField) -> None:
        props = item.component_props
        names = [name for name in BLUR_HANDLER_KEYS if props.get(name) is not None]
        originals = [props[name] for name in names]
        key = item.key

        def on_blur(*args: Any, **kwargs: Any) -> None:
            for original in originals:
                original(*args, **kwargs)
            # on_change always runs before on_blur, the data is current
            self._commit({key: {"valid": self._run_validation(key)}})

        for name in names or BLUR_HANDLER_KEYS[:1]:
            props[name] = on_blur

    # Internal state transitions

    def _set_field_list(self, fields: list[InnerField]) -> None:
        self._fields = fields
        self._by_key = {item.key: item for item in fields}

    def _get(self, key: str) -> InnerField:
        try:
            return self._by_key[key]
        except KeyError:
            raise UnknownFieldError(key) from None

    def _commit(self, changes: FieldChanges) -> None:
        if not changes:
            return
        self._set_field_list(apply_changes(self._fields, changes))
        logger.debug(f"Committed changes for {sorted(changes)}")

    def _notify_change(self) -> None:
        if self._on_change is not None:
            self._on_change(copy.deepcopy(self._data))

    def _run_validation(self, key: str) -> ValidateResult:
        result = self._validators[key](self._data)
        self._latest_handles[key] = result[2] if is_pending(result) else None
        return result

    def _make_settle_callback(self, key: str) -> Callable[[ValidateResult, Any], None]:
        def on_settle(result: ValidateResult, handle: Any) -> None:
            if not self._mounted or key not in self._by_key:
                return
            if self.config.discard_stale_validations and self._latest_handles.get(key) is not handle:
                logger.debug(f"Discarding superseded async result for '{key}'")
                return
            self._latest_handles[key] = None
            self._commit({key: {"valid": result}})

        return on_settle

    def _propagate(self, key: str, changes: FieldChanges) -> None:
        """Record state changes of the direct subscribers of ``key``."""
        for kind, attribute in _PROPAGATION:
            for subscriber_key in self.graphs.for_kind(kind).subscribers_of(key):
                subscriber = self._get(subscriber_key)
                state = _predicate_state(kind, self._predicates[subscriber_key], self._data)
                if getattr(subscriber, attribute) != state:
                    changes.setdefault(subscriber_key, {})[attribute] = state

    # Public API

    def set_field_value(self, key: str, value: Any) -> None:
        """
        Write a field value and update every state that depends on it.

        If validation or a subscriber predicate raises, the form data is
        restored and nothing is committed.

        Raises:
            UnknownFieldError: If no field declares ``key``.
        """
        item = self._get(key)
        previous_data = copy.deepcopy(self._data)
        previous_handle = self._latest_handles.get(key)
        set_path(self._data, key, value)

        patch: dict[str, Any] = {"value": value, "is_touched": True}
        try:
            if item.triggers_on(ValidateTrigger.ON_CHANGE):
                patch["valid"] = self._run_validation(key)
            changes: FieldChanges = {key: patch}
            self._propagate(key, changes)
        except Exception:
            self._data.clear()
            self._data.update(previous_data)
            if is_pending(patch.get("valid", NOT_VALIDATED)):
                patch["valid"][2].cancel()
            self._latest_handles[key] = previous_handle
            raise
        self._commit(changes)
        self._notify_change()

    @traced("validate_fields")
    def validate_fields(self) -> dict[str, ValidateResult]:
        """
        Validate every field now and commit the changed results.

        Returns:
            ``{key: ValidateResult}``; async checks appear as pending results.
        """
        results: dict[str, ValidateResult] = {}
        changes: FieldChanges = {}
        for item in self._fields:
            result = self._run_validation(item.key)
            results[item.key] = result
            if not same_outcome(item.valid, result):
                changes[item.key] = {"valid": result}
        self._commit(changes)
        return results

    @traced_async("validate")
    async def validate(self) -> dict[str, ValidateResult]:
        """
        Validate every field and wait for all pending async checks.

        Returns:
            ``{key: ValidateResult}`` holding settled results only.
        """
        results = self.validate_fields()
        pending = {key: result[2] for key, result in results.items() if is_pending(result)}
        if pending:
            logger.debug(f"Waiting on {len(pending)} async validation(s)")
            settled = await asyncio.gather(*pending.values())
            results.update(zip(pending, settled))
        return results

    @traced("reset")
    def reset(self, key: str | None = None) -> None:
        """
        Restore values.

        Args:
            key: Only restore this field, from its default value. Without a
                key the whole form returns to its defaults merged with the
                supplied value, and every field state is recomputed.
        """
        if key is not None:
            item = self._get(key)
            set_path(self._data, key, copy.deepcopy(get_path(self._defaults, key)))
            self._seed_widget_value(item)
            self._latest_handles.pop(key, None)
            changes: FieldChanges = {
                key: {
                    "value": get_path(self._data, key),
                    "is_touched": False,
                    "valid": NOT_VALIDATED,
                }
            }
            self._propagate(key, changes)
        else:
            self._data = deep_merge(self._defaults, self._supplied)
            for item in self._fields:
                self._seed_widget_value(item)
            self._latest_handles.clear()
            changes = {
                item.key: {
                    "value": get_path(self._data, item.key),
                    "is_touched": False,
                    "valid": NOT_VALIDATED,
                    **self._predicates[item.key].evaluate(self._data),
                }
                for item in self._fields
            }
        self._commit(changes)
        self._notify_change()

    def get_data(self) -> dict[str, Any]:
        """Submission data: each value through ``fix_out`` and ``fix_data``, re-nested by key."""
        data: dict[str, Any] = {}
        for item in self._fields:
            kind = self.registry.get(item.component)
            value = item.get_data(lambda v, kind=kind: kind.fix_out(v, kind.options))
            set_path(data, item.key, value)
        return data

    def is_field_touched(self, key: str) -> bool:
        return bool(self._get(key).is_touched)

    def set_field_valid(self, key: str, result: ValidateResult) -> None:
        self._get(key)
        self._commit({key: {"valid": tuple(result)}})

    def set_fields(
        self,
        fields: list[InnerField] | Callable[[list[InnerField]], list[InnerField]],
    ) -> None:
        """Replace the field list, or map it with a function of the current list."""
        if callable(fields):
            fields = fields(list(self._fields))
        self._set_field_list(list(fields))

    def blur(self, key: str) -> None:
        """Deliver a blur event to the field's ``on_blur`` (or ``onBlur``) handler."""
        props = self._get(key).component_props
        for name in BLUR_HANDLER_KEYS:
            if props.get(name) is not None:
                props[name]()
                return

    def get_field(self, key: str) -> InnerField:
        return self._get(key)

    @property
    def fields(self) -> list[InnerField]:
        return list(self._fields)

    @property
    def data(self) -> dict[str, Any]:
        """Detached copy of the form data."""
        return copy.deepcopy(self._data)

    def rendered_fields(self) -> list[InnerField]:
        """Fields to render: not removed, in index order."""
        return sorted((item for item in self._fields if not item.removed), key=lambda item: item.index)

    def widget_props(self, key: str) -> dict[str, Any]:
        """Everything a widget needs to render the field at ``key``."""
        item = self._get(key)
        kind = self.registry.get(item.component)
        return {
            "key": item.key,
            "label": item.label,
            "label_tip": item.label_tip,
            "value": kind.fix_in(item.value, kind.options),
            "on_change": lambda value: self.set_field_value(key, value),
            "visible": item.visible,
            "disabled": item.disabled,
            "valid": item.valid,
            "component_props": kind.extension_fix(dict(item.component_props), kind.options),
            "wrapper_props": dict(item.wrapper_props),
        }


def mount_form(
    form_ref: FormRef,
    fields: Iterable[FieldSchema | Mapping[str, Any]],
    value: Mapping[str, Any] | None = None,
    on_change: Callable[[dict[str, Any]], Any] | None = None,
    registry: WidgetRegistry | None = None,
    config: FormRuntimeConfig | None = None,
) -> FormStore:
    """Mount a form and attach its store to ``form_ref``."""
    store = FormStore(fields, value=value, on_change=on_change, registry=registry, config=config)
    store._form_ref = form_ref
    form_ref.current = store
    return store
