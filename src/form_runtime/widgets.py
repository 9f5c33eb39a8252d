"""
Widget contract and registry.

Rendering is done outside this package. A widget kind only tells the store
how to adapt values for it:

- ``fix_in(value, options)``: form value to the value the widget shows
- ``fix_out(value, options)``: widget value to the value submitted by
  ``get_data``
- ``required_check(value)``: ``(passed, message)`` for required fields
- ``extension_fix(props, options)``: adjust the props handed to the widget

Kinds live in an explicit ``WidgetRegistry`` passed to each store. A registry
is frozen once a form mounts against it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from form_runtime.config import get_config
from form_runtime.exceptions import RegistryFrozenError, UnknownWidgetError

logger = logging.getLogger(__name__)


def _identity(value: Any, options: Any = None) -> Any:
    return value


def _always_passes(value: Any) -> tuple[bool, str]:
    return True, ""


@dataclass(frozen=True)
class WidgetKind:
    """Adaptation hooks of one widget kind."""

    name: str
    required_check: Callable[[Any], tuple[bool, str]] = _always_passes
    fix_in: Callable[[Any, Any], Any] = _identity
    fix_out: Callable[[Any, Any], Any] = _identity
    extension_fix: Callable[[dict[str, Any], Any], dict[str, Any]] = _identity
    options: dict[str, Any] = field(default_factory=dict)


class WidgetRegistry:
    """
    Widget kinds keyed by name.

    Usage:
        registry = WidgetRegistry()
        registry.register(WidgetKind(name="switch", required_check=...))
        store = FormStore(fields, registry=registry)
    """

    def __init__(self, kinds: list[WidgetKind] | None = None):
        self._kinds: dict[str, WidgetKind] = {}
        self._frozen = False
        for kind in kinds or []:
            self.register(kind)

    def register(self, kind: WidgetKind) -> WidgetKind:
        """
        Add or replace a widget kind.

        Raises:
            RegistryFrozenError: If a form already mounted this registry.
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register widget kind '{kind.name}': registry is read-only",
                {"kind": kind.name},
            )
        if kind.name in self._kinds:
            logger.warning(f"Replacing widget kind '{kind.name}'")
        self._kinds[kind.name] = kind
        return kind

    def get(self, name: str) -> WidgetKind:
        try:
            return self._kinds[name]
        except KeyError:
            raise UnknownWidgetError(name) from None

    def __contains__(self, name: object) -> bool:
        return name in self._kinds

    def names(self) -> list[str]:
        return list(self._kinds)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen


def default_registry(required_message: str | None = None) -> WidgetRegistry:
    """
    Registry with the built-in ``select`` and ``input`` kinds.

    Args:
        required_message: Message of the required check. Defaults to the
            configured ``required_message``.
    """
    message = required_message or get_config().required_message

    def select_required(value: Any) -> tuple[bool, str]:
        # fix_in seeds an absent selection as ""
        return value is not None and value != "", message

    def input_required(value: Any) -> tuple[bool, str]:
        return value is not None and value != "", message

    def select_fix_in(value: Any, options: Any = None) -> Any:
        # an absent selection reads as ""
        return "" if value is None else value

    return WidgetRegistry(
        [
            WidgetKind(name="select", required_check=select_required, fix_in=select_fix_in),
            WidgetKind(name="input", required_check=input_required),
        ]
    )
