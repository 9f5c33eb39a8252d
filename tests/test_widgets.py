"""Tests for the widget registry."""

import pytest

from form_runtime.exceptions import RegistryFrozenError, UnknownWidgetError
from form_runtime.widgets import WidgetKind, WidgetRegistry, default_registry


class TestWidgetRegistry:
    """Tests for WidgetRegistry."""

    def test_register_and_get(self):
        registry = WidgetRegistry()
        kind = registry.register(WidgetKind(name="switch"))
        assert registry.get("switch") is kind
        assert "switch" in registry
        assert registry.names() == ["switch"]

    def test_unknown_kind(self):
        with pytest.raises(UnknownWidgetError):
            WidgetRegistry().get("slider")

    def test_frozen(self):
        registry = WidgetRegistry([WidgetKind(name="switch")])
        registry.freeze()
        assert registry.frozen
        with pytest.raises(RegistryFrozenError):
            registry.register(WidgetKind(name="slider"))

    def test_registries_are_independent(self):
        first = default_registry()
        second = default_registry()
        first.register(WidgetKind(name="switch"))
        first.freeze()
        assert "switch" not in second
        assert not second.frozen

    def test_default_hooks(self):
        kind = WidgetKind(name="plain")
        assert kind.fix_in(3, None) == 3
        assert kind.fix_out("x", None) == "x"
        assert kind.extension_fix({"a": 1}, None) == {"a": 1}
        assert kind.required_check(None) == (True, "")


class TestDefaultRegistry:
    """Tests for the built-in widget kinds."""

    def test_kinds(self):
        assert sorted(default_registry().names()) == ["input", "select"]

    def test_select(self):
        select = default_registry(required_message="pick one").get("select")
        assert select.fix_in(None, select.options) == ""
        assert select.fix_in("US", select.options) == "US"
        assert select.required_check(None) == (False, "pick one")
        assert select.required_check("") == (False, "pick one")
        assert select.required_check("US") == (True, "pick one")

    def test_input(self):
        text = default_registry(required_message="required").get("input")
        assert text.fix_in(None, text.options) is None
        assert text.required_check("")[0] is False
        assert text.required_check(0)[0] is True
