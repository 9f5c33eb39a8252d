"""Tests for configuration and tracing."""

import json
import logging

from form_runtime import config as config_module
from form_runtime.config import FormRuntimeConfig, get_config, update_config
from form_runtime.store import FormStore
from form_runtime.tracing import is_tracing_enabled, setup_tracing, traced_operation


class TestFormRuntimeConfig:
    """Tests for FormRuntimeConfig."""

    def test_defaults(self):
        settings = FormRuntimeConfig()
        assert settings.discard_stale_validations is True
        assert settings.validate_schema is True
        assert settings.enable_tracing is False

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("FORM_RUNTIME_REQUIRED_MESSAGE", "required")
        monkeypatch.setenv("FORM_RUNTIME_DISCARD_STALE_VALIDATIONS", "false")
        monkeypatch.setenv("FORM_RUNTIME_LOG_LEVEL", "debug")
        settings = FormRuntimeConfig.from_env()
        assert settings.required_message == "required"
        assert settings.discard_stale_validations is False
        assert settings.log_level == "DEBUG"

    def test_update_config(self, monkeypatch):
        monkeypatch.setattr(config_module, "config", FormRuntimeConfig())
        updated = update_config(pending_message="checking", unknown_setting=1)
        assert updated is get_config()
        assert get_config().pending_message == "checking"
        assert not hasattr(get_config(), "unknown_setting")


class TestTracing:
    """Tests for tracing setup."""

    def test_file_tracing(self, tmp_path):
        trace_file = tmp_path / "traces.jsonl"
        setup_tracing(console=False, file_path=str(trace_file))
        try:
            assert is_tracing_enabled()
            with traced_operation("reset", {"key": "email"}):
                pass
        finally:
            setup_tracing(enabled=False)

        records = [json.loads(line) for line in trace_file.read_text().splitlines()]
        messages = [r["message"] for r in records]
        assert messages[0] == "[TRACE START] reset"
        assert messages[-1].startswith("[TRACE END] reset")
        assert records[0]["trace"] == {"key": "email"}

    def test_store_operations_traced(self, tmp_path):
        trace_file = tmp_path / "traces.jsonl"
        setup_tracing(console=False, file_path=str(trace_file))
        try:
            store = FormStore(
                [{"index": 0, "key": "a", "component": "input"}],
                config=FormRuntimeConfig(),
            )
            store.reset()
        finally:
            setup_tracing(enabled=False)

        messages = [json.loads(line)["message"] for line in trace_file.read_text().splitlines()]
        assert "[TRACE START] mount" in messages
        assert "[TRACE START] reset" in messages

    def test_disabled(self):
        setup_tracing(enabled=False)
        assert not is_tracing_enabled()
        handlers = logging.getLogger("form_runtime").handlers
        assert not any(getattr(h, "_form_runtime_handler", False) for h in handlers)
