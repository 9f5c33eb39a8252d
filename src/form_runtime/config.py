"""
Configuration module for form-runtime.

Handles environment variables and default settings.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


@dataclass
class FormRuntimeConfig:
    """Configuration settings for form-runtime."""

    # Messages
    required_message: str = "cannot be empty"
    pending_message: str = "validating..."

    # Async validation: drop completions superseded by a newer validation
    discard_stale_validations: bool = True

    # Run guardrails over the schema at mount
    validate_schema: bool = True

    # Tracing settings
    enable_tracing: bool = False
    trace_file: str | None = None
    verbose_output: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "FormRuntimeConfig":
        """
        Create configuration from environment variables.

        If an environment variable is not set, uses the class field default value.
        """
        _defaults = cls()

        return cls(
            required_message=os.getenv("FORM_RUNTIME_REQUIRED_MESSAGE", _defaults.required_message),
            pending_message=os.getenv("FORM_RUNTIME_PENDING_MESSAGE", _defaults.pending_message),
            discard_stale_validations=os.getenv("FORM_RUNTIME_DISCARD_STALE_VALIDATIONS", str(_defaults.discard_stale_validations).lower()).lower() == "true",
            validate_schema=os.getenv("FORM_RUNTIME_VALIDATE_SCHEMA", str(_defaults.validate_schema).lower()).lower() == "true",
            enable_tracing=os.getenv("FORM_RUNTIME_ENABLE_TRACING", str(_defaults.enable_tracing).lower()).lower() == "true",
            trace_file=os.getenv("FORM_RUNTIME_TRACE_FILE", _defaults.trace_file),
            verbose_output=os.getenv("FORM_RUNTIME_VERBOSE_OUTPUT", str(_defaults.verbose_output).lower()).lower() == "true",
            log_level=os.getenv("FORM_RUNTIME_LOG_LEVEL", _defaults.log_level).upper(),
        )


config = FormRuntimeConfig.from_env()


def get_config() -> FormRuntimeConfig:
    """Get the current configuration."""
    return config


def update_config(**kwargs) -> FormRuntimeConfig:
    """Update configuration settings."""
    global config
    for key, value in kwargs.items():
        if hasattr(config, key):
            setattr(config, key, value)
    return config
