"""
Tracing configuration for form-runtime.

Store operations (mount, validate, reset) are traced through the standard
``logging`` module under the ``form_runtime`` logger. Traces can be printed
to the console or appended to a JSON Lines file.
"""

import functools
import json
import logging
import time
from contextlib import contextmanager
from typing import Iterator

LOGGER_NAME = "form_runtime"

logger = logging.getLogger(LOGGER_NAME)
trace_logger = logging.getLogger(f"{LOGGER_NAME}.trace")

_tracing_enabled = False


class ConsoleTraceFormatter(logging.Formatter):
    """
    Formats trace records for the console.

    Useful for development and debugging.
    """

    def __init__(self, verbose: bool = False):
        """
        Initialize the console formatter.

        Args:
            verbose: If True, include the logger name and extra trace data.
        """
        super().__init__()
        self.verbose = verbose

    def format(self, record: logging.LogRecord) -> str:
        message = record.getMessage()
        if not self.verbose:
            return message
        trace_data = getattr(record, "trace", None)
        if trace_data:
            return f"[{record.name}] {message} {trace_data}"
        return f"[{record.name}] {message}"


class JsonLinesTraceFormatter(logging.Formatter):
    """
    Formats trace records as JSON objects, one per line.

    Useful for persistent logging and later analysis.
    """

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "time": record.created,
            "logger": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        trace_data = getattr(record, "trace", None)
        if trace_data:
            payload["trace"] = trace_data
        return json.dumps(payload, default=str)


def setup_tracing(
    enabled: bool = True,
    console: bool = True,
    verbose: bool = False,
    file_path: str | None = None,
    level: str = "INFO",
) -> None:
    """
    Configure tracing for form-runtime.

    Args:
        enabled: Whether tracing is enabled.
        console: Whether to print traces to console.
        verbose: Whether to print detailed trace information.
        file_path: Optional file path to write traces to (JSON Lines).
        level: Log level for the ``form_runtime`` logger.

    Example:
        >>> from form_runtime.tracing import setup_tracing
        >>> setup_tracing(console=True, verbose=True)
        >>> # Now every store operation is traced
    """
    global _tracing_enabled

    for handler in list(logger.handlers):
        if getattr(handler, "_form_runtime_handler", False):
            logger.removeHandler(handler)
            handler.close()

    logger.setLevel(level)
    if not enabled:
        _tracing_enabled = False
        return
    _tracing_enabled = True

    handlers: list[logging.Handler] = []

    if console:
        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(ConsoleTraceFormatter(verbose=verbose))
        handlers.append(stream_handler)

    if file_path:
        file_handler = logging.FileHandler(file_path, encoding="utf-8")
        file_handler.setFormatter(JsonLinesTraceFormatter())
        handlers.append(file_handler)

    for handler in handlers:
        handler._form_runtime_handler = True
        logger.addHandler(handler)


def disable_tracing() -> None:
    """Disable tracing of store operations."""
    global _tracing_enabled
    _tracing_enabled = False


def enable_tracing() -> None:
    """Enable tracing of store operations."""
    global _tracing_enabled
    _tracing_enabled = True


def is_tracing_enabled() -> bool:
    return _tracing_enabled


@contextmanager
def traced_operation(name: str, metadata: dict | None = None) -> Iterator[None]:
    """
    Context manager for tracing a store operation.

    Args:
        name: Name of the operation to trace.
        metadata: Optional metadata to attach to the trace.

    Example:
        >>> with traced_operation("reset", {"key": "email"}):
        ...     store.reset("email")
    """
    if not _tracing_enabled:
        yield
        return

    started = time.perf_counter()
    trace_logger.info(f"[TRACE START] {name}", extra={"trace": metadata or {}})
    try:
        yield
    except Exception:
        trace_logger.exception(f"[TRACE ERROR] {name}")
        raise
    elapsed_ms = (time.perf_counter() - started) * 1000
    trace_logger.info(
        f"[TRACE END] {name} ({elapsed_ms:.2f} ms)",
        extra={"trace": {**(metadata or {}), "elapsed_ms": round(elapsed_ms, 3)}},
    )


def traced(name: str):
    """Decorator to trace a synchronous store method."""

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            with traced_operation(name):
                return func(*args, **kwargs)

        return wrapper

    return decorator


def traced_async(name: str):
    """Decorator to trace a coroutine store method."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            with traced_operation(name):
                return await func(*args, **kwargs)

        return wrapper

    return decorator
