"""
Dot-path helpers for the nested form-data mapping.

Keys such as ``"address.city"`` address ``data["address"]["city"]``.
"""

import copy
from typing import Any


def split_path(path: str) -> list[str]:
    """Split a dot-path key into its segments."""
    return path.split(".")


def get_path(data: Any, path: str, default: Any = None) -> Any:
    """Read the value at ``path``, or ``default`` when any segment is missing."""
    current = data
    for segment in split_path(path):
        if isinstance(current, dict) and segment in current:
            current = current[segment]
        elif isinstance(current, list) and segment.isdigit() and int(segment) < len(current):
            current = current[int(segment)]
        else:
            return default
    return current


def set_path(data: dict[str, Any], path: str, value: Any) -> dict[str, Any]:
    """
    Write ``value`` at ``path``, creating intermediate mappings as needed.

    A non-mapping value sitting on an intermediate segment is replaced.
    Returns ``data`` for chaining.
    """
    segments = split_path(path)
    current = data
    for segment in segments[:-1]:
        child = current.get(segment)
        if not isinstance(child, dict):
            child = {}
            current[segment] = child
        current = child
    current[segments[-1]] = value
    return data


def deep_merge(*sources: dict[str, Any] | None) -> dict[str, Any]:
    """
    Merge mappings left to right into a new dict; later sources win.

    Nested mappings are merged recursively, everything else is deep-copied.
    ``None`` values in a later source do not overwrite earlier ones.
    """
    result: dict[str, Any] = {}
    for source in sources:
        if not source:
            continue
        _merge_into(result, source)
    return result


def _merge_into(target: dict[str, Any], source: dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge_into(target[key], value)
        elif value is not None:
            target[key] = copy.deepcopy(value)
        elif key not in target:
            target[key] = None
