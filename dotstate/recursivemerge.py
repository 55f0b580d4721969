"""Recursive merging of nested string-keyed mappings."""

from __future__ import annotations

from typing import Any


def _recursive_copy(value: Any) -> Any:
    """Return a copy of value in which every nested dict is copied."""
    if not isinstance(value, dict):
        return value
    return {key: _recursive_copy(item) for key, item in value.items()}


def recursive_merge(dest: dict[str, Any], source: dict[str, Any] | None) -> None:
    """Recursively merge the dicts in source into dest, in place.

    Values from source win, except where both sides hold a dict, in which case
    the two dicts are merged. Values taken from source are copied so that later
    changes to dest never reach source.
    """
    if not source:
        return
    for key, source_value in source.items():
        dest_value = dest.get(key)
        if (
            key in dest
            and isinstance(dest_value, dict)
            and isinstance(source_value, dict)
        ):
            recursive_merge(dest_value, source_value)
        else:
            dest[key] = _recursive_copy(source_value)