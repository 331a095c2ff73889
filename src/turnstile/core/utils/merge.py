"""Recursive merging of configuration layers."""
from __future__ import annotations

from typing import Any, Dict, Mapping


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Return ``base`` updated with ``override``; neither input is mutated.

    Nested mappings merge key by key. Any other value in ``override``
    (lists included) replaces the value in ``base``.

    Example:
        >>> deep_merge({"chains": {"watch_offset": 50}}, {"chains": {"finish_offset": 80}})
        {'chains': {'watch_offset': 50, 'finish_offset': 80}}
    """
    merged: Dict[str, Any] = dict(base)
    for key, value in (override or {}).items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged


__all__ = ["deep_merge"]
