"""Accessors for SDK response objects.

SDK clients return typed objects; tests and raw HTTP paths return dicts. The
helpers here read either shape.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Optional


def get_field(obj: Any, name: str, default: Any = None) -> Any:
    """Return ``obj[name]`` for mappings, else ``getattr(obj, name)``."""
    if obj is None:
        return default
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def to_epoch(value: Any) -> Optional[int]:
    """Convert an int timestamp, ``datetime`` or ISO-8601 string to unix seconds."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, datetime):
        return int(value.timestamp())
    if isinstance(value, str):
        try:
            return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())
        except ValueError:
            return None
    return None


__all__ = ["get_field", "to_epoch"]
