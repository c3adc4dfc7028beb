"""
Helper functions for reading remote API documents.

This module provides domain-agnostic utility functions for:
- Field access on mapping-like objects (plain dicts and SDK objects that
  support `in` and `[]` without being dicts)
- Unix timestamp conversion to aware UTC datetimes
- Conversion of nested SDK objects to plain dicts

These utilities are pure infrastructure - they have no knowledge
of Stripe resources or business logic.

Usage:
    from core.helpers import get_field, from_unix_timestamp

    customer_id = get_field(intent, "customer")
    created_at = from_unix_timestamp(get_field(intent, "created"))
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from typing import Any


def get_field(obj: Any, key: str, default: Any = None) -> Any:
    """
    Read `key` from a mapping-like object.

    Returns `default` when the object is None, does not support
    membership tests, or lacks the key. A present key holding None
    returns None, not `default`.

    Example:
        get_field({"id": "cus_123"}, "id")  # "cus_123"
        get_field(None, "id", "")           # ""
    """
    if obj is None:
        return default
    try:
        if key in obj:
            return obj[key]
    except TypeError:
        return default
    return default


def get_path(obj: Any, *keys: str, default: Any = None) -> Any:
    """
    Follow a chain of keys through nested mapping-like objects.

    Example:
        get_path(intent, "next_action", "redirect_to_url", "url")
    """
    current = obj
    for key in keys:
        current = get_field(current, key)
        if current is None:
            return default
    return current


def from_unix_timestamp(value: Any) -> datetime | None:
    """
    Convert Unix seconds to a timezone-aware UTC datetime.

    None, empty strings and zero map to None.
    """
    if value in (None, "", 0):
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


def to_plain_dict(obj: Any) -> dict[str, Any] | None:
    """
    Convert an SDK object or mapping to a plain, recursively copied dict.

    Objects exposing `to_dict()` are converted with it; other mappings
    are copied with `dict()`.
    """
    if obj is None:
        return None
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    return dict(obj)


def string_map(obj: Any) -> dict[str, str]:
    """Copy a metadata-style mapping into a plain `dict[str, str]`."""
    data = to_plain_dict(obj) or {}
    return {str(key): str(value) for key, value in data.items()}
