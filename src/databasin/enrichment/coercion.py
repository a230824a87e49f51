"""Permissive type coercion for loosely typed user input.

Malformed values fall back to a default instead of raising, so that drafts
written by hand (or exported from older tools) keep enriching the same way
the platform's web wizard treats them.
"""

from __future__ import annotations

import math
import re
from typing import Any

_TRUTHY = frozenset({"true", "t", "on", "1"})
_LEADING_INT = re.compile(r"[+-]?\d+")


def parse_bool(value: Any) -> bool:
    """Coerce *value* to a boolean.

    Numbers are true only when equal to 1; strings when they are one of
    ``true``, ``t``, ``on`` or ``1`` (case-insensitive).  Everything else is
    false.
    """
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value == 1
    if isinstance(value, str):
        return value.lower() in _TRUTHY
    return False


def parse_int_safe(value: Any, default: int) -> int:
    """Coerce *value* to an int, returning *default* when it cannot be read.

    Floats are floored.  Strings are trimmed and read up to the first
    non-digit, so ``"42abc"`` gives 42 and ``"abc"`` gives the default.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return default
        return math.floor(value)
    if isinstance(value, str):
        match = _LEADING_INT.match(value.strip())
        if match is None:
            return default
        return int(match.group())
    return default


def ensure_string(value: Any, default: str = "") -> str:
    """Render *value* as a string; numbers are stringified, other types give *default*."""
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, str):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return default


def first_present(item: dict[str, Any], *keys: str) -> Any:
    """Return the first value under *keys* that is neither missing nor empty."""
    for key in keys:
        value = item.get(key)
        if value is not None and value != "":
            return value
    return None
