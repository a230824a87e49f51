"""Cron expression checks for ``jobRunSchedule``."""

from __future__ import annotations

# (min, max) per position: minute hour day month weekday [year]
_FIELD_RANGES: tuple[tuple[int, int], ...] = (
    (0, 59),
    (0, 23),
    (1, 31),
    (1, 12),
    (0, 6),
    (1970, 3000),
)


def is_valid_cron_expression(expr: str) -> bool:
    """Accept 5- or 6-field cron with ``*``, ranges, steps and lists."""
    parts = expr.split()
    if len(parts) not in (5, 6):
        return False
    return all(_is_valid_field(part, *_FIELD_RANGES[i]) for i, part in enumerate(parts))


def _is_valid_field(token: str, low: int, high: int) -> bool:
    if token == "*":
        return True
    if "," in token:
        return all(_is_valid_field(part.strip(), low, high) for part in token.split(","))
    if "/" in token:
        base, _, step = token.partition("/")
        if not step.isdigit() or int(step) < 1:
            return False
        return base == "*" or _is_valid_field(base, low, high)
    if "-" in token:
        start, _, end = token.partition("-")
        if not (start.isdigit() and end.isdigit()):
            return False
        return low <= int(start) <= int(end) <= high
    return token.isdigit() and low <= int(token) <= high
