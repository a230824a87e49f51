"""Bounded-concurrency bulk fetches with per-item outcomes."""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger("databasin.client")

_ID_SEPARATORS = re.compile(r"[,\s]+")


@dataclass
class BulkResult:
    """Outcome of fetching one id."""

    id: str
    success: bool
    data: Any = None
    error: str | None = None
    status_code: int | None = None


async def fetch_bulk(
    ids: Sequence[str],
    fetch: Callable[[str], Awaitable[Any]],
    concurrency: int = 5,
) -> list[BulkResult]:
    """Fetch *ids* in windows of *concurrency*; results keep input order.

    A failing id is recorded in its :class:`BulkResult` and never stops the
    others.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")
    results: list[BulkResult] = []
    for start in range(0, len(ids), concurrency):
        window = ids[start : start + concurrency]
        results.extend(await asyncio.gather(*(_fetch_one(i, fetch) for i in window)))
    return results


async def _fetch_one(item_id: str, fetch: Callable[[str], Awaitable[Any]]) -> BulkResult:
    try:
        data = await fetch(item_id)
    except Exception as exc:
        logger.debug("Bulk fetch of %s failed: %s", item_id, exc)
        message = getattr(exc, "message", None) or str(exc)
        return BulkResult(
            id=item_id,
            success=False,
            error=message,
            status_code=getattr(exc, "status_code", None),
        )
    return BulkResult(id=item_id, success=True, data=data)


def parse_bulk_ids(raw: str | Sequence[str]) -> list[str]:
    """Split comma/space separated ids, dropping blanks and duplicates."""
    chunks = [raw] if isinstance(raw, str) else list(raw)
    seen: dict[str, None] = {}
    for chunk in chunks:
        for part in _ID_SEPARATORS.split(chunk):
            if part:
                seen.setdefault(part, None)
    return list(seen)
