# dispatchlanes/interval.py
from __future__ import annotations

import dataclasses
import logging
from typing import Iterable, List, Tuple

from .model import Interval

logger = logging.getLogger(__name__)

MIN_MS = 60_000


def interval_sort_key(iv: Interval) -> Tuple[int, int, str]:
    """Start ascending, then longer first, then id (total order)."""
    return (int(iv.start_ms), -(int(iv.end_ms) - int(iv.start_ms)), str(iv.id))


def sort_intervals(intervals: Iterable[Interval]) -> List[Interval]:
    return sorted(intervals, key=interval_sort_key)


def normalize_interval(iv: Interval, min_duration_ms: int = MIN_MS) -> Interval:
    """Return `iv` unchanged when start < end, else a copy stretched to min_duration_ms.

    Malformed intervals are repaired, never rejected.
    """
    if int(iv.end_ms) > int(iv.start_ms):
        return iv
    dur = max(1, int(min_duration_ms))
    logger.debug(
        "interval %s has end<=start (%s <= %s); stretching to %sms",
        iv.id,
        iv.end_ms,
        iv.start_ms,
        dur,
    )
    return dataclasses.replace(iv, end_ms=int(iv.start_ms) + dur)


def overlaps(a: Interval, b: Interval) -> bool:
    """Half-open overlap test: back-to-back intervals do not overlap."""
    return not (a.end_ms <= b.start_ms or a.start_ms >= b.end_ms)


def max_concurrency(intervals: Iterable[Interval]) -> int:
    """Largest number of intervals active at one instant (sweep line)."""
    pts: List[Tuple[int, int]] = []
    for iv in intervals:
        if iv.end_ms <= iv.start_ms:
            continue
        pts.append((iv.start_ms, +1))
        pts.append((iv.end_ms, -1))
    # Ends sort before starts at the same instant (half-open intervals).
    pts.sort(key=lambda x: (x[0], x[1]))

    best = 0
    active = 0
    for _t, kind in pts:
        active += kind
        if active > best:
            best = active
    return best
