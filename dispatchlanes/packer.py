# dispatchlanes/packer.py
"""First-fit lane packing for one resource.

Intervals are processed in `interval_sort_key` order. Each lane keeps every
interval placed in it, and an interval goes to the lowest lane where it
overlaps none of them. When all `capacity` lanes are taken and none fits, the
interval is forced into the last lane: it is drawn on top of whatever it
collides with there instead of being dropped.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List

from .config import DEFAULT_CAPACITY
from .interval import overlaps, sort_intervals
from .model import Interval, LanePacking

logger = logging.getLogger(__name__)


def _fits(lane: List[Interval], iv: Interval) -> bool:
    for other in lane:
        if overlaps(iv, other):
            return False
    return True


def pack_lanes(
    intervals: Iterable[Interval],
    capacity: int = DEFAULT_CAPACITY,
    *,
    resource_id: str = "",
) -> LanePacking:
    cap = max(1, int(capacity))

    lanes: List[List[Interval]] = []
    lane_of: Dict[str, int] = {}
    overflow: List[str] = []

    for iv in sort_intervals(intervals):
        lane_index = -1
        for i, lane in enumerate(lanes):
            if _fits(lane, iv):
                lane_index = i
                break

        if lane_index < 0:
            if len(lanes) < cap:
                lane_index = len(lanes)
                lanes.append([])
            else:
                lane_index = cap - 1
                overflow.append(iv.id)
                logger.debug(
                    "resource %s: capacity %d exhausted; interval %s forced into lane %d",
                    resource_id,
                    cap,
                    iv.id,
                    lane_index,
                )

        lanes[lane_index].append(iv)
        lane_of[iv.id] = lane_index

    return LanePacking(
        resource_id=resource_id,
        lane_of=lane_of,
        lanes=tuple(tuple(lane) for lane in lanes),
        overflow_ids=tuple(overflow),
    )
