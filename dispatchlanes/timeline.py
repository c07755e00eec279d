# dispatchlanes/timeline.py
from __future__ import annotations

import datetime as dt
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from .axis import axis_columns, map_span
from .config import LayoutConfig, ViewState
from .geometry import build_rect
from .interval import normalize_interval, sort_intervals
from .model import Interval, LanePacking, RenderRect, Resource, ResourceRow, TimelineLayout, Window
from .packer import pack_lanes
from .rows import normalize_row_height
from .util.tz import day_key_from_ms
from .util.viewkey import make_layout_key

logger = logging.getLogger(__name__)


def intervals_for_day(intervals: Iterable[Interval], day: dt.date, tz: dt.tzinfo) -> List[Interval]:
    """Keep intervals whose start falls on `day` in `tz`."""
    key = day.isoformat()
    return [iv for iv in intervals if day_key_from_ms(iv.start_ms, tz) == key]


def order_resources(resources: Iterable[Resource], group_order: Sequence[str]) -> List[Resource]:
    """Rows by team rank (unknown teams last), then name, then id."""
    rank = {g: i for i, g in enumerate(group_order)}
    last = len(rank)
    return sorted(resources, key=lambda r: (rank.get(r.group_key, last), r.group_key, r.name, r.id))


def layout_key(
    intervals: Sequence[Interval],
    resources: Sequence[Resource],
    window: Window,
    cfg: LayoutConfig,
    view: ViewState,
    tz_label: str = "",
) -> str:
    parts: List[object] = [window.start_ms, window.end_ms, tz_label, sorted(cfg.to_dict().items()), view.to_dict()]
    for r in sorted(resources, key=lambda r: r.id):
        parts.append((r.id, r.name, r.group_key))
    for iv in sorted(intervals, key=lambda iv: iv.id):
        parts.append((iv.id, iv.resource_id, iv.start_ms, iv.end_ms, iv.category, iv.status, iv.name))
    return make_layout_key(parts)


def _dedupe(intervals: Iterable[Interval]) -> List[Interval]:
    seen: Dict[str, Interval] = {}
    for iv in intervals:
        if iv.id in seen:
            logger.warning("duplicate interval id %r; keeping the first occurrence", iv.id)
            continue
        seen[iv.id] = iv
    return list(seen.values())


def layout_timeline(
    intervals: Iterable[Interval],
    resources: Iterable[Resource],
    window: Window,
    config: Optional[LayoutConfig] = None,
    view: Optional[ViewState] = None,
    *,
    tz: Optional[dt.tzinfo] = None,
) -> TimelineLayout:
    """Lay out one day of intervals for the visible resources.

    Steps: filter (view) -> drop orphans -> repair malformed intervals ->
    pack lanes per resource -> shared row height -> axis mapping -> geometry.
    The result depends only on the arguments; equal inputs give equal layouts.
    `tz` only affects the axis column labels.
    """
    cfg = config or LayoutConfig()
    vs = view or ViewState()
    tzinfo = tz or dt.timezone.utc

    all_intervals = _dedupe(intervals)
    all_resources: Dict[str, Resource] = {}
    for r in resources:
        all_resources.setdefault(r.id, r)

    key = layout_key(all_intervals, list(all_resources.values()), window, cfg, vs, str(tzinfo))

    by_resource: Dict[str, List[Interval]] = {}
    normalized: List[str] = []
    orphans: List[str] = []
    for iv in all_intervals:
        if not vs.is_category_visible(iv.category):
            continue
        if iv.resource_id not in all_resources:
            orphans.append(iv.id)
            logger.debug("interval %s references unknown resource %r", iv.id, iv.resource_id)
            continue
        if not vs.is_resource_visible(iv.resource_id):
            continue
        fixed = normalize_interval(iv, cfg.min_duration_ms)
        if fixed is not iv:
            normalized.append(iv.id)
        by_resource.setdefault(iv.resource_id, []).append(fixed)

    visible = [
        r
        for r in order_resources(all_resources.values(), cfg.group_order)
        if vs.is_resource_visible(r.id) and (cfg.include_idle_resources or by_resource.get(r.id))
    ]

    packings: Dict[str, LanePacking] = {
        r.id: pack_lanes(by_resource.get(r.id, ()), cfg.capacity, resource_id=r.id) for r in visible
    }
    row_height = normalize_row_height((p.lanes_used for p in packings.values()), cfg)

    geometry: Dict[str, RenderRect] = {}
    excluded: List[str] = []
    rows: List[ResourceRow] = []
    for r in visible:
        packing = packings[r.id]
        overflow = set(packing.overflow_ids)
        placed: List[str] = []
        for iv in sort_intervals(by_resource.get(r.id, ())):
            span = map_span(iv.start_ms, iv.end_ms, window, min_width_fraction=cfg.min_width_fraction)
            if span is None:
                excluded.append(iv.id)
                logger.debug("interval %s is outside the window; not laid out", iv.id)
                continue
            lane = packing.lane_of[iv.id]
            geometry[iv.id] = build_rect(iv, lane, span, cfg, overflow=iv.id in overflow)
            placed.append(iv.id)
        rows.append(
            ResourceRow(
                resource=r,
                lanes_used=packing.lanes_used,
                interval_ids=tuple(placed),
                overflow_ids=tuple(i for i in packing.overflow_ids if i in geometry),
            )
        )

    return TimelineLayout(
        geometry=geometry,
        row_height_px=row_height,
        rows=tuple(rows),
        columns=tuple(axis_columns(window, cfg.columns, tzinfo)),
        window=window,
        excluded_ids=tuple(excluded),
        normalized_ids=tuple(normalized),
        orphan_ids=tuple(orphans),
        key=key,
    )


def lanes_by_resource(layout: TimelineLayout) -> Dict[str, Tuple[int, ...]]:
    """resource id -> lane index of each placed interval, in row order."""
    out: Dict[str, Tuple[int, ...]] = {}
    for row in layout.rows:
        out[row.resource.id] = tuple(layout.geometry[i].lane_index for i in row.interval_ids)
    return out
