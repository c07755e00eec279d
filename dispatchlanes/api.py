"""dispatchlanes.api

Stable *library* entrypoint for dispatchlanes.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Optional

from dispatchlanes.axis import axis_columns, map_span
from dispatchlanes.config import LayoutConfig, ViewState
from dispatchlanes.feed import Feed, day_window, feed_tz, load_feed, load_feed_from_json, window_from_feed
from dispatchlanes.geometry import build_rect
from dispatchlanes.interval import max_concurrency, normalize_interval, sort_intervals
from dispatchlanes.model import (
    AxisColumn,
    AxisSpan,
    Interval,
    LanePacking,
    RenderRect,
    Resource,
    ResourceRow,
    TimelineLayout,
    Window,
)
from dispatchlanes.packer import pack_lanes
from dispatchlanes.rows import normalize_row_height, resource_height_px
from dispatchlanes.settings import SettingsStore, load_view_state, save_view_state
from dispatchlanes.timeline import intervals_for_day, layout_timeline
from dispatchlanes.validate import FeedValidationError, assert_valid_feed, validate_feed


def layout_feed(
    payload: Dict[str, Any],
    *,
    day: Optional[dt.date] = None,
    tz: Optional[dt.tzinfo] = None,
    window: Optional[Window] = None,
    config: Optional[LayoutConfig] = None,
    view: Optional[ViewState] = None,
    validate: bool = True,
) -> TimelineLayout:
    """Validate, parse and lay out a feed document in one call.

    Window precedence: `window` argument, then the feed's `window` block, then
    the default 08:00-20:00 window of `day`. Feed `capacity` / `window.columns`
    override the matching `config` fields.
    """
    if validate:
        assert_valid_feed(payload)

    tzinfo = tz or feed_tz(payload)
    base_cfg = config or LayoutConfig()
    feed = load_feed(payload, tz=tzinfo, default_duration_min=base_cfg.default_duration_min)

    cfg_map = base_cfg.to_dict()
    cap = payload.get("capacity")
    if isinstance(cap, int) and not isinstance(cap, bool):
        cfg_map["capacity"] = cap
    feed_win = payload.get("window")
    cols = feed_win.get("columns") if isinstance(feed_win, dict) else None
    if isinstance(cols, int) and not isinstance(cols, bool) and cols > 0:
        cfg_map["columns"] = cols

    if window is None:
        from_feed = window_from_feed(payload, tzinfo)
        if from_feed is not None:
            window, _columns = from_feed
            day = day or dt.datetime.fromtimestamp(window.start_ms / 1000.0, tz=tzinfo).date()
        else:
            if day is None:
                raise ValueError("day is required when neither window nor feed window is given")
            window = day_window(day, tzinfo)

    intervals = list(feed.intervals)
    if day is not None:
        intervals = intervals_for_day(intervals, day, tzinfo)

    return layout_timeline(
        intervals,
        feed.resources,
        window,
        LayoutConfig.from_mapping(cfg_map),
        view,
        tz=tzinfo,
    )


# --- Public API exports (locked by contract tests) ------------------------
# Keep changes intentional and reviewable.
_PUBLIC_EXPORTS = (
    "AxisColumn",
    "AxisSpan",
    "Feed",
    "FeedValidationError",
    "Interval",
    "LanePacking",
    "LayoutConfig",
    "RenderRect",
    "Resource",
    "ResourceRow",
    "SettingsStore",
    "TimelineLayout",
    "ViewState",
    "Window",
    "assert_valid_feed",
    "axis_columns",
    "build_rect",
    "day_window",
    "intervals_for_day",
    "layout_feed",
    "layout_timeline",
    "load_feed",
    "load_feed_from_json",
    "load_view_state",
    "map_span",
    "max_concurrency",
    "normalize_interval",
    "normalize_row_height",
    "pack_lanes",
    "resource_height_px",
    "save_view_state",
    "sort_intervals",
    "validate_feed",
)

__all__ = [n for n in _PUBLIC_EXPORTS if n in globals()]
# --- /Public API exports --------------------------------------------------
