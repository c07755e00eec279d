# dispatchlanes/feed.py
"""Turn raw feed records (JSON objects) into layout inputs.

The layout core expects clean `Interval`/`Resource` values. This module is the
repair/filter step in front of it: records that cannot be placed at all
(missing ids, unparsable start) are skipped with a warning; everything else is
coerced.
"""

from __future__ import annotations

import datetime as dt
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .config import DEFAULT_WINDOW_END_MIN, DEFAULT_WINDOW_START_MIN
from .model import Interval, Resource, Window
from .util.timeparse import parse_date_yyyy_mm_dd, parse_hhmm, parse_timestamp_ms
from .util.tz import epoch_ms_at, normalize_tz_name, resolve_tz

logger = logging.getLogger(__name__)

JsonPath = Union[str, Path]

_INTERVAL_EXTRA_KEYS = {
    "id",
    "resource_id",
    "resourceId",
    "start",
    "end",
    "start_ms",
    "end_ms",
    "duration_min",
    "category",
    "status",
    "name",
    "payload",
}


@dataclass(frozen=True)
class Feed:
    intervals: Tuple[Interval, ...]
    resources: Tuple[Resource, ...]
    warnings: Tuple[str, ...] = ()
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)


def _first(rec: Mapping[str, Any], *keys: str) -> Any:
    for k in keys:
        if k in rec and rec[k] is not None:
            return rec[k]
    return None


def _clean_str(v: Any) -> str:
    if v is None or isinstance(v, (dict, list)):
        return ""
    return str(v).strip()


def resource_from_record(rec: Any) -> Optional[Resource]:
    if not isinstance(rec, Mapping):
        return None
    rid = _clean_str(rec.get("id"))
    if not rid:
        return None
    return Resource(
        id=rid,
        name=_clean_str(rec.get("name")) or rid,
        group_key=_clean_str(_first(rec, "group_key", "groupKey", "team")),
    )


def interval_from_record(
    rec: Any,
    *,
    tz: dt.tzinfo,
    default_duration_min: int = 60,
) -> Tuple[Optional[Interval], Optional[str]]:
    """Return (interval, warning). Interval is None when the record is unusable.

    End precedence:
      1) explicit end / end_ms
      2) start + duration_min (positive int)
      3) start + default_duration_min
    An end at or before the start is kept as is; the layout repairs it.
    """
    if not isinstance(rec, Mapping):
        return None, f"interval record must be an object; got {type(rec).__name__}"

    iid = _clean_str(rec.get("id"))
    if not iid:
        return None, "interval record without id skipped"

    rid = _clean_str(_first(rec, "resource_id", "resourceId"))
    if not rid:
        return None, f"interval {iid!r}: missing resource_id; skipped"

    start_ms = parse_timestamp_ms(_first(rec, "start_ms", "start"), tz)
    if start_ms is None:
        return None, f"interval {iid!r}: missing or invalid start; skipped"

    warn = None
    end_raw = _first(rec, "end_ms", "end")
    end_ms = parse_timestamp_ms(end_raw, tz)
    if end_ms is None:
        dur = rec.get("duration_min")
        if isinstance(dur, int) and not isinstance(dur, bool) and dur > 0:
            end_ms = start_ms + dur * 60000
        else:
            end_ms = start_ms + int(default_duration_min) * 60000
            if end_raw is not None:
                warn = f"interval {iid!r}: invalid end {end_raw!r}; using default duration {default_duration_min}min"

    payload = rec.get("payload")
    if not isinstance(payload, Mapping):
        # Source-specific fields travel as the payload when none is given.
        payload = {k: v for k, v in rec.items() if k not in _INTERVAL_EXTRA_KEYS}

    return (
        Interval(
            id=iid,
            resource_id=rid,
            start_ms=int(start_ms),
            end_ms=int(end_ms),
            category=_clean_str(rec.get("category")).lower(),
            status=_clean_str(rec.get("status")),
            name=_clean_str(rec.get("name")),
            payload=dict(payload),
        ),
        warn,
    )


def feed_tz(payload: Mapping[str, Any], default: Optional[dt.tzinfo] = None) -> dt.tzinfo:
    """Timezone named by the feed's `window.tz`, else `default`, else UTC."""
    win = payload.get("window") if isinstance(payload, Mapping) else None
    tz_name = win.get("tz") if isinstance(win, Mapping) else None
    if isinstance(tz_name, str) and tz_name.strip():
        return resolve_tz(normalize_tz_name(tz_name))
    return default or dt.timezone.utc


def load_feed(
    payload: Mapping[str, Any],
    *,
    tz: Optional[dt.tzinfo] = None,
    default_duration_min: int = 60,
) -> Feed:
    """Parse a feed document into intervals and resources.

    Timezone for naive timestamps: `tz`, else `window.tz` of the feed, else UTC.
    """
    if tz is None:
        tz = feed_tz(payload)

    warnings: List[str] = []
    resources: List[Resource] = []
    seen_resources: set = set()
    raw_resources = payload.get("resources")
    for i, rec in enumerate(raw_resources if isinstance(raw_resources, list) else []):
        r = resource_from_record(rec)
        if r is None:
            warnings.append(f"resources[{i}]: missing id; skipped")
            continue
        if r.id in seen_resources:
            warnings.append(f"resources[{i}]: duplicate id {r.id!r}; skipped")
            continue
        seen_resources.add(r.id)
        resources.append(r)

    intervals: List[Interval] = []
    seen_intervals: set = set()
    raw_intervals = payload.get("intervals")
    for i, rec in enumerate(raw_intervals if isinstance(raw_intervals, list) else []):
        iv, warn = interval_from_record(rec, tz=tz, default_duration_min=default_duration_min)
        if warn:
            warnings.append(f"intervals[{i}]: {warn}")
        if iv is None:
            continue
        if iv.id in seen_intervals:
            warnings.append(f"intervals[{i}]: duplicate id {iv.id!r}; skipped")
            continue
        seen_intervals.add(iv.id)
        intervals.append(iv)

    for w in warnings:
        logger.warning("feed: %s", w)

    return Feed(
        intervals=tuple(intervals),
        resources=tuple(resources),
        warnings=tuple(warnings),
        raw=dict(payload),
    )


def load_feed_from_json(path: JsonPath, **kwargs: Any) -> Feed:
    p = Path(path)
    obj = json.loads(p.read_text(encoding="utf-8", errors="replace"))
    if not isinstance(obj, dict):
        raise ValueError(f"JSON feed must be an object/dict; got {type(obj).__name__}")
    return load_feed(obj, **kwargs)


def day_window(
    day: dt.date,
    tz: dt.tzinfo,
    start_min: int = DEFAULT_WINDOW_START_MIN,
    end_min: int = DEFAULT_WINDOW_END_MIN,
) -> Window:
    """Window from wall-clock minutes of `day` in `tz` (default 08:00-20:00)."""
    return Window(start_ms=epoch_ms_at(day, start_min, tz), end_ms=epoch_ms_at(day, end_min, tz))


def window_from_feed(payload: Mapping[str, Any], tz: dt.tzinfo) -> Optional[Tuple[Window, int]]:
    """Read the optional `window` block: (Window, columns) or None when absent/incomplete."""
    win = payload.get("window") if isinstance(payload, Mapping) else None
    if not isinstance(win, Mapping):
        return None
    date_s = win.get("date")
    if not isinstance(date_s, str) or not date_s.strip():
        return None
    day = parse_date_yyyy_mm_dd(date_s.strip())
    sh, sm = parse_hhmm(str(win.get("start") or "08:00"))
    eh, em = parse_hhmm(str(win.get("end") or "20:00"))
    cols = win.get("columns")
    columns = int(cols) if isinstance(cols, int) and not isinstance(cols, bool) and cols > 0 else 0
    return day_window(day, tz, sh * 60 + sm, eh * 60 + em), columns
