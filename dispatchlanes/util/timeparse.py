# dispatchlanes/util/timeparse.py
from __future__ import annotations

import datetime as dt
import math
import re
from typing import Any, Optional, Tuple

_HHMM_RE = re.compile(r"^(\d{1,2}):(\d{2})$")


def parse_hhmm(s: str) -> Tuple[int, int]:
    m = _HHMM_RE.match(s.strip())
    if not m:
        raise ValueError(f"Invalid HH:MM: {s!r}")
    hh = int(m.group(1))
    mm = int(m.group(2))
    # 24:00 is allowed so a window can run to the end of the day.
    if not ((0 <= hh <= 23 and 0 <= mm <= 59) or (hh == 24 and mm == 0)):
        raise ValueError(f"Invalid HH:MM: {s!r}")
    return hh, mm


def parse_hhmm_range(s: str) -> Tuple[int, int]:
    """Parse "08:00-20:00" into (start_min, end_min) minutes of day."""
    parts = s.split("-")
    if len(parts) != 2:
        raise ValueError("window must be like 08:00-20:00")
    sh, sm = parse_hhmm(parts[0])
    eh, em = parse_hhmm(parts[1])
    start = sh * 60 + sm
    end = eh * 60 + em
    if end <= start:
        raise ValueError("window end must be after start")
    return start, end


def parse_date_yyyy_mm_dd(s: str) -> dt.date:
    return dt.datetime.strptime(s, "%Y-%m-%d").date()


def parse_timestamp_ms(value: Any, tz: dt.tzinfo) -> Optional[int]:
    """Parse a feed timestamp into epoch ms.

    Accepts:
      - int epoch ms (bool is rejected)
      - ISO-8601 strings; a trailing "Z" means UTC, naive values are read in `tz`
    Returns None for anything else.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if not isinstance(value, str):
        return None
    s = value.strip()
    if not s:
        return None
    try:
        d = dt.datetime.fromisoformat(s.replace("Z", "+00:00"))
    except ValueError:
        return None
    if d.tzinfo is None:
        d = d.replace(tzinfo=tz)
    return int(d.timestamp() * 1000)
