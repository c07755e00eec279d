# dispatchlanes/util/tz.py
from __future__ import annotations

import datetime as dt
import re
from typing import Optional
from zoneinfo import ZoneInfo

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def normalize_tz_name(name: Optional[str]) -> str:
    """Normalize a timezone identifier.

    Supported forms:
      - None/"" -> "local"
      - "local" / "system" -> "local" (resolve to the machine's local timezone)
      - "UTC" / "Z" / "GMT" -> "UTC"
      - IANA names, e.g. "Europe/Athens"
      - Fixed offsets: "+03:00", "+0300", "-05:00"
    """
    if name is None:
        return "local"
    s = str(name).strip()
    if not s:
        return "local"

    low = s.lower()
    if low in {"local", "system", "native"}:
        return "local"
    if low in {"utc", "z", "gmt", "utc0", "utc+0"}:
        return "UTC"

    return s


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """Resolve a timezone name into a tzinfo.

    Raises ValueError for invalid timezone identifiers.
    """
    tz_name = normalize_tz_name(name)

    if tz_name == "UTC":
        return dt.timezone.utc

    if tz_name == "local":
        tz = dt.datetime.now().astimezone().tzinfo
        return tz or dt.timezone.utc

    m = _OFFSET_RE.match(tz_name)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh = int(hh_s)
        mm = int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        sign = 1 if sign_s == "+" else -1
        off_min = sign * (hh * 60 + mm)
        return dt.timezone(dt.timedelta(minutes=off_min))

    try:
        return ZoneInfo(tz_name)
    except Exception as ex:
        raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex


def today_date(tz: dt.tzinfo) -> dt.date:
    return dt.datetime.now(tz=tz).date()


def epoch_ms_at(d: dt.date, minute_of_day: int, tz: dt.tzinfo) -> int:
    """Epoch ms of wall-clock `minute_of_day` on date `d` in `tz` (DST-aware)."""
    hh, mm = divmod(int(minute_of_day), 60)
    if hh >= 24:
        nd = d + dt.timedelta(days=hh // 24)
        return epoch_ms_at(nd, (hh % 24) * 60 + mm, tz)
    aware = dt.datetime(d.year, d.month, d.day, hh, mm, 0, tzinfo=tz)
    return int(aware.timestamp() * 1000)


def day_key_from_ms(ms: Optional[int], tz: dt.tzinfo) -> Optional[str]:
    if ms is None:
        return None
    try:
        d = dt.datetime.fromtimestamp(int(ms) / 1000.0, tz=tz).date()
        return d.isoformat()
    except (OverflowError, OSError, ValueError):
        return None


def format_hhmm(ms: int, tz: dt.tzinfo) -> str:
    t = dt.datetime.fromtimestamp(int(ms) / 1000.0, tz=tz)
    return f"{t.hour:02d}:{t.minute:02d}"
