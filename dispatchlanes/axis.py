# dispatchlanes/axis.py
"""Map absolute times onto the horizontal axis of the visible window.

Fractions are relative to the window span: 0.0 is the window start, 1.0 the
window end. Intervals are clamped to the window, and short ones are widened to
`min_width_fraction`. The widened width is capped at `1 - left` so a box never
runs past the right edge; `left` itself is never shifted.
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import List, Optional

from .config import DEFAULT_COLUMNS, MIN_WIDTH_FRACTION
from .model import AxisColumn, AxisSpan, Window
from .util.tz import format_hhmm

logger = logging.getLogger(__name__)


def is_outside(start_ms: int, end_ms: int, window: Window) -> bool:
    return end_ms <= window.start_ms or start_ms >= window.end_ms


def map_span(
    start_ms: int,
    end_ms: int,
    window: Window,
    *,
    min_width_fraction: float = MIN_WIDTH_FRACTION,
) -> Optional[AxisSpan]:
    """Return the clipped horizontal span, or None when nothing is visible."""
    start_ms = int(start_ms)
    end_ms = int(end_ms)
    if is_outside(start_ms, end_ms, window):
        return None

    eff_start = max(start_ms, window.start_ms)
    eff_end = min(end_ms, window.end_ms)
    span = float(window.span_ms)

    left = (eff_start - window.start_ms) / span
    width = (eff_end - eff_start) / span

    floor = min(1.0, max(0.0, float(min_width_fraction)))
    if width < floor:
        width = floor
    if left + width > 1.0:
        width = 1.0 - left

    return AxisSpan(
        left_fraction=left,
        width_fraction=width,
        start_ms=eff_start,
        end_ms=eff_end,
        clipped_start=eff_start != start_ms,
        clipped_end=eff_end != end_ms,
    )


def axis_columns(
    window: Window,
    columns: int = DEFAULT_COLUMNS,
    tz: Optional[dt.tzinfo] = None,
) -> List[AxisColumn]:
    """Equal-width header columns labelled with their start time (HH:MM in `tz`)."""
    n = max(1, int(columns))
    tzinfo = tz or dt.timezone.utc
    span = window.span_ms
    out: List[AxisColumn] = []
    for i in range(n):
        start_ms = window.start_ms + (span * i) // n
        out.append(
            AxisColumn(
                index=i,
                start_ms=int(start_ms),
                left_fraction=i / n,
                width_fraction=1.0 / n,
                label=format_hhmm(start_ms, tzinfo),
            )
        )
    return out
