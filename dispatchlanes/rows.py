# dispatchlanes/rows.py
from __future__ import annotations

from typing import Iterable, Optional

from .config import LayoutConfig


def resource_height_px(lanes_used: int, cfg: Optional[LayoutConfig] = None) -> int:
    """Row height one resource would need on its own."""
    cfg = cfg or LayoutConfig()
    lanes = max(0, int(lanes_used))
    return max(lanes * cfg.lane_pitch_px + cfg.row_padding_px, cfg.min_row_height_px)


def normalize_row_height(lanes_used_values: Iterable[int], cfg: Optional[LayoutConfig] = None) -> int:
    """Shared row height for every visible resource.

    All rows sit under one time-axis header, so the height comes from the
    busiest visible resource rather than from each row.
    """
    cfg = cfg or LayoutConfig()
    most = 0
    for n in lanes_used_values:
        if int(n) > most:
            most = int(n)
    return resource_height_px(most, cfg)
