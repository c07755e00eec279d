# dispatchlanes/geometry.py
from __future__ import annotations

from typing import Optional

from .config import LayoutConfig
from .labels import style_key, truncate_label
from .model import AxisSpan, Interval, RenderRect


def lane_top_px(lane_index: int, cfg: Optional[LayoutConfig] = None) -> int:
    cfg = cfg or LayoutConfig()
    return int(lane_index) * cfg.lane_pitch_px + cfg.lane_offset_px


def build_rect(
    interval: Interval,
    lane_index: int,
    span: AxisSpan,
    cfg: Optional[LayoutConfig] = None,
    *,
    overflow: bool = False,
) -> RenderRect:
    """Combine a lane assignment and an axis span into one render rectangle.

    Higher lanes get a higher z-index so they paint above lower ones.
    """
    cfg = cfg or LayoutConfig()
    return RenderRect(
        interval_id=interval.id,
        resource_id=interval.resource_id,
        lane_index=int(lane_index),
        left_fraction=span.left_fraction,
        width_fraction=span.width_fraction,
        top_px=lane_top_px(lane_index, cfg),
        height_px=cfg.lane_height_px,
        z_index=cfg.base_z + int(lane_index),
        overflow=bool(overflow),
        label=truncate_label(interval.name, interval.duration_ms),
        style_key=style_key(interval.category, interval.status),
    )
