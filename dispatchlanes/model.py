# dispatchlanes/model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass(frozen=True)
class Interval:
    """One appointment bound to one resource.

    `category` tags the source (autopsy, construction, splicing, earthwork, ...);
    `payload` carries source-specific fields and is never inspected by the layout.
    """

    id: str
    resource_id: str
    start_ms: int
    end_ms: int
    category: str = ""
    status: str = ""
    name: str = ""
    payload: Mapping[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass(frozen=True)
class Resource:
    id: str
    name: str = ""
    group_key: str = ""


@dataclass(frozen=True)
class Window:
    start_ms: int
    end_ms: int

    def __post_init__(self) -> None:
        if int(self.end_ms) <= int(self.start_ms):
            raise ValueError(f"window end must be after start ({self.start_ms} >= {self.end_ms})")

    @property
    def span_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass(frozen=True)
class LanePacking:
    resource_id: str
    lane_of: Dict[str, int]
    lanes: Tuple[Tuple[Interval, ...], ...]
    overflow_ids: Tuple[str, ...] = ()

    @property
    def lanes_used(self) -> int:
        return len(self.lanes)


@dataclass(frozen=True)
class AxisSpan:
    left_fraction: float
    width_fraction: float
    start_ms: int          # effective (clamped) start
    end_ms: int            # effective (clamped) end
    clipped_start: bool = False
    clipped_end: bool = False


@dataclass(frozen=True)
class AxisColumn:
    index: int
    start_ms: int
    left_fraction: float
    width_fraction: float
    label: str


@dataclass(frozen=True)
class RenderRect:
    interval_id: str
    resource_id: str
    lane_index: int
    left_fraction: float
    width_fraction: float
    top_px: int
    height_px: int
    z_index: int
    overflow: bool = False
    label: str = ""
    style_key: str = "default"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "interval_id": self.interval_id,
            "resource_id": self.resource_id,
            "lane_index": self.lane_index,
            "left_fraction": self.left_fraction,
            "width_fraction": self.width_fraction,
            "top_px": self.top_px,
            "height_px": self.height_px,
            "z_index": self.z_index,
            "overflow": self.overflow,
            "label": self.label,
            "style_key": self.style_key,
        }


@dataclass(frozen=True)
class ResourceRow:
    resource: Resource
    lanes_used: int
    interval_ids: Tuple[str, ...]
    overflow_ids: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resource_id": self.resource.id,
            "name": self.resource.name,
            "group_key": self.resource.group_key,
            "lanes_used": self.lanes_used,
            "interval_ids": list(self.interval_ids),
            "overflow_ids": list(self.overflow_ids),
        }


@dataclass(frozen=True)
class TimelineLayout:
    geometry: Dict[str, RenderRect]
    row_height_px: int
    rows: Tuple[ResourceRow, ...]
    columns: Tuple[AxisColumn, ...]
    window: Optional[Window] = None
    excluded_ids: Tuple[str, ...] = ()
    normalized_ids: Tuple[str, ...] = ()
    orphan_ids: Tuple[str, ...] = ()
    key: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "window": (
                {"start_ms": self.window.start_ms, "end_ms": self.window.end_ms}
                if self.window is not None
                else None
            ),
            "row_height_px": self.row_height_px,
            "columns": [
                {
                    "index": c.index,
                    "start_ms": c.start_ms,
                    "left_fraction": c.left_fraction,
                    "width_fraction": c.width_fraction,
                    "label": c.label,
                }
                for c in self.columns
            ],
            "rows": [r.to_dict() for r in self.rows],
            "geometry": {k: v.to_dict() for k, v in self.geometry.items()},
            "excluded_ids": list(self.excluded_ids),
            "normalized_ids": list(self.normalized_ids),
            "orphan_ids": list(self.orphan_ids),
        }


__all__ = [
    "Interval",
    "Resource",
    "Window",
    "LanePacking",
    "AxisSpan",
    "AxisColumn",
    "RenderRect",
    "ResourceRow",
    "TimelineLayout",
]
