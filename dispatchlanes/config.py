# dispatchlanes/config.py
"""Layout constants and view filters as explicit, serializable values.

Both types are plain frozen dataclasses so they can be threaded through the
pipeline, compared, hashed into a memoization key and persisted through a
settings store.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

# Short intervals are widened to this share of the window so they stay clickable.
MIN_WIDTH_FRACTION = 0.05

DEFAULT_CAPACITY = 6
DEFAULT_COLUMNS = 12
DEFAULT_WINDOW_START_MIN = 8 * 60
DEFAULT_WINDOW_END_MIN = 20 * 60

DEFAULT_GROUP_ORDER: Tuple[str, ...] = (
    "Autopsy",
    "Technicians - Construct",
    "Technicians - Splicers",
    "Technicians - Soil",
)


def _int_or(v: Any, default: int) -> int:
    if isinstance(v, bool):
        return default
    if isinstance(v, int):
        return v
    if isinstance(v, float) and math.isfinite(v):
        return int(v)
    if isinstance(v, str):
        try:
            return int(v.strip())
        except ValueError:
            return default
    return default


def _float_or(v: Any, default: float) -> float:
    if isinstance(v, bool):
        return default
    if isinstance(v, (int, float)):
        f = float(v)
        return f if math.isfinite(f) else default
    if isinstance(v, str):
        try:
            return float(v.strip())
        except ValueError:
            return default
    return default


def _bool_or(v: Any, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        low = v.strip().lower()
        if low in {"1", "true", "yes", "on"}:
            return True
        if low in {"0", "false", "no", "off"}:
            return False
    return default


def _str_tuple(v: Any) -> Tuple[str, ...]:
    if isinstance(v, str):
        v = [v]
    if not isinstance(v, (list, tuple, set, frozenset)):
        return ()
    return tuple(sorted({str(x).strip() for x in v if isinstance(x, str) and x.strip()}))


@dataclass(frozen=True)
class LayoutConfig:
    capacity: int = DEFAULT_CAPACITY
    lane_height_px: int = 28
    lane_spacing_px: int = 4
    lane_offset_px: int = 6        # top inset of lane 0 inside a row
    row_padding_px: int = 12       # total vertical padding of a row
    min_row_height_px: int = 48
    min_width_fraction: float = MIN_WIDTH_FRACTION
    base_z: int = 10
    columns: int = DEFAULT_COLUMNS
    min_duration_ms: int = 60_000
    default_duration_min: int = 60
    include_idle_resources: bool = False
    group_order: Tuple[str, ...] = DEFAULT_GROUP_ORDER

    @property
    def lane_pitch_px(self) -> int:
        return self.lane_height_px + self.lane_spacing_px

    @classmethod
    def from_mapping(cls, cfg: Optional[Mapping[str, Any]]) -> "LayoutConfig":
        """Build a config from a loosely typed mapping.

        Missing or invalid values fall back to defaults; capacity, columns and
        durations are clamped to at least 1.
        """
        d = cls()
        if not isinstance(cfg, Mapping):
            return d

        group_order = cfg.get("group_order")
        if isinstance(group_order, (list, tuple)):
            go = tuple(str(x) for x in group_order if isinstance(x, str))
        else:
            go = d.group_order

        return cls(
            capacity=max(1, _int_or(cfg.get("capacity"), d.capacity)),
            lane_height_px=max(1, _int_or(cfg.get("lane_height_px"), d.lane_height_px)),
            lane_spacing_px=max(0, _int_or(cfg.get("lane_spacing_px"), d.lane_spacing_px)),
            lane_offset_px=max(0, _int_or(cfg.get("lane_offset_px"), d.lane_offset_px)),
            row_padding_px=max(0, _int_or(cfg.get("row_padding_px"), d.row_padding_px)),
            min_row_height_px=max(0, _int_or(cfg.get("min_row_height_px"), d.min_row_height_px)),
            min_width_fraction=min(1.0, max(0.0, _float_or(cfg.get("min_width_fraction"), d.min_width_fraction))),
            base_z=_int_or(cfg.get("base_z"), d.base_z),
            columns=max(1, _int_or(cfg.get("columns"), d.columns)),
            min_duration_ms=max(1, _int_or(cfg.get("min_duration_ms"), d.min_duration_ms)),
            default_duration_min=max(1, _int_or(cfg.get("default_duration_min"), d.default_duration_min)),
            include_idle_resources=_bool_or(cfg.get("include_idle_resources"), d.include_idle_resources),
            group_order=go,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "capacity": self.capacity,
            "lane_height_px": self.lane_height_px,
            "lane_spacing_px": self.lane_spacing_px,
            "lane_offset_px": self.lane_offset_px,
            "row_padding_px": self.row_padding_px,
            "min_row_height_px": self.min_row_height_px,
            "min_width_fraction": self.min_width_fraction,
            "base_z": self.base_z,
            "columns": self.columns,
            "min_duration_ms": self.min_duration_ms,
            "default_duration_min": self.default_duration_min,
            "include_idle_resources": self.include_idle_resources,
            "group_order": list(self.group_order),
        }


@dataclass(frozen=True)
class ViewState:
    """Filter toggles of the timeline view (what the user chose to hide)."""

    hidden_categories: Tuple[str, ...] = ()
    hidden_resources: Tuple[str, ...] = ()

    @classmethod
    def build(
        cls,
        *,
        hidden_categories: Iterable[str] = (),
        hidden_resources: Iterable[str] = (),
    ) -> "ViewState":
        return cls(
            hidden_categories=_str_tuple(list(hidden_categories)),
            hidden_resources=_str_tuple(list(hidden_resources)),
        )

    @classmethod
    def from_mapping(cls, obj: Optional[Mapping[str, Any]]) -> "ViewState":
        if not isinstance(obj, Mapping):
            return cls()
        return cls(
            hidden_categories=_str_tuple(obj.get("hidden_categories")),
            hidden_resources=_str_tuple(obj.get("hidden_resources")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "hidden_categories": list(self.hidden_categories),
            "hidden_resources": list(self.hidden_resources),
        }

    def is_category_visible(self, category: str) -> bool:
        return category not in self.hidden_categories

    def is_resource_visible(self, resource_id: str) -> bool:
        return resource_id not in self.hidden_resources


__all__ = [
    "DEFAULT_CAPACITY",
    "DEFAULT_COLUMNS",
    "DEFAULT_GROUP_ORDER",
    "DEFAULT_WINDOW_END_MIN",
    "DEFAULT_WINDOW_START_MIN",
    "LayoutConfig",
    "MIN_WIDTH_FRACTION",
    "ViewState",
]
