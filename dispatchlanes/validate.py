"""Feed validation helpers (library-facing)."""

from __future__ import annotations

from typing import Any, Dict, List


class FeedValidationError(ValueError):
    """Raised when a feed fails validation."""


def _require(cond: bool, msg: str, errs: List[str]) -> None:
    if not cond:
        errs.append(msg)


def _is_timestamp(v: Any) -> bool:
    if isinstance(v, bool):
        return False
    return isinstance(v, (int, float, str))


def validate_feed(payload: Dict[str, Any], *, label: str = "feed") -> List[str]:
    """Structural checks only; record-level repair happens in `feed.load_feed`."""
    if not isinstance(payload, dict):
        return [f"{label}: feed must be a dict/object"]

    errs: List[str] = []
    resources = payload.get("resources")
    intervals = payload.get("intervals")

    _require(isinstance(resources, list), f"{label}: resources must be list", errs)
    _require(isinstance(intervals, list), f"{label}: intervals must be list", errs)

    win = payload.get("window")
    if win is not None:
        _require(isinstance(win, dict), f"{label}: window must be dict", errs)
        if isinstance(win, dict):
            for k in ("date", "start", "end", "tz"):
                if k in win:
                    _require(isinstance(win[k], str), f"{label}: window.{k} must be string", errs)
            if "columns" in win:
                c = win["columns"]
                _require(
                    isinstance(c, int) and not isinstance(c, bool) and c > 0,
                    f"{label}: window.columns must be positive int",
                    errs,
                )

    cap = payload.get("capacity")
    if cap is not None:
        _require(
            isinstance(cap, int) and not isinstance(cap, bool) and cap >= 1,
            f"{label}: capacity must be int >= 1",
            errs,
        )

    resource_ids = set()
    if isinstance(resources, list):
        for i, r in enumerate(resources):
            if not isinstance(r, dict):
                errs.append(f"{label}: resources[{i}] must be dict")
                continue
            rid = r.get("id")
            _require(isinstance(rid, str) and bool(rid.strip()), f"{label}: resources[{i}].id must be non-empty string", errs)
            if isinstance(rid, str) and rid.strip():
                if rid.strip() in resource_ids:
                    errs.append(f"{label}: resources[{i}].id duplicates {rid!r}")
                resource_ids.add(rid.strip())

    if isinstance(intervals, list):
        for i, t in enumerate(intervals):
            if not isinstance(t, dict):
                errs.append(f"{label}: intervals[{i}] must be dict")
                continue
            iid = t.get("id")
            _require(isinstance(iid, str) and bool(iid.strip()), f"{label}: intervals[{i}].id must be non-empty string", errs)
            rid = t.get("resource_id", t.get("resourceId"))
            _require(
                isinstance(rid, str) and bool(rid.strip()),
                f"{label}: intervals[{i}].resource_id must be non-empty string",
                errs,
            )
            start = t.get("start_ms", t.get("start"))
            _require(_is_timestamp(start), f"{label}: intervals[{i}].start must be ISO string or epoch ms", errs)
            end = t.get("end_ms", t.get("end"))
            if end is not None:
                _require(_is_timestamp(end), f"{label}: intervals[{i}].end must be ISO string or epoch ms", errs)
            pl = t.get("payload")
            if pl is not None:
                _require(isinstance(pl, dict), f"{label}: intervals[{i}].payload must be dict", errs)

    return errs


def assert_valid_feed(payload: Dict[str, Any]) -> None:
    if not isinstance(payload, dict):
        raise FeedValidationError("feed must be a JSON object")
    errs = validate_feed(payload, label="feed")
    if errs:
        raise FeedValidationError(errs[0])


__all__ = [
    "FeedValidationError",
    "assert_valid_feed",
    "validate_feed",
]
