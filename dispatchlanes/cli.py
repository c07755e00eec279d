from __future__ import annotations

import argparse
import datetime as dt
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from .api import layout_feed
from .config import DEFAULT_WINDOW_END_MIN, DEFAULT_WINDOW_START_MIN, ViewState
from .feed import day_window, feed_tz
from .settings import SettingsStore, load_view_state, save_view_state
from .util.console import die, eprint, setup_logging
from .util.timeparse import parse_date_yyyy_mm_dd, parse_hhmm_range
from .util.tz import normalize_tz_name, resolve_tz, today_date
from .validate import validate_feed

try:
    import orjson  # type: ignore
except Exception:  # pragma: no cover
    orjson = None  # type: ignore

logger = logging.getLogger(__name__)


def _dump_json(data: Dict[str, Any], *, pretty: bool) -> str:
    if orjson is not None:
        opts = orjson.OPT_INDENT_2 if pretty else 0
        return orjson.dumps(data, option=opts).decode("utf-8")
    if pretty:
        return json.dumps(data, ensure_ascii=False, indent=2)
    return json.dumps(data, ensure_ascii=False, separators=(",", ":"))


def _feed_window_range(payload: Dict[str, Any]) -> Optional[str]:
    win = payload.get("window")
    if not isinstance(win, dict):
        return None
    start = win.get("start") or "08:00"
    end = win.get("end") or "20:00"
    return f"{start}-{end}"


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="dispatchlanes",
        description="Lay out a day of technician appointments into lanes (feed JSON in, layout JSON out).",
    )
    ap.add_argument("--in", dest="in_json", required=True, help="Input feed JSON path")
    ap.add_argument("--out", default=None, help="Output layout JSON path (default: stdout)")
    ap.add_argument("--date", default=None, help="Day to lay out, YYYY-MM-DD (default: feed window date or today in --tz)")
    ap.add_argument("--window", default=None, help="Visible window, e.g. 08:00-20:00 (default: feed window or 08:00-20:00)")
    ap.add_argument("--columns", type=int, default=None, help="Axis column count (default: feed window or 12)")
    ap.add_argument("--capacity", type=int, default=None, help="Max lanes per technician (default: feed or 6)")
    ap.add_argument(
        "--tz",
        default=None,
        help="Timezone for day boundaries and naive timestamps (default: feed window.tz, env DISPATCHLANES_TZ or 'local')",
    )
    ap.add_argument("--hide-category", action="append", default=[], help="Hide a category (repeatable)")
    ap.add_argument("--hide-resource", action="append", default=[], help="Hide a technician id (repeatable)")
    ap.add_argument("--settings", default=None, help="Settings store JSON path for persisted view filters")
    ap.add_argument("--view-key", default="default", help="View key inside the settings store (default: default)")
    ap.add_argument("--save-view", action="store_true", help="Persist the effective view filters to --settings")
    ap.add_argument("--pretty", action="store_true", help="Indent the JSON output")
    ap.add_argument(
        "--log-level",
        default=os.getenv("DISPATCHLANES_LOG", "WARNING"),
        help="Logging level (default: env DISPATCHLANES_LOG or WARNING)",
    )
    return ap


def main(argv: List[str] | None = None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)
    setup_logging(args.log_level)

    in_path = Path(args.in_json)
    if not in_path.exists():
        return die(f"Missing feed file: {in_path}")
    try:
        payload = json.loads(in_path.read_text(encoding="utf-8", errors="replace"))
    except ValueError as e:
        return die(f"Invalid JSON in {in_path}: {e}")
    if not isinstance(payload, dict):
        return die(f"feed must be a JSON object; got {type(payload).__name__}")

    errs = validate_feed(payload)
    if errs:
        eprint("[dispatchlanes] FAIL")
        for e in errs:
            eprint(f"  - {e}")
        return 3

    try:
        if args.tz is not None:
            tzinfo = resolve_tz(normalize_tz_name(args.tz))
        else:
            env_tz = resolve_tz(normalize_tz_name(os.getenv("DISPATCHLANES_TZ", "local")))
            tzinfo = feed_tz(payload, default=env_tz)
    except ValueError as e:
        return die(f"Invalid timezone: {e}")

    if args.capacity is not None and args.capacity < 1:
        return die("--capacity must be >= 1")
    if args.columns is not None and args.columns < 1:
        return die("--columns must be >= 1")

    payload = dict(payload)
    if args.capacity is not None:
        payload["capacity"] = int(args.capacity)

    feed_win = dict(payload["window"]) if isinstance(payload.get("window"), dict) else {}
    if args.columns is not None:
        # Feed window.columns overrides the config, so the flag goes into the feed copy.
        feed_win["columns"] = int(args.columns)
        payload["window"] = feed_win
    feed_date = feed_win.get("date")

    window = None
    day: Optional[dt.date] = None
    try:
        if args.date:
            day = parse_date_yyyy_mm_dd(args.date)
        # Without these the feed window block (date, start, end) is used as is.
        if args.date or args.window or not feed_date:
            if day is None:
                day = parse_date_yyyy_mm_dd(feed_date) if feed_date else today_date(tzinfo)
            rng = args.window or _feed_window_range(payload)
            start_min, end_min = parse_hhmm_range(rng) if rng else (DEFAULT_WINDOW_START_MIN, DEFAULT_WINDOW_END_MIN)
            window = day_window(day, tzinfo, start_min, end_min)
    except ValueError as e:
        return die(str(e))

    store = SettingsStore(args.settings) if args.settings else None
    view = load_view_state(store, args.view_key) if store is not None else ViewState()
    view = ViewState.build(
        hidden_categories=[c.lower() for c in list(view.hidden_categories) + list(args.hide_category)],
        hidden_resources=list(view.hidden_resources) + list(args.hide_resource),
    )
    if args.save_view:
        if store is None:
            return die("--save-view requires --settings")
        save_view_state(store, args.view_key, view)

    try:
        layout = layout_feed(
            payload,
            day=day,
            tz=tzinfo,
            window=window,
            view=view,
            validate=False,
        )
    except ValueError as e:
        return die(str(e))

    logger.info(
        "laid out %d intervals over %d rows (row height %dpx)",
        len(layout.geometry),
        len(layout.rows),
        layout.row_height_px,
    )

    text = _dump_json(layout.to_dict(), pretty=bool(args.pretty))
    if args.out:
        out_path = Path(args.out)
        try:
            out_path.parent.mkdir(parents=True, exist_ok=True)
        except PermissionError as e:
            return die(f"Cannot create output directory '{out_path.parent}': {e}")
        out_path.write_text(text + "\n", encoding="utf-8", newline="\n")
        print(str(out_path))
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
