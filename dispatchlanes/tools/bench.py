#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import os
import random
import statistics
import time
from typing import Any, Dict, List, Tuple

from dispatchlanes.config import DEFAULT_GROUP_ORDER, LayoutConfig
from dispatchlanes.model import Interval, Resource, Window
from dispatchlanes.timeline import layout_timeline
from dispatchlanes.util.console import die, setup_logging

logger = logging.getLogger(__name__)

# 2024-01-01T00:00:00Z
BASE_MS = 1704067200000
H_MS = 60 * 60000

_CATEGORIES = ("autopsy", "construction", "splicing", "earthwork")


def _now_ns() -> int:
    return time.perf_counter_ns()


def make_synthetic_day(
    *,
    n_resources: int,
    per_resource: int,
    seed: int = 1,
) -> Tuple[List[Interval], List[Resource], Window]:
    """Deterministic random day: appointments between 06:00 and 22:00, 15 to 240 minutes long."""
    rng = random.Random(seed)
    window = Window(start_ms=BASE_MS + 8 * H_MS, end_ms=BASE_MS + 20 * H_MS)

    resources: List[Resource] = []
    intervals: List[Interval] = []
    for r in range(max(0, n_resources)):
        rid = f"tech-{r:04d}"
        resources.append(
            Resource(id=rid, name=f"Technician {r:04d}", group_key=DEFAULT_GROUP_ORDER[r % len(DEFAULT_GROUP_ORDER)])
        )
        for k in range(max(0, per_resource)):
            start = BASE_MS + 6 * H_MS + rng.randrange(0, 16 * 4) * 15 * 60000
            dur = rng.randrange(1, 17) * 15 * 60000
            intervals.append(
                Interval(
                    id=f"{rid}-{k:04d}",
                    resource_id=rid,
                    start_ms=start,
                    end_ms=start + dur,
                    category=_CATEGORIES[rng.randrange(len(_CATEGORIES))],
                    name=f"Job {r}-{k}",
                )
            )
    return intervals, resources, window


def _time_one(fn, *, repeats: int, warmup: int) -> Tuple[float, float, float]:
    for _ in range(max(0, warmup)):
        fn()

    samples_ms: List[float] = []
    for _ in range(max(1, repeats)):
        t0 = _now_ns()
        fn()
        t1 = _now_ns()
        samples_ms.append((t1 - t0) / 1_000_000.0)

    return (min(samples_ms), statistics.fmean(samples_ms), max(samples_ms))


def run_bench(
    *,
    n_resources: int,
    per_resource: int,
    seed: int,
    repeats: int,
    warmup: int,
    capacity: int,
) -> Dict[str, Any]:
    intervals, resources, window = make_synthetic_day(n_resources=n_resources, per_resource=per_resource, seed=seed)
    cfg = LayoutConfig(capacity=max(1, capacity))

    last: Dict[str, Any] = {}

    def _run() -> None:
        layout = layout_timeline(intervals, resources, window, cfg)
        last["placed"] = len(layout.geometry)
        last["row_height_px"] = layout.row_height_px
        last["overflow"] = sum(len(r.overflow_ids) for r in layout.rows)

    mn, mean, mx = _time_one(_run, repeats=repeats, warmup=warmup)
    return {
        "resources": len(resources),
        "intervals": len(intervals),
        "capacity": cfg.capacity,
        "placed": last.get("placed", 0),
        "overflow": last.get("overflow", 0),
        "row_height_px": last.get("row_height_px", 0),
        "min_ms": round(mn, 3),
        "mean_ms": round(mean, 3),
        "max_ms": round(mx, 3),
    }


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="dispatchlanes-bench", description="Time the layout pipeline on a synthetic day.")
    ap.add_argument("--resources", type=int, default=50, help="Technician count (default: 50)")
    ap.add_argument("--per-resource", type=int, default=12, help="Appointments per technician (default: 12)")
    ap.add_argument("--seed", type=int, default=1, help="RNG seed (default: 1)")
    ap.add_argument("--repeats", type=int, default=5, help="Timed runs (default: 5)")
    ap.add_argument("--warmup", type=int, default=1, help="Untimed warmup runs (default: 1)")
    ap.add_argument("--capacity", type=int, default=6, help="Max lanes per technician (default: 6)")
    ap.add_argument("--json", action="store_true", help="Print the result as JSON")
    ap.add_argument("--log-level", default=os.getenv("DISPATCHLANES_LOG", "WARNING"), help="Logging level")
    ns = ap.parse_args(argv)

    setup_logging(ns.log_level)

    if ns.resources < 0 or ns.per_resource < 0:
        return die("--resources and --per-resource must be >= 0", prog="dispatchlanes-bench")

    res = run_bench(
        n_resources=ns.resources,
        per_resource=ns.per_resource,
        seed=ns.seed,
        repeats=ns.repeats,
        warmup=ns.warmup,
        capacity=ns.capacity,
    )
    logger.info("bench done: %s", res)

    if ns.json:
        print(json.dumps(res, sort_keys=True))
    else:
        print(
            f"[dispatchlanes-bench] resources={res['resources']} intervals={res['intervals']} "
            f"placed={res['placed']} overflow={res['overflow']} "
            f"min={res['min_ms']}ms mean={res['mean_ms']}ms max={res['max_ms']}ms"
        )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
