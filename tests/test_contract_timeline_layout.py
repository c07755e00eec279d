from __future__ import annotations

import dataclasses
import unittest

from dispatchlanes.axis import map_span
from dispatchlanes.config import LayoutConfig, ViewState
from dispatchlanes.geometry import build_rect, lane_top_px
from dispatchlanes.model import Interval, Resource, Window
from dispatchlanes.packer import pack_lanes
from dispatchlanes.timeline import lanes_by_resource, layout_timeline, order_resources

# 2020-01-01 UTC midnight baseline.
BASE = 1577836800000
H = 60 * 60000
M = 60000

WINDOW = Window(BASE + 8 * H, BASE + 20 * H)


def _iv(iid: str, rid: str, start_ms: int, end_ms: int, **kw) -> Interval:
    return Interval(id=iid, resource_id=rid, start_ms=start_ms, end_ms=end_ms, **kw)


class TestGeometryContract(unittest.TestCase):
    def test_rect_position_from_lane(self) -> None:
        iv = _iv("a", "t1", BASE + 9 * H, BASE + 10 * H, name="Pole check", category="splicing")
        span = map_span(iv.start_ms, iv.end_ms, WINDOW)

        rect = build_rect(iv, 2, span)
        self.assertEqual(rect.top_px, 70)
        self.assertEqual(rect.height_px, 28)
        self.assertEqual(rect.z_index, 12)
        self.assertEqual(rect.lane_index, 2)
        self.assertFalse(rect.overflow)
        self.assertEqual(rect.label, "Pole check")
        self.assertEqual(rect.style_key, "category-splicing")
        self.assertAlmostEqual(rect.left_fraction, 1.0 / 12.0)

        self.assertEqual(lane_top_px(0), 6)
        self.assertEqual(lane_top_px(5), 166)

    def test_rect_to_dict(self) -> None:
        iv = _iv("a", "t1", BASE + 9 * H, BASE + 10 * H)
        rect = build_rect(iv, 0, map_span(iv.start_ms, iv.end_ms, WINDOW), overflow=True)
        d = rect.to_dict()
        self.assertEqual(d["interval_id"], "a")
        self.assertEqual(d["resource_id"], "t1")
        self.assertEqual(d["top_px"], 6)
        self.assertEqual(d["z_index"], 10)
        self.assertTrue(d["overflow"])


class TestTimelineLayoutContract(unittest.TestCase):
    def test_overlapping_pair_lands_in_two_lanes(self) -> None:
        ivs = [
            _iv("a", "t1", BASE + 9 * H, BASE + 10 * H),
            _iv("b", "t1", BASE + 9 * H + 30 * M, BASE + 10 * H + 30 * M),
        ]
        layout = layout_timeline(ivs, [Resource("t1", "Nikos")], WINDOW)

        self.assertEqual(layout.geometry["a"].lane_index, 0)
        self.assertEqual(layout.geometry["b"].lane_index, 1)
        self.assertEqual(layout.geometry["b"].top_px, 38)
        self.assertEqual(layout.geometry["b"].z_index, 11)
        self.assertEqual(layout.row_height_px, 76)
        self.assertEqual(lanes_by_resource(layout), {"t1": (0, 1)})

    def test_overflow_is_flagged_on_rect_and_row(self) -> None:
        ivs = [_iv(f"j{k}", "t1", BASE + 9 * H + k * 5 * M, BASE + 12 * H) for k in range(7)]
        layout = layout_timeline(ivs, [Resource("t1", "Nikos")], WINDOW)

        self.assertEqual(layout.geometry["j6"].lane_index, 5)
        self.assertTrue(layout.geometry["j6"].overflow)
        self.assertFalse(layout.geometry["j5"].overflow)
        self.assertEqual(layout.rows[0].overflow_ids, ("j6",))
        self.assertEqual(layout.rows[0].lanes_used, 6)

    def test_equal_inputs_give_equal_layouts(self) -> None:
        ivs = [
            _iv("a", "t1", BASE + 9 * H, BASE + 10 * H, name="One"),
            _iv("b", "t2", BASE + 11 * H, BASE + 12 * H, name="Two"),
            _iv("c", "t1", BASE + 9 * H + 15 * M, BASE + 9 * H + 45 * M),
        ]
        resources = [Resource("t1", "Nikos"), Resource("t2", "Maria")]

        first = layout_timeline(ivs, resources, WINDOW)
        second = layout_timeline(list(reversed(ivs)), list(reversed(resources)), WINDOW)
        self.assertEqual(first.geometry, second.geometry)
        self.assertEqual(first.to_dict(), second.to_dict())
        self.assertEqual(first.key, second.key)

        moved = layout_timeline(ivs, resources, WINDOW, LayoutConfig(capacity=2))
        self.assertNotEqual(first.key, moved.key)

        renamed = [dataclasses.replace(ivs[0], name="One!")] + ivs[1:]
        self.assertNotEqual(first.key, layout_timeline(renamed, resources, WINDOW).key)
        self.assertEqual(len(first.key), 64)
        int(first.key, 16)

    def test_row_overflow_lists_only_drawn_intervals(self) -> None:
        short_window = Window(BASE + 8 * H, BASE + 10 * H)
        ivs = [_iv(f"j{k}", "t1", BASE + 9 * H + k * 5 * M, BASE + 12 * H) for k in range(6)]
        ivs.append(_iv("late", "t1", BASE + 10 * H + 30 * M, BASE + 12 * H))

        layout = layout_timeline(ivs, [Resource("t1", "Nikos")], short_window)
        self.assertEqual(pack_lanes(ivs, 6).overflow_ids, ("late",))
        self.assertIn("late", layout.excluded_ids)
        self.assertEqual(layout.rows[0].overflow_ids, ())
        self.assertEqual(layout.rows[0].lanes_used, 6)

    def test_out_of_window_intervals_are_excluded_but_still_packed(self) -> None:
        ivs = [
            _iv("early", "t1", BASE + 6 * H, BASE + 7 * H),
            _iv("late", "t1", BASE + 21 * H, BASE + 22 * H),
            _iv("in", "t1", BASE + 9 * H, BASE + 10 * H),
        ]
        layout = layout_timeline(ivs, [Resource("t1", "Nikos")], WINDOW)

        self.assertEqual(set(layout.geometry), {"in"})
        self.assertEqual(set(layout.excluded_ids), {"early", "late"})
        self.assertEqual(layout.rows[0].interval_ids, ("in",))

    def test_malformed_interval_is_repaired(self) -> None:
        ivs = [_iv("zero", "t1", BASE + 9 * H, BASE + 9 * H)]
        layout = layout_timeline(ivs, [Resource("t1", "Nikos")], WINDOW)

        self.assertEqual(layout.normalized_ids, ("zero",))
        self.assertIn("zero", layout.geometry)
        self.assertAlmostEqual(layout.geometry["zero"].width_fraction, 0.05)

    def test_orphan_intervals_are_reported(self) -> None:
        ivs = [
            _iv("ok", "t1", BASE + 9 * H, BASE + 10 * H),
            _iv("lost", "ghost", BASE + 9 * H, BASE + 10 * H),
        ]
        layout = layout_timeline(ivs, [Resource("t1", "Nikos")], WINDOW)

        self.assertEqual(layout.orphan_ids, ("lost",))
        self.assertNotIn("lost", layout.geometry)

    def test_hidden_category_and_resource_are_filtered_before_packing(self) -> None:
        ivs = [
            _iv("a", "t1", BASE + 9 * H, BASE + 10 * H, category="splicing"),
            _iv("b", "t1", BASE + 9 * H, BASE + 10 * H, category="autopsy"),
            _iv("c", "t2", BASE + 9 * H, BASE + 10 * H, category="autopsy"),
        ]
        resources = [Resource("t1", "Nikos"), Resource("t2", "Maria")]

        by_cat = layout_timeline(ivs, resources, WINDOW, view=ViewState.build(hidden_categories=["autopsy"]))
        self.assertEqual(set(by_cat.geometry), {"a"})
        self.assertEqual(by_cat.geometry["a"].lane_index, 0)
        self.assertEqual([r.resource.id for r in by_cat.rows], ["t1"])

        by_res = layout_timeline(ivs, resources, WINDOW, view=ViewState.build(hidden_resources=["t1"]))
        self.assertEqual(set(by_res.geometry), {"c"})
        self.assertEqual([r.resource.id for r in by_res.rows], ["t2"])

    def test_idle_resources_optional(self) -> None:
        ivs = [_iv("a", "t1", BASE + 9 * H, BASE + 10 * H)]
        resources = [Resource("t1", "Nikos"), Resource("t2", "Maria")]

        self.assertEqual(len(layout_timeline(ivs, resources, WINDOW).rows), 1)

        cfg = LayoutConfig(include_idle_resources=True)
        rows = layout_timeline(ivs, resources, WINDOW, cfg).rows
        self.assertEqual({r.resource.id: r.lanes_used for r in rows}, {"t1": 1, "t2": 0})

    def test_rows_follow_team_order_then_name(self) -> None:
        resources = [
            Resource("s1", "Zoe", "Technicians - Soil"),
            Resource("x1", "Anna", "Unknown team"),
            Resource("c2", "Petros", "Technicians - Construct"),
            Resource("c1", "Eleni", "Technicians - Construct"),
            Resource("a1", "Yannis", "Autopsy"),
        ]
        ordered = order_resources(resources, LayoutConfig().group_order)
        self.assertEqual([r.id for r in ordered], ["a1", "c1", "c2", "s1", "x1"])

        cfg = dataclasses.replace(LayoutConfig(), include_idle_resources=True)
        layout = layout_timeline([], resources, WINDOW, cfg)
        self.assertEqual([r.resource.id for r in layout.rows], ["a1", "c1", "c2", "s1", "x1"])

    def test_empty_day(self) -> None:
        layout = layout_timeline([], [Resource("t1", "Nikos")], WINDOW)
        self.assertEqual(layout.geometry, {})
        self.assertEqual(layout.rows, ())
        self.assertEqual(layout.row_height_px, 48)
        self.assertEqual(len(layout.columns), 12)

    def test_to_dict_shape(self) -> None:
        ivs = [_iv("a", "t1", BASE + 9 * H, BASE + 10 * H)]
        d = layout_timeline(ivs, [Resource("t1", "Nikos", "Autopsy")], WINDOW).to_dict()

        self.assertEqual(d["window"], {"start_ms": WINDOW.start_ms, "end_ms": WINDOW.end_ms})
        self.assertEqual(d["row_height_px"], 48)
        self.assertEqual(d["rows"][0]["resource_id"], "t1")
        self.assertEqual(d["rows"][0]["group_key"], "Autopsy")
        self.assertEqual(d["rows"][0]["interval_ids"], ["a"])
        self.assertIn("a", d["geometry"])
        self.assertEqual(len(d["columns"]), 12)


if __name__ == "__main__":
    unittest.main(verbosity=2)
