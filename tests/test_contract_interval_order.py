import unittest

from dispatchlanes.interval import (
    interval_sort_key,
    max_concurrency,
    normalize_interval,
    overlaps,
    sort_intervals,
)
from dispatchlanes.model import Interval

# 2020-01-01 UTC midnight baseline.
BASE = 1577836800000
H = 60 * 60000
M = 60000


def _iv(iid: str, start_ms: int, end_ms: int, rid: str = "t1") -> Interval:
    return Interval(id=iid, resource_id=rid, start_ms=start_ms, end_ms=end_ms)


class TestIntervalOrderContract(unittest.TestCase):
    def test_start_ascending_then_longer_first(self) -> None:
        a = _iv("a", BASE + 9 * H, BASE + 10 * H)
        b = _iv("b", BASE + 9 * H, BASE + 12 * H)
        c = _iv("c", BASE + 8 * H, BASE + 8 * H + 30 * M)

        out = sort_intervals([a, b, c])
        self.assertEqual([iv.id for iv in out], ["c", "b", "a"])

    def test_identical_start_and_duration_ordered_by_id(self) -> None:
        x = _iv("x", BASE + 9 * H, BASE + 10 * H)
        y = _iv("y", BASE + 9 * H, BASE + 10 * H)

        self.assertEqual([iv.id for iv in sort_intervals([y, x])], ["x", "y"])
        self.assertLess(interval_sort_key(x), interval_sort_key(y))

    def test_normalize_stretches_malformed_interval(self) -> None:
        bad = _iv("bad", BASE + 9 * H, BASE + 9 * H)
        fixed = normalize_interval(bad, 60000)
        self.assertEqual(fixed.start_ms, BASE + 9 * H)
        self.assertEqual(fixed.end_ms, BASE + 9 * H + 60000)
        self.assertEqual(fixed.id, "bad")

        backwards = _iv("back", BASE + 9 * H, BASE + 8 * H)
        self.assertEqual(normalize_interval(backwards, 5 * M).end_ms, BASE + 9 * H + 5 * M)

    def test_normalize_keeps_valid_interval_identity(self) -> None:
        ok = _iv("ok", BASE, BASE + H)
        self.assertIs(normalize_interval(ok), ok)

    def test_overlap_is_half_open(self) -> None:
        a = _iv("a", BASE + 8 * H, BASE + 9 * H)
        b = _iv("b", BASE + 9 * H, BASE + 10 * H)
        c = _iv("c", BASE + 8 * H + 30 * M, BASE + 9 * H + 30 * M)

        self.assertFalse(overlaps(a, b))
        self.assertTrue(overlaps(a, c))
        self.assertTrue(overlaps(c, b))

    def test_max_concurrency(self) -> None:
        ivs = [
            _iv("a", BASE + 8 * H, BASE + 10 * H),
            _iv("b", BASE + 9 * H, BASE + 11 * H),
            _iv("c", BASE + 9 * H + 30 * M, BASE + 9 * H + 45 * M),
            _iv("d", BASE + 11 * H, BASE + 12 * H),
        ]
        self.assertEqual(max_concurrency(ivs), 3)
        self.assertEqual(max_concurrency([]), 0)
        # Back-to-back intervals are never concurrent.
        self.assertEqual(max_concurrency([ivs[1], ivs[3]]), 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
