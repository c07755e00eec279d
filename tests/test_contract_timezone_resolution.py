from __future__ import annotations

import datetime as dt
import unittest

from dispatchlanes.util.tz import day_key_from_ms, epoch_ms_at, format_hhmm, normalize_tz_name, resolve_tz

# 2024-05-06T00:00:00Z
DAY_MS = 1714953600000
H = 60 * 60000


class TestTimezoneResolutionContract(unittest.TestCase):
    def test_valid_timezone_identifiers_resolve(self) -> None:
        self.assertEqual(resolve_tz("UTC"), dt.timezone.utc)
        self.assertEqual(resolve_tz("z"), dt.timezone.utc)
        self.assertIsNotNone(resolve_tz("local"))
        self.assertEqual(resolve_tz("+02:00").utcoffset(None), dt.timedelta(hours=2))
        self.assertEqual(resolve_tz("-0530").utcoffset(None), -dt.timedelta(hours=5, minutes=30))

    def test_invalid_timezone_identifiers_raise(self) -> None:
        with self.assertRaises(ValueError):
            resolve_tz("No/Such_Zone")
        with self.assertRaises(ValueError):
            resolve_tz("+25:00")

    def test_normalize_names(self) -> None:
        self.assertEqual(normalize_tz_name(None), "local")
        self.assertEqual(normalize_tz_name("  "), "local")
        self.assertEqual(normalize_tz_name("GMT"), "UTC")
        self.assertEqual(normalize_tz_name("Europe/Athens"), "Europe/Athens")

    def test_wall_clock_helpers(self) -> None:
        plus3 = dt.timezone(dt.timedelta(hours=3))
        day = dt.date(2024, 5, 6)

        self.assertEqual(epoch_ms_at(day, 8 * 60, dt.timezone.utc), DAY_MS + 8 * H)
        self.assertEqual(epoch_ms_at(day, 8 * 60, plus3), DAY_MS + 5 * H)
        # 24:00 is midnight of the next day.
        self.assertEqual(epoch_ms_at(day, 24 * 60, dt.timezone.utc), DAY_MS + 24 * H)

        self.assertEqual(format_hhmm(DAY_MS + 5 * H, plus3), "08:00")
        self.assertEqual(day_key_from_ms(DAY_MS + 22 * H, plus3), "2024-05-07")
        self.assertEqual(day_key_from_ms(DAY_MS + 22 * H, dt.timezone.utc), "2024-05-06")
        self.assertIsNone(day_key_from_ms(None, plus3))


if __name__ == "__main__":
    unittest.main(verbosity=2)
