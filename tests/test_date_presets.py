from __future__ import annotations

import unittest
from datetime import date

from services.calendar_range import CalendarDate, DateRange
from services.date_presets import QuickRange, detect_quick_range, resolve_quick_range


TODAY = date(2025, 3, 15)


def _r(a: date, b: date) -> DateRange:
    return DateRange(start=CalendarDate.from_date(a), end=CalendarDate.from_date(b))


class QuickRangeTests(unittest.TestCase):
    def test_resolve(self) -> None:
        cases = {
            QuickRange.TODAY: _r(TODAY, TODAY),
            QuickRange.YESTERDAY: _r(date(2025, 3, 14), date(2025, 3, 14)),
            QuickRange.LAST_7_DAYS: _r(date(2025, 3, 9), TODAY),
            QuickRange.LAST_30_DAYS: _r(date(2025, 2, 14), TODAY),
            QuickRange.THIS_MONTH: _r(date(2025, 3, 1), TODAY),
            QuickRange.LAST_MONTH: _r(date(2025, 2, 1), date(2025, 2, 28)),
            QuickRange.THIS_YEAR: _r(date(2025, 1, 1), TODAY),
        }
        for preset, expected in cases.items():
            with self.subTest(preset=preset):
                self.assertEqual(resolve_quick_range(preset, TODAY), expected)

    def test_last_month_across_year(self) -> None:
        self.assertEqual(
            resolve_quick_range("last_month", date(2025, 1, 10)),
            _r(date(2024, 12, 1), date(2024, 12, 31)),
        )

    def test_custom_keeps_current(self) -> None:
        current = _r(date(2024, 5, 1), date(2024, 5, 9))
        self.assertEqual(resolve_quick_range(QuickRange.CUSTOM, TODAY, current=current), current)
        self.assertEqual(resolve_quick_range(QuickRange.CUSTOM, TODAY), _r(TODAY, TODAY))

    def test_detect(self) -> None:
        self.assertEqual(detect_quick_range(_r(TODAY, TODAY), TODAY), QuickRange.TODAY)
        self.assertEqual(detect_quick_range(_r(date(2025, 3, 9), TODAY), TODAY), QuickRange.LAST_7_DAYS)
        self.assertEqual(detect_quick_range(_r(date(2025, 3, 2), TODAY), TODAY), QuickRange.CUSTOM)

    def test_unknown_preset(self) -> None:
        with self.assertRaises(ValueError):
            resolve_quick_range("fortnight", TODAY)


if __name__ == "__main__":
    unittest.main()
