from __future__ import annotations

import unittest

from services.calendar_range import (
    CalendarDate,
    CalendarRangeSelector,
    CalendarSessionError,
    DateRange,
    DayKind,
    NavDirection,
    SelectingSide,
    days_in_month,
    first_weekday_of_month,
    is_leap_year,
    month_grid,
)


def _d(y: int, m: int, d: int) -> CalendarDate:
    return CalendarDate(day=d, month=m, year=y)


class CalendarArithmeticTests(unittest.TestCase):
    def test_leap_years(self) -> None:
        self.assertTrue(is_leap_year(2024))
        self.assertTrue(is_leap_year(2000))
        self.assertFalse(is_leap_year(2023))
        self.assertFalse(is_leap_year(1900))

    def test_february_length(self) -> None:
        self.assertEqual(days_in_month(1, 2024), 29)
        self.assertEqual(days_in_month(1, 2023), 28)
        self.assertEqual(days_in_month(1, 1900), 28)
        self.assertEqual(days_in_month(1, 2000), 29)

    def test_other_months(self) -> None:
        self.assertEqual(days_in_month(0, 2025), 31)
        self.assertEqual(days_in_month(3, 2025), 30)
        self.assertEqual(days_in_month(11, 2025), 31)
        with self.assertRaises(ValueError):
            days_in_month(12, 2025)

    def test_first_weekday(self) -> None:
        # 2025-01-01 was a Wednesday, 2024-09-01 a Sunday, 2024-02-01 a Thursday
        self.assertEqual(first_weekday_of_month(0, 2025), 3)
        self.assertEqual(first_weekday_of_month(8, 2024), 0)
        self.assertEqual(first_weekday_of_month(1, 2024), 4)

    def test_month_grid_padding(self) -> None:
        cells = month_grid(0, 2025)
        self.assertEqual(cells[:3], [None, None, None])
        self.assertEqual(cells[3], 1)
        self.assertEqual(cells[-1], 31)
        self.assertEqual(len(cells), 34)


class CalendarValueTests(unittest.TestCase):
    def test_invalid_dates_rejected(self) -> None:
        with self.assertRaises(ValueError):
            _d(2023, 2, 29)
        with self.assertRaises(ValueError):
            _d(2024, 13, 1)

    def test_iso_and_display(self) -> None:
        d = CalendarDate.parse_iso("2025-01-08")
        self.assertEqual(d, _d(2025, 1, 8))
        self.assertEqual(d.iso(), "2025-01-08")
        self.assertEqual(d.display(), "08/01/2025")

    def test_range_must_be_chronological(self) -> None:
        with self.assertRaises(ValueError):
            DateRange(start=_d(2025, 1, 8), end=_d(2025, 1, 1))
        rng = DateRange.ordered(_d(2025, 1, 8), _d(2025, 1, 1))
        self.assertEqual(rng.start, _d(2025, 1, 1))
        self.assertEqual(rng.end, _d(2025, 1, 8))
        self.assertTrue(rng.contains(_d(2025, 1, 5)))
        self.assertFalse(rng.contains(_d(2025, 1, 9)))


class CalendarRangeSelectorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.selector = CalendarRangeSelector()
        self.selector.open(DateRange.single(_d(2025, 1, 15)))

    def test_open_seeds_from_range(self) -> None:
        view = self.selector.view
        self.assertEqual(view.visible_month, 0)
        self.assertEqual(view.visible_year, 2025)
        self.assertEqual(view.selecting, SelectingSide.START)
        self.assertEqual(self.selector.title(), "January 2025")
        self.assertEqual(self.selector.days_in_month(), 31)
        self.assertEqual(self.selector.first_weekday_of_month(), 3)
        self.assertEqual(self.selector.month_grid()[3], 1)

    def test_forward_selection(self) -> None:
        self.selector.select_day(3)
        self.assertEqual(self.selector.view.selecting, SelectingSide.END)
        self.selector.select_day(10)
        rng = self.selector.confirm()
        self.assertEqual(rng, DateRange(start=_d(2025, 1, 3), end=_d(2025, 1, 10)))
        self.assertFalse(self.selector.is_open)

    def test_backward_selection_swaps(self) -> None:
        self.selector.select_day(20)
        self.selector.select_day(5)
        rng = self.selector.confirm()
        self.assertEqual(rng, DateRange(start=_d(2025, 1, 5), end=_d(2025, 1, 20)))

    def test_same_day_twice(self) -> None:
        self.selector.select_day(7)
        self.selector.select_day(7)
        self.assertEqual(self.selector.confirm(), DateRange.single(_d(2025, 1, 7)))

    def test_confirm_is_always_ordered(self) -> None:
        # start moved past the existing end
        self.selector.open(DateRange(start=_d(2025, 1, 1), end=_d(2025, 1, 5)))
        self.selector.select_day(20)
        self.selector.begin_selecting(SelectingSide.START)
        self.selector.select_day(25)
        rng = self.selector.confirm()
        self.assertLessEqual(rng.start, rng.end)

    def test_navigation_wraps_years(self) -> None:
        view = self.selector.navigate_month(NavDirection.PREV)
        self.assertEqual((view.visible_month, view.visible_year), (11, 2024))
        view = self.selector.navigate_month(NavDirection.NEXT)
        self.assertEqual((view.visible_month, view.visible_year), (0, 2025))

        self.selector.open(DateRange.single(_d(2025, 12, 1)))
        view = self.selector.navigate_month(NavDirection.NEXT)
        self.assertEqual((view.visible_month, view.visible_year), (0, 2026))

    def test_navigation_keeps_pending_dates(self) -> None:
        self.selector.select_day(28)
        self.selector.navigate_month(NavDirection.NEXT)
        self.selector.select_day(3)
        rng = self.selector.confirm()
        self.assertEqual(rng, DateRange(start=_d(2025, 1, 28), end=_d(2025, 2, 3)))

    def test_classify_day(self) -> None:
        self.selector.select_day(10)
        self.selector.select_day(14)
        self.assertEqual(self.selector.classify_day(10), DayKind.START)
        self.assertEqual(self.selector.classify_day(14), DayKind.END)
        self.assertEqual(self.selector.classify_day(12), DayKind.BETWEEN)
        self.assertEqual(self.selector.classify_day(20), DayKind.NONE)

        self.selector.navigate_month(NavDirection.NEXT)
        self.assertEqual(self.selector.classify_day(12), DayKind.NONE)

    def test_day_outside_month_rejected(self) -> None:
        self.selector.navigate_month(NavDirection.NEXT)
        with self.assertRaises(ValueError):
            self.selector.select_day(30)

    def test_cancel_closes_session(self) -> None:
        self.selector.cancel()
        self.assertFalse(self.selector.is_open)
        with self.assertRaises(CalendarSessionError):
            self.selector.select_day(1)
        with self.assertRaises(CalendarSessionError):
            self.selector.confirm()


if __name__ == "__main__":
    unittest.main()
