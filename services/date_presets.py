from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from services.calendar_range import CalendarDate, DateRange, StrEnum


class QuickRange(StrEnum):
	TODAY = "today"
	YESTERDAY = "yesterday"
	LAST_7_DAYS = "last_7_days"
	LAST_30_DAYS = "last_30_days"
	THIS_MONTH = "this_month"
	LAST_MONTH = "last_month"
	THIS_YEAR = "this_year"
	CUSTOM = "custom"


QUICK_RANGE_LABELS: dict[QuickRange, str] = {
	QuickRange.TODAY: "Today",
	QuickRange.YESTERDAY: "Yesterday",
	QuickRange.LAST_7_DAYS: "Last 7 Days",
	QuickRange.LAST_30_DAYS: "Last 30 Days",
	QuickRange.THIS_MONTH: "This Month",
	QuickRange.LAST_MONTH: "Last Month",
	QuickRange.THIS_YEAR: "This Year",
	QuickRange.CUSTOM: "Custom Range",
}


def _span(start: date, end: date) -> DateRange:
	return DateRange(start=CalendarDate.from_date(start), end=CalendarDate.from_date(end))


def resolve_quick_range(
	preset: QuickRange | str,
	today: date,
	*,
	current: Optional[DateRange] = None,
) -> DateRange:
	"""
	Resolve a preset against a local civil "today".

	CUSTOM keeps `current` (falls back to today when there is none).
	"""
	preset = QuickRange(preset)

	if preset == QuickRange.TODAY:
		return _span(today, today)
	if preset == QuickRange.YESTERDAY:
		y = today - timedelta(days=1)
		return _span(y, y)
	if preset == QuickRange.LAST_7_DAYS:
		return _span(today - timedelta(days=6), today)
	if preset == QuickRange.LAST_30_DAYS:
		return _span(today - timedelta(days=29), today)
	if preset == QuickRange.THIS_MONTH:
		return _span(today.replace(day=1), today)
	if preset == QuickRange.LAST_MONTH:
		last_day = today.replace(day=1) - timedelta(days=1)
		return _span(last_day.replace(day=1), last_day)
	if preset == QuickRange.THIS_YEAR:
		return _span(date(today.year, 1, 1), today)

	return current if current is not None else _span(today, today)


def detect_quick_range(rng: DateRange, today: date) -> QuickRange:
	for preset in QuickRange:
		if preset == QuickRange.CUSTOM:
			continue
		if resolve_quick_range(preset, today) == rng:
			return preset
	return QuickRange.CUSTOM
