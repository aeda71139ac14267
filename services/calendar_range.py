from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from functools import total_ordering
from typing import Optional

from loguru import logger


class StrEnum(str, Enum):
	def __str__(self) -> str:
		return str(self.value)


MONTH_NAMES = (
	"January", "February", "March", "April", "May", "June",
	"July", "August", "September", "October", "November", "December",
)

WEEKDAY_NAMES = ("Su", "Mo", "Tu", "We", "Th", "Fr", "Sa")

_DAYS_PER_MONTH = (31, 28, 31, 30, 31, 30, 31, 31, 30, 31, 30, 31)

# Sakamoto's month offsets (Gregorian)
_WEEKDAY_OFFSETS = (0, 3, 2, 5, 0, 3, 5, 1, 4, 6, 2, 4)


class NavDirection(StrEnum):
	PREV = "prev"
	NEXT = "next"


class SelectingSide(StrEnum):
	START = "start"
	END = "end"


class DayKind(StrEnum):
	START = "start"
	END = "end"
	BETWEEN = "between"
	NONE = "none"


class CalendarSessionError(RuntimeError):
	pass


# ---------------------------------------------------------------------
# Calendar arithmetic (month is zero-based here: 0 = January)
# ---------------------------------------------------------------------
def is_leap_year(year: int) -> bool:
	return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_month(month: int, year: int) -> int:
	if not 0 <= month <= 11:
		raise ValueError(f"month out of range: {month}")
	if month == 1 and is_leap_year(year):
		return 29
	return _DAYS_PER_MONTH[month]


def first_weekday_of_month(month: int, year: int) -> int:
	"""Weekday of the 1st of the month, 0=Sunday..6=Saturday."""
	if not 0 <= month <= 11:
		raise ValueError(f"month out of range: {month}")
	y = year - 1 if month < 2 else year
	return (y + y // 4 - y // 100 + y // 400 + _WEEKDAY_OFFSETS[month] + 1) % 7


def month_grid(month: int, year: int) -> list[Optional[int]]:
	"""Day cells for a month view, left-padded with None so day 1 sits under its weekday."""
	cells: list[Optional[int]] = [None] * first_weekday_of_month(month, year)
	cells.extend(range(1, days_in_month(month, year) + 1))
	return cells


# ---------------------------------------------------------------------
# Value types
# ---------------------------------------------------------------------
@total_ordering
@dataclass(frozen=True)
class CalendarDate:
	day: int
	month: int
	year: int

	def __post_init__(self) -> None:
		if not 1 <= self.month <= 12:
			raise ValueError(f"invalid month: {self.month}")
		if not 1 <= self.day <= days_in_month(self.month - 1, self.year):
			raise ValueError(f"invalid day {self.day} for {self.year}-{self.month:02d}")

	def _sort_key(self) -> tuple[int, int, int]:
		return (self.year, self.month, self.day)

	def __lt__(self, other: "CalendarDate") -> bool:
		if not isinstance(other, CalendarDate):
			return NotImplemented
		return self._sort_key() < other._sort_key()

	@classmethod
	def from_date(cls, d: date) -> "CalendarDate":
		return cls(day=d.day, month=d.month, year=d.year)

	@classmethod
	def parse_iso(cls, s: str) -> "CalendarDate":
		y, m, d = (int(x) for x in str(s).strip().split("-"))
		return cls(day=d, month=m, year=y)

	def to_date(self) -> date:
		return date(self.year, self.month, self.day)

	def iso(self) -> str:
		return f"{self.year:04d}-{self.month:02d}-{self.day:02d}"

	def display(self) -> str:
		return f"{self.day:02d}/{self.month:02d}/{self.year}"


@dataclass(frozen=True)
class DateRange:
	start: CalendarDate
	end: CalendarDate

	def __post_init__(self) -> None:
		if self.end < self.start:
			raise ValueError(f"range start {self.start.iso()} is after end {self.end.iso()}")

	@classmethod
	def ordered(cls, a: CalendarDate, b: CalendarDate) -> "DateRange":
		return cls(start=a, end=b) if a <= b else cls(start=b, end=a)

	@classmethod
	def single(cls, d: CalendarDate) -> "DateRange":
		return cls(start=d, end=d)

	def contains(self, d: CalendarDate) -> bool:
		return self.start <= d <= self.end

	def display(self) -> str:
		return f"{self.start.display()} → {self.end.display()}"


@dataclass(frozen=True)
class CalendarViewState:
	visible_month: int
	visible_year: int
	selecting: SelectingSide
	pending_start: CalendarDate
	pending_end: CalendarDate


# ---------------------------------------------------------------------
# Selector
# ---------------------------------------------------------------------
class CalendarRangeSelector:
	"""
	Month-grid range picker session.

	open() seeds a session from the committed range, day taps go through
	select_day(), and confirm() hands back a normalized DateRange. cancel()
	drops the session without touching whatever range the caller holds.
	"""

	def __init__(self) -> None:
		self._view: Optional[CalendarViewState] = None
		self._log = logger.bind(component="CalendarRangeSelector")

	# ------------------------------------------------------------------ session

	@property
	def is_open(self) -> bool:
		return self._view is not None

	@property
	def view(self) -> CalendarViewState:
		if self._view is None:
			raise CalendarSessionError("calendar session is not open")
		return self._view

	def open(self, current_range: DateRange) -> CalendarViewState:
		self._view = CalendarViewState(
			visible_month=current_range.start.month - 1,
			visible_year=current_range.start.year,
			selecting=SelectingSide.START,
			pending_start=current_range.start,
			pending_end=current_range.end,
		)
		self._log.debug(f"[open] - session_opened - range={current_range.start.iso()}..{current_range.end.iso()}")
		return self._view

	def confirm(self) -> DateRange:
		view = self.view
		result = DateRange.ordered(view.pending_start, view.pending_end)
		self._view = None
		self._log.debug(f"[confirm] - range_confirmed - range={result.start.iso()}..{result.end.iso()}")
		return result

	def cancel(self) -> None:
		self._view = None

	# ------------------------------------------------------------------ navigation

	def navigate_month(self, direction: NavDirection) -> CalendarViewState:
		view = self.view
		month, year = view.visible_month, view.visible_year
		if NavDirection(direction) == NavDirection.PREV:
			if month == 0:
				month, year = 11, year - 1
			else:
				month -= 1
		else:
			if month == 11:
				month, year = 0, year + 1
			else:
				month += 1
		self._view = replace(view, visible_month=month, visible_year=year)
		return self._view

	def days_in_month(self) -> int:
		view = self.view
		return days_in_month(view.visible_month, view.visible_year)

	def first_weekday_of_month(self) -> int:
		view = self.view
		return first_weekday_of_month(view.visible_month, view.visible_year)

	def month_grid(self) -> list[Optional[int]]:
		view = self.view
		return month_grid(view.visible_month, view.visible_year)

	def title(self) -> str:
		view = self.view
		return f"{MONTH_NAMES[view.visible_month]} {view.visible_year}"

	# ------------------------------------------------------------------ selection

	def _visible_date(self, day: int) -> CalendarDate:
		view = self.view
		if not 1 <= day <= days_in_month(view.visible_month, view.visible_year):
			raise ValueError(f"day {day} is not in {self.title()}")
		return CalendarDate(day=day, month=view.visible_month + 1, year=view.visible_year)

	def begin_selecting(self, side: SelectingSide) -> CalendarViewState:
		"""Start/End indicator tap: re-target one side, keep the other side's value."""
		self._view = replace(self.view, selecting=SelectingSide(side))
		return self._view

	def select_day(self, day: int) -> CalendarViewState:
		view = self.view
		picked = self._visible_date(day)

		if view.selecting == SelectingSide.START:
			self._view = replace(view, pending_start=picked, selecting=SelectingSide.END)
		elif picked < view.pending_start:
			# later date tapped first: previous start becomes the end
			self._view = replace(view, pending_start=picked, pending_end=view.pending_start)
		else:
			self._view = replace(view, pending_end=picked)
		return self._view

	def classify_day(self, day: int) -> DayKind:
		view = self.view
		current = self._visible_date(day)
		if current == view.pending_start:
			return DayKind.START
		if current == view.pending_end:
			return DayKind.END
		if view.pending_start < current < view.pending_end:
			return DayKind.BETWEEN
		return DayKind.NONE
