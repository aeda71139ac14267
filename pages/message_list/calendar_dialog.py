from __future__ import annotations

from datetime import date
from typing import Callable

from nicegui import ui

from layout.app_style import BRAND_ORANGE, button_classes, button_props
from services.calendar_range import (
	WEEKDAY_NAMES,
	CalendarDate,
	CalendarRangeSelector,
	DateRange,
	DayKind,
	NavDirection,
	SelectingSide,
)


def _day_style(kind: DayKind, is_today: bool) -> str:
	if kind in (DayKind.START, DayKind.END):
		return f"background:{BRAND_ORANGE}; color:white;"
	if kind == DayKind.BETWEEN:
		return "background:#fde7da; color:#9a3412;"
	if is_today:
		return f"border:1px solid {BRAND_ORANGE}; color:{BRAND_ORANGE};"
	return ""


def open_calendar_dialog(
	current: DateRange,
	on_confirm: Callable[[DateRange], None],
	*,
	today: date,
	title: str = "Select Date Range",
) -> ui.dialog:
	selector = CalendarRangeSelector()
	selector.open(current)
	today_cd = CalendarDate.from_date(today)

	dialog = ui.dialog().props("persistent")

	def pick_side(side: SelectingSide) -> None:
		selector.begin_selecting(side)
		body.refresh()

	def pick_day(day: int) -> None:
		selector.select_day(day)
		body.refresh()

	def go(direction: NavDirection) -> None:
		selector.navigate_month(direction)
		body.refresh()

	@ui.refreshable
	def body() -> None:
		view = selector.view

		with ui.row().classes("w-full gap-2 no-wrap"):
			for side, label, value in (
				(SelectingSide.START, "Start Date", view.pending_start),
				(SelectingSide.END, "End Date", view.pending_end),
			):
				active = view.selecting == side
				border = BRAND_ORANGE if active else "var(--q-separator-color, #e2e8f0)"
				with ui.column().classes("flex-1 gap-0 p-2 rounded-lg cursor-pointer").style(
					f"border:2px solid {border};"
				).on("click", lambda _=None, s=side: pick_side(s)):
					ui.label(label).classes("text-xs opacity-60")
					ui.label(value.display()).classes("text-sm font-semibold")

		with ui.row().classes("w-full items-center justify-between mt-2"):
			ui.button(icon="chevron_left", on_click=lambda: go(NavDirection.PREV)).props("flat round dense")
			ui.label(selector.title()).classes("text-base font-semibold")
			ui.button(icon="chevron_right", on_click=lambda: go(NavDirection.NEXT)).props("flat round dense")

		with ui.grid(columns=7).classes("w-full gap-1"):
			for name in WEEKDAY_NAMES:
				ui.label(name).classes("text-xs text-center opacity-60")

			for cell in selector.month_grid():
				if cell is None:
					ui.element("div")
					continue
				kind = selector.classify_day(cell)
				is_today = CalendarDate(day=cell, month=view.visible_month + 1, year=view.visible_year) == today_cd
				ui.button(str(cell), on_click=lambda _=None, d=cell: pick_day(d)).props(
					"flat dense no-caps"
				).classes("w-9 h-9 rounded-full").style(_day_style(kind, is_today))

		hint = "Tap the start date" if view.selecting == SelectingSide.START else "Tap the end date"
		ui.label(hint).classes("text-xs opacity-60 pt-1")

	def do_cancel() -> None:
		selector.cancel()
		dialog.close()

	def do_confirm() -> None:
		rng = selector.confirm()
		dialog.close()
		on_confirm(rng)

	with dialog, ui.card().classes("w-[360px] max-w-full"):
		ui.label(title).classes("text-lg font-bold")
		body()
		with ui.row().classes("w-full justify-end gap-2 mt-2"):
			ui.button("Cancel", on_click=do_cancel).props(button_props("neutral")).classes(button_classes())
			ui.button("Confirm", on_click=do_confirm).props(button_props("accent")).classes(button_classes())

	dialog.open()
	return dialog
