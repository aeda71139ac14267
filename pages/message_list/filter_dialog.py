from __future__ import annotations

from datetime import date

from loguru import logger
from nicegui import ui

from layout.app_style import button_classes, button_props
from pages.message_list.calendar_dialog import open_calendar_dialog
from services.calendar_range import DateRange
from services.date_presets import QUICK_RANGE_LABELS, QuickRange, detect_quick_range, resolve_quick_range
from services.message_filters import FilterSchema
from services.paged_list import PagedFilterController


def open_filter_dialog(
	controller: PagedFilterController,
	schema: FilterSchema,
	*,
	today: date,
) -> ui.dialog:
	"""
	Search & Filter sheet. Edits go to the controller's draft only; Apply
	commits them and reloads, Reset puts the defaults back without fetching.
	"""
	log = logger.bind(component="FilterDialog", list=controller.name)

	# always start from what produced the visible list
	controller.discard_draft()
	preset = {"value": detect_quick_range(controller.draft.date_range, today)}

	dialog = ui.dialog()

	def set_range(rng: DateRange) -> None:
		controller.set_draft(controller.draft.with_date_range(rng))
		form.refresh()

	def on_preset_change(e) -> None:
		preset["value"] = QuickRange(e.value)
		if preset["value"] != QuickRange.CUSTOM:
			set_range(resolve_quick_range(preset["value"], today, current=controller.draft.date_range))

	def open_calendar() -> None:
		preset["value"] = QuickRange.CUSTOM
		open_calendar_dialog(controller.draft.date_range, set_range, today=today)
		form.refresh()

	@ui.refreshable
	def form() -> None:
		draft = controller.draft

		for fdef in schema.fields:
			if fdef.is_free_text:
				ui.input(
					label=fdef.label,
					value=draft.get(fdef.key),
					on_change=lambda e, k=fdef.key: controller.edit_draft(k, e.value),
				).props("dense outlined clearable").classes("w-full")
			else:
				options = {o.value: o.label for o in fdef.options}
				current = draft.get(fdef.key, fdef.default)
				if current not in options:
					options[current] = current
				ui.select(
					options=options,
					value=current,
					label=fdef.label,
					on_change=lambda e, k=fdef.key: controller.edit_draft(k, e.value),
				).props("dense outlined").classes("w-full")

		ui.separator().classes("my-2")
		ui.label("Date Range").classes("text-sm font-semibold")
		ui.select(
			options={p.value: QUICK_RANGE_LABELS[p] for p in QuickRange},
			value=preset["value"].value,
			on_change=on_preset_change,
		).props("dense outlined").classes("w-full")

		with ui.row().classes("w-full items-center gap-2 no-wrap"):
			ui.label(draft.date_range.display()).classes("grow text-sm")
			ui.button(icon="event", on_click=open_calendar).props("flat round dense").classes("text-primary")

	def do_reset() -> None:
		controller.reset_filters()
		preset["value"] = detect_quick_range(controller.draft.date_range, today)
		log.info("[do_reset] - filters_reset_from_dialog")
		form.refresh()

	async def do_apply() -> None:
		dialog.close()
		await controller.apply_filters()

	def do_close() -> None:
		controller.discard_draft()
		dialog.close()

	with dialog, ui.card().classes("w-[420px] max-w-full"):
		with ui.row().classes("w-full items-center justify-between"):
			ui.label("Search & Filter").classes("text-lg font-bold")
			ui.button(icon="close", on_click=do_close).props("flat round dense")

		with ui.column().classes("w-full gap-2"):
			form()

		with ui.row().classes("w-full justify-end gap-2 mt-2"):
			ui.button("Reset", icon="restart_alt", on_click=do_reset).props(button_props("neutral")).classes(
				button_classes()
			)
			ui.button("Apply Filters", icon="search", on_click=do_apply).props(button_props("accent")).classes(
				button_classes()
			)

	dialog.open()
	return dialog
