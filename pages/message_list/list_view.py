from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping, Sequence

from loguru import logger
from nicegui import background_tasks, ui

from layout.app_style import BRAND_ORANGE, button_classes, button_props, card_classes
from layout.context import PageContext
from layout.page_scaffold import build_page
from pages.message_list.filter_dialog import open_filter_dialog
from services.date_presets import resolve_quick_range
from services.message_filters import FilterSchema
from services.message_models import MessageDetails, MessageRecord, status_color, status_icon
from services.paged_list import FetchPageFn, ListPhase, ListState, PagedFilterController
from services.sms_api import ScreenOptions, SmsApiError


@dataclass
class MessageListScreen:
	name: str
	title: str
	schema: FilterSchema
	fetch_page: FetchPageFn
	load_options: Callable[[], ScreenOptions]
	load_details: Callable[[MessageRecord], MessageDetails]
	empty_text: str = "No messages match your search criteria. Try adjusting your filters or date range."


def _rows_to_render(rendered: Sequence[MessageRecord], records: Sequence[MessageRecord]) -> tuple[bool, tuple]:
	"""
	(rebuild, rows). While every rendered row is unchanged only the new tail is
	returned; any difference (other rows, or same keys with new status) means
	the whole list is rebuilt.
	"""
	n = len(rendered)
	if len(records) >= n and tuple(records[:n]) == tuple(rendered):
		return False, tuple(records[n:])
	return True, tuple(records)


def _content_fits(scroll_info: Any) -> bool:
	"""True when a q-scroll-area getScroll() result shows nothing to scroll."""
	if not isinstance(scroll_info, Mapping):
		return False
	try:
		return float(scroll_info["verticalSize"]) <= float(scroll_info["verticalContainerSize"])
	except (KeyError, TypeError, ValueError):
		return False


def _message_row(rec: MessageRecord, on_open: Callable[[MessageRecord], Any]) -> None:
	color = status_color(rec.status_code)
	with ui.row().classes("w-full px-3 py-2 border-b cursor-pointer items-start no-wrap").style(
		"border-color:var(--q-separator-color, #e2e8f0);"
	).on("click", lambda _=None, r=rec: on_open(r)):
		with ui.column().classes("grow min-w-0 gap-0"):
			with ui.row().classes("w-full items-center justify-between no-wrap"):
				ui.label(rec.mobile or "-").classes("text-sm font-semibold truncate")
				ui.label(rec.timestamp or "").classes("text-xs opacity-60")
			ui.label(rec.preview or "").classes("text-xs opacity-80 truncate w-full")
		if rec.status:
			with ui.row().classes("items-center gap-1 px-2 py-0.5 rounded-full shrink-0").style(
				f"background:{color}; color:white;"
			):
				ui.icon(status_icon(rec.status_code)).classes("text-xs")
				ui.label(rec.status).classes("text-xs")


async def _open_details(rec: MessageRecord, load_details: Callable[[MessageRecord], MessageDetails]) -> None:
	log = logger.bind(component="MessageDetails")
	dialog = ui.dialog()
	loaded: dict[str, Any] = {"details": None, "error": "", "done": False, "hidden": False}

	def on_hide() -> None:
		loaded["hidden"] = True
		dialog.delete()

	dialog.on("hide", on_hide)

	@ui.refreshable
	def body() -> None:
		if not loaded["done"]:
			with ui.row().classes("w-full justify-center py-6"):
				ui.spinner(size="lg").style(f"color:{BRAND_ORANGE};")
			return

		details = loaded["details"]
		if details is not None:
			fields = details.fields
			text = details.body or rec.body or rec.preview
		else:
			# details endpoint failed: show what the list row already has
			ui.label(loaded["error"]).classes("text-sm text-red-600")
			fields = tuple(
				(label, value)
				for label, value in (
					("Number", rec.mobile),
					("Time", rec.timestamp),
					("Status", rec.status),
					("From / To", rec.originator),
				)
				if value
			)
			text = rec.body or rec.preview

		with ui.element("div").classes("w-full grid grid-cols-2 gap-x-4 gap-y-2"):
			for label, value in fields:
				ui.label(label).classes("text-sm opacity-70")
				ui.label(value or "-").classes("text-sm font-semibold")

		ui.separator().classes("my-2")
		ui.label(text or "").classes("text-sm whitespace-pre-wrap")

	with dialog, ui.card().classes("w-[480px] max-w-full"):
		with ui.row().classes("w-full items-center justify-between"):
			ui.label("Message Details").classes("text-lg font-bold")
			ui.button(icon="close", on_click=dialog.close).props("flat round dense")
		ui.label(f"{rec.source_table} #{rec.id}").classes("text-xs opacity-60")
		body()
	dialog.open()

	try:
		loaded["details"] = await asyncio.to_thread(load_details, rec)
	except SmsApiError as ex:
		log.warning(f"[_open_details] - details_unavailable - key={rec.key} err={ex.message!r}")
		loaded["error"] = ex.message
	loaded["done"] = True
	if not loaded["hidden"]:
		body.refresh()


def render_message_list(container: ui.element, ctx: PageContext, screen: MessageListScreen) -> PagedFilterController:
	cfg = ctx.config
	list_cfg = cfg.lists
	log = logger.bind(component="MessageListView", list=screen.name)

	today = date.today()
	default_range = resolve_quick_range(list_cfg.default_preset, today)
	controller = ctx.track_controller(
		PagedFilterController(
			screen.fetch_page,
			screen.schema,
			screen.schema.defaults(default_range),
			page_size=list_cfg.page_size,
			name=screen.name,
		)
	)
	# choice lists may be replaced by the server; keys never change
	schema_ref = {"schema": screen.schema}

	def build_content(_parent: ui.element) -> None:
		rendered: list[MessageRecord] = []

		@ui.refreshable
		def toolbar() -> None:
			committed = controller.committed
			active = schema_ref["schema"].active_keys(committed)
			st = controller.state

			with ui.row().classes("w-full items-center gap-3"):
				with ui.button(icon="search", on_click=open_filters).props(button_props("accent")).classes(
					button_classes()
				):
					ui.label("Search & Filter").classes("ml-1")
					if active:
						ui.badge("•").props("color=white text-color=orange-9 floating")

				ui.label(committed.date_range.display()).classes("text-sm opacity-70")
				ui.space()
				if st.total_records is not None:
					ui.label(f"{st.total_records:,} message(s) found").classes("text-sm opacity-70")
				ui.button(icon="refresh", on_click=controller.refresh).props("flat round dense").tooltip("Refresh")

			if st.phase == ListPhase.REFRESHING and st.records:
				ui.linear_progress(show_value=False).props("indeterminate color=orange-9").classes("w-full")

		@ui.refreshable
		def status_panel() -> None:
			st = controller.state
			if st.phase in (ListPhase.INITIAL_LOADING, ListPhase.REFRESHING) and not st.records:
				with ui.column().classes("w-full items-center py-10 gap-2"):
					ui.spinner(size="lg").style(f"color:{BRAND_ORANGE};")
					ui.label("Loading messages...").classes("text-sm opacity-70")
			elif st.phase == ListPhase.ERROR and not st.records:
				with ui.column().classes("w-full items-center py-10 gap-2"):
					ui.icon("warning").classes("text-3xl text-red-600")
					ui.label("Error").classes("text-base font-semibold")
					ui.label(st.error_message).classes("text-sm opacity-80")
					ui.button("Retry", icon="replay", on_click=controller.retry).props(button_props("accent")).classes(
						button_classes()
					)
			elif st.phase == ListPhase.IDLE and not st.records and controller.generation > 0:
				with ui.column().classes("w-full items-center py-10 gap-2"):
					ui.icon("inbox").classes("text-3xl opacity-50")
					ui.label("No Messages Found").classes("text-base font-semibold")
					ui.label(screen.empty_text).classes("text-sm opacity-70 text-center")

		@ui.refreshable
		def footer() -> None:
			st = controller.state
			if st.phase == ListPhase.LOADING_MORE:
				with ui.row().classes("w-full justify-center py-3"):
					ui.spinner(size="md").style(f"color:{BRAND_ORANGE};")
			elif st.phase == ListPhase.ERROR and st.records:
				with ui.row().classes("w-full items-center justify-center gap-2 py-3"):
					ui.label(st.error_message).classes("text-sm text-red-600")
					ui.button("Retry", icon="replay", on_click=controller.retry).props("flat dense no-caps")
			elif st.records and not st.has_more:
				ui.label("End of list").classes("w-full text-center text-xs opacity-50 py-3")

		def open_row(rec: MessageRecord):
			return _open_details(rec, screen.load_details)

		def sync_rows(st: ListState) -> None:
			rebuild, new_rows = _rows_to_render(rendered, st.records)
			if rebuild:
				rows.clear()
				rendered.clear()
			with rows:
				for rec in new_rows:
					_message_row(rec, open_row)
					rendered.append(rec)

		async def fill_viewport() -> None:
			# a first page shorter than the viewport never scrolls, so pull the next one here
			await asyncio.sleep(0.05)
			st = controller.state
			if controller.closed or st.phase != ListPhase.IDLE or not st.has_more:
				return
			try:
				info = await scroll.run_method("getScroll")
			except (TimeoutError, RuntimeError) as ex:
				log.debug(f"[fill_viewport] - scroll_size_unavailable - err={ex!r}")
				return
			if _content_fits(info):
				log.debug(f"[fill_viewport] - viewport_not_filled - page={st.current_page}")
				await controller.load_more()

		def on_state(st: ListState) -> None:
			sync_rows(st)
			toolbar.refresh()
			status_panel.refresh()
			footer.refresh()
			if st.phase == ListPhase.IDLE and st.has_more:
				background_tasks.create(fill_viewport(), name=f"fill_viewport:{screen.name}")

		def open_filters() -> None:
			open_filter_dialog(controller, schema_ref["schema"], today=date.today())

		async def on_scroll(e) -> None:
			if e.vertical_percentage >= list_cfg.load_more_threshold:
				await controller.load_more()

		toolbar()
		with ui.card().classes(card_classes() + " flex-1 min-h-0 p-0 flex flex-col overflow-hidden"):
			status_panel()
			with ui.scroll_area(on_scroll=on_scroll).classes("w-full flex-1 min-h-0") as scroll:
				rows = ui.column().classes("w-full gap-0")
				footer()

		controller.subscribe(on_state)

	async def mount() -> None:
		try:
			options = await asyncio.to_thread(screen.load_options)
		except SmsApiError as ex:
			log.warning(f"[mount] - screen_options_unavailable - err={ex.message!r}")
			options = ScreenOptions()

		schema = screen.schema
		for key, opts in options.options.items():
			if opts and key in schema.keys:
				schema = schema.with_options(key, opts)
		schema_ref["schema"] = schema

		if options.default_range is not None:
			# the user may already have applied filters while the options were loading
			if not controller.seed_defaults(controller.defaults.with_date_range(options.default_range)):
				log.info("[mount] - server_defaults_not_applied - filters_already_committed")

		await controller.load_initial()

	build_page(ctx, container, title=screen.title, content=build_content)

	ui.context.client.on_disconnect(controller.close)
	with container:
		# load once after the UI exists
		ui.timer(0.01, mount, once=True)
	return controller
