from datetime import datetime

from nicegui import ui

from layout.context import PageContext


def build_header(ctx: PageContext) -> ui.header:
	title = ctx.config.ui.title if ctx.config else "SMS Expert"
	header = ui.header().classes("h-16 w-full bg-[#293B50] text-white")

	with header:
		with ui.row().classes("h-full items-center w-full px-4 gap-2"):
			ui.button(icon="menu", on_click=lambda: ctx.drawer.toggle() if ctx.drawer else None).props(
				"flat round dense color=white"
			).tooltip("Toggle navigation menu")

			ui.icon("sms")
			ui.label(title).classes("text-lg font-semibold")
			ui.space()

			dt_label = ui.label("").classes("ml-2 text-sm opacity-80")

			def update_time() -> None:
				dt_label.set_text(datetime.now().strftime("%d-%m-%Y %H:%M"))

			update_time()
			ui.timer(60.0, update_time)

	return header
