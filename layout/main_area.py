from nicegui import ui

from layout.context import PageContext


HEADER_PX = 64


def build_main_area(ctx: PageContext) -> ui.column:
	"""Screen container below the header; the router clears and refills it."""
	with ui.row().classes("w-full").style(f"height: calc(100vh - {HEADER_PX}px);"):
		with ui.column().classes("w-full h-full min-h-0 min-w-0 overflow-hidden p-4 pb-6 gap-4"):
			# flex-1 + min-h-0 lets the list's own scroll area take the remaining height
			ctx.main_area = ui.column().classes("w-full flex-1 min-h-0 min-w-0 gap-4 overflow-hidden")
	return ctx.main_area
