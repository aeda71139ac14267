from nicegui import ui, app

from layout.context import PageContext
from layout.router import get_routes, navigate


@ui.refreshable
def _render_drawer_content(ctx: PageContext) -> None:
	"""Rebuild the drawer buttons from the route table."""
	ctx.nav_buttons.clear()
	ctx.drawer_content.clear()
	active_key = app.storage.user.get("current_route", "")
	is_dark = bool(ctx.config and ctx.config.ui.dark_mode)
	inactive_color = "grey-3" if is_dark else "grey-8"

	with ctx.drawer_content:
		for key, route in get_routes().items():
			btn = ui.button(
				route.label,
				icon=route.icon,
				on_click=lambda k=key: navigate(ctx, k),
			).props("flat no-caps").classes("w-full justify-start px-4")
			ctx.nav_buttons[key] = btn
			if key == active_key:
				btn.props("unelevated color=primary")
			else:
				btn.props(f"flat color={inactive_color}")


def build_drawer(ctx: PageContext) -> ui.left_drawer:
	is_dark = bool(ctx.config and ctx.config.ui.dark_mode)
	drawer_classes = "bg-slate-900 text-gray-100" if is_dark else "bg-gray-50"
	drawer = ui.left_drawer(value=True, bordered=True).props("width=200").classes(drawer_classes)
	ctx.drawer = drawer

	with drawer:
		# All dynamic content goes into this column (so we can clear/rebuild it)
		ctx.drawer_content = ui.column().classes("w-full")
		_render_drawer_content(ctx)

	def refresh_drawer() -> None:
		_render_drawer_content.refresh(ctx)
	ctx.refresh_drawer = refresh_drawer

	return drawer
