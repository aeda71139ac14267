from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict

from loguru import logger
from nicegui import ui, app

from layout.context import PageContext
from pages import received_sms, sent_sms


# All pages get (container, ctx)
RenderFn = Callable[[ui.element, PageContext], None]


@dataclass(frozen=True)
class Route:
	label: str
	icon: str
	render: RenderFn


ROUTES: Dict[str, Route] = {
	"sent_sms": Route("Sent SMS", "outbox", sent_sms.render),
	"received_sms": Route("Received SMS", "inbox", received_sms.render),
}


def get_routes() -> Dict[str, Route]:
	return dict(ROUTES)


def _apply_drawer_highlight(ctx: PageContext, active_key: str) -> None:
	"""Update drawer button styles so the active one looks selected."""
	for key, btn in ctx.nav_buttons.items():
		if key == active_key:
			btn.props("unelevated color=primary")
		else:
			btn.props("flat color=grey-8")


# supports visiting: http://localhost:8080/?page=received_sms
def get_initial_route_from_url(default: str = "sent_sms") -> str:
	"""Read ?page=... from the current request (deep link)."""
	try:
		page = ui.context.client.request.query_params.get("page")
	except (AttributeError, RuntimeError):
		page = None
	if page and page in ROUTES:
		return page
	return default if default in ROUTES else next(iter(ROUTES))


def navigate(ctx: PageContext, route_key: str) -> None:
	route = ROUTES.get(route_key)
	if not route:
		ui.notify(f"Unknown route: {route_key}", type="negative")
		return

	logger.info(f"[navigate] - route_change - route={route_key}")

	# the previous screen unmounts: its in-flight fetches must not land anywhere
	ctx.close_screen()

	app.storage.user["current_route"] = route_key
	ui.run_javascript(f"history.replaceState(null, '', '?page={route_key}')")
	_apply_drawer_highlight(ctx, route_key)

	if ctx.main_area:
		ctx.main_area.clear()
		route.render(ctx.main_area, ctx)
