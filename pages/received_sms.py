from __future__ import annotations

from nicegui import ui

from layout.context import PageContext
from pages.message_list.list_view import MessageListScreen, render_message_list
from services.message_filters import RECEIVED_SMS_SCHEMA


def render(container: ui.element, ctx: PageContext) -> None:
	screen = MessageListScreen(
		name="received_sms",
		title="Received SMS",
		schema=RECEIVED_SMS_SCHEMA,
		fetch_page=ctx.api.fetch_received_page,
		load_options=ctx.api.get_received_page_data,
		load_details=lambda rec: ctx.api.get_received_message_details(rec.id),
		empty_text="No received SMS messages match your search criteria. Try adjusting your filters.",
	)
	render_message_list(container, ctx, screen)
