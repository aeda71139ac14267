from __future__ import annotations

from nicegui import ui

from layout.context import PageContext
from pages.message_list.list_view import MessageListScreen, render_message_list
from services.message_filters import SENT_SMS_SCHEMA


def render(container: ui.element, ctx: PageContext) -> None:
	screen = MessageListScreen(
		name="sent_sms",
		title="Sent SMS",
		schema=SENT_SMS_SCHEMA,
		fetch_page=ctx.api.fetch_sent_page,
		load_options=ctx.api.get_sent_page_data,
		load_details=lambda rec: ctx.api.get_sent_message_details(rec.source_table, rec.id),
		empty_text="No sent SMS messages match your search criteria. Try adjusting your filters or date range.",
	)
	render_message_list(container, ctx, screen)
