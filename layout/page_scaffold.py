from __future__ import annotations

from typing import Callable

from nicegui import ui

from layout.context import PageContext


ContentBuilder = Callable[[ui.element], None]


def build_page(
	ctx: PageContext,
	container: ui.element,
	*,
	title: str | None = None,
	content: ContentBuilder,
	content_padding_classes: str = "",
) -> None:
	"""
	Standard screen layout:

	- Fills available height (h-full + min-h-0)
	- Scaffold does NOT scroll; list screens own their scroll area
	  (the scroll position drives load-more)
	"""
	with container:
		with ui.column().classes("w-full h-full min-h-0 min-w-0"):
			if title:
				ui.label(title).classes("text-2xl font-bold")

			with ui.column().classes(
				"w-full flex-1 min-h-0 min-w-0 overflow-hidden %s" % (content_padding_classes or "")
			) as content_area:
				content(content_area)
