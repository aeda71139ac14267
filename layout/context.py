from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from nicegui import ui

from services.app_config import AppConfig
from services.paged_list import PagedFilterController
from services.sms_api import SmsApiClient


@dataclass
class PageContext:
	# -----------------------------
	# Layout UI references
	# -----------------------------

	# Left navigation drawer (header toggles it)
	drawer: Optional[ui.left_drawer] = None

	# Dynamic container inside the drawer. Only this element is cleared and rebuilt when routes change.
	drawer_content: Optional[ui.element] = None
	refresh_drawer: Optional[Callable[[], None]] = None

	# The container where the current screen is rendered (router clears it on navigation)
	main_area: Optional[ui.column] = None

	# Drawer navigation buttons indexed by route key, used for the active highlight.
	nav_buttons: dict[str, ui.button] = field(default_factory=dict)

	# -------- per client --------
	config: Optional[AppConfig] = None
	api: Optional[SmsApiClient] = None

	# List controllers owned by the current screen. Closed on navigation and disconnect
	# so that responses arriving afterwards are dropped.
	controllers: list[PagedFilterController] = field(default_factory=list)

	def track_controller(self, controller: PagedFilterController) -> PagedFilterController:
		self.controllers.append(controller)
		return controller

	def close_screen(self) -> None:
		for controller in self.controllers:
			controller.close()
		self.controllers.clear()
