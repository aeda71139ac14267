import os

from loguru import logger
from nicegui import ui, app

from layout.context import PageContext
from layout.drawer import build_drawer
from layout.header import build_header
from layout.main_area import build_main_area
from layout.router import get_initial_route_from_url, navigate
from services.app_config import get_app_config
from services.logging_setup import setup_logging
from services.sms_api import SmsApiClient


# ------------------------------------------------------------------
# GLOBAL BACKEND (PROCESS LIFETIME)
# ------------------------------------------------------------------

setup_logging(app_name="sms_dashboard")
logger.info("Starting NiceGUI")

APP_CONFIG = get_app_config()
if not APP_CONFIG.api.token:
	logger.warning("[main] - no_api_token - set SMS_API_TOKEN or api.token in the config file")

GLOBAL_API = SmsApiClient(APP_CONFIG.api)
app.on_shutdown(GLOBAL_API.close)


# ------------------------------------------------------------------
# UI
# ------------------------------------------------------------------

@ui.page("/")
def index():
	ui.colors(primary="#293B50", accent="#ea6118")
	ui.add_head_html("""
	<style>
		html, body { height: 100%; margin: 0; overflow: hidden; }
	</style>
	""")

	# --------- PER SESSION CONTEXT ---------
	ctx = PageContext()
	ctx.config = APP_CONFIG
	ctx.api = GLOBAL_API

	ui.context.client.on_disconnect(ctx.close_screen)

	# --------- LAYOUT ---------
	build_header(ctx)
	build_drawer(ctx)
	build_main_area(ctx)

	default_route = app.storage.user.get("current_route", APP_CONFIG.ui.main_route)
	navigate(ctx, get_initial_route_from_url(default_route))


ui.run(
	title=APP_CONFIG.ui.title,
	reload=False,
	dark=APP_CONFIG.ui.dark_mode,
	storage_secret=os.environ.get("NICEGUI_STORAGE_SECRET", "sms-dashboard-dev-secret"),
)
