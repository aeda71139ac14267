from __future__ import annotations

import logging
import os
import sys
import threading
import time
import traceback
from contextlib import contextmanager
from typing import Any

from loguru import logger


# component is bound per class (logger.bind(component=...)); "app" when unbound
LOG_FORMAT = (
	"{level.icon} <green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
	"<blue>{extra[component]:^22}</blue> | "
	"[<level>{level:<8}</level>] | "
	"<white>{name}.{function}:{line}</white> | "
	"<level>{message}</level>"
)

DEFAULT_CONSOLE_LEVEL = "INFO"
DEFAULT_FILE_LEVEL = "DEBUG"

_LEVEL_NAMES = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")

_LEVEL_COLORS = {
	"ERROR": "<fg #ff0000>",
	"WARNING": "<fg #f9ff5c>",
	"INFO": "<cyan>",
	"DEBUG": "<fg #1cfc03>",
}


def _log_uncaught(exc_info, where: str) -> None:
	try:
		logger.opt(exception=exc_info).critical(f"[{where}] - uncaught_exception")
	except Exception:
		traceback.print_exception(*exc_info, file=sys.stderr)


def _install_global_exception_hooks() -> None:
	"""Uncaught exceptions (main thread and worker threads) end up in the log file too."""
	sys.excepthook = lambda exc_type, exc, tb: _log_uncaught((exc_type, exc, tb), "excepthook")
	threading.excepthook = lambda args: _log_uncaught(
		(args.exc_type, args.exc_value, args.exc_traceback),
		f"thread:{getattr(args.thread, 'name', 'unknown')}",
	)


def _level_name(value: Any, fallback: str) -> str:
	"""logging.INFO style ints and "info" style strings both map to a loguru level name."""
	if isinstance(value, int):
		name = logging.getLevelName(value)
	else:
		name = str(value or "").strip().upper()
	return name if name in _LEVEL_NAMES else fallback


def setup_logging(
	app_name: str = "sms_dashboard",
	log_dir: str = "log",
	log_level: str | int | None = None,
	file_level: str | int | None = None,
) -> str:
	"""
	Coloured console sink plus a rotating file sink (10 MB, zipped, 50 kept).

	Levels come from the arguments, else from LOG_LEVEL / LOG_FILE_LEVEL.
	Returns the path of the active log file.
	"""
	console_level = _level_name(
		log_level if log_level is not None else os.getenv("LOG_LEVEL"), DEFAULT_CONSOLE_LEVEL
	)
	file_level_name = _level_name(
		file_level if file_level is not None else os.getenv("LOG_FILE_LEVEL"), DEFAULT_FILE_LEVEL
	)

	os.makedirs(log_dir, exist_ok=True)
	log_path = os.path.join(log_dir, f"{app_name}.log")

	logger.remove()
	logger.configure(
		extra={"component": "app"},
		handlers=[
			{"sink": sys.stdout, "format": LOG_FORMAT, "colorize": True, "level": console_level},
			{
				"sink": log_path,
				"format": LOG_FORMAT,
				"rotation": "10 MB",
				"compression": "zip",
				"retention": 50,
				"colorize": False,
				"level": file_level_name,
			},
		],
	)
	for name, color in _LEVEL_COLORS.items():
		logger.level(name, color=color)
	_install_global_exception_hooks()

	logger.info(
		f"[setup_logging] - logger_initialized - app_name={app_name} console_level={console_level} "
		f"file_level={file_level_name} log_path={log_path}"
	)
	return log_path


def _short(value: Any, max_text: int = 140) -> str:
	text = str(value)
	if len(text) > max_text:
		return f"{text[:max_text]}...({len(text)} chars)"
	return text


@contextmanager
def log_timing(method_name: str, **context: Any):
	"""Debug start/end lines with the duration; a failure is logged as a warning and re-raised."""
	context_txt = " ".join(f"{k}={_short(v)}" for k, v in context.items())
	start = time.perf_counter()
	logger.debug(f"[{method_name}] - start {context_txt}".rstrip())
	try:
		yield
	except Exception:
		duration_ms = round((time.perf_counter() - start) * 1000, 2)
		logger.warning(f"[{method_name}] - failed - duration_ms={duration_ms} {context_txt}".rstrip())
		raise
	duration_ms = round((time.perf_counter() - start) * 1000, 2)
	logger.debug(f"[{method_name}] - end - duration_ms={duration_ms} {context_txt}".rstrip())
