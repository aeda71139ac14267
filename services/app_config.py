from __future__ import annotations

import json
import os
from dataclasses import dataclass, field, asdict
from typing import Any

from loguru import logger

# --------------------------------------------------------------------------------------
# Config file location
# --------------------------------------------------------------------------------------

# If you set APP_CONFIG_PATH, it overrides the default location (useful for production/testing).
DEFAULT_CONFIG_PATH = "config/app_config.json"


def get_config_path() -> str:
    """
    Canonical config path resolver.

    Priority:
      1) APP_CONFIG_PATH env override (absolute or relative)
      2) config/app_config.json
    """
    return os.environ.get("APP_CONFIG_PATH") or DEFAULT_CONFIG_PATH


# ------------------------------------------------------------------ Config models

@dataclass
class ApiConfig:
    base_url: str = "https://smsexpert.nedtechnology.co.in/capi/mobile/"
    timeout_s: float = 30.0
    verify_ssl: bool = True
    # bearer token; SMS_API_TOKEN wins when set
    token: str = ""


@dataclass
class MessageListConfig:
    page_size: int = 20
    # fraction of the scroll height at which the next page is requested
    load_more_threshold: float = 0.7
    default_preset: str = "today"


@dataclass
class UiConfig:
    title: str = "SMS Expert"
    main_route: str = "sent_sms"
    dark_mode: bool = False


@dataclass
class AppConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    lists: MessageListConfig = field(default_factory=MessageListConfig)
    ui: UiConfig = field(default_factory=UiConfig)


_APP_CONFIG: AppConfig | None = None


def clear_app_config_cache() -> None:
    global _APP_CONFIG
    _APP_CONFIG = None


def get_app_config() -> AppConfig:
    global _APP_CONFIG
    if _APP_CONFIG is None:
        _APP_CONFIG = load_app_config()
    return _APP_CONFIG


def load_app_config(path: str | None = None) -> AppConfig:
    config_path = path or get_config_path()
    log = logger.bind(component="AppConfig", path=config_path)

    if not os.path.exists(config_path):
        log.warning("Config not found. Writing defaults.")
        cfg = AppConfig()
        save_app_config(cfg, config_path)
        return _apply_env_overrides(cfg)

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, ValueError) as ex:
        log.warning(f"[load_app_config] - config_unreadable - using defaults err={ex!r}")
        return _apply_env_overrides(AppConfig())

    if not isinstance(raw, dict):
        log.warning("[load_app_config] - config_not_an_object - using defaults")
        raw = {}
    return _apply_env_overrides(_from_dict(raw))


def save_app_config(cfg: AppConfig, path: str | None = None) -> None:
    global _APP_CONFIG
    config_path = path or get_config_path()
    folder = os.path.dirname(config_path)
    if folder:
        os.makedirs(folder, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(_to_dict(cfg), f, indent=2, sort_keys=True)

    # Keep cache in sync
    _APP_CONFIG = cfg


def _to_dict(cfg: AppConfig) -> dict[str, Any]:
    return asdict(cfg)


# ------------------------------------------------------------------ Parsing

def _section(data: dict[str, Any], key: str) -> dict[str, Any]:
    value = data.get(key, {})
    return value if isinstance(value, dict) else {}


def _known(cls, values: dict[str, Any]) -> dict[str, Any]:
    allowed = set(cls.__dataclass_fields__)
    return {k: v for k, v in values.items() if k in allowed}


def _from_dict(data: dict[str, Any]) -> AppConfig:
    api = ApiConfig(**_known(ApiConfig, _section(data, "api")))
    api.timeout_s = float(api.timeout_s)
    api.verify_ssl = bool(api.verify_ssl)

    lists = MessageListConfig(**_known(MessageListConfig, _section(data, "lists")))
    lists.page_size = max(1, int(lists.page_size))
    lists.load_more_threshold = min(1.0, max(0.0, float(lists.load_more_threshold)))

    ui_cfg = UiConfig(**_known(UiConfig, _section(data, "ui")))
    ui_cfg.dark_mode = bool(ui_cfg.dark_mode)

    return AppConfig(api=api, lists=lists, ui=ui_cfg)


def _apply_env_overrides(cfg: AppConfig) -> AppConfig:
    base_url = os.environ.get("SMS_API_BASE_URL")
    if base_url:
        cfg.api.base_url = base_url

    token = os.environ.get("SMS_API_TOKEN")
    if token:
        cfg.api.token = token

    timeout = os.environ.get("SMS_API_TIMEOUT")
    if timeout:
        try:
            cfg.api.timeout_s = float(timeout)
        except ValueError:
            logger.warning(f"[_apply_env_overrides] - invalid_timeout_ignored - SMS_API_TIMEOUT={timeout!r}")
    return cfg
