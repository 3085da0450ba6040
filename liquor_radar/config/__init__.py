"""Configuration loading and validation."""

from liquor_radar.config.loader import build_app_config, load_app_config
from liquor_radar.config.models import (
    AppConfig,
    NotificationSinkConfig,
    SubscriberConfig,
    format_duration,
    parse_duration,
)
from liquor_radar.config.settings import Settings, get_settings

__all__ = [
    "AppConfig",
    "NotificationSinkConfig",
    "Settings",
    "SubscriberConfig",
    "build_app_config",
    "format_duration",
    "get_settings",
    "load_app_config",
    "parse_duration",
]
