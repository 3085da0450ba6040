"""Notification sinks and the per-subscriber dispatcher."""

from liquor_radar.notifications.base import Notifier
from liquor_radar.notifications.dispatcher import (
    NotificationDispatcher,
    format_condensed,
    format_found_item,
)
from liquor_radar.notifications.factory import build_notifier

__all__ = [
    "NotificationDispatcher",
    "Notifier",
    "build_notifier",
    "format_condensed",
    "format_found_item",
]
