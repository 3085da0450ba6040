"""Build notification sinks from their configuration."""

from liquor_radar.config.models import NotificationSinkConfig
from liquor_radar.errors import ConfigurationError
from liquor_radar.notifications.base import Notifier
from liquor_radar.notifications.discord import DiscordNotifier
from liquor_radar.notifications.gotify import GotifyNotifier
from liquor_radar.notifications.pushbullet import PushbulletNotifier
from liquor_radar.notifications.pushover import PushoverNotifier
from liquor_radar.notifications.slack import SlackNotifier
from liquor_radar.notifications.telegram import TelegramNotifier


def _credential(config: NotificationSinkConfig, key: str, description: str) -> str:
    value = config.credential.get(key, "").strip()
    if not value:
        raise ConfigurationError(f"{config.type} requires {description} in credentials")
    return value


def build_notifier(config: NotificationSinkConfig) -> Notifier:
    """Create the notifier for one sink config.

    Raises:
        ConfigurationError: unsupported type or missing credentials.
    """

    kind = config.type.lower()

    if kind == "gotify":
        if not config.endpoint:
            raise ConfigurationError("gotify requires an endpoint")
        return GotifyNotifier(config.endpoint, _credential(config, "token", "token"))

    if kind == "telegram":
        token = _credential(config, "token", "token")
        raw_chat_id = _credential(config, "chat_id", "chat_id")
        try:
            chat_id = int(raw_chat_id)
        except ValueError as e:
            raise ConfigurationError(f"invalid telegram chat_id: {raw_chat_id}") from e
        return TelegramNotifier(token, chat_id)

    if kind == "slack":
        return SlackNotifier(
            _credential(config, "token", "token"),
            _credential(config, "channel_id", "channel_id"),
        )

    if kind == "discord":
        return DiscordNotifier(
            _credential(config, "token", "bot token"),
            _credential(config, "channel_id", "channel_id"),
        )

    if kind == "pushover":
        return PushoverNotifier(
            _credential(config, "token", "token"),
            _credential(config, "recipient_id", "recipient_id"),
        )

    if kind == "pushbullet":
        return PushbulletNotifier(
            _credential(config, "token", "token"),
            _credential(config, "device_nickname", "device_nickname"),
        )

    raise ConfigurationError(f"unsupported notification type: {config.type}")
