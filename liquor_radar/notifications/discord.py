"""Discord bot notification implementation."""

import logging
from typing import Any

import httpx

from liquor_radar.notifications.base import Notifier

logger = logging.getLogger(__name__)

API_URL = "https://discord.com/api/v10"


class DiscordNotifier(Notifier):
    """Post notifications to a Discord channel as a bot."""

    kind = "discord"

    def __init__(self, bot_token: str, channel_id: str) -> None:
        self._bot_token = bot_token
        self._channel_id = channel_id
        self._timeout = httpx.Timeout(10.0)

    async def send(
        self, message: str, *, title: str | None = None, **kwargs: Any
    ) -> bool:
        content = f"**{title}**\n{message}" if title else message

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{API_URL}/channels/{self._channel_id}/messages",
                    headers={"Authorization": f"Bot {self._bot_token}"},
                    json={"content": content},
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Discord HTTP error: {e.response.status_code}")
            return False
        except httpx.HTTPError as e:
            logger.error(f"Discord notification failed: {str(e)}")
            return False

        logger.info(f"Discord notification sent: {title or 'Notification'}")
        return True
