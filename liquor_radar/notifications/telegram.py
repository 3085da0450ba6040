"""Telegram bot notification sink."""

import logging
from typing import Any

import httpx

from liquor_radar.notifications.base import Notifier

logger = logging.getLogger(__name__)

API_URL = "https://api.telegram.org"


class TelegramNotifier(Notifier):
    """Post found-item alerts to one Telegram chat through a bot."""

    kind = "telegram"

    def __init__(self, bot_token: str, chat_id: int) -> None:
        self._send_url = f"{API_URL}/bot{bot_token}/sendMessage"
        self._chat_id = chat_id
        self._timeout = httpx.Timeout(10.0)

    async def send(
        self, message: str, *, title: str | None = None, **kwargs: Any
    ) -> bool:
        # Telegram has no separate title field
        text = f"{title}\n\n{message}" if title else message

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    self._send_url, json={"chat_id": self._chat_id, "text": text}
                )
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Telegram rejected message to chat {self._chat_id}: "
                f"{e.response.status_code}"
            )
            return False
        except httpx.HTTPError as e:
            logger.error(f"Telegram request failed for chat {self._chat_id}: {e}")
            return False

        if not body.get("ok"):
            logger.error(f"Telegram API error: {body.get('description', 'unknown')}")
            return False

        logger.info(
            f"Telegram notification sent to chat {self._chat_id}: "
            f"{title or message[:40]}"
        )
        return True
