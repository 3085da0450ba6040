"""Slack Web API notification implementation."""

import logging
from typing import Any

import httpx

from liquor_radar.notifications.base import Notifier

logger = logging.getLogger(__name__)

API_URL = "https://slack.com/api/chat.postMessage"


class SlackNotifier(Notifier):
    """Post notifications to a Slack channel with a bot token."""

    kind = "slack"

    def __init__(self, token: str, channel_id: str) -> None:
        self._token = token
        self._channel_id = channel_id
        self._timeout = httpx.Timeout(10.0)

    async def send(
        self, message: str, *, title: str | None = None, **kwargs: Any
    ) -> bool:
        text = f"*{title}*\n{message}" if title else message

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    API_URL,
                    headers={"Authorization": f"Bearer {self._token}"},
                    json={"channel": self._channel_id, "text": text},
                )
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Slack HTTP error: {e.response.status_code}")
            return False
        except httpx.HTTPError as e:
            logger.error(f"Slack notification failed: {str(e)}")
            return False

        # Slack reports API failures with HTTP 200 and ok=false
        if not result.get("ok"):
            logger.error(f"Slack API error: {result.get('error', 'Unknown')}")
            return False

        logger.info(f"Slack notification sent: {title or 'Notification'}")
        return True
