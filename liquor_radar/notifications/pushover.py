"""Pushover notification implementation."""

import logging
from typing import Any

import httpx

from liquor_radar.notifications.base import Notifier

logger = logging.getLogger(__name__)

API_URL = "https://api.pushover.net/1/messages.json"


class PushoverNotifier(Notifier):
    """Send notifications through the Pushover messages API."""

    kind = "pushover"

    def __init__(self, token: str, recipient_id: str) -> None:
        self._token = token
        self._recipient_id = recipient_id
        self._timeout = httpx.Timeout(10.0)

    async def send(
        self, message: str, *, title: str | None = None, **kwargs: Any
    ) -> bool:
        data = {"token": self._token, "user": self._recipient_id, "message": message}
        if title:
            data["title"] = title

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(API_URL, data=data)
                response.raise_for_status()
                result = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Pushover HTTP error: {e.response.status_code}")
            return False
        except httpx.HTTPError as e:
            logger.error(f"Pushover notification failed: {str(e)}")
            return False

        if result.get("status") != 1:
            logger.error(f"Pushover API error: {result.get('errors', 'Unknown')}")
            return False

        logger.info(f"Pushover notification sent: {title or 'Notification'}")
        return True
