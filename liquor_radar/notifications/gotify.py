"""Gotify server notification implementation."""

import logging
from typing import Any

import httpx

from liquor_radar.notifications.base import Notifier

logger = logging.getLogger(__name__)

DEFAULT_PRIORITY = 5


class GotifyNotifier(Notifier):
    """Send notifications to a self-hosted Gotify server."""

    kind = "gotify"

    def __init__(
        self, endpoint: str, token: str, priority: int = DEFAULT_PRIORITY
    ) -> None:
        self._endpoint = endpoint.rstrip("/")
        self._token = token
        self._priority = priority
        self._timeout = httpx.Timeout(10.0)

    async def send(
        self, message: str, *, title: str | None = None, **kwargs: Any
    ) -> bool:
        payload = {
            "title": title or "",
            "message": message,
            "priority": kwargs.get("priority", self._priority),
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._endpoint}/message",
                    params={"token": self._token},
                    json=payload,
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Gotify returned status code {e.response.status_code}")
            return False
        except httpx.HTTPError as e:
            logger.error(f"Gotify notification failed: {str(e)}")
            return False

        logger.info(f"Gotify notification sent: {title or 'Notification'}")
        return True
