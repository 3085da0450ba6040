"""Pushbullet notification implementation."""

import logging
from typing import Any

import httpx

from liquor_radar.notifications.base import Notifier

logger = logging.getLogger(__name__)

API_URL = "https://api.pushbullet.com/v2"


class PushbulletNotifier(Notifier):
    """Push notes to a Pushbullet device addressed by its nickname."""

    kind = "pushbullet"

    def __init__(self, token: str, device_nickname: str) -> None:
        self._token = token
        self._device_nickname = device_nickname
        self._device_iden: str | None = None
        self._timeout = httpx.Timeout(10.0)

    async def _resolve_device(self, client: httpx.AsyncClient) -> str | None:
        if self._device_iden is not None:
            return self._device_iden

        response = await client.get(f"{API_URL}/devices")
        response.raise_for_status()
        for device in response.json().get("devices", []):
            if device.get("active") and device.get("nickname") == self._device_nickname:
                self._device_iden = str(device.get("iden"))
                return self._device_iden
        return None

    async def send(
        self, message: str, *, title: str | None = None, **kwargs: Any
    ) -> bool:
        try:
            async with httpx.AsyncClient(
                timeout=self._timeout, headers={"Access-Token": self._token}
            ) as client:
                device_iden = await self._resolve_device(client)
                if device_iden is None:
                    logger.error(
                        f"Pushbullet device '{self._device_nickname}' not found"
                    )
                    return False

                response = await client.post(
                    f"{API_URL}/pushes",
                    json={
                        "type": "note",
                        "title": title or "",
                        "body": message,
                        "device_iden": device_iden,
                    },
                )
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Pushbullet HTTP error: {e.response.status_code}")
            return False
        except httpx.HTTPError as e:
            logger.error(f"Pushbullet notification failed: {str(e)}")
            return False

        logger.info(f"Pushbullet notification sent: {title or 'Notification'}")
        return True
