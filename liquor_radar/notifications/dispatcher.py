"""Shape found-item notifications and fan them out to every sink.

With ``condense`` off, each found item becomes its own notification. With
``condense`` on, a batch of two or more items becomes one numbered summary; a
single item is always sent in the individual format.

A failing sink never stops delivery to the other sinks or of the other
messages. Failures are logged where they happen and reported once, after
every delivery was attempted, as a ``DispatchError`` carrying the last one.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Final

from liquor_radar.config.models import NotificationSinkConfig
from liquor_radar.errors import ConfigurationError, DispatchError
from liquor_radar.notifications.base import Notifier
from liquor_radar.notifications.factory import build_notifier
from liquor_radar.search.base import FoundItem

logger = logging.getLogger(__name__)

DATE_FORMAT: Final = "%Y-%m-%d"
TIME_FORMAT: Final = "%H:%M:%S"
HEARTBEAT_SUBJECT: Final = "Heartbeat"
HEARTBEAT_MESSAGE: Final = "liquor-radar is still running and searching"


def format_found_item(item: FoundItem) -> tuple[str, str]:
    """Return ``(subject, message)`` for a single found item."""

    subject = f"Found {item.name}!"
    message = (
        f"Found {item.name} at {item.store} on {item.date.strftime(DATE_FORMAT)} "
        f"at {item.date.strftime(TIME_FORMAT)} for {item.price}"
    )
    return subject, message


def format_condensed(items: Sequence[FoundItem]) -> tuple[str, str]:
    """Return ``(subject, message)`` summarizing a whole batch."""

    if len(items) == 1:
        return format_found_item(items[0])

    lines = [f"Found {len(items)} liquor items:", ""]
    lines.extend(
        f"{index}. {item.name} at {item.store} for {item.price}"
        for index, item in enumerate(items, start=1)
    )
    searched_at = items[0].date
    lines.append("")
    lines.append(
        f"Search completed on {searched_at.strftime(DATE_FORMAT)} "
        f"at {searched_at.strftime(TIME_FORMAT)}"
    )
    return f"Found {len(items)} items!", "\n".join(lines)


def _condense_policy(configs: Sequence[NotificationSinkConfig]) -> bool:
    if not configs:
        return False
    condense = configs[0].condense
    if any(config.condense != condense for config in configs[1:]):
        raise ConfigurationError(
            "all notifications of one user must use the same condense setting"
        )
    return condense


class NotificationDispatcher:
    """Deliver one subscriber's notifications to all of its sinks."""

    def __init__(
        self,
        notifiers: Sequence[Notifier],
        condense: bool = False,
        *,
        subscriber: str = "",
    ) -> None:
        self._notifiers = tuple(notifiers)
        self._condense = condense
        self._subscriber = subscriber

    @classmethod
    def from_configs(
        cls, configs: Sequence[NotificationSinkConfig], *, subscriber: str = ""
    ) -> "NotificationDispatcher":
        """Build sinks from config; the condense policy comes from the first sink."""

        condense = _condense_policy(configs)
        notifiers = [build_notifier(config) for config in configs]
        return cls(notifiers, condense, subscriber=subscriber)

    @property
    def condense(self) -> bool:
        return self._condense

    @property
    def notifiers(self) -> tuple[Notifier, ...]:
        return self._notifiers

    async def _broadcast(self, subject: str, message: str) -> None:
        last_error: DispatchError | None = None

        for notifier in self._notifiers:
            try:
                sent = await notifier.send(message, title=subject)
            except Exception as e:
                logger.error(f"Failed to send {notifier.kind} notification: {e}")
                last_error = DispatchError(f"{notifier.kind}: {e}")
                continue

            if not sent:
                logger.error(f"Failed to send {notifier.kind} notification: {subject}")
                last_error = DispatchError(
                    f"{notifier.kind}: delivery of '{subject}' failed"
                )

        if last_error is not None:
            raise last_error

    async def notify_found(self, item: FoundItem) -> None:
        """Send one notification for one found item."""

        subject, message = format_found_item(item)
        logger.info(message)
        await self._broadcast(subject, message)

    async def notify_found_items(self, items: Sequence[FoundItem]) -> None:
        """Send notifications for a pass's batch, condensed or one per item."""

        if not items:
            return

        if self._condense:
            subject, message = format_condensed(items)
            logger.info(message)
            await self._broadcast(subject, message)
            return

        last_error: DispatchError | None = None
        for item in items:
            try:
                await self.notify_found(item)
            except DispatchError as e:
                last_error = e
        if last_error is not None:
            raise last_error

    async def notify_heartbeat(self) -> None:
        """Signal that the subscriber's searches are still running."""

        logger.info(f"{HEARTBEAT_MESSAGE} for user '{self._subscriber}'")
        await self._broadcast(HEARTBEAT_SUBJECT, HEARTBEAT_MESSAGE)
