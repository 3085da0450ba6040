"""Notification sink contract."""

from abc import ABC, abstractmethod
from typing import Any, ClassVar


class Notifier(ABC):
    """A destination for found-item alerts and heartbeats.

    Sinks report delivery problems through their return value and never
    raise for transport failures; the dispatcher decides what a failure
    means for the rest of the batch.
    """

    kind: ClassVar[str] = "notifier"

    @abstractmethod
    async def send(
        self, message: str, *, title: str | None = None, **kwargs: Any
    ) -> bool:
        """Deliver one message.

        Args:
            message: Body text.
            title: Subject line, for services that show one.
            **kwargs: Service-specific options such as a Gotify priority.

        Returns:
            Whether the service accepted the message.
        """
