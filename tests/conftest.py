"""Shared fakes and fixtures for the async test suite."""

import asyncio
import sys
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

import pytest

from liquor_radar.config.models import AppConfig, SubscriberConfig
from liquor_radar.notifications.base import Notifier
from liquor_radar.notifications.dispatcher import NotificationDispatcher
from liquor_radar.runner.subscriber import SubscriberRunner
from liquor_radar.search.base import FoundItem

FOUND_AT = datetime(2025, 1, 2, 15, 4, 5)


class RecordingNotifier(Notifier):
    """Sink that records every message instead of sending it."""

    kind = "recording"

    def __init__(self, *, succeed: bool = True, error: Exception | None = None) -> None:
        self.sent: list[tuple[str | None, str]] = []
        self.succeed = succeed
        self.error = error

    async def send(
        self, message: str, *, title: str | None = None, **kwargs: Any
    ) -> bool:
        self.sent.append((title, message))
        if self.error is not None:
            raise self.error
        return self.succeed

    @property
    def titles(self) -> list[str | None]:
        return [title for title, _ in self.sent]

    def found_titles(self) -> list[str | None]:
        return [title for title in self.titles if title != "Heartbeat"]

    def heartbeat_count(self) -> int:
        return self.titles.count("Heartbeat")


class FakeSearcher:
    """Search provider returning canned results per term.

    A term mapped to an exception raises it. When ``gate`` is given every
    search blocks until the gate is set.
    """

    def __init__(
        self,
        results: dict[str, list[FoundItem] | Exception] | None = None,
        *,
        gate: asyncio.Event | None = None,
        delay: float = 0.0,
    ) -> None:
        self.results = results or {}
        self.gate = gate
        self.delay = delay
        self.calls: list[tuple[str, str, int]] = []
        self.completed = 0
        self.active = 0
        self.max_active = 0
        self.on_search: Callable[[str], None] | None = None

    async def search(self, term: str, zipcode: str, distance: int) -> list[FoundItem]:
        self.calls.append((term, zipcode, distance))
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.on_search is not None:
                self.on_search(term)
            if self.gate is not None:
                await self.gate.wait()
            if self.delay:
                await asyncio.sleep(self.delay)
            result = self.results.get(term, [])
            if isinstance(result, Exception):
                raise result
            self.completed += 1
            return list(result)
        finally:
            self.active -= 1


def make_item(
    name: str, store: str = "Downtown Liquor", price: str = "$49.95"
) -> FoundItem:
    return FoundItem(
        name=name,
        code=f"{name[:3].upper()}1",
        store=store,
        date=FOUND_AT,
        price=price,
    )


def make_subscriber(
    name: str = "alice", items: list[str] | None = None, **overrides: Any
) -> SubscriberConfig:
    return SubscriberConfig(
        name=name,
        items=items or ["Blanton's"],
        zipcode=overrides.pop("zipcode", "97201"),
        distance=overrides.pop("distance", 10),
        **overrides,
    )


def make_runner(
    subscriber: SubscriberConfig,
    searcher: FakeSearcher,
    notifier: RecordingNotifier,
    *,
    condense: bool = False,
    interval: timedelta = timedelta(seconds=60),
    **kwargs: Any,
) -> SubscriberRunner:
    kwargs.setdefault("max_pacing_delay", 0.0)
    dispatcher = NotificationDispatcher(
        [notifier], condense, subscriber=subscriber.name
    )
    return SubscriberRunner(subscriber, searcher, dispatcher, interval, **kwargs)


def make_app_config(
    *subscribers: SubscriberConfig, interval: timedelta = timedelta(seconds=60)
) -> AppConfig:
    return AppConfig(interval=interval, subscribers=list(subscribers))


async def wait_until(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Poll ``predicate`` until it is true or fail after ``timeout`` seconds."""

    async def _poll() -> None:
        while not predicate():
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout=timeout)


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fakes() -> Any:
    """Namespace with the fake classes and builders used across test modules."""

    class _Fakes:
        RecordingNotifier = RecordingNotifier
        FakeSearcher = FakeSearcher
        make_item = staticmethod(make_item)
        make_subscriber = staticmethod(make_subscriber)
        make_runner = staticmethod(make_runner)
        make_app_config = staticmethod(make_app_config)
        wait_until = staticmethod(wait_until)

    return _Fakes
