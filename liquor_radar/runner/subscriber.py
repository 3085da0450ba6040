"""Polling lifecycle for a single subscriber.

A runner starts one search pass immediately and another on every tick of
the polling interval. At most one pass is in flight: a tick that arrives
while the previous pass is still running is skipped with a warning, never
queued.

Within a pass the search terms run one after another, separated by a random
pause, because the catalog session is not safe for concurrent use. A stop
request or cancellation is honored between terms and during the pause; a
search call already in flight is left to finish or hit its own timeout.
"""

from __future__ import annotations

import asyncio
import logging
import random
from datetime import timedelta
from typing import Any, Final

from liquor_radar.config.models import SubscriberConfig, format_duration
from liquor_radar.errors import CancellationError, ConfigurationError, DispatchError
from liquor_radar.notifications.dispatcher import NotificationDispatcher
from liquor_radar.search.base import FoundItem, SearchProvider
from liquor_radar.search.olcc import OlccSearcher

logger = logging.getLogger(__name__)

TERM_TIMEOUT_SECONDS: Final = 120.0
MAX_PACING_DELAY_SECONDS: Final = 30.0


async def wait_for_event(event: asyncio.Event, timeout: float) -> bool:
    """Wait up to ``timeout`` seconds for ``event``; True if it was set."""

    if event.is_set():
        return True
    try:
        await asyncio.wait_for(event.wait(), timeout=timeout)
    except asyncio.TimeoutError:
        return False
    return True


class SubscriberRunner:
    """Run periodic searches for one subscriber and dispatch what they find."""

    def __init__(
        self,
        config: SubscriberConfig,
        searcher: SearchProvider,
        dispatcher: NotificationDispatcher,
        interval: timedelta,
        *,
        term_timeout: float = TERM_TIMEOUT_SECONDS,
        max_pacing_delay: float = MAX_PACING_DELAY_SECONDS,
    ) -> None:
        self._config = config
        self._searcher = searcher
        self._dispatcher = dispatcher
        self._interval = interval
        self._term_timeout = term_timeout
        self._max_pacing_delay = max(0.0, max_pacing_delay)
        self._stop_event = asyncio.Event()
        self._pass_task: asyncio.Task[Any] | None = None

    @classmethod
    def from_config(
        cls,
        config: SubscriberConfig,
        interval: timedelta,
        user_agent: str = "",
        **kwargs: Any,
    ) -> "SubscriberRunner":
        """Build a runner with its own OLCC searcher and notification sinks."""

        dispatcher = NotificationDispatcher.from_configs(
            config.notifications, subscriber=config.name
        )
        return cls(config, OlccSearcher(user_agent), dispatcher, interval, **kwargs)

    @property
    def name(self) -> str:
        return self._config.name

    @property
    def config(self) -> SubscriberConfig:
        return self._config

    @property
    def is_stopped(self) -> bool:
        return self._stop_event.is_set()

    @property
    def is_searching(self) -> bool:
        return self._pass_task is not None and not self._pass_task.done()

    def stop(self) -> None:
        """Request termination. Safe to call any number of times."""

        if self._stop_event.is_set():
            return
        logger.info(f"Stop requested for user '{self.name}'")
        self._stop_event.set()

    async def start(self) -> None:
        """Search now and on every interval tick until stopped or cancelled.

        Returns after ``stop()``; re-raises ``asyncio.CancelledError`` when
        the calling task is cancelled. Either way the in-flight pass is
        allowed to reach its next safe point before this returns.
        """

        logger.info(f"Starting search runner for user '{self.name}'")
        interval_seconds = self._interval.total_seconds()

        try:
            if not self._stop_event.is_set():
                self._admit_pass()

            while not await wait_for_event(self._stop_event, interval_seconds):
                self._admit_pass()

            logger.info(f"Stopping search runner for user '{self.name}'")
        except asyncio.CancelledError:
            logger.info(f"Search runner cancelled for user '{self.name}'")
            self._stop_event.set()
            raise
        finally:
            if self._pass_task is not None:
                await asyncio.wait([self._pass_task])

    async def run_once(self) -> DispatchError | None:
        """Run exactly one pass and return its last dispatch error, if any."""

        halt = asyncio.Event()
        pass_task = asyncio.ensure_future(self.run_search(halt))
        try:
            return await asyncio.shield(pass_task)
        except asyncio.CancelledError:
            logger.info(f"Single search cancelled for user '{self.name}'")
            halt.set()
            await asyncio.wait([pass_task])
            if not pass_task.cancelled():
                pass_task.exception()
            raise

    def _admit_pass(self) -> bool:
        if self.is_searching:
            logger.warning(
                f"Previous search still running for user '{self.name}', skipping"
            )
            return False

        self._pass_task = asyncio.create_task(
            self._run_admitted_pass(), name=f"search-pass:{self.name}"
        )
        return True

    async def _run_admitted_pass(self) -> None:
        try:
            await self.run_search(self._stop_event)
        except CancellationError as e:
            logger.info(str(e))
        except Exception:
            logger.exception(f"Search failed for user '{self.name}'")

    def _check_preconditions(self) -> None:
        if not self._config.items:
            raise ConfigurationError(f"user '{self.name}' has no items to search for")
        if not self._config.zipcode:
            raise ConfigurationError(f"user '{self.name}' has no zipcode configured")

    def _raise_if_halted(self, halt: asyncio.Event) -> None:
        if halt.is_set():
            raise CancellationError(f"Search for user '{self.name}' halted")

    def _pacing_delay(self) -> float:
        return random.uniform(0.0, self._max_pacing_delay)

    async def _search_term(self, term: str) -> list[FoundItem] | None:
        logger.info(f"User '{self.name}' searching for item: {term}")
        try:
            results = await asyncio.wait_for(
                self._searcher.search(
                    term, self._config.zipcode, self._config.distance
                ),
                timeout=self._term_timeout,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Search for {term} for user '{self.name}' timed out "
                f"after {self._term_timeout}s"
            )
            return None
        except Exception as e:
            logger.error(f"Failed to search for {term} for user '{self.name}': {e}")
            return None

        logger.info(f"User '{self.name}' found {len(results)} results for {term}")
        return results

    async def run_search(
        self, halt: asyncio.Event | None = None
    ) -> DispatchError | None:
        """Search every configured item once, then notify.

        Args:
            halt: Set to abort the pass at the next safe point.

        Returns:
            The last dispatch error of this pass, for observability only.

        Raises:
            ConfigurationError: no items or no zipcode; nothing was searched.
            CancellationError: ``halt`` was set before the pass finished.
        """

        if halt is None:
            halt = asyncio.Event()

        self._check_preconditions()

        items = self._config.items
        logger.info(
            f"Starting search for user '{self.name}': {len(items)} items "
            f"within {self._config.distance} miles of {self._config.zipcode}"
        )

        batch: list[FoundItem] = []
        for index, term in enumerate(items):
            self._raise_if_halted(halt)

            results = await self._search_term(term)
            if results:
                batch.extend(results)

            if index < len(items) - 1:
                delay = self._pacing_delay()
                logger.debug(
                    f"User '{self.name}' waiting {delay:.1f}s before next search"
                )
                if await wait_for_event(halt, delay):
                    self._raise_if_halted(halt)

        self._raise_if_halted(halt)

        last_error: DispatchError | None = None
        if batch:
            try:
                await self._dispatcher.notify_found_items(batch)
            except DispatchError as e:
                logger.warning(
                    f"Failed to send notifications for user '{self.name}': {e}"
                )
                last_error = e

        try:
            await self._dispatcher.notify_heartbeat()
        except DispatchError as e:
            logger.warning(
                f"Failed to send heartbeat notification for user '{self.name}': {e}"
            )
            last_error = e

        logger.info(
            f"Search completed for user '{self.name}', "
            f"next search in {format_duration(self._interval)}"
        )
        return last_error
