"""Supervise every subscriber runner behind one start/stop/run-once surface."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Final

from liquor_radar.config.models import AppConfig, SubscriberConfig
from liquor_radar.errors import ConfigurationError, ShutdownTimeoutError
from liquor_radar.runner.subscriber import SubscriberRunner

logger = logging.getLogger(__name__)

SHUTDOWN_TIMEOUT_SECONDS: Final = 30.0

RunnerFactory = Callable[[SubscriberConfig, AppConfig], SubscriberRunner]


def build_subscriber_runner(
    subscriber: SubscriberConfig, config: AppConfig
) -> SubscriberRunner:
    return SubscriberRunner.from_config(
        subscriber, interval=config.interval, user_agent=config.user_agent
    )


class SearchOrchestrator:
    """Run searches for every configured user concurrently.

    The set of runners is fixed at construction. Runners share nothing, so
    one user's failures or slow searches never hold up another's.
    """

    def __init__(
        self,
        config: AppConfig,
        *,
        runner_factory: RunnerFactory = build_subscriber_runner,
        shutdown_timeout: float = SHUTDOWN_TIMEOUT_SECONDS,
    ) -> None:
        if not config.subscribers:
            raise ConfigurationError("no users configured")

        runners: dict[str, SubscriberRunner] = {}
        for subscriber in config.subscribers:
            if subscriber.name in runners:
                raise ConfigurationError(
                    f"user '{subscriber.name}' is configured more than once"
                )
            try:
                runners[subscriber.name] = runner_factory(subscriber, config)
            except ConfigurationError as e:
                raise ConfigurationError(
                    f"failed to create user runner for '{subscriber.name}': {e}"
                ) from e

        self._config = config
        self._runners: Mapping[str, SubscriberRunner] = MappingProxyType(runners)
        self._shutdown_timeout = shutdown_timeout
        self._stop_event = asyncio.Event()

    @property
    def runners(self) -> Mapping[str, SubscriberRunner]:
        return self._runners

    def subscriber_count(self) -> int:
        return len(self._runners)

    def has_subscriber(self, name: str) -> bool:
        return name in self._runners

    def stop(self) -> None:
        """Trigger shutdown of ``start()``. Safe to call any number of times."""

        if not self._stop_event.is_set():
            logger.info("Stop requested for all user runners")
            self._stop_event.set()

    async def _supervise(self, name: str, runner: SubscriberRunner) -> None:
        logger.info(f"Starting user runner for '{name}'")
        try:
            await runner.start()
        except asyncio.CancelledError:
            logger.info(f"User runner for '{name}' cancelled")
            raise
        except Exception:
            logger.exception(f"User runner for '{name}' failed")
            return
        logger.info(f"User runner for '{name}' completed")

    async def start(self) -> None:
        """Run every user until ``stop()`` or cancellation, then shut down.

        Raises:
            ShutdownTimeoutError: runners did not finish within the bound.
            asyncio.CancelledError: the calling task was cancelled; raised
                after the runners shut down.
        """

        logger.info(f"Starting search runner with {len(self._runners)} users")

        tasks = {
            asyncio.create_task(
                self._supervise(name, runner), name=f"user-runner:{name}"
            ): name
            for name, runner in self._runners.items()
        }

        cancelled: asyncio.CancelledError | None = None
        try:
            await self._stop_event.wait()
            logger.info("Search runner received stop signal")
        except asyncio.CancelledError as e:
            logger.info("Search runner cancelled")
            cancelled = e

        for name, runner in self._runners.items():
            logger.info(f"Stopping user runner for '{name}'")
            runner.stop()

        _, pending = await asyncio.wait(tasks, timeout=self._shutdown_timeout)
        if pending:
            stuck = sorted(tasks[task] for task in pending)
            logger.warning(
                f"Timeout waiting for user runners to complete: {', '.join(stuck)}"
            )
            for task in pending:
                task.cancel()
            # In-flight passes are not cancelled with them and end on their own
            await asyncio.wait(pending)
            raise ShutdownTimeoutError(
                f"timeout after {self._shutdown_timeout}s waiting for user runners "
                f"to complete: {', '.join(stuck)}"
            )

        logger.info("All user runners stopped")
        if cancelled is not None:
            raise cancelled

    async def _run_single(
        self, name: str, runner: SubscriberRunner
    ) -> tuple[str, Exception | None]:
        logger.info(f"Running single search for user '{name}'")
        try:
            await runner.run_once()
        except Exception as e:
            logger.error(f"Single search failed for user '{name}': {e}")
            return name, e
        logger.info(f"Single search completed for user '{name}'")
        return name, None

    async def run_once_all(self) -> dict[str, Exception | None]:
        """Run one pass per user concurrently and report each user's error.

        The returned mapping is ordered by completion.
        """

        logger.info(f"Running single search for {len(self._runners)} users")

        tasks = [
            asyncio.create_task(
                self._run_single(name, runner), name=f"single-search:{name}"
            )
            for name, runner in self._runners.items()
        ]

        results: dict[str, Exception | None] = {}
        try:
            for next_done in asyncio.as_completed(tasks):
                name, error = await next_done
                results[name] = error
        except asyncio.CancelledError:
            for task in tasks:
                task.cancel()
            await asyncio.wait(tasks)
            raise

        logger.info("All user searches completed")
        return results

    async def run_once(self) -> None:
        """Run one pass per user and wait for all of them.

        Raises:
            Exception: the error of the last user to fail, after every user
                finished. Earlier failures are only logged.
        """

        last_error: Exception | None = None
        for error in (await self.run_once_all()).values():
            if error is not None:
                last_error = error

        if last_error is not None:
            raise last_error
