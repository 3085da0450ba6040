"""Command-line entrypoint: search continuously or once, then exit."""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from dataclasses import dataclass
from typing import cast

from liquor_radar import __version__
from liquor_radar.config import AppConfig, format_duration, load_app_config
from liquor_radar.errors import ConfigurationError, LiquorRadarError
from liquor_radar.runner.orchestrator import SearchOrchestrator

logger = logging.getLogger("liquor_radar")


@dataclass(frozen=True)
class CliArgs:
    config_file: str | None
    debug: bool
    once: bool


def _parse_args(argv: list[str] | None = None) -> CliArgs:
    parser = argparse.ArgumentParser(
        prog="liquor-radar",
        description="Oregon liquor search notification service.",
    )
    _ = parser.add_argument(
        "-c",
        "--config",
        dest="config_file",
        default=None,
        help="Config file path (default: ./config.yaml if present).",
    )
    _ = parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug-level logging.",
    )
    _ = parser.add_argument(
        "-o",
        "--once",
        action="store_true",
        help="Run search once and exit.",
    )
    _ = parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parsed = parser.parse_args(argv)
    return CliArgs(
        config_file=cast(str | None, parsed.config_file),
        debug=cast(bool, parsed.debug),
        once=cast(bool, parsed.once),
    )


def _configure_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def log_configuration_summary(config: AppConfig) -> None:
    subscribers = config.subscribers

    if len(subscribers) == 1:
        user = subscribers[0]
        logger.info(f"Configuration loaded: Single user '{user.name}'")
        logger.info(f"  - Items: {len(user.items)}")
        logger.info(f"  - Location: {user.zipcode} (within {user.distance} miles)")
        logger.info(f"  - Notifications: {len(user.notifications)} configured")
        for index, notification in enumerate(user.notifications, start=1):
            style = "condensed" if notification.condense else "individual"
            logger.info(
                f"  - Notification {index} ({notification.type}): {style} messages"
            )
    else:
        logger.info(
            f"Configuration loaded: Multi-user setup with {len(subscribers)} users"
        )
        for index, user in enumerate(subscribers, start=1):
            logger.info(
                f"  User {index}: '{user.name}' - {len(user.items)} items, "
                f"{user.zipcode} ({user.distance} miles), "
                f"{len(user.notifications)} notifications"
            )

    logger.info(
        f"Global settings: interval={format_duration(config.interval)}, "
        f"verbose={config.verbose}"
    )
    if config.user_agent:
        logger.info(f"Using custom user agent: {config.user_agent}")


async def run(config: AppConfig, *, once: bool) -> None:
    """Run the orchestrator until it finishes or a termination signal arrives."""

    orchestrator = SearchOrchestrator(config)

    loop = asyncio.get_running_loop()
    current = asyncio.current_task()

    def _on_signal() -> None:
        logger.info("Received termination signal, shutting down...")
        orchestrator.stop()
        if once and current is not None:
            current.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, _on_signal)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            pass

    try:
        if once:
            logger.info("Running single search for all configured users")
            await orchestrator.run_once()
            logger.info("Single search completed successfully")
        else:
            logger.info(
                f"Starting continuous search for {orchestrator.subscriber_count()} "
                f"users with interval {format_duration(config.interval)}"
            )
            await orchestrator.start()
            logger.info("Continuous search completed")
    finally:
        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.remove_signal_handler(sig)
            except NotImplementedError:
                pass


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    _configure_logging(args.debug)

    try:
        config = load_app_config(args.config_file)
    except ConfigurationError as e:
        logger.error(f"Failed to load configuration: {e}")
        return 1

    if args.config_file:
        logger.info(f"Using config file: {args.config_file}")
    if config.verbose and not args.debug:
        logging.getLogger().setLevel(logging.DEBUG)
        logger.debug("Debug logging enabled via configuration")

    log_configuration_summary(config)

    try:
        asyncio.run(run(config, once=args.once))
    except ConfigurationError as e:
        logger.error(f"Failed to create runner: {e}")
        return 1
    except LiquorRadarError as e:
        logger.error(f"Search run failed: {e}")
        return 1
    except asyncio.CancelledError:
        logger.info("Search run cancelled")
        return 1
    except KeyboardInterrupt:
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
