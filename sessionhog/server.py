"""Process entry points for the synthetic-traffic service.

``sessionhog`` runs the always-on service: HTTP routes plus calendar
triggers. ``sessionhog-once`` runs a single batch and exits, for use from
an external cron.
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys

from aiohttp.web import AppRunner, TCPSite

from .config import LOG_LEVEL, ConfigError, Settings, load_settings
from .models.session import BatchResult
from .session_manager.batch import BatchRunner
from .session_manager.manager import create_app
from .session_manager.provider import BrowserbaseClient, ProviderError
from .session_manager.scheduler import Scheduler

logger = logging.getLogger("sessionhog")


def configure_logging():
    logging.basicConfig(
        stream=sys.stderr,
        level=LOG_LEVEL,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )


def _load_settings_or_exit() -> Settings:
    try:
        return load_settings()
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        sys.exit(1)


def _provider(settings: Settings) -> BrowserbaseClient:
    return BrowserbaseClient(settings.browserbase_api_key, settings.browserbase_project_id)


async def serve(settings: Settings) -> int:
    """Run the service until SIGINT/SIGTERM. Returns the process exit code."""
    async with _provider(settings) as provider:
        try:
            await provider.verify()
        except ProviderError as e:
            logger.error(f"Failed to connect to Browserbase: {e}")
            return 1

        runner = BatchRunner(provider, settings.base_domain)
        scheduler = Scheduler(runner, settings.tz)

        app_runner = AppRunner(create_app(runner, settings))
        await app_runner.setup()
        try:
            site = TCPSite(app_runner, settings.host, settings.port)
            await site.start()
            logger.info(f"Server listening on port {settings.port}")
            logger.info(f"Base domain: {settings.base_domain} (timezone {settings.timezone})")

            scheduler.start()

            stop = asyncio.Event()
            loop = asyncio.get_running_loop()
            for sig in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(sig, stop.set)

            await stop.wait()
            logger.info("Shutdown requested")
            await scheduler.stop()
            await runner.drain()
        finally:
            await scheduler.stop()
            await app_runner.cleanup()
            logger.info("Sessions server stopped.")

    return 0


async def run_batch_once(settings: Settings) -> int:
    async with _provider(settings) as provider:
        try:
            await provider.verify()
        except ProviderError as e:
            logger.error(f"Failed to connect to Browserbase: {e}")
            return 1

        result = await BatchRunner(provider, settings.base_domain).run("one-shot")

    logger.info(f"One-shot batch finished: {result.value}")
    return 0 if result is BatchResult.COMPLETED else 1


def main():
    """Run the sessions service."""
    configure_logging()
    settings = _load_settings_or_exit()
    sys.exit(asyncio.run(serve(settings)))


def run_once():
    """Run one batch of sessions and exit."""
    configure_logging()
    settings = _load_settings_or_exit()
    sys.exit(asyncio.run(run_batch_once(settings)))


if __name__ == "__main__":
    main()
