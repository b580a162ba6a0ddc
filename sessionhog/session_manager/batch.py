"""Sequential batches of scripted journeys with a single-flight guard."""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Awaitable, Callable, Optional, Union

from ..config import (
    INTER_SESSION_DELAY_MS,
    SESSION_COUNT_MAX,
    SESSION_COUNT_MIN,
    SHUTDOWN_DRAIN_SECONDS,
    SHUTDOWN_POLL_SECONDS,
)
from ..models.session import BatchResult, JobStats, RunError
from .journey import run_session
from .provider import BrowserbaseClient

logger = logging.getLogger(__name__)

SessionFn = Callable[[int, int, BrowserbaseClient, str], Awaitable[bool]]


class BatchController:
    """Owns the run lock and the stats of the current or last batch.

    Only the batch runner mutates it. ``try_start`` must be called before
    the first await of a batch so two triggers can never both see it idle.
    """

    def __init__(self):
        self._running = False
        self._stats: Optional[JobStats] = None

    @property
    def is_running(self) -> bool:
        return self._running

    def try_start(self, total_sessions: int, trigger: str) -> bool:
        if self._running:
            return False
        self._running = True
        self._stats = JobStats(total_sessions=total_sessions, trigger=trigger)
        return True

    def record_success(self):
        self._stats.completed_sessions += 1

    def record_error(self, session: Union[int, str], message: str):
        self._stats.errors.append(RunError(session=session, error=message))

    def finish(self):
        self._running = False

    def snapshot(self) -> Optional[dict]:
        if self._stats is None:
            return None
        return self._stats.model_dump(by_alias=True)


def random_session_count() -> int:
    return random.randint(SESSION_COUNT_MIN, SESSION_COUNT_MAX)


class BatchRunner:
    """Runs batches of sessions one after another."""

    def __init__(
        self,
        provider: BrowserbaseClient,
        base_domain: str,
        controller: Optional[BatchController] = None,
        session_fn: SessionFn = run_session,
        delay_range_ms: tuple[int, int] = INTER_SESSION_DELAY_MS,
    ):
        self.provider = provider
        self.base_domain = base_domain
        self.controller = controller or BatchController()
        self._session_fn = session_fn
        self._delay_range_ms = delay_range_ms
        self._tasks: set[asyncio.Task] = set()

    def _claim(self, trigger: str, session_count: Optional[int]) -> Optional[int]:
        count = session_count or random_session_count()
        if not self.controller.try_start(count, trigger):
            logger.info(f"Another job is already running. Skipping this {trigger} execution.")
            return None
        return count

    async def run(self, trigger: str, session_count: Optional[int] = None) -> BatchResult:
        """Run a batch to completion in the calling task."""
        count = self._claim(trigger, session_count)
        if count is None:
            return BatchResult.SKIPPED
        return await self._execute(trigger, count)

    def launch(self, trigger: str, session_count: Optional[int] = None) -> Optional[asyncio.Task]:
        """Claim the run lock now and run the batch in a background task.

        Returns None when another batch holds the lock.
        """
        count = self._claim(trigger, session_count)
        if count is None:
            return None
        task = asyncio.create_task(self._execute(trigger, count))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _execute(self, trigger: str, count: int) -> BatchResult:
        try:
            logger.info(f"Starting {trigger} batch of {count} sessions...")
            successes = 0
            for i in range(1, count + 1):
                try:
                    if await self._session_fn(i, count, self.provider, self.base_domain):
                        successes += 1
                        self.controller.record_success()
                except Exception as e:
                    logger.error(f"Session {i} raised past its own handler: {e}")
                    self.controller.record_error(i, str(e))

                delay_ms = random.randint(*self._delay_range_ms)
                await asyncio.sleep(delay_ms / 1000)

            logger.info(f"Completed {successes}/{count} sessions successfully")
            return BatchResult.COMPLETED

        except Exception as e:
            logger.exception(f"Error in {trigger} batch: {e}")
            self.controller.record_error("global", str(e))
            return BatchResult.FAILED

        finally:
            self.controller.finish()

    async def drain(
        self,
        timeout: float = SHUTDOWN_DRAIN_SECONDS,
        poll_interval: float = SHUTDOWN_POLL_SECONDS,
    ) -> bool:
        """Wait for an in-flight batch to finish, up to ``timeout`` seconds.

        Returns True if no batch is running when it returns.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while self.controller.is_running:
            remaining = deadline - loop.time()
            if remaining <= 0:
                logger.warning("Batch still running after drain timeout, shutting down anyway")
                return False
            logger.info("Waiting for the running batch to finish before shutdown...")
            await asyncio.sleep(min(poll_interval, remaining))
        return True
