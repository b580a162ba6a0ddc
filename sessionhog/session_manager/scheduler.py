"""Calendar triggers that start scheduled batches in a fixed time zone."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timedelta, timezone
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from ..constants import SCHEDULES
from .batch import BatchRunner

logger = logging.getLogger(__name__)


class CalendarTrigger:
    """Fires at fixed local times on a set of weekdays (Monday == 0)."""

    def __init__(self, weekdays: Iterable[int], times: Iterable[str]):
        self.weekdays = frozenset(weekdays)
        self.times = sorted(time.fromisoformat(t) for t in times)
        if not self.weekdays or not self.times:
            raise ValueError("A calendar trigger needs at least one weekday and one time")

    def next_after(self, now: datetime) -> datetime:
        """The first firing strictly after ``now``, in ``now``'s time zone."""
        tz = now.tzinfo
        for offset in range(8):
            day = now.date() + timedelta(days=offset)
            if day.weekday() not in self.weekdays:
                continue
            for at in self.times:
                candidate = datetime.combine(day, at, tzinfo=tz)
                if candidate > now:
                    return candidate
        raise AssertionError("unreachable: every weekday recurs within 8 days")

    def __repr__(self):
        times = ",".join(t.strftime("%H:%M") for t in self.times)
        return f"CalendarTrigger(weekdays={sorted(self.weekdays)}, times={times})"


def default_triggers() -> list[CalendarTrigger]:
    return [CalendarTrigger(days, times) for days, times in SCHEDULES]


class Scheduler:
    """Sleeps until the next calendar firing and launches a batch."""

    def __init__(
        self,
        runner: BatchRunner,
        tz: ZoneInfo,
        triggers: Optional[list[CalendarTrigger]] = None,
    ):
        self.runner = runner
        self.tz = tz
        self.triggers = triggers or default_triggers()
        self._task: Optional[asyncio.Task] = None

    def next_fire_time(self, now: Optional[datetime] = None) -> datetime:
        now = now or datetime.now(self.tz)
        return min(trigger.next_after(now) for trigger in self.triggers)

    async def _loop(self):
        while True:
            fire_at = self.next_fire_time()
            delay = (fire_at.astimezone(timezone.utc) - datetime.now(timezone.utc)).total_seconds()
            logger.info(f"Next scheduled batch at {fire_at.isoformat()}")
            await asyncio.sleep(max(delay, 0))
            if self.runner.launch("scheduled") is None:
                logger.info("Scheduled batch skipped, a batch is already running")

    def start(self):
        if self._task is None:
            self._task = asyncio.create_task(self._loop())

    async def stop(self):
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
