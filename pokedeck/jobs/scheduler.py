"""
Daily catalog sync scheduler.

Runs a catalog sync once a day at a fixed UTC time of day, as a
background asyncio task owned by the API process. A run that fails is
logged and the next one is scheduled as usual.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, time, timedelta
from typing import Any

from pokedeck.config import settings
from pokedeck.jobs.sync_cards import run_sync
from pokedeck.sources.pokemon_tcg import PageFilter

logger = logging.getLogger(__name__)

SyncJob = Callable[[], Awaitable[Any]]


def next_run_at(now: datetime, hour: int, minute: int) -> datetime:
    """The next occurrence of hour:minute strictly after `now`."""
    scheduled = datetime.combine(now.date(), time(hour, minute), tzinfo=now.tzinfo)
    if scheduled <= now:
        scheduled += timedelta(days=1)
    return scheduled


def seconds_until(hour: int, minute: int, now: datetime | None = None) -> float:
    """Seconds from `now` (default: current UTC time) to the next hour:minute."""
    now = now or datetime.now(UTC)
    return (next_run_at(now, hour, minute) - now).total_seconds()


async def scheduled_sync() -> Any:
    """The sync run triggered by the schedule."""
    return await run_sync(
        PageFilter.legal_in(settings.scheduled_sync_format),
        settings.scheduled_sync_pages,
    )


class DailySyncScheduler:
    """
    Runs `job` every day at hour:minute UTC.

    Usage:
        scheduler = DailySyncScheduler(hour=3, minute=0)
        scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(
        self,
        hour: int | None = None,
        minute: int | None = None,
        job: SyncJob | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.hour = settings.scheduled_sync_hour if hour is None else hour
        self.minute = settings.scheduled_sync_minute if minute is None else minute
        if not 0 <= self.hour <= 23 or not 0 <= self.minute <= 59:
            raise ValueError(f"Invalid time of day: {self.hour:02d}:{self.minute:02d}")

        self.job = job or scheduled_sync
        self._clock = clock or (lambda: datetime.now(UTC))
        self._sleep = sleep
        self._task: asyncio.Task[None] | None = None
        self.runs = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background loop. Does nothing if already running."""
        if self.running:
            return
        logger.info("Scheduling daily catalog sync at %02d:%02d UTC", self.hour, self.minute)
        self._task = asyncio.create_task(self._loop(), name="daily-catalog-sync")

    async def stop(self) -> None:
        """Cancel the loop and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run_once(self) -> None:
        """Run the job now. Failures are logged, not raised."""
        self.runs += 1
        try:
            result = await self.job()
        except Exception:
            logger.exception("Scheduled catalog sync failed")
            return
        logger.info("Scheduled catalog sync finished: %s", result)

    async def _loop(self) -> None:
        while True:
            delay = seconds_until(self.hour, self.minute, self._clock())
            logger.debug("Next catalog sync in %.0f seconds", delay)
            await self._sleep(delay)
            await self.run_once()
