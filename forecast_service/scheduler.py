"""Daily retention janitor: removes forecasts for days that have passed."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, time, timedelta
from typing import Awaitable, Callable, Optional

from sqlalchemy.orm import sessionmaker

from .service import ForecastService

logger = logging.getLogger(__name__)


def seconds_until_next_run(now: datetime) -> float:
    """Seconds from `now` until the next local midnight."""
    next_midnight = datetime.combine(now.date() + timedelta(days=1), time.min)
    return (next_midnight - now).total_seconds()


class CleanupScheduler:
    """Runs ForecastService.cleanup at startup (via run_once) and every midnight."""

    def __init__(
        self,
        session_factory: sessionmaker,
        now: Callable[[], datetime] = datetime.now,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.session_factory = session_factory
        self.now = now
        self.sleep = sleep
        self._task: Optional[asyncio.Task] = None

    def run_once(self, label: str = "Scheduled") -> int:
        with self.session_factory() as db:
            deleted = ForecastService(db, now=self.now).cleanup()
        logger.info("%s cleanup completed: %d old weather records deleted", label, deleted)
        return deleted

    async def run_forever(self) -> None:
        while True:
            delay = seconds_until_next_run(self.now())
            logger.debug("Next cleanup in %.0fs", delay)
            await self.sleep(delay)
            try:
                # Sync SQLAlchemy work; keep it off the event loop.
                await asyncio.to_thread(self.run_once)
            except Exception:
                # Keep the janitor alive; tomorrow's run retries.
                logger.exception("Scheduled cleanup failed")

    def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self.run_forever())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None
