"""Midnight and periodic invalidation of derived event state."""

import logging
from typing import Callable

from apscheduler.schedulers.base import BaseScheduler
from apscheduler.triggers.date import DateTrigger
from apscheduler.triggers.interval import IntervalTrigger

from .core.days import next_midnight
from .ports.clock import Clock, SystemClock
from .ports.event_store import EventStore, StoreError

logger = logging.getLogger(__name__)

MIDNIGHT_JOB_ID = "midnight_refresh"
PERIODIC_JOB_ID = "periodic_refresh"
DEFAULT_INTERVAL_SECONDS = 60


class RefreshCoordinator:
    """
    Drops every event's cached countdown when the day rolls over.

    Two scheduler jobs feed the same action: a one-shot job at the next local
    midnight that re-arms itself after firing, and a fixed-interval tick.
    Both fetch the events from the store, clear their caches, then call
    `on_refresh` so the caller can re-render.
    """

    def __init__(
        self,
        store: EventStore,
        scheduler: BaseScheduler,
        clock: Clock | None = None,
        interval_seconds: int = DEFAULT_INTERVAL_SECONDS,
        on_refresh: Callable[[], None] | None = None,
    ):
        self.store = store
        self.scheduler = scheduler
        self.clock = clock or SystemClock()
        self.interval_seconds = interval_seconds
        self.on_refresh = on_refresh
        self._running = False

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Schedule the midnight and periodic jobs."""
        self.schedule_midnight()
        self.scheduler.add_job(
            self._on_tick,
            IntervalTrigger(seconds=self.interval_seconds),
            id=PERIODIC_JOB_ID,
            replace_existing=True,
            coalesce=True,
        )
        self._running = True
        logger.info(f"Refresh scheduled every {self.interval_seconds}s and at midnight")

    def stop(self) -> None:
        """Remove both jobs. The scheduler itself is left to its owner."""
        for job_id in (MIDNIGHT_JOB_ID, PERIODIC_JOB_ID):
            if self.scheduler.get_job(job_id) is not None:
                self.scheduler.remove_job(job_id)
        self._running = False
        logger.info("Refresh stopped")

    def schedule_midnight(self) -> None:
        """(Re)arm the one-shot midnight job, replacing any pending one."""
        run_at = next_midnight(self.clock.now())
        self.scheduler.add_job(
            self._on_midnight,
            DateTrigger(run_date=run_at),
            id=MIDNIGHT_JOB_ID,
            replace_existing=True,
            misfire_grace_time=None,
        )
        logger.debug(f"Next midnight refresh at {run_at.isoformat()}")

    def invalidate_all(self, force: bool = False) -> int:
        """
        Clear the cache of every stored event, then notify `on_refresh`.

        Returns the number of events invalidated. A store that cannot be read
        is logged and skipped.
        """
        try:
            events = self.store.fetch_all()
        except StoreError as e:
            logger.error(f"Cannot refresh events: {e}")
            return 0

        for event in events:
            if force:
                event.force_refresh()
            else:
                event.reset_cache()

        if self.on_refresh is not None:
            self.on_refresh()
        return len(events)

    def _on_midnight(self) -> None:
        try:
            count = self.invalidate_all(force=True)
            logger.info(f"Midnight refresh: {count} events invalidated")
        finally:
            self.schedule_midnight()

    def _on_tick(self) -> None:
        self.invalidate_all()
