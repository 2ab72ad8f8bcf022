"""Interval refresh loop for re-fetching and re-aggregating reports.

Each refresh is isolated: an exception is logged and counted, and the next
interval still fires. The loop stops after ``max_runs`` refreshes, or after
``max_consecutive_failures`` failures in a row when that limit is set.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

from apscheduler.schedulers import SchedulerNotRunningError
from apscheduler.schedulers.base import BaseScheduler
from apscheduler.schedulers.blocking import BlockingScheduler

logger = logging.getLogger(__name__)


@dataclass
class RefreshOptions:
    interval_minutes: int
    max_runs: int | None = None
    max_consecutive_failures: int | None = None


@dataclass
class RefreshStats:
    runs: int = 0
    failures: int = 0
    consecutive_failures: int = 0
    last_error: str | None = None

    def should_stop(self, options: RefreshOptions) -> bool:
        if options.max_runs is not None and self.runs >= options.max_runs:
            return True
        limit = options.max_consecutive_failures
        return limit is not None and self.consecutive_failures >= limit


def run_refresh(refresh: Callable[[], None], stats: RefreshStats) -> bool:
    """Run one refresh, recording the outcome on ``stats``. Never raises."""
    stats.runs += 1
    try:
        refresh()
    except Exception as exc:
        stats.failures += 1
        stats.consecutive_failures += 1
        stats.last_error = str(exc)
        logger.error("Refresh %d failed: %s", stats.runs, exc)
        logger.debug("Refresh traceback", exc_info=True)
        return False
    stats.consecutive_failures = 0
    return True


def start_refresh_loop(
    refresh: Callable[[], None],
    options: RefreshOptions,
    scheduler_factory: Callable[[], BaseScheduler] = BlockingScheduler,
) -> RefreshStats:
    stats = RefreshStats()
    run_refresh(refresh, stats)
    if stats.should_stop(options):
        return stats

    scheduler = scheduler_factory()

    def refresh_job() -> None:
        run_refresh(refresh, stats)
        if stats.should_stop(options):
            logger.info("Stopping refresh loop after %d runs (%d failed)", stats.runs, stats.failures)
            try:
                scheduler.shutdown(wait=False)
            except SchedulerNotRunningError:
                pass

    scheduler.add_job(refresh_job, "interval", minutes=options.interval_minutes, id="emergency_refresh")
    scheduler.start()
    return stats
