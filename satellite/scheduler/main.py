"""
Scheduler
Runs the daily formation check once per day (APScheduler cron job)
"""

import asyncio
import logging
from typing import Optional, Tuple

import pytz
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from satellite.config import settings
from satellite.domain.services.daily_check import DailyCheckOrchestrator
from satellite.domain.services.formation_usage_tracker import FormationUsageTracker
from satellite.infrastructure.memory.store import MemoryStore
from satellite.infrastructure.unit_of_work import unit_of_work

logger = logging.getLogger(__name__)


def parse_check_time(value: str) -> Tuple[int, int]:
    """
    Parse "HH:MM"

    Raises:
        ValueError: If the value is not a valid 24h time
    """
    try:
        hour_str, minute_str = value.strip().split(":")
        hour, minute = int(hour_str), int(minute_str)
    except ValueError:
        raise ValueError(f"Invalid DAILY_CHECK_TIME {value!r}, expected HH:MM")

    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise ValueError(f"Invalid DAILY_CHECK_TIME {value!r}, expected HH:MM")
    return hour, minute


class DailyCheckScheduler:
    """
    Daily Check Scheduler
    One cron job; respects settings.auto_check_enabled at run time
    """

    def __init__(
        self,
        memory_store: Optional[MemoryStore] = None,
        check_time: Optional[str] = None,
        timezone: Optional[str] = None,
        lock: Optional[asyncio.Lock] = None
    ):
        """
        Args:
            memory_store: Run against the memory backend instead of the database
            check_time: "HH:MM" (default: DAILY_CHECK_TIME)
            timezone: Cron timezone (default: TIMEZONE)
            lock: Daily check lock shared with POST /api/cron in the same process
        """
        self.memory_store = memory_store
        self.lock = lock or asyncio.Lock()
        self.hour, self.minute = parse_check_time(check_time or settings.DAILY_CHECK_TIME)
        self.timezone = pytz.timezone(timezone or settings.TIMEZONE)
        self.scheduler = AsyncIOScheduler(timezone=self.timezone)

    @property
    def running(self) -> bool:
        return bool(self.scheduler.running)

    async def daily_check_job(self) -> None:
        """Run one daily check inside its own unit of work"""
        logger.info("Starting daily check job")

        try:
            async with self.lock, unit_of_work(self.memory_store) as repos:
                current = await repos.settings.get()
                if current is None:
                    logger.warning("Daily check skipped: settings not initialized")
                    return
                if not current.auto_check_enabled:
                    logger.info("Daily check skipped: auto check disabled")
                    return

                orchestrator = DailyCheckOrchestrator(
                    settings_repo=repos.settings,
                    history_repo=repos.history,
                    usage_tracker=FormationUsageTracker(repos.usage),
                )
                result = await orchestrator.check_and_update()
        except Exception as e:
            logger.error(f"Daily check job failed: {e}", exc_info=True)
            return

        if result.skipped:
            logger.info("Daily check already ran today")
        else:
            usage = result.updated_usage
            logger.info(
                f"Daily check complete: {result.current_formation_id} "
                f"changed={result.has_changed} usage={usage.usage_count}/{usage.total_days}"
            )

    def start(self) -> None:
        """Register the cron job and start the scheduler"""
        self.scheduler.add_job(
            self.daily_check_job,
            CronTrigger(hour=self.hour, minute=self.minute, timezone=self.timezone),
            id="daily_check",
            name="Daily Formation Check",
            replace_existing=True,
            coalesce=True,
            max_instances=1,
        )
        self.scheduler.start()

        for job in self.scheduler.get_jobs():
            logger.info(f"Scheduled job: {job.name} (trigger: {job.trigger})")

    def stop(self) -> None:
        """Stop the scheduler"""
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
        logger.info("Scheduler stopped")


async def main():
    """Run the scheduler standalone"""
    from satellite.core.logging import setup_logging

    setup_logging(settings.LOG_LEVEL)
    scheduler = DailyCheckScheduler()
    scheduler.start()

    try:
        while True:
            await asyncio.sleep(3600)
    except (KeyboardInterrupt, asyncio.CancelledError):
        scheduler.stop()


if __name__ == "__main__":
    asyncio.run(main())
