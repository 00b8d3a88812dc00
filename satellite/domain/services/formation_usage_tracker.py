"""
FORMATION USAGE TRACKER
Running usage / elapsed-day counters per formation

RESPONSIBILITIES:
- Count the days each formation was the active one
- Keep every record's total_days moving with the calendar
- Keep usage_percentage = round2(usage_count / total_days * 100)

RULES:
❌ No change detection here (see DailyCheckOrchestrator)
✅ Counters only ever grow
✅ usage_count <= total_days for every record
✅ New formations join the cohort at the largest existing total_days
"""

import logging
import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Protocol

from satellite.domain.models import FormationUsage
from satellite.domain.rounding import ratio_percentage
from satellite.utils.time import to_utc_naive, utc_now

logger = logging.getLogger(__name__)


class FormationUsageRepository(Protocol):
    """Protocol for formation usage data access - ASYNC"""

    async def get_all(self) -> List[FormationUsage]:
        """All usage records"""
        ...

    async def get_for_formation(self, formation_id: str) -> Optional[FormationUsage]:
        """Usage record of one formation"""
        ...

    async def save(self, usage: FormationUsage) -> FormationUsage:
        """Insert or update a record keyed by formation_id"""
        ...


def usage_percentage(usage_count: int, total_days: int) -> Decimal:
    """round2(usage_count / total_days * 100), 0 for empty records"""
    return ratio_percentage(usage_count, total_days)


class FormationUsageTracker:
    """
    Formation Usage Tracker
    Owns the one usage-counting algorithm
    """

    def __init__(self, usage_repo: FormationUsageRepository):
        """Initialize with repository dependency"""
        self.usage_repo = usage_repo

    async def activate(
        self,
        formation_id: str,
        now: Optional[datetime] = None
    ) -> FormationUsage:
        """
        Count one more day for formation_id and one more elapsed day for
        every other tracked formation.

        Call at most once per calendar day.

        Args:
            formation_id: Formation that is current at check time
            now: Check timestamp (default: utcnow)

        Returns:
            The activated FormationUsage
        """
        now = to_utc_naive(now) if now else utc_now()
        records = await self.usage_repo.get_all()
        existing = next((r for r in records if r.formation_id == formation_id), None)

        if existing is not None:
            activated = existing.with_counts(
                usage_count=existing.usage_count + 1,
                total_days=existing.total_days + 1,
                last_used_date=now,
            )
        else:
            # Join the existing cohort rather than starting from zero
            global_total_days = max((r.total_days for r in records), default=1)
            activated = FormationUsage(
                id=f"usage-{formation_id}-{uuid.uuid4().hex[:12]}",
                formation_id=formation_id,
                usage_count=1,
                total_days=global_total_days,
                usage_percentage=usage_percentage(1, global_total_days),
                last_used_date=now,
                created_at=now,
            )
            logger.info(
                f"New usage record for {formation_id} (total_days={global_total_days})"
            )

        activated = await self.usage_repo.save(activated)

        for record in records:
            if record.formation_id == formation_id:
                continue
            await self.usage_repo.save(
                record.with_counts(
                    usage_count=record.usage_count,
                    total_days=record.total_days + 1,
                )
            )

        logger.info(
            f"Activated {formation_id}: {activated.usage_count}/{activated.total_days} "
            f"days ({activated.usage_percentage}%)"
        )
        return activated

    async def recalculate_all(self) -> List[FormationUsage]:
        """
        Recompute every usage_percentage from stored counters.
        Idempotent maintenance operation.

        Returns:
            All records after recalculation
        """
        updated = []
        for record in await self.usage_repo.get_all():
            if record.total_days <= 0:
                updated.append(record)
                continue

            expected = usage_percentage(record.usage_count, record.total_days)
            if expected != record.usage_percentage:
                logger.warning(
                    f"Usage drift for {record.formation_id}: "
                    f"{record.usage_percentage} -> {expected}"
                )
                record = await self.usage_repo.save(
                    record.with_counts(record.usage_count, record.total_days)
                )
            updated.append(record)

        return updated
