"""
DAILY CHECK ORCHESTRATOR
Once-per-calendar-day formation check

FLOW:
1. Load settings (NotInitializedError if missing)
2. Same UTC day as last_check_date -> no-op
3. Compare the formation recorded in history with the current one
4. Append history on change (or the first baseline record)
5. Activate the current formation in the usage tracker
6. Stamp last_check_date

RULES:
❌ No retries, no partial rollback (the unit of work owns the transaction)
✅ Idempotent within a calendar day
✅ Usage counted on every new day, history only on change
"""

import logging
import uuid
from datetime import datetime
from typing import Optional, Protocol

from satellite.domain.constants import DAILY_CHECK_REASON, INITIAL_HISTORY_REASON
from satellite.domain.exceptions import NotInitializedError
from satellite.domain.models import CheckResult, FormationHistory, UserSettings
from satellite.domain.services.formation_usage_tracker import FormationUsageTracker
from satellite.utils.time import to_utc_naive, utc_date, utc_now

logger = logging.getLogger(__name__)


class SettingsRepository(Protocol):
    """Protocol for settings data access - ASYNC"""

    async def get(self, for_update: bool = False) -> Optional[UserSettings]:
        """Current settings row, optionally locked until commit"""
        ...

    async def upsert(self, **fields) -> UserSettings:
        """Patch the settings row, creating it when absent"""
        ...


class FormationHistoryRepository(Protocol):
    """Protocol for formation history data access - ASYNC"""

    async def get_most_recent(self) -> Optional[FormationHistory]:
        """Latest transition by changed_at"""
        ...

    async def append(self, entry: FormationHistory) -> FormationHistory:
        """Insert a transition"""
        ...


class DailyCheckOrchestrator:
    """
    Daily Check Orchestrator
    Two states per calendar day: unchecked -> checked
    """

    def __init__(
        self,
        settings_repo: SettingsRepository,
        history_repo: FormationHistoryRepository,
        usage_tracker: FormationUsageTracker
    ):
        """Initialize with repository dependencies"""
        self.settings_repo = settings_repo
        self.history_repo = history_repo
        self.usage_tracker = usage_tracker

    async def check_and_update(self, now: Optional[datetime] = None) -> CheckResult:
        """
        Run the daily check

        Args:
            now: Check timestamp (default: utcnow)

        Returns:
            CheckResult

        Raises:
            NotInitializedError: If settings were never created
            RepositoryError: On any storage failure
        """
        now = to_utc_naive(now) if now else utc_now()

        settings = await self.settings_repo.get(for_update=True)
        if settings is None:
            raise NotInitializedError(
                "Settings not found. Initialize settings and budget first.",
                resource="settings",
            )

        current_formation_id = settings.current_formation_id

        if utc_date(settings.last_check_date) == utc_date(now):
            logger.info(f"Daily check already ran on {utc_date(now)}, skipping")
            return CheckResult(
                has_changed=False,
                previous_formation_id=None,
                current_formation_id=current_formation_id,
            )

        latest = await self.history_repo.get_most_recent()
        previous_formation_id = latest.to_formation_id if latest else None

        has_changed = (
            previous_formation_id is not None
            and previous_formation_id != current_formation_id
        )

        if has_changed:
            await self.history_repo.append(self._history_entry(
                previous_formation_id, current_formation_id, now, DAILY_CHECK_REASON
            ))
            logger.info(
                f"Formation change detected: {previous_formation_id} -> {current_formation_id}"
            )
        elif latest is None:
            await self.history_repo.append(self._history_entry(
                None, current_formation_id, now, INITIAL_HISTORY_REASON
            ))
            logger.info(f"Recorded initial formation {current_formation_id}")

        updated_usage = await self.usage_tracker.activate(current_formation_id, now)

        await self.settings_repo.upsert(last_check_date=now)

        return CheckResult(
            has_changed=has_changed,
            previous_formation_id=previous_formation_id,
            current_formation_id=current_formation_id,
            updated_usage=updated_usage,
            checked_at=now,
        )

    @staticmethod
    def _history_entry(
        from_formation_id: Optional[str],
        to_formation_id: str,
        changed_at: datetime,
        reason: str
    ) -> FormationHistory:
        return FormationHistory(
            id=f"history-{uuid.uuid4().hex}",
            from_formation_id=from_formation_id,
            to_formation_id=to_formation_id,
            changed_at=changed_at,
            reason=reason,
        )
