"""
Formation History Repository
Insert-only transition log - NO UPDATES, NO DELETES
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from satellite.domain.models import FormationHistory
from satellite.infrastructure.db.errors import wrap_repository_errors
from satellite.infrastructure.db.models import FormationHistoryModel


class FormationHistoryRepository:
    """Repository for FormationHistory"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @wrap_repository_errors
    async def append(self, entry: FormationHistory) -> FormationHistory:
        model = FormationHistoryModel(
            id=entry.id,
            from_formation_id=entry.from_formation_id,
            to_formation_id=entry.to_formation_id,
            changed_at=entry.changed_at,
            reason=entry.reason
        )
        self.session.add(model)
        await self.session.flush()
        return entry

    @wrap_repository_errors
    async def get_most_recent(self) -> Optional[FormationHistory]:
        """
        Get the latest transition

        Returns:
            FormationHistory with the greatest changed_at or None
        """
        result = await self.session.execute(
            select(FormationHistoryModel).order_by(FormationHistoryModel.changed_at.desc()).limit(1)
        )
        return self._to_domain(result.scalar_one_or_none())

    @wrap_repository_errors
    async def get_all(self, limit: int = 100) -> List[FormationHistory]:
        """Transitions newest first"""
        result = await self.session.execute(
            select(FormationHistoryModel).order_by(FormationHistoryModel.changed_at.desc()).limit(limit)
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    @staticmethod
    def _to_domain(model: Optional[FormationHistoryModel]) -> Optional[FormationHistory]:
        if model is None:
            return None

        return FormationHistory(
            id=model.id,
            from_formation_id=model.from_formation_id,
            to_formation_id=model.to_formation_id,
            changed_at=model.changed_at,
            reason=model.reason
        )
