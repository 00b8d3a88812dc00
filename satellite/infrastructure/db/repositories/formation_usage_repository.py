"""
Formation Usage Repository
One row per formation, keyed by formation_id
"""

from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List, Optional

from satellite.domain.models import FormationUsage
from satellite.infrastructure.db.errors import wrap_repository_errors
from satellite.infrastructure.db.models import FormationUsageModel


class FormationUsageRepository:
    """Repository for FormationUsage"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @wrap_repository_errors
    async def get_all(self) -> List[FormationUsage]:
        """
        Get all usage records

        Returns:
            Records ordered by last_used_date, newest first
        """
        result = await self.session.execute(
            select(FormationUsageModel).order_by(FormationUsageModel.last_used_date.desc())
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    @wrap_repository_errors
    async def get_for_formation(self, formation_id: str) -> Optional[FormationUsage]:
        model = await self._get_model(formation_id)
        return self._to_domain(model)

    @wrap_repository_errors
    async def save(self, usage: FormationUsage) -> FormationUsage:
        """
        Insert or update the record of usage.formation_id

        Args:
            usage: FormationUsage with counters already computed

        Returns:
            Stored FormationUsage
        """
        model = await self._get_model(usage.formation_id)

        if model is None:
            model = FormationUsageModel(
                id=usage.id,
                formation_id=usage.formation_id,
                created_at=usage.created_at,
            )
            self.session.add(model)

        model.usage_count = usage.usage_count
        model.total_days = usage.total_days
        model.usage_percentage = usage.usage_percentage
        model.last_used_date = usage.last_used_date

        await self.session.flush()
        return self._to_domain(model)

    async def _get_model(self, formation_id: str) -> Optional[FormationUsageModel]:
        result = await self.session.execute(
            select(FormationUsageModel).where(FormationUsageModel.formation_id == formation_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: Optional[FormationUsageModel]) -> Optional[FormationUsage]:
        if model is None:
            return None

        return FormationUsage(
            id=model.id,
            formation_id=model.formation_id,
            usage_count=model.usage_count,
            total_days=model.total_days,
            usage_percentage=Decimal(str(model.usage_percentage)).quantize(Decimal('0.01')),
            last_used_date=model.last_used_date,
            created_at=model.created_at
        )
