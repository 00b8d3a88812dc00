"""
Holding Repository
Upsert by id, full replace via clear_all + upsert
"""

from dataclasses import replace
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from typing import List, Optional

from satellite.domain.models import Holding
from satellite.infrastructure.db.errors import wrap_repository_errors
from satellite.infrastructure.db.models import HoldingModel
from satellite.utils.time import utc_now


class HoldingRepository:
    """Repository for Holding"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @wrap_repository_errors
    async def get_all(self) -> List[Holding]:
        """
        Get all holdings

        Returns:
            Holdings ordered by tier, then ticker
        """
        result = await self.session.execute(
            select(HoldingModel).order_by(HoldingModel.tier.asc(), HoldingModel.ticker.asc())
        )
        return [self._to_domain(m) for m in result.scalars().all()]

    @wrap_repository_errors
    async def upsert(self, holding: Holding) -> Holding:
        """
        Insert or update a holding keyed by id

        Args:
            holding: Holding domain object

        Returns:
            Stored Holding with a fresh updated_at
        """
        stored = replace(holding, updated_at=utc_now())
        model = await self.session.get(HoldingModel, holding.id)

        if model is None:
            model = HoldingModel(id=stored.id)
            self.session.add(model)

        model.ticker = stored.ticker
        model.tier = stored.tier
        model.entry_price = stored.entry_price
        model.hold_shares = stored.hold_shares
        model.goal_shares = stored.goal_shares
        model.updated_at = stored.updated_at

        await self.session.flush()
        return stored

    @wrap_repository_errors
    async def delete(self, holding_id: str) -> None:
        await self.session.execute(delete(HoldingModel).where(HoldingModel.id == holding_id))
        await self.session.flush()

    @wrap_repository_errors
    async def clear_all(self) -> None:
        """Delete every holding"""
        await self.session.execute(delete(HoldingModel))
        await self.session.flush()
        # Drop stale identities so re-inserted ids are not matched against deleted rows
        self.session.expunge_all()

    @staticmethod
    def _to_domain(model: Optional[HoldingModel]) -> Optional[Holding]:
        if model is None:
            return None

        return Holding(
            id=model.id,
            ticker=model.ticker,
            tier=model.tier,
            entry_price=Decimal(str(model.entry_price)),
            hold_shares=model.hold_shares,
            goal_shares=model.goal_shares,
            updated_at=model.updated_at
        )
