"""
Budget Repository
Singleton budget row, upserted and never deleted
"""

import uuid
from decimal import Decimal
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from satellite.domain.constants import DEFAULT_FUNDS, DEFAULT_PROFIT, DEFAULT_START
from satellite.domain.models import Budget
from satellite.infrastructure.db.errors import wrap_repository_errors
from satellite.infrastructure.db.models import BudgetModel
from satellite.utils.time import utc_now

_FIELDS = ("funds", "start", "profit")


class BudgetRepository:
    """Repository for the budget singleton"""

    def __init__(self, session: AsyncSession):
        self.session = session

    @wrap_repository_errors
    async def get(self) -> Optional[Budget]:
        model = await self._get_model()
        return self._to_domain(model)

    @wrap_repository_errors
    async def upsert(self, **fields) -> Budget:
        """
        Patch budget fields, creating the row with defaults when absent

        Args:
            funds: Total capital
            start: Principal baseline
            profit: Realized profit

        Returns:
            Stored Budget
        """
        unknown = set(fields) - set(_FIELDS)
        if unknown:
            raise TypeError(f"Unknown budget fields: {sorted(unknown)}")

        values = {k: Decimal(str(v)) for k, v in fields.items() if v is not None}
        now = utc_now()

        model = await self._get_model()
        if model is None:
            model = BudgetModel(
                id=f"budget-{uuid.uuid4().hex}",
                funds=values.get("funds", DEFAULT_FUNDS),
                start=values.get("start", DEFAULT_START),
                profit=values.get("profit", DEFAULT_PROFIT),
                updated_at=now,
            )
            self.session.add(model)
        else:
            for key, value in values.items():
                setattr(model, key, value)
            model.updated_at = now

        await self.session.flush()
        return self._to_domain(model)

    async def _get_model(self) -> Optional[BudgetModel]:
        result = await self.session.execute(
            select(BudgetModel).order_by(BudgetModel.updated_at.desc()).limit(1)
        )
        return result.scalar_one_or_none()

    @staticmethod
    def _to_domain(model: Optional[BudgetModel]) -> Optional[Budget]:
        if model is None:
            return None

        return Budget(
            id=model.id,
            funds=Decimal(str(model.funds)),
            start=Decimal(str(model.start)),
            profit=Decimal(str(model.profit)),
            updated_at=model.updated_at
        )
