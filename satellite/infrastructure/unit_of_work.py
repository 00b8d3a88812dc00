"""
Unit of work
One SQL transaction (or one hold of the memory store lock) per request / job
"""

from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any, AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from satellite.infrastructure.db import database
from satellite.infrastructure.db.repositories.budget_repository import BudgetRepository
from satellite.infrastructure.db.repositories.formation_history_repository import FormationHistoryRepository
from satellite.infrastructure.db.repositories.formation_usage_repository import FormationUsageRepository
from satellite.infrastructure.db.repositories.holding_repository import HoldingRepository
from satellite.infrastructure.db.repositories.settings_repository import SettingsRepository
from satellite.infrastructure.memory.repositories import (
    MemoryBudgetRepository,
    MemoryFormationHistoryRepository,
    MemoryFormationUsageRepository,
    MemoryHoldingRepository,
    MemorySettingsRepository,
)
from satellite.infrastructure.memory.store import MemoryStore


@dataclass
class Repositories:
    """Every repository of one unit of work"""
    settings: Any
    budget: Any
    holdings: Any
    usage: Any
    history: Any


def sql_repositories(session: AsyncSession) -> Repositories:
    return Repositories(
        settings=SettingsRepository(session),
        budget=BudgetRepository(session),
        holdings=HoldingRepository(session),
        usage=FormationUsageRepository(session),
        history=FormationHistoryRepository(session),
    )


def memory_repositories(store: MemoryStore) -> Repositories:
    return Repositories(
        settings=MemorySettingsRepository(store),
        budget=MemoryBudgetRepository(store),
        holdings=MemoryHoldingRepository(store),
        usage=MemoryFormationUsageRepository(store),
        history=MemoryFormationHistoryRepository(store),
    )


@asynccontextmanager
async def unit_of_work(memory_store: Optional[MemoryStore] = None) -> AsyncIterator[Repositories]:
    """
    Open a unit of work outside a request (scheduler, scripts)

    Args:
        memory_store: Use the memory backend on this store instead of the database
    """
    if memory_store is not None:
        async with memory_store.lock:
            yield memory_repositories(memory_store)
        return

    async with database.async_session_factory() as session:
        try:
            yield sql_repositories(session)
            await session.commit()
        except Exception:
            await session.rollback()
            raise
