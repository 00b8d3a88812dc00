"""
Request-scoped repository wiring

"database" -> SQLAlchemy repositories on the request session
"memory"   -> MemoryStore repositories, store lock held for the request
"""

import asyncio
from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from satellite.config import settings
from satellite.domain.services.daily_check import DailyCheckOrchestrator
from satellite.domain.services.formation_usage_tracker import FormationUsageTracker
from satellite.infrastructure.db.database import get_db
from satellite.infrastructure.memory.store import MemoryStore
from satellite.infrastructure.unit_of_work import (
    Repositories,
    memory_repositories,
    sql_repositories,
)
from satellite.services.data_service import DataService


def get_storage_backend(request: Request) -> str:
    return getattr(request.app.state, "storage_backend", settings.STORAGE_BACKEND)


def get_memory_store(request: Request) -> MemoryStore:
    """MemoryStore attached to the application, created on first use"""
    store = getattr(request.app.state, "memory_store", None)
    if store is None:
        store = MemoryStore()
        request.app.state.memory_store = store
    return store


async def get_repositories(
    request: Request,
    db: AsyncSession = Depends(get_db)
) -> AsyncGenerator[Repositories, None]:
    if get_storage_backend(request) == "memory":
        store = get_memory_store(request)
        async with store.lock:
            yield memory_repositories(store)
    else:
        yield sql_repositories(db)


def get_data_service(repos: Repositories = Depends(get_repositories)) -> DataService:
    return DataService(
        settings_repo=repos.settings,
        budget_repo=repos.budget,
        holding_repo=repos.holdings,
        usage_repo=repos.usage,
    )


async def hold_daily_check_lock(request: Request) -> AsyncGenerator[None, None]:
    """One daily check per process at a time, held until the request commits"""
    lock = getattr(request.app.state, "daily_check_lock", None)
    if lock is None:
        lock = asyncio.Lock()
        request.app.state.daily_check_lock = lock
    async with lock:
        yield


# Lock first: it must be released only after the repositories commit
def get_daily_check(
    _lock: None = Depends(hold_daily_check_lock),
    repos: Repositories = Depends(get_repositories)
) -> DailyCheckOrchestrator:
    return DailyCheckOrchestrator(
        settings_repo=repos.settings,
        history_repo=repos.history,
        usage_tracker=FormationUsageTracker(repos.usage),
    )
