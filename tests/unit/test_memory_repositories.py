"""
Unit Tests for the in-memory repositories
"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal

from satellite.domain.models import FormationHistory, Holding
from satellite.infrastructure.memory.repositories import (
    MemoryBudgetRepository,
    MemoryFormationHistoryRepository,
    MemoryHoldingRepository,
    MemorySettingsRepository,
)
from satellite.infrastructure.memory.store import MemoryStore


def holding(holding_id, ticker, tier):
    return Holding(
        id=holding_id,
        ticker=ticker,
        tier=tier,
        entry_price=Decimal("100"),
        hold_shares=1,
        goal_shares=10,
    )


@pytest.fixture
def store():
    return MemoryStore()


@pytest.mark.asyncio
async def test_settings_created_with_defaults(store):
    repo = MemorySettingsRepository(store)
    assert await repo.get() is None

    created = await repo.upsert(auto_check_enabled=False)

    assert created.current_formation_id == "formation-3-50-30-20"
    assert created.auto_check_enabled is False
    assert created.last_check_date is not None


@pytest.mark.asyncio
async def test_settings_patch_keeps_identity(store):
    repo = MemorySettingsRepository(store)
    created = await repo.upsert()

    patched = await repo.upsert(current_formation_id="formation-4-40-30-20-10")

    assert patched.id == created.id
    assert patched.created_at == created.created_at
    assert patched.auto_check_enabled is True
    assert patched.current_formation_id == "formation-4-40-30-20-10"


@pytest.mark.asyncio
async def test_settings_reject_unknown_fields(store):
    with pytest.raises(TypeError):
        await MemorySettingsRepository(store).upsert(colour="blue")


@pytest.mark.asyncio
async def test_budget_defaults_fill_absent_fields(store):
    repo = MemoryBudgetRepository(store)

    budget = await repo.upsert(funds=8000)

    assert budget.funds == Decimal("8000")
    assert budget.start == Decimal("6000")
    assert budget.profit == Decimal("0")

    updated = await repo.upsert(profit=-150)
    assert updated.id == budget.id
    assert updated.funds == Decimal("8000")
    assert updated.profit == Decimal("-150")


@pytest.mark.asyncio
async def test_holdings_ordered_by_tier_then_ticker(store):
    repo = MemoryHoldingRepository(store)
    await repo.upsert(holding("h1", "TSLA", 2))
    await repo.upsert(holding("h2", "NVDA", 1))
    await repo.upsert(holding("h3", "AMZN", 2))

    assert [h.ticker for h in await repo.get_all()] == ["NVDA", "AMZN", "TSLA"]


@pytest.mark.asyncio
async def test_holdings_full_replace(store):
    repo = MemoryHoldingRepository(store)
    for item in [holding("h1", "TSLA", 1), holding("h2", "NVDA", 2), holding("h3", "AMZN", 3)]:
        await repo.upsert(item)

    await repo.clear_all()
    await repo.upsert(holding("h2", "META", 1))
    await repo.upsert(holding("h9", "V", 2))

    stored = await repo.get_all()
    assert {h.id for h in stored} == {"h2", "h9"}
    assert next(h for h in stored if h.id == "h2").ticker == "META"


@pytest.mark.asyncio
async def test_holding_delete(store):
    repo = MemoryHoldingRepository(store)
    await repo.upsert(holding("h1", "TSLA", 1))

    await repo.delete("h1")
    await repo.delete("missing")

    assert await repo.get_all() == []


@pytest.mark.asyncio
async def test_history_most_recent(store):
    repo = MemoryFormationHistoryRepository(store)
    assert await repo.get_most_recent() is None

    base = datetime(2026, 3, 1)
    await repo.append(FormationHistory("h-2", "a", "b", base + timedelta(days=2)))
    await repo.append(FormationHistory("h-1", None, "a", base))

    latest = await repo.get_most_recent()
    assert latest.id == "h-2"
    assert [h.id for h in await repo.get_all()] == ["h-2", "h-1"]
