"""
Unit Tests for FormationUsageTracker

✅ First activation
✅ Existing record + cohort day increments
✅ Bootstrap of new formations at the largest total_days
✅ Counter invariants over many days
✅ recalculate_all repairs drifted percentages
"""

import pytest
from datetime import datetime, timedelta
from decimal import Decimal

from satellite.domain.models import FormationUsage
from satellite.domain.services.formation_usage_tracker import (
    FormationUsageTracker,
    usage_percentage,
)
from satellite.infrastructure.memory.repositories import MemoryFormationUsageRepository
from satellite.infrastructure.memory.store import MemoryStore

NOW = datetime(2026, 3, 10, 5, 0, 0)

A = "formation-3-50-30-20"
B = "formation-4-40-30-20-10"
C = "formation-5-30-25-20-15-10"


def usage(formation_id, count, days, pct=None):
    return FormationUsage(
        id=f"usage-{formation_id}",
        formation_id=formation_id,
        usage_count=count,
        total_days=days,
        usage_percentage=pct if pct is not None else usage_percentage(count, days),
        last_used_date=NOW - timedelta(days=1),
        created_at=NOW - timedelta(days=days),
    )


@pytest.fixture
def repo():
    return MemoryFormationUsageRepository(MemoryStore())


@pytest.fixture
def tracker(repo):
    return FormationUsageTracker(repo)


@pytest.mark.asyncio
async def test_first_activation_creates_full_usage(tracker, repo):
    activated = await tracker.activate(A, NOW)

    assert activated.usage_count == 1
    assert activated.total_days == 1
    assert activated.usage_percentage == Decimal("100.00")
    assert activated.last_used_date == NOW
    assert await repo.get_for_formation(A) == activated


@pytest.mark.asyncio
async def test_activation_increments_active_and_ages_others(tracker, repo):
    await repo.save(usage(A, 5, 10))
    await repo.save(usage(B, 3, 10))

    activated = await tracker.activate(A, NOW)

    assert (activated.usage_count, activated.total_days) == (6, 11)
    assert activated.usage_percentage == Decimal("54.55")

    other = await repo.get_for_formation(B)
    assert (other.usage_count, other.total_days) == (3, 11)
    assert other.usage_percentage == Decimal("27.27")
    # Only the active formation is stamped
    assert other.last_used_date == NOW - timedelta(days=1)


@pytest.mark.asyncio
async def test_new_formation_joins_at_largest_total_days(tracker, repo):
    await repo.save(usage(A, 5, 10))
    await repo.save(usage(B, 2, 4))

    activated = await tracker.activate(C, NOW)

    assert (activated.usage_count, activated.total_days) == (1, 10)
    assert activated.usage_percentage == Decimal("10.00")
    assert activated.id.startswith(f"usage-{C}-")

    assert (await repo.get_for_formation(A)).total_days == 11
    assert (await repo.get_for_formation(B)).total_days == 5


@pytest.mark.asyncio
async def test_counters_stay_consistent_over_many_days(tracker, repo):
    sequence = [A, A, B, A, C, C, B, A, A, B, C, A]

    for day, formation_id in enumerate(sequence):
        await tracker.activate(formation_id, NOW + timedelta(days=day))

    records = await repo.get_all()
    assert {r.formation_id for r in records} == {A, B, C}
    for record in records:
        assert 0 < record.usage_count <= record.total_days
        assert record.usage_percentage == usage_percentage(record.usage_count, record.total_days)

    assert (await repo.get_for_formation(A)).usage_count == sequence.count(A)
    assert records[0].formation_id == A  # newest last_used_date first


@pytest.mark.asyncio
async def test_counters_never_decrease(tracker, repo):
    await tracker.activate(A, NOW)
    before = {r.formation_id: (r.usage_count, r.total_days) for r in await repo.get_all()}

    await tracker.activate(B, NOW + timedelta(days=1))

    for record in await repo.get_all():
        if record.formation_id in before:
            count, days = before[record.formation_id]
            assert record.usage_count >= count
            assert record.total_days >= days


@pytest.mark.asyncio
async def test_recalculate_all_repairs_drift(tracker, repo):
    await repo.save(usage(A, 6, 11, pct=Decimal("50.00")))
    await repo.save(usage(B, 3, 11))

    records = await tracker.recalculate_all()

    by_id = {r.formation_id: r for r in records}
    assert by_id[A].usage_percentage == Decimal("54.55")
    assert by_id[B].usage_percentage == Decimal("27.27")
    assert (await repo.get_for_formation(A)).usage_percentage == Decimal("54.55")


@pytest.mark.asyncio
async def test_recalculate_all_is_idempotent_and_skips_empty_records(tracker, repo):
    await repo.save(usage(A, 0, 0, pct=Decimal("0.00")))
    await repo.save(usage(B, 3, 11))

    first = await tracker.recalculate_all()
    second = await tracker.recalculate_all()

    assert first == second
    assert (await repo.get_for_formation(A)).total_days == 0
