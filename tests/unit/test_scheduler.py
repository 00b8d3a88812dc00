from datetime import timedelta

import pytest

from satellite.infrastructure.memory.repositories import MemorySettingsRepository
from satellite.infrastructure.memory.store import MemoryStore
from satellite.scheduler.main import DailyCheckScheduler, parse_check_time
from satellite.utils.time import utc_now


def test_parse_check_time():
    assert parse_check_time("05:00") == (5, 0)
    assert parse_check_time(" 23:59 ") == (23, 59)


@pytest.mark.parametrize("value", ["5", "24:00", "12:60", "ab:cd", ""])
def test_parse_check_time_rejects_garbage(value):
    with pytest.raises(ValueError):
        parse_check_time(value)


def test_scheduler_uses_configured_time():
    scheduler = DailyCheckScheduler(memory_store=MemoryStore(), check_time="06:30", timezone="UTC")
    assert (scheduler.hour, scheduler.minute) == (6, 30)
    assert scheduler.running is False


@pytest.mark.asyncio
async def test_job_skips_without_settings():
    store = MemoryStore()

    await DailyCheckScheduler(memory_store=store).daily_check_job()

    assert store.usage == {}


@pytest.mark.asyncio
async def test_job_respects_auto_check_flag():
    store = MemoryStore()
    await MemorySettingsRepository(store).upsert(
        auto_check_enabled=False, last_check_date=utc_now() - timedelta(days=1)
    )

    await DailyCheckScheduler(memory_store=store).daily_check_job()

    assert store.usage == {}
    assert store.history == []


@pytest.mark.asyncio
async def test_job_runs_daily_check():
    store = MemoryStore()
    await MemorySettingsRepository(store).upsert(last_check_date=utc_now() - timedelta(days=1))

    await DailyCheckScheduler(memory_store=store).daily_check_job()

    assert store.usage["formation-3-50-30-20"].usage_count == 1
    assert len(store.history) == 1
    assert not store.lock.locked()
