"""
Tests for DataService

✅ Defaults are created once
✅ Holdings replaced with goal shares derived per tier
✅ Validation happens before any write
"""

import pytest
from decimal import Decimal

from satellite.domain.exceptions import ValidationError
from satellite.infrastructure.memory.store import MemoryStore
from satellite.infrastructure.unit_of_work import memory_repositories
from satellite.services.data_service import DataService, HoldingInput


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def service(store):
    repos = memory_repositories(store)
    return DataService(
        settings_repo=repos.settings,
        budget_repo=repos.budget,
        holding_repo=repos.holdings,
        usage_repo=repos.usage,
    )


class TestInitializeDefaults:

    @pytest.mark.asyncio
    async def test_creates_settings_and_budget(self, service):
        data = await service.initialize_defaults()

        assert data.settings.current_formation_id == "formation-3-50-30-20"
        assert data.budget.funds == Decimal("6000")
        assert data.budget.profit == Decimal("0")
        assert [t.target_amount for t in data.tiers] == [
            Decimal("3000"), Decimal("1800"), Decimal("1200")
        ]
        assert data.summary.remaining_funds == Decimal("6000.00")

    @pytest.mark.asyncio
    async def test_is_idempotent(self, service, store):
        await service.initialize_defaults()
        await service.save_data(budget={"funds": Decimal("9000")})

        data = await service.initialize_defaults()

        assert data.budget.funds == Decimal("9000")


class TestSaveData:

    @pytest.mark.asyncio
    async def test_goal_shares_split_per_tier(self, service):
        await service.initialize_defaults()

        data = await service.save_data(holdings=[
            HoldingInput(ticker="AVGO", tier=2, entry_price=Decimal("300"), hold_shares=1),
            HoldingInput(ticker="CRM", tier=2, entry_price=Decimal("200"), hold_shares=0),
            HoldingInput(ticker="V", tier=1, entry_price=Decimal("250"), hold_shares=2),
        ])

        goals = {h.ticker: h.goal_shares for h in data.holdings}
        # 1800 split over two tier-2 holdings
        assert goals["AVGO"] == 3
        assert goals["CRM"] == 5
        assert goals["V"] == 12

    @pytest.mark.asyncio
    async def test_goal_shares_follow_new_formation_and_funds(self, service):
        await service.initialize_defaults()

        data = await service.save_data(
            budget={"funds": Decimal("10000")},
            formation_id="formation-5-30-25-20-15-10",
            holdings=[HoldingInput(ticker="SNOW", tier=5, entry_price=Decimal("100"), hold_shares=0)],
        )

        assert data.settings.current_formation_id == "formation-5-30-25-20-15-10"
        assert data.holdings[0].goal_shares == 10

    @pytest.mark.asyncio
    async def test_none_leaves_holdings_untouched(self, service, store):
        await service.initialize_defaults()
        await service.save_data(holdings=[
            HoldingInput(ticker="V", tier=1, entry_price=Decimal("250"), hold_shares=2, id="keep"),
        ])

        await service.save_data(auto_check_enabled=False)

        assert list(store.holdings) == ["keep"]
        assert store.settings.auto_check_enabled is False

    @pytest.mark.asyncio
    async def test_empty_list_clears_holdings(self, service, store):
        await service.initialize_defaults()
        await service.save_data(holdings=[
            HoldingInput(ticker="V", tier=1, entry_price=Decimal("250"), hold_shares=2),
        ])

        data = await service.save_data(holdings=[])

        assert data.holdings == []
        assert store.holdings == {}

    @pytest.mark.asyncio
    async def test_unknown_formation(self, service, store):
        with pytest.raises(ValidationError) as exc_info:
            await service.save_data(formation_id="formation-1-100")

        assert exc_info.value.code == "INVALID_FORMATION"
        assert store.settings is None

    @pytest.mark.parametrize("item,field", [
        (HoldingInput(ticker="GME", tier=1, entry_price=Decimal("20"), hold_shares=1), "ticker"),
        (HoldingInput(ticker="V", tier=4, entry_price=Decimal("20"), hold_shares=1), "tier"),
        (HoldingInput(ticker="V", tier=1, entry_price=Decimal("0"), hold_shares=1), "entry_price"),
        (HoldingInput(ticker="V", tier=1, entry_price=Decimal("20"), hold_shares=-1), "hold_shares"),
    ])
    @pytest.mark.asyncio
    async def test_invalid_holding_rejected_before_writes(self, service, store, item, field):
        await service.initialize_defaults()
        funds_before = store.budget.funds

        with pytest.raises(ValidationError) as exc_info:
            await service.save_data(budget={"funds": Decimal("1")}, holdings=[item])

        assert exc_info.value.field == f"holdings[0].{field}"
        assert store.budget.funds == funds_before
        assert store.holdings == {}

    @pytest.mark.parametrize("funds", [Decimal("1e27"), Decimal("NaN"), Decimal("Infinity"), Decimal("-1")])
    @pytest.mark.asyncio
    async def test_out_of_range_budget_rejected(self, service, store, funds):
        await service.initialize_defaults()

        with pytest.raises(ValidationError) as exc_info:
            await service.save_data(budget={"funds": funds})

        assert exc_info.value.field == "budget.funds"
        assert store.budget.funds == Decimal("6000")
        data = await service.get_all_data()
        assert data.summary.remaining_funds == Decimal("6000.00")

    @pytest.mark.asyncio
    async def test_entry_price_stored_with_four_decimals(self, service):
        await service.initialize_defaults()

        data = await service.save_data(holdings=[
            HoldingInput(ticker="V", tier=1, entry_price=Decimal("29.850748"), hold_shares=0),
        ])

        # 3000 at the stored 29.8507, not at the submitted price
        assert data.holdings[0].entry_price == Decimal("29.8507")
        assert data.holdings[0].goal_shares == 101


class TestFormationSwitch:

    @pytest.mark.asyncio
    async def test_narrower_formation_rejected_with_stranded_holdings(self, service, store):
        await service.initialize_defaults()
        await service.save_data(
            formation_id="formation-5-30-25-20-15-10",
            holdings=[HoldingInput(ticker="NVDA", tier=5, entry_price=Decimal("100"), hold_shares=1)],
        )

        with pytest.raises(ValidationError) as exc_info:
            await service.save_data(formation_id="formation-3-50-30-20")

        assert exc_info.value.field == "formation_id"
        assert store.settings.current_formation_id == "formation-5-30-25-20-15-10"
        assert [h.tier for h in store.holdings.values()] == [5]

    @pytest.mark.asyncio
    async def test_narrower_formation_allowed_when_holdings_fit(self, service):
        await service.initialize_defaults()
        await service.save_data(
            formation_id="formation-5-30-25-20-15-10",
            holdings=[HoldingInput(ticker="NVDA", tier=2, entry_price=Decimal("100"), hold_shares=1)],
        )

        data = await service.save_data(formation_id="formation-3-50-30-20")

        assert data.settings.current_formation_id == "formation-3-50-30-20"
        assert data.summary.total_invested == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_narrower_formation_with_resent_holdings(self, service):
        await service.initialize_defaults()
        await service.save_data(
            formation_id="formation-5-30-25-20-15-10",
            holdings=[HoldingInput(ticker="NVDA", tier=5, entry_price=Decimal("100"), hold_shares=1)],
        )

        data = await service.save_data(
            formation_id="formation-3-50-30-20",
            holdings=[HoldingInput(ticker="NVDA", tier=3, entry_price=Decimal("100"), hold_shares=1)],
        )

        assert [h.tier for h in data.holdings] == [3]
        assert data.summary.total_invested == Decimal("100.00")


@pytest.mark.asyncio
async def test_get_all_data_without_settings(service):
    data = await service.get_all_data()

    assert data.settings is None
    assert data.tiers == []
    assert data.summary is None
    assert len(data.formations) == 3
