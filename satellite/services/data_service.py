"""
SERVICE - ALLOCATION DATA (full read / full save)

• Budget upsert
• Formation selection
• Holdings full-replace with goal shares derived per tier
• Default initialization

Usage counting and formation history belong to DailyCheckOrchestrator.
"""

import logging
import uuid
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Protocol

from satellite.domain.constants import (
    DEFAULT_FORMATION_ID,
    DEFAULT_FUNDS,
    DEFAULT_PROFIT,
    DEFAULT_START,
    FORMATIONS,
    MAX_AMOUNT,
    MAX_PRICE,
    MAX_SHARES,
    get_formation,
    is_valid_ticker,
)
from satellite.domain.exceptions import ValidationError
from satellite.domain.models import (
    Budget,
    Formation,
    FormationUsage,
    Holding,
    PortfolioSummary,
    TierAllocation,
    UserSettings,
)
from satellite.domain.services.allocation_calculator import (
    build_tier_allocations,
    portfolio_summary,
    split_goal_shares,
    tier_target_amount,
)
from satellite.domain.services.daily_check import SettingsRepository
from satellite.domain.services.formation_usage_tracker import (
    FormationUsageRepository,
    FormationUsageTracker,
)
from satellite.domain.rounding import round_price

logger = logging.getLogger(__name__)


class BudgetRepository(Protocol):
    """Protocol for budget data access - ASYNC"""

    async def get(self) -> Optional[Budget]:
        ...

    async def upsert(self, **fields) -> Budget:
        ...


class HoldingRepository(Protocol):
    """Protocol for holding data access - ASYNC"""

    async def get_all(self) -> List[Holding]:
        ...

    async def upsert(self, holding: Holding) -> Holding:
        ...

    async def delete(self, holding_id: str) -> None:
        ...

    async def clear_all(self) -> None:
        ...


@dataclass
class HoldingInput:
    """One holding as submitted by the client"""
    ticker: str
    tier: int
    entry_price: Decimal
    hold_shares: int
    goal_shares: Optional[int] = None
    id: Optional[str] = None


@dataclass
class AllData:
    """Full read model"""
    settings: Optional[UserSettings]
    budget: Optional[Budget]
    holdings: List[Holding]
    formations: List[Formation]
    usage_stats: List[FormationUsage]
    tiers: List[TierAllocation]
    summary: Optional[PortfolioSummary]


class DataService:
    """Use cases behind /api/data"""

    def __init__(
        self,
        settings_repo: SettingsRepository,
        budget_repo: BudgetRepository,
        holding_repo: HoldingRepository,
        usage_repo: FormationUsageRepository
    ):
        self.settings_repo = settings_repo
        self.budget_repo = budget_repo
        self.holding_repo = holding_repo
        self.usage_repo = usage_repo

    async def get_all_data(self) -> AllData:
        """
        Read everything the client renders

        Tier allocations and the portfolio summary are only derived once
        both settings and budget exist.
        """
        settings = await self.settings_repo.get()
        budget = await self.budget_repo.get()
        holdings = await self.holding_repo.get_all()
        usage_stats = await self.usage_repo.get_all()

        tiers: List[TierAllocation] = []
        summary = None
        if settings is not None and budget is not None:
            formation = get_formation(settings.current_formation_id)
            if formation is not None:
                tiers = build_tier_allocations(formation, budget.funds, holdings)
                summary = portfolio_summary(tiers, budget.funds)
            else:
                logger.warning(
                    f"Stored formation {settings.current_formation_id} is not in the catalog"
                )

        return AllData(
            settings=settings,
            budget=budget,
            holdings=holdings,
            formations=list(FORMATIONS),
            usage_stats=usage_stats,
            tiers=tiers,
            summary=summary,
        )

    async def save_data(
        self,
        budget: Optional[Dict[str, Decimal]] = None,
        formation_id: Optional[str] = None,
        auto_check_enabled: Optional[bool] = None,
        holdings: Optional[List[HoldingInput]] = None
    ) -> AllData:
        """
        Apply a full save

        Args:
            budget: Partial budget fields (funds, start, profit)
            formation_id: New current formation
            auto_check_enabled: Scheduler toggle
            holdings: Replacement holdings list (None leaves holdings untouched)

        Returns:
            AllData after the save

        Raises:
            ValidationError: Unknown formation, ticker, tier or bad numbers
        """
        if formation_id is not None:
            formation = get_formation(formation_id)
            if formation is None:
                raise ValidationError(
                    f"Invalid formation id: {formation_id}",
                    field="formation_id",
                    code="INVALID_FORMATION",
                )
        else:
            formation = await self._current_formation()

        # Validate everything before the first write
        if budget:
            for key, value in budget.items():
                self._validate_amount(key, value)

        if holdings is not None:
            for index, item in enumerate(holdings):
                self._validate_holding(index, item, formation)
        elif formation_id is not None:
            await self._check_stored_tiers(formation)

        if budget:
            saved_budget = await self.budget_repo.upsert(**budget)
            logger.info(
                f"Budget saved: funds={saved_budget.funds} start={saved_budget.start} "
                f"profit={saved_budget.profit}"
            )

        if formation_id is not None or auto_check_enabled is not None:
            saved_settings = await self.settings_repo.upsert(
                current_formation_id=formation_id,
                auto_check_enabled=auto_check_enabled,
            )
            logger.info(f"Settings saved: formation={saved_settings.current_formation_id}")

        if holdings is not None:
            await self._replace_holdings(holdings, formation)

        return await self.get_all_data()

    async def initialize_defaults(self) -> AllData:
        """Create settings and budget with defaults when absent (idempotent)"""
        if await self.settings_repo.get() is None:
            await self.settings_repo.upsert(
                current_formation_id=DEFAULT_FORMATION_ID,
                auto_check_enabled=True,
            )
            logger.info("Default settings created")

        if await self.budget_repo.get() is None:
            await self.budget_repo.upsert(
                funds=DEFAULT_FUNDS,
                start=DEFAULT_START,
                profit=DEFAULT_PROFIT,
            )
            logger.info("Default budget created")

        return await self.get_all_data()

    async def recalculate_usage(self) -> List[FormationUsage]:
        """Recompute usage percentages from stored counters"""
        return await FormationUsageTracker(self.usage_repo).recalculate_all()

    async def _current_formation(self) -> Formation:
        settings = await self.settings_repo.get()
        formation = get_formation(settings.current_formation_id) if settings else None
        return formation or get_formation(DEFAULT_FORMATION_ID)

    async def _replace_holdings(
        self,
        holdings: List[HoldingInput],
        formation: Formation
    ) -> List[Holding]:
        budget = await self.budget_repo.get()
        funds = budget.funds if budget else DEFAULT_FUNDS

        per_tier: Dict[int, int] = {}
        for item in holdings:
            per_tier[item.tier] = per_tier.get(item.tier, 0) + 1

        await self.holding_repo.clear_all()

        saved = []
        for item in holdings:
            price = round_price(item.entry_price)
            if item.goal_shares is not None:
                goal = item.goal_shares
            else:
                target = tier_target_amount(funds, formation.percentage_for_tier(item.tier))
                goal = split_goal_shares(target, per_tier[item.tier], price)

            saved.append(await self.holding_repo.upsert(Holding(
                id=item.id or f"holding-{uuid.uuid4().hex}",
                ticker=item.ticker.upper(),
                tier=item.tier,
                entry_price=price,
                hold_shares=item.hold_shares,
                goal_shares=goal,
            )))

        logger.info(f"Holdings replaced: {len(saved)} positions on {formation.id}")
        return saved

    @staticmethod
    def _validate_holding(index: int, item: HoldingInput, formation: Formation) -> None:
        prefix = f"holdings[{index}]"

        if not is_valid_ticker(item.ticker):
            raise ValidationError(
                f"{prefix}: invalid ticker symbol: {item.ticker}", field=f"{prefix}.ticker"
            )
        if not 1 <= item.tier <= formation.tier_count:
            raise ValidationError(
                f"{prefix}: tier must be between 1 and {formation.tier_count} for {formation.id}",
                field=f"{prefix}.tier",
            )
        price = round_price(item.entry_price)
        if price <= 0 or price > MAX_PRICE:
            raise ValidationError(
                f"{prefix}: entry price must be positive and at most {MAX_PRICE}",
                field=f"{prefix}.entry_price",
            )
        if not 0 <= item.hold_shares <= MAX_SHARES:
            raise ValidationError(
                f"{prefix}: held shares must be between 0 and {MAX_SHARES}",
                field=f"{prefix}.hold_shares",
            )
        if item.goal_shares is not None and not 0 <= item.goal_shares <= MAX_SHARES:
            raise ValidationError(
                f"{prefix}: goal shares must be between 0 and {MAX_SHARES}",
                field=f"{prefix}.goal_shares",
            )

    @staticmethod
    def _validate_amount(key: str, value) -> None:
        if value is None:
            return
        try:
            amount = value if isinstance(value, Decimal) else Decimal(str(value))
        except InvalidOperation:
            amount = None

        if amount is None or not amount.is_finite() or abs(amount) > MAX_AMOUNT:
            raise ValidationError(
                f"budget.{key} must be a finite amount up to {MAX_AMOUNT}", field=f"budget.{key}"
            )
        if key != "profit" and amount < 0:
            raise ValidationError(f"budget.{key} cannot be negative", field=f"budget.{key}")

    async def _check_stored_tiers(self, formation: Formation) -> None:
        """Stored holdings must fit a newly selected formation"""
        stranded = sorted({
            h.tier for h in await self.holding_repo.get_all() if h.tier > formation.tier_count
        })
        if stranded:
            raise ValidationError(
                f"Holdings in tiers {stranded} do not exist in {formation.id}; "
                f"send holdings that fit the new formation",
                field="formation_id",
            )
