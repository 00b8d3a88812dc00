"""
Domain Models - Entities
Pure domain objects with no infrastructure dependencies
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from satellite.domain.rounding import ratio_percentage


@dataclass(frozen=True)
class Formation:
    """Formation Definition - Immutable catalog entry"""
    id: str
    name: str
    tier_count: int
    percentages: Tuple[Decimal, ...]
    description: str = ""

    def __post_init__(self):
        if not self.id:
            raise ValueError("Formation id cannot be empty")
        if not 1 <= self.tier_count <= 5:
            raise ValueError("Formation must have between 1 and 5 tiers")
        if len(self.percentages) != self.tier_count:
            raise ValueError("Formation needs one percentage per tier")
        if any(p <= Decimal('0') for p in self.percentages):
            raise ValueError("Tier percentages must be positive")
        if sum(self.percentages) > Decimal('100'):
            raise ValueError("Tier percentages cannot exceed 100 in total")

    def percentage_for_tier(self, tier: int) -> Decimal:
        """Percentage for a 1-based tier number"""
        return self.percentages[tier - 1]


@dataclass(frozen=True)
class TickerInfo:
    """Allowed ticker - Immutable"""
    ticker: str
    name: str
    sector: str


@dataclass(frozen=True)
class UserSettings:
    """Singleton application settings row"""
    id: str
    current_formation_id: str
    last_check_date: datetime
    auto_check_enabled: bool
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class Budget:
    """Singleton budget row"""
    id: str
    funds: Decimal
    start: Decimal
    profit: Decimal
    updated_at: datetime

    @property
    def return_percentage(self) -> Decimal:
        """profit / start * 100, 0 when there is no principal"""
        return ratio_percentage(self.profit, self.start)


@dataclass(frozen=True)
class Holding:
    """Recorded stock position inside a tier"""
    id: str
    ticker: str
    tier: int
    entry_price: Decimal
    hold_shares: int
    goal_shares: int
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if self.hold_shares < 0:
            raise ValueError("Held shares cannot be negative")
        if self.goal_shares < 0:
            raise ValueError("Goal shares cannot be negative")


@dataclass(frozen=True)
class FormationUsage:
    """Running usage counters for one formation"""
    id: str
    formation_id: str
    usage_count: int
    total_days: int
    usage_percentage: Decimal
    last_used_date: datetime
    created_at: datetime

    def with_counts(self, usage_count: int, total_days: int, **changes) -> "FormationUsage":
        """Copy with new counters and a recomputed percentage"""
        return replace(
            self,
            usage_count=usage_count,
            total_days=total_days,
            usage_percentage=ratio_percentage(usage_count, total_days),
            **changes,
        )


@dataclass(frozen=True)
class FormationHistory:
    """Append-only formation transition"""
    id: str
    from_formation_id: Optional[str]
    to_formation_id: str
    changed_at: datetime
    reason: Optional[str] = None


@dataclass(frozen=True)
class CheckResult:
    """Outcome of one daily check"""
    has_changed: bool
    previous_formation_id: Optional[str]
    current_formation_id: str
    updated_usage: Optional[FormationUsage] = None
    checked_at: Optional[datetime] = None

    @property
    def skipped(self) -> bool:
        """True when the check had already run today"""
        return self.updated_usage is None


@dataclass(frozen=True)
class TierAllocation:
    """Derived state of one formation tier"""
    tier: int
    percentage: Decimal
    target_amount: Decimal
    invested_amount: Decimal
    current_value: Decimal
    profit_loss: Decimal
    progress: Decimal
    holdings: List[Holding] = field(default_factory=list)

    @property
    def additional_investment_needed(self) -> Decimal:
        return max(self.target_amount - self.invested_amount, Decimal('0'))


@dataclass(frozen=True)
class PortfolioSummary:
    """Portfolio-wide totals"""
    total_invested: Decimal
    total_current_value: Decimal
    total_profit_loss: Decimal
    total_profit_loss_percentage: Decimal
    remaining_funds: Decimal
    investment_progress: int
