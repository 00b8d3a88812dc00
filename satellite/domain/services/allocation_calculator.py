"""
ALLOCATION CALCULATOR
Budget -> tier targets -> goal shares, plus P/L and progress figures

RULES:
❌ No I/O, no persisted state
❌ No exceptions for bad numbers, they degrade to 0
✅ Decimal arithmetic, ROUND_HALF_UP
✅ Goal shares rounded to whole shares, never negative
"""

from decimal import Decimal, DecimalException
from typing import Dict, Iterable, List, Mapping, Optional

from satellite.domain.models import Formation, Holding, PortfolioSummary, TierAllocation
from satellite.domain.rounding import (
    HUNDRED,
    Number,
    ratio_percentage,
    round2,
    round_int,
    to_decimal,
)


def goal_shares(target_amount: Number, current_price: Number) -> int:
    """
    Shares needed to deploy target_amount at current_price

    Returns 0 when the price is not positive.
    """
    price = to_decimal(current_price)
    if price <= 0:
        return 0
    try:
        return max(0, round_int(to_decimal(target_amount) / price))
    except DecimalException:
        return 0


def investment_amount(shares: Number, price: Number) -> Decimal:
    return to_decimal(shares) * to_decimal(price)


def current_value(shares: Number, current_price: Number) -> Decimal:
    return investment_amount(shares, current_price)


def profit_loss(hold_shares: Number, entry_price: Number, current_price: Number) -> Decimal:
    shares = to_decimal(hold_shares)
    return shares * to_decimal(current_price) - shares * to_decimal(entry_price)


def profit_loss_percentage(entry_price: Number, current_price: Number) -> Decimal:
    entry = to_decimal(entry_price)
    if entry <= 0:
        return Decimal('0.00')
    return round2((to_decimal(current_price) - entry) / entry * HUNDRED)


def tier_progress(target_amount: Number, invested_amount: Number) -> Decimal:
    """Invested share of a tier target in percent, capped at 100"""
    if to_decimal(target_amount) <= 0:
        return Decimal('0.00')
    return min(Decimal('100.00'), ratio_percentage(invested_amount, target_amount))


def return_percentage(profit: Number, start: Number) -> Decimal:
    return ratio_percentage(profit, start)


def tier_target_amount(total_funds: Number, percentage: Number) -> Decimal:
    return to_decimal(total_funds) * to_decimal(percentage) / HUNDRED


def tier_target_amounts(total_funds: Number, formation: Formation) -> List[Decimal]:
    """Target amount for every tier of a formation, in tier order"""
    return [tier_target_amount(total_funds, pct) for pct in formation.percentages]


def additional_investment_needed(target_amount: Number, current_invested: Number) -> Decimal:
    needed = to_decimal(target_amount) - to_decimal(current_invested)
    return max(Decimal('0'), needed)


def annual_return(initial_amount: Number, current_amount: Number, years: Number) -> Decimal:
    """
    Compound annual return in percent

    ((current / initial) ** (1 / years) - 1) * 100
    """
    initial = to_decimal(initial_amount)
    span = to_decimal(years)
    if initial <= 0 or span <= 0:
        return Decimal('0.00')

    ratio = to_decimal(current_amount) / initial
    if ratio <= 0:
        return Decimal('-100.00')
    try:
        return round2((ratio ** (Decimal('1') / span) - 1) * HUNDRED)
    except DecimalException:
        return Decimal('0.00')


def _price_for(holding: Holding, prices: Optional[Mapping[str, Number]]) -> Decimal:
    """Current price of a holding, falling back to its entry price"""
    if prices:
        price = prices.get(holding.ticker)
        if price is not None and to_decimal(price) > 0:
            return to_decimal(price)
    return to_decimal(holding.entry_price)


def tier_invested(holdings: Iterable[Holding]) -> Decimal:
    return sum(
        (investment_amount(h.hold_shares, h.entry_price) for h in holdings),
        Decimal('0'),
    )


def tier_current_value(
    holdings: Iterable[Holding],
    prices: Optional[Mapping[str, Number]] = None
) -> Decimal:
    return sum(
        (current_value(h.hold_shares, _price_for(h, prices)) for h in holdings),
        Decimal('0'),
    )


def tier_profit_loss(
    holdings: Iterable[Holding],
    prices: Optional[Mapping[str, Number]] = None
) -> Decimal:
    return sum(
        (profit_loss(h.hold_shares, h.entry_price, _price_for(h, prices)) for h in holdings),
        Decimal('0'),
    )


def build_tier_allocations(
    formation: Formation,
    total_funds: Number,
    holdings: Iterable[Holding],
    prices: Optional[Mapping[str, Number]] = None
) -> List[TierAllocation]:
    """
    Derive per-tier targets and invested figures for a formation

    Args:
        formation: Active formation
        total_funds: Budget funds
        holdings: All recorded holdings (any tier)
        prices: Optional ticker -> current price

    Returns:
        One TierAllocation per formation tier, in tier order.
        Holdings assigned to tiers the formation does not have are ignored.
    """
    by_tier: Dict[int, List[Holding]] = {}
    for holding in holdings:
        by_tier.setdefault(holding.tier, []).append(holding)

    tiers = []
    for index, percentage in enumerate(formation.percentages, start=1):
        tier_holdings = by_tier.get(index, [])
        target = tier_target_amount(total_funds, percentage)
        invested = tier_invested(tier_holdings)
        tiers.append(TierAllocation(
            tier=index,
            percentage=percentage,
            target_amount=target,
            invested_amount=invested,
            current_value=tier_current_value(tier_holdings, prices),
            profit_loss=tier_profit_loss(tier_holdings, prices),
            progress=tier_progress(target, invested),
            holdings=tier_holdings,
        ))
    return tiers


def portfolio_summary(tiers: Iterable[TierAllocation], total_funds: Number) -> PortfolioSummary:
    """Totals across all tiers"""
    tiers = list(tiers)
    funds = to_decimal(total_funds)

    total_invested = sum((t.invested_amount for t in tiers), Decimal('0'))
    total_value = sum((t.current_value for t in tiers), Decimal('0'))
    total_pl = sum((t.profit_loss for t in tiers), Decimal('0'))

    return PortfolioSummary(
        total_invested=round2(total_invested),
        total_current_value=round2(total_value),
        total_profit_loss=round2(total_pl),
        total_profit_loss_percentage=(
            return_percentage(total_pl, total_invested) if total_invested > 0 else Decimal('0.00')
        ),
        remaining_funds=round2(funds - total_invested),
        investment_progress=round_int(total_invested / funds * HUNDRED) if funds > 0 else 0,
    )


def split_goal_shares(
    tier_target: Number,
    holdings_in_tier: int,
    price: Number
) -> int:
    """
    Goal shares for one holding when a tier target is shared evenly
    between holdings_in_tier positions.
    """
    if holdings_in_tier <= 0:
        return 0
    return goal_shares(to_decimal(tier_target) / Decimal(holdings_in_tier), price)
