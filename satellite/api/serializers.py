"""
Domain -> JSON helpers shared by the routes
Money and percentages go out as floats, timestamps as ISO-8601 UTC
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from satellite.domain.models import (
    Budget,
    CheckResult,
    Formation,
    FormationHistory,
    FormationUsage,
    Holding,
    PortfolioSummary,
    TickerInfo,
    TierAllocation,
    UserSettings,
)
from satellite.services.data_service import AllData
from satellite.utils.time import to_iso


def _ts(value: Optional[datetime]) -> Optional[str]:
    return to_iso(value) if value is not None else None


def _num(value: Decimal) -> float:
    return float(value)


def formation_dict(formation: Formation) -> Dict[str, Any]:
    return {
        "id": formation.id,
        "name": formation.name,
        "tier_count": formation.tier_count,
        "percentages": [_num(p) for p in formation.percentages],
        "description": formation.description,
    }


def ticker_dict(info: TickerInfo) -> Dict[str, Any]:
    return {"ticker": info.ticker, "name": info.name, "sector": info.sector}


def settings_dict(settings: Optional[UserSettings]) -> Optional[Dict[str, Any]]:
    if settings is None:
        return None
    return {
        "id": settings.id,
        "current_formation_id": settings.current_formation_id,
        "last_check_date": _ts(settings.last_check_date),
        "auto_check_enabled": settings.auto_check_enabled,
        "created_at": _ts(settings.created_at),
        "updated_at": _ts(settings.updated_at),
    }


def budget_dict(budget: Optional[Budget]) -> Optional[Dict[str, Any]]:
    if budget is None:
        return None
    return {
        "id": budget.id,
        "funds": _num(budget.funds),
        "start": _num(budget.start),
        "profit": _num(budget.profit),
        "return_percentage": _num(budget.return_percentage),
        "updated_at": _ts(budget.updated_at),
    }


def holding_dict(holding: Holding) -> Dict[str, Any]:
    return {
        "id": holding.id,
        "ticker": holding.ticker,
        "tier": holding.tier,
        "entry_price": _num(holding.entry_price),
        "hold_shares": holding.hold_shares,
        "goal_shares": holding.goal_shares,
        "updated_at": _ts(holding.updated_at),
    }


def usage_dict(usage: FormationUsage) -> Dict[str, Any]:
    return {
        "id": usage.id,
        "formation_id": usage.formation_id,
        "usage_count": usage.usage_count,
        "total_days": usage.total_days,
        "usage_percentage": _num(usage.usage_percentage),
        "last_used_date": _ts(usage.last_used_date),
        "created_at": _ts(usage.created_at),
    }


def history_dict(entry: FormationHistory) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "from_formation_id": entry.from_formation_id,
        "to_formation_id": entry.to_formation_id,
        "changed_at": _ts(entry.changed_at),
        "reason": entry.reason,
    }


def tier_dict(tier: TierAllocation) -> Dict[str, Any]:
    return {
        "tier": tier.tier,
        "percentage": _num(tier.percentage),
        "target_amount": _num(tier.target_amount),
        "invested_amount": _num(tier.invested_amount),
        "current_value": _num(tier.current_value),
        "profit_loss": _num(tier.profit_loss),
        "progress": _num(tier.progress),
        "additional_investment_needed": _num(tier.additional_investment_needed),
        "holding_ids": [h.id for h in tier.holdings],
    }


def summary_dict(summary: Optional[PortfolioSummary]) -> Optional[Dict[str, Any]]:
    if summary is None:
        return None
    return {
        "total_invested": _num(summary.total_invested),
        "total_current_value": _num(summary.total_current_value),
        "total_profit_loss": _num(summary.total_profit_loss),
        "total_profit_loss_percentage": _num(summary.total_profit_loss_percentage),
        "remaining_funds": _num(summary.remaining_funds),
        "investment_progress": summary.investment_progress,
    }


def all_data_dict(data: AllData) -> Dict[str, Any]:
    return {
        "settings": settings_dict(data.settings),
        "budget": budget_dict(data.budget),
        "holdings": [holding_dict(h) for h in data.holdings],
        "formations": [formation_dict(f) for f in data.formations],
        "usage_stats": [usage_dict(u) for u in data.usage_stats],
        "tiers": [tier_dict(t) for t in data.tiers],
        "summary": summary_dict(data.summary),
    }


def check_result_dict(result: CheckResult) -> Dict[str, Any]:
    return {
        "has_changed": result.has_changed,
        "skipped": result.skipped,
        "previous_formation_id": result.previous_formation_id,
        "current_formation_id": result.current_formation_id,
        "updated_usage": usage_dict(result.updated_usage) if result.updated_usage else None,
        "checked_at": _ts(result.checked_at),
    }


def usage_list(records: List[FormationUsage]) -> List[Dict[str, Any]]:
    return [usage_dict(u) for u in records]
