"""
Allocation Data API Routes
Full read / full save of budget, settings and holdings

Holdings Rules:
- `holdings` omitted -> stored holdings untouched
- `holdings` given   -> stored holdings replaced by exactly this list
- `goal_shares` omitted -> derived from the tier target split across the tier
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List, Optional

from satellite.api.dependencies import get_data_service
from satellite.api.errors import success_envelope
from satellite.api.serializers import all_data_dict
from satellite.domain.constants import MAX_AMOUNT, MAX_PRICE, MAX_SHARES
from satellite.services.data_service import DataService, HoldingInput

router = APIRouter()


# -------------------------------------------------------------------
# Request models
# -------------------------------------------------------------------

class BudgetPayload(BaseModel):
    """Partial budget update"""
    funds: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT, description="Total capital")
    start: Optional[Decimal] = Field(None, ge=0, le=MAX_AMOUNT, description="Principal baseline")
    profit: Optional[Decimal] = Field(
        None, ge=-MAX_AMOUNT, le=MAX_AMOUNT, description="Realized profit (any sign)"
    )


class HoldingPayload(BaseModel):
    """One position"""
    id: Optional[str] = Field(None, max_length=64)
    ticker: str = Field(..., min_length=1, max_length=10)
    tier: int = Field(..., ge=1, le=5)
    entry_price: Decimal = Field(..., gt=0, le=MAX_PRICE)
    hold_shares: int = Field(0, ge=0, le=MAX_SHARES)
    goal_shares: Optional[int] = Field(None, ge=0, le=MAX_SHARES)


class SettingsPayload(BaseModel):
    auto_check_enabled: Optional[bool] = None


class SaveDataRequest(BaseModel):
    """Full save request"""
    budget: Optional[BudgetPayload] = None
    holdings: Optional[List[HoldingPayload]] = None
    settings: Optional[SettingsPayload] = None
    formation_id: Optional[str] = Field(None, description="Select a formation")


# -------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------

@router.get("")
async def get_data(service: DataService = Depends(get_data_service)):
    """Settings, budget, holdings, formations, usage stats and tier allocations"""
    data = await service.get_all_data()
    return success_envelope(all_data_dict(data))


@router.post("")
async def save_data(
    request: SaveDataRequest,
    service: DataService = Depends(get_data_service)
):
    """Save budget / formation / settings / holdings in one request"""
    budget = request.budget.model_dump(exclude_none=True) if request.budget else None

    holdings = None
    if request.holdings is not None:
        holdings = [
            HoldingInput(
                ticker=h.ticker,
                tier=h.tier,
                entry_price=h.entry_price,
                hold_shares=h.hold_shares,
                goal_shares=h.goal_shares,
                id=h.id,
            )
            for h in request.holdings
        ]

    data = await service.save_data(
        budget=budget,
        formation_id=request.formation_id,
        auto_check_enabled=request.settings.auto_check_enabled if request.settings else None,
        holdings=holdings,
    )
    return success_envelope(all_data_dict(data))


@router.post("/initialize")
async def initialize_data(service: DataService = Depends(get_data_service)):
    """Create default settings and budget (idempotent)"""
    data = await service.initialize_defaults()
    return success_envelope(all_data_dict(data))
