"""
Catalog API Routes
Formations, allowed tickers and formation history
"""

from fastapi import APIRouter, Depends, Query
from typing import Optional

from satellite.api.dependencies import get_repositories
from satellite.infrastructure.unit_of_work import Repositories
from satellite.api.errors import success_envelope
from satellite.api.serializers import formation_dict, history_dict, ticker_dict
from satellite.domain.constants import FORMATIONS, TICKERS, get_tickers_by_sector

router = APIRouter()


@router.get("/formations")
async def list_formations():
    return success_envelope([formation_dict(f) for f in FORMATIONS])


@router.get("/formations/history")
async def list_formation_history(
    limit: int = Query(100, ge=1, le=1000),
    repos: Repositories = Depends(get_repositories)
):
    """Formation transitions, newest first"""
    entries = await repos.history.get_all(limit=limit)
    return success_envelope([history_dict(e) for e in entries])


@router.get("/tickers")
async def list_tickers(sector: Optional[str] = Query(None, description="Filter by sector")):
    tickers = get_tickers_by_sector(sector) if sector else TICKERS
    return success_envelope([ticker_dict(t) for t in tickers])
