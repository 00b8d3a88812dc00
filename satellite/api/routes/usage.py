"""
Formation Usage API Routes
"""

from fastapi import APIRouter, Depends

from satellite.api.dependencies import get_data_service
from satellite.api.errors import success_envelope
from satellite.api.serializers import usage_list
from satellite.services.data_service import DataService

router = APIRouter()


@router.post("/recalculate")
async def recalculate_usage(service: DataService = Depends(get_data_service)):
    """Recompute usage percentages from stored counters (idempotent)"""
    records = await service.recalculate_usage()
    return success_envelope(usage_list(records))
