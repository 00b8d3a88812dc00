"""
Daily Check API Route
Manual / external-cron trigger for the once-per-day formation check
"""

import logging

from fastapi import APIRouter, Depends

from satellite.api.dependencies import get_daily_check
from satellite.api.errors import success_envelope
from satellite.api.serializers import check_result_dict
from satellite.domain.services.daily_check import DailyCheckOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def run_daily_check(orchestrator: DailyCheckOrchestrator = Depends(get_daily_check)):
    """Run check_and_update; a second call on the same UTC day is a no-op"""
    result = await orchestrator.check_and_update()

    if result.skipped:
        logger.info("Daily check skipped (already ran today)")
    else:
        logger.info(
            f"Daily check done: formation={result.current_formation_id} changed={result.has_changed}"
        )

    return success_envelope(check_result_dict(result))
