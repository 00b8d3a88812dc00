"""
Health Route
"""

import logging

from fastapi import APIRouter, Request
from sqlalchemy import text

from satellite import __version__
from satellite.api.dependencies import get_storage_backend
from satellite.config import settings
from satellite.infrastructure.db import database

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Service, storage and scheduler status"""
    backend = get_storage_backend(request)

    db_status = "not_used"
    if backend != "memory":
        db_status = "not_initialized"
        if database.engine is not None:
            try:
                async with database.engine.connect() as conn:
                    await conn.execute(text("SELECT 1"))
                db_status = "connected"
            except Exception as exc:
                logger.error(f"Database health check failed: {exc}")
                db_status = "error"

    scheduler = getattr(request.app.state, "scheduler", None)
    scheduler_status = "disabled"
    if scheduler is not None:
        scheduler_status = "running" if scheduler.running else "stopped"

    return {
        "status": "healthy" if db_status != "error" else "degraded",
        "service": "Satellite Allocation Tracker",
        "version": __version__,
        "environment": settings.APP_ENV,
        "services": {
            "api": "running",
            "storage": backend,
            "database": db_status,
            "scheduler": scheduler_status,
        },
    }
