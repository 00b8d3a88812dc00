"""
FastAPI Main Application with Scheduler
Allocation data API, daily check trigger and catalog endpoints
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import asyncio
import logging
from typing import AsyncGenerator

from satellite import __version__
from satellite.config import settings
from satellite.core.logging import setup_logging
from satellite.api.errors import RequestIDMiddleware, register_exception_handlers
from satellite.api.routes import cron, data, formations, health, usage
from satellite.infrastructure.db.database import init_db, close_db
from satellite.infrastructure.memory.store import MemoryStore
from satellite.scheduler.main import DailyCheckScheduler

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager
    Handles startup and shutdown of storage and scheduler
    """
    logger.info("=" * 60)
    logger.info("Starting Satellite Allocation Tracker")
    logger.info("=" * 60)

    backend = app.state.storage_backend
    if backend == "memory":
        logger.info("Storage: in-memory (data is lost on restart)")
    else:
        await init_db()
        logger.info("Storage: database")

    scheduler = None
    if settings.SCHEDULER_ENABLED:
        try:
            scheduler = DailyCheckScheduler(
                memory_store=app.state.memory_store if backend == "memory" else None,
                lock=app.state.daily_check_lock,
            )
            scheduler.start()
            logger.info(f"Scheduler started (daily check at {settings.DAILY_CHECK_TIME} {settings.TIMEZONE})")
        except Exception as e:
            logger.error(f"Failed to start scheduler: {e}")
            scheduler = None
    else:
        logger.info("Scheduler disabled")
    app.state.scheduler = scheduler

    logger.info(f"API Server: http://{settings.API_HOST}:{settings.API_PORT}")

    yield

    logger.info("Shutting down Satellite Allocation Tracker")

    if scheduler:
        scheduler.stop()

    await close_db()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Satellite Allocation Tracker",
    description="Formation-based allocation tracking with daily usage statistics",
    version=__version__,
    lifespan=lifespan
)

app.state.storage_backend = settings.STORAGE_BACKEND
app.state.memory_store = MemoryStore()
app.state.daily_check_lock = asyncio.Lock()
app.state.scheduler = None

app.add_middleware(RequestIDMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

register_exception_handlers(app)


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "message": "Satellite Allocation Tracker",
        "version": __version__,
        "endpoints": {
            "data": "/api/data",
            "daily_check": "/api/cron",
            "formations": "/api/formations",
            "tickers": "/api/tickers",
            "health": "/health",
        },
        "docs": "/docs"
    }


app.include_router(health.router, tags=["Health"])
app.include_router(data.router, prefix="/api/data", tags=["Data"])
app.include_router(cron.router, prefix="/api/cron", tags=["Daily Check"])
app.include_router(formations.router, prefix="/api", tags=["Catalog"])
app.include_router(usage.router, prefix="/api/usage", tags=["Usage"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("satellite.main:app", host=settings.API_HOST, port=settings.API_PORT, reload=settings.DEBUG)
