import asyncio
from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from satellite.api.errors import RequestIDMiddleware, register_exception_handlers
from satellite.api.routes import cron, data, formations, health, usage
from satellite.config import settings
from satellite.infrastructure.db.database import Base, get_db
from satellite.infrastructure.memory.store import MemoryStore


def build_app(storage_backend: str) -> FastAPI:
    app = FastAPI()
    app.state.storage_backend = storage_backend
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

    app.include_router(health.router, tags=["Health"])
    app.include_router(data.router, prefix="/api/data", tags=["Data"])
    app.include_router(cron.router, prefix="/api/cron", tags=["Daily Check"])
    app.include_router(formations.router, prefix="/api", tags=["Catalog"])
    app.include_router(usage.router, prefix="/api/usage", tags=["Usage"])
    return app


@pytest.fixture()
async def db_engine(tmp_path):
    db_path = tmp_path / "test.db"
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{db_path}",
        echo=False
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture()
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    session_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest.fixture()
def memory_store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def app(db_session) -> FastAPI:
    app = build_app("database")

    async def override_get_db():
        try:
            yield db_session
            await db_session.commit()
        except Exception:
            await db_session.rollback()
            raise

    app.dependency_overrides[get_db] = override_get_db
    return app


@pytest.fixture()
def memory_app() -> FastAPI:
    app = build_app("memory")

    async def no_db():
        yield None

    app.dependency_overrides[get_db] = no_db
    return app


@pytest.fixture()
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture()
async def memory_client(memory_app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=memory_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
