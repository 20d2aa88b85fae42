"""
Database Engine and Sessions
SQLAlchemy 2.0 async engine, session factory and the FastAPI session dependency.

asyncpg is the production driver; any SQLAlchemy async URL works, which
is how the tests run against sqlite+aiosqlite.
"""

from typing import Any, AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings
from app.models.base import Base


_engine: AsyncEngine | None = None


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine with pool options suited to the backend

    SQLite uses a single-file or in-memory database and takes no pool
    sizing; server databases get the configured pool size and overflow.
    """
    engine_kwargs: dict[str, Any] = {"echo": settings.database_echo}
    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
    else:
        engine_kwargs["pool_pre_ping"] = True
        engine_kwargs["pool_size"] = settings.database_pool_size
        engine_kwargs["max_overflow"] = settings.database_max_overflow

    return create_async_engine(database_url, **engine_kwargs)


def get_async_engine() -> AsyncEngine:
    """Process-wide engine, created on first use."""
    global _engine

    if _engine is None:
        _engine = build_engine(settings.database_url)
    return _engine


async_session_maker = async_sessionmaker(
    bind=get_async_engine(),
    class_=AsyncSession,
    expire_on_commit=False,  # Rows stay readable after commit
    autoflush=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session: committed when the handler returns,
    rolled back when it raises.

    Usage:
        @router.get("/schools")
        async def list_schools(session: AsyncSession = Depends(get_session)):
            ...
    """
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create the schools and school_embeddings tables (development only; use Alembic otherwise)."""
    async with get_async_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Dispose the engine's connection pool on shutdown."""
    global _engine

    if _engine is not None:
        await _engine.dispose()
        _engine = None
