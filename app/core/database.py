"""SQL engine and session management for the relational storage backend."""

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

import structlog
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from app.core.config import Settings, get_settings

logger = structlog.get_logger()

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker] = None


class Base(DeclarativeBase):
    """Declarative base for the site, project, production and hierarchy tables."""


def engine_options(settings: Settings) -> Dict[str, Any]:
    """Keyword arguments for create_async_engine; SQLite gets a single shared connection."""
    if settings.database_url_async.startswith("sqlite"):
        return {
            "echo": settings.DB_ECHO,
            "poolclass": StaticPool,
            "connect_args": {"check_same_thread": False},
        }
    return {
        "echo": settings.DB_ECHO,
        "pool_size": settings.DB_POOL_SIZE,
        "max_overflow": settings.DB_MAX_OVERFLOW,
        "pool_pre_ping": settings.DB_POOL_PRE_PING,
        "pool_recycle": settings.DB_POOL_RECYCLE,
    }


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        settings = get_settings()
        _engine = create_async_engine(settings.database_url_async, **engine_options(settings))
    return _engine


def get_session_factory() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)
    return _session_factory


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Session for one unit of work, rolled back if the work raises."""
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def ping_db() -> None:
    """Round-trip a trivial query; raises when the database is unreachable."""
    async with session_scope() as session:
        await session.execute(text("SELECT 1"))


async def init_db() -> None:
    """Create any missing tables."""
    # Registers the models on Base.metadata
    from app.models import energy_production, epc_project, hierarchy, railway_site  # noqa: F401

    try:
        async with get_engine().begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        logger.error("Failed to create tables", error=str(e))
        raise
    logger.info("Database tables ready", tables=sorted(Base.metadata.tables))


async def close_db() -> None:
    global _engine, _session_factory
    if _engine is None:
        return
    await _engine.dispose()
    _engine = None
    _session_factory = None
    logger.info("Database connections closed")
