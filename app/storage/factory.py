"""Storage backend selection."""

from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import structlog

from app.core.config import Settings, get_settings
from app.storage.base import Storage, StoreQuery

logger = structlog.get_logger()


@asynccontextmanager
async def open_storage(settings: Optional[Settings] = None) -> AsyncIterator[Optional[Storage]]:
    """Open storage for one unit of work.

    Yields None when neither a database nor Appwrite is configured so that
    callers can degrade instead of failing.
    """
    settings = settings or get_settings()
    backend = settings.storage_backend

    if backend == "sql":
        from app.core.database import session_scope
        from app.storage.sql import create_sql_storage

        async with session_scope() as session:
            yield create_sql_storage(session)
    elif backend == "appwrite":
        from app.storage.appwrite import AppwriteClient, create_appwrite_storage

        async with AppwriteClient.from_settings(settings) as client:
            yield create_appwrite_storage(client)
    else:
        logger.warning("No storage backend configured", requested=settings.STORAGE_BACKEND)
        yield None


async def check_storage(settings: Optional[Settings] = None) -> None:
    """Raise if the configured backend cannot be reached."""
    settings = settings or get_settings()
    if settings.storage_backend == "sql":
        from app.core.database import ping_db

        await ping_db()
        return

    async with open_storage(settings) as storage:
        if storage is not None:
            await storage.sites.list(StoreQuery(limit=1))
