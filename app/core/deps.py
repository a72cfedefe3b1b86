"""Dependency injection utilities."""

from typing import AsyncIterator, Optional

from fastapi import Depends

from app.core.exceptions import StorageUnavailableException
from app.storage.base import Storage
from app.storage.factory import open_storage


async def get_optional_storage() -> AsyncIterator[Optional[Storage]]:
    """Storage for the current request, or None when no backend is configured."""
    async with open_storage() as storage:
        yield storage


async def get_storage(storage: Optional[Storage] = Depends(get_optional_storage)) -> Storage:
    """Storage for the current request; 503 when no backend is configured."""
    if storage is None:
        raise StorageUnavailableException()
    return storage
