"""Shared schema helpers."""

import math
from datetime import datetime, timezone
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    components = string.split("_")
    return components[0] + "".join(x.title() for x in components[1:])


def utcnow() -> datetime:
    """Current time as a naive UTC datetime (the storage convention)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _to_naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is not None and value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


UTCDateTime = Annotated[datetime, AfterValidator(_to_naive_utc)]


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys on the API."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UpdateForm(CamelModel):
    """Request body for partial updates; unknown or read-only keys are rejected."""

    model_config = ConfigDict(extra="forbid")


class Pagination(CamelModel):
    """Pagination block returned by list endpoints."""

    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=math.ceil(total / limit) if limit else 0)


def to_record(model: BaseModel, **kwargs) -> dict:
    """Dump a model for storage, leaving out computed fields."""
    return model.model_dump(exclude=set(type(model).model_computed_fields), **kwargs)
