"""SQLAlchemy implementation of the storage interface."""

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type

import structlog
from fastapi.encoders import jsonable_encoder
from sqlalchemy import JSON, and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import Base
from app.models import Division, EnergyProduction, EPCProject, RailwaySite, Station, Zone
from app.storage.base import EntityStore, Filter, Record, Storage, StoreQuery

logger = structlog.get_logger()

_COMPARATORS = {
    "eq": lambda column, value: column == value,
    "ne": lambda column, value: column != value,
    "gt": lambda column, value: column > value,
    "gte": lambda column, value: column >= value,
    "lt": lambda column, value: column < value,
    "lte": lambda column, value: column <= value,
}


class SqlEntityStore(EntityStore):
    """Entity store over one mapped table."""

    def __init__(self, db: AsyncSession, model: Type[Base], key_field: str = "id"):
        self.db = db
        self.model = model
        self.key_field = key_field
        self._columns = {column.key: column for column in model.__table__.columns}

    def _column(self, name: str):
        if name not in self._columns:
            raise ValueError(f"Unknown field '{name}' for {self.model.__tablename__}")
        return getattr(self.model, name)

    def _to_row_values(self, data: Record) -> Dict[str, Any]:
        values = {}
        for name, value in data.items():
            column = self._columns.get(name)
            if column is None:
                continue
            if isinstance(column.type, JSON):
                value = jsonable_encoder(value)
            elif isinstance(value, Enum):
                value = value.value
            values[name] = value
        return values

    def _to_record(self, row) -> Record:
        return {name: getattr(row, name) for name in self._columns}

    def _where(self, filters: List[Filter]):
        return [_COMPARATORS[f.op](self._column(f.field), f.value) for f in filters]

    async def create(self, data: Record) -> Record:
        row = self.model(**self._to_row_values(data))
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return self._to_record(row)

    async def _get_row(self, key: str):
        result = await self.db.execute(
            select(self.model).where(self._column(self.key_field) == key)
        )
        return result.scalar_one_or_none()

    async def get(self, key: str) -> Optional[Record]:
        row = await self._get_row(key)
        return self._to_record(row) if row else None

    async def update(self, key: str, changes: Record) -> Optional[Record]:
        row = await self._get_row(key)
        if not row:
            return None

        for name, value in self._to_row_values(changes).items():
            if name == self.key_field:
                continue
            setattr(row, name, value)

        await self.db.commit()
        await self.db.refresh(row)
        return self._to_record(row)

    async def delete(self, key: str) -> bool:
        row = await self._get_row(key)
        if not row:
            return False

        await self.db.delete(row)
        await self.db.commit()
        return True

    async def list(self, query: Optional[StoreQuery] = None) -> Tuple[List[Record], int]:
        query = query or StoreQuery()
        conditions = self._where(query.filters)
        if query.search and query.search_fields:
            pattern = f"%{query.search}%"
            conditions.append(
                or_(*[self._column(name).ilike(pattern) for name in query.search_fields])
            )

        count_stmt = select(func.count()).select_from(self.model)
        stmt = select(self.model)
        if conditions:
            count_stmt = count_stmt.where(and_(*conditions))
            stmt = stmt.where(and_(*conditions))

        total = (await self.db.execute(count_stmt)).scalar() or 0

        if query.order_by:
            column = self._column(query.order_by)
            stmt = stmt.order_by(column.desc() if query.descending else column.asc())
        if query.skip:
            stmt = stmt.offset(query.skip)
        if query.limit is not None:
            stmt = stmt.limit(query.limit)

        result = await self.db.execute(stmt)
        return [self._to_record(row) for row in result.scalars().all()], total

    async def delete_where(self, filters: List[Filter]) -> int:
        stmt = delete(self.model)
        if filters:
            stmt = stmt.where(and_(*self._where(filters)))
        result = await self.db.execute(stmt)
        await self.db.commit()
        logger.info(
            "Deleted rows", table=self.model.__tablename__, count=result.rowcount
        )
        return result.rowcount or 0


def create_sql_storage(db: AsyncSession) -> Storage:
    """Bind every entity store to one session."""
    return Storage(
        projects=SqlEntityStore(db, EPCProject, key_field="project_id"),
        sites=SqlEntityStore(db, RailwaySite),
        energy=SqlEntityStore(db, EnergyProduction),
        zones=SqlEntityStore(db, Zone),
        divisions=SqlEntityStore(db, Division),
        stations=SqlEntityStore(db, Station),
    )
