"""Storage capability interface.

Services talk to persistence only through :class:`EntityStore`. Records
cross this boundary as plain dicts keyed by the snake_case field names of
the API schemas; each adapter maps them onto its own shape.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional, Sequence, Tuple

Record = Dict[str, Any]

FILTER_OPERATORS = ("eq", "ne", "gt", "gte", "lt", "lte")


@dataclass(frozen=True)
class Filter:
    """Single field comparison."""

    field: str
    value: Any
    op: str = "eq"

    def __post_init__(self):
        if self.op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")


@dataclass
class StoreQuery:
    """List query: filters are ANDed, search is a case-insensitive OR over ``search_fields``."""

    filters: List[Filter] = field(default_factory=list)
    search: Optional[str] = None
    search_fields: Sequence[str] = ()
    order_by: Optional[str] = None
    descending: bool = False
    skip: int = 0
    limit: Optional[int] = None


class EntityStore(ABC):
    """CRUD and query operations for one entity type."""

    key_field: str = "id"

    @abstractmethod
    async def create(self, data: Record) -> Record:
        """Persist a new record and return it as stored."""

    @abstractmethod
    async def get(self, key: str) -> Optional[Record]:
        """Return the record with ``key`` or None."""

    @abstractmethod
    async def update(self, key: str, changes: Record) -> Optional[Record]:
        """Apply ``changes`` to the record with ``key``; None when it does not exist."""

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Delete the record with ``key``; False when it did not exist."""

    @abstractmethod
    async def list(self, query: Optional[StoreQuery] = None) -> Tuple[List[Record], int]:
        """Return one page of matching records and the total match count."""

    @abstractmethod
    async def delete_where(self, filters: List[Filter]) -> int:
        """Delete every record matching ``filters`` and return how many went."""

    async def list_all(self, query: Optional[StoreQuery] = None) -> List[Record]:
        """Every matching record, ignoring any paging in ``query``."""
        items, _ = await self.list(replace(query or StoreQuery(), skip=0, limit=None))
        return items


@dataclass
class Storage:
    """Stores for every entity type, bound to one request."""

    projects: EntityStore
    sites: EntityStore
    energy: EntityStore
    zones: EntityStore
    divisions: EntityStore
    stations: EntityStore
