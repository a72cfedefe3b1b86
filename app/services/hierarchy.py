"""Zone, division and station service.

Divisions and stations keep denormalized copies of their parents' codes and
names, and parents keep running counts of their children. Every write here
keeps both in step; deleting a parent that still has children is refused.
"""

import uuid
from typing import Any, Dict, List, Optional

import structlog

from app.core.exceptions import ConflictException, NotFoundException
from app.schemas.common import to_record, utcnow
from app.schemas.hierarchy import (
    Division,
    DivisionCreate,
    DivisionUpdate,
    HierarchySearchResults,
    Station,
    StationCreate,
    StationUpdate,
    Zone,
    ZoneCreate,
    ZoneUpdate,
)
from app.storage.base import EntityStore, Filter, Record, Storage, StoreQuery

logger = structlog.get_logger()

SEARCH_FIELDS = ("name", "code")
SEARCH_LIMIT = 10


def _changed(changes, current) -> Dict[str, Any]:
    """Fields set in an update form that differ from the stored model."""
    return {
        name: value
        for name, value in changes.model_dump(exclude_unset=True).items()
        if value is not None and value != getattr(current, name)
    }


class HierarchyService:
    """Service for the zone, division and station hierarchy."""

    def __init__(self, storage: Storage):
        self.zones = storage.zones
        self.divisions = storage.divisions
        self.stations = storage.stations

    async def _check_code(self, store: EntityStore, code: str, label: str) -> None:
        records, _ = await store.list(StoreQuery(filters=[Filter("code", code)], limit=1))
        if records:
            raise ConflictException(f"{label} code {code} already exists")

    async def _count(self, store: EntityStore, field: str, value: str) -> int:
        _, total = await store.list(StoreQuery(filters=[Filter(field, value)], limit=1))
        return total

    async def _adjust(self, store: EntityStore, key: str, **deltas: int) -> None:
        """Add ``deltas`` to counter fields of one record, never going below zero."""
        record = await store.get(key)
        if record is None:
            logger.warning("Counter owner missing", key=key, fields=sorted(deltas))
            return
        changes: Record = {name: max(0, (record.get(name) or 0) + delta) for name, delta in deltas.items()}
        changes["updated_at"] = utcnow()
        await store.update(key, changes)

    async def _update_children(self, store: EntityStore, field: str, value: str, changes: Record) -> int:
        records = await store.list_all(StoreQuery(filters=[Filter(field, value)]))
        for record in records:
            await store.update(record["id"], {**changes, "updated_at": utcnow()})
        return len(records)

    async def _list(self, store: EntityStore, filters: List[Filter]) -> List[Record]:
        return await store.list_all(StoreQuery(filters=filters, order_by="name"))

    # Zones

    async def create_zone(self, data: ZoneCreate) -> Zone:
        await self._check_code(self.zones, data.code, "Zone")
        now = utcnow()
        zone = Zone(**data.model_dump(), id=uuid.uuid4().hex, created_at=now, updated_at=now)
        record = await self.zones.create(to_record(zone))
        logger.info("Zone created", zone_id=zone.id, code=zone.code)
        return Zone.model_validate(record)

    async def get_zone(self, zone_id: str) -> Zone:
        record = await self.zones.get(zone_id)
        if record is None:
            raise NotFoundException(f"Zone {zone_id} not found")
        return Zone.model_validate(record)

    async def list_zones(self, region: Optional[str] = None, status: Optional[str] = None) -> List[Zone]:
        filters = []
        if region:
            filters.append(Filter("region", region))
        if status:
            filters.append(Filter("status", status))
        return [Zone.model_validate(record) for record in await self._list(self.zones, filters)]

    async def update_zone(self, zone_id: str, changes: ZoneUpdate) -> Zone:
        """Partial update; a new code or name is copied onto the zone's divisions and stations."""
        zone = await self.get_zone(zone_id)
        data = _changed(changes, zone)
        if "code" in data:
            await self._check_code(self.zones, data["code"], "Zone")

        data["updated_at"] = utcnow()
        record = await self.zones.update(zone_id, data)
        if record is None:
            raise NotFoundException(f"Zone {zone_id} not found")

        copies = {f"zone_{name}": data[name] for name in ("code", "name") if name in data}
        if copies:
            await self._update_children(self.divisions, "zone_id", zone_id, copies)
            await self._update_children(self.stations, "zone_id", zone_id, copies)
        logger.info("Zone updated", zone_id=zone_id, fields=sorted(data))
        return Zone.model_validate(record)

    async def delete_zone(self, zone_id: str) -> None:
        divisions = await self._count(self.divisions, "zone_id", zone_id)
        if divisions:
            raise ConflictException(
                f"Cannot delete zone with {divisions} divisions. Delete divisions first."
            )
        if not await self.zones.delete(zone_id):
            raise NotFoundException(f"Zone {zone_id} not found")
        logger.info("Zone deleted", zone_id=zone_id)

    # Divisions

    async def create_division(self, data: DivisionCreate) -> Division:
        zone = await self.get_zone(data.zone_id)
        await self._check_code(self.divisions, data.code, "Division")

        now = utcnow()
        division = Division(
            **data.model_dump(),
            id=uuid.uuid4().hex,
            zone_code=zone.code,
            zone_name=zone.name,
            created_at=now,
            updated_at=now,
        )
        record = await self.divisions.create(to_record(division))
        await self._adjust(self.zones, zone.id, total_divisions=1)
        logger.info("Division created", division_id=division.id, code=division.code, zone_id=zone.id)
        return Division.model_validate(record)

    async def get_division(self, division_id: str) -> Division:
        record = await self.divisions.get(division_id)
        if record is None:
            raise NotFoundException(f"Division {division_id} not found")
        return Division.model_validate(record)

    async def list_divisions(self, zone_id: Optional[str] = None) -> List[Division]:
        filters = [Filter("zone_id", zone_id)] if zone_id else []
        return [Division.model_validate(record) for record in await self._list(self.divisions, filters)]

    async def update_division(self, division_id: str, changes: DivisionUpdate) -> Division:
        """Partial update. Moving a division to another zone moves its stations and counts with it."""
        division = await self.get_division(division_id)
        data = _changed(changes, division)
        if "code" in data:
            await self._check_code(self.divisions, data["code"], "Division")

        station_copies: Record = {}
        if "zone_id" in data:
            zone = await self.get_zone(data["zone_id"])
            data["zone_code"] = zone.code
            data["zone_name"] = zone.name
            station_copies.update(zone_id=zone.id, zone_code=zone.code, zone_name=zone.name)
        station_copies.update({f"division_{name}": data[name] for name in ("code", "name") if name in data})

        data["updated_at"] = utcnow()
        record = await self.divisions.update(division_id, data)
        if record is None:
            raise NotFoundException(f"Division {division_id} not found")

        if "zone_id" in data:
            await self._adjust(
                self.zones, division.zone_id, total_divisions=-1, total_stations=-division.total_stations
            )
            await self._adjust(
                self.zones, data["zone_id"], total_divisions=1, total_stations=division.total_stations
            )
        if station_copies:
            await self._update_children(self.stations, "division_id", division_id, station_copies)

        logger.info("Division updated", division_id=division_id, fields=sorted(data))
        return Division.model_validate(record)

    async def delete_division(self, division_id: str) -> None:
        stations = await self._count(self.stations, "division_id", division_id)
        if stations:
            raise ConflictException(
                f"Cannot delete division with {stations} stations. Delete stations first."
            )
        division = await self.get_division(division_id)
        await self.divisions.delete(division_id)
        await self._adjust(self.zones, division.zone_id, total_divisions=-1)
        logger.info("Division deleted", division_id=division_id, zone_id=division.zone_id)

    # Stations

    async def create_station(self, data: StationCreate) -> Station:
        division = await self.get_division(data.division_id)
        await self._check_code(self.stations, data.code, "Station")

        now = utcnow()
        station = Station(
            **data.model_dump(),
            id=uuid.uuid4().hex,
            division_code=division.code,
            division_name=division.name,
            zone_id=division.zone_id,
            zone_code=division.zone_code,
            zone_name=division.zone_name,
            created_at=now,
            updated_at=now,
        )
        record = await self.stations.create(to_record(station))
        await self._adjust(self.divisions, division.id, total_stations=1)
        await self._adjust(self.zones, division.zone_id, total_stations=1)
        logger.info("Station created", station_id=station.id, code=station.code, division_id=division.id)
        return Station.model_validate(record)

    async def get_station(self, station_id: str) -> Station:
        record = await self.stations.get(station_id)
        if record is None:
            raise NotFoundException(f"Station {station_id} not found")
        return Station.model_validate(record)

    async def list_stations(
        self, division_id: Optional[str] = None, zone_id: Optional[str] = None
    ) -> List[Station]:
        """Stations by name; a division filter takes precedence over a zone filter."""
        if division_id:
            filters = [Filter("division_id", division_id)]
        elif zone_id:
            filters = [Filter("zone_id", zone_id)]
        else:
            filters = []
        return [Station.model_validate(record) for record in await self._list(self.stations, filters)]

    async def update_station(self, station_id: str, changes: StationUpdate) -> Station:
        station = await self.get_station(station_id)
        data = _changed(changes, station)
        if "code" in data:
            await self._check_code(self.stations, data["code"], "Station")

        division = None
        if "division_id" in data:
            division = await self.get_division(data["division_id"])
            data.update(
                division_code=division.code,
                division_name=division.name,
                zone_id=division.zone_id,
                zone_code=division.zone_code,
                zone_name=division.zone_name,
            )

        data["updated_at"] = utcnow()
        record = await self.stations.update(station_id, data)
        if record is None:
            raise NotFoundException(f"Station {station_id} not found")

        if division is not None:
            await self._adjust(self.divisions, station.division_id, total_stations=-1)
            await self._adjust(self.divisions, division.id, total_stations=1)
            if division.zone_id != station.zone_id:
                await self._adjust(self.zones, station.zone_id, total_stations=-1)
                await self._adjust(self.zones, division.zone_id, total_stations=1)

        logger.info("Station updated", station_id=station_id, fields=sorted(data))
        return Station.model_validate(record)

    async def delete_station(self, station_id: str) -> None:
        station = await self.get_station(station_id)
        await self.stations.delete(station_id)
        await self._adjust(self.divisions, station.division_id, total_stations=-1)
        await self._adjust(self.zones, station.zone_id, total_stations=-1)
        logger.info("Station deleted", station_id=station_id, division_id=station.division_id)

    # Search

    async def search_hierarchy(self, term: str, limit: int = SEARCH_LIMIT) -> HierarchySearchResults:
        """Case-insensitive name or code match at every level, at most ``limit`` per level."""
        query = StoreQuery(search=term, search_fields=SEARCH_FIELDS, order_by="name", limit=limit)
        zones, _ = await self.zones.list(query)
        divisions, _ = await self.divisions.list(query)
        stations, _ = await self.stations.list(query)
        return HierarchySearchResults(
            zones=[Zone.model_validate(record) for record in zones],
            divisions=[Division.model_validate(record) for record in divisions],
            stations=[Station.model_validate(record) for record in stations],
        )
