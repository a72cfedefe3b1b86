from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.core.deps import get_storage
from app.schemas.hierarchy import (
    Division,
    DivisionCreate,
    DivisionListResponse,
    DivisionUpdate,
    HierarchySearchResponse,
    Station,
    StationCreate,
    StationListResponse,
    StationUpdate,
    Zone,
    ZoneCreate,
    ZoneListResponse,
    ZoneStatus,
    ZoneUpdate,
)
from app.services.hierarchy import SEARCH_LIMIT, HierarchyService
from app.storage.base import Storage

router = APIRouter()


@router.get("/search", response_model=HierarchySearchResponse)
async def search_hierarchy(
    q: str = Query(..., min_length=1, max_length=200),
    limit: int = Query(SEARCH_LIMIT, ge=1, le=100),
    storage: Storage = Depends(get_storage),
):
    """Zones, divisions and stations whose name or code contains the search term"""
    results = await HierarchyService(storage).search_hierarchy(q, limit=limit)
    return HierarchySearchResponse(results=results)


# Zones


@router.get("/zones", response_model=ZoneListResponse)
async def list_zones(
    region: Optional[str] = None,
    status: Optional[ZoneStatus] = None,
    storage: Storage = Depends(get_storage),
):
    """List zones by name"""
    zones = await HierarchyService(storage).list_zones(
        region=region, status=status.value if status else None
    )
    return ZoneListResponse(zones=zones)


@router.post("/zones", response_model=Zone, status_code=201)
async def create_zone(zone: ZoneCreate, storage: Storage = Depends(get_storage)):
    """Create a zone"""
    return await HierarchyService(storage).create_zone(zone)


@router.get("/zones/{zone_id}", response_model=Zone)
async def get_zone(zone_id: str, storage: Storage = Depends(get_storage)):
    return await HierarchyService(storage).get_zone(zone_id)


@router.put("/zones/{zone_id}", response_model=Zone)
async def update_zone(zone_id: str, zone_update: ZoneUpdate, storage: Storage = Depends(get_storage)):
    """Update a zone; code and name changes are copied to its divisions and stations"""
    return await HierarchyService(storage).update_zone(zone_id, zone_update)


@router.delete("/zones/{zone_id}")
async def delete_zone(zone_id: str, storage: Storage = Depends(get_storage)):
    """Delete a zone that has no divisions"""
    await HierarchyService(storage).delete_zone(zone_id)
    return {"success": True}


# Divisions


@router.get("/divisions", response_model=DivisionListResponse)
async def list_divisions(
    zone_id: Optional[str] = Query(None, alias="zoneId"),
    storage: Storage = Depends(get_storage),
):
    """List divisions by name, optionally within one zone"""
    divisions = await HierarchyService(storage).list_divisions(zone_id=zone_id)
    return DivisionListResponse(divisions=divisions)


@router.post("/divisions", response_model=Division, status_code=201)
async def create_division(division: DivisionCreate, storage: Storage = Depends(get_storage)):
    """Create a division inside an existing zone"""
    return await HierarchyService(storage).create_division(division)


@router.get("/divisions/{division_id}", response_model=Division)
async def get_division(division_id: str, storage: Storage = Depends(get_storage)):
    return await HierarchyService(storage).get_division(division_id)


@router.put("/divisions/{division_id}", response_model=Division)
async def update_division(
    division_id: str, division_update: DivisionUpdate, storage: Storage = Depends(get_storage)
):
    """Update a division; changing its zone moves its stations too"""
    return await HierarchyService(storage).update_division(division_id, division_update)


@router.delete("/divisions/{division_id}")
async def delete_division(division_id: str, storage: Storage = Depends(get_storage)):
    """Delete a division that has no stations"""
    await HierarchyService(storage).delete_division(division_id)
    return {"success": True}


# Stations


@router.get("/stations", response_model=StationListResponse)
async def list_stations(
    division_id: Optional[str] = Query(None, alias="divisionId"),
    zone_id: Optional[str] = Query(None, alias="zoneId"),
    storage: Storage = Depends(get_storage),
):
    """List stations by name, filtered by division or else by zone"""
    stations = await HierarchyService(storage).list_stations(division_id=division_id, zone_id=zone_id)
    return StationListResponse(stations=stations)


@router.post("/stations", response_model=Station, status_code=201)
async def create_station(station: StationCreate, storage: Storage = Depends(get_storage)):
    """Create a station inside an existing division"""
    return await HierarchyService(storage).create_station(station)


@router.get("/stations/{station_id}", response_model=Station)
async def get_station(station_id: str, storage: Storage = Depends(get_storage)):
    return await HierarchyService(storage).get_station(station_id)


@router.put("/stations/{station_id}", response_model=Station)
async def update_station(
    station_id: str, station_update: StationUpdate, storage: Storage = Depends(get_storage)
):
    """Update a station; changing its division also moves it to that division's zone"""
    return await HierarchyService(storage).update_station(station_id, station_update)


@router.delete("/stations/{station_id}")
async def delete_station(station_id: str, storage: Storage = Depends(get_storage)):
    await HierarchyService(storage).delete_station(station_id)
    return {"success": True}
