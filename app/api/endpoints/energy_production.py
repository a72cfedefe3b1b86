from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.core.deps import get_storage
from app.schemas.energy_production import (
    EnergyCleanupResponse,
    EnergyProduction,
    EnergyProductionCreate,
    ProductionStatistics,
)
from app.services.energy_production import EnergyProductionService
from app.storage.base import Storage

router = APIRouter()


@router.post("/{site_id}/energy", response_model=EnergyProduction, status_code=201)
async def record_production(
    site_id: str, production: EnergyProductionCreate, storage: Storage = Depends(get_storage)
):
    """Record one day of energy production for a site"""
    return await EnergyProductionService(storage).record_production(site_id, production)


@router.get("/{site_id}/energy", response_model=List[EnergyProduction])
async def list_production(
    site_id: str,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    storage: Storage = Depends(get_storage),
):
    """Production rows for a site, newest day first"""
    return await EnergyProductionService(storage).list_for_site(site_id, start_date, end_date)


@router.get("/{site_id}/energy/stats", response_model=ProductionStatistics)
async def production_statistics(site_id: str, storage: Storage = Depends(get_storage)):
    """Daily, monthly and lifetime production statistics"""
    return await EnergyProductionService(storage).get_statistics(site_id)


@router.delete("/{site_id}/energy", response_model=EnergyCleanupResponse)
async def delete_production(site_id: str, storage: Storage = Depends(get_storage)):
    """Delete every production row recorded for a site"""
    deleted = await EnergyProductionService(storage).delete_for_site(site_id)
    return EnergyCleanupResponse(deleted=deleted)
