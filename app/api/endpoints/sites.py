from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.deps import get_optional_storage, get_storage
from app.core.exceptions import StorageUnavailableException
from app.schemas.dashboard import SiteDashboardResult, SitesWithStatsResult
from app.schemas.railway_site import (
    Cluster,
    RailwaySite,
    RailwaySiteCreate,
    RailwaySiteUpdate,
    SiteActionResponse,
    SiteListResponse,
)
from app.services.dashboard import get_dashboard_stats, get_sites_with_stats
from app.services.railway_site import RailwaySiteService
from app.storage.base import Storage

logger = structlog.get_logger()

router = APIRouter()


@router.get("", response_model=SiteListResponse)
async def list_sites(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    search: Optional[str] = Query(None, max_length=200),
    cluster: Optional[Cluster] = None,
    storage: Optional[Storage] = Depends(get_optional_storage),
):
    """List sites newest first; search matches location name, address or id"""
    if storage is None:
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": StorageUnavailableException().message},
        )

    try:
        sites, pagination = await RailwaySiteService(storage).list_sites(
            page=page,
            limit=limit,
            search=search,
            cluster=cluster.value if cluster else None,
        )
    except Exception as e:
        logger.error("Failed to list sites", error=str(e))
        return JSONResponse(status_code=500, content={"success": False, "error": "Failed to fetch sites"})

    return SiteListResponse(sites=sites, pagination=pagination)


@router.post("", response_model=SiteActionResponse, status_code=201)
async def create_site(site: RailwaySiteCreate, storage: Storage = Depends(get_storage)):
    """Create a new railway site"""
    created = await RailwaySiteService(storage).create_site(site)
    return SiteActionResponse(site=created)


@router.get("/dashboard", response_model=SiteDashboardResult)
async def sites_dashboard(storage: Optional[Storage] = Depends(get_optional_storage)):
    """Site dashboard statistics; reports success=false instead of failing"""
    return await get_dashboard_stats(storage)


@router.get("/with-stats", response_model=SitesWithStatsResult)
async def sites_with_stats(storage: Optional[Storage] = Depends(get_optional_storage)):
    """All sites with cluster and status statistics"""
    return await get_sites_with_stats(storage)


@router.get("/{site_id}", response_model=RailwaySite)
async def get_site(site_id: str, storage: Storage = Depends(get_storage)):
    """Get a specific site by id"""
    return await RailwaySiteService(storage).get_site(site_id)


@router.put("/{site_id}", response_model=SiteActionResponse)
async def update_site(
    site_id: str, site_update: RailwaySiteUpdate, storage: Storage = Depends(get_storage)
):
    """Update a site"""
    updated = await RailwaySiteService(storage).update_site(site_id, site_update)
    return SiteActionResponse(site=updated)


@router.delete("/{site_id}")
async def delete_site(site_id: str, storage: Storage = Depends(get_storage)):
    """Delete a site; projects and production rows referencing it are left in place"""
    await RailwaySiteService(storage).delete_site(site_id)
    return {"success": True}
