"""Data-fetch functions behind the dashboard pages.

Each function returns a result object instead of raising, so a page can
render a "no data" state when storage is missing or failing.
"""

from typing import Optional

import structlog

from app.core.exceptions import StorageUnavailableException
from app.schemas.dashboard import (
    EPCDashboardResult,
    EPCDashboardStats,
    SiteDashboardResult,
    SiteDashboardStats,
    SiteGroupStats,
    SitesWithStatsResult,
)
from app.schemas.epc_project import EPCProject, OverallStatus, Priority
from app.schemas.railway_site import RailwaySite
from app.services.epc_dashboard import build_epc_dashboard
from app.services.site_statistics import build_site_dashboard, cluster_stats, status_stats
from app.storage.base import Filter, Storage, StoreQuery

logger = structlog.get_logger()

UNAVAILABLE_MESSAGE = StorageUnavailableException().message


async def get_epc_dashboard_stats(
    storage: Optional[Storage],
    status: Optional[OverallStatus] = None,
    priority: Optional[Priority] = None,
) -> EPCDashboardResult:
    """EPC overview, phase, priority, recent and critical project statistics."""
    if storage is None:
        return EPCDashboardResult(success=False, error=UNAVAILABLE_MESSAGE)

    try:
        filters = []
        if status:
            filters.append(Filter("overall_status", OverallStatus(status).value))
        if priority:
            filters.append(Filter("priority", Priority(priority).value))
        records = await storage.projects.list_all(StoreQuery(filters=filters))
        projects = [EPCProject.model_validate(record) for record in records]
        return EPCDashboardResult(success=True, stats=build_epc_dashboard(projects))
    except Exception as e:
        logger.exception("Failed to fetch EPC dashboard stats", error=str(e))
        return EPCDashboardResult(success=False, error=str(e), stats=EPCDashboardStats())


async def get_dashboard_stats(storage: Optional[Storage]) -> SiteDashboardResult:
    """Site totals, cluster and status breakdowns and recent sites."""
    if storage is None:
        return SiteDashboardResult(success=False, error=UNAVAILABLE_MESSAGE)

    try:
        records = await storage.sites.list_all()
        sites = [RailwaySite.model_validate(record) for record in records]
        return SiteDashboardResult(success=True, stats=build_site_dashboard(sites))
    except Exception as e:
        logger.exception("Failed to fetch site dashboard stats", error=str(e))
        return SiteDashboardResult(success=False, error=str(e), stats=SiteDashboardStats())


async def get_sites_with_stats(storage: Optional[Storage]) -> SitesWithStatsResult:
    """Every site plus cluster and status statistics for the map view."""
    if storage is None:
        return SitesWithStatsResult(success=False, error=UNAVAILABLE_MESSAGE)

    try:
        records = await storage.sites.list_all()
        sites = [RailwaySite.model_validate(record) for record in records]
        return SitesWithStatsResult(
            success=True,
            sites=sites,
            stats=SiteGroupStats(cluster_stats=cluster_stats(sites), status_stats=status_stats(sites)),
        )
    except Exception as e:
        logger.exception("Failed to fetch sites with stats", error=str(e))
        return SitesWithStatsResult(success=False, error=str(e))
