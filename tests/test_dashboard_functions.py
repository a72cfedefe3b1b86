"""Tests for the dashboard data-fetch functions."""

from datetime import timedelta

import pytest

from app.core.exceptions import StorageException
from app.schemas.common import utcnow
from app.schemas.epc_project import EPCProjectCreate
from app.schemas.railway_site import RailwaySiteCreate
from app.services.dashboard import get_dashboard_stats, get_epc_dashboard_stats, get_sites_with_stats
from app.services.epc_project import EPCProjectService
from app.services.railway_site import RailwaySiteService
from app.storage.base import EntityStore, Storage


class BrokenStore(EntityStore):
    """Store whose every call fails, as an unreachable backend would."""

    async def _fail(self, *args, **kwargs):
        raise StorageException("connection refused")

    create = get = update = delete = list = delete_where = _fail


@pytest.fixture
def broken_storage():
    store = BrokenStore()
    return Storage(
        projects=store, sites=store, energy=store, zones=store, divisions=store, stations=store
    )


@pytest.mark.asyncio
@pytest.mark.parametrize("fetch", [get_epc_dashboard_stats, get_dashboard_stats, get_sites_with_stats])
async def test_no_storage_reports_unavailable(fetch):
    result = await fetch(None)
    assert result.success is False
    assert result.error == "Database connection not available"


@pytest.mark.asyncio
async def test_epc_dashboard_stats_with_data(storage, site_data, project_data):
    service = EPCProjectService(storage)
    await service.create_project(EPCProjectCreate.model_validate(project_data))
    project_data["priority"] = "low"
    await service.create_project(EPCProjectCreate.model_validate(project_data))

    result = await get_epc_dashboard_stats(storage)
    assert result.success is True
    assert result.stats.overview.total_projects == 2
    assert result.stats.overview.total_budget == 2000000
    assert [p.priority for p in result.stats.priority_distribution] == ["high", "low"]

    filtered = await get_epc_dashboard_stats(storage, priority="low")
    assert filtered.stats.overview.total_projects == 1


@pytest.mark.asyncio
async def test_site_dashboard_stats_with_data(storage, site_data):
    service = RailwaySiteService(storage)
    await service.create_site(RailwaySiteCreate.model_validate(site_data))
    site_data.update({"id": "BLS-TEST-001", "cluster": "BLS", "feasibleCapacity": 50})
    await service.create_site(RailwaySiteCreate.model_validate(site_data))

    result = await get_dashboard_stats(storage)
    assert result.success is True
    assert result.stats.project.total_sites == 2
    assert result.stats.project.total_capacity == 200
    assert [c.cluster for c in result.stats.clusters] == ["KGP", "BLS"]

    with_stats = await get_sites_with_stats(storage)
    assert with_stats.success is True
    assert {site.id for site in with_stats.sites} == {"KGP-TEST-001", "BLS-TEST-001"}
    assert with_stats.stats.status_stats[0].percentage == 100


@pytest.mark.asyncio
async def test_empty_storage_returns_zeroed_stats(storage):
    result = await get_dashboard_stats(storage)
    assert result.success is True
    assert result.stats.project.total_sites == 0
    assert result.stats.clusters == []


@pytest.mark.asyncio
async def test_storage_failure_returns_empty_stats(broken_storage):
    epc = await get_epc_dashboard_stats(broken_storage)
    assert epc.success is False
    assert epc.error == "connection refused"
    assert epc.stats.overview.total_projects == 0

    sites = await get_dashboard_stats(broken_storage)
    assert sites.success is False
    assert sites.stats.project.total_sites == 0

    with_stats = await get_sites_with_stats(broken_storage)
    assert with_stats.success is False
    assert with_stats.sites == []
