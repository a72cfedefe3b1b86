"""Tests for site statistics aggregation."""

from datetime import datetime, timedelta

import pytest

from app.schemas.railway_site import RailwaySite
from app.services.site_statistics import build_site_dashboard, cluster_stats, site_totals, sites_frame, status_stats


def make_site(index: int, cluster: str, capacity: float, status: str = "planning", **kwargs) -> RailwaySite:
    return RailwaySite(
        id=f"SITE-{index}",
        serial_number=index,
        address=f"Address {index}",
        latitude=22.0,
        longitude=87.0,
        location_name=f"Station {index}",
        cluster=cluster,
        zone="South Eastern Railway",
        consignee_details="SSE (Elect)",
        rooftop_area=capacity * 12,
        feasible_area=capacity * 10,
        feasible_capacity=capacity,
        status=status,
        energy_generated=kwargs.get("energy", 1000),
        efficiency=kwargs.get("efficiency", 90),
        created_at=datetime(2024, 1, 1) + timedelta(days=index),
    )


@pytest.fixture
def sites():
    return [
        make_site(1, "KGP", 10, "operational", energy=500, efficiency=86),
        make_site(2, "KGP", 40, "planning", energy=1500, efficiency=90),
        make_site(3, "BLS", 30, "planning", energy=1000, efficiency=94),
        make_site(4, "KGP 2", 5, "survey", energy=0, efficiency=88),
    ]


def test_empty_collection_gives_zeros():
    totals = site_totals([])
    assert totals.total_sites == 0
    assert totals.total_capacity == 0
    assert totals.avg_efficiency == 0
    assert totals.clusters == []
    assert cluster_stats([]) == []
    assert status_stats([]) == []


def test_site_totals(sites):
    totals = site_totals(sites)
    assert totals.total_sites == 4
    assert totals.total_capacity == 85
    assert totals.total_area == 850
    assert totals.avg_capacity == pytest.approx(21.25)
    assert totals.max_capacity == 40
    assert totals.min_capacity == 5
    assert totals.total_energy_generated == 3000
    assert totals.avg_efficiency == pytest.approx(89.5)
    assert totals.clusters == ["BLS", "KGP", "KGP 2"]


def test_cluster_stats_sorted_by_capacity(sites):
    stats = cluster_stats(sites)
    assert [s.cluster for s in stats] == ["KGP", "BLS", "KGP 2"]

    kgp = stats[0]
    assert kgp.count == 2
    assert kgp.total_capacity == 50
    assert kgp.avg_capacity == 25
    assert kgp.max_capacity == 40
    assert kgp.energy_generated == 2000


def test_status_stats_sorted_by_count_with_percentage(sites):
    stats = status_stats(sites)
    assert stats[0].status == "planning"
    assert stats[0].count == 2
    assert stats[0].total_capacity == 70
    assert stats[0].percentage == pytest.approx(50)
    assert sum(s.percentage for s in stats) == pytest.approx(100)


def test_dashboard_includes_recent_sites(sites):
    stats = build_site_dashboard(sites)
    assert stats.project.total_sites == 4
    assert [s.id for s in stats.recent_sites] == ["SITE-4", "SITE-3", "SITE-2", "SITE-1"]


def test_sites_frame_has_fixed_columns_when_empty():
    df = sites_frame([])
    assert df.empty
    assert "feasible_capacity" in df.columns


def test_cluster_ties_keep_first_seen_order():
    sites = [make_site(1, "MCA", 20), make_site(2, "GII", 20), make_site(3, "MCA", 0)]
    stats = cluster_stats(sites)
    assert [(s.cluster, s.count) for s in stats] == [("MCA", 2), ("GII", 1)]
    assert stats[0].avg_capacity == 10
