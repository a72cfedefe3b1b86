"""Site statistics: global totals, per-cluster and per-status breakdowns."""

from datetime import datetime
from typing import List, Sequence

import pandas as pd

from app.core.constants import RECENT_ITEMS_LIMIT
from app.schemas.dashboard import ClusterStat, SiteDashboardStats, SiteTotals, StatusStat
from app.schemas.railway_site import Cluster, RailwaySite, RailwaySiteSummary, SiteStatus

SITE_COLUMNS = ["id", "cluster", "status", "feasible_capacity", "feasible_area", "energy_generated", "efficiency"]


def sites_frame(sites: Sequence[RailwaySite]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "id": site.id,
                "cluster": Cluster(site.cluster).value,
                "status": SiteStatus(site.status).value,
                "feasible_capacity": site.feasible_capacity,
                "feasible_area": site.feasible_area,
                "energy_generated": site.energy_generated,
                "efficiency": site.efficiency,
            }
            for site in sites
        ],
        columns=SITE_COLUMNS,
    )


def site_totals(sites: Sequence[RailwaySite]) -> SiteTotals:
    df = sites_frame(sites)
    if df.empty:
        return SiteTotals()

    capacity = df["feasible_capacity"]
    return SiteTotals(
        total_sites=len(df),
        total_capacity=float(capacity.sum()),
        total_area=float(df["feasible_area"].sum()),
        avg_capacity=float(capacity.mean()),
        max_capacity=float(capacity.max()),
        min_capacity=float(capacity.min()),
        total_energy_generated=float(df["energy_generated"].sum()),
        avg_efficiency=float(df["efficiency"].mean()),
        clusters=sorted(df["cluster"].unique()),
    )


def cluster_stats(sites: Sequence[RailwaySite]) -> List[ClusterStat]:
    """Per-cluster figures, largest total capacity first."""
    df = sites_frame(sites)
    if df.empty:
        return []

    grouped = (
        df.groupby("cluster", sort=False)
        .agg(
            count=("id", "size"),
            total_capacity=("feasible_capacity", "sum"),
            total_area=("feasible_area", "sum"),
            avg_capacity=("feasible_capacity", "mean"),
            max_capacity=("feasible_capacity", "max"),
            energy_generated=("energy_generated", "sum"),
        )
        .sort_values("total_capacity", ascending=False, kind="stable")
    )
    return [
        ClusterStat(
            cluster=cluster,
            count=int(row["count"]),
            total_capacity=float(row["total_capacity"]),
            total_area=float(row["total_area"]),
            avg_capacity=float(row["avg_capacity"]),
            max_capacity=float(row["max_capacity"]),
            energy_generated=float(row["energy_generated"]),
        )
        for cluster, row in grouped.iterrows()
    ]


def status_stats(sites: Sequence[RailwaySite]) -> List[StatusStat]:
    """Per-status counts and share of all sites, most common first."""
    df = sites_frame(sites)
    if df.empty:
        return []

    grouped = df.groupby("status", sort=False).agg(
        count=("id", "size"),
        total_capacity=("feasible_capacity", "sum"),
    )
    grouped["percentage"] = grouped["count"] / len(df) * 100
    grouped = grouped.sort_values("count", ascending=False, kind="stable")
    return [
        StatusStat(
            status=status,
            count=int(row["count"]),
            total_capacity=float(row["total_capacity"]),
            percentage=float(row["percentage"]),
        )
        for status, row in grouped.iterrows()
    ]


def recent_sites(sites: Sequence[RailwaySite], limit: int = RECENT_ITEMS_LIMIT) -> List[RailwaySiteSummary]:
    newest = sorted(sites, key=lambda site: site.created_at or datetime.min, reverse=True)[:limit]
    return [
        RailwaySiteSummary(
            id=site.id,
            address=site.address,
            location_name=site.location_name,
            status=site.status,
            feasible_capacity=site.feasible_capacity,
            created_at=site.created_at,
        )
        for site in newest
    ]


def build_site_dashboard(sites: Sequence[RailwaySite]) -> SiteDashboardStats:
    return SiteDashboardStats(
        project=site_totals(sites),
        clusters=cluster_stats(sites),
        statuses=status_stats(sites),
        recent_sites=recent_sites(sites),
    )
