"""Dashboard statistics schemas."""

from typing import List, Optional

from pydantic import Field

from app.core.constants import NEUTRAL_HEALTH_SCORE
from app.schemas.common import CamelModel
from app.schemas.epc_project import EPCProjectSummary
from app.schemas.railway_site import RailwaySite, RailwaySiteSummary


# ============================================================================
# EPC DASHBOARD
# ============================================================================


class ProjectOverview(CamelModel):
    total_projects: int = 0
    active_projects: int = 0
    completed_projects: int = 0
    total_budget: float = 0
    total_spent: float = 0
    avg_health_score: float = NEUTRAL_HEALTH_SCORE


class PhaseStats(CamelModel):
    engineering_in_progress: int = 0
    procurement_in_progress: int = 0
    construction_in_progress: int = 0
    avg_engineering_progress: float = 0
    avg_procurement_progress: float = 0
    avg_construction_progress: float = 0


class PriorityCount(CamelModel):
    priority: str
    count: int


class EPCDashboardStats(CamelModel):
    overview: ProjectOverview = Field(default_factory=ProjectOverview)
    phases: PhaseStats = Field(default_factory=PhaseStats)
    priority_distribution: List[PriorityCount] = []
    recent_projects: List[EPCProjectSummary] = []
    critical_projects: List[EPCProjectSummary] = []


class EPCDashboardResult(CamelModel):
    success: bool
    stats: Optional[EPCDashboardStats] = None
    error: Optional[str] = None


# ============================================================================
# SITE DASHBOARD
# ============================================================================


class SiteTotals(CamelModel):
    total_sites: int = 0
    total_capacity: float = 0
    total_area: float = 0
    avg_capacity: float = 0
    max_capacity: float = 0
    min_capacity: float = 0
    total_energy_generated: float = 0
    avg_efficiency: float = 0
    clusters: List[str] = []


class ClusterStat(CamelModel):
    cluster: str
    count: int
    total_capacity: float
    total_area: float
    avg_capacity: float
    max_capacity: float
    energy_generated: float


class StatusStat(CamelModel):
    status: str
    count: int
    total_capacity: float
    percentage: float


class SiteDashboardStats(CamelModel):
    project: SiteTotals = Field(default_factory=SiteTotals)
    clusters: List[ClusterStat] = []
    statuses: List[StatusStat] = []
    recent_sites: List[RailwaySiteSummary] = []


class SiteDashboardResult(CamelModel):
    success: bool
    stats: Optional[SiteDashboardStats] = None
    error: Optional[str] = None


class SiteGroupStats(CamelModel):
    cluster_stats: List[ClusterStat] = []
    status_stats: List[StatusStat] = []


class SitesWithStatsResult(CamelModel):
    success: bool
    sites: List[RailwaySite] = []
    stats: SiteGroupStats = Field(default_factory=SiteGroupStats)
    error: Optional[str] = None
