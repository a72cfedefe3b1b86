"""EPC dashboard aggregation over a project collection."""

from datetime import datetime
from typing import Iterable, List, Sequence

import pandas as pd

from app.core.constants import (
    CRITICAL_HEALTH_THRESHOLD,
    CRITICAL_PROJECTS_LIMIT,
    RECENT_ITEMS_LIMIT,
)
from app.schemas.dashboard import EPCDashboardStats, PhaseStats, PriorityCount, ProjectOverview
from app.schemas.epc_project import (
    EPCProject,
    EPCProjectSummary,
    OverallStatus,
    PhaseName,
    PhaseStatus,
    Priority,
)

PHASES = [phase.value for phase in PhaseName]


def summarize(project: EPCProject) -> EPCProjectSummary:
    return EPCProjectSummary(
        project_id=project.project_id,
        project_name=project.project_name,
        overall_status=project.overall_status,
        priority=project.priority,
        health_score=project.health_score,
        created_at=project.created_at,
    )


def projects_frame(projects: Sequence[EPCProject]) -> pd.DataFrame:
    """One row per project with the fields the dashboard aggregates."""
    rows = []
    for project in projects:
        row = {
            "project_id": project.project_id,
            "overall_status": OverallStatus(project.overall_status).value,
            "priority": Priority(project.priority).value,
            "health_score": project.health_score,
            "budget_total": project.resources.budget.total,
            "budget_spent": project.resources.budget.spent,
        }
        for name in PHASES:
            phase = project.phases.get(name)
            row[f"{name}_in_progress"] = PhaseStatus(phase.status) == PhaseStatus.IN_PROGRESS
            row[f"{name}_progress"] = phase.progress
        rows.append(row)
    return pd.DataFrame(rows)


def select_critical_projects(
    projects: Iterable[EPCProject], limit: int = CRITICAL_PROJECTS_LIMIT
) -> List[EPCProject]:
    """Projects with a low health score or critical priority, least healthy first.

    The sort is stable, so ties keep collection order.
    """
    critical = [
        project
        for project in projects
        if project.health_score < CRITICAL_HEALTH_THRESHOLD or project.priority == Priority.CRITICAL
    ]
    return sorted(critical, key=lambda project: project.health_score)[:limit]


def build_overview(df: pd.DataFrame) -> ProjectOverview:
    if df.empty:
        return ProjectOverview()

    status_counts = df["overall_status"].value_counts()
    return ProjectOverview(
        total_projects=len(df),
        active_projects=int(status_counts.get(OverallStatus.ACTIVE.value, 0)),
        completed_projects=int(status_counts.get(OverallStatus.COMPLETED.value, 0)),
        total_budget=float(df["budget_total"].sum()),
        total_spent=float(df["budget_spent"].sum()),
        avg_health_score=float(df["health_score"].mean()),
    )


def build_phase_stats(df: pd.DataFrame) -> PhaseStats:
    if df.empty:
        return PhaseStats()

    in_progress = df[[f"{name}_in_progress" for name in PHASES]].sum()
    progress = df[[f"{name}_progress" for name in PHASES]].mean()
    return PhaseStats(
        **{f"{name}_in_progress": int(in_progress[f"{name}_in_progress"]) for name in PHASES},
        **{f"avg_{name}_progress": float(progress[f"{name}_progress"]) for name in PHASES},
    )


def build_priority_distribution(df: pd.DataFrame) -> List[PriorityCount]:
    """Project counts per priority, ordered by priority key."""
    if df.empty:
        return []
    counts = df.groupby("priority").size().sort_index()
    return [PriorityCount(priority=priority, count=int(count)) for priority, count in counts.items()]


def recent_projects(projects: Iterable[EPCProject], limit: int = RECENT_ITEMS_LIMIT) -> List[EPCProject]:
    return sorted(projects, key=lambda p: p.created_at or datetime.min, reverse=True)[:limit]


def build_epc_dashboard(projects: Sequence[EPCProject]) -> EPCDashboardStats:
    """Aggregate the dashboard statistics for an already loaded collection."""
    df = projects_frame(projects)
    return EPCDashboardStats(
        overview=build_overview(df),
        phases=build_phase_stats(df),
        priority_distribution=build_priority_distribution(df),
        recent_projects=[summarize(p) for p in recent_projects(projects)],
        critical_projects=[summarize(p) for p in select_critical_projects(projects)],
    )
