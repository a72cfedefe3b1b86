"""Project health score and overall progress."""

from datetime import datetime
from typing import Optional

from app.core.constants import NEUTRAL_HEALTH_SCORE
from app.schemas.common import utcnow
from app.schemas.epc_project import (
    EPCProject,
    InspectionStatus,
    MilestoneStatus,
    OverallStatus,
    PhaseStatus,
    ProjectPhases,
    RiskLevel,
    RiskStatus,
)

# Phase weights in tenths: engineering 30 %, procurement 30 %, construction 40 %
ENGINEERING_WEIGHT = 3
PROCUREMENT_WEIGHT = 3
CONSTRUCTION_WEIGHT = 4

OVERDUE_PENALTY = 20
BUDGET_OVERRUN_RATIO = 1.1
BUDGET_OVERRUN_PENALTY = 15
HIGH_RISK_PENALTY = 10
FAILED_INSPECTION_PENALTY = 5
PHASE_ON_HOLD_PENALTY = 5
DELAYED_MILESTONE_PENALTY = 5
SCHEDULE_LAG_FACTOR = 0.2
MAX_SCHEDULE_LAG_PENALTY = 20


def weighted_progress(engineering: int, procurement: int, construction: int) -> int:
    """Weighted phase progress rounded half up."""
    weighted = (
        ENGINEERING_WEIGHT * int(engineering)
        + PROCUREMENT_WEIGHT * int(procurement)
        + CONSTRUCTION_WEIGHT * int(construction)
    )
    return (weighted + 5) // 10


def overall_progress(phases: ProjectPhases) -> int:
    return weighted_progress(
        phases.engineering.progress,
        phases.procurement.progress,
        phases.construction.progress,
    )


def expected_progress(project: EPCProject, now: datetime) -> float:
    """Share of the planned timeline already elapsed, as a percentage."""
    timeline = project.resources.timeline
    duration = (timeline.planned_end_date - timeline.planned_start_date).total_seconds()
    if duration <= 0:
        return 100.0 if now >= timeline.planned_end_date else 0.0
    elapsed = (now - timeline.planned_start_date).total_seconds()
    return min(100.0, max(0.0, elapsed / duration * 100))


def calculate_health_score(project: EPCProject, now: Optional[datetime] = None) -> int:
    """
    Derive the 0-100 health score of a project.

    Starts from 100 and deducts for:
    - an overdue planned end date (project not completed)
    - spending more than 110 % of the total budget
    - each open high-probability risk
    - each failed inspection
    - each phase on hold and each delayed construction milestone
    - progress lagging the planned timeline (capped)
    """
    now = now or utcnow()
    score = NEUTRAL_HEALTH_SCORE
    completed = project.overall_status == OverallStatus.COMPLETED
    budget = project.resources.budget

    if not completed and now > project.resources.timeline.planned_end_date:
        score -= OVERDUE_PENALTY

    if budget.total > 0 and budget.spent / budget.total > BUDGET_OVERRUN_RATIO:
        score -= BUDGET_OVERRUN_PENALTY

    score -= HIGH_RISK_PENALTY * sum(
        1
        for risk in project.risks
        if risk.status == RiskStatus.OPEN and risk.probability == RiskLevel.HIGH
    )

    score -= FAILED_INSPECTION_PENALTY * sum(
        1
        for inspection in project.quality_control.inspections
        if inspection.status == InspectionStatus.FAILED
    )

    phases = project.phases
    score -= PHASE_ON_HOLD_PENALTY * sum(
        1
        for phase in (phases.engineering, phases.procurement, phases.construction)
        if phase.status == PhaseStatus.ON_HOLD
    )
    score -= DELAYED_MILESTONE_PENALTY * sum(
        1 for milestone in phases.construction.milestones if milestone.status == MilestoneStatus.DELAYED
    )

    if not completed:
        lag = max(0.0, expected_progress(project, now) - overall_progress(phases))
        score -= min(MAX_SCHEDULE_LAG_PENALTY, round(lag * SCHEDULE_LAG_FACTOR))

    return max(0, min(100, int(score)))
