"""EPC project service: CRUD, phase, milestone and risk updates, inspections and team."""

import random
import string
import time
from datetime import datetime, timedelta
from typing import List, Optional, Tuple

import structlog

from app.core.constants import DEFAULT_CURRENCY
from app.core.exceptions import NotFoundException, ValidationException
from app.schemas.common import Pagination, to_record, utcnow
from app.schemas.epc_project import (
    Budget,
    ComplianceItem,
    ComplianceUpdate,
    ConstructionPhase,
    EngineeringPhase,
    EPCProject,
    EPCProjectCreate,
    EPCProjectResponse,
    EPCProjectUpdate,
    Inspection,
    InspectionCreate,
    Milestone,
    MilestoneStatus,
    MilestoneUpdate,
    OverallStatus,
    PhaseName,
    PhaseStatus,
    PhaseUpdate,
    Priority,
    ProcurementPhase,
    ProjectPhases,
    QualityControl,
    Resources,
    Risk,
    RiskCreate,
    RiskLevel,
    RiskStatus,
    RiskUpdate,
    TeamMember,
    TeamMemberCreate,
    Timeline,
)
from app.services.health_score import calculate_health_score, overall_progress
from app.storage.base import Filter, Storage, StoreQuery

logger = structlog.get_logger()

_BASE36 = string.digits + string.ascii_uppercase

DEFAULT_MILESTONES = (
    ("Site Preparation", 14),
    ("Equipment Installation", 45),
    ("System Commissioning", 60),
)

DEFAULT_COMPLIANCE = (
    "Railway Safety Clearance",
    "Environmental Compliance",
    "Electrical Safety Certification",
)

DEFAULT_OWNER = "Project Manager"


def generate_project_id() -> str:
    """``EPC-<epoch millis>-<4 base36 chars>``."""
    suffix = "".join(random.choices(_BASE36, k=4))
    return f"EPC-{int(time.time() * 1000)}-{suffix}"


def default_risks(owner: str) -> List[Risk]:
    return [
        Risk(
            id="RISK-001",
            description="Weather-related delays",
            probability=RiskLevel.MEDIUM,
            impact=RiskLevel.MEDIUM,
            mitigation="Monitor weather forecasts and adjust schedule accordingly",
            owner=owner,
        ),
        Risk(
            id="RISK-002",
            description="Regulatory approval delays",
            probability=RiskLevel.LOW,
            impact=RiskLevel.HIGH,
            mitigation="Submit applications early with complete documentation",
            owner=owner,
        ),
    ]


def to_response(project: EPCProject) -> EPCProjectResponse:
    """Attach the derived overall progress."""
    return EPCProjectResponse(
        **project.model_dump(),
        overall_progress=overall_progress(project.phases),
    )


class EPCProjectService:
    """Service for EPC projects."""

    def __init__(self, storage: Storage):
        self.store = storage.projects

    async def _load(self, project_id: str) -> EPCProject:
        record = await self.store.get(project_id)
        if record is None:
            raise NotFoundException(f"EPC project {project_id} not found")
        return EPCProject.model_validate(record)

    async def _save(self, project: EPCProject, now: Optional[datetime] = None) -> EPCProjectResponse:
        """Recompute the health score and persist the whole project."""
        now = now or utcnow()
        project.health_score = calculate_health_score(project, now)
        project.updated_at = now
        record = await self.store.update(project.project_id, to_record(project))
        if record is None:
            raise NotFoundException(f"EPC project {project.project_id} not found")
        return to_response(EPCProject.model_validate(record))

    async def create_project(self, data: EPCProjectCreate) -> EPCProjectResponse:
        now = utcnow()
        owner = data.engineering_team or DEFAULT_OWNER

        project = EPCProject(
            project_id=generate_project_id(),
            project_name=data.project_name,
            site_id=data.site_id,
            project_type=data.project_type,
            priority=data.priority,
            phases=ProjectPhases(
                engineering=EngineeringPhase(
                    assigned_team=[data.engineering_team] if data.engineering_team else [],
                ),
                procurement=ProcurementPhase(vendor=data.procurement_vendor or ""),
                construction=ConstructionPhase(
                    contractor=data.contractor or "",
                    milestones=[
                        Milestone(name=name, target_date=now + timedelta(days=days))
                        for name, days in DEFAULT_MILESTONES
                    ],
                ),
            ),
            resources=Resources(
                budget=Budget(total=data.budget_total, currency=DEFAULT_CURRENCY),
                timeline=Timeline(
                    planned_start_date=data.planned_start_date,
                    planned_end_date=data.planned_end_date,
                ),
            ),
            quality_control=QualityControl(
                compliance=[ComplianceItem(requirement=name) for name in DEFAULT_COMPLIANCE],
            ),
            risks=default_risks(owner),
            overall_status=OverallStatus.PLANNING,
            created_at=now,
            updated_at=now,
        )
        project.health_score = calculate_health_score(project, now)

        record = await self.store.create(to_record(project))
        logger.info(
            "EPC project created",
            project_id=project.project_id,
            site_id=project.site_id,
            health_score=project.health_score,
        )
        return to_response(EPCProject.model_validate(record))

    async def get_project(self, project_id: str) -> EPCProjectResponse:
        return to_response(await self._load(project_id))

    async def list_projects(
        self,
        page: int = 1,
        limit: int = 20,
        status: Optional[OverallStatus] = None,
        priority: Optional[Priority] = None,
    ) -> Tuple[List[EPCProjectResponse], Pagination]:
        """List projects newest first."""
        filters = []
        if status:
            filters.append(Filter("overall_status", OverallStatus(status).value))
        if priority:
            filters.append(Filter("priority", Priority(priority).value))

        records, total = await self.store.list(
            StoreQuery(
                filters=filters,
                order_by="created_at",
                descending=True,
                skip=(page - 1) * limit,
                limit=limit,
            )
        )
        projects = [to_response(EPCProject.model_validate(record)) for record in records]
        return projects, Pagination.build(page, limit, total)

    async def update_project(self, project_id: str, changes: EPCProjectUpdate) -> EPCProjectResponse:
        """Apply a partial update; the health score is always recomputed."""
        project = await self._load(project_id)
        data = changes.model_dump(exclude_unset=True)

        for name in ("project_name", "priority", "overall_status"):
            if data.get(name) is not None:
                setattr(project, name, data[name])

        budget = project.resources.budget
        for name, field in (("budget_total", "total"), ("budget_allocated", "allocated"), ("budget_spent", "spent")):
            if data.get(name) is not None:
                setattr(budget, field, data[name])

        timeline = project.resources.timeline
        for name in ("planned_start_date", "planned_end_date", "actual_start_date", "actual_end_date"):
            if name in data and (data[name] is not None or name.startswith("actual")):
                setattr(timeline, name, data[name])
        if timeline.planned_end_date < timeline.planned_start_date:
            raise ValidationException("plannedEndDate must not be before plannedStartDate")

        if "engineering_team" in data:
            project.phases.engineering.assigned_team = (
                [data["engineering_team"]] if data["engineering_team"] else []
            )
        if data.get("procurement_vendor") is not None:
            project.phases.procurement.vendor = data["procurement_vendor"]
        if data.get("contractor") is not None:
            project.phases.construction.contractor = data["contractor"]

        result = await self._save(project)
        logger.info("EPC project updated", project_id=project_id, fields=sorted(data))
        return result

    async def update_phase(
        self, project_id: str, phase: PhaseName, update: PhaseUpdate
    ) -> EPCProjectResponse:
        """
        Update one phase's status and progress.

        The start date is recorded only when the phase moves to in_progress
        and the completed date only when it moves to completed.
        """
        project = await self._load(project_id)
        now = utcnow()
        target = project.phases.get(phase)

        target.status = update.status
        target.progress = update.progress
        if update.status == PhaseStatus.IN_PROGRESS:
            target.start_date = update.start_date or now
        elif update.status == PhaseStatus.COMPLETED:
            target.completed_date = update.completed_date or now

        result = await self._save(project, now)
        logger.info(
            "EPC phase updated",
            project_id=project_id,
            phase=PhaseName(phase).value,
            status=update.status.value,
            progress=update.progress,
            health_score=result.health_score,
        )
        return result

    async def add_risk(self, project_id: str, data: RiskCreate) -> EPCProjectResponse:
        project = await self._load(project_id)
        risk_id = f"RISK-{len(project.risks) + 1:03d}"
        existing = {risk.id for risk in project.risks}
        while risk_id in existing:
            risk_id = f"RISK-{int(risk_id.split('-')[1]) + 1:03d}"
        project.risks.append(Risk(id=risk_id, **data.model_dump()))
        return await self._save(project)

    async def add_inspection(self, project_id: str, data: InspectionCreate) -> EPCProjectResponse:
        project = await self._load(project_id)
        project.quality_control.inspections.append(Inspection(**data.model_dump()))
        return await self._save(project)

    async def update_risk(self, project_id: str, risk_id: str, changes: RiskUpdate) -> EPCProjectResponse:
        """Reassess a risk; mitigating or closing a high-probability risk lifts the health score."""
        project = await self._load(project_id)
        risk = next((r for r in project.risks if r.id == risk_id), None)
        if risk is None:
            raise NotFoundException(f"Risk {risk_id} not found on EPC project {project_id}")

        for name, value in changes.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(risk, name, value)

        result = await self._save(project)
        logger.info(
            "EPC risk updated",
            project_id=project_id,
            risk_id=risk_id,
            status=RiskStatus(risk.status).value,
            health_score=result.health_score,
        )
        return result

    async def update_milestone(self, project_id: str, index: int, update: MilestoneUpdate) -> EPCProjectResponse:
        """
        Set the status of the construction milestone at ``index``.

        A completed milestone keeps its completion date (now unless given);
        any other status clears it.
        """
        project = await self._load(project_id)
        milestones = project.phases.construction.milestones
        if not 0 <= index < len(milestones):
            raise NotFoundException(f"Milestone {index} not found on EPC project {project_id}")

        milestone = milestones[index]
        milestone.status = update.status
        if update.target_date is not None:
            milestone.target_date = update.target_date
        if update.status == MilestoneStatus.COMPLETED:
            milestone.completed_date = update.completed_date or milestone.completed_date or utcnow()
        else:
            milestone.completed_date = None

        result = await self._save(project)
        logger.info(
            "EPC milestone updated",
            project_id=project_id,
            milestone=milestone.name,
            status=update.status.value,
            health_score=result.health_score,
        )
        return result

    async def update_compliance(
        self, project_id: str, index: int, update: ComplianceUpdate
    ) -> EPCProjectResponse:
        project = await self._load(project_id)
        compliance = project.quality_control.compliance
        if not 0 <= index < len(compliance):
            raise NotFoundException(f"Compliance item {index} not found on EPC project {project_id}")

        item = compliance[index]
        item.status = update.status
        if update.evidence is not None:
            item.evidence = update.evidence
        return await self._save(project)

    async def add_team_member(self, project_id: str, data: TeamMemberCreate) -> EPCProjectResponse:
        project = await self._load(project_id)
        member_id = f"TM-{len(project.resources.team) + 1:03d}"
        project.resources.team.append(TeamMember(member_id=member_id, **data.model_dump()))
        return await self._save(project)

    async def delete_project(self, project_id: str) -> None:
        """Delete a project. Nothing else is removed with it."""
        if not await self.store.delete(project_id):
            raise NotFoundException(f"EPC project {project_id} not found")
        logger.info("EPC project deleted", project_id=project_id)
