from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.core.deps import get_optional_storage, get_storage
from app.core.exceptions import StorageUnavailableException
from app.schemas.epc_project import (
    ComplianceUpdate,
    EPCProjectActionResponse,
    EPCProjectCreate,
    EPCProjectListResponse,
    EPCProjectResponse,
    EPCProjectUpdate,
    InspectionCreate,
    MilestoneUpdate,
    OverallStatus,
    PhaseName,
    PhaseUpdate,
    Priority,
    RiskCreate,
    RiskUpdate,
    TeamMemberCreate,
)
from app.services.epc_project import EPCProjectService
from app.storage.base import Storage

logger = structlog.get_logger()

router = APIRouter()


@router.get("", response_model=EPCProjectListResponse)
async def list_projects(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    status: Optional[OverallStatus] = None,
    priority: Optional[Priority] = None,
    storage: Optional[Storage] = Depends(get_optional_storage),
):
    """List EPC projects newest first with pagination"""
    if storage is None:
        return JSONResponse(status_code=500, content={"error": StorageUnavailableException().message})

    try:
        projects, pagination = await EPCProjectService(storage).list_projects(
            page=page, limit=limit, status=status, priority=priority
        )
    except Exception as e:
        logger.error("Failed to list EPC projects", error=str(e))
        return JSONResponse(status_code=500, content={"error": "Failed to fetch projects"})

    return EPCProjectListResponse(projects=projects, pagination=pagination)


@router.post("", response_model=EPCProjectActionResponse, status_code=201)
async def create_project(project: EPCProjectCreate, storage: Storage = Depends(get_storage)):
    """Create a new EPC project with default milestones, compliance items and risks"""
    created = await EPCProjectService(storage).create_project(project)
    return EPCProjectActionResponse(project=created)


@router.get("/{project_id}", response_model=EPCProjectResponse)
async def get_project(project_id: str, storage: Storage = Depends(get_storage)):
    """Get a specific project by its project id"""
    return await EPCProjectService(storage).get_project(project_id)


@router.put("/{project_id}", response_model=EPCProjectActionResponse)
async def update_project(
    project_id: str, project_update: EPCProjectUpdate, storage: Storage = Depends(get_storage)
):
    """Update a project; the health score is recomputed"""
    updated = await EPCProjectService(storage).update_project(project_id, project_update)
    return EPCProjectActionResponse(project=updated)


@router.patch("/{project_id}/phases/{phase}", response_model=EPCProjectActionResponse)
async def update_phase(
    project_id: str,
    phase: PhaseName,
    phase_update: PhaseUpdate,
    storage: Storage = Depends(get_storage),
):
    """Update status and progress of one phase"""
    updated = await EPCProjectService(storage).update_phase(project_id, phase, phase_update)
    return EPCProjectActionResponse(project=updated)


@router.post("/{project_id}/risks", response_model=EPCProjectActionResponse, status_code=201)
async def add_risk(project_id: str, risk: RiskCreate, storage: Storage = Depends(get_storage)):
    """Append a risk to the project's register"""
    updated = await EPCProjectService(storage).add_risk(project_id, risk)
    return EPCProjectActionResponse(project=updated)


@router.post("/{project_id}/inspections", response_model=EPCProjectActionResponse, status_code=201)
async def add_inspection(
    project_id: str, inspection: InspectionCreate, storage: Storage = Depends(get_storage)
):
    """Record a quality control inspection"""
    updated = await EPCProjectService(storage).add_inspection(project_id, inspection)
    return EPCProjectActionResponse(project=updated)


@router.patch("/{project_id}/risks/{risk_id}", response_model=EPCProjectActionResponse)
async def update_risk(
    project_id: str, risk_id: str, risk_update: RiskUpdate, storage: Storage = Depends(get_storage)
):
    """Reassess, mitigate or close a risk"""
    updated = await EPCProjectService(storage).update_risk(project_id, risk_id, risk_update)
    return EPCProjectActionResponse(project=updated)


@router.patch("/{project_id}/milestones/{index}", response_model=EPCProjectActionResponse)
async def update_milestone(
    project_id: str,
    index: int,
    milestone_update: MilestoneUpdate,
    storage: Storage = Depends(get_storage),
):
    """Update the status of a construction milestone, addressed by its position"""
    updated = await EPCProjectService(storage).update_milestone(project_id, index, milestone_update)
    return EPCProjectActionResponse(project=updated)


@router.patch("/{project_id}/compliance/{index}", response_model=EPCProjectActionResponse)
async def update_compliance(
    project_id: str,
    index: int,
    compliance_update: ComplianceUpdate,
    storage: Storage = Depends(get_storage),
):
    updated = await EPCProjectService(storage).update_compliance(project_id, index, compliance_update)
    return EPCProjectActionResponse(project=updated)


@router.post("/{project_id}/team", response_model=EPCProjectActionResponse, status_code=201)
async def add_team_member(
    project_id: str, member: TeamMemberCreate, storage: Storage = Depends(get_storage)
):
    """Assign a team member to one of the project's phases"""
    updated = await EPCProjectService(storage).add_team_member(project_id, member)
    return EPCProjectActionResponse(project=updated)


@router.delete("/{project_id}")
async def delete_project(project_id: str, storage: Storage = Depends(get_storage)):
    """Delete a project"""
    await EPCProjectService(storage).delete_project(project_id)
    return {"success": True}
