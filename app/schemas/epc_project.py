"""EPC project schemas.

An EPC project tracks the Engineering, Procurement and Construction phases
of a solar installation at a railway site, together with its budget,
timeline, quality control records and risk register.
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field, model_validator

from app.core.constants import DEFAULT_CURRENCY
from app.schemas.common import CamelModel, Pagination, UpdateForm, UTCDateTime


class ProjectType(str, Enum):
    SOLAR_INSTALLATION = "solar_installation"
    MAINTENANCE = "maintenance"
    UPGRADE = "upgrade"
    EXPANSION = "expansion"


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class OverallStatus(str, Enum):
    PLANNING = "planning"
    ACTIVE = "active"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PhaseName(str, Enum):
    ENGINEERING = "engineering"
    PROCUREMENT = "procurement"
    CONSTRUCTION = "construction"


class PhaseStatus(str, Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    ON_HOLD = "on_hold"


class MilestoneStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    DELAYED = "delayed"


class InspectionStatus(str, Enum):
    PASSED = "passed"
    FAILED = "failed"
    PENDING = "pending"


class ComplianceStatus(str, Enum):
    COMPLIANT = "compliant"
    NON_COMPLIANT = "non_compliant"
    PENDING = "pending"


class RiskLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RiskStatus(str, Enum):
    OPEN = "open"
    MITIGATED = "mitigated"
    CLOSED = "closed"


# ============================================================================
# PHASES
# ============================================================================


class Milestone(CamelModel):
    name: str
    target_date: Optional[UTCDateTime] = None
    completed_date: Optional[UTCDateTime] = None
    status: MilestoneStatus = MilestoneStatus.PENDING


class PhaseBase(CamelModel):
    status: PhaseStatus = PhaseStatus.NOT_STARTED
    start_date: Optional[UTCDateTime] = None
    completed_date: Optional[UTCDateTime] = None
    progress: int = Field(0, ge=0, le=100)


class EngineeringPhase(PhaseBase):
    assigned_team: List[str] = []
    documents: List[str] = []


class ProcurementPhase(PhaseBase):
    vendor: str = ""
    purchase_orders: List[str] = []
    delivery_schedule: Optional[UTCDateTime] = None


class ConstructionPhase(PhaseBase):
    contractor: str = ""
    milestones: List[Milestone] = []


class ProjectPhases(CamelModel):
    engineering: EngineeringPhase = Field(default_factory=EngineeringPhase)
    procurement: ProcurementPhase = Field(default_factory=ProcurementPhase)
    construction: ConstructionPhase = Field(default_factory=ConstructionPhase)

    def get(self, name: PhaseName) -> PhaseBase:
        return getattr(self, PhaseName(name).value)


# ============================================================================
# RESOURCES, QUALITY, RISKS
# ============================================================================


class Budget(CamelModel):
    total: float = Field(..., ge=0)
    allocated: float = Field(0, ge=0)
    spent: float = Field(0, ge=0)
    currency: str = DEFAULT_CURRENCY


class Timeline(CamelModel):
    planned_start_date: UTCDateTime
    planned_end_date: UTCDateTime
    actual_start_date: Optional[UTCDateTime] = None
    actual_end_date: Optional[UTCDateTime] = None


class TeamMember(CamelModel):
    member_id: str
    name: str
    role: str
    phase: PhaseName
    allocation: float = Field(0, ge=0, le=100)


class Resources(CamelModel):
    budget: Budget
    timeline: Timeline
    team: List[TeamMember] = []


class Inspection(CamelModel):
    type: str
    date: UTCDateTime
    inspector: str
    status: InspectionStatus = InspectionStatus.PENDING
    notes: str = ""


class ComplianceItem(CamelModel):
    requirement: str
    status: ComplianceStatus = ComplianceStatus.PENDING
    evidence: str = ""


class QualityControl(CamelModel):
    inspections: List[Inspection] = []
    certifications: List[str] = []
    compliance: List[ComplianceItem] = []


class Risk(CamelModel):
    id: str
    description: str
    probability: RiskLevel
    impact: RiskLevel
    mitigation: str = ""
    status: RiskStatus = RiskStatus.OPEN
    owner: str = ""


# ============================================================================
# PROJECT
# ============================================================================


class EPCProject(CamelModel):
    """Stored EPC project record."""

    project_id: str
    project_name: str
    site_id: str
    project_type: ProjectType
    priority: Priority = Priority.MEDIUM
    phases: ProjectPhases = Field(default_factory=ProjectPhases)
    resources: Resources
    quality_control: QualityControl = Field(default_factory=QualityControl)
    risks: List[Risk] = []
    overall_status: OverallStatus = OverallStatus.PLANNING
    health_score: int = Field(100, ge=0, le=100)
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None


class EPCProjectResponse(EPCProject):
    """Project as returned to clients, with derived progress."""

    overall_progress: int = 0


class EPCProjectSummary(CamelModel):
    """Compact project row used on the dashboard."""

    project_id: str
    project_name: str
    overall_status: OverallStatus
    priority: Priority
    health_score: int
    created_at: Optional[datetime] = None


class EPCProjectCreate(CamelModel):
    """Fields accepted by the new-project form."""

    project_name: str = Field(..., min_length=1, max_length=255)
    site_id: str = Field(..., min_length=1)
    project_type: ProjectType
    priority: Priority = Priority.MEDIUM
    budget_total: float = Field(..., ge=0)
    planned_start_date: UTCDateTime
    planned_end_date: UTCDateTime
    engineering_team: Optional[str] = None
    procurement_vendor: Optional[str] = None
    contractor: Optional[str] = None

    @model_validator(mode="after")
    def check_dates(self) -> "EPCProjectCreate":
        if self.planned_end_date < self.planned_start_date:
            raise ValueError("plannedEndDate must not be before plannedStartDate")
        return self


class EPCProjectUpdate(UpdateForm):
    """Partial update of a project; health score is never accepted."""

    project_name: Optional[str] = Field(None, min_length=1, max_length=255)
    priority: Optional[Priority] = None
    overall_status: Optional[OverallStatus] = None
    budget_total: Optional[float] = Field(None, ge=0)
    budget_allocated: Optional[float] = Field(None, ge=0)
    budget_spent: Optional[float] = Field(None, ge=0)
    planned_start_date: Optional[UTCDateTime] = None
    planned_end_date: Optional[UTCDateTime] = None
    actual_start_date: Optional[UTCDateTime] = None
    actual_end_date: Optional[UTCDateTime] = None
    engineering_team: Optional[str] = None
    procurement_vendor: Optional[str] = None
    contractor: Optional[str] = None


class PhaseUpdate(UpdateForm):
    status: PhaseStatus
    progress: int = Field(..., ge=0, le=100)
    start_date: Optional[UTCDateTime] = None
    completed_date: Optional[UTCDateTime] = None


class RiskCreate(CamelModel):
    description: str = Field(..., min_length=1)
    probability: RiskLevel
    impact: RiskLevel
    mitigation: str = ""
    status: RiskStatus = RiskStatus.OPEN
    owner: str = ""


class InspectionCreate(CamelModel):
    type: str = Field(..., min_length=1)
    date: UTCDateTime
    inspector: str = Field(..., min_length=1)
    status: InspectionStatus = InspectionStatus.PENDING
    notes: str = ""


class RiskUpdate(UpdateForm):
    """Reassess or close a risk; the id is fixed."""

    description: Optional[str] = Field(None, min_length=1)
    probability: Optional[RiskLevel] = None
    impact: Optional[RiskLevel] = None
    mitigation: Optional[str] = None
    status: Optional[RiskStatus] = None
    owner: Optional[str] = None


class MilestoneUpdate(UpdateForm):
    status: MilestoneStatus
    target_date: Optional[UTCDateTime] = None
    completed_date: Optional[UTCDateTime] = None


class ComplianceUpdate(UpdateForm):
    status: ComplianceStatus
    evidence: Optional[str] = None


class TeamMemberCreate(CamelModel):
    name: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    phase: PhaseName
    allocation: float = Field(0, ge=0, le=100)


class EPCProjectListResponse(CamelModel):
    projects: List[EPCProjectResponse]
    pagination: Pagination


class EPCProjectActionResponse(CamelModel):
    success: bool = True
    project: EPCProjectResponse
