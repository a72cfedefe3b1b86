"""Railway site schemas."""

from enum import Enum
from typing import List, Optional

from pydantic import Field, computed_field

from app.schemas.common import CamelModel, Pagination, UpdateForm, UTCDateTime


class SiteStatus(str, Enum):
    PLANNING = "planning"
    SURVEY = "survey"
    DESIGN = "design"
    CONSTRUCTION = "construction"
    OPERATIONAL = "operational"
    MAINTENANCE = "maintenance"


class Cluster(str, Enum):
    KGP = "KGP"
    MCA = "MCA"
    BLS = "BLS"
    GII = "GII"
    HALDIA = "HALDIA"
    DGHA = "DGHA"
    KGP_2 = "KGP 2"


class MaintenanceSchedule(str, Enum):
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    BIANNUALLY = "biannually"
    ANNUALLY = "annually"


class RailwaySiteBase(CamelModel):
    address: str = Field(..., min_length=1)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    sanctioned_load: str = ""
    location_name: str = Field(..., min_length=1)
    cluster: Cluster
    zone: str = Field(..., min_length=1)
    consignee_details: str = Field(..., min_length=1)
    rooftop_area: float = Field(..., ge=0)
    feasible_area: float = Field(..., ge=0)
    feasible_capacity: float = Field(..., ge=0, description="Feasible capacity in kW")
    status: SiteStatus = SiteStatus.PLANNING


class RailwaySiteCreate(RailwaySiteBase):
    """New-site form; energy figures are optional and derived when absent."""

    id: str = Field(..., min_length=1, max_length=36)
    energy_generated: Optional[float] = Field(None, ge=0)
    efficiency: Optional[float] = Field(None, ge=0, le=100)
    monthly_energy_target: Optional[float] = Field(None, ge=0)
    carbon_offset_kg: Optional[float] = Field(None, ge=0)


class RailwaySiteUpdate(UpdateForm):
    address: Optional[str] = Field(None, min_length=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    sanctioned_load: Optional[str] = None
    location_name: Optional[str] = Field(None, min_length=1)
    cluster: Optional[Cluster] = None
    zone: Optional[str] = Field(None, min_length=1)
    consignee_details: Optional[str] = Field(None, min_length=1)
    rooftop_area: Optional[float] = Field(None, ge=0)
    feasible_area: Optional[float] = Field(None, ge=0)
    feasible_capacity: Optional[float] = Field(None, ge=0)
    status: Optional[SiteStatus] = None
    installation_date: Optional[UTCDateTime] = None
    last_maintenance_date: Optional[UTCDateTime] = None
    maintenance_schedule: Optional[MaintenanceSchedule] = None


class RailwaySite(RailwaySiteBase):
    """Stored railway site record."""

    id: str
    serial_number: int
    energy_generated: float = 0
    efficiency: float = 85
    monthly_energy_target: float = 0
    carbon_offset_kg: float = 0
    maintenance_schedule: MaintenanceSchedule = MaintenanceSchedule.QUARTERLY
    installation_date: Optional[UTCDateTime] = None
    last_maintenance_date: Optional[UTCDateTime] = None
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None

    @computed_field
    @property
    def capacity_range(self) -> str:
        if self.feasible_capacity >= 30:
            return "high"
        if self.feasible_capacity >= 15:
            return "medium"
        return "low"


class RailwaySiteSummary(CamelModel):
    id: str
    address: str
    location_name: str
    status: SiteStatus
    feasible_capacity: float
    created_at: Optional[UTCDateTime] = None


class SiteListResponse(CamelModel):
    success: bool = True
    sites: List[RailwaySite]
    pagination: Pagination


class SiteActionResponse(CamelModel):
    success: bool = True
    site: RailwaySite
