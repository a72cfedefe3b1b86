"""Railway administrative hierarchy schemas.

Zones contain divisions and divisions contain stations. Children carry
copies of their parents' codes and names; the service keeps those copies
and the per-parent counters in step.
"""

from enum import Enum
from typing import Annotated, List, Optional

from pydantic import EmailStr, Field, StringConstraints

from app.core.constants import DEFAULT_CURRENCY
from app.schemas.common import CamelModel, UpdateForm, UTCDateTime

MIN_ESTABLISHED_YEAR = 1850


class ZoneStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PLANNED = "planned"


class DivisionStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    PLANNED = "planned"
    MERGED = "merged"


class DivisionType(str, Enum):
    OPERATIONAL = "operational"
    COMMERCIAL = "commercial"
    ADMINISTRATIVE = "administrative"
    MIXED = "mixed"


class StationType(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    HALT = "halt"
    JUNCTION = "junction"
    TERMINAL = "terminal"


class StationCategory(str, Enum):
    A1 = "A1"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    F = "F"


class StationStatus(str, Enum):
    OPERATIONAL = "operational"
    UNDER_CONSTRUCTION = "under-construction"
    CLOSED = "closed"
    PLANNED = "planned"


Code = Annotated[str, StringConstraints(strip_whitespace=True, to_upper=True, min_length=1, max_length=20)]
Currency = Annotated[str, StringConstraints(strip_whitespace=True, to_upper=True, min_length=3, max_length=3)]


class ContactFields(CamelModel):
    contact_person: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None


# Zones


class ZoneCreate(ContactFields):
    code: Code
    name: str = Field(..., min_length=1)
    description: str = ""
    region: Optional[str] = None
    head_office: Optional[str] = None
    established_year: Optional[int] = Field(None, ge=MIN_ESTABLISHED_YEAR)
    status: ZoneStatus = ZoneStatus.ACTIVE


class ZoneUpdate(UpdateForm):
    code: Optional[Code] = None
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    region: Optional[str] = None
    head_office: Optional[str] = None
    established_year: Optional[int] = Field(None, ge=MIN_ESTABLISHED_YEAR)
    contact_person: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    status: Optional[ZoneStatus] = None


class Zone(ZoneCreate):
    id: str
    total_divisions: int = 0
    total_stations: int = 0
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None


# Divisions


class DivisionCreate(ContactFields):
    code: Code
    name: str = Field(..., min_length=1)
    zone_id: str = Field(..., min_length=1)
    description: str = ""
    headquarter: Optional[str] = None
    established_year: Optional[int] = Field(None, ge=MIN_ESTABLISHED_YEAR)
    area: Optional[float] = Field(None, ge=0, description="Area in km²")
    division_type: DivisionType = DivisionType.MIXED
    status: DivisionStatus = DivisionStatus.ACTIVE
    annual_budget: Optional[float] = Field(None, ge=0)
    budget_currency: Currency = DEFAULT_CURRENCY


class DivisionUpdate(UpdateForm):
    code: Optional[Code] = None
    name: Optional[str] = Field(None, min_length=1)
    zone_id: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    headquarter: Optional[str] = None
    established_year: Optional[int] = Field(None, ge=MIN_ESTABLISHED_YEAR)
    area: Optional[float] = Field(None, ge=0)
    division_type: Optional[DivisionType] = None
    contact_person: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    status: Optional[DivisionStatus] = None
    annual_budget: Optional[float] = Field(None, ge=0)
    budget_currency: Optional[Currency] = None


class Division(DivisionCreate):
    id: str
    zone_code: str
    zone_name: str
    total_stations: int = 0
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None


# Stations


class StationCreate(ContactFields):
    code: Code
    name: str = Field(..., min_length=1)
    division_id: str = Field(..., min_length=1)
    station_type: StationType = StationType.MINOR
    category: StationCategory = StationCategory.D
    address: str = Field(..., min_length=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    platforms: Optional[int] = Field(None, ge=1)
    tracks: Optional[int] = Field(None, ge=1)
    amenities: List[str] = Field(default_factory=list)
    status: StationStatus = StationStatus.OPERATIONAL
    rooftop_area: Optional[float] = Field(None, ge=0, description="Rooftop area in m²")
    land_area: Optional[float] = Field(None, ge=0, description="Land area in m²")


class StationUpdate(UpdateForm):
    code: Optional[Code] = None
    name: Optional[str] = Field(None, min_length=1)
    division_id: Optional[str] = Field(None, min_length=1)
    station_type: Optional[StationType] = None
    category: Optional[StationCategory] = None
    address: Optional[str] = Field(None, min_length=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    platforms: Optional[int] = Field(None, ge=1)
    tracks: Optional[int] = Field(None, ge=1)
    amenities: Optional[List[str]] = None
    contact_person: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    contact_phone: Optional[str] = None
    status: Optional[StationStatus] = None
    rooftop_area: Optional[float] = Field(None, ge=0)
    land_area: Optional[float] = Field(None, ge=0)


class Station(StationCreate):
    id: str
    division_code: str
    division_name: str
    zone_id: str
    zone_code: str
    zone_name: str
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None


# Responses


class ZoneListResponse(CamelModel):
    success: bool = True
    zones: List[Zone]


class DivisionListResponse(CamelModel):
    success: bool = True
    divisions: List[Division]


class StationListResponse(CamelModel):
    success: bool = True
    stations: List[Station]


class HierarchySearchResults(CamelModel):
    zones: List[Zone]
    divisions: List[Division]
    stations: List[Station]


class HierarchySearchResponse(CamelModel):
    success: bool = True
    results: HierarchySearchResults
