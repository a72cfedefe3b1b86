"""Pydantic schemas package."""

from .common import CamelModel, Pagination
from .energy_production import EnergyProduction, EnergyProductionCreate, ProductionStatistics
from .epc_project import (
    EPCProject,
    EPCProjectCreate,
    EPCProjectResponse,
    EPCProjectSummary,
    EPCProjectUpdate,
    InspectionCreate,
    PhaseUpdate,
    RiskCreate,
)
from .railway_site import RailwaySite, RailwaySiteCreate, RailwaySiteSummary, RailwaySiteUpdate
from .solar import SolarEstimate, SolarEstimateRequest

__all__ = [
    "CamelModel",
    "Pagination",
    "EPCProject",
    "EPCProjectCreate",
    "EPCProjectUpdate",
    "EPCProjectResponse",
    "EPCProjectSummary",
    "PhaseUpdate",
    "RiskCreate",
    "InspectionCreate",
    "RailwaySite",
    "RailwaySiteCreate",
    "RailwaySiteUpdate",
    "RailwaySiteSummary",
    "EnergyProduction",
    "EnergyProductionCreate",
    "ProductionStatistics",
    "SolarEstimate",
    "SolarEstimateRequest",
]
