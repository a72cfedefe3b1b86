"""Database models package."""

from .energy_production import EnergyProduction
from .epc_project import EPCProject
from .hierarchy import Division, Station, Zone
from .railway_site import RailwaySite

__all__ = ["Division", "EPCProject", "EnergyProduction", "RailwaySite", "Station", "Zone"]
