"""Main API router."""

from fastapi import APIRouter

from app.api.endpoints import dashboard, energy_production, epc_projects, hierarchy, sites, solar

api_router = APIRouter()

# EPC project lifecycle
api_router.include_router(epc_projects.router, prefix="/epc/projects", tags=["epc-projects"])
api_router.include_router(dashboard.router, prefix="/epc", tags=["epc-dashboard"])

# Railway sites and their production data
api_router.include_router(sites.router, prefix="/sites", tags=["sites"])
api_router.include_router(energy_production.router, prefix="/sites", tags=["energy-production"])

# Zone, division and station hierarchy
api_router.include_router(hierarchy.router, prefix="/hierarchy", tags=["hierarchy"])

# Calculators
api_router.include_router(solar.router, prefix="/solar", tags=["solar"])
