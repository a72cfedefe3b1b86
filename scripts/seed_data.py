#!/usr/bin/env python3
"""
Seed sample railway sites and EPC projects.

Safe to run repeatedly: sites are matched by id and projects by
(site, project name), so existing records are left untouched.

    python scripts/seed_data.py
"""

import asyncio
import sys
from datetime import timedelta
from pathlib import Path

# Add parent directory to path to import app modules
sys.path.append(str(Path(__file__).parent.parent))

import structlog

from app.core.config import get_settings
from app.core.database import close_db, init_db
from app.core.logging import configure_logging
from app.schemas.common import utcnow
from app.schemas.epc_project import EPCProjectCreate, Priority, ProjectType
from app.schemas.railway_site import RailwaySiteCreate
from app.services.epc_project import EPCProjectService
from app.services.railway_site import RailwaySiteService
from app.storage.base import Filter, StoreQuery
from app.storage.factory import open_storage

logger = structlog.get_logger()

SAMPLE_SITES = [
    {
        "id": "KGP-STN-001",
        "address": "Kharagpur Railway Station, Kharagpur, West Bengal 721301",
        "latitude": 22.3397,
        "longitude": 87.3254,
        "sanctioned_load": "250 kVA",
        "location_name": "Kharagpur Station Building",
        "cluster": "KGP",
        "zone": "South Eastern Railway",
        "consignee_details": "Sr. DEE (G), Kharagpur",
        "rooftop_area": 1200,
        "feasible_area": 850,
        "feasible_capacity": 85,
        "status": "operational",
    },
    {
        "id": "BLS-STN-001",
        "address": "Balasore Railway Station, Balasore, Odisha 756001",
        "latitude": 21.4942,
        "longitude": 86.9317,
        "sanctioned_load": "120 kVA",
        "location_name": "Balasore Station Platform Shed",
        "cluster": "BLS",
        "zone": "South Eastern Railway",
        "consignee_details": "ADEE (G), Balasore",
        "rooftop_area": 640,
        "feasible_area": 420,
        "feasible_capacity": 42,
        "status": "construction",
    },
    {
        "id": "MCA-WKS-001",
        "address": "Mecheda Railway Station, Purba Medinipur, West Bengal 721137",
        "latitude": 22.4081,
        "longitude": 87.8545,
        "sanctioned_load": "60 kVA",
        "location_name": "Mecheda Goods Shed",
        "cluster": "MCA",
        "zone": "South Eastern Railway",
        "consignee_details": "SSE (Elect), Mecheda",
        "rooftop_area": 300,
        "feasible_area": 180,
        "feasible_capacity": 18,
        "status": "design",
    },
    {
        "id": "HLZ-PRT-001",
        "address": "Haldia Railway Station, Haldia, West Bengal 721602",
        "latitude": 22.0667,
        "longitude": 88.0698,
        "sanctioned_load": "40 kVA",
        "location_name": "Haldia Station Office",
        "cluster": "HALDIA",
        "zone": "South Eastern Railway",
        "consignee_details": "SSE (Elect), Haldia",
        "rooftop_area": 150,
        "feasible_area": 95,
        "feasible_capacity": 9.5,
        "status": "survey",
    },
]

SAMPLE_PROJECTS = [
    {
        "project_name": "Kharagpur Station Rooftop Solar",
        "site_id": "KGP-STN-001",
        "project_type": ProjectType.SOLAR_INSTALLATION,
        "priority": Priority.HIGH,
        "budget_total": 4250000,
        "engineering_team": "SER Electrical Design Cell",
        "procurement_vendor": "Tata Power Solar",
        "contractor": "Eastern Solar Works",
        "start_offset_days": -60,
        "duration_days": 120,
    },
    {
        "project_name": "Balasore Platform Shed Solar",
        "site_id": "BLS-STN-001",
        "project_type": ProjectType.SOLAR_INSTALLATION,
        "priority": Priority.MEDIUM,
        "budget_total": 2100000,
        "engineering_team": "Balasore Division Electrical",
        "procurement_vendor": "Waaree Energies",
        "contractor": "Odisha Renewables",
        "start_offset_days": -15,
        "duration_days": 90,
    },
]


async def seed_sites(sites: RailwaySiteService) -> int:
    created = 0
    for data in SAMPLE_SITES:
        if await sites.store.get(data["id"]) is not None:
            logger.info("Site already present, skipping", site_id=data["id"])
            continue
        await sites.create_site(RailwaySiteCreate(**data))
        created += 1
    return created


async def seed_projects(projects: EPCProjectService) -> int:
    created = 0
    today = utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    for sample in SAMPLE_PROJECTS:
        data = dict(sample)
        existing, _ = await projects.store.list(
            StoreQuery(
                filters=[
                    Filter("site_id", data["site_id"]),
                    Filter("project_name", data["project_name"]),
                ],
                limit=1,
            )
        )
        if existing:
            logger.info("Project already present, skipping", project_name=data["project_name"])
            continue

        start = today + timedelta(days=data.pop("start_offset_days"))
        end = start + timedelta(days=data.pop("duration_days"))
        await projects.create_project(
            EPCProjectCreate(**data, planned_start_date=start, planned_end_date=end)
        )
        created += 1
    return created


async def run_seeds() -> None:
    """Seed sites first, then the projects that reference them."""
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    if settings.storage_backend is None:
        logger.error("No storage backend configured, nothing to seed")
        raise SystemExit(1)

    if settings.storage_backend == "sql":
        await init_db()

    try:
        async with open_storage(settings) as storage:
            sites_created = await seed_sites(RailwaySiteService(storage))
            projects_created = await seed_projects(EPCProjectService(storage))
        logger.info("Seeding complete", sites_created=sites_created, projects_created=projects_created)
    finally:
        if settings.storage_backend == "sql":
            await close_db()


if __name__ == "__main__":
    asyncio.run(run_seeds())
