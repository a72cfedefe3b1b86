"""Railway site service."""

import random
from datetime import timedelta
from typing import Any, Dict, List, Optional, Tuple

import structlog

from app.core.config import get_settings
from app.core.exceptions import ConflictException, NotFoundException
from app.schemas.common import Pagination, to_record, utcnow
from app.schemas.railway_site import (
    MaintenanceSchedule,
    RailwaySite,
    RailwaySiteCreate,
    RailwaySiteUpdate,
)
from app.services.site_status import check_transition
from app.storage.base import Filter, Storage, StoreQuery

logger = structlog.get_logger()

# Rough yield assumptions used for placeholder targets
KWH_PER_KW_PER_DAY = 4
DAYS_PER_MONTH = 30
CARBON_KG_PER_KW_PER_DAY = 0.8
DAYS_PER_YEAR = 365
BASE_EFFICIENCY = 85
LAST_MAINTENANCE_DAYS_AGO = 30

SEARCH_FIELDS = ("location_name", "address", "id")


def monthly_energy_target(feasible_capacity: float) -> float:
    return feasible_capacity * KWH_PER_KW_PER_DAY * DAYS_PER_MONTH


def carbon_offset_kg(feasible_capacity: float) -> float:
    return feasible_capacity * CARBON_KG_PER_KW_PER_DAY * DAYS_PER_YEAR


class RailwaySiteService:
    """Service for railway sites."""

    def __init__(self, storage: Storage):
        self.store = storage.sites

    async def _next_serial_number(self) -> int:
        records, _ = await self.store.list(
            StoreQuery(order_by="serial_number", descending=True, limit=1)
        )
        return records[0]["serial_number"] + 1 if records else 1

    async def create_site(self, data: RailwaySiteCreate) -> RailwaySite:
        """Create a site, filling derived placeholder figures the form did not supply."""
        if await self.store.get(data.id) is not None:
            raise ConflictException(f"Site {data.id} already exists")

        now = utcnow()
        capacity = data.feasible_capacity
        values = data.model_dump()
        defaults = {
            "energy_generated": random.randrange(10000),
            "efficiency": BASE_EFFICIENCY + random.randrange(10),
            "monthly_energy_target": monthly_energy_target(capacity),
            "carbon_offset_kg": carbon_offset_kg(capacity),
        }
        for name, value in defaults.items():
            if values.get(name) is None:
                values[name] = value

        site = RailwaySite(
            **values,
            serial_number=await self._next_serial_number(),
            maintenance_schedule=MaintenanceSchedule.QUARTERLY,
            installation_date=now,
            last_maintenance_date=now - timedelta(days=LAST_MAINTENANCE_DAYS_AGO),
            created_at=now,
            updated_at=now,
        )
        record = await self.store.create(to_record(site))
        logger.info(
            "Railway site created",
            site_id=site.id,
            serial_number=site.serial_number,
            cluster=site.cluster.value,
        )
        return RailwaySite.model_validate(record)

    async def get_site(self, site_id: str) -> RailwaySite:
        record = await self.store.get(site_id)
        if record is None:
            raise NotFoundException(f"Site {site_id} not found")
        return RailwaySite.model_validate(record)

    async def list_sites(
        self,
        page: int = 1,
        limit: int = 20,
        search: Optional[str] = None,
        cluster: Optional[str] = None,
    ) -> Tuple[List[RailwaySite], Pagination]:
        """List sites newest first, optionally searched and filtered by cluster."""
        filters = [Filter("cluster", cluster)] if cluster else []
        records, total = await self.store.list(
            StoreQuery(
                filters=filters,
                search=search or None,
                search_fields=SEARCH_FIELDS,
                order_by="created_at",
                descending=True,
                skip=(page - 1) * limit,
                limit=limit,
            )
        )
        sites = [RailwaySite.model_validate(record) for record in records]
        return sites, Pagination.build(page, limit, total)

    async def list_all(self) -> List[RailwaySite]:
        records = await self.store.list_all()
        return [RailwaySite.model_validate(record) for record in records]

    async def update_site(self, site_id: str, changes: RailwaySiteUpdate) -> RailwaySite:
        """Partial update; capacity changes refresh the derived targets."""
        site = await self.get_site(site_id)
        data: Dict[str, Any] = {
            name: value for name, value in changes.model_dump(exclude_unset=True).items() if value is not None
        }

        if "status" in data:
            check_transition(site.status, data["status"], get_settings().ENFORCE_SITE_STATUS_TRANSITIONS)

        capacity = data.get("feasible_capacity")
        if capacity is not None and capacity != site.feasible_capacity:
            data["monthly_energy_target"] = monthly_energy_target(capacity)
            data["carbon_offset_kg"] = carbon_offset_kg(capacity)

        data["updated_at"] = utcnow()
        record = await self.store.update(site_id, data)
        if record is None:
            raise NotFoundException(f"Site {site_id} not found")
        logger.info("Railway site updated", site_id=site_id, fields=sorted(data))
        return RailwaySite.model_validate(record)

    async def delete_site(self, site_id: str) -> None:
        """Delete a site. Projects and production rows referencing it are kept."""
        if not await self.store.delete(site_id):
            raise NotFoundException(f"Site {site_id} not found")
        logger.info("Railway site deleted", site_id=site_id)

    async def set_energy_generated(self, site_id: str, energy_generated: float) -> None:
        await self.store.update(site_id, {"energy_generated": energy_generated, "updated_at": utcnow()})
