"""Daily energy production records and their statistics."""

import calendar
import uuid
from datetime import date, timedelta
from typing import List, Optional

import pandas as pd
import structlog

from app.core.exceptions import ConflictException, NotFoundException
from app.schemas.common import to_record, utcnow
from app.schemas.energy_production import (
    DailyProductionStat,
    EnergyProduction,
    EnergyProductionCreate,
    LifetimeProductionStat,
    MonthlyProductionStat,
    ProductionStatistics,
)
from app.services.railway_site import RailwaySiteService
from app.storage.base import Filter, Storage, StoreQuery

logger = structlog.get_logger()

DAILY_WINDOW_DAYS = 30


class EnergyProductionService:
    """Service for per-site daily production rows."""

    def __init__(self, storage: Storage):
        self.store = storage.energy
        self.sites = RailwaySiteService(storage)

    async def record_production(self, site_id: str, data: EnergyProductionCreate) -> EnergyProduction:
        """Record one day of production and refresh the site's lifetime total."""
        await self.sites.get_site(site_id)

        _, existing = await self.store.list(
            StoreQuery(filters=[Filter("site_id", site_id), Filter("date", data.date)], limit=1)
        )
        if existing:
            raise ConflictException(
                f"Production for site {site_id} on {data.date.isoformat()} already recorded"
            )

        now = utcnow()
        row = EnergyProduction(
            id=uuid.uuid4().hex,
            site_id=site_id,
            created_at=now,
            updated_at=now,
            **data.model_dump(),
        )
        record = await self.store.create(to_record(row))

        lifetime = await self._lifetime_total(site_id)
        await self.sites.set_energy_generated(site_id, lifetime)
        logger.info(
            "Energy production recorded",
            site_id=site_id,
            date=data.date.isoformat(),
            energy_produced=data.energy_produced,
            lifetime_total=lifetime,
        )
        return EnergyProduction.model_validate(record)

    async def list_for_site(
        self,
        site_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> List[EnergyProduction]:
        """Production rows for a site, newest day first."""
        filters = [Filter("site_id", site_id)]
        if start_date:
            filters.append(Filter("date", start_date, "gte"))
        if end_date:
            filters.append(Filter("date", end_date, "lte"))

        records = await self.store.list_all(
            StoreQuery(filters=filters, order_by="date", descending=True)
        )
        return [EnergyProduction.model_validate(record) for record in records]

    async def _lifetime_total(self, site_id: str) -> float:
        rows = await self.list_for_site(site_id)
        return float(sum(row.energy_produced for row in rows))

    async def get_statistics(self, site_id: str, today: Optional[date] = None) -> ProductionStatistics:
        """Daily totals for the last 30 days, monthly totals for this year and lifetime totals."""
        await self.sites.get_site(site_id)
        today = today or utcnow().date()
        rows = await self.list_for_site(site_id)
        return build_statistics(rows, today)

    async def delete_for_site(self, site_id: str) -> int:
        """Remove every production row of a site, whether or not the site still exists."""
        deleted = await self.store.delete_where([Filter("site_id", site_id)])
        logger.info("Energy production cleaned up", site_id=site_id, deleted=deleted)
        return deleted


def _to_frame(rows: List[EnergyProduction]) -> pd.DataFrame:
    frame = pd.DataFrame(
        [
            {
                "date": pd.Timestamp(row.date),
                "energy_produced": row.energy_produced,
                "peak_output": row.peak_output,
                "sun_hours": row.sun_hours,
            }
            for row in rows
        ],
        columns=["date", "energy_produced", "peak_output", "sun_hours"],
    )
    frame["date"] = pd.to_datetime(frame["date"])
    return frame


def build_statistics(rows: List[EnergyProduction], today: date) -> ProductionStatistics:
    if not rows:
        return ProductionStatistics()

    df = _to_frame(rows)

    window = df[
        (df["date"] >= pd.Timestamp(today - timedelta(days=DAILY_WINDOW_DAYS)))
        & (df["date"] <= pd.Timestamp(today))
    ]
    daily = (
        window.groupby("date")
        .agg(
            total_energy=("energy_produced", "sum"),
            avg_peak_output=("peak_output", "mean"),
            total_sun_hours=("sun_hours", "sum"),
            record_count=("energy_produced", "size"),
        )
        .reset_index()
        .sort_values("date")
    )
    daily_stats = [
        DailyProductionStat(
            date=item.date.strftime("%Y-%m-%d"),
            total_energy=float(item.total_energy),
            avg_peak_output=float(item.avg_peak_output),
            total_sun_hours=float(item.total_sun_hours),
            record_count=int(item.record_count),
        )
        for item in daily.itertuples(index=False)
    ]

    year = df[df["date"].dt.year == today.year]
    monthly = (
        year.groupby(year["date"].dt.month)
        .agg(
            total_energy=("energy_produced", "sum"),
            avg_peak_output=("peak_output", "mean"),
            avg_sun_hours=("sun_hours", "mean"),
            days_count=("energy_produced", "size"),
        )
        .sort_index()
    )
    monthly_stats = [
        MonthlyProductionStat(
            month=int(month),
            year=today.year,
            month_name=calendar.month_name[int(month)],
            total_energy=float(item["total_energy"]),
            avg_peak_output=float(item["avg_peak_output"]),
            avg_sun_hours=float(item["avg_sun_hours"]),
            days_count=int(item["days_count"]),
        )
        for month, item in monthly.iterrows()
    ]

    lifetime = LifetimeProductionStat(
        total_energy=float(df["energy_produced"].sum()),
        avg_peak_output=float(df["peak_output"].mean()),
        avg_sun_hours=float(df["sun_hours"].mean()),
        days_count=int(len(df)),
    )

    return ProductionStatistics(
        daily_stats=daily_stats,
        monthly_stats=monthly_stats,
        lifetime_stats=lifetime,
    )
