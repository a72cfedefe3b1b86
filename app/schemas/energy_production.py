"""Energy production schemas."""

import datetime as dt
from enum import Enum
from typing import List, Optional

from pydantic import Field, computed_field, model_validator

from app.schemas.common import CamelModel, UTCDateTime


class WeatherCondition(str, Enum):
    SUNNY = "sunny"
    PARTLY_CLOUDY = "partly cloudy"
    CLOUDY = "cloudy"
    RAINY = "rainy"


class EnergyProductionCreate(CamelModel):
    date: dt.date
    start_hour: Optional[int] = Field(None, ge=0, le=23)
    end_hour: Optional[int] = Field(None, ge=0, le=23)
    energy_produced: float = Field(..., ge=0, description="Energy produced in kWh")
    peak_output: float = Field(..., ge=0, description="Peak output in kW")
    sun_hours: float = Field(..., ge=0)
    weather_conditions: WeatherCondition
    temperature: Optional[float] = Field(None, description="Ambient temperature in Celsius")
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_hours(self) -> "EnergyProductionCreate":
        if self.start_hour is not None and self.end_hour is not None and self.end_hour < self.start_hour:
            raise ValueError("endHour must not be before startHour")
        return self


class EnergyProduction(EnergyProductionCreate):
    """Stored production row for one site and day."""

    id: str
    site_id: str
    created_at: Optional[UTCDateTime] = None
    updated_at: Optional[UTCDateTime] = None

    @computed_field
    @property
    def efficiency(self) -> float:
        """Energy produced as a percentage of peak output over sun hours."""
        potential = self.peak_output * self.sun_hours
        if potential == 0:
            return 0.0
        return self.energy_produced / potential * 100


class DailyProductionStat(CamelModel):
    date: str
    total_energy: float
    avg_peak_output: float
    total_sun_hours: float
    record_count: int


class MonthlyProductionStat(CamelModel):
    month: int
    year: int
    month_name: str
    total_energy: float
    avg_peak_output: float
    avg_sun_hours: float
    days_count: int


class LifetimeProductionStat(CamelModel):
    total_energy: float = 0
    avg_peak_output: float = 0
    avg_sun_hours: float = 0
    days_count: int = 0


class ProductionStatistics(CamelModel):
    daily_stats: List[DailyProductionStat] = []
    monthly_stats: List[MonthlyProductionStat] = []
    lifetime_stats: LifetimeProductionStat = Field(default_factory=LifetimeProductionStat)


class EnergyCleanupResponse(CamelModel):
    success: bool = True
    deleted: int
