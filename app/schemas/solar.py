"""Solar estimate schemas."""

from typing import Optional

from pydantic import Field

from app.schemas.common import CamelModel


class SolarEstimateRequest(CamelModel):
    capacity_kw: float = Field(..., gt=0)
    sun_hours: float = Field(5.0, ge=0, le=24)
    performance_ratio: float = Field(0.8, gt=0, le=1)
    system_cost: Optional[float] = Field(None, ge=0)
    tariff_per_kwh: Optional[float] = Field(None, ge=0)
    electricity_inflation: float = Field(0.03, ge=0, le=1)
    lifespan_years: int = Field(25, ge=1, le=50)
    discount_rate: float = Field(0.05, ge=0, le=1)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    # Panel layout
    panel_watts: Optional[float] = Field(None, gt=0, description="Rated output of one panel in W")
    panel_length_m: float = Field(2.0, gt=0)
    panel_width_m: float = Field(1.0, gt=0)
    # Derating
    ambient_temperature: Optional[float] = Field(None, ge=-50, le=70, description="Ambient temperature in Celsius")
    system_age_years: float = Field(0, ge=0, le=50)


class SolarEstimate(CamelModel):
    effective_capacity_kw: float
    daily_production_kwh: float
    annual_production_kwh: float
    annual_carbon_offset_kg: float
    annual_savings: Optional[float] = None
    payback_years: Optional[float] = None
    lcoe: Optional[float] = None
    optimal_tilt_deg: Optional[float] = None
    panel_count: Optional[int] = None
    panel_area_m2: Optional[float] = None
    installation_area_m2: Optional[float] = None
    panel_efficiency_pct: Optional[float] = None
    potential_daily_kwh: Optional[float] = None
