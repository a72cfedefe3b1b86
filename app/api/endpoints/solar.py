from typing import Optional

from fastapi import APIRouter, Query

from app.schemas.solar import SolarEstimate, SolarEstimateRequest
from app.services import solar_calculator

router = APIRouter()


@router.get("/estimate", response_model=SolarEstimate)
async def solar_estimate(
    capacity_kw: float = Query(..., gt=0, alias="capacityKw"),
    sun_hours: float = Query(5.0, ge=0, le=24, alias="sunHours"),
    performance_ratio: float = Query(0.8, gt=0, le=1, alias="performanceRatio"),
    system_cost: Optional[float] = Query(None, ge=0, alias="systemCost"),
    tariff_per_kwh: Optional[float] = Query(None, ge=0, alias="tariffPerKwh"),
    electricity_inflation: float = Query(0.03, ge=0, le=1, alias="electricityInflation"),
    lifespan_years: int = Query(25, ge=1, le=50, alias="lifespanYears"),
    discount_rate: float = Query(0.05, ge=0, le=1, alias="discountRate"),
    latitude: Optional[float] = Query(None, ge=-90, le=90),
    panel_watts: Optional[float] = Query(None, gt=0, alias="panelWatts"),
    panel_length_m: float = Query(2.0, gt=0, alias="panelLengthM"),
    panel_width_m: float = Query(1.0, gt=0, alias="panelWidthM"),
    ambient_temperature: Optional[float] = Query(None, ge=-50, le=70, alias="ambientTemperature"),
    system_age_years: float = Query(0, ge=0, le=50, alias="systemAgeYears"),
):
    """Production, carbon offset, panel layout, payback and LCOE estimate for a solar system"""
    request = SolarEstimateRequest(
        capacity_kw=capacity_kw,
        sun_hours=sun_hours,
        performance_ratio=performance_ratio,
        system_cost=system_cost,
        tariff_per_kwh=tariff_per_kwh,
        electricity_inflation=electricity_inflation,
        lifespan_years=lifespan_years,
        discount_rate=discount_rate,
        latitude=latitude,
        panel_watts=panel_watts,
        panel_length_m=panel_length_m,
        panel_width_m=panel_width_m,
        ambient_temperature=ambient_temperature,
        system_age_years=system_age_years,
    )
    return solar_calculator.estimate(request)
