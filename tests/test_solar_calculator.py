"""Tests for the solar calculator."""

import math

import pytest
from httpx import AsyncClient

from app.schemas.solar import SolarEstimateRequest
from app.services import solar_calculator as calc


def test_expected_production():
    assert calc.expected_production(10, 5, 0.8) == pytest.approx(40)
    assert calc.expected_production(10, 5, 0.8, days=30) == pytest.approx(1200)


def test_potential_energy_and_efficiency():
    assert calc.potential_energy(100, 0.2, 5) == pytest.approx(100)
    assert calc.panel_efficiency(20, 100) == pytest.approx(0.2)
    assert calc.panel_efficiency(20, 0) == 0


def test_degradation():
    assert calc.panel_degradation(100, 0) == 100
    assert calc.panel_degradation(100, 2) == pytest.approx(100 * 0.995**2)


def test_optimal_tilt_angle():
    assert calc.optimal_tilt_angle(22) == pytest.approx(19.14)
    assert calc.optimal_tilt_angle(-22) == pytest.approx(19.14)
    assert calc.optimal_tilt_angle(30, "summer") == pytest.approx(3.5)
    assert calc.optimal_tilt_angle(30, "winter") == pytest.approx(56)


def test_performance_ratio_and_sizing():
    assert calc.performance_ratio(40, 10, 5) == pytest.approx(0.8)
    assert calc.performance_ratio(40, 0, 5) == 0
    assert calc.required_panels(10, 400) == 25
    assert calc.required_panels(10, 0) == 0
    assert calc.required_area(10, 2, 1) == pytest.approx(22)


def test_temperature_effect():
    assert calc.temperature_effect(10, 35) == pytest.approx(9.6)
    assert calc.temperature_effect(10, 25) == pytest.approx(10)


def test_carbon_offset_default_factor():
    assert calc.carbon_offset(1000) == pytest.approx(850)


def test_lcoe():
    assert calc.levelized_cost_of_energy(1000, 100, 1, discount_rate=0) == pytest.approx(10)
    assert calc.levelized_cost_of_energy(1000, 0, 25) == 0


def test_payback_period():
    assert calc.payback_period(1000, 100, electricity_inflation=0) == pytest.approx(10)
    assert calc.payback_period(950, 100, electricity_inflation=0) == pytest.approx(9.5)
    assert calc.payback_period(1000, 100) < 10


def test_payback_period_never_reached():
    assert math.isinf(calc.payback_period(1000, 0))
    assert math.isinf(calc.payback_period(1000, -5))
    assert math.isinf(calc.payback_period(1_000_000, 1, electricity_inflation=0))


def test_estimate_without_costs():
    result = calc.estimate(SolarEstimateRequest(capacity_kw=10))
    assert result.daily_production_kwh == pytest.approx(40)
    assert result.annual_production_kwh == pytest.approx(14600)
    assert result.annual_carbon_offset_kg == pytest.approx(12410)
    assert result.payback_years is None
    assert result.lcoe is None


def test_estimate_with_unreachable_payback():
    result = calc.estimate(
        SolarEstimateRequest(capacity_kw=1, system_cost=10_000_000, tariff_per_kwh=0.01, electricity_inflation=0)
    )
    assert result.annual_savings == pytest.approx(14.6)
    assert result.payback_years is None
    assert result.lcoe > 0


@pytest.mark.asyncio
async def test_estimate_endpoint(client: AsyncClient):
    response = await client.get(
        "/api/solar/estimate",
        params={"capacityKw": 10, "systemCost": 500000, "tariffPerKwh": 8, "latitude": 22},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["dailyProductionKwh"] == pytest.approx(40)
    assert data["annualSavings"] == pytest.approx(116800)
    assert 0 < data["paybackYears"] < 5
    assert data["optimalTiltDeg"] == pytest.approx(19.14)


@pytest.mark.asyncio
async def test_estimate_endpoint_validates_capacity(client: AsyncClient):
    response = await client.get("/api/solar/estimate", params={"capacityKw": 0})
    assert response.status_code == 422


def test_estimate_panel_layout():
    result = calc.estimate(SolarEstimateRequest(capacity_kw=10, panel_watts=400))
    assert result.panel_count == 25
    assert result.panel_area_m2 == pytest.approx(50)
    assert result.installation_area_m2 == pytest.approx(55)
    assert result.panel_efficiency_pct == pytest.approx(20)
    assert result.potential_daily_kwh == pytest.approx(50)
    assert result.effective_capacity_kw == pytest.approx(10)


def test_estimate_derates_for_heat_and_age():
    hot = calc.estimate(SolarEstimateRequest(capacity_kw=10, ambient_temperature=45))
    assert hot.effective_capacity_kw == pytest.approx(9.2)
    assert hot.daily_production_kwh == pytest.approx(36.8)

    aged = calc.estimate(SolarEstimateRequest(capacity_kw=10, system_age_years=2))
    assert aged.effective_capacity_kw == pytest.approx(9.90025)
    assert aged.panel_count is None


@pytest.mark.asyncio
async def test_estimate_endpoint_with_panels(client: AsyncClient):
    response = await client.get(
        "/api/solar/estimate",
        params={"capacityKw": 150, "panelWatts": 540, "ambientTemperature": 35, "systemAgeYears": 1},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["panelCount"] == 278
    assert data["effectiveCapacityKw"] == pytest.approx(150 * 0.995 * 0.96)
    assert data["installationAreaM2"] == pytest.approx(278 * 2 * 1.1)
