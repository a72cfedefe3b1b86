"""Closed-form solar sizing and financial estimates."""

import math

from app.schemas.solar import SolarEstimate, SolarEstimateRequest

STC_TEMPERATURE_C = 25.0
DEFAULT_EMISSION_FACTOR = 0.85  # kg CO2 per kWh of grid electricity
ANNUAL_DEGRADATION = 0.005
MAX_PAYBACK_YEARS = 100
DAYS_PER_YEAR = 365


def potential_energy(area: float, efficiency: float, solar_irradiance: float) -> float:
    """Potential energy in kWh/day for a panel area (m²), efficiency (0-1) and irradiance (kWh/m²/day)."""
    return area * efficiency * solar_irradiance


def panel_efficiency(rated_capacity: float, area: float, standard_irradiance: float = 1.0) -> float:
    """Panel efficiency as a fraction of rated capacity (kW) per area at standard irradiance."""
    if area <= 0 or standard_irradiance <= 0:
        return 0.0
    return rated_capacity / (area * standard_irradiance)


def panel_degradation(initial_capacity: float, age_years: float, degradation_rate: float = ANNUAL_DEGRADATION) -> float:
    """Remaining capacity in kW after ``age_years`` of compound degradation."""
    return initial_capacity * math.pow(1 - degradation_rate, age_years)


def optimal_tilt_angle(latitude: float, season: str = "year-round") -> float:
    """Optimal panel tilt in degrees for a latitude.

    Args:
        latitude: Location latitude in degrees
        season: "summer", "winter" or "year-round"
    """
    abs_latitude = abs(latitude)
    if season == "summer":
        return abs_latitude * 0.9 - 23.5
    if season == "winter":
        return abs_latitude * 0.9 + 29
    return abs_latitude * 0.87


def expected_production(
    capacity_kw: float, sun_hours: float, performance_ratio: float = 0.8, days: int = 1
) -> float:
    """Expected production in kWh over ``days``."""
    return capacity_kw * sun_hours * performance_ratio * days


def performance_ratio(actual_production: float, capacity_kw: float, sun_hours: float) -> float:
    theoretical = capacity_kw * sun_hours
    if theoretical <= 0:
        return 0.0
    return actual_production / theoretical


def required_panels(desired_capacity_kw: float, panel_watts: float) -> int:
    if panel_watts <= 0:
        return 0
    return math.ceil(desired_capacity_kw * 1000 / panel_watts)


def required_area(
    number_of_panels: int, panel_length: float, panel_width: float, spacing_factor: float = 1.1
) -> float:
    """Installation area in m², ``spacing_factor`` adds room between panels."""
    return number_of_panels * panel_length * panel_width * spacing_factor


def temperature_effect(
    capacity_kw: float, temperature_c: float, temperature_coefficient: float = -0.004
) -> float:
    """Capacity in kW adjusted for ambient temperature relative to 25 °C."""
    return capacity_kw * (1 + (temperature_c - STC_TEMPERATURE_C) * temperature_coefficient)


def carbon_offset(energy_kwh: float, emission_factor: float = DEFAULT_EMISSION_FACTOR) -> float:
    """kg of CO2 avoided by ``energy_kwh``."""
    return energy_kwh * emission_factor


def levelized_cost_of_energy(
    total_cost: float, annual_production: float, lifespan_years: int, discount_rate: float = 0.05
) -> float:
    """
    LCOE in currency units per kWh.

    Production degrades by 0.5 % a year and is discounted at ``discount_rate``.
    """
    if annual_production <= 0 or lifespan_years <= 0:
        return 0.0

    discounted_energy = sum(
        annual_production * math.pow(1 - ANNUAL_DEGRADATION, year - 1) / math.pow(1 + discount_rate, year)
        for year in range(1, lifespan_years + 1)
    )
    return total_cost / discounted_energy


def payback_period(system_cost: float, annual_savings: float, electricity_inflation: float = 0.03) -> float:
    """
    Years until cumulative savings cover the system cost.

    Savings grow with electricity inflation; the final year is fractional.
    Returns ``math.inf`` when savings are not positive or payback takes more
    than 100 years.
    """
    if annual_savings <= 0:
        return math.inf

    cumulative = 0.0
    years = 0
    while cumulative < system_cost:
        years += 1
        cumulative += annual_savings * math.pow(1 + electricity_inflation, years - 1)
        if years > MAX_PAYBACK_YEARS:
            return math.inf

    last_year_savings = annual_savings * math.pow(1 + electricity_inflation, years - 1)
    return years - (cumulative - system_cost) / last_year_savings


def effective_capacity(request: SolarEstimateRequest) -> float:
    """Rated capacity after age degradation and, when given, ambient temperature derating."""
    capacity = panel_degradation(request.capacity_kw, request.system_age_years)
    if request.ambient_temperature is not None:
        capacity = temperature_effect(capacity, request.ambient_temperature)
    return max(0.0, capacity)


def estimate(request: SolarEstimateRequest) -> SolarEstimate:
    """Production, carbon, layout and (when costs are given) financial estimate for a system."""
    capacity = effective_capacity(request)
    daily = expected_production(capacity, request.sun_hours, request.performance_ratio)
    annual = daily * DAYS_PER_YEAR

    result = SolarEstimate(
        effective_capacity_kw=capacity,
        daily_production_kwh=daily,
        annual_production_kwh=annual,
        annual_carbon_offset_kg=carbon_offset(annual),
        optimal_tilt_deg=optimal_tilt_angle(request.latitude) if request.latitude is not None else None,
    )

    if request.panel_watts is not None:
        panels = required_panels(request.capacity_kw, request.panel_watts)
        panel_area = panels * request.panel_length_m * request.panel_width_m
        efficiency = panel_efficiency(request.capacity_kw, panel_area)
        result.panel_count = panels
        result.panel_area_m2 = panel_area
        result.installation_area_m2 = required_area(panels, request.panel_length_m, request.panel_width_m)
        result.panel_efficiency_pct = efficiency * 100
        # Peak sun hours equal daily irradiance in kWh/m²
        result.potential_daily_kwh = potential_energy(panel_area, efficiency, request.sun_hours)

    if request.tariff_per_kwh is not None:
        result.annual_savings = annual * request.tariff_per_kwh
    if request.system_cost is not None:
        result.lcoe = levelized_cost_of_energy(
            request.system_cost, annual, request.lifespan_years, request.discount_rate
        )
        if result.annual_savings is not None:
            years = payback_period(request.system_cost, result.annual_savings, request.electricity_inflation)
            result.payback_years = None if math.isinf(years) else years

    return result
