"""Tests for the health score calculator and overall progress."""

from datetime import datetime, timedelta

import pytest

from app.schemas.epc_project import (
    Budget,
    EPCProject,
    Inspection,
    Milestone,
    ProjectPhases,
    Resources,
    Risk,
    Timeline,
)
from app.services.health_score import (
    calculate_health_score,
    expected_progress,
    overall_progress,
    weighted_progress,
)

NOW = datetime(2024, 6, 1, 12, 0, 0)


def make_project(
    start_offset_days: int = 10,
    duration_days: int = 90,
    total: float = 1000,
    spent: float = 0,
    progress=(0, 0, 0),
    **overrides,
) -> EPCProject:
    start = NOW + timedelta(days=start_offset_days)
    phases = ProjectPhases()
    phases.engineering.progress, phases.procurement.progress, phases.construction.progress = progress
    data = {
        "project_id": "EPC-1-TEST",
        "project_name": "Test project",
        "site_id": "SITE-1",
        "project_type": "solar_installation",
        "phases": phases,
        "resources": Resources(
            budget=Budget(total=total, spent=spent),
            timeline=Timeline(
                planned_start_date=start,
                planned_end_date=start + timedelta(days=duration_days),
            ),
        ),
    }
    data.update(overrides)
    return EPCProject(**data)


@pytest.mark.parametrize(
    "engineering,procurement,construction,expected",
    [
        (0, 0, 0, 0),
        (100, 100, 100, 100),
        (50, 50, 50, 50),
        (100, 0, 0, 30),
        (0, 0, 100, 40),
        (5, 0, 0, 2),  # 1.5 rounds up
        (15, 0, 0, 5),  # 4.5 rounds up
        (0, 0, 1, 0),  # 0.4 rounds down
    ],
)
def test_weighted_progress(engineering, procurement, construction, expected):
    assert weighted_progress(engineering, procurement, construction) == expected


def test_overall_progress_uses_phase_progress():
    project = make_project(progress=(80, 60, 25))
    # 24 + 18 + 10
    assert overall_progress(project.phases) == 52


def test_new_project_is_fully_healthy():
    assert calculate_health_score(make_project(), NOW) == 100


def test_overdue_project_is_penalized():
    project = make_project(start_offset_days=-100, duration_days=90)
    # 20 for overdue, 20 for the capped schedule lag
    assert calculate_health_score(project, NOW) == 60


def test_completed_project_is_not_penalized_for_schedule():
    project = make_project(start_offset_days=-100, duration_days=90, overall_status="completed")
    assert calculate_health_score(project, NOW) == 100


def test_budget_overrun_penalty():
    assert calculate_health_score(make_project(spent=1100), NOW) == 100
    assert calculate_health_score(make_project(spent=1101), NOW) == 85


def test_zero_budget_skips_overrun_check():
    assert calculate_health_score(make_project(total=0, spent=500), NOW) == 100


def test_open_high_probability_risks_are_penalized():
    risks = [
        Risk(id="RISK-001", description="Flood", probability="high", impact="high"),
        Risk(id="RISK-002", description="Strike", probability="high", impact="low", status="mitigated"),
        Risk(id="RISK-003", description="Delay", probability="medium", impact="high"),
    ]
    assert calculate_health_score(make_project(risks=risks), NOW) == 90


def test_failed_inspections_are_penalized():
    project = make_project()
    project.quality_control.inspections = [
        Inspection(type="electrical", date=NOW, inspector="A", status="failed"),
        Inspection(type="structural", date=NOW, inspector="B", status="failed"),
        Inspection(type="safety", date=NOW, inspector="C", status="passed"),
    ]
    assert calculate_health_score(project, NOW) == 90


def test_on_hold_phases_and_delayed_milestones_are_penalized():
    project = make_project()
    project.phases.procurement.status = "on_hold"
    project.phases.construction.milestones = [
        Milestone(name="Site Preparation", status="delayed"),
        Milestone(name="Equipment Installation", status="pending"),
    ]
    assert calculate_health_score(project, NOW) == 90


def test_schedule_lag_penalty():
    # Halfway through the timeline with nothing done
    project = make_project(start_offset_days=-50, duration_days=100)
    assert expected_progress(project, NOW) == pytest.approx(50)
    assert calculate_health_score(project, NOW) == 90

    on_track = make_project(start_offset_days=-50, duration_days=100, progress=(100, 100, 0))
    assert calculate_health_score(on_track, NOW) == 100


def test_score_is_clamped_to_zero():
    risks = [
        Risk(id=f"RISK-{i:03d}", description="Risk", probability="high", impact="high")
        for i in range(12)
    ]
    assert calculate_health_score(make_project(risks=risks), NOW) == 0
