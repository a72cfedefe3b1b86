"""Tests for EPC project API endpoints."""

import re
from datetime import timedelta

import pytest
from httpx import AsyncClient

from app.schemas.common import utcnow

PROJECTS_URL = "/api/epc/projects"


async def create_project(client: AsyncClient, data: dict) -> dict:
    response = await client.post(PROJECTS_URL, json=data)
    assert response.status_code == 201, response.text
    return response.json()["project"]


@pytest.mark.asyncio
async def test_create_project_with_defaults(client: AsyncClient, project_data: dict):
    """Test creating a project fills in milestones, compliance items and risks."""
    project = await create_project(client, project_data)

    assert re.fullmatch(r"EPC-\d+-[0-9A-Z]{4}", project["projectId"])
    assert project["projectName"] == "Kharagpur Rooftop Solar"
    assert project["overallStatus"] == "planning"
    assert project["healthScore"] == 100
    assert project["overallProgress"] == 0

    phases = project["phases"]
    assert phases["engineering"]["assignedTeam"] == ["Design Cell"]
    assert phases["procurement"]["vendor"] == "Solar Vendor Ltd"
    assert phases["construction"]["contractor"] == "Eastern Solar Works"
    assert [m["name"] for m in phases["construction"]["milestones"]] == [
        "Site Preparation",
        "Equipment Installation",
        "System Commissioning",
    ]

    assert project["resources"]["budget"] == {
        "total": 1000000,
        "allocated": 0,
        "spent": 0,
        "currency": "INR",
    }
    assert len(project["qualityControl"]["compliance"]) == 3
    assert [r["id"] for r in project["risks"]] == ["RISK-001", "RISK-002"]
    assert all(r["owner"] == "Design Cell" for r in project["risks"])


@pytest.mark.asyncio
async def test_create_project_without_team_uses_project_manager(client: AsyncClient, project_data: dict):
    project_data.pop("engineeringTeam")
    project = await create_project(client, project_data)
    assert project["phases"]["engineering"]["assignedTeam"] == []
    assert all(r["owner"] == "Project Manager" for r in project["risks"])


@pytest.mark.asyncio
async def test_create_project_rejects_end_before_start(client: AsyncClient, project_data: dict):
    project_data["plannedEndDate"] = project_data["plannedStartDate"]
    project_data["plannedStartDate"] = (utcnow() + timedelta(days=30)).isoformat()
    response = await client.post(PROJECTS_URL, json=project_data)
    assert response.status_code == 422
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_get_project(client: AsyncClient, project_data: dict):
    created = await create_project(client, project_data)

    response = await client.get(f"{PROJECTS_URL}/{created['projectId']}")
    assert response.status_code == 200
    assert response.json()["projectId"] == created["projectId"]


@pytest.mark.asyncio
async def test_get_missing_project(client: AsyncClient):
    response = await client.get(f"{PROJECTS_URL}/EPC-0-NONE")
    assert response.status_code == 404
    error = response.json()["error"]
    assert error["type"] == "NotFoundException"


@pytest.mark.asyncio
async def test_list_projects_paginates_newest_first(client: AsyncClient, project_data: dict):
    names = []
    for i in range(3):
        project_data["projectName"] = f"Project {i}"
        names.append((await create_project(client, project_data))["projectName"])

    response = await client.get(PROJECTS_URL, params={"page": 1, "limit": 2})
    assert response.status_code == 200
    data = response.json()
    assert [p["projectName"] for p in data["projects"]] == ["Project 2", "Project 1"]
    assert data["pagination"] == {"page": 1, "limit": 2, "total": 3, "pages": 2}
    assert all("overallProgress" in p for p in data["projects"])

    response = await client.get(PROJECTS_URL, params={"page": 2, "limit": 2})
    assert [p["projectName"] for p in response.json()["projects"]] == ["Project 0"]


@pytest.mark.asyncio
async def test_list_projects_filters(client: AsyncClient, project_data: dict):
    await create_project(client, project_data)
    project_data["priority"] = "critical"
    await create_project(client, project_data)

    response = await client.get(PROJECTS_URL, params={"priority": "critical"})
    data = response.json()
    assert data["pagination"]["total"] == 1
    assert data["projects"][0]["priority"] == "critical"

    response = await client.get(PROJECTS_URL, params={"status": "active"})
    assert response.json()["pagination"]["total"] == 0


@pytest.mark.asyncio
async def test_list_projects_without_storage(unavailable_client: AsyncClient):
    response = await unavailable_client.get(PROJECTS_URL)
    assert response.status_code == 500
    assert response.json() == {"error": "Database connection not available"}


@pytest.mark.asyncio
async def test_update_project_recomputes_health(client: AsyncClient, project_data: dict):
    created = await create_project(client, project_data)

    response = await client.put(
        f"{PROJECTS_URL}/{created['projectId']}",
        json={"projectName": "Renamed", "budgetSpent": 1200000, "overallStatus": "active"},
    )
    assert response.status_code == 200
    project = response.json()["project"]
    assert project["projectName"] == "Renamed"
    assert project["overallStatus"] == "active"
    assert project["resources"]["budget"]["spent"] == 1200000
    # Budget overrun beyond 110 %
    assert project["healthScore"] == 85


@pytest.mark.asyncio
async def test_update_missing_project(client: AsyncClient):
    response = await client.put(f"{PROJECTS_URL}/EPC-0-NONE", json={"projectName": "x"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_rejects_read_only_fields(client: AsyncClient, project_data: dict):
    """Test that health score and risks cannot be sent through the project update form."""
    created = await create_project(client, project_data)
    url = f"{PROJECTS_URL}/{created['projectId']}"

    response = await client.put(url, json={"projectName": "Renamed", "healthScore": 100})
    assert response.status_code == 422
    assert response.json()["error"]["type"] == "ValidationError"

    response = await client.put(url, json={"risks": []})
    assert response.status_code == 422

    response = await client.get(url)
    assert response.json()["projectName"] == "Kharagpur Rooftop Solar"


@pytest.mark.asyncio
async def test_phase_update_recomputes_health_and_progress(client: AsyncClient, project_data: dict):
    now = utcnow()
    project_data["plannedStartDate"] = (now - timedelta(days=50)).isoformat()
    project_data["plannedEndDate"] = (now + timedelta(days=50)).isoformat()
    created = await create_project(client, project_data)
    # Halfway through the timeline with no progress
    assert created["healthScore"] == 90

    url = f"{PROJECTS_URL}/{created['projectId']}/phases/construction"
    response = await client.patch(url, json={"status": "completed", "progress": 100})
    assert response.status_code == 200
    project = response.json()["project"]
    construction = project["phases"]["construction"]
    assert construction["status"] == "completed"
    assert construction["completedDate"] is not None
    assert construction["startDate"] is None
    assert project["overallProgress"] == 40
    assert project["healthScore"] == 98

    url = f"{PROJECTS_URL}/{created['projectId']}/phases/engineering"
    response = await client.patch(url, json={"status": "in_progress", "progress": 100})
    project = response.json()["project"]
    assert project["phases"]["engineering"]["startDate"] is not None
    assert project["phases"]["engineering"]["completedDate"] is None
    assert project["overallProgress"] == 70
    assert project["healthScore"] == 100


@pytest.mark.asyncio
async def test_phase_on_hold_lowers_health(client: AsyncClient, project_data: dict):
    created = await create_project(client, project_data)
    url = f"{PROJECTS_URL}/{created['projectId']}/phases/procurement"
    response = await client.patch(url, json={"status": "on_hold", "progress": 10})
    assert response.json()["project"]["healthScore"] == 95


@pytest.mark.asyncio
async def test_phase_update_rejects_bad_input(client: AsyncClient, project_data: dict):
    created = await create_project(client, project_data)
    base = f"{PROJECTS_URL}/{created['projectId']}/phases"

    response = await client.patch(f"{base}/commissioning", json={"status": "completed", "progress": 100})
    assert response.status_code == 422

    response = await client.patch(f"{base}/engineering", json={"status": "completed", "progress": 101})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_add_risk_and_inspection(client: AsyncClient, project_data: dict):
    created = await create_project(client, project_data)
    base = f"{PROJECTS_URL}/{created['projectId']}"

    response = await client.post(
        f"{base}/risks",
        json={"description": "Monsoon flooding", "probability": "high", "impact": "high"},
    )
    assert response.status_code == 201
    project = response.json()["project"]
    assert project["risks"][-1]["id"] == "RISK-003"
    assert project["healthScore"] == 90

    response = await client.post(
        f"{base}/inspections",
        json={"type": "electrical", "date": utcnow().isoformat(), "inspector": "CEE", "status": "failed"},
    )
    assert response.status_code == 201
    project = response.json()["project"]
    assert len(project["qualityControl"]["inspections"]) == 1
    assert project["healthScore"] == 85


@pytest.mark.asyncio
async def test_delete_project(client: AsyncClient, project_data: dict):
    created = await create_project(client, project_data)

    response = await client.delete(f"{PROJECTS_URL}/{created['projectId']}")
    assert response.status_code == 200
    assert response.json() == {"success": True}

    response = await client.get(f"{PROJECTS_URL}/{created['projectId']}")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_epc_dashboard_endpoint(client: AsyncClient, project_data: dict):
    await create_project(client, project_data)
    project_data["priority"] = "critical"
    await create_project(client, project_data)

    response = await client.get("/api/epc/dashboard")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    stats = data["stats"]
    assert stats["overview"]["totalProjects"] == 2
    assert stats["overview"]["avgHealthScore"] == 100
    assert len(stats["recentProjects"]) == 2
    assert [p["priority"] for p in stats["criticalProjects"]] == ["critical"]


@pytest.mark.asyncio
async def test_epc_dashboard_without_storage(unavailable_client: AsyncClient):
    response = await unavailable_client.get("/api/epc/dashboard")
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is False
    assert data["error"] == "Database connection not available"
    assert data["stats"] is None


@pytest.mark.asyncio
async def test_mutations_without_storage_return_503(unavailable_client: AsyncClient, project_data: dict):
    response = await unavailable_client.post(PROJECTS_URL, json=project_data)
    assert response.status_code == 503
    assert response.json()["error"]["type"] == "StorageUnavailableException"


@pytest.mark.asyncio
async def test_mitigating_high_risk_restores_health(client: AsyncClient, project_data: dict):
    created = await create_project(client, project_data)
    base = f"{PROJECTS_URL}/{created['projectId']}"

    response = await client.post(
        f"{base}/risks",
        json={"description": "Monsoon flooding", "probability": "high", "impact": "high"},
    )
    assert response.json()["project"]["healthScore"] == 90

    response = await client.patch(
        f"{base}/risks/RISK-003", json={"status": "mitigated", "mitigation": "Raised mounting structures"}
    )
    assert response.status_code == 200
    project = response.json()["project"]
    risk = project["risks"][-1]
    assert risk["status"] == "mitigated"
    assert risk["mitigation"] == "Raised mounting structures"
    assert risk["probability"] == "high"
    assert project["healthScore"] == 100


@pytest.mark.asyncio
async def test_update_risk_errors(client: AsyncClient, project_data: dict):
    created = await create_project(client, project_data)
    base = f"{PROJECTS_URL}/{created['projectId']}"

    response = await client.patch(f"{base}/risks/RISK-999", json={"status": "closed"})
    assert response.status_code == 404

    response = await client.patch(f"{base}/risks/RISK-001", json={"id": "RISK-010"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delayed_milestone_lowers_health(client: AsyncClient, project_data: dict):
    created = await create_project(client, project_data)
    base = f"{PROJECTS_URL}/{created['projectId']}/milestones"

    response = await client.patch(f"{base}/1", json={"status": "delayed"})
    assert response.status_code == 200
    project = response.json()["project"]
    milestone = project["phases"]["construction"]["milestones"][1]
    assert milestone["name"] == "Equipment Installation"
    assert milestone["status"] == "delayed"
    assert milestone["completedDate"] is None
    assert project["healthScore"] == 95

    response = await client.patch(f"{base}/1", json={"status": "completed"})
    project = response.json()["project"]
    milestone = project["phases"]["construction"]["milestones"][1]
    assert milestone["status"] == "completed"
    assert milestone["completedDate"] is not None
    assert project["healthScore"] == 100

    response = await client.patch(f"{base}/3", json={"status": "completed"})
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_compliance_and_team_updates(client: AsyncClient, project_data: dict):
    created = await create_project(client, project_data)
    base = f"{PROJECTS_URL}/{created['projectId']}"

    response = await client.patch(
        f"{base}/compliance/0", json={"status": "compliant", "evidence": "Clearance letter 42/2024"}
    )
    assert response.status_code == 200
    item = response.json()["project"]["qualityControl"]["compliance"][0]
    assert item == {
        "requirement": "Railway Safety Clearance",
        "status": "compliant",
        "evidence": "Clearance letter 42/2024",
    }

    response = await client.post(
        f"{base}/team", json={"name": "A. Das", "role": "Site Engineer", "phase": "construction", "allocation": 50}
    )
    assert response.status_code == 201
    team = response.json()["project"]["resources"]["team"]
    assert team == [
        {"memberId": "TM-001", "name": "A. Das", "role": "Site Engineer", "phase": "construction", "allocation": 50}
    ]
