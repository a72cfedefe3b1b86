"""Pytest configuration and fixtures."""

import os

# Force testing environment before the app reads its settings
os.environ["TESTING"] = "true"

from datetime import timedelta

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.core.database import Base
from app.core.deps import get_optional_storage
from app.main import create_application
from app.schemas.common import utcnow
from app.storage.sql import create_sql_storage

# Import all models here to ensure they are registered on Base.metadata
from app.models import energy_production, epc_project, hierarchy, railway_site  # noqa: F401

# Use SQLite for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture(scope="function")
async def test_engine():
    """Create a test engine for each test function."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture(scope="function")
async def test_session(test_engine):
    """Create a test database session."""
    session_factory = async_sessionmaker(
        bind=test_engine, class_=AsyncSession, expire_on_commit=False
    )

    async with session_factory() as session:
        yield session


@pytest.fixture
def storage(test_session):
    """SQL storage bound to the test session."""
    return create_sql_storage(test_session)


@pytest.fixture
async def client(storage):
    """Async client with the storage dependency pointing at the test database."""
    app = create_application()

    async def override_get_optional_storage():
        yield storage

    app.dependency_overrides[get_optional_storage] = override_get_optional_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
async def unavailable_client():
    """Async client for an app with no storage backend configured."""
    app = create_application()

    async def override_get_optional_storage():
        yield None

    app.dependency_overrides[get_optional_storage] = override_get_optional_storage

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def site_data():
    """Sample site payload as sent by the site form."""
    return {
        "id": "KGP-TEST-001",
        "address": "Kharagpur Railway Station, West Bengal",
        "latitude": 22.3397,
        "longitude": 87.3254,
        "sanctionedLoad": "250 kVA",
        "locationName": "Kharagpur Station Building",
        "cluster": "KGP",
        "zone": "South Eastern Railway",
        "consigneeDetails": "Sr. DEE (G), Kharagpur",
        "rooftopArea": 1200,
        "feasibleArea": 850,
        "feasibleCapacity": 150,
        "status": "planning",
    }


@pytest.fixture
def project_data():
    """Sample project payload with a timeline starting tomorrow."""
    now = utcnow()
    return {
        "projectName": "Kharagpur Rooftop Solar",
        "siteId": "KGP-TEST-001",
        "projectType": "solar_installation",
        "priority": "high",
        "budgetTotal": 1000000,
        "plannedStartDate": (now + timedelta(days=1)).isoformat(),
        "plannedEndDate": (now + timedelta(days=90)).isoformat(),
        "engineeringTeam": "Design Cell",
        "procurementVendor": "Solar Vendor Ltd",
        "contractor": "Eastern Solar Works",
    }
