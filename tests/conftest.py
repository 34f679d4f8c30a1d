"""
Shared pytest fixtures for all tests.

This module provides common fixtures including:
- Sample vertex sequences (a 100 m square)
- Sample stored sites
- A flat test projector
- Mock storage client and editing service
- FastAPI test client
"""
import math
import pytest
from unittest.mock import AsyncMock
from fastapi.testclient import TestClient

from glass_mapper.main import app
from glass_mapper.api.dependencies import get_site_editing_service
from glass_mapper.api.limiter import limiter
from glass_mapper.domain.models import (
    Point,
    ProgressEntry,
    ProgressStatus,
    Site,
)
from glass_mapper.infrastructure.site_store_client import ProjectData, SiteStoreClient
from glass_mapper.services.application.site_editing_service import (
    SessionRegistry,
    SiteEditingService,
)
from glass_mapper.services.domain.geodesic_metrics import compute_metrics
from glass_mapper.utils.geo_projection import EARTH_RADIUS_M


# Degrees of arc spanning 100 m on the metrics sphere
HUNDRED_METERS_DEG = 100 / (EARTH_RADIUS_M * math.pi / 180)

# Test projector scale: 1 pixel per 1e-5 degree
PIXELS_PER_DEGREE = 100_000


# ============================================================
# Sample Data Fixtures
# ============================================================

@pytest.fixture
def square_points() -> list[Point]:
    """Four corners of a 100 m square at the equator, in drawing order."""
    d = HUNDRED_METERS_DEG
    return [
        Point(lat=0.0, lng=0.0),
        Point(lat=0.0, lng=d),
        Point(lat=d, lng=d),
        Point(lat=d, lng=0.0),
    ]


@pytest.fixture
def flat_projector():
    """Projector mapping degrees straight to pixels, y pointing down."""
    def project(point: Point) -> tuple[float, float]:
        return (point.lng * PIXELS_PER_DEGREE, -point.lat * PIXELS_PER_DEGREE)
    return project


@pytest.fixture
def fixed_clock():
    """Clock returning a constant epoch-millisecond timestamp."""
    return lambda: 1_700_000_000_000


@pytest.fixture
def sample_site(square_points) -> Site:
    """A stored, closed site whose metrics match its vertices."""
    return Site(
        id="site-1",
        name="North fence",
        created_at=1_700_000_000_000,
        points=square_points,
        metrics=compute_metrics(square_points, True),
        is_closed=True,
        contractor_commitment_per_day=50.0,
        daily_progress=[
            ProgressEntry(
                id="entry-1",
                date=1_700_000_100_000,
                meters_completed=100.0,
                status=ProgressStatus.APPROVED,
                notes="Posts set",
            ),
            ProgressEntry(
                id="entry-2",
                date=1_700_000_200_000,
                meters_completed=40.0,
                status=ProgressStatus.PENDING,
            ),
        ],
        custom_tile_url="https://tiles.example.com/{z}/{x}/{y}.png",
    )


@pytest.fixture
def empty_site() -> Site:
    """A stored site that has not been drawn yet."""
    return Site(id="site-2", name="South path", created_at=1_700_000_000_000)


# ============================================================
# Mock Storage Fixtures
# ============================================================

@pytest.fixture
def mock_store_client(sample_site, empty_site):
    """Create a mock site storage client."""
    sites = {sample_site.id: sample_site, empty_site.id: empty_site}

    async def get_site(site_id):
        from glass_mapper.infrastructure.site_store_client import SiteStoreError
        if site_id not in sites:
            raise SiteStoreError(f"Site {site_id} not found", status_code=404)
        return sites[site_id]

    async def create_site(project_id, site):
        return site.model_copy(update={"id": "site-created"})

    async def update_site(site):
        return site

    async def get_projects():
        return [
            ProjectData(
                id="project-1",
                name="Fencing",
                created_at=1_700_000_000_000,
                sites=[sample_site, empty_site],
            )
        ]

    async def create_project(name, description=None):
        return ProjectData(
            id="project-created",
            name=name,
            description=description,
            created_at=1_700_000_000_000,
        )

    mock_client = AsyncMock(spec=SiteStoreClient)
    mock_client.get_site.side_effect = get_site
    mock_client.create_site.side_effect = create_site
    mock_client.update_site.side_effect = update_site
    mock_client.get_projects.side_effect = get_projects
    mock_client.create_project.side_effect = create_project
    return mock_client


@pytest.fixture
def editing_service(mock_store_client) -> SiteEditingService:
    """Editing service over the mock storage and a fresh registry."""
    return SiteEditingService(store_client=mock_store_client, registry=SessionRegistry())


# ============================================================
# FastAPI Test Client Fixtures
# ============================================================

@pytest.fixture
def test_client() -> TestClient:
    """Create a synchronous test client for FastAPI."""
    return TestClient(app)


@pytest.fixture
def api_client(editing_service):
    """Test client wired to the mock-backed editing service."""
    app.dependency_overrides[get_site_editing_service] = lambda: editing_service
    limiter.enabled = False
    try:
        yield TestClient(app)
    finally:
        limiter.enabled = True
        app.dependency_overrides.clear()
