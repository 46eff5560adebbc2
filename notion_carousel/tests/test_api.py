"""
Tests for the FastAPI application
"""

import pytest
from fastapi import HTTPException
from fastapi.testclient import TestClient
from unittest.mock import Mock, AsyncMock, patch

from ..api.main import app
from ..core.config import Config
from ..core.exceptions import ConfigurationError
from ..core.models import (
    DatabasePropertiesSummary,
    FilterOperator,
    Slide,
    SlideFetchResult,
    SortDirection,
)


@pytest.fixture
def client():
    """Test client for FastAPI app"""
    return TestClient(app)


@pytest.fixture
def mock_service():
    """Mock Notion service"""
    service = Mock()
    service.fetch_slides = AsyncMock(return_value=SlideFetchResult(slides=[
        Slide(
            id="page-1",
            title="First",
            cover_url="https://cover/1.png",
            source_url="https://www.notion.so/page1",
            properties={"Tag": "News"}
        )
    ]))
    return service


class TestAPI:
    """Test cases for API endpoints"""

    def test_root_endpoint(self, client):
        """Test root endpoint"""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "Notion Carousel"
        assert "version" in data

    def test_version_endpoint(self, client):
        """Test version endpoint"""
        response = client.get("/version")
        assert response.status_code == 200
        data = response.json()
        assert "version" in data
        assert "environment" in data

    def test_frame_ancestors_header(self, client):
        """Responses allow embedding in Notion"""
        response = client.get("/")
        assert "frame-ancestors" in response.headers["content-security-policy"]
        assert "https://*.notion.so" in response.headers["content-security-policy"]

    def test_health_check_degraded(self, client):
        """Missing configuration reports degraded"""
        with patch(
            "notion_carousel.api.routes.health.config",
            Config(notion_token=None, notion_database_id=None)
        ):
            response = client.get("/health/")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["details"]["notion_token_configured"] is False

    def test_health_check_healthy(self, client):
        """Complete configuration reports healthy"""
        with patch(
            "notion_carousel.api.routes.health.config",
            Config(notion_token="secret_x", notion_database_id="db")
        ):
            response = client.get("/health/")

        assert response.json()["status"] == "healthy"


class TestSlidesEndpoint:
    """GET /api/slides"""

    def test_returns_slides(self, client, mock_service):
        """Slides are serialized with camelCase keys"""
        with patch.object(app.state, "get_notion_service", return_value=mock_service):
            response = client.get("/api/slides")

        assert response.status_code == 200
        data = response.json()
        assert "error" not in data
        assert "propertiesMeta" not in data
        assert data["slides"] == [{
            "id": "page-1",
            "title": "First",
            "coverUrl": "https://cover/1.png",
            "sourceUrl": "https://www.notion.so/page1",
            "properties": {"Tag": "News"},
        }]

    def test_absent_fields_are_omitted_but_cover_is_null(self, client, mock_service):
        """Missing description and properties are left out; coverUrl stays as null"""
        mock_service.fetch_slides.return_value = SlideFetchResult(slides=[
            Slide(id="page-2", title="Bare", source_url="https://www.notion.so/page2")
        ])

        with patch.object(app.state, "get_notion_service", return_value=mock_service):
            response = client.get("/api/slides")

        assert response.json()["slides"] == [{
            "id": "page-2",
            "title": "Bare",
            "coverUrl": None,
            "sourceUrl": "https://www.notion.so/page2",
        }]

    def test_query_parameters_are_mapped(self, client, mock_service):
        """Query string maps onto the slide query"""
        with patch.object(app.state, "get_notion_service", return_value=mock_service):
            client.get("/api/slides", params={
                "databaseId": "db",
                "titleProperty": "Headline",
                "pageSize": "20",
                "sortProperty": "Date",
                "sortDirection": "desc",
                "filterProperty": "Tag",
                "filterOperator": "equals",
                "filterValue": "News",
                "displayProperties": "Tag,Date",
                "includeMeta": "true",
            })

        query = mock_service.fetch_slides.call_args.args[0]
        assert query.database_id == "db"
        assert query.title_property == "Headline"
        assert query.page_size == 20
        assert query.sort_direction == SortDirection.DESCENDING
        assert query.filter_operator == FilterOperator.EQUALS
        assert query.filter_value == "News"
        assert query.display_properties == ["Tag", "Date"]
        assert mock_service.fetch_slides.call_args.kwargs["include_properties_meta"] is True

    def test_invalid_numbers_and_directions_are_dropped(self, client, mock_service):
        """Non-finite numbers and unknown directions become absent"""
        with patch.object(app.state, "get_notion_service", return_value=mock_service):
            client.get("/api/slides", params={
                "pageSize": "lots",
                "sortDirection": "sideways",
                "filterOperator": "like",
            })

        query = mock_service.fetch_slides.call_args.args[0]
        assert query.page_size is None
        assert query.sort_direction is None
        assert query.filter_operator is None

    def test_error_substitutes_fallback(self, client, mock_service):
        """An error with no slides still answers 200 with demonstration slides"""
        mock_service.fetch_slides.return_value = SlideFetchResult(error="NOTION_TOKEN is not configured")

        with patch.object(app.state, "get_notion_service", return_value=mock_service):
            response = client.get("/api/slides")

        assert response.status_code == 200
        data = response.json()
        assert data["error"] == "NOTION_TOKEN is not configured"
        assert [slide["id"] for slide in data["slides"]] == ["demo-1", "demo-2", "demo-3"]

    def test_properties_meta_included(self, client, mock_service):
        """The schema summary is returned when present"""
        mock_service.fetch_slides.return_value = SlideFetchResult(
            properties_meta=DatabasePropertiesSummary(files=["Images"], title_name="Name")
        )

        with patch.object(app.state, "get_notion_service", return_value=mock_service):
            response = client.get("/api/slides", params={"includeMeta": "1"})

        meta = response.json()["propertiesMeta"]
        assert meta["files"] == ["Images"]
        assert meta["titleName"] == "Name"


class TestCarouselEndpoints:
    """GET /api/carousel/*"""

    def test_layout(self, client):
        """Layout frames around the wrapped current index"""
        response = client.get("/api/carousel/layout", params={"count": 5, "current": 7, "neighbors": 1})

        assert response.status_code == 200
        data = response.json()
        assert data["current"] == 2
        assert data["radius"] == 1
        assert data["step"] == 120
        assert [frame["index"] for frame in data["frames"]] == [1, 2, 3]
        assert data["frames"][1]["isActive"] is True
        assert data["frames"][2]["translateX"] == 120

    def test_layout_empty(self, client):
        """No slides, no frames"""
        response = client.get("/api/carousel/layout", params={"count": 0, "current": 3})

        assert response.status_code == 200
        assert response.json()["frames"] == []
        assert response.json()["current"] == 0

    def test_layout_clamps_neighbors(self, client):
        """Neighbor count is clamped to the ceiling"""
        response = client.get("/api/carousel/layout", params={"count": 3, "neighbors": 500})

        data = response.json()
        assert data["radius"] == 100
        assert len(data["frames"]) == 201

    def test_settings(self, client):
        """Settings are normalized from URL parameters"""
        response = client.get("/api/carousel/settings", params={
            "interval": "99",
            "neighbors": "4",
            "aspect": "square",
        })

        data = response.json()
        assert data["settings"]["autoplayInterval"] == 10
        assert data["settings"]["visibleNeighbors"] == 4
        assert data["settings"]["imageAspect"] == "square"
        assert data["query"] == {"neighbors": "4", "interval": "10", "aspect": "square"}
        assert data["options"]["intervals"] == [5, 10, 15, 20, 30]


@pytest.fixture
def failing_routes():
    """Temporary routes that raise, removed again after the test"""
    async def configuration_error():
        raise ConfigurationError("NOTION_TOKEN is not configured", config_key="notion_token")

    async def not_found():
        raise HTTPException(status_code=404, detail="No such slide")

    async def crash():
        raise RuntimeError("boom")

    route_count = len(app.router.routes)
    app.add_api_route("/_failing/configuration", configuration_error)
    app.add_api_route("/_failing/not-found", not_found)
    app.add_api_route("/_failing/crash", crash)
    yield
    del app.router.routes[route_count:]


class TestExceptionHandlers:
    """Errors raised by routes become JSON error bodies"""

    def test_carousel_error(self, client, failing_routes):
        """Package errors answer 400 with their error code"""
        response = client.get("/_failing/configuration")

        assert response.status_code == 400
        data = response.json()
        assert data["error"] is True
        assert data["error_code"] == "CONFIGURATION_ERROR"
        assert data["message"] == "NOTION_TOKEN is not configured"
        assert "timestamp" in data

    def test_http_exception(self, client, failing_routes):
        """HTTP exceptions keep their status and detail"""
        response = client.get("/_failing/not-found")

        assert response.status_code == 404
        data = response.json()
        assert data["message"] == "No such slide"
        assert data["status_code"] == 404

    def test_unexpected_error(self, failing_routes):
        """Anything else answers 500 without leaking the error"""
        client = TestClient(app, raise_server_exceptions=False)

        response = client.get("/_failing/crash")

        assert response.status_code == 500
        data = response.json()
        assert data["error"] is True
        assert data["message"] == "Internal server error"
        assert "boom" not in response.text
