"""
Pytest configuration and fixtures
"""

import pytest
from unittest.mock import Mock, AsyncMock
from typing import Any, Dict, Optional

from ..core.config import Config
from ..core.engine import CarouselEngine
from ..core.models import Slide, SlideFetchResult
from ..services.notion import NotionService

DATABASE_ID = "0123456789abcdef0123456789abcdef"
DATABASE_UUID = "01234567-89ab-cdef-0123-456789abcdef"


def title_property(text: str) -> Dict[str, Any]:
    return {"type": "title", "title": [{"plain_text": text}] if text else []}


def rich_text_property(text: str) -> Dict[str, Any]:
    return {"type": "rich_text", "rich_text": [{"plain_text": text}] if text else []}


def make_page(
    page_id: str,
    title: str = "",
    properties: Optional[Dict[str, Any]] = None,
    cover: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Build a Notion page record"""
    props = {"Name": title_property(title)}
    props.update(properties or {})
    return {
        "object": "page",
        "id": page_id,
        "cover": cover,
        "properties": props
    }


@pytest.fixture
def test_config():
    """Test configuration"""
    return Config(
        notion_token="secret_test_token_value",
        notion_database_id=DATABASE_ID,
        environment="test",
        debug_notion="1"
    )


@pytest.fixture
def no_token_config():
    """Configuration without a Notion token"""
    return Config(
        notion_token=None,
        notion_database_id=DATABASE_ID,
        environment="production"
    )


@pytest.fixture
def mock_notion_client():
    """Mock Notion SDK client"""
    client = Mock()
    client.databases = Mock()
    client.databases.query = Mock(return_value={"object": "list", "results": []})
    client.databases.retrieve = Mock(return_value={"properties": {}})
    client.request = Mock()
    return client


@pytest.fixture
def mock_session():
    """Mock requests session for the raw REST fallback"""
    return Mock()


@pytest.fixture
def notion_service(test_config, mock_notion_client, mock_session):
    """Notion service with mocked transports"""
    return NotionService(
        settings=test_config,
        client=mock_notion_client,
        session=mock_session
    )


@pytest.fixture
def sample_slides():
    """Sample slides"""
    return [
        Slide(
            id=f"page-{i}",
            title=f"Slide {i}",
            source_url=f"https://www.notion.so/page{i}"
        )
        for i in range(5)
    ]


@pytest.fixture
def carousel_engine(sample_slides):
    """Carousel engine over five slides"""
    return CarouselEngine(items=sample_slides, visible_radius=2, autoplay_interval=10)


@pytest.fixture
def mock_fetch_service(sample_slides):
    """Mock Notion service returning sample slides"""
    mock = Mock(spec=NotionService)
    mock.fetch_slides = AsyncMock(return_value=SlideFetchResult(slides=sample_slides))
    return mock
