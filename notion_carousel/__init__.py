"""
Notion Carousel - Notion database slideshow backend

Fetches rows from a Notion database, normalizes them into slides and drives
an auto-advancing carousel whose layout is served over HTTP.
"""

__version__ = "1.0.0"

from .core.engine import CarouselEngine
from .core.config import Config
from .core.viewer import SlideDeck, ViewerSettings
from .services.notion import NotionService

__all__ = [
    "CarouselEngine",
    "Config",
    "NotionService",
    "SlideDeck",
    "ViewerSettings"
]
