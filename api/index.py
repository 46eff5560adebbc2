"""
Vercel-compatible entry point
"""

from notion_carousel.api.main import app
from notion_carousel.utils.logging import configure_logging

configure_logging()

__all__ = ["app"]
