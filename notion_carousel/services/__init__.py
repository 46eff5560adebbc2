"""
Services package for Notion Carousel
"""

from .notion import NotionService

__all__ = ["NotionService"]
