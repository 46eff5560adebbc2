"""
Utilities package for Notion Carousel
"""

from .logging import configure_logging, mask_secret

__all__ = ["configure_logging", "mask_secret"]
