"""
Core package for Notion Carousel
"""
