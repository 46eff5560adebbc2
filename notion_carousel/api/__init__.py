"""
HTTP API for Notion Carousel
"""
