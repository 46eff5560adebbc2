"""
Carousel layout and settings API routes
"""

from typing import Any, Dict

from fastapi import APIRouter, Query, Request
import structlog

from ...core.engine import clamp_radius, compute_frames, step_pixels
from ...core.models import ImageAspect
from ...core.viewer import (
    INTERVAL_OPTIONS,
    MAX_INTERVAL,
    MIN_INTERVAL,
    NEIGHBOR_OPTIONS,
    ViewerSettings,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/layout")
async def carousel_layout(
    count: int = Query(..., ge=0, description="Number of slides"),
    current: int = Query(0, description="Active slide index, wrapped into range"),
    neighbors: int = Query(2, description="Cards shown on each side"),
    aspect: ImageAspect = Query(ImageAspect.LANDSCAPE, description="Card image aspect"),
) -> Dict[str, Any]:
    """Card positions for a carousel of count slides around current"""
    radius = clamp_radius(neighbors)
    current_index = current % count if count else 0
    frames = compute_frames(current_index, count, radius, aspect)

    logger.debug("Carousel layout computed", count=count, current=current_index, radius=radius)

    return {
        "count": count,
        "current": current_index,
        "radius": radius,
        "step": step_pixels(radius),
        "frames": [frame.model_dump(by_alias=True) for frame in frames]
    }


@router.get("/settings")
async def carousel_settings(req: Request) -> Dict[str, Any]:
    """Normalize viewer settings from URL parameters"""
    settings = ViewerSettings.from_query_params(req.query_params)

    return {
        "settings": settings.model_dump(by_alias=True, mode="json"),
        "query": settings.to_query_params(),
        "options": {
            "intervals": INTERVAL_OPTIONS,
            "intervalRange": [MIN_INTERVAL, MAX_INTERVAL],
            "neighbors": NEIGHBOR_OPTIONS,
            "aspects": [aspect.value for aspect in ImageAspect]
        }
    }
