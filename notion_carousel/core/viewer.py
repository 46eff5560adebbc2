"""
Viewer session: URL-synced display settings and slide loading
"""

import logging
import math
from typing import Dict, List, Mapping, Optional

from pydantic import Field

from ..core.engine import CarouselEngine
from ..core.models import (
    CamelModel,
    FALLBACK_SLIDES,
    ImageAspect,
    SlideFetchResult,
    SlideQuery,
)
from ..services.notion import NotionService

logger = logging.getLogger(__name__)

INTERVAL_OPTIONS = [5, 10, 15, 20, 30]
NEIGHBOR_OPTIONS = [0, 1, 2, 3, 4, 5]
MIN_INTERVAL, MAX_INTERVAL = 1, 60
MIN_NEIGHBORS, MAX_NEIGHBORS = 0, 5


def parse_number(value: Optional[str]) -> Optional[float]:
    """Parse a query string number; None unless the value is finite"""
    if value is None or not str(value).strip():
        return None
    try:
        parsed = float(value)
    except ValueError:
        return None
    return parsed if math.isfinite(parsed) else None


def split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


class ViewerSettings(CamelModel):
    """Display settings shared between the settings panel and the URL"""
    autoplay_interval: float = Field(default=10, description="Seconds per slide")
    visible_neighbors: int = Field(default=2, description="Cards shown on each side")
    image_aspect: ImageAspect = Field(default=ImageAspect.LANDSCAPE)
    database_id: Optional[str] = None
    image_property: Optional[str] = None
    display_properties: List[str] = Field(default_factory=list)

    @classmethod
    def from_query_params(cls, params: Mapping[str, str]) -> "ViewerSettings":
        """Read settings from URL parameters, ignoring out-of-range values"""
        settings = cls()

        interval = parse_number(params.get("interval"))
        if interval is not None and MIN_INTERVAL <= interval <= MAX_INTERVAL:
            settings.autoplay_interval = interval

        neighbors = parse_number(params.get("neighbors"))
        if (
            neighbors is not None
            and neighbors.is_integer()
            and MIN_NEIGHBORS <= neighbors <= MAX_NEIGHBORS
        ):
            settings.visible_neighbors = int(neighbors)

        aspect = params.get("aspect")
        if aspect in {item.value for item in ImageAspect}:
            settings.image_aspect = ImageAspect(aspect)

        if params.get("databaseId"):
            settings.database_id = params["databaseId"]
        if params.get("imageProperty"):
            settings.image_property = params["imageProperty"]
        settings.display_properties = split_list(params.get("displayProperties"))

        return settings

    def to_query_params(self) -> Dict[str, str]:
        """URL parameters for these settings; empty values are left out"""
        interval = self.autoplay_interval
        params = {
            "neighbors": str(self.visible_neighbors),
            "interval": str(int(interval)) if float(interval).is_integer() else str(interval),
        }
        if self.image_aspect != ImageAspect.LANDSCAPE:
            params["aspect"] = self.image_aspect.value
        if self.database_id and self.database_id.strip():
            params["databaseId"] = self.database_id
        if self.image_property:
            params["imageProperty"] = self.image_property
        if self.display_properties:
            params["displayProperties"] = ",".join(self.display_properties)
        return params

    def to_slide_query(self) -> SlideQuery:
        return SlideQuery(
            database_id=self.database_id,
            image_property=self.image_property,
            display_properties=list(self.display_properties),
        )

    def apply_to(self, engine: CarouselEngine) -> None:
        engine.set_autoplay_interval(self.autoplay_interval)
        engine.set_visible_radius(self.visible_neighbors)
        engine.set_image_aspect(self.image_aspect)


class SlideDeck:
    """Loads slides into a carousel, ignoring fetches that were superseded"""

    def __init__(
        self,
        service: NotionService,
        engine: Optional[CarouselEngine] = None
    ):
        self.service = service
        self.engine = engine or CarouselEngine()
        self.is_loading = False
        self.error: Optional[str] = None
        self.image_property_options: Optional[List[str]] = None
        self.display_property_options: Optional[List[str]] = None
        self._generation = 0

    async def reload(self, query: SlideQuery) -> Optional[SlideFetchResult]:
        """Fetch slides for query and hand them to the engine

        Returns:
            The fetch result, or None when a newer reload started meanwhile
        """
        self._generation += 1
        generation = self._generation
        self.is_loading = True
        self.error = None

        result = await self.service.fetch_slides(query, include_properties_meta=True)

        if generation != self._generation:
            logger.debug(f"Discarding superseded slide fetch {generation}")
            return None

        self.is_loading = False
        self.error = result.error
        slides = result.slides
        if result.error and not slides:
            slides = FALLBACK_SLIDES
        self.engine.set_items(slides)

        if result.properties_meta:
            self.image_property_options = result.properties_meta.files
            self.display_property_options = result.properties_meta.displayable

        logger.info(f"Loaded {len(slides)} slides (error={result.error})")
        return result

    async def apply_settings(self, settings: ViewerSettings) -> Optional[SlideFetchResult]:
        """Apply display settings and reload with the settings' query"""
        settings.apply_to(self.engine)
        return await self.reload(settings.to_slide_query())
