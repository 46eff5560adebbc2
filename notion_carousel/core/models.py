"""
Data models for Notion Carousel
"""

from typing import List, Optional, Dict, Any
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from enum import Enum


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys for browser clients"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SortDirection(str, Enum):
    """Notion sort directions"""
    ASCENDING = "ascending"
    DESCENDING = "descending"


class FilterOperator(str, Enum):
    """Supported text filter operators"""
    CONTAINS = "contains"
    EQUALS = "equals"


class ImageAspect(str, Enum):
    """Card image aspect ratios"""
    LANDSCAPE = "landscape"
    SQUARE = "square"
    PORTRAIT = "portrait"

    @property
    def base_scale(self) -> float:
        """Scale applied to every card so tall images fit the stage"""
        return {
            ImageAspect.LANDSCAPE: 1.0,
            ImageAspect.SQUARE: 0.96,
            ImageAspect.PORTRAIT: 0.92,
        }[self]


class Slide(CamelModel):
    """One displayable card"""
    id: str = Field(..., description="Notion page ID")
    title: str = Field(..., description="Display title, never empty")
    description: Optional[str] = Field(None, description="Optional description text")
    cover_url: Optional[str] = Field(None, description="Cover image URL")
    source_url: str = Field(..., description="Link to the Notion page")
    properties: Optional[Dict[str, str]] = Field(None, description="Extra display properties")


class SlideQuery(CamelModel):
    """Slide query descriptor"""
    database_id: Optional[str] = Field(None, description="Database ID or URL")
    title_property: Optional[str] = Field(None, description="Property used for the title")
    description_property: Optional[str] = Field(None, description="Property used for the description")
    image_property: Optional[str] = Field(None, description="Files property used when the page has no cover")
    page_size: Optional[int] = Field(None, description="Number of rows to fetch (max 100)")
    sort_property: Optional[str] = Field(None, description="Property to sort by")
    sort_direction: Optional[SortDirection] = Field(None, description="Sort direction")
    filter_property: Optional[str] = Field(None, description="Property to filter on")
    filter_operator: Optional[FilterOperator] = Field(None, description="Text filter operator")
    filter_value: Optional[str] = Field(None, description="Filter value")
    display_properties: List[str] = Field(default_factory=list, description="Extra properties to show")


class DatabasePropertyMeta(CamelModel):
    """Name and declared type of a database property"""
    name: str
    type: str


class DatabasePropertiesSummary(CamelModel):
    """Database schema summary used to populate the settings panel"""
    all: List[DatabasePropertyMeta] = Field(default_factory=list)
    files: List[str] = Field(default_factory=list, description="Image property candidates")
    displayable: List[str] = Field(default_factory=list, description="Text display candidates")
    title_name: Optional[str] = Field(None, description="Detected title property")


class SlideFetchResult(CamelModel):
    """Fetch outcome: slides, or an error message"""
    slides: List[Slide] = Field(default_factory=list)
    error: Optional[str] = None
    properties_meta: Optional[DatabasePropertiesSummary] = None

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for HTTP callers; error and meta only when present

        Slides omit absent optionals, except coverUrl which is always sent.
        """
        slides = []
        for slide in self.slides:
            data = slide.model_dump(by_alias=True, exclude_none=True)
            data.setdefault("coverUrl", None)
            slides.append(data)

        payload: Dict[str, Any] = {"slides": slides}
        if self.error is not None:
            payload["error"] = self.error
        if self.properties_meta is not None:
            payload["propertiesMeta"] = self.properties_meta.model_dump(by_alias=True)
        return payload


class SlideFrame(CamelModel):
    """Presentation parameters of one visible card"""
    index: int = Field(..., description="Index into the slide list")
    offset: int = Field(..., description="index - current")
    depth: int = Field(..., description="Distance from the active card")
    is_active: bool = Field(..., description="Whether this is the current card")
    scale: float
    translate_x: float = Field(..., description="Horizontal translation in pixels")
    blur: float = Field(..., description="Blur radius in pixels")
    opacity: float
    z_index: int


FALLBACK_SLIDES: List[Slide] = [
    Slide(
        id="demo-1",
        title="Demo slide 1",
        description="Real data appears once the Notion API is configured.",
        cover_url="https://images.unsplash.com/photo-1500530855697-b586d89ba3ee?auto=format&fit=crop&w=800&q=80",
        source_url="https://www.notion.so",
    ),
    Slide(
        id="demo-2",
        title="Demo slide 2",
        description="The page cover image is used as the card background.",
        cover_url="https://images.unsplash.com/photo-1489515217757-5fd1be406fef?auto=format&fit=crop&w=800&q=80",
        source_url="https://www.notion.so",
    ),
    Slide(
        id="demo-3",
        title="Demo slide 3",
        description="Use the settings panel to change displayed properties and the slide interval.",
        cover_url="https://images.unsplash.com/photo-1500530855697-b586d89ba3ee?auto=format&fit=crop&w=800&q=80",
        source_url="https://www.notion.so",
    ),
]
