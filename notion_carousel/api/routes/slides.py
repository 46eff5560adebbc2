"""
Slide listing API routes
"""

from typing import Optional

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse
import structlog

from ...core.config import config
from ...core.models import FALLBACK_SLIDES, FilterOperator, SlideQuery, SortDirection
from ...core.viewer import parse_number, split_list

logger = structlog.get_logger(__name__)

router = APIRouter()


def parse_sort_direction(value: Optional[str]) -> Optional[SortDirection]:
    """Accept ascending/descending or the asc/desc shorthand"""
    if not value:
        return None
    if value in ("ascending", "asc"):
        return SortDirection.ASCENDING
    if value in ("descending", "desc"):
        return SortDirection.DESCENDING
    return None


def parse_filter_operator(value: Optional[str]) -> Optional[FilterOperator]:
    if value in ("contains", "equals"):
        return FilterOperator(value)
    return None


@router.get("")
async def list_slides(
    req: Request,
    database_id: Optional[str] = Query(None, alias="databaseId"),
    title_property: Optional[str] = Query(None, alias="titleProperty"),
    description_property: Optional[str] = Query(None, alias="descriptionProperty"),
    image_property: Optional[str] = Query(None, alias="imageProperty"),
    page_size: Optional[str] = Query(None, alias="pageSize"),
    sort_property: Optional[str] = Query(None, alias="sortProperty"),
    sort_direction: Optional[str] = Query(None, alias="sortDirection"),
    filter_property: Optional[str] = Query(None, alias="filterProperty"),
    filter_operator: Optional[str] = Query(None, alias="filterOperator"),
    filter_value: Optional[str] = Query(None, alias="filterValue"),
    display_properties: Optional[str] = Query(None, alias="displayProperties"),
    include_meta: bool = Query(False, alias="includeMeta"),
) -> JSONResponse:
    """Fetch slides from Notion

    Always answers 200. When the fetch fails and produced no slides the
    demonstration slides are returned next to the error so the viewer can
    keep running.
    """
    parsed_page_size = parse_number(page_size)
    query = SlideQuery(
        database_id=database_id,
        title_property=title_property,
        description_property=description_property,
        image_property=image_property,
        page_size=int(parsed_page_size) if parsed_page_size is not None else None,
        sort_property=sort_property,
        sort_direction=parse_sort_direction(sort_direction),
        filter_property=filter_property,
        filter_operator=parse_filter_operator(filter_operator),
        filter_value=filter_value,
        display_properties=split_list(display_properties),
    )

    service = req.app.state.get_notion_service()
    result = await service.fetch_slides(query, include_properties_meta=include_meta)

    if config.is_notion_debug_enabled:
        logger.info(
            "Slides response",
            provided_database_id=bool(database_id),
            slides_count=len(result.slides),
            has_error=bool(result.error)
        )

    if result.error and not result.slides:
        result = result.model_copy(update={"slides": list(FALLBACK_SLIDES)})

    return JSONResponse(status_code=200, content=result.to_payload())
