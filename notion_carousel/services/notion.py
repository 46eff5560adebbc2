"""
Notion API service for Notion Carousel
"""

import asyncio
import logging
import math
import re
from typing import Any, Callable, Dict, List, Optional, Tuple

import requests
from notion_client import Client

from ..core.config import Config, config as default_config
from ..core.exceptions import ConfigurationError, InvalidResponseError, NotionAPIError
from ..core.models import (
    DatabasePropertiesSummary,
    DatabasePropertyMeta,
    Slide,
    SlideFetchResult,
    SlideQuery,
)
from ..utils.logging import mask_secret

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 100
UNTITLED = "Untitled"

MISSING_TOKEN_MESSAGE = "NOTION_TOKEN is not configured"
MISSING_DATABASE_MESSAGE = "Database ID is not specified"
UNRESOLVED_DATABASE_MESSAGE = "Could not resolve a Notion database ID from the given value"
INVALID_RESPONSE_MESSAGE = "Notion API response is invalid"
REQUEST_FAILED_MESSAGE = "Notion API request failed"
UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"

DISPLAYABLE_TYPES = (
    "title", "rich_text", "select", "multi_select", "status", "url", "number", "date"
)

_HYPHENATED_ID = re.compile(
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}"
)
_STANDALONE_ID = re.compile(r"(?<![0-9a-fA-F])[0-9a-fA-F]{32}(?![0-9a-fA-F])")
_COMPACT_ID = re.compile(r"[0-9a-fA-F]{32}")
_INVALID_URL_MESSAGE = re.compile(r"invalid request url", re.IGNORECASE)


def normalize_database_id(value: Optional[str]) -> Optional[str]:
    """Convert a database ID, Notion URL or hyphen-less ID to a hyphenated UUID

    Args:
        value: Raw ID or URL

    Returns:
        Lowercase 8-4-4-4-12 UUID, or None when no ID can be found
    """
    if not value:
        return None
    trimmed = value.strip()

    match = _HYPHENATED_ID.search(trimmed)
    if match:
        return match.group(0).lower()

    match = _STANDALONE_ID.search(trimmed) or _COMPACT_ID.search(trimmed.replace("-", ""))
    if not match:
        return None

    id32 = match.group(0).lower()
    return f"{id32[:8]}-{id32[8:12]}-{id32[12:16]}-{id32[16:20]}-{id32[20:]}"


def notion_page_url(page_id: str) -> str:
    return f"https://www.notion.so/{page_id.replace('-', '')}"


def is_invalid_request_url_error(error: BaseException) -> bool:
    """Check for the error Notion/SDK raise when the request URL shape is wrong"""
    code = getattr(error, "code", None)
    code = getattr(code, "value", code)
    if isinstance(code, str) and code.lower() == "invalid_request_url":
        return True
    return bool(_INVALID_URL_MESSAGE.search(str(error)))


def build_filter(
    property_type: str,
    property_name: str,
    value: str,
    operator: str = "contains"
) -> Optional[Dict[str, Any]]:
    """Build a Notion filter clause appropriate for the property type

    Args:
        property_type: Declared type from the database schema
        property_name: Property to filter on
        value: Raw filter value
        operator: Text operator for title/rich_text properties

    Returns:
        Filter clause, or None when the value cannot be used
    """
    if property_type == "select":
        return {"property": property_name, "select": {"equals": value}}
    if property_type == "multi_select":
        return {"property": property_name, "multi_select": {"contains": value}}
    if property_type in ("title", "rich_text"):
        return {"property": property_name, property_type: {operator: value}}
    if property_type == "status":
        return {"property": property_name, "status": {"equals": value}}
    if property_type == "checkbox":
        return {"property": property_name, "checkbox": {"equals": value == "true"}}
    if property_type == "number":
        try:
            number = float(value)
        except ValueError:
            return None
        if not math.isfinite(number):
            return None
        return {"property": property_name, "number": {"equals": number}}

    # Unknown types: best effort text match
    return {"property": property_name, "rich_text": {"contains": value}}


def _format_number(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _rich_text(parts: List[Dict[str, Any]]) -> str:
    return "".join(part.get("plain_text", "") for part in parts or [])


def _file_url(file_obj: Dict[str, Any]) -> Optional[str]:
    file_type = file_obj.get("type")
    if file_type in ("file", "external"):
        return (file_obj.get(file_type) or {}).get("url")
    return None


def get_plain_text(page: Dict[str, Any], property_name: Optional[str]) -> Optional[str]:
    """Extract plain text from a page property by its declared type

    Args:
        page: Notion page object
        property_name: Property to read

    Returns:
        Text value, or None for missing properties and unsupported types
    """
    if not property_name:
        return None
    prop = page.get("properties", {}).get(property_name)
    if not prop:
        return None

    prop_type = prop.get("type")

    if prop_type in ("title", "rich_text"):
        return _rich_text(prop.get(prop_type))
    elif prop_type == "select":
        return (prop.get("select") or {}).get("name")
    elif prop_type == "multi_select":
        return ", ".join(item.get("name", "") for item in prop.get("multi_select") or [])
    elif prop_type == "url":
        return prop.get("url")
    elif prop_type == "number":
        number = prop.get("number")
        return _format_number(number) if number is not None else None
    elif prop_type == "date":
        return (prop.get("date") or {}).get("start")

    return None


def find_title_property(page: Dict[str, Any]) -> Optional[str]:
    for name, prop in page.get("properties", {}).items():
        if prop and prop.get("type") == "title":
            return name
    return None


def get_title_text(page: Dict[str, Any], explicit_property: Optional[str] = None) -> str:
    """Title from the explicit property, else the detected title property, else Untitled"""
    explicit = get_plain_text(page, explicit_property)
    if explicit and explicit.strip():
        return explicit
    detected = get_plain_text(page, find_title_property(page))
    return detected if detected and detected.strip() else UNTITLED


def get_image_url(page: Dict[str, Any], image_property: Optional[str] = None) -> Optional[str]:
    """Page cover if set, else the first file of the configured files property"""
    cover = page.get("cover")
    if cover:
        url = _file_url(cover)
        if url:
            return url

    if image_property:
        prop = page.get("properties", {}).get(image_property)
        if prop and prop.get("type") == "files" and prop.get("files"):
            return _file_url(prop["files"][0])

    return None


def summarize_properties(database: Dict[str, Any]) -> DatabasePropertiesSummary:
    """Classify database properties into image and display candidates"""
    summary = DatabasePropertiesSummary()
    for name, definition in (database.get("properties") or {}).items():
        prop_type = str((definition or {}).get("type") or "unknown")
        summary.all.append(DatabasePropertyMeta(name=name, type=prop_type))
        if prop_type == "files":
            summary.files.append(name)
        if prop_type in DISPLAYABLE_TYPES:
            summary.displayable.append(name)
        if prop_type == "title":
            summary.title_name = name
    return summary


class NotionService:
    """Service that turns Notion database rows into slides"""

    def __init__(
        self,
        settings: Optional[Config] = None,
        client: Optional[Client] = None,
        session: Optional[requests.Session] = None
    ):
        """Initialize Notion service

        Args:
            settings: Configuration, defaults to the process config
            client: Notion SDK client, built from the token when omitted
            session: HTTP session for the raw REST fallback
        """
        self.settings = settings or default_config
        self.token = self.settings.notion_token
        self.client = client
        if self.client is None and self.token:
            self.client = Client(auth=self.token)
        self.session = session or requests.Session()
        self.debug = self.settings.is_notion_debug_enabled

        if self.debug:
            logger.info(
                f"[notion:debug] NOTION_TOKEN provided={bool(self.token)} "
                f"preview={mask_secret(self.token)}"
            )

    def _debug(self, message: str) -> None:
        if self.debug:
            logger.info(f"[notion:debug] {message}")

    async def fetch_slides(
        self,
        query: SlideQuery,
        include_properties_meta: bool = False
    ) -> SlideFetchResult:
        """Fetch and project database rows into slides

        Never raises: every failure is returned as an error message with
        no slides.

        Args:
            query: Slide query descriptor
            include_properties_meta: Also return a summary of the database schema

        Returns:
            SlideFetchResult with slides or an error message
        """
        try:
            database_id = self._resolve_database_id(query)
        except ConfigurationError as e:
            self._debug(f"Precondition failed: {e.message}")
            return SlideFetchResult(error=e.message)

        self._debug(
            f"fetch_slides title={query.title_property} description={query.description_property} "
            f"image={query.image_property} page_size={query.page_size} "
            f"sort={query.sort_property}:{query.sort_direction} "
            f"database={mask_secret(database_id)}"
        )

        try:
            body = await self._build_query_body(database_id, query)
            response = await self._run_query_attempts(database_id, body)

            if not isinstance(response, dict) or not isinstance(response.get("results"), list):
                raise InvalidResponseError(INVALID_RESPONSE_MESSAGE, payload=response)

            slides = self._project_pages(response["results"], query)

            properties_meta = None
            if include_properties_meta:
                properties_meta = await self._get_properties_summary(database_id)

            self._debug(f"Notion slides fetched count={len(slides)}")
            return SlideFetchResult(slides=slides, properties_meta=properties_meta)

        except InvalidResponseError as e:
            logger.error(f"Invalid Notion response for database {mask_secret(database_id)}")
            return SlideFetchResult(error=e.message)
        except Exception as e:
            logger.error(f"Failed to fetch Notion data: {e}")
            return SlideFetchResult(error=str(e) or UNKNOWN_ERROR_MESSAGE)

    def _resolve_database_id(self, query: SlideQuery) -> str:
        """Check preconditions and return the normalized database ID

        Raises:
            ConfigurationError: If the token or a usable database ID is missing
        """
        if not self.token or self.client is None:
            raise ConfigurationError(MISSING_TOKEN_MESSAGE, config_key="notion_token")

        raw_id = query.database_id or self.settings.notion_database_id
        if not raw_id or not raw_id.strip():
            raise ConfigurationError(MISSING_DATABASE_MESSAGE, config_key="notion_database_id")

        database_id = normalize_database_id(raw_id)
        if not database_id:
            raise ConfigurationError(UNRESOLVED_DATABASE_MESSAGE, config_key="notion_database_id")

        return database_id

    async def _build_query_body(self, database_id: str, query: SlideQuery) -> Dict[str, Any]:
        """Query parameters shared by every request shape (without the database ID)"""
        page_size = DEFAULT_PAGE_SIZE if query.page_size is None else query.page_size
        body: Dict[str, Any] = {"page_size": max(1, min(page_size, DEFAULT_PAGE_SIZE))}

        if query.sort_property and query.sort_direction:
            body["sorts"] = [{
                "property": query.sort_property,
                "direction": query.sort_direction.value
            }]

        if query.filter_property and query.filter_value:
            filter_clause = await self._resolve_filter(database_id, query)
            if filter_clause:
                body["filter"] = filter_clause

        return body

    async def _resolve_filter(self, database_id: str, query: SlideQuery) -> Optional[Dict[str, Any]]:
        """Infer the filter property's type from the schema and build a clause

        Schema lookup failures drop the filter instead of failing the request.
        """
        try:
            database = await asyncio.to_thread(self.client.databases.retrieve, database_id=database_id)
            definition = (database.get("properties") or {}).get(query.filter_property)
            property_type = (definition or {}).get("type")
        except Exception as e:
            logger.warning(f"Ignoring filter, schema retrieval failed: {e}")
            return None

        if not isinstance(property_type, str):
            logger.warning(f"Ignoring filter, property not found: {query.filter_property}")
            return None

        operator = (query.filter_operator.value if query.filter_operator else "contains")
        return build_filter(property_type, query.filter_property, query.filter_value, operator)

    def _query_attempts(
        self,
        database_id: str,
        body: Dict[str, Any]
    ) -> List[Tuple[str, Callable[[], Any]]]:
        """Request shapes to try in order; later ones cover other API/SDK versions"""
        attempts: List[Tuple[str, Callable[[], Any]]] = []

        databases = getattr(self.client, "databases", None)
        if callable(getattr(databases, "query", None)):
            attempts.append((
                "sdk.databases.query",
                lambda: databases.query(database_id=database_id, **body)
            ))

        request = getattr(self.client, "request", None)
        if callable(request):
            attempts.append((
                "sdk.request.databases/query",
                lambda: request(
                    path="databases/query",
                    method="POST",
                    body={"database_id": database_id, **body}
                )
            ))
            attempts.append((
                "sdk.request.databases/{id}/query",
                lambda: request(
                    path=f"databases/{database_id}/query",
                    method="POST",
                    body=body
                )
            ))

        attempts.append(("raw.fetch", lambda: self._raw_query(database_id, body)))
        return attempts

    async def _run_query_attempts(self, database_id: str, body: Dict[str, Any]) -> Any:
        """Run request shapes until one succeeds

        Each shape runs in a worker thread. Only "invalid request URL"
        failures move on to the next shape.

        Raises:
            Exception: The first non-retryable error, or the last error when all shapes fail
        """
        last_error: Optional[BaseException] = None

        for name, run in self._query_attempts(database_id, body):
            self._debug(f"Notion request attempt={name}")
            try:
                return await asyncio.to_thread(run)
            except Exception as e:
                last_error = e
                retryable = is_invalid_request_url_error(e)
                self._debug(f"Notion attempt failed attempt={name} error={e} will_retry={retryable}")
                if not retryable:
                    raise

        raise last_error or NotionAPIError(REQUEST_FAILED_MESSAGE, database_id=database_id)

    def _raw_query(self, database_id: str, body: Dict[str, Any]) -> Any:
        """Query the REST endpoint directly with a bearer token

        Raises:
            NotionAPIError: On a non-success HTTP status
        """
        url = f"{self.settings.notion_api_base_url.rstrip('/')}/databases/{database_id}/query"
        response = self.session.post(
            url,
            headers={
                "Authorization": f"Bearer {self.token}",
                "Content-Type": "application/json",
                "Notion-Version": self.settings.notion_version,
            },
            json=body,
            timeout=self.settings.request_timeout_seconds,
        )

        if not response.ok:
            self._debug(f"Notion API error response status={response.status_code} body={response.text}")
            raise NotionAPIError(
                f"Notion API error ({response.status_code})",
                database_id=database_id
            )

        return response.json()

    def _project_pages(self, results: List[Dict[str, Any]], query: SlideQuery) -> List[Slide]:
        """Map page records to slides, preserving order"""
        slides = []
        seen = set()

        for page in results:
            if not isinstance(page, dict) or page.get("object") != "page":
                continue

            page_id = page.get("id")
            if not page_id or page_id in seen:
                self._debug(f"Skipping page without unique id: {page_id}")
                continue
            seen.add(page_id)

            properties = None
            if query.display_properties:
                properties = {}
                for name in query.display_properties:
                    value = get_plain_text(page, name)
                    if value is not None and str(value).strip():
                        properties[name] = str(value)

            slides.append(Slide(
                id=page_id,
                title=get_title_text(page, query.title_property),
                description=get_plain_text(page, query.description_property),
                cover_url=get_image_url(page, query.image_property),
                source_url=notion_page_url(page_id),
                properties=properties,
            ))

        return slides

    async def _get_properties_summary(self, database_id: str) -> Optional[DatabasePropertiesSummary]:
        """Schema summary for the settings panel; failures are logged and ignored"""
        try:
            database = await asyncio.to_thread(self.client.databases.retrieve, database_id=database_id)
            return summarize_properties(database)
        except Exception as e:
            logger.warning(f"Skipping properties summary, schema retrieval failed: {e}")
            return None
