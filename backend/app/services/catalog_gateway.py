"""
Catalog Gateway: thin pass-through to the Google Books volumes API.

Every call is a single attempt with a bounded timeout. Callers decide whether a
failure (raised as CatalogUnavailableError) is fatal or just "no results".
"""
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

import requests

from app.core.config import settings
from app.utils.timing import time_operation

logger = logging.getLogger(__name__)

MAX_PAGE_SIZE = 40  # Google Books hard limit for maxResults


class CatalogUnavailableError(Exception):
    """Raised when the catalog cannot be reached or answers with a non-success status."""
    pass


@dataclass
class CatalogBook:
    google_id: str
    title: str
    author: str
    description: str = ""
    page_count: int = 0
    published_date: Optional[str] = None
    publisher: str = ""
    language: str = "en"
    categories: List[str] = field(default_factory=list)
    cover_image: Optional[str] = None
    isbn: str = ""


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _extract_isbn(volume_info: dict) -> str:
    isbn_10 = None
    isbn_13 = None
    for ident in volume_info.get("industryIdentifiers") or []:
        if not isinstance(ident, dict):
            continue
        t = ident.get("type")
        val = ident.get("identifier")
        if t == "ISBN_10":
            isbn_10 = val
        elif t == "ISBN_13":
            isbn_13 = val
    return isbn_13 or isbn_10 or ""


def normalize_volume(item: Dict[str, Any]) -> CatalogBook:
    """Turn one Google Books 'volume' into a CatalogBook with safe defaults."""
    info = _as_dict(item.get("volumeInfo"))
    image_links = _as_dict(info.get("imageLinks"))
    thumbnail = image_links.get("thumbnail")

    return CatalogBook(
        google_id=item.get("id") or "",
        title=info.get("title") or "Unknown Title",
        author=", ".join(info.get("authors") or []) or "Unknown Author",
        description=info.get("description") or "",
        page_count=info.get("pageCount") or 0,
        published_date=info.get("publishedDate"),
        publisher=info.get("publisher") or "",
        language=info.get("language") or "en",
        categories=list(info.get("categories") or []),
        # Google hands out http thumbnails; browsers block them on https pages
        cover_image=thumbnail.replace("http:", "https:", 1) if thumbnail else None,
        isbn=_extract_isbn(info),
    )


class CatalogGateway:
    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url or settings.GOOGLE_BOOKS_API_URL
        self.api_key = api_key if api_key is not None else settings.GOOGLE_BOOKS_API_KEY
        self.timeout = timeout if timeout is not None else settings.CATALOG_TIMEOUT_SECONDS
        self.session = session or requests.Session()

    def search(self, query: str, max_results: int = 10, order_by: Optional[str] = None) -> List[CatalogBook]:
        """
        Search the catalog and return normalized books.

        :raises CatalogUnavailableError: on network errors, timeouts, non-2xx
            answers, an unreadable body or a body
            that is not a volumes listing.
        """
        params: Dict[str, Any] = {
            "q": query,
            "maxResults": max(1, min(max_results, MAX_PAGE_SIZE)),
        }
        if order_by:
            params["orderBy"] = order_by
        if self.api_key:
            params["key"] = self.api_key

        try:
            with time_operation(f"catalog_search q={query!r}", min_ms=500.0):
                resp = self.session.get(self.base_url, params=params, timeout=self.timeout)
                resp.raise_for_status()
                data = resp.json()
        except requests.RequestException as e:
            logger.warning("Google Books request failed for '%s': %s", query, e)
            raise CatalogUnavailableError(str(e)) from e
        except ValueError as e:
            logger.warning("Google Books returned an unreadable body for '%s': %s", query, e)
            raise CatalogUnavailableError("invalid JSON from catalog") from e

        if not isinstance(data, dict):
            logger.warning("Google Books returned an unexpected body for '%s': %s", query, type(data).__name__)
            raise CatalogUnavailableError("unexpected response shape from catalog")

        items = data.get("items") or []
        if not isinstance(items, list):
            logger.warning("Google Books returned non-list items for '%s'", query)
            raise CatalogUnavailableError("unexpected response shape from catalog")

        volumes = [item for item in items if isinstance(item, dict)]
        if len(volumes) != len(items):
            logger.warning("Skipped %d malformed volume(s) for '%s'", len(items) - len(volumes), query)
        logger.debug("Google Books search '%s' returned %d item(s)", query, len(volumes))
        return [normalize_volume(item) for item in volumes]


def get_catalog_gateway() -> CatalogGateway:
    """FastAPI dependency; tests override it with a fake gateway."""
    return CatalogGateway()
