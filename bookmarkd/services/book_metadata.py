"""Read-only client for the Google Books volumes API, cached in Redis.

The remote source is a collaborator we only read from. Lookups sit behind a
circuit breaker, are never retried, and a failure yields ``None`` rather than
an error so a missing cover never fails a query.
"""

from __future__ import annotations

from typing import Any, Optional
from urllib.parse import quote

import httpx
import structlog
from circuitbreaker import CircuitBreakerError, circuit

from bookmarkd.config import get_settings
from bookmarkd.services.cache import get_cached, set_cached

logger = structlog.get_logger()

_client: httpx.AsyncClient | None = None


async def _get_client() -> httpx.AsyncClient:
    global _client
    if _client is None:
        _client = httpx.AsyncClient(
            base_url=get_settings().google_books_api_url,
            timeout=httpx.Timeout(10.0, connect=5.0),
        )
    return _client


def _summarize(volume: dict[str, Any]) -> dict[str, Any]:
    info = volume.get("volumeInfo") or {}
    images = info.get("imageLinks") or {}
    return {
        "google_id": volume.get("id"),
        "title": info.get("title"),
        "subtitle": info.get("subtitle"),
        "authors": list(info.get("authors") or []),
        "description": info.get("description"),
        "published_date": info.get("publishedDate"),
        "page_count": info.get("pageCount"),
        "categories": list(info.get("categories") or []),
        "thumbnail": images.get("thumbnail") or images.get("smallThumbnail"),
    }


class CatalogueUnavailable(Exception):
    """The catalogue could not be reached or failed on its side."""


@circuit(failure_threshold=5, recovery_timeout=30, expected_exception=CatalogueUnavailable)
async def fetch_volume(google_id: str) -> Optional[dict[str, Any]]:
    """Fetch one volume; ``None`` when the catalogue does not know the id.

    Only outages count against the breaker. Unknown ids are ordinary answers.
    """
    client = await _get_client()
    try:
        response = await client.get(f"/volumes/{quote(google_id, safe='')}")
    except httpx.TransportError as exc:
        raise CatalogueUnavailable(str(exc)) from exc

    if response.status_code >= 500:
        raise CatalogueUnavailable(f"catalogue returned {response.status_code}")
    if response.status_code == 404:
        return None
    response.raise_for_status()
    return response.json()


async def get_book_metadata(google_id: str) -> Optional[dict[str, Any]]:
    if not google_id:
        return None

    settings = get_settings()
    cache_key = f"book_metadata:{google_id}"
    cached = await get_cached(cache_key)
    if cached is not None:
        # An empty mapping records a volume the catalogue does not have
        return cached or None

    try:
        volume = await fetch_volume(google_id)
    except CircuitBreakerError:
        logger.warning("book_metadata_circuit_open", google_id=google_id)
        return None
    except (CatalogueUnavailable, httpx.HTTPError, ValueError) as exc:
        logger.warning("book_metadata_lookup_failed", google_id=google_id, error=str(exc))
        return None

    if volume is None:
        logger.info("book_metadata_not_found", google_id=google_id)
        await set_cached(cache_key, {}, ttl_seconds=settings.book_metadata_missing_ttl_seconds)
        return None

    metadata = _summarize(volume)
    await set_cached(cache_key, metadata, ttl_seconds=settings.book_metadata_cache_ttl_seconds)
    return metadata


async def close_client() -> None:
    global _client
    if _client:
        await _client.aclose()
        _client = None
