"""Open Library cover lookup (best-effort enrichment).

`lookup_cover` never raises: any failure (timeout, HTTP error, bad JSON,
no match) resolves to the local placeholder so book pages always render
some artwork.
"""
from __future__ import annotations

from typing import Any, Dict, Optional

import requests

from book_tracker import config
from book_tracker.utils.logging import get_logger

LOG = get_logger("covers_service")

SEARCH_URL = "https://openlibrary.org/search.json"
ISBN_COVER_URL = "https://covers.openlibrary.org/b/isbn/{isbn}-L.jpg"
ID_COVER_URL = "https://covers.openlibrary.org/b/id/{cover_id}-L.jpg"
FALLBACK_COVER_URL = "/static/images/cover-placeholder.svg"


class EnrichmentError(RuntimeError):
    """Raised internally when the Open Library search cannot be used."""


def search_first_doc(title: str, author: str, *, timeout: float) -> Optional[Dict[str, Any]]:
    """Return the first search result document, or None when nothing matched."""
    params = {"title": title, "author": author, "limit": 1}
    try:
        r = requests.get(SEARCH_URL, params=params, timeout=timeout)
    except requests.Timeout as exc:
        raise EnrichmentError("timeout") from exc
    except requests.RequestException as exc:
        raise EnrichmentError("request_failed") from exc
    if r.status_code != 200:
        raise EnrichmentError(f"http_{r.status_code}")
    try:
        data = r.json()
    except ValueError as exc:
        raise EnrichmentError("invalid_json") from exc
    docs = data.get("docs") if isinstance(data, dict) else None
    if not isinstance(docs, list):
        raise EnrichmentError("invalid_payload")
    if not docs or not isinstance(docs[0], dict):
        return None
    return docs[0]


def cover_url_from_doc(doc: Dict[str, Any]) -> str:
    # Priority: ISBN -> cover_i -> placeholder
    isbns = doc.get("isbn")
    if isinstance(isbns, list) and isbns:
        first = str(isbns[0]).strip()
        if first:
            return ISBN_COVER_URL.format(isbn=first)
    cover_id = doc.get("cover_i")
    if cover_id:
        try:
            return ID_COVER_URL.format(cover_id=int(cover_id))
        except (TypeError, ValueError):
            LOG.debug("ignoring non-numeric cover_i=%r", cover_id)
    return FALLBACK_COVER_URL


def lookup_cover(title: str, author: str, *, timeout: Optional[float] = None) -> str:
    if timeout is None:
        timeout = config.cover_lookup_timeout()
    try:
        doc = search_first_doc(title, author, timeout=timeout)
    except EnrichmentError as exc:
        LOG.warning("cover lookup failed title=%s author=%s error=%s", title, author, exc)
        return FALLBACK_COVER_URL
    if doc is None:
        LOG.info("cover lookup found no match title=%s author=%s", title, author)
        return FALLBACK_COVER_URL
    return cover_url_from_doc(doc)


__all__ = [
    "EnrichmentError",
    "FALLBACK_COVER_URL",
    "search_first_doc",
    "cover_url_from_doc",
    "lookup_cover",
]
