"""
candidate_source.py — public interface for finding candidate product pages.

The strategies import only from here:
  from candidate_source import CandidateSource

Backend is chosen from config.SEARCH_BACKEND:

  SEARCH_BACKEND=duckduckgo   →  DuckDuckGo HTML results page (default, no key)

The backend returns every organic result; this module scopes the query to the
target site, throws away anything hosted elsewhere and keeps the top
config.MAX_CANDIDATES in engine order.
"""
from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlsplit

import aiohttp

import config
from search_backends.base import SearchBackend

logger = logging.getLogger(__name__)

__all__ = ["CandidateSource", "get_backend", "filter_to_site"]

_backend: Optional[SearchBackend] = None


def get_backend() -> SearchBackend:
    """Return the active backend, building it once on first call."""
    global _backend
    if _backend is not None:
        return _backend
    _backend = _build_backend()
    logger.info("Search backend: %s", _backend.name)
    return _backend


def _build_backend() -> SearchBackend:
    mode = config.SEARCH_BACKEND.lower()
    if mode == "duckduckgo":
        from search_backends.duckduckgo_backend import DuckDuckGoBackend
        return DuckDuckGoBackend()
    raise RuntimeError(f"Unknown SEARCH_BACKEND '{mode}' (expected duckduckgo)")


def filter_to_site(urls: list[str], site: str, limit: int) -> list[str]:
    """
    Keep URLs whose hostname contains `site`, in the given order, at most
    `limit` of them. Unparseable URLs are dropped.
    """
    kept: list[str] = []
    for url in urls:
        try:
            host = urlsplit(url).hostname or ""
        except ValueError:
            continue
        if site.lower() in host:
            kept.append(url)
    return kept[:limit]


class CandidateSource:
    """Ranked candidate URLs on one site, for the lifetime of one request."""

    def __init__(
        self,
        session: aiohttp.ClientSession,
        site: str,
        backend: Optional[SearchBackend] = None,
    ) -> None:
        self._session = session
        self._site    = site
        self._backend = backend or get_backend()

    async def candidates(self, term: str) -> list[str]:
        """
        Search `site:<site> <term>` and return filtered, capped candidate URLs.
        Raises SearchError when the backend fails.
        """
        query = f"site:{self._site} {term}"
        results = await self._backend.search(self._session, query)
        kept = filter_to_site(results, self._site, config.MAX_CANDIDATES)
        logger.info(
            "[%s] '%s' → %d results, %d on %s",
            self._backend.name, query, len(results), len(kept), self._site,
        )
        return kept
