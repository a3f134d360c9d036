"""
page_fetcher.py — fetch one candidate page without ever raising.

A failed fetch is an ordinary outcome (that candidate is skipped), so it is
returned as a PageFetch carrying the reason rather than as an exception.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional

import aiohttp

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PageFetch:
    url: str
    status: Optional[int] = None
    html: Optional[str] = None
    error: Optional[str] = None     # skip reason, e.g. "timeout"

    @property
    def ok(self) -> bool:
        return self.status is not None and 200 <= self.status < 300

    @property
    def fetched(self) -> bool:
        """True when a body was read, whatever the status code."""
        return self.html is not None


class PageFetcher:

    def __init__(self, session: aiohttp.ClientSession) -> None:
        self._session = session

    async def fetch(self, url: str) -> PageFetch:
        try:
            async with self._session.get(url) as resp:
                html = await resp.text(errors="replace")
                return PageFetch(url=url, status=resp.status, html=html)
        except asyncio.TimeoutError:
            logger.warning("Timed out fetching %s", url)
            return PageFetch(url=url, error="timeout")
        except aiohttp.ClientError as exc:
            logger.warning("Fetch failed for %s: %s", url, exc)
            return PageFetch(url=url, error=f"fetch failed: {type(exc).__name__}")
        except ValueError as exc:
            logger.warning("Bad candidate URL %s: %s", url, exc)
            return PageFetch(url=url, error="invalid url")
