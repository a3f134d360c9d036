"""
DuckDuckGo HTML results backend.

No account or key: scrapes https://duckduckgo.com/html/ — the JavaScript-free
results page. Organic results are <a class="result__a" href="...">. Their
href is usually a tracking redirect of the form

    //duckduckgo.com/l/?uddg=https%3A%2F%2Fbringo.ma%2F...&rut=...

whose `uddg` parameter carries the real destination.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional
from urllib.parse import parse_qs, urlsplit

import aiohttp

from extractors.base import iter_tags
from search_backends.base import SearchBackend, SearchError

logger = logging.getLogger(__name__)

HTML_URL       = "https://duckduckgo.com/html/"
RESULT_CLASS   = "result__a"
REDIRECT_PATH  = "/l/"
REDIRECT_PARAM = "uddg"


class DuckDuckGoBackend(SearchBackend):

    @property
    def name(self) -> str:
        return "DuckDuckGo / HTML"

    async def search(self, session: aiohttp.ClientSession, query: str) -> list[str]:
        try:
            async with session.get(HTML_URL, params={"q": query}) as resp:
                if resp.status != 200:
                    raise SearchError(f"DuckDuckGo error {resp.status} for '{query}'")
                html = await resp.text(errors="replace")
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise SearchError(f"DuckDuckGo unreachable for '{query}': {exc!r}") from exc

        links = extract_result_links(html)
        logger.info("DuckDuckGo returned %d results for '%s'", len(links), query)
        return links


# ── Helpers ────────────────────────────────────────────────────────────────────

def extract_result_links(html: str) -> list[str]:
    """Organic result URLs in page order, protocol-fixed and unwrapped."""
    links: list[str] = []
    for attrs in iter_tags(html, "a"):
        if RESULT_CLASS not in attrs.get("class", "").split():
            continue
        href = attrs.get("href", "").strip()
        if not href:
            continue
        if href.startswith("//"):
            href = "https:" + href
        links.append(unwrap_redirect(href))
    return links


def unwrap_redirect(url: str) -> str:
    """Destination of a duckduckgo.com/l/ redirect link, else `url` unchanged."""
    destination: Optional[str] = None
    try:
        parts = urlsplit(url)
        host  = parts.hostname or ""
        if "duckduckgo.com" in host and parts.path.startswith(REDIRECT_PATH):
            values = parse_qs(parts.query).get(REDIRECT_PARAM)
            if values and values[0]:
                destination = values[0]
    except ValueError:
        pass
    return destination or url
