"""
Shared pytest fixtures.

Network access is replaced by FakeSession: a stand-in for
aiohttp.ClientSession that serves canned pages by URL and canned DuckDuckGo
result pages by query, and records every GET so tests can assert which
pages were (or were not) fetched.
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Union
from urllib.parse import quote

import pytest

# ── Make the project root importable without installing the package ────────────
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

import candidate_source
import config

DDG_URL = "https://duckduckgo.com/html/"

Page = Union[str, tuple[int, str], Exception]


class FakeResponse:
    def __init__(self, status: int, body: str) -> None:
        self.status = status
        self._body  = body

    async def text(self, *args, **kwargs) -> str:
        return self._body

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class _RaisingContext:
    def __init__(self, exc: Exception) -> None:
        self._exc = exc

    async def __aenter__(self):
        raise self._exc

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """
    pages:  {url: html | (status, html) | exception}
    search: {query: [result hrefs as DuckDuckGo would print them]}
    """

    def __init__(self, pages: dict[str, Page] | None = None,
                 search: dict[str, list[str]] | None = None,
                 search_status: int = 200) -> None:
        self.pages         = pages or {}
        self.search        = search or {}
        self.search_status = search_status
        self.fetched: list[str] = []
        self.queries: list[str] = []

    def get(self, url: str, params: dict | None = None, **kwargs):
        if url == DDG_URL:
            query = (params or {}).get("q", "")
            self.queries.append(query)
            return FakeResponse(self.search_status, ddg_results_page(self.search.get(query, [])))

        self.fetched.append(url)
        page = self.pages.get(url, (404, "<html><title>Not found</title></html>"))
        if isinstance(page, Exception):
            return _RaisingContext(page)
        if isinstance(page, tuple):
            return FakeResponse(*page)
        return FakeResponse(200, page)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


def ddg_results_page(urls: list[str]) -> str:
    """A DuckDuckGo HTML results page linking each url through /l/?uddg=."""
    anchors = "\n".join(
        f'<div class="result"><a rel="nofollow" class="result__a" '
        f'href="//duckduckgo.com/l/?uddg={quote(u, safe="")}&amp;rut=abc">{u}</a></div>'
        for u in urls
    )
    return f"<html><body>{anchors}</body></html>"


def product_page(title: str = "", image: str | None = None, body: str = "") -> str:
    og_image = f'<meta property="og:image" content="{image}">' if image else ""
    return (
        f"<html><head><title>{title}</title>{og_image}</head>"
        f"<body>{body}</body></html>"
    )


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Pin config to the shipped defaults so a local .env can't leak in."""
    monkeypatch.setattr(config, "DEFAULT_SITE", "bringo.ma")
    monkeypatch.setattr(config, "SEARCH_BACKEND", "duckduckgo")
    monkeypatch.setattr(config, "HTML_EXTRACTOR", "regex")
    monkeypatch.setattr(config, "NAME_MATCH_THRESHOLD", 0.6)
    monkeypatch.setattr(config, "MAX_CANDIDATES", 8)
    monkeypatch.setattr(candidate_source, "_backend", None)
    yield
