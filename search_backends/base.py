"""
Abstract base for all web search backends.
Every backend returns plain result URLs in the engine's ranking order — the
resolver doesn't care which engine produced them.
"""
from __future__ import annotations

from abc import ABC, abstractmethod

import aiohttp


class SearchError(RuntimeError):
    """The search engine could not be queried or answered with an error page."""


class SearchBackend(ABC):
    """All backends must implement this interface."""

    @abstractmethod
    async def search(self, session: aiohttp.ClientSession, query: str) -> list[str]:
        """
        Run `query` (already site-scoped, e.g. "site:bringo.ma 694062") and
        return organic result URLs, most relevant first. Redirect-wrapped
        links are unwrapped; nothing is filtered by domain here.
        Raises SearchError when the engine cannot be reached.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable backend name for logs."""
        ...
