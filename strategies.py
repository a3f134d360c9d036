"""
strategies.py — the three ways an identifier is matched to a product page.

  subcode  →  page shows "Numéro du produit: <subcode>"      (exact token)
  ean      →  page contains the 12–14 digit barcode          (exact token)
  name     →  page title is close enough to the cleaned name (fuzzy)

Each strategy walks the ranked candidates one at a time and stops at the
first page it accepts *and* can pull an image from. Every candidate looked
at leaves an AttemptRecord, whatever happened to it.
"""
from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

import config
from candidate_source import CandidateSource
from extractors.base import HtmlExtractor
from models import (
    MATCHED_BY_NAME,
    MATCHED_BY_TOKEN,
    AttemptRecord,
    MatchResult,
    ResolutionRequest,
    StrategyResult,
)
from normalizer import clean_name, tokens
from page_fetcher import PageFetcher
from search_backends.base import SearchError
from similarity import similarity

logger = logging.getLogger(__name__)

EAN_RE = re.compile(r"\d{12,14}", re.ASCII)


@dataclass
class ResolutionContext:
    """Request-scoped collaborators handed to every strategy."""
    candidates: CandidateSource
    fetcher: PageFetcher
    extractor: HtmlExtractor


def is_valid_ean(ean: str) -> bool:
    return bool(EAN_RE.fullmatch(ean or ""))


def contains_product_number(html: str, number: str) -> bool:
    """
    The product-number label is optional, accent-insensitive on "Numéro",
    and may or may not end with a colon.
    """
    pattern = re.compile(
        r"(Num(?:é|e)ro\s+du\s+produit\s*:?\s*)?" + re.escape(number),
        re.IGNORECASE,
    )
    return bool(pattern.search(html))


class Strategy(ABC):
    name: str

    @abstractmethod
    def applies(self, request: ResolutionRequest) -> bool:
        """False when the request lacks (or has an unusable) identifier."""
        ...

    @abstractmethod
    async def run(self, request: ResolutionRequest, ctx: ResolutionContext) -> StrategyResult:
        ...

    async def _search(self, ctx: ResolutionContext, term: str) -> tuple[list[str], str | None]:
        try:
            return await ctx.candidates.candidates(term), None
        except SearchError as exc:
            logger.warning("[%s] search failed: %s", self.name, exc)
            return [], str(exc)


# ── Exact-token strategies ─────────────────────────────────────────────────────

class TokenStrategy(Strategy):
    """First candidate whose body passes `accepts` and has an image wins."""

    @abstractmethod
    def token(self, request: ResolutionRequest) -> str:
        ...

    @abstractmethod
    def accepts(self, html: str, token: str) -> bool:
        ...

    async def run(self, request: ResolutionRequest, ctx: ResolutionContext) -> StrategyResult:
        token = self.token(request)
        result = StrategyResult(strategy=self.name)
        urls, result.skip_reason = await self._search(ctx, token)

        for url in urls:
            page = await ctx.fetcher.fetch(url)
            attempt = AttemptRecord(candidate=url, strategy=self.name, ok=page.ok if page.fetched else None)
            result.attempts.append(attempt)
            if not page.fetched:
                attempt.error = page.error
                continue
            try:
                attempt.matched = self.accepts(page.html, token)
                if not attempt.matched:
                    continue
                image_url = ctx.extractor.extract_image(url, page.html)
            except Exception as exc:
                logger.warning("[%s] could not evaluate %s: %s", self.name, url, exc)
                attempt.error = f"evaluation failed: {type(exc).__name__}"
                continue
            if not image_url:
                attempt.error = "no image"
                logger.info("[%s] %s matched but has no image", self.name, url)
                continue

            logger.info("[%s] matched %s → %s", self.name, url, image_url)
            result.match = MatchResult(
                image_url   = image_url,
                product_url = url,
                matched_by  = MATCHED_BY_TOKEN,
                score       = 1.0,
            )
            return result

        return result


class SubcodeStrategy(TokenStrategy):
    name = "subcode"

    def applies(self, request: ResolutionRequest) -> bool:
        return bool(request.subcode)

    def token(self, request: ResolutionRequest) -> str:
        return request.subcode

    def accepts(self, html: str, token: str) -> bool:
        return contains_product_number(html, token)


class EanStrategy(TokenStrategy):
    name = "ean"

    def applies(self, request: ResolutionRequest) -> bool:
        return is_valid_ean(request.ean)

    def token(self, request: ResolutionRequest) -> str:
        return request.ean

    def accepts(self, html: str, token: str) -> bool:
        return token in html


# ── Fuzzy name strategy ────────────────────────────────────────────────────────

class NameStrategy(Strategy):
    """
    Threshold gate, then first hit: the earliest-ranked candidate scoring at
    least config.NAME_MATCH_THRESHOLD that also yields an image wins, even if
    a later candidate would score higher.
    """
    name = "name"

    def __init__(self, scorer: Callable[[list[str], list[str]], float] = similarity) -> None:
        self._scorer = scorer

    def applies(self, request: ResolutionRequest) -> bool:
        return bool(request.name)

    async def run(self, request: ResolutionRequest, ctx: ResolutionContext) -> StrategyResult:
        result = StrategyResult(strategy=self.name)
        query_name = clean_name(request.name)
        if not query_name:
            result.skip_reason = "name is empty after cleaning"
            return result
        query_tokens = tokens(query_name)
        threshold = config.NAME_MATCH_THRESHOLD

        urls, result.skip_reason = await self._search(ctx, query_name)
        for url in urls:
            page = await ctx.fetcher.fetch(url)
            attempt = AttemptRecord(candidate=url, strategy=self.name, ok=page.ok if page.fetched else None)
            result.attempts.append(attempt)
            if not page.fetched:
                attempt.error = page.error
                continue
            try:
                attempt.title = ctx.extractor.extract_title(page.html)
                attempt.score = self._scorer(query_tokens, tokens(attempt.title))
                if attempt.score < threshold:
                    continue
                image_url = ctx.extractor.extract_image(url, page.html)
            except Exception as exc:
                logger.warning("[name] could not evaluate %s: %s", url, exc)
                attempt.error = f"evaluation failed: {type(exc).__name__}"
                continue
            if not image_url:
                attempt.error = "no image"
                continue

            logger.info("[name] '%s' matched %s (score %.2f)", query_name, url, attempt.score)
            result.match = MatchResult(
                image_url   = image_url,
                product_url = url,
                matched_by  = MATCHED_BY_NAME,
                score       = attempt.score,
            )
            return result

        return result


def default_strategies() -> list[Strategy]:
    """Priority order: subcode, then EAN, then name."""
    return [SubcodeStrategy(), EanStrategy(), NameStrategy()]
