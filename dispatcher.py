"""
dispatcher.py — runs the strategies in priority order for one request.

  NOT_STARTED → TRYING_SUBCODE → TRYING_EAN → TRYING_NAME → EXHAUSTED
                      └──────────────┴─────────────┴──────→ SUCCEEDED

A strategy whose identifier is missing (or, for EAN, malformed) is skipped
without any network call. The first MatchResult ends the run: lower-priority
strategies are never started once one has succeeded.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import aiohttp

import config
from candidate_source import CandidateSource
from extractors.base import HtmlExtractor, get_extractor
from models import AttemptRecord, DispatchState, ResolutionOutcome, ResolutionRequest
from page_fetcher import PageFetcher
from search_backends.base import SearchBackend
from strategies import ResolutionContext, Strategy, default_strategies

logger = logging.getLogger(__name__)

_STATE_FOR = {
    "subcode": DispatchState.TRYING_SUBCODE,
    "ean":     DispatchState.TRYING_EAN,
    "name":    DispatchState.TRYING_NAME,
}


async def run_strategies(
    request: ResolutionRequest,
    ctx: ResolutionContext,
    strategies: Optional[Sequence[Strategy]] = None,
) -> ResolutionOutcome:
    """Try each applicable strategy in order; stop at the first match."""
    attempts: list[AttemptRecord] = []
    state = DispatchState.NOT_STARTED

    for strategy in strategies or default_strategies():
        if not strategy.applies(request):
            logger.debug("Skipping %s strategy (no usable identifier)", strategy.name)
            continue
        state = _STATE_FOR.get(strategy.name, state)
        logger.debug("State → %s", state.value)

        result = await strategy.run(request, ctx)
        attempts.extend(result.attempts)
        if result.ok:
            logger.info(
                "Resolved via %s: %s", strategy.name, result.match.product_url,
            )
            return ResolutionOutcome(
                match=result.match, attempts=tuple(attempts), state=DispatchState.SUCCEEDED,
            )
        if result.skip_reason:
            logger.info("%s strategy missed: %s", strategy.name, result.skip_reason)

    logger.info("No match on %s after %d candidate(s)", request.site, len(attempts))
    return ResolutionOutcome(match=None, attempts=tuple(attempts), state=DispatchState.EXHAUSTED)


async def resolve(
    request: ResolutionRequest,
    backend: Optional[SearchBackend] = None,
    extractor: Optional[HtmlExtractor] = None,
) -> ResolutionOutcome:
    """
    Resolve one request end to end. Opens a single HTTP session for the search
    and every candidate fetch; each call gets config.FETCH_TIMEOUT seconds.
    """
    timeout = aiohttp.ClientTimeout(total=config.FETCH_TIMEOUT)
    headers = {"User-Agent": config.USER_AGENT}
    async with aiohttp.ClientSession(headers=headers, timeout=timeout) as session:
        ctx = ResolutionContext(
            candidates = CandidateSource(session, request.site, backend),
            fetcher    = PageFetcher(session),
            extractor  = extractor or get_extractor(),
        )
        return await run_strategies(request, ctx)
