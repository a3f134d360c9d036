"""
Tests for dispatcher.py and models.py.

Covers:
  - ResolutionRequest: validation, query parsing, defaults
  - run_strategies(): priority order, short-circuit, skipped strategies,
    trace merging, final state
  - resolve(): owns the HTTP session (user agent + timeout)
  - ResolutionOutcome.to_body(): success / debug / failure shapes
"""
from __future__ import annotations

from unittest.mock import patch

import pytest

import config
import dispatcher
from conftest import FakeSession, product_page
from models import (
    AttemptRecord,
    DispatchState,
    InvalidRequest,
    MatchResult,
    ResolutionOutcome,
    ResolutionRequest,
    StrategyResult,
)
from strategies import Strategy


class RecordingStrategy(Strategy):
    """Strategy stub that records whether it ran."""

    def __init__(self, name: str, applies: bool = True, match: bool = False) -> None:
        self.name     = name
        self._applies = applies
        self._match   = match
        self.ran      = False

    def applies(self, request):
        return self._applies

    async def run(self, request, ctx):
        self.ran = True
        result = StrategyResult(
            strategy=self.name,
            attempts=[AttemptRecord(candidate=f"https://bringo.ma/{self.name}", strategy=self.name)],
        )
        if self._match:
            result.match = MatchResult(
                image_url=f"https://bringo.ma/{self.name}.jpg",
                product_url=f"https://bringo.ma/{self.name}",
                matched_by="name" if self.name == "name" else "subcode/ean",
                score=1.0,
            )
        return result


# ── ResolutionRequest ─────────────────────────────────────────────────────────

class TestResolutionRequest:

    def test_requires_an_identifier(self):
        with pytest.raises(InvalidRequest, match="Provide subcode, ean or name"):
            ResolutionRequest(site="bringo.ma")

    def test_blank_values_count_as_missing(self):
        with pytest.raises(InvalidRequest):
            ResolutionRequest.from_query({"subcode": "  ", "name": ""})

    def test_from_query_defaults(self):
        r = ResolutionRequest.from_query({"subcode": " 694062 "})
        assert r.site == "bringo.ma"
        assert r.subcode == "694062"
        assert r.debug is False

    def test_from_query_site_and_debug_flag(self):
        r = ResolutionRequest.from_query({"name": "Salon", "site": "marjane.ma", "debug": ""})
        assert r.site == "marjane.ma"
        assert r.debug is True

    def test_default_site_from_config(self, monkeypatch):
        monkeypatch.setattr(config, "DEFAULT_SITE", "marjane.ma")
        assert ResolutionRequest.from_query({"ean": "3616479540274"}).site == "marjane.ma"


# ── run_strategies() ──────────────────────────────────────────────────────────

@pytest.mark.asyncio
class TestRunStrategies:

    async def test_first_success_stops_pipeline(self):
        subcode = RecordingStrategy("subcode", match=True)
        ean     = RecordingStrategy("ean", match=True)
        name    = RecordingStrategy("name", match=True)
        request = ResolutionRequest(site="bringo.ma", subcode="1", ean="3616479540274", name="x")

        outcome = await dispatcher.run_strategies(request, ctx=None, strategies=[subcode, ean, name])

        assert outcome.state is DispatchState.SUCCEEDED
        assert outcome.match.product_url == "https://bringo.ma/subcode"
        assert subcode.ran and not ean.ran and not name.ran

    async def test_falls_through_in_order_and_merges_trace(self):
        subcode = RecordingStrategy("subcode")
        ean     = RecordingStrategy("ean")
        name    = RecordingStrategy("name", match=True)
        request = ResolutionRequest(site="bringo.ma", subcode="1", ean="3616479540274", name="x")

        outcome = await dispatcher.run_strategies(request, ctx=None, strategies=[subcode, ean, name])

        assert outcome.match.matched_by == "name"
        assert [a.strategy for a in outcome.attempts] == ["subcode", "ean", "name"]

    async def test_inapplicable_strategies_never_run(self):
        subcode = RecordingStrategy("subcode", applies=False)
        ean     = RecordingStrategy("ean", applies=False)
        name    = RecordingStrategy("name")
        request = ResolutionRequest(site="bringo.ma", name="x")

        outcome = await dispatcher.run_strategies(request, ctx=None, strategies=[subcode, ean, name])

        assert not subcode.ran and not ean.ran and name.ran
        assert outcome.state is DispatchState.EXHAUSTED
        assert outcome.match is None
        assert len(outcome.attempts) == 1

    async def test_nothing_applicable_is_exhausted_without_attempts(self):
        request = ResolutionRequest(site="bringo.ma", ean="123")
        outcome = await dispatcher.run_strategies(
            request, ctx=None, strategies=[RecordingStrategy("ean", applies=False)],
        )
        assert outcome.state is DispatchState.EXHAUSTED
        assert outcome.attempts == ()


# ── resolve() ─────────────────────────────────────────────────────────────────

@pytest.mark.asyncio
class TestResolve:

    async def test_session_carries_user_agent_and_timeout(self, monkeypatch):
        monkeypatch.setattr(config, "FETCH_TIMEOUT", 7)
        session = FakeSession(
            search={"site:bringo.ma 694062": ["https://bringo.ma/p/1"]},
            pages={"https://bringo.ma/p/1": product_page("x", "/x.jpg", "Numéro du produit: 694062")},
        )
        with patch("dispatcher.aiohttp.ClientSession", return_value=session) as MockSession:
            outcome = await dispatcher.resolve(ResolutionRequest(site="bringo.ma", subcode="694062"))

        kwargs = MockSession.call_args.kwargs
        assert kwargs["headers"] == {"User-Agent": "Mozilla/5.0 (compatible; Stockify/1.1)"}
        assert kwargs["timeout"].total == 7
        assert outcome.status == 200

    async def test_invalid_ean_issues_no_search(self):
        session = FakeSession()
        with patch("dispatcher.aiohttp.ClientSession", return_value=session):
            outcome = await dispatcher.resolve(ResolutionRequest(site="bringo.ma", ean="12345"))

        assert session.queries == []
        assert session.fetched == []
        assert outcome.status == 404


# ── Response shaping ──────────────────────────────────────────────────────────

class TestOutcomeBody:

    def _attempt(self):
        return AttemptRecord(candidate="https://bringo.ma/p/1", strategy="subcode", ok=True, matched=True)

    def test_success_without_debug_has_no_trace(self):
        match = MatchResult("https://bringo.ma/x.jpg", "https://bringo.ma/p/1", "subcode/ean", 1.0)
        outcome = ResolutionOutcome(match, (self._attempt(),), DispatchState.SUCCEEDED)
        assert outcome.status == 200
        assert outcome.to_body(debug=False) == {
            "imageUrl":   "https://bringo.ma/x.jpg",
            "productUrl": "https://bringo.ma/p/1",
            "matchedBy":  "subcode/ean",
            "score":      1.0,
        }

    def test_success_with_debug_has_trace(self):
        match = MatchResult("https://bringo.ma/x.jpg", "https://bringo.ma/p/1", "subcode/ean", 1.0)
        outcome = ResolutionOutcome(match, (self._attempt(),), DispatchState.SUCCEEDED)
        assert outcome.to_body(debug=True)["tried"] == [{
            "candidate": "https://bringo.ma/p/1",
            "strategy":  "subcode",
            "reason":    "token",
            "ok":        True,
            "matched":   True,
        }]

    def test_failure_shape(self):
        outcome = ResolutionOutcome(None, (self._attempt(),), DispatchState.EXHAUSTED)
        body = outcome.to_body(debug=False)
        assert outcome.status == 404
        assert body["imageUrl"] is None
        assert body["productUrl"] is None
        assert body["matchedBy"] is None
        assert body["score"] == 0
        assert len(body["tried"]) == 1

    def test_name_attempt_shape(self):
        attempt = AttemptRecord(candidate="https://bringo.ma/p/1", strategy="name", ok=True,
                                title="Salon Bas Lanka", score=1.0)
        assert attempt.to_dict() == {
            "candidate": "https://bringo.ma/p/1",
            "strategy":  "name",
            "title":     "Salon Bas Lanka",
            "score":     1.0,
        }

    def test_match_result_is_immutable(self):
        match = MatchResult("https://bringo.ma/x.jpg", "https://bringo.ma/p/1", "name", 0.7)
        with pytest.raises(Exception):
            match.score = 1.0   # type: ignore[misc]
