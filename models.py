"""
Request, trace and result types shared by the strategies, the dispatcher and
the web handler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

import config

MATCHED_BY_TOKEN = "subcode/ean"
MATCHED_BY_NAME  = "name"


class InvalidRequest(ValueError):
    """The caller supplied none of subcode, ean, name."""


class DispatchState(str, Enum):
    NOT_STARTED    = "not_started"
    TRYING_SUBCODE = "trying_subcode"
    TRYING_EAN     = "trying_ean"
    TRYING_NAME    = "trying_name"
    SUCCEEDED      = "succeeded"
    EXHAUSTED      = "exhausted"


@dataclass(frozen=True)
class ResolutionRequest:
    site: str
    subcode: str = ""
    ean: str = ""
    name: str = ""
    debug: bool = False

    def __post_init__(self) -> None:
        if not (self.subcode or self.ean or self.name):
            raise InvalidRequest("Provide subcode, ean or name.")

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> "ResolutionRequest":
        """
        Build from URL query parameters. Values are stripped; ?debug counts
        when present at all, whatever its value.
        """
        def _get(key: str) -> str:
            return (query.get(key) or "").strip()

        return cls(
            site    = _get("site") or config.DEFAULT_SITE,
            subcode = _get("subcode"),
            ean     = _get("ean"),
            name    = _get("name"),
            debug   = "debug" in query,
        )


@dataclass
class AttemptRecord:
    """One examined candidate. Diagnostics only, never used for decisions."""
    candidate: str
    strategy: str                   # subcode | ean | name
    ok: Optional[bool] = None       # HTTP 2xx; None when the fetch itself failed
    matched: Optional[bool] = None  # token strategies: acceptance test result
    title: Optional[str] = None     # name strategy
    score: Optional[float] = None   # name strategy
    error: Optional[str] = None     # skip reason when the page could not be used

    def to_dict(self) -> dict:
        body: dict = {"candidate": self.candidate, "strategy": self.strategy}
        if self.strategy == "name":
            body["title"] = self.title or ""
            body["score"] = self.score or 0.0
        else:
            body["reason"]  = "token"
            body["ok"]      = self.ok
            body["matched"] = bool(self.matched)
        if self.error:
            body["error"] = self.error
        return body


@dataclass(frozen=True)
class MatchResult:
    image_url: str
    product_url: str
    matched_by: str     # "subcode/ean" | "name"
    score: float        # 0..1

    def to_dict(self) -> dict:
        return {
            "imageUrl":   self.image_url,
            "productUrl": self.product_url,
            "matchedBy":  self.matched_by,
            "score":      self.score,
        }


@dataclass
class StrategyResult:
    strategy: str
    match: Optional[MatchResult] = None
    attempts: list[AttemptRecord] = field(default_factory=list)
    skip_reason: Optional[str] = None   # set when no candidate could be searched

    @property
    def ok(self) -> bool:
        return self.match is not None


@dataclass(frozen=True)
class ResolutionOutcome:
    match: Optional[MatchResult]
    attempts: tuple[AttemptRecord, ...]
    state: DispatchState

    @property
    def status(self) -> int:
        return 200 if self.match else 404

    def to_body(self, debug: bool) -> dict:
        tried = [a.to_dict() for a in self.attempts]
        if self.match is None:
            return {
                "imageUrl":   None,
                "productUrl": None,
                "matchedBy":  None,
                "score":      0,
                "tried":      tried,
            }
        body = self.match.to_dict()
        if debug:
            body["tried"] = tried
        return body
