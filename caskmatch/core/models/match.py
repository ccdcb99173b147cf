"""
Match models — rules, candidates and per-app results.

Candidates and results are ephemeral: they are produced for one match
attempt and folded back into ``LocalApp`` by the orchestrator.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from caskmatch.core.models.app import LocalApp
from caskmatch.core.models.catalog import PackageRecord


class MatchType(StrEnum):
    """How a candidate was found."""

    NAME_EXACT = "name-exact"
    EXACT_APP_BUNDLE = "exact-app-bundle"
    NORMALIZED_APP_BUNDLE = "normalized-app-bundle"
    TOKEN_MATCH = "token-match"
    BUNDLE_ID = "bundle-id"


class MatchingStrategy(StrEnum):
    """Label describing which family of rules produced the best match."""

    APP_BUNDLE = "app-bundle"
    HYBRID = "hybrid"


# Match types that count as bundle/name/token-derived for strategy labelling
APP_BUNDLE_MATCH_TYPES = frozenset({
    MatchType.NAME_EXACT,
    MatchType.EXACT_APP_BUNDLE,
    MatchType.NORMALIZED_APP_BUNDLE,
    MatchType.TOKEN_MATCH,
})


class MatchingConfig(BaseModel):
    """Thresholds applied after candidates are collected."""

    min_confidence: float = Field(default=0.6, ge=0.0, le=1.0)
    max_matches: int = Field(default=5, ge=1)


@dataclass(frozen=True)
class MatchRule:
    """One row of the ranking table."""

    name: str
    confidence: float
    match_type: MatchType


@dataclass
class MatchCandidate:
    """A catalog record proposed for one local app."""

    record: PackageRecord
    confidence: float
    match_type: MatchType
    matched_value: str
    source: str

    @property
    def token(self) -> str:
        return self.record.token

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "confidence": self.confidence,
            "match_type": str(self.match_type),
            "matched_value": self.matched_value,
            "source": self.source,
        }


@dataclass
class MatchResult:
    """Ranked candidates for one local app."""

    app: LocalApp
    candidates: list[MatchCandidate] = field(default_factory=list)
    strategy: MatchingStrategy = MatchingStrategy.HYBRID

    @property
    def best(self) -> MatchCandidate | None:
        """Highest-confidence candidate, or None when nothing matched."""
        return self.candidates[0] if self.candidates else None

    def to_dict(self) -> dict[str, Any]:
        best = self.best
        return {
            "app": self.app.original_name,
            "strategy": str(self.strategy),
            "best": best.to_dict() if best else None,
            "candidates": [c.to_dict() for c in self.candidates],
        }
