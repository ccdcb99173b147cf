"""
App matcher — rank catalog records against a local application.

Ranking policy lives in one ordered table, ``MATCH_RULES``.  Each rule
has a lookup function that only answers "which records does this rule
find for this app"; confidence, ordering, de-duplication and
thresholding are applied uniformly afterwards.

Rules are evaluated top to bottom in descending confidence, so when the
same token is found by several rules the first candidate kept is the
strongest one.  Name matches always outrank bundle matches regardless
of which normalization produced them.
"""

from __future__ import annotations

import logging
from typing import Callable

from caskmatch.core.models.app import LocalApp
from caskmatch.core.models.catalog import PackageRecord
from caskmatch.core.models.match import (
    APP_BUNDLE_MATCH_TYPES,
    MatchCandidate,
    MatchingConfig,
    MatchingStrategy,
    MatchResult,
    MatchRule,
    MatchType,
)
from caskmatch.core.services.catalog_index import CatalogIndex, build_index
from caskmatch.core.services.naming import compact, normalize_app_name

logger = logging.getLogger(__name__)

# ── Ranking table ───────────────────────────────────────────────

MATCH_RULES: tuple[MatchRule, ...] = (
    MatchRule("name-exact", 1.0, MatchType.NAME_EXACT),
    MatchRule("name-exact-no-hyphens", 0.98, MatchType.NAME_EXACT),
    MatchRule("exact-app-bundle", 0.95, MatchType.EXACT_APP_BUNDLE),
    MatchRule("package-name-bundle", 0.90, MatchType.NORMALIZED_APP_BUNDLE),
    MatchRule("package-name-bundle-no-hyphens", 0.88, MatchType.NORMALIZED_APP_BUNDLE),
    MatchRule("token-match", 0.85, MatchType.TOKEN_MATCH),
    MatchRule("bundle-id", 0.80, MatchType.BUNDLE_ID),
)

# A lookup returns (record, matched_value) pairs for one app
Lookup = Callable[[LocalApp, CatalogIndex], list[tuple[PackageRecord, str]]]


def _app_key(app: LocalApp) -> str:
    return normalize_app_name(app.original_name)


def _package_variant(app: LocalApp) -> str | None:
    """Normalized package name, only when it differs from the app name."""
    if not app.package_name or app.package_name == _app_key(app):
        return None
    return normalize_app_name(app.package_name)


def _lookup_name_exact(app: LocalApp, index: CatalogIndex) -> list[tuple[PackageRecord, str]]:
    return [(r, app.original_name) for r in index.by_normalized_name.get(_app_key(app), [])]


def _lookup_name_no_hyphens(app: LocalApp, index: CatalogIndex) -> list[tuple[PackageRecord, str]]:
    return [(r, app.original_name) for r in index.by_compact_name.get(compact(_app_key(app)), [])]


def _lookup_app_bundle(app: LocalApp, index: CatalogIndex) -> list[tuple[PackageRecord, str]]:
    key = _app_key(app)
    return [(r, key) for r in index.by_app_bundle.get(key, [])]


def _lookup_package_bundle(app: LocalApp, index: CatalogIndex) -> list[tuple[PackageRecord, str]]:
    variant = _package_variant(app)
    if variant is None:
        return []
    return [(r, app.package_name) for r in index.by_app_bundle.get(variant, [])]


def _lookup_package_bundle_no_hyphens(
    app: LocalApp, index: CatalogIndex,
) -> list[tuple[PackageRecord, str]]:
    variant = _package_variant(app)
    if variant is None:
        return []
    return [(r, app.package_name) for r in index.by_app_bundle.get(compact(variant), [])]


def _lookup_token(app: LocalApp, index: CatalogIndex) -> list[tuple[PackageRecord, str]]:
    found: list[tuple[PackageRecord, str]] = []
    for key in dict.fromkeys((_app_key(app), app.package_name)):
        record = index.by_token.get(key)
        if record is not None:
            found.append((record, key))
    return found


def _lookup_bundle_id(app: LocalApp, index: CatalogIndex) -> list[tuple[PackageRecord, str]]:
    if not app.bundle_identifier:
        return []
    ident = app.bundle_identifier
    return [(r, ident) for r in index.by_bundle_identifier.get(ident, [])]


_LOOKUPS: dict[str, Lookup] = {
    "name-exact": _lookup_name_exact,
    "name-exact-no-hyphens": _lookup_name_no_hyphens,
    "exact-app-bundle": _lookup_app_bundle,
    "package-name-bundle": _lookup_package_bundle,
    "package-name-bundle-no-hyphens": _lookup_package_bundle_no_hyphens,
    "token-match": _lookup_token,
    "bundle-id": _lookup_bundle_id,
}


# ── Post-processing ─────────────────────────────────────────────


def deduplicate(candidates: list[MatchCandidate]) -> list[MatchCandidate]:
    """Keep the first candidate seen for each token."""
    seen: set[str] = set()
    unique: list[MatchCandidate] = []
    for candidate in candidates:
        if candidate.token not in seen:
            seen.add(candidate.token)
            unique.append(candidate)
    return unique


def determine_strategy(best: MatchCandidate | None) -> MatchingStrategy:
    if best is not None and best.match_type in APP_BUNDLE_MATCH_TYPES:
        return MatchingStrategy.APP_BUNDLE
    return MatchingStrategy.HYBRID


def collect_candidates(
    app: LocalApp,
    index: CatalogIndex,
    rules: tuple[MatchRule, ...] = MATCH_RULES,
) -> list[MatchCandidate]:
    """Run every rule for one app, in table order, without filtering."""
    candidates: list[MatchCandidate] = []
    for rule in rules:
        for record, matched_value in _LOOKUPS[rule.name](app, index):
            candidates.append(MatchCandidate(
                record=record,
                confidence=rule.confidence,
                match_type=rule.match_type,
                matched_value=matched_value,
                source=rule.name,
            ))
    return candidates


class AppMatcher:
    """Match local apps against an indexed catalog.

    The matcher holds no per-app state, so ``match_app`` calls for
    different apps are independent of each other.
    """

    def __init__(
        self,
        config: MatchingConfig | None = None,
        index: CatalogIndex | None = None,
    ):
        self.config = config or MatchingConfig()
        self.index = index

    def build_index(self, records: list[PackageRecord]) -> CatalogIndex:
        """Build and keep an index for subsequent match calls."""
        self.index = build_index(records)
        return self.index

    def _require_index(self, index: CatalogIndex | None) -> CatalogIndex:
        resolved = index or self.index
        if resolved is None:
            raise RuntimeError("No catalog index available. Call build_index() first.")
        return resolved

    def match_app(self, app: LocalApp, index: CatalogIndex | None = None) -> MatchResult:
        """Rank catalog records for a single app."""
        idx = self._require_index(index)

        unique = deduplicate(collect_candidates(app, idx))
        kept = [c for c in unique if c.confidence >= self.config.min_confidence]
        kept.sort(key=lambda c: c.confidence, reverse=True)
        kept = kept[: self.config.max_matches]

        best = kept[0] if kept else None
        return MatchResult(app=app, candidates=kept, strategy=determine_strategy(best))

    def match_apps(
        self,
        apps: list[LocalApp],
        index: CatalogIndex | None = None,
    ) -> list[MatchResult]:
        """Match every app independently against the same index."""
        idx = self._require_index(index)
        logger.debug("Matching %d apps against %d casks...", len(apps), idx.size)

        results = [self.match_app(app, idx) for app in apps]

        if logger.isEnabledFor(logging.DEBUG):
            for result in results:
                best = result.best
                if best:
                    logger.debug(
                        "  %-30s → %s (%.2f, %s)",
                        result.app.original_name, best.token,
                        best.confidence, best.match_type,
                    )
                else:
                    logger.debug("  %-30s → no match", result.app.original_name)

        matched = sum(1 for r in results if r.best)
        logger.debug("Matching complete: %d/%d matches found", matched, len(apps))
        return results
