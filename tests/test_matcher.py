"""
Tests for the app matcher — ranking rules, thresholds and ordering.
"""

import pytest

from caskmatch.core.models.catalog import parse_catalog
from caskmatch.core.models.match import MatchingConfig, MatchingStrategy, MatchType
from caskmatch.core.services.catalog_index import build_index
from caskmatch.core.services.matcher import (
    MATCH_RULES,
    AppMatcher,
    collect_candidates,
    deduplicate,
)


@pytest.fixture
def matcher(sample_records) -> AppMatcher:
    m = AppMatcher()
    m.build_index(sample_records)
    return m


def _matcher_for(entries, **config) -> AppMatcher:
    m = AppMatcher(MatchingConfig(**config))
    m.build_index(parse_catalog(entries))
    return m


class TestRuleTable:
    def test_confidences_descend(self):
        confidences = [rule.confidence for rule in MATCH_RULES]
        assert confidences == sorted(confidences, reverse=True)

    def test_rule_names_unique(self):
        names = [rule.name for rule in MATCH_RULES]
        assert len(names) == len(set(names))

    def test_core_rules(self):
        table = {rule.name: (rule.confidence, rule.match_type) for rule in MATCH_RULES}
        assert table["name-exact"] == (1.0, MatchType.NAME_EXACT)
        assert table["name-exact-no-hyphens"] == (0.98, MatchType.NAME_EXACT)
        assert table["exact-app-bundle"] == (0.95, MatchType.EXACT_APP_BUNDLE)
        assert table["package-name-bundle"] == (0.90, MatchType.NORMALIZED_APP_BUNDLE)
        assert table["package-name-bundle-no-hyphens"] == (0.88, MatchType.NORMALIZED_APP_BUNDLE)


class TestMatchScenarios:
    def test_bundle_rule_wins_when_no_alias_matches(self, make_app):
        m = _matcher_for([{
            "token": "visual-studio-code",
            "name": ["Microsoft Visual Studio Code", "VS Code"],
            "artifacts": [{"app": ["Visual Studio Code.app"]}],
        }])
        result = m.match_app(make_app("Visual Studio Code"))
        assert result.best is not None
        assert result.best.token == "visual-studio-code"
        assert result.best.match_type == MatchType.EXACT_APP_BUNDLE
        assert result.best.confidence == 0.95
        assert result.strategy == MatchingStrategy.APP_BUNDLE

    def test_unknown_app_has_no_candidates(self, matcher, make_app):
        result = matcher.match_app(make_app("Completely Unknown App"))
        assert result.candidates == []
        assert result.best is None
        assert result.strategy == MatchingStrategy.HYBRID

    def test_name_exact(self, matcher, make_app):
        result = matcher.match_app(make_app("Google Chrome"))
        assert result.best.token == "google-chrome"
        assert result.best.confidence == 1.0
        assert result.best.match_type == MatchType.NAME_EXACT
        assert result.best.source == "name-exact"

    def test_name_without_hyphens(self, matcher, make_app):
        result = matcher.match_app(make_app("Quit All"))
        assert result.best.token == "quit-all"
        assert result.best.confidence == 0.98
        assert result.best.match_type == MatchType.NAME_EXACT
        assert result.best.source == "name-exact-no-hyphens"

    def test_bundle_target_object(self, make_app):
        m = _matcher_for([{
            "token": "yubico-yubikey-manager",
            "name": ["Yubico Authenticator Manager"],
            "artifacts": [{"app": [{"target": "YubiKey Manager.app"}]}],
        }])
        result = m.match_app(make_app("YubiKey Manager"))
        assert result.best.token == "yubico-yubikey-manager"
        assert result.best.match_type == MatchType.EXACT_APP_BUNDLE

    def test_package_name_bundle(self, matcher, make_app):
        result = matcher.match_app(make_app("Code", package_name="visual-studio-code"))
        assert result.best.token == "visual-studio-code"
        assert result.best.confidence == 0.90
        assert result.best.match_type == MatchType.NORMALIZED_APP_BUNDLE

    def test_package_name_bundle_without_hyphens(self, make_app):
        m = _matcher_for([{"token": "foo-bar-app", "artifacts": [{"app": ["FooBar.app"]}]}])
        result = m.match_app(make_app("FB", package_name="foo-bar"))
        assert result.best.token == "foo-bar-app"
        assert result.best.confidence == 0.88
        assert result.best.source == "package-name-bundle-no-hyphens"

    def test_package_variant_ignored_when_same_as_name(self, make_app):
        app = make_app("Foo Bar")
        assert app.package_name == "foo-bar"
        m = _matcher_for([{"token": "foo-bar-app", "artifacts": [{"app": ["FooBar.app"]}]}])
        assert m.match_app(app).best is None

    def test_token_match(self, make_app):
        m = _matcher_for([{"token": "slack"}])
        result = m.match_app(make_app("Slack"))
        assert result.best.token == "slack"
        assert result.best.confidence == 0.85
        assert result.best.match_type == MatchType.TOKEN_MATCH
        assert result.strategy == MatchingStrategy.APP_BUNDLE

    def test_bundle_identifier(self, matcher, make_app):
        result = matcher.match_app(make_app("Renamed Browser", bundle_identifier="com.google.Chrome"))
        assert result.best.token == "google-chrome"
        assert result.best.confidence == 0.80
        assert result.best.match_type == MatchType.BUNDLE_ID
        assert result.strategy == MatchingStrategy.HYBRID

    def test_shared_alias_ranked_by_catalog_order(self, matcher, make_app):
        result = matcher.match_app(make_app("Dia"))
        assert [c.token for c in result.candidates] == ["diashapes", "thebrowsercompany-dia"]
        assert all(c.confidence == 1.0 for c in result.candidates)


class TestMatchProperties:
    def test_name_outranks_bundle(self, make_app):
        m = _matcher_for([
            {"token": "bundle-only", "artifacts": [{"app": ["Widget.app"]}]},
            {"token": "named", "name": ["Widget"]},
        ])
        result = m.match_app(make_app("Widget"))
        assert [c.token for c in result.candidates] == ["named", "bundle-only"]
        assert result.best.match_type == MatchType.NAME_EXACT

    def test_candidates_sorted_descending(self, matcher, make_app):
        app = make_app("Google Chrome", bundle_identifier="com.microsoft.VSCode")
        result = matcher.match_app(app)
        confidences = [c.confidence for c in result.candidates]
        assert confidences == sorted(confidences, reverse=True)
        assert [c.token for c in result.candidates] == ["google-chrome", "visual-studio-code"]

    def test_tokens_unique(self, matcher, make_app):
        result = matcher.match_app(make_app("Visual Studio Code", bundle_identifier="com.microsoft.VSCode"))
        tokens = [c.token for c in result.candidates]
        assert tokens == ["visual-studio-code"]
        assert result.best.confidence == 0.95

    def test_threshold_filters(self, sample_records, make_app):
        m = AppMatcher(MatchingConfig(min_confidence=0.9))
        m.build_index(sample_records)
        result = m.match_app(make_app("Renamed Browser", bundle_identifier="com.google.Chrome"))
        assert result.candidates == []

    def test_threshold_is_inclusive(self, sample_records, make_app):
        m = AppMatcher(MatchingConfig(min_confidence=0.9))
        m.build_index(sample_records)
        result = m.match_app(make_app("Code", package_name="visual-studio-code"))
        assert result.best.confidence == 0.90

    def test_every_candidate_meets_threshold(self, sample_records, make_app):
        m = AppMatcher(MatchingConfig(min_confidence=0.96))
        m.build_index(sample_records)
        for name in ("Google Chrome", "Quit All", "Visual Studio Code", "Dia"):
            for candidate in m.match_app(make_app(name)).candidates:
                assert candidate.confidence >= 0.96

    def test_max_matches_truncates(self, sample_records, make_app):
        m = AppMatcher(MatchingConfig(max_matches=1))
        m.build_index(sample_records)
        result = m.match_app(make_app("Dia"))
        assert [c.token for c in result.candidates] == ["diashapes"]


class TestAppMatcher:
    def test_requires_index(self, make_app):
        with pytest.raises(RuntimeError, match="build_index"):
            AppMatcher().match_app(make_app("Slack"))

    def test_explicit_index(self, sample_records, make_app):
        index = build_index(sample_records)
        result = AppMatcher().match_app(make_app("Google Chrome"), index)
        assert result.best.token == "google-chrome"

    def test_match_apps_keeps_order(self, matcher, make_app):
        apps = [make_app("Google Chrome"), make_app("Nope"), make_app("Quit All")]
        results = matcher.match_apps(apps)
        assert [r.app.original_name for r in results] == ["Google Chrome", "Nope", "Quit All"]
        assert [r.best.token if r.best else None for r in results] == ["google-chrome", None, "quit-all"]

    def test_collect_candidates_in_rule_order(self, sample_records, make_app):
        index = build_index(sample_records)
        candidates = collect_candidates(make_app("Google Chrome"), index)
        sources = [c.source for c in candidates]
        assert sources[0] == "name-exact"
        assert "exact-app-bundle" in sources
        assert "token-match" in sources
        assert [c.token for c in deduplicate(candidates)] == ["google-chrome"]
