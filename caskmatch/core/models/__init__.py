"""
Domain models — Pydantic types for discovery.

All models are re-exported here for convenient access:

    from caskmatch.core.models import LocalApp, PackageRecord, MatchResult
"""

from caskmatch.core.models.app import AppStatus, LocalApp, PackageType
from caskmatch.core.models.catalog import (
    BundleFileName,
    BundleTarget,
    PackageRecord,
    UnrecognizedBundleEntry,
    parse_bundle_entry,
    parse_catalog,
)
from caskmatch.core.models.command import CommandResult
from caskmatch.core.models.match import (
    MatchCandidate,
    MatchingConfig,
    MatchingStrategy,
    MatchResult,
    MatchRule,
    MatchType,
)
from caskmatch.core.models.settings import CacheSettings, MatchingSettings, Settings

__all__ = [
    # app.py
    "AppStatus",
    "LocalApp",
    "PackageType",
    # catalog.py
    "BundleFileName",
    "BundleTarget",
    "PackageRecord",
    "UnrecognizedBundleEntry",
    "parse_bundle_entry",
    "parse_catalog",
    # command.py
    "CommandResult",
    # match.py
    "MatchCandidate",
    "MatchResult",
    "MatchRule",
    "MatchType",
    "MatchingConfig",
    "MatchingStrategy",
    # settings.py
    "CacheSettings",
    "MatchingSettings",
    "Settings",
]
