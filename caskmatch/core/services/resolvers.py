"""
Package resolvers — decide which Homebrew package each pending app maps to.

Two implementations share one interface:

    CatalogResolver  cache → index → matcher, all apps in one pass
    ProbeResolver    one ``brew info`` probe per app, concurrently

The orchestrator tries the catalog first and falls back to probing when
``CatalogResolver`` raises ``ResolverError``.
"""

from __future__ import annotations

import concurrent.futures
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

from caskmatch.adapters.homebrew import HomebrewClient
from caskmatch.core.errors import ErrorType, ResolverError
from caskmatch.core.models.app import LocalApp, PackageType
from caskmatch.core.models.match import MatchingConfig
from caskmatch.core.services.catalog_store import CatalogStore
from caskmatch.core.services.matcher import AppMatcher

logger = logging.getLogger(__name__)


@dataclass
class Resolution:
    """What one app resolved to."""

    package_type: PackageType = PackageType.UNAVAILABLE
    package_name: str | None = None
    confidence: float | None = None
    match_type: str | None = None
    description: str = ""
    homepage: str = ""

    @property
    def available(self) -> bool:
        return self.package_type != PackageType.UNAVAILABLE

    @classmethod
    def unavailable(cls) -> Resolution:
        return cls()


class PackageResolver(ABC):
    """Resolve a batch of apps, keyed by bundle path."""

    name: str = "resolver"

    @abstractmethod
    def resolve(self, apps: list[LocalApp]) -> dict[str, Resolution]:
        """Return a Resolution for every app in ``apps``."""


class CatalogResolver(PackageResolver):
    """Batch resolution through the cached catalog.

    Args:
        store: Catalog source.
        config: Matching thresholds.
        force_refresh: Bypass the on-disk cache.
    """

    name = "catalog"

    def __init__(
        self,
        store: CatalogStore,
        config: MatchingConfig | None = None,
        force_refresh: bool = False,
    ):
        self.store = store
        self.config = config or MatchingConfig()
        self.force_refresh = force_refresh
        self.from_cache: bool | None = None
        self.catalog_size = 0

    def resolve(self, apps: list[LocalApp]) -> dict[str, Resolution]:
        fetched = self.store.fetch_all(force_refresh=self.force_refresh)
        if not fetched.ok:
            assert fetched.error is not None
            raise ResolverError(
                f"Catalog unavailable: {fetched.error.message}",
                fetched.error.error_type,
            )
        self.from_cache = fetched.from_cache
        self.catalog_size = len(fetched.data)

        try:
            matcher = AppMatcher(self.config)
            matcher.build_index(fetched.data)
            results = matcher.match_apps(apps)
        except Exception as e:
            raise ResolverError(f"Catalog matching failed: {e}", ErrorType.UNKNOWN_ERROR) from e

        resolutions: dict[str, Resolution] = {}
        for result in results:
            best = result.best
            if best is None:
                resolutions[result.app.bundle_path] = Resolution.unavailable()
                continue
            resolutions[result.app.bundle_path] = Resolution(
                package_type=PackageType.CASK,
                package_name=best.token,
                confidence=best.confidence,
                match_type=str(best.match_type),
                description=best.record.description,
                homepage=best.record.homepage,
            )
        return resolutions


class ProbeResolver(PackageResolver):
    """Per-app resolution by asking ``brew`` directly.

    Each app is probed as a cask first, then as a formula.  A probe that
    raises only affects its own app, which is marked unavailable.

    Args:
        homebrew: Client used for the probes.
        max_workers: Concurrent probes.
    """

    name = "probe"

    def __init__(self, homebrew: HomebrewClient, max_workers: int = 5):
        self.homebrew = homebrew
        self.max_workers = max(1, max_workers)

    def resolve(self, apps: list[LocalApp]) -> dict[str, Resolution]:
        if not apps:
            return {}

        resolutions: dict[str, Resolution] = {}
        with concurrent.futures.ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(apps)),
        ) as pool:
            futures = {pool.submit(self.probe, app): app for app in apps}
            for future in concurrent.futures.as_completed(futures):
                app = futures[future]
                try:
                    resolutions[app.bundle_path] = future.result()
                except Exception as e:
                    logger.warning(
                        "Failed to check Homebrew availability for %s: %s",
                        app.original_name, e,
                    )
                    resolutions[app.bundle_path] = Resolution.unavailable()
        return resolutions

    def probe(self, app: LocalApp) -> Resolution:
        """Probe one app's package name."""
        name = app.package_name
        logger.debug("Checking Homebrew availability for: %s", app.original_name)

        if self.homebrew.cask_exists(name):
            return Resolution(package_type=PackageType.CASK, package_name=name)
        if self.homebrew.formula_exists(name):
            return Resolution(package_type=PackageType.FORMULA, package_name=name)
        return Resolution.unavailable()

