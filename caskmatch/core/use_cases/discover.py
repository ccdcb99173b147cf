"""
Discover use case — classify every local app against Homebrew.

One run walks through fixed stages:

    probe      brew reachable?                      (fatal if not)
    enumerate  list .app bundles                    (fatal if dir unreadable)
    classify   ignored / already-installed / pending
    batch      catalog cache → index → matcher      (errors degrade to probe)
    probe      one brew probe per pending app       (errors isolated per app)
    merge      write status and package info back onto each app

Collaborators are injected, so tests can substitute fakes for brew,
the filesystem and the catalog.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from caskmatch.adapters.base import CommandRunner
from caskmatch.adapters.homebrew import HomebrewClient
from caskmatch.adapters.mas import MacAppStoreLister, is_app_from_mac_app_store
from caskmatch.adapters.shell.command import SubprocessRunner
from caskmatch.adapters.shell.filesystem import ApplicationScanner
from caskmatch.core.errors import DiscoveryError, ErrorType, ResolverError
from caskmatch.core.models.app import AppStatus, LocalApp, PackageType
from caskmatch.core.models.settings import Settings
from caskmatch.core.services.catalog_store import CatalogStore
from caskmatch.core.services.naming import should_ignore_app
from caskmatch.core.services.resolvers import (
    CatalogResolver,
    PackageResolver,
    ProbeResolver,
    Resolution,
)

logger = logging.getLogger(__name__)


@dataclass
class DiscoveryOptions:
    """Per-run switches."""

    ignore: list[str] = field(default_factory=list)
    ignore_app_store: bool = False
    fallback_to_cli: bool = False


@dataclass
class DiscoveryOutcome:
    """Fully classified apps plus how they were resolved."""

    apps: list[LocalApp] = field(default_factory=list)
    resolver: str | None = None          # "catalog" | "probe" | None when nothing was pending
    fallback_reason: str | None = None
    from_cache: bool | None = None
    catalog_size: int = 0

    def by_status(self, status: AppStatus) -> list[LocalApp]:
        return [app for app in self.apps if app.status == status]

    def counts(self) -> dict[str, int]:
        return {
            str(status): len(self.by_status(status))
            for status in AppStatus
            if status != AppStatus.PENDING
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "total": len(self.apps),
            "counts": self.counts(),
            "resolver": self.resolver,
            "fallback_reason": self.fallback_reason,
            "from_cache": self.from_cache,
            "catalog_size": self.catalog_size,
            "apps": [app.model_dump(mode="json") for app in self.apps],
        }


class DiscoveryOrchestrator:
    """Drive one discovery run.

    Args:
        homebrew: brew client (reachability, installed set, probes).
        scanner: Source of local apps.
        catalog_resolver: Batch resolver; None forces the probe path.
        probe_resolver: Per-app fallback resolver.
        mas_lister: Optional Mac App Store lister.
    """

    def __init__(
        self,
        homebrew: HomebrewClient,
        scanner: ApplicationScanner,
        catalog_resolver: PackageResolver | None,
        probe_resolver: PackageResolver,
        mas_lister: MacAppStoreLister | None = None,
    ):
        self.homebrew = homebrew
        self.scanner = scanner
        self.catalog_resolver = catalog_resolver
        self.probe_resolver = probe_resolver
        self.mas_lister = mas_lister

    def discover(self, options: DiscoveryOptions | None = None) -> DiscoveryOutcome:
        """Run all stages and return the classified apps.

        Raises:
            DiscoveryError: HOMEBREW_NOT_INSTALLED, or a directory
                error from the scanner.
        """
        options = options or DiscoveryOptions()
        outcome = DiscoveryOutcome()

        # ── Probe ────────────────────────────────────────────────
        if not self.homebrew.is_installed():
            raise DiscoveryError(
                "Homebrew is not installed or not accessible",
                ErrorType.HOMEBREW_NOT_INSTALLED,
            )
        logger.info("Homebrew installation verified")

        # ── Enumerate ───────────────────────────────────────────
        apps = self.scanner.scan()
        if not apps:
            logger.warning("No applications found in %s", self.scanner.applications_dir)
            return outcome
        logger.info("Found %d applications", len(apps))
        outcome.apps = apps

        # ── Classify ────────────────────────────────────────────
        installed_casks = set(self.homebrew.installed_casks())
        installed_formulas = set(self.homebrew.installed_formulas())
        self._tag_app_store(apps, options)
        self._classify(apps, options, installed_casks, installed_formulas)

        pending = [app for app in apps if app.status == AppStatus.PENDING]
        logger.info(
            "%d ignored, %d already installed, %d to resolve",
            len(outcome.by_status(AppStatus.IGNORED)),
            len(outcome.by_status(AppStatus.ALREADY_INSTALLED)),
            len(pending),
        )
        if not pending:
            return outcome

        # ── Resolve (batch, then per-app fallback) ──────────────
        resolutions = self._resolve(pending, options, outcome)

        # ── Merge ───────────────────────────────────────────────
        installed = installed_casks | installed_formulas
        for app in pending:
            _merge(app, resolutions.get(app.bundle_path, Resolution.unavailable()), installed)

        logger.info("Discovery complete: %s", outcome.counts())
        return outcome

    # ── Stages ──────────────────────────────────────────────────

    def _tag_app_store(self, apps: list[LocalApp], options: DiscoveryOptions) -> None:
        if self.mas_lister is None:
            return
        listing = self.mas_lister.list_apps()
        if not listing.success:
            if options.ignore_app_store:
                logger.warning("Mac App Store apps could not be listed; none will be ignored")
            return
        for app in apps:
            app.from_mac_app_store = is_app_from_mac_app_store(app.original_name, listing.apps)

    def _classify(
        self,
        apps: list[LocalApp],
        options: DiscoveryOptions,
        installed_casks: set[str],
        installed_formulas: set[str],
    ) -> None:
        for app in apps:
            if should_ignore_app(app.normalized_name, app.package_name, options.ignore):
                app.status = AppStatus.IGNORED
            elif options.ignore_app_store and app.from_mac_app_store:
                app.status = AppStatus.IGNORED
            elif app.package_name in installed_casks:
                app.status = AppStatus.ALREADY_INSTALLED
                app.package_type = PackageType.CASK
                app.matched_package = app.package_name
            elif app.package_name in installed_formulas:
                app.status = AppStatus.ALREADY_INSTALLED
                app.package_type = PackageType.FORMULA
                app.matched_package = app.package_name
            else:
                app.status = AppStatus.PENDING

    def _resolve(
        self,
        pending: list[LocalApp],
        options: DiscoveryOptions,
        outcome: DiscoveryOutcome,
    ) -> dict[str, Resolution]:
        resolver = self.catalog_resolver
        if options.fallback_to_cli or resolver is None:
            outcome.fallback_reason = "requested"
        else:
            try:
                resolutions = resolver.resolve(pending)
                outcome.resolver = resolver.name
                if isinstance(resolver, CatalogResolver):
                    outcome.from_cache = resolver.from_cache
                    outcome.catalog_size = resolver.catalog_size
                return resolutions
            except ResolverError as e:
                logger.warning("Batch lookup failed (%s); checking apps one by one", e)
                outcome.fallback_reason = str(e)
            except Exception as e:
                logger.warning("Unexpected batch lookup error; checking apps one by one: %s", e)
                outcome.fallback_reason = f"{type(e).__name__}: {e}"

        outcome.resolver = self.probe_resolver.name
        return self.probe_resolver.resolve(pending)


def _merge(app: LocalApp, resolution: Resolution, installed: set[str]) -> None:
    app.package_type = resolution.package_type
    app.matched_package = resolution.package_name
    app.match_confidence = resolution.confidence
    app.match_type = resolution.match_type
    app.description = resolution.description
    app.homepage = resolution.homepage

    if not resolution.available:
        app.status = AppStatus.UNAVAILABLE
    elif resolution.package_name in installed:
        app.status = AppStatus.ALREADY_INSTALLED
    else:
        app.status = AppStatus.AVAILABLE


# ── Wiring ──────────────────────────────────────────────────────


@dataclass
class DiscoverResult:
    """Result of the discover use case."""

    outcome: DiscoveryOutcome | None = None
    applications_dir: Path | None = None
    error: str | None = None
    error_type: ErrorType | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {}
        if self.error:
            result["error"] = self.error
            result["error_type"] = str(self.error_type) if self.error_type else None
            return result

        result["applications_dir"] = str(self.applications_dir)
        if self.outcome:
            result.update(self.outcome.to_dict())
        return result


def build_orchestrator(
    settings: Settings,
    runner: CommandRunner | None = None,
    store: CatalogStore | None = None,
) -> DiscoveryOrchestrator:
    """Construct an orchestrator with real collaborators from settings."""
    runner = runner or SubprocessRunner(default_timeout=settings.command_timeout)
    homebrew = HomebrewClient(runner)
    store = store or CatalogStore(
        settings.cache.resolved_path,
        catalog_url=settings.cache.catalog_url,
        ttl_seconds=settings.cache.ttl_seconds,
        timeout=settings.cache.request_timeout,
    )

    return DiscoveryOrchestrator(
        homebrew=homebrew,
        scanner=ApplicationScanner(settings.applications_dir),
        catalog_resolver=CatalogResolver(
            store,
            config=settings.matching,
            force_refresh=settings.force_refresh_cache,
        ),
        probe_resolver=ProbeResolver(homebrew, max_workers=settings.max_concurrent_probes),
        mas_lister=MacAppStoreLister(runner),
    )


def run_discovery(
    settings: Settings | None = None,
    runner: CommandRunner | None = None,
    store: CatalogStore | None = None,
) -> DiscoverResult:
    """Discover and classify applications.

    Args:
        settings: Run configuration (defaults when None).
        runner: Optional command runner (e.g., a mock for tests).
        store: Optional catalog store.

    Returns:
        DiscoverResult; fatal failures are reported in ``error``.
    """
    settings = settings or Settings()
    result = DiscoverResult(applications_dir=Path(settings.applications_dir))

    orchestrator = build_orchestrator(settings, runner=runner, store=store)
    options = DiscoveryOptions(
        ignore=list(settings.ignore),
        ignore_app_store=settings.ignore_app_store,
        fallback_to_cli=settings.fallback_to_cli,
    )

    try:
        result.outcome = orchestrator.discover(options)
    except DiscoveryError as e:
        logger.error("Discovery failed: %s", e)
        result.error = str(e)
        result.error_type = e.error_type

    return result
