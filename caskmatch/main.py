"""
caskmatch — CLI entrypoint.

Usage:
    caskmatch --help
    caskmatch discover --json
    caskmatch cache info
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import click

from caskmatch import __version__
from caskmatch.core.config.loader import ConfigError, load_settings
from caskmatch.core.errors import EXIT_CODES, DiscoveryError, ErrorType, exit_code_for
from caskmatch.core.models.app import AppStatus
from caskmatch.core.models.settings import Settings
from caskmatch.core.observability.logging_config import setup_from_flags

_STATUS_STYLE = {
    AppStatus.AVAILABLE: ("📦", "green"),
    AppStatus.ALREADY_INSTALLED: ("✓", "cyan"),
    AppStatus.UNAVAILABLE: ("·", "white"),
    AppStatus.IGNORED: ("–", "yellow"),
}


@click.group()
@click.version_option(version=__version__, prog_name="caskmatch")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to caskmatch.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """caskmatch — find Homebrew casks for the apps you already have."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    setup_from_flags(debug=debug, verbose=verbose, quiet=quiet)


def _load_settings(ctx: click.Context) -> Settings:
    try:
        return load_settings(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(EXIT_CODES[ErrorType.INVALID_INPUT])


# ── discover ────────────────────────────────────────────────────


@cli.command()
@click.option(
    "--applications-dir",
    type=click.Path(file_okay=False),
    default=None,
    help="Directory to scan (default: /Applications).",
)
@click.option("--ignore", "ignore", multiple=True, help="App name to skip (repeatable).")
@click.option("--ignore-app-store", is_flag=True, help="Skip Mac App Store apps.")
@click.option("--fallback-to-cli", is_flag=True, help="Probe brew per app instead of using the catalog.")
@click.option("--force-refresh-cache", is_flag=True, help="Re-download the catalog.")
@click.option(
    "--threshold",
    type=click.FloatRange(0.0, 1.0),
    default=None,
    help="Minimum match confidence (0-1).",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def discover(
    ctx: click.Context,
    applications_dir: str | None,
    ignore: tuple[str, ...],
    ignore_app_store: bool,
    fallback_to_cli: bool,
    force_refresh_cache: bool,
    threshold: float | None,
    as_json: bool,
) -> None:
    """Classify installed apps against Homebrew."""
    from caskmatch.core.use_cases.discover import run_discovery

    settings = _apply_overrides(
        _load_settings(ctx),
        applications_dir=applications_dir,
        ignore=ignore,
        ignore_app_store=ignore_app_store,
        fallback_to_cli=fallback_to_cli,
        force_refresh_cache=force_refresh_cache,
        threshold=threshold,
    )
    result = run_discovery(settings)

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
        sys.exit(exit_code_for(result.error_type))

    if result.error:
        click.secho(f"❌ {result.error}", fg="red", err=True)
        sys.exit(exit_code_for(result.error_type))

    outcome = result.outcome
    assert outcome is not None  # guaranteed after error check above
    quiet = ctx.obj.get("quiet", False)

    if not outcome.apps:
        click.echo(f"No applications found in {result.applications_dir}")
        return

    for status, (icon, color) in _STATUS_STYLE.items():
        apps = outcome.by_status(status)
        if not apps or (quiet and status != AppStatus.AVAILABLE):
            continue
        click.secho(f"\n{icon} {status} ({len(apps)})", fg=color, bold=True)
        for app in apps:
            line = f"   {app.original_name}"
            if app.matched_package:
                line += f"  → {app.matched_package} [{app.package_type}]"
            if app.match_confidence is not None:
                line += f"  {app.match_confidence:.2f}"
            click.echo(line)

    if not quiet:
        click.echo()
        if outcome.fallback_reason:
            click.secho(f"   Resolved by probing brew ({outcome.fallback_reason})", fg="yellow")
        elif outcome.resolver:
            source = "cache" if outcome.from_cache else "download"
            click.echo(f"   Catalog: {outcome.catalog_size} casks ({source})")


def _apply_overrides(
    settings: Settings,
    *,
    applications_dir: str | None,
    ignore: tuple[str, ...],
    ignore_app_store: bool,
    fallback_to_cli: bool,
    force_refresh_cache: bool,
    threshold: float | None,
) -> Settings:
    """Layer CLI flags over file settings; flags can only switch options on."""
    update: dict[str, object] = {}
    if applications_dir is not None:
        update["applications_dir"] = applications_dir
    if ignore:
        update["ignore"] = [*settings.ignore, *(i for i in ignore if i.strip())]
    if ignore_app_store:
        update["ignore_app_store"] = ignore_app_store
    if fallback_to_cli:
        update["fallback_to_cli"] = fallback_to_cli
    if force_refresh_cache:
        update["force_refresh_cache"] = force_refresh_cache
    if threshold is not None:
        update["matching"] = settings.matching.model_copy(update={"min_confidence": threshold})
    return settings.model_copy(update=update)


# ── cache ───────────────────────────────────────────────────────


@cli.group()
def cache() -> None:
    """Manage the local cask catalog snapshot."""


def _store(ctx: click.Context):
    from caskmatch.core.services.catalog_store import CatalogStore

    settings = _load_settings(ctx)
    return CatalogStore(
        settings.cache.resolved_path,
        catalog_url=settings.cache.catalog_url,
        ttl_seconds=settings.cache.ttl_seconds,
        timeout=settings.cache.request_timeout,
    )


@cache.command("info")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def cache_info(ctx: click.Context, as_json: bool) -> None:
    """Show where the snapshot lives and whether it is fresh."""
    info = _store(ctx).get_cache_info()

    if as_json:
        click.echo(json.dumps(info.to_dict(), indent=2))
        return

    click.secho(f"📁 {info.path}", fg="cyan", bold=True)
    if not info.exists:
        click.echo("   No cache file")
        return
    state = "valid" if info.valid else "stale or unreadable"
    click.echo(f"   Status:   {state}")
    click.echo(f"   Modified: {info.last_modified}")
    click.echo(f"   Size:     {info.size} bytes")
    if info.entries is not None:
        click.echo(f"   Entries:  {info.entries}")


@cache.command("clear")
@click.pass_context
def cache_clear(ctx: click.Context) -> None:
    """Delete the snapshot."""
    store = _store(ctx)
    try:
        store.clear_cache()
    except DiscoveryError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(exit_code_for(e.error_type))
    click.secho(f"✅ Cache cleared: {store.cache_path}", fg="green")


@cache.command("refresh")
@click.pass_context
def cache_refresh(ctx: click.Context) -> None:
    """Download the catalog and rewrite the snapshot."""
    result = _store(ctx).fetch_all(force_refresh=True)

    if not result.ok:
        assert result.error is not None
        click.secho(f"❌ Catalog download failed: {result.error.message}", fg="red", err=True)
        sys.exit(exit_code_for(result.error.error_type))
    click.secho(f"✅ Cached {len(result.data)} casks", fg="green")


def main() -> None:
    """Entry point for the ``caskmatch`` console script."""
    cli(obj={})


if __name__ == "__main__":
    main()
