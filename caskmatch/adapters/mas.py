"""
Mac App Store adapter — list apps installed through ``mas``.

``mas list`` prints one app per line as ``<id> <name> (<version>)``.
When ``mas`` is missing or fails, the result simply reports no apps.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from caskmatch.adapters.base import CommandRunner

logger = logging.getLogger(__name__)

MAS = "mas"
MAS_COMMANDS = {
    "version": [MAS, "version"],
    "list": [MAS, "list"],
}


@dataclass(frozen=True)
class MasApp:
    app_id: str
    name: str
    version: str


@dataclass
class MasListing:
    """Result of querying the Mac App Store CLI."""

    apps: list[MasApp] = field(default_factory=list)
    mas_installed: bool = False
    success: bool = False


def parse_mas_output(output: str) -> list[MasApp]:
    """Parse ``mas list`` output, skipping lines that don't fit the format."""
    apps: list[MasApp] = []
    for line in output.splitlines():
        line = line.strip()
        if not line:
            continue

        app_id, sep, remainder = line.partition(" ")
        if not sep:
            continue
        remainder = remainder.strip()
        paren = remainder.rfind(" (")
        if paren == -1:
            logger.debug("Could not parse mas line: %s", line)
            continue

        name = remainder[:paren].strip()
        version = remainder[paren + 2:].removesuffix(")").strip()
        if app_id and name and version:
            apps.append(MasApp(app_id=app_id, name=name, version=version))
        else:
            logger.debug("Could not parse mas line: %s", line)
    return apps


def is_app_from_mac_app_store(app_name: str, mas_apps: list[MasApp]) -> bool:
    """Whether ``app_name`` equals or overlaps a Mac App Store app name.

    Containment in either direction counts, so "Pages" matches
    "Pages Pro" and vice versa.
    """
    if not mas_apps:
        return False
    wanted = app_name.lower().removesuffix(".app")
    for mas_app in mas_apps:
        candidate = mas_app.name.lower()
        if candidate == wanted or candidate in wanted or wanted in candidate:
            return True
    return False


class MacAppStoreLister:
    """Query ``mas`` through a CommandRunner."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def list_apps(self) -> MasListing:
        if not self.runner.is_available(MAS) or not self.runner.run(MAS_COMMANDS["version"]).success:
            logger.debug("mas CLI not available — skipping Mac App Store lookup")
            return MasListing()

        result = self.runner.run(MAS_COMMANDS["list"])
        if not result.success:
            logger.warning("Failed to get Mac App Store apps list: %s", result.stderr)
            return MasListing(mas_installed=True)

        apps = parse_mas_output(result.stdout)
        logger.debug("Found %d Mac App Store apps", len(apps))
        return MasListing(apps=apps, mas_installed=True, success=True)
