"""
Homebrew adapter — the brew commands discovery relies on.

Every method maps one ``brew`` invocation onto a plain Python value.
A failed command means "not installed" / "not available"; only the
caller decides whether that is fatal.
"""

from __future__ import annotations

import logging

from caskmatch.adapters.base import CommandRunner
from caskmatch.core.services.naming import parse_command_output

logger = logging.getLogger(__name__)

BREW = "brew"

BREW_COMMANDS = {
    "version": [BREW, "--version"],
    "list_casks": [BREW, "ls", "-1", "--cask"],
    "list_formulas": [BREW, "leaves"],
}


def info_cask_command(name: str) -> list[str]:
    return [BREW, "info", "--cask", name]


def info_formula_command(name: str) -> list[str]:
    return [BREW, "info", name]


class HomebrewClient:
    """Thin wrapper over ``brew`` executed through a CommandRunner."""

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def is_installed(self) -> bool:
        """Whether ``brew --version`` runs successfully."""
        if not self.runner.is_available(BREW):
            logger.debug("brew not found on PATH")
            return False
        return self.runner.run(BREW_COMMANDS["version"]).success

    def installed_casks(self) -> list[str]:
        result = self.runner.run(BREW_COMMANDS["list_casks"])
        if not result.success:
            logger.warning("Could not list installed casks: %s", result.stderr)
            return []
        return parse_command_output(result.stdout)

    def installed_formulas(self) -> list[str]:
        """Installed formula leaves (not pulled in as dependencies)."""
        result = self.runner.run(BREW_COMMANDS["list_formulas"])
        if not result.success:
            logger.warning("Could not list installed formulas: %s", result.stderr)
            return []
        return parse_command_output(result.stdout)

    def cask_exists(self, name: str) -> bool:
        return self.runner.run(info_cask_command(name)).success

    def formula_exists(self, name: str) -> bool:
        return self.runner.run(info_formula_command(name)).success
