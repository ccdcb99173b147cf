"""Adapters — bindings for brew, mas and the filesystem.

Public re-exports for convenient access.
"""

from caskmatch.adapters.base import CommandRunner
from caskmatch.adapters.homebrew import HomebrewClient
from caskmatch.adapters.mas import MacAppStoreLister
from caskmatch.adapters.mock import MockCommandRunner
from caskmatch.adapters.shell.command import SubprocessRunner
from caskmatch.adapters.shell.filesystem import ApplicationScanner

__all__ = [
    "ApplicationScanner",
    "CommandRunner",
    "HomebrewClient",
    "MacAppStoreLister",
    "MockCommandRunner",
    "SubprocessRunner",
]
