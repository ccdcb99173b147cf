"""
Adapter base — the contract between discovery and external commands.

Discovery never shells out directly; it goes through a ``CommandRunner``
so tests can substitute ``MockCommandRunner``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from caskmatch.core.models.command import CommandResult


class CommandRunner(ABC):
    """Abstract base class for command execution.

    Runners NEVER raise for command failures: a missing binary, a
    timeout or a non-zero exit is captured in the returned
    ``CommandResult`` with ``success=False``.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Runner identifier (e.g., 'subprocess', 'mock')."""

    @abstractmethod
    def is_available(self, program: str) -> bool:
        """Whether ``program`` can be executed.  Fast, never raises."""

    @abstractmethod
    def run(self, args: list[str], timeout: float | None = None) -> CommandResult:
        """Execute ``args`` and return the captured result."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
