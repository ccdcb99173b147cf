"""
CommandResult model — the outcome of one external command.

Command runners never raise: a missing binary, a timeout or a non-zero
exit all come back as a result with ``success=False``.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class CommandResult(BaseModel):
    """Captured output of a command execution."""

    command: list[str] = Field(default_factory=list)
    stdout: str = ""
    stderr: str = ""
    exit_code: int = 0
    success: bool = True
    duration_ms: int = 0

    @property
    def failed(self) -> bool:
        return not self.success

    @classmethod
    def ok(cls, command: list[str], stdout: str = "", **kwargs: Any) -> CommandResult:
        """Create a success result."""
        return cls(command=command, stdout=stdout, exit_code=0, success=True, **kwargs)

    @classmethod
    def failure(
        cls,
        command: list[str],
        stderr: str,
        exit_code: int = 1,
        **kwargs: Any,
    ) -> CommandResult:
        """Create a failure result."""
        return cls(
            command=command,
            stderr=stderr,
            exit_code=exit_code,
            success=False,
            **kwargs,
        )
