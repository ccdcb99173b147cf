"""
Mock command runner — test double for every external command.

By default every command succeeds with empty output.  Responses can be
configured per exact argument list, and every call is logged.
"""

from __future__ import annotations

from caskmatch.adapters.base import CommandRunner
from caskmatch.core.models.command import CommandResult


class MockCommandRunner(CommandRunner):
    """Configurable fake runner.

    Args:
        available: Programs ``is_available`` reports as present.  None
            means every program is available.
        default_output: stdout for commands without a custom response.
    """

    def __init__(
        self,
        available: set[str] | None = None,
        default_output: str = "",
    ):
        self._available = available
        self._default_output = default_output
        self._responses: dict[tuple[str, ...], CommandResult] = {}
        self._errors: dict[tuple[str, ...], Exception] = {}
        self._call_log: list[list[str]] = []

    @property
    def name(self) -> str:
        return "mock"

    @property
    def call_log(self) -> list[list[str]]:
        """Every argument list this mock has received."""
        return self._call_log

    @property
    def call_count(self) -> int:
        return len(self._call_log)

    def is_available(self, program: str) -> bool:
        return self._available is None or program in self._available

    def set_response(self, args: list[str], stdout: str = "") -> None:
        """Make ``args`` succeed with ``stdout``."""
        self._responses[tuple(args)] = CommandResult.ok(command=list(args), stdout=stdout)

    def set_failure(self, args: list[str], stderr: str = "Mock failure", exit_code: int = 1) -> None:
        """Make ``args`` fail."""
        self._responses[tuple(args)] = CommandResult.failure(
            command=list(args), stderr=stderr, exit_code=exit_code,
        )

    def set_error(self, args: list[str], error: Exception) -> None:
        """Make ``args`` raise, simulating a broken runner."""
        self._errors[tuple(args)] = error

    def run(self, args: list[str], timeout: float | None = None) -> CommandResult:
        self._call_log.append(list(args))
        key = tuple(args)

        if key in self._errors:
            raise self._errors[key]
        if key in self._responses:
            return self._responses[key]
        return CommandResult.ok(command=list(args), stdout=self._default_output)

    def calls_for(self, program: str) -> list[list[str]]:
        """Calls whose first argument is ``program``."""
        return [call for call in self._call_log if call and call[0] == program]
