"""
Subprocess command runner — execute programs and capture their output.

Commands are passed as argument lists, never through a shell, so app
and package names need no quoting.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
import time

from caskmatch.adapters.base import CommandRunner
from caskmatch.core.models.command import CommandResult

logger = logging.getLogger(__name__)

DEFAULT_COMMAND_TIMEOUT = 30.0


class SubprocessRunner(CommandRunner):
    """Run commands with ``subprocess.run``.

    Args:
        default_timeout: Seconds before a command is killed.
    """

    def __init__(self, default_timeout: float = DEFAULT_COMMAND_TIMEOUT):
        self.default_timeout = default_timeout

    @property
    def name(self) -> str:
        return "subprocess"

    def is_available(self, program: str) -> bool:
        return shutil.which(program) is not None

    def run(self, args: list[str], timeout: float | None = None) -> CommandResult:
        if not args:
            raise ValueError("Command cannot be empty")

        timeout = timeout or self.default_timeout
        logger.debug("Executing: %s", " ".join(args))
        start = time.monotonic()

        try:
            result = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return CommandResult.failure(
                command=args,
                stderr=f"Command timed out after {timeout:g}s",
                exit_code=124,
            )
        except FileNotFoundError:
            return CommandResult.failure(
                command=args,
                stderr=f"Command not found: {args[0]}",
                exit_code=127,
            )
        except OSError as e:
            return CommandResult.failure(
                command=args,
                stderr=f"Command execution error: {e}",
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stdout = result.stdout.strip()
        stderr = result.stderr.strip()

        if result.returncode == 0:
            return CommandResult.ok(
                command=args,
                stdout=stdout,
                stderr=stderr,
                duration_ms=elapsed_ms,
            )
        return CommandResult.failure(
            command=args,
            stderr=stderr or f"Command exited with code {result.returncode}",
            exit_code=result.returncode,
            stdout=stdout,
            duration_ms=elapsed_ms,
        )
