"""
Error taxonomy — typed failures shared by every layer.

Fatal preconditions (Homebrew missing, applications directory
unreadable) are raised as ``DiscoveryError``.  Everything that happens
inside the batch resolution path is converted into a ``ResolverError``
and degrades to per-app probing instead of aborting the run.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorType(StrEnum):
    """Error categories surfaced to callers."""

    COMMAND_FAILED = "COMMAND_FAILED"
    FILE_NOT_FOUND = "FILE_NOT_FOUND"
    HOMEBREW_NOT_INSTALLED = "HOMEBREW_NOT_INSTALLED"
    INVALID_INPUT = "INVALID_INPUT"
    NETWORK_ERROR = "NETWORK_ERROR"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    TIMEOUT = "TIMEOUT"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


# Process exit codes per error category (CLI only)
EXIT_CODES: dict[str, int] = {
    "SUCCESS": 0,
    "GENERAL_ERROR": 1,
    ErrorType.HOMEBREW_NOT_INSTALLED: 2,
    ErrorType.PERMISSION_DENIED: 3,
    ErrorType.INVALID_INPUT: 4,
    ErrorType.NETWORK_ERROR: 5,
    ErrorType.TIMEOUT: 5,
}


def exit_code_for(error_type: ErrorType | str | None) -> int:
    """Map an error type to its process exit code."""
    if error_type is None:
        return EXIT_CODES["SUCCESS"]
    return EXIT_CODES.get(error_type, EXIT_CODES["GENERAL_ERROR"])


class DiscoveryError(Exception):
    """Raised when discovery cannot continue.

    Args:
        message: Human-readable description.
        error_type: One of ``ErrorType``.
        original_error: The underlying exception, if any.
    """

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.UNKNOWN_ERROR,
        original_error: BaseException | None = None,
    ):
        super().__init__(message)
        self.error_type = error_type
        self.original_error = original_error

    def __repr__(self) -> str:
        return f"<DiscoveryError type={self.error_type} message={str(self)!r}>"


class ResolverError(Exception):
    """Raised by a package resolver when its whole batch cannot be resolved."""

    def __init__(self, message: str, error_type: ErrorType = ErrorType.UNKNOWN_ERROR):
        super().__init__(message)
        self.error_type = error_type
