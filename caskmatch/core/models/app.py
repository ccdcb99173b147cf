"""
LocalApp model — an application bundle found on disk.

The identity fields (names, bundle path, bundle identifier) are set by
the scanner.  The result fields are written only by the discovery
orchestrator once the app has been classified.
"""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel


class AppStatus(StrEnum):
    """Classification of an app relative to Homebrew."""

    PENDING = "pending"                      # not yet resolved (internal)
    IGNORED = "ignored"
    ALREADY_INSTALLED = "already-installed"
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


class PackageType(StrEnum):
    """Kind of Homebrew package an app resolves to."""

    CASK = "cask"
    FORMULA = "formula"
    UNAVAILABLE = "unavailable"


class LocalApp(BaseModel):
    """A macOS ``.app`` bundle and its discovery outcome."""

    # ── Identity (from the scanner) ──────────────────────────────
    original_name: str                 # "Visual Studio Code"
    normalized_name: str               # "visual-studio-code"
    bundle_path: str                   # "/Applications/Visual Studio Code.app"
    package_name: str = ""             # candidate package name, may differ from normalized_name
    bundle_identifier: str | None = None
    from_mac_app_store: bool = False

    # ── Discovery result ─────────────────────────────────────────
    status: AppStatus = AppStatus.PENDING
    package_type: PackageType = PackageType.UNAVAILABLE
    matched_package: str | None = None
    match_confidence: float | None = None
    match_type: str | None = None
    description: str = ""
    homepage: str = ""

    def model_post_init(self, __context: object) -> None:
        if not self.package_name:
            self.package_name = self.normalized_name

    @property
    def already_installed(self) -> bool:
        return self.status == AppStatus.ALREADY_INSTALLED

    @property
    def is_resolved(self) -> bool:
        """Whether the orchestrator has assigned a final status."""
        return self.status != AppStatus.PENDING
