"""
Settings model — user configuration for a discovery run.

Loaded from YAML by ``caskmatch.core.config.loader``; every field has a
default so an absent config file is equivalent to ``Settings()``.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from caskmatch.core.models.match import MatchingConfig

DEFAULT_APPLICATIONS_DIR = "/Applications"
DEFAULT_CATALOG_URL = "https://formulae.brew.sh/api/cask.json"
DEFAULT_CACHE_PATH = "~/.cache/caskmatch/casks.json.gz"


class CacheSettings(BaseModel):
    """Where and how long the catalog snapshot is kept."""

    path: str = DEFAULT_CACHE_PATH
    ttl_hours: float = Field(default=24.0, gt=0)
    catalog_url: str = DEFAULT_CATALOG_URL
    request_timeout: float = Field(default=30.0, gt=0)

    @property
    def resolved_path(self) -> Path:
        return Path(self.path).expanduser()

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_hours * 3600


class MatchingSettings(MatchingConfig):
    """Matching thresholds as they appear in the config file."""


class Settings(BaseModel):
    """Top-level configuration."""

    applications_dir: str = DEFAULT_APPLICATIONS_DIR
    ignore: list[str] = Field(default_factory=list)
    ignore_app_store: bool = False
    fallback_to_cli: bool = False
    force_refresh_cache: bool = False
    max_concurrent_probes: int = Field(default=5, ge=1)
    command_timeout: float = Field(default=30.0, gt=0)

    matching: MatchingSettings = Field(default_factory=MatchingSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)

    @field_validator("ignore", mode="before")
    @classmethod
    def _split_ignore(cls, value: object) -> object:
        # Accept "a, b" as well as a YAML list
        if isinstance(value, str):
            return [part.strip() for part in value.split(",") if part.strip()]
        if value is None:
            return []
        return value

    @field_validator("ignore")
    @classmethod
    def _reject_blank(cls, value: list[str]) -> list[str]:
        for entry in value:
            if not entry.strip():
                raise ValueError("ignore entries must not be blank")
        return value
