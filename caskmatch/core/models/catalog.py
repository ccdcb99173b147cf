"""
Catalog models — Homebrew cask records and their artifact shapes.

Records are taken verbatim from the catalog API.  Fields the matcher
does not use are kept as extras so a record survives a round-trip
through the on-disk cache unchanged.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

APP_EXTENSION = ".app"


class PackageRecord(BaseModel):
    """A single cask entry from the catalog."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, frozen=True)

    token: str
    names: list[str] = Field(default_factory=list, alias="name")
    artifacts: list[Any] = Field(default_factory=list)
    description: str = Field(default="", alias="desc")
    homepage: str = ""

    @field_validator("names", mode="before")
    @classmethod
    def _coerce_names(cls, value: Any) -> list[str]:
        if not isinstance(value, list):
            return []
        return [v for v in value if isinstance(v, str)]

    @field_validator("artifacts", mode="before")
    @classmethod
    def _coerce_artifacts(cls, value: Any) -> list[Any]:
        return value if isinstance(value, list) else []

    @field_validator("description", "homepage", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return value if isinstance(value, str) else ""

    @classmethod
    def from_catalog(cls, raw: Any) -> PackageRecord | None:
        """Build a record from one raw catalog entry.

        Returns None (and logs) for entries that have no usable token.
        """
        if not isinstance(raw, dict):
            logger.debug("Skipping non-object catalog entry: %s", type(raw).__name__)
            return None
        token = raw.get("token")
        if not isinstance(token, str) or not token:
            logger.debug("Skipping catalog entry without a token")
            return None
        try:
            return cls.model_validate(raw)
        except ValidationError as e:
            logger.debug("Skipping malformed catalog entry %s: %s", token, e)
            return None

    def to_catalog(self) -> dict[str, Any]:
        """Serialize back to the catalog wire shape."""
        return self.model_dump(mode="json", by_alias=True)


def parse_catalog(raw_entries: list[Any]) -> list[PackageRecord]:
    """Convert raw catalog JSON into records, dropping unusable entries."""
    records: list[PackageRecord] = []
    for raw in raw_entries:
        record = PackageRecord.from_catalog(raw)
        if record is not None:
            records.append(record)
    skipped = len(raw_entries) - len(records)
    if skipped:
        logger.info("Dropped %d unusable catalog entries", skipped)
    return records


# ── App-bundle artifact entries ─────────────────────────────────
#
# An ``app`` artifact lists bundles either as bare file names
# ("Foo.app") or as objects carrying a rename target
# ({"target": "Foo.app"}).  Anything else is reported and skipped.


@dataclass(frozen=True)
class BundleFileName:
    filename: str

    @property
    def bundle_name(self) -> str:
        return self.filename


@dataclass(frozen=True)
class BundleTarget:
    target: str

    @property
    def bundle_name(self) -> str:
        return self.target


@dataclass(frozen=True)
class UnrecognizedBundleEntry:
    raw: Any

    @property
    def bundle_name(self) -> None:
        return None


BundleEntry = BundleFileName | BundleTarget | UnrecognizedBundleEntry


def parse_bundle_entry(entry: Any) -> BundleEntry:
    """Classify one element of an ``app`` artifact list."""
    if isinstance(entry, str):
        return BundleFileName(entry)
    if isinstance(entry, dict) and isinstance(entry.get("target"), str):
        return BundleTarget(entry["target"])
    return UnrecognizedBundleEntry(entry)


def strip_app_extension(name: str) -> str:
    """Remove a trailing ``.app`` (case-insensitive)."""
    if name.lower().endswith(APP_EXTENSION):
        return name[: -len(APP_EXTENSION)]
    return name
