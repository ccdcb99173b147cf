"""
Catalog index — lookup maps over the flat cask catalog.

Built once per discovery run.  Pure: the only output is the returned
``CatalogIndex``; a malformed record is logged and skipped so one bad
entry never prevents indexing the rest of the catalog.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any

from caskmatch.core.models.catalog import (
    PackageRecord,
    UnrecognizedBundleEntry,
    parse_bundle_entry,
    strip_app_extension,
)
from caskmatch.core.services.naming import compact, normalize_app_name

logger = logging.getLogger(__name__)

# Uninstall directive keys that carry a bundle identifier
_BUNDLE_ID_KEYS = ("quit", "launchctl")


@dataclass
class CatalogIndex:
    """Four lookup maps keyed by token, alias, bundle stem and bundle id.

    Invariant: no token appears twice inside any list value.
    """

    by_token: dict[str, PackageRecord] = field(default_factory=dict)
    by_normalized_name: dict[str, list[PackageRecord]] = field(default_factory=dict)
    by_app_bundle: dict[str, list[PackageRecord]] = field(default_factory=dict)
    by_bundle_identifier: dict[str, list[PackageRecord]] = field(default_factory=dict)

    @property
    def size(self) -> int:
        return len(self.by_token)

    @cached_property
    def by_compact_name(self) -> dict[str, list[PackageRecord]]:
        """Aliases with hyphens removed, derived from ``by_normalized_name``."""
        derived: dict[str, list[PackageRecord]] = {}
        for key, records in self.by_normalized_name.items():
            for record in records:
                add_unique(derived, compact(key), record)
        return derived

    def to_dict(self) -> dict[str, int]:
        return {
            "tokens": len(self.by_token),
            "names": len(self.by_normalized_name),
            "app_bundles": len(self.by_app_bundle),
            "bundle_identifiers": len(self.by_bundle_identifier),
        }


def add_unique(
    mapping: dict[str, list[PackageRecord]],
    key: str,
    record: PackageRecord,
) -> None:
    """Append ``record`` under ``key``, one entry per token.

    A record whose token is already in the list replaces the earlier one
    in place, so every map agrees with ``by_token`` (last record wins)
    while list order stays that of first appearance.
    """
    bucket = mapping.setdefault(key, [])
    for i, existing in enumerate(bucket):
        if existing.token == record.token:
            bucket[i] = record
            return
    bucket.append(record)


def build_index(records: list[PackageRecord]) -> CatalogIndex:
    """Build all lookup maps for a catalog.

    Args:
        records: Parsed catalog records.

    Returns:
        A populated CatalogIndex.
    """
    logger.debug("Building search index for %d casks...", len(records))
    index = CatalogIndex()
    skipped = 0

    for record in records:
        try:
            _index_record(record, index)
        except (TypeError, AttributeError, ValueError) as e:
            skipped += 1
            logger.warning("Skipping cask %r while indexing: %s", getattr(record, "token", "?"), e)

    if skipped:
        logger.info("Index built with %d malformed casks skipped", skipped)
    logger.debug("Search index built: %s", index.to_dict())
    return index


def _index_record(record: PackageRecord, index: CatalogIndex) -> None:
    index.by_token[record.token] = record

    for alias in record.names:
        key = normalize_app_name(alias)
        if key:
            add_unique(index.by_normalized_name, key, record)

    for artifact in record.artifacts:
        if not isinstance(artifact, dict):
            continue
        _index_app_bundles(artifact.get("app"), record, index)
        _index_bundle_identifiers(artifact.get("uninstall"), record, index)


def _index_app_bundles(entries: Any, record: PackageRecord, index: CatalogIndex) -> None:
    if not isinstance(entries, list):
        return

    for raw in entries:
        entry = parse_bundle_entry(raw)
        if isinstance(entry, UnrecognizedBundleEntry):
            logger.debug(
                "Skipping unexpected app entry in cask %s: %s",
                record.token, type(raw).__name__,
            )
            continue
        key = normalize_app_name(strip_app_extension(entry.bundle_name))
        if key:
            add_unique(index.by_app_bundle, key, record)


def _index_bundle_identifiers(steps: Any, record: PackageRecord, index: CatalogIndex) -> None:
    if not isinstance(steps, list):
        return

    for step in steps:
        if not isinstance(step, dict):
            continue
        for key in _BUNDLE_ID_KEYS:
            for identifier in _as_identifiers(step.get(key)):
                add_unique(index.by_bundle_identifier, identifier, record)


def _as_identifiers(value: Any) -> list[str]:
    """Uninstall fields hold either one identifier or a list of them."""
    if isinstance(value, str):
        values = [value]
    elif isinstance(value, list):
        values = [v for v in value if isinstance(v, str)]
    else:
        return []
    return [v.strip() for v in values if v.strip()]
