"""
Catalog store — fetch the full cask catalog with an on-disk cache.

The common path reads a gzip snapshot from disk and never touches the
network.  When the snapshot is missing, stale, from another format
version or empty, the catalog is downloaded once (bounded timeout, no
retry) and the snapshot is rewritten.

Failures are returned, not raised: ``CatalogFetchResult.error`` tells
the caller whether it was an HTTP status, a timeout, a transport error
or an unusable response body.
"""

from __future__ import annotations

import http.client
import json
import logging
import socket
import time
import urllib.error
import urllib.request
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path
from typing import Any, Callable

from caskmatch import __version__
from caskmatch.core.errors import DiscoveryError, ErrorType
from caskmatch.core.models.catalog import PackageRecord, parse_catalog
from caskmatch.core.models.settings import DEFAULT_CATALOG_URL
from caskmatch.core.persistence.cache_file import (
    CACHE_FORMAT_VERSION,
    CacheEntry,
    default_cache_path,
    read_cache_entry,
    write_cache_entry,
)

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 24 * 60 * 60
DEFAULT_REQUEST_TIMEOUT = 30.0


class FetchFailureKind(StrEnum):
    """Shape of a catalog download failure."""

    HTTP_STATUS = "http-status"
    TIMEOUT = "timeout"
    NETWORK = "network"
    INVALID_RESPONSE = "invalid-response"


@dataclass
class FetchFailure:
    """Why a catalog download did not produce data."""

    kind: FetchFailureKind
    message: str
    status_code: int | None = None

    @property
    def error_type(self) -> ErrorType:
        if self.kind == FetchFailureKind.TIMEOUT:
            return ErrorType.TIMEOUT
        return ErrorType.NETWORK_ERROR

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"kind": str(self.kind), "message": self.message}
        if self.status_code is not None:
            result["status_code"] = self.status_code
        return result


@dataclass
class CatalogFetchResult:
    """Outcome of ``CatalogStore.fetch_all``."""

    data: list[PackageRecord] = field(default_factory=list)
    from_cache: bool = False
    error: FetchFailure | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CacheInfo:
    """Snapshot metadata for display; gathered without raising."""

    path: str
    exists: bool = False
    valid: bool = False
    last_modified: str | None = None
    size: int | None = None
    entries: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "exists": self.exists,
            "valid": self.valid,
            "last_modified": self.last_modified,
            "size": self.size,
            "entries": self.entries,
        }


def _now_ms() -> int:
    return int(time.time() * 1000)


class CatalogStore:
    """Cache-backed client for the cask catalog endpoint.

    Args:
        cache_path: Snapshot location (default ``~/.cache/caskmatch/casks.json.gz``).
        catalog_url: Endpoint returning the full catalog as a JSON array.
        ttl_seconds: Maximum snapshot age.
        timeout: Network timeout in seconds.
        format_version: Snapshot format this build reads and writes.
        clock: Returns "now" in epoch milliseconds.
    """

    def __init__(
        self,
        cache_path: Path | None = None,
        *,
        catalog_url: str = DEFAULT_CATALOG_URL,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        timeout: float = DEFAULT_REQUEST_TIMEOUT,
        format_version: str = CACHE_FORMAT_VERSION,
        clock: Callable[[], int] = _now_ms,
    ):
        self.cache_path = cache_path or default_cache_path()
        self.catalog_url = catalog_url
        self.ttl_ms = int(ttl_seconds * 1000)
        self.timeout = timeout
        self.format_version = format_version
        self._clock = clock

    def __repr__(self) -> str:
        return f"<CatalogStore path={str(self.cache_path)!r}>"

    # ── Public API ──────────────────────────────────────────────

    def fetch_all(self, force_refresh: bool = False) -> CatalogFetchResult:
        """Return the catalog, from cache when valid, else from the network.

        Args:
            force_refresh: Skip the cache and always download.
        """
        if not force_refresh:
            records = self.load()
            if records is not None:
                logger.info("Using cached cask data (%d casks)", len(records))
                return CatalogFetchResult(data=records, from_cache=True)
            logger.info("Cache not found or invalid, fetching from API...")
        else:
            logger.info("Refreshing cask database from API...")

        raw, failure = self._download()
        if failure is not None:
            logger.warning("Catalog download failed (%s): %s", failure.kind, failure.message)
            return CatalogFetchResult(error=failure)

        records = parse_catalog(raw)
        if not records:
            return CatalogFetchResult(error=FetchFailure(
                kind=FetchFailureKind.INVALID_RESPONSE,
                message="Catalog response contained no usable casks",
            ))

        try:
            self.save(records)
        except OSError as e:
            logger.warning("Failed to save cask cache: %s", e)

        return CatalogFetchResult(data=records, from_cache=False)

    def load(self) -> list[PackageRecord] | None:
        """Read the snapshot; None unless it exists and is valid."""
        entry = read_cache_entry(self.cache_path)
        if entry is None:
            return None
        if not entry.is_valid(self._clock(), self.ttl_ms, self.format_version):
            logger.debug("Catalog cache %s is stale or from another format", self.cache_path)
            return None
        records = parse_catalog(entry.data)
        return records or None

    def save(self, records: list[PackageRecord]) -> None:
        """Write a fresh snapshot stamped with the current time.

        Raises:
            OSError: If the snapshot cannot be written.
        """
        entry = CacheEntry(
            data=[r.to_catalog() for r in records],
            timestamp_ms=self._clock(),
            format_version=self.format_version,
        )
        write_cache_entry(entry, self.cache_path)
        logger.debug("Cached %d casks", len(records))

    def clear_cache(self) -> None:
        """Delete the snapshot.  A missing file is not an error.

        Raises:
            DiscoveryError: If the file exists but cannot be removed.
        """
        try:
            self.cache_path.unlink()
            logger.info("Cache cleared: %s", self.cache_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise DiscoveryError(
                f"Failed to clear cache {self.cache_path}: {e}",
                ErrorType.UNKNOWN_ERROR,
                e,
            ) from e

    def get_cache_info(self) -> CacheInfo:
        """Describe the snapshot on disk.  Never raises."""
        info = CacheInfo(path=str(self.cache_path))
        try:
            stat = self.cache_path.stat()
        except OSError:
            return info

        info.exists = True
        info.size = stat.st_size
        info.last_modified = datetime.fromtimestamp(stat.st_mtime, UTC).isoformat()

        entry = read_cache_entry(self.cache_path)
        if entry is not None:
            info.entries = len(entry.data)
            info.valid = entry.is_valid(self._clock(), self.ttl_ms, self.format_version)
        return info

    # ── Network ─────────────────────────────────────────────────

    def _download(self) -> tuple[list[Any], FetchFailure | None]:
        start = time.monotonic()

        try:
            req = urllib.request.Request(
                self.catalog_url,
                headers={
                    "Accept": "application/json",
                    "User-Agent": f"caskmatch/{__version__}",
                },
            )
            with urllib.request.urlopen(req, timeout=self.timeout) as resp:
                body = resp.read()
        except urllib.error.HTTPError as e:
            return [], FetchFailure(
                kind=FetchFailureKind.HTTP_STATUS,
                message=f"HTTP {e.code}: {e.reason}",
                status_code=e.code,
            )
        except urllib.error.URLError as e:
            if isinstance(e.reason, (TimeoutError, socket.timeout)):
                return [], self._timeout_failure()
            return [], FetchFailure(kind=FetchFailureKind.NETWORK, message=str(e.reason))
        except TimeoutError:
            return [], self._timeout_failure()
        except OSError as e:
            return [], FetchFailure(kind=FetchFailureKind.NETWORK, message=str(e))
        except http.client.HTTPException as e:
            # Connection dropped mid-body (IncompleteRead) or a garbled status line
            return [], FetchFailure(kind=FetchFailureKind.NETWORK, message=f"{type(e).__name__}: {e}")
        except ValueError as e:
            return [], FetchFailure(
                kind=FetchFailureKind.NETWORK,
                message=f"Invalid catalog URL {self.catalog_url!r}: {e}",
            )

        elapsed_ms = int((time.monotonic() - start) * 1000)
        logger.debug("Downloaded catalog (%d KB) in %dms", len(body) // 1024, elapsed_ms)

        try:
            raw = json.loads(body)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            return [], FetchFailure(
                kind=FetchFailureKind.INVALID_RESPONSE,
                message=f"Catalog response is not valid JSON: {e}",
            )
        if not isinstance(raw, list):
            return [], FetchFailure(
                kind=FetchFailureKind.INVALID_RESPONSE,
                message=f"Expected a JSON array, got {type(raw).__name__}",
            )

        logger.info("Fetched %d casks from %s", len(raw), self.catalog_url)
        return raw, None

    def _timeout_failure(self) -> FetchFailure:
        return FetchFailure(
            kind=FetchFailureKind.TIMEOUT,
            message=f"Request timed out after {self.timeout:g}s",
        )
