"""
Catalog cache file — gzip-compressed JSON snapshot of the catalog.

On-disk shape::

    {"data": [...], "timestampMs": 1718000000000, "formatVersion": "1.0.0"}

Writes are atomic (write to temp file, then rename) so a crash
mid-write never leaves a truncated snapshot behind.  The file is not
locked; concurrent writers race and the last one wins.
"""

from __future__ import annotations

import gzip
import json
import logging
import tempfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

CACHE_FORMAT_VERSION = "1.0.0"
CACHE_DIR_NAME = ".cache/caskmatch"
CACHE_FILE_NAME = "casks.json.gz"


def default_cache_path(home: Path | None = None) -> Path:
    """Per-user cache file location under the home directory."""
    return (home or Path.home()) / CACHE_DIR_NAME / CACHE_FILE_NAME


@dataclass
class CacheEntry:
    """A decoded cache snapshot."""

    data: list[Any]
    timestamp_ms: int
    format_version: str

    def to_json(self) -> dict[str, Any]:
        return {
            "data": self.data,
            "timestampMs": self.timestamp_ms,
            "formatVersion": self.format_version,
        }

    @classmethod
    def from_json(cls, raw: Any) -> CacheEntry | None:
        if not isinstance(raw, dict):
            return None
        data = raw.get("data")
        timestamp = raw.get("timestampMs")
        version = raw.get("formatVersion")
        if not isinstance(data, list) or not isinstance(timestamp, int) or not isinstance(version, str):
            return None
        return cls(data=data, timestamp_ms=timestamp, format_version=version)

    def is_valid(self, now_ms: int, ttl_ms: int, expected_version: str = CACHE_FORMAT_VERSION) -> bool:
        """Version matches, not older than the TTL, and data is non-empty."""
        if self.format_version != expected_version:
            return False
        if now_ms - self.timestamp_ms > ttl_ms:
            return False
        return len(self.data) > 0


def read_cache_entry(path: Path) -> CacheEntry | None:
    """Read and decode a cache file.

    Returns None when the file is missing, unreadable, not gzip, not
    JSON or not shaped like a cache entry.  Never raises.
    """
    try:
        raw = json.loads(gzip.decompress(path.read_bytes()).decode("utf-8"))
    except FileNotFoundError:
        return None
    except (OSError, EOFError, zlib.error, UnicodeDecodeError, json.JSONDecodeError) as e:
        logger.warning("Unreadable catalog cache %s: %s", path, e)
        return None

    entry = CacheEntry.from_json(raw)
    if entry is None:
        logger.warning("Catalog cache %s has an unexpected shape — ignoring", path)
    return entry


def write_cache_entry(entry: CacheEntry, path: Path) -> int:
    """Compress and write a cache entry atomically.

    Args:
        entry: The snapshot to persist.
        path: Target cache file; parent directories are created.

    Returns:
        Size of the compressed file in bytes.

    Raises:
        OSError: If the directory or file cannot be written.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = gzip.compress(json.dumps(entry.to_json(), ensure_ascii=False).encode("utf-8"))

    _fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=".casks_", suffix=".tmp")
    tmp = Path(tmp_path)
    try:
        with open(_fd, "wb") as fh:
            fh.write(payload)
        tmp.replace(path)
    except Exception:
        tmp.unlink(missing_ok=True)
        raise

    logger.debug("Wrote catalog cache %s (%d KB compressed)", path, len(payload) // 1024)
    return len(payload)
