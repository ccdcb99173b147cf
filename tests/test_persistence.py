"""
Tests for persistence — the gzip catalog cache file.
"""

import gzip
import json
from pathlib import Path
from unittest.mock import patch

from caskmatch.core.persistence.cache_file import (
    CACHE_FORMAT_VERSION,
    CacheEntry,
    default_cache_path,
    read_cache_entry,
    write_cache_entry,
)


class TestCacheFile:
    """Tests for reading and writing cache snapshots."""

    def test_write_and_read(self, tmp_path: Path, sample_catalog):
        """Entry roundtrips through write/read."""
        path = tmp_path / "cache" / "casks.json.gz"
        entry = CacheEntry(data=sample_catalog, timestamp_ms=1_700_000_000_000, format_version="1.0.0")

        size = write_cache_entry(entry, path)
        assert path.is_file()
        assert size == path.stat().st_size

        loaded = read_cache_entry(path)
        assert loaded == entry

    def test_on_disk_shape(self, tmp_path: Path):
        """File is gzip-compressed JSON with camelCase metadata keys."""
        path = tmp_path / "casks.json.gz"
        write_cache_entry(CacheEntry(data=[{"token": "a"}], timestamp_ms=5, format_version="1.0.0"), path)

        raw = json.loads(gzip.decompress(path.read_bytes()))
        assert raw == {"data": [{"token": "a"}], "timestampMs": 5, "formatVersion": "1.0.0"}

    def test_no_temp_files_left(self, tmp_path: Path):
        path = tmp_path / "casks.json.gz"
        write_cache_entry(CacheEntry(data=[], timestamp_ms=0, format_version="1.0.0"), path)
        assert [p.name for p in tmp_path.iterdir()] == ["casks.json.gz"]

    def test_read_missing(self, tmp_path: Path):
        assert read_cache_entry(tmp_path / "missing.json.gz") is None

    def test_read_permission_denied(self, tmp_path: Path):
        path = tmp_path / "casks.json.gz"
        write_cache_entry(CacheEntry(data=[{"token": "a"}], timestamp_ms=0, format_version="1.0.0"), path)
        with patch.object(Path, "read_bytes", side_effect=PermissionError(13, "Permission denied")):
            assert read_cache_entry(path) is None

    def test_read_directory(self, tmp_path: Path):
        assert read_cache_entry(tmp_path) is None

    def test_read_not_gzip(self, tmp_path: Path):
        path = tmp_path / "casks.json.gz"
        path.write_text("plain text, not gzip")
        assert read_cache_entry(path) is None

    def test_read_truncated_gzip(self, tmp_path: Path):
        path = tmp_path / "casks.json.gz"
        path.write_bytes(gzip.compress(b'{"data": []}')[:12])
        assert read_cache_entry(path) is None

    def test_read_gzip_not_json(self, tmp_path: Path):
        path = tmp_path / "casks.json.gz"
        path.write_bytes(gzip.compress(b"not json {{{"))
        assert read_cache_entry(path) is None

    def test_read_wrong_shape(self, tmp_path: Path):
        path = tmp_path / "casks.json.gz"
        path.write_bytes(gzip.compress(json.dumps({"data": {}, "timestampMs": "x"}).encode()))
        assert read_cache_entry(path) is None

    def test_default_path(self, tmp_path: Path):
        assert default_cache_path(tmp_path) == tmp_path / ".cache" / "caskmatch" / "casks.json.gz"


class TestCacheEntryValidity:
    def _entry(self, **overrides) -> CacheEntry:
        values = {"data": [{"token": "a"}], "timestamp_ms": 1_000, "format_version": CACHE_FORMAT_VERSION}
        values.update(overrides)
        return CacheEntry(**values)

    def test_fresh(self):
        assert self._entry().is_valid(now_ms=2_000, ttl_ms=5_000)

    def test_exactly_at_ttl(self):
        assert self._entry().is_valid(now_ms=6_000, ttl_ms=5_000)

    def test_older_than_ttl(self):
        assert not self._entry().is_valid(now_ms=6_001, ttl_ms=5_000)

    def test_version_mismatch(self):
        assert not self._entry(format_version="0.9.0").is_valid(now_ms=2_000, ttl_ms=5_000)

    def test_empty_data(self):
        assert not self._entry(data=[]).is_valid(now_ms=2_000, ttl_ms=5_000)

    def test_from_json_rejects_non_mapping(self):
        assert CacheEntry.from_json([1, 2]) is None
