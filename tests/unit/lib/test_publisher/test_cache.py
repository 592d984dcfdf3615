"""Unit tests for the content-hash publish cache."""

import hashlib
import json
from pathlib import Path
from unittest.mock import patch

from asset_publisher.lib.publisher.cache import (
    CACHE_FILE_PREFIX,
    PublishCache,
    cache_file_path,
    fingerprint,
    purge_cache_files,
)
from asset_publisher.lib.publisher.tagger import build_record


def _hashed(tmp_path: Path, name: str = "app.js"):
    return build_record(tmp_path / name, tmp_path, cacheable=True)


class TestFingerprint:
    """Tests for fingerprint."""

    def test_matches_s3_etag_format(self) -> None:
        """Fingerprints are quoted MD5 hex digests like single-part ETags."""
        assert fingerprint(b"hello") == f'"{hashlib.md5(b"hello").hexdigest()}"'

    def test_empty_content(self) -> None:
        assert fingerprint(b"") == '"d41d8cd98f00b204e9800998ecf8427e"'


class TestCacheFilePath:
    """Tests for cache_file_path."""

    def test_uses_fixed_prefix(self, cache_dir: Path) -> None:
        path = cache_file_path(cache_dir, "my-bucket")

        assert path == cache_dir / f"{CACHE_FILE_PREFIX}my-bucket.json"

    def test_sanitizes_bucket_name(self, cache_dir: Path) -> None:
        assert cache_file_path(cache_dir, "a/b").name == f"{CACHE_FILE_PREFIX}a_b.json"


class TestPublishCache:
    """Tests for PublishCache."""

    def test_missing_file_is_empty(self, cache_dir: Path) -> None:
        cache = PublishCache.load(cache_dir / ".assetpublish-none.json")

        assert len(cache) == 0

    def test_corrupt_file_is_empty(self, cache_dir: Path) -> None:
        """Unparseable cache data degrades to an empty cache."""
        path = cache_dir / ".assetpublish-bad.json"
        path.write_text("{not json")

        assert len(PublishCache.load(path)) == 0

    def test_non_object_file_is_empty(self, cache_dir: Path) -> None:
        path = cache_dir / ".assetpublish-list.json"
        path.write_text("[1, 2, 3]")

        assert len(PublishCache.load(path)) == 0

    def test_should_skip_on_matching_fingerprint(self, tmp_path: Path, cache_dir: Path) -> None:
        record = _hashed(tmp_path)
        cache = PublishCache(cache_dir / "c.json")
        cache.record_success(record, '"abc"')

        assert cache.should_skip(record, '"abc"') is True
        assert cache.should_skip(record, '"def"') is False

    def test_unknown_key_is_not_skipped(self, tmp_path: Path, cache_dir: Path) -> None:
        cache = PublishCache(cache_dir / "c.json")

        assert cache.should_skip(_hashed(tmp_path), '"abc"') is False

    def test_entry_points_are_never_cached(self, tmp_path: Path, cache_dir: Path) -> None:
        """Non-cacheable records are neither recorded nor skipped."""
        entry = build_record(tmp_path / "index.html", tmp_path)
        cache = PublishCache(cache_dir / "c.json")
        cache.record_success(entry, '"abc"')

        assert "index.html" not in cache
        assert cache.should_skip(entry, '"abc"') is False

    def test_record_success_overwrites(self, tmp_path: Path, cache_dir: Path) -> None:
        record = _hashed(tmp_path)
        cache = PublishCache(cache_dir / "c.json")
        cache.record_success(record, '"old"')
        cache.record_success(record, '"new"')

        assert cache.get("app.js") == '"new"'

    def test_save_and_reload(self, tmp_path: Path, cache_dir: Path) -> None:
        """Saved entries survive a reload."""
        path = cache_dir / ".assetpublish-b.json"
        cache = PublishCache.load(path)
        cache.record_success(_hashed(tmp_path), '"abc"')
        cache.save()

        assert json.loads(path.read_text()) == {"app.js": '"abc"'}
        assert PublishCache.load(path).get("app.js") == '"abc"'

    def test_save_without_changes_writes_nothing(self, cache_dir: Path) -> None:
        path = cache_dir / ".assetpublish-b.json"
        PublishCache.load(path).save()

        assert not path.exists()


class TestPurgeCacheFiles:
    """Tests for purge_cache_files."""

    def test_removes_prefixed_files_only(self, cache_dir: Path) -> None:
        (cache_dir / ".assetpublish-one.json").write_text("{}")
        (cache_dir / ".assetpublish-two.json").write_text("{}")
        (cache_dir / "keep.json").write_text("{}")

        removed = purge_cache_files(cache_dir)

        assert removed == 2
        assert [p.name for p in cache_dir.iterdir()] == ["keep.json"]

    def test_absent_cache_is_noop(self, cache_dir: Path) -> None:
        assert purge_cache_files(cache_dir) == 0

    def test_missing_directory_is_noop(self, tmp_path: Path) -> None:
        assert purge_cache_files(tmp_path / "nope") == 0

    def test_unremovable_file_is_skipped(self, cache_dir: Path) -> None:
        """A file that cannot be deleted is left behind without raising."""
        stuck = cache_dir / ".assetpublish-one.json"
        stuck.write_text("{}")

        with patch.object(Path, "unlink", side_effect=PermissionError("denied")):
            removed = purge_cache_files(cache_dir)

        assert removed == 0
        assert stuck.exists()
