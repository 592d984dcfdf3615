"""Content-hash cache of previously published objects.

Maps remote keys to the fingerprint of the last successfully published
content.  Persisted as a JSON sidecar file between runs.  The cache is
advisory: a missing or corrupt backing file behaves as an empty cache.
"""

import hashlib
import json
import os
import re
from pathlib import Path

from loguru import logger

from asset_publisher.lib.publisher.types import FileRecord

CACHE_FILE_PREFIX = ".assetpublish-"


def fingerprint(content: bytes) -> str:
    """Return the S3-style ETag (quoted MD5 hex digest) for ``content``."""
    return f'"{hashlib.md5(content, usedforsecurity=False).hexdigest()}"'


def cache_file_path(cache_dir: str | Path, bucket: str) -> Path:
    """Return the cache file path used for ``bucket``."""
    safe_bucket = re.sub(r"[^A-Za-z0-9._-]", "_", bucket)
    return Path(cache_dir) / f"{CACHE_FILE_PREFIX}{safe_bucket}.json"


def purge_cache_files(cache_dir: str | Path) -> int:
    """Delete every persisted cache file under ``cache_dir``.

    A directory without cache files, or a missing directory, is a no-op.
    Files that cannot be removed are logged and left in place.

    Args:
        cache_dir: Directory holding cache files.

    Returns:
        Number of files removed.
    """
    directory = Path(cache_dir)
    if not directory.is_dir():
        return 0

    removed = 0
    for path in directory.glob(f"{CACHE_FILE_PREFIX}*"):
        if not path.is_file():
            continue
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove cache file {}: {}", path, exc)
            continue
        removed += 1
    if removed:
        logger.info("Removed {} cache file(s) from {}", removed, directory)
    return removed


class PublishCache:
    """Fingerprint cache keyed by remote key.

    Args:
        path: Location of the JSON backing file.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._entries: dict[str, str] = {}
        self._dirty = False

    @classmethod
    def load(cls, path: str | Path) -> "PublishCache":
        """Load the cache from ``path``, treating missing or corrupt data as empty."""
        cache = cls(path)
        cache._entries = cls._read(cache._path)
        logger.debug("Loaded {} cache entries from {}", len(cache._entries), cache._path)
        return cache

    @staticmethod
    def _read(path: Path) -> dict[str, str]:
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable cache file {}: {}", path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring cache file {}: expected a JSON object", path)
            return {}
        return {str(key): value for key, value in data.items() if isinstance(value, str)}

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, remote_key: object) -> bool:
        return remote_key in self._entries

    def get(self, remote_key: str) -> str | None:
        return self._entries.get(remote_key)

    def should_skip(self, record: FileRecord, content_fingerprint: str) -> bool:
        """Return True when ``record`` was already published with this content.

        Entry points (non-cacheable records) are never skipped.
        """
        if not record.cacheable:
            return False
        return self._entries.get(record.remote_key) == content_fingerprint

    def record_success(self, record: FileRecord, content_fingerprint: str) -> None:
        """Remember the fingerprint of a successfully uploaded object."""
        if not record.cacheable:
            return
        self._entries[record.remote_key] = content_fingerprint
        self._dirty = True

    def save(self) -> None:
        """Persist the cache if it changed.

        Write failures are logged and otherwise ignored.
        """
        if not self._dirty:
            return
        tmp_path = self._path.with_name(f"{self._path.name}.tmp")
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(self._entries, indent=2, sort_keys=True), encoding="utf-8")
            os.replace(tmp_path, self._path)
        except OSError as exc:
            logger.warning("Could not write cache file {}: {}", self._path, exc)
            return
        self._dirty = False
        logger.debug("Saved {} cache entries to {}", len(self._entries), self._path)
