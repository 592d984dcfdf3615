"""Metadata tagging for staged files.

Derives the destination key and HTTP headers for a local file and returns
an immutable ``FileRecord``.
"""

import math
import os
from collections.abc import Mapping
from pathlib import Path
from types import MappingProxyType

from asset_publisher.lib.publisher.types import FileRecord

DEFAULT_MAX_AGE = 3600


def resolve_max_age(max_age: float | None) -> int:
    """Return ``max_age`` as whole seconds, or the default when unusable.

    Args:
        max_age: Requested max-age in seconds. ``None``, NaN, infinities and
            negative values fall back to ``DEFAULT_MAX_AGE``.

    Returns:
        Max-age in seconds.
    """
    if max_age is None or isinstance(max_age, bool):
        return DEFAULT_MAX_AGE
    try:
        value = float(max_age)
    except (TypeError, ValueError):
        return DEFAULT_MAX_AGE
    if not math.isfinite(value) or value < 0:
        return DEFAULT_MAX_AGE
    return int(value)


def cache_control_header(max_age: float | None) -> dict[str, str]:
    """Build the Cache-Control header applied to hashed assets."""
    return {"Cache-Control": f"max-age={resolve_max_age(max_age)}, public"}


def remote_key_for(source_path: Path, base_dir: Path, destination_folder: str = "") -> str:
    """Compute the object key for a file relative to its base directory.

    Args:
        source_path: Path of the local file.
        base_dir: Root the key is computed relative to.
        destination_folder: Optional key prefix.

    Returns:
        Key using forward slashes, without a leading slash.
    """
    relative = os.path.relpath(source_path, base_dir).replace(os.sep, "/")
    prefix = destination_folder.replace(os.sep, "/").strip("/")
    return f"{prefix}/{relative}" if prefix else relative


def build_record(
    source_path: str | Path,
    base_dir: str | Path,
    destination_folder: str = "",
    headers: Mapping[str, str] | None = None,
    *,
    cacheable: bool = False,
) -> FileRecord:
    """Create a tagged FileRecord with its remote key derived once.

    Args:
        source_path: Path of the local file.
        base_dir: Root used for the relative key.
        destination_folder: Optional key prefix.
        headers: Headers to attach (e.g. Cache-Control).
        cacheable: Whether the content-hash cache may skip this record.

    Returns:
        Immutable FileRecord.
    """
    source = Path(source_path)
    base = Path(base_dir)
    return FileRecord(
        source_path=source,
        base_dir=base,
        destination_folder=destination_folder,
        remote_key=remote_key_for(source, base, destination_folder),
        headers=MappingProxyType(dict(headers or {})),
        cacheable=cacheable,
    )


def tag_record(
    item: FileRecord | str | Path,
    base_dir: str | Path,
    destination_folder: str = "",
    headers: Mapping[str, str] | None = None,
    *,
    cacheable: bool = False,
) -> FileRecord:
    """Tag a path, leaving an already-tagged record untouched.

    Args:
        item: A path to tag, or an existing FileRecord.
        base_dir: Root used for the relative key.
        destination_folder: Optional key prefix.
        headers: Headers to attach.
        cacheable: Whether the content-hash cache may skip this record.

    Returns:
        ``item`` itself when it is already a FileRecord, otherwise a new record.
    """
    if isinstance(item, FileRecord):
        return item
    return build_record(item, base_dir, destination_folder, headers, cacheable=cacheable)
