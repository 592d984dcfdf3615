"""Asset classification into hashed assets and entry points.

Walks the source root lazily and partitions its files into two streams of
tagged records: hashed assets (long-lived Cache-Control, cache-checked,
optionally prefixed) and entry points (no cache headers, published at the
bucket root).
"""

import glob
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from asset_publisher.lib.publisher.tagger import build_record, cache_control_header
from asset_publisher.lib.publisher.types import FileRecord

ALL_ASSETS_PATTERN = "**/*.*"
DEFAULT_SOURCE_DIR = "dist"
DEFAULT_ENTRY_POINTS = ("index.html",)


def walk_files(root: str | Path, patterns: Iterable[str]) -> Iterator[Path]:
    """Yield regular files under ``root`` matching any of ``patterns``.

    Patterns are glob patterns relative to ``root`` with ``**`` recursion.
    Dotfiles are not matched. Each file is yielded once, in pattern order.

    Args:
        root: Directory to search.
        patterns: Glob patterns relative to ``root``.

    Yields:
        Paths of matching files (``root`` joined with the relative match).
    """
    root_path = Path(root)
    seen: set[str] = set()
    for pattern in patterns:
        for relative in glob.iglob(pattern, root_dir=root_path, recursive=True):
            if relative in seen:
                continue
            path = root_path / relative
            if not path.is_file():
                continue
            seen.add(relative)
            yield path


def entry_point_records(root: str | Path, entry_points: Sequence[str]) -> Iterator[FileRecord]:
    """Yield untagged-header records for files matching an entry-point pattern.

    Entry points are always keyed at the bucket root.
    """
    for path in walk_files(root, entry_points):
        yield build_record(path, root, "")


def hashed_asset_records(
    root: str | Path,
    entry_points: Sequence[str],
    max_age: float | None = None,
    destination_folder: str = "",
) -> Iterator[FileRecord]:
    """Yield records for every ``**/*.*`` file that is not an entry point.

    Args:
        root: Source root.
        entry_points: Entry-point glob patterns to exclude.
        max_age: Cache-Control max-age in seconds (defaults to 3600).
        destination_folder: Key prefix for hashed assets.

    Yields:
        Cacheable records tagged with ``Cache-Control: max-age=<N>, public``.
    """
    headers = cache_control_header(max_age)
    root_path = Path(root)
    excluded = {path.relative_to(root_path) for path in walk_files(root_path, entry_points)}
    for path in walk_files(root_path, [ALL_ASSETS_PATTERN]):
        if path.relative_to(root_path) in excluded:
            continue
        yield build_record(path, root, destination_folder, headers, cacheable=True)


@dataclass(frozen=True)
class ClassifiedAssets:
    """The two record streams of a publish job, in publish order."""

    hashed_assets: Iterable[FileRecord]
    entry_points: Iterable[FileRecord]

    def phases(self) -> list[Iterable[FileRecord]]:
        return [self.hashed_assets, self.entry_points]


def classify(
    root: str | Path = DEFAULT_SOURCE_DIR,
    entry_points: Sequence[str] = DEFAULT_ENTRY_POINTS,
    max_age: float | None = None,
    destination_folder: str = "",
) -> ClassifiedAssets:
    """Partition the files under ``root`` into hashed assets and entry points.

    Both streams are lazy; nothing is read until they are iterated.

    Args:
        root: Source root.
        entry_points: Entry-point glob patterns.
        max_age: Cache-Control max-age for hashed assets.
        destination_folder: Key prefix for hashed assets only.

    Returns:
        ClassifiedAssets with both streams.
    """
    logger.debug("Classifying {} with entry points {}", root, list(entry_points))
    return ClassifiedAssets(
        hashed_assets=hashed_asset_records(root, entry_points, max_age, destination_folder),
        entry_points=entry_point_records(root, entry_points),
    )
