"""Unit tests for asset classification."""

from pathlib import Path

from asset_publisher.lib.publisher.classifier import (
    classify,
    entry_point_records,
    hashed_asset_records,
    walk_files,
)


def _keys(records) -> set[str]:
    return {record.remote_key for record in records}


class TestWalkFiles:
    """Tests for walk_files."""

    def test_matches_nested_files(self, nested_dist_dir: Path) -> None:
        """The all-assets pattern matches nested files with an extension."""
        found = {p.relative_to(nested_dist_dir).as_posix() for p in walk_files(nested_dist_dir, ["**/*.*"])}

        assert found == {
            "index.html",
            "docs/index.html",
            "assets/main.1f2e3d.css",
            "assets/vendor.9a8b7c.js",
            "assets/img/logo.55aa.png",
        }

    def test_skips_dotfiles_and_directories(self, nested_dist_dir: Path) -> None:
        (nested_dist_dir / "folder.d").mkdir()

        found = {p.name for p in walk_files(nested_dist_dir, ["**/*.*"])}

        assert ".hidden.txt" not in found
        assert "folder.d" not in found

    def test_yields_each_file_once(self, nested_dist_dir: Path) -> None:
        """Overlapping patterns do not duplicate files."""
        found = list(walk_files(nested_dist_dir, ["index.html", "*.html", "**/*.html"]))

        assert len(found) == len(set(found)) == 2

    def test_is_lazy(self, nested_dist_dir: Path) -> None:
        """walk_files returns an iterator without scanning up front."""
        iterator = walk_files(nested_dist_dir / "missing", ["**/*.*"])

        assert list(iterator) == []


class TestClassify:
    """Tests for classify and the record streams."""

    def test_scenario_single_hashed_asset(self, dist_dir: Path) -> None:
        """A hashed asset gets Cache-Control; the entry point gets no cache header."""
        assets = classify(dist_dir, ["index.html"])

        hashed = list(assets.hashed_assets)
        entries = list(assets.entry_points)

        assert [r.remote_key for r in hashed] == ["app.abcd1234.js"]
        assert dict(hashed[0].headers) == {"Cache-Control": "max-age=3600, public"}
        assert hashed[0].cacheable is True
        assert [r.remote_key for r in entries] == ["index.html"]
        assert dict(entries[0].headers) == {}
        assert entries[0].cacheable is False

    def test_partition_covers_all_assets(self, nested_dist_dir: Path) -> None:
        """Entry points and hashed assets are disjoint and cover every asset."""
        patterns = ["index.html", "docs/*.html"]
        hashed = _keys(hashed_asset_records(nested_dist_dir, patterns))
        entries = _keys(entry_point_records(nested_dist_dir, patterns))
        everything = {p.relative_to(nested_dist_dir).as_posix() for p in walk_files(nested_dist_dir, ["**/*.*"])}

        assert hashed.isdisjoint(entries)
        assert hashed | entries == everything

    def test_symlink_to_entry_point_stays_hashed(self, dist_dir: Path) -> None:
        """A link to an entry point is its own file, classified by its own name."""
        (dist_dir / "landing.html").symlink_to(dist_dir / "index.html")

        assets = classify(dist_dir, ["index.html"])

        assert _keys(assets.entry_points) == {"index.html"}
        assert _keys(assets.hashed_assets) == {"app.abcd1234.js", "landing.html"}

    def test_only_exact_pattern_is_excluded(self, nested_dist_dir: Path) -> None:
        """A pattern for the root index.html leaves docs/index.html hashed."""
        assets = classify(nested_dist_dir, ["index.html"])

        assert _keys(assets.entry_points) == {"index.html"}
        assert "docs/index.html" in _keys(assets.hashed_assets)

    def test_prefix_applies_to_hashed_assets_only(self, dist_dir: Path) -> None:
        """Entry points stay at the bucket root when a prefix is set."""
        assets = classify(dist_dir, ["index.html"], destination_folder="releases/42")

        assert _keys(assets.hashed_assets) == {"releases/42/app.abcd1234.js"}
        assert _keys(assets.entry_points) == {"index.html"}

    def test_custom_max_age(self, dist_dir: Path) -> None:
        assets = classify(dist_dir, ["index.html"], max_age=600)

        (record,) = list(assets.hashed_assets)
        assert record.headers["Cache-Control"] == "max-age=600, public"

    def test_phases_are_ordered(self, dist_dir: Path) -> None:
        """phases() returns hashed assets first, entry points second."""
        assets = classify(dist_dir, ["index.html"])

        first, second = assets.phases()

        assert first is assets.hashed_assets
        assert second is assets.entry_points
