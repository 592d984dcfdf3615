"""Shared test fixtures for asset trees and mocked S3."""

from collections.abc import Iterator
from pathlib import Path
from typing import Any

import boto3
import pytest
from moto import mock_aws

BUCKET = "test-bucket"


@pytest.fixture
def dist_dir(tmp_path: Path) -> Path:
    """A built asset tree with one hashed asset and one entry point."""
    dist = tmp_path / "dist"
    dist.mkdir()
    (dist / "app.abcd1234.js").write_text("console.log('app');\n")
    (dist / "index.html").write_text('<script src="/app.abcd1234.js"></script>\n')
    return dist


@pytest.fixture
def nested_dist_dir(tmp_path: Path) -> Path:
    """A larger asset tree with nested folders, binary and empty files."""
    dist = tmp_path / "site"
    (dist / "assets" / "img").mkdir(parents=True)
    (dist / "docs").mkdir()
    (dist / "index.html").write_text("<html></html>")
    (dist / "docs" / "index.html").write_text("<html>docs</html>")
    (dist / "assets" / "main.1f2e3d.css").write_text("body{}")
    (dist / "assets" / "vendor.9a8b7c.js").write_text("")
    (dist / "assets" / "img" / "logo.55aa.png").write_bytes(bytes(range(256)))
    (dist / ".hidden.txt").write_text("secret")
    (dist / "LICENSE").write_text("no extension")
    return dist


@pytest.fixture
def cache_dir(tmp_path: Path) -> Path:
    """Directory for persisted cache files."""
    directory = tmp_path / "cache"
    directory.mkdir()
    return directory


@pytest.fixture
def s3_client() -> Iterator[Any]:
    """Create a moto-mocked S3 client and bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=BUCKET)
        yield client

