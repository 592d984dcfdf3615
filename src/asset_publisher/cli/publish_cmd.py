"""Publish CLI commands for ordered static asset publishing."""

import asyncio
from pathlib import Path
from typing import Any

import typer
from loguru import logger

from asset_publisher.lib.publisher.types import PublishSummary


def _build_options(
    *,
    settings: Any,
    path: Path,
    entry_points: list[str] | None,
    max_age: int | None,
    prefix: str,
    bucket: str | None,
    region: str | None,
    endpoint_url: str | None,
    simulate: bool,
    force: bool,
    cache_dir: Path | None,
    concurrency: int | None,
) -> dict[str, Any]:
    """Merge command-line flags over application settings."""
    s3options: dict[str, Any] = {
        "bucket": bucket or settings.s3_bucket or "",
        "region": region or settings.s3_region,
        "endpoint_url": endpoint_url or settings.s3_endpoint_url,
        "access_key_id": settings.s3_access_key_id,
        "secret_access_key": settings.s3_secret_access_key,
    }
    options: dict[str, Any] = {
        "path": path,
        "max_age": max_age if max_age is not None else settings.publish_max_age,
        "prefix": prefix,
        "s3options": s3options,
        "simulate_deployment": simulate,
        "force_deployment": force,
        "cache_dir": cache_dir if cache_dir is not None else Path(settings.publish_cache_dir),
        "concurrency": concurrency if concurrency is not None else settings.publish_concurrency,
    }
    if entry_points:
        options["entry_points"] = entry_points
    return options


def _print_summary(summary: PublishSummary) -> None:
    label = "Simulated" if summary.simulated else "Published"
    typer.echo(
        f"\n{label}: {summary.uploaded} uploaded, {summary.skipped} skipped, {summary.failed} failed "
        f"({summary.total} objects)"
    )
    typer.echo(f"Duration: {summary.duration_seconds:.1f}s")
    for key in summary.failed_keys:
        typer.echo(f"  failed: {key}")


def publish_command(
    path: Path = typer.Argument(Path("dist"), help="Directory of built assets"),
    entry_points: list[str] | None = typer.Option(
        None, "--entry-point", "-e", help="Entry-point glob pattern (repeatable, default: index.html)"
    ),
    max_age: int | None = typer.Option(None, "--max-age", help="Cache-Control max-age in seconds for hashed assets"),
    prefix: str = typer.Option("", "--prefix", help="Key prefix for hashed assets"),
    bucket: str | None = typer.Option(None, "--bucket", "-b", help="Target bucket (default: S3_BUCKET)"),
    region: str | None = typer.Option(None, "--region", help="Bucket region"),
    endpoint_url: str | None = typer.Option(None, "--endpoint-url", help="Custom S3 endpoint"),
    simulate: bool = typer.Option(False, "--simulate", help="Print what would be published without uploading"),
    force: bool = typer.Option(False, "--force", help="Ignore and reset the cache, uploading everything"),
    cache_dir: Path | None = typer.Option(None, "--cache-dir", help="Directory for cache files"),
    concurrency: int | None = typer.Option(None, "--concurrency", help="Uploads in flight per phase"),
) -> None:
    """Upload hashed assets, then entry points, to object storage."""
    from asset_publisher.core.config import get_settings
    from asset_publisher.lib.publisher.storage import FatalTransportError
    from asset_publisher.schemas.publish import ConfigurationError, prepare_options
    from asset_publisher.services.publish_service import publish_assets

    settings = get_settings()
    raw = _build_options(
        settings=settings,
        path=path,
        entry_points=entry_points,
        max_age=max_age,
        prefix=prefix,
        bucket=bucket,
        region=region,
        endpoint_url=endpoint_url,
        simulate=simulate,
        force=force,
        cache_dir=cache_dir,
        concurrency=concurrency,
    )

    try:
        opts = prepare_options(raw)
    except ConfigurationError as exc:
        typer.echo(f"Error: {exc}")
        raise typer.Exit(code=1) from exc

    try:
        summary = asyncio.run(publish_assets(opts))
    except FatalTransportError as exc:
        logger.error("Publish aborted: {}", exc)
        typer.echo(f"Error: Publish aborted: {exc}")
        raise typer.Exit(code=1) from exc
    except Exception as exc:
        logger.exception("Publish failed")
        typer.echo(f"Error: Publish failed: {exc}")
        raise typer.Exit(code=1) from exc

    _print_summary(summary)
    if not summary.ok:
        raise typer.Exit(code=1)


def purge_cache_command(
    cache_dir: Path | None = typer.Option(None, "--cache-dir", help="Directory for cache files"),
) -> None:
    """Delete persisted cache files so the next publish re-evaluates every object."""
    from asset_publisher.core.config import get_settings
    from asset_publisher.lib.publisher.cache import purge_cache_files

    directory = cache_dir if cache_dir is not None else Path(get_settings().publish_cache_dir)
    removed = purge_cache_files(directory)
    typer.echo(f"Removed {removed} cache file(s) from {directory}")
