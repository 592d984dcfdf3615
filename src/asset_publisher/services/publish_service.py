"""Publish service — orchestrates an ordered static asset publish.

Validates options, checks bucket access, invalidates the cache in force
mode, classifies the source tree, and drives the Publisher over the
hashed-asset phase and then the entry-point phase, feeding every outcome
to the selected reporter.
"""

import asyncio
import time
from collections.abc import Callable
from typing import Any

from loguru import logger

from asset_publisher.lib.publisher.cache import PublishCache, cache_file_path, purge_cache_files
from asset_publisher.lib.publisher.classifier import classify
from asset_publisher.lib.publisher.publisher import Publisher
from asset_publisher.lib.publisher.reporter import Reporter, create_reporter
from asset_publisher.lib.publisher.sequencer import PhaseSequencer
from asset_publisher.lib.publisher.storage import create_s3_client, validate_config
from asset_publisher.lib.publisher.types import PublishSummary
from asset_publisher.schemas.publish import PublishOptions, prepare_options

_PHASE_NAMES = {1: "hashed assets", 2: "entry points"}


class PublishFailedError(Exception):
    """Raised when one or more objects failed to publish."""

    def __init__(self, summary: PublishSummary):
        keys = ", ".join(summary.failed_keys)
        super().__init__(f"{summary.failed} object(s) failed to publish: {keys}")
        self.summary = summary


def _create_client_from_options(opts: PublishOptions) -> Any:
    s3 = opts.s3options
    return create_s3_client(
        region=s3.region,
        endpoint_url=s3.endpoint_url,
        access_key_id=s3.access_key_id,
        secret_access_key=s3.secret_access_key,
    )


async def publish_assets(
    options: PublishOptions | dict[str, Any],
    *,
    client: Any = None,
    reporter: Reporter | None = None,
) -> PublishSummary:
    """Publish a built asset directory with hashed assets before entry points.

    Args:
        options: Publish options (validated before any I/O).
        client: boto3 S3 client; created from ``options.s3options`` when
            omitted. Never used in simulate mode.
        reporter: Reporter override; selected from the simulate flag when
            omitted.

    Returns:
        PublishSummary with per-status counts.

    Raises:
        ConfigurationError: If the options are invalid.
        FatalTransportError: If the bucket is not reachable before the
            first upload, or the object store failed fatally mid-run; the
            entry-point phase is not started in either case.
    """
    opts = prepare_options(options)
    simulate = opts.simulate_deployment
    force = opts.force_deployment
    bucket = opts.s3options.bucket
    start_time = time.monotonic()

    logger.info(
        "Publishing {} to {}://{} (simulate={}, force={})",
        opts.path,
        opts.s3options.scheme,
        bucket,
        simulate,
        force,
    )

    if not simulate:
        if client is None:
            client = _create_client_from_options(opts)
        validate_config(client, bucket)

    if force and not simulate:
        purge_cache_files(opts.cache_dir)

    cache = None if force else PublishCache.load(cache_file_path(opts.cache_dir, bucket))

    publisher = Publisher(
        None if simulate else client,
        bucket,
        cache=cache,
        simulate=simulate,
        force=force,
    )
    if reporter is None:
        reporter = create_reporter(simulate, bucket, scheme=opts.s3options.scheme)

    assets = classify(opts.path, opts.entry_points, opts.max_age, opts.prefix)
    sequencer = PhaseSequencer(
        max_concurrency=opts.concurrency,
        on_phase_complete=lambda number: logger.info("Phase {} ({}) complete", number, _PHASE_NAMES.get(number)),
    )

    try:
        async for outcome in sequencer.run_job(assets.phases(), publisher):
            reporter.report(outcome)
    finally:
        if cache is not None and not simulate:
            cache.save()

    summary = reporter.summary()
    summary.duration_seconds = time.monotonic() - start_time
    logger.info(
        "Publish finished: {} uploaded, {} skipped, {} failed in {:.1f}s",
        summary.uploaded,
        summary.skipped,
        summary.failed,
        summary.duration_seconds,
    )
    return summary


def publish(
    options: PublishOptions | dict[str, Any],
    callback: Callable[[Exception | bool], None],
    *,
    client: Any = None,
) -> None:
    """Run a publish job to completion and report through ``callback``.

    Configuration errors are raised directly, before any I/O. Everything
    else is delivered to ``callback``: ``False`` on success, otherwise the
    error (``PublishFailedError`` when any object failed).

    Args:
        options: Publish options.
        callback: Completion callback.
        client: Optional boto3 S3 client.

    Raises:
        ConfigurationError: If the options are invalid.
    """
    opts = prepare_options(options)
    try:
        summary = asyncio.run(publish_assets(opts, client=client))
    except Exception as exc:
        logger.error("Publish failed: {}", exc)
        callback(exc)
        return

    if not summary.ok:
        callback(PublishFailedError(summary))
        return
    callback(False)
