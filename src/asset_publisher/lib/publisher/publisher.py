"""Publisher wrapping the object-store client.

Reads each record's content, decides skip-or-upload against the
content-hash cache, applies the private ACL plus the record's headers,
and returns one PublishOutcome per record.
"""

import asyncio
import mimetypes
from typing import Any

import aiofiles
from loguru import logger

from asset_publisher.lib.publisher.cache import PublishCache, fingerprint
from asset_publisher.lib.publisher.storage import (
    ACL_HEADER,
    PRIVATE_ACL,
    FatalTransportError,
    is_fatal_error,
    is_transport_error,
    put_object,
)
from asset_publisher.lib.publisher.types import FileRecord, OutcomeStatus, PublishOutcome

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def guess_content_type(record: FileRecord) -> str:
    content_type, _ = mimetypes.guess_type(record.source_path.name)
    return content_type or DEFAULT_CONTENT_TYPE


def effective_headers(record: FileRecord) -> dict[str, str]:
    """Return the full header set applied to ``record``'s object.

    The private ACL and a guessed Content-Type come first; the record's own
    headers override either.
    """
    headers = {ACL_HEADER: PRIVATE_ACL, "Content-Type": guess_content_type(record)}
    headers.update(record.headers)
    return headers


class Publisher:
    """Publishes FileRecords to one bucket.

    Args:
        client: boto3 S3 client. May be None in simulate mode.
        bucket: Target bucket.
        cache: Content-hash cache, or None to disable skip checks.
        simulate: Resolve and report without transferring anything.
        force: Upload every record regardless of the cache.
    """

    def __init__(
        self,
        client: Any,
        bucket: str,
        *,
        cache: PublishCache | None = None,
        simulate: bool = False,
        force: bool = False,
    ) -> None:
        if client is None and not simulate:
            msg = "An object-store client is required unless simulating"
            raise ValueError(msg)
        self._client = client
        self._bucket = bucket
        self._cache = None if force else cache
        self._simulate = simulate
        self._force = force

    @property
    def bucket(self) -> str:
        return self._bucket

    @property
    def simulate(self) -> bool:
        return self._simulate

    @property
    def force(self) -> bool:
        return self._force

    async def publish(self, record: FileRecord) -> PublishOutcome:
        """Publish a single record.

        Args:
            record: The tagged file to publish.

        Returns:
            The outcome for this record. Per-object failures are returned as
            ``failed`` outcomes.

        Raises:
            FatalTransportError: If the store rejects the request in a way
                that no later upload could succeed either.
        """
        headers = effective_headers(record)

        try:
            async with aiofiles.open(record.source_path, "rb") as f:
                content = await f.read()
        except OSError as exc:
            logger.error("Cannot read {}: {}", record.source_path, exc)
            return self._outcome(record, OutcomeStatus.FAILED, headers, error=str(exc))

        digest = fingerprint(content)

        if self._cache is not None and self._cache.should_skip(record, digest):
            logger.debug("Cache hit for {}", record.remote_key)
            return self._outcome(record, OutcomeStatus.SKIPPED, headers, digest, len(content))

        if self._simulate:
            return self._outcome(record, OutcomeStatus.UPLOADED, headers, digest, len(content))

        try:
            await asyncio.to_thread(put_object, self._client, self._bucket, record.remote_key, content, headers)
        except Exception as exc:
            if is_fatal_error(exc):
                msg = f"Upload of {record.remote_key} failed fatally: {exc}"
                raise FatalTransportError(msg, remote_key=record.remote_key) from exc
            if not is_transport_error(exc):
                raise
            logger.error("Upload of {} failed: {}", record.remote_key, exc)
            return self._outcome(record, OutcomeStatus.FAILED, headers, digest, len(content), error=str(exc))

        if self._cache is not None:
            self._cache.record_success(record, digest)
        return self._outcome(record, OutcomeStatus.UPLOADED, headers, digest, len(content))

    def _outcome(
        self,
        record: FileRecord,
        status: OutcomeStatus,
        headers: dict[str, str],
        digest: str | None = None,
        size: int = 0,
        error: str | None = None,
    ) -> PublishOutcome:
        return PublishOutcome(
            remote_key=record.remote_key,
            status=status,
            headers=headers,
            fingerprint=digest,
            size_bytes=size,
            simulated=self._simulate,
            error=error,
        )
