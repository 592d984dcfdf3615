"""S3 storage operations for static asset publishing.

Provides boto3 client creation, header-to-PutObject translation, object
upload, bucket validation, and classification of transport errors into
fatal (abort the job) and per-object failures.
"""

from collections.abc import Mapping
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    EndpointConnectionError,
    NoCredentialsError,
    PartialCredentialsError,
)
from loguru import logger

PRIVATE_ACL = "private"
ACL_HEADER = "x-amz-acl"
METADATA_HEADER_PREFIX = "x-amz-meta-"

# Maps HTTP header names (case-insensitive) to PutObject parameters
_HEADER_PARAMS = {
    "x-amz-acl": "ACL",
    "cache-control": "CacheControl",
    "content-type": "ContentType",
    "content-encoding": "ContentEncoding",
    "content-disposition": "ContentDisposition",
    "content-language": "ContentLanguage",
    "expires": "Expires",
}

_FATAL_ERROR_CODES = frozenset(
    {
        "AccessDenied",
        "InvalidAccessKeyId",
        "SignatureDoesNotMatch",
        "NoSuchBucket",
    }
)


class FatalTransportError(Exception):
    """Raised when the object store fails in a way that must halt the job."""

    def __init__(self, message: str, remote_key: str | None = None):
        super().__init__(message)
        self.remote_key = remote_key


def create_s3_client(
    region: str | None = None,
    endpoint_url: str | None = None,
    access_key_id: str | None = None,
    secret_access_key: str | None = None,
) -> Any:
    """Create a boto3 S3 client.

    Unset credentials fall through to the boto3 default credential chain.
    A custom ``endpoint_url`` targets S3-compatible stores such as R2 or
    MinIO; checksums are then only computed when required.

    Args:
        region: Bucket region.
        endpoint_url: Custom S3 endpoint.
        access_key_id: Access key.
        secret_access_key: Secret key.

    Returns:
        Configured boto3 S3 client.
    """
    config = Config(retries={"max_attempts": 5, "mode": "standard"})
    if endpoint_url:
        config = config.merge(
            Config(
                request_checksum_calculation="when_required",
                response_checksum_validation="when_required",
            )
        )

    return boto3.client(
        "s3",
        endpoint_url=endpoint_url,
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        region_name=region,
        config=config,
    )


def headers_to_put_params(headers: Mapping[str, str]) -> dict[str, Any]:
    """Translate HTTP-style headers into PutObject keyword arguments.

    ``x-amz-meta-*`` headers become user metadata; unknown headers are
    dropped with a warning.

    Args:
        headers: Header mapping.

    Returns:
        Keyword arguments for ``put_object``.
    """
    params: dict[str, Any] = {}
    metadata: dict[str, str] = {}
    for name, value in headers.items():
        lowered = name.lower()
        if lowered in _HEADER_PARAMS:
            params[_HEADER_PARAMS[lowered]] = value
        elif lowered.startswith(METADATA_HEADER_PREFIX):
            metadata[lowered[len(METADATA_HEADER_PREFIX) :]] = value
        else:
            logger.warning("Dropping unsupported header {}", name)
    if metadata:
        params["Metadata"] = metadata
    return params


def put_object(client: Any, bucket: str, key: str, body: bytes, headers: Mapping[str, str]) -> str | None:
    """Upload ``body`` to ``bucket``/``key`` with the given headers.

    Args:
        client: boto3 S3 client.
        bucket: Bucket name.
        key: Object key.
        body: Object content (may be empty).
        headers: HTTP-style headers, including ``x-amz-acl``.

    Returns:
        The ETag reported by the store, if any.
    """
    response = client.put_object(
        Bucket=bucket,
        Key=key,
        Body=body,
        **headers_to_put_params(headers),
    )
    return response.get("ETag")


def is_fatal_error(exc: BaseException) -> bool:
    """Return True when ``exc`` means no further upload can succeed."""
    if isinstance(exc, (NoCredentialsError, PartialCredentialsError, EndpointConnectionError)):
        return True
    if isinstance(exc, ClientError):
        return exc.response.get("Error", {}).get("Code") in _FATAL_ERROR_CODES
    return False


def is_transport_error(exc: BaseException) -> bool:
    return isinstance(exc, (BotoCoreError, ClientError))


def validate_config(client: Any, bucket: str) -> None:
    """Verify bucket access before publishing.

    Args:
        client: boto3 S3 client.
        bucket: Bucket name to validate.

    Raises:
        FatalTransportError: If the bucket doesn't exist, credentials are
            invalid, or the endpoint is unreachable.
    """
    try:
        client.head_bucket(Bucket=bucket)
        logger.debug("Bucket s3://{} is accessible", bucket)
    except ClientError as exc:
        error_code = exc.response["Error"]["Code"]
        if error_code in ("404", "NoSuchBucket"):
            msg = f"Bucket '{bucket}' not found. Verify the bucket name."
            raise FatalTransportError(msg) from exc
        if error_code in ("403", "401", "AccessDenied"):
            msg = f"Access denied to bucket '{bucket}'. Verify credentials."
            raise FatalTransportError(msg) from exc
        raise FatalTransportError(f"Cannot access bucket '{bucket}': {exc}") from exc
    except BotoCoreError as exc:
        raise FatalTransportError(f"Cannot reach object store: {exc}") from exc
