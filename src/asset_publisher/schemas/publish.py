"""Pydantic v2 schemas for publish options.

Accepts both the camelCase option names (``entryPoints``, ``maxAge``,
``s3options``, ``simulateDeployment``, ``forceDeployment``) and their
snake_case equivalents.
"""

import math
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from asset_publisher.lib.publisher.tagger import DEFAULT_MAX_AGE


class ConfigurationError(ValueError):
    """Raised when publish options are missing or invalid."""


class S3Options(BaseModel):
    """Object-store connection options."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    bucket: str = Field(min_length=1, description="Target bucket name")
    region: str | None = Field(default=None, description="Bucket region")
    endpoint_url: str | None = Field(default=None, alias="endpointUrl", description="Custom S3 endpoint")
    access_key_id: str | None = Field(default=None, alias="accessKeyId", description="Access key")
    secret_access_key: str | None = Field(default=None, alias="secretAccessKey", description="Secret key")
    scheme: str = Field(default="s3", min_length=1, description="URL scheme used when reporting destinations")


class PublishOptions(BaseModel):
    """Options for a single publish job."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    path: Path = Field(default=Path("dist"), description="Source root holding the built assets")
    entry_points: list[str] = Field(
        default_factory=lambda: ["index.html"],
        alias="entryPoints",
        min_length=1,
        description="Glob patterns of entry-point files, relative to path",
    )
    max_age: int = Field(
        default=DEFAULT_MAX_AGE,
        alias="maxAge",
        description="Cache-Control max-age in seconds for hashed assets",
    )
    prefix: str = Field(default="", description="Key prefix for hashed assets")
    s3options: S3Options = Field(description="Object-store connection options")
    simulate_deployment: bool = Field(default=False, alias="simulateDeployment")
    force_deployment: bool = Field(default=False, alias="forceDeployment")
    cache_dir: Path = Field(default=Path("."), alias="cacheDir", description="Directory for cache files")
    concurrency: int = Field(default=8, gt=0, description="Maximum uploads in flight within one phase")

    @field_validator("entry_points")
    @classmethod
    def validate_entry_points(cls, v: list[str]) -> list[str]:
        if any(not pattern.strip() for pattern in v):
            msg = "entry point patterns must be non-empty"
            raise ValueError(msg)
        return v

    @field_validator("max_age", mode="before")
    @classmethod
    def default_max_age(cls, v: Any) -> Any:
        if v is None:
            return DEFAULT_MAX_AGE
        if isinstance(v, float) and not math.isfinite(v):
            return DEFAULT_MAX_AGE
        if isinstance(v, int | float) and v < 0:
            return DEFAULT_MAX_AGE
        return v


def prepare_options(options: PublishOptions | dict[str, Any]) -> PublishOptions:
    """Validate raw options before any I/O.

    Args:
        options: A PublishOptions instance or a raw mapping.

    Returns:
        Validated PublishOptions.

    Raises:
        ConfigurationError: If an option is missing or invalid, or the
            source root is not a directory.
    """
    if isinstance(options, PublishOptions):
        opts = options
    else:
        try:
            opts = PublishOptions.model_validate(options)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid publish options: {exc}") from exc

    if not opts.path.is_dir():
        msg = f"Source path '{opts.path}' is not a directory"
        raise ConfigurationError(msg)
    return opts
