"""Application configuration via Pydantic Settings.

All configuration is loaded from environment variables following 12-factor principles.
Command-line flags override these values per invocation.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_dir: str | None = Field(
        default=None,
        description="Directory for log files (enables file logging with 24h rotation when set)",
    )
    log_json: bool = Field(
        default=False,
        description="Emit stderr logs as one JSON object per line",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"):
            msg = f"Invalid log_level: {v}"
            raise ValueError(msg)
        return level

    # S3 / S3-Compatible Object Storage
    s3_bucket: str | None = Field(
        default=None,
        description="Target bucket name",
    )
    s3_region: str | None = Field(
        default=None,
        description="Bucket region (uses the boto3 default chain when unset)",
    )
    s3_endpoint_url: str | None = Field(
        default=None,
        description="Custom endpoint for S3-compatible stores (R2, MinIO)",
    )
    s3_access_key_id: str | None = Field(
        default=None,
        description="Access key (uses the boto3 credential chain when unset)",
    )
    s3_secret_access_key: str | None = Field(
        default=None,
        description="Secret key (uses the boto3 credential chain when unset)",
    )

    # Publishing
    publish_cache_dir: str = Field(
        default=".",
        description="Directory holding the persisted content-hash cache files",
    )
    publish_max_age: int = Field(
        default=3600,
        description="Cache-Control max-age in seconds for hashed assets",
        ge=0,
    )
    publish_concurrency: int = Field(
        default=8,
        description="Maximum uploads in flight within one phase",
        gt=0,
    )


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
