"""Application settings using Pydantic Settings."""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from ..utils.constants import StorageProvider


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Application
    app_version: str = Field(default="1.0.0", alias="APP_VERSION")
    debug: bool = Field(default=False, alias="DEBUG")

    # Storage
    storage_provider: StorageProvider = Field(
        default=StorageProvider.S3, alias="STORAGE_PROVIDER"
    )
    aws_access_key_id: str = Field(default="", alias="AWS_ACCESS_KEY_ID")
    aws_secret_access_key: str = Field(default="", alias="AWS_SECRET_ACCESS_KEY")
    aws_region: str = Field(default="", alias="AWS_DEFAULT_REGION")
    s3_endpoint_url: Optional[str] = Field(default=None, alias="S3_ENDPOINT_URL")

    # Wasabi
    wasabi_endpoint: str = Field(
        default="https://s3.wasabisys.com", alias="WASABI_ENDPOINT"
    )

    # Multipart upload
    max_chunk_bytes: int = Field(default=18000000, ge=1, alias="MAX_CHUNK_BYTES")
    max_concurrent: int = Field(default=10, ge=1, alias="MAX_CONCURRENT")
    read_block_bytes: int = Field(default=256 * 1024, ge=1, alias="READ_BLOCK_BYTES")
    max_pool_connections: int = Field(default=50, ge=1, alias="MAX_POOL_CONNECTIONS")

    # Logging
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    log_format: str = Field(default="console", alias="LOG_FORMAT")

    @field_validator("storage_provider", mode="before")
    @classmethod
    def normalize_provider(cls, v):
        """Accept provider names in any case."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


# Global settings instance
settings = Settings()
