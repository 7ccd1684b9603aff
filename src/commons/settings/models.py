"""Pydantic settings models for application configuration."""

from typing import Literal

from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseModel):
    """Application-level settings."""

    name: str = "video-catalog-server"
    version: str = "0.1.0"
    environment: Literal["dev", "staging", "prod"] = "dev"
    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class ServerSettings(BaseModel):
    """HTTP server settings."""

    host: str = "0.0.0.0"
    port: int = Field(default=8000, ge=1, le=65535)
    workers: int = Field(default=1, ge=1, le=32)
    reload: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])
    api_prefix: str = "/v1"
    docs_enabled: bool = True
    identity_header: str = "X-User-Id"


class BucketSettings(BaseModel):
    """Bucket name configuration."""

    videos: str = "catalog-videos"
    thumbnails: str = "catalog-thumbnails"


class BlobStorageSettings(BaseModel):
    """Blob storage settings (MinIO/S3)."""

    provider: Literal["minio", "s3"] = "minio"
    endpoint: str = "localhost:9000"
    access_key: str = ""
    secret_key: str = ""
    use_ssl: bool = False
    region: str = "us-east-1"
    buckets: BucketSettings = Field(default_factory=BucketSettings)
    public_base_url: str | None = Field(
        default=None,
        description="Base URL blob references are built from. "
        "Defaults to the endpoint with the configured scheme.",
    )

    @property
    def resolved_public_base_url(self) -> str:
        """Base URL for public blob references, without trailing slash."""
        if self.public_base_url:
            return self.public_base_url.rstrip("/")
        scheme = "https" if self.use_ssl else "http"
        return f"{scheme}://{self.endpoint}"


class DocumentCollectionSettings(BaseModel):
    """Document DB collection names."""

    videos: str = "videos"
    users: str = "users"
    likes: str = "likes"
    subscriptions: str = "subscriptions"


class DocumentDBSettings(BaseModel):
    """Document database settings (MongoDB)."""

    provider: Literal["mongodb"] = "mongodb"
    host: str = "localhost"
    port: int = 27017
    username: str = ""
    password: str = ""
    database: str = "video_catalog"
    auth_source: str = "admin"
    collections: DocumentCollectionSettings = Field(
        default_factory=DocumentCollectionSettings
    )


class MediaSettings(BaseModel):
    """Local media handling settings."""

    ffprobe_path: str = "ffprobe"
    upload_temp_dir: str | None = None
    video_content_type: str = "video/mp4"
    thumbnail_content_type: str = "image/jpeg"


class PaginationSettings(BaseModel):
    """Listing pagination defaults."""

    default_page: int = Field(default=1, ge=1)
    default_limit: int = Field(default=10, ge=1)
    max_limit: int = Field(default=100, ge=1)

    @model_validator(mode="after")
    def _check_limits(self) -> "PaginationSettings":
        if self.default_limit > self.max_limit:
            msg = "default_limit cannot exceed max_limit"
            raise ValueError(msg)
        return self


class TelemetrySettings(BaseModel):
    """Logging settings."""

    enabled: bool = True
    log_format: Literal["json", "text"] = "json"
    log_level: str = "INFO"


class Settings(BaseSettings):
    """Root settings container with environment loading."""

    app: AppSettings = Field(default_factory=AppSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)
    blob_storage: BlobStorageSettings = Field(default_factory=BlobStorageSettings)
    document_db: DocumentDBSettings = Field(default_factory=DocumentDBSettings)
    media: MediaSettings = Field(default_factory=MediaSettings)
    pagination: PaginationSettings = Field(default_factory=PaginationSettings)
    telemetry: TelemetrySettings = Field(default_factory=TelemetrySettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="VIDEO_CATALOG__",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )
