"""Settings for the sticker archive, validated by pydantic-settings.

Values come from a JSON file (config.json by default); anything the file
leaves out can be set through STICKER_ARCHIVE_* environment variables, with
"__" separating nested sections (STICKER_ARCHIVE_STORAGE__BACKEND=local).
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseModel):
    """Where sticker image bytes are persisted."""

    backend: Literal["local", "minio"] = "minio"

    # Local filesystem backend
    local_root: Path = Path("data/stickers")

    # MinIO / S3-compatible backend
    minio_endpoint: str = "localhost:9000"
    minio_access_key: str = "minioadmin"
    minio_secret_key: str = "minioadmin"
    minio_secure: bool = False
    minio_bucket: str = "stickers"
    minio_region: str = "us-east-1"

    # When set, object-store locations point at this service's retrieval route
    public_base_url: str | None = None

    @field_validator("public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str | None) -> str | None:
        """Normalize the base URL so paths can be appended with '/'."""
        if v:
            return v.rstrip("/")
        return v


class UploadLimits(BaseModel):
    """Bounds enforced on an upload batch."""

    manifest_max_bytes: int = 10 * 1024
    file_max_bytes: int = 1024 * 1024
    min_files: int = 16
    max_files: int = 60


class RateLimitSettings(BaseModel):
    """Fixed-window policy for one endpoint."""

    path: str
    window_seconds: float = Field(gt=0)
    max_requests: int = Field(gt=0)
    message: str | None = None


def _default_rate_limits() -> dict[str, RateLimitSettings]:
    return {
        "upload": RateLimitSettings(
            path="/stickers/upload",
            window_seconds=60 * 60,
            max_requests=5,
            message="Upload rate limit exceeded: at most 5 uploads per hour",
        )
    }


class AppSettings(BaseSettings):
    """Top-level settings shared by the HTTP service and the import CLI."""

    database_url: str = "postgresql+asyncpg://localhost/stickers"
    create_tables: bool = True

    storage: StorageSettings = Field(default_factory=StorageSettings)
    upload: UploadLimits = Field(default_factory=UploadLimits)
    rate_limits: dict[str, RateLimitSettings] = Field(
        default_factory=_default_rate_limits
    )

    host: str = "127.0.0.1"
    port: int = 8000

    model_config = SettingsConfigDict(
        env_prefix="STICKER_ARCHIVE_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def from_json(cls, path: str | Path = "config.json") -> "AppSettings":
        """Build settings from a JSON file, or from defaults and environment if absent."""
        config_path = Path(path)
        if not config_path.exists():
            return cls()
        return cls(**json.loads(config_path.read_text(encoding="utf-8")))


@lru_cache
def get_settings(config_path: str = "config.json") -> AppSettings:
    """Settings for config_path, loaded once per process."""
    return AppSettings.from_json(config_path)


def load_config(path: str | Path = "config.json") -> AppSettings:
    """Load configuration from file, bypassing the cache."""
    get_settings.cache_clear()
    return AppSettings.from_json(path)
