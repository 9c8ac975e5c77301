"""Tests for sticker_archive.config.settings."""

from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from sticker_archive.config.settings import (
    AppSettings,
    RateLimitSettings,
    StorageSettings,
    get_settings,
    load_config,
)


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestDefaults:
    def test_upload_limits(self) -> None:
        settings = AppSettings()

        assert settings.upload.manifest_max_bytes == 10 * 1024
        assert settings.upload.file_max_bytes == 1024 * 1024
        assert (settings.upload.min_files, settings.upload.max_files) == (16, 60)

    def test_upload_rate_limit(self) -> None:
        policy = AppSettings().rate_limits["upload"]

        assert policy.path == "/stickers/upload"
        assert policy.window_seconds == 3600
        assert policy.max_requests == 5

    def test_storage_backend(self) -> None:
        assert AppSettings().storage.backend == "minio"


class TestFromJson:
    def test_loads_nested_sections(self, tmp_path) -> None:
        path = tmp_path / "config.json"
        path.write_text(
            json.dumps(
                {
                    "database_url": "postgresql+asyncpg://db/stickers",
                    "storage": {"backend": "local", "local_root": "/srv/stickers"},
                    "upload": {"min_files": 1},
                    "rate_limits": {
                        "upload": {
                            "path": "/stickers/upload",
                            "window_seconds": 60,
                            "max_requests": 100,
                        }
                    },
                }
            )
        )

        settings = AppSettings.from_json(path)

        assert settings.database_url == "postgresql+asyncpg://db/stickers"
        assert settings.storage.backend == "local"
        assert str(settings.storage.local_root) == "/srv/stickers"
        assert settings.upload.min_files == 1
        assert settings.upload.max_files == 60
        assert settings.rate_limits["upload"].max_requests == 100

    def test_missing_file_gives_defaults(self, tmp_path) -> None:
        settings = AppSettings.from_json(tmp_path / "absent.json")

        assert settings.port == 8000

    def test_invalid_backend_rejected(self, tmp_path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"storage": {"backend": "ftp"}}))

        with pytest.raises(ValidationError):
            AppSettings.from_json(path)

    def test_load_config_bypasses_cache(self, tmp_path) -> None:
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"port": 9001}))
        cached = get_settings(str(path))

        path.write_text(json.dumps({"port": 9002}))

        assert get_settings(str(path)) is cached
        assert load_config(path).port == 9002


class TestEnvironment:
    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("STICKER_ARCHIVE_DATABASE_URL", "postgresql+asyncpg://env/db")
        monkeypatch.setenv("STICKER_ARCHIVE_UPLOAD__MAX_FILES", "40")

        settings = AppSettings()

        assert settings.database_url == "postgresql+asyncpg://env/db"
        assert settings.upload.max_files == 40


class TestValidation:
    def test_public_base_url_trailing_slash_stripped(self) -> None:
        settings = StorageSettings(public_base_url="https://cdn.example.com/")
        assert settings.public_base_url == "https://cdn.example.com"

    @pytest.mark.parametrize("field", ["window_seconds", "max_requests"])
    def test_rate_limit_must_be_positive(self, field: str) -> None:
        values = {"path": "/x", "window_seconds": 60, "max_requests": 5, field: 0}

        with pytest.raises(ValidationError):
            RateLimitSettings(**values)
