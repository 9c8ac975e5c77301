"""Shared fixtures for sticker-archive tests."""

from __future__ import annotations

import json

import pytest

from sticker_archive.config.settings import AppSettings, StorageSettings, UploadLimits
from sticker_archive.ingest.validation import PNG_CONTENT_TYPE, PNG_SIGNATURE, UploadedFile


def make_png(payload: bytes = b"") -> bytes:
    """PNG signature followed by arbitrary bytes; enough to pass format checks."""
    return PNG_SIGNATURE + b"\x00\x00\x00\rIHDR" + payload


def make_upload(name: str, payload: bytes | None = None) -> UploadedFile:
    data = make_png(payload if payload is not None else name.encode())
    return UploadedFile(name=name, content_type=PNG_CONTENT_TYPE, data=data)


def make_manifest(records: list[dict]) -> bytes:
    return json.dumps(records).encode()


@pytest.fixture
def limits() -> UploadLimits:
    """Default production bounds (16-60 files)."""
    return UploadLimits()


@pytest.fixture
def small_limits() -> UploadLimits:
    """Bounds allowing single-file batches."""
    return UploadLimits(min_files=1, max_files=60)


@pytest.fixture
def pack() -> tuple[bytes, list[UploadedFile]]:
    """A valid 16-file pack: manifest bytes and matching uploads."""
    names = [f"sticker_{i:02d}.png" for i in range(16)]
    manifest = make_manifest(
        [{"file_name": name, "tags": ["cat"] if i % 2 else []} for i, name in enumerate(names)]
    )
    return manifest, [make_upload(name) for name in names]


@pytest.fixture
def settings(tmp_path) -> AppSettings:
    return AppSettings(
        database_url="postgresql+asyncpg://test/db",
        create_tables=False,
        storage=StorageSettings(backend="local", local_root=tmp_path / "stickers"),
        upload=UploadLimits(min_files=1),
    )
