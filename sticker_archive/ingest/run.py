"""Directory import orchestration.

Imports a sticker pack laid out on disk:

    pack/
        record.json     manifest
        a.png
        b.png
        ...

Every *.png in the directory is part of the file set, so the directory must
match the manifest exactly, as an HTTP upload would.
"""

from __future__ import annotations

import uuid
from pathlib import Path

from sticker_archive.config.settings import AppSettings, load_config
from sticker_archive.core import BaseOrchestrator
from sticker_archive.errors import UploadValidationError
from sticker_archive.ingest.logger import logger
from sticker_archive.ingest.manifest import check_series_id
from sticker_archive.ingest.pipeline import ingest_batch
from sticker_archive.ingest.validation import (
    PNG_CONTENT_TYPE,
    UploadedFile,
    validate_upload,
)
from sticker_archive.storage import create_storage

DEFAULT_MANIFEST_NAME = "record.json"


def read_pack_directory(
    directory: Path, manifest_name: str = DEFAULT_MANIFEST_NAME
) -> tuple[bytes | None, list[UploadedFile]]:
    """Read the manifest and every PNG file of a pack directory.

    Returns:
        (manifest bytes or None if absent, files sorted by name)
    """
    manifest_path = directory / manifest_name
    manifest = manifest_path.read_bytes() if manifest_path.is_file() else None

    files = [
        UploadedFile(name=path.name, content_type=PNG_CONTENT_TYPE, data=path.read_bytes())
        for path in sorted(directory.iterdir())
        if path.is_file() and path.suffix.lower() == ".png"
    ]
    return manifest, files


class ImportOrchestrator(BaseOrchestrator):
    """Imports one pack directory into one series."""

    def __init__(
        self,
        settings: AppSettings,
        directory: Path,
        series_id: str | None = None,
        manifest_name: str = DEFAULT_MANIFEST_NAME,
    ) -> None:
        super().__init__(settings)
        self.directory = directory
        self.series_id = series_id or str(uuid.uuid4())
        self.manifest_name = manifest_name
        # Stats
        self.stickers_ingested = 0
        self.tag_links = 0

    async def _run_pipeline(self) -> None:
        """Validate the directory and ingest it."""
        manifest, files = read_pack_directory(self.directory, self.manifest_name)
        errors = check_series_id(self.series_id)
        records = []
        try:
            records = validate_upload(manifest, files, self.settings.upload)
        except UploadValidationError as e:
            errors.extend(e.errors)
        if errors:
            logger.validation_failed([err.describe() for err in errors])
            raise UploadValidationError(errors)

        with logger.block(str(self.directory)) as block:
            block.field("series ID", self.series_id)
            block.field("files", len(files))
            block.field("storage", self.settings.storage.backend, color="magenta")

            storage = create_storage(self.settings.storage)
            try:
                async with self.async_session() as session:
                    result = await ingest_batch(
                        session, storage, records, files, self.series_id
                    )
            finally:
                await storage.close()

            self.stickers_ingested = result.stickers_ingested
            self.tag_links = result.tag_links
            block.result(f"ingested {result.stickers_ingested:,} stickers")

    def _log_summary(self, elapsed: float) -> None:
        """Log the final import summary."""
        logger.summary(
            series_id=self.series_id,
            stickers=self.stickers_ingested,
            tags=self.tag_links,
            elapsed=elapsed,
        )


async def run_import(
    directory: str | Path,
    config_path: str = "config.json",
    series_id: str | None = None,
    manifest_name: str = DEFAULT_MANIFEST_NAME,
) -> None:
    """Entry point for importing a pack directory."""
    settings = load_config(config_path)
    orchestrator = ImportOrchestrator(
        settings, Path(directory), series_id=series_id, manifest_name=manifest_name
    )
    await orchestrator.run()
