"""Sticker ingestion pipeline.

Given a validated manifest and file set, persists each record in manifest
order:

1. Locate the uploaded file by exact name
2. Hash its bytes (SHA-256 hex) to get the sticker id
3. Store the bytes through the storage backend
4. Ensure the target series row exists
5. Insert the sticker row
6. Get or create each listed tag and link it to the sticker

Each record is committed on its own. A failure aborts the remaining records
but leaves earlier ones persisted: at-most-once per record, not all-or-nothing
per batch. Re-submitting is safe for storage, series and tags; the sticker
insert raises DuplicateStickerError for content already ingested.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sticker_archive.db.repositories import (
    ensure_series,
    get_or_create_tag,
    insert_sticker,
    link_sticker_tag,
)
from sticker_archive.errors import DatabaseError, StickerArchiveError, StorageError
from sticker_archive.ingest.logger import logger
from sticker_archive.ingest.manifest import ManifestRecord
from sticker_archive.ingest.validation import UploadedFile
from sticker_archive.storage.base import StorageBackend
from sticker_archive.utils.hashing import content_hash


@dataclass
class IngestResult:
    """Statistics from a completed batch."""

    series_id: str
    sticker_ids: list[str] = field(default_factory=list)
    tag_links: int = 0

    @property
    def stickers_ingested(self) -> int:
        return len(self.sticker_ids)


def unique_tags(tags: list[str]) -> list[str]:
    """Tag names in listed order with repeats removed."""
    return list(dict.fromkeys(tags))


async def ingest_record(
    session: AsyncSession,
    storage: StorageBackend,
    record: ManifestRecord,
    upload: UploadedFile,
    series_id: str,
) -> tuple[str, int]:
    """Store and persist one manifest record.

    Returns:
        (sticker_id, number of tag links created)
    """
    sticker_id = content_hash(upload.data)

    try:
        location = await storage.store(upload.data, sticker_id, series_id)
    except StorageError:
        raise
    except Exception as e:
        raise StorageError(f"Failed to store {record.file_name}: {e}") from e
    logger.sticker_stored(record.file_name, sticker_id, location)

    await ensure_series(session, series_id)
    await insert_sticker(session, sticker_id, location, series_id)

    tags = unique_tags(record.tags)
    for tag_name in tags:
        tag = await get_or_create_tag(session, tag_name)
        await link_sticker_tag(session, sticker_id, tag.tag_id)

    await session.commit()
    logger.sticker_ingested(record.file_name, sticker_id, tags)
    return sticker_id, len(tags)


async def ingest_batch(
    session: AsyncSession,
    storage: StorageBackend,
    records: list[ManifestRecord],
    files: list[UploadedFile],
    series_id: str,
) -> IngestResult:
    """Ingest every manifest record, in manifest order.

    Args:
        session: Database session (committed after each record)
        storage: Backend that receives the image bytes
        records: Validated manifest records
        files: Validated uploads, in bijection with records
        series_id: Series every sticker in the batch belongs to

    Returns:
        IngestResult with the ids ingested

    Raises:
        StorageError: The backend failed to write a file
        DuplicateStickerError: A sticker with the same content already exists
        DatabaseError: Any other metadata store failure
    """
    files_by_name = {f.name: f for f in files}
    result = IngestResult(series_id=series_id)
    logger.batch_start(series_id, len(records))

    for record in records:
        upload = files_by_name[record.file_name]
        try:
            sticker_id, links = await ingest_record(
                session, storage, record, upload, series_id
            )
        except StickerArchiveError as e:
            await session.rollback()
            logger.record_failed(record.file_name, e)
            raise
        except SQLAlchemyError as e:
            await session.rollback()
            logger.record_failed(record.file_name, e)
            raise DatabaseError(f"Failed to persist {record.file_name}: {e}") from e

        result.sticker_ids.append(sticker_id)
        result.tag_links += links

    logger.batch_complete(series_id, result.stickers_ingested)
    return result
