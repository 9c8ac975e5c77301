"""Ingestion against a real SQLite database (aiosqlite).

The unit tests mock every session call; these run the repositories and the
pipeline through actual SAVEPOINTs and unique constraints.
"""

from __future__ import annotations

from unittest.mock import patch

import pytest
import pytest_asyncio
from sqlalchemy import event, func, select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from conftest import make_png
from sticker_archive.db.engine import init_db
from sticker_archive.db.models import Series, Sticker, StickerTag, Tag
from sticker_archive.db.repositories import series_repository, tag_repository
from sticker_archive.db.repositories.series_repository import ensure_series
from sticker_archive.db.repositories.tag_repository import get_or_create_tag
from sticker_archive.errors import DuplicateStickerError
from sticker_archive.ingest.manifest import ManifestRecord
from sticker_archive.ingest.pipeline import ingest_batch
from sticker_archive.ingest.validation import PNG_CONTENT_TYPE, UploadedFile
from sticker_archive.storage import LocalStorage
from sticker_archive.utils.hashing import content_hash

PNG = make_png(b"H")


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'archive.db'}")

    # Let SQLAlchemy emit BEGIN itself so SAVEPOINT nests inside a real transaction
    @event.listens_for(engine.sync_engine, "connect")
    def _connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def Session(engine) -> async_sessionmaker:
    return async_sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(tmp_path / "stickers")


async def _counts(Session) -> list[int]:
    async with Session() as session:
        return [
            await session.scalar(select(func.count()).select_from(model))
            for model in (Series, Sticker, Tag, StickerTag)
        ]


def _upload(name: str, data: bytes) -> UploadedFile:
    return UploadedFile(name=name, content_type=PNG_CONTENT_TYPE, data=data)


# ---------------------------------------------------------------------------
# ingest_batch
# ---------------------------------------------------------------------------


class TestIngestBatch:
    @pytest.mark.asyncio
    async def test_single_tagged_sticker(self, Session, storage) -> None:
        records = [ManifestRecord(file_name="a.png", tags=["cat"])]

        async with Session() as session:
            result = await ingest_batch(session, storage, records, [_upload("a.png", PNG)], "S")

        assert result.sticker_ids == [content_hash(PNG)]
        assert await _counts(Session) == [1, 1, 1, 1]

        async with Session() as session:
            sticker = await session.scalar(select(Sticker))
            tag = await session.scalar(select(Tag))
            link = await session.scalar(select(StickerTag))

        assert sticker.sticker_id == content_hash(PNG)
        assert sticker.series_id == "S"
        assert tag.tag_name == "cat"
        assert (link.sticker_id, link.tag_id) == (sticker.sticker_id, tag.tag_id)
        assert await storage.retrieve("S", sticker.sticker_id) == PNG

    @pytest.mark.asyncio
    async def test_reingest_same_bytes_is_duplicate(self, Session, storage) -> None:
        records = [ManifestRecord(file_name="a.png", tags=["cat"])]
        async with Session() as session:
            await ingest_batch(session, storage, records, [_upload("a.png", PNG)], "S")

        async with Session() as session:
            with pytest.raises(DuplicateStickerError):
                await ingest_batch(session, storage, records, [_upload("a.png", PNG)], "S")

        assert await _counts(Session) == [1, 1, 1, 1]

    @pytest.mark.asyncio
    async def test_tags_reused_across_batches(self, Session, storage) -> None:
        async with Session() as session:
            await ingest_batch(
                session,
                storage,
                [ManifestRecord(file_name="a.png", tags=["cat", "cute"])],
                [_upload("a.png", make_png(b"first"))],
                "S1",
            )
        async with Session() as session:
            await ingest_batch(
                session,
                storage,
                [ManifestRecord(file_name="b.png", tags=["cat"])],
                [_upload("b.png", make_png(b"second"))],
                "S2",
            )

        assert await _counts(Session) == [2, 2, 2, 3]

    @pytest.mark.asyncio
    async def test_earlier_records_survive_a_failure(self, Session, storage) -> None:
        async with Session() as session:
            await ingest_batch(
                session,
                storage,
                [ManifestRecord(file_name="b.png")],
                [_upload("b.png", make_png(b"b"))],
                "S",
            )

        records = [ManifestRecord(file_name="a.png"), ManifestRecord(file_name="b.png")]
        files = [_upload("a.png", make_png(b"a")), _upload("b.png", make_png(b"b"))]
        async with Session() as session:
            with pytest.raises(DuplicateStickerError):
                await ingest_batch(session, storage, records, files, "S")

        assert await _counts(Session) == [1, 2, 0, 0]


# ---------------------------------------------------------------------------
# Create-if-absent losing a race
# ---------------------------------------------------------------------------


class TestConcurrentCreation:
    @pytest.mark.asyncio
    async def test_series_created_between_read_and_insert(self, Session) -> None:
        async with Session() as session:
            session.add(Series(id="S"))
            await session.commit()

        real_get_series = series_repository.get_series
        reads = []

        async def stale_first_read(session, series_id):
            reads.append(series_id)
            if len(reads) == 1:
                return None
            return await real_get_series(session, series_id)

        async with Session() as session:
            with patch.object(series_repository, "get_series", side_effect=stale_first_read):
                series = await ensure_series(session, "S")
            await session.commit()

        assert series.id == "S"
        assert reads == ["S", "S"]
        assert (await _counts(Session))[0] == 1

    @pytest.mark.asyncio
    async def test_tag_created_between_read_and_insert(self, Session) -> None:
        async with Session() as session:
            session.add(Tag(tag_id="t-1", tag_name="cat"))
            await session.commit()

        real_get_tag = tag_repository.get_tag_by_name
        reads = []

        async def stale_first_read(session, tag_name):
            reads.append(tag_name)
            if len(reads) == 1:
                return None
            return await real_get_tag(session, tag_name)

        async with Session() as session:
            with patch.object(tag_repository, "get_tag_by_name", side_effect=stale_first_read):
                tag = await get_or_create_tag(session, "cat")
            # Session is still usable after the rolled-back SAVEPOINT
            session.add(Series(id="S"))
            await session.commit()

        assert tag.tag_id == "t-1"
        assert await _counts(Session) == [1, 0, 1, 0]
