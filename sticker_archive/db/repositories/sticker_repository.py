"""Sticker repository for database operations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sticker_archive.db.models import Sticker
from sticker_archive.errors import DuplicateStickerError


async def find_stickers(
    session: AsyncSession,
    series_id: str | None = None,
    sticker_id: str | None = None,
) -> list[Sticker]:
    """Find stickers matching every given filter.

    Args:
        session: Database session
        series_id: Only stickers in this series
        sticker_id: Only the sticker with this content hash

    Returns:
        Matching stickers; all stickers when no filter is given
    """
    stmt = select(Sticker)
    if series_id:
        stmt = stmt.where(Sticker.series_id == series_id)
    if sticker_id:
        stmt = stmt.where(Sticker.sticker_id == sticker_id)
    result = await session.execute(stmt.order_by(Sticker.series_id, Sticker.sticker_id))
    return list(result.scalars().all())


async def insert_sticker(
    session: AsyncSession, sticker_id: str, path: str, series_id: str
) -> Sticker:
    """Insert a sticker row.

    Identical content previously ingested is NOT deduplicated here: the
    insert is attempted as given and a primary key violation is surfaced.

    Raises:
        DuplicateStickerError: If a sticker with this id already exists
    """
    sticker = Sticker(sticker_id=sticker_id, path=path, series_id=series_id)
    try:
        async with session.begin_nested():
            session.add(sticker)
    except IntegrityError as e:
        raise DuplicateStickerError(sticker_id) from e
    return sticker
