"""Series repository for database operations."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sticker_archive.db.models import Series
from sticker_archive.errors import DatabaseError


async def get_series(session: AsyncSession, series_id: str) -> Series | None:
    """Get a series by id, or None if it does not exist."""
    result = await session.execute(select(Series).where(Series.id == series_id))
    return result.scalar_one_or_none()


async def list_series(session: AsyncSession) -> list[Series]:
    """Get all series ordered by id."""
    result = await session.execute(select(Series).order_by(Series.id))
    return list(result.scalars().all())


async def ensure_series(session: AsyncSession, series_id: str) -> Series:
    """Get the series row, inserting it if absent.

    The insert runs in a SAVEPOINT. A unique violation means a concurrent
    request created the row between our read and our insert, which counts as
    success once the row can be read back.

    Args:
        session: Database session
        series_id: Series identifier

    Returns:
        The existing or newly created Series

    Raises:
        DatabaseError: If the insert failed and the row still does not exist
    """
    series = await get_series(session, series_id)
    if series is not None:
        return series

    series = Series(id=series_id)
    try:
        async with session.begin_nested():
            session.add(series)
    except IntegrityError as e:
        existing = await get_series(session, series_id)
        if existing is None:
            raise DatabaseError(f"Could not create series {series_id}: {e}") from e
        return existing
    return series
