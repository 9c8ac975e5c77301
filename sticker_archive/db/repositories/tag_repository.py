"""Tag repository for database operations."""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from sticker_archive.db.models import StickerTag, Tag
from sticker_archive.errors import DatabaseError


async def get_tag_by_name(session: AsyncSession, tag_name: str) -> Tag | None:
    """Get a tag by its unique name, or None if it does not exist."""
    result = await session.execute(select(Tag).where(Tag.tag_name == tag_name))
    return result.scalar_one_or_none()


async def get_or_create_tag(session: AsyncSession, tag_name: str) -> Tag:
    """Get the tag with this name, creating it with a fresh id if absent.

    Same race handling as ensure_series: a unique violation on tag_name is
    a concurrent creation and resolves to the row that won.

    Raises:
        DatabaseError: If the insert failed and no tag with the name exists
    """
    tag = await get_tag_by_name(session, tag_name)
    if tag is not None:
        return tag

    tag = Tag(tag_id=str(uuid.uuid4()), tag_name=tag_name)
    try:
        async with session.begin_nested():
            session.add(tag)
    except IntegrityError as e:
        existing = await get_tag_by_name(session, tag_name)
        if existing is None:
            raise DatabaseError(f"Could not create tag {tag_name!r}: {e}") from e
        return existing
    return tag


async def link_sticker_tag(
    session: AsyncSession, sticker_id: str, tag_id: str
) -> StickerTag:
    """Insert the sticker/tag association row."""
    link = StickerTag(sticker_id=sticker_id, tag_id=tag_id)
    session.add(link)
    await session.flush()
    return link
