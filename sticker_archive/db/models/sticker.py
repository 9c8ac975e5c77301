"""Sticker ORM model.

Stickers are CONTENT-ADDRESSED: sticker_id is the SHA-256 hex digest of the
exact image bytes stored. Re-uploading identical bytes yields the same id,
so the primary key doubles as a deduplication check. Rows are created once
and never mutated.

path is whatever the storage backend returned when the bytes were written:
a relative path for the local backend, or a URL for the object store.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sticker_archive.db.base import Base

if TYPE_CHECKING:
    from sticker_archive.db.models.series import Series
    from sticker_archive.db.models.tag import StickerTag


class Sticker(Base):
    """One image, identified by the hash of its bytes."""

    __tablename__ = "stickers"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------

    # SHA-256 hex digest of the image bytes (64 lowercase hex characters)
    sticker_id: Mapped[str] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Location & Ownership
    # -------------------------------------------------------------------------

    # Relative path (local disk) or URL (object store) of the stored bytes
    path: Mapped[str] = mapped_column(Text, nullable=False)

    # Owning series. The pipeline ensures the row exists before inserting.
    series_id: Mapped[str] = mapped_column(
        ForeignKey("series.id"), nullable=False
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------

    series: Mapped["Series"] = relationship("Series", back_populates="stickers")
    tag_links: Mapped[list["StickerTag"]] = relationship(
        "StickerTag", back_populates="sticker"
    )

    __table_args__ = (
        # List all stickers in a series
        Index("ix_stickers_series_id", "series_id"),
    )

    def __repr__(self) -> str:
        return f"<Sticker(sticker_id='{self.sticker_id}', series_id='{self.series_id}')>"
