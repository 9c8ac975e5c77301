"""Tag and StickerTag ORM models.

Tags are unique by name. A tag is created the first time a manifest record
mentions its name and reused afterwards; tag_id is an opaque UUID.

StickerTag is the many-to-many join. A row exists iff the sticker's manifest
record listed that tag at ingestion time.
"""

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from sticker_archive.db.base import Base

if TYPE_CHECKING:
    from sticker_archive.db.models.sticker import Sticker


class Tag(Base):
    """A named label attached to stickers."""

    __tablename__ = "tags"

    tag_id: Mapped[str] = mapped_column(primary_key=True)

    # Unique constraint is what detects concurrent creation of the same name
    tag_name: Mapped[str] = mapped_column(unique=True, nullable=False)

    sticker_links: Mapped[list["StickerTag"]] = relationship(
        "StickerTag", back_populates="tag"
    )

    def __repr__(self) -> str:
        return f"<Tag(tag_id='{self.tag_id}', tag_name='{self.tag_name}')>"


class StickerTag(Base):
    """Association between a sticker and one of its tags."""

    __tablename__ = "sticker_tags"

    sticker_id: Mapped[str] = mapped_column(
        ForeignKey("stickers.sticker_id"), primary_key=True
    )
    tag_id: Mapped[str] = mapped_column(ForeignKey("tags.tag_id"), primary_key=True)

    sticker: Mapped["Sticker"] = relationship("Sticker", back_populates="tag_links")
    tag: Mapped["Tag"] = relationship("Tag", back_populates="sticker_links")

    def __repr__(self) -> str:
        return f"<StickerTag(sticker_id='{self.sticker_id}', tag_id='{self.tag_id}')>"
