"""Series ORM model.

A series is a sticker pack: an opaque identifier grouping stickers that were
uploaded together. It is created implicitly by the first sticker ingested
into it and is never updated or deleted by this system.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Mapped, mapped_column, relationship

from sticker_archive.db.base import Base

if TYPE_CHECKING:
    from sticker_archive.db.models.sticker import Sticker


class Series(Base):
    """Sticker pack identity."""

    __tablename__ = "series"

    # Generated UUID or externally supplied pack id
    id: Mapped[str] = mapped_column(primary_key=True)

    stickers: Mapped[list["Sticker"]] = relationship(
        "Sticker", back_populates="series"
    )

    def __repr__(self) -> str:
        return f"<Series(id='{self.id}')>"
