"""Sticker Archive Database Models.

All models use SQLAlchemy 2.0 syntax.
"""

from sticker_archive.db.base import Base
from sticker_archive.db.models.series import Series
from sticker_archive.db.models.sticker import Sticker
from sticker_archive.db.models.tag import StickerTag, Tag

__all__ = [
    "Base",
    "Series",
    "Sticker",
    "StickerTag",
    "Tag",
]
