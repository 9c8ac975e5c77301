"""Repository layer for database operations.

Provides clean separation between data access and business logic.
All inserts, including the idempotent "create if absent" ones, live here.
"""

from sticker_archive.db.repositories.series_repository import (
    ensure_series,
    get_series,
    list_series,
)
from sticker_archive.db.repositories.sticker_repository import (
    find_stickers,
    insert_sticker,
)
from sticker_archive.db.repositories.tag_repository import (
    get_or_create_tag,
    get_tag_by_name,
    link_sticker_tag,
)

__all__ = [
    "ensure_series",
    "get_series",
    "list_series",
    "find_stickers",
    "insert_sticker",
    "get_or_create_tag",
    "get_tag_by_name",
    "link_sticker_tag",
]
