"""HTTP routes."""

from sticker_archive.api.routes.series import router as series_router
from sticker_archive.api.routes.stickers import router as stickers_router

__all__ = ["series_router", "stickers_router"]
