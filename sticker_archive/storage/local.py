"""Local filesystem storage backend.

Layout under the root directory:

    {root}/{first 5 hex chars of id}/{id}.png

The location returned (and stored on the Sticker row) is the path relative
to the root.
"""

from __future__ import annotations

import logging
from pathlib import Path

import aiofiles
import aiofiles.os

from sticker_archive.errors import NotFoundError, StorageError
from sticker_archive.storage.base import StorageBackend
from sticker_archive.utils.hashing import local_key

logger = logging.getLogger(__name__)


class LocalStorage(StorageBackend):
    """Stores stickers as files on local disk."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path_for(self, sticker_id: str) -> Path:
        return self.root / local_key(sticker_id)

    async def store(self, data: bytes, sticker_id: str, series_id: str) -> str:
        path = self.path_for(sticker_id)
        try:
            # Fan-out directory is created on first use
            await aiofiles.os.makedirs(path.parent, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(data)
        except OSError as e:
            raise StorageError(f"Failed to write {path}: {e}") from e

        logger.debug("Stored %s (%d bytes) at %s", sticker_id, len(data), path)
        return local_key(sticker_id)

    async def retrieve(self, series_id: str, sticker_id: str) -> bytes:
        path = self.path_for(sticker_id)
        try:
            async with aiofiles.open(path, "rb") as f:
                return await f.read()
        except FileNotFoundError as e:
            raise NotFoundError(f"Sticker file {sticker_id} not found") from e
        except OSError as e:
            raise StorageError(f"Failed to read {path}: {e}") from e
