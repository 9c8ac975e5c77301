"""Storage backend interface.

A backend persists sticker image bytes under a key derived from the content
hash and returns a location string that is stored on the Sticker row.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class StorageBackend(ABC):
    """Content-addressed image storage."""

    @abstractmethod
    async def store(self, data: bytes, sticker_id: str, series_id: str) -> str:
        """Persist bytes and return their location (relative path or URL).

        Raises:
            StorageError: If the bytes could not be written
        """
        ...

    @abstractmethod
    async def retrieve(self, series_id: str, sticker_id: str) -> bytes:
        """Read back the bytes stored for a sticker.

        Raises:
            NotFoundError: If nothing is stored at the derived key
            StorageError: If the backend failed
        """
        ...

    async def close(self) -> None:
        """Release backend resources. No-op by default."""
        return None
