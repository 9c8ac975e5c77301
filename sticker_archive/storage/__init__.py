"""Storage backends for sticker image bytes.

The backend is selected once, from configuration, at startup.
"""

from sticker_archive.config.settings import StorageSettings
from sticker_archive.storage.base import StorageBackend
from sticker_archive.storage.local import LocalStorage
from sticker_archive.storage.object_store import MinioStorage


def create_storage(settings: StorageSettings) -> StorageBackend:
    """Build the backend named by settings.backend."""
    if settings.backend == "local":
        return LocalStorage(settings.local_root)
    return MinioStorage(settings)


__all__ = [
    "StorageBackend",
    "LocalStorage",
    "MinioStorage",
    "create_storage",
]
