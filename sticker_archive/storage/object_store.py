"""MinIO (S3-compatible) object storage backend.

Objects are keyed ``stickers/{series_id}/{id}.png`` in a single bucket,
which is created on first use. The minio SDK is synchronous, so every call
runs in a worker thread to keep the event loop free.
"""

from __future__ import annotations

import asyncio
import io
import logging

from minio import Minio
from minio.error import S3Error

from sticker_archive.config.settings import StorageSettings
from sticker_archive.errors import NotFoundError, StorageError
from sticker_archive.storage.base import StorageBackend
from sticker_archive.utils.hashing import object_key

logger = logging.getLogger(__name__)

PNG_CONTENT_TYPE = "image/png"

# S3 error codes meaning "nothing stored there"
MISSING_OBJECT_CODES = frozenset({"NoSuchKey", "NoSuchBucket", "NoSuchObject"})


class MinioStorage(StorageBackend):
    """Stores stickers in a MinIO bucket."""

    def __init__(self, settings: StorageSettings, client: Minio | None = None) -> None:
        self.settings = settings
        self.bucket = settings.minio_bucket
        self.client = client or Minio(
            settings.minio_endpoint,
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_secure,
            region=settings.minio_region,
        )
        self._bucket_ready = False

    def location_for(self, series_id: str, sticker_id: str) -> str:
        """Public location for a stored sticker.

        With public_base_url configured this is the service's own retrieval
        route; otherwise the direct object URL.
        """
        if self.settings.public_base_url:
            return f"{self.settings.public_base_url}/stickers/{series_id}/{sticker_id}"
        scheme = "https" if self.settings.minio_secure else "http"
        key = object_key(series_id, sticker_id)
        return f"{scheme}://{self.settings.minio_endpoint}/{self.bucket}/{key}"

    def _ensure_bucket(self) -> None:
        if self._bucket_ready:
            return
        if not self.client.bucket_exists(bucket_name=self.bucket):
            self.client.make_bucket(
                bucket_name=self.bucket, location=self.settings.minio_region
            )
            logger.info("Created bucket '%s'", self.bucket)
        self._bucket_ready = True

    def _put(self, data: bytes, key: str) -> None:
        self._ensure_bucket()
        self.client.put_object(
            bucket_name=self.bucket,
            object_name=key,
            data=io.BytesIO(data),
            length=len(data),
            content_type=PNG_CONTENT_TYPE,
        )

    def _get(self, key: str) -> bytes:
        response = self.client.get_object(bucket_name=self.bucket, object_name=key)
        try:
            return response.read()
        finally:
            response.close()
            response.release_conn()

    async def store(self, data: bytes, sticker_id: str, series_id: str) -> str:
        key = object_key(series_id, sticker_id)
        try:
            await asyncio.to_thread(self._put, data, key)
        except Exception as e:
            raise StorageError(f"Upload of {key} to MinIO failed: {e}") from e

        logger.debug("Stored %s (%d bytes) in %s", key, len(data), self.bucket)
        return self.location_for(series_id, sticker_id)

    async def retrieve(self, series_id: str, sticker_id: str) -> bytes:
        key = object_key(series_id, sticker_id)
        try:
            return await asyncio.to_thread(self._get, key)
        except S3Error as e:
            if e.code in MISSING_OBJECT_CODES:
                raise NotFoundError(f"Sticker file {key} not found") from e
            raise StorageError(f"Download of {key} from MinIO failed: {e}") from e
        except Exception as e:
            raise StorageError(f"Download of {key} from MinIO failed: {e}") from e
