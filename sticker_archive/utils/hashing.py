"""Content addressing for sticker images."""

from __future__ import annotations

import hashlib

# Leading hex characters of the id used as the local fan-out directory
LOCAL_PREFIX_LENGTH = 5


def content_hash(data: bytes) -> str:
    """Return the SHA-256 hex digest of the exact bytes, used as sticker id."""
    return hashlib.sha256(data).hexdigest()


def local_key(sticker_id: str) -> str:
    """Relative path of a sticker on local disk: ``abcde/abcde....png``."""
    return f"{sticker_id[:LOCAL_PREFIX_LENGTH]}/{sticker_id}.png"


def object_key(series_id: str, sticker_id: str) -> str:
    """Object-store key of a sticker: ``stickers/{series_id}/{id}.png``."""
    return f"stickers/{series_id}/{sticker_id}.png"
