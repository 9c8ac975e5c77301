"""Unit tests for sticker_archive.utils.hashing."""

from __future__ import annotations

from sticker_archive.utils.hashing import content_hash, local_key, object_key

# sha256(b"abc")
ABC_DIGEST = "ba7816bf8f01cfea414140de5dae2223b00361a396177a9cb410ff61f20015ad"


class TestContentHash:
    def test_known_digest(self) -> None:
        assert content_hash(b"abc") == ABC_DIGEST

    def test_lowercase_hex_64_chars(self) -> None:
        digest = content_hash(b"\x89PNG\r\n\x1a\n")
        assert len(digest) == 64
        assert digest == digest.lower()
        int(digest, 16)

    def test_different_bytes_different_ids(self) -> None:
        assert content_hash(b"a") != content_hash(b"b")


class TestKeys:
    def test_local_key_fans_out_on_prefix(self) -> None:
        assert local_key(ABC_DIGEST) == f"ba781/{ABC_DIGEST}.png"

    def test_object_key(self) -> None:
        assert object_key("series-1", ABC_DIGEST) == f"stickers/series-1/{ABC_DIGEST}.png"
