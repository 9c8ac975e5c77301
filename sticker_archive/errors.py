"""Error taxonomy for the sticker archive.

Every error raised by validators, the ingestion pipeline, storage backends
and repositories derives from StickerArchiveError. The HTTP layer maps each
family to a status code:

- ClientInputError (and UploadValidationError) -> 400
- RateLimitedError -> 429
- NotFoundError -> 404
- DuplicateStickerError -> 409
- anything else -> 500
"""

from __future__ import annotations

from datetime import datetime, timezone


class StickerArchiveError(Exception):
    """Base class for all sticker archive errors."""


# -----------------------------------------------------------------------------
# Client input (HTTP 400)
# -----------------------------------------------------------------------------


class ClientInputError(StickerArchiveError):
    """A defect in the uploaded manifest or file set.

    Attributes:
        field: Form field the defect belongs to ("record" or "files")
        message: Human-readable description
        file_name: Offending file, if the defect is file-scoped
    """

    def __init__(
        self, field: str, message: str, file_name: str | None = None
    ) -> None:
        self.field = field
        self.message = message
        self.file_name = file_name
        super().__init__(self.describe())

    def describe(self) -> str:
        """Render as a single field-scoped line."""
        if self.file_name:
            return f"{self.field} - {self.file_name}: {self.message}"
        return f"{self.field}: {self.message}"


class OversizeError(ClientInputError):
    """Manifest blob exceeds its size bound."""


class MalformedJSONError(ClientInputError):
    """Manifest blob is not valid JSON."""


class SchemaError(ClientInputError):
    """Manifest (or form) does not have the expected shape."""


class CountError(ClientInputError):
    """Number of uploaded files is outside the allowed range."""


class DuplicateNameError(ClientInputError):
    """Two uploaded files share a name."""


class InvalidNameError(ClientInputError):
    """A file name is empty or contains a forbidden character."""


class SizeError(ClientInputError):
    """An uploaded file exceeds the per-file size bound."""


class FormatError(ClientInputError):
    """An uploaded file is not a PNG (content type or signature)."""


class MismatchError(ClientInputError):
    """Manifest names and uploaded file names are not in bijection."""

    def __init__(self, missing: list[str], extra: list[str]) -> None:
        self.missing = missing
        self.extra = extra
        parts = []
        if missing:
            parts.append(f"missing files: {', '.join(missing)}")
        if extra:
            parts.append(f"unexpected files: {', '.join(extra)}")
        super().__init__("files", "; ".join(parts))


class UploadValidationError(ClientInputError):
    """All validation defects found in one upload, reported together."""

    def __init__(self, errors: list[ClientInputError]) -> None:
        self.errors = errors
        lines = "\n".join(error.describe() for error in errors)
        super().__init__("upload", f"Upload validation failed:\n{lines}")

    def describe(self) -> str:
        return self.message


# -----------------------------------------------------------------------------
# Rate limiting (HTTP 429)
# -----------------------------------------------------------------------------


class RateLimitedError(StickerArchiveError):
    """Request rejected by the fixed-window rate limiter."""

    def __init__(self, reset_at: float, message: str | None = None) -> None:
        self.reset_at = reset_at
        if message is None:
            reset = datetime.fromtimestamp(reset_at, tz=timezone.utc)
            message = f"Too many requests. Try again after {reset.isoformat()}."
        self.message = message
        super().__init__(message)


# -----------------------------------------------------------------------------
# Lookup (HTTP 404)
# -----------------------------------------------------------------------------


class NotFoundError(StickerArchiveError):
    """A series, sticker or stored object does not exist."""


# -----------------------------------------------------------------------------
# Backends (HTTP 409 / 500)
# -----------------------------------------------------------------------------


class StorageError(StickerArchiveError):
    """The storage backend failed to persist or read image bytes."""


class DatabaseError(StickerArchiveError):
    """The metadata store failed in a way that is not an idempotent race."""


class DuplicateStickerError(StickerArchiveError):
    """A sticker row with this content hash already exists."""

    def __init__(self, sticker_id: str) -> None:
        self.sticker_id = sticker_id
        super().__init__(f"Sticker {sticker_id} has already been ingested")
