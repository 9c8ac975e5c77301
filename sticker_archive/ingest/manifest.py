"""Manifest validation.

The manifest (form field "record") is a JSON array describing the batch:

    [
        {"file_name": "a.png", "tags": ["cat", "cute"]},
        {"file_name": "b.png"}
    ]

Every defect in the records is collected, so a caller sees all of them in
one response. Size and JSON syntax are checked first since nothing else can
be inspected without them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any

from sticker_archive.db.base import IDENTIFIER_LENGTH
from sticker_archive.errors import (
    ClientInputError,
    DuplicateNameError,
    InvalidNameError,
    MalformedJSONError,
    OversizeError,
    SchemaError,
    UploadValidationError,
)

MANIFEST_FIELD = "record"
DEFAULT_MANIFEST_MAX_BYTES = 10 * 1024

# Tag names and series ids are stored in String(IDENTIFIER_LENGTH) columns
MAX_NAME_LENGTH = IDENTIFIER_LENGTH

# Characters that may not appear in a file name
FORBIDDEN_NAME_CHARS = frozenset('<>:"/\\|?*')


@dataclass(frozen=True)
class ManifestRecord:
    """One manifest entry: an uploaded file and its tag names."""

    file_name: str
    tags: list[str] = field(default_factory=list)


def has_forbidden_chars(name: str) -> bool:
    """Return True if name contains any of < > : " / \\ | ? *."""
    return any(ch in FORBIDDEN_NAME_CHARS for ch in name)


def check_manifest(
    blob: bytes, max_bytes: int = DEFAULT_MANIFEST_MAX_BYTES
) -> tuple[list[ManifestRecord], list[ClientInputError]]:
    """Parse and check a manifest, collecting defects instead of raising.

    Args:
        blob: Raw manifest bytes
        max_bytes: Size bound for the blob

    Returns:
        (records, errors). records is only meaningful when errors is empty.
    """
    if len(blob) > max_bytes:
        return [], [
            OversizeError(
                MANIFEST_FIELD,
                f"manifest is {len(blob)} bytes, limit is {max_bytes} bytes",
            )
        ]

    try:
        data = json.loads(blob)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        return [], [MalformedJSONError(MANIFEST_FIELD, f"invalid JSON: {e}")]
    except RecursionError:
        return [], [MalformedJSONError(MANIFEST_FIELD, "invalid JSON: nested too deeply")]

    if not isinstance(data, list) or not data:
        return [], [
            SchemaError(MANIFEST_FIELD, "manifest must be a non-empty JSON array")
        ]

    records: list[ManifestRecord] = []
    errors: list[ClientInputError] = []
    for index, item in enumerate(data):
        record, record_errors = _check_record(index, item)
        errors.extend(record_errors)
        if record is not None:
            records.append(record)

    seen: set[str] = set()
    for record in records:
        if record.file_name in seen:
            errors.append(
                DuplicateNameError(
                    MANIFEST_FIELD,
                    "file_name listed more than once",
                    file_name=record.file_name,
                )
            )
        seen.add(record.file_name)
    return records, errors


def _check_record(
    index: int, item: Any
) -> tuple[ManifestRecord | None, list[ClientInputError]]:
    """Check a single manifest entry."""
    where = f"record[{index}]"
    if not isinstance(item, dict):
        return None, [SchemaError(MANIFEST_FIELD, f"{where} must be an object")]

    errors: list[ClientInputError] = []
    file_name = item.get("file_name")
    if not isinstance(file_name, str) or not file_name:
        errors.append(
            SchemaError(MANIFEST_FIELD, f"{where}.file_name must be a non-empty string")
        )
    elif has_forbidden_chars(file_name):
        errors.append(
            InvalidNameError(
                MANIFEST_FIELD,
                f'{where}.file_name contains one of < > : " / \\ | ? *',
                file_name=file_name,
            )
        )

    tags = item.get("tags")
    if tags is not None and (
        not isinstance(tags, list) or not all(isinstance(t, str) for t in tags)
    ):
        errors.append(
            SchemaError(MANIFEST_FIELD, f"{where}.tags must be an array of strings")
        )
    elif tags is not None:
        for position, tag in enumerate(tags):
            if len(tag) > MAX_NAME_LENGTH:
                errors.append(
                    SchemaError(
                        MANIFEST_FIELD,
                        f"{where}.tags[{position}] is longer than {MAX_NAME_LENGTH} characters",
                    )
                )

    if errors:
        return None, errors
    return ManifestRecord(file_name=file_name, tags=list(tags or [])), []


def check_series_id(series_id: str | None) -> list[ClientInputError]:
    """Check a caller-supplied series id. None means one will be generated."""
    if series_id is None:
        return []
    if not series_id or has_forbidden_chars(series_id):
        return [
            SchemaError(
                "series_id",
                'must be non-empty and contain none of < > : " / \\ | ? *',
            )
        ]
    if len(series_id) > MAX_NAME_LENGTH:
        return [
            SchemaError("series_id", f"must be at most {MAX_NAME_LENGTH} characters")
        ]
    return []


def parse_manifest(
    blob: bytes, max_bytes: int = DEFAULT_MANIFEST_MAX_BYTES
) -> list[ManifestRecord]:
    """Parse a manifest, raising on any defect.

    Raises:
        UploadValidationError: Carrying every OversizeError, MalformedJSONError,
            SchemaError or InvalidNameError found
    """
    records, errors = check_manifest(blob, max_bytes)
    if errors:
        raise UploadValidationError(errors)
    return records
