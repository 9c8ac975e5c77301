"""Upload validation for the sticker image file set.

Checks, in order:
1. File count within [min_files, max_files]
2. Unique file names
3. Per-file: name legality, size bound, PNG content type AND signature
4. Bijection between manifest file names and uploaded file names

All defects are accumulated; validate_upload() merges them with the
manifest's own defects and raises a single UploadValidationError.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass

from sticker_archive.config.settings import UploadLimits
from sticker_archive.errors import (
    ClientInputError,
    CountError,
    DuplicateNameError,
    FormatError,
    InvalidNameError,
    MismatchError,
    SchemaError,
    SizeError,
    UploadValidationError,
)
from sticker_archive.ingest.manifest import (
    MANIFEST_FIELD,
    ManifestRecord,
    check_manifest,
    has_forbidden_chars,
)

FILES_FIELD = "files"
PNG_CONTENT_TYPE = "image/png"
PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"


@dataclass(frozen=True)
class UploadedFile:
    """An uploaded image, fully read into memory."""

    name: str
    content_type: str | None
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def is_png(upload: UploadedFile) -> bool:
    """Declared content type is image/png and the bytes start with the signature."""
    return (
        upload.content_type == PNG_CONTENT_TYPE
        and upload.data[: len(PNG_SIGNATURE)] == PNG_SIGNATURE
    )


def check_files(
    files: list[UploadedFile], limits: UploadLimits
) -> list[ClientInputError]:
    """Check count, name uniqueness and every file's name, size and format."""
    errors: list[ClientInputError] = []

    if not limits.min_files <= len(files) <= limits.max_files:
        errors.append(
            CountError(
                FILES_FIELD,
                f"expected between {limits.min_files} and {limits.max_files} "
                f"files, got {len(files)}",
            )
        )

    counts = Counter(f.name for f in files)
    for name, count in counts.items():
        if count > 1:
            errors.append(
                DuplicateNameError(
                    FILES_FIELD, f"uploaded {count} times", file_name=name
                )
            )

    for upload in files:
        if not upload.name:
            errors.append(InvalidNameError(FILES_FIELD, "file name is empty"))
        elif has_forbidden_chars(upload.name):
            errors.append(
                InvalidNameError(
                    FILES_FIELD,
                    'file name contains one of < > : " / \\ | ? *',
                    file_name=upload.name,
                )
            )

        if upload.size > limits.file_max_bytes:
            errors.append(
                SizeError(
                    FILES_FIELD,
                    f"{upload.size} bytes exceeds limit of {limits.file_max_bytes} bytes",
                    file_name=upload.name,
                )
            )

        if not is_png(upload):
            errors.append(
                FormatError(
                    FILES_FIELD, "not a valid PNG file", file_name=upload.name
                )
            )

    return errors


def check_correspondence(
    records: list[ManifestRecord], files: list[UploadedFile]
) -> list[ClientInputError]:
    """Check manifest names and file names are in bijection.

    Returns:
        A single MismatchError naming every missing and every extra file,
        or an empty list
    """
    file_names = {f.name for f in files}
    record_names = {r.file_name for r in records}

    missing = list(
        dict.fromkeys(r.file_name for r in records if r.file_name not in file_names)
    )
    extra = list(dict.fromkeys(f.name for f in files if f.name not in record_names))
    if missing or extra:
        return [MismatchError(missing=missing, extra=extra)]
    return []


def validate_upload(
    manifest_blob: bytes | None,
    files: list[UploadedFile],
    limits: UploadLimits,
) -> list[ManifestRecord]:
    """Validate a whole upload batch.

    Args:
        manifest_blob: Raw manifest bytes, or None if the field was missing
        files: Uploaded images in form order
        limits: Size and count bounds

    Returns:
        Parsed manifest records in manifest order

    Raises:
        UploadValidationError: Carrying every defect found in the manifest
            and the file set
    """
    errors: list[ClientInputError] = []
    records: list[ManifestRecord] = []

    if manifest_blob is None:
        errors.append(SchemaError(MANIFEST_FIELD, "missing manifest file"))
        manifest_ok = False
    else:
        records, manifest_errors = check_manifest(
            manifest_blob, limits.manifest_max_bytes
        )
        errors.extend(manifest_errors)
        manifest_ok = not manifest_errors

    errors.extend(check_files(files, limits))

    # Correspondence is only meaningful against a fully parsed manifest
    if manifest_ok:
        errors.extend(check_correspondence(records, files))

    if errors:
        raise UploadValidationError(errors)
    return records
