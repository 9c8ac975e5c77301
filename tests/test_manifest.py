"""Unit tests for sticker_archive.ingest.manifest."""

from __future__ import annotations

import pytest

from conftest import make_manifest
from sticker_archive.errors import (
    DuplicateNameError,
    InvalidNameError,
    MalformedJSONError,
    OversizeError,
    SchemaError,
    UploadValidationError,
)
from sticker_archive.ingest.manifest import (
    ManifestRecord,
    check_manifest,
    check_series_id,
    has_forbidden_chars,
    parse_manifest,
)


# ---------------------------------------------------------------------------
# has_forbidden_chars
# ---------------------------------------------------------------------------


class TestHasForbiddenChars:
    @pytest.mark.parametrize("ch", list('<>:"/\\|?*'))
    def test_each_forbidden_char(self, ch: str) -> None:
        assert has_forbidden_chars(f"cat{ch}.png")

    def test_plain_name_allowed(self) -> None:
        assert not has_forbidden_chars("cat_01 (copy).png")

    def test_unicode_name_allowed(self) -> None:
        assert not has_forbidden_chars("ねこ.png")


# ---------------------------------------------------------------------------
# check_manifest
# ---------------------------------------------------------------------------


class TestCheckManifest:
    def test_valid_manifest(self) -> None:
        blob = make_manifest(
            [{"file_name": "a.png", "tags": ["cat", "cute"]}, {"file_name": "b.png"}]
        )

        records, errors = check_manifest(blob)

        assert errors == []
        assert records == [
            ManifestRecord(file_name="a.png", tags=["cat", "cute"]),
            ManifestRecord(file_name="b.png", tags=[]),
        ]

    def test_oversize_stops_further_checks(self) -> None:
        blob = b"[" + b" " * 20 + b"not json"

        records, errors = check_manifest(blob, max_bytes=10)

        assert records == []
        assert len(errors) == 1
        assert isinstance(errors[0], OversizeError)
        assert errors[0].field == "record"

    def test_exactly_at_limit_is_accepted(self) -> None:
        blob = make_manifest([{"file_name": "a.png"}])

        _, errors = check_manifest(blob, max_bytes=len(blob))

        assert errors == []

    def test_malformed_json(self) -> None:
        _, errors = check_manifest(b'[{"file_name": "a.png",')

        assert len(errors) == 1
        assert isinstance(errors[0], MalformedJSONError)

    def test_invalid_utf8_is_malformed(self) -> None:
        _, errors = check_manifest(b"\xff\xfe[]")

        assert isinstance(errors[0], MalformedJSONError)

    def test_deeply_nested_json_is_malformed(self) -> None:
        blob = b"[" * 5000 + b"]" * 5000
        assert len(blob) < 10 * 1024

        records, errors = check_manifest(blob)

        assert records == []
        assert len(errors) == 1
        assert isinstance(errors[0], MalformedJSONError)
        assert errors[0].field == "record"

    def test_tag_longer_than_column(self) -> None:
        blob = make_manifest([{"file_name": "a.png", "tags": ["ok", "t" * 256]}])

        records, errors = check_manifest(blob)

        assert records == []
        assert len(errors) == 1
        assert isinstance(errors[0], SchemaError)
        assert "record[0].tags[1]" in errors[0].message

    def test_tag_at_column_length_accepted(self) -> None:
        blob = make_manifest([{"file_name": "a.png", "tags": ["t" * 255]}])

        records, errors = check_manifest(blob)

        assert errors == []
        assert records[0].tags == ["t" * 255]

    def test_empty_array_rejected(self) -> None:
        _, errors = check_manifest(b"[]")

        assert len(errors) == 1
        assert isinstance(errors[0], SchemaError)

    def test_top_level_object_rejected(self) -> None:
        _, errors = check_manifest(b'{"file_name": "a.png"}')

        assert len(errors) == 1
        assert isinstance(errors[0], SchemaError)

    def test_non_object_record(self) -> None:
        _, errors = check_manifest(make_manifest(["a.png"]))

        assert isinstance(errors[0], SchemaError)
        assert "record[0]" in errors[0].message

    def test_missing_file_name(self) -> None:
        _, errors = check_manifest(make_manifest([{"tags": ["cat"]}]))

        assert isinstance(errors[0], SchemaError)
        assert "file_name" in errors[0].message

    def test_tags_must_be_strings(self) -> None:
        _, errors = check_manifest(
            make_manifest([{"file_name": "a.png", "tags": ["cat", 3]}])
        )

        assert isinstance(errors[0], SchemaError)
        assert "tags" in errors[0].message

    def test_forbidden_char_in_file_name(self) -> None:
        _, errors = check_manifest(make_manifest([{"file_name": "a/b.png"}]))

        assert isinstance(errors[0], InvalidNameError)
        assert errors[0].file_name == "a/b.png"

    def test_collects_errors_from_every_record(self) -> None:
        blob = make_manifest(
            [
                {"file_name": "ok.png"},
                {"file_name": ""},
                {"file_name": "bad?.png"},
                {"file_name": "c.png", "tags": "cat"},
            ]
        )

        records, errors = check_manifest(blob)

        assert [r.file_name for r in records] == ["ok.png"]
        assert len(errors) == 3

    def test_duplicate_file_name(self) -> None:
        blob = make_manifest([{"file_name": "a.png"}, {"file_name": "a.png"}])

        _, errors = check_manifest(blob)

        assert len(errors) == 1
        assert isinstance(errors[0], DuplicateNameError)
        assert errors[0].file_name == "a.png"

    def test_unknown_keys_ignored(self) -> None:
        records, errors = check_manifest(
            make_manifest([{"file_name": "a.png", "emoji": "🐱"}])
        )

        assert errors == []
        assert records[0].file_name == "a.png"


# ---------------------------------------------------------------------------
# parse_manifest
# ---------------------------------------------------------------------------


class TestParseManifest:
    def test_returns_records(self) -> None:
        records = parse_manifest(make_manifest([{"file_name": "a.png", "tags": ["x"]}]))

        assert records == [ManifestRecord(file_name="a.png", tags=["x"])]

    def test_raises_with_all_errors(self) -> None:
        blob = make_manifest([{"file_name": ""}, {"file_name": "a|b.png"}])

        with pytest.raises(UploadValidationError) as exc_info:
            parse_manifest(blob)

        assert len(exc_info.value.errors) == 2
        assert str(exc_info.value).startswith("Upload validation failed:\n")


# ---------------------------------------------------------------------------
# check_series_id
# ---------------------------------------------------------------------------


class TestCheckSeriesId:
    @pytest.mark.parametrize("series_id", [None, "pack-01", "s" * 255])
    def test_accepted(self, series_id: str | None) -> None:
        assert check_series_id(series_id) == []

    @pytest.mark.parametrize("series_id", ["", "a/b", "what?"])
    def test_forbidden_chars_or_empty(self, series_id: str) -> None:
        errors = check_series_id(series_id)

        assert len(errors) == 1
        assert isinstance(errors[0], SchemaError)
        assert errors[0].field == "series_id"

    def test_longer_than_column(self) -> None:
        errors = check_series_id("s" * 256)

        assert len(errors) == 1
        assert errors[0].describe() == "series_id: must be at most 255 characters"
