"""Tests for index.json persistence."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from manualshelf.index.storage import (
    IndexLoadError,
    dumps_index,
    loads_index,
    read_index,
    utc_timestamp,
    write_index,
)
from manualshelf.models import IndexDocument, ManualRecord


@pytest.fixture
def document() -> IndexDocument:
    return IndexDocument(
        generated_at="2024-05-01T10:00:00.000Z",
        manuals=[
            ManualRecord(
                path="kitchen/eq700.pdf",
                filename="eq700.pdf",
                content_hash="sha256:abc",
                tags=["brand=Siemens", "!hide-page-range=1-2"],
                page_count=40,
                last_modified="2024-04-30T09:00:00.000Z",
                title="",
            ),
            ManualRecord(
                path="tv.pdf",
                filename="tv.pdf",
                content_hash="sha256:def",
                tags=[],
                page_count=0,
                last_modified="2024-04-29T09:00:00.000Z",
            ),
        ],
    )


class TestSerialization:
    """Test index serialization."""

    def test_round_trip(self, document: IndexDocument) -> None:
        """Should be lossless, including empty strings and empty tag lists."""
        assert loads_index(dumps_index(document)) == document

    def test_top_level_shape(self, document: IndexDocument) -> None:
        """Should write generatedAt and manuals."""
        data = json.loads(dumps_index(document))
        assert set(data) == {"generatedAt", "manuals"}
        assert data["manuals"][0]["contentHash"] == "sha256:abc"

    def test_invalid_json(self) -> None:
        """Should raise IndexLoadError on malformed JSON."""
        with pytest.raises(IndexLoadError):
            loads_index("{")

    def test_wrong_shape(self) -> None:
        """Should raise IndexLoadError when required fields are missing."""
        with pytest.raises(IndexLoadError):
            loads_index('{"manuals": []}')
        with pytest.raises(IndexLoadError):
            loads_index("[]")


class TestFiles:
    """Test reading and writing index files."""

    def test_write_and_read(self, tmp_path: Path, document: IndexDocument) -> None:
        """Should create parent directories and read back."""
        path = tmp_path / "out" / "index.json"
        write_index(document, path)
        assert read_index(path) == document

    def test_read_missing(self, tmp_path: Path) -> None:
        """Should raise IndexLoadError for a missing file."""
        with pytest.raises(IndexLoadError, match="not found"):
            read_index(tmp_path / "index.json")


class TestUtcTimestamp:
    """Test utc_timestamp helper."""

    def test_epoch(self) -> None:
        """Should format a POSIX time as ISO-8601 UTC."""
        assert utc_timestamp(0) == "1970-01-01T00:00:00.000Z"

    def test_now(self) -> None:
        """Should end with Z."""
        assert utc_timestamp().endswith("Z")
