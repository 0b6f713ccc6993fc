"""Tests for payload decoding, file writing, and archive building."""

from __future__ import annotations

import io
import zipfile
from pathlib import Path

import pytest

from har_images.extraction.har import Candidate
from har_images.extraction.materialize import (
    ARCHIVE_COMPRESSION_LEVEL,
    ArchiveBuilder,
    ExtractedFile,
    PayloadDecodeError,
    decode_content,
    extension_from_mime,
    materialize_candidates,
    output_filename,
)


def _candidate(
    base_name: str = "hero-web.jpg",
    text: str = "aGVsbG8=",
    mime_type: str = "image/jpeg",
    encoding: str | None = "base64",
) -> Candidate:
    content: dict = {"mimeType": mime_type, "text": text}
    if encoding:
        content["encoding"] = encoding
    return Candidate(
        request_url=f"https://example.com/{base_name}",
        content=content,
        mime_type=mime_type,
        base_name=base_name,
    )


# =============================================================================
# Decoding
# =============================================================================


class TestDecodeContent:
    """Tests for decode_content."""

    def test_base64(self) -> None:
        """Test base64 text is decoded."""
        assert decode_content({"text": "aGVsbG8=", "encoding": "base64"}) == b"hello"

    def test_plain_text(self) -> None:
        """Test text without encoding is written unchanged."""
        assert decode_content({"text": "hello"}) == b"hello"

    def test_plain_text_is_utf8(self) -> None:
        """Test non-ASCII plain text is encoded as UTF-8."""
        svg = '<svg><text>café</text></svg>'

        assert decode_content({"text": svg}) == svg.encode("utf-8")

    def test_other_encoding_treated_as_text(self) -> None:
        """Test only "base64" triggers decoding."""
        assert decode_content({"text": "aGVsbG8=", "encoding": "gzip"}) == b"aGVsbG8="

    def test_binary_round_trip(self, gif_bytes: bytes, image_entry) -> None:
        """Test a binary image survives base64 decoding."""
        content = image_entry(data=gif_bytes, mime_type="image/gif")["response"]["content"]

        assert decode_content(content) == gif_bytes

    def test_invalid_base64_raises(self) -> None:
        """Test malformed base64 raises PayloadDecodeError."""
        with pytest.raises(PayloadDecodeError, match="invalid base64") as exc_info:
            decode_content({"text": "abc", "encoding": "base64"}, "https://example.com/x.png")

        assert exc_info.value.request_url == "https://example.com/x.png"

    def test_non_string_text_raises(self) -> None:
        """Test a non-string text field raises PayloadDecodeError."""
        with pytest.raises(PayloadDecodeError, match="expected string"):
            decode_content({"text": 12345})


# =============================================================================
# Naming
# =============================================================================


class TestExtensionFromMime:
    """Tests for extension_from_mime."""

    @pytest.mark.parametrize(
        ("mime_type", "expected"),
        [
            ("image/jpeg", ".jpg"),
            ("image/png", ".png"),
            ("image/gif", ".gif"),
            ("image/webp", ".webp"),
            ("image/svg+xml", ".svg"),
            ("image/avif", ".avif"),
            ("image/x-icon", ".x-icon"),
            ("IMAGE/PNG", ".png"),
            ("image/jpeg; charset=binary", ".jpg"),
            ("text/html", ""),
            ("image/", ""),
            ("", ""),
            (None, ""),
        ],
    )
    def test_builtin_table(self, mime_type: str | None, expected: str) -> None:
        """Test the built-in mime table and subtype fallback."""
        assert extension_from_mime(mime_type) == expected

    def test_custom_table(self) -> None:
        """Test an explicit table takes precedence."""
        assert extension_from_mime("image/x-icon", {"image/x-icon": ".ico"}) == ".ico"


class TestOutputFilename:
    """Tests for output_filename."""

    def test_appends_missing_extension(self) -> None:
        """Test an extension is appended when absent."""
        assert output_filename("photo", "image/png", 0) == "000-photo.png"

    def test_keeps_existing_extension_case_insensitive(self) -> None:
        """Test an existing extension is not duplicated."""
        assert output_filename("photo.PNG", "image/png", 0) == "000-photo.PNG"

    def test_appends_when_extension_differs(self) -> None:
        """Test a mismatched extension gets the mime extension appended."""
        assert output_filename("photo.jpeg", "image/jpeg", 3) == "003-photo.jpeg.jpg"

    def test_no_extension_for_unknown_mime(self) -> None:
        """Test an empty mime leaves the name alone."""
        assert output_filename("photo", "", 7) == "007-photo"

    def test_index_padding(self) -> None:
        """Test the index is zero-padded to three digits."""
        assert output_filename("a.png", "image/png", 42) == "042-a.png"
        assert output_filename("a.png", "image/png", 1234) == "1234-a.png"


# =============================================================================
# Archive
# =============================================================================


class TestArchiveBuilder:
    """Tests for ArchiveBuilder."""

    def test_empty(self) -> None:
        """Test a new builder holds nothing."""
        archive = ArchiveBuilder()

        assert len(archive) == 0
        assert archive.names == []
        assert archive.compresslevel == ARCHIVE_COMPRESSION_LEVEL

    def test_to_bytes_contains_files(self, gif_bytes: bytes) -> None:
        """Test serialized archive contains every added file."""
        archive = ArchiveBuilder()
        archive.add("000-a.gif", gif_bytes)
        archive.add("001-b.txt", b"hello")

        with zipfile.ZipFile(io.BytesIO(archive.to_bytes())) as zf:
            assert zf.namelist() == ["000-a.gif", "001-b.txt"]
            assert zf.read("000-a.gif") == gif_bytes
            assert zf.read("001-b.txt") == b"hello"
            assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist())

    def test_write(self, tmp_path: Path) -> None:
        """Test the archive is written to the given path."""
        archive = ArchiveBuilder()
        archive.add("000-a.png", b"png")
        zip_path = tmp_path / "images.zip"

        assert archive.write(zip_path) == zip_path
        with zipfile.ZipFile(zip_path) as zf:
            assert zf.read("000-a.png") == b"png"

    def test_write_to_missing_directory_raises(self, tmp_path: Path) -> None:
        """Test write failures propagate."""
        archive = ArchiveBuilder()
        archive.add("000-a.png", b"png")

        with pytest.raises(OSError):
            archive.write(tmp_path / "missing" / "images.zip")


# =============================================================================
# Materialization
# =============================================================================


class TestMaterializeCandidates:
    """Tests for materialize_candidates."""

    def test_writes_indexed_files(self, tmp_path: Path) -> None:
        """Test N candidates produce N indexed files."""
        candidates = [_candidate("a-web.jpg"), _candidate("b-web"), _candidate("c-web.jpg")]

        written = materialize_candidates(candidates, tmp_path)

        assert [f.filename for f in written] == ["000-a-web.jpg", "001-b-web.jpg", "002-c-web.jpg"]
        assert sorted(p.name for p in tmp_path.iterdir()) == [f.filename for f in written]
        assert all(p.read_bytes() == b"hello" for p in tmp_path.iterdir())

    def test_returns_extracted_file_details(self, tmp_path: Path) -> None:
        """Test ExtractedFile records index, path and size."""
        written = materialize_candidates([_candidate(text="hello", encoding=None)], tmp_path)

        assert written == [
            ExtractedFile(index=0, filename="000-hero-web.jpg", path=tmp_path / "000-hero-web.jpg", size=5)
        ]

    def test_same_base_name_kept_apart_by_index(self, tmp_path: Path) -> None:
        """Test duplicate names are disambiguated by the index prefix."""
        candidates = [_candidate("logo.png", mime_type="image/png")] * 2

        written = materialize_candidates(candidates, tmp_path)

        assert [f.filename for f in written] == ["000-logo.png", "001-logo.png"]

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        """Test an existing file with the same name is overwritten."""
        (tmp_path / "000-hero-web.jpg").write_bytes(b"old content")

        materialize_candidates([_candidate()], tmp_path)

        assert (tmp_path / "000-hero-web.jpg").read_bytes() == b"hello"

    def test_fills_archive(self, tmp_path: Path) -> None:
        """Test every written payload is also added to the archive."""
        archive = ArchiveBuilder()

        materialize_candidates([_candidate("a.jpg"), _candidate("b.jpg")], tmp_path, archive=archive)

        assert archive.names == ["000-a.jpg", "001-b.jpg"]

    def test_reports_progress(self, tmp_path: Path) -> None:
        """Test on_saved is called with (current, total, path) per file."""
        calls: list[tuple[int, int, Path]] = []

        materialize_candidates(
            [_candidate("a.jpg"), _candidate("b.jpg")],
            tmp_path,
            on_saved=lambda current, total, path: calls.append((current, total, path)),
        )

        assert calls == [
            (1, 2, tmp_path / "000-a.jpg"),
            (2, 2, tmp_path / "001-b.jpg"),
        ]

    def test_decode_failure_stops_run(self, tmp_path: Path) -> None:
        """Test the first failure propagates and later files are not written."""
        candidates = [_candidate("a.jpg"), _candidate("bad.jpg", text="abc"), _candidate("c.jpg")]

        with pytest.raises(PayloadDecodeError):
            materialize_candidates(candidates, tmp_path)

        assert [p.name for p in tmp_path.iterdir()] == ["000-a.jpg"]

    def test_missing_output_dir_raises(self, tmp_path: Path) -> None:
        """Test write failures propagate as OSError."""
        with pytest.raises(OSError):
            materialize_candidates([_candidate()], tmp_path / "missing")

    def test_uses_custom_extensions(self, tmp_path: Path) -> None:
        """Test a custom extension table is honored."""
        candidate = _candidate("favicon", mime_type="image/x-icon")

        written = materialize_candidates([candidate], tmp_path, extensions={"image/x-icon": ".ico"})

        assert written[0].filename == "000-favicon.ico"
