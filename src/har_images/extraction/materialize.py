"""Payload decoding, file writing, and ZIP archive building.

Each selected candidate is decoded to bytes, given an indexed filename with
an extension inferred from its mime type, and written to the output
directory. Written payloads can also be collected into a ZIP archive.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import zipfile
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from har_images.extraction.har import Candidate, HarImagesError
from har_images.settings import load_mime_extensions

_LOGGER = logging.getLogger(__name__)

# Maximum DEFLATE compression for archives
ARCHIVE_COMPRESSION_LEVEL = 9

# Called after each file is written with (current, total, path)
SavedCallback = Callable[[int, int, Path], None]


class PayloadDecodeError(HarImagesError):
    """Raised when a response body cannot be turned into bytes."""

    def __init__(self, request_url: str, reason: str) -> None:
        self.request_url = request_url
        self.reason = reason
        super().__init__(f"Cannot decode content of {request_url}: {reason}")


@dataclass(frozen=True)
class ExtractedFile:
    """A payload written to disk.

    Attributes:
        index: Zero-based extraction order
        filename: Indexed filename (e.g., "000-hero-web.jpg")
        path: Full path of the written file
        size: Number of bytes written
    """

    index: int
    filename: str
    path: Path
    size: int


def decode_content(content: dict[str, Any], request_url: str = "") -> bytes:
    """Decode a HAR response content object to raw bytes.

    Base64-encoded text is decoded. Any other text is written as its UTF-8
    bytes, so binary payloads stored without base64 may not round-trip.

    Args:
        content: HAR response content with "text" and optional "encoding"
        request_url: URL used in error messages

    Returns:
        Decoded payload

    Raises:
        PayloadDecodeError: If the text is not a string or is invalid base64

    Example:
        >>> decode_content({"text": "aGVsbG8=", "encoding": "base64"})
        b'hello'
        >>> decode_content({"text": "hello"})
        b'hello'
    """
    text = content.get("text") or ""
    if not isinstance(text, str):
        raise PayloadDecodeError(request_url, f"text is {type(text).__name__}, expected string")

    if content.get("encoding") == "base64":
        try:
            return base64.b64decode(text)
        except (binascii.Error, ValueError) as e:
            raise PayloadDecodeError(request_url, f"invalid base64: {e}") from e

    try:
        return text.encode("utf-8")
    except UnicodeEncodeError as e:
        raise PayloadDecodeError(request_url, str(e)) from e


def extension_from_mime(mime_type: str | None, extensions: dict[str, str] | None = None) -> str:
    """Infer a file extension from an image mime type.

    Args:
        mime_type: Response mime type, parameters such as "; charset" allowed
        extensions: Mime to extension table (loads the built-in table if None)

    Returns:
        Extension with a leading dot, or "" for non-image types

    Example:
        >>> extension_from_mime("image/jpeg")
        '.jpg'
        >>> extension_from_mime("image/avif")
        '.avif'
        >>> extension_from_mime("text/html")
        ''
    """
    if not mime_type:
        return ""
    if extensions is None:
        extensions = load_mime_extensions()

    mime = mime_type.split(";")[0].strip().lower()
    if mime in extensions:
        return extensions[mime]
    if mime.startswith("image/") and len(mime) > len("image/"):
        return "." + mime.split("/", 1)[1]
    return ""


def output_filename(
    base_name: str,
    mime_type: str | None,
    index: int,
    extensions: dict[str, str] | None = None,
) -> str:
    """Build the indexed output filename for a candidate.

    The inferred extension is appended unless the name already ends with
    it (case-insensitive), then a three-digit index prefix is added.

    Example:
        >>> output_filename("photo", "image/png", 0)
        '000-photo.png'
        >>> output_filename("photo.PNG", "image/png", 12)
        '012-photo.PNG'
    """
    name = base_name
    ext = extension_from_mime(mime_type, extensions)
    if ext and not name.lower().endswith(ext.lower()):
        name += ext
    return f"{index:03d}-{name}"


class ArchiveBuilder:
    """In-memory ZIP accumulator written out in a single write."""

    def __init__(self, compresslevel: int = ARCHIVE_COMPRESSION_LEVEL) -> None:
        self.compresslevel = compresslevel
        self._files: list[tuple[str, bytes]] = []

    def __len__(self) -> int:
        return len(self._files)

    @property
    def names(self) -> list[str]:
        """Names of the accumulated files, in insertion order."""
        return [name for name, _ in self._files]

    def add(self, name: str, data: bytes) -> None:
        """Register a payload under the given archive member name."""
        self._files.append((name, data))

    def to_bytes(self) -> bytes:
        """Serialize all accumulated files into a DEFLATE-compressed ZIP."""
        buffer = io.BytesIO()
        with zipfile.ZipFile(
            buffer,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.compresslevel,
        ) as archive:
            for name, data in self._files:
                archive.writestr(name, data)
        return buffer.getvalue()

    def write(self, path: str | Path) -> Path:
        """Serialize the archive and write it to path.

        Returns:
            The path written to

        Raises:
            OSError: If the file cannot be written
        """
        path = Path(path)
        data = self.to_bytes()
        path.write_bytes(data)
        _LOGGER.info("ZIP archive with %d file(s) written to: %s", len(self._files), path)
        return path


def materialize_candidates(
    candidates: Sequence[Candidate],
    output_dir: str | Path,
    *,
    archive: ArchiveBuilder | None = None,
    on_saved: SavedCallback | None = None,
    extensions: dict[str, str] | None = None,
) -> list[ExtractedFile]:
    """Decode and write every candidate to the output directory.

    Files are written in candidate order, named "<index>-<name><ext>".
    Existing files with the same name are overwritten. The first decode or
    write failure propagates and stops the run.

    Args:
        candidates: Candidates to write
        output_dir: Existing directory to write into
        archive: Optional accumulator that receives every written payload
        on_saved: Optional callback invoked after each write
        extensions: Mime to extension table (loads the built-in table if None)

    Returns:
        The written files, in order

    Raises:
        PayloadDecodeError: If a payload cannot be decoded
        OSError: If a file cannot be written
    """
    output_dir = Path(output_dir)
    if extensions is None:
        extensions = load_mime_extensions()

    total = len(candidates)
    written: list[ExtractedFile] = []

    for index, candidate in enumerate(candidates):
        data = decode_content(candidate.content, candidate.request_url)
        filename = output_filename(candidate.base_name, candidate.mime_type, index, extensions)
        out_path = output_dir / filename

        out_path.write_bytes(data)
        _LOGGER.debug("Wrote %d bytes from %s to %s", len(data), candidate.request_url, out_path)

        if archive is not None:
            archive.add(filename, data)

        written.append(ExtractedFile(index=index, filename=filename, path=out_path, size=len(data)))
        if on_saved is not None:
            on_saved(index + 1, total, out_path)

    return written
