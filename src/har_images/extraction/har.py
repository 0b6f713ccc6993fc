"""HAR loading and image entry selection.

This module reads HAR (HTTP Archive) files and selects the entries whose
response carries an embedded image with a filename matching one of the
configured wildcard patterns.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

_LOGGER = logging.getLogger(__name__)

# Characters kept as-is in derived filenames
_UNSAFE_FILENAME_RE = re.compile(r"[^a-zA-Z0-9._-]")

# Fallback name when a URL yields no usable path segment
DEFAULT_BASE_NAME = "image"


class HarImagesError(Exception):
    """Base class for har-images errors."""


class InputError(HarImagesError):
    """Raised when the source HAR file does not exist."""

    def __init__(self, path: str | Path) -> None:
        self.path = str(path)
        super().__init__(f"HAR file does not exist: {self.path}")


class ParseError(HarImagesError):
    """Raised when the source HAR file is not valid JSON."""

    def __init__(self, path: str | Path, msg: str, lineno: int) -> None:
        self.path = str(path)
        self.msg = msg
        self.lineno = lineno
        super().__init__(f"Invalid JSON in HAR file {self.path}: {msg} at line {lineno}")


@dataclass(frozen=True)
class Candidate:
    """An image entry selected for extraction.

    Attributes:
        request_url: URL the image was requested from
        content: The entry's response content object (text, encoding, mimeType)
        mime_type: Response mime type, always starting with "image/"
        base_name: Sanitized filename derived from the URL
    """

    request_url: str
    content: dict[str, Any]
    mime_type: str
    base_name: str


def load_har_file(path: str | Path) -> Any:
    """Read and parse a HAR file.

    Args:
        path: Path to the HAR file

    Returns:
        Parsed JSON document

    Raises:
        InputError: If the file does not exist
        ParseError: If the file is not valid JSON
        OSError: If the file cannot be read
    """
    path = Path(path)
    if not path.exists():
        raise InputError(path)

    with open(path, encoding="utf-8", errors="replace") as f:
        raw = f.read()

    try:
        return json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(path, e.msg, e.lineno) from e


def get_entries(har_data: Any) -> list[Any]:
    """Return the list of network entries of a HAR document.

    A missing "log" or "entries" key yields an empty list.

    Args:
        har_data: Parsed HAR document

    Returns:
        The log.entries list, or an empty list

    Example:
        >>> get_entries({"log": {"entries": [{"request": {}}]}})
        [{'request': {}}]
        >>> get_entries({})
        []
    """
    if not isinstance(har_data, dict):
        return []

    log = har_data.get("log")
    if not log:
        return []
    if not isinstance(log, dict):
        _LOGGER.warning("HAR 'log' is not an object, ignoring it")
        return []

    entries = log.get("entries")
    if not entries:
        return []
    if not isinstance(entries, list):
        _LOGGER.warning("HAR 'log.entries' is not an array, ignoring it")
        return []

    return entries


def safe_filename(url: str) -> str:
    """Derive a filesystem-safe filename from a URL.

    Query string and fragment are stripped, the last non-empty path
    segment is kept, and every character outside [a-zA-Z0-9._-] is
    replaced with "_".

    Args:
        url: Request URL

    Returns:
        Sanitized filename, "image" when nothing usable remains

    Example:
        >>> safe_filename("https://cdn.example.com/a/hero-web.jpg?w=200")
        'hero-web.jpg'
        >>> safe_filename("https://example.com/photos/my%20cat.png")
        'my_20cat.png'
    """
    name = url.split("?")[0].split("#")[0]
    segments = [segment for segment in name.split("/") if segment]
    name = segments[-1] if segments else DEFAULT_BASE_NAME
    return _UNSAFE_FILENAME_RE.sub("_", name) or DEFAULT_BASE_NAME


def compile_wildcard(pattern: str) -> re.Pattern[str]:
    """Compile a wildcard pattern into a case-insensitive regex.

    "*" matches any run of zero or more characters. Every other character
    matches literally.

    Args:
        pattern: Wildcard pattern such as "*-web.jpg"

    Returns:
        Compiled regex, to be used with fullmatch() against whole filenames
    """
    escaped = re.escape(pattern).replace(r"\*", ".*")
    return re.compile(escaped, re.IGNORECASE | re.DOTALL)


def matches_pattern(filename: str, patterns: Iterable[str]) -> bool:
    """Check whether a filename matches at least one wildcard pattern.

    Example:
        >>> matches_pattern("hero-WEB.JPG", ["*-web.jpg"])
        True
        >>> matches_pattern("hero.png", ["*-web.jpg", "logo*"])
        False
    """
    return _matches_any(filename, [compile_wildcard(pattern) for pattern in patterns])


def _matches_any(filename: str, regexes: Sequence[re.Pattern[str]]) -> bool:
    return any(regex.fullmatch(filename) for regex in regexes)


def _as_candidate(entry: Any, regexes: Sequence[re.Pattern[str]]) -> Candidate | None:
    """Build a candidate from a HAR entry, or None if it is filtered out."""
    if not isinstance(entry, dict):
        return None

    request = entry.get("request")
    response = entry.get("response")
    request_url = request.get("url") if isinstance(request, dict) else None
    content = response.get("content") if isinstance(response, dict) else None
    if not isinstance(content, dict):
        content = None

    mime_type = (content or {}).get("mimeType") or ""
    if not request_url or not isinstance(mime_type, str) or not mime_type.startswith("image/"):
        return None
    if content is None or not content.get("text"):
        return None

    base_name = safe_filename(str(request_url))
    if not _matches_any(base_name, regexes):
        return None

    return Candidate(
        request_url=str(request_url),
        content=content,
        mime_type=mime_type,
        base_name=base_name,
    )


def select_candidates(entries: Iterable[Any], patterns: Sequence[str]) -> list[Candidate]:
    """Select the image entries to extract, preserving entry order.

    An entry is selected when it has a request URL, an "image/" mime type,
    non-empty response text, and a derived filename matching one of the
    patterns.

    Args:
        entries: HAR log entries
        patterns: Wildcard filename patterns (logical OR)

    Returns:
        Ordered list of candidates
    """
    regexes = [compile_wildcard(pattern) for pattern in patterns]
    candidates: list[Candidate] = []
    for entry in entries:
        candidate = _as_candidate(entry, regexes)
        if candidate is not None:
            candidates.append(candidate)

    _LOGGER.debug("Selected %d image candidate(s)", len(candidates))
    return candidates
