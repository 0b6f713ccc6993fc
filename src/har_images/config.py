"""Run configuration for image extraction.

Holds the immutable ExtractionConfig and the helpers that turn raw
operator answers into its fields.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from har_images.extraction.har import InputError

_LOGGER = logging.getLogger(__name__)

_NO_RE = re.compile(r"^no?$", re.IGNORECASE)
_YES_RE = re.compile(r"^y(es)?$", re.IGNORECASE)

ZIP_SUFFIX = ".zip"


@dataclass(frozen=True)
class ExtractionConfig:
    """Configuration for a single extraction run.

    Attributes:
        source_path: Absolute path to the HAR file
        output_dir: Absolute path of the directory receiving the images
        patterns: Wildcard filename patterns (at least one)
        show_progress: Redraw a progress bar instead of per-file lines
        create_zip: Also bundle the extracted files into a ZIP archive
        zip_name: Archive filename, resolved against the working directory
    """

    source_path: Path
    output_dir: Path
    patterns: tuple[str, ...]
    show_progress: bool = True
    create_zip: bool = False
    zip_name: str = "images.zip"

    @property
    def zip_path(self) -> Path:
        """Absolute path the ZIP archive is written to."""
        return Path(self.zip_name).resolve()


def resolve_source_path(value: str) -> Path:
    """Resolve the HAR file path and check it exists.

    Raises:
        InputError: If nothing exists at the resolved path
    """
    path = Path(value).resolve()
    if not path.exists():
        raise InputError(path)
    return path


def prepare_output_dir(value: str) -> Path:
    """Resolve the output directory and create it with its parents.

    Raises:
        OSError: If the directory cannot be created
    """
    path = Path(value).resolve()
    path.mkdir(parents=True, exist_ok=True)
    _LOGGER.debug("Output directory ready: %s", path)
    return path


def parse_patterns(value: str, default: str = "*-web.jpg") -> tuple[str, ...]:
    """Split a comma-separated pattern answer into trimmed patterns.

    Example:
        >>> parse_patterns(" *-web.jpg, ,logo*.png ")
        ('*-web.jpg', 'logo*.png')
        >>> parse_patterns("")
        ('*-web.jpg',)
    """
    patterns = tuple(p.strip() for p in (value or default).split(",") if p.strip())
    if not patterns:
        patterns = tuple(p.strip() for p in default.split(",") if p.strip())
    return patterns


def parse_toggle(value: str, *, default: bool) -> bool:
    """Interpret a yes/no answer.

    A default-yes toggle is only turned off by "n" or "no"; a default-no
    toggle is only turned on by "y" or "yes". Case is ignored.

    Example:
        >>> parse_toggle("NO", default=True)
        False
        >>> parse_toggle("maybe", default=True)
        True
        >>> parse_toggle("Yes", default=False)
        True
    """
    value = value.strip()
    if default:
        return not _NO_RE.match(value)
    return bool(_YES_RE.match(value))


def normalize_zip_name(value: str, default: str = "images.zip") -> str:
    """Return the archive filename, appending ".zip" when missing.

    Example:
        >>> normalize_zip_name("photos")
        'photos.zip'
        >>> normalize_zip_name("Photos.ZIP")
        'Photos.ZIP'
    """
    name = value.strip() or default
    if not name.lower().endswith(ZIP_SUFFIX):
        name += ZIP_SUFFIX
    return name
