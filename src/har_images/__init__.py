"""Extract embedded images from HAR files.

This library provides tools for:
- Selecting image responses in HAR files by filename pattern
- Writing their decoded payloads to disk with indexed filenames
- Bundling the extracted files into a ZIP archive

Example usage:
    from har_images import get_entries, load_har_file, select_candidates

    entries = get_entries(load_har_file("session.har"))
    candidates = select_candidates(entries, ["*-web.jpg"])

    # Or run every phase at once
    from har_images import ExtractionConfig, run_extraction_workflow
    result = run_extraction_workflow(config)
"""

from __future__ import annotations

__version__ = "0.1.0"

# Re-export public API for convenience
from har_images.config import ExtractionConfig
from har_images.extraction import (
    get_entries,
    load_har_file,
    matches_pattern,
    materialize_candidates,
    select_candidates,
)
from har_images.extraction.workflow import run_extraction_workflow

__all__ = [
    "__version__",
    "ExtractionConfig",
    "get_entries",
    "load_har_file",
    "matches_pattern",
    "materialize_candidates",
    "select_candidates",
    "run_extraction_workflow",
]
