"""Image extraction from HAR files.

Exports:
    - load_har_file / get_entries: Read a HAR and list its entries
    - select_candidates: Pick image entries matching filename patterns
    - materialize_candidates: Decode and write candidates to disk
    - ArchiveBuilder: Bundle written payloads into a ZIP archive
    - run_extraction_workflow: Run all phases for an ExtractionConfig
"""

from __future__ import annotations

from har_images.extraction.har import (
    Candidate,
    HarImagesError,
    InputError,
    ParseError,
    compile_wildcard,
    get_entries,
    load_har_file,
    matches_pattern,
    safe_filename,
    select_candidates,
)
from har_images.extraction.materialize import (
    ArchiveBuilder,
    ExtractedFile,
    PayloadDecodeError,
    decode_content,
    extension_from_mime,
    materialize_candidates,
    output_filename,
)

__all__ = [
    # Loading and filtering
    "load_har_file",
    "get_entries",
    "safe_filename",
    "compile_wildcard",
    "matches_pattern",
    "select_candidates",
    "Candidate",
    # Writing
    "decode_content",
    "extension_from_mime",
    "output_filename",
    "materialize_candidates",
    "ArchiveBuilder",
    "ExtractedFile",
    # Errors
    "HarImagesError",
    "InputError",
    "ParseError",
    "PayloadDecodeError",
]
