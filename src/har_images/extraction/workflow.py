"""Extraction workflow orchestration.

This module provides the business logic for the extraction workflow,
separated from CLI concerns for testability.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from har_images.config import ExtractionConfig
from har_images.extraction.har import Candidate, get_entries, load_har_file, select_candidates
from har_images.extraction.materialize import (
    ArchiveBuilder,
    ExtractedFile,
    SavedCallback,
    materialize_candidates,
)

# =============================================================================
# Phase-specific result types
# =============================================================================


@dataclass
class ScanResult:
    """Result of reading and filtering the HAR file.

    Attributes:
        entry_count: Number of network entries in the HAR
        candidates: Image entries selected for extraction
    """

    entry_count: int = 0
    candidates: list[Candidate] = field(default_factory=list)


@dataclass
class ExtractResult:
    """Result of writing the candidates to disk.

    Attributes:
        files: Files written, in extraction order
        archive: Accumulator holding the same payloads, when zip was requested
    """

    files: list[ExtractedFile] = field(default_factory=list)
    archive: ArchiveBuilder | None = None


# =============================================================================
# Workflow context - composes phase results
# =============================================================================


@dataclass
class ExtractionWorkflowResult:
    """Result of an extraction workflow execution.

    Check the phase field to determine how far the workflow progressed.

    Attributes:
        phase: Current phase of the workflow
        scan: Result of the scan phase (None if not reached)
        extract: Result of the extract phase (None if not reached)
        archive_path: Path of the written ZIP archive, if any
    """

    phase: str = "init"
    scan: ScanResult | None = None
    extract: ExtractResult | None = None
    archive_path: Path | None = None

    @property
    def entry_count(self) -> int:
        """Number of network entries in the HAR."""
        return self.scan.entry_count if self.scan else 0

    @property
    def candidates(self) -> list[Candidate]:
        """Image entries selected for extraction."""
        return self.scan.candidates if self.scan else []

    @property
    def files(self) -> list[ExtractedFile]:
        """Files written to the output directory."""
        return self.extract.files if self.extract else []

    @property
    def nothing_matched(self) -> bool:
        """True once scanning found no image to extract."""
        return self.scan is not None and not self.scan.candidates


# =============================================================================
# Phase functions
# =============================================================================


def scan_phase(
    config: ExtractionConfig,
    result: ExtractionWorkflowResult | None = None,
) -> ExtractionWorkflowResult:
    """Read the HAR file and select candidates.

    Raises:
        InputError: If the HAR file does not exist
        ParseError: If the HAR file is not valid JSON
    """
    if result is None:
        result = ExtractionWorkflowResult()
    result.phase = "scan"

    entries = get_entries(load_har_file(config.source_path))
    result.scan = ScanResult(
        entry_count=len(entries),
        candidates=select_candidates(entries, config.patterns),
    )
    return result


def extract_phase(
    config: ExtractionConfig,
    result: ExtractionWorkflowResult,
    on_saved: SavedCallback | None = None,
    extensions: dict[str, str] | None = None,
) -> ExtractionWorkflowResult:
    """Write every candidate to the output directory.

    Raises:
        PayloadDecodeError: If a payload cannot be decoded
        OSError: If a file cannot be written
    """
    result.phase = "extract"

    archive = ArchiveBuilder() if config.create_zip else None
    files = materialize_candidates(
        result.candidates,
        config.output_dir,
        archive=archive,
        on_saved=on_saved,
        extensions=extensions,
    )
    result.extract = ExtractResult(files=files, archive=archive)
    return result


def archive_phase(
    config: ExtractionConfig,
    result: ExtractionWorkflowResult,
) -> ExtractionWorkflowResult:
    """Write the ZIP archive when requested and at least one file was extracted.

    Raises:
        OSError: If the archive cannot be written
    """
    result.phase = "archive"

    archive = result.extract.archive if result.extract else None
    if archive is not None and len(archive) > 0:
        result.archive_path = archive.write(config.zip_path)
    return result


def run_extraction_workflow(
    config: ExtractionConfig,
    on_saved: SavedCallback | None = None,
    extensions: dict[str, str] | None = None,
) -> ExtractionWorkflowResult:
    """Run the complete extraction workflow.

    This function orchestrates all phases:
    1. Read the HAR and select candidates
    2. Write candidates to the output directory
    3. Write the ZIP archive (if requested)

    Errors are not caught; the first failure propagates to the caller.

    Args:
        config: Run configuration
        on_saved: Optional callback invoked after each file is written
        extensions: Mime to extension table (loads the built-in table if None)

    Returns:
        ExtractionWorkflowResult with phase "complete", or "scan" when
        nothing matched

    Example:
        >>> result = run_extraction_workflow(config)
        >>> if result.nothing_matched:
        ...     print("No images matched")
        >>> for extracted in result.files:
        ...     print(extracted.path)
    """
    result = scan_phase(config)
    if result.nothing_matched:
        return result

    result = extract_phase(config, result, on_saved=on_saved, extensions=extensions)
    result = archive_phase(config, result)
    result.phase = "complete"
    return result
