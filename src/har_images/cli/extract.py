"""Interactive extract command for har-images CLI."""

from __future__ import annotations

import functools
import logging
from pathlib import Path

import typer

from har_images.cli.progress import report_progress
from har_images.config import (
    ExtractionConfig,
    normalize_zip_name,
    parse_patterns,
    parse_toggle,
    prepare_output_dir,
    resolve_source_path,
)
from har_images.extraction import InputError, ParseError, PayloadDecodeError
from har_images.extraction.workflow import (
    ExtractionWorkflowResult,
    archive_phase,
    extract_phase,
    scan_phase,
)
from har_images.settings import SettingsLoadError, load_defaults, load_mime_extensions

_LOGGER = logging.getLogger(__name__)


def extract(settings: Path | None = None) -> None:
    """Extract images from a HAR file, asking for each option interactively.

    Prompts for the HAR file, output directory, filename patterns, and
    whether to show a progress bar and build a ZIP archive. Matching images
    are written as 000-<name>, 001-<name>, ... in the output directory.

    Args:
        settings: Optional settings JSON overriding defaults and mime extensions

    Raises:
        typer.Exit: With code 1 on any fatal error
    """
    try:
        defaults = load_defaults(settings)
        extensions = load_mime_extensions(settings)

        config = collect_config(defaults)
        result = _scan(config)
        if result.nothing_matched:
            typer.echo("No images matched the given pattern(s).")
            return

        _extract(config, result, extensions)
    except InputError as e:
        _fail(str(e))
    except ParseError as e:
        _fail(f"Invalid JSON in HAR file: {e.msg} at line {e.lineno}")
    except PayloadDecodeError as e:
        _fail(str(e))
    except SettingsLoadError as e:
        _fail(f"Failed to load settings: {e}")
    except PermissionError as e:
        _fail(f"Permission denied: {e.filename}")
    except OSError as e:
        _fail(f"I/O error: {e}")

    typer.echo("Done.")


def collect_config(defaults: dict[str, str]) -> ExtractionConfig:
    """Ask the operator for every run option.

    The HAR path is checked and the output directory created as soon as
    they are answered.

    Raises:
        InputError: If the HAR file does not exist
        OSError: If the output directory cannot be created
    """
    source_path = resolve_source_path(typer.prompt("Path to HAR file").strip())

    output_answer = typer.prompt("Output directory", default=defaults["output_dir"]).strip()
    output_dir = prepare_output_dir(output_answer or defaults["output_dir"])

    patterns = parse_patterns(
        typer.prompt("Filename pattern(s)", default=defaults["patterns"]),
        default=defaults["patterns"],
    )

    show_progress = parse_toggle(_ask("Show progress bar? [Y/n]"), default=True)
    create_zip = parse_toggle(_ask("Create ZIP archive? [y/N]"), default=False)

    zip_name = defaults["zip_name"]
    if create_zip:
        zip_name = normalize_zip_name(
            typer.prompt("ZIP filename", default=defaults["zip_name"]),
            default=defaults["zip_name"],
        )

    return ExtractionConfig(
        source_path=source_path,
        output_dir=output_dir,
        patterns=patterns,
        show_progress=show_progress,
        create_zip=create_zip,
        zip_name=zip_name,
    )


def _ask(question: str) -> str:
    """Prompt with the default shown in the question; empty answers allowed."""
    answer: str = typer.prompt(question, default="", show_default=False)
    return answer.strip()


def _scan(config: ExtractionConfig) -> ExtractionWorkflowResult:
    """Read the HAR and report what was found."""
    typer.echo()
    typer.echo(f"Reading HAR: {config.source_path}")
    result = scan_phase(config)
    typer.echo(f"Found {result.entry_count} network entries in HAR.")
    return result


def _extract(
    config: ExtractionConfig,
    result: ExtractionWorkflowResult,
    extensions: dict[str, str],
) -> None:
    """Write the candidates, then the archive, reporting progress."""
    total = len(result.candidates)
    typer.echo()
    typer.echo(f"Will extract {total} image(s) matching: {', '.join(config.patterns)}")

    if config.show_progress:
        report_progress(0, total, show_bar=True)

    on_saved = functools.partial(report_progress, show_bar=config.show_progress)
    result = extract_phase(config, result, on_saved=on_saved, extensions=extensions)

    typer.echo()
    typer.echo(f"Extracted {len(result.files)} file(s) to {config.output_dir}")

    if config.create_zip and result.files:
        typer.echo("Creating ZIP archive...")
        result = archive_phase(config, result)
        typer.echo(f"ZIP written to: {result.archive_path}")


def _fail(message: str) -> None:
    """Report a fatal error on stderr and exit with status 1."""
    _LOGGER.debug("Extraction failed", exc_info=True)
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(1) from None
