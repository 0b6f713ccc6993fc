"""Terminal progress reporting for har-images CLI."""

from __future__ import annotations

from pathlib import Path

import typer

PROGRESS_BAR_WIDTH = 30
FILLED_CELL = "█"
EMPTY_CELL = "-"


def format_progress_bar(current: int, total: int, width: int = PROGRESS_BAR_WIDTH) -> str:
    """Render a progress bar line.

    Args:
        current: Number of files saved so far
        total: Number of files to save
        width: Number of bar cells

    Returns:
        Line such as "[█████-----] 1/2 (50%)"
    """
    percent = current * 100 // total if total else 0
    # Half-up rounding of percent * width / 100
    filled = (percent * width * 2 + 100) // 200
    bar = FILLED_CELL * filled + EMPTY_CELL * (width - filled)
    return f"[{bar}] {current}/{total} ({percent}%)"


def report_progress(current: int, total: int, path: Path | None = None, *, show_bar: bool = True) -> None:
    """Report extraction progress.

    With show_bar, the bar is redrawn in place and a newline is emitted
    once current reaches total. Otherwise one line is printed per saved file.
    """
    if show_bar:
        typer.echo("\r" + format_progress_bar(current, total), nl=False)
        if current == total:
            typer.echo()
        return

    typer.echo(f"  ✔ [{current}/{total}] Saved {path}")
