"""Main CLI entry point for har-images.

Runs the interactive extraction: asks for a HAR file and options, then
writes every matching embedded image to disk.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated

import typer

from har_images.cli.extract import extract

app = typer.Typer(
    name="har-images",
    help="Extract embedded images from HAR files.",
    add_completion=False,
)


def version_callback(value: bool) -> None:
    """Print version and exit.

    Args:
        value: True if --version flag was provided
    """
    if value:
        from har_images import __version__

        typer.echo(f"har-images {__version__}")
        raise typer.Exit()


@app.command()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    settings: Annotated[
        Path | None,
        typer.Option("--settings", "-s", help="Settings JSON overriding prompt defaults and mime extensions"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log debug details to stderr"),
    ] = False,
) -> None:
    r"""Extract embedded images from a HAR file.

    All options are asked interactively; press Enter to accept a default.

    \b
    Examples:
        har-images
        har-images --settings my-settings.json
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    extract(settings)


if __name__ == "__main__":
    app()
