"""CLI for har-images.

This module provides a Typer-based CLI that interactively extracts
embedded images from HAR files.
"""

from __future__ import annotations
