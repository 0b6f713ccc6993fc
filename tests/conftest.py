"""Pytest configuration and fixtures for har-images tests."""

from __future__ import annotations

import base64
import json
from collections.abc import Iterator
from pathlib import Path

import pytest

from har_images.settings import clear_settings_cache


@pytest.fixture
def gif_bytes() -> bytes:
    """Smallest valid GIF, a real binary payload."""
    return base64.b64decode("R0lGODlhAQABAIAAAAAAAP///yH5BAEAAAAALAAAAAABAAEAAAIBRAA7")


@pytest.fixture(autouse=True)
def _fresh_settings_cache() -> Iterator[None]:
    """Start every test with an empty settings cache."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def image_entry():
    """Create a HAR entry whose response is an embedded image."""

    def _create_entry(
        url: str = "https://cdn.example.com/img/hero-web.jpg",
        data: bytes | str = b"\xff\xd8\xff\xe0jpeg",
        mime_type: str = "image/jpeg",
        encoding: str | None = "base64",
    ) -> dict:
        if encoding == "base64" and isinstance(data, bytes):
            text = base64.b64encode(data).decode("ascii")
        else:
            text = data if isinstance(data, str) else data.decode("utf-8")

        content: dict = {"size": len(text), "mimeType": mime_type, "text": text}
        if encoding:
            content["encoding"] = encoding
        return {
            "request": {"method": "GET", "url": url, "headers": []},
            "response": {"status": 200, "headers": [], "content": content},
        }

    return _create_entry


@pytest.fixture
def write_har(tmp_path: Path):
    """Write a HAR file with the given entries and return its path."""

    def _write(entries: list[dict] | None = None, name: str = "capture.har") -> Path:
        har_data = {
            "log": {
                "version": "1.2",
                "creator": {"name": "test", "version": "1.0"},
                "entries": entries or [],
            }
        }
        har_file = tmp_path / name
        har_file.write_text(json.dumps(har_data), encoding="utf-8")
        return har_file

    return _write
