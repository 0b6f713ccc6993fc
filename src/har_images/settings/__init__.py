"""Settings loading for prompt defaults and mime type extensions.

This module provides:
- Loading of built-in prompt defaults and the mime extension table from JSON
- Merging of a user-supplied settings file over the built-ins
"""

from __future__ import annotations

from har_images.settings.loader import (
    SettingsLoadError,
    clear_settings_cache,
    load_defaults,
    load_json_file,
    load_mime_extensions,
)

__all__ = [
    "load_defaults",
    "load_mime_extensions",
    "load_json_file",
    "clear_settings_cache",
    "SettingsLoadError",
]
