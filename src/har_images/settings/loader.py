"""Settings loading utilities.

This module provides functions to load prompt defaults and the mime type
to file extension table from JSON files, optionally merged with a
user-supplied settings file.
"""

from __future__ import annotations

import json
import logging
from collections import OrderedDict
from pathlib import Path
from typing import Any

_LOGGER = logging.getLogger(__name__)

# Maximum number of cache entries to prevent unbounded growth
_MAX_CACHE_SIZE = 20

# LRU cache for loaded settings (OrderedDict for LRU behavior)
_settings_cache: OrderedDict[str, Any] = OrderedDict()


def _cache_get(key: str) -> Any | None:
    """Get value from cache, moving it to end (most recently used)."""
    if key in _settings_cache:
        _settings_cache.move_to_end(key)
        return _settings_cache[key]
    return None


def _cache_set(key: str, value: Any) -> None:
    """Set value in cache with LRU eviction."""
    if key in _settings_cache:
        _settings_cache.move_to_end(key)
    _settings_cache[key] = value
    while len(_settings_cache) > _MAX_CACHE_SIZE:
        evicted_key = next(iter(_settings_cache))
        _settings_cache.pop(evicted_key)
        _LOGGER.debug("Settings cache evicted: %s", evicted_key)


class SettingsLoadError(Exception):
    """Raised when settings files cannot be loaded."""


def _get_builtin_path(filename: str) -> Path:
    """Get path to a built-in settings file.

    Args:
        filename: Name of the settings file (e.g., "defaults.json")

    Returns:
        Path to the built-in settings file
    """
    return Path(__file__).parent / filename


def _normalize_path(path: Path | str | None) -> str | None:
    """Normalize a path to a string for cache key consistency."""
    if path is None:
        return None
    return str(Path(path).resolve())


def load_json_file(path: Path | str) -> dict[str, Any]:
    """Load a JSON settings file with error handling.

    Args:
        path: Path to the JSON file

    Returns:
        Parsed JSON data

    Raises:
        SettingsLoadError: If file cannot be read, parsed, or is not an object
    """
    path_str = str(path)
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise SettingsLoadError(f"Settings file not found: {path_str}") from e
    except PermissionError as e:
        raise SettingsLoadError(f"Permission denied reading settings file: {path_str}") from e
    except json.JSONDecodeError as e:
        raise SettingsLoadError(f"Invalid JSON in settings file {path_str}: {e}") from e

    if not isinstance(data, dict):
        raise SettingsLoadError(f"Settings file {path_str} must contain a JSON object")
    result: dict[str, Any] = data
    return result


def load_defaults(custom_path: Path | str | None = None) -> dict[str, str]:
    """Load prompt defaults.

    Args:
        custom_path: Optional path to a settings file whose "defaults"
            section overrides the built-in values

    Returns:
        Dict with 'output_dir', 'patterns' and 'zip_name' keys

    Raises:
        SettingsLoadError: If the custom settings file cannot be loaded
    """
    normalized = _normalize_path(custom_path)
    cache_key = f"defaults:{normalized}"
    cached = _cache_get(cache_key)
    if cached is not None:
        result: dict[str, str] = cached
        return result

    builtin = load_json_file(_get_builtin_path("defaults.json"))
    defaults = {key: value for key, value in builtin.items() if not key.startswith("_")}

    if custom_path:
        custom = load_json_file(custom_path).get("defaults", {})
        if isinstance(custom, dict):
            for key, value in custom.items():
                if key in defaults and isinstance(value, str) and value.strip():
                    defaults[key] = value.strip()
                else:
                    _LOGGER.warning("Ignoring unknown or empty default: %s", key)

    _cache_set(cache_key, defaults)
    return defaults


def load_mime_extensions(custom_path: Path | str | None = None) -> dict[str, str]:
    """Load the mime type to file extension table.

    Args:
        custom_path: Optional path to a settings file whose "extensions"
            section is merged over the built-in table

    Returns:
        Dict mapping lowercase mime types to extensions with a leading dot

    Raises:
        SettingsLoadError: If the custom settings file cannot be loaded
    """
    normalized = _normalize_path(custom_path)
    cache_key = f"mime:{normalized}"
    cached = _cache_get(cache_key)
    if cached is not None:
        result: dict[str, str] = cached
        return result

    builtin = load_json_file(_get_builtin_path("mime_types.json"))
    extensions: dict[str, str] = dict(builtin["extensions"])

    if custom_path:
        custom = load_json_file(custom_path).get("extensions", {})
        if isinstance(custom, dict):
            for mime, ext in custom.items():
                if mime.startswith("_") or not isinstance(ext, str):
                    continue
                if ext and not ext.startswith("."):
                    ext = f".{ext}"
                extensions[mime.lower()] = ext

    _cache_set(cache_key, extensions)
    return extensions


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing or when settings files have been modified.
    """
    _settings_cache.clear()
