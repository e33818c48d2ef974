"""
Settings persistence: load, save, and validate user settings.

Settings are stored in a JSON file in the user's config directory (provided
by ``config.config_dir()``).  On first launch (or if the file is
missing/corrupt), the file is created from DEFAULT_SETTINGS.  This module is
Qt-free.

The on-disk format uses a versioned envelope::

    {"version": 1, "settings": {"output_width": 512, ...}}
"""

import json
import logging
import math
from copy import deepcopy
from pathlib import Path

from image_crop_control.config import (
    DEFAULT_SETTINGS, OUTPUT_SIZE_MAX,
    THUMBNAIL_SCALE_MIN, THUMBNAIL_SCALE_MAX, config_dir,
)
from image_crop_control.models import AspectRatio, Size

logger = logging.getLogger(__name__)

_SETTINGS_FILENAME = "settings.json"
_FORMAT_VERSION = 1

_REQUIRED_KEYS = set(DEFAULT_SETTINGS)
_SIZE_KEYS = ("output_width", "output_height")


# =============================================================================
# Config directory helpers
# =============================================================================
def _settings_path() -> Path:
    """Return the full path to settings.json."""
    return config_dir() / _SETTINGS_FILENAME


# =============================================================================
# Validation
# =============================================================================
def validate_settings(data: object) -> list[str]:
    """
    Validate a settings dict.

    Returns a list of error strings (empty means valid).
    """
    errors: list[str] = []

    if not isinstance(data, dict):
        errors.append("Settings must be a dict")
        return errors

    missing = _REQUIRED_KEYS - data.keys()
    if missing:
        errors.append(f"missing keys: {', '.join(sorted(missing))}")
        return errors

    for key in _SIZE_KEYS:
        val = data[key]
        if not isinstance(val, int) or isinstance(val, bool) or not 0 < val <= OUTPUT_SIZE_MAX:
            errors.append(f"{key} must be an integer in 1..{OUTPUT_SIZE_MAX}, got {val!r}")

    scale = data["thumbnail_scale"]
    if (
        not isinstance(scale, (int, float)) or isinstance(scale, bool)
        or not math.isfinite(scale)
        or not THUMBNAIL_SCALE_MIN <= scale <= THUMBNAIL_SCALE_MAX
    ):
        errors.append(
            f"thumbnail_scale must be a number in {THUMBNAIL_SCALE_MIN}..{THUMBNAIL_SCALE_MAX}, "
            f"got {scale!r}"
        )

    ratio = data["default_ratio"]
    valid_keys = [r.value for r in AspectRatio]
    if ratio not in valid_keys:
        errors.append(f"default_ratio must be one of {', '.join(valid_keys)}, got {ratio!r}")

    return errors


# =============================================================================
# Load / Save
# =============================================================================
def load_settings() -> dict:
    """
    Load settings from settings.json.

    If the file is missing, corrupt, or fails validation, writes the
    defaults and returns them.  Unknown keys are dropped.
    """
    path = _settings_path()

    if not path.exists():
        logger.info("settings.json not found; creating with defaults at %s", path)
        _write_defaults(path)
        return deepcopy(DEFAULT_SETTINGS)

    try:
        text = path.read_text(encoding="utf-8")
        raw = json.loads(text)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Failed to read settings.json (%s); restoring defaults", exc)
        _write_defaults(path)
        return deepcopy(DEFAULT_SETTINGS)

    # Extract settings dict from version envelope
    if not isinstance(raw, dict) or raw.get("version") != _FORMAT_VERSION or "settings" not in raw:
        logger.warning("settings.json missing version envelope; restoring defaults")
        _write_defaults(path)
        return deepcopy(DEFAULT_SETTINGS)

    data = raw["settings"]
    errors = validate_settings(data)
    if errors:
        logger.warning(
            "settings.json validation failed:\n  %s\nRestoring defaults.",
            "\n  ".join(errors),
        )
        _write_defaults(path)
        return deepcopy(DEFAULT_SETTINGS)

    return {key: data[key] for key in DEFAULT_SETTINGS}


def save_settings(settings: dict) -> None:
    """
    Validate and write settings to settings.json in versioned envelope.

    Raises ValueError if validation fails.
    Raises OSError if the file cannot be written.
    """
    errors = validate_settings(settings)
    if errors:
        raise ValueError("Invalid settings:\n  " + "\n  ".join(errors))

    envelope = {"version": _FORMAT_VERSION, "settings": {key: settings[key] for key in DEFAULT_SETTINGS}}
    path = _settings_path()
    path.write_text(json.dumps(envelope, indent=2, ensure_ascii=False), encoding="utf-8")
    logger.info("Saved settings to %s", path)


def _write_defaults(path: Path) -> None:
    """Write DEFAULT_SETTINGS to the given path in versioned envelope."""
    try:
        envelope = {"version": _FORMAT_VERSION, "settings": deepcopy(DEFAULT_SETTINGS)}
        path.write_text(
            json.dumps(envelope, indent=2, ensure_ascii=False),
            encoding="utf-8",
        )
    except OSError as exc:
        logger.error("Could not write default settings to %s: %s", path, exc)


# =============================================================================
# Typed accessors
# =============================================================================
def output_size_of(settings: dict) -> Size:
    return Size(settings["output_width"], settings["output_height"])


def default_ratio_of(settings: dict) -> AspectRatio:
    return AspectRatio.from_key(settings["default_ratio"])
