"""
Application constants and configuration.

DEFAULT_SETTINGS provides the built-in fallback for the user settings that the
settings module persists to settings.json.  All other constants control the
zoom mapping, the editor widget, and which files can be opened.

The ``config_dir()`` helper returns the platform-appropriate config
directory and is shared by all persistence modules.
"""

import os
import sys
from pathlib import Path

# =============================================================================
# APP IDENTITY & CONFIG DIRECTORY
# =============================================================================
APP_NAME = "image-crop-control"

# Environment variable read by app.main() to pick the root log level
LOG_LEVEL_ENV = "IMAGE_CROP_CONTROL_LOG_LEVEL"
LOG_LEVEL_DEFAULT = "WARNING"


def config_dir() -> Path:
    """Return the platform-appropriate config directory, creating it if needed."""
    if sys.platform == "win32":
        base = Path(os.environ.get("APPDATA", Path.home() / "AppData" / "Roaming"))
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
    directory = base / APP_NAME
    directory.mkdir(parents=True, exist_ok=True)
    return directory

# =============================================================================
# DEFAULT SETTINGS — Built-in fallback when settings.json is missing or corrupt
# =============================================================================
DEFAULT_OUTPUT_WIDTH = 512
DEFAULT_OUTPUT_HEIGHT = 512

# Card size on screen relative to the crop frame
THUMBNAIL_SCALE_MIN = 0.1
THUMBNAIL_SCALE_MAX = 2.0
THUMBNAIL_SCALE_DEFAULT = 0.5

DEFAULT_SETTINGS = {
    "output_width": DEFAULT_OUTPUT_WIDTH,
    "output_height": DEFAULT_OUTPUT_HEIGHT,
    "thumbnail_scale": THUMBNAIL_SCALE_DEFAULT,
    "default_ratio": "square",
}

# Largest output edge accepted by the size spin boxes
OUTPUT_SIZE_MAX = 8192

# =============================================================================
# ZOOM MAPPING
# =============================================================================
# Raw scale the editor treats as "image covers the frame"; invalid input resets here
DEFAULT_RAW_SCALE = 1.0

# Decimal places kept for the raw scale
SCALE_PRECISION = 2

# Range of the normalized zoom slider
PERCENT_MIN = 0
PERCENT_MAX = 100

# =============================================================================
# FILES & WIDGETS
# =============================================================================
IMAGE_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".tif", ".webp", ".psd"}

# Columns in the main window's card grid
GRID_COLUMNS = 4

# Background painted where the image does not cover the frame
EDITOR_BACKGROUND = (30, 30, 30)

# Narrowest card, so the zoom controls stay usable at small thumbnail scales
CARD_MIN_WIDTH = 200
