"""
Qt-free image I/O utilities for the editor widget.

Opens source images (PSD via psd-tools, everything else via Pillow).  The
crop core never calls into this module; only the editor's background loader
and the file picker do.
"""

from pathlib import Path

from PIL import Image
from psd_tools import PSDImage

from image_crop_control.config import IMAGE_EXTENSIONS

# Allow very large images (Pillow's default limit is ~178MP)
Image.MAX_IMAGE_PIXELS = None


def is_supported(path: Path) -> bool:
    """True if *path* has an extension the editor can open."""
    return path.suffix.lower() in IMAGE_EXTENSIONS


def open_image(path: Path) -> Image.Image:
    """Open an image file, using psd-tools for PSD and Pillow for the rest."""
    if path.suffix.lower() == ".psd":
        psd = PSDImage.open(str(path))
        return psd.composite()
    return Image.open(path)


def file_dialog_filter() -> str:
    """Name filter for QFileDialog, e.g. ``"Images (*.bmp *.gif ...)"``."""
    patterns = " ".join(f"*{ext}" for ext in sorted(IMAGE_EXTENSIONS))
    return f"Images ({patterns})"
