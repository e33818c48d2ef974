"""
Capability interface for the image editor that renders a crop entry.

The crop core never holds a concrete widget.  A ``CropEntry`` is handed any
object with this shape; ``editor_widget.ImageEditorWidget`` is the Qt one and
tests pass a mock.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from image_crop_control.models import Size

if TYPE_CHECKING:
    from PyQt6.QtGui import QImage


class ImageEditor(Protocol):
    """What a crop entry needs from the widget that draws it."""

    def load(self, path: Path) -> None:
        """Start decoding *path*; completion is reported asynchronously."""

    def natural_dimensions(self) -> Size | None:
        """Natural size of the decoded image, or None before it has loaded."""

    def set_frame(self, frame: Size) -> None:
        """Resize the crop frame the image is composited into."""

    def set_zoom(self, value: float) -> None:
        """Apply a raw scale (1.0 == image just covers the frame)."""

    def render_sync(self) -> "QImage":
        """Composite the current crop into a frame-sized image."""
