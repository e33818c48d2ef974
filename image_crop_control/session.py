"""
Per-image crop state and the working set of images being cropped.

A ``CropEntry`` owns everything that belongs to one image: the selected
aspect ratio, the output size its frame is derived from, the ``ZoomMapper``
and the injected editor.  ``CropSession`` is the list of live entries; removing
an entry drops it (and its zoom state) for good, and a removed entry ignores
any late editor callbacks.

This module imports no Qt; the editor it is handed may be a Qt widget.
"""

import logging
from pathlib import Path
from typing import Callable

from image_crop_control.aspect import compute_frame
from image_crop_control.editor import ImageEditor
from image_crop_control.models import AspectRatio, Size, ZoomBounds
from image_crop_control.zoom import ZoomMapper

logger = logging.getLogger(__name__)


# =============================================================================
# Crop entry
# =============================================================================
class CropEntry:
    """State for one image in the working set."""

    def __init__(
        self,
        path: Path,
        output_size: Size,
        editor: ImageEditor,
        ratio: AspectRatio = AspectRatio.SQUARE,
    ):
        self.path = path
        self.editor = editor
        self._output_size = output_size
        self._ratio = ratio
        self._image: Size | None = None
        self._zoom = ZoomMapper()
        self._discarded = False

    # --- Read access ---

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def ratio(self) -> AspectRatio:
        return self._ratio

    @property
    def output_size(self) -> Size:
        return self._output_size

    @property
    def frame(self) -> Size:
        """Crop frame for the current ratio; recomputed on every read."""
        return compute_frame(self._output_size, self._ratio)

    @property
    def image_dimensions(self) -> Size | None:
        return self._image

    @property
    def zoom(self) -> ZoomMapper:
        return self._zoom

    @property
    def bounds(self) -> ZoomBounds | None:
        return self._zoom.bounds

    @property
    def raw_scale(self) -> float:
        return self._zoom.raw_scale

    @property
    def is_loaded(self) -> bool:
        return self._image is not None

    @property
    def discarded(self) -> bool:
        return self._discarded

    def display_percent(self) -> int:
        return self._zoom.to_display_percent()

    def display_text(self) -> str:
        return self._zoom.display_text()

    # --- Lifecycle ---

    def start(self):
        """Push the initial frame and zoom to the editor and begin loading."""
        self.editor.set_frame(self.frame)
        self.editor.set_zoom(self._zoom.raw_scale)
        self.editor.load(self.path)

    def on_load_success(self, natural: Size, resource: Size | None = None):
        """Editor callback: the image has decoded.  Only the first call counts."""
        if self._discarded:
            logger.debug("Ignoring load of discarded entry %s", self.name)
            return
        if self._image is not None:
            logger.debug("Ignoring repeated load callback for %s", self.name)
            return
        # Decoded bitmap dimensions stand in for natural ones when both are given
        self._image = resource if resource is not None else natural
        bounds = self._zoom.load(self._image, self.frame)
        logger.info(
            "Loaded %s (%sx%s): zoom range %d..%d%%",
            self.name, self._image.width, self._image.height,
            bounds.min_percent, bounds.max_percent,
        )
        self._push_zoom()

    def discard(self):
        """Mark the entry removed; further events are ignored."""
        self._discarded = True

    # --- User actions ---

    def select_ratio(self, ratio: AspectRatio):
        if self._discarded or ratio is self._ratio:
            return
        self._ratio = ratio
        self._frame_changed()

    def set_output_size(self, output_size: Size):
        if self._discarded or output_size == self._output_size:
            return
        self._output_size = output_size
        self._frame_changed()

    def set_raw_scale(self, value: float) -> float:
        if self._discarded:
            return self._zoom.raw_scale
        self._zoom.set_from_raw_scale(value)
        self._push_zoom()
        return self._zoom.raw_scale

    def set_percent(self, value: str | float) -> float:
        if self._discarded:
            return self._zoom.raw_scale
        self._zoom.set_from_percent(value)
        self._push_zoom()
        return self._zoom.raw_scale

    def _frame_changed(self):
        frame = self.frame
        self.editor.set_frame(frame)
        if self._zoom.set_frame(frame) is not None:
            self._push_zoom()

    def _push_zoom(self):
        self.editor.set_zoom(self._zoom.raw_scale)


# =============================================================================
# Working set
# =============================================================================
class CropSession:
    """Ordered working set of crop entries sharing one output size."""

    def __init__(self, output_size: Size, default_ratio: AspectRatio = AspectRatio.SQUARE):
        self._output_size = output_size
        self._default_ratio = default_ratio
        self._entries: list[CropEntry] = []

    @property
    def output_size(self) -> Size:
        return self._output_size

    @property
    def default_ratio(self) -> AspectRatio:
        return self._default_ratio

    @property
    def entries(self) -> list[CropEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def add(self, path: Path, editor_factory: Callable[[Size], ImageEditor]) -> CropEntry:
        """Create an entry for *path*, its editor built for the initial frame."""
        frame = compute_frame(self._output_size, self._default_ratio)
        entry = CropEntry(path, self._output_size, editor_factory(frame), self._default_ratio)
        self._entries.append(entry)
        logger.debug("Added %s (%d entries)", path.name, len(self._entries))
        return entry

    def remove(self, entry: CropEntry) -> bool:
        """Drop *entry* from the working set.  Returns False if it was not present."""
        try:
            self._entries.remove(entry)
        except ValueError:
            return False
        entry.discard()
        logger.debug("Removed %s (%d entries)", entry.name, len(self._entries))
        return True

    def clear(self):
        for entry in self._entries:
            entry.discard()
        self._entries.clear()

    def set_output_size(self, output_size: Size):
        """Apply a new output size to every live entry."""
        self._output_size = output_size
        for entry in self._entries:
            entry.set_output_size(output_size)

    def set_default_ratio(self, ratio: AspectRatio):
        """Ratio given to entries added from now on."""
        self._default_ratio = ratio
