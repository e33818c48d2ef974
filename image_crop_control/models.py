"""
Data models shared by the crop geometry, the zoom mapper and the UI.

``Size`` is the immutable pixel-dimension value used for output sizes, crop
frames and image dimensions alike.  ``AspectRatio`` is the closed set of crop
shapes offered to the user, and ``ZoomState`` is the per-image zoom record
owned by a ``ZoomMapper``.
"""

import math
from dataclasses import dataclass
from enum import Enum

from image_crop_control.config import DEFAULT_RAW_SCALE


# =============================================================================
# Data classes
# =============================================================================
@dataclass(frozen=True)
class Size:
    """Positive pixel dimensions."""
    width: float
    height: float

    def __post_init__(self):
        for name in ("width", "height"):
            value = getattr(self, name)
            if not math.isfinite(value) or value <= 0:
                raise ValueError(f"Size {name} must be a positive number, got {value!r}")

    @property
    def shorter(self) -> float:
        return min(self.width, self.height)

    @property
    def longer(self) -> float:
        return max(self.width, self.height)

    def to_int(self) -> tuple[int, int]:
        """Round to whole pixels, never below 1."""
        return max(1, round(self.width)), max(1, round(self.height))


class AspectRatio(Enum):
    """Crop-frame shapes.  The value is the key persisted in settings."""
    SQUARE = "square"
    PORTRAIT_3X4 = "3:4"
    LANDSCAPE_4X3 = "4:3"

    @property
    def label(self) -> str:
        """Button label, e.g. ``"1:1"``."""
        return _RATIO_LABELS[self]

    @classmethod
    def from_key(cls, key: str) -> "AspectRatio":
        """Look up a ratio by its persisted key.  Raises ValueError if unknown."""
        return cls(key)


_RATIO_LABELS = {
    AspectRatio.SQUARE: "1:1",
    AspectRatio.PORTRAIT_3X4: "3:4",
    AspectRatio.LANDSCAPE_4X3: "4:3",
}


@dataclass(frozen=True)
class ZoomBounds:
    """Legal normalized range, in raw-scale percent (100 == raw scale 1.0)."""
    min_percent: int
    max_percent: int

    @property
    def span(self) -> int:
        return self.max_percent - self.min_percent

    @property
    def min_scale(self) -> float:
        return self.min_percent / 100

    @property
    def max_scale(self) -> float:
        return self.max_percent / 100


@dataclass
class ZoomState:
    """Zoom for one loaded image.  Bounds are None until the image has loaded."""
    raw_scale: float = DEFAULT_RAW_SCALE
    bounds: ZoomBounds | None = None

    @property
    def min_percent(self) -> int | None:
        return self.bounds.min_percent if self.bounds else None

    @property
    def max_percent(self) -> int | None:
        return self.bounds.max_percent if self.bounds else None
