"""
Zoom mapping between the editor's raw scale and the user-facing percentage.

The editor consumes a multiplicative *raw scale* (1.0 means the image just
covers the crop frame).  Users see a *normalized percentage* in [0, 100]
that spans the legal range for the current image/frame pair:

* 0 % is ``min_percent``: the image's shorter:longer side ratio.
* 100 % is ``max_percent``: the image shown at its native resolution
  relative to the frame.

Bounds are expressed in raw-scale percent (``min_percent == 50`` means raw
scale 0.5).  Invalid input never raises; it resets the raw scale to
``DEFAULT_RAW_SCALE``.
"""

import logging
import math
import re
from dataclasses import replace

from image_crop_control.config import (
    DEFAULT_RAW_SCALE, SCALE_PRECISION, PERCENT_MIN, PERCENT_MAX,
)
from image_crop_control.models import Size, ZoomBounds, ZoomState

logger = logging.getLogger(__name__)

# Leading number of a string, the way a lenient float parse reads "42.5px"
_LEADING_NUMBER = re.compile(r"\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")

# Conversion range used before an image has loaded: percent maps 1:1 to raw percent
_UNLOADED_BOUNDS = ZoomBounds(PERCENT_MIN, PERCENT_MAX)


# =============================================================================
# Pure helpers
# =============================================================================
def parse_percent(text: str) -> float:
    """
    Parse user-typed percentage text.

    One literal ``%`` is stripped and the leading number is read, so
    ``"42%"`` and ``"42.5 %"`` both parse.  Returns NaN when no number is
    found.
    """
    match = _LEADING_NUMBER.match(text.replace("%", "", 1))
    if match is None:
        return math.nan
    return float(match.group(1))


def derive_bounds(image: Size, frame: Size) -> ZoomBounds:
    """Legal zoom range for *image* composited into *frame*."""
    min_percent = math.ceil(image.shorter / image.longer * 100)
    max_percent = math.floor(min(image.width / frame.width, image.height / frame.height) * 100)
    if max_percent < min_percent:
        # Image too small for the frame: collapse to a single legal point
        logger.debug(
            "Degenerate zoom range for image %sx%s in frame %sx%s (max %d < min %d)",
            image.width, image.height, frame.width, frame.height, max_percent, min_percent,
        )
        max_percent = min_percent
    return ZoomBounds(min_percent, max_percent)


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(value, high))


# =============================================================================
# Zoom mapper
# =============================================================================
class ZoomMapper:
    """Owns the ZoomState of one image entry.

    Unloaded until ``load()`` is called with the decoded image's dimensions;
    after that, ``set_frame()`` re-derives the bounds whenever the crop frame
    changes.  Every valid mutation is clamped to the legal range once loaded.
    """

    def __init__(self):
        self._state = ZoomState()
        self._image: Size | None = None
        self._frame: Size | None = None

    # --- State access ---

    @property
    def state(self) -> ZoomState:
        """A copy of the current zoom state."""
        return replace(self._state)

    @property
    def raw_scale(self) -> float:
        return self._state.raw_scale

    @property
    def bounds(self) -> ZoomBounds | None:
        return self._state.bounds

    @property
    def is_loaded(self) -> bool:
        return self._state.bounds is not None

    # --- Bounds ---

    def load(self, image: Size, frame: Size) -> ZoomBounds:
        """Record the loaded image's dimensions and derive the legal range."""
        self._image = image
        self._frame = frame
        return self._rederive()

    def set_frame(self, frame: Size) -> ZoomBounds | None:
        """Recompute bounds for a new crop frame.  Returns None while unloaded."""
        self._frame = frame
        if self._image is None:
            return None
        return self._rederive()

    def _rederive(self) -> ZoomBounds:
        bounds = derive_bounds(self._image, self._frame)
        self._state.bounds = bounds
        self._state.raw_scale = _clamp(self._state.raw_scale, bounds.min_scale, bounds.max_scale)
        logger.debug(
            "Zoom bounds %d..%d%%, raw scale %.2f",
            bounds.min_percent, bounds.max_percent, self._state.raw_scale,
        )
        return bounds

    # --- Mutation ---

    def set_from_raw_scale(self, value: float) -> float:
        """Set the raw scale.  Returns the value actually stored."""
        if not math.isfinite(value) or value < 0:
            return self._reset(value)
        value = round(value, SCALE_PRECISION)
        bounds = self._state.bounds
        if bounds is not None:
            value = _clamp(value, bounds.min_scale, bounds.max_scale)
        self._state.raw_scale = value
        return value

    def set_from_percent(self, value: str | float) -> float:
        """Set the zoom from a normalized percentage (text such as ``"42%"`` or a number)."""
        percent = parse_percent(value) if isinstance(value, str) else float(value)
        if math.isnan(percent) or percent < 0:
            return self._reset(value)
        if math.isinf(percent) and self.is_loaded:
            # Overflowing input saturates at the top of the range
            percent = PERCENT_MAX
        return self.set_from_raw_scale(self.percent_to_scale(percent))

    def _reset(self, rejected) -> float:
        logger.debug("Rejected zoom input %r; resetting raw scale to %s", rejected, DEFAULT_RAW_SCALE)
        self._state.raw_scale = DEFAULT_RAW_SCALE
        return DEFAULT_RAW_SCALE

    # --- Conversion ---

    def percent_to_scale(self, percent: float) -> float:
        """Inverse of the display formula, without rounding or clamping."""
        bounds = self._state.bounds or _UNLOADED_BOUNDS
        return (bounds.min_percent + percent / 100 * bounds.span) / 100

    def to_display_percent(self) -> int:
        """Normalized percentage of the current raw scale, clamped to [0, 100].

        Reads 0 while unloaded and for a degenerate range.
        """
        bounds = self._state.bounds
        if bounds is None or bounds.span == 0:
            return PERCENT_MIN
        percent = round((self._state.raw_scale * 100 - bounds.min_percent) / bounds.span * 100)
        return int(_clamp(percent, PERCENT_MIN, PERCENT_MAX))

    def display_text(self) -> str:
        """Text shown in the percent field, e.g. ``"33%"``."""
        return f"{self.to_display_percent()}%"
