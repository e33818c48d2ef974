"""
Crop-frame geometry.

The frame is always built from the shorter side of the requested output
size, so switching ratio never grows the frame past the output box.  Nothing
here is cached: callers recompute the frame whenever the ratio or the output
size changes.
"""

from image_crop_control.models import AspectRatio, Size


def compute_frame(output_size: Size, ratio: AspectRatio) -> Size:
    """Crop-frame dimensions for *ratio* inside *output_size*."""
    base = min(output_size.width, output_size.height)
    if ratio is AspectRatio.PORTRAIT_3X4:
        return Size(base * 3 / 4, base)
    if ratio is AspectRatio.LANDSCAPE_4X3:
        return Size(base, base * 3 / 4)
    return Size(base, base)


def display_size(frame: Size, thumbnail_scale: float) -> Size:
    """On-screen card size: the frame scaled by *thumbnail_scale*, two decimals."""
    return Size(
        round(frame.width * thumbnail_scale, 2),
        round(frame.height * thumbnail_scale, 2),
    )
