"""Geometric transforms: flip, rotate, resize, skew, crop and merge.

All operations are immediate. They raise on invalid input before touching the
buffer, then swap the new pixel array in with ``replace_pixels`` so a failed
call leaves the caller's image unchanged.
"""

from __future__ import annotations

import math

import numpy as np

from photo_smith.errors import InvalidDimensions, InvalidParameter
from photo_smith.image_engine.pixel_buffer import PixelBuffer
from photo_smith.logger import get_logger

_logger = get_logger("geometry")

FLIP_DIRECTIONS = ("Horizontal", "Vertical")
ROTATIONS = (90, 180, 270)
MERGE_MODES = ("overlap", "resize")
DEFAULT_SKEW_ANGLE = 40.0
SKEW_BACKGROUND = (255, 255, 255)


def flip(buffer: PixelBuffer, direction: str) -> PixelBuffer:
    """Mirror the image: ``Horizontal`` swaps columns, ``Vertical`` swaps rows."""
    if direction == "Horizontal":
        buffer.replace_pixels(buffer.pixels[:, ::-1].copy())
    elif direction == "Vertical":
        buffer.replace_pixels(buffer.pixels[::-1].copy())
    else:
        raise InvalidParameter(f"unknown flip direction: {direction!r}")
    return buffer


def parse_rotation(angle: int | str) -> int:
    """Accept ``90``/``180``/``270`` as ints or strings such as ``"90°"``."""
    if isinstance(angle, bool):
        raise InvalidParameter(f"unsupported rotation: {angle!r}")
    if isinstance(angle, str):
        text = angle.strip().rstrip("°").strip()
        try:
            value = int(text)
        except ValueError as e:
            raise InvalidParameter(f"unsupported rotation: {angle!r}") from e
    elif isinstance(angle, int):
        value = angle
    else:
        raise InvalidParameter(f"unsupported rotation: {angle!r}")
    if value not in ROTATIONS:
        raise InvalidParameter(f"unsupported rotation: {angle!r} (expected 90, 180 or 270)")
    return value


def rotate(buffer: PixelBuffer, angle: int | str) -> PixelBuffer:
    """Rotate clockwise by 90, 180 or 270 degrees; 90/270 swap width and height."""
    value = parse_rotation(angle)
    px = buffer.pixels
    if value == 90:
        out = np.rot90(px, -1)
    elif value == 180:
        out = px[::-1, ::-1]
    else:
        out = np.rot90(px, 1)
    buffer.replace_pixels(np.ascontiguousarray(out))
    return buffer


def resize(buffer: PixelBuffer, width: int, height: int) -> PixelBuffer:
    """Nearest-neighbour resample to ``width`` x ``height``.

    ``srcX = min(trunc(x * srcW / dstW), srcW - 1)`` and likewise for rows.
    """
    w, h = int(width), int(height)
    if w <= 0 or h <= 0:
        raise InvalidDimensions(f"invalid target size {w}x{h}")
    if buffer.is_empty():
        raise InvalidDimensions("cannot resize an empty image")
    src_w, src_h = buffer.width, buffer.height
    x_ratio = src_w / w
    y_ratio = src_h / h
    xs = np.minimum((np.arange(w) * x_ratio).astype(np.int64), src_w - 1)
    ys = np.minimum((np.arange(h) * y_ratio).astype(np.int64), src_h - 1)
    buffer.replace_pixels(buffer.pixels[ys[:, None], xs[None, :]])
    return buffer


def skew_shifts(height: int, angle_degrees: float) -> np.ndarray:
    """Per-row horizontal shift ``floor(tan(angle) * y)``."""
    tan_a = math.tan(angle_degrees * math.pi / 180.0)
    return np.floor(tan_a * np.arange(height, dtype=np.float64)).astype(np.int64)


def skew(buffer: PixelBuffer, angle_degrees: float = DEFAULT_SKEW_ANGLE) -> PixelBuffer:
    """Horizontal shear; the canvas widens to fit and the background is white."""
    try:
        angle = float(angle_degrees)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"invalid skew angle: {angle_degrees!r}") from e
    if not math.isfinite(angle) or abs(angle) >= 90.0:
        raise InvalidParameter(f"skew angle must be within (-90, 90) degrees, got {angle_degrees!r}")

    w, h = buffer.width, buffer.height
    shifts = skew_shifts(h, angle)
    min_shift = max_shift = 0
    if h > 0:
        min_shift = int(min(shifts[0], shifts[-1]))
        max_shift = int(max(shifts[0], shifts[-1]))
    new_width = max(1, w + (max_shift - min_shift))

    out = np.empty((h, new_width, 3), dtype=np.uint8)
    out[...] = SKEW_BACKGROUND
    for y in range(h):
        start = int(shifts[y]) - min_shift
        out[y, start : start + w] = buffer.pixels[y]
    buffer.replace_pixels(out)
    return buffer


def validate_crop_bounds(img_width: int, img_height: int, crop: tuple[int, int, int, int]) -> bool:
    """Validate that crop rectangle is within image bounds.

    Args:
        img_width: Original image width
        img_height: Original image height
        crop: (left, top, width, height) crop rectangle

    Returns:
        True if crop is valid, False otherwise
    """
    left, top, width, height = crop
    if left < 0 or top < 0:
        return False
    if width <= 0 or height <= 0:
        return False
    if left + width > img_width:
        return False
    return not top + height > img_height


def crop(buffer: PixelBuffer, left: int, top: int, width: int, height: int) -> PixelBuffer:
    rect = (int(left), int(top), int(width), int(height))
    if rect[2] <= 0 or rect[3] <= 0:
        raise InvalidDimensions(f"invalid crop size {rect[2]}x{rect[3]}")
    if not validate_crop_bounds(buffer.width, buffer.height, rect):
        _logger.error("Crop bounds %s invalid for image size %dx%d", rect, buffer.width, buffer.height)
        raise InvalidParameter(f"Crop bounds {rect} invalid for image size {buffer.width}x{buffer.height}")
    l, t, w, h = rect
    buffer.replace_pixels(buffer.pixels[t : t + h, l : l + w].copy())
    return buffer


def merge(current: PixelBuffer, other: PixelBuffer, mode: str = "overlap") -> PixelBuffer:
    """Average ``other`` into ``current``: ``(a + b) // 2`` per channel.

    ``overlap`` blends the top-left ``min(w) x min(h)`` region and keeps the
    current dimensions. ``resize`` first scales both images to the larger
    width and height, so the whole result is blended.
    """
    if not isinstance(other, PixelBuffer):
        raise InvalidParameter(f"merge needs a second image, got {type(other).__name__}")
    if mode not in MERGE_MODES:
        raise InvalidParameter(f"unknown merge mode: {mode!r} (expected 'overlap' or 'resize')")
    if mode == "resize":
        if current.is_empty() or other.is_empty():
            raise InvalidDimensions("cannot resize-merge an empty image")
        w = max(current.width, other.width)
        h = max(current.height, other.height)
        resize(current, w, h)
        other = resize(other.copy(), w, h)

    w = min(current.width, other.width)
    h = min(current.height, other.height)
    a = current.pixels[:h, :w].astype(np.uint16)
    b = other.pixels[:h, :w].astype(np.uint16)
    current.pixels[:h, :w] = ((a + b) // 2).astype(np.uint8)
    return current
