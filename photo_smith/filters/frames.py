"""Decorative frames.

Every frame builds a larger canvas, paints the border pattern and pastes the
source image at a fixed offset. Geometry and colours are literal so output is
reproducible pixel for pixel.
"""

from __future__ import annotations

from collections.abc import Callable
from functools import partial

import numpy as np

from photo_smith.errors import InvalidDimensions, InvalidParameter
from photo_smith.image_engine.pixel_buffer import PixelBuffer, check_rgb

SOLID_FRAME_WIDTH = 20
SOLID_COLORS = {
    "Blue": (0, 0, 255),
    "Red": (255, 0, 0),
    "Green": (0, 255, 0),
    "Black": (0, 0, 0),
    "White": (255, 255, 255),
}

WHITE = (255, 255, 255)
DARK = (20, 20, 20)


def _canvas(width: int, height: int, rgb: tuple[int, int, int]) -> np.ndarray:
    out = np.empty((height, width, 3), dtype=np.uint8)
    out[...] = rgb
    return out


def _paste(canvas: np.ndarray, pixels: np.ndarray, ox: int, oy: int) -> None:
    h, w = pixels.shape[:2]
    canvas[oy : oy + h, ox : ox + w] = pixels


def _grid(width: int, height: int) -> tuple[np.ndarray, np.ndarray]:
    ys, xs = np.mgrid[0:height, 0:width]
    return xs, ys


def _ring(xs: np.ndarray, ys: np.ndarray, lo: int, hi_x: int, hi_y: int, band: int) -> np.ndarray:
    """Pixels inside ``[lo, hi)`` and within ``band`` of that rectangle's edge."""
    inside = (xs >= lo) & (xs < hi_x) & (ys >= lo) & (ys < hi_y)
    edge = (xs < lo + band) | (xs >= hi_x - band) | (ys < lo + band) | (ys >= hi_y - band)
    return inside & edge


def _solid(px: np.ndarray, width: int, rgb: tuple[int, int, int]) -> np.ndarray:
    h, w = px.shape[:2]
    out = _canvas(w + 2 * width, h + 2 * width, rgb)
    _paste(out, px, width, width)
    return out


def _simple(px: np.ndarray) -> np.ndarray:
    frame, gap, inner = 10, 5, 5
    h, w = px.shape[:2]
    out = _canvas(w + 2 * frame, h + 2 * frame, (0, 0, 255))
    _paste(out, px, frame, frame)
    xs, ys = _grid(out.shape[1], out.shape[0])
    white = _ring(xs, ys, frame + gap, frame + w - gap, frame + h - gap, inner)
    out[white] = WHITE
    return out


def _double_border(px: np.ndarray) -> np.ndarray:
    outer, inner, gap = 14, 6, 4
    pad = outer + inner + gap
    h, w = px.shape[:2]
    nw, nh = w + 2 * pad, h + 2 * pad
    out = _canvas(nw, nh, DARK)
    xs, ys = _grid(nw, nh)
    out[_ring(xs, ys, 0, nw, nh, outer)] = WHITE
    lo = outer + gap
    out[_ring(xs, ys, lo, nw - lo, nh - lo, inner)] = WHITE
    _paste(out, px, pad, pad)
    return out


def _shadow(px: np.ndarray) -> np.ndarray:
    pad, shadow = 15, 18
    h, w = px.shape[:2]
    nw, nh = w + pad + shadow, h + pad + shadow
    xs, ys = _grid(nw, nh)
    dx = np.maximum(0, xs - (pad + w))
    dy = np.maximum(0, ys - (pad + h))
    shade = (20 + np.minimum(60, np.maximum(dx, dy) * 6)).astype(np.uint8)
    out = np.repeat(shade[:, :, None], 3, axis=2)
    _paste(out, px, pad, pad)
    return out


def _gold(px: np.ndarray) -> np.ndarray:
    fw = 45
    outer, inner, accent = (180, 140, 40), (240, 210, 120), (200, 160, 60)
    h, w = px.shape[:2]
    nw, nh = w + 2 * fw, h + 2 * fw
    out = _canvas(nw, nh, outer)
    xs, ys = _grid(nw, nh)
    body = (xs >= 3) & (xs < nw - 3) & (ys >= 3) & (ys < nh - 3)
    stripe = ((xs + ys) % 11 == 0) | ((xs - ys + 1000) % 13 == 0)
    out[body & stripe] = accent
    inset = fw - 6
    out[inset : nh - inset, inset : nw - inset] = inner
    _paste(out, px, fw, fw)
    return out


def _decorated(px: np.ndarray) -> np.ndarray:
    fw = 25
    outer, inner, accent = (100, 70, 50), (235, 225, 210), (180, 140, 80)
    h, w = px.shape[:2]
    nw, nh = w + 2 * fw, h + 2 * fw
    out = np.zeros((nh, nw, 3), dtype=np.uint8)
    _paste(out, px, fw, fw)
    xs, ys = _grid(nw, nh)
    dist = np.minimum(np.minimum(xs, ys), np.minimum(nw - 1 - xs, nh - 1 - ys))
    border = dist < fw

    rings = (dist == 9) | (dist == 12) | (dist == 15)
    plate = ~rings & (dist >= 3) & (dist < fw - 4)
    dots = plate & ((xs + ys) % 12 == 0)
    band = (dist >= fw - 4) & (dist < fw - 1)

    out[border] = outer
    out[border & plate] = inner
    out[border & (rings | dots | band)] = accent
    out[border & (dist < 3)] = outer
    return out


FRAME_TYPES: dict[str, Callable[[np.ndarray], np.ndarray]] = {
    "Simple Frame": _simple,
    "Double Border - White": _double_border,
    "Shadow Frame": _shadow,
    "Gold Decorated Frame": _gold,
    "Decorated Frame": _decorated,
}
for _name, _color in SOLID_COLORS.items():
    FRAME_TYPES[f"Solid Frame - {_name}"] = partial(_solid, width=SOLID_FRAME_WIDTH, rgb=_color)


def frame_names() -> list[str]:
    return list(FRAME_TYPES)


def solid_frame_color(frame_type: str) -> tuple[int, int, int] | None:
    """Border colour of a ``Solid Frame - <colour>`` entry, None for the patterned frames."""
    prefix = "Solid Frame - "
    if not frame_type.startswith(prefix):
        return None
    return SOLID_COLORS.get(frame_type[len(prefix) :])


def apply_frame(buffer: PixelBuffer, frame_type: str) -> PixelBuffer:
    """Surround the image with the named frame; unknown names raise ``InvalidParameter``."""
    builder = FRAME_TYPES.get(frame_type)
    if builder is None:
        raise InvalidParameter(f"unknown frame type: {frame_type!r}")
    buffer.replace_pixels(builder(buffer.pixels))
    return buffer


def solid_frame(buffer: PixelBuffer, width: int, color: tuple[int, int, int]) -> PixelBuffer:
    """Solid border of ``width`` pixels in ``color`` on every side."""
    w = int(width)
    if w <= 0:
        raise InvalidDimensions(f"frame width must be positive, got {width!r}")
    buffer.replace_pixels(_solid(buffer.pixels, w, check_rgb(color)))
    return buffer
