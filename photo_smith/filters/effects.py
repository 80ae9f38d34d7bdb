"""Procedural effects: TV/CRT, double vision and fish-eye.

Arithmetic that the desktop editor performs in single precision (TV/CRT and
fish-eye) is done in ``float32`` here so results stay reproducible.
"""

from __future__ import annotations

import numpy as np

from photo_smith.image_engine.pixel_buffer import PixelBuffer

from .protocol import CancelToken, FilterResult, ProgressSink, StatusSink, run_cancelable

_F = np.float32

TV_SCANLINE_EVERY = 3
TV_SCANLINE_INTENSITY = _F(0.7)
TV_NOISE = 10
TV_DARK_FACTORS = (_F(0.8), _F(0.7), _F(1.2))
TV_GLOW_FACTORS = (_F(1.3), _F(1.1), _F(0.9))

DEFAULT_DOUBLE_VISION_OFFSET = 15
FISH_EYE_EXPONENT = _F(0.75)


# ---- TV / CRT ----


def _scale(channel: np.ndarray, factor: np.float32) -> np.ndarray:
    return (channel.astype(np.float32) * factor).astype(np.int32)


def _tv_row(row: np.ndarray, y: int, noise: np.ndarray) -> np.ndarray:
    px = row.astype(np.int32)
    r, g, b = px[:, 0], px[:, 1], px[:, 2]
    brightness = (r + g + b).astype(np.float32) / _F(3.0) / _F(255.0)

    dark = brightness < _F(0.5)
    r = np.where(dark, np.minimum(255, _scale(r, TV_DARK_FACTORS[0])), r)
    g = np.where(dark, np.minimum(255, _scale(g, TV_DARK_FACTORS[1])), g)
    b = np.where(dark, np.minimum(255, _scale(b, TV_DARK_FACTORS[2])), b)

    glow = brightness > _F(0.7)
    r = np.where(glow, np.minimum(255, _scale(r, TV_GLOW_FACTORS[0])), r)
    g = np.where(glow, np.minimum(255, _scale(g, TV_GLOW_FACTORS[1])), g)
    b = np.where(glow, np.maximum(0, _scale(b, TV_GLOW_FACTORS[2])), b)

    if y % TV_SCANLINE_EVERY == 0:
        r = _scale(r, TV_SCANLINE_INTENSITY)
        g = _scale(g, TV_SCANLINE_INTENSITY)
        b = _scale(b, TV_SCANLINE_INTENSITY)

    out = np.stack([r, g, b], axis=-1) + noise[:, None]
    return np.clip(out, 0, 255).astype(np.uint8)


def tv_filter(
    buffer: PixelBuffer,
    seed: int | None = None,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 20,
) -> FilterResult:
    """Scanlines every third row, cool shadows, warm highlights and grain.

    Grain is drawn per pixel in row-major order from ``numpy.random.default_rng(seed)``;
    pass a seed for reproducible output.
    """
    rng = np.random.default_rng(seed)
    width = buffer.width

    def _row(src: np.ndarray, dst: np.ndarray, y: int) -> None:
        noise = rng.integers(-TV_NOISE, TV_NOISE + 1, size=width)
        dst[y] = _tv_row(src[y], y, noise)

    return run_cancelable(buffer, "TV/CRT", _row, token=token, progress=progress, status=status, interval=interval)


# ---- double vision ----


def _double_vision_row(row: np.ndarray, offset: int) -> np.ndarray:
    w = row.shape[0]
    nx = np.minimum(np.arange(w) + offset, w - 1)
    first = row.astype(np.float64)
    second = row[nx].astype(np.float64)
    mixed = (first * 0.6 + second * 0.4).astype(np.int32)
    mixed[:, 0] = np.minimum(255, mixed[:, 0] + 25)
    return mixed.astype(np.uint8)


def double_vision(buffer: PixelBuffer, offset: int = DEFAULT_DOUBLE_VISION_OFFSET) -> PixelBuffer:
    """Blend each pixel with the one ``offset`` columns to its right, red lifted by 25."""
    off = max(0, int(offset))
    if buffer.is_empty():
        return buffer
    result = np.empty_like(buffer.pixels)
    for y in range(buffer.height):
        result[y] = _double_vision_row(buffer.pixels[y], off)
    buffer.replace_pixels(result)
    return buffer


def double_vision_tracked(
    buffer: PixelBuffer,
    offset: int = DEFAULT_DOUBLE_VISION_OFFSET,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 20,
) -> FilterResult:
    off = max(0, int(offset))

    def _row(src: np.ndarray, dst: np.ndarray, y: int) -> None:
        dst[y] = _double_vision_row(src[y], off)

    return run_cancelable(
        buffer, "Double Vision", _row, token=token, progress=progress, status=status, interval=interval
    )


# ---- fish-eye ----


class _FishEye:
    def __init__(self, width: int, height: int):
        self.width = width
        self.height = height
        self.cx = _F(width) / _F(2.0)
        self.cy = _F(height) / _F(2.0)
        self.radius = min(self.cx, self.cy)
        self.xs = np.arange(width, dtype=np.float32)

    def row(self, src: np.ndarray, y: int) -> np.ndarray:
        out = src[y].copy()
        if self.radius <= 0:
            return out
        dx = (self.xs - self.cx) / self.radius
        dy = (_F(y) - self.cy) / self.radius
        dist = np.sqrt(dx * dx + dy * dy)
        inside = (dist < _F(1.0)) & (dist > _F(0.0))
        if not inside.any():
            return out
        d = dist[inside]
        ddx = dx[inside]
        new_dist = np.power(d, FISH_EYE_EXPONENT)
        nx = self.cx + (ddx / d) * new_dist * self.radius
        ny = self.cy + (dy / d) * new_dist * self.radius
        ix = np.clip(nx.astype(np.int32), 0, self.width - 1)
        iy = np.clip(ny.astype(np.int32), 0, self.height - 1)
        out[inside] = src[iy, ix]
        return out


def fish_eye(buffer: PixelBuffer) -> PixelBuffer:
    """Radial lens distortion inside the centred unit disk (``r' = r ** 0.75``)."""
    if buffer.is_empty():
        return buffer
    lens = _FishEye(buffer.width, buffer.height)
    src = buffer.pixels.copy()
    result = np.empty_like(src)
    for y in range(buffer.height):
        result[y] = lens.row(src, y)
    buffer.replace_pixels(result)
    return buffer


def fish_eye_tracked(
    buffer: PixelBuffer,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 10,
) -> FilterResult:
    lens = _FishEye(buffer.width, buffer.height)

    def _row(src: np.ndarray, dst: np.ndarray, y: int) -> None:
        dst[y] = lens.row(src, y)

    return run_cancelable(buffer, "Fish-Eye", _row, token=token, progress=progress, status=status, interval=interval)
