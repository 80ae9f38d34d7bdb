"""Per-pixel colour remaps.

Cancelable filters here run row by row (infrared runs column by column)
under ``run_cancelable``; ``dark_and_light`` and ``enhance_sunlight`` (without
a token) are immediate.
"""

from __future__ import annotations

import numpy as np

from photo_smith.errors import InvalidParameter
from photo_smith.image_engine.pixel_buffer import PixelBuffer, check_rgb

from .protocol import CancelToken, FilterResult, ProgressSink, StatusSink, run_cancelable

BW_THRESHOLD = 127
PURPLE_FACTORS = (1.3, 0.5, 1.3)
SUNLIGHT_FACTOR = 1.4
DEFAULT_TINT_INTENSITY = 0.5


def truncate_to_uchar(values: np.ndarray) -> np.ndarray:
    """Clamp to [0, 255] then truncate toward zero, as an int cast does."""
    return np.clip(values, 0, 255).astype(np.uint8)


def _row_gray(row: np.ndarray) -> np.ndarray:
    return row.astype(np.int32).sum(axis=-1) // 3


# ---- cancelable ----


def grayscale(
    buffer: PixelBuffer,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 50,
) -> FilterResult:
    """Average R, G and B (integer division) into all three channels."""

    def _row(src: np.ndarray, dst: np.ndarray, y: int) -> None:
        dst[y] = _row_gray(src[y])[:, None].astype(np.uint8)

    return run_cancelable(buffer, "Grayscale", _row, token=token, progress=progress, status=status, interval=interval)


def black_and_white(
    buffer: PixelBuffer,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 50,
) -> FilterResult:
    def _row(src: np.ndarray, dst: np.ndarray, y: int) -> None:
        bw = np.where(_row_gray(src[y]) > BW_THRESHOLD, 255, 0).astype(np.uint8)
        dst[y] = bw[:, None]

    return run_cancelable(
        buffer, "Black & White", _row, token=token, progress=progress, status=status, interval=interval
    )


def invert(
    buffer: PixelBuffer,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 50,
) -> FilterResult:
    def _row(src: np.ndarray, dst: np.ndarray, y: int) -> None:
        dst[y] = 255 - src[y]

    return run_cancelable(buffer, "Invert", _row, token=token, progress=progress, status=status, interval=interval)


def purple(
    buffer: PixelBuffer,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 50,
) -> FilterResult:
    """Boost red and blue by 1.3, halve green."""
    factors = np.asarray(PURPLE_FACTORS, dtype=np.float64)

    def _row(src: np.ndarray, dst: np.ndarray, y: int) -> None:
        dst[y] = truncate_to_uchar(src[y] * factors)

    return run_cancelable(buffer, "Purple", _row, token=token, progress=progress, status=status, interval=interval)


def infrared(
    buffer: PixelBuffer,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 50,
) -> FilterResult:
    """Red forced to 255, green/blue set to the inverted brightness.

    Processed column by column; progress total is the image width.
    """
    three = np.float32(3.0)
    full = np.float32(255.0)

    def _column(src: np.ndarray, dst: np.ndarray, x: int) -> None:
        brightness = src[:, x].astype(np.int32).sum(axis=-1).astype(np.float32) / three
        inverted = (full - brightness).astype(np.int32).astype(np.uint8)
        dst[:, x, 0] = 255
        dst[:, x, 1] = inverted
        dst[:, x, 2] = inverted

    return run_cancelable(
        buffer,
        "Infrared",
        _column,
        token=token,
        progress=progress,
        status=status,
        interval=interval,
        axis="columns",
    )


def color_tint(
    buffer: PixelBuffer,
    color: tuple[int, int, int],
    intensity: float = DEFAULT_TINT_INTENSITY,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 50,
) -> FilterResult:
    """Blend every pixel toward ``color``: ``c * (1 - i) + tint * i``."""
    tint = np.asarray(check_rgb(color), dtype=np.float64)
    try:
        amount = min(1.0, max(0.0, float(intensity)))
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"invalid tint intensity: {intensity!r}") from e
    keep = 1.0 - amount

    def _row(src: np.ndarray, dst: np.ndarray, y: int) -> None:
        dst[y] = truncate_to_uchar(src[y] * keep + tint * amount)

    return run_cancelable(
        buffer, "Color Tint", _row, token=token, progress=progress, status=status, interval=interval
    )


def _sunlight_row(row: np.ndarray) -> np.ndarray:
    out = row.copy()
    out[:, :2] = truncate_to_uchar(row[:, :2] * SUNLIGHT_FACTOR)
    return out


def enhance_sunlight_tracked(
    buffer: PixelBuffer,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 20,
) -> FilterResult:
    """Boost red and green by 1.4 (clamped); blue is kept."""

    def _row(src: np.ndarray, dst: np.ndarray, y: int) -> None:
        dst[y] = _sunlight_row(src[y])

    return run_cancelable(
        buffer, "Enhance Sunlight", _row, token=token, progress=progress, status=status, interval=interval
    )


# ---- immediate ----


def enhance_sunlight(buffer: PixelBuffer) -> PixelBuffer:
    if not buffer.is_empty():
        buffer.pixels[...] = _sunlight_row(buffer.pixels.reshape(-1, 3)).reshape(buffer.pixels.shape)
    return buffer


def brightness_factor(choice: str, percent: int) -> float:
    p = max(0, min(100, int(percent)))
    if choice == "dark":
        return max(0.0, 1.0 - p / 100.0)
    if choice == "light":
        return 1.0 + p / 100.0
    raise InvalidParameter(f"unknown brightness choice: {choice!r} (expected 'dark' or 'light')")


def dark_and_light(buffer: PixelBuffer, choice: str, percent: int | None = None) -> PixelBuffer:
    """Darken or lighten the image.

    With ``percent`` each channel is scaled by ``brightness_factor`` and clamped.
    Without it the fixed variant applies: dark divides by 3, light doubles.
    """
    if choice not in ("dark", "light"):
        raise InvalidParameter(f"unknown brightness choice: {choice!r} (expected 'dark' or 'light')")
    px = buffer.pixels
    if percent is None:
        wide = px.astype(np.int32)
        buffer.pixels[...] = (wide // 3 if choice == "dark" else np.minimum(255, wide * 2)).astype(np.uint8)
        return buffer
    factor = brightness_factor(choice, percent)
    buffer.pixels[...] = truncate_to_uchar(px * factor)
    return buffer
