"""Neighbourhood filters: box blur, Sobel edges, emboss and oil painting."""

from __future__ import annotations

import numpy as np

from photo_smith.image_engine.pixel_buffer import PixelBuffer

from .protocol import CancelToken, FilterResult, ProgressSink, StatusSink, run_cancelable

DEFAULT_BLUR_STRENGTH = 60
EDGE_THRESHOLD = 50
GAUSSIAN_5X5 = np.array(
    [
        [1, 4, 6, 4, 1],
        [4, 16, 24, 16, 4],
        [6, 24, 36, 24, 6],
        [4, 16, 24, 16, 4],
        [1, 4, 6, 4, 1],
    ],
    dtype=np.int64,
)
GAUSSIAN_SUM = 256
SOBEL_X = np.array([[-1, 0, 1], [-2, 0, 2], [-1, 0, 1]], dtype=np.int64)
SOBEL_Y = np.array([[-1, -2, -1], [0, 0, 0], [1, 2, 1]], dtype=np.int64)

DEFAULT_OIL_RADIUS = 3
DEFAULT_OIL_INTENSITY = 30


# ---- blur ----


def blur_radius(strength: int) -> int:
    """Map strength 0..100 to a box radius 1..25 (0 still blurs with radius 1)."""
    s = max(0, min(100, int(strength)))
    return max(1, (s * 24) // 100 + 1)


def _integral(pixels: np.ndarray) -> np.ndarray:
    h, w, c = pixels.shape
    table = np.zeros((h + 1, w + 1, c), dtype=np.int64)
    table[1:, 1:] = pixels.astype(np.int64).cumsum(axis=0).cumsum(axis=1)
    return table


def blur(
    buffer: PixelBuffer,
    strength: int = DEFAULT_BLUR_STRENGTH,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 10,
) -> FilterResult:
    """Box blur: mean of the in-bounds samples in a (2r+1) square window.

    The window shrinks at the borders and the divisor is the in-bounds count.
    """
    r = blur_radius(strength)
    h, w = buffer.height, buffer.width
    table = _integral(buffer.pixels)
    xs = np.arange(w)
    x0 = np.maximum(0, xs - r)
    x1 = np.minimum(w, xs + r + 1)

    def _row(src: np.ndarray, dst: np.ndarray, y: int) -> None:
        y0 = max(0, y - r)
        y1 = min(h, y + r + 1)
        sums = table[y1, x1] - table[y0, x1] - table[y1, x0] + table[y0, x0]
        count = np.maximum(1, (y1 - y0) * (x1 - x0))
        dst[y] = (sums // count[:, None]).astype(np.uint8)

    return run_cancelable(buffer, "Blur", _row, token=token, progress=progress, status=status, interval=interval)


# ---- edges ----


def luma(pixels: np.ndarray) -> np.ndarray:
    """Weighted grayscale ``0.299R + 0.587G + 0.114B``, truncated."""
    px = pixels.astype(np.float64)
    return (0.299 * px[..., 0] + 0.587 * px[..., 1] + 0.114 * px[..., 2]).astype(np.int64)


def _gaussian_interior(gray: np.ndarray) -> np.ndarray:
    h, w = gray.shape
    out = np.zeros((h, w), dtype=np.int64)
    if h < 5 or w < 5:
        return out
    acc = np.zeros((h - 4, w - 4), dtype=np.int64)
    for ky in range(5):
        for kx in range(5):
            acc += GAUSSIAN_5X5[ky, kx] * gray[ky : h - 4 + ky, kx : w - 4 + kx]
    out[2 : h - 2, 2 : w - 2] = acc // GAUSSIAN_SUM
    return out


def edges(buffer: PixelBuffer) -> PixelBuffer:
    """Sobel edge detection: black edges on white, outermost ring black.

    Luma -> 5x5 Gaussian on the interior -> 3x3 Sobel -> magnitude > 50.
    """
    h, w = buffer.height, buffer.width
    result = np.zeros((h, w, 3), dtype=np.uint8)
    if h >= 3 and w >= 3:
        blurred = _gaussian_interior(luma(buffer.pixels))
        gx = np.zeros((h - 2, w - 2), dtype=np.int64)
        gy = np.zeros((h - 2, w - 2), dtype=np.int64)
        for ky in range(3):
            for kx in range(3):
                window = blurred[ky : h - 2 + ky, kx : w - 2 + kx]
                gx += SOBEL_X[ky, kx] * window
                gy += SOBEL_Y[ky, kx] * window
        magnitude = np.minimum(255, np.sqrt((gx * gx + gy * gy).astype(np.float64)).astype(np.int64))
        edge = np.where(magnitude > EDGE_THRESHOLD, 0, 255).astype(np.uint8)
        result[1 : h - 1, 1 : w - 1] = edge[:, :, None]
    buffer.replace_pixels(result)
    return buffer


# ---- emboss ----


def _emboss_row(src: np.ndarray, y: int) -> np.ndarray:
    h, w = src.shape[0], src.shape[1]
    out = np.zeros((w, 3), dtype=np.uint8)
    if y >= h - 1 or w < 2:
        return out
    a = src[y, : w - 1].astype(np.int32)
    b = src[y + 1, 1:].astype(np.int32)
    diff = np.clip(a - b + 128, 0, 255)
    out[: w - 1] = (diff.sum(axis=-1) // 3)[:, None].astype(np.uint8)
    return out


def emboss(buffer: PixelBuffer) -> PixelBuffer:
    """Relief from the difference with the lower-right neighbour; last row/column stay black."""
    src = buffer.pixels.copy()
    result = np.zeros_like(src)
    for y in range(buffer.height):
        result[y] = _emboss_row(src, y)
    buffer.replace_pixels(result)
    return buffer


def emboss_tracked(
    buffer: PixelBuffer,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 20,
) -> FilterResult:
    def _row(src: np.ndarray, dst: np.ndarray, y: int) -> None:
        dst[y] = _emboss_row(src, y)

    return run_cancelable(buffer, "Emboss", _row, token=token, progress=progress, status=status, interval=interval)


# ---- oil painting ----


class _OilKernel:
    """Per-row histogram-mode evaluation shared by both oil painting forms."""

    def __init__(self, pixels: np.ndarray, radius: int, intensity: int):
        self.radius = max(1, int(radius))
        self.intensity = max(1, min(255, int(intensity)))
        wide = pixels.astype(np.int64)
        avg = wide.sum(axis=-1) // 3
        self.levels = np.minimum(255, avg // self.intensity)
        self.n_levels = 255 // self.intensity + 1
        self.wide = wide

    def row(self, y: int) -> np.ndarray:
        h, w = self.levels.shape
        counts = np.zeros((w, self.n_levels), dtype=np.int64)
        sums = np.zeros((w, self.n_levels, 3), dtype=np.int64)
        xs = np.arange(w)
        r = self.radius
        for dy in range(-r, r + 1):
            yy = y + dy
            if yy < 0 or yy >= h:
                continue
            for dx in range(-r, r + 1):
                nx = xs + dx
                valid = (nx >= 0) & (nx < w)
                if not valid.any():
                    continue
                # Each destination column appears once per offset, so plain
                # fancy-index accumulation has no duplicate targets.
                dst_cols = xs[valid]
                src_cols = nx[valid]
                lev = self.levels[yy, src_cols]
                counts[dst_cols, lev] += 1
                sums[dst_cols, lev] += self.wide[yy, src_cols]
        # argmax returns the first maximum: ties go to the lowest level.
        best = counts.argmax(axis=1)
        denom = np.maximum(1, counts[xs, best])
        return (sums[xs, best] // denom[:, None]).astype(np.uint8)


def oil_painting(
    buffer: PixelBuffer, radius: int = DEFAULT_OIL_RADIUS, intensity: int = DEFAULT_OIL_INTENSITY
) -> PixelBuffer:
    kernel = _OilKernel(buffer.pixels, radius, intensity)
    result = np.empty_like(buffer.pixels)
    for y in range(buffer.height):
        result[y] = kernel.row(y)
    buffer.replace_pixels(result)
    return buffer


def oil_painting_tracked(
    buffer: PixelBuffer,
    radius: int = DEFAULT_OIL_RADIUS,
    intensity: int = DEFAULT_OIL_INTENSITY,
    *,
    token: CancelToken | None = None,
    progress: ProgressSink | None = None,
    status: StatusSink | None = None,
    interval: int = 5,
) -> FilterResult:
    kernel = _OilKernel(buffer.pixels, radius, intensity)

    def _row(src: np.ndarray, dst: np.ndarray, y: int) -> None:
        dst[y] = kernel.row(y)

    return run_cancelable(
        buffer, "Oil Painting", _row, token=token, progress=progress, status=status, interval=interval
    )
