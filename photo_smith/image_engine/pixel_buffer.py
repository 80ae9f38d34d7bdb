"""In-memory 8-bit RGB raster.

``PixelBuffer`` owns a contiguous ``(height, width, 3)`` ``uint8`` numpy array
in row-major order. It behaves as a value type: ``copy()`` and ``assign()``
duplicate the full sample array, so two buffers never alias each other.

A buffer constructed from ``(width, height)`` is zero-filled (black).
"""

from __future__ import annotations

from typing import Any

import numpy as np

from photo_smith.errors import InvalidDimensions, InvalidParameter, OutOfRange

CHANNELS = 3
_EXPECTED_NDIM = 3


class PixelBuffer:
    __slots__ = ("_pixels",)

    def __init__(self, width: int = 0, height: int = 0):
        w, h = int(width), int(height)
        if w < 0 or h < 0:
            raise InvalidDimensions(f"invalid buffer size {w}x{h}")
        self._pixels = np.zeros((h, w, CHANNELS), dtype=np.uint8)

    # ---- construction helpers ----
    @classmethod
    def from_array(cls, array: Any) -> PixelBuffer:
        """Build a buffer from an (H, W, 3) array-like; the data is copied."""
        arr = np.asarray(array)
        if arr.ndim != _EXPECTED_NDIM or arr.shape[2] != CHANNELS:
            raise InvalidDimensions(f"unexpected image array shape {arr.shape}")
        if arr.dtype != np.uint8:
            if arr.size and (arr.min() < 0 or arr.max() > 255):
                raise InvalidParameter("sample values must be within 0..255")
            arr = arr.astype(np.uint8)
        buf = cls.__new__(cls)
        buf._pixels = np.ascontiguousarray(arr).copy()
        return buf

    @classmethod
    def filled(cls, width: int, height: int, rgb: tuple[int, int, int]) -> PixelBuffer:
        buf = cls(width, height)
        buf._pixels[...] = np.asarray(check_rgb(rgb), dtype=np.uint8)
        return buf

    # ---- geometry ----
    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def channels(self) -> int:
        return CHANNELS

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    @property
    def pixels(self) -> np.ndarray:
        """Writable ``(height, width, 3)`` view used by the vectorised filters."""
        return self._pixels

    # ---- sample access ----
    def _check(self, x: int, y: int, c: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height and 0 <= c < CHANNELS):
            raise OutOfRange(f"({x}, {y}, {c}) outside {self.width}x{self.height}x{CHANNELS}")

    def get(self, x: int, y: int, c: int) -> int:
        self._check(x, y, c)
        return int(self._pixels[y, x, c])

    def set(self, x: int, y: int, c: int, value: int) -> None:
        self._check(x, y, c)
        v = int(value)
        if not 0 <= v <= 255:
            raise InvalidParameter(f"sample value {v} outside 0..255")
        self._pixels[y, x, c] = v

    def __getitem__(self, key: tuple[int, int, int]) -> int:
        x, y, c = key
        return self.get(x, y, c)

    def __setitem__(self, key: tuple[int, int, int], value: int) -> None:
        x, y, c = key
        self.set(x, y, c, value)

    # ---- value semantics ----
    def copy(self) -> PixelBuffer:
        buf = PixelBuffer.__new__(PixelBuffer)
        buf._pixels = self._pixels.copy()
        return buf

    def assign(self, other: PixelBuffer) -> None:
        """Overwrite this buffer (dimensions included) with a deep copy of ``other``."""
        if other is self:
            return
        self._pixels = other._pixels.copy()

    def replace_pixels(self, array: np.ndarray) -> None:
        """Swap in a freshly built array; used by filters that change dimensions."""
        if array.ndim != _EXPECTED_NDIM or array.shape[2] != CHANNELS or array.dtype != np.uint8:
            raise InvalidDimensions(f"unexpected image array shape {array.shape}/{array.dtype}")
        self._pixels = np.ascontiguousarray(array)

    def to_bytes(self) -> bytes:
        return self._pixels.tobytes()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self._pixels.shape == other._pixels.shape and bool(np.array_equal(self._pixels, other._pixels))

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"PixelBuffer({self.width}x{self.height})"


def check_rgb(rgb: tuple[int, int, int]) -> tuple[int, int, int]:
    try:
        r, g, b = (int(v) for v in rgb)
    except (TypeError, ValueError) as e:
        raise InvalidParameter(f"invalid colour {rgb!r}") from e
    for v in (r, g, b):
        if not 0 <= v <= 255:
            raise InvalidParameter(f"colour component {v} outside 0..255")
    return r, g, b
