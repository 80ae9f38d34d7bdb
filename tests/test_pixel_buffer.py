from __future__ import annotations

import numpy as np
import pytest

from photo_smith.errors import InvalidDimensions, InvalidParameter, OutOfRange
from photo_smith.image_engine.pixel_buffer import PixelBuffer


def test_new_buffer_is_black() -> None:
    buf = PixelBuffer(4, 3)
    assert (buf.width, buf.height, buf.channels) == (4, 3, 3)
    assert buf.pixels.shape == (3, 4, 3)
    assert not buf.pixels.any()


def test_default_buffer_is_empty() -> None:
    buf = PixelBuffer()
    assert buf.is_empty()
    assert buf.size == (0, 0)


def test_negative_dimensions_rejected() -> None:
    with pytest.raises(InvalidDimensions):
        PixelBuffer(-1, 5)


def test_get_set_roundtrip() -> None:
    buf = PixelBuffer(2, 2)
    buf.set(1, 0, 2, 200)
    assert buf.get(1, 0, 2) == 200
    # (x, y, c) maps to pixels[y, x, c]
    assert buf.pixels[0, 1, 2] == 200
    buf[0, 1, 0] = 7
    assert buf[0, 1, 0] == 7


@pytest.mark.parametrize("coords", [(2, 0, 0), (0, 2, 0), (0, 0, 3), (-1, 0, 0)])
def test_out_of_range_access(coords) -> None:
    buf = PixelBuffer(2, 2)
    with pytest.raises(OutOfRange):
        buf.get(*coords)
    # Also an IndexError for callers that only know the builtin.
    with pytest.raises(IndexError):
        buf.set(*coords, 1)


def test_set_rejects_values_outside_byte_range() -> None:
    buf = PixelBuffer(1, 1)
    with pytest.raises(InvalidParameter):
        buf.set(0, 0, 0, 256)
    with pytest.raises(InvalidParameter):
        buf.set(0, 0, 0, -1)


def test_copy_is_deep() -> None:
    buf = PixelBuffer.filled(3, 3, (10, 20, 30))
    dup = buf.copy()
    dup.set(0, 0, 0, 99)
    assert buf.get(0, 0, 0) == 10
    assert dup != buf


def test_assign_takes_dimensions_and_samples() -> None:
    small = PixelBuffer(2, 2)
    big = PixelBuffer.filled(5, 4, (1, 2, 3))
    small.assign(big)
    assert small.size == (5, 4)
    assert small == big
    big.set(0, 0, 0, 50)
    assert small.get(0, 0, 0) == 1


def test_from_array_validates_shape_and_copies() -> None:
    arr = np.zeros((2, 3, 3), dtype=np.uint8)
    buf = PixelBuffer.from_array(arr)
    arr[0, 0, 0] = 255
    assert buf.get(0, 0, 0) == 0

    with pytest.raises(InvalidDimensions):
        PixelBuffer.from_array(np.zeros((2, 3), dtype=np.uint8))
    with pytest.raises(InvalidDimensions):
        PixelBuffer.from_array(np.zeros((2, 3, 4), dtype=np.uint8))
    with pytest.raises(InvalidParameter):
        PixelBuffer.from_array(np.full((1, 1, 3), 300))


def test_filled_rejects_bad_colour() -> None:
    with pytest.raises(InvalidParameter):
        PixelBuffer.filled(1, 1, (0, 0, 256))


def test_equality_needs_same_dimensions() -> None:
    assert PixelBuffer(2, 3) == PixelBuffer(2, 3)
    assert PixelBuffer(2, 3) != PixelBuffer(3, 2)
