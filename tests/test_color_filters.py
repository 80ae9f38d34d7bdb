from __future__ import annotations

import numpy as np
import pytest

from photo_smith.errors import InvalidParameter
from photo_smith.filters.color import (
    black_and_white,
    brightness_factor,
    color_tint,
    dark_and_light,
    enhance_sunlight,
    enhance_sunlight_tracked,
    invert,
    purple,
)
from photo_smith.image_engine.pixel_buffer import PixelBuffer


def _row(*pixels: tuple[int, int, int]) -> PixelBuffer:
    return PixelBuffer.from_array(np.array([pixels], dtype=np.uint8))


def test_black_and_white_threshold() -> None:
    # gray 127 -> black, gray 128 -> white
    buf = _row((127, 127, 127), (128, 128, 128), (0, 0, 255))
    assert black_and_white(buf).ok
    assert buf.pixels[0].tolist() == [[0, 0, 0], [255, 255, 255], [0, 0, 0]]


def test_invert_twice_is_identity(noise_image) -> None:
    buf = noise_image()
    original = buf.copy()
    invert(buf)
    assert buf.get(0, 0, 0) == 255 - original.get(0, 0, 0)
    invert(buf)
    assert buf == original


def test_purple_scales_and_clamps() -> None:
    buf = _row((100, 100, 100), (200, 200, 200))
    purple(buf)
    assert buf.pixels[0].tolist() == [[130, 50, 130], [255, 100, 255]]


def test_color_tint_blends_toward_colour() -> None:
    buf = _row((0, 0, 0), (255, 255, 255))
    color_tint(buf, (255, 0, 0), 0.5)
    assert buf.pixels[0].tolist() == [[127, 0, 0], [255, 127, 127]]


def test_color_tint_intensity_is_clamped() -> None:
    buf = _row((10, 20, 30))
    color_tint(buf, (1, 2, 3), 7.5)
    assert buf.pixels[0, 0].tolist() == [1, 2, 3]

    buf = _row((10, 20, 30))
    color_tint(buf, (1, 2, 3), -1)
    assert buf.pixels[0, 0].tolist() == [10, 20, 30]


def test_color_tint_rejects_bad_colour() -> None:
    with pytest.raises(InvalidParameter):
        color_tint(_row((0, 0, 0)), (300, 0, 0))


def test_enhance_sunlight_boosts_red_and_green() -> None:
    buf = _row((100, 200, 50))
    enhance_sunlight(buf)
    assert buf.pixels[0, 0].tolist() == [140, 255, 50]


def test_enhance_sunlight_forms_agree(noise_image) -> None:
    a = noise_image()
    b = a.copy()
    enhance_sunlight(a)
    assert enhance_sunlight_tracked(b).ok
    assert a == b


def test_brightness_percent() -> None:
    buf = _row((200, 100, 0))
    dark_and_light(buf, "dark", 50)
    assert buf.pixels[0, 0].tolist() == [100, 50, 0]

    buf = _row((200, 100, 0))
    dark_and_light(buf, "light", 50)
    assert buf.pixels[0, 0].tolist() == [255, 150, 0]


def test_brightness_percent_is_clamped() -> None:
    assert brightness_factor("dark", 250) == 0.0
    assert brightness_factor("light", -20) == 1.0


def test_brightness_fixed_variant() -> None:
    buf = _row((200, 100, 5))
    dark_and_light(buf, "dark")
    assert buf.pixels[0, 0].tolist() == [66, 33, 1]

    buf = _row((200, 100, 5))
    dark_and_light(buf, "light")
    assert buf.pixels[0, 0].tolist() == [255, 200, 10]


def test_brightness_unknown_choice() -> None:
    with pytest.raises(InvalidParameter):
        dark_and_light(_row((1, 2, 3)), "medium", 10)
    with pytest.raises(InvalidParameter):
        brightness_factor("medium", 10)
