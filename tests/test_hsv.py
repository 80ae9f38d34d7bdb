from __future__ import annotations

import pytest
from PySide6.QtGui import QColor

from photo_smith.errors import InvalidParameter
from photo_smith.filters.hsv import hsv_to_rgb, parse_color, rgb_to_hsv, to_hex


@pytest.mark.parametrize(
    ("rgb", "hsv"),
    [
        ((255, 0, 0), (0, 100, 100)),
        ((0, 255, 0), (120, 100, 100)),
        ((0, 0, 255), (240, 100, 100)),
        ((255, 0, 255), (300, 100, 100)),
        ((0, 0, 0), (0, 0, 0)),
        ((128, 128, 128), (0, 0, 50)),
        ((255, 255, 255), (0, 0, 100)),
    ],
)
def test_rgb_to_hsv(rgb, hsv) -> None:
    assert rgb_to_hsv(*rgb) == hsv


@pytest.mark.parametrize(
    ("hsv", "rgb"),
    [
        ((0, 100, 100), (255, 0, 0)),
        ((120, 100, 100), (0, 255, 0)),
        ((240, 100, 100), (0, 0, 255)),
        ((360, 100, 100), (255, 0, 0)),
        ((60, 100, 100), (255, 255, 0)),
        # 0.5 * 255 = 127.5 rounds away from zero
        ((0, 0, 50), (128, 128, 128)),
    ],
)
def test_hsv_to_rgb(hsv, rgb) -> None:
    assert hsv_to_rgb(*hsv) == rgb


def test_primary_colours_survive_round_trip() -> None:
    for rgb in ((255, 0, 0), (0, 255, 0), (0, 0, 255), (255, 255, 0), (0, 255, 255)):
        assert hsv_to_rgb(*rgb_to_hsv(*rgb)) == rgb


def test_rgb_to_hsv_rejects_bad_input() -> None:
    with pytest.raises(InvalidParameter):
        rgb_to_hsv(256, 0, 0)


@pytest.mark.parametrize(
    ("value", "rgb"),
    [
        ("#1e3a8a", (30, 58, 138)),
        ("red", (255, 0, 0)),
        ("  10, 20,30 ", (10, 20, 30)),
        ((1, 2, 3), (1, 2, 3)),
        (QColor(4, 5, 6), (4, 5, 6)),
    ],
)
def test_parse_color(value, rgb) -> None:
    assert parse_color(value) == rgb


@pytest.mark.parametrize("value", ["not-a-colour", "1,2", (1, 2, 300), 42])
def test_parse_color_rejects_garbage(value) -> None:
    with pytest.raises(InvalidParameter):
        parse_color(value)


def test_to_hex() -> None:
    assert to_hex((30, 58, 138)) == "#1e3a8a"


@pytest.mark.parametrize(
    ("value", "rgb"),
    [
        ("hsv(240,100,100)", (0, 0, 255)),
        ("HSV( 0, 0, 50 )", (128, 128, 128)),
        ("(10, 20, 30)", (10, 20, 30)),
    ],
)
def test_parse_color_hsv_and_parenthesised(value, rgb) -> None:
    assert parse_color(value) == rgb


@pytest.mark.parametrize("value", ["hsv(360,0,0)", "hsv(0,101,0)", "hsv(1,2)", "hsv(a,b,c)"])
def test_parse_color_rejects_bad_hsv(value) -> None:
    with pytest.raises(InvalidParameter):
        parse_color(value)
