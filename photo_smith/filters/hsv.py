"""Colour helpers shared by the tint filter and the custom frame.

HSV uses the picker's integer ranges: hue 0..359, saturation and value 0..100.
Rounding is half away from zero.
"""

from __future__ import annotations

import math
from typing import Any

from PySide6.QtGui import QColor

from photo_smith.errors import InvalidParameter
from photo_smith.image_engine.pixel_buffer import check_rgb


def _round(x: float) -> int:
    return int(math.floor(x + 0.5)) if x >= 0 else -int(math.floor(-x + 0.5))


def _clamp_byte(v: int) -> int:
    return max(0, min(255, v))


def hsv_to_rgb(h: int, s: int, v: int) -> tuple[int, int, int]:
    hh = h / 60.0
    ss = s / 100.0
    vv = v / 100.0

    i = int(math.floor(hh))
    f = hh - i
    p = vv * (1.0 - ss)
    q = vv * (1.0 - ss * f)
    t = vv * (1.0 - ss * (1.0 - f))

    sector = i % 6
    if sector == 0:
        rr, gg, bb = vv, t, p
    elif sector == 1:
        rr, gg, bb = q, vv, p
    elif sector == 2:
        rr, gg, bb = p, vv, t
    elif sector == 3:
        rr, gg, bb = p, q, vv
    elif sector == 4:
        rr, gg, bb = t, p, vv
    else:
        rr, gg, bb = vv, p, q

    return _clamp_byte(_round(rr * 255)), _clamp_byte(_round(gg * 255)), _clamp_byte(_round(bb * 255))


def rgb_to_hsv(r: int, g: int, b: int) -> tuple[int, int, int]:
    rr, gg, bb = (c / 255.0 for c in check_rgb((r, g, b)))
    hi = max(rr, gg, bb)
    lo = min(rr, gg, bb)
    delta = hi - lo

    v = _round(hi * 100)
    if hi < 0.0001:
        return 0, 0, v

    s = _round((delta / hi) * 100)
    if delta < 0.0001:
        return 0, s, v

    if hi == rr:
        h = _round(60.0 * (((gg - bb) / delta) + (6.0 if gg < bb else 0.0)))
    elif hi == gg:
        h = _round(60.0 * (((bb - rr) / delta) + 2.0))
    else:
        h = _round(60.0 * (((rr - gg) / delta) + 4.0))
    return h % 360, s, v


def parse_color(value: Any) -> tuple[int, int, int]:
    """Resolve a colour given in any of the accepted forms.

    Accepts ``#rrggbb``, a named colour, ``"r,g,b"`` or ``"(r,g,b)"``, ``"hsv(h,s,v)"`` in the
    picker's ranges, a ``QColor`` or an ``(r, g, b)`` triple.
    """
    if isinstance(value, QColor):
        color = value
    elif isinstance(value, str):
        text = value.strip()
        if text.lower().startswith("hsv(") and text.endswith(")"):
            return _parse_hsv(text[4:-1], value)
        if "," in text:
            return check_rgb(tuple(part.strip() for part in text.strip("()").split(",")))  # type: ignore[arg-type]
        color = QColor(text)
    else:
        return check_rgb(value)
    if not color.isValid():
        raise InvalidParameter(f"unrecognised colour: {value!r}")
    return color.red(), color.green(), color.blue()


def _parse_hsv(body: str, original: str) -> tuple[int, int, int]:
    try:
        h, s, v = (int(part.strip()) for part in body.split(","))
    except ValueError as e:
        raise InvalidParameter(f"unrecognised colour: {original!r}") from e
    if not (0 <= h <= 359 and 0 <= s <= 100 and 0 <= v <= 100):
        raise InvalidParameter(f"hsv components out of range: {original!r}")
    return hsv_to_rgb(h, s, v)


def to_hex(rgb: tuple[int, int, int]) -> str:
    r, g, b = check_rgb(rgb)
    return f"#{r:02x}{g:02x}{b:02x}"
