"""Filter Engine.

- protocol: cancellation token, progress/status sinks and ``run_cancelable``
- color, convolution, effects: per-pixel and neighbourhood filters
- geometry, frames: immediate transforms that may change dimensions
- hsv: colour helpers

``FILTERS`` maps a stable key to a ``FilterSpec``. Cancelable filters take
``token``/``progress``/``status``/``interval`` keywords and return a
``FilterResult``; immediate filters mutate the buffer and raise on bad input.

Usage:
    from photo_smith.filters import get_filter

    spec = get_filter("blur")
    result = spec.fn(buf, strength=40, token=token, progress=sink)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from photo_smith.errors import InvalidParameter

from . import color, convolution, effects, frames, geometry
from .protocol import (
    CancelToken,
    FilterResult,
    FilterStatus,
    LoggingStatusSink,
    NullProgressSink,
    NullStatusSink,
    ProgressSink,
    RecordingProgressSink,
    StatusSink,
    run_cancelable,
)

CANCELABLE = "cancelable"
IMMEDIATE = "immediate"


@dataclass(frozen=True)
class FilterSpec:
    name: str
    mode: str
    fn: Callable[..., Any]
    interval: int = 0

    @property
    def cancelable(self) -> bool:
        return self.mode == CANCELABLE


def _c(name: str, fn: Callable[..., FilterResult], interval: int) -> FilterSpec:
    return FilterSpec(name, CANCELABLE, fn, interval)


def _i(name: str, fn: Callable[..., Any]) -> FilterSpec:
    return FilterSpec(name, IMMEDIATE, fn)


FILTERS: dict[str, FilterSpec] = {
    # cancelable
    "grayscale": _c("Grayscale", color.grayscale, 50),
    "black_and_white": _c("Black & White", color.black_and_white, 50),
    "invert": _c("Invert", color.invert, 50),
    "purple": _c("Purple", color.purple, 50),
    "infrared": _c("Infrared", color.infrared, 50),
    "tint": _c("Color Tint", color.color_tint, 50),
    "sunlight": _c("Enhance Sunlight", color.enhance_sunlight_tracked, 20),
    "blur": _c("Blur", convolution.blur, 10),
    "emboss": _c("Emboss", convolution.emboss_tracked, 20),
    "oil_painting": _c("Oil Painting", convolution.oil_painting_tracked, 5),
    "tv": _c("TV/CRT", effects.tv_filter, 20),
    "double_vision": _c("Double Vision", effects.double_vision_tracked, 20),
    "fish_eye": _c("Fish-Eye", effects.fish_eye_tracked, 10),
    # immediate
    "brightness": _i("Dark & Light", color.dark_and_light),
    "edges": _i("Detect Edges", convolution.edges),
    "emboss_simple": _i("Emboss", convolution.emboss),
    "flip": _i("Flip", geometry.flip),
    "rotate": _i("Rotate", geometry.rotate),
    "resize": _i("Resize", geometry.resize),
    "skew": _i("Skew", geometry.skew),
    "crop": _i("Crop", geometry.crop),
    "merge": _i("Merge", geometry.merge),
    "frame": _i("Frame", frames.apply_frame),
    "custom_frame": _i("Frame", frames.solid_frame),
}


def get_filter(key: str) -> FilterSpec:
    try:
        return FILTERS[key]
    except KeyError:
        raise InvalidParameter(f"unknown filter: {key!r}") from None


def filter_keys(mode: str | None = None) -> list[str]:
    return [k for k, spec in FILTERS.items() if mode is None or spec.mode == mode]


__all__ = [
    "CANCELABLE",
    "FILTERS",
    "IMMEDIATE",
    "CancelToken",
    "FilterResult",
    "FilterSpec",
    "FilterStatus",
    "LoggingStatusSink",
    "NullProgressSink",
    "NullStatusSink",
    "ProgressSink",
    "RecordingProgressSink",
    "StatusSink",
    "filter_keys",
    "get_filter",
    "run_cancelable",
]
