"""Error taxonomy shared by the filter engine, history and I/O layers.

Every error carries an ``ErrorKind`` so callers that prefer status values
(see ``photo_smith.filters.protocol.FilterResult``) can report the failure
without inspecting exception types.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    INVALID_PARAMETER = "invalid_parameter"
    INVALID_DIMENSIONS = "invalid_dimensions"
    OUT_OF_RANGE = "out_of_range"
    DECODE = "decode"
    ENCODE = "encode"
    INTERNAL = "internal"


class PhotoSmithError(Exception):
    kind: ErrorKind = ErrorKind.INTERNAL


class InvalidParameter(PhotoSmithError, ValueError):
    """Unrecognized enum-like argument (direction, choice, frame type...)."""

    kind = ErrorKind.INVALID_PARAMETER


class InvalidDimensions(PhotoSmithError, ValueError):
    """Non-positive width/height for construction, resize or crop."""

    kind = ErrorKind.INVALID_DIMENSIONS


class OutOfRange(PhotoSmithError, IndexError):
    kind = ErrorKind.OUT_OF_RANGE


class ImageIOError(PhotoSmithError, OSError):
    kind = ErrorKind.DECODE


class ImageDecodeError(ImageIOError):
    kind = ErrorKind.DECODE


class ImageEncodeError(ImageIOError):
    kind = ErrorKind.ENCODE


def error_kind(exc: BaseException) -> ErrorKind:
    return getattr(exc, "kind", ErrorKind.INTERNAL)
