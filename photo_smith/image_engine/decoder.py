"""Image I/O using pyvips.

Loads any format libvips understands into a ``PixelBuffer`` (8-bit sRGB, alpha
flattened on black, grey expanded to three bands) and writes buffers back out;
the output format follows the file suffix.
"""

import contextlib
from pathlib import Path
from typing import Any

import numpy as np

from photo_smith.errors import ImageDecodeError, ImageEncodeError
from photo_smith.image_engine.pixel_buffer import CHANNELS, PixelBuffer
from photo_smith.logger import get_logger

_logger = get_logger("decoder")

SUPPORTED_EXTS = {".png", ".jpg", ".jpeg", ".bmp", ".tif", ".tiff", ".webp"}

_pyvips: Any | None = None


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        _pyvips = pyvips
        # Configure pyvips caches to avoid memory growth
        with contextlib.suppress(Exception):
            pyvips.cache_set_max(0)
            pyvips.cache_set_max_mem(0)
            pyvips.cache_set_max_files(0)
    return _pyvips


def _to_rgb_uchar(image: Any) -> Any:
    pyvips = _get_pyvips_module()
    with contextlib.suppress(Exception):
        image = image.colourspace("srgb")
    if image.hasalpha():
        image = image.flatten(background=[0, 0, 0])
    if image.bands > CHANNELS:
        image = image.extract_band(0, n=CHANNELS)
    elif image.bands < CHANNELS:
        image = pyvips.Image.bandjoin([image] * CHANNELS)
    if image.format != "uchar":
        image = image.cast("uchar")
    return image


def load_image(path: str | Path) -> PixelBuffer:
    """Decode ``path`` into a ``PixelBuffer``.

    Raises ImageDecodeError for missing, unsupported or corrupt files.
    """
    file_path = str(path)
    try:
        pyvips = _get_pyvips_module()
        image = pyvips.Image.new_from_file(file_path, access="sequential")
        image = _to_rgb_uchar(image)
        mem = image.write_to_memory()
        array = np.frombuffer(mem, dtype=np.uint8).reshape(image.height, image.width, image.bands)
    except Exception as e:
        _logger.debug("decode failed: %s: %s", file_path, e)
        raise ImageDecodeError(f"cannot decode {file_path}: {e}") from e
    if array.shape[2] != CHANNELS:
        raise ImageDecodeError(f"Unsupported band count after conversion: {array.shape[2]}")
    _logger.debug("decoded %s (%dx%d)", file_path, array.shape[1], array.shape[0])
    return PixelBuffer.from_array(array)


def save_image(buffer: PixelBuffer, path: str | Path, quality: int = 95) -> str:
    """Encode ``buffer`` to ``path``; returns the written path."""
    out_path = str(path)
    suffix = Path(out_path).suffix.lower()
    if suffix not in SUPPORTED_EXTS:
        raise ImageEncodeError(f"unsupported output format: {suffix or out_path}")
    if buffer.is_empty():
        raise ImageEncodeError("cannot save an empty image")
    try:
        pyvips = _get_pyvips_module()
        arr = np.ascontiguousarray(buffer.pixels)
        image = pyvips.Image.new_from_memory(arr.tobytes(), buffer.width, buffer.height, CHANNELS, "uchar")
        if suffix in {".jpg", ".jpeg", ".webp"}:
            image.write_to_file(out_path, Q=int(quality))
        else:
            image.write_to_file(out_path)
    except Exception as e:
        _logger.error("encode failed: %s: %s", out_path, e, exc_info=True)
        raise ImageEncodeError(f"cannot save {out_path}: {e}") from e
    _logger.info("image saved: %s", out_path)
    return out_path
