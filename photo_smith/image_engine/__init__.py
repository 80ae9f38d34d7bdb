"""Image Engine - pixel storage and I/O.

- PixelBuffer: the 8-bit RGB raster every filter operates on
- decoder: pyvips-backed load/save
- metrics: in-process counters/timings

Usage:
    from photo_smith.image_engine import PixelBuffer, load_image, save_image

    buf = load_image("/path/to/photo.jpg")
    save_image(buf, "/path/to/out.png")
"""

from .decoder import load_image, save_image
from .pixel_buffer import CHANNELS, PixelBuffer

__all__ = ["CHANNELS", "PixelBuffer", "load_image", "save_image"]
