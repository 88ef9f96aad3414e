"""Preview module for image output.

Components:
    export: PPM (P3) and Pillow-based image export of flat pixel buffers

Example:
    >>> from src.spheretrace.preview import save_png, write_ppm
    >>> write_ppm("img.ppm", buffer, 800, 300)
    >>> save_png("img.png", buffer, 800, 300)
"""

from src.spheretrace.preview.export import (
    MAX_COLOR,
    buffer_to_image,
    save_png,
    to_uint8,
    write_ppm,
)

__all__ = [
    "MAX_COLOR",
    "to_uint8",
    "buffer_to_image",
    "write_ppm",
    "save_png",
]
