"""Image export utilities for rendered pixel buffers.

A pixel buffer is the flat ``(width * height, 3)`` float array returned by
the renderer: scanline order, top row first, components in [0, 1] and
already gamma corrected.

Supported formats:
    - Plain-text PPM (P3)
    - PNG and anything else Pillow can write (8-bit RGB)

Quantization truncates ``component * 255.99`` so that 1.0 maps to 255 and
each of the 256 levels covers an equal share of [0, 1].

Example:
    >>> from src.spheretrace.preview.export import write_ppm
    >>> buffer = render(800, 300, 10, 100, world, camera)
    >>> write_ppm("img.ppm", buffer, 800, 300)
"""

import logging
import os

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

# Largest factor whose truncated products stay within one byte
MAX_COLOR = 255.99


def _check_buffer(buffer: npt.ArrayLike, width: int, height: int) -> npt.NDArray[np.float32]:
    """Validate a flat pixel buffer and return it as float32 of shape (N, 3)."""
    pixels = np.asarray(buffer, dtype=np.float32)
    if pixels.shape != (width * height, 3):
        raise ValueError(
            f"Buffer shape {pixels.shape} does not match a {width}x{height} image "
            f"({width * height}, 3)"
        )
    if not np.all(np.isfinite(pixels)) or np.any(pixels < 0.0) or np.any(pixels > 1.0):
        raise ValueError("Buffer components must be finite and lie in [0, 1]")
    return pixels


def to_uint8(buffer: npt.ArrayLike) -> npt.NDArray[np.uint8]:
    """Quantize color components in [0, 1] to bytes.

    Args:
        buffer: Array of any shape with components in [0, 1].

    Returns:
        Array of the same shape with dtype uint8, ``floor(c * 255.99)``
        saturated to [0, 255].

    Raises:
        ValueError: If any component is non-finite or outside [0, 1].
    """
    values = np.asarray(buffer, dtype=np.float32)
    if not np.all(np.isfinite(values)) or np.any(values < 0.0) or np.any(values > 1.0):
        raise ValueError("Color components must be finite and lie in [0, 1]")
    scaled = np.floor(values.astype(np.float64) * MAX_COLOR)
    return np.clip(scaled, 0, 255).astype(np.uint8)


def buffer_to_image(
    buffer: npt.ArrayLike,
    width: int,
    height: int,
) -> npt.NDArray[np.float32]:
    """Reshape a flat pixel buffer into an image of shape (height, width, 3).

    Raises:
        ValueError: If the buffer does not match the dimensions or holds
            components outside [0, 1].
    """
    return _check_buffer(buffer, width, height).reshape(height, width, 3)


def write_ppm(
    filepath: str | os.PathLike[str],
    buffer: npt.ArrayLike,
    width: int,
    height: int,
) -> None:
    """Write a pixel buffer as a plain-text P3 PPM file.

    The file is the header ``P3\\n{width} {height}\\n255\\n`` followed by one
    ``r g b`` line per pixel, top row first.

    Args:
        filepath: Output file path.
        buffer: Flat pixel buffer of shape (width * height, 3).
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If the buffer does not match the dimensions or holds
            components outside [0, 1].
    """
    pixels = to_uint8(_check_buffer(buffer, width, height))

    with open(filepath, "w", encoding="ascii") as f:
        f.write(f"P3\n{width} {height}\n255\n")
        for r, g, b in pixels:
            f.write(f"{r} {g} {b}\n")

    logger.info("Wrote %dx%d PPM to %s", width, height, filepath)


def save_png(
    filepath: str | os.PathLike[str],
    buffer: npt.ArrayLike,
    width: int,
    height: int,
) -> None:
    """Save a pixel buffer with Pillow (format chosen from the extension).

    Args:
        filepath: Output file path (usually ending in .png).
        buffer: Flat pixel buffer of shape (width * height, 3).
        width: Image width in pixels.
        height: Image height in pixels.

    Raises:
        ValueError: If the buffer does not match the dimensions or holds
            components outside [0, 1].
    """
    image_uint8 = to_uint8(buffer_to_image(buffer, width, height))

    pil_image = PILImage.fromarray(image_uint8)
    pil_image.save(filepath)

    logger.info("Wrote %dx%d image to %s", width, height, filepath)
