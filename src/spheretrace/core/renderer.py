"""Parallel chunked image renderer.

The image is a flat buffer of ``width * height`` pixels in scanline order,
top row first. It is split into ``worker_count`` contiguous chunks of
``ceil(total / worker_count)`` pixels; the last chunk may be short and, when
there are more workers than pixels, trailing workers get nothing to do.

One Taichi kernel renders the whole image. Its outermost loop runs one
iteration per worker, which Taichi spreads over its thread pool; each
iteration renders its own chunk serially, drawing every random number from
the worker's own stream. Workers share the scene and camera fields read-only
and write disjoint slices of the pixel field, so no locking is needed. The
kernel returning (followed by ``ti.sync()``) is the join point: the buffer is
only read afterwards, and only if every pixel was written exactly once and
holds finite values.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.core.renderer import render
    >>> from src.spheretrace.scene.showcase import create_three_spheres_scene
    >>>
    >>> world, camera = create_three_spheres_scene(aspect_ratio=2.0)
    >>> buffer = render(200, 100, 8, 16, world, camera, seed=7)
    >>> buffer.shape
    (20000, 3)
"""

import logging
import time
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.spheretrace.camera.thin_lens import ThinLensCamera, get_ray, setup_camera
from src.spheretrace.core.integrator import trace_camera_ray
from src.spheretrace.core.sampling import MAX_STREAMS, random_float, seed_streams, spawn_seeds
from src.spheretrace.core.vector import sqrt_components, vec3
from src.spheretrace.errors import ConfigurationError, RenderError
from src.spheretrace.scene.intersection import upload_scene
from src.spheretrace.scene.manager import HittableList

logger = logging.getLogger(__name__)

# =============================================================================
# Render Target (Pixel Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048
MAX_PIXELS = MAX_IMAGE_WIDTH * MAX_IMAGE_HEIGHT

# Final pixel colors, flat scanline order
_pixels = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PIXELS)

# Number of times each pixel was written during the last render
_pixel_writes = ti.field(dtype=ti.i32, shape=MAX_PIXELS)


def chunk_bounds(total: int, worker_count: int) -> list[tuple[int, int]]:
    """Split ``[0, total)`` into one contiguous half-open range per worker.

    Args:
        total: Number of pixels.
        worker_count: Number of workers, >= 1.

    Returns:
        ``worker_count`` (start, end) pairs that cover ``[0, total)`` exactly
        once, in order. Trailing pairs may be empty.
    """
    chunk_size = -(-total // worker_count)
    bounds = []
    for worker in range(worker_count):
        start = min(worker * chunk_size, total)
        end = min(start + chunk_size, total)
        bounds.append((start, end))
    return bounds


@ti.kernel
def _render_chunks(
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    worker_count: ti.i32,
    chunk_size: ti.i32,
):
    """Render every chunk; the outermost loop is the parallel worker loop."""
    total = width * height
    for worker in range(worker_count):
        start = ti.min(worker * chunk_size, total)
        end = ti.min(start + chunk_size, total)

        for p in range(start, end):
            # Buffer row 0 is the top of the image
            x = p % width
            y = height - 1 - p // width

            color = vec3(0.0, 0.0, 0.0)
            for _ in range(samples):
                s = (ti.cast(x, ti.f32) + random_float(worker)) / ti.cast(width, ti.f32)
                t = (ti.cast(y, ti.f32) + random_float(worker)) / ti.cast(height, ti.f32)
                ray = get_ray(s, t, worker)
                color += trace_camera_ray(ray, worker)

            color /= ti.cast(samples, ti.f32)
            _pixels[p] = tm.clamp(sqrt_components(color), 0.0, 1.0)
            _pixel_writes[p] += 1


def _validate_arguments(
    width: int,
    height: int,
    worker_count: int,
    samples_per_pixel: int,
) -> None:
    """Check render arguments against the preallocated capacities."""
    for name, value in (
        ("width", width),
        ("height", height),
        ("worker_count", worker_count),
        ("samples_per_pixel", samples_per_pixel),
    ):
        if int(value) != value or value <= 0:
            raise ConfigurationError(f"{name} = {value} must be a positive integer")

    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ConfigurationError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )
    if worker_count > MAX_STREAMS:
        raise ConfigurationError(
            f"worker_count = {worker_count} exceeds the number of random streams ({MAX_STREAMS})"
        )


def _worker_states(
    worker_count: int,
    seed: int | None,
    worker_seeds: Sequence[int] | None,
) -> npt.NDArray[np.uint32]:
    """Pick the stream state of every worker."""
    if worker_seeds is None:
        return spawn_seeds(worker_count, seed)

    if seed is not None:
        raise ConfigurationError("Pass either seed or worker_seeds, not both")
    states = np.asarray(worker_seeds)
    if states.shape != (worker_count,):
        raise ConfigurationError(
            f"Expected {worker_count} worker seeds, got shape {states.shape}"
        )
    return states


def render(
    width: int,
    height: int,
    worker_count: int,
    samples_per_pixel: int,
    scene: HittableList,
    camera: ThinLensCamera,
    *,
    seed: int | None = None,
    worker_seeds: Sequence[int] | None = None,
) -> npt.NDArray[np.float32]:
    """Render a scene into a flat pixel buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).
        worker_count: Number of parallel workers (max MAX_STREAMS).
        samples_per_pixel: Camera rays averaged per pixel.
        scene: The spheres to render.
        camera: The camera; its aspect ratio is normally width / height.
        seed: Root seed for the per-worker streams. None uses OS entropy.
        worker_seeds: Explicit nonzero 32-bit state per worker, instead of
            deriving them from ``seed``.

    Returns:
        Array of shape (width * height, 3), dtype float32, scanline order with
        the top row first, every component in [0, 1].

    Raises:
        ConfigurationError: On invalid arguments.
        CapacityError: If the scene does not fit the device fields.
        RenderError: If the kernel launch fails or produces an incomplete or
            non-finite image. No partial buffer is returned.
    """
    _validate_arguments(width, height, worker_count, samples_per_pixel)
    states = _worker_states(worker_count, seed, worker_seeds)

    upload_scene(scene)
    setup_camera(camera)
    seed_streams(states)

    total = width * height
    chunk_size = -(-total // worker_count)
    _pixel_writes.fill(0)

    logger.info(
        "Rendering %dx%d, %d spp, %d spheres on %d workers (chunk size %d)",
        width,
        height,
        samples_per_pixel,
        len(scene),
        worker_count,
        chunk_size,
    )
    started = time.perf_counter()

    try:
        _render_chunks(width, height, samples_per_pixel, worker_count, chunk_size)
        ti.sync()
    except Exception as exc:
        raise RenderError(f"Rendering workers failed: {exc}") from exc

    writes = _pixel_writes.to_numpy()[:total]
    if not np.all(writes == 1):
        missing = int(np.count_nonzero(writes == 0))
        repeated = int(np.count_nonzero(writes > 1))
        raise RenderError(
            f"Pixel buffer incomplete: {missing} pixels unwritten, {repeated} written twice or more"
        )

    buffer = _pixels.to_numpy()[:total].astype(np.float32)
    if not np.all(np.isfinite(buffer)):
        raise RenderError("Pixel buffer contains non-finite values")

    logger.info("Rendered %d pixels in %.2f s", total, time.perf_counter() - started)
    return buffer


def get_write_counts(total: int) -> npt.NDArray[np.int32]:
    """Get how often each of the first ``total`` pixels was written last render."""
    return _pixel_writes.to_numpy()[:total]


class TileRenderer:
    """A renderer with fixed image dimensions and worker layout.

    Wraps ``render`` so the same settings can render several scenes, and
    keeps the last pixel buffer around for display and export.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        worker_count: Number of parallel workers.
        samples_per_pixel: Camera rays averaged per pixel.
    """

    def __init__(
        self,
        width: int,
        height: int,
        worker_count: int,
        samples_per_pixel: int,
    ) -> None:
        """Initialize the renderer.

        Raises:
            ConfigurationError: If any setting is invalid.
        """
        _validate_arguments(width, height, worker_count, samples_per_pixel)
        self._width = width
        self._height = height
        self._worker_count = worker_count
        self._samples_per_pixel = samples_per_pixel
        self._buffer: npt.NDArray[np.float32] | None = None

    @property
    def width(self) -> int:
        """Get the image width."""
        return self._width

    @property
    def height(self) -> int:
        """Get the image height."""
        return self._height

    @property
    def worker_count(self) -> int:
        """Get the number of workers."""
        return self._worker_count

    @property
    def samples_per_pixel(self) -> int:
        """Get the samples per pixel."""
        return self._samples_per_pixel

    @property
    def aspect_ratio(self) -> float:
        """Get width / height, the aspect ratio cameras should use."""
        return self._width / self._height

    def chunk_layout(self) -> list[tuple[int, int]]:
        """Get the (start, end) pixel range of every worker."""
        return chunk_bounds(self._width * self._height, self._worker_count)

    def render(
        self,
        scene: HittableList,
        camera: ThinLensCamera,
        *,
        seed: int | None = None,
    ) -> npt.NDArray[np.float32]:
        """Render a scene and keep the result.

        Returns:
            The flat pixel buffer, see ``render``.
        """
        self._buffer = render(
            self._width,
            self._height,
            self._worker_count,
            self._samples_per_pixel,
            scene,
            camera,
            seed=seed,
        )
        return self._buffer

    def get_buffer(self) -> npt.NDArray[np.float32]:
        """Get the last rendered flat buffer.

        Raises:
            RuntimeError: If nothing has been rendered yet.
        """
        if self._buffer is None:
            raise RuntimeError("Nothing rendered yet. Call render() first.")
        return self._buffer

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the last render as an image of shape (height, width, 3)."""
        return self.get_buffer().reshape(self._height, self._width, 3)

    def save_image(self, filepath: str) -> None:
        """Save the last render as PPM (``.ppm``) or with Pillow (anything else)."""
        from src.spheretrace.preview.export import save_png, write_ppm

        if str(filepath).lower().endswith(".ppm"):
            write_ppm(filepath, self.get_buffer(), self._width, self._height)
        else:
            save_png(filepath, self.get_buffer(), self._width, self._height)

    def __repr__(self) -> str:
        """Return a string representation of the renderer settings."""
        return (
            f"TileRenderer(width={self.width}, height={self.height}, "
            f"workers={self.worker_count}, spp={self.samples_per_pixel})"
        )
