"""Render settings and Taichi backend initialization.

Taichi must be initialized before any module that declares fields is
imported, so scripts call ``init_backend`` first and import the renderer,
scene and camera modules afterwards.

Example:
    >>> from src.spheretrace.config import RenderSettings, init_backend
    >>> init_backend("cpu")
    >>> settings = RenderSettings(width=800, height=300, workers=10, samples_per_pixel=100)
    >>> settings.validate()
    >>> from src.spheretrace.core.renderer import render
"""

import logging
from dataclasses import dataclass

import taichi as ti

from src.spheretrace.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Defaults of the showcase render
DEFAULT_WIDTH = 800
DEFAULT_HEIGHT = 300
DEFAULT_WORKERS = 10
DEFAULT_SAMPLES_PER_PIXEL = 100

_ARCHES = {
    "cpu": ti.cpu,
    "gpu": ti.gpu,
}


@dataclass
class RenderSettings:
    """Parameters of one render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        workers: Number of parallel rendering workers.
        samples_per_pixel: Camera rays averaged per pixel.
        seed: Root seed for the worker streams; None for a fresh render.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    workers: int = DEFAULT_WORKERS
    samples_per_pixel: int = DEFAULT_SAMPLES_PER_PIXEL
    seed: int | None = None

    @property
    def aspect_ratio(self) -> float:
        """Image width divided by height."""
        return self.width / self.height

    @property
    def pixel_count(self) -> int:
        """Total number of pixels."""
        return self.width * self.height

    def validate(self) -> None:
        """Check that every setting is usable.

        Raises:
            ConfigurationError: If a size, worker or sample count is not a
                positive integer, or the seed is negative.
        """
        for name in ("width", "height", "workers", "samples_per_pixel"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ConfigurationError(f"{name} = {value!r} must be a positive integer")
        if self.seed is not None and (not isinstance(self.seed, int) or self.seed < 0):
            raise ConfigurationError(f"seed = {self.seed!r} must be a non-negative integer")


def init_backend(
    arch: str = "cpu",
    *,
    num_threads: int | None = None,
    debug: bool = False,
    random_seed: int = 0,
) -> None:
    """Initialize Taichi. Call once, before importing field-declaring modules.

    Args:
        arch: "cpu" or "gpu". A GPU that fails to initialize falls back to
            the CPU with a warning.
        num_threads: CPU thread pool size; None lets Taichi pick.
        debug: Enable Taichi's bounds checking.
        random_seed: Seed of Taichi's own generator (unused by the renderer,
            which has its own streams).

    Raises:
        ConfigurationError: On an unknown arch or non-positive thread count.
    """
    if arch not in _ARCHES:
        raise ConfigurationError(f"Unknown arch {arch!r}, expected one of {sorted(_ARCHES)}")
    if num_threads is not None and num_threads <= 0:
        raise ConfigurationError(f"num_threads = {num_threads} must be positive")

    options = {"debug": debug, "random_seed": random_seed}
    if num_threads is not None:
        options["cpu_max_num_threads"] = num_threads

    if arch == "gpu":
        try:
            # Taichi itself drops to the CPU when no GPU backend is available
            ti.init(arch=ti.gpu, **options)
            logger.info("Taichi initialized on %s", current_arch())
            return
        except Exception as exc:
            logger.warning("GPU initialization failed (%s), falling back to CPU", exc)

    ti.init(arch=ti.cpu, **options)
    logger.info("Taichi initialized on %s", current_arch())


def current_arch() -> str:
    """Get the name of the backend Taichi is running on, e.g. "x64" or "cuda"."""
    return ti.lang.impl.current_cfg().arch.name
