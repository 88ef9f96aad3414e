"""Independent per-worker random streams for Monte Carlo sampling.

Every rendering worker owns one stream: a 32-bit xorshift state stored in
its own slot of a Taichi field. A worker only ever advances its own slot, so
parallel workers never contend for a generator and the sequence of draws a
worker sees depends only on its seed, never on thread scheduling.

Seeds are derived on the host with ``numpy.random.SeedSequence``, which
spawns statistically independent child seeds from one root seed. Given the
same root seed the whole render is reproducible.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.core.sampling import seed_streams, spawn_seeds
    >>> seed_streams(spawn_seeds(8, seed=1234))
    >>> # Inside a kernel, worker w draws with random_float(w)
"""

from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.spheretrace.core.vector import length_squared, vec3
from src.spheretrace.errors import ConfigurationError

# Maximum number of independent streams (one per rendering worker)
MAX_STREAMS = 4096

# Fallback state for a seed that hashes to zero (xorshift never leaves zero)
_NONZERO_STATE = 0x9E3779B9

# One xorshift32 state per stream
_stream_states = ti.field(dtype=ti.u32, shape=MAX_STREAMS)


def spawn_seeds(count: int, seed: int | None = None) -> npt.NDArray[np.uint32]:
    """Derive one independent 32-bit stream state per worker.

    Args:
        count: Number of streams to derive.
        seed: Root seed. None draws fresh entropy from the OS, making the
            render non-reproducible.

    Returns:
        Array of ``count`` nonzero uint32 states.
    """
    children = np.random.SeedSequence(seed).spawn(count)
    states = np.array(
        [child.generate_state(1, dtype=np.uint32)[0] for child in children],
        dtype=np.uint32,
    )
    states[states == 0] = _NONZERO_STATE
    return states


def seed_streams(states: Sequence[int] | npt.NDArray[np.uint32]) -> None:
    """Load stream states into the device field, stream i taking states[i].

    Streams beyond ``len(states)`` keep whatever state they had.

    Args:
        states: Nonzero 32-bit states, at most MAX_STREAMS of them.

    Raises:
        ConfigurationError: If there are too many states or any is zero or
            does not fit in 32 bits.
    """
    values = np.asarray(states, dtype=np.int64)
    if values.ndim != 1 or len(values) > MAX_STREAMS:
        raise ConfigurationError(
            f"Expected at most {MAX_STREAMS} stream states, got shape {values.shape}"
        )
    if np.any(values <= 0) or np.any(values > 0xFFFFFFFF):
        raise ConfigurationError("Stream states must be nonzero 32-bit unsigned integers")

    full = _stream_states.to_numpy()
    full[: len(values)] = values.astype(np.uint32)
    _stream_states.from_numpy(full)


def get_stream_state(stream: int) -> int:
    """Read the current state of one stream (for reproducibility checks)."""
    return int(_stream_states[stream])


@ti.func
def next_u32(stream: ti.i32) -> ti.u32:
    """Advance a stream by one xorshift32 step and return the new state."""
    x = _stream_states[stream]
    x = x ^ (x << ti.cast(13, ti.u32))
    x = x ^ (x >> ti.cast(17, ti.u32))
    x = x ^ (x << ti.cast(5, ti.u32))
    _stream_states[stream] = x
    return x


@ti.func
def random_float(stream: ti.i32) -> ti.f32:
    """Draw a uniform float in [0, 1) from a stream.

    Uses the top 24 bits of the state so the result is exactly representable
    in float32 and strictly below 1.
    """
    return ti.cast(next_u32(stream) >> ti.cast(8, ti.u32), ti.f32) * (1.0 / 16777216.0)


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Generate a uniformly distributed point strictly inside the unit sphere.

    Rejection sampling: draw points uniformly in [-1, 1]^3 until one has
    squared length below 1 (about 52% of draws are accepted). The loop has no
    iteration cap.

    Args:
        stream: The random stream to draw from.

    Returns:
        A point p with |p|^2 < 1.
    """
    p = vec3(1.0, 1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = 2.0 * vec3(random_float(stream), random_float(stream), random_float(stream)) - vec3(
            1.0, 1.0, 1.0
        )
    return p


@ti.func
def random_in_unit_disk(stream: ti.i32) -> vec3:
    """Generate a uniformly distributed point strictly inside the unit disk.

    Rejection sampling in the xy-plane over [-1, 1]^2 (about 78% of draws are
    accepted). Used for thin-lens aperture sampling.

    Args:
        stream: The random stream to draw from.

    Returns:
        A point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(1.0, 1.0, 0.0)
    while length_squared(p) >= 1.0:
        p = 2.0 * vec3(random_float(stream), random_float(stream), 0.0) - vec3(1.0, 1.0, 0.0)
    return p
