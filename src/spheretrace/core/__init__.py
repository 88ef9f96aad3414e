"""Core rendering module.

Components:
    vector: 3-component vector math (dot, cross, reflect, refract, Schlick)
    ray: Ray data structure and evaluation
    sampling: Per-worker random streams and rejection samplers
    integrator: Path tracing with a hard depth cap and a sky background
    renderer: Parallel chunked image renderer

All compute-intensive operations are Taichi functions and kernels.
"""

from .ray import Ray, make_ray, ray_at
from .sampling import (
    MAX_STREAMS,
    get_stream_state,
    next_u32,
    random_float,
    random_in_unit_disk,
    random_in_unit_sphere,
    seed_streams,
    spawn_seeds,
)
from .vector import (
    cross,
    dot,
    length,
    length_squared,
    reflect,
    refract,
    schlick,
    sqrt_components,
    unit_vector,
    vec3,
)

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.spheretrace.core.integrator or src.spheretrace.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "dot",
    "cross",
    "length",
    "length_squared",
    "unit_vector",
    "sqrt_components",
    "reflect",
    "refract",
    "schlick",
    "MAX_STREAMS",
    "spawn_seeds",
    "seed_streams",
    "get_stream_state",
    "next_u32",
    "random_float",
    "random_in_unit_sphere",
    "random_in_unit_disk",
]
