"""Path tracing integrator for Monte Carlo light transport.

This module follows one light path from the camera through the scene,
bouncing off surfaces according to their material, until it escapes to the
sky, gets absorbed, or reaches the depth cap.

The path tracer solves the rendering equation without any light sources
besides the sky: radiance arriving at the camera is the sky color of the
escaping ray multiplied by every attenuation collected along the path.

Key features:
    - Material dispatch (Lambertian, Metal, Dielectric)
    - Hard depth cap (MAX_DEPTH bounces, then black)
    - Vertical sky gradient as the only emitter
    - Random draws taken from the caller's own stream

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.core.integrator import trace
    >>> from src.spheretrace.core.sampling import seed_streams
    >>>
    >>> seed_streams([12345])
    >>> color = trace((0.0, 0.0, 0.0), (0.0, 1.0, 0.0))  # straight up: sky blue
"""

from collections.abc import Sequence

import taichi as ti

from src.spheretrace.core.ray import Ray
from src.spheretrace.core.vector import unit_vector, vec3
from src.spheretrace.materials.dielectric import scatter_dielectric
from src.spheretrace.materials.lambertian import scatter_lambertian
from src.spheretrace.materials.metal import scatter_metal
from src.spheretrace.materials.types import MaterialType
from src.spheretrace.scene.intersection import (
    get_material_albedo,
    get_material_parameter,
    get_material_type,
    intersect_scene,
)

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray bounces; a hit at this depth contributes black
MAX_DEPTH = 50

# t_min and t_max for ray intersection
T_MIN = 0.001
T_MAX = float("inf")

# Sky gradient endpoints
SKY_WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)


# =============================================================================
# Background
# =============================================================================


@ti.func
def background(direction: vec3) -> vec3:
    """Sky color for a ray that escaped the scene.

    Blends white (looking straight down) into light blue (looking straight
    up) by the height of the normalized direction.
    """
    t = 0.5 * (unit_vector(direction).y + 1.0)
    return (1.0 - t) * SKY_WHITE + t * SKY_BLUE


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def scatter_material(
    material_id: ti.i32,
    incident_direction: vec3,
    point: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Dispatch to the appropriate material scattering function.

    Args:
        material_id: Row of the material table.
        incident_direction: The incoming ray direction (any length).
        point: The hit point.
        normal: The surface normal from the intersection.
        stream: The random stream of the calling worker.

    Returns:
        A tuple of (origin, direction, attenuation, did_scatter). Unknown
        material ids absorb the ray.
    """
    mat_type = get_material_type(material_id)

    # Default values
    origin = point
    direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == int(MaterialType.LAMBERTIAN):
        albedo = get_material_albedo(material_id)
        origin, direction, attenuation, did_scatter = scatter_lambertian(
            albedo, point, normal, stream
        )

    elif mat_type == int(MaterialType.METAL):
        albedo = get_material_albedo(material_id)
        fuzz = get_material_parameter(material_id)
        origin, direction, attenuation, did_scatter = scatter_metal(
            albedo, fuzz, incident_direction, point, normal, stream
        )

    elif mat_type == int(MaterialType.DIELECTRIC):
        refractive_index = get_material_parameter(material_id)
        origin, direction, attenuation, did_scatter = scatter_dielectric(
            refractive_index, incident_direction, point, normal, stream
        )

    return origin, direction, attenuation, did_scatter


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_ray(
    ray_origin: vec3,
    ray_direction: vec3,
    stream: ti.i32,
    max_depth: ti.i32,
) -> vec3:
    """Trace a single path and return the radiance it carries.

    Depth starts at 0 for the camera ray. A hit at depth < max_depth whose
    material scatters continues the path with the scattered ray; any other
    hit ends it with black. A miss ends it with the sky color. Throughput is
    the product of the attenuations collected so far.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (any length).
        stream: The random stream of the calling worker.
        max_depth: The bounce cap; camera paths use MAX_DEPTH.

    Returns:
        The estimated radiance (RGB) for this path.
    """
    origin = ray_origin
    direction = ray_direction

    radiance = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for depth in range(max_depth + 1):
        if active == 1:
            hit_record = intersect_scene(origin, direction, T_MIN, T_MAX)

            if hit_record.hit == 0:
                radiance = throughput * background(direction)
                active = 0
            elif depth >= max_depth:
                # Depth cap reached: the path contributes nothing
                active = 0
            else:
                scattered_origin, scattered_direction, attenuation, did_scatter = (
                    scatter_material(
                        hit_record.material_id,
                        direction,
                        hit_record.point,
                        hit_record.normal,
                        stream,
                    )
                )

                if did_scatter == 0:
                    # Ray was absorbed
                    active = 0
                else:
                    throughput *= attenuation
                    origin = scattered_origin
                    direction = scattered_direction

    return radiance


@ti.func
def trace_camera_ray(ray: Ray, stream: ti.i32) -> vec3:
    """Trace a path starting with a camera ray."""
    return trace_ray(ray.origin, ray.direction, stream, MAX_DEPTH)


# =============================================================================
# Host-side Helpers
# =============================================================================

_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.kernel
def _trace_single(origin: vec3, direction: vec3, stream: ti.i32, max_depth: ti.i32):
    # Single-iteration outer loop keeps the bounce loop serial
    for _ in range(1):
        _trace_result[None] = trace_ray(origin, direction, stream, max_depth)


def trace(
    origin: Sequence[float],
    direction: Sequence[float],
    stream: int = 0,
    max_depth: int = MAX_DEPTH,
) -> tuple[float, float, float]:
    """Trace one path from Python scope against the uploaded scene.

    Used for testing and debugging individual paths. The stream must have
    been seeded with ``seed_streams`` first.

    Args:
        origin: The ray origin as (x, y, z).
        direction: The ray direction as (x, y, z), any nonzero length.
        stream: The random stream to draw from.
        max_depth: The bounce cap.

    Returns:
        Tuple of (R, G, B) radiance.
    """
    _trace_single(
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        stream,
        max_depth,
    )
    color = _trace_result[None]
    return (float(color[0]), float(color[1]), float(color[2]))
