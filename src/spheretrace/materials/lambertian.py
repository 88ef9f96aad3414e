"""Lambertian (ideal diffuse) material implementation.

A diffuse bounce aims at a random point inside the unit sphere tangent to the
surface at the hit point:

    target = point + normal + random_in_unit_sphere()

so scattered directions are biased toward the normal. The attenuation is the
albedo and the material always scatters.

Example:
    >>> from src.spheretrace.materials.lambertian import Lambertian
    >>> red = Lambertian(albedo=(0.8, 0.1, 0.1))
    >>> # Use scatter_lambertian within a Taichi kernel:
    >>> # origin, direction, attenuation, did_scatter = scatter_lambertian(
    >>> #     albedo, point, normal, stream
    >>> # )
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti

from src.spheretrace.core.sampling import random_in_unit_sphere
from src.spheretrace.core.vector import vec3
from src.spheretrace.materials.types import MaterialType, validate_albedo


@dataclass(frozen=True)
class Lambertian:
    """Diffuse material description.

    Attributes:
        albedo: Diffuse reflectance (R, G, B), each component in [0, 1].
    """

    material_type: ClassVar[MaterialType] = MaterialType.LAMBERTIAN

    albedo: tuple[float, float, float]

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))

    @property
    def parameter(self) -> float:
        """Scalar table entry (unused for diffuse surfaces)."""
        return 0.0


@ti.func
def scatter_lambertian(
    albedo: vec3,
    point: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Scatter a ray off a diffuse surface.

    Args:
        albedo: The diffuse reflectance color (RGB).
        point: The hit point, which becomes the scattered ray's origin.
        normal: The surface normal at the hit point.
        stream: The random stream of the calling worker.

    Returns:
        A tuple (origin, direction, attenuation, did_scatter) where direction
        is target - point and did_scatter is always 1.
    """
    target = point + normal + random_in_unit_sphere(stream)
    return point, target - point, albedo, 1
