"""Metal (specular reflective) material implementation.

Metals mirror the unit incident direction about the normal,

    R = I - 2(I . N)N

and then perturb the reflection by a random point in the unit sphere scaled
by the fuzz factor. A fuzz of 0 is a perfect mirror; fuzz values above 1 are
clamped to 1. When the perturbation pushes the scattered direction below the
surface the ray is absorbed.

Example:
    >>> from src.spheretrace.materials.metal import Metal
    >>> gold = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
    >>> # Use scatter_metal within a Taichi kernel:
    >>> # origin, direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, point, normal, stream
    >>> # )
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti
import taichi.math as tm

from src.spheretrace.core.sampling import random_in_unit_sphere
from src.spheretrace.core.vector import dot, reflect, unit_vector, vec3
from src.spheretrace.errors import ConfigurationError
from src.spheretrace.materials.types import MaterialType, validate_albedo


@dataclass(frozen=True)
class Metal:
    """Metal material description.

    Attributes:
        albedo: Reflective tint (R, G, B), each component in [0, 1].
        fuzz: Reflection blur, >= 0. Values above 1 behave like 1.
    """

    material_type: ClassVar[MaterialType] = MaterialType.METAL

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))
        if not self.fuzz >= 0.0:
            raise ConfigurationError(f"Fuzz = {self.fuzz} must be >= 0")
        object.__setattr__(self, "fuzz", float(self.fuzz))

    @property
    def parameter(self) -> float:
        """Scalar table entry: the fuzz factor."""
        return self.fuzz


@ti.func
def fuzzed_reflection(
    incident_direction: vec3,
    normal: vec3,
    fuzz: ti.f32,
    perturbation: vec3,
):
    """Reflect and perturb an incident direction.

    Split out of scatter_metal so the absorption rule can be checked against
    a known perturbation.

    Args:
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal.
        fuzz: The fuzz factor (clamped to [0, 1] here).
        perturbation: A point inside the unit sphere.

    Returns:
        A tuple (direction, did_scatter) where did_scatter is 1 only if
        dot(direction, normal) > 0.
    """
    reflected = reflect(unit_vector(incident_direction), normal)
    direction = reflected + tm.clamp(fuzz, 0.0, 1.0) * perturbation
    did_scatter = 0
    if dot(direction, normal) > 0.0:
        did_scatter = 1
    return direction, did_scatter


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f32,
    incident_direction: vec3,
    point: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Scatter a ray off a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The fuzz factor; 0 is a perfect mirror.
        incident_direction: The incoming ray direction (any length).
        point: The hit point, which becomes the scattered ray's origin.
        normal: The surface normal at the hit point.
        stream: The random stream of the calling worker.

    Returns:
        A tuple (origin, direction, attenuation, did_scatter). did_scatter is
        0 when the fuzzed reflection points into the surface.
    """
    direction, did_scatter = fuzzed_reflection(
        incident_direction, normal, fuzz, random_in_unit_sphere(stream)
    )
    return point, direction, albedo, did_scatter
