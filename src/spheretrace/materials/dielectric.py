"""Dielectric (glass/water) material implementation.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when no refracted direction exists

The side of the surface is read from the sign of dot(direction, normal). A
ray travelling along the normal is leaving the material: the normal is
flipped and the index ratio is the refractive index itself. Otherwise the ray
enters with ratio 1 / index. Because sphere normals follow the sign of the
radius, an inverted sphere swaps the two cases, which is what makes a hollow
glass shell work.

A single uniform draw chooses between reflection (with the Schlick
probability, or always under total internal reflection) and refraction. Glass
absorbs nothing and always scatters.

Example:
    >>> from src.spheretrace.materials.dielectric import Dielectric
    >>> glass = Dielectric(refractive_index=1.5)
    >>> # Use scatter_dielectric within a Taichi kernel:
    >>> # origin, direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     refractive_index, incident_dir, point, normal, stream
    >>> # )
"""

from dataclasses import dataclass
from typing import ClassVar

import taichi as ti

from src.spheretrace.core.sampling import random_float
from src.spheretrace.core.vector import dot, length, reflect, refract, schlick, vec3
from src.spheretrace.errors import ConfigurationError
from src.spheretrace.materials.types import MaterialType


@dataclass(frozen=True)
class Dielectric:
    """Dielectric material description.

    Attributes:
        refractive_index: Index of refraction, > 1. Common values:
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    material_type: ClassVar[MaterialType] = MaterialType.DIELECTRIC

    refractive_index: float = 1.5

    def __post_init__(self) -> None:
        if not self.refractive_index > 1.0:
            raise ConfigurationError(
                f"Index of refraction = {self.refractive_index} must be greater than 1.0"
            )
        object.__setattr__(self, "refractive_index", float(self.refractive_index))

    @property
    def parameter(self) -> float:
        """Scalar table entry: the refractive index."""
        return self.refractive_index


@ti.func
def reflect_probability(
    refractive_index: ti.f32,
    incident_direction: vec3,
    normal: vec3,
):
    """Compute the refraction geometry and the probability of reflecting.

    Args:
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The surface normal as returned by the intersection.

    Returns:
        A tuple (refracted, probability). probability is the Schlick
        reflectance when refraction is possible and 1 under total internal
        reflection, in which case refracted is the zero vector.
    """
    outward_normal = normal
    ratio = 1.0 / refractive_index
    cosine = 0.0

    d_dot_n = dot(incident_direction, normal)
    inv_length = 1.0 / length(incident_direction)
    if d_dot_n > 0.0:
        outward_normal = -normal
        ratio = refractive_index
        cosine = refractive_index * d_dot_n * inv_length
    else:
        cosine = -d_dot_n * inv_length

    refracted, can_refract = refract(incident_direction, outward_normal, ratio)

    probability = 1.0
    if can_refract == 1:
        probability = schlick(cosine, refractive_index)
    return refracted, probability


@ti.func
def scatter_dielectric(
    refractive_index: ti.f32,
    incident_direction: vec3,
    point: vec3,
    normal: vec3,
    stream: ti.i32,
):
    """Scatter a ray off a dielectric surface.

    Args:
        refractive_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        point: The hit point, which becomes the scattered ray's origin.
        normal: The surface normal as returned by the intersection.
        stream: The random stream of the calling worker.

    Returns:
        A tuple (origin, direction, attenuation, did_scatter) with white
        attenuation and did_scatter always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    refracted, probability = reflect_probability(refractive_index, incident_direction, normal)

    direction = refracted
    if random_float(stream) < probability:
        direction = reflect(incident_direction, normal)

    return point, direction, attenuation, 1
