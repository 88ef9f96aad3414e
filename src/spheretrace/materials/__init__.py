"""Materials module for light scattering models.

Components:
    types: Material tags and parameter validation
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick reflectance

Each material has a frozen host-side description (validated on construction)
and a Taichi scatter function returning
``(origin, direction, attenuation, did_scatter)``. The material set is a
closed variant: ``Material`` is the union of the three descriptions and the
integrator dispatches on ``MaterialType``.
"""

from typing import Union

from .dielectric import (
    Dielectric,
    reflect_probability,
    scatter_dielectric,
)
from .lambertian import Lambertian, scatter_lambertian
from .metal import Metal, fuzzed_reflection, scatter_metal
from .types import MaterialType, validate_albedo

Material = Union[Lambertian, Metal, Dielectric]

__all__ = [
    "Material",
    "MaterialType",
    "validate_albedo",
    # Lambertian
    "Lambertian",
    "scatter_lambertian",
    # Metal
    "Metal",
    "fuzzed_reflection",
    "scatter_metal",
    # Dielectric
    "Dielectric",
    "reflect_probability",
    "scatter_dielectric",
]
