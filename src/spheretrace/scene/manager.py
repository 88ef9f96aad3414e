"""Host-side scene description and builder.

A scene is an ordered, immutable ``HittableList`` of spheres, each carrying
its own material description. ``SceneManager`` is the mutable builder used
while populating a scene; ``build()`` freezes the result. The frozen list is
what gets uploaded to the device fields before rendering, after which nothing
adds, removes or changes a primitive.

Example:
    >>> from src.spheretrace.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_lambertian_sphere((0, -100.5, -1), 100, albedo=(0.8, 0.8, 0.0))
    >>> scene.add_dielectric_sphere((-1, 0, -1), 0.5, refractive_index=1.5)
    >>> scene.add_dielectric_sphere((-1, 0, -1), -0.45, refractive_index=1.5)
    >>> world = scene.build()
"""

import math
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from src.spheretrace.errors import ConfigurationError
from src.spheretrace.materials import Dielectric, Lambertian, Material, Metal


@dataclass(frozen=True)
class SphereInfo:
    """A sphere placed in the scene.

    Attributes:
        center: The center of the sphere.
        radius: The signed radius; negative radii invert the surface (normals
            point inward). Must be nonzero.
        material: The material description of the surface.
    """

    center: tuple[float, float, float]
    radius: float
    material: Material

    def __post_init__(self) -> None:
        if len(self.center) != 3:
            raise ConfigurationError(f"Sphere center must have 3 components, got {self.center}")
        if not all(math.isfinite(c) for c in self.center):
            raise ConfigurationError(f"Sphere center {self.center} must have finite components")
        if not (math.isfinite(self.radius) and self.radius != 0.0):
            raise ConfigurationError(f"Sphere radius = {self.radius} must be finite and nonzero")
        if not isinstance(self.material, (Lambertian, Metal, Dielectric)):
            raise ConfigurationError(f"Unsupported material: {self.material!r}")
        object.__setattr__(
            self,
            "center",
            (float(self.center[0]), float(self.center[1]), float(self.center[2])),
        )
        object.__setattr__(self, "radius", float(self.radius))


@dataclass(frozen=True)
class HittableList:
    """An ordered, read-only collection of spheres.

    Iteration order is insertion order, which is also the tie-break order for
    equal-distance hits.

    Attributes:
        spheres: The spheres in insertion order.
    """

    spheres: tuple[SphereInfo, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "spheres", tuple(self.spheres))

    def __len__(self) -> int:
        return len(self.spheres)

    def __iter__(self) -> Iterator[SphereInfo]:
        return iter(self.spheres)

    def materials(self) -> list[Material]:
        """Distinct materials in order of first use."""
        seen: dict[Material, None] = {}
        for sphere in self.spheres:
            seen.setdefault(sphere.material, None)
        return list(seen)


class SceneManager:
    """Builder for a ``HittableList``.

    Attributes:
        spheres: Spheres added so far, in insertion order.

    Example:
        >>> scene = SceneManager()
        >>> scene.add_lambertian_sphere((0, 0, -1), 0.5, albedo=(0.8, 0.1, 0.1))
        >>> scene.add_metal_sphere((1, 0, -1), 0.5, albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        >>> world = scene.build()
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.spheres: list[SphereInfo] = []

    def clear(self) -> None:
        """Remove every sphere added so far."""
        self.spheres.clear()

    def add_sphere(
        self,
        center: Sequence[float],
        radius: float,
        material: Material,
    ) -> int:
        """Add a sphere with an existing material description.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The signed, nonzero radius.
            material: The material of the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            ConfigurationError: If the radius is zero or the material is not
                a supported material description.
        """
        self.spheres.append(SphereInfo(tuple(center), radius, material))
        return len(self.spheres) - 1

    def add_lambertian_sphere(
        self,
        center: Sequence[float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> int:
        """Add a sphere with a new diffuse material."""
        return self.add_sphere(center, radius, Lambertian(albedo=albedo))

    def add_metal_sphere(
        self,
        center: Sequence[float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> int:
        """Add a sphere with a new metal material."""
        return self.add_sphere(center, radius, Metal(albedo=albedo, fuzz=fuzz))

    def add_dielectric_sphere(
        self,
        center: Sequence[float],
        radius: float,
        refractive_index: float = 1.5,
    ) -> int:
        """Add a sphere with a new dielectric material.

        Pair a positive and a slightly smaller negative radius at the same
        center for a hollow glass shell.
        """
        return self.add_sphere(center, radius, Dielectric(refractive_index=refractive_index))

    def get_sphere_count(self) -> int:
        """Get the number of spheres added so far."""
        return len(self.spheres)

    def build(self) -> HittableList:
        """Freeze the spheres added so far into a ``HittableList``."""
        return HittableList(tuple(self.spheres))
