"""Ready-made scenes paired with matching cameras.

Two scenes are provided:

- ``create_random_scene``: the classic "final scene": a huge ground sphere,
  a 22x22 grid of small randomly chosen spheres, and three large feature
  spheres (glass, brown diffuse, mirror metal), seen through a narrow
  depth-of-field camera.
- ``create_three_spheres_scene``: a small test scene with a diffuse sphere
  between a metal sphere and a hollow glass sphere, all resting on a large
  ground sphere. The hollow sphere is a positive-radius sphere paired with a
  slightly smaller negative-radius one.

Example:
    >>> from src.spheretrace.scene.showcase import create_random_scene
    >>> world, camera = create_random_scene(seed=42, aspect_ratio=800 / 300)
    >>> len(world) > 4
    True
"""

import logging

import numpy as np

from src.spheretrace.camera.thin_lens import ThinLensCamera
from src.spheretrace.materials import Dielectric, Lambertian, Metal
from src.spheretrace.scene.manager import HittableList, SceneManager

logger = logging.getLogger(__name__)

# =============================================================================
# Random Scene Parameters
# =============================================================================

GROUND_ALBEDO = (0.5, 0.5, 0.5)
GROUND_RADIUS = 1000.0

# Small spheres are placed on a grid cell [a, a + 0.9) x [b, b + 0.9)
GRID_RANGE = range(-11, 11)
SMALL_RADIUS_RANGE = (0.1, 0.3)

# Small spheres too close to this point would overlap the brown feature sphere
KEEP_OUT_CENTER = np.array([4.0, 0.2, 0.0])
KEEP_OUT_DISTANCE = 0.9

# Material choice thresholds: diffuse below 0.5, metal below 0.8, else glass
DIFFUSE_PROBABILITY = 0.5
METAL_PROBABILITY = 0.8
MAX_SMALL_FUZZ = 0.5

GLASS_INDEX = 1.5
BROWN_ALBEDO = (0.4, 0.2, 0.1)
MIRROR_ALBEDO = (0.7, 0.6, 0.5)

# Camera of the random scene
RANDOM_LOOK_FROM = (-14.0, 2.0, -4.0)
RANDOM_LOOK_AT = (-4.0, 1.0, 0.0)
RANDOM_VFOV = 15.0
RANDOM_APERTURE = 0.15


def create_random_scene(
    seed: int | None = None,
    aspect_ratio: float = 800.0 / 300.0,
) -> tuple[HittableList, ThinLensCamera]:
    """Create the random showcase scene.

    Args:
        seed: Seed for the scene layout. None gives a different layout on
            every call.
        aspect_ratio: Aspect ratio of the returned camera (image width over
            height).

    Returns:
        A tuple of (HittableList, ThinLensCamera). The camera focuses on its
        look-at point.
    """
    rng = np.random.default_rng(seed)
    scene = SceneManager()

    scene.add_lambertian_sphere((0.0, -GROUND_RADIUS, 0.0), GROUND_RADIUS, albedo=GROUND_ALBEDO)

    for a in GRID_RANGE:
        for b in GRID_RANGE:
            choose_mat = rng.random()
            radius = rng.uniform(*SMALL_RADIUS_RANGE)
            center = np.array([a + 0.9 * rng.random(), radius, b + 0.9 * rng.random()])

            if np.linalg.norm(center - KEEP_OUT_CENTER) <= KEEP_OUT_DISTANCE:
                continue

            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = tuple(float(c) for c in rng.random(3) * rng.random(3))
                material = Lambertian(albedo=albedo)
            elif choose_mat < METAL_PROBABILITY:
                albedo = tuple(float(c) for c in rng.uniform(0.5, 1.0, 3))
                material = Metal(albedo=albedo, fuzz=float(rng.uniform(0.0, MAX_SMALL_FUZZ)))
            else:
                material = Dielectric(refractive_index=GLASS_INDEX)

            scene.add_sphere(tuple(float(c) for c in center), float(radius), material)

    # Feature spheres
    scene.add_dielectric_sphere((0.0, 1.0, 0.0), 1.0, refractive_index=GLASS_INDEX)
    scene.add_lambertian_sphere((4.0, 1.0, 0.0), 1.0, albedo=BROWN_ALBEDO)
    scene.add_metal_sphere((-4.0, 1.0, 0.0), 1.0, albedo=MIRROR_ALBEDO, fuzz=0.0)

    camera = ThinLensCamera(
        look_from=RANDOM_LOOK_FROM,
        look_at=RANDOM_LOOK_AT,
        view_up=(0.0, 1.0, 0.0),
        vfov=RANDOM_VFOV,
        aspect_ratio=aspect_ratio,
        aperture=RANDOM_APERTURE,
    )

    world = scene.build()
    logger.debug("Random scene (seed=%s): %d spheres", seed, len(world))
    return world, camera


def create_three_spheres_scene(
    aspect_ratio: float = 2.0,
) -> tuple[HittableList, ThinLensCamera]:
    """Create the three-sphere test scene.

    Left to right: a hollow glass sphere, a diffuse sphere and a fuzzy metal
    sphere, on a yellowish ground, viewed head-on from the origin with a
    pinhole camera.

    Args:
        aspect_ratio: Aspect ratio of the returned camera.

    Returns:
        A tuple of (HittableList, ThinLensCamera).
    """
    scene = SceneManager()

    scene.add_lambertian_sphere((0.0, -100.5, -1.0), 100.0, albedo=(0.8, 0.8, 0.0))
    scene.add_lambertian_sphere((0.0, 0.0, -1.0), 0.5, albedo=(0.1, 0.2, 0.5))
    scene.add_metal_sphere((1.0, 0.0, -1.0), 0.5, albedo=(0.8, 0.6, 0.2), fuzz=0.3)

    # Hollow glass: outer shell plus an inverted inner surface
    scene.add_dielectric_sphere((-1.0, 0.0, -1.0), 0.5, refractive_index=GLASS_INDEX)
    scene.add_dielectric_sphere((-1.0, 0.0, -1.0), -0.45, refractive_index=GLASS_INDEX)

    camera = ThinLensCamera(
        look_from=(0.0, 0.0, 0.0),
        look_at=(0.0, 0.0, -1.0),
        view_up=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=aspect_ratio,
    )

    world = scene.build()
    logger.debug("Three-sphere scene: %d spheres", len(world))
    return world, camera
