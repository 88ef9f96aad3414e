"""Scene module for scene description and intersection queries.

Components:
    manager: Host-side scene builder (SceneManager) and frozen HittableList
    intersection: Device-side sphere and material tables, closest-hit query
    showcase: Ready-made scenes paired with their cameras

A scene is built on the host, frozen, then uploaded once before rendering:
    scene = SceneManager()
    scene.add_lambertian_sphere((0, 0, -1), 0.5, albedo=(0.8, 0.3, 0.3))
    upload_scene(scene.build())
"""

from .intersection import (
    MAX_MATERIALS,
    MAX_SPHERES,
    clear_scene,
    get_material_count,
    get_sphere_count,
    intersect_scene,
    upload_scene,
)
from .manager import HittableList, SceneManager, SphereInfo

# Note: showcase is NOT imported here; it depends on the camera module.
# Import it directly from src.spheretrace.scene.showcase.

__all__ = [
    "SceneManager",
    "SphereInfo",
    "HittableList",
    "MAX_SPHERES",
    "MAX_MATERIALS",
    "upload_scene",
    "clear_scene",
    "intersect_scene",
    "get_sphere_count",
    "get_material_count",
]
