"""Device-side scene storage and closest-hit queries.

The scene lives in preallocated Taichi fields using a Structure of Arrays
layout: one array per sphere attribute and one per material attribute. Every
sphere refers to a row of the material table, which stores the material tag,
its albedo and its single scalar parameter (metal fuzz or refractive index).

``upload_scene`` writes a frozen ``HittableList`` into these fields. Kernels
only ever read them, so every rendering worker can query the scene
concurrently without synchronization.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.scene.intersection import upload_scene, intersect_scene
    >>> upload_scene(world)
    >>> # Use intersect_scene within a Taichi kernel
"""

import logging

import numpy as np
import taichi as ti

from src.spheretrace.core.vector import vec3
from src.spheretrace.errors import CapacityError
from src.spheretrace.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record
from src.spheretrace.scene.manager import HittableList

logger = logging.getLogger(__name__)

# Maximum number of primitives and materials supported in the scene
MAX_SPHERES = 1024
MAX_MATERIALS = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Material table: tag, albedo and scalar parameter per material id
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_parameters = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives and materials from the device scene.

    Resets the counts to zero. Stale field data is ignored and overwritten by
    the next upload.
    """
    num_spheres[None] = 0
    num_materials[None] = 0


def upload_scene(world: HittableList) -> None:
    """Write a scene into the device fields, replacing the previous one.

    Materials are deduplicated: spheres sharing an equal material description
    share one table row.

    Args:
        world: The frozen scene to upload.

    Raises:
        CapacityError: If the scene has more spheres or distinct materials
            than the preallocated fields hold.
    """
    materials = world.materials()
    if len(world) > MAX_SPHERES:
        raise CapacityError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded: {len(world)}")
    if len(materials) > MAX_MATERIALS:
        raise CapacityError(
            f"Maximum number of materials ({MAX_MATERIALS}) exceeded: {len(materials)}"
        )

    material_ids = {material: index for index, material in enumerate(materials)}

    types = np.zeros(MAX_MATERIALS, dtype=np.int32)
    albedos = np.zeros((MAX_MATERIALS, 3), dtype=np.float32)
    parameters = np.zeros(MAX_MATERIALS, dtype=np.float32)
    for material, index in material_ids.items():
        types[index] = int(material.material_type)
        albedos[index] = getattr(material, "albedo", (1.0, 1.0, 1.0))
        parameters[index] = material.parameter

    centers = np.zeros((MAX_SPHERES, 3), dtype=np.float32)
    radii = np.zeros(MAX_SPHERES, dtype=np.float32)
    sphere_materials = np.full(MAX_SPHERES, -1, dtype=np.int32)
    for index, sphere in enumerate(world):
        centers[index] = sphere.center
        radii[index] = sphere.radius
        sphere_materials[index] = material_ids[sphere.material]

    material_types.from_numpy(types)
    material_albedos.from_numpy(albedos)
    material_parameters.from_numpy(parameters)
    num_materials[None] = len(materials)

    sphere_centers.from_numpy(centers)
    sphere_radii.from_numpy(radii)
    sphere_material_ids.from_numpy(sphere_materials)
    num_spheres[None] = len(world)

    logger.debug("Uploaded %d spheres with %d materials", len(world), len(materials))


def get_sphere_count() -> int:
    """Get the number of spheres in the device scene."""
    return int(num_spheres[None])


def get_material_count() -> int:
    """Get the number of materials in the device scene."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material tag for a material id, -1 for invalid ids."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_albedo(material_id: ti.i32) -> vec3:
    """Get the albedo of a material."""
    return material_albedos[material_id]


@ti.func
def get_material_parameter(material_id: ti.i32) -> ti.f32:
    """Get the scalar parameter (fuzz or refractive index) of a material."""
    return material_parameters[material_id]


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Find the closest intersection of a ray with the scene.

    Tests every sphere in insertion order, shrinking the upper bound to the
    closest accepted hit so a later sphere only replaces the result when it
    is strictly closer. Linear in the number of spheres.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction vector of the ray.
        t_min: Exclusive lower bound on accepted t.
        t_max: Exclusive upper bound on accepted t.

    Returns:
        The closest HitRecord with its material_id filled in, or a miss record.
    """
    closest_t = t_max
    result = make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = HitRecord(
                hit=1,
                t=rec.t,
                point=rec.point,
                normal=rec.normal,
                material_id=sphere_material_ids[i],
            )

    return result

