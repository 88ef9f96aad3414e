"""Unit tests for device-side scene storage and closest-hit queries.

Tests cover:
- Uploading spheres and deduplicated materials
- Capacity errors
- Closest hit selection and insertion-order tie breaking
- Material table lookups
"""

import pytest
import taichi as ti


def _query(origin, direction, t_min=0.001, t_max=float("inf")):
    """Run intersect_scene and return (hit, t, material_id, normal)."""
    from src.spheretrace.core.vector import vec3
    from src.spheretrace.scene.intersection import intersect_scene

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())
    normal = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(
        ox: ti.f32, oy: ti.f32, oz: ti.f32,
        dx: ti.f32, dy: ti.f32, dz: ti.f32,
        lo: ti.f32, hi: ti.f32,
    ):
        # Single-iteration outer loop keeps the sphere scan serial
        for _ in range(1):
            rec = intersect_scene(vec3(ox, oy, oz), vec3(dx, dy, dz), lo, hi)
            hit[None] = rec.hit
            t_val[None] = rec.t
            material_id[None] = rec.material_id
            normal[None] = rec.normal

    test_kernel(*origin, *direction, t_min, t_max)
    return hit[None], t_val[None], material_id[None], tuple(normal[None])


class TestSceneUpload:
    """Tests for upload_scene and the device tables."""

    def test_empty_scene(self):
        """Test a freshly cleared scene has nothing to hit."""
        from src.spheretrace.scene.intersection import get_material_count, get_sphere_count

        assert get_sphere_count() == 0
        assert get_material_count() == 0
        hit, _, material_id, _ = _query((0, 0, 0), (0, 0, -1))
        assert hit == 0
        assert material_id == -1

    def test_upload_counts(self):
        """Test shared materials occupy one table row."""
        from src.spheretrace.scene.intersection import (
            get_material_count,
            get_sphere_count,
            upload_scene,
        )
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((-1, 0, -1), 0.5)
        scene.add_dielectric_sphere((-1, 0, -1), -0.45)
        scene.add_metal_sphere((1, 0, -1), 0.5, albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        upload_scene(scene.build())

        assert get_sphere_count() == 3
        assert get_material_count() == 2

    def test_material_table_lookup(self):
        """Test material tag, albedo and parameter are readable on device."""
        from src.spheretrace.materials import MaterialType
        from src.spheretrace.scene.intersection import (
            get_material_albedo,
            get_material_parameter,
            get_material_type,
            upload_scene,
        )
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((1, 0, -1), 0.5, albedo=(0.8, 0.6, 0.2), fuzz=0.3)
        scene.add_dielectric_sphere((-1, 0, -1), 0.5, refractive_index=2.4)
        upload_scene(scene.build())

        types = ti.field(dtype=ti.i32, shape=3)
        params = ti.field(dtype=ti.f32, shape=2)
        albedo = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            types[0] = get_material_type(0)
            types[1] = get_material_type(1)
            types[2] = get_material_type(7)
            params[0] = get_material_parameter(0)
            params[1] = get_material_parameter(1)
            albedo[None] = get_material_albedo(0)

        test_kernel()
        assert types[0] == int(MaterialType.METAL)
        assert types[1] == int(MaterialType.DIELECTRIC)
        assert types[2] == -1
        assert params[0] == pytest.approx(0.3)
        assert params[1] == pytest.approx(2.4)
        assert tuple(albedo[None]) == pytest.approx((0.8, 0.6, 0.2))

    def test_too_many_spheres(self):
        """Test exceeding the sphere capacity raises CapacityError."""
        from src.spheretrace.errors import CapacityError
        from src.spheretrace.materials import Lambertian
        from src.spheretrace.scene.intersection import MAX_SPHERES, get_sphere_count, upload_scene
        from src.spheretrace.scene.manager import HittableList, SphereInfo

        material = Lambertian((0.5, 0.5, 0.5))
        spheres = tuple(
            SphereInfo((float(i), 0.0, 0.0), 0.1, material) for i in range(MAX_SPHERES + 1)
        )
        with pytest.raises(CapacityError):
            upload_scene(HittableList(spheres))
        assert get_sphere_count() == 0


class TestClosestHit:
    """Tests for intersect_scene."""

    def test_closest_of_two(self):
        """Test the nearer sphere wins regardless of insertion order."""
        from src.spheretrace.scene.intersection import upload_scene
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0, 0, -10), 1.0, albedo=(0.1, 0.1, 0.1))
        scene.add_metal_sphere((0, 0, -3), 1.0, albedo=(0.9, 0.9, 0.9))
        upload_scene(scene.build())

        hit, t, material_id, normal = _query((0, 0, 0), (0, 0, -1))
        assert hit == 1
        assert t == pytest.approx(2.0, abs=1e-5)
        assert material_id == 1
        assert normal == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)

    def test_equal_distance_keeps_first(self):
        """Test coincident spheres report the earlier inserted one."""
        from src.spheretrace.scene.intersection import upload_scene
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0, 0, -3), 1.0, albedo=(0.1, 0.1, 0.1))
        scene.add_lambertian_sphere((0, 0, -3), 1.0, albedo=(0.9, 0.9, 0.9))
        upload_scene(scene.build())

        hit, _, material_id, _ = _query((0, 0, 0), (0, 0, -1))
        assert hit == 1
        assert material_id == 0

    def test_t_min_excludes_self_hit(self):
        """Test a ray leaving a surface does not hit it again at t ~ 0."""
        from src.spheretrace.scene.intersection import upload_scene
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0, 0, 0), 1.0, albedo=(0.5, 0.5, 0.5))
        upload_scene(scene.build())

        # Starting on the surface, heading outward: nothing else to hit
        hit, _, _, _ = _query((0, 0, 1), (0, 0, 1))
        assert hit == 0

    def test_hollow_sphere_hits_inner_surface(self):
        """Test a ray inside a glass shell sees the inverted inner sphere."""
        from src.spheretrace.scene.intersection import upload_scene
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0, 0, 0), 0.5)
        scene.add_dielectric_sphere((0, 0, 0), -0.45)
        upload_scene(scene.build())

        hit, t, material_id, normal = _query((0, 0, 2), (0, 0, -1))
        assert hit == 1
        assert t == pytest.approx(1.5, abs=1e-5)
        assert material_id == 0

        # From inside the shell wall, the inner surface is first
        hit, t, _, normal = _query((0, 0, 0.48), (0, 0, -1))
        assert hit == 1
        assert t == pytest.approx(0.03, abs=1e-4)
        assert normal == pytest.approx((0.0, 0.0, -1.0), abs=1e-4)

    def test_reupload_replaces_scene(self):
        """Test uploading a new scene drops the old spheres."""
        from src.spheretrace.scene.intersection import get_sphere_count, upload_scene
        from src.spheretrace.scene.manager import SceneManager

        first = SceneManager()
        first.add_lambertian_sphere((0, 0, -3), 1.0, albedo=(0.5, 0.5, 0.5))
        first.add_lambertian_sphere((0, 0, -6), 1.0, albedo=(0.5, 0.5, 0.5))
        upload_scene(first.build())

        second = SceneManager()
        second.add_lambertian_sphere((5, 0, -3), 1.0, albedo=(0.5, 0.5, 0.5))
        upload_scene(second.build())

        assert get_sphere_count() == 1
        hit, _, _, _ = _query((0, 0, 0), (0, 0, -1))
        assert hit == 0
