"""Unit tests for the ray module."""

import pytest
import taichi as ti


class TestRayBasics:
    """Tests for Ray dataclass and ray_at."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from src.spheretrace.core.ray import Ray, ray_at
        from src.spheretrace.core.vector import vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        assert tuple(result[None]) == pytest.approx((1.0, 2.0, 3.0))

    def test_ray_at_unnormalized_direction(self):
        """Test ray_at scales the direction as given, without normalizing."""
        from src.spheretrace.core.ray import make_ray, ray_at
        from src.spheretrace.core.vector import vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 0.0, 0.0), vec3(0.0, 2.0, 0.0))
            result[None] = ray_at(ray, 1.5)

        test_kernel()
        assert tuple(result[None]) == pytest.approx((1.0, 3.0, 0.0))

    def test_ray_at_negative_t(self):
        """Test ray_at handles negative t (behind origin)."""
        from src.spheretrace.core.ray import Ray, ray_at
        from src.spheretrace.core.vector import vec3

        result = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, 1.0))
            result[None] = ray_at(ray, -2.0)

        test_kernel()
        assert tuple(result[None]) == pytest.approx((0.0, 0.0, -2.0))
