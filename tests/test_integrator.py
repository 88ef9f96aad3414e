"""Tests for the path tracing integrator.

Tests cover:
- Sky gradient for escaping rays
- Absorption and attenuation along a path
- The hard depth cap and its exact boundary
- Material dispatch
"""

import pytest
import taichi as ti


class TestBackground:
    """Tests for the sky gradient."""

    def test_straight_up_is_blue(self, seeded_stream):
        """Test an escaping ray pointing up sees (0.5, 0.7, 1.0)."""
        from src.spheretrace.core.integrator import trace

        assert trace((0, 0, 0), (0, 1, 0)) == pytest.approx((0.5, 0.7, 1.0), abs=1e-6)

    def test_straight_down_is_white(self, seeded_stream):
        """Test an escaping ray pointing down sees white."""
        from src.spheretrace.core.integrator import trace

        assert trace((0, 0, 0), (0, -5, 0)) == pytest.approx((1.0, 1.0, 1.0), abs=1e-6)

    def test_horizon_is_midway(self):
        """Test a horizontal direction blends the two colors equally."""
        from src.spheretrace.core.integrator import background
        from src.spheretrace.core.vector import vec3

        result = ti.Vector.field(3, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = background(vec3(3.0, 0.0, -4.0))

        test_kernel()
        assert tuple(result[None]) == pytest.approx((0.75, 0.85, 1.0), abs=1e-6)


class TestPaths:
    """Tests for trace_ray against small scenes."""

    def test_mirror_floor_attenuates_sky(self, seeded_stream):
        """Test one perfect mirror bounce multiplies the sky by the albedo."""
        from src.spheretrace.core.integrator import trace
        from src.spheretrace.scene.intersection import upload_scene
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0, -100, 0), 100.0, albedo=(0.5, 0.5, 0.5), fuzz=0.0)
        upload_scene(scene.build())

        color = trace((0, 1, 0), (0, -1, 0))
        assert color == pytest.approx((0.25, 0.35, 0.5), abs=1e-5)

    def test_black_diffuse_absorbs(self, seeded_stream):
        """Test a zero-albedo surface returns black."""
        from src.spheretrace.core.integrator import trace
        from src.spheretrace.scene.intersection import upload_scene
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_lambertian_sphere((0, 0, -2), 1.0, albedo=(0.0, 0.0, 0.0))
        upload_scene(scene.build())

        assert trace((0, 0, 0), (0, 0, -1)) == (0.0, 0.0, 0.0)

    def test_depth_cap_returns_black(self, seeded_stream):
        """Test a ray trapped inside an inverted mirror sphere returns black."""
        from src.spheretrace.core.integrator import trace
        from src.spheretrace.scene.intersection import upload_scene
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        # Negative radius: normals point inward, so every bounce reflects back inside
        scene.add_metal_sphere((0, 0, 0), -1.0, albedo=(1.0, 1.0, 1.0), fuzz=0.0)
        upload_scene(scene.build())

        assert trace((0, 0, 0), (0, 0, -1)) == (0.0, 0.0, 0.0)
        assert trace((0, 0, 0), (0.3, 0.4, -0.5)) == (0.0, 0.0, 0.0)

    def test_metal_absorption_returns_black(self, seeded_stream):
        """Test a reflection pointing into the surface ends the path."""
        from src.spheretrace.core.integrator import trace
        from src.spheretrace.scene.intersection import upload_scene
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        # Inverted sphere seen from outside: the normal faces the incoming ray's
        # direction, so the mirror reflection points into the surface
        scene.add_metal_sphere((0, 0, -3), -1.0, albedo=(1.0, 1.0, 1.0), fuzz=0.0)
        upload_scene(scene.build())

        assert trace((0, 0, 0), (0, 0, -1)) == (0.0, 0.0, 0.0)

    def test_glass_is_transparent_head_on(self, seeded_stream):
        """Test head-on glass passes most samples through to the sky."""
        from src.spheretrace.core.integrator import trace
        from src.spheretrace.scene.intersection import upload_scene
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_dielectric_sphere((0, 3, 0), 1.0)
        upload_scene(scene.build())

        colors = [trace((0, 0, 0), (0, 1, 0)) for _ in range(50)]
        # Every path ends in the sky (straight up or straight down) unattenuated
        for color in colors:
            assert color == pytest.approx((0.5, 0.7, 1.0), abs=1e-4) or color == pytest.approx(
                (1.0, 1.0, 1.0), abs=1e-4
            )
        assert sum(1 for c in colors if c[0] < 0.75) > 40


class TestDepthCap:
    """Tests for the exact bounce at which paths are cut off."""

    def _two_mirror_corner(self):
        from src.spheretrace.scene.intersection import upload_scene
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        # Mirror floor with its top at y = 0 and mirror wall with its face near x = -1
        scene.add_metal_sphere((0, -100, 0), 100.0, albedo=(0.5, 0.5, 0.5), fuzz=0.0)
        scene.add_metal_sphere((-101, 0, 0), 100.0, albedo=(0.5, 0.5, 0.5), fuzz=0.0)
        upload_scene(scene.build())

    def test_default_cap(self):
        """Test camera paths are capped at 50 bounces."""
        from src.spheretrace.core.integrator import MAX_DEPTH

        assert MAX_DEPTH == 50

    def test_single_bounce_boundary(self, seeded_stream):
        """Test a hit at depth 0 is black with a cap of 0 and scatters with a cap of 1."""
        from src.spheretrace.core.integrator import trace
        from src.spheretrace.scene.intersection import upload_scene
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0, -100, 0), 100.0, albedo=(0.5, 0.5, 0.5), fuzz=0.0)
        upload_scene(scene.build())

        assert trace((0, 1, 0), (0, -1, 0), max_depth=0) == (0.0, 0.0, 0.0)
        assert trace((0, 1, 0), (0, -1, 0), max_depth=1) == pytest.approx(
            (0.25, 0.35, 0.5), abs=1e-5
        )

    def test_second_bounce_boundary(self, seeded_stream):
        """Test a two-bounce path is black below a cap of 2 and reaches the sky at 2."""
        from src.spheretrace.core.integrator import trace

        self._two_mirror_corner()

        assert trace((1, 1, 0), (-1, -1, 0), max_depth=1) == (0.0, 0.0, 0.0)

        # Two 0.5 bounces, then the sky for a direction with y ~ 0.72
        color = trace((1, 1, 0), (-1, -1, 0), max_depth=2)
        assert color == pytest.approx((0.142, 0.185, 0.25), abs=1e-2)
        assert trace((1, 1, 0), (-1, -1, 0), max_depth=3) == pytest.approx(color, abs=1e-6)

    def test_default_cap_lets_short_paths_through(self, seeded_stream):
        """Test the default cap leaves a one-bounce path untouched."""
        from src.spheretrace.core.integrator import MAX_DEPTH, trace
        from src.spheretrace.scene.intersection import upload_scene
        from src.spheretrace.scene.manager import SceneManager

        scene = SceneManager()
        scene.add_metal_sphere((0, -100, 0), 100.0, albedo=(1.0, 1.0, 1.0), fuzz=0.0)
        upload_scene(scene.build())

        # Straight down onto the mirror: exactly one hit, at depth 0
        expected = trace((0, 1, 0), (0, -1, 0), max_depth=MAX_DEPTH)
        assert expected == pytest.approx((0.5, 0.7, 1.0), abs=1e-5)
        assert trace((0, 1, 0), (0, -1, 0)) == pytest.approx(expected, abs=1e-6)
