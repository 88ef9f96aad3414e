"""Thin-lens camera model with depth of field.

The camera builds an orthonormal basis (u, v, w) from its view parameters:
- w: points from look_at toward look_from (opposite the view direction)
- u: points right in the image plane
- v: points up in the image plane

The image rectangle sits on the focal plane, ``focus_distance`` in front of
the camera. Rays start at a random point of the lens disk (radius
aperture / 2) and aim at the focal-plane point for the requested image
coordinates, so points on the focal plane stay sharp and everything else
blurs in proportion to the aperture. With aperture 0 this is a pinhole camera.

Configuration is validated and the frame is computed once on the host with
NumPy; ``setup_camera`` copies it into read-only Taichi fields that every
rendering worker shares.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.camera.thin_lens import ThinLensCamera, setup_camera, get_ray
    >>>
    >>> camera = ThinLensCamera(
    ...     look_from=(13.0, 2.0, 3.0),
    ...     look_at=(0.0, 0.0, 0.0),
    ...     view_up=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=3.0 / 2.0,
    ...     aperture=0.1,
    ...     focus_distance=10.0,
    ... )
    >>> setup_camera(camera)
    >>> # Inside a kernel: ray = get_ray(s, t, stream)
"""

import math
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt
import taichi as ti

from src.spheretrace.core.ray import Ray, make_ray
from src.spheretrace.core.sampling import random_in_unit_disk
from src.spheretrace.errors import ConfigurationError

# Cross products shorter than this mean view_up is parallel to the view axis
_PARALLEL_EPSILON = 1e-8


# =============================================================================
# Camera Data Structures
# =============================================================================


@dataclass(frozen=True)
class CameraFrame:
    """Derived camera geometry, in world space.

    Attributes:
        origin: Lens center (look_from).
        u: Right unit vector.
        v: Up unit vector.
        w: Backward unit vector.
        horizontal: Full width of the focal-plane rectangle.
        vertical: Full height of the focal-plane rectangle.
        lower_left: Lower-left corner of the focal-plane rectangle.
        lens_radius: Half the aperture.
    """

    origin: npt.NDArray[np.float64]
    u: npt.NDArray[np.float64]
    v: npt.NDArray[np.float64]
    w: npt.NDArray[np.float64]
    horizontal: npt.NDArray[np.float64]
    vertical: npt.NDArray[np.float64]
    lower_left: npt.NDArray[np.float64]
    lens_radius: float

    def focal_point(self, s: float, t: float) -> npt.NDArray[np.float64]:
        """Point on the focal plane for normalized image coordinates (s, t)."""
        return self.lower_left + s * self.horizontal + t * self.vertical


@dataclass(frozen=True)
class ThinLensCamera:
    """Configuration for a thin-lens (depth of field) camera.

    Attributes:
        look_from: Camera position in world space (x, y, z).
        look_at: Point the camera is looking at in world space (x, y, z).
        view_up: Up direction; need not be unit length or orthogonal to the
            view axis, but must not be parallel to it.
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Image width divided by height, > 0.
        aperture: Lens diameter, >= 0. 0 disables depth of field.
        focus_distance: Distance to the plane in focus, > 0. Defaults to the
            distance from look_from to look_at.

    Raises:
        ConfigurationError: On any invalid parameter.
    """

    look_from: tuple[float, float, float]
    look_at: tuple[float, float, float]
    view_up: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 90.0
    aspect_ratio: float = 16.0 / 9.0
    aperture: float = 0.0
    focus_distance: float | None = None

    def __post_init__(self) -> None:
        for name in ("look_from", "look_at", "view_up"):
            value = getattr(self, name)
            if len(value) != 3:
                raise ConfigurationError(f"{name} must have 3 components, got {value}")
            if not all(math.isfinite(c) for c in value):
                raise ConfigurationError(f"{name} = {value} must have finite components")
            object.__setattr__(self, name, tuple(float(c) for c in value))

        if not 0.0 < self.vfov < 180.0:
            raise ConfigurationError(f"vfov = {self.vfov} must be in (0, 180) degrees")
        if not (self.aspect_ratio > 0.0 and math.isfinite(self.aspect_ratio)):
            raise ConfigurationError(
                f"aspect_ratio = {self.aspect_ratio} must be positive and finite"
            )
        if not (self.aperture >= 0.0 and math.isfinite(self.aperture)):
            raise ConfigurationError(
                f"aperture = {self.aperture} must be non-negative and finite"
            )

        view_axis = np.subtract(self.look_from, self.look_at)
        distance = float(np.linalg.norm(view_axis))
        if distance == 0.0:
            raise ConfigurationError("look_from and look_at must be different points")

        if self.focus_distance is None:
            object.__setattr__(self, "focus_distance", distance)
        elif not (self.focus_distance > 0.0 and math.isfinite(self.focus_distance)):
            raise ConfigurationError(
                f"focus_distance = {self.focus_distance} must be positive and finite"
            )

        right = np.cross(np.asarray(self.view_up), view_axis / distance)
        if np.linalg.norm(right) < _PARALLEL_EPSILON:
            raise ConfigurationError("view_up must not be parallel to the view direction")

    def frame(self) -> CameraFrame:
        """Compute the camera basis and focal-plane rectangle.

        Returns:
            The derived CameraFrame (float64 NumPy vectors).
        """
        theta = math.radians(self.vfov)
        half_height = math.tan(theta / 2.0)
        half_width = self.aspect_ratio * half_height
        focus = float(self.focus_distance)

        look_from = np.array(self.look_from, dtype=np.float64)
        look_at = np.array(self.look_at, dtype=np.float64)
        view_up = np.array(self.view_up, dtype=np.float64)

        w = look_from - look_at
        w = w / np.linalg.norm(w)
        u = np.cross(view_up, w)
        u = u / np.linalg.norm(u)
        v = np.cross(w, u)

        lower_left = (
            look_from - half_width * focus * u - half_height * focus * v - focus * w
        )
        return CameraFrame(
            origin=look_from,
            u=u,
            v=v,
            w=w,
            horizontal=2.0 * half_width * focus * u,
            vertical=2.0 * half_height * focus * v,
            lower_left=lower_left,
            lens_radius=self.aperture / 2.0,
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_u = ti.Vector.field(3, dtype=ti.f32, shape=())  # Right
_camera_v = ti.Vector.field(3, dtype=ti.f32, shape=())  # Up
_camera_w = ti.Vector.field(3, dtype=ti.f32, shape=())  # Backward
_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())
_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())
_lens_radius = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: ThinLensCamera) -> CameraFrame:
    """Upload a camera's frame to the device fields.

    Must be called from Python scope before rendering. Kernels only read the
    fields afterwards.

    Args:
        camera: The validated camera configuration.

    Returns:
        The frame that was uploaded.
    """
    frame = camera.frame()
    _camera_origin[None] = frame.origin.tolist()
    _camera_u[None] = frame.u.tolist()
    _camera_v[None] = frame.v.tolist()
    _camera_w[None] = frame.w.tolist()
    _horizontal[None] = frame.horizontal.tolist()
    _vertical[None] = frame.vertical.tolist()
    _lower_left_corner[None] = frame.lower_left.tolist()
    _lens_radius[None] = frame.lens_radius
    return frame


# =============================================================================
# Ray Generation
# =============================================================================


@ti.func
def get_ray(s: ti.f32, t: ti.f32, stream: ti.i32) -> Ray:
    """Generate a ray through normalized image coordinates (s, t).

    - s = 0: left edge, s = 1: right edge
    - t = 0: bottom edge, t = 1: top edge

    The origin is offset across the lens disk; the direction aims at the
    focal-plane point for (s, t) and is not normalized.

    Args:
        s: Horizontal coordinate in [0, 1].
        t: Vertical coordinate in [0, 1].
        stream: The random stream used for the lens sample.

    Returns:
        The camera ray.
    """
    rd = _lens_radius[None] * random_in_unit_disk(stream)
    offset = rd.x * _camera_u[None] + rd.y * _camera_v[None]
    origin = _camera_origin[None] + offset
    direction = (
        _lower_left_corner[None] + s * _horizontal[None] + t * _vertical[None] - origin
    )
    return make_ray(origin, direction)


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with origin, u, v, w, horizontal, vertical, lower_left.
    """
    fields = {
        "origin": _camera_origin,
        "u": _camera_u,
        "v": _camera_v,
        "w": _camera_w,
        "horizontal": _horizontal,
        "vertical": _vertical,
        "lower_left": _lower_left_corner,
    }
    info = {}
    for name, vector_field in fields.items():
        value = vector_field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
