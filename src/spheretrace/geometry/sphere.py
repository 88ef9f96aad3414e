"""Sphere primitive with ray-sphere intersection.

The intersection solves the half-b form of the quadratic

    |origin + t * direction - center|^2 = radius^2

and accepts the nearer root first. The returned normal is
``(point - center) / radius`` without any face flipping: for a positive radius
it points outward, for a negative radius it points inward. Scenes use an
inverted (negative radius) sphere inside a glass sphere to model a hollow
shell, and the dielectric material reads the side of the surface from the
sign of ``dot(direction, normal)``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, -1), radius=0.5)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from src.spheretrace.core.vector import dot, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The signed radius. Negative radii flip the normal inward.
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The world-space intersection point. Only valid if hit == 1.
        normal: (point - center) / radius. Unit length for the sphere's own
            radius; inward for negative radii. Only valid if hit == 1.
        material_id: Material of the struck primitive, -1 when unknown.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    With ``oc = origin - center``:
        a = dot(direction, direction)
        b = dot(oc, direction)
        c = dot(oc, oc) - radius^2
        discriminant = b^2 - a*c

    A non-positive discriminant is a miss (tangent rays do not count). The
    roots (-b - sqrt(d)) / a and (-b + sqrt(d)) / a are tried in that order
    and the first one strictly inside (t_min, t_max) is accepted.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (need not be normalized).
        sphere: The sphere to test.
        t_min: Exclusive lower bound on accepted t (self-intersection guard).
        t_max: Exclusive upper bound on accepted t (closest hit so far).

    Returns:
        A HitRecord; check its hit field. material_id is left at -1 for the
        caller to fill in.
    """
    oc = ray_origin - sphere.center
    a = dot(ray_direction, ray_direction)
    b = dot(oc, ray_direction)
    c = dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = b * b - a * c

    result = make_miss_record()

    if discriminant > 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-b - sqrt_d) / a
        valid = (t > t_min) and (t < t_max)
        if not valid:
            t = (-b + sqrt_d) / a
            valid = (t > t_min) and (t < t_max)

        if valid:
            point = ray_origin + t * ray_direction
            result = HitRecord(
                hit=1,
                t=t,
                point=point,
                normal=(point - sphere.center) / sphere.radius,
                material_id=-1,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius inside a Taichi kernel."""
    return Sphere(center=center, radius=radius)
