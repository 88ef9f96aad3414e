"""Vector kernel for Taichi-side geometry and color math.

Vectors are ``taichi.math.vec3`` values, used both as points/directions
(x, y, z) and as colors (r, g, b). Component-wise and scalar arithmetic come
from the vec3 operators; this module adds the named operations the tracer
relies on. All functions are pure ``@ti.func`` helpers meant to be called from
inside Taichi kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.spheretrace.core.vector import length, unit_vector, vec3
    >>> @ti.kernel
    ... def length_of_unit() -> ti.f32:
    ...     return length(unit_vector(vec3(3.0, 4.0, 0.0)))
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return a.x * b.x + a.y * b.y + a.z * b.z


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b (right-handed)."""
    return vec3(
        a.y * b.z - a.z * b.y,
        a.z * b.x - a.x * b.z,
        a.x * b.y - a.y * b.x,
    )


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes, and the quantity the
    rejection samplers test against.
    """
    return dot(v, v)


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(length_squared(v))


@ti.func
def unit_vector(v: vec3) -> vec3:
    """Scale a vector to unit length.

    Unlike ``tm.normalize`` this does not guard against a zero-length input;
    callers must not pass one. A zero vector yields NaN components.

    Args:
        v: The vector to normalize (nonzero length).

    Returns:
        v / length(v).
    """
    return v / length(v)


@ti.func
def sqrt_components(v: vec3) -> vec3:
    """Take the square root of each component (gamma 2 correction)."""
    return vec3(ti.sqrt(v.x), ti.sqrt(v.y), ti.sqrt(v.z))


@ti.func
def reflect(v: vec3, n: vec3) -> vec3:
    """Reflect v about the normal n.

    Args:
        v: The incident direction.
        n: The surface normal (unit length for a length-preserving reflection).

    Returns:
        v - 2 * dot(v, n) * n.
    """
    return v - 2.0 * dot(v, n) * n


@ti.func
def refract(v: vec3, n: vec3, ratio: ti.f32):
    """Refract v through a surface with normal n using Snell's law.

    The incident direction is normalized first. With
    ``dt = dot(unit(v), n)`` the refraction discriminant is
    ``1 - ratio^2 * (1 - dt^2)``; when it is not positive the ray undergoes
    total internal reflection and no refracted direction exists.

    Args:
        v: The incident direction (any nonzero length).
        n: The outward normal on the side the ray arrives from.
        ratio: The ratio of refractive indices n_incident / n_transmitted.

    Returns:
        A tuple (refracted, can_refract) where refracted is the transmitted
        direction (zero when can_refract is 0) and can_refract is 1 if
        refraction is geometrically possible.
    """
    uv = unit_vector(v)
    dt = dot(uv, n)
    discriminant = 1.0 - ratio * ratio * (1.0 - dt * dt)

    refracted = vec3(0.0, 0.0, 0.0)
    can_refract = 0
    if discriminant > 0.0:
        refracted = ratio * (uv - n * dt) - n * ti.sqrt(discriminant)
        can_refract = 1
    return refracted, can_refract


@ti.func
def schlick(cosine: ti.f32, refractive_index: ti.f32) -> ti.f32:
    """Approximate the Fresnel reflectance with Schlick's polynomial.

    Args:
        cosine: Cosine of the incident angle.
        refractive_index: Refractive index of the dielectric.

    Returns:
        r0 + (1 - r0) * (1 - cosine)^5 with r0 = ((1 - n) / (1 + n))^2.
        At normal incidence (cosine = 1) this is exactly r0.
    """
    r0 = (1.0 - refractive_index) / (1.0 + refractive_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)
