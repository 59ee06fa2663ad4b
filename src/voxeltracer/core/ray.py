"""Ray data structure and vector utilities for Whitted-style ray tracing.

This module provides the Ray dataclass and the direction helpers used by the
shader: mirror reflection, Snell refraction with total internal reflection,
and the origin bias that lifts secondary rays off the surface they start on.
All operations are designed to work within Taichi kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Distance secondary ray origins are pushed off the surface
ORIGIN_BIAS = 1e-4


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Primary and
            secondary rays are always normalized.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Direction Utilities
# =============================================================================


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector I - 2(I . N)N.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta_t: ti.f32) -> vec3:
    """Refract an incident vector through a surface using Snell's law.

    The outward normal is flipped when the ray is leaving the medium, so the
    same call handles both entering and exiting a transparent box. When the
    discriminant is negative the ray undergoes total internal reflection and
    the mirror direction about the oriented normal is returned instead.

    Args:
        incident: The incoming direction (unit length, toward the surface).
        normal: The outward surface normal (unit length).
        eta_t: Refractive index of the material (air is 1.0).

    Returns:
        The transmitted direction, or the reflected direction on TIR.
    """
    cosi = tm.clamp(-tm.dot(incident, normal), -1.0, 1.0)
    eta = 1.0 / eta_t
    oriented_normal = normal

    if cosi < 0.0:
        # Leaving the medium: the ray travels along the outward normal
        cosi = -cosi
        eta = eta_t
        oriented_normal = -normal

    k = 1.0 - eta * eta * (1.0 - cosi * cosi)

    result = reflect(incident, oriented_normal)
    if k >= 0.0:
        result = eta * incident + (eta * cosi - ti.sqrt(k)) * oriented_normal
    return result


@ti.func
def offset_origin(point: vec3, normal: vec3, direction: vec3) -> vec3:
    """Offset a secondary ray origin to avoid self-intersection.

    Pushes the point by ORIGIN_BIAS along the normal, on the side the new
    ray travels toward (outside for reflection and shadows, inside for
    transmission).

    Args:
        point: The intersection point.
        normal: The outward surface normal.
        direction: The direction of the secondary ray.

    Returns:
        The offset origin point.
    """
    offset = normal * ORIGIN_BIAS
    result = point + offset
    if tm.dot(direction, normal) < 0.0:
        result = point - offset
    return result
