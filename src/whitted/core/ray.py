"""Ray data structure and vector utilities for the CPU ray tracer.

This module provides the fundamental Ray dataclass and the vector helpers
used by the intersection tests, BRDFs and the integrator. All functions are
Taichi functions and run inside kernels.

A ray carries its own valid interval [t_min, t_max]. Primary and reflected
rays use [T_MIN, T_MAX]; shadow rays use [0, distance_to_light].

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, 1.0)
    >>> ray = Ray(origin=origin, direction=direction, t_min=T_MIN, t_max=T_MAX)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import math

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Default lower bound of the ray interval (avoids self-intersection)
T_MIN = 1e-4

# Unbounded upper limit, also used as the distance to a directional light
T_MAX = math.inf

# Offset applied along the surface normal when spawning secondary rays
RAY_EPSILON = 1e-4


@ti.dataclass
class Ray:
    """A ray with an origin, a unit direction and a valid hit interval.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of the ray (vec3, unit length).
        t_min: Smallest accepted hit distance.
        t_max: Largest accepted hit distance.
    """

    origin: vec3
    direction: vec3
    t_min: ti.f32
    t_max: ti.f32


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
def make_ray(origin: vec3, direction: vec3, t_min: ti.f32, t_max: ti.f32) -> Ray:
    """Create a ray from origin, direction and interval."""
    return Ray(origin=origin, direction=direction, t_min=t_min, t_max=t_max)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    """Compute the Euclidean length (magnitude) of a vector."""
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Compute the squared length of a vector.

    Cheaper than length() when only comparing magnitudes.
    """
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    Normalizing a zero-length vector is a caller error.
    """
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (should be normalized).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def offset_along_normal(point: vec3, normal: vec3) -> vec3:
    """Push a surface point off the surface along its normal."""
    return point + RAY_EPSILON * normal


@ti.func
def offset_from_surface(point: vec3, normal: vec3, incident: vec3) -> vec3:
    """Push a hit point off the surface toward the side the ray came from.

    The stored normal is never flipped, so a back-face hit on a plane or a
    two-sided triangle offsets along -normal.
    """
    side = normal
    if tm.dot(incident, normal) > 0.0:
        side = -normal
    return offset_along_normal(point, side)


@ti.func
def is_finite(v: vec3) -> ti.i32:
    """Return 1 if no component of v is NaN or infinite."""
    result = 1
    for c in ti.static(range(3)):
        if tm.isnan(v[c]) or tm.isinf(v[c]):
            result = 0
    return result
