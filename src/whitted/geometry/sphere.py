"""Sphere primitive with analytic ray-sphere intersection.

This module provides the Sphere dataclass, the HitRecord shared by every
primitive, and the sphere hit tests.

The intersection projects the vector from the ray origin to the sphere
center onto the ray direction:

    tc   = center - origin
    proj = dot(tc, direction)          (distance to closest approach)
    d2   = |tc|^2 - proj^2             (squared distance center-to-ray)
    t    = proj - sqrt(radius^2 - d2)  (near intersection)

If radius^2 - d2 is negative the ray misses. The ray direction must be
unit length.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.sphere import Sphere, HitRecord, hit_sphere
    >>> sphere = Sphere(center=ti.math.vec3(0, 0, 5), radius=1.0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
    """

    center: vec3
    radius: ti.f32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: Whether the ray intersected the primitive (1 if hit, 0 if miss).
        t: The distance along the ray where intersection occurred.
            Only valid if hit == 1.
        point: The 3D point where the ray intersected the surface.
            Only valid if hit == 1.
        normal: The unit surface normal on the primitive's outward side.
            It is never flipped toward the incoming ray.
            Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(hit=0, t=0.0, point=vec3(0.0, 0.0, 0.0), normal=vec3(0.0, 0.0, 0.0))


@ti.func
def _near_root(ray_origin: vec3, ray_direction: vec3, sphere: Sphere):
    """Solve for the near intersection distance.

    Returns:
        Tuple of (has_root, t). t is only meaningful when has_root == 1.
    """
    tc = sphere.center - ray_origin
    proj = tm.dot(tc, ray_direction)
    perpendicular_sq = tm.dot(tc, tc) - proj * proj
    discriminant = sphere.radius * sphere.radius - perpendicular_sq

    has_root = 0
    t = 0.0
    if discriminant >= 0.0:
        has_root = 1
        t = proj - ti.sqrt(discriminant)
    return has_root, t


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-sphere intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        sphere: The sphere to test intersection against.
        t_min: Minimum accepted hit distance (inclusive).
        t_max: Maximum accepted hit distance (inclusive).

    Returns:
        A HitRecord. The normal points away from the sphere center.
    """
    result = make_miss_record()
    has_root, t = _near_root(ray_origin, ray_direction, sphere)

    if has_root == 1 and t >= t_min and t <= t_max:
        hit_point = ray_origin + t * ray_direction
        result = HitRecord(
            hit=1,
            t=t,
            point=hit_point,
            normal=tm.normalize(hit_point - sphere.center),
        )

    return result


@ti.func
def hit_sphere_any(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Occlusion-only sphere test; skips building a hit record.

    Returns:
        1 if the sphere is hit within [t_min, t_max], 0 otherwise.
    """
    has_root, t = _near_root(ray_origin, ray_direction, sphere)
    did_hit = 0
    if has_root == 1 and t >= t_min and t <= t_max:
        did_hit = 1
    return did_hit


@ti.func
def make_sphere(center: vec3, radius: ti.f32) -> Sphere:
    """Create a sphere from center and radius."""
    return Sphere(center=center, radius=radius)
