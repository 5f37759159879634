"""Infinite plane primitive with ray-plane intersection.

A plane is defined by any point on it and a unit normal. The normal must
be normalized when the plane is created; the scene manager does this.

The ray-plane intersection solves:

    t = dot(point - ray_origin, normal) / dot(ray_direction, normal)

A ray parallel to the plane (denominator near zero) never hits.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.plane import Plane, hit_plane
    >>> floor = Plane(point=ti.math.vec3(0, 0, 0), normal=ti.math.vec3(0, 1, 0))
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord, make_miss_record

vec3 = tm.vec3

# Denominators smaller than this are treated as parallel
PARALLEL_EPSILON = 1e-8


@ti.dataclass
class Plane:
    """An infinite plane.

    Attributes:
        point: Any point lying on the plane (vec3).
        normal: The unit normal of the plane (vec3).
    """

    point: vec3
    normal: vec3


@ti.func
def _plane_distance(ray_origin: vec3, ray_direction: vec3, plane: Plane):
    denom = tm.dot(ray_direction, plane.normal)
    valid = 0
    t = 0.0
    if ti.abs(denom) > PARALLEL_EPSILON:
        valid = 1
        t = tm.dot(plane.point - ray_origin, plane.normal) / denom
    return valid, t


@ti.func
def hit_plane(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-plane intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        plane: The plane to test against.
        t_min: Minimum accepted hit distance (inclusive).
        t_max: Maximum accepted hit distance (inclusive).

    Returns:
        A HitRecord whose normal is the plane's fixed normal.
    """
    result = make_miss_record()
    valid, t = _plane_distance(ray_origin, ray_direction, plane)
    if valid == 1 and t >= t_min and t <= t_max:
        result = HitRecord(
            hit=1,
            t=t,
            point=ray_origin + t * ray_direction,
            normal=plane.normal,
        )
    return result


@ti.func
def hit_plane_any(
    ray_origin: vec3,
    ray_direction: vec3,
    plane: Plane,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Occlusion-only plane test."""
    valid, t = _plane_distance(ray_origin, ray_direction, plane)
    did_hit = 0
    if valid == 1 and t >= t_min and t <= t_max:
        did_hit = 1
    return did_hit
