"""Triangle primitive with Möller–Trumbore ray-triangle intersection.

The test is two-sided: rays hit the triangle from either side. The
reported normal is the precomputed face normal, normalize((v1 - v0) x (v2 - v0)),
so it always lies on the side given by the counter-clockwise winding.

The same routine is used for standalone triangles and for the triangles of
a TriangleMesh (see src.whitted.scene.intersection).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.geometry.triangle import Triangle, hit_triangle
    >>> tri = Triangle(
    ...     v0=ti.math.vec3(-1, 0, 5),
    ...     v1=ti.math.vec3(1, 0, 5),
    ...     v2=ti.math.vec3(0, 1, 5),
    ...     normal=ti.math.vec3(0, 0, 1),
    ... )
"""

import taichi as ti
import taichi.math as tm

from .sphere import HitRecord, make_miss_record

vec3 = tm.vec3

# Determinants smaller than this mean the ray lies in the triangle's plane
DETERMINANT_EPSILON = 1e-8


@ti.dataclass
class Triangle:
    """A triangle with a precomputed face normal.

    Attributes:
        v0, v1, v2: The vertices, counter-clockwise around normal.
        normal: Unit face normal.
    """

    v0: vec3
    v1: vec3
    v2: vec3
    normal: vec3


@ti.func
def intersect_triangle_vertices(
    ray_origin: vec3,
    ray_direction: vec3,
    v0: vec3,
    v1: vec3,
    v2: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
):
    """Möller–Trumbore test against raw vertex positions.

    Returns:
        Tuple of (did_hit, t). t is only meaningful when did_hit == 1.
    """
    edge1 = v1 - v0
    edge2 = v2 - v0
    pvec = tm.cross(ray_direction, edge2)
    det = tm.dot(edge1, pvec)

    did_hit = 0
    t = 0.0
    if ti.abs(det) > DETERMINANT_EPSILON:
        inv_det = 1.0 / det
        tvec = ray_origin - v0
        u = tm.dot(tvec, pvec) * inv_det
        if u >= 0.0 and u <= 1.0:
            qvec = tm.cross(tvec, edge1)
            v = tm.dot(ray_direction, qvec) * inv_det
            if v >= 0.0 and u + v <= 1.0:
                t = tm.dot(edge2, qvec) * inv_det
                if t >= t_min and t <= t_max:
                    did_hit = 1
    return did_hit, t


@ti.func
def hit_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    triangle: Triangle,
    t_min: ti.f32,
    t_max: ti.f32,
) -> HitRecord:
    """Test for ray-triangle intersection.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        triangle: The triangle to test against.
        t_min: Minimum accepted hit distance (inclusive).
        t_max: Maximum accepted hit distance (inclusive).

    Returns:
        A HitRecord carrying the triangle's face normal.
    """
    result = make_miss_record()
    did_hit, t = intersect_triangle_vertices(
        ray_origin, ray_direction, triangle.v0, triangle.v1, triangle.v2, t_min, t_max
    )
    if did_hit == 1:
        result = HitRecord(
            hit=1,
            t=t,
            point=ray_origin + t * ray_direction,
            normal=triangle.normal,
        )
    return result


@ti.func
def hit_triangle_any(
    ray_origin: vec3,
    ray_direction: vec3,
    triangle: Triangle,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Occlusion-only triangle test."""
    did_hit, _ = intersect_triangle_vertices(
        ray_origin, ray_direction, triangle.v0, triangle.v1, triangle.v2, t_min, t_max
    )
    return did_hit
