"""Geometry module for shape primitives.

This module provides geometric primitives and intersection algorithms:

Components:
    sphere: Sphere primitive, analytic intersection, shared HitRecord
    plane: Infinite plane primitive
    triangle: Triangle primitive (Möller–Trumbore)
    mesh: Indexed triangle meshes with face normals and transforms

Every primitive offers a closest-hit test returning a HitRecord and an
any-hit test returning 1/0 for shadow rays. Both honor the ray interval
[t_min, t_max] inclusively:
    record = hit_shape(ray_origin, ray_direction, shape, t_min, t_max)
    blocked = hit_shape_any(ray_origin, ray_direction, shape, t_min, t_max)
"""

from .mesh import TriangleMesh, compute_face_normals
from .plane import Plane, hit_plane, hit_plane_any
from .sphere import HitRecord, Sphere, hit_sphere, hit_sphere_any, make_miss_record, make_sphere
from .triangle import Triangle, hit_triangle, hit_triangle_any, intersect_triangle_vertices

__all__ = [
    "Sphere",
    "HitRecord",
    "hit_sphere",
    "hit_sphere_any",
    "make_sphere",
    "make_miss_record",
    "Plane",
    "hit_plane",
    "hit_plane_any",
    "Triangle",
    "hit_triangle",
    "hit_triangle_any",
    "intersect_triangle_vertices",
    "TriangleMesh",
    "compute_face_normals",
]
