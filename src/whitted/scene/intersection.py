"""Scene-level primitive storage and intersection queries.

This module stores every primitive kind (spheres, planes, triangles and
triangle meshes) in Taichi fields and provides the two scene queries used
by the integrator:

    intersect_scene:     closest hit with material information
    intersect_scene_any: early-exit occlusion test for shadow rays

Primitives are immutable once added. Kernels only read these fields, so a
render pass can share them across all worker threads without locking.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.intersection import (
    ...     SceneHitRecord, add_sphere, add_plane, intersect_scene, clear_scene
    ... )
    >>> clear_scene()
    >>> add_sphere(vec3(0, 0, 5), 1.0, material_id=0)
    >>> add_plane(vec3(0, -1, 0), vec3(0, 1, 0), material_id=1)
    >>> # Use intersect_scene within a Taichi kernel
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.geometry.plane import Plane, hit_plane, hit_plane_any
from src.whitted.geometry.sphere import HitRecord, Sphere, hit_sphere, hit_sphere_any
from src.whitted.geometry.triangle import (
    Triangle,
    hit_triangle,
    hit_triangle_any,
    intersect_triangle_vertices,
)

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection with material information.

    Attributes:
        hit: Whether the ray intersected any primitive (1 if hit, 0 if miss).
        t: The distance along the ray of the closest intersection.
        point: The intersection point.
        normal: The unit surface normal on the primitive's outward side.
        material_id: The unified material ID of the hit primitive.
            -1 indicates no hit.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    normal: vec3
    material_id: ti.i32


# Maximum number of primitives supported in the scene
MAX_SPHERES = 1024
MAX_PLANES = 256
MAX_TRIANGLES = 4096
MAX_MESHES = 64
MAX_MESH_VERTICES = 65536
MAX_MESH_TRIANGLES = 65536

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Plane storage
plane_points = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_PLANES)
plane_material_ids = ti.field(dtype=ti.i32, shape=MAX_PLANES)
num_planes = ti.field(dtype=ti.i32, shape=())

# Standalone triangle storage
triangle_v0 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v1 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v2 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_material_ids = ti.field(dtype=ti.i32, shape=MAX_TRIANGLES)
num_triangles = ti.field(dtype=ti.i32, shape=())

# Mesh storage: shared vertex/index/normal pools, one triangle range per mesh.
# mesh_indices hold absolute positions into mesh_vertices.
mesh_vertices = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MESH_VERTICES)
mesh_indices = ti.Vector.field(3, dtype=ti.i32, shape=MAX_MESH_TRIANGLES)
mesh_face_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MESH_TRIANGLES)
mesh_triangle_starts = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_triangle_counts = ti.field(dtype=ti.i32, shape=MAX_MESHES)
mesh_material_ids = ti.field(dtype=ti.i32, shape=MAX_MESHES)
num_meshes = ti.field(dtype=ti.i32, shape=())
num_mesh_vertices = ti.field(dtype=ti.i32, shape=())
num_mesh_triangles = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Clear all primitives from the scene.

    Resets the primitive counts to zero. The actual field data is not
    cleared but will be overwritten when new primitives are added.
    """
    num_spheres[None] = 0
    num_planes[None] = 0
    num_triangles[None] = 0
    num_meshes[None] = 0
    num_mesh_vertices[None] = 0
    num_mesh_triangles[None] = 0


def add_sphere(center: vec3, radius: float, material_id: int = 0) -> int:
    """Add a sphere to the scene.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = center
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def add_plane(point: vec3, normal: vec3, material_id: int = 0) -> int:
    """Add a plane to the scene. The normal must already be unit length.

    Raises:
        RuntimeError: If the maximum number of planes is exceeded.
    """
    idx = num_planes[None]
    if idx >= MAX_PLANES:
        raise RuntimeError(f"Maximum number of planes ({MAX_PLANES}) exceeded")
    plane_points[idx] = point
    plane_normals[idx] = normal
    plane_material_ids[idx] = material_id
    num_planes[None] = idx + 1
    return idx


def add_triangle(v0: vec3, v1: vec3, v2: vec3, normal: vec3, material_id: int = 0) -> int:
    """Add a standalone triangle with a precomputed unit normal.

    Raises:
        RuntimeError: If the maximum number of triangles is exceeded.
    """
    idx = num_triangles[None]
    if idx >= MAX_TRIANGLES:
        raise RuntimeError(f"Maximum number of triangles ({MAX_TRIANGLES}) exceeded")
    triangle_v0[idx] = v0
    triangle_v1[idx] = v1
    triangle_v2[idx] = v2
    triangle_normals[idx] = normal
    triangle_material_ids[idx] = material_id
    num_triangles[None] = idx + 1
    return idx


@ti.kernel
def _upload_mesh(
    positions: ti.types.ndarray(),
    indices: ti.types.ndarray(),
    normals: ti.types.ndarray(),
    vertex_base: ti.i32,
    triangle_base: ti.i32,
):
    for i in range(positions.shape[0]):
        mesh_vertices[vertex_base + i] = vec3(positions[i, 0], positions[i, 1], positions[i, 2])
    for j in range(indices.shape[0]):
        mesh_indices[triangle_base + j] = tm.ivec3(
            indices[j, 0] + vertex_base,
            indices[j, 1] + vertex_base,
            indices[j, 2] + vertex_base,
        )
        mesh_face_normals[triangle_base + j] = vec3(normals[j, 0], normals[j, 1], normals[j, 2])


def add_mesh(
    positions: npt.NDArray[np.float32],
    indices: npt.NDArray[np.int32],
    normals: npt.NDArray[np.float32],
    material_id: int = 0,
) -> int:
    """Add a triangle mesh to the scene.

    Args:
        positions: Vertex buffer, shape (N, 3).
        indices: Mesh-local vertex indices per triangle, shape (M, 3).
        normals: Unit face normals, shape (M, 3).
        material_id: The material ID shared by all triangles.

    Returns:
        The index of the added mesh.

    Raises:
        RuntimeError: If mesh, vertex or triangle capacity is exceeded.
    """
    idx = num_meshes[None]
    if idx >= MAX_MESHES:
        raise RuntimeError(f"Maximum number of meshes ({MAX_MESHES}) exceeded")

    vertex_base = num_mesh_vertices[None]
    triangle_base = num_mesh_triangles[None]
    vertex_count = int(positions.shape[0])
    triangle_count = int(indices.shape[0])
    if vertex_base + vertex_count > MAX_MESH_VERTICES:
        raise RuntimeError(f"Maximum number of mesh vertices ({MAX_MESH_VERTICES}) exceeded")
    if triangle_base + triangle_count > MAX_MESH_TRIANGLES:
        raise RuntimeError(f"Maximum number of mesh triangles ({MAX_MESH_TRIANGLES}) exceeded")

    _upload_mesh(
        np.ascontiguousarray(positions, dtype=np.float32),
        np.ascontiguousarray(indices, dtype=np.int32),
        np.ascontiguousarray(normals, dtype=np.float32),
        vertex_base,
        triangle_base,
    )

    mesh_triangle_starts[idx] = triangle_base
    mesh_triangle_counts[idx] = triangle_count
    mesh_material_ids[idx] = material_id
    num_mesh_vertices[None] = vertex_base + vertex_count
    num_mesh_triangles[None] = triangle_base + triangle_count
    num_meshes[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_plane_count() -> int:
    """Get the number of planes in the scene."""
    return int(num_planes[None])


def get_triangle_count() -> int:
    """Get the number of standalone triangles in the scene."""
    return int(num_triangles[None])


def get_mesh_count() -> int:
    """Get the number of triangle meshes in the scene."""
    return int(num_meshes[None])


@ti.func
def _to_scene_hit_record(rec: HitRecord, material_id: ti.i32) -> SceneHitRecord:
    return SceneHitRecord(
        hit=rec.hit,
        t=rec.t,
        point=rec.point,
        normal=rec.normal,
        material_id=material_id,
    )


@ti.func
def make_scene_miss_record() -> SceneHitRecord:
    """Create a SceneHitRecord indicating no intersection."""
    return SceneHitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        material_id=-1,
    )


@ti.func
def _is_closer(rec_t: ti.f32, result: SceneHitRecord) -> ti.i32:
    """A new hit replaces the current one only if strictly closer."""
    closer = 0
    if result.hit == 0 or rec_t < result.t:
        closer = 1
    return closer


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> SceneHitRecord:
    """Test a ray against every primitive and keep the closest hit.

    Primitives are visited in order spheres, planes, triangles, meshes.
    On equal distances the first primitive encountered wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The unit direction of the ray.
        t_min: Minimum accepted hit distance.
        t_max: Maximum accepted hit distance.

    Returns:
        A SceneHitRecord for the closest intersection, or a miss record.
    """
    result = make_scene_miss_record()
    closest_t = t_max

    for i in range(num_spheres[None]):
        sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
        rec = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if rec.hit == 1 and _is_closer(rec.t, result) == 1:
            closest_t = rec.t
            result = _to_scene_hit_record(rec, sphere_material_ids[i])

    for i in range(num_planes[None]):
        plane = Plane(point=plane_points[i], normal=plane_normals[i])
        rec = hit_plane(ray_origin, ray_direction, plane, t_min, closest_t)
        if rec.hit == 1 and _is_closer(rec.t, result) == 1:
            closest_t = rec.t
            result = _to_scene_hit_record(rec, plane_material_ids[i])

    for i in range(num_triangles[None]):
        triangle = Triangle(
            v0=triangle_v0[i], v1=triangle_v1[i], v2=triangle_v2[i], normal=triangle_normals[i]
        )
        rec = hit_triangle(ray_origin, ray_direction, triangle, t_min, closest_t)
        if rec.hit == 1 and _is_closer(rec.t, result) == 1:
            closest_t = rec.t
            result = _to_scene_hit_record(rec, triangle_material_ids[i])

    for m in range(num_meshes[None]):
        start = mesh_triangle_starts[m]
        for k in range(start, start + mesh_triangle_counts[m]):
            idx = mesh_indices[k]
            did_hit, t = intersect_triangle_vertices(
                ray_origin,
                ray_direction,
                mesh_vertices[idx[0]],
                mesh_vertices[idx[1]],
                mesh_vertices[idx[2]],
                t_min,
                closest_t,
            )
            if did_hit == 1 and _is_closer(t, result) == 1:
                closest_t = t
                result = SceneHitRecord(
                    hit=1,
                    t=t,
                    point=ray_origin + t * ray_direction,
                    normal=mesh_face_normals[k],
                    material_id=mesh_material_ids[m],
                )

    return result


@ti.func
def intersect_scene_any(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
) -> ti.i32:
    """Test if a ray hits any primitive (shadow ray query).

    Stops testing as soon as one primitive reports a hit inside
    [t_min, t_max] and never builds a hit record.

    Returns:
        1 if any primitive was hit, 0 otherwise.
    """
    hit_any = 0

    for i in range(num_spheres[None]):
        if hit_any == 0:
            sphere = Sphere(center=sphere_centers[i], radius=sphere_radii[i])
            hit_any = hit_sphere_any(ray_origin, ray_direction, sphere, t_min, t_max)

    for i in range(num_planes[None]):
        if hit_any == 0:
            plane = Plane(point=plane_points[i], normal=plane_normals[i])
            hit_any = hit_plane_any(ray_origin, ray_direction, plane, t_min, t_max)

    for i in range(num_triangles[None]):
        if hit_any == 0:
            triangle = Triangle(
                v0=triangle_v0[i], v1=triangle_v1[i], v2=triangle_v2[i], normal=triangle_normals[i]
            )
            hit_any = hit_triangle_any(ray_origin, ray_direction, triangle, t_min, t_max)

    for m in range(num_meshes[None]):
        if hit_any == 0:
            start = mesh_triangle_starts[m]
            for k in range(start, start + mesh_triangle_counts[m]):
                if hit_any == 0:
                    idx = mesh_indices[k]
                    did_hit, _ = intersect_triangle_vertices(
                        ray_origin,
                        ray_direction,
                        mesh_vertices[idx[0]],
                        mesh_vertices[idx[1]],
                        mesh_vertices[idx[2]],
                        t_min,
                        t_max,
                    )
                    hit_any = did_hit

    return hit_any
