"""Scene module: primitive storage, lights, scene queries and construction.

Components:
    intersection: Primitive fields and the closest-hit / any-hit queries
    lights: Point and directional lights
    manager: Unified scene manager coordinating primitives, materials, lights
    mesh_loader: Wavefront OBJ parsing into TriangleMesh objects
    demo_scenes: Reference scenes (sphere grid, triangle/mesh scene)

Scene data is organized for kernel access:
    - Structure-of-Arrays layout for geometric data
    - Unified material IDs mapped onto per-kind material registries
    - Read-only during a render pass
"""

from .demo_scenes import (
    SCENES,
    SphereGridParams,
    create_cube_mesh,
    create_pyramid_mesh,
    create_sphere_grid_scene,
    create_triangle_scene,
)
from .intersection import (
    MAX_MESHES,
    MAX_PLANES,
    MAX_SPHERES,
    MAX_TRIANGLES,
    SceneHitRecord,
    add_mesh,
    add_plane,
    add_sphere,
    add_triangle,
    clear_scene,
    get_mesh_count,
    get_plane_count,
    get_sphere_count,
    get_triangle_count,
    intersect_scene,
    intersect_scene_any,
)
from .lights import (
    MAX_LIGHTS,
    LightType,
    add_directional_light,
    add_point_light,
    clear_lights,
    direction_to_light,
    distance_to_light,
    get_light_count,
    light_radiance,
)
from .manager import (
    MAX_MATERIALS,
    LightInfo,
    MaterialInfo,
    MaterialType,
    MeshInfo,
    PlaneInfo,
    SceneConfig,
    SceneManager,
    SphereInfo,
    TriangleInfo,
    get_material_type,
    get_material_type_index,
)
from .mesh_loader import load_obj, parse_obj

__all__ = [
    # Intersection module
    "SceneHitRecord",
    "add_sphere",
    "add_plane",
    "add_triangle",
    "add_mesh",
    "clear_scene",
    "get_sphere_count",
    "get_plane_count",
    "get_triangle_count",
    "get_mesh_count",
    "intersect_scene",
    "intersect_scene_any",
    "MAX_SPHERES",
    "MAX_PLANES",
    "MAX_TRIANGLES",
    "MAX_MESHES",
    # Lights
    "LightType",
    "MAX_LIGHTS",
    "add_point_light",
    "add_directional_light",
    "clear_lights",
    "get_light_count",
    "direction_to_light",
    "distance_to_light",
    "light_radiance",
    # Manager module
    "SceneManager",
    "MaterialType",
    "MaterialInfo",
    "SphereInfo",
    "PlaneInfo",
    "TriangleInfo",
    "MeshInfo",
    "LightInfo",
    "SceneConfig",
    "MAX_MATERIALS",
    "get_material_type",
    "get_material_type_index",
    # Mesh loading
    "parse_obj",
    "load_obj",
    # Reference scenes
    "SphereGridParams",
    "create_sphere_grid_scene",
    "create_triangle_scene",
    "create_cube_mesh",
    "create_pyramid_mesh",
    "SCENES",
]
