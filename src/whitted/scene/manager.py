"""Unified scene manager for coordinating primitives, materials and lights.

This module provides the high-level scene construction API. It tracks
which material kind (SolidColor, Lambert, LambertPhong, CookTorrance) each
material ID corresponds to, so the integrator can dispatch to the right
shading function inside kernels.

The SceneManager maintains:
- A unified material_id space across all material kinds
- Mapping from material_id to (material_type, type_local_index)
- Validation of material IDs and geometry when primitives are added
- The light list and the camera
- Scene serialization/configuration support

Scene data is only mutated between render passes; kernels read it.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> white = scene.add_lambert_material((1.0, 1.0, 1.0))
    >>> scene.add_plane((0, 0, 0), (0, 1, 0), white)
    >>> scene.add_point_light((0, 5, 0), (1, 1, 1), 25.0)
"""

import logging
import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

import numpy as np
import taichi as ti
import taichi.math as tm

from src.whitted.camera.camera import Camera
from src.whitted.geometry.mesh import TriangleMesh, compute_face_normals
from src.whitted.materials.cook_torrance import (
    add_cook_torrance_material,
    clear_cook_torrance_materials,
)
from src.whitted.materials.lambert import add_lambert_material, clear_lambert_materials
from src.whitted.materials.lambert_phong import (
    add_lambert_phong_material,
    clear_lambert_phong_materials,
)
from src.whitted.materials.solid_color import (
    add_solid_color_material,
    clear_solid_color_materials,
)
from src.whitted.scene.intersection import (
    MAX_MESHES,
    MAX_PLANES,
    MAX_SPHERES,
    MAX_TRIANGLES,
    add_mesh,
    add_plane,
    add_sphere,
    add_triangle,
    clear_scene,
    get_mesh_count,
    get_plane_count,
    get_sphere_count,
    get_triangle_count,
)
from src.whitted.scene.lights import (
    MAX_LIGHTS,
    LightType,
    add_directional_light,
    add_point_light,
    clear_lights,
    get_light_count,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

Color = tuple[float, float, float]
Point = tuple[float, float, float]


class MaterialType(IntEnum):
    """Enumeration of supported material kinds.

    Used by the integrator to pick the shading function for a hit.
    """

    SOLID_COLOR = 0
    LAMBERT = 1
    LAMBERT_PHONG = 2
    COOK_TORRANCE = 3


# Maximum number of materials across all kinds
MAX_MATERIALS = 1024  # 256 per kind * 4 kinds

# material_types[i] stores the MaterialType for material_id i
material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
# material_type_indices[i] stores the kind-local index for material_id i
# (e.g., if material_id 5 is the 2nd Lambert material, material_type_indices[5] = 1)
material_type_indices = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def _clear_material_tracking() -> None:
    num_materials[None] = 0


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the material type for a given material ID.

    Returns:
        The material type as an integer (see MaterialType enum).
        Returns -1 for invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def get_material_type_index(material_id: ti.i32) -> ti.i32:
    """Get the kind-local index for a given material ID.

    Returns:
        The index into the kind-specific material arrays, or -1 for
        invalid material IDs.
    """
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_type_indices[material_id]
    return result


def _as_tuple3(values: Any, name: str) -> tuple[float, float, float]:
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


def _normalized_tuple(values: Point, name: str) -> Point:
    length = math.sqrt(sum(c * c for c in values))
    if length < 1e-12:
        raise ValueError(f"{name} must be non-zero")
    return (values[0] / length, values[1] / length, values[2] / length)


@dataclass
class MaterialInfo:
    """Information about a registered material.

    Attributes:
        material_id: The unified material ID.
        material_type: The kind of material.
        type_index: The index within the kind-specific material arrays.
        params: The material parameters as provided during creation.
    """

    material_id: int
    material_type: MaterialType
    type_index: int
    params: dict[str, Any]


@dataclass
class SphereInfo:
    sphere_index: int
    center: Point
    radius: float
    material_id: int


@dataclass
class PlaneInfo:
    plane_index: int
    point: Point
    normal: Point
    material_id: int


@dataclass
class TriangleInfo:
    triangle_index: int
    vertices: tuple[Point, Point, Point]
    material_id: int


@dataclass
class MeshInfo:
    mesh_index: int
    mesh: TriangleMesh


@dataclass
class LightInfo:
    """Information about a light in the scene.

    Attributes:
        light_index: The index in the light storage arrays.
        light_type: POINT or DIRECTIONAL.
        position: The light origin (point) or its direction (directional).
        color: The RGB light color.
        intensity: The scalar intensity.
    """

    light_index: int
    light_type: LightType
    position: Point
    color: Color
    intensity: float


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
        planes: List of plane configurations.
        triangles: List of triangle configurations.
        meshes: List of mesh configurations (positions, indices, material).
        lights: List of light configurations.
        camera: Camera configuration, or None to keep the default camera.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)
    planes: list[dict[str, Any]] = field(default_factory=list)
    triangles: list[dict[str, Any]] = field(default_factory=list)
    meshes: list[dict[str, Any]] = field(default_factory=list)
    lights: list[dict[str, Any]] = field(default_factory=list)
    camera: dict[str, Any] | None = None


class SceneManager:
    """Unified scene manager coordinating primitives, materials and lights.

    Attributes:
        materials: MaterialInfo for all registered materials.
        spheres: SphereInfo for all spheres in the scene.
        planes: PlaneInfo for all planes in the scene.
        triangles: TriangleInfo for all standalone triangles.
        meshes: MeshInfo for all triangle meshes.
        lights: LightInfo for all lights.
        camera: The scene camera.

    Example:
        >>> scene = SceneManager()
        >>> floor = scene.add_lambert_phong_material((0.8, 0.8, 0.8), 0.9, 0.3, 32.0)
        >>> gold = scene.add_cook_torrance_material((1.0, 0.78, 0.34), 1.0, 0.0)
        >>> scene.add_plane((0, -1, 0), (0, 1, 0), floor)
        >>> scene.add_sphere((0, 0, 5), 1.0, gold)
        >>> scene.add_point_light((0, 5, 0), (1, 1, 1), 50.0)
    """

    def __init__(self, camera: Camera | None = None) -> None:
        self.materials: list[MaterialInfo] = []
        self.spheres: list[SphereInfo] = []
        self.planes: list[PlaneInfo] = []
        self.triangles: list[TriangleInfo] = []
        self.meshes: list[MeshInfo] = []
        self.lights: list[LightInfo] = []
        self.camera = camera if camera is not None else Camera()
        self._clear_all()

    def _clear_all(self) -> None:
        clear_scene()
        clear_lights()
        clear_solid_color_materials()
        clear_lambert_materials()
        clear_lambert_phong_materials()
        clear_cook_torrance_materials()
        _clear_material_tracking()

        self.materials.clear()
        self.spheres.clear()
        self.planes.clear()
        self.triangles.clear()
        self.meshes.clear()
        self.lights.clear()

    def clear(self) -> None:
        """Clear the entire scene (primitives, materials and lights).

        The camera is kept.
        """
        self._clear_all()
        logger.debug("Scene cleared")

    # =========================================================================
    # Material Management
    # =========================================================================

    def _register_material(
        self, material_type: MaterialType, type_index: int, params: dict[str, Any]
    ) -> int:
        material_id = num_materials[None]
        if material_id >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

        material_types[material_id] = int(material_type)
        material_type_indices[material_id] = type_index
        num_materials[None] = material_id + 1

        self.materials.append(
            MaterialInfo(
                material_id=material_id,
                material_type=material_type,
                type_index=type_index,
                params=params,
            )
        )
        logger.debug("Material %d: %s %s", material_id, material_type.name, params)
        return material_id

    def add_solid_color_material(self, color: Color) -> int:
        """Add a constant-color material that ignores lighting.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any color component is negative.
        """
        color = _as_tuple3(color, "Color")
        type_index = add_solid_color_material(color)
        return self._register_material(MaterialType.SOLID_COLOR, type_index, {"color": color})

    def add_lambert_material(self, diffuse_color: Color, diffuse_reflectance: float = 1.0) -> int:
        """Add a Lambert (ideal diffuse) material.

        Args:
            diffuse_color: The diffuse color as (R, G, B), each in [0, 1].
            diffuse_reflectance: The scalar reflectance kd in [0, 1].

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If a parameter is outside [0, 1].
        """
        diffuse_color = _as_tuple3(diffuse_color, "Diffuse color")
        type_index = add_lambert_material(diffuse_color, diffuse_reflectance)
        return self._register_material(
            MaterialType.LAMBERT,
            type_index,
            {"diffuse_color": diffuse_color, "diffuse_reflectance": diffuse_reflectance},
        )

    def add_lambert_phong_material(
        self,
        diffuse_color: Color,
        diffuse_reflectance: float,
        specular_reflectance: float,
        phong_exponent: float,
    ) -> int:
        """Add a Lambert diffuse plus Phong highlight material.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If kd/ks/color are outside [0, 1] or the exponent is
                not positive.
        """
        diffuse_color = _as_tuple3(diffuse_color, "Diffuse color")
        type_index = add_lambert_phong_material(
            diffuse_color, diffuse_reflectance, specular_reflectance, phong_exponent
        )
        return self._register_material(
            MaterialType.LAMBERT_PHONG,
            type_index,
            {
                "diffuse_color": diffuse_color,
                "diffuse_reflectance": diffuse_reflectance,
                "specular_reflectance": specular_reflectance,
                "phong_exponent": phong_exponent,
            },
        )

    def add_cook_torrance_material(self, albedo: Color, metalness: float, roughness: float) -> int:
        """Add a Cook-Torrance microfacet material.

        A metal with zero roughness is a perfect mirror in the bounce loop.

        Returns:
            The unified material ID for this material.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            ValueError: If any parameter is outside [0, 1].
        """
        albedo = _as_tuple3(albedo, "Albedo")
        type_index = add_cook_torrance_material(albedo, metalness, roughness)
        return self._register_material(
            MaterialType.COOK_TORRANCE,
            type_index,
            {"albedo": albedo, "metalness": metalness, "roughness": roughness},
        )

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return int(num_materials[None])

    def get_material_info(self, material_id: int) -> MaterialInfo | None:
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def get_material_type_python(self, material_id: int) -> MaterialType | None:
        """Get the material type for a given material ID (Python side).

        For kernel-side lookup, use the get_material_type() Taichi function.
        """
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id].material_type
        return None

    def _check_material_id(self, material_id: int) -> None:
        if material_id < 0 or material_id >= num_materials[None]:
            raise ValueError(f"Invalid material_id: {material_id}")

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(self, center: Point, radius: float, material_id: int) -> int:
        """Add a sphere to the scene.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If the radius is not positive or material_id is invalid.
        """
        self._check_material_id(material_id)
        if radius <= 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")

        center = _as_tuple3(center, "Center")
        sphere_index = add_sphere(vec3(*center), radius, material_id)
        self.spheres.append(SphereInfo(sphere_index, center, radius, material_id))
        logger.debug("Sphere %d at %s r=%g mat=%d", sphere_index, center, radius, material_id)
        return sphere_index

    def add_plane(self, point: Point, normal: Point, material_id: int) -> int:
        """Add an infinite plane. The normal is normalized here.

        Raises:
            RuntimeError: If the maximum number of planes is exceeded.
            ValueError: If the normal is zero or material_id is invalid.
        """
        self._check_material_id(material_id)
        point = _as_tuple3(point, "Point")
        unit_normal = _normalized_tuple(_as_tuple3(normal, "Normal"), "Plane normal")

        plane_index = add_plane(vec3(*point), vec3(*unit_normal), material_id)
        self.planes.append(PlaneInfo(plane_index, point, unit_normal, material_id))
        logger.debug("Plane %d through %s n=%s mat=%d", plane_index, point, unit_normal, material_id)
        return plane_index

    def add_triangle(self, v0: Point, v1: Point, v2: Point, material_id: int) -> int:
        """Add a standalone triangle. Its face normal follows the winding.

        Raises:
            RuntimeError: If the maximum number of triangles is exceeded.
            ValueError: If the triangle is degenerate or material_id is invalid.
        """
        self._check_material_id(material_id)
        vertices = (_as_tuple3(v0, "v0"), _as_tuple3(v1, "v1"), _as_tuple3(v2, "v2"))
        normal = compute_face_normals(
            np.array(vertices, dtype=np.float32), np.array([[0, 1, 2]], dtype=np.int32)
        )[0]

        triangle_index = add_triangle(
            vec3(*vertices[0]),
            vec3(*vertices[1]),
            vec3(*vertices[2]),
            vec3(float(normal[0]), float(normal[1]), float(normal[2])),
            material_id,
        )
        self.triangles.append(TriangleInfo(triangle_index, vertices, material_id))
        return triangle_index

    def add_triangle_mesh(self, mesh: TriangleMesh) -> int:
        """Upload a triangle mesh built by TriangleMesh or the OBJ loader.

        Raises:
            RuntimeError: If mesh, vertex or triangle capacity is exceeded.
            ValueError: If the mesh's material_id is invalid.
        """
        self._check_material_id(mesh.material_id)
        mesh_index = add_mesh(mesh.positions, mesh.indices, mesh.normals, mesh.material_id)
        self.meshes.append(MeshInfo(mesh_index, mesh))
        logger.debug(
            "Mesh %d: %d vertices, %d triangles, mat=%d",
            mesh_index,
            mesh.vertex_count,
            mesh.triangle_count,
            mesh.material_id,
        )
        return mesh_index

    # =========================================================================
    # Lights
    # =========================================================================

    def add_point_light(self, origin: Point, color: Color, intensity: float) -> int:
        """Add a point light with inverse-square falloff.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If color or intensity is negative.
        """
        origin = _as_tuple3(origin, "Origin")
        color = _as_tuple3(color, "Color")
        light_index = add_point_light(origin, color, intensity)
        self.lights.append(LightInfo(light_index, LightType.POINT, origin, color, intensity))
        return light_index

    def add_directional_light(self, direction: Point, color: Color, intensity: float) -> int:
        """Add a directional light shining along direction.

        Raises:
            RuntimeError: If the maximum number of lights is exceeded.
            ValueError: If direction is zero or color/intensity is negative.
        """
        direction = _as_tuple3(direction, "Direction")
        color = _as_tuple3(color, "Color")
        light_index = add_directional_light(direction, color, intensity)
        self.lights.append(
            LightInfo(light_index, LightType.DIRECTIONAL, direction, color, intensity)
        )
        return light_index

    # =========================================================================
    # Convenience Methods (add object with material in one call)
    # =========================================================================

    def add_lambert_sphere(
        self, center: Point, radius: float, diffuse_color: Color, diffuse_reflectance: float = 1.0
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambert material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambert_material(diffuse_color, diffuse_reflectance)
        return self.add_sphere(center, radius, material_id), material_id

    def add_cook_torrance_sphere(
        self, center: Point, radius: float, albedo: Color, metalness: float, roughness: float
    ) -> tuple[int, int]:
        """Add a sphere with a new Cook-Torrance material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_cook_torrance_material(albedo, metalness, roughness)
        return self.add_sphere(center, radius, material_id), material_id

    def add_lambert_plane(
        self, point: Point, normal: Point, diffuse_color: Color, diffuse_reflectance: float = 1.0
    ) -> tuple[int, int]:
        """Add a plane with a new Lambert material.

        Returns:
            Tuple of (plane_index, material_id).
        """
        material_id = self.add_lambert_material(diffuse_color, diffuse_reflectance)
        return self.add_plane(point, normal, material_id), material_id

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        return get_sphere_count()

    def get_plane_count(self) -> int:
        return get_plane_count()

    def get_triangle_count(self) -> int:
        return get_triangle_count()

    def get_mesh_count(self) -> int:
        return get_mesh_count()

    def get_light_count(self) -> int:
        return get_light_count()

    def get_primitive_count(self) -> int:
        """Get the total number of primitives (a mesh counts as one)."""
        return (
            self.get_sphere_count()
            + self.get_plane_count()
            + self.get_triangle_count()
            + self.get_mesh_count()
        )

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for mat in self.materials:
            mat_config: dict[str, Any] = {"type": mat.material_type.name.lower()}
            for key, value in mat.params.items():
                mat_config[key] = list(value) if isinstance(value, tuple) else value
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        for plane in self.planes:
            config.planes.append(
                {
                    "point": list(plane.point),
                    "normal": list(plane.normal),
                    "material_id": plane.material_id,
                }
            )

        for triangle in self.triangles:
            config.triangles.append(
                {
                    "vertices": [list(v) for v in triangle.vertices],
                    "material_id": triangle.material_id,
                }
            )

        for info in self.meshes:
            config.meshes.append(
                {
                    "positions": info.mesh.positions.tolist(),
                    "indices": info.mesh.indices.tolist(),
                    "material_id": info.mesh.material_id,
                }
            )

        for light in self.lights:
            key = "origin" if light.light_type == LightType.POINT else "direction"
            config.lights.append(
                {
                    "type": light.light_type.name.lower(),
                    key: list(light.position),
                    "color": list(light.color),
                    "intensity": light.intensity,
                }
            )

        config.camera = self.camera.to_dict()
        return config

    def _load_material(self, mat_config: dict[str, Any]) -> None:
        mat_type = mat_config.get("type", "").lower()
        if mat_type == "solid_color":
            self.add_solid_color_material(mat_config.get("color", [1.0, 1.0, 1.0]))
        elif mat_type == "lambert":
            self.add_lambert_material(
                mat_config.get("diffuse_color", [0.5, 0.5, 0.5]),
                mat_config.get("diffuse_reflectance", 1.0),
            )
        elif mat_type == "lambert_phong":
            self.add_lambert_phong_material(
                mat_config.get("diffuse_color", [0.5, 0.5, 0.5]),
                mat_config.get("diffuse_reflectance", 1.0),
                mat_config.get("specular_reflectance", 0.5),
                mat_config.get("phong_exponent", 32.0),
            )
        elif mat_type == "cook_torrance":
            self.add_cook_torrance_material(
                mat_config.get("albedo", [0.8, 0.8, 0.8]),
                mat_config.get("metalness", 0.0),
                mat_config.get("roughness", 0.5),
            )
        else:
            raise ValueError(f"Unknown material type: {mat_type}")

    def _load_light(self, light_config: dict[str, Any]) -> None:
        light_type = light_config.get("type", "").lower()
        color = light_config.get("color", [1.0, 1.0, 1.0])
        intensity = light_config.get("intensity", 1.0)
        if light_type == "point":
            self.add_point_light(light_config.get("origin", [0.0, 0.0, 0.0]), color, intensity)
        elif light_type == "directional":
            self.add_directional_light(
                light_config.get("direction", [0.0, -1.0, 0.0]), color, intensity
            )
        else:
            raise ValueError(f"Unknown light type: {light_type}")

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Materials first, primitives reference them by ID
        for mat_config in config.materials:
            self._load_material(mat_config)

        for sphere_config in config.spheres:
            self.add_sphere(
                sphere_config.get("center", [0.0, 0.0, 0.0]),
                sphere_config.get("radius", 1.0),
                sphere_config.get("material_id", 0),
            )

        for plane_config in config.planes:
            self.add_plane(
                plane_config.get("point", [0.0, 0.0, 0.0]),
                plane_config.get("normal", [0.0, 1.0, 0.0]),
                plane_config.get("material_id", 0),
            )

        for triangle_config in config.triangles:
            vertices = triangle_config.get("vertices")
            if vertices is None or len(vertices) != 3:
                raise ValueError("A triangle needs exactly 3 vertices")
            self.add_triangle(
                vertices[0], vertices[1], vertices[2], triangle_config.get("material_id", 0)
            )

        for mesh_config in config.meshes:
            mesh = TriangleMesh.from_arrays(
                mesh_config.get("positions", []),
                mesh_config.get("indices", []),
                mesh_config.get("material_id", 0),
            )
            self.add_triangle_mesh(mesh)

        for light_config in config.lights:
            self._load_light(light_config)

        if config.camera is not None:
            self.camera = Camera.from_dict(config.camera)

        logger.info(
            "Loaded scene: %d materials, %d primitives, %d lights",
            self.get_material_count(),
            self.get_primitive_count(),
            self.get_light_count(),
        )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {
            "materials": config.materials,
            "spheres": config.spheres,
            "planes": config.planes,
            "triangles": config.triangles,
            "meshes": config.meshes,
            "lights": config.lights,
            "camera": config.camera,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary produced by to_dict()."""
        config = SceneConfig(
            materials=data.get("materials", []),
            spheres=data.get("spheres", []),
            planes=data.get("planes", []),
            triangles=data.get("triangles", []),
            meshes=data.get("meshes", []),
            lights=data.get("lights", []),
            camera=data.get("camera"),
        )
        self.from_config(config)

    # =========================================================================
    # Capacity Information
    # =========================================================================

    @staticmethod
    def get_max_spheres() -> int:
        return MAX_SPHERES

    @staticmethod
    def get_max_planes() -> int:
        return MAX_PLANES

    @staticmethod
    def get_max_triangles() -> int:
        return MAX_TRIANGLES

    @staticmethod
    def get_max_meshes() -> int:
        return MAX_MESHES

    @staticmethod
    def get_max_lights() -> int:
        return MAX_LIGHTS

    @staticmethod
    def get_max_materials() -> int:
        return MAX_MATERIALS
