"""Reference scenes for the Whitted renderer.

Two scenes are provided:

- Sphere grid: six Cook-Torrance spheres (top row dielectric, bottom row
  metal, roughness increasing left to right) inside a box of Lambert-Phong
  and Lambert planes, lit by three colored point lights.
- Triangle scene: a floor and back wall, a standalone triangle, a cube
  mesh and a pyramid mesh, lit by a point light and a directional light.

The coordinate system is left-handed: +x right, +y up, +z into the screen.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.demo_scenes import create_sphere_grid_scene
    >>> scene = create_sphere_grid_scene()
    >>> scene.camera.origin
    (0.0, 3.0, -9.0)
"""

import math
from dataclasses import dataclass

from src.whitted.camera.camera import Camera
from src.whitted.geometry.mesh import TriangleMesh
from src.whitted.scene.manager import SceneManager

# =============================================================================
# Scene Parameters
# =============================================================================


@dataclass
class SphereGridParams:
    """Parameters for the sphere grid scene.

    Attributes:
        light_scale: Multiplier applied to every light intensity.
        metal_albedo: Base color of the bottom-row (metal) spheres.
        dielectric_albedo: Base color of the top-row (dielectric) spheres.
        roughness_levels: Roughness of the left, middle and right columns.
    """

    light_scale: float = 1.0
    metal_albedo: tuple[float, float, float] = (0.972, 0.960, 0.915)
    dielectric_albedo: tuple[float, float, float] = (0.75, 0.75, 0.75)
    roughness_levels: tuple[float, float, float] = (1.0, 0.6, 0.1)


# Wall colors
WALL_GRAY = (0.49, 0.57, 0.57)
FLOOR_GRAY = (0.8, 0.8, 0.8)

# Point lights: (origin, color, intensity)
SPHERE_GRID_LIGHTS = (
    ((0.0, 5.0, 5.0), (1.0, 0.61, 0.45), 50.0),
    ((-2.5, 5.0, -5.0), (1.0, 0.8, 0.45), 70.0),
    ((2.5, 2.5, -5.0), (0.34, 0.47, 0.68), 50.0),
)


def create_sphere_grid_scene(params: SphereGridParams | None = None) -> SceneManager:
    """Create the Cook-Torrance sphere grid scene.

    Args:
        params: Optional SphereGridParams. If None, uses the defaults.

    Returns:
        A SceneManager holding geometry, materials, lights and the camera.
    """
    if params is None:
        params = SphereGridParams()

    camera = Camera(origin=(0.0, 3.0, -9.0), fov_angle=45.0)
    scene = SceneManager(camera)

    # Box: back wall, floor, ceiling, side walls
    wall = scene.add_lambert_material(WALL_GRAY, 1.0)
    floor = scene.add_lambert_phong_material(FLOOR_GRAY, 1.0, 0.5, 60.0)
    scene.add_plane((0.0, 0.0, 10.0), (0.0, 0.0, -1.0), wall)
    scene.add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), floor)
    scene.add_plane((0.0, 10.0, 0.0), (0.0, -1.0, 0.0), wall)
    scene.add_plane((5.0, 0.0, 0.0), (-1.0, 0.0, 0.0), wall)
    scene.add_plane((-5.0, 0.0, 0.0), (1.0, 0.0, 0.0), wall)

    # Bottom row metal, top row dielectric
    columns = (-1.75, 0.0, 1.75)
    for x, roughness in zip(columns, params.roughness_levels):
        scene.add_cook_torrance_sphere((x, 1.0, 0.0), 0.75, params.metal_albedo, 1.0, roughness)
    for x, roughness in zip(columns, params.roughness_levels):
        scene.add_cook_torrance_sphere(
            (x, 3.0, 0.0), 0.75, params.dielectric_albedo, 0.0, roughness
        )

    for origin, color, intensity in SPHERE_GRID_LIGHTS:
        scene.add_point_light(origin, color, intensity * params.light_scale)

    return scene


# =============================================================================
# Triangle Scene
# =============================================================================

# Unit cube centered on the origin, outward winding
_CUBE_POSITIONS = (
    (-0.5, -0.5, -0.5),
    (0.5, -0.5, -0.5),
    (0.5, 0.5, -0.5),
    (-0.5, 0.5, -0.5),
    (-0.5, -0.5, 0.5),
    (0.5, -0.5, 0.5),
    (0.5, 0.5, 0.5),
    (-0.5, 0.5, 0.5),
)
_CUBE_INDICES = (
    (0, 2, 1), (0, 3, 2),  # front (-z)
    (4, 5, 6), (4, 6, 7),  # back (+z)
    (0, 4, 7), (0, 7, 3),  # left (-x)
    (1, 2, 6), (1, 6, 5),  # right (+x)
    (3, 7, 6), (3, 6, 2),  # top (+y)
    (0, 1, 5), (0, 5, 4),  # bottom (-y)
)

# Square pyramid with its base on y = 0
_PYRAMID_POSITIONS = (
    (-0.5, 0.0, -0.5),
    (0.5, 0.0, -0.5),
    (0.5, 0.0, 0.5),
    (-0.5, 0.0, 0.5),
    (0.0, 1.0, 0.0),
)
_PYRAMID_INDICES = (
    (0, 4, 1),
    (1, 4, 2),
    (2, 4, 3),
    (3, 4, 0),
    (0, 1, 2),
    (0, 2, 3),
)


def create_cube_mesh(material_id: int) -> TriangleMesh:
    """Unit cube centered on the origin."""
    return TriangleMesh.from_arrays(_CUBE_POSITIONS, _CUBE_INDICES, material_id)


def create_pyramid_mesh(material_id: int) -> TriangleMesh:
    """Unit square pyramid with its base on y = 0."""
    return TriangleMesh.from_arrays(_PYRAMID_POSITIONS, _PYRAMID_INDICES, material_id)


def create_triangle_scene() -> SceneManager:
    """Create the triangle and mesh scene.

    Returns:
        A SceneManager holding geometry, materials, lights and the camera.
    """
    camera = Camera(origin=(0.0, 2.0, -6.0), fov_angle=60.0, total_pitch=-math.radians(10.0))
    scene = SceneManager(camera)

    floor = scene.add_lambert_phong_material((0.8, 0.8, 0.8), 1.0, 0.3, 40.0)
    back = scene.add_lambert_material((0.6, 0.65, 0.7), 1.0)
    scene.add_plane((0.0, 0.0, 0.0), (0.0, 1.0, 0.0), floor)
    scene.add_plane((0.0, 0.0, 6.0), (0.0, 0.0, -1.0), back)

    # Standalone triangle facing the camera
    accent = scene.add_lambert_material((0.9, 0.3, 0.2), 1.0)
    scene.add_triangle((-3.0, 0.5, 2.0), (-2.0, 2.5, 2.0), (-1.0, 0.5, 2.0), accent)

    # Cube rotated about Y, resting on the floor
    copper = scene.add_cook_torrance_material((0.955, 0.637, 0.538), 1.0, 0.3)
    cube = create_cube_mesh(copper).rotated(yaw=math.radians(30.0)).translated((0.0, 0.5, 1.0))
    scene.add_triangle_mesh(cube)

    # Pyramid scaled up, to the right
    plastic = scene.add_cook_torrance_material((0.2, 0.5, 0.9), 0.0, 0.4)
    pyramid = create_pyramid_mesh(plastic).scaled(1.5).translated((2.2, 0.0, 1.5))
    scene.add_triangle_mesh(pyramid)

    # Mirror sphere reflecting the meshes
    scene.add_cook_torrance_sphere((0.0, 0.75, -1.5), 0.5, (0.95, 0.95, 0.95), 1.0, 0.0)

    scene.add_point_light((0.0, 5.0, -3.0), (1.0, 0.95, 0.85), 40.0)
    scene.add_directional_light((0.3, -1.0, 0.5), (0.6, 0.7, 1.0), 0.6)
    return scene


SCENES = {
    "spheres": create_sphere_grid_scene,
    "triangles": create_triangle_scene,
}
