"""Lambert (ideal diffuse) material.

The Lambert material scatters light uniformly in all directions:

    shade = kd * diffuse_color / pi

where kd is the scalar diffuse reflectance. The cosine term is applied
by the integrator (observed area), not here. Lambert surfaces never
reflect specularly.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.materials.lambert import add_lambert_material
    >>> idx = add_lambert_material((0.8, 0.8, 0.8), diffuse_reflectance=1.0)
"""

import taichi as ti
import taichi.math as tm

from src.whitted.materials.brdf import lambert

vec3 = tm.vec3


@ti.func
def shade_lambert(diffuse_color: vec3, diffuse_reflectance: ti.f32) -> vec3:
    """Evaluate the Lambert BRDF (direction independent)."""
    return lambert(diffuse_reflectance, diffuse_color)


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

MAX_LAMBERT_MATERIALS = 256

lambert_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERT_MATERIALS)
lambert_reflectances = ti.field(dtype=ti.f32, shape=MAX_LAMBERT_MATERIALS)
num_lambert_materials = ti.field(dtype=ti.i32, shape=())


def validate_unit_color(name: str, color: tuple[float, float, float]) -> None:
    for i, component in enumerate(color):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"{name} component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )


def validate_unit_scalar(name: str, value: float) -> None:
    if value < 0.0 or value > 1.0:
        raise ValueError(f"{name} = {value} is outside [0, 1]")


def clear_lambert_materials() -> None:
    """Clear all Lambert materials."""
    num_lambert_materials[None] = 0


def add_lambert_material(
    diffuse_color: tuple[float, float, float],
    diffuse_reflectance: float = 1.0,
) -> int:
    """Add a Lambert material to the material registry.

    Args:
        diffuse_color: The diffuse color as (R, G, B), each in [0, 1].
        diffuse_reflectance: The scalar reflectance kd in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If a parameter is outside [0, 1].
    """
    validate_unit_color("Diffuse color", diffuse_color)
    validate_unit_scalar("Diffuse reflectance", diffuse_reflectance)

    idx = num_lambert_materials[None]
    if idx >= MAX_LAMBERT_MATERIALS:
        raise RuntimeError(f"Maximum number of Lambert materials ({MAX_LAMBERT_MATERIALS}) exceeded")

    lambert_colors[idx] = vec3(diffuse_color[0], diffuse_color[1], diffuse_color[2])
    lambert_reflectances[idx] = diffuse_reflectance
    num_lambert_materials[None] = idx + 1
    return idx


def get_lambert_material_count() -> int:
    """Get the number of Lambert materials in the registry."""
    return int(num_lambert_materials[None])


@ti.func
def shade_lambert_by_id(material_idx: ti.i32) -> vec3:
    """Look up a Lambert material and evaluate it."""
    return shade_lambert(lambert_colors[material_idx], lambert_reflectances[material_idx])
