"""Lambert-Phong material: diffuse base plus a Phong highlight.

    shade = kd * diffuse_color / pi + ks * max(0, reflect(-l, n) . v)^exponent

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.materials.lambert_phong import add_lambert_phong_material
    >>> idx = add_lambert_phong_material((0.2, 0.2, 1.0), 1.0, 0.5, 60.0)
"""

import taichi as ti
import taichi.math as tm

from src.whitted.materials.brdf import lambert, phong
from src.whitted.materials.lambert import validate_unit_color, validate_unit_scalar

vec3 = tm.vec3


@ti.func
def shade_lambert_phong(
    diffuse_color: vec3,
    diffuse_reflectance: ti.f32,
    specular_reflectance: ti.f32,
    phong_exponent: ti.f32,
    normal: vec3,
    light_dir: vec3,
    view_dir: vec3,
) -> vec3:
    """Evaluate the diffuse term plus the Phong specular lobe."""
    return lambert(diffuse_reflectance, diffuse_color) + phong(
        specular_reflectance, phong_exponent, light_dir, view_dir, normal
    )


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

MAX_LAMBERT_PHONG_MATERIALS = 256

lambert_phong_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERT_PHONG_MATERIALS)
# (kd, ks, exponent) per material
lambert_phong_params = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LAMBERT_PHONG_MATERIALS)
num_lambert_phong_materials = ti.field(dtype=ti.i32, shape=())


def clear_lambert_phong_materials() -> None:
    """Clear all Lambert-Phong materials."""
    num_lambert_phong_materials[None] = 0


def add_lambert_phong_material(
    diffuse_color: tuple[float, float, float],
    diffuse_reflectance: float,
    specular_reflectance: float,
    phong_exponent: float,
) -> int:
    """Add a Lambert-Phong material to the registry.

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If kd/ks/color are outside [0, 1] or the exponent is
            not positive.
    """
    validate_unit_color("Diffuse color", diffuse_color)
    validate_unit_scalar("Diffuse reflectance", diffuse_reflectance)
    validate_unit_scalar("Specular reflectance", specular_reflectance)
    if phong_exponent <= 0.0:
        raise ValueError(f"Phong exponent must be positive, got {phong_exponent}")

    idx = num_lambert_phong_materials[None]
    if idx >= MAX_LAMBERT_PHONG_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Lambert-Phong materials ({MAX_LAMBERT_PHONG_MATERIALS}) exceeded"
        )

    lambert_phong_colors[idx] = vec3(diffuse_color[0], diffuse_color[1], diffuse_color[2])
    lambert_phong_params[idx] = vec3(diffuse_reflectance, specular_reflectance, phong_exponent)
    num_lambert_phong_materials[None] = idx + 1
    return idx


def get_lambert_phong_material_count() -> int:
    """Get the number of Lambert-Phong materials in the registry."""
    return int(num_lambert_phong_materials[None])


@ti.func
def shade_lambert_phong_by_id(
    material_idx: ti.i32, normal: vec3, light_dir: vec3, view_dir: vec3
) -> vec3:
    params = lambert_phong_params[material_idx]
    return shade_lambert_phong(
        lambert_phong_colors[material_idx],
        params[0],
        params[1],
        params[2],
        normal,
        light_dir,
        view_dir,
    )
