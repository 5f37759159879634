"""Cook-Torrance microfacet material.

Specular term:

    f_spec = F * D * G / (4 * (n . v) * (n . l))

with Schlick Fresnel (F), GGX normal distribution (D) and Smith
geometry (G). Base reflectivity f0 is 0.04 for dielectrics and the albedo
for metals. Energy is split between specular and diffuse:

    kd = 1 - F   for dielectrics (metalness == 0)
    kd = 0       for metals (metalness > 0)
    f_diff = kd * albedo / pi

Metals reflect in the integrator's bounce loop with strength
(1 - roughness) * metalness.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.materials.cook_torrance import add_cook_torrance_material
    >>> copper = add_cook_torrance_material((0.955, 0.637, 0.538), metalness=1.0, roughness=0.1)
"""

import taichi as ti
import taichi.math as tm

from src.whitted.materials.brdf import (
    DENOMINATOR_EPSILON,
    fresnel_schlick,
    geometry_smith,
    lambert_color,
    normal_distribution_ggx,
)
from src.whitted.materials.lambert import validate_unit_color, validate_unit_scalar

vec3 = tm.vec3

# Base reflectivity of common dielectrics
DIELECTRIC_F0 = 0.04


@ti.func
def cook_torrance_terms(
    albedo: vec3,
    metalness: ti.f32,
    roughness: ti.f32,
    normal: vec3,
    light_dir: vec3,
    view_dir: vec3,
):
    """Evaluate the specular and diffuse parts separately.

    Returns:
        Tuple of (specular, diffuse, fresnel) colors.
    """
    base_reflectivity = vec3(DIELECTRIC_F0, DIELECTRIC_F0, DIELECTRIC_F0)
    if metalness > 0.0:
        base_reflectivity = albedo

    # v == -l has no half vector; fall back to the normal
    half_sum = view_dir + light_dir
    half_vector = normal
    if tm.dot(half_sum, half_sum) > DENOMINATOR_EPSILON:
        half_vector = tm.normalize(half_sum)

    fresnel = fresnel_schlick(half_vector, view_dir, base_reflectivity)
    distribution = normal_distribution_ggx(normal, half_vector, roughness)
    geometry = geometry_smith(normal, view_dir, light_dir, roughness)

    n_dot_v = ti.max(0.0, tm.dot(normal, view_dir))
    n_dot_l = ti.max(0.0, tm.dot(normal, light_dir))
    denom = 4.0 * n_dot_v * n_dot_l

    specular = vec3(0.0, 0.0, 0.0)
    if denom > DENOMINATOR_EPSILON:
        specular = fresnel * distribution * geometry / denom

    kd = vec3(1.0, 1.0, 1.0) - fresnel
    if metalness > 0.0:
        kd = vec3(0.0, 0.0, 0.0)
    diffuse = lambert_color(kd, albedo)

    return specular, diffuse, fresnel


@ti.func
def shade_cook_torrance(
    albedo: vec3,
    metalness: ti.f32,
    roughness: ti.f32,
    normal: vec3,
    light_dir: vec3,
    view_dir: vec3,
) -> vec3:
    """Evaluate the full Cook-Torrance BRDF (specular + diffuse)."""
    specular, diffuse, _ = cook_torrance_terms(
        albedo, metalness, roughness, normal, light_dir, view_dir
    )
    return specular + diffuse


@ti.func
def cook_torrance_reflectivity(metalness: ti.f32, roughness: ti.f32) -> ti.f32:
    """Strength of the mirror bounce: only smooth metals reflect."""
    return (1.0 - roughness) * metalness


# =============================================================================
# Material Field Storage (for scene-level material management)
# =============================================================================

MAX_COOK_TORRANCE_MATERIALS = 256

cook_torrance_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_COOK_TORRANCE_MATERIALS)
cook_torrance_metalness = ti.field(dtype=ti.f32, shape=MAX_COOK_TORRANCE_MATERIALS)
cook_torrance_roughness = ti.field(dtype=ti.f32, shape=MAX_COOK_TORRANCE_MATERIALS)
num_cook_torrance_materials = ti.field(dtype=ti.i32, shape=())


def clear_cook_torrance_materials() -> None:
    """Clear all Cook-Torrance materials."""
    num_cook_torrance_materials[None] = 0


def add_cook_torrance_material(
    albedo: tuple[float, float, float],
    metalness: float,
    roughness: float,
) -> int:
    """Add a Cook-Torrance material to the registry.

    Args:
        albedo: Base color as (R, G, B), each in [0, 1].
        metalness: Metalness in [0, 1].
        roughness: Roughness in [0, 1].

    Returns:
        The index of the added material.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
        ValueError: If any parameter is outside [0, 1].
    """
    validate_unit_color("Albedo", albedo)
    validate_unit_scalar("Metalness", metalness)
    validate_unit_scalar("Roughness", roughness)

    idx = num_cook_torrance_materials[None]
    if idx >= MAX_COOK_TORRANCE_MATERIALS:
        raise RuntimeError(
            f"Maximum number of Cook-Torrance materials ({MAX_COOK_TORRANCE_MATERIALS}) exceeded"
        )

    cook_torrance_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    cook_torrance_metalness[idx] = metalness
    cook_torrance_roughness[idx] = roughness
    num_cook_torrance_materials[None] = idx + 1
    return idx


def get_cook_torrance_material_count() -> int:
    """Get the number of Cook-Torrance materials in the registry."""
    return int(num_cook_torrance_materials[None])


@ti.func
def shade_cook_torrance_by_id(
    material_idx: ti.i32, normal: vec3, light_dir: vec3, view_dir: vec3
) -> vec3:
    return shade_cook_torrance(
        cook_torrance_albedos[material_idx],
        cook_torrance_metalness[material_idx],
        cook_torrance_roughness[material_idx],
        normal,
        light_dir,
        view_dir,
    )


@ti.func
def cook_torrance_reflectivity_by_id(material_idx: ti.i32) -> ti.f32:
    return cook_torrance_reflectivity(
        cook_torrance_metalness[material_idx], cook_torrance_roughness[material_idx]
    )
