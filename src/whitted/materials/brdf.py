"""BRDF building blocks: Lambert, Phong and the Cook-Torrance terms.

Pure Taichi functions with no shared state. Direction conventions used
throughout:

    normal:    unit surface normal
    light_dir: unit vector from the surface toward the light
    view_dir:  unit vector from the surface toward the viewer

Every division by a dot product is guarded so grazing angles produce zero
instead of NaN or Inf.

References:
    - Lambert: f = kd * color / pi
    - Phong: ks * max(0, reflect(-l, n) . v)^exponent
    - Schlick: F = f0 + (1 - f0) * (1 - max(0, h . v))^5
    - Trowbridge-Reitz GGX: D = a^2 / (pi * ((n . h)^2 (a^2 - 1) + 1)^2), a = roughness^2
    - Smith with Schlick-GGX: G = G1(n, v) * G1(n, l), k = (a + 1)^2 / 8
"""

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import reflect

vec3 = tm.vec3

# Denominators below this are treated as zero
DENOMINATOR_EPSILON = 1e-8


@ti.func
def lambert(reflectance: ti.f32, diffuse_color: vec3) -> vec3:
    """Lambertian diffuse BRDF with scalar reflectance kd."""
    return diffuse_color * reflectance / tm.pi


@ti.func
def lambert_color(reflectance: vec3, diffuse_color: vec3) -> vec3:
    """Lambertian diffuse BRDF with a per-channel reflectance."""
    return diffuse_color * reflectance / tm.pi


@ti.func
def phong(
    specular_reflectance: ti.f32,
    exponent: ti.f32,
    light_dir: vec3,
    view_dir: vec3,
    normal: vec3,
) -> vec3:
    """Phong specular lobe, broadcast to a gray color."""
    reflected = reflect(-light_dir, normal)
    cos_alpha = ti.max(0.0, tm.dot(reflected, view_dir))
    value = specular_reflectance * ti.pow(cos_alpha, exponent)
    return vec3(value, value, value)


@ti.func
def fresnel_schlick(half_vector: vec3, view_dir: vec3, base_reflectivity: vec3) -> vec3:
    """Schlick's approximation of the Fresnel reflectance."""
    cos_theta = ti.max(0.0, tm.dot(half_vector, view_dir))
    return base_reflectivity + (1.0 - base_reflectivity) * ti.pow(1.0 - cos_theta, 5.0)


@ti.func
def normal_distribution_ggx(normal: vec3, half_vector: vec3, roughness: ti.f32) -> ti.f32:
    """Trowbridge-Reitz GGX normal distribution function."""
    alpha = roughness * roughness
    alpha_sq = alpha * alpha
    n_dot_h = ti.max(0.0, tm.dot(normal, half_vector))
    factor = n_dot_h * n_dot_h * (alpha_sq - 1.0) + 1.0
    denom = tm.pi * factor * factor

    result = 0.0
    if denom > DENOMINATOR_EPSILON:
        result = alpha_sq / denom
    return result


@ti.func
def geometry_schlick_ggx(normal: vec3, direction: vec3, roughness: ti.f32) -> ti.f32:
    """Schlick-GGX masking term for a single direction."""
    alpha = roughness * roughness
    k = (alpha + 1.0) * (alpha + 1.0) / 8.0
    n_dot_x = ti.max(0.0, tm.dot(normal, direction))
    denom = n_dot_x * (1.0 - k) + k

    result = 0.0
    if denom > DENOMINATOR_EPSILON:
        result = n_dot_x / denom
    return result


@ti.func
def geometry_smith(normal: vec3, view_dir: vec3, light_dir: vec3, roughness: ti.f32) -> ti.f32:
    """Smith shadowing-masking: product of the view and light terms."""
    return geometry_schlick_ggx(normal, view_dir, roughness) * geometry_schlick_ggx(
        normal, light_dir, roughness
    )
