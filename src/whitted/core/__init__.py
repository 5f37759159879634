"""Core rendering module.

Components:
    ray: Ray data structure and kernel-side vector helpers
    matrix: Host-side 4x4 affine Matrix and kernel-side transforms
    settings: RenderSettings, LightingMode and runtime initialization
    integrator: Per-pixel Whitted integrator and the parallel render pass
    renderer: Renderer facade with settings toggles and image export

The integrator casts one primary ray per pixel, gathers direct lighting
with optional shadow rays, follows mirror bounces off reflective materials
and writes a tone-mapped 8-bit color into the framebuffer.
"""

from .matrix import UNIT_X, UNIT_Y, UNIT_Z, Matrix, transform_point, transform_vector
from .ray import (
    RAY_EPSILON,
    T_MAX,
    T_MIN,
    Ray,
    cross,
    dot,
    is_finite,
    length,
    length_squared,
    make_ray,
    normalize,
    offset_along_normal,
    offset_from_surface,
    ray_at,
    reflect,
    vec3,
)
from .settings import LightingMode, RenderSettings, init_runtime

# Note: integrator and renderer are NOT imported here to avoid circular imports.
# Import directly from src.whitted.core.integrator or src.whitted.core.renderer.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "T_MIN",
    "T_MAX",
    "RAY_EPSILON",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "offset_along_normal",
    "offset_from_surface",
    "is_finite",
    "Matrix",
    "UNIT_X",
    "UNIT_Y",
    "UNIT_Z",
    "transform_vector",
    "transform_point",
    "LightingMode",
    "RenderSettings",
    "init_runtime",
]
