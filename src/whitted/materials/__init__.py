"""Materials module: BRDF library and surface response models.

Components:
    brdf: Pure BRDF terms (Lambert, Phong, Schlick Fresnel, GGX, Smith)
    solid_color: Constant color, ignores lighting
    lambert: Ideal diffuse reflection
    lambert_phong: Diffuse plus Phong highlight
    cook_torrance: Microfacet specular with metal/dielectric energy split

Materials form a closed tagged variant. Each kind keeps its parameters in
its own Taichi field registry; the scene manager maps a unified
material_id onto (kind, kind-local index) and the integrator dispatches
to the right shading function inside kernels.

Each material provides:
    - shade(normal, light_dir, view_dir) -> color
    - reflectivity() -> scalar in [0, 1] (zero except for smooth metals)
"""

from .cook_torrance import (
    add_cook_torrance_material,
    clear_cook_torrance_materials,
    cook_torrance_reflectivity,
    cook_torrance_terms,
    get_cook_torrance_material_count,
    shade_cook_torrance,
)
from .lambert import (
    add_lambert_material,
    clear_lambert_materials,
    get_lambert_material_count,
    shade_lambert,
)
from .lambert_phong import (
    add_lambert_phong_material,
    clear_lambert_phong_materials,
    get_lambert_phong_material_count,
    shade_lambert_phong,
)
from .solid_color import (
    add_solid_color_material,
    clear_solid_color_materials,
    get_solid_color_material_count,
    shade_solid_color,
)

# Imported after the submodules so the brdf.lambert function, not the
# lambert submodule bound by `from .lambert import ...`, is the exported name.
from .brdf import (
    fresnel_schlick,
    geometry_schlick_ggx,
    geometry_smith,
    lambert,
    lambert_color,
    normal_distribution_ggx,
    phong,
)

__all__ = [
    # BRDF terms
    "lambert",
    "lambert_color",
    "phong",
    "fresnel_schlick",
    "normal_distribution_ggx",
    "geometry_schlick_ggx",
    "geometry_smith",
    # Solid color
    "add_solid_color_material",
    "clear_solid_color_materials",
    "get_solid_color_material_count",
    "shade_solid_color",
    # Lambert
    "add_lambert_material",
    "clear_lambert_materials",
    "get_lambert_material_count",
    "shade_lambert",
    # Lambert-Phong
    "add_lambert_phong_material",
    "clear_lambert_phong_materials",
    "get_lambert_phong_material_count",
    "shade_lambert_phong",
    # Cook-Torrance
    "add_cook_torrance_material",
    "clear_cook_torrance_materials",
    "get_cook_torrance_material_count",
    "cook_torrance_terms",
    "cook_torrance_reflectivity",
    "shade_cook_torrance",
]
