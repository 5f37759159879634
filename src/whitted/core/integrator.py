"""Whitted-style integrator and parallel pixel scheduler.

For every pixel the integrator casts a primary ray, resolves the closest
hit, gathers direct lighting from every light (with optional shadow rays)
and follows up to bounce_count mirror reflections off reflective
materials. The accumulated color is tone-mapped by max-component rescaling
and quantized into an 8-bit framebuffer.

Per light, with l the unit direction toward the light and v the unit
direction toward the viewer:

    observed_area = dot(n, l)
    OBSERVED_AREA: observed_area                      (skipped if < 0)
    RADIANCE:      radiance(light, p)
    BRDF:          shade(material, n, l, v)           (skipped if < 0)
    COMBINED:      radiance * shade * observed_area   (skipped if < 0)
                   scaled by reflectivity * multiplier after the first hit

After each hit the carried reflectivity becomes the material's and the
bounce multiplier decays by BOUNCE_DECAY.

The scheduler is a single kernel whose outermost loop runs over the flat
pixel range [0, width * height). Taichi splits that loop across its CPU
thread pool; each iteration writes only its own framebuffer cell and reads
scene data that nothing mutates during the pass. render_frame() blocks
until the pass has finished.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.core.integrator import setup_render_target, render_frame
    >>> from src.whitted.core.settings import RenderSettings
    >>> setup_render_target(640, 480)
    >>> render_frame(RenderSettings(bounce_count=2))
"""

import logging
import time

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.whitted.camera.camera import get_primary_ray
from src.whitted.core.ray import T_MAX, T_MIN, offset_from_surface, reflect
from src.whitted.core.settings import LightingMode, RenderSettings
from src.whitted.materials.cook_torrance import (
    cook_torrance_reflectivity_by_id,
    shade_cook_torrance_by_id,
)
from src.whitted.materials.lambert import shade_lambert_by_id
from src.whitted.materials.lambert_phong import shade_lambert_phong_by_id
from src.whitted.materials.solid_color import shade_solid_color_by_id
from src.whitted.scene.intersection import intersect_scene, intersect_scene_any
from src.whitted.scene.lights import (
    direction_to_light,
    distance_to_light,
    get_num_lights,
    light_radiance,
)
from src.whitted.scene.manager import (
    MaterialType,
    get_material_type,
    get_material_type_index,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Rendering Constants
# =============================================================================

# Bounce multiplier decay per hit
BOUNCE_DECAY = 0.7

# Reflectivity below this ends the bounce loop (single-precision epsilon)
REFLECTIVITY_EPSILON = 1.1920929e-07

# =============================================================================
# Render Target (Framebuffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# 8-bit output, indexed [row, column] with row 0 at the top
_framebuffer = ti.Vector.field(3, dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

# Tone-mapped color before quantization
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image dimensions and clear the framebuffer.

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def clear_render_target() -> None:
    """Clear the framebuffer and color buffer to zero."""
    _framebuffer.fill(0)
    _color_buffer.fill(0.0)


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def _check_render_target_initialized() -> None:
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Material Dispatch
# =============================================================================


@ti.func
def shade_material(material_id: ti.i32, normal: vec3, light_dir: vec3, view_dir: vec3) -> vec3:
    """Evaluate the BRDF of the hit material. Unknown IDs shade black."""
    mat_type = get_material_type(material_id)
    type_index = get_material_type_index(material_id)

    color = vec3(0.0, 0.0, 0.0)
    if mat_type == int(MaterialType.SOLID_COLOR):
        color = shade_solid_color_by_id(type_index)
    elif mat_type == int(MaterialType.LAMBERT):
        color = shade_lambert_by_id(type_index)
    elif mat_type == int(MaterialType.LAMBERT_PHONG):
        color = shade_lambert_phong_by_id(type_index, normal, light_dir, view_dir)
    elif mat_type == int(MaterialType.COOK_TORRANCE):
        color = shade_cook_torrance_by_id(type_index, normal, light_dir, view_dir)
    return color


@ti.func
def material_reflectivity(material_id: ti.i32) -> ti.f32:
    """Mirror reflectivity of the hit material; zero for all but Cook-Torrance."""
    result = 0.0
    if get_material_type(material_id) == int(MaterialType.COOK_TORRANCE):
        result = cook_torrance_reflectivity_by_id(get_material_type_index(material_id))
    return result


# =============================================================================
# Per-pixel Integration
# =============================================================================


@ti.func
def max_to_one(color: vec3) -> vec3:
    """Tone map by max-component rescaling.

    NaN/Inf channels become 0 and negatives are clamped to 0. If the largest
    channel exceeds 1 the whole color is divided by it, preserving hue.
    """
    result = color
    for c in ti.static(range(3)):
        if tm.isnan(result[c]) or tm.isinf(result[c]):
            result[c] = 0.0
    result = tm.max(result, vec3(0.0, 0.0, 0.0))

    max_component = ti.max(result.x, ti.max(result.y, result.z))
    if max_component > 1.0:
        result = result / max_component
    return result


@ti.func
def _direct_lighting(
    point: vec3,
    shadow_origin: vec3,
    normal: vec3,
    view_dir: vec3,
    material_id: ti.i32,
    lighting_mode: ti.i32,
    shadows_enabled: ti.i32,
    is_bounce: ti.i32,
    bounce_scale: ti.f32,
) -> vec3:
    """Sum the per-light contributions at a hit for the active lighting mode."""
    color = vec3(0.0, 0.0, 0.0)

    for i in range(get_num_lights()):
        to_light = direction_to_light(i, point)
        light_dir = tm.normalize(to_light)
        light_distance = distance_to_light(i, point)

        occluded = 0
        if shadows_enabled == 1:
            occluded = intersect_scene_any(shadow_origin, light_dir, 0.0, light_distance)

        if occluded == 0:
            observed_area = tm.dot(normal, light_dir)

            if lighting_mode == int(LightingMode.RADIANCE):
                color += light_radiance(i, point)
            elif observed_area >= 0.0:
                if lighting_mode == int(LightingMode.OBSERVED_AREA):
                    color += vec3(observed_area, observed_area, observed_area)
                elif lighting_mode == int(LightingMode.BRDF):
                    color += shade_material(material_id, normal, light_dir, view_dir)
                elif lighting_mode == int(LightingMode.COMBINED):
                    contribution = (
                        light_radiance(i, point)
                        * shade_material(material_id, normal, light_dir, view_dir)
                        * observed_area
                    )
                    if is_bounce == 1:
                        contribution *= bounce_scale
                    color += contribution

    return color


@ti.func
def trace_pixel(
    px: ti.i32,
    py: ti.i32,
    width: ti.i32,
    height: ti.i32,
    lighting_mode: ti.i32,
    shadows_enabled: ti.i32,
    reflections_enabled: ti.i32,
    bounce_count: ti.i32,
    sky_color: vec3,
) -> vec3:
    """Accumulate the untone-mapped color for one pixel.

    Runs the primary segment plus up to bounce_count reflected segments.
    """
    ray = get_primary_ray(px, py, width, height)
    origin = ray.origin
    direction = ray.direction

    final_color = vec3(0.0, 0.0, 0.0)
    reflectivity_carry = 1.0
    bounce_multiplier = 1.0

    # Taichi doesn't support break in ti.func loops
    active = 1

    for segment in range(bounce_count + 1):
        if active == 1:
            hit = intersect_scene(origin, direction, T_MIN, T_MAX)

            if hit.hit == 0:
                final_color += sky_color
                active = 0
            else:
                is_bounce = 0
                if segment > 0:
                    is_bounce = 1
                surface_origin = offset_from_surface(hit.point, hit.normal, direction)
                final_color += _direct_lighting(
                    hit.point,
                    surface_origin,
                    hit.normal,
                    -direction,
                    hit.material_id,
                    lighting_mode,
                    shadows_enabled,
                    is_bounce,
                    reflectivity_carry * bounce_multiplier,
                )

                reflectivity_carry = material_reflectivity(hit.material_id)
                bounce_multiplier *= BOUNCE_DECAY
                origin = surface_origin
                direction = reflect(direction, hit.normal)

                if reflectivity_carry < REFLECTIVITY_EPSILON or reflections_enabled == 0:
                    active = 0

    return final_color


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_pass(
    width: ti.i32,
    height: ti.i32,
    lighting_mode: ti.i32,
    shadows_enabled: ti.i32,
    reflections_enabled: ti.i32,
    bounce_count: ti.i32,
    sky_color: vec3,
):
    # Outermost loop is parallelized; each index owns one framebuffer cell
    for pixel_index in range(width * height):
        px = pixel_index % width
        py = pixel_index // width

        color = trace_pixel(
            px,
            py,
            width,
            height,
            lighting_mode,
            shadows_enabled,
            reflections_enabled,
            bounce_count,
            sky_color,
        )
        mapped = max_to_one(color)

        _color_buffer[py, px] = mapped
        _framebuffer[py, px] = ti.cast(ti.cast(mapped * 255.0, ti.i32), ti.u8)


@ti.kernel
def _trace_single_pixel(
    px: ti.i32,
    py: ti.i32,
    width: ti.i32,
    height: ti.i32,
    lighting_mode: ti.i32,
    shadows_enabled: ti.i32,
    reflections_enabled: ti.i32,
    bounce_count: ti.i32,
    sky_color: vec3,
) -> vec3:
    return trace_pixel(
        px,
        py,
        width,
        height,
        lighting_mode,
        shadows_enabled,
        reflections_enabled,
        bounce_count,
        sky_color,
    )


# =============================================================================
# Public Rendering API
# =============================================================================


def _settings_args(settings: RenderSettings) -> tuple[int, int, int, int, vec3]:
    return (
        int(settings.lighting_mode),
        int(settings.shadows_enabled),
        int(settings.reflections_enabled),
        settings.bounce_count,
        vec3(*settings.sky_color),
    )


def render_frame(settings: RenderSettings) -> float:
    """Render every pixel of the active render target.

    Blocks until all pixels are written. The camera must have been uploaded
    with setup_camera() and the scene must not change during the call.

    Returns:
        Elapsed wall time in seconds.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()

    start = time.perf_counter()
    _render_pass(width, height, *_settings_args(settings))
    ti.sync()
    elapsed = time.perf_counter() - start

    logger.info(
        "Rendered %dx%d in %.3fs (mode=%s, bounces=%d, shadows=%s, reflections=%s)",
        width,
        height,
        elapsed,
        settings.lighting_mode.name,
        settings.bounce_count,
        settings.shadows_enabled,
        settings.reflections_enabled,
    )
    return elapsed


def render_pixel(
    px: int, py: int, settings: RenderSettings, tone_map: bool = False
) -> tuple[float, float, float]:
    """Trace one pixel without touching the framebuffer.

    Intended for tests and debugging; render_frame() is the production path.

    Args:
        px: Column index (0 = left).
        py: Row index (0 = top).
        settings: The render settings.
        tone_map: Apply max-to-one rescaling to the result.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        RuntimeError: If render target has not been set up.
        ValueError: If the pixel is outside the render target.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    if not (0 <= px < width and 0 <= py < height):
        raise ValueError(f"Pixel ({px}, {py}) outside {width}x{height} render target")

    color = _trace_single_pixel(px, py, width, height, *_settings_args(settings))
    result = np.array([float(color[0]), float(color[1]), float(color[2])])
    if tone_map:
        result = tone_map_numpy(result)
    return (float(result[0]), float(result[1]), float(result[2]))


def tone_map_numpy(color: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Host-side max-to-one, matching the kernel tone map."""
    result = np.nan_to_num(np.asarray(color, dtype=np.float64), nan=0.0, posinf=0.0, neginf=0.0)
    result = np.maximum(result, 0.0)
    max_component = result.max()
    if max_component > 1.0:
        result = result / max_component
    return result


def get_framebuffer_numpy() -> npt.NDArray[np.uint8]:
    """Get the 8-bit framebuffer as an array of shape (height, width, 3).

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    return _framebuffer.to_numpy()[:height, :width, :].copy()


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the tone-mapped float image, shape (height, width, 3), values in [0, 1].

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()
    width, height = get_image_dimensions()
    return _color_buffer.to_numpy()[:height, :width, :].astype(np.float32)
