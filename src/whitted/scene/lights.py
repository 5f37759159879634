"""Point and directional light sources.

Lights live in Taichi fields as a tagged union: every slot stores a type,
an origin (point lights), a direction (directional lights), a color and an
intensity. The kernel-side helpers evaluate:

    direction_to_light(i, p): unnormalized vector from p toward light i
        point:       origin - p
        directional: -direction
    distance_to_light(i, p): distance used to bound shadow rays
        point:       |origin - p|
        directional: infinity (explicit, no large-float sentinel)
    light_radiance(i, p): incident radiance at p
        point:       color * intensity / |origin - p|^2
        directional: color * intensity

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.scene.lights import add_point_light, add_directional_light
    >>> add_point_light((0.0, 5.0, -5.0), (1.0, 0.6, 0.45), 50.0)
    >>> add_directional_light((0.0, -1.0, 0.0), (1.0, 1.0, 1.0), 1.0)
"""

import math
from enum import IntEnum

import taichi as ti
import taichi.math as tm

from src.whitted.core.ray import T_MAX

vec3 = tm.vec3

# Squared distances below this are clamped to avoid dividing by zero
MIN_DISTANCE_SQUARED = 1e-8


class LightType(IntEnum):
    """Supported light kinds."""

    POINT = 0
    DIRECTIONAL = 1


MAX_LIGHTS = 64

light_types = ti.field(dtype=ti.i32, shape=MAX_LIGHTS)
light_origins = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_directions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_colors = ti.Vector.field(3, dtype=ti.f32, shape=MAX_LIGHTS)
light_intensities = ti.field(dtype=ti.f32, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())


def clear_lights() -> None:
    """Remove all lights."""
    num_lights[None] = 0


def _validate_light(color: tuple[float, float, float], intensity: float) -> None:
    for i, component in enumerate(color):
        if component < 0.0:
            raise ValueError(f"Light color component {i} = {component} is negative")
    if intensity < 0.0:
        raise ValueError(f"Light intensity must be non-negative, got {intensity}")


def _next_light_slot() -> int:
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    return idx


def add_point_light(
    origin: tuple[float, float, float],
    color: tuple[float, float, float],
    intensity: float,
) -> int:
    """Add a point light.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
        ValueError: If color or intensity is negative.
    """
    _validate_light(color, intensity)
    idx = _next_light_slot()

    light_types[idx] = int(LightType.POINT)
    light_origins[idx] = vec3(origin[0], origin[1], origin[2])
    light_directions[idx] = vec3(0.0, 0.0, 0.0)
    light_colors[idx] = vec3(color[0], color[1], color[2])
    light_intensities[idx] = intensity
    num_lights[None] = idx + 1
    return idx


def add_directional_light(
    direction: tuple[float, float, float],
    color: tuple[float, float, float],
    intensity: float,
) -> int:
    """Add a directional light shining along direction.

    The direction is normalized here.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
        ValueError: If the direction is zero or color/intensity is negative.
    """
    _validate_light(color, intensity)
    norm = math.sqrt(sum(c * c for c in direction))
    if norm < 1e-12:
        raise ValueError("Directional light direction must be non-zero")
    idx = _next_light_slot()

    light_types[idx] = int(LightType.DIRECTIONAL)
    light_origins[idx] = vec3(0.0, 0.0, 0.0)
    light_directions[idx] = vec3(direction[0] / norm, direction[1] / norm, direction[2] / norm)
    light_colors[idx] = vec3(color[0], color[1], color[2])
    light_intensities[idx] = intensity
    num_lights[None] = idx + 1
    return idx


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


@ti.func
def get_num_lights() -> ti.i32:
    return num_lights[None]


@ti.func
def direction_to_light(light_idx: ti.i32, point: vec3) -> vec3:
    """Unnormalized vector from point toward the light."""
    result = -light_directions[light_idx]
    if light_types[light_idx] == int(LightType.POINT):
        result = light_origins[light_idx] - point
    return result


@ti.func
def distance_to_light(light_idx: ti.i32, point: vec3) -> ti.f32:
    """Distance from point to the light; infinite for directional lights."""
    result = T_MAX
    if light_types[light_idx] == int(LightType.POINT):
        result = tm.length(light_origins[light_idx] - point)
    return result


@ti.func
def light_radiance(light_idx: ti.i32, point: vec3) -> vec3:
    """Incident radiance at point from the light."""
    emitted = light_colors[light_idx] * light_intensities[light_idx]
    result = emitted
    if light_types[light_idx] == int(LightType.POINT):
        offset = light_origins[light_idx] - point
        distance_sq = ti.max(tm.dot(offset, offset), MIN_DISTANCE_SQUARED)
        result = emitted / distance_sq
    return result
