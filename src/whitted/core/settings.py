"""Render settings and Taichi runtime initialization.

RenderSettings is the explicit per-frame state handed to the integrator:
bounce count, shadow/reflection toggles, the active lighting mode and the
sky color. It replaces any global render-mode state; the renderer builds a
new settings value when the user toggles something between passes.

Example:
    >>> from src.whitted.core.settings import LightingMode, RenderSettings
    >>> settings = RenderSettings(bounce_count=2, shadows_enabled=False)
    >>> settings = settings.with_lighting_mode(LightingMode.BRDF)
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from enum import IntEnum

import taichi as ti

logger = logging.getLogger(__name__)


class LightingMode(IntEnum):
    """What the integrator accumulates per light.

    OBSERVED_AREA: Lambert cosine term only.
    RADIANCE: Incident light falloff only.
    BRDF: Material response only.
    COMBINED: radiance * BRDF * observed area, attenuated on bounces.
    """

    OBSERVED_AREA = 0
    RADIANCE = 1
    BRDF = 2
    COMBINED = 3

    def next(self) -> LightingMode:
        """Return the following mode, wrapping from COMBINED to OBSERVED_AREA."""
        return LightingMode((int(self) + 1) % len(LightingMode))


@dataclass(frozen=True)
class RenderSettings:
    """Options recognised by the integrator for a single render pass.

    Attributes:
        bounce_count: Maximum number of specular bounces after the primary hit.
        shadows_enabled: Whether shadow rays are traced toward each light.
        reflections_enabled: Whether reflective materials spawn bounce rays.
        lighting_mode: Which term the integrator visualizes or accumulates.
        sky_color: Color added when a ray escapes the scene.
    """

    bounce_count: int = 1
    shadows_enabled: bool = True
    reflections_enabled: bool = True
    lighting_mode: LightingMode = LightingMode.COMBINED
    sky_color: tuple[float, float, float] = (1.0, 1.0, 1.0)

    def __post_init__(self) -> None:
        if self.bounce_count < 0:
            raise ValueError(f"bounce_count must be non-negative, got {self.bounce_count}")
        if len(self.sky_color) != 3:
            raise ValueError(f"sky_color must have 3 components, got {self.sky_color}")
        for i, component in enumerate(self.sky_color):
            if component < 0.0:
                raise ValueError(f"sky_color component {i} = {component} is negative")
        # Accept plain ints for the mode, e.g. from a config file
        object.__setattr__(self, "lighting_mode", LightingMode(self.lighting_mode))

    def with_lighting_mode(self, mode: LightingMode) -> RenderSettings:
        return dataclasses.replace(self, lighting_mode=mode)

    def cycled(self) -> RenderSettings:
        """Return a copy with the next lighting mode selected."""
        return self.with_lighting_mode(self.lighting_mode.next())

    def with_shadows(self, enabled: bool) -> RenderSettings:
        return dataclasses.replace(self, shadows_enabled=enabled)

    def with_reflections(self, enabled: bool) -> RenderSettings:
        return dataclasses.replace(self, reflections_enabled=enabled)


def init_runtime(num_threads: int | None = None, debug: bool = False, seed: int = 0) -> None:
    """Initialize the Taichi CPU runtime.

    Must be called before importing modules that declare Taichi fields.

    Args:
        num_threads: Size of the CPU worker pool. None lets Taichi pick
            the number of hardware threads.
        debug: Enable Taichi debug mode, which turns out-of-range field
            access (e.g. an invalid material id) into a fatal error.
        seed: Random seed for the Taichi runtime.
    """
    kwargs: dict[str, object] = {"arch": ti.cpu, "debug": debug, "random_seed": seed}
    if num_threads is not None:
        if num_threads < 1:
            raise ValueError(f"num_threads must be positive, got {num_threads}")
        kwargs["cpu_max_num_threads"] = num_threads
    ti.init(**kwargs)
    logger.info("Taichi CPU runtime initialized (threads=%s, debug=%s)", num_threads, debug)
