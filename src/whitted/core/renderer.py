"""Renderer facade tying a scene, the camera and render settings together.

The Renderer owns the render target dimensions and the current
RenderSettings. Toggles (lighting mode, shadows, reflections, bounce count)
replace the settings value between passes; render() uploads the camera and
runs one blocking pass.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.core.renderer import Renderer
    >>> from src.whitted.scene.demo_scenes import create_sphere_grid_scene
    >>> scene = create_sphere_grid_scene()
    >>> renderer = Renderer(scene, 640, 480)
    >>> renderer.render()
    >>> renderer.cycle_lighting_mode()
    >>> renderer.save_image("frame.png")
"""

import dataclasses
import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt

from src.whitted.camera.camera import setup_camera
from src.whitted.core.integrator import (
    clear_render_target,
    get_framebuffer_numpy,
    get_image_numpy,
    render_frame,
    setup_render_target,
)
from src.whitted.core.settings import LightingMode, RenderSettings
from src.whitted.scene.manager import SceneManager

logger = logging.getLogger(__name__)


class Renderer:
    """Single-pass Whitted renderer over a SceneManager.

    Attributes:
        scene: The scene being rendered.
        settings: The settings used by the next render() call.
    """

    def __init__(
        self,
        scene: SceneManager,
        width: int,
        height: int,
        settings: RenderSettings | None = None,
    ) -> None:
        """Initialize the renderer and its render target.

        Raises:
            ValueError: If dimensions are invalid or exceed the maximum size.
        """
        self.scene = scene
        self.settings = settings if settings is not None else RenderSettings()
        self._width = width
        self._height = height
        self._frames_rendered = 0
        setup_render_target(width, height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def aspect_ratio(self) -> float:
        return self._width / self._height

    @property
    def frames_rendered(self) -> int:
        return self._frames_rendered

    def resize(self, width: int, height: int) -> None:
        """Resize the render target; the framebuffer is cleared.

        Raises:
            ValueError: If dimensions are invalid or exceed the maximum size.
        """
        setup_render_target(width, height)
        self._width = width
        self._height = height

    def reset(self) -> None:
        """Clear the framebuffer without changing dimensions."""
        clear_render_target()

    def render(self) -> float:
        """Render one complete frame with the current settings.

        Returns:
            Elapsed wall time in seconds.
        """
        # Camera may have moved since the last pass
        setup_camera(self.scene.camera)
        elapsed = render_frame(self.settings)
        self._frames_rendered += 1
        return elapsed

    # =========================================================================
    # Settings Toggles
    # =========================================================================

    def cycle_lighting_mode(self) -> LightingMode:
        """Advance to the next lighting mode and return it."""
        self.settings = self.settings.cycled()
        logger.info("LightingMode: %s", self.settings.lighting_mode.name)
        return self.settings.lighting_mode

    def toggle_shadows(self) -> bool:
        self.settings = self.settings.with_shadows(not self.settings.shadows_enabled)
        logger.info("Shadows %s", "enabled" if self.settings.shadows_enabled else "disabled")
        return self.settings.shadows_enabled

    def toggle_reflections(self) -> bool:
        self.settings = self.settings.with_reflections(not self.settings.reflections_enabled)
        logger.info(
            "Reflections %s", "enabled" if self.settings.reflections_enabled else "disabled"
        )
        return self.settings.reflections_enabled

    def set_bounce_count(self, bounce_count: int) -> None:
        """Set the maximum number of specular bounces.

        Raises:
            ValueError: If bounce_count is negative.
        """
        self.settings = dataclasses.replace(self.settings, bounce_count=bounce_count)

    # =========================================================================
    # Output
    # =========================================================================

    def get_image_uint8(self) -> npt.NDArray[np.uint8]:
        """Get the 8-bit framebuffer, shape (height, width, 3), row 0 at the top."""
        return get_framebuffer_numpy()

    def get_image_numpy(self) -> npt.NDArray[np.float32]:
        """Get the tone-mapped image in [0, 1], shape (height, width, 3)."""
        return get_image_numpy()

    def save_image(self, filepath: str | Path) -> Path:
        """Save the framebuffer as a PNG file.

        Returns:
            The path written.
        """
        # Imported here so headless use does not need the preview extras loaded
        from src.whitted.preview.export import save_png

        return save_png(self.get_image_uint8(), filepath)

    def __repr__(self) -> str:
        return (
            f"Renderer(width={self.width}, height={self.height}, "
            f"mode={self.settings.lighting_mode.name}, bounces={self.settings.bounce_count})"
        )
