"""Matplotlib-based preview of rendered frames.

Example:
    >>> from src.whitted.preview.display import show_preview
    >>> renderer.render()
    >>> show_preview(renderer)
    >>> show_lighting_modes(renderer)  # 2x2 grid, one panel per mode
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from src.whitted.core.settings import LightingMode

if TYPE_CHECKING:
    from matplotlib.figure import Figure

    from src.whitted.core.renderer import Renderer


def _default_title(renderer: Renderer) -> str:
    settings = renderer.settings
    return (
        f"{settings.lighting_mode.name} | bounces={settings.bounce_count} | "
        f"shadows={'on' if settings.shadows_enabled else 'off'} | "
        f"reflections={'on' if settings.reflections_enabled else 'off'}"
    )


def show_preview(
    renderer: Renderer,
    *,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> Figure:
    """Display the renderer's current framebuffer in a Matplotlib figure.

    Args:
        renderer: The Renderer whose last frame is shown.
        title: Custom title (default shows the active settings).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until figure is closed.

    Returns:
        The Matplotlib figure.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(renderer.get_image_uint8())
    ax.axis("off")
    ax.set_title(title if title is not None else _default_title(renderer))

    plt.tight_layout()
    plt.show(block=block)
    return fig


def render_lighting_modes(renderer: Renderer) -> dict[LightingMode, npt.NDArray[np.uint8]]:
    """Render one frame per lighting mode.

    The renderer's settings are restored afterwards.
    """
    original = renderer.settings
    frames: dict[LightingMode, npt.NDArray[np.uint8]] = {}
    try:
        for mode in LightingMode:
            renderer.settings = original.with_lighting_mode(mode)
            renderer.render()
            frames[mode] = renderer.get_image_uint8()
    finally:
        renderer.settings = original
    return frames


def show_lighting_modes(
    renderer: Renderer,
    *,
    figsize: tuple[float, float] = (12, 9),
    block: bool = True,
) -> Figure:
    """Render and display all four lighting modes in a 2x2 grid."""
    import matplotlib.pyplot as plt

    frames = render_lighting_modes(renderer)

    fig, axes = plt.subplots(2, 2, figsize=figsize)
    for ax, (mode, frame) in zip(axes.flat, frames.items()):
        ax.imshow(frame)
        ax.set_title(mode.name)
        ax.axis("off")

    plt.tight_layout()
    plt.show(block=block)
    return fig
