"""Preview module for output and visualization.

Components:
    display: Matplotlib-based preview of a frame or of every lighting mode
    export: Pillow PNG export and image comparison helpers

The renderer only writes into its framebuffer; these helpers read it
back and present or persist it.

Example:
    >>> from src.whitted.preview import save_png, show_preview
    >>> renderer.render()
    >>> show_preview(renderer)
    >>> save_png(renderer.get_image_uint8(), "output.png")
"""

from src.whitted.preview.display import render_lighting_modes, show_lighting_modes, show_preview
from src.whitted.preview.export import compute_rmse, image_to_uint8, load_png, save_png

__all__ = [
    # Display functions
    "show_preview",
    "show_lighting_modes",
    "render_lighting_modes",
    # Export functions
    "save_png",
    "load_png",
    "image_to_uint8",
    "compute_rmse",
]
