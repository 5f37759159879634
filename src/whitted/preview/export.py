"""PNG export for rendered frames.

The integrator already tone-maps and quantizes, so frames arrive here as
uint8 arrays of shape (H, W, 3). Float images in [0, 1] are accepted too
and quantized the same way the integrator does (truncating c * 255).

Example:
    >>> from src.whitted.preview.export import save_png
    >>> save_png(renderer.get_image_uint8(), "output.png")
"""

import logging
from pathlib import Path

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

logger = logging.getLogger(__name__)


def image_to_uint8(image: npt.NDArray[np.floating]) -> npt.NDArray[np.uint8]:
    """Quantize a float image in [0, 1] to 8 bits by truncation.

    Values outside [0, 1] are clipped first.
    """
    clipped = np.clip(np.asarray(image, dtype=np.float64), 0.0, 1.0)
    return (clipped * 255.0).astype(np.uint8)


def _as_rgb_uint8(image: npt.NDArray) -> npt.NDArray[np.uint8]:
    arr = np.asarray(image)
    if arr.ndim != 3 or arr.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {arr.shape}")
    if arr.dtype == np.uint8:
        return arr
    return image_to_uint8(arr)


def save_png(image: npt.NDArray, filepath: str | Path) -> Path:
    """Save an RGB frame as a PNG file.

    Args:
        image: uint8 or float (in [0, 1]) array of shape (H, W, 3),
            row 0 at the top.
        filepath: Output file path. Parent directories are created.

    Returns:
        The path written.

    Raises:
        ValueError: If the image is not (H, W, 3).
    """
    path = Path(filepath)
    pixels = _as_rgb_uint8(image)
    path.parent.mkdir(parents=True, exist_ok=True)

    PILImage.fromarray(np.ascontiguousarray(pixels)).save(path, format="PNG")
    logger.info("Saved %dx%d image to %s", pixels.shape[1], pixels.shape[0], path)
    return path


def load_png(filepath: str | Path) -> npt.NDArray[np.uint8]:
    """Load a PNG as a uint8 (H, W, 3) array, e.g. a reference frame."""
    with PILImage.open(filepath) as img:
        return np.asarray(img.convert("RGB"), dtype=np.uint8)


def compute_rmse(image_a: npt.NDArray, image_b: npt.NDArray) -> float:
    """Root mean squared error between two images of the same shape.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
