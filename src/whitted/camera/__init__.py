"""Camera module for view setup and primary ray generation.

Components:
    camera: Pinhole camera with position, field of view and pitch/yaw

Camera responsibilities:
    - Hold origin, fov ratio and the camera-to-world transform
    - Recompute camera-to-world before each render pass
    - Map a pixel index to a world-space primary ray inside kernels

Pixel coordinates put (0, 0) at the top-left corner of the image.
"""

from .camera import Camera, get_camera_info, get_camera_origin, get_primary_ray, setup_camera

__all__ = [
    "Camera",
    "setup_camera",
    "get_primary_ray",
    "get_camera_origin",
    "get_camera_info",
]
