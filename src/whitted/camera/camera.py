"""Perspective camera driven by position, field of view and pitch/yaw.

The camera uses a left-handed frame: +x right, +y up, +z forward. Its
orientation is stored as two Euler angles (radians). The forward vector is
the Z axis rotated by pitch then yaw:

    forward = (cos(pitch) sin(yaw), sin(pitch), cos(pitch) cos(yaw))

calculate_camera_to_world() builds an orthonormal basis around it:

    right = normalize(up_ref x forward)    (up_ref = +y, or +z when looking
                                            straight up or down)
    up    = forward x right

and packs (right, up, forward, origin) into a Matrix. setup_camera()
uploads the matrix to Taichi fields; get_primary_ray() then maps a pixel
to a world-space ray inside kernels:

    cx = (2 (px + 0.5) / width - 1) * aspect * fov_ratio
    cy = (1 - 2 (py + 0.5) / height) * fov_ratio
    direction = normalize(camera_to_world * (cx, cy, 1))

Row 0 of the image is the top row.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.whitted.camera.camera import Camera, setup_camera
    >>> camera = Camera(origin=(0.0, 1.0, -5.0), fov_angle=60.0)
    >>> setup_camera(camera)
"""

import math
from dataclasses import dataclass
from typing import Any

import numpy as np
import taichi as ti
import taichi.math as tm

from src.whitted.core.matrix import UNIT_Y, UNIT_Z, Matrix, normalized, transform_vector
from src.whitted.core.ray import T_MAX, T_MIN, Ray, make_ray

vec3 = tm.vec3

# Above this |forward . up_ref| the +y reference is swapped for +z
PARALLEL_THRESHOLD = 0.999


@dataclass
class Camera:
    """A pinhole camera with Euler-angle orientation.

    Attributes:
        origin: Camera position in world space (x, y, z).
        fov_angle: Vertical field of view in degrees, in (0, 180).
        total_pitch: Rotation about the X axis in radians; positive looks up.
        total_yaw: Rotation about the Y axis in radians; positive turns right.
    """

    origin: tuple[float, float, float] = (0.0, 0.0, 0.0)
    fov_angle: float = 60.0
    total_pitch: float = 0.0
    total_yaw: float = 0.0

    def __post_init__(self) -> None:
        if not 0.0 < self.fov_angle < 180.0:
            raise ValueError(f"fov_angle must be in (0, 180) degrees, got {self.fov_angle}")
        if len(self.origin) != 3:
            raise ValueError(f"origin must have 3 components, got {self.origin}")
        self.origin = (float(self.origin[0]), float(self.origin[1]), float(self.origin[2]))

    @property
    def fov_ratio(self) -> float:
        """Half-height of the image plane at unit distance: tan(fov / 2)."""
        return math.tan(math.radians(self.fov_angle) / 2.0)

    def forward(self) -> np.ndarray:
        rotation = Matrix.create_rotation(self.total_pitch, self.total_yaw, 0.0)
        return normalized(rotation.transform_vector(UNIT_Z))

    def calculate_camera_to_world(self) -> Matrix:
        """Recompute the camera-to-world transform from position and angles."""
        forward = self.forward()
        up_ref = UNIT_Y
        if abs(float(np.dot(forward, UNIT_Y))) > PARALLEL_THRESHOLD:
            up_ref = UNIT_Z
        right = normalized(np.cross(up_ref, forward))
        up = np.cross(forward, right).astype(np.float32)
        return Matrix.from_axes(right, up, forward, self.origin)

    def rotate(self, delta_pitch: float, delta_yaw: float) -> None:
        """Accumulate a pitch/yaw change; pitch is kept within +-90 degrees."""
        limit = math.pi / 2.0
        self.total_pitch = max(-limit, min(limit, self.total_pitch + delta_pitch))
        self.total_yaw += delta_yaw

    def move(self, forward: float = 0.0, right: float = 0.0, up: float = 0.0) -> None:
        """Translate along the camera's own axes."""
        c2w = self.calculate_camera_to_world()
        offset = forward * c2w.axis_z + right * c2w.axis_x + up * c2w.axis_y
        self.origin = tuple(float(c) for c in np.asarray(self.origin) + offset)

    def to_dict(self) -> dict[str, Any]:
        return {
            "origin": list(self.origin),
            "fov_angle": self.fov_angle,
            "total_pitch": self.total_pitch,
            "total_yaw": self.total_yaw,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Camera":
        origin = data.get("origin", [0.0, 0.0, 0.0])
        return cls(
            origin=(origin[0], origin[1], origin[2]),
            fov_angle=data.get("fov_angle", 60.0),
            total_pitch=data.get("total_pitch", 0.0),
            total_yaw=data.get("total_yaw", 0.0),
        )


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_to_world = ti.Matrix.field(4, 4, dtype=ti.f32, shape=())
_camera_fov_ratio = ti.field(dtype=ti.f32, shape=())


def setup_camera(camera: Camera) -> None:
    """Upload the camera's transform and fov ratio for the next render pass.

    Must be called from Python between passes, never during one.
    """
    c2w = camera.calculate_camera_to_world()
    _camera_origin[None] = list(camera.origin)
    _camera_to_world[None] = c2w.to_list()
    _camera_fov_ratio[None] = camera.fov_ratio


@ti.func
def get_primary_ray(px: ti.i32, py: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the ray through the center of pixel (px, py).

    Args:
        px: Column index, 0 is the left edge.
        py: Row index, 0 is the top edge.
        width: Image width in pixels.
        height: Image height in pixels.
    """
    fov_ratio = _camera_fov_ratio[None]
    aspect = ti.cast(width, ti.f32) / ti.cast(height, ti.f32)
    cx = (2.0 * (ti.cast(px, ti.f32) + 0.5) / ti.cast(width, ti.f32) - 1.0) * aspect * fov_ratio
    cy = (1.0 - 2.0 * (ti.cast(py, ti.f32) + 0.5) / ti.cast(height, ti.f32)) * fov_ratio

    direction = tm.normalize(transform_vector(_camera_to_world[None], vec3(cx, cy, 1.0)))
    return make_ray(_camera_origin[None], direction, T_MIN, T_MAX)


@ti.func
def get_camera_origin() -> vec3:
    return _camera_origin[None]


def get_camera_info() -> dict[str, tuple[float, ...]]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with origin, right, up, forward and fov_ratio.
    """
    origin = _camera_origin[None]
    m = _camera_to_world[None]
    return {
        "origin": (float(origin[0]), float(origin[1]), float(origin[2])),
        "right": (float(m[0, 0]), float(m[0, 1]), float(m[0, 2])),
        "up": (float(m[1, 0]), float(m[1, 1]), float(m[1, 2])),
        "forward": (float(m[2, 0]), float(m[2, 1]), float(m[2, 2])),
        "fov_ratio": (float(_camera_fov_ratio[None]),),
    }
