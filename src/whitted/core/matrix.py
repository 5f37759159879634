"""4x4 affine transforms for camera and mesh placement.

The Matrix class is a host-side (Python/NumPy) value type. It stores the
transform as four homogeneous axis rows:

    row 0: X axis  (w = 0)
    row 1: Y axis  (w = 0)
    row 2: Z axis  (w = 0)
    row 3: translation (w = 1)

Vectors are treated as row vectors, so a point p is transformed as
p.x * X + p.y * Y + p.z * Z + T and composition A * B applies A first,
then B.

The kernel-side helpers transform_vector() and transform_point() apply a
matrix stored in a Taichi mat4 field with the same convention.

Example:
    >>> m = Matrix.create_translation((1.0, 2.0, 3.0))
    >>> m.transform_point((0.0, 0.0, 0.0))
    array([1., 2., 3.], dtype=float32)
"""

import math
from collections.abc import Sequence

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

Vector3Like = Sequence[float] | npt.NDArray[np.float32]

UNIT_X = np.array([1.0, 0.0, 0.0], dtype=np.float32)
UNIT_Y = np.array([0.0, 1.0, 0.0], dtype=np.float32)
UNIT_Z = np.array([0.0, 0.0, 1.0], dtype=np.float32)


def as_vector3(v: Vector3Like) -> npt.NDArray[np.float32]:
    """Convert a 3-sequence to a float32 NumPy vector.

    Raises:
        ValueError: If v does not have exactly three components.
    """
    arr = np.asarray(v, dtype=np.float32)
    if arr.shape != (3,):
        raise ValueError(f"Expected a 3-component vector, got shape {arr.shape}")
    return arr


def normalized(v: Vector3Like) -> npt.NDArray[np.float32]:
    """Return a unit-length copy of v.

    Raises:
        ValueError: If v has zero length.
    """
    arr = as_vector3(v)
    norm = float(np.linalg.norm(arr))
    if norm < 1e-12:
        raise ValueError("Cannot normalize a zero-length vector")
    return (arr / norm).astype(np.float32)


class Matrix:
    """A 4x4 affine transform stored as four homogeneous axis rows."""

    def __init__(self, data: npt.ArrayLike | None = None) -> None:
        if data is None:
            self.data = np.identity(4, dtype=np.float32)
        else:
            arr = np.array(data, dtype=np.float32)
            if arr.shape != (4, 4):
                raise ValueError(f"Matrix data must be 4x4, got shape {arr.shape}")
            self.data = arr

    @classmethod
    def from_axes(
        cls,
        x_axis: Vector3Like,
        y_axis: Vector3Like,
        z_axis: Vector3Like,
        translation: Vector3Like,
    ) -> "Matrix":
        """Build a matrix from three axis vectors and a translation."""
        data = np.zeros((4, 4), dtype=np.float32)
        data[0, :3] = as_vector3(x_axis)
        data[1, :3] = as_vector3(y_axis)
        data[2, :3] = as_vector3(z_axis)
        data[3, :3] = as_vector3(translation)
        data[3, 3] = 1.0
        return cls(data)

    @classmethod
    def identity(cls) -> "Matrix":
        return cls()

    # =========================================================================
    # Transforms
    # =========================================================================

    def transform_vector(self, v: Vector3Like) -> npt.NDArray[np.float32]:
        """Transform a direction (ignores translation)."""
        x, y, z = as_vector3(v)
        return (x * self.data[0, :3] + y * self.data[1, :3] + z * self.data[2, :3]).astype(
            np.float32
        )

    def transform_point(self, p: Vector3Like) -> npt.NDArray[np.float32]:
        """Transform a position (applies translation)."""
        return (self.transform_vector(p) + self.data[3, :3]).astype(np.float32)

    def transposed(self) -> "Matrix":
        return Matrix(self.data.T.copy())

    # =========================================================================
    # Axis Accessors
    # =========================================================================

    @property
    def axis_x(self) -> npt.NDArray[np.float32]:
        return self.data[0, :3].copy()

    @property
    def axis_y(self) -> npt.NDArray[np.float32]:
        return self.data[1, :3].copy()

    @property
    def axis_z(self) -> npt.NDArray[np.float32]:
        return self.data[2, :3].copy()

    @property
    def translation(self) -> npt.NDArray[np.float32]:
        return self.data[3, :3].copy()

    # =========================================================================
    # Factories
    # =========================================================================

    @classmethod
    def create_translation(cls, t: Vector3Like) -> "Matrix":
        return cls.from_axes(UNIT_X, UNIT_Y, UNIT_Z, t)

    @classmethod
    def create_rotation_x(cls, pitch: float) -> "Matrix":
        """Rotation about the X axis; pitch in radians."""
        c, s = math.cos(pitch), math.sin(pitch)
        return cls(
            [
                [1.0, 0.0, 0.0, 0.0],
                [0.0, c, -s, 0.0],
                [0.0, s, c, 0.0],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )

    @classmethod
    def create_rotation_y(cls, yaw: float) -> "Matrix":
        """Rotation about the Y axis; yaw in radians."""
        c, s = math.cos(yaw), math.sin(yaw)
        return cls(
            [
                [c, 0.0, -s, 0.0],
                [0.0, 1.0, 0.0, 0.0],
                [s, 0.0, c, 0.0],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )

    @classmethod
    def create_rotation_z(cls, roll: float) -> "Matrix":
        """Rotation about the Z axis; roll in radians."""
        c, s = math.cos(roll), math.sin(roll)
        return cls(
            [
                [c, s, 0.0, 0.0],
                [-s, c, 0.0, 0.0],
                [0.0, 0.0, 1.0, 0.0],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )

    @classmethod
    def create_rotation(cls, pitch: float, yaw: float, roll: float) -> "Matrix":
        """Combined Euler rotation, applied X first, then Y, then Z."""
        return cls.create_rotation_x(pitch) * cls.create_rotation_y(yaw) * cls.create_rotation_z(roll)

    @classmethod
    def create_scale(cls, s: Vector3Like | float) -> "Matrix":
        if isinstance(s, int | float):
            sx = sy = sz = float(s)
        else:
            sx, sy, sz = as_vector3(s)
        return cls(
            [
                [sx, 0.0, 0.0, 0.0],
                [0.0, sy, 0.0, 0.0],
                [0.0, 0.0, sz, 0.0],
                [0.0, 0.0, 0.0, 1.0],
            ]
        )

    # =========================================================================
    # Operators
    # =========================================================================

    def __getitem__(self, index: int) -> npt.NDArray[np.float32]:
        """Return homogeneous row `index` (0-3) as a 4-vector."""
        if not 0 <= index <= 3:
            raise IndexError(f"Matrix row index {index} out of range [0, 3]")
        return self.data[index].copy()

    def __mul__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        return Matrix(self.data @ other.data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return bool(np.array_equal(self.data, other.data))

    def allclose(self, other: "Matrix", atol: float = 1e-5) -> bool:
        return bool(np.allclose(self.data, other.data, atol=atol))

    def to_list(self) -> list[list[float]]:
        return self.data.tolist()

    def __repr__(self) -> str:
        return f"Matrix({self.data.tolist()})"


# =============================================================================
# Kernel-side Transforms
# =============================================================================


@ti.func
def transform_vector(m: tm.mat4, v: vec3) -> vec3:
    """Transform a direction by a mat4 laid out as axis rows."""
    return vec3(
        v.x * m[0, 0] + v.y * m[1, 0] + v.z * m[2, 0],
        v.x * m[0, 1] + v.y * m[1, 1] + v.z * m[2, 1],
        v.x * m[0, 2] + v.y * m[1, 2] + v.z * m[2, 2],
    )


@ti.func
def transform_point(m: tm.mat4, p: vec3) -> vec3:
    """Transform a position by a mat4 laid out as axis rows."""
    return transform_vector(m, p) + vec3(m[3, 0], m[3, 1], m[3, 2])
