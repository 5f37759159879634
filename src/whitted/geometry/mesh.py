"""Triangle mesh description and host-side mesh utilities.

A TriangleMesh is an indexed triangle list: a vertex buffer of positions,
an index buffer of vertex triples and one precomputed normal per triangle.
It lives on the Python side; SceneManager.add_triangle_mesh() uploads it
into the scene's Taichi fields, where src.whitted.scene.intersection tests
it triangle by triangle.

Face normals follow the winding order: normalize((p1 - p0) x (p2 - p0)).

Example:
    >>> from src.whitted.core.matrix import Matrix
    >>> from src.whitted.geometry.mesh import TriangleMesh
    >>> quad = TriangleMesh.from_arrays(
    ...     positions=[(0, 0, 0), (1, 0, 0), (1, 1, 0), (0, 1, 0)],
    ...     indices=[(0, 1, 2), (0, 2, 3)],
    ...     material_id=0,
    ... )
    >>> moved = quad.transformed(Matrix.create_translation((0, 0, 5)))
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from src.whitted.core.matrix import Matrix

# Triangles whose edge cross product is shorter than this are degenerate
DEGENERATE_AREA_EPSILON = 1e-12


def compute_face_normals(
    positions: npt.NDArray[np.float32],
    indices: npt.NDArray[np.int32],
) -> npt.NDArray[np.float32]:
    """Compute one unit normal per triangle from its edge cross product.

    Args:
        positions: Vertex positions, shape (N, 3).
        indices: Vertex indices per triangle, shape (M, 3).

    Returns:
        Array of shape (M, 3) with unit normals.

    Raises:
        ValueError: If any triangle has zero area.
    """
    p0 = positions[indices[:, 0]]
    p1 = positions[indices[:, 1]]
    p2 = positions[indices[:, 2]]
    normals = np.cross(p1 - p0, p2 - p0)
    lengths = np.linalg.norm(normals, axis=1)

    degenerate = np.flatnonzero(lengths < DEGENERATE_AREA_EPSILON)
    if degenerate.size > 0:
        raise ValueError(f"Degenerate (zero-area) triangles at indices {degenerate.tolist()}")

    return (normals / lengths[:, np.newaxis]).astype(np.float32)


@dataclass
class TriangleMesh:
    """An indexed triangle mesh with per-triangle normals.

    Attributes:
        positions: Vertex buffer, float32 array of shape (N, 3).
        indices: Index buffer, int32 array of shape (M, 3).
        normals: Face normals, float32 array of shape (M, 3).
        material_id: The unified material ID shared by all triangles.
    """

    positions: npt.NDArray[np.float32]
    indices: npt.NDArray[np.int32]
    normals: npt.NDArray[np.float32]
    material_id: int

    @classmethod
    def from_arrays(
        cls,
        positions: Sequence[Sequence[float]] | npt.NDArray[np.float32],
        indices: Sequence[Sequence[int]] | npt.NDArray[np.int32],
        material_id: int,
    ) -> TriangleMesh:
        """Build a mesh and compute its face normals.

        Raises:
            ValueError: If the buffers are malformed, an index is out of
                range, or a triangle is degenerate.
        """
        pos = np.asarray(positions, dtype=np.float32).reshape(-1, 3)
        idx = np.asarray(indices, dtype=np.int32)
        if idx.size % 3 != 0:
            raise ValueError(f"Index buffer length {idx.size} is not a multiple of 3")
        idx = idx.reshape(-1, 3)

        if idx.shape[0] == 0:
            raise ValueError("A mesh needs at least one triangle")
        if idx.min() < 0 or idx.max() >= pos.shape[0]:
            raise ValueError(
                f"Vertex index out of range [0, {pos.shape[0]}): "
                f"min={int(idx.min())}, max={int(idx.max())}"
            )

        return cls(
            positions=pos,
            indices=idx,
            normals=compute_face_normals(pos, idx),
            material_id=material_id,
        )

    @property
    def vertex_count(self) -> int:
        return int(self.positions.shape[0])

    @property
    def triangle_count(self) -> int:
        return int(self.indices.shape[0])

    def transformed(self, matrix: Matrix) -> TriangleMesh:
        """Return a copy with every vertex transformed by matrix.

        Normals are recomputed from the transformed positions so that
        non-uniform scales keep them perpendicular to the faces.
        """
        homogeneous = np.hstack(
            [self.positions, np.ones((self.vertex_count, 1), dtype=np.float32)]
        )
        moved = (homogeneous @ matrix.data)[:, :3].astype(np.float32)
        return TriangleMesh(
            positions=moved,
            indices=self.indices.copy(),
            normals=compute_face_normals(moved, self.indices),
            material_id=self.material_id,
        )

    def translated(self, offset: Sequence[float]) -> TriangleMesh:
        return self.transformed(Matrix.create_translation(offset))

    def rotated(self, pitch: float = 0.0, yaw: float = 0.0, roll: float = 0.0) -> TriangleMesh:
        """Rotate about the origin; angles in radians, applied X, Y, Z."""
        return self.transformed(Matrix.create_rotation(pitch, yaw, roll))

    def scaled(self, factor: Sequence[float] | float) -> TriangleMesh:
        return self.transformed(Matrix.create_scale(factor))
