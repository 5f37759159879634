"""Minimal Wavefront OBJ loader producing TriangleMesh objects.

Only geometry is read:

    v x y z           vertex position (an optional w is ignored)
    f a b c ...       face; polygons are fan-triangulated (a b c, a c d, ...)

Face entries may use the v/vt/vn forms; only the position index is kept.
Negative indices count back from the most recent vertex. Every other
record (vt, vn, o, g, s, usemtl, mtllib, comments) is skipped.

Example:
    >>> from src.whitted.scene.mesh_loader import load_obj
    >>> mesh = load_obj("assets/bunny.obj", material_id=0)
    >>> scene.add_triangle_mesh(mesh.translated((0, 0, 5)))
"""

import logging
from collections.abc import Iterable
from pathlib import Path

from src.whitted.geometry.mesh import TriangleMesh

logger = logging.getLogger(__name__)


def _parse_index(token: str, vertex_count: int, line_number: int) -> int:
    raw = token.split("/")[0]
    try:
        index = int(raw)
    except ValueError:
        raise ValueError(f"Line {line_number}: invalid face index {token!r}") from None

    if index > 0:
        resolved = index - 1
    elif index < 0:
        resolved = vertex_count + index
    else:
        raise ValueError(f"Line {line_number}: OBJ indices are 1-based, got 0")

    if not 0 <= resolved < vertex_count:
        raise ValueError(
            f"Line {line_number}: face index {index} refers to a missing vertex "
            f"({vertex_count} defined so far)"
        )
    return resolved


def parse_obj(
    lines: Iterable[str],
) -> tuple[list[tuple[float, float, float]], list[tuple[int, int, int]]]:
    """Parse OBJ text into vertex positions and zero-based triangle indices.

    Returns:
        Tuple of (positions, triangles).

    Raises:
        ValueError: On malformed vertex or face records.
    """
    positions: list[tuple[float, float, float]] = []
    triangles: list[tuple[int, int, int]] = []

    for line_number, line in enumerate(lines, start=1):
        parts = line.split("#", 1)[0].split()
        if not parts:
            continue

        keyword, args = parts[0], parts[1:]
        if keyword == "v":
            if len(args) < 3:
                raise ValueError(f"Line {line_number}: vertex needs 3 coordinates")
            try:
                positions.append((float(args[0]), float(args[1]), float(args[2])))
            except ValueError:
                raise ValueError(f"Line {line_number}: invalid vertex {args}") from None
        elif keyword == "f":
            if len(args) < 3:
                raise ValueError(f"Line {line_number}: face needs at least 3 vertices")
            indices = [_parse_index(token, len(positions), line_number) for token in args]
            for i in range(1, len(indices) - 1):
                triangles.append((indices[0], indices[i], indices[i + 1]))

    return positions, triangles


def load_obj(filepath: str | Path, material_id: int) -> TriangleMesh:
    """Load an OBJ file as a TriangleMesh with computed face normals.

    Raises:
        ValueError: If the file is malformed, has no faces, or contains
            degenerate triangles.
    """
    path = Path(filepath)
    with path.open(encoding="utf-8") as handle:
        positions, triangles = parse_obj(handle)

    if not triangles:
        raise ValueError(f"{path}: no faces found")

    mesh = TriangleMesh.from_arrays(positions, triangles, material_id)
    logger.debug(
        "Loaded %s: %d vertices, %d triangles", path, mesh.vertex_count, mesh.triangle_count
    )
    return mesh
