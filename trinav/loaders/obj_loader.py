# trinav/loaders/obj_loader.py
"""Pure Python OBJ loader for navigation meshes.

Only positions and faces are read. Vertex indexing is kept as in the file,
so triangles that share a vertex in the OBJ share it in the result.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np


class OBJMeshData:
    def __init__(self, name, vertices, indices):
        self.name = name
        self.vertices = vertices  # np.ndarray (N, 3) float64
        self.indices = indices    # np.ndarray (3*M,) int64, flat triangle list

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3


def _resolve_index(token: str, vertex_count: int, line_no: int) -> int:
    """OBJ index (1-based, negative = relative to the end) -> 0-based."""
    try:
        idx = int(token.split("/")[0])
    except ValueError as e:
        raise ValueError(f"line {line_no}: bad face vertex {token!r}") from e

    if idx > 0:
        resolved = idx - 1
    elif idx < 0:
        resolved = vertex_count + idx
    else:
        raise ValueError(f"line {line_no}: face index 0 is not valid in OBJ")

    if not 0 <= resolved < vertex_count:
        raise ValueError(
            f"line {line_no}: face index {idx} refers to a missing vertex "
            f"({vertex_count} defined so far)"
        )
    return resolved


def load_obj_file(path) -> OBJMeshData:
    """Load positions and triangulated faces from an OBJ file."""
    path = Path(path)

    positions = []
    indices = []

    with open(path, "r", encoding="utf-8", errors="ignore") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            parts = line.split()
            cmd = parts[0]

            if cmd == "v" and len(parts) >= 4:
                positions.append((float(parts[1]), float(parts[2]), float(parts[3])))

            elif cmd == "f":
                if len(parts) < 4:
                    raise ValueError(f"line {line_no}: face needs at least 3 vertices")
                face = [_resolve_index(tok, len(positions), line_no) for tok in parts[1:]]

                # Fan triangulation (convex polygons)
                for i in range(1, len(face) - 1):
                    indices.extend((face[0], face[i], face[i + 1]))

    vertices = np.array(positions, dtype=np.float64).reshape(-1, 3)
    return OBJMeshData(
        name=path.stem,
        vertices=vertices,
        indices=np.array(indices, dtype=np.int64),
    )
