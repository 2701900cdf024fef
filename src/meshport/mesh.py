"""Indexed triangle mesh shared by every codec."""

from __future__ import annotations

from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np

from meshport.geom import ORIGIN, Vector3

Face = Tuple[int, int, int]


def fan_triangles(indices: Sequence[int]) -> Iterator[Face]:
    """Yield the fan triangulation of a polygon.

    An N-gon produces ``N - 2`` triangles, each containing ``indices[0]``.
    Fewer than three indices produce nothing.
    """

    for i in range(1, len(indices) - 1):
        yield (indices[0], indices[i], indices[i + 1])


class Mesh:
    """Triangle soup: a vertex list and 0-based index triples into it.

    There is no adjacency, no normals and no UVs.  Codecs populate a mesh
    through :meth:`add_vertex`, :meth:`add_face` and :meth:`add_polygon`,
    which silently refuse faces that reference a vertex that does not
    exist yet.
    """

    def __init__(self, vertices: Iterable = (), faces: Iterable[Sequence[int]] = ()):
        self.vertices: List[Vector3] = [v if isinstance(v, Vector3) else Vector3.from_seq(v)
                                        for v in vertices]
        self.faces: List[Face] = [(int(f[0]), int(f[1]), int(f[2])) for f in faces]

    def __repr__(self) -> str:
        return f"Mesh(vertices={len(self.vertices)}, faces={len(self.faces)})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, Mesh):
            return NotImplemented
        return self.vertices == other.vertices and self.faces == other.faces

    @property
    def is_empty(self) -> bool:
        return not self.vertices

    def add_vertex(self, x, y=None, z=None) -> int:
        """Append a vertex and return its index."""
        if y is None:
            v = x if isinstance(x, Vector3) else Vector3.from_seq(x)
        else:
            v = Vector3(float(x), float(y), float(z))
        self.vertices.append(v)
        return len(self.vertices) - 1

    def valid_face(self, a: int, b: int, c: int) -> bool:
        n = len(self.vertices)
        return 0 <= a < n and 0 <= b < n and 0 <= c < n

    def add_face(self, a: int, b: int, c: int) -> bool:
        """Append a face, or drop it when an index is out of range."""
        if not self.valid_face(a, b, c):
            return False
        self.faces.append((a, b, c))
        return True

    def add_polygon(self, indices: Sequence[int]) -> int:
        """Fan-triangulate ``indices`` into the mesh; return faces dropped."""
        dropped = 0
        for a, b, c in fan_triangles(indices):
            if not self.add_face(a, b, c):
                dropped += 1
        return dropped

    def bounds(self) -> Tuple[Vector3, Vector3]:
        """Axis-aligned bounding box as ``(min, max)``; origin pair if empty."""
        if not self.vertices:
            return ORIGIN, ORIGIN
        xs = [v.x for v in self.vertices]
        ys = [v.y for v in self.vertices]
        zs = [v.z for v in self.vertices]
        return (Vector3(min(xs), min(ys), min(zs)),
                Vector3(max(xs), max(ys), max(zs)))

    def center(self) -> Vector3:
        lo, hi = self.bounds()
        return (lo + hi) / 2

    def max_extent(self) -> float:
        """Largest of width, height and depth; 0 for an empty mesh."""
        lo, hi = self.bounds()
        size = hi - lo
        return max(size.x, size.y, size.z)

    def copy(self) -> "Mesh":
        return Mesh(self.vertices, self.faces)

    def as_arrays(self) -> Tuple[np.ndarray, np.ndarray]:
        """Return ``(vertices, faces)`` as ``float32 (N, 3)`` and ``int64 (M, 3)`` arrays."""
        verts = np.array([v.as_tuple() for v in self.vertices], dtype=np.float32).reshape(-1, 3)
        faces = np.array(self.faces, dtype=np.int64).reshape(-1, 3)
        return verts, faces


def cube_mesh(size: float = 1.0) -> Mesh:
    """Axis-aligned cube centred on the origin: 8 vertices, 12 faces."""
    half = size / 2.0
    verts = [
        (-half, -half, -half),
        (half, -half, -half),
        (half, half, -half),
        (-half, half, -half),
        (-half, -half, half),
        (half, -half, half),
        (half, half, half),
        (-half, half, half),
    ]
    faces = [
        (0, 2, 1), (0, 3, 2),
        (4, 5, 6), (4, 6, 7),
        (0, 1, 5), (0, 5, 4),
        (1, 2, 6), (1, 6, 5),
        (2, 3, 7), (2, 7, 6),
        (3, 0, 4), (3, 4, 7),
    ]
    return Mesh(verts, faces)


def check_mesh_argument(mesh, path) -> None:
    """Validate writer arguments; writers never fail on mesh content."""
    if mesh is None:
        raise ValueError("mesh must not be None")
    if not isinstance(mesh, Mesh):
        raise TypeError(f"expected a Mesh, got {type(mesh).__name__}")
    if path is None or (isinstance(path, str) and not path):
        raise ValueError("file path cannot be None or empty")


__all__ = ['Face', 'Mesh', 'fan_triangles', 'cube_mesh', 'check_mesh_argument']
