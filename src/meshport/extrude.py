"""
Outline-to-solid extrusion.

Each outline is swept from ``z = 0`` to ``z = depth``.  Only the side
walls are generated; the front and back faces are left open.  Outlines
are used as given, so a closed outline must repeat its first point at the
end to get the closing wall.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from meshport.mesh import Mesh

logger = logging.getLogger(__name__)


def extrude_outlines(paths: Iterable[Sequence[Sequence[float]]], depth: float) -> Mesh:
    """Sweep 2D outline paths along +Z into a wall mesh.

    For every path of ``n >= 3`` points the mesh gains ``n`` front
    vertices followed by ``n`` back vertices and ``2 * (n - 1)`` faces,
    two per consecutive point pair.  Shorter paths are skipped.
    """
    mesh = Mesh()
    skipped = 0
    depth = float(depth)

    for path in paths:
        n = len(path)
        if n < 3:
            skipped += 1
            continue

        front = len(mesh.vertices)
        for x, y in ((p[0], p[1]) for p in path):
            mesh.add_vertex(x, y, 0.0)
        back = len(mesh.vertices)
        for x, y in ((p[0], p[1]) for p in path):
            mesh.add_vertex(x, y, depth)

        for i in range(n - 1):
            f0, f1 = front + i, front + i + 1
            b0, b1 = back + i, back + i + 1
            mesh.add_face(f0, b0, f1)
            mesh.add_face(f1, b0, b1)

    if skipped:
        logger.debug("extrude: skipped %d paths with fewer than 3 points", skipped)
    return mesh


__all__ = ['extrude_outlines']
