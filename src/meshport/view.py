"""
Wireframe projection of meshes onto a 2D viewport.

The mesh is centred on the origin, rotated about X, Y and Z, scaled so
that its largest dimension fills a fixed fraction of the smaller viewport
side, and flipped in Y so that +Y points up on a screen whose origin is
the top-left corner.  Every face contributes its three edges, clipped to
the viewport.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

import numpy as np

from meshport import config
from meshport.clip import clip_line
from meshport.mesh import Mesh
from meshport.xform import Matrix, RotationX, RotationY, RotationZ, Scale, Translation

logger = logging.getLogger(__name__)

Segment = Tuple[Tuple[float, float], Tuple[float, float]]


def fit_transform(mesh: Mesh, width: float, height: float,
                  rx: float = 0.0, ry: float = 0.0, rz: float = 0.0,
                  fill: Optional[float] = None) -> Matrix:
    """Matrix taking mesh coordinates to centred, scaled view coordinates.

    Rotation angles are in radians.  The result is still centred on the
    origin; :func:`project_wireframe` adds the viewport offset.
    """
    if fill is None:
        fill = float(config.get('view.fill', 0.8))
    extent = mesh.max_extent()
    if extent == 0:
        extent = 1.0
    s = min(width, height) * fill / extent

    rotation = RotationX(rx) * RotationY(ry) * RotationZ(rz)
    return Scale(s, -s, s) * rotation * Translation(mesh.center(), inverse=True)


def project_wireframe(mesh: Mesh, width: float, height: float,
                      rx: float = 0.0, ry: float = 0.0, rz: float = 0.0,
                      fill: Optional[float] = None) -> List[Segment]:
    """Project the edges of every face into a ``width`` x ``height`` viewport.

    Returns the visible part of each edge in viewport coordinates.
    Faces with out-of-range indices are skipped.
    """
    if mesh.is_empty or not mesh.faces:
        return []

    xf = fit_transform(mesh, width, height, rx, ry, rz, fill)
    m = np.array([xf.getrow(i) for i in range(4)], dtype=np.float64)

    verts, faces = mesh.as_arrays()
    homogeneous = np.hstack([verts.astype(np.float64), np.ones((len(verts), 1))])
    projected = homogeneous @ m.T
    xy = projected[:, :2] + np.array([width / 2.0, height / 2.0])

    n = len(verts)
    valid = np.all((faces >= 0) & (faces < n), axis=1)
    if not valid.all():
        logger.debug("view: skipped %d faces with bad indices", int((~valid).sum()))

    rect = (0.0, 0.0, float(width), float(height))
    segments: List[Segment] = []
    for a, b, c in faces[valid]:
        for i, j in ((a, b), (b, c), (c, a)):
            clipped = clip_line(xy[i], xy[j], rect)
            if clipped is not None:
                segments.append(clipped)
    return segments


__all__ = ['fit_transform', 'project_wireframe']
