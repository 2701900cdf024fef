"""ASCII PLY import and export.

Only the ``ascii 1.0`` encoding is handled; binary PLY files are rejected
with :class:`~meshport.errors.UnsupportedFormatError`.  Vertex lines
contribute their first three values, whatever other properties the
header declares.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from meshport.errors import MalformedContainerError, UnsupportedFormatError
from meshport.io._util import PathOrFile, decode_text, describe, open_text, read_bytes
from meshport.mesh import Mesh, check_mesh_argument

logger = logging.getLogger(__name__)


def _int_or_none(token: str) -> Optional[int]:
    try:
        return int(token)
    except ValueError:
        return None


def parse_ply(text: str, source: Optional[str] = None) -> Mesh:
    lines = text.splitlines()
    if not lines or lines[0].strip() != 'ply':
        raise MalformedContainerError("missing 'ply' magic line", path=source)

    vertex_count = 0
    face_count = 0
    properties: List[str] = []
    body_start = len(lines)

    for lineno, line in enumerate(lines[1:], start=1):
        parts = line.split()
        if not parts:
            continue

        keyword = parts[0]
        if keyword == 'format':
            if len(parts) > 1 and parts[1] != 'ascii':
                raise UnsupportedFormatError(
                    f"binary PLY ({parts[1]}) is not supported; use ASCII PLY", path=source)
        elif keyword == 'element' and len(parts) >= 3:
            count = _int_or_none(parts[2])
            if count is None:
                raise MalformedContainerError(f"bad element count: {line.strip()}", path=source)
            if parts[1] == 'vertex':
                vertex_count = count
            elif parts[1] == 'face':
                face_count = count
        elif keyword == 'property' and len(parts) >= 3:
            properties.append(parts[-1])
        elif keyword == 'end_header':
            body_start = lineno + 1
            break

    logger.debug("PLY header: %d vertices, %d faces, properties %s",
                 vertex_count, face_count, properties)

    mesh = Mesh()
    body = iter(lines[body_start:])
    skipped = 0

    for _ in range(vertex_count):
        line = next(body, None)
        if line is None:
            break
        parts = line.split()
        if len(parts) < 3:
            skipped += 1
            continue
        try:
            mesh.add_vertex(float(parts[0]), float(parts[1]), float(parts[2]))
        except ValueError:
            skipped += 1

    dropped = 0
    for _ in range(face_count):
        line = next(body, None)
        if line is None:
            break
        parts = line.split()
        if len(parts) < 4:
            skipped += 1
            continue
        count = _int_or_none(parts[0])
        if count is None or count < 3 or len(parts) < count + 1:
            skipped += 1
            continue
        indices = [_int_or_none(p) for p in parts[1:count + 1]]
        if None in indices:
            skipped += 1
            continue
        dropped += mesh.add_polygon(indices)

    if skipped or dropped:
        logger.debug("PLY: skipped %d malformed lines, dropped %d faces", skipped, dropped)
    return mesh


def read_ply(path_or_file: PathOrFile) -> Mesh:
    """Read an ASCII PLY file from a path or an open stream."""
    mesh = parse_ply(decode_text(read_bytes(path_or_file)), describe(path_or_file))
    logger.info("read PLY mesh: %d vertices, %d faces", len(mesh.vertices), len(mesh.faces))
    return mesh


def write_ply(path_or_file: PathOrFile, mesh: Mesh) -> None:
    """Write ``mesh`` as ASCII PLY."""
    check_mesh_argument(mesh, path_or_file)

    with open_text(path_or_file) as stream:
        print("ply", file=stream)
        print("format ascii 1.0", file=stream)
        print("comment exported by meshport", file=stream)
        print(f"element vertex {len(mesh.vertices)}", file=stream)
        print("property float x", file=stream)
        print("property float y", file=stream)
        print("property float z", file=stream)
        print(f"element face {len(mesh.faces)}", file=stream)
        print("property list uchar int vertex_indices", file=stream)
        print("end_header", file=stream)
        for v in mesh.vertices:
            print(f"{v.x:.6f} {v.y:.6f} {v.z:.6f}", file=stream)
        for a, b, c in mesh.faces:
            print(f"3 {a} {b} {c}", file=stream)

    logger.info("wrote PLY mesh: %d vertices, %d faces", len(mesh.vertices), len(mesh.faces))


__all__ = ['parse_ply', 'read_ply', 'write_ply']
