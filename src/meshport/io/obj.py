"""Wavefront OBJ import and export."""

from __future__ import annotations

import logging
from typing import List, Optional

from meshport import config
from meshport.io._util import PathOrFile, decode_text, open_text, read_bytes
from meshport.mesh import Mesh, check_mesh_argument

logger = logging.getLogger(__name__)


def _resolve_index(token: str, vertex_count: int) -> Optional[int]:
    """Turn an OBJ face reference (``7``, ``-1``, ``7/2/3``) into a 0-based index."""
    head = token.split('/')[0]
    try:
        index = int(head)
    except ValueError:
        return None
    return index - 1 if index > 0 else vertex_count + index


def parse_obj(text: str) -> Mesh:
    """Parse OBJ text into a :class:`Mesh`.

    Only ``v`` and ``f`` records are interpreted.  Faces with more than
    three references are fan-triangulated; relative (negative) references
    count back from the vertices read so far.
    """

    mesh = Mesh()
    skipped = 0
    dropped = 0

    for line in text.splitlines():
        trimmed = line.strip()
        if not trimmed or trimmed.startswith('#'):
            continue

        parts = trimmed.split()
        keyword = parts[0]

        if keyword == 'v' and len(parts) >= 4:
            try:
                mesh.add_vertex(float(parts[1]), float(parts[2]), float(parts[3]))
            except ValueError:
                skipped += 1
        elif keyword == 'f' and len(parts) >= 4:
            indices: List[int] = []
            for token in parts[1:]:
                index = _resolve_index(token, len(mesh.vertices))
                if index is not None:
                    indices.append(index)
            if len(indices) >= 3:
                dropped += mesh.add_polygon(indices)

    if skipped or dropped:
        logger.debug("OBJ: skipped %d malformed vertex lines, dropped %d faces",
                     skipped, dropped)
    return mesh


def read_obj(path_or_file: PathOrFile) -> Mesh:
    """Read an OBJ file from a path or an open stream."""
    mesh = parse_obj(decode_text(read_bytes(path_or_file)))
    logger.info("read OBJ mesh: %d vertices, %d faces", len(mesh.vertices), len(mesh.faces))
    return mesh


def write_obj(path_or_file: PathOrFile, mesh: Mesh, name: Optional[str] = None) -> None:
    """Write ``mesh`` as OBJ with 1-based indices.

    When ``name`` is given an ``o`` record precedes the vertex data.
    """
    check_mesh_argument(mesh, path_or_file)
    exporter = config.get('obj.exporter', 'meshport')

    with open_text(path_or_file) as stream:
        print("# Wavefront OBJ file", file=stream)
        print(f"# Exported from {exporter}", file=stream)
        print(f"# Vertices: {len(mesh.vertices)}", file=stream)
        print(f"# Faces: {len(mesh.faces)}", file=stream)
        print(file=stream)

        if name:
            print(f"o {name}", file=stream)
            print(file=stream)

        for v in mesh.vertices:
            print(f"v {v.x:.6f} {v.y:.6f} {v.z:.6f}", file=stream)
        print(file=stream)

        for a, b, c in mesh.faces:
            print(f"f {a + 1} {b + 1} {c + 1}", file=stream)

    logger.info("wrote OBJ mesh: %d vertices, %d faces", len(mesh.vertices), len(mesh.faces))


__all__ = ['parse_obj', 'read_obj', 'write_obj']
