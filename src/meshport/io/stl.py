"""STL import and export for meshport meshes."""

from __future__ import annotations

import logging
import struct
from typing import Iterable, Iterator, List, Optional, Tuple

from meshport import config
from meshport.errors import MalformedContainerError
from meshport.geom import Vector3
from meshport.io._util import PathOrFile, decode_text, describe, open_binary, open_text, read_bytes
from meshport.mesh import Mesh, check_mesh_argument

logger = logging.getLogger(__name__)

_HEADER_SIZE = 80
_STRUCT_COUNT = struct.Struct('<I')
_STRUCT_TRIANGLE = struct.Struct('<12fH')

Triangle = Tuple[Vector3, Vector3, Vector3, Vector3]


def _triangles(mesh: Mesh) -> Iterator[Triangle]:
    """Yield ``(normal, v0, v1, v2)``; degenerate faces get a zero normal."""
    verts = mesh.vertices
    for a, b, c in mesh.faces:
        v0, v1, v2 = verts[a], verts[b], verts[c]
        normal = (v1 - v0).cross(v2 - v0).normalize()
        yield normal, v0, v1, v2


def write_stl(path_or_file: PathOrFile, mesh: Mesh, *, binary: bool = True,
              name: Optional[str] = None) -> None:
    """Write ``mesh`` to STL.

    ``path_or_file`` can be a filesystem path or an open binary/text stream.
    """
    check_mesh_argument(mesh, path_or_file)
    if name is None:
        name = config.get('stl.header_name', 'meshport')

    if binary:
        _write_binary(_triangles(mesh), len(mesh.faces), path_or_file, name)
    else:
        _write_ascii(_triangles(mesh), path_or_file, name)
    logger.info("wrote %s STL: %d triangles", 'binary' if binary else 'ASCII', len(mesh.faces))


def _write_binary(triangles: Iterable[Triangle], count: int, path_or_file, name: str) -> None:
    with open_binary(path_or_file) as stream:
        header = (name[:_HEADER_SIZE]).encode('ascii', errors='replace')
        header = header.ljust(_HEADER_SIZE, b' ')
        stream.write(header)
        stream.write(_STRUCT_COUNT.pack(count))

        for normal, v0, v1, v2 in triangles:
            stream.write(_STRUCT_TRIANGLE.pack(*normal, *v0, *v1, *v2, 0))


def _write_ascii(triangles: Iterable[Triangle], path_or_file, name: str) -> None:
    with open_text(path_or_file) as stream:
        print(f"solid {name}", file=stream)
        for n, v0, v1, v2 in triangles:
            print(f"  facet normal {n.x:.6e} {n.y:.6e} {n.z:.6e}", file=stream)
            print("    outer loop", file=stream)
            print(f"      vertex {v0.x:.6e} {v0.y:.6e} {v0.z:.6e}", file=stream)
            print(f"      vertex {v1.x:.6e} {v1.y:.6e} {v1.z:.6e}", file=stream)
            print(f"      vertex {v2.x:.6e} {v2.y:.6e} {v2.z:.6e}", file=stream)
            print("    endloop", file=stream)
            print("  endfacet", file=stream)
        print(f"endsolid {name}", file=stream)


# ---------------------------------------------------------------------------
# STL Import
# ---------------------------------------------------------------------------


def is_ascii_stl(data: bytes) -> bool:
    """Return True when ``data`` should be parsed as ASCII STL.

    A leading ``solid`` alone is not enough: binary files often carry it
    in their header, so the text must also mention ``vertex`` and ``facet``.
    """
    if data[:5].lower() != b'solid':
        return False
    return b'vertex' in data and b'facet' in data


def _parse_ascii_stl(text: str) -> Mesh:
    mesh = Mesh()
    current: List[Vector3] = []
    discarded = 0

    for line in text.splitlines():
        parts = line.split()
        if not parts:
            continue

        if parts[0] == 'vertex' and len(parts) >= 4:
            try:
                current.append(Vector3(float(parts[1]), float(parts[2]), float(parts[3])))
            except ValueError:
                continue
        elif parts[0] == 'endfacet':
            if len(current) == 3:
                base = len(mesh.vertices)
                mesh.vertices.extend(current)
                mesh.add_face(base, base + 1, base + 2)
            else:
                discarded += 1
            current = []

    if discarded:
        logger.debug("STL: discarded %d facets without exactly 3 vertices", discarded)
    return mesh


def _parse_binary_stl(data: bytes, source=None) -> Mesh:
    if len(data) < _HEADER_SIZE + _STRUCT_COUNT.size:
        raise MalformedContainerError("binary STL too small for header and triangle count",
                                      path=source)

    (count,) = _STRUCT_COUNT.unpack_from(data, _HEADER_SIZE)
    mesh = Mesh()
    offset = _HEADER_SIZE + _STRUCT_COUNT.size

    for _ in range(count):
        if offset + _STRUCT_TRIANGLE.size > len(data):
            logger.debug("STL: truncated after %d of %d triangles", len(mesh.faces), count)
            break
        values = _STRUCT_TRIANGLE.unpack_from(data, offset)
        base = len(mesh.vertices)
        mesh.vertices.append(Vector3(values[3], values[4], values[5]))
        mesh.vertices.append(Vector3(values[6], values[7], values[8]))
        mesh.vertices.append(Vector3(values[9], values[10], values[11]))
        mesh.add_face(base, base + 1, base + 2)
        offset += _STRUCT_TRIANGLE.size

    return mesh


def read_stl(path_or_file: PathOrFile) -> Mesh:
    """Read an ASCII or binary STL file.

    Each triangle contributes three new vertices; coincident vertices are
    not merged.

    Examples
    --------
    >>> from meshport.io.stl import read_stl, write_stl
    >>> mesh = read_stl('model.stl')
    >>> write_stl('copy.stl', mesh)
    """
    data = read_bytes(path_or_file)

    if is_ascii_stl(data):
        mesh = _parse_ascii_stl(decode_text(data))
        kind = 'ASCII'
    else:
        mesh = _parse_binary_stl(data, describe(path_or_file))
        kind = 'binary'

    logger.info("read %s STL: %d vertices, %d faces", kind, len(mesh.vertices), len(mesh.faces))
    return mesh


__all__ = ['write_stl', 'read_stl', 'is_ascii_stl']
