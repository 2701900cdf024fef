"""Geometry extraction from ASCII FBX files, and a minimal ASCII writer.

The reader does not parse the FBX node grammar.  It scans for geometry
blocks and, inside each one, for the two arrays that describe a mesh::

    Geometry: 1000000, "Geometry::", "Mesh" {
        Vertices: *24 {
            a: -1.0,-1.0,-1.0,1.0,-1.0,-1.0, ...
        }
        PolygonVertexIndex: *36 {
            a: 0,2,-2,0,3,-3, ...
        }
    }

The last index of every polygon is stored as ``-(index + 1)``.  Binary
FBX files are recognised by their signature and rejected.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

from meshport.errors import EmptyResultError, UnsupportedFormatError
from meshport.geom import Vector3
from meshport.io._util import PathOrFile, decode_text, describe, open_text, read_bytes
from meshport.mesh import Mesh, check_mesh_argument, cube_mesh, fan_triangles

logger = logging.getLogger(__name__)

BINARY_SIGNATURE = b'Kaydara FBX Binary'

_BLOCK_PREFIX = 'Geometry:'
_MESH_MARKER = 'Type: "Mesh"'
_VERTICES = 'Vertices:'
_POLYGON_INDEX = 'PolygonVertexIndex:'


def is_binary_fbx(data: bytes) -> bool:
    return BINARY_SIGNATURE in data[:18]


def decode_polygon_indices(values: Iterable[int]) -> List[List[int]]:
    """Split a ``PolygonVertexIndex`` stream into closed polygons.

    A negative value ``v`` ends the current polygon with index ``-v - 1``.
    Trailing indices that are never closed are discarded.
    """
    polygons: List[List[int]] = []
    current: List[int] = []
    for value in values:
        if value < 0:
            current.append(-value - 1)
            polygons.append(current)
            current = []
        else:
            current.append(value)
    return polygons


def _array_data(trimmed: str) -> Optional[str]:
    """Return the value text of an ``a:`` or ``*N:`` array line, else None."""
    if trimmed.startswith('a:'):
        return trimmed[2:]
    if trimmed.startswith('*'):
        colon = trimmed.find(':')
        return trimmed[colon + 1:] if colon > 0 else trimmed
    return None


def _read_array(lines: Sequence[str], start: int, convert) -> Tuple[List, int]:
    """Collect comma-separated values from array lines beginning at ``start``.

    Returns the values and the index of the first line that is not part of
    the array.  Tokens ``convert`` cannot parse are skipped, and so are
    tokens with ``_`` digit grouping, which Python would otherwise accept.
    """
    values = []
    i = start
    while i < len(lines):
        trimmed = lines[i].strip()
        if trimmed.startswith('}'):
            break
        data = _array_data(trimmed)
        if data is None:
            break
        for part in data.split(','):
            token = part.strip()
            if not token or '_' in token:
                continue
            try:
                values.append(convert(token))
            except ValueError:
                continue
        i += 1
    return values, i


def _read_geometry_block(lines: Sequence[str], start: int, mesh: Mesh) -> int:
    """Extract one geometry block starting at ``lines[start]``.

    Returns the index of the line after the block's closing brace.
    """
    vertex_offset = len(mesh.vertices)
    coords: List[float] = []
    indices: List[int] = []

    depth = 0
    in_block = False
    i = start
    while i < len(lines):
        trimmed = lines[i].strip()

        if '{' in trimmed:
            depth += 1
            in_block = True

        if trimmed.startswith(_VERTICES):
            values, i = _read_array(lines, i + 1, float)
            coords.extend(values)
            continue

        if trimmed.startswith(_POLYGON_INDEX):
            values, i = _read_array(lines, i + 1, int)
            indices.extend(values)
            continue

        if '}' in trimmed:
            depth -= 1
            if in_block and depth == 0:
                break
        i += 1

    for j in range(0, len(coords) - 2, 3):
        mesh.vertices.append(Vector3(coords[j], coords[j + 1], coords[j + 2]))

    dropped = 0
    for polygon in decode_polygon_indices(indices):
        for a, b, c in fan_triangles([index + vertex_offset for index in polygon]):
            if not mesh.add_face(a, b, c):
                dropped += 1
    if dropped:
        logger.debug("FBX: dropped %d out-of-range triangles", dropped)

    return i + 1


def parse_fbx(text: str, source: Optional[str] = None) -> Mesh:
    """Scrape every geometry block of ASCII FBX ``text`` into one mesh."""
    mesh = Mesh()
    lines = text.split('\n')
    blocks = 0
    i = 0
    while i < len(lines):
        trimmed = lines[i].strip()
        if trimmed.startswith(_BLOCK_PREFIX) or _MESH_MARKER in trimmed:
            i = _read_geometry_block(lines, i, mesh)
            blocks += 1
        else:
            i += 1

    if not mesh.vertices:
        raise EmptyResultError(
            "no geometry data found; the file may be empty or use an unsupported layout",
            path=source)
    logger.debug("FBX: %d geometry blocks", blocks)
    return mesh


def read_fbx(path_or_file: PathOrFile) -> Mesh:
    """Read the mesh geometry of an ASCII FBX file."""
    data = read_bytes(path_or_file)
    source = describe(path_or_file)
    if is_binary_fbx(data):
        raise UnsupportedFormatError(
            "binary FBX is not supported; save as ASCII FBX or convert to OBJ/STL", path=source)
    mesh = parse_fbx(decode_text(data), source)
    logger.info("read FBX mesh: %d vertices, %d faces", len(mesh.vertices), len(mesh.faces))
    return mesh


# ---------------------------------------------------------------------------
# FBX Export
# ---------------------------------------------------------------------------


def write_fbx(path_or_file: PathOrFile, mesh: Mesh) -> None:
    """Write ``mesh`` as a minimal FBX 7.4 ASCII file with one geometry node."""
    check_mesh_argument(mesh, path_or_file)

    coords = ','.join(f"{v.x:.6f},{v.y:.6f},{v.z:.6f}" for v in mesh.vertices)
    polys = ','.join(f"{a},{b},{-(c + 1)}" for a, b, c in mesh.faces)

    with open_text(path_or_file) as stream:
        print("; FBX 7.4.0 project file", file=stream)
        print("; Created by meshport", file=stream)
        print(file=stream)
        print("FBXHeaderExtension:  {", file=stream)
        print("\tFBXHeaderVersion: 1003", file=stream)
        print("\tFBXVersion: 7400", file=stream)
        print("}", file=stream)
        print(file=stream)
        print("Definitions:  {", file=stream)
        print("\tVersion: 100", file=stream)
        print("\tCount: 1", file=stream)
        print("\tObjectType: \"Geometry\" {", file=stream)
        print("\t\tCount: 1", file=stream)
        print("\t}", file=stream)
        print("}", file=stream)
        print(file=stream)
        print("Objects:  {", file=stream)
        print("\tGeometry: 1000000, \"Geometry::\", \"Mesh\" {", file=stream)
        print(f"\t\tVertices: *{len(mesh.vertices) * 3} {{", file=stream)
        print(f"\t\t\ta: {coords}", file=stream)
        print("\t\t}", file=stream)
        print(f"\t\tPolygonVertexIndex: *{len(mesh.faces) * 3} {{", file=stream)
        print(f"\t\t\ta: {polys}", file=stream)
        print("\t\t}", file=stream)
        print("\t\tGeometryVersion: 124", file=stream)
        print("\t}", file=stream)
        print("}", file=stream)

    logger.info("wrote FBX mesh: %d vertices, %d faces", len(mesh.vertices), len(mesh.faces))


def write_cube(path_or_file: PathOrFile, size: float = 1.0) -> None:
    """Write the cube fixture (8 vertices, 12 faces) as ASCII FBX."""
    write_fbx(path_or_file, cube_mesh(size))


__all__ = [
    'BINARY_SIGNATURE', 'is_binary_fbx', 'decode_polygon_indices',
    'parse_fbx', 'read_fbx', 'write_fbx', 'write_cube',
]
