"""LightWave LWO2 object import and export.

LWO2 is an IFF container: everything is big-endian and every chunk
payload is padded to an even length.  The file is a single ``FORM``
chunk whose payload begins with the ``LWO2`` format id followed by a flat
sequence of chunks.  Geometry lives in three of them:

``PNTS``
    float32 ``x y z`` triples.
``POLS``
    a 4-byte polygon type, then for each polygon a vertex count followed
    by that many point indices, all in the variable-width ``VX`` encoding.
``TAGS``
    null-terminated, even-padded surface names.

Indices below ``0xFF00`` take two bytes.  Larger ones take four bytes
with the first byte set to ``0xFF``.
"""

from __future__ import annotations

import io
import logging
import struct
from typing import List, Optional, Sequence, Tuple

from meshport import config
from meshport.errors import MalformedContainerError
from meshport.geom import Vector3
from meshport.io._util import PathOrFile, describe, open_binary, read_bytes
from meshport.mesh import Mesh, check_mesh_argument, fan_triangles

logger = logging.getLogger(__name__)

FORM = b'FORM'
LWO2 = b'LWO2'

_U16 = struct.Struct('>H')
_U32 = struct.Struct('>I')
_F32 = struct.Struct('>f')
_POINT = struct.Struct('>3f')
_CHUNK = struct.Struct('>4sI')

VX_LIMIT = 0xFF00
_COUNT_MASK = 0x03FF


# ---------------------------------------------------------------------------
# variable-width index codec
# ---------------------------------------------------------------------------


def encode_vx(index: int) -> bytes:
    """Encode an index in the two- or four-byte ``VX`` form."""
    if index < 0 or index > 0xFFFFFF:
        raise ValueError(f"index out of range for VX encoding: {index}")
    if index < VX_LIMIT:
        return _U16.pack(index)
    return _U32.pack(0xFF000000 | index)


def decode_vx(data: bytes, pos: int) -> Tuple[int, int]:
    """Decode a ``VX`` index at ``pos``; return ``(index, new_pos)``."""
    (first,) = _U16.unpack_from(data, pos)
    if (first & 0xFF00) == 0xFF00:
        (second,) = _U16.unpack_from(data, pos + 2)
        return ((first & 0x00FF) << 16) | second, pos + 4
    return first, pos + 2


def _read_string(data: bytes, pos: int, end: int) -> Tuple[str, int]:
    """Read a null-terminated, even-padded string; return ``(text, new_pos)``."""
    stop = data.find(b'\0', pos, end)
    if stop < 0:
        return data[pos:end].decode('ascii', errors='replace'), end
    text = data[pos:stop].decode('ascii', errors='replace')
    consumed = stop + 1 - pos
    return text, pos + consumed + (consumed & 1)


# ---------------------------------------------------------------------------
# LWO Import
# ---------------------------------------------------------------------------


class _ReadState:
    def __init__(self, source: Optional[str]):
        self.source = source
        self.mesh = Mesh()
        self.points: List[Vector3] = []
        self.tags: List[str] = []
        self.dropped = 0


def _read_points(data: bytes, pos: int, size: int, state: _ReadState) -> None:
    for _ in range(size // _POINT.size):
        state.points.append(Vector3(*_POINT.unpack_from(data, pos)))
        pos += _POINT.size


def _mesh_index(point: Vector3, mesh: Mesh) -> int:
    # Linear scan with exact float equality; see DESIGN.md before replacing.
    try:
        return mesh.vertices.index(point)
    except ValueError:
        return mesh.add_vertex(point)


def _read_polygons(data: bytes, pos: int, end: int, state: _ReadState) -> None:
    poly_type = data[pos:pos + 4]
    pos += 4
    if poly_type != b'FACE':
        logger.debug("LWO: skipping %s polygons", poly_type.decode('ascii', errors='replace'))
        return

    mesh = state.mesh
    points = state.points
    while pos < end:
        count, pos = decode_vx(data, pos)
        count &= _COUNT_MASK
        indices: List[int] = []
        for _ in range(count):
            index, pos = decode_vx(data, pos)
            if index < len(points):
                indices.append(_mesh_index(points[index], mesh))
            else:
                state.dropped += 1
        for a, b, c in fan_triangles(indices):
            mesh.add_face(a, b, c)


def _read_tags(data: bytes, pos: int, end: int, state: _ReadState) -> None:
    while pos < end:
        tag, pos = _read_string(data, pos, end)
        state.tags.append(tag)


def parse_lwo(data: bytes, source: Optional[str] = None) -> Mesh:
    if len(data) < 12 or data[:4] != FORM:
        raise MalformedContainerError("not an IFF file: missing FORM header", path=source)
    (form_size,) = _U32.unpack_from(data, 4)
    if data[8:12] != LWO2:
        raise MalformedContainerError(
            f"unsupported FORM type {data[8:12]!r}; only LWO2 is supported", path=source)

    state = _ReadState(source)
    end = min(len(data), 8 + form_size)
    pos = 12

    try:
        while pos + _CHUNK.size <= end:
            tag, size = _CHUNK.unpack_from(data, pos)
            body = pos + _CHUNK.size
            chunk_end = body + size
            if chunk_end > end:
                raise MalformedContainerError(
                    f"chunk {tag!r} at offset {pos} runs past the end of the file", path=source)

            if tag == b'PNTS':
                _read_points(data, body, size, state)
            elif tag == b'POLS':
                _read_polygons(data, body, chunk_end, state)
            elif tag == b'TAGS':
                _read_tags(data, body, chunk_end, state)
            else:
                # PTAG, SURF, CLIP, ENVL and friends carry no geometry
                logger.debug("LWO: skipping %s chunk (%d bytes)",
                             tag.decode('ascii', errors='replace'), size)

            pos = chunk_end + (size & 1)
    except struct.error as exc:
        raise MalformedContainerError(f"truncated chunk data: {exc}", path=source) from exc

    if state.dropped:
        logger.debug("LWO: dropped %d out-of-range point references", state.dropped)
    logger.debug("LWO: %d points, %d surface tags %s",
                 len(state.points), len(state.tags), state.tags)
    return state.mesh


def read_lwo(path_or_file: PathOrFile) -> Mesh:
    """Read the polygons of an LWO2 file as a triangle mesh.

    Referenced points are de-duplicated by value, so unused points in the
    ``PNTS`` chunk do not appear in the result.
    """
    mesh = parse_lwo(read_bytes(path_or_file), describe(path_or_file))
    logger.info("read LWO mesh: %d vertices, %d faces", len(mesh.vertices), len(mesh.faces))
    return mesh


# ---------------------------------------------------------------------------
# LWO Export
# ---------------------------------------------------------------------------


def _string(text: str) -> bytes:
    raw = text.encode('ascii', errors='replace') + b'\0'
    if len(raw) & 1:
        raw += b'\0'
    return raw


def chunk(tag: bytes, payload: bytes) -> bytes:
    """Frame ``payload`` as an IFF chunk, adding a pad byte for odd sizes."""
    out = _CHUNK.pack(tag, len(payload)) + payload
    if len(payload) & 1:
        out += b'\0'
    return out


def _subchunk(tag: bytes, payload: bytes) -> bytes:
    out = tag + _U16.pack(len(payload)) + payload
    if len(payload) & 1:
        out += b'\0'
    return out


def _tags_chunk(names: Sequence[str]) -> bytes:
    return chunk(b'TAGS', b''.join(_string(n) for n in names))


def _points_chunk(mesh: Mesh) -> bytes:
    payload = io.BytesIO()
    for v in mesh.vertices:
        payload.write(_POINT.pack(v.x, v.y, v.z))
    return chunk(b'PNTS', payload.getvalue())


def _polygons_chunk(mesh: Mesh) -> bytes:
    payload = io.BytesIO()
    payload.write(b'FACE')
    for face in mesh.faces:
        payload.write(encode_vx(3))
        for index in face:
            payload.write(encode_vx(index))
    return chunk(b'POLS', payload.getvalue())


def _ptag_chunk(mesh: Mesh, surface_index: int) -> bytes:
    payload = io.BytesIO()
    payload.write(b'SURF')
    for i in range(len(mesh.faces)):
        payload.write(encode_vx(i))
        payload.write(_U16.pack(surface_index))
    return chunk(b'PTAG', payload.getvalue())


def _surface_chunk(name: str, color: Sequence[float]) -> bytes:
    colr = b''.join(_F32.pack(float(c)) for c in color[:3]) + encode_vx(0)
    payload = _string(name) + _string('') + _subchunk(b'COLR', colr)
    return chunk(b'SURF', payload)


def build_lwo(mesh: Mesh, surface_name: Optional[str] = None) -> bytes:
    """Serialize ``mesh`` as an LWO2 byte string with one surface."""
    if surface_name is None:
        surface_name = config.get('lwo.surface_name', 'Default')
    color = config.get('lwo.surface_color', [0.8, 0.8, 0.8])

    body = b''.join([
        _tags_chunk([surface_name]),
        _points_chunk(mesh),
        _polygons_chunk(mesh),
        _ptag_chunk(mesh, 0),
        _surface_chunk(surface_name, color),
    ])
    return FORM + _U32.pack(len(body) + 4) + LWO2 + body


def write_lwo(path_or_file: PathOrFile, mesh: Mesh, surface_name: Optional[str] = None) -> None:
    """Write ``mesh`` to an LWO2 file, all polygons on one surface."""
    check_mesh_argument(mesh, path_or_file)
    data = build_lwo(mesh, surface_name)
    with open_binary(path_or_file) as stream:
        stream.write(data)
    logger.info("wrote LWO mesh: %d points, %d polygons (%d bytes)",
                len(mesh.vertices), len(mesh.faces), len(data))


__all__ = [
    'encode_vx', 'decode_vx', 'chunk', 'parse_lwo', 'read_lwo', 'build_lwo', 'write_lwo',
]
