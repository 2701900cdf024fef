"""Autodesk 3DS import and export.

A 3DS file is a tree of little-endian chunks.  Each chunk starts with a
``uint16`` id and a ``uint32`` length that counts the 6 header bytes,
followed by its payload, which for container chunks is a sequence of
child chunks.  Only the chunks needed for triangle geometry are
interpreted::

    MAIN3DS (0x4D4D)
      EDIT3DS (0x3D3D)
        EDIT_OBJECT (0x4000)   name\\0, then children
          OBJ_TRIMESH (0x4100)
            TRI_VERTEXL (0x4110)   uint16 n, n * 3 float32
            TRI_FACEL   (0x4120)   uint16 n, n * (3 uint16 + uint16 flags)

Everything else (materials, keyframes, cameras, ...) is skipped using the
chunk length.
"""

from __future__ import annotations

import io
import logging
import struct
from typing import Iterator, NamedTuple, Optional

from meshport import config
from meshport.errors import MalformedContainerError
from meshport.io._util import PathOrFile, describe, open_binary, read_bytes
from meshport.mesh import Mesh, check_mesh_argument, cube_mesh

logger = logging.getLogger(__name__)

MAIN3DS = 0x4D4D
EDIT3DS = 0x3D3D
EDIT_OBJECT = 0x4000
OBJ_TRIMESH = 0x4100
TRI_VERTEXL = 0x4110
TRI_FACEL = 0x4120

_CONTAINERS = (MAIN3DS, EDIT3DS)

# real files nest five levels deep
MAX_DEPTH = 64

_HEADER = struct.Struct('<HI')
_COUNT = struct.Struct('<H')
_VERTEX = struct.Struct('<3f')
_FACE = struct.Struct('<4H')
_LENGTH = struct.Struct('<I')


class Chunk(NamedTuple):
    """Location of one chunk inside a 3DS byte string."""

    chunk_id: int
    offset: int
    length: int
    depth: int

    @property
    def end(self) -> int:
        return self.offset + self.length


class _ReadState:
    def __init__(self, source: Optional[str]):
        self.mesh = Mesh()
        self.source = source
        self.base = 0
        self.dropped = 0
        self.skipped = 0


def _read_chunks(data: bytes, pos: int, end: int, state: _ReadState, depth: int = 0) -> None:
    """Read sibling chunks in ``data[pos:end]``, descending into containers."""
    if depth > MAX_DEPTH:
        raise MalformedContainerError(
            f"chunks nested deeper than {MAX_DEPTH} levels at offset {pos}", path=state.source)
    while pos + _HEADER.size <= end:
        chunk_id, length = _HEADER.unpack_from(data, pos)
        body = pos + _HEADER.size
        if length < _HEADER.size:
            logger.debug("3DS: chunk 0x%04X at %d has bad length %d", chunk_id, pos, length)
            return
        chunk_end = min(pos + length, end)

        if chunk_id in _CONTAINERS:
            _read_chunks(data, body, chunk_end, state, depth + 1)
        elif chunk_id == EDIT_OBJECT:
            name_end = data.find(b'\0', body, chunk_end)
            start = chunk_end if name_end < 0 else name_end + 1
            _read_chunks(data, start, chunk_end, state, depth + 1)
        elif chunk_id == OBJ_TRIMESH:
            state.base = len(state.mesh.vertices)
            _read_chunks(data, body, chunk_end, state, depth + 1)
        elif chunk_id == TRI_VERTEXL:
            _read_vertices(data, body, chunk_end, state)
        elif chunk_id == TRI_FACEL:
            _read_faces(data, body, chunk_end, state)
        else:
            state.skipped += 1

        pos = chunk_end


def _read_count(data: bytes, pos: int, end: int, record: int, state: _ReadState, what: str) -> int:
    if pos + _COUNT.size > end:
        raise MalformedContainerError(f"truncated {what} chunk", path=state.source)
    (count,) = _COUNT.unpack_from(data, pos)
    if pos + _COUNT.size + count * record > end:
        raise MalformedContainerError(
            f"{what} chunk declares {count} records but is too short", path=state.source)
    return count


def _read_vertices(data: bytes, pos: int, end: int, state: _ReadState) -> None:
    count = _read_count(data, pos, end, _VERTEX.size, state, 'vertex')
    pos += _COUNT.size
    for _ in range(count):
        state.mesh.add_vertex(*_VERTEX.unpack_from(data, pos))
        pos += _VERTEX.size


def _read_faces(data: bytes, pos: int, end: int, state: _ReadState) -> None:
    count = _read_count(data, pos, end, _FACE.size, state, 'face')
    pos += _COUNT.size
    base = state.base
    for _ in range(count):
        a, b, c, _flags = _FACE.unpack_from(data, pos)
        if not state.mesh.add_face(base + a, base + b, base + c):
            state.dropped += 1
        pos += _FACE.size


def parse_3ds(data: bytes, source: Optional[str] = None) -> Mesh:
    state = _ReadState(source)
    _read_chunks(data, 0, len(data), state)
    if state.skipped or state.dropped:
        logger.debug("3DS: skipped %d chunks, dropped %d faces", state.skipped, state.dropped)
    return state.mesh


def read_3ds(path_or_file: PathOrFile) -> Mesh:
    """Read the triangle geometry of every object in a 3DS file into one mesh."""
    mesh = parse_3ds(read_bytes(path_or_file), describe(path_or_file))
    logger.info("read 3DS mesh: %d vertices, %d faces", len(mesh.vertices), len(mesh.faces))
    return mesh


def walk_chunks(data: bytes) -> Iterator[Chunk]:
    """Yield every chunk of the geometry tree in file order.

    Container chunks are descended the same way :func:`read_3ds` does, so
    this is handy for inspecting files written by :func:`write_3ds`.
    Nesting past ``MAX_DEPTH`` raises :class:`MalformedContainerError`.
    """

    def _walk(pos: int, end: int, depth: int) -> Iterator[Chunk]:
        if depth > MAX_DEPTH:
            raise MalformedContainerError(
                f"chunks nested deeper than {MAX_DEPTH} levels at offset {pos}")
        while pos + _HEADER.size <= end:
            chunk_id, length = _HEADER.unpack_from(data, pos)
            if length < _HEADER.size:
                return
            chunk = Chunk(chunk_id, pos, length, depth)
            yield chunk
            chunk_end = min(chunk.end, end)
            body = pos + _HEADER.size
            if chunk_id == EDIT_OBJECT:
                name_end = data.find(b'\0', body, chunk_end)
                body = chunk_end if name_end < 0 else name_end + 1
            if chunk_id in _CONTAINERS or chunk_id in (EDIT_OBJECT, OBJ_TRIMESH):
                yield from _walk(body, chunk_end, depth + 1)
            pos = chunk_end

    yield from _walk(0, len(data), 0)


# ---------------------------------------------------------------------------
# 3DS Export
# ---------------------------------------------------------------------------


class _ChunkWriter:
    """Writes nested chunks, backpatching each length when it closes."""

    def __init__(self):
        self.buf = io.BytesIO()

    def begin(self, chunk_id: int) -> int:
        start = self.buf.tell()
        self.buf.write(_HEADER.pack(chunk_id, 0))
        return start

    def end(self, start: int) -> None:
        end = self.buf.tell()
        self.buf.seek(start + 2)
        self.buf.write(_LENGTH.pack(end - start))
        self.buf.seek(end)

    def write(self, data: bytes) -> None:
        self.buf.write(data)

    def getvalue(self) -> bytes:
        return self.buf.getvalue()


def _check_limit(count: int, what: str) -> None:
    if count > 0xFFFF:
        raise ValueError(f"3DS cannot store more than 65535 {what} per object (got {count})")


def build_3ds(mesh: Mesh, name: Optional[str] = None) -> bytes:
    """Serialize ``mesh`` as a single-object 3DS byte string."""
    if name is None:
        name = config.get('max3ds.object_name', 'Object')
    _check_limit(len(mesh.vertices), 'vertices')
    _check_limit(len(mesh.faces), 'faces')

    w = _ChunkWriter()
    main = w.begin(MAIN3DS)
    edit = w.begin(EDIT3DS)
    obj = w.begin(EDIT_OBJECT)
    w.write(name.encode('ascii', errors='replace') + b'\0')
    trimesh = w.begin(OBJ_TRIMESH)

    vertices = w.begin(TRI_VERTEXL)
    w.write(_COUNT.pack(len(mesh.vertices)))
    for v in mesh.vertices:
        w.write(_VERTEX.pack(v.x, v.y, v.z))
    w.end(vertices)

    faces = w.begin(TRI_FACEL)
    w.write(_COUNT.pack(len(mesh.faces)))
    for a, b, c in mesh.faces:
        w.write(_FACE.pack(a, b, c, 0))
    w.end(faces)

    w.end(trimesh)
    w.end(obj)
    w.end(edit)
    w.end(main)
    return w.getvalue()


def write_3ds(path_or_file: PathOrFile, mesh: Mesh, name: Optional[str] = None) -> None:
    """Write ``mesh`` to a 3DS file as one named object."""
    check_mesh_argument(mesh, path_or_file)
    data = build_3ds(mesh, name)
    with open_binary(path_or_file) as stream:
        stream.write(data)
    logger.info("wrote 3DS mesh: %d vertices, %d faces (%d bytes)",
                len(mesh.vertices), len(mesh.faces), len(data))


def write_cube(path_or_file: PathOrFile, size: float = 1.0) -> None:
    """Write the cube fixture (8 vertices, 12 faces) to a 3DS file."""
    write_3ds(path_or_file, cube_mesh(size))


__all__ = [
    'MAIN3DS', 'EDIT3DS', 'MAX_DEPTH', 'EDIT_OBJECT', 'OBJ_TRIMESH', 'TRI_VERTEXL', 'TRI_FACEL',
    'Chunk', 'parse_3ds', 'read_3ds', 'walk_chunks', 'build_3ds', 'write_3ds', 'write_cube',
]
