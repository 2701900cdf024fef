import io
import struct

import pytest

from meshport.errors import MalformedContainerError
from meshport.geom import Vector3
from meshport.io.max3ds import (
    EDIT3DS, EDIT_OBJECT, MAIN3DS, MAX_DEPTH, OBJ_TRIMESH, TRI_FACEL, TRI_VERTEXL,
    build_3ds, parse_3ds, read_3ds, walk_chunks, write_3ds, write_cube,
)
from meshport.mesh import Mesh, cube_mesh


def _chunk(chunk_id, payload):
    return struct.pack('<HI', chunk_id, 6 + len(payload)) + payload


def _object(name, verts, faces):
    vdata = struct.pack('<H', len(verts)) + b''.join(struct.pack('<3f', *v) for v in verts)
    fdata = struct.pack('<H', len(faces)) + b''.join(struct.pack('<4H', *f, 0) for f in faces)
    trimesh = _chunk(OBJ_TRIMESH, _chunk(TRI_VERTEXL, vdata) + _chunk(TRI_FACEL, fdata))
    return _chunk(EDIT_OBJECT, name + b'\0' + trimesh)


TRI = [(0, 0, 0), (1, 0, 0), (0, 1, 0)]


def test_write_cube_reads_back(tmp_path):
    path = tmp_path / 'cube.3ds'
    write_cube(path)
    mesh = read_3ds(path)
    assert len(mesh.vertices) == 8
    assert len(mesh.faces) == 12
    assert all(0 <= i < 8 for face in mesh.faces for i in face)
    assert mesh.faces == cube_mesh().faces


def test_backpatched_lengths():
    data = build_3ds(cube_mesh())
    chunks = [(c.chunk_id, c.offset, c.length, c.depth) for c in walk_chunks(data)]
    assert chunks == [
        (MAIN3DS, 0, 239, 0),
        (EDIT3DS, 6, 233, 1),
        (EDIT_OBJECT, 12, 227, 2),
        (OBJ_TRIMESH, 25, 214, 3),
        (TRI_VERTEXL, 31, 104, 4),
        (TRI_FACEL, 135, 104, 4),
    ]
    assert len(data) == 239


def test_every_length_matches_span():
    data = build_3ds(cube_mesh(), name="Widget")
    for chunk in walk_chunks(data):
        (length,) = struct.unpack_from('<I', data, chunk.offset + 2)
        assert length == chunk.length
        assert chunk.end <= len(data)


@pytest.mark.parametrize("mesh", [
    Mesh(),
    Mesh(TRI, [(0, 1, 2)]),
    cube_mesh(),
], ids=["empty", "triangle", "cube"])
def test_roundtrip(mesh):
    buf = io.BytesIO()
    write_3ds(buf, mesh)
    back = read_3ds(io.BytesIO(buf.getvalue()))
    assert back.faces == mesh.faces
    assert len(back.vertices) == len(mesh.vertices)
    for u, v in zip(back.vertices, mesh.vertices):
        assert u.isclose(v)


def test_multiple_objects_offset_faces():
    edit = _chunk(EDIT3DS,
                  _object(b'one', TRI, [(0, 1, 2)])
                  + _chunk(0xAFFF, b'material data')
                  + _object(b'two', [(0, 0, 1), (1, 0, 1), (0, 1, 1)], [(0, 1, 2), (0, 1, 9)]))
    mesh = parse_3ds(_chunk(MAIN3DS, edit))
    assert len(mesh.vertices) == 6
    assert mesh.faces == [(0, 1, 2), (3, 4, 5)]
    assert mesh.vertices[3] == Vector3(0, 0, 1)


def test_truncated_vertex_list():
    vdata = struct.pack('<H', 3) + struct.pack('<3f', 0, 0, 0)
    data = _chunk(MAIN3DS, _chunk(EDIT3DS, _chunk(EDIT_OBJECT, b'x\0' + _chunk(
        OBJ_TRIMESH, _chunk(TRI_VERTEXL, vdata)))))
    with pytest.raises(MalformedContainerError):
        parse_3ds(data)


def test_garbage_yields_empty_mesh():
    assert parse_3ds(b'').is_empty
    assert parse_3ds(b'\x4d\x4d\x02\x00\x00\x00junk').is_empty


def test_named_object():
    data = build_3ds(Mesh(TRI, [(0, 1, 2)]), name="Widget")
    assert b'Widget\0' in data


def test_too_many_vertices():
    mesh = Mesh([(0, 0, 0)] * 65536)
    with pytest.raises(ValueError):
        build_3ds(mesh)


def test_write_rejects_bad_arguments():
    with pytest.raises(ValueError):
        write_3ds('', cube_mesh())
    with pytest.raises(ValueError):
        write_3ds(io.BytesIO(), None)
    with pytest.raises(TypeError):
        write_3ds(io.BytesIO(), [(0, 0, 0)])


def test_large_coordinates_roundtrip_exactly():
    mesh = Mesh([(1234.567, 0.1, 0.0), (-4096.25, 98765.43, 7.0), (0.0, 1.0, -300.125)],
                [(0, 1, 2)])
    buf = io.BytesIO()
    write_3ds(buf, mesh)
    back = read_3ds(io.BytesIO(buf.getvalue()))
    assert back == mesh
    assert back.vertices[0].isclose(Vector3(1234.567, 0.1, 0.0))


def _nested_editors(levels):
    inner = b''
    for _ in range(levels):
        inner = _chunk(EDIT3DS, inner)
    return _chunk(MAIN3DS, inner)


def test_deep_nesting_is_rejected():
    data = _nested_editors(500)
    with pytest.raises(MalformedContainerError):
        parse_3ds(data)
    with pytest.raises(MalformedContainerError):
        read_3ds(io.BytesIO(data))
    with pytest.raises(MalformedContainerError):
        list(walk_chunks(data))


def test_nesting_within_limit_is_read():
    data = _nested_editors(MAX_DEPTH - 1)
    assert parse_3ds(data).is_empty
    assert len(list(walk_chunks(data))) == MAX_DEPTH
