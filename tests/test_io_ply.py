import io

import pytest

from meshport.errors import MalformedContainerError, UnsupportedFormatError
from meshport.geom import Vector3
from meshport.io.ply import parse_ply, read_ply, write_ply
from meshport.mesh import Mesh, cube_mesh

HEADER = """ply
format ascii 1.0
element vertex {nv}
property float x
property float y
property float z
element face {nf}
property list uchar int vertex_indices
end_header
"""


def _roundtrip(mesh):
    buf = io.StringIO()
    write_ply(buf, mesh)
    buf.seek(0)
    return read_ply(buf), buf.getvalue()


@pytest.mark.parametrize("mesh", [
    Mesh(),
    Mesh([(0, 0, 0), (1, 0, 0), (0, 1, 0)], [(0, 1, 2)]),
    cube_mesh(),
], ids=["empty", "triangle", "cube"])
def test_roundtrip(mesh):
    back, _ = _roundtrip(mesh)
    assert back.faces == mesh.faces
    assert len(back.vertices) == len(mesh.vertices)
    for u, v in zip(back.vertices, mesh.vertices):
        assert u.isclose(v)


def test_writer_header():
    _, text = _roundtrip(cube_mesh())
    lines = text.splitlines()
    assert lines[0] == "ply"
    assert lines[1] == "format ascii 1.0"
    assert "element vertex 8" in lines
    assert "element face 12" in lines
    assert "property list uchar int vertex_indices" in lines
    assert "3 0 2 1" in lines


def test_polygon_faces_are_fanned():
    text = HEADER.format(nv=4, nf=1) + "0 0 0\n1 0 0\n1 1 0\n0 1 0\n4 0 1 2 3\n"
    mesh = parse_ply(text)
    assert mesh.faces == [(0, 1, 2), (0, 2, 3)]


def test_extra_vertex_properties_ignored():
    text = HEADER.format(nv=3, nf=1) + "0 0 0 255 0 0\n1 0 0 0 255 0\n0 1 0 0 0 255\n3 0 1 2\n"
    mesh = parse_ply(text)
    assert mesh.vertices[2] == Vector3(0, 1, 0)
    assert mesh.faces == [(0, 1, 2)]


def test_malformed_lines_skipped():
    text = (HEADER.format(nv=4, nf=3)
            + "0 0 0\n1 0 0\nbad line\n0 1 0\n"
            + "3 0 1 2\n3 0 x 2\n3 0 1 9\n")
    mesh = parse_ply(text)
    assert len(mesh.vertices) == 3
    assert mesh.faces == [(0, 1, 2)]


def test_missing_magic():
    with pytest.raises(MalformedContainerError):
        parse_ply("format ascii 1.0\nend_header\n")


def test_binary_rejected(tmp_path):
    path = tmp_path / 'bin.ply'
    path.write_bytes(b"ply\nformat binary_little_endian 1.0\nelement vertex 0\nend_header\n")
    with pytest.raises(UnsupportedFormatError) as excinfo:
        read_ply(path)
    assert str(path) in str(excinfo.value)
