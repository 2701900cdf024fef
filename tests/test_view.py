import math

import ezdxf
import pytest

from meshport.geom import Vector3
from meshport.io.dxf import write_wireframe_dxf
from meshport.mesh import Mesh, cube_mesh
from meshport.view import fit_transform, project_wireframe

TRI = Mesh([(0, 0, 0), (2, 0, 0), (0, 2, 0)], [(0, 1, 2)])


def test_fit_transform_centres_and_scales():
    xf = fit_transform(TRI, 100, 100)
    # center (1, 1, 0), extent 2, scale 100 * 0.8 / 2 = 40, Y flipped
    assert xf.transform(TRI.center()).isclose(Vector3(0, 0, 0))
    assert xf.transform((2, 0, 0)).isclose(Vector3(40, 40, 0))
    assert xf.transform((0, 2, 0)).isclose(Vector3(-40, -40, 0))


def test_fit_transform_uses_smaller_side():
    xf = fit_transform(TRI, 400, 100)
    assert xf.transform((2, 1, 0)).isclose(Vector3(40, 0, 0))


def test_fit_transform_degenerate_mesh():
    point = Mesh([(3, 3, 3)])
    xf = fit_transform(point, 100, 100)
    assert xf.transform((4, 3, 3)).isclose(Vector3(80, 0, 0))


def test_fit_transform_rotation():
    xf = fit_transform(TRI, 100, 100, rz=math.pi / 2)
    # (2, 0, 0) is (1, -1, 0) from the center; rotated to (1, 1, 0); scaled and flipped
    assert xf.transform((2, 0, 0)).isclose(Vector3(40, -40, 0))


def test_cube_wireframe_inside_viewport():
    segments = project_wireframe(cube_mesh(), 200, 100)
    assert len(segments) == 36
    for p0, p1 in segments:
        for x, y in (p0, p1):
            assert 60 - 1e-9 <= x <= 140 + 1e-9
            assert 10 - 1e-9 <= y <= 90 + 1e-9


def test_segments_are_clipped():
    segments = project_wireframe(cube_mesh(), 100, 100, rx=0.3, ry=0.4, fill=2.0)
    assert segments
    for p0, p1 in segments:
        for x, y in (p0, p1):
            assert 0 <= x <= 100
            assert 0 <= y <= 100


def test_bad_faces_skipped():
    mesh = Mesh([(0, 0, 0), (1, 0, 0), (0, 1, 0)], [(0, 1, 2), (0, 1, 7)])
    assert len(project_wireframe(mesh, 100, 100)) == 3


def test_empty_mesh():
    assert project_wireframe(Mesh(), 100, 100) == []


def test_write_wireframe_dxf(tmp_path):
    path = tmp_path / 'wire.dxf'
    segments = project_wireframe(cube_mesh(), 200, 100)
    count = write_wireframe_dxf(path, segments)
    assert count == 36

    doc = ezdxf.readfile(str(path))
    lines = doc.modelspace().query('LINE')
    assert len(lines) == 36
    assert all(line.dxf.layer == 'WIREFRAME' for line in lines)
    first = lines[0]
    assert first.dxf.start.x == pytest.approx(segments[0][0][0])
    assert first.dxf.end.y == pytest.approx(segments[0][1][1])
