"""Tests for the text3d module."""

from types import SimpleNamespace

import pytest

from meshport import text3d
from meshport.text3d import (
    BLOCK_FONT, cubic_points, find_system_font, quadratic_points, text_mesh, text_outlines,
)


def _lit(char):
    return sum(row.count('#') for row in BLOCK_FONT[char])


class TestBlockFont:
    """Test the BLOCK_FONT data structure."""

    def test_font_has_letters(self):
        """Font should contain A-Z."""
        for c in 'ABCDEFGHIJKLMNOPQRSTUVWXYZ':
            assert c in BLOCK_FONT, f"Missing letter {c}"

    def test_font_has_digits(self):
        """Font should contain 0-9."""
        for c in '0123456789':
            assert c in BLOCK_FONT, f"Missing digit {c}"

    def test_glyph_shape(self):
        for c, rows in BLOCK_FONT.items():
            assert len(rows) == 5, c
            assert all(len(r) == 3 for r in rows), c


class TestOutlines:

    def test_one_rectangle_per_lit_cell(self):
        paths = text_outlines("I", 5.0, font="block")
        assert len(paths) == _lit('I')
        for path in paths:
            assert len(path) == 5
            assert path[0] == path[-1]

    def test_cell_size_and_position(self):
        paths = text_outlines("-", 5.0, font="block")
        assert paths == [
            [(0.0, 2.0), (1.0, 2.0), (1.0, 3.0), (0.0, 3.0), (0.0, 2.0)],
            [(1.0, 2.0), (2.0, 2.0), (2.0, 3.0), (1.0, 3.0), (1.0, 2.0)],
            [(2.0, 2.0), (3.0, 2.0), (3.0, 3.0), (2.0, 3.0), (2.0, 2.0)],
        ]

    def test_characters_advance(self):
        paths = text_outlines("..", 5.0, font="block")
        assert len(paths) == 2
        assert paths[1][0][0] - paths[0][0][0] == 4.0

    def test_lowercase_and_space(self):
        assert text_outlines("a", 5.0, font="block") == text_outlines("A", 5.0, font="block")
        assert text_outlines(" ", 5.0, font="block") == []

    def test_unknown_font_falls_back_to_block(self):
        paths = text_outlines("A", 5.0, font="NoSuchFontName1234")
        assert len(paths) == _lit('A')


class TestBezier:

    def test_quadratic(self):
        pts = quadratic_points((0, 0), (1, 1), (2, 0), 2)
        assert pts == [(1.0, 0.5), (2.0, 0.0)]

    def test_cubic_endpoints(self):
        pts = cubic_points((0, 0), (0, 1), (1, 1), (1, 0), 4)
        assert len(pts) == 4
        assert pts[-1] == (1.0, 0.0)
        assert pts[1] == (0.5, 0.75)


class TestTextMesh:

    def test_block_text_mesh(self):
        mesh = text_mesh("I", 5.0, 1.0, font="block")
        cells = _lit('I')
        assert len(mesh.vertices) == cells * 10
        assert len(mesh.faces) == cells * 8
        lo, hi = mesh.bounds()
        assert lo.z == 0.0
        assert hi.z == 1.0
        assert hi.y == 5.0

    def test_empty_text(self):
        with pytest.raises(ValueError):
            text_mesh("", 5.0, 1.0)


@pytest.mark.skipif(find_system_font("DejaVuSans") is None, reason="DejaVuSans not installed")
def test_truetype_outlines():
    font = find_system_font("DejaVuSans")
    paths = text_outlines("O", 10.0, font=font, curve_segments=8)
    # outer and inner contour
    assert len(paths) >= 2
    for path in paths:
        assert len(path) >= 4
        assert path[0] == path[-1]
    ys = [p[1] for path in paths for p in path]
    assert max(ys) - min(ys) == pytest.approx(10.0, rel=0.15)


def _v(x, y):
    return SimpleNamespace(x=x, y=y)


class _SquareOutline:
    """Glyph outline in 26.6 units: a 10x10 box with one curved corner,
    plus an open contour drawn with a cubic."""

    def get_bbox(self):
        return SimpleNamespace(xMin=0, yMin=0, xMax=640, yMax=640)

    def decompose(self, context=None, move_to=None, line_to=None, conic_to=None,
                  cubic_to=None, shift=0, delta=0):
        move_to(_v(0, 0), context)
        line_to(_v(640, 0), context)
        conic_to(_v(640, 640), _v(0, 640), context)
        line_to(_v(0, 0), context)
        move_to(_v(128, 128), context)
        cubic_to(_v(192, 128), _v(256, 192), _v(256, 256), context)
        line_to(_v(128, 256), context)


class _SquareFace:
    def __init__(self, path):
        self.path = path
        self.loaded = []
        self.glyph = SimpleNamespace(outline=_SquareOutline(), advance=_v(768, 0))

    def set_char_size(self, size):
        self.size = size

    def load_char(self, char, flags):
        self.loaded.append(char)


class TestFreetypeOutlines:

    @pytest.fixture
    def font_file(self, tmp_path, monkeypatch):
        monkeypatch.setattr(text3d.freetype, "Face", _SquareFace)
        path = tmp_path / "square.ttf"
        path.write_bytes(b"")
        return str(path)

    def test_contours_are_flattened_and_closed(self, font_file):
        paths = text_outlines("A", 10.0, font=font_file, curve_segments=4)
        assert len(paths) == 2
        box, inner = paths
        # move, line, 4 conic samples, line
        assert len(box) == 7
        assert box[:2] == [(0.0, 0.0), (10.0, 0.0)]
        assert box[5] == pytest.approx((0.0, 10.0))
        assert box[-1] == box[0]
        # move, 4 cubic samples, line, closing point
        assert len(inner) == 7
        assert inner[4] == pytest.approx((4.0, 4.0))
        assert inner[-1] == inner[0] == (2.0, 2.0)

    def test_scaled_to_capital_height_and_advanced(self, font_file):
        paths = text_outlines("AB", 20.0, font=font_file, curve_segments=2)
        assert len(paths) == 4
        ys = [p[1] for p in paths[0]]
        assert max(ys) - min(ys) == pytest.approx(20.0)
        # advance of 12 units, doubled
        assert paths[2][0] == (24.0, 0.0)
