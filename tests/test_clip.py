import pytest

from meshport.clip import BOTTOM, INSIDE, LEFT, RIGHT, TOP, clip_line, outcode

RECT = (0, 0, 100, 100)


@pytest.mark.parametrize("point, code", [
    ((50, 50), INSIDE),
    ((0, 0), INSIDE),
    ((100, 100), INSIDE),
    ((-1, 50), LEFT),
    ((101, 50), RIGHT),
    ((50, -1), TOP),
    ((50, 101), BOTTOM),
    ((-1, -1), LEFT | TOP),
    ((101, 101), RIGHT | BOTTOM),
])
def test_outcode(point, code):
    assert outcode(point[0], point[1], RECT) == code


def test_inside_segment_unchanged():
    assert clip_line((10, 10), (90, 90), RECT) == ((10.0, 10.0), (90.0, 90.0))


def test_outside_same_side_rejected():
    assert clip_line((-10, 10), (-5, 50), RECT) is None
    assert clip_line((10, 120), (90, 150), RECT) is None


def test_left_edge_crossing():
    assert clip_line((-50, 50), (50, 50), RECT) == ((0.0, 50.0), (50.0, 50.0))


def test_right_edge_crossing_second_point():
    assert clip_line((50, 20), (150, 20), RECT) == ((50.0, 20.0), (100.0, 20.0))


def test_diagonal_through_two_corners():
    assert clip_line((-10, -10), (110, 110), RECT) == ((0.0, 0.0), (100.0, 100.0))


def test_vertical_crossing_top_and_bottom():
    assert clip_line((30, -20), (30, 140), RECT) == ((30.0, 0.0), (30.0, 100.0))


def test_miss_near_corner():
    # both ends outside different regions, line passes outside the corner
    assert clip_line((-10, 20), (20, -10), (0, 0, 100, 100)) == ((0.0, 10.0), (10.0, 0.0))
    assert clip_line((-30, 10), (10, -30), RECT) is None
