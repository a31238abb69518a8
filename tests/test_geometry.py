import math

from navquad.geometry import (
    Axis,
    Edge,
    Point,
    angle_between,
    cross_product,
    intersect_lines,
    points_are_collinear,
    reflect_y,
    rot90,
    rot180,
    rot270,
    to_integer,
    winding_number,
)


def test_intersect_lines_crossing_segments():
    hit = intersect_lines(Point(0, 0), Point(0, 10), Point(-5, 5), Point(10, 0))
    assert hit == Point(0, 5)


def test_intersect_lines_collinear_segments_do_not_intersect():
    assert intersect_lines(Point(0, 0), Point(0, 10), Point(0, 0), Point(0, 10)) is None


def test_intersect_lines_shared_endpoint_is_inclusive():
    assert intersect_lines(Point(0, 0), Point(0, 10), Point(0, 0), Point(10, 0)) == Point(0, 0)


def test_intersect_lines_disjoint_segments():
    assert intersect_lines(Point(0, 0), Point(0, 10), Point(1, 11), Point(10, 0)) is None


def test_intersect_lines_end_of_segment_is_exclusive_past_tolerance():
    # the horizontal segment stops one unit before the vertical one
    assert intersect_lines(Point(1104, 0), Point(0, 100), Point(1000, 48), Point(103, 0)) is None
    hit = intersect_lines(Point(1104, 0), Point(0, 100), Point(1000, 48), Point(104, 0))
    assert hit is not None
    assert hit.x == 1104
    assert math.isclose(hit.y, 48)


def test_rotations_follow_y_down_convention():
    east = Point(1, 0)
    assert rot90(east) == Point(0, -1)
    assert rot180(east) == Point(-1, 0)
    assert rot270(east) == Point(0, 1)
    assert rot270(rot90(Point(3, 4))) == Point(3, 4)


def test_to_integer_rounds_halves_up():
    assert to_integer(Point(2.5, -2.5)) == Point(3, -2)
    assert to_integer(Point(-0.5, -3.5001)) == Point(0, -4)
    assert to_integer(Point(1.4999, -0.2)) == Point(1, 0)


def test_points_are_collinear():
    assert points_are_collinear(Point(0, 0), Point(5, 0), Point(10, 0))
    assert not points_are_collinear(Point(0, 0), Point(5, 1), Point(10, 0))


def test_angle_between_and_cross_product():
    assert math.isclose(angle_between(Point(1, 0), Point(0, 1)), math.pi / 2)
    assert cross_product(Point(1, 0), Point(0, 1)) == 1


def test_winding_number_ccw_and_cw():
    square = [Point(0, 0), Point(10, 0), Point(10, 10), Point(0, 10)]
    assert winding_number(Point(5, 5), square) == 1
    assert winding_number(Point(5, 5), list(reversed(square))) == -1
    assert winding_number(Point(15, 5), square) == 0


def test_reflect_y_mirrors_point():
    assert reflect_y(Point(3, 7)) == Point(3, -7)


def test_edge_axis_helpers_and_sorted():
    h = Edge(Point(10, 5), Point(0, 5))
    assert h.is_horizontal and not h.is_vertical
    assert h.fixed_axis is Axis.Y
    assert h.varying_axis is Axis.X
    assert h.sorted() == Edge(Point(0, 5), Point(10, 5))

    v = Edge(Point(3, 0), Point(3, 9))
    assert v.fixed_axis is Axis.X
    assert v.sorted() is v


def test_point_on_axes_and_along():
    p = Point.on_axes(Axis.X, 4, 9)
    assert p == Point(4, 9)
    assert Point.on_axes(Axis.Y, 4, 9) == Point(9, 4)
    assert p.along(Axis.X) == 4 and p.along(Axis.Y) == 9
    assert Axis.X.other is Axis.Y
