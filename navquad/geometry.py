"""Planar geometry primitives shared by every navquad pipeline stage.

All math assumes map coordinates where ``+x`` is east and ``+y`` is south,
except :func:`point_is_left` and :func:`winding_number`, which expect a
north-up frame. Callers working with raw map data must mirror points with
:func:`reflect_y` before asking for a winding number.

Vertex identity is exact coordinate equality. That is only sound because map
units are integral: any computed point that is about to become a graph vertex
has to go through :func:`to_integer` first.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence

EPS_INTERSECT = 1e-12
"""Inclusive tolerance on segment parameters in :func:`intersect_lines`."""

EPS_COLLINEAR = 1e-4
"""Triangle-inequality slack under which three points count as collinear."""

TWO_PI = 2 * math.pi


class GeometryInvariantError(RuntimeError):
    """Raised when the geometry breaks an assumption a stage relies on."""


class Axis(Enum):
    """Coordinate axis selector used by the axis-aligned sweeps."""

    X = "x"
    Y = "y"

    @property
    def other(self) -> "Axis":
        return Axis.Y if self is Axis.X else Axis.X


@dataclass(frozen=True, slots=True)
class Point:
    """A 2D point (or vector) in map units."""

    x: float
    y: float

    def along(self, axis: Axis) -> float:
        """Return the coordinate on ``axis``."""

        return self.x if axis is Axis.X else self.y

    @classmethod
    def on_axes(cls, fixed_axis: Axis, fixed_value: float, varying_value: float) -> "Point":
        """Build a point from a fixed-axis value and a varying-axis value."""

        if fixed_axis is Axis.X:
            return cls(fixed_value, varying_value)
        return cls(varying_value, fixed_value)


@dataclass(frozen=True, slots=True)
class Edge:
    """A straight segment from ``p1`` to ``p2``.

    Axis-aligned edges are normally kept ordered ascending along the axis
    they vary on; :meth:`sorted` produces that form.
    """

    p1: Point
    p2: Point

    @property
    def is_horizontal(self) -> bool:
        return self.p1.y == self.p2.y

    @property
    def is_vertical(self) -> bool:
        return self.p1.x == self.p2.x

    @property
    def fixed_axis(self) -> Axis:
        """Axis whose coordinate is constant along the edge."""

        return Axis.Y if self.is_horizontal else Axis.X

    @property
    def varying_axis(self) -> Axis:
        return self.fixed_axis.other

    def sorted(self) -> "Edge":
        """Return the edge with endpoints ascending along the varying axis."""

        axis = self.varying_axis
        if self.p1.along(axis) > self.p2.along(axis):
            return Edge(self.p2, self.p1)
        return self


def add_points(v1: Point, v2: Point) -> Point:
    return Point(v1.x + v2.x, v1.y + v2.y)


def subtract_points(v1: Point, v2: Point) -> Point:
    return Point(v1.x - v2.x, v1.y - v2.y)


def multiply_scalar(v: Point, scalar: float) -> Point:
    return Point(v.x * scalar, v.y * scalar)


def cross_product(v1: Point, v2: Point) -> float:
    """Return the z component of the 3D cross product of two planar vectors."""

    return v1.x * v2.y - v1.y * v2.x


def dot_product(v1: Point, v2: Point) -> float:
    return v1.x * v2.x + v1.y * v2.y


def angle_between(v1: Point, v2: Point) -> float:
    """Return the signed angle in radians from ``v1`` to ``v2`` (shared origin).

    The result lies in ``(-2*pi, 2*pi)``; callers normalise it as needed.
    """

    return math.atan2(v2.y, v2.x) - math.atan2(v1.y, v1.x)


def rot90(v: Point) -> Point:
    """Rotate ``v`` a quarter turn counter-clockwise as seen on a y-down map."""

    return Point(v.y, -v.x)


def rot180(v: Point) -> Point:
    return Point(-v.x, -v.y)


def rot270(v: Point) -> Point:
    return Point(-v.y, v.x)


def distance(v1: Point, v2: Point) -> float:
    return math.hypot(v1.x - v2.x, v1.y - v2.y)


def normalize(v: Point) -> Point:
    """Return ``v`` scaled to unit length."""

    magnitude = math.hypot(v.x, v.y)
    return Point(v.x / magnitude, v.y / magnitude)


def midpoint(v1: Point, v2: Point) -> Point:
    return Point((v1.x + v2.x) / 2, (v1.y + v2.y) / 2)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def to_integer(p: Point) -> Point:
    """Snap a point to the integer grid so it can serve as a graph vertex.

    Halves round towards positive infinity, so -2.5 becomes -2.
    """

    return Point(_round_half_up(p.x), _round_half_up(p.y))


def reflect_y(p: Point) -> Point:
    """Mirror a point across the x axis (map y-down <-> north-up)."""

    return Point(p.x, -p.y)


def points_are_collinear(p1: Point, p2: Point, p3: Point, eps: float = EPS_COLLINEAR) -> bool:
    """Return ``True`` if the three points lie on one line.

    Uses the triangle inequality: the two shorter sides of a degenerate
    triangle add up to the longest one.
    """

    short_a, short_b, longest = sorted((distance(p1, p2), distance(p1, p3), distance(p2, p3)))
    return short_a + short_b - longest < eps


def intersect_lines(p: Point, r: Point, q: Point, s: Point) -> Optional[Point]:
    """Intersect segment ``p -> p + r`` with segment ``q -> q + s``.

    Endpoints are inclusive within :data:`EPS_INTERSECT`. Parallel and
    collinear segments never intersect. Returns ``None`` without a hit.
    """

    rs_cross = cross_product(r, s)
    if rs_cross == 0:
        return None

    qp = subtract_points(q, p)
    u = cross_product(qp, r) / rs_cross
    t = cross_product(qp, s) / rs_cross

    def in_unit_range(value: float) -> bool:
        return -value <= EPS_INTERSECT and value - 1 <= EPS_INTERSECT

    if in_unit_range(u) and in_unit_range(t):
        return add_points(p, multiply_scalar(r, t))
    return None


def point_is_left(p1: Point, p2: Point, p3: Point) -> float:
    """Twice the signed area of triangle ``p1, p2, p3`` in a north-up frame.

    Positive when ``p3`` is left of the directed line ``p1 -> p2``, zero when
    on it and negative when right of it.
    """

    return (p2.x - p1.x) * (p3.y - p1.y) - (p3.x - p1.x) * (p2.y - p1.y)


def winding_number(p: Point, poly: Sequence[Point]) -> int:
    """Return the winding number of ``poly`` around ``p`` (north-up frame).

    Zero means ``p`` is outside. A counter-clockwise polygon yields ``+1`` for
    interior points and a clockwise one ``-1``. Edge-crossing rules: upward
    edges include their start and exclude their end, downward edges the
    reverse, horizontal edges are skipped.
    """

    wn = 0
    count = len(poly)
    for i in range(count):
        p1 = poly[i]
        p2 = poly[(i + 1) % count]
        if p1.y == p2.y:
            continue
        if p2.y > p1.y:
            if p1.y <= p.y < p2.y and point_is_left(p1, p2, p) > 0:
                wn += 1
        elif p2.y <= p.y < p1.y and point_is_left(p1, p2, p) < 0:
            wn -= 1
    return wn


__all__ = [
    "Axis",
    "EPS_COLLINEAR",
    "EPS_INTERSECT",
    "Edge",
    "GeometryInvariantError",
    "Point",
    "TWO_PI",
    "add_points",
    "angle_between",
    "cross_product",
    "distance",
    "dot_product",
    "intersect_lines",
    "midpoint",
    "multiply_scalar",
    "normalize",
    "point_is_left",
    "points_are_collinear",
    "reflect_y",
    "rot180",
    "rot270",
    "rot90",
    "subtract_points",
    "to_integer",
    "winding_number",
]
