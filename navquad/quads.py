"""Quad mesher: partition the walkable region between contours into quads.

Two steps:

1. :func:`contours_raycast_edges` casts axis-aligned rays from every contour
   vertex into walkable space, stops each ray at the first contour edge it
   hits, and cuts both the contours and the rays at their mutual contacts.
2. :func:`fill_quads_and_remove_doubles` merges everything into one vertex
   indexed graph and sweeps every horizontal edge southwards to find the
   rectangles bounded by it.
"""

from __future__ import annotations

import logging
from bisect import bisect_left, bisect_right
from enum import Enum
from typing import FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple

from rtree import index as rtree_index

from .geometry import (
    TWO_PI,
    Axis,
    Edge,
    Point,
    add_points,
    angle_between,
    distance,
    intersect_lines,
    rot90,
    rot180,
    rot270,
    subtract_points,
    to_integer,
)
from .graph import Contour, EdgeIndex, build_adjacent_edges_list, remove_doubles
from .mesh import Face, NavMesh
from .options import MeshOptions
from .planarize import group_by_one_axis, intersect_and_cut

LOGGER = logging.getLogger(__name__)

TURN_EPS = 1e-9


class TurnType(Enum):
    STRAIGHT = "straight"
    TURN = "turn"
    RIGHT = "right"
    LEFT = "left"


def _identity(p: Point) -> Point:
    return p


def generate_rays_inward(p0: Point, p1: Point, p2: Point, ray_length: float) -> Tuple[Point, ...]:
    """Return the rays to cast from ``p1`` towards walkable space.

    The corner ``p0 -> p1 -> p2`` is rotated so that the incoming edge points
    north. A straight run then casts one ray west, a right turn casts rays
    west and north, and a left turn casts nothing. A reversal cannot occur
    after inflation; it is logged and ignored.
    """

    v1 = subtract_points(p1, p0)
    v2 = subtract_points(p2, p1)

    if v1.x == 0:
        if v1.y > 0:
            to_north, back = rot180, rot180
        else:
            to_north, back = _identity, _identity
    elif v1.x > 0:
        to_north, back = rot90, rot270
    else:
        to_north, back = rot270, rot90

    west = back(Point(-ray_length, 0))
    north = back(Point(0, -ray_length))

    v2_t = to_north(v2)
    if v2_t.x == 0:
        if v2_t.y > 0:
            LOGGER.warning(
                "Contour reverses direction at %s (from %s to %s), casting no rays",
                p1,
                p0,
                p2,
            )
            return ()
        return (west,)
    if v2_t.x > 0:
        return (west, north)
    return ()


class _SegmentIndex:
    """R-tree over contour edges for coarse ray collision queries."""

    def __init__(self, edges: Sequence[Edge]):
        self.edges = list(edges)
        p = rtree_index.Property()
        p.interleaved = True
        self._rt = rtree_index.Index(properties=p)
        for id_, edge in enumerate(self.edges):
            self._rt.insert(id_, _bbox(edge.p1, edge.p2))

    def candidates(self, p1: Point, p2: Point) -> List[int]:
        return sorted(self._rt.intersection(_bbox(p1, p2)))


def _bbox(a: Point, b: Point) -> Tuple[float, float, float, float]:
    return (min(a.x, b.x), min(a.y, b.y), max(a.x, b.x), max(a.y, b.y))


def _cast_ray(origin: Point, ray: Point, collision: _SegmentIndex) -> Optional[Point]:
    best: Optional[Point] = None
    best_dist = float("inf")
    for edge_id in collision.candidates(origin, add_points(origin, ray)):
        edge = collision.edges[edge_id]
        hit = intersect_lines(origin, ray, edge.p1, subtract_points(edge.p2, edge.p1))
        if hit is None:
            continue
        hit = to_integer(hit)
        dist = distance(origin, hit)
        if 0 < dist < best_dist:
            best, best_dist = hit, dist
    return best


def remove_duplicate_edges(edges: Sequence[Edge], fixed_axis: Axis) -> List[Edge]:
    """Drop exact duplicates from edges sorted by their ``fixed_axis`` coordinate.

    Within each group only the last copy of an edge is kept.
    """

    varying = fixed_axis.other
    kept: List[Edge] = []
    for start, stop in group_by_one_axis(edges, fixed_axis):
        for i in range(start, stop):
            e1 = edges[i]
            duplicated = any(
                e1.p1.along(varying) == e2.p1.along(varying) and e1.p2.along(varying) == e2.p2.along(varying)
                for e2 in edges[i + 1 : stop]
            )
            if not duplicated:
                kept.append(e1)
    return kept


def binary_search_range(
    edges: Sequence[Edge],
    axis: Axis,
    lower_inc: float,
    upper_inc: float,
) -> Tuple[int, int]:
    """Return ``(start, stop)`` of the edges whose ``p1`` lies in ``[lower_inc, upper_inc]`` on ``axis``.

    ``edges`` must be sorted by ``p1`` along ``axis``.
    """

    start = bisect_left(edges, lower_inc, key=lambda e: e.p1.along(axis))
    stop = bisect_right(edges, upper_inc, key=lambda e: e.p1.along(axis))
    return start, max(start, stop)


def _contour_edges(contours: Iterable[Sequence[Point]]) -> Tuple[List[Edge], List[Edge]]:
    horizontal: List[Edge] = []
    vertical: List[Edge] = []
    for contour in contours:
        count = len(contour)
        for i in range(count):
            edge = Edge(contour[i], contour[(i + 1) % count])
            if edge.is_vertical:
                vertical.append(edge)
            else:
                horizontal.append(edge)
    return horizontal, vertical


def _cut_contour(
    contour: Sequence[Point],
    rays_h: Sequence[Edge],
    rays_v: Sequence[Edge],
    margin: float,
) -> Contour:
    cut: Contour = []
    count = len(contour)
    for i in range(count):
        p0 = contour[i]
        p1 = contour[(i + 1) % count]
        cut.append(p0)

        edge = Edge(p0, p1)
        fixed = edge.fixed_axis
        varying = edge.varying_axis
        fixed_value = p0.along(fixed)
        lo, hi = sorted((p0.along(varying), p1.along(varying)))
        # perpendicular rays are sorted by their own fixed coordinate, which
        # is this edge's varying one
        rays = rays_v if edge.is_horizontal else rays_h
        start, stop = binary_search_range(rays, varying, lo + margin, hi - margin)

        values = set()
        for ray in rays[start:stop]:
            # rays only ever touch a contour with one of their endpoints
            if ray.p1.along(fixed) == fixed_value:
                values.add(ray.p1.along(varying))
            if ray.p2.along(fixed) == fixed_value:
                values.add(ray.p2.along(varying))

        ascending = p0.along(varying) < p1.along(varying)
        for value in sorted(values, reverse=not ascending):
            cut.append(Point.on_axes(fixed, fixed_value, value))
    return cut


def contours_raycast_edges(
    contours: Sequence[Sequence[Point]],
    options: Optional[MeshOptions] = None,
) -> Tuple[List[Contour], List[Edge]]:
    """Cast inward rays from every contour vertex and cut everything at the contacts.

    Returns ``(cut_contours, internal_edges_cut)``: the contours with a
    vertex inserted wherever a ray ends on one of their edges, and the rays
    split at their mutual crossings.
    """

    opts = options or MeshOptions()
    collision_h, collision_v = _contour_edges(contours)
    index_h = _SegmentIndex(collision_h)
    index_v = _SegmentIndex(collision_v)

    rays_h: List[Edge] = []
    rays_v: List[Edge] = []
    missed = 0
    for contour in contours:
        count = len(contour)
        for i in range(count):
            v0 = contour[(i - 1) % count]
            v1 = contour[i]
            v2 = contour[(i + 1) % count]
            for ray in generate_rays_inward(v0, v1, v2, opts.quad_ray_length):
                is_horizontal = ray.y == 0
                hit = _cast_ray(v1, ray, index_v if is_horizontal else index_h)
                if hit is None:
                    LOGGER.warning("Ray from contour vertex %s along %s hit no contour edge, skipping it", v1, ray)
                    missed += 1
                    continue
                (rays_h if is_horizontal else rays_v).append(Edge(v1, hit).sorted())

    rays_h.sort(key=lambda e: e.p1.y)
    rays_v.sort(key=lambda e: e.p1.x)
    rays_h = remove_duplicate_edges(rays_h, Axis.Y)
    rays_v = remove_duplicate_edges(rays_v, Axis.X)
    LOGGER.debug(
        "Quad raycast: %d horizontal and %d vertical rays (%d missed)",
        len(rays_h),
        len(rays_v),
        missed,
    )

    cut_contours = [_cut_contour(contour, rays_h, rays_v, opts.cut_margin) for contour in contours]
    internal_edges_cut = intersect_and_cut(rays_h, rays_v)
    return cut_contours, internal_edges_cut


def get_turn_type(p1: Point, p2: Point, p3: Point) -> TurnType:
    """Classify the turn made at ``p2`` when walking ``p1 -> p2 -> p3`` on a y-down map."""

    angle = (angle_between(subtract_points(p2, p1), subtract_points(p3, p1)) + TWO_PI) % TWO_PI
    if angle < TURN_EPS or TWO_PI - angle < TURN_EPS:
        return TurnType.STRAIGHT
    if abs(angle - TWO_PI / 2) < TURN_EPS:
        return TurnType.TURN
    if angle < TWO_PI / 2:
        return TurnType.RIGHT
    return TurnType.LEFT


def turn_sum(contour: Sequence[Point]) -> int:
    """Return left turns minus right turns around a closed contour."""

    total = 0
    count = len(contour)
    for i in range(count):
        turn = get_turn_type(contour[(i - 1) % count], contour[i], contour[(i + 1) % count])
        if turn is TurnType.LEFT:
            total += 1
        elif turn is TurnType.RIGHT:
            total -= 1
    return total


def _corner_key(p: Point) -> Tuple[int, int]:
    return (round(p.x), round(p.y))


def _hole_corners(cut_contours: Iterable[Sequence[Point]]) -> Set[FrozenSet[Tuple[int, int]]]:
    """Return the corner set of every rectangular hole, one entry per hole."""

    holes: Set[FrozenSet[Tuple[int, int]]] = set()
    for contour in cut_contours:
        if len(contour) == 4 and turn_sum(contour) < 0:
            holes.add(frozenset(_corner_key(p) for p in contour))
    return holes


def fill_quads_and_remove_doubles(cut_contours: Sequence[Sequence[Point]], internal_edges_cut: Sequence[Edge]) -> NavMesh:
    """Merge cut contours and internal edges and collect every walkable quad.

    For each horizontal edge ``a -> b`` the vertical edges leaving ``a`` and
    ``b`` southwards are followed to ``a_s`` and ``b_s``; if those lie on one
    row and are joined by a single horizontal edge, the rectangle becomes a
    face. A rectangle whose corners are exactly the corners of one
    rectangular hole covers that hole and is skipped.
    """

    hole_corners = _hole_corners(cut_contours)
    edges: List[Edge] = []
    for contour in cut_contours:
        count = len(contour)
        edges.extend(Edge(contour[i], contour[(i + 1) % count]) for i in range(count))
    edges.extend(internal_edges_cut)

    graph = remove_doubles(edges)
    vertices = graph.vertices
    edge_indices: List[EdgeIndex] = []
    for a, b in graph.edge_indices:
        edge = Edge(vertices[a], vertices[b])
        edge_indices.append((a, b) if edge.sorted() is edge else (b, a))
    adjacency = build_adjacent_edges_list(len(vertices), edge_indices)

    def find_south(p_idx: int) -> Optional[int]:
        p = vertices[p_idx]
        for edge_idx in adjacency[p_idx]:
            a, b = edge_indices[edge_idx]
            if vertices[a].x == vertices[b].x and vertices[a].y == p.y:
                return b
        return None

    def south_connected(west_idx: int, east_idx: int) -> bool:
        west = vertices[west_idx]
        for edge_idx in adjacency[west_idx]:
            a, b = edge_indices[edge_idx]
            if vertices[a].y == vertices[b].y and vertices[a].x == west.x:
                return b == east_idx
        return False

    def covers_hole(corner_idx: Tuple[int, int, int, int]) -> bool:
        return frozenset(_corner_key(vertices[i]) for i in corner_idx) in hole_corners

    faces: List[Face] = []
    seen: Set[Face] = set()
    skipped_holes = 0
    for a, b in edge_indices:
        if vertices[a].y != vertices[b].y:
            continue
        a_s = find_south(a)
        b_s = find_south(b)
        if a_s is None or b_s is None:
            continue
        if vertices[a_s].y != vertices[b_s].y:
            continue
        if not south_connected(a_s, b_s):
            continue
        if covers_hole((a, b, a_s, b_s)):
            skipped_holes += 1
            continue
        face: Face = (b, a, a_s, b_s)
        if face in seen:
            continue
        seen.add(face)
        faces.append(face)

    LOGGER.debug(
        "Face fill: %d vertices, %d edges, %d faces (%d hole quads skipped)",
        len(vertices),
        len(edge_indices),
        len(faces),
        skipped_holes,
    )
    return NavMesh(vertices=vertices, edge_indices=edge_indices, faces=faces)


__all__ = [
    "TurnType",
    "binary_search_range",
    "contours_raycast_edges",
    "fill_quads_and_remove_doubles",
    "generate_rays_inward",
    "get_turn_type",
    "remove_duplicate_edges",
    "turn_sum",
]
