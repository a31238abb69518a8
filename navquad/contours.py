"""Contour extraction: walk the planar wall graph into closed boundary loops.

Every contour is reported counter-clockwise in the map's y-down frame, so
that rotating any of its edges with :func:`~navquad.geometry.rot90` points
into walkable space. Contours enclosing the spawn point are outer walls;
all others are holes (obstacles).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Set, Tuple

from .geometry import (
    TWO_PI,
    GeometryInvariantError,
    Point,
    angle_between,
    cross_product,
    distance,
    intersect_lines,
    midpoint,
    multiply_scalar,
    normalize,
    points_are_collinear,
    reflect_y,
    subtract_points,
    winding_number,
)
from .graph import Contour, EdgeIndex, PlanarGraph, build_adjacent_edges_list
from .options import MeshOptions

LOGGER = logging.getLogger(__name__)


class RaycastMissError(GeometryInvariantError):
    """Raised when a ray aimed at a wall edge fails to hit any edge."""

    def __init__(self, spawn: Point, target: Point) -> None:
        super().__init__(f"Raycast from {spawn} towards {target} did not hit any edge")
        self.spawn = spawn
        self.target = target


class ContourWalkError(GeometryInvariantError):
    """Raised when a boundary walk does not return to its starting edge."""

    def __init__(self, start: Point, steps: int) -> None:
        super().__init__(f"Boundary walk from {start} did not close after {steps} steps")
        self.start = start
        self.steps = steps


@dataclass(slots=True)
class TracedContour:
    """A contour together with the data needed for later containment tests."""

    points: Contour
    """Contour vertices, counter-clockwise in the y-down map frame."""

    reflected: Contour
    """The same vertices mirrored to a north-up frame for winding numbers."""

    is_outer_wall: bool
    """``True`` when the contour encloses the spawn point."""


def trace_contours(
    graph: PlanarGraph,
    spawn_position: Point,
    options: Optional[MeshOptions] = None,
) -> List[TracedContour]:
    """Detect every wall contour reachable from ``spawn_position``.

    Repeatedly casts a ray from spawn through the midpoint of a remaining
    edge, takes the closest edge hit, removes that edge's connected
    component from the search set, and walks the component's boundary unless
    the hit lies outside an outer wall or inside a hole found earlier.

    Raises :class:`RaycastMissError` if a ray hits nothing and
    :class:`ContourWalkError` if a boundary walk fails to close.
    """

    opts = options or MeshOptions()
    vertices = graph.vertices
    edge_indices = graph.edge_indices
    adjacency = build_adjacent_edges_list(len(vertices), edge_indices)
    LOGGER.debug("Tracing contours from spawn position %s", spawn_position)

    found: List[TracedContour] = []
    searchable: List[int] = list(range(len(edge_indices)))

    while searchable:
        target_edge = _pick_raycast_target(searchable, graph, spawn_position, opts.collinear_eps)
        if target_edge is None:
            LOGGER.warning(
                "All %d remaining edges are collinear with the spawn point, dropping them: %s",
                len(searchable),
                [edge_indices[e] for e in searchable],
            )
            break

        a_idx, b_idx = edge_indices[target_edge]
        target_point = midpoint(vertices[a_idx], vertices[b_idx])
        ray = multiply_scalar(
            normalize(subtract_points(target_point, spawn_position)),
            opts.contour_ray_scale,
        )

        hit_edge, hit_point = _closest_hit(searchable, graph, spawn_position, ray)
        if hit_edge is None:
            raise RaycastMissError(spawn_position, target_point)

        component = _connected_component(hit_edge, edge_indices, adjacency, set(searchable))
        searchable = [e for e in searchable if e not in component]

        if not _is_reachable(reflect_y(hit_point), found):
            LOGGER.debug("Edge hit at %s lies outside walkable space, skipping its polygon", hit_point)
            continue

        a_idx, b_idx = edge_indices[hit_edge]
        # walk the hit edge so that walkable space (towards spawn) is on its rot90 side
        if cross_product(ray, subtract_points(vertices[b_idx], vertices[a_idx])) < 0:
            start = (a_idx, b_idx)
        else:
            start = (b_idx, a_idx)

        walked = _walk_boundary(start, vertices, edge_indices, adjacency)
        points = contour_remove_unused_verts(walked, opts.straight_angle_tol)
        reflected = [reflect_y(p) for p in points]
        is_outer_wall = winding_number(reflect_y(spawn_position), reflected) != 0
        found.append(TracedContour(points, reflected, is_outer_wall))

    LOGGER.debug(
        "Found %d contours (%d outer walls)",
        len(found),
        sum(1 for c in found if c.is_outer_wall),
    )
    return found


def detect_contours(
    graph: PlanarGraph,
    spawn_position: Point,
    options: Optional[MeshOptions] = None,
) -> List[Contour]:
    """Like :func:`trace_contours` but return bare point loops."""

    return [traced.points for traced in trace_contours(graph, spawn_position, options)]


def _pick_raycast_target(
    searchable: Sequence[int],
    graph: PlanarGraph,
    spawn: Point,
    eps: float,
) -> Optional[int]:
    for edge_idx in searchable:
        a_idx, b_idx = graph.edge_indices[edge_idx]
        if not points_are_collinear(spawn, graph.vertices[a_idx], graph.vertices[b_idx], eps):
            return edge_idx
    return None


def _closest_hit(
    searchable: Sequence[int],
    graph: PlanarGraph,
    origin: Point,
    ray: Point,
) -> Tuple[Optional[int], Optional[Point]]:
    best_edge: Optional[int] = None
    best_point: Optional[Point] = None
    best_dist = float("inf")
    for edge_idx in searchable:
        a_idx, b_idx = graph.edge_indices[edge_idx]
        a = graph.vertices[a_idx]
        hit = intersect_lines(origin, ray, a, subtract_points(graph.vertices[b_idx], a))
        if hit is None:
            continue
        dist = distance(origin, hit)
        if dist < best_dist:
            best_edge, best_point, best_dist = edge_idx, hit, dist
    return best_edge, best_point


def _connected_component(
    start_edge: int,
    edge_indices: Sequence[EdgeIndex],
    adjacency: Sequence[Sequence[int]],
    allowed: Set[int],
) -> Set[int]:
    seen: Set[int] = set()
    open_edges = [start_edge]
    while open_edges:
        edge_idx = open_edges.pop()
        if edge_idx in seen:
            continue
        seen.add(edge_idx)
        for v_idx in edge_indices[edge_idx]:
            open_edges.extend(e for e in adjacency[v_idx] if e in allowed and e not in seen)
    return seen


def _is_reachable(point_north_up: Point, found: Sequence[TracedContour]) -> bool:
    for contour in found:
        outside = winding_number(point_north_up, contour.reflected) == 0
        if contour.is_outer_wall and outside:
            return False
        if not contour.is_outer_wall and not outside:
            return False
    return True


def _walk_boundary(
    start: EdgeIndex,
    vertices: Sequence[Point],
    edge_indices: Sequence[EdgeIndex],
    adjacency: Sequence[Sequence[int]],
) -> Contour:
    """Follow the boundary from directed edge ``start`` until it repeats.

    At each vertex the next edge is the one with the smallest angle from
    the incoming direction; a dead end turns back along the same edge.
    """

    first, second = start
    contour = [vertices[first], vertices[second]]
    prev, cur = first, second
    max_steps = 2 * len(edge_indices) + 2

    for _ in range(max_steps):
        candidates: List[int] = []
        reverse_dropped = False
        for edge_idx in adjacency[cur]:
            a_idx, b_idx = edge_indices[edge_idx]
            other = b_idx if a_idx == cur else a_idx
            if other == prev and not reverse_dropped:
                reverse_dropped = True
                continue
            candidates.append(other)
        if not candidates:
            candidates.append(prev)

        incoming = subtract_points(vertices[cur], vertices[prev])
        nxt = min(
            candidates,
            key=lambda n: angle_between(incoming, subtract_points(vertices[cur], vertices[n])) % TWO_PI,
        )
        prev, cur = cur, nxt
        contour.append(vertices[cur])
        if prev == first and cur == second:
            del contour[-2:]
            return contour

    raise ContourWalkError(vertices[first], max_steps)


def contour_remove_unused_verts(contour: Sequence[Point], tolerance: float = 0.01) -> Contour:
    """Drop contour vertices that sit on a straight line between their neighbours."""

    count = len(contour)
    if count < 3:
        return list(contour)
    stripped: Contour = []
    for i in range(count):
        p1 = contour[(i - 1) % count]
        p2 = contour[i]
        p3 = contour[(i + 1) % count]
        angle = angle_between(subtract_points(p1, p2), subtract_points(p3, p2)) % TWO_PI
        if abs(angle - TWO_PI / 2) >= tolerance:
            stripped.append(p2)
    return stripped


__all__ = [
    "ContourWalkError",
    "RaycastMissError",
    "TracedContour",
    "contour_remove_unused_verts",
    "detect_contours",
    "trace_contours",
]
