"""Segment planarization: turn raw wall lines into a conflict-free edge set.

Four kinds of contact are possible between axis-aligned wall edges:

1. aligned overlap ``0--1==2--3``: split into at most three edges,
2. V-V touching (shared endpoint): left alone,
3. V-E touching (an endpoint lies on the other edge's interior): the touched
   edge is split in two,
4. E-E crossing: both edges are split at the crossing point.

After :func:`intersect_and_cut` no two edges overlap and every contact point
is an endpoint of every edge passing through it.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Sequence, Tuple

from .geometry import Axis, Edge, Point

LOGGER = logging.getLogger(__name__)


def xylines_to_edges(map_data) -> Tuple[List[Edge], List[Edge]]:
    """Unpack map wall lines into ``(horizontal, vertical)`` edge lists.

    ``x_lines`` hold vertical walls as ``(x, y0, y1)`` and ``y_lines`` hold
    horizontal walls as ``(y, x0, x1)``. Every edge is returned ordered
    ascending along its varying axis. Zero-length lines are dropped.
    """

    horizontal: List[Edge] = []
    vertical: List[Edge] = []
    for x, y0, y1 in map_data.x_lines:
        if y0 == y1:
            LOGGER.warning("Dropping zero-length x_line %s", (x, y0, y1))
            continue
        vertical.append(Edge(Point(x, y0), Point(x, y1)).sorted())
    for y, x0, x1 in map_data.y_lines:
        if x0 == x1:
            LOGGER.warning("Dropping zero-length y_line %s", (y, x0, x1))
            continue
        horizontal.append(Edge(Point(x0, y), Point(x1, y)).sorted())
    return horizontal, vertical


def group_by_one_axis(edges: Sequence[Edge], axis: Axis) -> Iterator[Tuple[int, int]]:
    """Yield ``(start, stop)`` slices of consecutive edges sharing ``p1`` on ``axis``.

    ``edges`` must already be sorted by that coordinate.
    """

    if not edges:
        return
    last_value = edges[0].p1.along(axis)
    last_idx = 0
    for i in range(1, len(edges)):
        value = edges[i].p1.along(axis)
        if value != last_value:
            yield last_idx, i
            last_idx = i
            last_value = value
    yield last_idx, len(edges)


def _warn_unordered(edges: Sequence[Edge], axis: Axis) -> None:
    kind = "Horizontal" if axis is Axis.X else "Vertical"
    for edge in edges:
        if not edge.p1.along(axis) < edge.p2.along(axis):
            LOGGER.warning(
                "%s edge %s->%s not internally ordered, intersection test might fail",
                kind,
                edge.p1,
                edge.p2,
            )


def cut_aligned_edges(edges: Sequence[Edge], fixed_axis: Axis) -> List[Edge]:
    """Split overlapping collinear edges so that no two of them overlap.

    ``edges`` must all be parallel (constant ``fixed_axis`` coordinate per
    edge) and sorted by that coordinate. Duplicated endpoints are merged.
    """

    varying = fixed_axis.other
    processed: List[Edge] = []
    for start, stop in group_by_one_axis(edges, fixed_axis):
        unchecked = list(edges[start:stop])
        checked: List[Edge] = []
        while len(unchecked) > 1:
            e0 = unchecked.pop()
            e0_min = e0.p1.along(varying)
            e0_max = e0.p2.along(varying)
            for e1_idx, e1 in enumerate(unchecked):
                e1_min = e1.p1.along(varying)
                e1_max = e1.p2.along(varying)
                if e1_min >= e0_max or e0_min >= e1_max:
                    continue
                del unchecked[e1_idx]
                corners = sorted((e0.p1, e0.p2, e1.p1, e1.p2), key=lambda p: p.along(varying))
                for a, b in zip(corners, corners[1:]):
                    if a.along(varying) == b.along(varying):
                        continue
                    unchecked.append(Edge(a, b))
                break
            else:
                checked.append(e0)
        checked.extend(unchecked)
        processed.extend(checked)
    return processed


def intersect_and_cut(horizontal_edges: Sequence[Edge], vertical_edges: Sequence[Edge]) -> List[Edge]:
    """Resolve every overlap and crossing between the given wall edges.

    Both inputs must hold edges ordered ascending along their varying axis
    (unordered edges are logged). The inputs are not modified. Returns the
    resolved horizontal edges followed by the resolved vertical edges.
    """

    _warn_unordered(horizontal_edges, Axis.X)
    _warn_unordered(vertical_edges, Axis.Y)

    horizontal = sorted(horizontal_edges, key=lambda e: e.p1.y)
    vertical = sorted(vertical_edges, key=lambda e: e.p1.x)

    working_h = cut_aligned_edges(horizontal, Axis.Y)
    working_v = cut_aligned_edges(vertical, Axis.X)

    _warn_unordered(working_h, Axis.X)
    _warn_unordered(working_v, Axis.Y)

    # Only perpendicular contacts remain: check every horizontal edge against
    # every vertical edge, re-queueing split pieces.
    processed_h: List[Edge] = []
    while working_h:
        edge_h = working_h.pop()
        y = edge_h.p1.y
        for v_idx, edge_v in enumerate(working_v):
            x = edge_v.p1.x
            if not (edge_v.p1.y <= y <= edge_v.p2.y and edge_h.p1.x <= x <= edge_h.p2.x):
                continue
            crossing = Point(x, y)
            on_h_end = crossing == edge_h.p1 or crossing == edge_h.p2
            on_v_end = crossing == edge_v.p1 or crossing == edge_v.p2
            if on_h_end and on_v_end:
                continue

            if on_v_end:
                # vertical edge ends on the horizontal edge's interior
                working_h.append(Edge(edge_h.p1, crossing))
                working_h.append(Edge(crossing, edge_h.p2))
            elif on_h_end:
                working_h.append(edge_h)
                del working_v[v_idx]
                working_v.append(Edge(edge_v.p1, crossing))
                working_v.append(Edge(crossing, edge_v.p2))
            else:
                del working_v[v_idx]
                working_h.append(Edge(edge_h.p1, crossing))
                working_h.append(Edge(crossing, edge_h.p2))
                working_v.append(Edge(edge_v.p1, crossing))
                working_v.append(Edge(crossing, edge_v.p2))
            break
        else:
            processed_h.append(edge_h)

    LOGGER.debug(
        "intersect_and_cut: %d+%d edges in, %d+%d edges out",
        len(horizontal_edges),
        len(vertical_edges),
        len(processed_h),
        len(working_v),
    )
    return processed_h + working_v


__all__ = ["cut_aligned_edges", "group_by_one_axis", "intersect_and_cut", "xylines_to_edges"]
