"""Vertex-indexed planar graph construction and conversions."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Sequence, Tuple

from .geometry import Edge, Point

LOGGER = logging.getLogger(__name__)

EdgeIndex = Tuple[int, int]
"""An edge expressed as a pair of indices into a vertex list."""

Contour = List[Point]
"""A closed loop of points; the last point connects back to the first."""


@dataclass(slots=True)
class PlanarGraph:
    """Unique vertices plus edges expressed as index pairs into them."""

    vertices: List[Point] = field(default_factory=list)
    edge_indices: List[EdgeIndex] = field(default_factory=list)

    def edges(self) -> List[Edge]:
        """Return the edges as point pairs."""

        return [Edge(self.vertices[a], self.vertices[b]) for a, b in self.edge_indices]


def remove_doubles(edges: Iterable[Edge]) -> PlanarGraph:
    """Merge coincident endpoints into one vertex each.

    Endpoints are matched by exact coordinate, so they must already be
    canonical (integral). The output holds one index pair per input edge,
    in input order.
    """

    vertices: List[Point] = []
    index_of: Dict[Point, int] = {}
    edge_indices: List[EdgeIndex] = []

    def lookup(p: Point) -> int:
        idx = index_of.get(p)
        if idx is None:
            idx = len(vertices)
            index_of[p] = idx
            vertices.append(p)
        return idx

    for edge in edges:
        edge_indices.append((lookup(edge.p1), lookup(edge.p2)))

    LOGGER.debug("remove_doubles: %d edges share %d vertices", len(edge_indices), len(vertices))
    return PlanarGraph(vertices, edge_indices)


def build_adjacent_edges_list(vertex_count: int, edge_indices: Sequence[EdgeIndex]) -> List[List[int]]:
    """For every vertex, list the indices of the edges touching it.

    >>> build_adjacent_edges_list(3, [(0, 1), (1, 2)])
    [[0], [0, 1], [1]]
    """

    adjacency: List[List[int]] = [[] for _ in range(vertex_count)]
    for edge_idx, (a, b) in enumerate(edge_indices):
        adjacency[a].append(edge_idx)
        adjacency[b].append(edge_idx)
    return adjacency


def contours_into_vert_edge_list(contours: Iterable[Sequence[Point]]) -> PlanarGraph:
    """Flatten contours into a graph, one vertex per contour point.

    Contours with fewer than two points are skipped. No deduplication is
    performed; run :func:`remove_doubles` on :meth:`PlanarGraph.edges` for that.
    """

    vertices: List[Point] = []
    edge_indices: List[EdgeIndex] = []
    for contour in contours:
        if len(contour) <= 1:
            continue
        first_idx = len(vertices)
        vertices.append(contour[0])
        for point in contour[1:]:
            vertices.append(point)
            edge_indices.append((len(vertices) - 2, len(vertices) - 1))
        edge_indices.append((len(vertices) - 1, first_idx))
    return PlanarGraph(vertices, edge_indices)


def contours_into_horiz_vert_edge_list(contours: Iterable[Sequence[Point]]) -> Tuple[List[Edge], List[Edge]]:
    """Split contour edges into ``(horizontal, vertical)`` lists, each edge ordered ascending."""

    horizontal: List[Edge] = []
    vertical: List[Edge] = []
    for contour in contours:
        count = len(contour)
        for i in range(count):
            edge = Edge(contour[i], contour[(i + 1) % count])
            if edge.p1 == edge.p2:
                continue
            if edge.is_vertical:
                vertical.append(edge.sorted())
            else:
                horizontal.append(edge.sorted())
    return horizontal, vertical


__all__ = [
    "Contour",
    "EdgeIndex",
    "PlanarGraph",
    "build_adjacent_edges_list",
    "contours_into_horiz_vert_edge_list",
    "contours_into_vert_edge_list",
    "remove_doubles",
]
