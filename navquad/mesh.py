"""Navigation mesh result model.

A :class:`NavMesh` is plain data: vertices, index-pair edges and index
quadruple faces, so it serializes through :meth:`NavMesh.to_json_dict`
without loss. Shapely views of the faces are built on demand.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Tuple

from shapely.geometry import Polygon

from .geometry import Point
from .graph import EdgeIndex

Face = Tuple[int, int, int, int]
"""Vertex indices of a quad ordered top-right, top-left, bottom-left, bottom-right."""


@dataclass(slots=True)
class NavMesh:
    """Walkable-space mesh produced by :func:`navquad.api.generate_navmesh`."""

    vertices: List[Point] = field(default_factory=list)
    """Unique mesh vertices in map units."""

    edge_indices: List[EdgeIndex] = field(default_factory=list)
    """Mesh edges as index pairs, each ordered ascending along its varying axis."""

    faces: List[Face] = field(default_factory=list)
    """Walkable quads; faces covering a hole are never present."""

    metadata: Dict[str, Any] = field(default_factory=dict)
    """Free-form run information (stage timings, options used)."""

    def face_points(self, face_idx: int) -> List[Point]:
        return [self.vertices[i] for i in self.faces[face_idx]]

    def face_polygon(self, face_idx: int) -> Polygon:
        """Return face ``face_idx`` as a shapely polygon."""

        return Polygon([(p.x, p.y) for p in self.face_points(face_idx)])

    def face_polygons(self) -> List[Polygon]:
        return [self.face_polygon(i) for i in range(len(self.faces))]

    def face_area(self, face_idx: int) -> float:
        return float(self.face_polygon(face_idx).area)

    @property
    def walkable_area(self) -> float:
        """Total area covered by all faces."""

        return float(sum(poly.area for poly in self.face_polygons()))

    def to_json_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation."""

        payload: Dict[str, Any] = {
            "vertices": [[p.x, p.y] for p in self.vertices],
            "edges": [list(e) for e in self.edge_indices],
            "faces": [list(f) for f in self.faces],
        }
        if self.metadata:
            payload["metadata"] = self.metadata
        return payload


__all__ = ["Face", "NavMesh"]
