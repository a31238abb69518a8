"""Mesh generation configuration data models for navquad."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

DEFAULT_H_OFFSET = 8
DEFAULT_UP_OFFSET = 2
DEFAULT_DOWN_OFFSET = 7
DEFAULT_CONTOUR_RAY_SCALE = 100_000
DEFAULT_QUAD_RAY_LENGTH = 10_000
DEFAULT_COLLINEAR_EPS = 1e-4
DEFAULT_STRAIGHT_ANGLE_TOL = 0.01
DEFAULT_COLLAPSE_EPS = 1e-4
DEFAULT_CUT_MARGIN = 0.1


@dataclass(slots=True)
class CharacterOffsets:
    """Collision footprint of the walking character, in map units.

    Walls are pushed away from walkable space by these amounts. The
    footprint is not square: characters are taller below their anchor than
    above it.
    """

    horizontal: int = DEFAULT_H_OFFSET
    """Offset applied when a wall normal points east or west."""

    up: int = DEFAULT_UP_OFFSET
    """Offset applied when a wall normal points north (towards ``-y``)."""

    down: int = DEFAULT_DOWN_OFFSET
    """Offset applied when a wall normal points south (towards ``+y``)."""

    def to_json_dict(self) -> Dict[str, int]:
        return {"horizontal": self.horizontal, "up": self.up, "down": self.down}


@dataclass(slots=True)
class MeshOptions:
    """Tunable constants for a navmesh generation run.

    The defaults reproduce the reference collision model and tolerances.
    Everything here is plain data so the structure round-trips through
    :meth:`to_json_dict` without loss.
    """

    offsets: CharacterOffsets = field(default_factory=CharacterOffsets)
    """Inflation margins used by the contour inflator."""

    contour_ray_scale: float = DEFAULT_CONTOUR_RAY_SCALE
    """Length of the spawn-point ray cast by the contour tracer."""

    quad_ray_length: float = DEFAULT_QUAD_RAY_LENGTH
    """Length of the inward rays cast from contour vertices by the quad mesher."""

    collinear_eps: float = DEFAULT_COLLINEAR_EPS
    """Tolerance for treating a raycast target edge as collinear with spawn."""

    straight_angle_tol: float = DEFAULT_STRAIGHT_ANGLE_TOL
    """Angular tolerance (radians) under which a contour vertex counts as straight."""

    collapse_eps: float = DEFAULT_COLLAPSE_EPS
    """Distance under which two adjacent inflated points are merged."""

    cut_margin: float = DEFAULT_CUT_MARGIN
    """Amount each contour edge span is narrowed by before matching ray endpoints."""

    def to_json_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation."""

        return {
            "offsets": self.offsets.to_json_dict(),
            "contour_ray_scale": self.contour_ray_scale,
            "quad_ray_length": self.quad_ray_length,
            "collinear_eps": self.collinear_eps,
            "straight_angle_tol": self.straight_angle_tol,
            "collapse_eps": self.collapse_eps,
            "cut_margin": self.cut_margin,
        }
