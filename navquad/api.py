"""Public API for navquad mesh generation.

Exposes `generate_navmesh(map_data, from_position, options=None)` which
runs the full wall-lines-to-quads pipeline, logs per-stage timings at DEBUG
and summary metrics at INFO, and returns a `NavMesh`.
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar, Union

from .contours import detect_contours
from .geometry import Point
from .graph import Contour, contours_into_horiz_vert_edge_list, remove_doubles
from .inflate import inflate_contours
from .mapdata import MapData
from .mesh import NavMesh
from .options import MeshOptions
from .planarize import intersect_and_cut, xylines_to_edges
from .quads import contours_raycast_edges, fill_quads_and_remove_doubles

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")

Position = Union[Point, Tuple[float, float], Sequence[float]]


@dataclass(slots=True)
class PipelineResult:
    """Every intermediate product of interest from one pipeline run."""

    contours: List[Contour]
    """Wall contours traced from the raw map lines."""

    inflated_contours: List[Contour]
    """Contours of the inflated, re-planarized walls (walkable boundary)."""

    mesh: NavMesh
    """The final quad mesh."""

    timings_ms: Dict[str, float] = field(default_factory=dict)
    """Wall-clock duration of every stage in milliseconds."""


def _as_point(position: Position) -> Point:
    if isinstance(position, Point):
        return position
    x, y = position[0], position[1]
    return Point(x, y)


def _timed(stage: str, timings: Dict[str, float], fn: Callable[..., T], *args) -> T:
    t0_ns = time.perf_counter_ns()
    result = fn(*args)
    duration_ms = (time.perf_counter_ns() - t0_ns) / 1_000_000
    timings[stage] = duration_ms
    LOGGER.debug("stage %s took %.3f ms", stage, duration_ms)
    return result


def run_pipeline(
    map_data: MapData,
    from_position: Position,
    options: Optional[MeshOptions] = None,
) -> PipelineResult:
    """Run every stage and keep the intermediate contours.

    The walls are planarized and traced, inflated by the character
    footprint, planarized and traced again (inflation may make contours
    overlap), and finally cut into quads.
    """

    opts = options or MeshOptions()
    spawn = _as_point(from_position)
    timings: Dict[str, float] = {}
    t0_ns = time.perf_counter_ns()

    horizontal, vertical = _timed("xylines_to_edges", timings, xylines_to_edges, map_data)
    edges = _timed("intersect_and_cut", timings, intersect_and_cut, horizontal, vertical)
    graph = _timed("remove_doubles", timings, remove_doubles, edges)
    contours = _timed("detect_contours", timings, detect_contours, graph, spawn, opts)
    inflated = _timed("inflate_contours", timings, inflate_contours, contours, opts)

    horizontal2, vertical2 = _timed(
        "contours_into_horiz_vert_edge_list", timings, contours_into_horiz_vert_edge_list, inflated
    )
    inflated_edges = _timed("intersect_and_cut_inflated", timings, intersect_and_cut, horizontal2, vertical2)
    graph2 = _timed("remove_doubles_inflated", timings, remove_doubles, inflated_edges)
    inflated_contours = _timed("detect_contours_inflated", timings, detect_contours, graph2, spawn, opts)

    cut_contours, internal_edges = _timed(
        "contours_raycast_edges", timings, contours_raycast_edges, inflated_contours, opts
    )
    mesh = _timed(
        "fill_quads_and_remove_doubles", timings, fill_quads_and_remove_doubles, cut_contours, internal_edges
    )

    duration_ms = (time.perf_counter_ns() - t0_ns) / 1_000_000
    mesh.metadata = {
        "spawn": [spawn.x, spawn.y],
        "timings_ms": dict(timings),
        "duration_ms": duration_ms,
        "options": opts.to_json_dict(),
    }

    # Summary metrics
    LOGGER.info(
        "generate_navmesh metrics: spawn=%s contours=%d inflated_contours=%d vertices=%d edges=%d faces=%d duration_ms=%d",
        (spawn.x, spawn.y),
        len(contours),
        len(inflated_contours),
        len(mesh.vertices),
        len(mesh.edge_indices),
        len(mesh.faces),
        int(duration_ms),
    )
    return PipelineResult(contours=contours, inflated_contours=inflated_contours, mesh=mesh, timings_ms=timings)


def generate_navmesh(
    map_data: MapData,
    from_position: Position,
    options: Optional[MeshOptions] = None,
) -> NavMesh:
    """Generate the navigation mesh of the area reachable from ``from_position``.

    - Walls not reachable from ``from_position`` are ignored
    - Every face is an axis-aligned quad of walkable space
    - Faces are ordered top-right, top-left, bottom-left, bottom-right
    """

    return run_pipeline(map_data, from_position, options).mesh


__all__ = ["PipelineResult", "generate_navmesh", "run_pipeline"]
