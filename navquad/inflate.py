"""Contour inflation by the character's collision footprint.

Every contour vertex is pushed away from the wall it sits on, along the
normals of its two incident edges. Because the footprint is anisotropic
(see :class:`~navquad.options.CharacterOffsets`), each normal is snapped to
its dominant cardinal direction and replaced by the matching offset.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from .geometry import Point, add_points, distance, dot_product, normalize, rot90, subtract_points
from .graph import Contour
from .options import CharacterOffsets, MeshOptions

LOGGER = logging.getLogger(__name__)


def direction_to_char_offset(direction: Point, offsets: CharacterOffsets) -> Point:
    """Map a unit direction to the footprint offset of its cardinal direction.

    East/west wins over north/south; anything not clearly west, east or
    north is treated as south.
    """

    if direction.x < -0.5:
        return Point(-offsets.horizontal, 0)
    if direction.x > 0.5:
        return Point(offsets.horizontal, 0)
    if direction.y < -0.5:
        return Point(0, -offsets.up)
    return Point(0, offsets.down)


def move_by_normal(v: Point, n: Point, offsets: CharacterOffsets) -> Point:
    return add_points(v, direction_to_char_offset(n, offsets))


def move_by_normals(v: Point, n1: Point, n2: Point, offsets: CharacterOffsets) -> Point:
    moved = add_points(v, direction_to_char_offset(n1, offsets))
    return add_points(moved, direction_to_char_offset(n2, offsets))


def create_inflated_points_by_vertices(
    v1: Point,
    v2: Point,
    v3: Point,
    offsets: CharacterOffsets,
) -> List[Point]:
    """Inflate ``v2``, the middle of three consecutive contour points.

    Returns one point for a straight run or a regular corner, and two points
    when the contour doubles back on itself (a 180 degree turn), so that the
    inflated outline wraps around the end of the wall.
    """

    n1 = rot90(normalize(subtract_points(v2, v1)))
    n2 = rot90(normalize(subtract_points(v3, v2)))
    dot = dot_product(n1, n2)
    if dot > 0.5:
        return [move_by_normal(v2, n1, offsets)]
    if dot < -0.5:
        n_halfway = rot90(n2)
        return [
            move_by_normals(v2, n1, n_halfway, offsets),
            move_by_normals(v2, n_halfway, n2, offsets),
        ]
    return [move_by_normals(v2, n1, n2, offsets)]


def _collapse_close_points(points: List[Point], eps: float) -> int:
    removed = 0
    for i in range(len(points) - 1, -1, -1):
        if distance(points[i], points[(i + 1) % len(points)]) < eps:
            del points[i]
            removed += 1
    return removed


def inflate_contour(contour: Sequence[Point], options: Optional[MeshOptions] = None) -> Contour:
    """Inflate a single contour; see :func:`inflate_contours`."""

    opts = options or MeshOptions()
    count = len(contour)
    inflated: Contour = []
    for i in range(count):
        inflated.extend(
            create_inflated_points_by_vertices(
                contour[i],
                contour[(i + 1) % count],
                contour[(i + 2) % count],
                opts.offsets,
            )
        )
    removed = _collapse_close_points(inflated, opts.collapse_eps)
    if removed:
        LOGGER.debug("Collapsed %d coincident points after inflating a %d-point contour", removed, count)
    return inflated


def inflate_contours(contours: Iterable[Sequence[Point]], options: Optional[MeshOptions] = None) -> List[Contour]:
    """Offset every contour away from its walls by the character footprint.

    The output point for input vertex ``i`` is emitted at position ``i + 1``
    (rotated by one), which is harmless for closed loops. Inflated loops may
    self-intersect; re-planarize them before tracing again.
    """

    result = [inflate_contour(contour, options) for contour in contours]
    LOGGER.debug("Inflated %d contours", len(result))
    return result


__all__ = [
    "create_inflated_points_by_vertices",
    "direction_to_char_offset",
    "inflate_contour",
    "inflate_contours",
    "move_by_normal",
    "move_by_normals",
]
