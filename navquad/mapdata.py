"""Map data models, JSON loading and boundary validation.

A map document looks like::

    {"name": "winter_inn",
     "data": {"x_lines": [[x, y0, y1], ...], "y_lines": [[y, x0, x1], ...],
              "min_x": ..., "min_y": ..., "max_x": ..., "max_y": ...},
     "spawns": [[x, y], ...]}

``name`` is optional and defaults to the file stem.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Tuple, Union

from shapely.geometry import LineString, box
from shapely.geometry import Point as ShapelyPoint

LOGGER = logging.getLogger(__name__)

Line = Tuple[float, float, float]
"""A wall line: ``(x, y0, y1)`` for vertical walls, ``(y, x0, x1)`` for horizontal ones."""


class MapDataError(ValueError):
    """Raised when a map document is missing keys or has malformed values."""


@dataclass(slots=True)
class MapData:
    """Axis-aligned wall lines plus the map's bounding rectangle."""

    x_lines: List[Line] = field(default_factory=list)
    """Vertical walls as ``(x, y0, y1)``."""

    y_lines: List[Line] = field(default_factory=list)
    """Horizontal walls as ``(y, x0, x1)``."""

    min_x: float = 0
    min_y: float = 0
    max_x: float = 0
    max_y: float = 0

    @classmethod
    def from_json_dict(cls, payload: Any) -> "MapData":
        if not isinstance(payload, dict):
            raise MapDataError(f"map data must be an object; got {type(payload).__name__}")
        bounds: Dict[str, float] = {}
        for key in ("min_x", "min_y", "max_x", "max_y"):
            value = payload.get(key, 0)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise MapDataError(f"data.{key} must be a number; got {value!r}")
            bounds[key] = value
        return cls(
            x_lines=_parse_lines(payload.get("x_lines"), "x_lines"),
            y_lines=_parse_lines(payload.get("y_lines"), "y_lines"),
            **bounds,
        )

    def to_json_dict(self) -> Dict[str, Any]:
        return {
            "x_lines": [list(line) for line in self.x_lines],
            "y_lines": [list(line) for line in self.y_lines],
            "min_x": self.min_x,
            "min_y": self.min_y,
            "max_x": self.max_x,
            "max_y": self.max_y,
        }


@dataclass(slots=True)
class MapDocument:
    """A named map with its wall data and spawn points."""

    name: str
    data: MapData
    spawns: List[Tuple[float, float]] = field(default_factory=list)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_lines(payload: Any, source: str) -> List[Line]:
    if payload is None:
        raise MapDataError(f"data.{source} is required")
    if not isinstance(payload, list):
        raise MapDataError(f"data.{source} must be an array; got {type(payload).__name__}")
    lines: List[Line] = []
    for idx, item in enumerate(payload):
        if not isinstance(item, (list, tuple)) or len(item) != 3 or not all(_is_number(v) for v in item):
            raise MapDataError(f"data.{source}[{idx}] must be an array of three numbers; got {item!r}")
        lines.append((item[0], item[1], item[2]))
    return lines


def _parse_spawns(payload: Any) -> List[Tuple[float, float]]:
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise MapDataError(f"spawns must be an array; got {type(payload).__name__}")
    spawns: List[Tuple[float, float]] = []
    for idx, item in enumerate(payload):
        # spawn entries may carry a facing direction after the position
        if not isinstance(item, (list, tuple)) or len(item) < 2 or not all(_is_number(v) for v in item[:2]):
            raise MapDataError(f"spawns[{idx}] must start with two numbers; got {item!r}")
        spawns.append((item[0], item[1]))
    return spawns


def parse_map_document(payload: Any, default_name: str = "map") -> MapDocument:
    """Validate a decoded JSON map document and build a :class:`MapDocument`."""

    if not isinstance(payload, dict):
        raise MapDataError(f"map document must be an object; got {type(payload).__name__}")
    if "data" not in payload:
        raise MapDataError("map document is missing 'data'")
    name = payload.get("name") or default_name
    if not isinstance(name, str):
        raise MapDataError(f"name must be a string; got {name!r}")
    return MapDocument(
        name=name,
        data=MapData.from_json_dict(payload["data"]),
        spawns=_parse_spawns(payload.get("spawns")),
    )


def load_map_data(path: Union[str, Path]) -> MapDocument:
    """Read and validate a JSON map document from ``path``.

    Raises :class:`OSError` if the file cannot be read and
    :class:`MapDataError` if its content is malformed.
    """

    map_path = Path(path)
    text = map_path.read_text(encoding="utf-8")
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise MapDataError(f"Invalid JSON in {str(map_path)!r}: {exc}") from exc
    document = parse_map_document(payload, default_name=map_path.stem)
    LOGGER.debug(
        "Loaded map %s: %d x_lines, %d y_lines, %d spawns",
        document.name,
        len(document.data.x_lines),
        len(document.data.y_lines),
        len(document.spawns),
    )
    return document


def _line_geometry(a: Tuple[float, float], b: Tuple[float, float]):
    if a == b:
        return ShapelyPoint(a)
    return LineString([a, b])


def check_boundaries(name: str, data: MapData) -> List[Tuple[str, Line]]:
    """Return every wall line that leaves the map's bounding rectangle.

    Each offending line is logged at WARNING and returned as
    ``("x_line" | "y_line", line)``. Nothing is raised: maps with stray
    lines still mesh fine.
    """

    bounds = box(data.min_x, data.min_y, data.max_x, data.max_y)
    pretty_bounds = f"({data.min_x}, {data.min_y}), ({data.max_x}, {data.max_y})"
    issues: List[Tuple[str, Line]] = []
    for x, y0, y1 in data.x_lines:
        if not bounds.covers(_line_geometry((x, y0), (x, y1))):
            issues.append(("x_line", (x, y0, y1)))
    for y, x0, x1 in data.y_lines:
        if not bounds.covers(_line_geometry((x0, y), (x1, y))):
            issues.append(("y_line", (y, x0, x1)))
    for kind, line in issues:
        LOGGER.warning("[%s] Edge %s %s is outside map boundaries %s", name, kind, list(line), pretty_bounds)
    return issues


__all__ = [
    "Line",
    "MapData",
    "MapDataError",
    "MapDocument",
    "check_boundaries",
    "load_map_data",
    "parse_map_document",
]
