"""Waveform OBJ export for contours and navigation meshes.

The output is meant for eyeballing results in a 3D viewer: vertices are
placed on the ``z = 0`` plane, edges become ``l`` lines and faces ``f``
quads. Indices are 1-based as the format requires.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Sequence, Union

from .geometry import Point
from .graph import EdgeIndex, contours_into_vert_edge_list
from .mesh import Face, NavMesh

LOGGER = logging.getLogger(__name__)


def _format_number(value: float) -> str:
    # integral coordinates print without a decimal point
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _obj_lines(vertices: Sequence[Point], edge_indices: Iterable[EdgeIndex], object_name: str) -> List[str]:
    lines = [f"o {object_name}"]
    lines.extend(f"v {_format_number(p.x)} {_format_number(p.y)} 0" for p in vertices)
    lines.extend(f"l {a + 1} {b + 1}" for a, b in edge_indices)
    return lines


def to_waveform_obj(vertices: Sequence[Point], edge_indices: Iterable[EdgeIndex], object_name: str) -> str:
    """Serialize vertices and edges as a Waveform OBJ object."""

    return "\n".join(_obj_lines(vertices, edge_indices, object_name)) + "\n"


def to_waveform_obj_w_faces(
    vertices: Sequence[Point],
    edge_indices: Iterable[EdgeIndex],
    faces: Iterable[Face],
    object_name: str,
) -> str:
    """Like :func:`to_waveform_obj` but also emit quad faces."""

    lines = _obj_lines(vertices, edge_indices, object_name)
    lines.extend(f"f {a + 1} {b + 1} {c + 1} {d + 1}" for a, b, c, d in faces)
    return "\n".join(lines) + "\n"


def write_waveform_obj(path: Union[str, Path], mesh: NavMesh, object_name: str) -> Path:
    """Write ``mesh`` with its faces to ``path``, creating parent directories."""

    out_file = Path(path)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(
        to_waveform_obj_w_faces(mesh.vertices, mesh.edge_indices, mesh.faces, object_name),
        encoding="utf-8",
    )
    LOGGER.info("Wrote %d faces to %s", len(mesh.faces), out_file)
    return out_file


def write_contours_obj(path: Union[str, Path], contours: Iterable[Sequence[Point]], object_name: str) -> Path:
    """Write closed contour outlines to ``path`` as OBJ lines."""

    graph = contours_into_vert_edge_list(contours)
    out_file = Path(path)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    out_file.write_text(to_waveform_obj(graph.vertices, graph.edge_indices, object_name), encoding="utf-8")
    LOGGER.info("Wrote %d contour edges to %s", len(graph.edge_indices), out_file)
    return out_file


__all__ = ["to_waveform_obj", "to_waveform_obj_w_faces", "write_contours_obj", "write_waveform_obj"]
