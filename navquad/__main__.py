"""Command-line interface for navquad mesh generation.

Usage examples:
  python -m navquad maps/winter_inn.json --json
  python -m navquad maps/winter_inn.json --spawn "120,-40" --obj out/winter_inn.obj
  python -m navquad maps/winter_inn.json --sqlite navmesh.db --check-bounds
"""
from __future__ import annotations

import argparse
import json
import logging
import sqlite3
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .api import PipelineResult, run_pipeline
from .export import write_contours_obj, write_waveform_obj
from .geometry import GeometryInvariantError, Point
from .mapdata import MapDataError, MapDocument, check_boundaries, load_map_data
from .options import MeshOptions
from .store import ensure_output_db, write_navmesh

LOGGER = logging.getLogger(__name__)


def _parse_point(value: str) -> Tuple[float, float]:
    try:
        parts = [float(p.strip()) for p in value.split(",")]
        if len(parts) != 2:
            raise ValueError
        return (parts[0], parts[1])
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Expected point in form 'x,y', got: {value!r}") from exc


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="navquad",
        description="Generate a quad navigation mesh from axis-aligned map walls",
    )

    p.add_argument("map", type=str, help="Path to a map JSON document")

    # Reference position
    p.add_argument("--spawn-index", type=int, default=0, help="Index into the map's spawns list (default 0)")
    p.add_argument("--spawn", type=_parse_point, default=None, help="Explicit reference position x,y (overrides --spawn-index)")

    # IO
    p.add_argument("--name", type=str, default=None, help="Object/mesh name (defaults to the map name)")
    p.add_argument("--obj", type=str, default=None, help="Write the mesh as Waveform OBJ to this path")
    p.add_argument("--contours-obj", type=str, default=None, help="Write the inflated contours as Waveform OBJ to this path")
    p.add_argument("--sqlite", type=str, default=None, help="Store the mesh in this SQLite database")
    p.add_argument("--json", action="store_true", help="Output the mesh as JSON")
    p.add_argument("--out", "--output", dest="out_path", type=str, default=None, help="Write output to file instead of stdout")
    p.add_argument("--check-bounds", action="store_true", help="Warn about wall lines outside the map boundaries")

    # Geometry overrides
    p.add_argument("--h-offset", type=int, default=None, help="Horizontal collision offset")
    p.add_argument("--up-offset", type=int, default=None, help="Upward (-y) collision offset")
    p.add_argument("--down-offset", type=int, default=None, help="Downward (+y) collision offset")
    p.add_argument("--ray-length", type=float, default=None, help="Length of rays cast by the quad mesher")

    # Logging
    p.add_argument("--log-level", default="INFO", choices=["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"], help="Logging level")

    return p


def _options_from_args(args: argparse.Namespace) -> MeshOptions:
    opts = MeshOptions()

    # Footprint
    if args.h_offset is not None:
        opts.offsets.horizontal = args.h_offset
    if args.up_offset is not None:
        opts.offsets.up = args.up_offset
    if args.down_offset is not None:
        opts.offsets.down = args.down_offset
    for name in ("horizontal", "up", "down"):
        if getattr(opts.offsets, name) < 0:
            raise ValueError(f"{name} offset must not be negative")

    if args.ray_length is not None:
        if args.ray_length <= 0:
            raise ValueError("--ray-length must be positive")
        opts.quad_ray_length = args.ray_length

    return opts


def _resolve_spawn(document: MapDocument, explicit: Optional[Tuple[float, float]], index: int) -> Point:
    if explicit is not None:
        return Point(*explicit)
    if not document.spawns:
        raise ValueError(f"map {document.name!r} has no spawns; pass --spawn x,y")
    if not 0 <= index < len(document.spawns):
        raise ValueError(f"--spawn-index {index} out of range; map {document.name!r} has {len(document.spawns)} spawns")
    return Point(*document.spawns[index])


def _format_human(name: str, result: PipelineResult, boundary_issues: Optional[int]) -> str:
    mesh = result.mesh
    spawn = mesh.metadata.get("spawn", [])
    lines = [
        f"map: {name}",
        f"spawn: {spawn}",
        f"contours: {len(result.contours)}",
        f"inflated_contours: {len(result.inflated_contours)}",
        f"vertices: {len(mesh.vertices)}",
        f"edges: {len(mesh.edge_indices)}",
        f"faces: {len(mesh.faces)}",
        f"walkable_area: {mesh.walkable_area:g}",
        f"duration_ms: {int(mesh.metadata.get('duration_ms', 0))}",
    ]
    if boundary_issues is not None:
        lines.append(f"boundary_issues: {boundary_issues}")
    return "\n".join(lines) + "\n"


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=getattr(logging, args.log_level))

    try:
        options = _options_from_args(args)
        document = load_map_data(args.map)
        spawn = _resolve_spawn(document, args.spawn, args.spawn_index)
    except (MapDataError, OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    name = args.name or document.name
    boundary_issues: Optional[int] = None
    if args.check_bounds:
        boundary_issues = len(check_boundaries(name, document.data))

    try:
        result = run_pipeline(document.data, spawn, options)
    except GeometryInvariantError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    try:
        if args.obj:
            write_waveform_obj(args.obj, result.mesh, name)
        if args.contours_obj:
            write_contours_obj(args.contours_obj, result.inflated_contours, name)
        if args.sqlite:
            conn = ensure_output_db(args.sqlite)
            try:
                write_navmesh(conn, result.mesh, name)
            finally:
                conn.close()
    except (OSError, sqlite3.Error) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if args.json:
        payload: Dict[str, Any] = {"name": name, **result.mesh.to_json_dict()}
        if boundary_issues is not None:
            payload["boundary_issues"] = boundary_issues
        out_text = json.dumps(payload, separators=(",", ":"), indent=2) + "\n"
    else:
        out_text = _format_human(name, result, boundary_issues)

    if getattr(args, "out_path", None):
        out_file = Path(args.out_path)
        out_file.parent.mkdir(parents=True, exist_ok=True)
        out_file.write_text(out_text, encoding="utf-8")
    else:
        print(out_text, end="")

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
