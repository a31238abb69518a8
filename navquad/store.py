"""SQLite persistence for generated navigation meshes.

Faces are stored as shapely WKB polygons next to an SQLite R*Tree over
their bounding boxes, so point lookups only decode the few faces whose box
contains the query point.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from pathlib import Path
from typing import Optional, Union

from shapely import wkb
from shapely.geometry import Point as ShapelyPoint

from .geometry import Point
from .mesh import NavMesh

LOGGER = logging.getLogger(__name__)

CREATE_SCHEMA = """
PRAGMA journal_mode=WAL;

CREATE TABLE IF NOT EXISTS meta(
  key TEXT PRIMARY KEY,
  value TEXT
);

CREATE TABLE IF NOT EXISTS meshes(
  id INTEGER PRIMARY KEY,
  name TEXT NOT NULL UNIQUE,
  vertex_count INTEGER NOT NULL,
  edge_count INTEGER NOT NULL,
  face_count INTEGER NOT NULL,
  walkable_area REAL NOT NULL,
  metadata_json TEXT
);

CREATE TABLE IF NOT EXISTS vertices(
  mesh_id INTEGER NOT NULL,
  idx INTEGER NOT NULL,
  x REAL NOT NULL,
  y REAL NOT NULL,
  PRIMARY KEY(mesh_id, idx)
);

CREATE TABLE IF NOT EXISTS edges(
  mesh_id INTEGER NOT NULL,
  idx INTEGER NOT NULL,
  a INTEGER NOT NULL,
  b INTEGER NOT NULL,
  PRIMARY KEY(mesh_id, idx)
);

CREATE TABLE IF NOT EXISTS faces(
  id INTEGER PRIMARY KEY,
  mesh_id INTEGER NOT NULL,
  face_idx INTEGER NOT NULL,
  v0 INTEGER NOT NULL, v1 INTEGER NOT NULL, v2 INTEGER NOT NULL, v3 INTEGER NOT NULL,
  wkb BLOB NOT NULL,
  area REAL NOT NULL,
  minx REAL NOT NULL, miny REAL NOT NULL, maxx REAL NOT NULL, maxy REAL NOT NULL
);

-- RTree with (id, minx, maxx, miny, maxy)
CREATE VIRTUAL TABLE IF NOT EXISTS rtree_faces USING rtree(
  id, minx, maxx, miny, maxy
);

CREATE INDEX IF NOT EXISTS idx_faces_mesh ON faces(mesh_id);
"""


def ensure_output_db(path: Union[str, Path]) -> sqlite3.Connection:
    out = sqlite3.connect(str(path))
    out.executescript(CREATE_SCHEMA)
    out.commit()
    return out


def _mesh_id(conn: sqlite3.Connection, map_name: str) -> Optional[int]:
    row = conn.execute("SELECT id FROM meshes WHERE name=?", (map_name,)).fetchone()
    return int(row[0]) if row is not None else None


def delete_navmesh(conn: sqlite3.Connection, map_name: str) -> bool:
    """Remove a stored mesh and all of its rows. Returns ``False`` if absent."""

    mesh_id = _mesh_id(conn, map_name)
    if mesh_id is None:
        return False
    conn.execute("DELETE FROM rtree_faces WHERE id IN (SELECT id FROM faces WHERE mesh_id=?)", (mesh_id,))
    conn.execute("DELETE FROM faces WHERE mesh_id=?", (mesh_id,))
    conn.execute("DELETE FROM edges WHERE mesh_id=?", (mesh_id,))
    conn.execute("DELETE FROM vertices WHERE mesh_id=?", (mesh_id,))
    conn.execute("DELETE FROM meshes WHERE id=?", (mesh_id,))
    return True


def write_navmesh(conn: sqlite3.Connection, mesh: NavMesh, map_name: str) -> int:
    """Store ``mesh`` under ``map_name``, replacing any mesh of the same name.

    Returns the new mesh id.
    """

    with conn:
        if delete_navmesh(conn, map_name):
            LOGGER.info("Replacing stored navmesh %s", map_name)
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO meshes(name, vertex_count, edge_count, face_count, walkable_area, metadata_json) "
            "VALUES(?,?,?,?,?,?)",
            (
                map_name,
                len(mesh.vertices),
                len(mesh.edge_indices),
                len(mesh.faces),
                mesh.walkable_area,
                json.dumps(mesh.metadata) if mesh.metadata else None,
            ),
        )
        mesh_id = cur.lastrowid
        cur.executemany(
            "INSERT INTO vertices(mesh_id, idx, x, y) VALUES(?,?,?,?)",
            [(mesh_id, idx, p.x, p.y) for idx, p in enumerate(mesh.vertices)],
        )
        cur.executemany(
            "INSERT INTO edges(mesh_id, idx, a, b) VALUES(?,?,?,?)",
            [(mesh_id, idx, a, b) for idx, (a, b) in enumerate(mesh.edge_indices)],
        )
        for face_idx, face in enumerate(mesh.faces):
            geom = mesh.face_polygon(face_idx)
            minx, miny, maxx, maxy = geom.bounds
            cur.execute(
                "INSERT INTO faces(mesh_id, face_idx, v0, v1, v2, v3, wkb, area, minx, miny, maxx, maxy) "
                "VALUES(?,?,?,?,?,?,?,?,?,?,?,?)",
                (mesh_id, face_idx, *face, sqlite3.Binary(wkb.dumps(geom)), float(geom.area), minx, miny, maxx, maxy),
            )
            cur.execute(
                "INSERT INTO rtree_faces(id,minx,maxx,miny,maxy) VALUES(?,?,?,?,?)",
                (cur.lastrowid, minx, maxx, miny, maxy),
            )
    LOGGER.info(
        "Stored navmesh %s: %d vertices, %d edges, %d faces",
        map_name,
        len(mesh.vertices),
        len(mesh.edge_indices),
        len(mesh.faces),
    )
    return int(mesh_id)


def load_navmesh(conn: sqlite3.Connection, map_name: str) -> Optional[NavMesh]:
    """Read a stored mesh back, or ``None`` if no mesh has that name."""

    row = conn.execute("SELECT id, metadata_json FROM meshes WHERE name=?", (map_name,)).fetchone()
    if row is None:
        return None
    mesh_id, metadata_json = row
    vertices = [
        Point(x, y)
        for x, y in conn.execute("SELECT x, y FROM vertices WHERE mesh_id=? ORDER BY idx", (mesh_id,))
    ]
    edge_indices = [
        (int(a), int(b))
        for a, b in conn.execute("SELECT a, b FROM edges WHERE mesh_id=? ORDER BY idx", (mesh_id,))
    ]
    faces = [
        (int(v0), int(v1), int(v2), int(v3))
        for v0, v1, v2, v3 in conn.execute(
            "SELECT v0, v1, v2, v3 FROM faces WHERE mesh_id=? ORDER BY face_idx", (mesh_id,)
        )
    ]
    metadata = json.loads(metadata_json) if metadata_json else {}
    return NavMesh(vertices=vertices, edge_indices=edge_indices, faces=faces, metadata=metadata)


def find_face_containing_point(conn: sqlite3.Connection, map_name: str, x: float, y: float) -> Optional[int]:
    """Return the index of the stored face covering ``(x, y)``, if any.

    Points on a shared face boundary resolve to the lowest face index.
    """

    mesh_id = _mesh_id(conn, map_name)
    if mesh_id is None:
        return None
    pt = ShapelyPoint(float(x), float(y))
    # RTree coarse filter
    rows = conn.execute(
        """
        SELECT f.face_idx, f.wkb
        FROM rtree_faces AS r
        JOIN faces AS f ON f.id = r.id
        WHERE f.mesh_id = ?
          AND r.minx <= ? AND r.maxx >= ?
          AND r.miny <= ? AND r.maxy >= ?
        ORDER BY f.face_idx
        """,
        (mesh_id, pt.x, pt.x, pt.y, pt.y),
    ).fetchall()
    for face_idx, wkb_bytes in rows:
        if wkb.loads(bytes(wkb_bytes)).covers(pt):
            return int(face_idx)
    return None


__all__ = [
    "CREATE_SCHEMA",
    "delete_navmesh",
    "ensure_output_db",
    "find_face_containing_point",
    "load_navmesh",
    "write_navmesh",
]
