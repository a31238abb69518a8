import json
import sqlite3

from navquad.__main__ import main


def test_human_output(room_map, write_map, capsys):
    path = write_map(room_map, [(50, 50)], name="room")
    assert main([str(path), "--log-level", "WARNING"]) == 0
    out = capsys.readouterr().out
    assert "map: room" in out
    assert "faces: 1" in out
    assert "walkable_area: 7644" in out


def test_json_output_to_file(pillar_map, write_map, tmp_path):
    path = write_map(pillar_map, [(20, 20)], name="pillar")
    out_path = tmp_path / "out" / "mesh.json"
    assert main([str(path), "--json", "--out", str(out_path), "--log-level", "WARNING"]) == 0
    payload = json.loads(out_path.read_text(encoding="utf-8"))
    assert payload["name"] == "pillar"
    assert len(payload["faces"]) == 8


def test_explicit_spawn_and_offsets(room_map, write_map, capsys):
    path = write_map(room_map, [], name="room")
    argv = [str(path), "--spawn", "50,50", "--h-offset", "0", "--up-offset", "0", "--down-offset", "0", "--json"]
    assert main(argv) == 0
    payload = json.loads(capsys.readouterr().out)
    assert len(payload["faces"]) == 1
    assert payload["metadata"]["options"]["offsets"] == {"horizontal": 0, "up": 0, "down": 0}


def test_writes_obj_and_sqlite(room_map, write_map, tmp_path):
    path = write_map(room_map, [(50, 50)], name="room")
    obj_path = tmp_path / "room.obj"
    contours_path = tmp_path / "contours.obj"
    db_path = tmp_path / "navmesh.db"
    argv = [
        str(path),
        "--obj", str(obj_path),
        "--contours-obj", str(contours_path),
        "--sqlite", str(db_path),
        "--name", "custom",
    ]
    assert main(argv) == 0
    assert obj_path.read_text(encoding="utf-8").startswith("o custom\n")
    assert contours_path.exists()
    conn = sqlite3.connect(str(db_path))
    try:
        assert conn.execute("SELECT name, face_count FROM meshes").fetchall() == [("custom", 1)]
    finally:
        conn.close()


def test_check_bounds_reports_count(room_map, write_map, capsys):
    room_map.x_lines.append((150, 0, 10))
    path = write_map(room_map, [(50, 50)], name="room")
    assert main([str(path), "--check-bounds"]) == 0
    assert "boundary_issues: 1" in capsys.readouterr().out


def test_missing_map_file_exits_2(tmp_path, capsys):
    assert main([str(tmp_path / "missing.json")]) == 2
    assert capsys.readouterr().err.startswith("Error:")


def test_spawn_index_out_of_range_exits_2(room_map, write_map, capsys):
    path = write_map(room_map, [(50, 50)])
    assert main([str(path), "--spawn-index", "3"]) == 2
    assert "out of range" in capsys.readouterr().err


def test_map_without_spawns_needs_explicit_spawn(room_map, write_map, capsys):
    path = write_map(room_map, [])
    assert main([str(path)]) == 2
    assert "no spawns" in capsys.readouterr().err


def test_invalid_ray_length_exits_2(room_map, write_map, capsys):
    path = write_map(room_map, [(50, 50)])
    assert main([str(path), "--ray-length", "-1"]) == 2
    assert "--ray-length" in capsys.readouterr().err


def test_sqlite_path_that_is_not_a_database_exits_2(room_map, write_map, tmp_path, capsys):
    path = write_map(room_map, [(50, 50)])
    not_a_db = tmp_path / "notes.db"
    not_a_db.write_text("plain text, not a database\n" * 64, encoding="utf-8")
    assert main([str(path), "--sqlite", str(not_a_db)]) == 2
    assert capsys.readouterr().err.startswith("Error:")
