from navquad.api import generate_navmesh
from navquad.export import to_waveform_obj, to_waveform_obj_w_faces, write_contours_obj, write_waveform_obj
from navquad.geometry import Point


def test_to_waveform_obj_lines():
    text = to_waveform_obj([Point(0, 0), Point(1.5, 2)], [(0, 1)], "walls")
    assert text == "o walls\nv 0 0 0\nv 1.5 2 0\nl 1 2\n"


def test_to_waveform_obj_w_faces_is_one_indexed():
    vertices = [Point(92, 7), Point(8, 7), Point(8, 98), Point(92, 98)]
    text = to_waveform_obj_w_faces(vertices, [(1, 0)], [(0, 1, 2, 3)], "room")
    assert text.splitlines() == [
        "o room",
        "v 92 7 0",
        "v 8 7 0",
        "v 8 98 0",
        "v 92 98 0",
        "l 2 1",
        "f 1 2 3 4",
    ]


def test_write_waveform_obj(room_map, tmp_path):
    mesh = generate_navmesh(room_map, Point(50, 50))
    out = write_waveform_obj(tmp_path / "out" / "room.obj", mesh, "room")
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0] == "o room"
    assert sum(1 for line in lines if line.startswith("v ")) == 4
    assert sum(1 for line in lines if line.startswith("l ")) == 4
    assert sum(1 for line in lines if line.startswith("f ")) == 1


def test_write_contours_obj(tmp_path):
    contour = [Point(8, 98), Point(92, 98), Point(92, 7), Point(8, 7)]
    out = write_contours_obj(tmp_path / "contours.obj", [contour], "contours")
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[-4:] == ["l 1 2", "l 2 3", "l 3 4", "l 4 1"]
