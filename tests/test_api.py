import logging

import pytest
from shapely.geometry import Point as ShapelyPoint, box
from shapely.ops import unary_union

from navquad.api import generate_navmesh, run_pipeline
from navquad.geometry import Point
from navquad.options import CharacterOffsets, MeshOptions


def test_single_room_gives_one_inset_face(room_map):
    mesh = generate_navmesh(room_map, Point(50, 50))
    assert len(mesh.faces) == 1
    corners = mesh.face_points(0)
    assert corners == [Point(92, 7), Point(8, 7), Point(8, 98), Point(92, 98)]
    assert mesh.walkable_area == pytest.approx(84 * 91)


def test_spawn_may_be_a_tuple(room_map):
    mesh = generate_navmesh(room_map, (50, 50))
    assert len(mesh.faces) == 1


def test_pillar_face_is_suppressed(pillar_map):
    mesh = generate_navmesh(pillar_map, Point(20, 20))
    assert len(mesh.faces) == 8
    assert mesh.walkable_area == pytest.approx(84 * 91 - 36 * 29)

    polygons = mesh.face_polygons()
    # faces tile the walkable space without overlapping
    assert unary_union(polygons).area == pytest.approx(mesh.walkable_area)
    assert not any(poly.contains(ShapelyPoint(50, 50)) for poly in polygons)
    assert any(poly.contains(ShapelyPoint(20, 20)) for poly in polygons)


def test_faces_are_counter_clockwise_rectangles(pillar_map):
    mesh = generate_navmesh(pillar_map, Point(20, 20))
    for idx in range(len(mesh.faces)):
        top_right, top_left, bottom_left, bottom_right = mesh.face_points(idx)
        assert top_right.y == top_left.y
        assert bottom_left.y == bottom_right.y
        assert top_left.x == bottom_left.x
        assert top_right.x == bottom_right.x
        assert top_left.x < top_right.x
        assert top_left.y < bottom_left.y


def test_dangling_wall_is_walked_around(room_map):
    room_map.y_lines.append((50, 40, 60))
    mesh = generate_navmesh(room_map, Point(20, 20))
    assert len(mesh.faces) == 8
    assert mesh.walkable_area == pytest.approx(84 * 91 - 36 * 9)


def test_unreachable_walls_do_not_change_the_mesh(room_map):
    room_map.x_lines += [(200, 0, 20), (220, 0, 20)]
    room_map.y_lines += [(0, 200, 220), (20, 200, 220)]
    mesh = generate_navmesh(room_map, Point(50, 50))
    assert len(mesh.faces) == 1


def test_offsets_are_configurable(room_map):
    options = MeshOptions(offsets=CharacterOffsets(0, 0, 0))
    mesh = generate_navmesh(room_map, Point(50, 50), options)
    assert len(mesh.faces) == 1
    assert mesh.walkable_area == pytest.approx(100 * 100)


def test_run_pipeline_keeps_intermediate_contours(pillar_map):
    result = run_pipeline(pillar_map, Point(20, 20))
    assert len(result.contours) == 2
    assert len(result.inflated_contours) == 2
    assert "fill_quads_and_remove_doubles" in result.timings_ms
    assert result.mesh.metadata["spawn"] == [20, 20]
    assert result.mesh.metadata["options"]["offsets"] == {"horizontal": 8, "up": 2, "down": 7}


def test_summary_metrics_logged_at_info(room_map, caplog):
    with caplog.at_level(logging.INFO, logger="navquad.api"):
        generate_navmesh(room_map, Point(50, 50))
    assert "generate_navmesh metrics" in caplog.text
    assert "faces=1" in caplog.text


def test_to_json_dict(room_map):
    payload = generate_navmesh(room_map, Point(50, 50)).to_json_dict()
    assert len(payload["vertices"]) == 4
    assert len(payload["edges"]) == 4
    assert len(payload["faces"]) == 1
    assert "timings_ms" in payload["metadata"]


def test_corridor_between_two_pillars_stays_walkable(room_map):
    room_map.x_lines += [(20, 40, 60), (40, 40, 60), (60, 40, 60), (80, 40, 60)]
    room_map.y_lines += [(40, 20, 40), (60, 20, 40), (40, 60, 80), (60, 60, 80)]
    mesh = generate_navmesh(room_map, Point(10, 10))
    assert mesh.walkable_area == pytest.approx(84 * 91 - 2 * 36 * 29)

    corridor = box(48, 38, 52, 67)
    covered = unary_union(mesh.face_polygons()).intersection(corridor).area
    assert covered == pytest.approx(corridor.area)
