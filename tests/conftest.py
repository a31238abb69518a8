# tests/conftest.py

import json

import pytest

from navquad.mapdata import MapData


ROOM_X_LINES = [(0, 0, 100), (100, 0, 100)]
ROOM_Y_LINES = [(0, 0, 100), (100, 0, 100)]


@pytest.fixture
def room_map():
    """A closed 100x100 room."""
    return MapData(
        x_lines=list(ROOM_X_LINES),
        y_lines=list(ROOM_Y_LINES),
        min_x=0,
        min_y=0,
        max_x=100,
        max_y=100,
    )


@pytest.fixture
def pillar_map():
    """The 100x100 room with a 20x20 pillar at (40..60, 40..60)."""
    return MapData(
        x_lines=ROOM_X_LINES + [(40, 40, 60), (60, 40, 60)],
        y_lines=ROOM_Y_LINES + [(40, 40, 60), (60, 40, 60)],
        min_x=0,
        min_y=0,
        max_x=100,
        max_y=100,
    )


@pytest.fixture
def write_map(tmp_path):
    """Write a map document to a JSON file and return its path."""

    def _write(data, spawns, name=None, filename="test_map.json"):
        payload = {"data": data.to_json_dict(), "spawns": [list(s) for s in spawns]}
        if name is not None:
            payload["name"] = name
        path = tmp_path / filename
        path.write_text(json.dumps(payload), encoding="utf-8")
        return path

    return _write
