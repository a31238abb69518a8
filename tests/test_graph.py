from navquad.geometry import Edge, Point
from navquad.graph import (
    build_adjacent_edges_list,
    contours_into_horiz_vert_edge_list,
    contours_into_vert_edge_list,
    remove_doubles,
)


def _room_edges():
    return [
        Edge(Point(0, 100), Point(100, 100)),
        Edge(Point(0, 0), Point(100, 0)),
        Edge(Point(0, 0), Point(0, 100)),
        Edge(Point(100, 0), Point(100, 100)),
    ]


def test_remove_doubles_merges_shared_corners():
    graph = remove_doubles(_room_edges())
    assert graph.vertices == [Point(0, 100), Point(100, 100), Point(0, 0), Point(100, 0)]
    assert graph.edge_indices == [(0, 1), (2, 3), (2, 0), (3, 1)]


def test_remove_doubles_is_idempotent():
    graph = remove_doubles(_room_edges())
    again = remove_doubles(graph.edges())
    assert again.vertices == graph.vertices
    assert again.edge_indices == graph.edge_indices


def test_remove_doubles_keeps_duplicate_edges():
    edge = Edge(Point(0, 0), Point(1, 0))
    graph = remove_doubles([edge, edge])
    assert len(graph.vertices) == 2
    assert graph.edge_indices == [(0, 1), (0, 1)]


def test_build_adjacent_edges_list():
    graph = remove_doubles(_room_edges())
    adjacency = build_adjacent_edges_list(len(graph.vertices), graph.edge_indices)
    assert adjacency == [[0, 2], [0, 3], [1, 2], [1, 3]]


def test_contours_into_vert_edge_list_closes_loops():
    contours = [[Point(0, 0), Point(5, 0), Point(5, 5)], [Point(9, 9)]]
    graph = contours_into_vert_edge_list(contours)
    assert graph.vertices == [Point(0, 0), Point(5, 0), Point(5, 5)]
    assert graph.edge_indices == [(0, 1), (1, 2), (2, 0)]


def test_contours_into_horiz_vert_edge_list_orders_edges():
    contour = [Point(92, 98), Point(92, 7), Point(8, 7), Point(8, 98)]
    horizontal, vertical = contours_into_horiz_vert_edge_list([contour])
    assert horizontal == [
        Edge(Point(8, 7), Point(92, 7)),
        Edge(Point(8, 98), Point(92, 98)),
    ]
    assert vertical == [
        Edge(Point(92, 7), Point(92, 98)),
        Edge(Point(8, 7), Point(8, 98)),
    ]
