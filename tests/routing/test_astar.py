# tests/routing/test_astar.py
import numpy as np
import pytest

from bearmaps.domain.entities.geography import Point
from bearmaps.domain.graph import RoadGraph
from bearmaps.routing.astar import great_circle_heuristic, path_length, search, shortest_path
from bearmaps.routing.heap import IndexedHeap
from bearmaps.routing.routers import DijkstraRouter, NetworkRouter


def _graph(coords: dict[int, tuple[float, float]], edges) -> RoadGraph:
    g = RoadGraph()
    for vid, (lon, lat) in coords.items():
        g.add_vertex(vid, lon, lat)
    for a, b in edges:
        g.add_edge(a, b)
    return g


@pytest.fixture
def detour_graph() -> RoadGraph:
    # 1 -> 4 either straight along the equator in three hops (short)
    # or via a two-hop detour north through 5 (long).
    coords = {
        1: (0.00, 0.0),
        2: (0.01, 0.0),
        3: (0.02, 0.0),
        4: (0.03, 0.0),
        5: (0.015, 0.02),
    }
    return _graph(coords, [(1, 2), (2, 3), (3, 4), (1, 5), (5, 4)])


def _grid(n: int = 8, seed: int = 3) -> RoadGraph:
    """Jittered n x n street grid with a few streets missing."""
    rng = np.random.default_rng(seed)
    g = RoadGraph()
    vid = lambda i, j: i * n + j + 1  # noqa: E731
    for i in range(n):
        for j in range(n):
            dx, dy = rng.normal(0, 0.0003, 2)
            g.add_vertex(vid(i, j), -122.28 + j * 0.002 + dx, 37.84 + i * 0.002 + dy)
    for i in range(n):
        for j in range(n):
            if j + 1 < n and rng.random() > 0.15:
                g.add_edge(vid(i, j), vid(i, j + 1))
            if i + 1 < n and rng.random() > 0.15:
                g.add_edge(vid(i, j), vid(i + 1, j))
    return g


# ---------- search


def test_shortest_path_prefers_shorter_not_fewer_hops(detour_graph):
    g = detour_graph
    path = shortest_path(g, 0.0, 0.0, 0.03, 0.0)
    assert path == [1, 2, 3, 4]
    assert path_length(g, path) < path_length(g, [1, 5, 4])


def test_astar_matches_dijkstra_on_detour(detour_graph):
    g = detour_graph
    a = search(g, 1, 4, great_circle_heuristic(g))
    d = search(g, 1, 4, None)
    assert path_length(g, a) == pytest.approx(path_length(g, d))


def test_astar_matches_dijkstra_on_grid():
    g = _grid()
    ids = sorted(g.vertices())
    h = great_circle_heuristic(g)
    for s, t in [(ids[0], ids[-1]), (ids[3], ids[40]), (ids[10], ids[57]), (ids[63], ids[7])]:
        a, d = search(g, s, t, h), search(g, s, t, None)
        if d is None:
            assert a is None
            continue
        assert a[0] == s and a[-1] == t
        assert path_length(g, a) == pytest.approx(path_length(g, d), rel=1e-9)


def test_path_follows_edges():
    g = _grid()
    ids = sorted(g.vertices())
    path = search(g, ids[0], ids[-1], great_circle_heuristic(g))
    if path is not None:
        for u, v in zip(path, path[1:]):
            assert v in g.neighbors(u)


def test_disconnected_components_not_found():
    g = _graph({1: (0.0, 0.0), 2: (0.0, 0.01), 3: (1.0, 1.0), 4: (1.0, 1.01)}, [(1, 2), (3, 4)])
    assert shortest_path(g, 0.0, 0.0, 1.0, 1.0) is None
    assert search(g, 1, 4, None) is None


def test_same_start_and_destination():
    g = _graph({1: (0.0, 0.0), 2: (0.0, 0.01)}, [(1, 2)])
    assert shortest_path(g, 0.0, 0.0, 0.0, 0.0001) == [1]


def test_empty_graph_is_not_found():
    assert shortest_path(RoadGraph(), 0.0, 0.0, 1.0, 1.0) is None


def test_repeated_queries_do_not_interfere(detour_graph):
    g = detour_graph
    first = shortest_path(g, 0.0, 0.0, 0.03, 0.0)
    shortest_path(g, 0.015, 0.02, 0.0, 0.0)
    assert shortest_path(g, 0.0, 0.0, 0.03, 0.0) == first
    assert shortest_path(g, 0.03, 0.0, 0.0, 0.0) == [4, 3, 2, 1]


# ---------- routers


def test_network_router_route(detour_graph):
    r = NetworkRouter(detour_graph).route(Point(0.0001, 0.0), Point(0.0299, 0.0))
    assert r.nodes == [1, 2, 3, 4]
    assert len(r.segments) == 3
    assert r.segments[0].from_id == 1 and r.segments[-1].to_id == 4
    assert r.total_length_mi == pytest.approx(path_length(detour_graph, r.nodes))


def test_dijkstra_router_agrees(detour_graph):
    a, b = Point(0.0, 0.0), Point(0.03, 0.0)
    assert DijkstraRouter(detour_graph).distance_mi(a, b) == pytest.approx(
        NetworkRouter(detour_graph).distance_mi(a, b)
    )


def test_router_unreachable_distance_is_inf():
    g = _graph({1: (0.0, 0.0), 2: (0.0, 0.01), 3: (1.0, 1.0), 4: (1.0, 1.01)}, [(1, 2), (3, 4)])
    r = NetworkRouter(g)
    assert r.route(Point(0.0, 0.0), Point(1.0, 1.0)) is None
    assert r.distance_mi(Point(0.0, 0.0), Point(1.0, 1.0)) == float("inf")


# ---------- heap


def test_heap_decrease_key_replaces_entry():
    q = IndexedHeap()
    q.push(1, 5.0)
    q.push(2, 3.0)
    q.push(1, 1.0)
    assert len(q) == 2
    assert q.priority(1) == 1.0
    assert q.pop() == (1, 1.0)
    assert q.pop() == (2, 3.0)
    assert not q


def test_heap_ties_pop_lower_key_first():
    q = IndexedHeap()
    for k in (9, 4, 7):
        q.push(k, 2.0)
    assert [q.pop()[0] for _ in range(3)] == [4, 7, 9]


def test_heap_orders_random_priorities():
    rng = np.random.default_rng(11)
    q = IndexedHeap()
    prios = {}
    for k in range(200):
        prios[k] = float(rng.random())
        q.push(k, prios[k])
    for k in rng.choice(200, 50, replace=False):
        prios[int(k)] = float(rng.random())
        q.push(int(k), prios[int(k)])
    out = [q.pop()[1] for _ in range(len(q))]
    assert out == sorted(prios.values())


def test_heap_pop_empty():
    with pytest.raises(IndexError):
        IndexedHeap().pop()
