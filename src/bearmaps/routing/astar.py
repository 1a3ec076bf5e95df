# routing/astar.py
from collections.abc import Callable, Sequence

from bearmaps.domain.graph import RoadGraph
from bearmaps.errors import NotFound
from bearmaps.routing.heap import IndexedHeap

Heuristic = Callable[[int, int], float]


def great_circle_heuristic(graph: RoadGraph) -> Heuristic:
    # edges are weighted by the same distance, so this never overestimates
    return graph.distance


def search(
    graph: RoadGraph,
    start: int,
    goal: int,
    heuristic: Heuristic | None = None,
) -> list[int] | None:
    """
    Best-first search from ``start`` to ``goal`` over vertex ids.
    With ``heuristic=None`` this is Dijkstra. Returns the vertex path or None.

    Cost and predecessor maps are local to the call; the graph is never written.
    """
    if start not in graph or goal not in graph:
        raise NotFound(f"unknown endpoint {start if start not in graph else goal}")
    h = heuristic or (lambda _u, _g: 0.0)

    g_cost: dict[int, float] = {start: 0.0}
    came_from: dict[int, int] = {}
    closed: set[int] = set()
    frontier = IndexedHeap()
    frontier.push(start, h(start, goal))

    while frontier:
        u, _ = frontier.pop()
        if u == goal:
            return _reconstruct(came_from, start, goal)
        closed.add(u)
        gu = g_cost[u]
        for v in graph.neighbors(u):
            if v in closed:
                continue
            tentative = gu + graph.distance(u, v)
            if tentative < g_cost.get(v, float("inf")):
                g_cost[v] = tentative
                came_from[v] = u
                frontier.push(v, tentative + h(v, goal))
    return None


def shortest_path(
    graph: RoadGraph,
    start_lon: float,
    start_lat: float,
    dest_lon: float,
    dest_lat: float,
    *,
    heuristic: bool = True,
) -> list[int] | None:
    """
    Vertex ids of the shortest road path between the vertices nearest to the
    start and destination locations, or None when no such path exists.
    """
    try:
        start = graph.closest(start_lon, start_lat)
        goal = graph.closest(dest_lon, dest_lat)
    except NotFound:
        return None
    return search(graph, start, goal, great_circle_heuristic(graph) if heuristic else None)


def path_length(graph: RoadGraph, path: Sequence[int]) -> float:
    return sum(length for _, _, length in graph.iter_edges(path))


def _reconstruct(came_from: dict[int, int], start: int, goal: int) -> list[int]:
    path = [goal]
    while path[-1] != start:
        path.append(came_from[path[-1]])
    path.reverse()
    return path
