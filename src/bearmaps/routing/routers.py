from bearmaps.app.protocols import Router
from bearmaps.domain.entities.geography import Point, Route, Segment
from bearmaps.domain.graph import RoadGraph
from bearmaps.errors import NotFound
from bearmaps.routing.astar import great_circle_heuristic, search


class NetworkRouter(Router):
    def __init__(self, graph: RoadGraph):
        self.G = graph

    def route(self, a: Point, b: Point) -> Route | None:
        try:
            na, nb = self.G.closest(a.lon, a.lat), self.G.closest(b.lon, b.lat)
        except NotFound:
            return None
        nodes = search(self.G, na, nb, self._heuristic())
        if nodes is None:
            return None
        segs, L = [], 0.0
        for u, v, length in self.G.iter_edges(nodes):
            L += length
            segs.append(Segment(self.G.point(u), self.G.point(v), length, from_id=u, to_id=v))
        return Route(nodes, segs, L)

    def distance_mi(self, a: Point, b: Point) -> float:
        r = self.route(a, b)
        return float("inf") if r is None else r.total_length_mi

    def _heuristic(self):
        return great_circle_heuristic(self.G)


class DijkstraRouter(NetworkRouter):
    """Uninformed variant; slower, but a useful reference for A* results."""

    def _heuristic(self):
        return None
