# bearmaps/domain/graph.py
import math
from collections.abc import Iterable, Iterator, Sequence

import numpy as np

from bearmaps.domain import geometry
from bearmaps.domain.entities.geography import Point, Vertex
from bearmaps.errors import MalformedInput, NotFound


class RoadGraph:
    """
    Undirected road graph keyed by OSM node id.

    Mutated only while a GraphBuilder populates it; after ``remove_isolated()``
    it is treated as read-only and can be shared by any number of queries.
    Search bookkeeping (costs, predecessors) never lives here.
    """

    def __init__(self):
        self._vertices: dict[int, Vertex] = {}
        # (ids, lons, lats) snapshot for nearest-vertex scans; None => stale
        self._index: tuple[np.ndarray, np.ndarray, np.ndarray] | None = None

    # ------------- Mutation (build time only) ---------------

    def add_vertex(self, vid: int, lon: float, lat: float) -> Vertex:
        v = Vertex(int(vid), float(lon), float(lat))
        self._vertices[v.id] = v  # last write wins
        self._index = None
        return v

    def add_edge(self, a: int, b: int) -> None:
        va, vb = self._vertices.get(a), self._vertices.get(b)
        if va is None or vb is None:
            missing = a if va is None else b
            raise MalformedInput(f"edge ({a}, {b}) references unknown vertex {missing}")
        va.adjacent.append(b)
        vb.adjacent.append(a)

    def set_name(self, vid: int, name: str) -> None:
        v = self._vertices.get(vid)
        if v is not None:
            v.name = name

    def remove_isolated(self) -> int:
        """Drop every vertex without neighbors. Returns how many were removed."""
        alone = [vid for vid, v in self._vertices.items() if not v.adjacent]
        for vid in alone:
            del self._vertices[vid]
        if alone:
            self._index = None
        return len(alone)

    # ------------- Lookup ---------------

    def __len__(self) -> int:
        return len(self._vertices)

    def __contains__(self, vid: object) -> bool:
        return vid in self._vertices

    def vertices(self) -> Iterable[int]:
        return self._vertices.keys()

    def vertex(self, vid: int) -> Vertex:
        try:
            return self._vertices[vid]
        except KeyError:
            raise NotFound(f"no vertex {vid}") from None

    def neighbors(self, vid: int) -> Sequence[int]:
        return self.vertex(vid).adjacent

    def lon(self, vid: int) -> float:
        return self.vertex(vid).lon

    def lat(self, vid: int) -> float:
        return self.vertex(vid).lat

    def name(self, vid: int) -> str | None:
        return self.vertex(vid).name

    def point(self, vid: int) -> Point:
        return self.vertex(vid).point

    # ------------- Geometry ---------------

    def distance(self, a: int, b: int) -> float:
        va, vb = self.vertex(a), self.vertex(b)
        return geometry.distance(va.lon, va.lat, vb.lon, vb.lat)

    def bearing(self, a: int, b: int) -> float:
        va, vb = self.vertex(a), self.vertex(b)
        return geometry.bearing(va.lon, va.lat, vb.lon, vb.lat)

    def closest(self, lon: float, lat: float) -> int:
        """
        Id of the vertex nearest to (lon, lat) by great-circle distance.
        Equidistant vertices resolve to the lowest id.
        """
        if not (math.isfinite(lon) and math.isfinite(lat)):
            raise MalformedInput(f"closest() needs finite coordinates, got ({lon}, {lat})")
        ids, lons, lats = self._coords()
        d = geometry.distances_to(lons, lats, lon, lat)
        ok = np.isfinite(d)
        if not ok.any():
            raise NotFound("closest() found no vertex with usable coordinates")
        return int(ids[d == d[ok].min()].min())

    def iter_edges(self, path: Sequence[int]) -> Iterator[tuple[int, int, float]]:
        """Yield (u, v, length_mi) for consecutive vertices of a path."""
        for u, v in zip(path, path[1:]):
            yield u, v, self.distance(u, v)

    def _coords(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        index = self._index
        if index is None:
            vs = list(self._vertices.values())
            index = (
                np.fromiter((v.id for v in vs), dtype=np.int64, count=len(vs)),
                np.fromiter((v.lon for v in vs), dtype=float, count=len(vs)),
                np.fromiter((v.lat for v in vs), dtype=float, count=len(vs)),
            )
            self._index = index
        return index
