# bearmaps/runtime/resources.py
import os
import pickle
from functools import lru_cache

from bearmaps.build.builder import build_graph
from bearmaps.domain.graph import RoadGraph
from bearmaps.io.osm_events import iter_osm_events


@lru_cache(maxsize=8)
def load_graph_from_path(file: str, fmt: str) -> RoadGraph:
    """
    Build (osm_xml) or restore (pickle) a cleaned graph, once per (file, fmt).
    A missing file raises FileNotFoundError and is not cached.
    """
    if not os.path.exists(file):
        raise FileNotFoundError(file)
    if fmt == "osm_xml":
        return build_graph(iter_osm_events(file), source=file)
    if fmt == "pickle":
        with open(file, "rb") as f:
            g = pickle.load(f)
        if not isinstance(g, RoadGraph):
            raise TypeError(f"{file} does not hold a RoadGraph (got {type(g).__name__})")
        return g
    raise ValueError(f"Unsupported graph fmt {fmt!r}")


def save_graph(graph: RoadGraph, file: str) -> None:
    with open(file, "wb") as f:
        pickle.dump(graph, f, protocol=pickle.HIGHEST_PROTOCOL)
