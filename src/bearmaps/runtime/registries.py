# runtime/registries.py
import time
from collections.abc import Callable

from bearmaps.app.hooks import NoopHooks
from bearmaps.app.protocols import Router
from bearmaps.config.models import (
    GraphSourceUnion,
    RouterAStarModel,
    RouterDijkstraModel,
    RouterUnion,
)
from bearmaps.domain.graph import RoadGraph
from bearmaps.routing.routers import DijkstraRouter, NetworkRouter
from bearmaps.runtime.resources import load_graph_from_path

RouterFactory = Callable[[RouterUnion, dict], Router]

_router_registry: dict[str, RouterFactory] = {}


def resolve_graph(ref: GraphSourceUnion | None, *, deps: dict) -> RoadGraph:
    """
    deps can include:
      - 'graph': RoadGraph   # a prebuilt graph, used when no source is configured
      - 'hooks': MapHooks    # told about each load; cache hits report cached=True
    """
    if ref is None:
        if deps.get("graph") is not None:
            return deps["graph"]
        raise ValueError("No graph provided")
    hooks = deps.get("hooks") or NoopHooks()
    t0 = time.perf_counter()
    hooks.build_start(source=ref.file)
    hits = load_graph_from_path.cache_info().hits
    try:
        g = load_graph_from_path(ref.file, ref.kind)
    except FileNotFoundError:
        if ref.must_exist:
            hooks.error(reason="graph_missing", file=ref.file)
            raise
        g = RoadGraph()
    cached = load_graph_from_path.cache_info().hits > hits
    hooks.build_end(
        stats={"vertices": len(g), "cached": cached}, wall_ms=(time.perf_counter() - t0) * 1000
    )
    return g


# --------------------- Routers  ---------------------
def register_router(kind: str):
    def deco(fn: RouterFactory):
        _router_registry[kind] = fn
        return fn

    return deco


def make_router(cfg: RouterUnion, *, deps: dict) -> Router:
    try:
        factory = _router_registry[cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown router kind {cfg.kind!r}") from None
    return factory(cfg, deps)


@register_router("astar")
def _make_astar(cfg: RouterAStarModel, deps):
    return NetworkRouter(deps["graph"])


@register_router("dijkstra")
def _make_dijkstra(cfg: RouterDijkstraModel, deps):
    return DijkstraRouter(deps["graph"])
