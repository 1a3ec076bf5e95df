# bearmaps/app/build.py
import time
from collections.abc import Mapping
from dataclasses import dataclass

from bearmaps.app.hooks import MapHooks, NoopHooks
from bearmaps.app.protocols import Router
from bearmaps.config.models import AppModel
from bearmaps.domain.entities.geography import BoundingBox, Point, Route
from bearmaps.domain.graph import RoadGraph
from bearmaps.io.build_logging import MapLogging  # JSON logs
from bearmaps.raster.rasterer import Rasterer, RasterResult
from bearmaps.runtime.registries import make_router, resolve_graph


@dataclass
class App:
    config: AppModel
    graph: RoadGraph
    router: Router
    rasterer: Rasterer
    hooks: MapHooks

    def route(
        self, start_lon: float, start_lat: float, dest_lon: float, dest_lat: float
    ) -> Route | None:
        a, b = Point(start_lon, start_lat), Point(dest_lon, dest_lat)
        t0 = time.perf_counter()
        self.hooks.route_start(start=(a.lon, a.lat), dest=(b.lon, b.lat))
        r = self.router.route(a, b)
        self.hooks.route_end(
            found=r is not None,
            nodes=0 if r is None else len(r.nodes),
            length_mi=None if r is None else r.total_length_mi,
            ms=(time.perf_counter() - t0) * 1000,
        )
        return r

    def shortest_path(self, start_lon, start_lat, dest_lon, dest_lat) -> list[int] | None:
        r = self.route(start_lon, start_lat, dest_lon, dest_lat)
        return None if r is None else r.nodes

    def raster(self, params: Mapping[str, float]) -> RasterResult:
        """Raster query from the front end's parameter names (ullon, ullat, lrlon, lrlat, w, h)."""
        box = BoundingBox(params["ullon"], params["ullat"], params["lrlon"], params["lrlat"])
        return self.rasterer.select_tiles(box, params["w"], params["h"])


def build(
    cfg: AppModel | Mapping, *, graph: RoadGraph | None = None, use_logging: bool = True
) -> App:
    # 0) Validate config
    model = cfg if isinstance(cfg, AppModel) else AppModel.model_validate(cfg)

    # 1) Hooks
    hooks = (
        MapLogging(
            name=model.name,
            level="DEBUG" if model.log.debug else model.log.level,
            debug=model.log.debug,
        )
        if use_logging
        else NoopHooks()
    )

    # 2) Graph (built once, read-only from here on)
    g = resolve_graph(model.graph, deps={"graph": graph, "hooks": hooks})

    # 3) Query services
    router = make_router(model.router, deps={"graph": g})
    rasterer = Rasterer(model.coverage.to_coverage(), hooks=hooks)

    return App(model, g, router, rasterer, hooks)
