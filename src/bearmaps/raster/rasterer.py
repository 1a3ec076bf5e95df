# raster/rasterer.py
import math
import time
from dataclasses import dataclass, field

import numpy as np

from bearmaps.app.hooks import MapHooks, NoopHooks
from bearmaps.app.protocols import TileSelector
from bearmaps.domain.entities.geography import BoundingBox

# Root tile of the Berkeley dataset
ROOT_ULLON, ROOT_ULLAT = -122.2998046875, 37.892195547244356
ROOT_LRLON, ROOT_LRLAT = -122.2119140625, 37.82280243352756
TILE_SIZE = 256
MAX_DEPTH = 7


@dataclass(frozen=True)
class Coverage:
    """Bounding box of the depth-0 tile plus the tile pyramid parameters."""

    ul_lon: float = ROOT_ULLON
    ul_lat: float = ROOT_ULLAT
    lr_lon: float = ROOT_LRLON
    lr_lat: float = ROOT_LRLAT
    tile_size: int = TILE_SIZE
    max_depth: int = MAX_DEPTH
    tile_template: str = "d{depth}_x{x}_y{y}.png"

    @property
    def box(self) -> BoundingBox:
        return BoundingBox(self.ul_lon, self.ul_lat, self.lr_lon, self.lr_lat)

    @property
    def depth0_lon_dpp(self) -> float:
        return (self.lr_lon - self.ul_lon) / self.tile_size


@dataclass
class RasterResult:
    render_grid: list[list[str]]
    raster_ul_lon: float
    raster_ul_lat: float
    raster_lr_lon: float
    raster_lr_lat: float
    depth: int
    query_success: bool
    # inclusive tile index rectangle
    x_range: tuple[int, int] = field(default=(0, 0))
    y_range: tuple[int, int] = field(default=(0, 0))

    def as_dict(self) -> dict:
        return {
            "render_grid": self.render_grid,
            "raster_ul_lon": self.raster_ul_lon,
            "raster_ul_lat": self.raster_ul_lat,
            "raster_lr_lon": self.raster_lr_lon,
            "raster_lr_lat": self.raster_lr_lat,
            "depth": self.depth,
            "query_success": self.query_success,
        }


class Rasterer(TileSelector):
    """
    Chooses the shallowest tile depth whose resolution (longitudinal degrees
    per pixel) is at least as fine as the query's, and the tiles at that depth
    that intersect the query box.

    Never raises for bad input; callers must check ``query_success`` before
    rendering the grid.
    """

    def __init__(self, coverage: Coverage | None = None, *, hooks: MapHooks | None = None):
        self.coverage = coverage or Coverage()
        self._hooks = hooks or NoopHooks()

    def depth_for(self, lon_dpp: float) -> int:
        if not (lon_dpp > 0) or math.isinf(lon_dpp):
            return 0
        ratio = self.coverage.depth0_lon_dpp / lon_dpp
        if math.isinf(ratio):
            return self.coverage.max_depth
        if not (ratio > 0):
            return 0
        d = math.ceil(math.log2(ratio))
        return max(0, min(self.coverage.max_depth, d))

    def select_tiles(self, query: BoundingBox, width_px: float, height_px: float) -> RasterResult:
        t0 = time.perf_counter()
        cov = self.coverage
        lon_dpp = (query.lr_lon - query.ul_lon) / width_px if width_px > 0 else 0.0
        depth = self.depth_for(lon_dpp)

        n = 2**depth
        block_x = (cov.lr_lon - cov.ul_lon) / n
        block_y = (cov.ul_lat - cov.lr_lat) / n

        x_start = self._lon_index(query.ul_lon, n, block_x)
        x_end = max(x_start, self._lon_index(query.lr_lon, n, block_x))
        y_start = self._lat_index(query.ul_lat, n, block_y)
        y_end = max(y_start, self._lat_index(query.lr_lat, n, block_y))

        grid = [
            [cov.tile_template.format(depth=depth, x=x, y=y) for x in range(x_start, x_end + 1)]
            for y in range(y_start, y_end + 1)
        ]
        success = query.is_well_formed and query.intersects(cov.box)

        result = RasterResult(
            render_grid=grid,
            raster_ul_lon=cov.ul_lon + x_start * block_x,
            raster_ul_lat=cov.ul_lat - y_start * block_y,
            raster_lr_lon=cov.ul_lon + (x_end + 1) * block_x,
            raster_lr_lat=cov.ul_lat - (y_end + 1) * block_y,
            depth=depth,
            query_success=bool(success),
            x_range=(x_start, x_end),
            y_range=(y_start, y_end),
        )
        self._hooks.raster(
            depth=depth,
            rows=len(grid),
            cols=x_end - x_start + 1,
            success=result.query_success,
            ms=(time.perf_counter() - t0) * 1000,
        )
        return result

    # --------------- Helpers -----------------------------

    def _lon_index(self, lon: float, n: int, block_x: float) -> int:
        edges = self.coverage.ul_lon + np.arange(n + 1) * block_x
        hit = np.flatnonzero((lon >= edges[:-1]) & (lon < edges[1:]))
        if hit.size:
            return int(hit[0])
        # outside the coverage: snap to the nearest border column
        return 0 if lon < self.coverage.ul_lon else n - 1

    def _lat_index(self, lat: float, n: int, block_y: float) -> int:
        # tile rows count downward from the top edge
        edges = self.coverage.lr_lat + np.arange(n + 1) * block_y
        hit = np.flatnonzero((lat >= edges[:-1]) & (lat < edges[1:]))
        if hit.size:
            return n - 1 - int(hit[0])
        return 0 if lat >= self.coverage.ul_lat else n - 1
