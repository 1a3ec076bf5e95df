import json
import os
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bearmaps.raster.rasterer import (
    MAX_DEPTH,
    ROOT_LRLAT,
    ROOT_LRLON,
    ROOT_ULLAT,
    ROOT_ULLON,
    TILE_SIZE,
    Coverage,
)


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False


# ----------------- COVERAGE ---------------------


class CoverageModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    ul_lon: float = ROOT_ULLON
    ul_lat: float = ROOT_ULLAT
    lr_lon: float = ROOT_LRLON
    lr_lat: float = ROOT_LRLAT
    tile_size: int = Field(default=TILE_SIZE, gt=0)
    max_depth: int = Field(default=MAX_DEPTH, ge=0)
    tile_template: str = "d{depth}_x{x}_y{y}.png"

    @model_validator(mode="after")
    def _check_box(self):
        if self.ul_lon >= self.lr_lon:
            raise ValueError("coverage ul_lon must be west of lr_lon")
        if self.ul_lat <= self.lr_lat:
            raise ValueError("coverage ul_lat must be north of lr_lat")
        return self

    @field_validator("tile_template")
    @classmethod
    def _check_template(cls, v: str) -> str:
        try:
            v.format(depth=0, x=0, y=0)
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(f"tile_template may only use {{depth}}, {{x}}, {{y}}: {e}")
        return v

    def to_coverage(self) -> Coverage:
        return Coverage(**self.model_dump())


# ----------------- GRAPH SOURCES ---------------------


class _FileSource(BaseModel):
    model_config = ConfigDict(extra="forbid")
    file: str
    must_exist: bool = True

    @field_validator("file")
    @classmethod
    def _expand(cls, v: str) -> str:
        return os.path.expandvars(os.path.expanduser(v))


class OsmXmlSourceModel(_FileSource):
    kind: Literal["osm_xml"] = "osm_xml"


class PickleSourceModel(_FileSource):
    kind: Literal["pickle"] = "pickle"


GraphSourceUnion = Annotated[
    OsmXmlSourceModel | PickleSourceModel,
    Field(discriminator="kind"),
]

# ----------------- ROUTERS ---------------------


class RouterAStarModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["astar"] = "astar"


class RouterDijkstraModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["dijkstra"] = "dijkstra"


RouterUnion = Annotated[
    RouterAStarModel | RouterDijkstraModel,
    Field(discriminator="kind"),
]

# ------------------------------------------------------------------


class AppModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = "bearmaps"
    graph: GraphSourceUnion | None = None
    coverage: CoverageModel = Field(default_factory=CoverageModel)
    router: RouterUnion = Field(default_factory=RouterAStarModel)
    log: LogModel = LogModel()


def load_config(path: str) -> AppModel:
    with open(os.path.expanduser(path)) as f:
        return AppModel.model_validate(json.load(f))
