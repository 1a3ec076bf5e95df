from typing import Protocol, runtime_checkable

from bearmaps.domain.entities.geography import BoundingBox, Point, Route


@runtime_checkable
class Router(Protocol):
    """
    Responsibilities:
      • Snap two free points to the road graph and compute the path between them.
      • Compute network distance between points.
    Units: degrees for coordinates; miles for distances.
    """

    def route(self, a: Point, b: Point) -> Route | None: ...
    def distance_mi(self, a: Point, b: Point) -> float: ...


@runtime_checkable
class TileSelector(Protocol):
    """Pick the zoom depth and tile rectangle covering a viewport."""

    def select_tiles(self, query: BoundingBox, width_px: float, height_px: float): ...
