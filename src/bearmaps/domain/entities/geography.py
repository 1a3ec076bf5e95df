from dataclasses import dataclass, field


# Core geometry types used by the graph and routers
@dataclass(frozen=True)
class Point:
    lon: float  # degrees
    lat: float


@dataclass
class Vertex:
    id: int
    lon: float
    lat: float
    name: str | None = None
    adjacent: list[int] = field(default_factory=list)

    @property
    def point(self) -> Point:
        return Point(self.lon, self.lat)


@dataclass
class Way:
    """Open way while the builder walks its events; discarded at WayEnd."""

    id: int
    refs: list[int] = field(default_factory=list)
    valid: bool = False
    tags: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Segment:
    start: Point
    end: Point
    length_mi: float
    from_id: int | None = None
    to_id: int | None = None


@dataclass
class Route:
    nodes: list[int]
    segments: list[Segment]
    total_length_mi: float


@dataclass(frozen=True)
class BoundingBox:
    ul_lon: float
    ul_lat: float
    lr_lon: float
    lr_lat: float

    @property
    def is_well_formed(self) -> bool:
        return self.ul_lon < self.lr_lon and self.ul_lat > self.lr_lat

    def intersects(self, other: "BoundingBox") -> bool:
        return not (
            self.lr_lon < other.ul_lon
            or self.ul_lon > other.lr_lon
            or self.lr_lat > other.ul_lat
            or self.ul_lat < other.lr_lat
        )
