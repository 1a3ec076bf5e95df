# build/events.py
from dataclasses import dataclass


class MapEvent:
    """Marker base for the element events a map parser emits, in document order."""

    __slots__ = ()


@dataclass(frozen=True)
class NodeStart(MapEvent):
    id: int
    lon: float
    lat: float


@dataclass(frozen=True)
class WayStart(MapEvent):
    id: int


@dataclass(frozen=True)
class WayNodeRef(MapEvent):
    ref: int


@dataclass(frozen=True)
class Tag(MapEvent):
    # applies to the open way, else to the most recent node
    key: str
    value: str


@dataclass(frozen=True)
class WayEnd(MapEvent):
    pass
