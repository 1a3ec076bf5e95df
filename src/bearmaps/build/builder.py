# build/builder.py
import time
from collections.abc import Iterable
from dataclasses import asdict, dataclass
from enum import Enum

from bearmaps.app.hooks import MapHooks, NoopHooks
from bearmaps.build.events import MapEvent, NodeStart, Tag, WayEnd, WayNodeRef, WayStart
from bearmaps.domain.entities.geography import Way
from bearmaps.domain.graph import RoadGraph

HIGHWAY_KEY = "highway"
NAME_KEY = "name"

# Non-service roads only; keeps routes off footpaths and driveways.
ALLOWED_HIGHWAY_TYPES = frozenset(
    {
        "motorway",
        "trunk",
        "primary",
        "secondary",
        "tertiary",
        "unclassified",
        "residential",
        "living_street",
        "motorway_link",
        "trunk_link",
        "primary_link",
        "secondary_link",
        "tertiary_link",
    }
)


class BuildState(Enum):
    IDLE = "idle"
    IN_NODE = "in_node"
    IN_WAY = "in_way"


@dataclass
class BuildStats:
    nodes: int = 0
    ways: int = 0
    valid_ways: int = 0
    edges: int = 0
    skipped_refs: int = 0
    removed: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class GraphBuilder:
    """
    Turns a stream of map element events into edges of a RoadGraph.

    A way only becomes edges when its WayEnd arrives, because the highway tag
    that makes it routable may follow its node references.
    """

    def __init__(self, graph: RoadGraph | None = None, *, hooks: MapHooks | None = None):
        self.graph = graph if graph is not None else RoadGraph()
        self.state = BuildState.IDLE
        self.stats = BuildStats()
        self._hooks = hooks or NoopHooks()
        self._way: Way | None = None
        self._last_node: int | None = None
        self._finished = False

    @property
    def open_way(self) -> Way | None:
        """The way between WayStart and WayEnd, if any."""
        return self._way

    def feed(self, ev: MapEvent) -> None:
        if self._finished:
            raise RuntimeError("builder already finished")
        if isinstance(ev, NodeStart):
            self.graph.add_vertex(ev.id, ev.lon, ev.lat)
            self._last_node = ev.id
            self._way = None
            self.state = BuildState.IN_NODE
            self.stats.nodes += 1
        elif isinstance(ev, WayStart):
            self._way = Way(ev.id)
            self.state = BuildState.IN_WAY
            self.stats.ways += 1
        elif isinstance(ev, WayNodeRef):
            if self.state is BuildState.IN_WAY:
                self._way.refs.append(ev.ref)
        elif isinstance(ev, Tag):
            self._on_tag(ev)
        elif isinstance(ev, WayEnd):
            if self.state is BuildState.IN_WAY:
                self._close_way()
        else:
            raise TypeError(f"not a map event: {ev!r}")

    def consume(self, events: Iterable[MapEvent]) -> "GraphBuilder":
        for ev in events:
            self.feed(ev)
        return self

    def finish(self) -> RoadGraph:
        """Drop unconnected vertices. After this the graph is read-only."""
        if self._finished:
            raise RuntimeError("finish() must be called exactly once")
        self._finished = True
        self._way = None
        self.state = BuildState.IDLE
        self.stats.removed = self.graph.remove_isolated()
        return self.graph

    # --------------- Helpers -----------------------------

    def _on_tag(self, ev: Tag) -> None:
        if self.state is BuildState.IN_WAY:
            way = self._way
            way.tags[ev.key] = ev.value
            if ev.key == HIGHWAY_KEY and ev.value in ALLOWED_HIGHWAY_TYPES:
                way.valid = True
        elif self.state is BuildState.IN_NODE and ev.key == NAME_KEY:
            self.graph.set_name(self._last_node, ev.value)

    def _close_way(self) -> None:
        way, self._way = self._way, None
        self.state = BuildState.IDLE
        if not way.valid:
            return
        self.stats.valid_ways += 1
        g = self.graph
        for a, b in zip(way.refs, way.refs[1:]):
            if a not in g or b not in g:
                self.stats.skipped_refs += 1
                self._hooks.error(reason="unknown_ref", way_id=way.id, pair=(a, b))
                continue
            g.add_edge(a, b)
            self.stats.edges += 1


def build_graph(
    events: Iterable[MapEvent], *, hooks: MapHooks | None = None, source: str | None = None
) -> RoadGraph:
    """Run a full build pass over ``events`` and return the cleaned graph."""
    hooks = hooks or NoopHooks()
    t0 = time.perf_counter()
    hooks.build_start(source=source)
    builder = GraphBuilder(hooks=hooks).consume(events)
    graph = builder.finish()
    hooks.build_end(stats=builder.stats.as_dict(), wall_ms=(time.perf_counter() - t0) * 1000)
    return graph
