# io/osm_events.py
"""
OSM XML -> map element events.

Streams the file with ElementTree.iterparse so large extracts never have to be
held in memory as a tree. Only the elements the graph builder understands are
translated; relations (and anything nested in them) are skipped.
"""

import logging
from collections.abc import Iterator
from typing import IO
from xml.etree import ElementTree as ET

from bearmaps.build.events import MapEvent, NodeStart, Tag, WayEnd, WayNodeRef, WayStart
from bearmaps.errors import MalformedInput

logger = logging.getLogger(__name__)


def iter_osm_events(source: str | IO[bytes]) -> Iterator[MapEvent]:
    """Yield NodeStart/WayStart/WayNodeRef/Tag/WayEnd in document order."""
    context = ET.iterparse(source, events=("start", "end"))
    root = None
    depth = 0
    in_relation = False
    try:
        for event, elem in context:
            if event == "start":
                depth += 1
                if root is None:
                    root = elem
                    continue
                if in_relation:
                    continue
                tag = elem.tag
                if tag == "node":
                    yield NodeStart(
                        _int(elem, "id"), _float(elem, "lon"), _float(elem, "lat")
                    )
                elif tag == "way":
                    yield WayStart(_int(elem, "id"))
                elif tag == "nd":
                    yield WayNodeRef(_int(elem, "ref"))
                elif tag == "tag":
                    yield Tag(elem.get("k", ""), elem.get("v", ""))
                elif tag == "relation":
                    in_relation = True
            else:
                depth -= 1
                if elem.tag == "way" and not in_relation:
                    yield WayEnd()
                elif elem.tag == "relation":
                    in_relation = False
                if depth == 1:
                    # finished a top-level element; release it
                    root.clear()
    except ET.ParseError as e:
        logger.error(f"Error parsing OSM XML: {e}")
        raise MalformedInput(f"invalid OSM XML: {e}") from e


def _int(elem: ET.Element, attr: str) -> int:
    try:
        return int(elem.get(attr))
    except (TypeError, ValueError):
        raise MalformedInput(f"<{elem.tag}> has bad {attr}={elem.get(attr)!r}") from None


def _float(elem: ET.Element, attr: str) -> float:
    try:
        return float(elem.get(attr))
    except (TypeError, ValueError):
        raise MalformedInput(f"<{elem.tag}> has bad {attr}={elem.get(attr)!r}") from None
