# tests/app/test_build_app.py
import json
import logging

import pytest
from pydantic import ValidationError

from bearmaps.app.build import build
from bearmaps.build.builder import build_graph
from bearmaps.build.events import NodeStart, Tag, WayEnd, WayNodeRef, WayStart
from bearmaps.config.models import AppModel, CoverageModel, OsmXmlSourceModel, load_config
from bearmaps.io.build_logging import MapLogging
from bearmaps.routing.routers import DijkstraRouter, NetworkRouter
from bearmaps.runtime.registries import resolve_graph
from bearmaps.runtime.resources import save_graph

OSM = """<?xml version="1.0" encoding="UTF-8"?>
<osm version="0.6">
  <node id="1" lat="37.8700" lon="-122.2600"/>
  <node id="2" lat="37.8700" lon="-122.2590"/>
  <node id="3" lat="37.8710" lon="-122.2590"/>
  <node id="9" lat="37.8800" lon="-122.2500"/>
  <way id="100">
    <nd ref="1"/><nd ref="2"/><nd ref="3"/>
    <tag k="highway" v="residential"/>
  </way>
</osm>
"""


def _events():
    return [
        NodeStart(1, -122.2600, 37.8700),
        NodeStart(2, -122.2590, 37.8700),
        NodeStart(3, -122.2590, 37.8710),
        WayStart(100),
        WayNodeRef(1),
        WayNodeRef(2),
        WayNodeRef(3),
        Tag("highway", "residential"),
        WayEnd(),
    ]


def test_build_with_prebuilt_graph():
    app = build({"name": "test"}, graph=build_graph(_events()), use_logging=False)
    assert isinstance(app.router, NetworkRouter)
    assert app.shortest_path(-122.2600, 37.8700, -122.2590, 37.8710) == [1, 2, 3]
    res = app.raster({"ullon": -122.27, "ullat": 37.88, "lrlon": -122.25, "lrlat": 37.86, "w": 512, "h": 512})
    assert res.query_success


def test_build_from_osm_file(tmp_path):
    f = tmp_path / "berkeley.osm"
    f.write_text(OSM)
    app = build({"graph": {"kind": "osm_xml", "file": str(f)}}, use_logging=False)
    assert sorted(app.graph.vertices()) == [1, 2, 3]
    r = app.route(-122.2600, 37.8700, -122.2590, 37.8710)
    assert r.nodes == [1, 2, 3]
    assert r.total_length_mi > 0


def test_build_from_pickle_with_dijkstra(tmp_path):
    f = tmp_path / "graph.pkl"
    save_graph(build_graph(_events()), str(f))
    app = build(
        {"graph": {"kind": "pickle", "file": str(f)}, "router": {"kind": "dijkstra"}},
        use_logging=False,
    )
    assert isinstance(app.router, DijkstraRouter)
    assert app.shortest_path(-122.2600, 37.8700, -122.2590, 37.8710) == [1, 2, 3]


def test_missing_graph_file(tmp_path):
    missing = str(tmp_path / "nope.osm")
    with pytest.raises(FileNotFoundError):
        build({"graph": {"kind": "osm_xml", "file": missing}}, use_logging=False)
    app = build(
        {"graph": {"kind": "osm_xml", "file": missing, "must_exist": False}}, use_logging=False
    )
    assert len(app.graph) == 0
    assert app.shortest_path(0.0, 0.0, 1.0, 1.0) is None


def test_same_source_is_loaded_once(tmp_path):
    f = tmp_path / "berkeley.osm"
    f.write_text(OSM)
    cfg = {"graph": {"kind": "osm_xml", "file": str(f)}}
    a = build(cfg, use_logging=False)
    b = build(cfg, use_logging=False)
    assert a.graph is b.graph


def test_missing_file_is_not_cached(tmp_path):
    f = tmp_path / "late.osm"
    cfg = {"graph": {"kind": "osm_xml", "file": str(f), "must_exist": False}}
    assert len(build(cfg, use_logging=False).graph) == 0
    f.write_text(OSM)
    assert sorted(build(cfg, use_logging=False).graph.vertices()) == [1, 2, 3]


def test_graph_load_reports_cache_hits(tmp_path, caplog):
    f = tmp_path / "berkeley.osm"
    f.write_text(OSM)
    logger = logging.getLogger("bearmaps.test.load")
    caplog.set_level(logging.INFO, logger="bearmaps.test.load")
    hooks = MapLogging(name="t", logger=logger)
    for _ in range(2):
        resolve_graph(OsmXmlSourceModel(file=str(f)), deps={"hooks": hooks})
    ends = [r.extra for r in caplog.records if r.getMessage() == "build_end"]
    assert [e["cached"] for e in ends] == [False, True]
    assert all(e["vertices"] == 3 for e in ends)


def test_no_graph_configured():
    with pytest.raises(ValueError):
        build({}, use_logging=False)


def test_load_config(tmp_path):
    f = tmp_path / "app.json"
    f.write_text(json.dumps({"name": "berkeley", "coverage": {"tile_size": 512}, "log": {"level": "DEBUG"}}))
    cfg = load_config(str(f))
    assert cfg.name == "berkeley"
    assert cfg.coverage.to_coverage().tile_size == 512
    assert cfg.router.kind == "astar"


def test_config_rejects_bad_values():
    with pytest.raises(ValidationError):
        CoverageModel(ul_lon=-122.0, lr_lon=-123.0)
    with pytest.raises(ValidationError):
        CoverageModel(tile_template="{z}/{x}/{y}.png")
    with pytest.raises(ValidationError):
        AppModel.model_validate({"router": {"kind": "bfs"}})
    with pytest.raises(ValidationError):
        AppModel.model_validate({"colour": "red"})


def test_map_logging_emits_structured_records(tmp_path, caplog):
    logger = logging.getLogger("bearmaps.test")
    caplog.set_level(logging.DEBUG, logger="bearmaps.test")
    hooks = MapLogging(name="t", debug=True, logger=logger)

    events = _events()[:4] + [WayNodeRef(1), WayNodeRef(42), Tag("highway", "primary"), WayEnd()]
    build_graph(events, hooks=hooks, source="inline")
    assert hooks.skipped == 1

    msgs = [r.getMessage() for r in caplog.records]
    assert msgs[0] == "build_start"
    assert "skip_ref" in msgs
    end = next(r for r in caplog.records if r.getMessage() == "build_end")
    assert end.extra["app"] == "t"
    assert end.extra["skipped_refs"] == 1


def test_failed_raster_is_logged(caplog):
    logger = logging.getLogger("bearmaps.test.raster")
    caplog.set_level(logging.DEBUG, logger="bearmaps.test.raster")
    app = build({}, graph=build_graph(_events()), use_logging=False)
    app.rasterer._hooks = MapLogging(logger=logger)
    app.raster({"ullon": -100.0, "ullat": 10.0, "lrlon": -99.0, "lrlat": 9.0, "w": 256, "h": 256})
    assert [r.getMessage() for r in caplog.records] == ["raster_failed"]
    assert caplog.records[0].levelno == logging.WARNING
