# app/hooks.py
from typing import Protocol


class MapHooks(Protocol):
    def build_start(self, *, source): ...
    def build_end(self, *, stats, wall_ms): ...
    def route_start(self, *, start, dest): ...
    def route_end(self, *, found, nodes, length_mi, ms): ...
    def raster(self, *, depth, rows, cols, success, ms): ...
    def error(self, *, reason: str, **kw): ...


class NoopHooks:
    def build_start(self, **_):
        pass

    def build_end(self, **_):
        pass

    def route_start(self, **_):
        pass

    def route_end(self, **_):
        pass

    def raster(self, **_):
        pass

    def error(self, *_, **__):
        pass
