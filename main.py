# main.py
import json
import sys

from bearmaps.app.build import build
from bearmaps.config.models import load_config


def run(config_path: str, start: tuple[float, float], dest: tuple[float, float]):
    app = build(load_config(config_path))

    # Route between the two points, then the tiles covering both of them
    path = app.shortest_path(*start, *dest)
    box = {
        "ullon": min(start[0], dest[0]),
        "ullat": max(start[1], dest[1]),
        "lrlon": max(start[0], dest[0]),
        "lrlat": min(start[1], dest[1]),
        "w": 1024,
        "h": 768,
    }
    raster = app.raster(box)
    return {"route": path, "raster": raster.as_dict()}


if __name__ == "__main__":
    cfg, slon, slat, dlon, dlat = sys.argv[1:6]
    out = run(cfg, (float(slon), float(slat)), (float(dlon), float(dlat)))
    json.dump(out, sys.stdout)
