# bearmaps/domain/geometry.py
import math

import numpy as np

EARTH_RADIUS_MI = 3963.0


def distance(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Great-circle distance in miles (haversine)."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    h = math.sin(dphi / 2.0) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2.0) ** 2
    # rounding can push h a hair above 1 for antipodal points
    h = min(1.0, h)
    return EARTH_RADIUS_MI * 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))


def bearing(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Initial great-circle bearing from point 1 to point 2, degrees in (-180, 180]."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dlambda = math.radians(lon2 - lon1)
    y = math.sin(dlambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlambda)
    deg = math.degrees(math.atan2(y, x))
    return 180.0 if deg == -180.0 else deg


def distances_to(lons: np.ndarray, lats: np.ndarray, lon: float, lat: float) -> np.ndarray:
    """Vectorized haversine from many (lons[i], lats[i]) to a single point."""
    phi1 = np.radians(lats)
    phi2 = math.radians(lat)
    dphi = phi2 - phi1
    dlambda = np.radians(lon - lons)
    h = np.sin(dphi / 2.0) ** 2 + np.cos(phi1) * math.cos(phi2) * np.sin(dlambda / 2.0) ** 2
    h = np.minimum(h, 1.0)
    return EARTH_RADIUS_MI * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))
