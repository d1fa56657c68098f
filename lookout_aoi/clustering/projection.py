"""
Spherical Mercator projection onto the unit square.

x = 0 at lng -180, x = 1 at lng 180; y = 0 at the top (north), y is
clamped to [0, 1] so the poles stay finite.
"""

import math


def lng_x(lng: float) -> float:
    return lng / 360 + 0.5


def lat_y(lat: float) -> float:
    sin = math.sin(lat * math.pi / 180)
    if sin >= 1:
        return 0.0
    if sin <= -1:
        return 1.0
    y = 0.5 - 0.25 * math.log((1 + sin) / (1 - sin)) / math.pi
    return min(max(y, 0.0), 1.0)


def x_lng(x: float) -> float:
    return (x - 0.5) * 360


def y_lat(y: float) -> float:
    y2 = (180 - y * 360) * math.pi / 180
    return 360 * math.atan(math.exp(y2)) / math.pi - 90


def wrap_lng(lng: float) -> float:
    """Wrap longitude into [-180, 180)."""
    return (lng + 180) % 360 - 180


def clamp_lat(lat: float) -> float:
    return max(-90.0, min(90.0, lat))
