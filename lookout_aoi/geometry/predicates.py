"""
Spatial Predicates Module
=========================

Containment tests and great-circle distance.

Design:
- Vectorised over an (N, 2) array of (lng, lat) pairs, returning boolean
  masks (one pass per AOI, no Python loop over locations)
- Scalar predicates are the N=1 case of the mask functions
- Degenerate input never raises: NaN coordinates and degenerate shapes
  simply produce False
"""

import numpy as np
from typing import Sequence

from lookout_aoi.geometry.shapes import Coordinate

EARTH_RADIUS_METERS = 6371000.0
DEGENERATE_EPSILON = 1e-10


def as_coordinate_array(points: Sequence[Sequence[float]]) -> np.ndarray:
    """
    Convert a sequence of (lng, lat) pairs into an (N, 2) float array.

    Returns:
        Array of shape (N, 2); shape (0, 2) for empty input
    """
    array = np.asarray(points, dtype=float)
    if array.size == 0:
        return np.empty((0, 2), dtype=float)
    return array.reshape(-1, 2)


def haversine_distances(points: np.ndarray, target: Coordinate) -> np.ndarray:
    """
    Great-circle distance in meters from every point to a target.

    Args:
        points: (N, 2) array of (lng, lat)
        target: (lng, lat)

    Returns:
        (N,) float array of distances in meters
    """
    points = as_coordinate_array(points)
    lng1 = np.radians(points[:, 0])
    lat1 = np.radians(points[:, 1])
    lng2 = np.radians(target[0])
    lat2 = np.radians(target[1])

    d_lat = lat2 - lat1
    d_lng = lng2 - lng1

    a = (
        np.sin(d_lat / 2) ** 2
        + np.cos(lat1) * np.cos(lat2) * np.sin(d_lng / 2) ** 2
    )
    # Rounding can push a just outside [0, 1] for antipodal points
    a = np.clip(a, 0.0, 1.0)
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return EARTH_RADIUS_METERS * c


def haversine_distance(p1: Coordinate, p2: Coordinate) -> float:
    """
    Great-circle distance between two (lng, lat) points, in meters.

    Symmetric, zero for identical points.
    """
    return float(haversine_distances(as_coordinate_array([p1]), p2)[0])


# Name used by the circle drawing tool
calculate_distance = haversine_distance


def triangle_mask(points: np.ndarray, vertices: Sequence[Coordinate]) -> np.ndarray:
    """
    Barycentric point-in-triangle test.

    Points on an edge or vertex are inside (all coordinates >= 0).
    Degenerate (collinear) triangles contain nothing.

    Returns:
        (N,) boolean mask
    """
    points = as_coordinate_array(points)
    (x1, y1), (x2, y2), (x3, y3) = vertices

    denominator = (y2 - y3) * (x1 - x3) + (x3 - x2) * (y1 - y3)
    if not abs(denominator) >= DEGENERATE_EPSILON:
        return np.zeros(len(points), dtype=bool)

    px = points[:, 0]
    py = points[:, 1]
    a = ((y2 - y3) * (px - x3) + (x3 - x2) * (py - y3)) / denominator
    b = ((y3 - y1) * (px - x3) + (x1 - x3) * (py - y3)) / denominator
    c = 1 - a - b

    return (a >= 0) & (b >= 0) & (c >= 0)


def circle_mask(points: np.ndarray, center: Coordinate, radius: float) -> np.ndarray:
    """
    Inclusive great-circle containment: distance <= radius.

    Returns:
        (N,) boolean mask
    """
    return haversine_distances(points, center) <= radius


def polygon_mask(points: np.ndarray, vertices: Sequence[Coordinate]) -> np.ndarray:
    """
    Even-odd ray casting over the implicitly closed edge list.

    Boundary behaviour (points exactly on an edge or vertex) is whatever the
    crossing rule yields; it is not forced either way.

    Returns:
        (N,) boolean mask; all False for fewer than 3 vertices or any
        non-finite vertex
    """
    points = as_coordinate_array(points)
    inside = np.zeros(len(points), dtype=bool)
    if len(vertices) < 3 or not np.isfinite(as_coordinate_array(vertices)).all():
        return inside

    x = points[:, 0]
    y = points[:, 1]
    n = len(vertices)

    with np.errstate(divide='ignore', invalid='ignore'):
        j = n - 1
        for i in range(n):
            xi, yi = vertices[i]
            xj, yj = vertices[j]
            straddles = (yi > y) != (yj > y)
            crossing_x = (xj - xi) * (y - yi) / (yj - yi) + xi
            inside ^= straddles & (x < crossing_x)
            j = i

    return inside


def is_point_in_triangle(point: Coordinate, triangle: Sequence[Coordinate]) -> bool:
    """Check if a point is inside a triangle (edges inclusive)."""
    return bool(triangle_mask(as_coordinate_array([point]), triangle)[0])


def is_point_in_circle(point: Coordinate, center: Coordinate, radius: float) -> bool:
    """Check if a point is within radius meters of center (inclusive)."""
    return bool(circle_mask(as_coordinate_array([point]), center, radius)[0])


def is_point_in_polygon(point: Coordinate, polygon: Sequence[Coordinate]) -> bool:
    """Check if a point is inside a polygon (ray casting)."""
    return bool(polygon_mask(as_coordinate_array([point]), polygon)[0])


def is_point_nearby(
    point1: Coordinate,
    point2: Coordinate,
    threshold: float = 0.001
) -> bool:
    """
    Planar proximity in degrees, used to snap a polygon closed on its
    first vertex.
    """
    dx = point1[0] - point2[0]
    dy = point1[1] - point2[1]
    return float(np.hypot(dx, dy)) <= threshold
