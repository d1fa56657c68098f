"""
AOI Detector Module
===================

Stateless detection logic - applies AOI geometry to a location set.

Design:
- Pure functions (no state)
- Returns boolean masks aligned with the input location order
- Dispatch on the AOI tag, one predicate per shape type
"""

import numpy as np
from typing import List, Sequence

from lookout_aoi.geometry.shapes import AOI, Circle, MapPoint, Polygon, Triangle
from lookout_aoi.geometry.predicates import (
    as_coordinate_array,
    circle_mask,
    polygon_mask,
    triangle_mask,
)


def location_array(locations: Sequence[MapPoint]) -> np.ndarray:
    """(N, 2) array of location coordinates, in input order."""
    return as_coordinate_array([location.coordinates for location in locations])


class AOIDetector:
    """
    Stateless detector for applying AOI geometry to locations.

    All methods are static; the coordinate array is computed once by the
    caller and reused across AOIs.
    """

    @staticmethod
    def detect(aoi: AOI, coordinates: np.ndarray) -> np.ndarray:
        """
        Detect which locations fall inside an AOI.

        Args:
            aoi: Triangle, Circle or Polygon
            coordinates: (N, 2) array from location_array()

        Returns:
            Boolean mask of shape (N,) where True = inside

        Raises:
            TypeError: If aoi is not one of the AOI variants
        """
        if isinstance(aoi, Triangle):
            return triangle_mask(coordinates, aoi.vertices)
        elif isinstance(aoi, Circle):
            return circle_mask(coordinates, aoi.center, aoi.radius)
        elif isinstance(aoi, Polygon):
            return polygon_mask(coordinates, aoi.vertices)
        raise TypeError(f"Unsupported AOI type: {type(aoi).__name__}")

    @staticmethod
    def select(locations: Sequence[MapPoint], mask: np.ndarray) -> List[MapPoint]:
        """Locations where mask is True, same instances, input order."""
        return [location for location, inside in zip(locations, mask) if inside]


def get_locations_in_triangle(triangle: Triangle, locations: Sequence[MapPoint]) -> List[MapPoint]:
    """All locations inside a triangle AOI."""
    mask = AOIDetector.detect(triangle, location_array(locations))
    return AOIDetector.select(locations, mask)


def get_locations_in_circle(circle: Circle, locations: Sequence[MapPoint]) -> List[MapPoint]:
    """All locations inside a circle AOI."""
    mask = AOIDetector.detect(circle, location_array(locations))
    return AOIDetector.select(locations, mask)


def get_locations_in_polygon(polygon: Polygon, locations: Sequence[MapPoint]) -> List[MapPoint]:
    """All locations inside a polygon AOI."""
    mask = AOIDetector.detect(polygon, location_array(locations))
    return AOIDetector.select(locations, mask)
