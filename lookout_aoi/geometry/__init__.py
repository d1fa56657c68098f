"""
Geometry Layer
==============

Bounded Context: Pure geometric shapes and spatial queries.

Responsibilities:
- Shape representation (immutable)
- Point-in-triangle / circle / polygon tests, Haversine distance
- Shape validation (area, radius, self-intersection)
- NO state, NO counting, NO rendering
"""

from lookout_aoi.geometry.shapes import (
    AOI,
    AOIType,
    Circle,
    Coordinate,
    MapPoint,
    POI,
    Polygon,
    Triangle,
    aoi_from_dict,
)
from lookout_aoi.geometry.predicates import (
    calculate_distance,
    haversine_distance,
    is_point_in_circle,
    is_point_in_polygon,
    is_point_in_triangle,
    is_point_nearby,
)
from lookout_aoi.geometry.validation import (
    CIRCLE_MAX_RADIUS,
    CIRCLE_MIN_RADIUS,
    MIN_AREA_DEGREES,
    MIN_AREA_THRESHOLD,
    calculate_polygon_area,
    calculate_triangle_area,
    check_self_intersection,
    format_area,
    format_radius,
    validate_circle,
    validate_polygon,
    validate_triangle,
)
from lookout_aoi.geometry.detector import (
    AOIDetector,
    get_locations_in_circle,
    get_locations_in_polygon,
    get_locations_in_triangle,
)

__all__ = [
    "AOI",
    "AOIType",
    "Circle",
    "Coordinate",
    "MapPoint",
    "POI",
    "Polygon",
    "Triangle",
    "aoi_from_dict",
    "calculate_distance",
    "haversine_distance",
    "is_point_in_circle",
    "is_point_in_polygon",
    "is_point_in_triangle",
    "is_point_nearby",
    "CIRCLE_MAX_RADIUS",
    "CIRCLE_MIN_RADIUS",
    "MIN_AREA_DEGREES",
    "MIN_AREA_THRESHOLD",
    "calculate_polygon_area",
    "calculate_triangle_area",
    "check_self_intersection",
    "format_area",
    "format_radius",
    "validate_circle",
    "validate_polygon",
    "validate_triangle",
    "AOIDetector",
    "get_locations_in_circle",
    "get_locations_in_polygon",
    "get_locations_in_triangle",
]
