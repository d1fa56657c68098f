"""
Policies Layer
==============

Bounded Context: Deterministic placement and presentation rules.

Responsibilities:
- Count-keyed colour cycling per shape kind
- POI validation, proximity and snapping
- POI category/icon lookup
"""

from lookout_aoi.policies.palette import (
    CIRCLE_COLORS,
    POI_COLORS,
    POLYGON_COLORS,
    TRIANGLE_COLORS,
    assign_circle_color,
    assign_color,
    assign_poi_color,
    assign_polygon_color,
    assign_triangle_color,
)
from lookout_aoi.policies.poi import (
    POI_CATEGORIES,
    POI_ICONS,
    POILocationResult,
    POIValidationResult,
    SnapResult,
    assign_poi_icon,
    get_poi_categories,
    get_poi_colors,
    get_poi_icons,
    snap_poi_coordinates,
    validate_poi,
    validate_poi_location,
)

__all__ = [
    "CIRCLE_COLORS",
    "POI_COLORS",
    "POLYGON_COLORS",
    "TRIANGLE_COLORS",
    "assign_circle_color",
    "assign_color",
    "assign_poi_color",
    "assign_polygon_color",
    "assign_triangle_color",
    "POI_CATEGORIES",
    "POI_ICONS",
    "POILocationResult",
    "POIValidationResult",
    "SnapResult",
    "assign_poi_icon",
    "get_poi_categories",
    "get_poi_colors",
    "get_poi_icons",
    "snap_poi_coordinates",
    "validate_poi",
    "validate_poi_location",
]
