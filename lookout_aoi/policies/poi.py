"""
POI Placement Policies
======================

Validation, proximity and snapping rules applied before a point of
interest is committed, plus the icon/category lookup tables.

Design:
- Failures are result records (valid=False, error), never exceptions
- Proximity and snapping scan candidates in input order: the first
  match wins, not the nearest
- Distances are Haversine meters
"""

import math
import numbers
from dataclasses import dataclass
from typing import Any, Optional, Sequence, Tuple

from lookout_aoi.geometry.shapes import Coordinate, POI
from lookout_aoi.geometry.predicates import haversine_distance
from lookout_aoi.policies.palette import POI_COLORS

POI_MIN_DISTANCE = 10  # meters
POI_SNAP_DISTANCE = 20  # meters
POI_NAME_MAX_LENGTH = 100
POI_COORDINATE_PRECISION = 5  # ~1 m

POI_ICONS: Tuple[str, ...] = (
    'marker',
    'flag',
    'star',
    'home',
    'building',
    'camera',
    'shopping-bag',
    'coffee',
    'car',
    'plane',
)

POI_CATEGORIES: Tuple[str, ...] = (
    'general',
    'business',
    'transportation',
    'entertainment',
    'food',
    'shopping',
    'government',
    'emergency',
    'education',
    'healthcare',
)

CATEGORY_ICONS = {
    'general': 'marker',
    'business': 'building',
    'transportation': 'car',
    'entertainment': 'star',
    'food': 'coffee',
    'shopping': 'shopping-bag',
    'government': 'flag',
    'emergency': 'plus',
    'education': 'graduation-cap',
    'healthcare': 'heart',
}


@dataclass(frozen=True)
class POIValidationResult:
    valid: bool
    coordinates: Optional[Coordinate] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class POILocationResult:
    valid: bool
    error: Optional[str] = None
    nearby_poi: Optional[POI] = None


@dataclass(frozen=True)
class SnapResult:
    coordinates: Coordinate
    snapped: bool
    snap_target: Optional[Coordinate] = None


def _is_number(value: Any) -> bool:
    return (
        isinstance(value, numbers.Real)
        and not isinstance(value, bool)
        and not math.isnan(value)
    )


def _round_half_up(value: float, precision: int) -> float:
    scale = 10 ** precision
    return math.floor(value * scale + 0.5) / scale


def validate_poi(
    coordinates: Sequence[Any],
    name: str = '',
    name_max_length: int = POI_NAME_MAX_LENGTH,
    precision: int = POI_COORDINATE_PRECISION
) -> POIValidationResult:
    """
    Check POI coordinates and optional name.

    Order: numeric coordinates, longitude range, latitude range, blank
    name, name length. An empty name is allowed (the caller assigns one).

    Returns:
        On success, coordinates rounded to `precision` decimals
    """
    try:
        well_formed = len(coordinates) == 2 and all(_is_number(value) for value in coordinates)
    except TypeError:
        well_formed = False
    if not well_formed:
        return POIValidationResult(valid=False, error='Invalid coordinates - must be numbers')

    lng, lat = float(coordinates[0]), float(coordinates[1])

    if lng < -180 or lng > 180:
        return POIValidationResult(
            valid=False, error='Longitude must be between -180 and 180 degrees'
        )

    if lat < -90 or lat > 90:
        return POIValidationResult(
            valid=False, error='Latitude must be between -90 and 90 degrees'
        )

    if name and len(name.strip()) == 0:
        return POIValidationResult(valid=False, error='POI name cannot be empty')

    if name and len(name) > name_max_length:
        return POIValidationResult(
            valid=False, error=f'POI name must be less than {name_max_length} characters'
        )

    return POIValidationResult(
        valid=True,
        coordinates=(_round_half_up(lng, precision), _round_half_up(lat, precision)),
    )


def validate_poi_location(
    new_coordinates: Coordinate,
    existing_pois: Sequence[POI],
    min_distance: float = POI_MIN_DISTANCE
) -> POILocationResult:
    """Reject placement closer than min_distance meters to an existing POI."""
    for poi in existing_pois:
        distance = haversine_distance(new_coordinates, poi.coordinates)
        if distance < min_distance:
            return POILocationResult(
                valid=False,
                error=f'POI too close to existing POI "{poi.name}" ({round(distance)}m away)',
                nearby_poi=poi,
            )
    return POILocationResult(valid=True)


def snap_poi_coordinates(
    coordinates: Coordinate,
    snap_targets: Sequence[Coordinate],
    snap_distance: float = POI_SNAP_DISTANCE
) -> SnapResult:
    """Snap onto the first target within snap_distance meters, if any."""
    for target in snap_targets:
        if haversine_distance(coordinates, target) <= snap_distance:
            target = (float(target[0]), float(target[1]))
            return SnapResult(coordinates=target, snapped=True, snap_target=target)
    return SnapResult(coordinates=(float(coordinates[0]), float(coordinates[1])), snapped=False)


def assign_poi_icon(category: Optional[str] = 'general', existing_count: int = 0) -> str:
    """Category icon, else POI_ICONS cycled by count."""
    icon = CATEGORY_ICONS.get(category) if category else None
    return icon or POI_ICONS[existing_count % len(POI_ICONS)]


def get_poi_categories() -> Tuple[str, ...]:
    return POI_CATEGORIES


def get_poi_icons() -> Tuple[str, ...]:
    return POI_ICONS


def get_poi_colors() -> Tuple[str, ...]:
    return tuple(POI_COLORS)
