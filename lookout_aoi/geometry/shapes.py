"""
Geometric Shapes Module
=======================

Immutable records for locations and areas of interest.

Design:
- Frozen dataclasses (no edit-in-place after creation)
- Coordinates are always (lng, lat) WGS84 tuples
- AOI = Triangle | Circle | Polygon, discriminated by AOIType
- to_dict()/from_dict() for YAML/JSON round trips
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, ClassVar, Dict, Optional, Sequence, Tuple, Union

Coordinate = Tuple[float, float]


class AOIType(str, Enum):
    """Discriminant for AOI records and analyses."""
    TRIANGLE = "triangle"
    CIRCLE = "circle"
    POLYGON = "polygon"
    POI = "poi"


def to_coordinate(value: Sequence[float]) -> Coordinate:
    """Normalise a 2-sequence into a (lng, lat) float tuple."""
    if len(value) != 2:
        raise ValueError(f"Coordinate must have 2 values (lng, lat), got {len(value)}")
    return (float(value[0]), float(value[1]))


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_created_at(value: Any) -> datetime:
    if value is None:
        return _now()
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


@dataclass(frozen=True)
class MapPoint:
    """
    Geolocated event extracted from a message.

    Owned by the location dataset; analyses and cluster features reference
    the same instance rather than copies.
    """

    id: str
    coordinates: Coordinate
    label: str
    message_id: str
    context: str = ""
    timestamp: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'coordinates', to_coordinate(self.coordinates))

    @property
    def lng(self) -> float:
        return self.coordinates[0]

    @property
    def lat(self) -> float:
        return self.coordinates[1]

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'id': self.id,
            'coordinates': list(self.coordinates),
            'label': self.label,
            'message_id': self.message_id,
            'context': self.context,
        }
        if self.timestamp is not None:
            data['timestamp'] = self.timestamp
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any], message_id: Optional[str] = None) -> 'MapPoint':
        """
        Deserialize from dict.

        Args:
            data: Dictionary with keys id, coordinates, label, context, timestamp
            message_id: Owning message id when the dict does not carry one

        Raises:
            ValueError: If required keys are missing or coordinates invalid
        """
        try:
            return cls(
                id=str(data['id']),
                coordinates=data['coordinates'],
                label=str(data.get('label', '')),
                message_id=str(data.get('message_id', message_id or '')),
                context=str(data.get('context', '')),
                timestamp=data.get('timestamp'),
            )
        except KeyError as e:
            raise ValueError(f"Missing required MapPoint field: {e}")
        except TypeError as e:
            raise ValueError(f"Invalid MapPoint data: {e}")


@dataclass(frozen=True)
class Triangle:
    """
    Three-vertex AOI. Structurally distinct from Polygon: exactly 3 vertices.
    """

    kind: ClassVar[AOIType] = AOIType.TRIANGLE

    id: str
    name: str
    vertices: Tuple[Coordinate, Coordinate, Coordinate]
    color: str
    user_id: str = "current_user"
    created_at: datetime = field(default_factory=_now)

    def __post_init__(self):
        if len(self.vertices) != 3:
            raise ValueError(f"Triangle must have exactly 3 vertices, got {len(self.vertices)}")
        object.__setattr__(self, 'vertices', tuple(to_coordinate(v) for v in self.vertices))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.kind.value,
            'id': self.id,
            'name': self.name,
            'vertices': [list(v) for v in self.vertices],
            'color': self.color,
            'user_id': self.user_id,
            'created_at': self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class Circle:
    """Circular AOI; radius in meters."""

    kind: ClassVar[AOIType] = AOIType.CIRCLE

    id: str
    name: str
    center: Coordinate
    radius: float
    color: str
    user_id: str = "current_user"
    created_at: datetime = field(default_factory=_now)

    def __post_init__(self):
        object.__setattr__(self, 'center', to_coordinate(self.center))
        object.__setattr__(self, 'radius', float(self.radius))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.kind.value,
            'id': self.id,
            'name': self.name,
            'center': list(self.center),
            'radius': self.radius,
            'color': self.color,
            'user_id': self.user_id,
            'created_at': self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class Polygon:
    """
    Polygon AOI. Implicitly closed: the last vertex connects to the first,
    no closing duplicate is stored.
    """

    kind: ClassVar[AOIType] = AOIType.POLYGON

    id: str
    name: str
    vertices: Tuple[Coordinate, ...]
    color: str
    user_id: str = "current_user"
    created_at: datetime = field(default_factory=_now)

    def __post_init__(self):
        object.__setattr__(self, 'vertices', tuple(to_coordinate(v) for v in self.vertices))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'type': self.kind.value,
            'id': self.id,
            'name': self.name,
            'vertices': [list(v) for v in self.vertices],
            'color': self.color,
            'user_id': self.user_id,
            'created_at': self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class POI:
    """Point of interest placed by an investigator."""

    kind: ClassVar[AOIType] = AOIType.POI

    id: str
    name: str
    coordinates: Coordinate
    color: str
    icon: str = "marker"
    category: Optional[str] = None
    description: Optional[str] = None
    user_id: str = "current_user"
    created_at: datetime = field(default_factory=_now)

    def __post_init__(self):
        object.__setattr__(self, 'coordinates', to_coordinate(self.coordinates))

    def to_dict(self) -> Dict[str, Any]:
        data = {
            'type': self.kind.value,
            'id': self.id,
            'name': self.name,
            'coordinates': list(self.coordinates),
            'color': self.color,
            'icon': self.icon,
            'user_id': self.user_id,
            'created_at': self.created_at.isoformat(),
        }
        if self.category is not None:
            data['category'] = self.category
        if self.description is not None:
            data['description'] = self.description
        return data


AOI = Union[Triangle, Circle, Polygon]


def aoi_from_dict(data: Dict[str, Any]) -> Union[Triangle, Circle, Polygon, POI]:
    """
    Build an AOI (or POI) record from a dict tagged with 'type'.

    Raises:
        ValueError: If the type tag is unknown or required fields are missing
    """
    try:
        aoi_type = AOIType(data['type'])
    except KeyError:
        raise ValueError("AOI dict requires a 'type' field")
    except ValueError:
        raise ValueError(
            f"Invalid AOI type: {data['type']}. "
            f"Must be one of {[t.value for t in AOIType]}"
        )

    common = {
        'id': str(data.get('id', '')),
        'name': str(data.get('name', '')),
        'color': str(data.get('color', '')),
        'user_id': str(data.get('user_id', 'current_user')),
        'created_at': _parse_created_at(data.get('created_at')),
    }

    try:
        if aoi_type is AOIType.TRIANGLE:
            return Triangle(vertices=tuple(data['vertices']), **common)
        if aoi_type is AOIType.CIRCLE:
            return Circle(center=data['center'], radius=data['radius'], **common)
        if aoi_type is AOIType.POLYGON:
            return Polygon(vertices=tuple(data['vertices']), **common)
        return POI(
            coordinates=data['coordinates'],
            icon=str(data.get('icon', 'marker')),
            category=data.get('category'),
            description=data.get('description'),
            **common,
        )
    except KeyError as e:
        raise ValueError(f"Missing required {aoi_type.value} field: {e}")
