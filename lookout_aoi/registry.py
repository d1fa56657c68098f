"""
AOI Registry - append-only session collection of drawn shapes.

Holds the triangles, circles, polygons and POIs created during a session,
in creation order. Shapes are immutable and are never edited or removed
once added.

Usage:
    registry = AOIRegistry()
    error = registry.submit(triangle)   # validate, then add
    registry.add(circle)                # add without validation
    analyses = registry.analyze(locations)
"""

from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union

import yaml

from lookout_aoi.geometry.shapes import (
    AOIType,
    Circle,
    MapPoint,
    POI,
    Polygon,
    Triangle,
    aoi_from_dict,
)
from lookout_aoi.geometry.validation import validate_circle, validate_polygon, validate_triangle
from lookout_aoi.analytics.analyzer import (
    AOIAnalysis,
    SpatialAnalysisSummary,
    analyze_all_aois,
    get_spatial_analysis_summary,
)
from lookout_aoi.policies.palette import assign_color
from lookout_aoi.policies.poi import validate_poi, validate_poi_location
from lookout_aoi.config import LookoutConfig
from lookout_aoi.logging import LogEvent, StructuredLogger, create_logger

Shape = Union[Triangle, Circle, Polygon, POI]


class AOIRegistry:
    """
    Append-only collection of AOIs and POIs.

    Guarantees:
    - Ids are unique (duplicates raise ValueError)
    - Per-kind views keep insertion order
    - next_color(kind) follows the count-keyed palette
    """

    def __init__(
        self,
        config: Optional[LookoutConfig] = None,
        logger: Optional[StructuredLogger] = None
    ):
        self.config = config or LookoutConfig()
        self.logger = logger or create_logger("registry")
        self._shapes: Dict[str, Shape] = {}
        self._by_kind: Dict[AOIType, List[Shape]] = {kind: [] for kind in AOIType}

    def add(self, shape: Shape) -> None:
        """
        Append a shape.

        Raises:
            TypeError: If shape is not a Triangle, Circle, Polygon or POI
            ValueError: If a shape with the same id already exists
        """
        if not isinstance(shape, (Triangle, Circle, Polygon, POI)):
            raise TypeError(f"Unsupported shape type: {type(shape).__name__}")

        if shape.id in self._shapes:
            raise ValueError(f"AOI '{shape.id}' already exists")

        self._shapes[shape.id] = shape
        self._by_kind[shape.kind].append(shape)

        self.logger.info(
            event=LogEvent.AOI_ADDED,
            message=f"{shape.kind.value.capitalize()} added",
            metadata={
                'aoi_id': shape.id,
                'name': shape.name,
                'count': len(self._by_kind[shape.kind]),
            },
        )

    def validate(self, shape: Shape) -> Optional[str]:
        """Validation error for a shape, or None when it may be added."""
        validation = self.config.validation

        if isinstance(shape, Triangle):
            return validate_triangle(shape.vertices, validation.min_area_degrees).error

        if isinstance(shape, Circle):
            return validate_circle(
                shape.center,
                shape.radius,
                validation.circle_min_radius,
                validation.circle_max_radius,
            ).error

        if isinstance(shape, Polygon):
            return validate_polygon(shape.vertices, validation.min_area_degrees).error

        if isinstance(shape, POI):
            poi_config = self.config.poi
            result = validate_poi(
                shape.coordinates,
                shape.name,
                name_max_length=poi_config.name_max_length,
                precision=poi_config.coordinate_precision,
            )
            if not result.valid:
                return result.error
            return validate_poi_location(
                shape.coordinates, self.pois, poi_config.min_distance
            ).error

        raise TypeError(f"Unsupported shape type: {type(shape).__name__}")

    def submit(self, shape: Shape) -> Optional[str]:
        """
        Validate, then add.

        Returns:
            None when added, otherwise the validation error (shape not added)
        """
        error = self.validate(shape)
        if error is not None:
            self.logger.warning(
                event=LogEvent.AOI_REJECTED,
                message=f"{shape.kind.value.capitalize()} rejected",
                metadata={'aoi_id': shape.id, 'error': error},
            )
            return error

        self.add(shape)
        return None

    def get(self, aoi_id: str) -> Optional[Shape]:
        return self._shapes.get(aoi_id)

    def count(self, kind: Union[AOIType, str]) -> int:
        return len(self._by_kind[AOIType(kind)])

    def next_color(self, kind: Union[AOIType, str]) -> str:
        """Colour the next shape of this kind gets."""
        kind = AOIType(kind)
        return assign_color(kind, self.count(kind))

    @property
    def triangles(self) -> Tuple[Triangle, ...]:
        return tuple(self._by_kind[AOIType.TRIANGLE])

    @property
    def circles(self) -> Tuple[Circle, ...]:
        return tuple(self._by_kind[AOIType.CIRCLE])

    @property
    def polygons(self) -> Tuple[Polygon, ...]:
        return tuple(self._by_kind[AOIType.POLYGON])

    @property
    def pois(self) -> Tuple[POI, ...]:
        return tuple(self._by_kind[AOIType.POI])

    def analyze(self, locations: Sequence[MapPoint]) -> List[AOIAnalysis]:
        """Containment for every AOI (POIs are markers, not areas)."""
        analyses = analyze_all_aois(self.triangles, self.circles, self.polygons, locations)
        self.logger.debug(
            event=LogEvent.ANALYSIS_COMPUTED,
            message="Containment recomputed",
            metadata={'aois': len(analyses), 'locations': len(locations)},
        )
        return analyses

    def summary(self, locations: Sequence[MapPoint]) -> SpatialAnalysisSummary:
        return get_spatial_analysis_summary(self.analyze(locations))

    def __len__(self) -> int:
        return len(self._shapes)

    def __iter__(self) -> Iterator[Shape]:
        return iter(self._shapes.values())

    def __contains__(self, aoi_id: object) -> bool:
        return aoi_id in self._shapes

    def to_dict(self) -> Dict[str, list]:
        return {'aois': [shape.to_dict() for shape in self]}


def load_aois(yaml_path: Union[str, Path]) -> List[Shape]:
    """
    Load shapes from YAML.

    Example YAML:
        aois:
          - type: triangle
            id: triangle_1
            name: Investigation Area A
            vertices: [[-0.13, 51.50], [-0.11, 51.50], [-0.12, 51.53]]
            color: "#4CBACB"
          - type: circle
            id: circle_1
            name: Investigation Circle A
            center: [-0.1235, 51.512]
            radius: 500
            color: "#4CBACB"

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the YAML or a shape entry is malformed
    """
    yaml_path = Path(yaml_path)
    if not yaml_path.exists():
        raise FileNotFoundError(f"AOI file not found: {yaml_path}")

    try:
        with open(yaml_path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {yaml_path}: {e}")

    entries = data.get('aois', []) if isinstance(data, dict) else data
    if not isinstance(entries, list):
        raise ValueError(f"'aois' must be a list in {yaml_path}")

    return [aoi_from_dict(entry) for entry in entries]
