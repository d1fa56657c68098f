"""
Configuration schema for the lookout AOI toolkit.

Thresholds for shape validation, clustering, POI placement and drawing.
Defaults equal the module constants; a YAML file only needs the values it
overrides.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

import yaml

from lookout_aoi.geometry.validation import (
    CIRCLE_MAX_RADIUS,
    CIRCLE_MIN_RADIUS,
    MIN_AREA_DEGREES,
)
from lookout_aoi.clustering.index import (
    CLUSTER_EXTENT,
    CLUSTER_MAX_ZOOM,
    CLUSTER_MIN_POINTS,
    CLUSTER_MIN_ZOOM,
    CLUSTER_RADIUS,
)
from lookout_aoi.policies.poi import (
    POI_COORDINATE_PRECISION,
    POI_MIN_DISTANCE,
    POI_NAME_MAX_LENGTH,
    POI_SNAP_DISTANCE,
)

POLYGON_CLOSE_THRESHOLD = 0.002  # degrees, click this close to the first vertex closes

VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


@dataclass(frozen=True)
class ValidationConfig:
    """Shape size limits."""

    min_area_degrees: float = MIN_AREA_DEGREES
    circle_min_radius: float = CIRCLE_MIN_RADIUS  # meters
    circle_max_radius: float = CIRCLE_MAX_RADIUS  # meters

    def __post_init__(self):
        if self.min_area_degrees < 0:
            raise ValueError(
                f"min_area_degrees must be >= 0, got {self.min_area_degrees}"
            )

        if self.circle_min_radius < 0:
            raise ValueError(
                f"circle_min_radius must be >= 0, got {self.circle_min_radius}"
            )

        if self.circle_max_radius < self.circle_min_radius:
            raise ValueError(
                f"circle_max_radius ({self.circle_max_radius}) must be >= "
                f"circle_min_radius ({self.circle_min_radius})"
            )


@dataclass(frozen=True)
class ClusterConfig:
    """Cluster index parameters."""

    radius: float = CLUSTER_RADIUS  # pixels
    max_zoom: int = CLUSTER_MAX_ZOOM
    min_zoom: int = CLUSTER_MIN_ZOOM
    min_points: int = CLUSTER_MIN_POINTS
    extent: int = CLUSTER_EXTENT

    def __post_init__(self):
        if self.radius <= 0:
            raise ValueError(f"radius must be > 0, got {self.radius}")

        if not 0 <= self.min_zoom <= self.max_zoom <= 30:
            raise ValueError(
                f"Zoom range must satisfy 0 <= min_zoom <= max_zoom <= 30, "
                f"got [{self.min_zoom}, {self.max_zoom}]"
            )

        if self.min_points < 2:
            raise ValueError(f"min_points must be >= 2, got {self.min_points}")

        if self.extent <= 0:
            raise ValueError(f"extent must be > 0, got {self.extent}")


@dataclass(frozen=True)
class POIConfig:
    """POI placement rules."""

    min_distance: float = POI_MIN_DISTANCE  # meters
    snap_distance: float = POI_SNAP_DISTANCE  # meters
    name_max_length: int = POI_NAME_MAX_LENGTH
    coordinate_precision: int = POI_COORDINATE_PRECISION

    def __post_init__(self):
        if self.min_distance < 0:
            raise ValueError(f"min_distance must be >= 0, got {self.min_distance}")

        if self.snap_distance < 0:
            raise ValueError(f"snap_distance must be >= 0, got {self.snap_distance}")

        if self.name_max_length < 1:
            raise ValueError(
                f"name_max_length must be >= 1, got {self.name_max_length}"
            )

        if not 0 <= self.coordinate_precision <= 10:
            raise ValueError(
                f"coordinate_precision must be in [0, 10], got {self.coordinate_precision}"
            )


@dataclass(frozen=True)
class DrawingConfig:
    """Drawing tool behaviour."""

    close_threshold_degrees: float = POLYGON_CLOSE_THRESHOLD

    def __post_init__(self):
        if self.close_threshold_degrees <= 0:
            raise ValueError(
                f"close_threshold_degrees must be > 0, got {self.close_threshold_degrees}"
            )


@dataclass(frozen=True)
class LookoutConfig:
    """
    Top-level configuration.

    Loaded from YAML and validated at construction.
    Immutable after construction (frozen dataclass).
    """

    validation: ValidationConfig = field(default_factory=ValidationConfig)
    clustering: ClusterConfig = field(default_factory=ClusterConfig)
    poi: POIConfig = field(default_factory=POIConfig)
    drawing: DrawingConfig = field(default_factory=DrawingConfig)
    log_level: str = "INFO"

    def __post_init__(self):
        if self.log_level.upper() not in VALID_LOG_LEVELS:
            raise ValueError(
                f"Invalid log_level: {self.log_level}. "
                f"Must be one of {sorted(VALID_LOG_LEVELS)}"
            )

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "LookoutConfig":
        """
        Load configuration from YAML file.

        Example YAML:
            log_level: INFO

            validation:
              min_area_degrees: 0.001
              circle_min_radius: 10
              circle_max_radius: 50000

            clustering:
              radius: 50
              max_zoom: 15

            poi:
              min_distance: 10
              snap_distance: 20

            drawing:
              close_threshold_degrees: 0.002

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the YAML is malformed or a value is out of range
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        try:
            with open(yaml_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {yaml_path}: {e}")

        if not isinstance(data, dict):
            raise ValueError(f"Config root must be a mapping, got {type(data).__name__}")

        try:
            return cls(
                validation=ValidationConfig(**data.get("validation", {})),
                clustering=ClusterConfig(**data.get("clustering", {})),
                poi=POIConfig(**data.get("poi", {})),
                drawing=DrawingConfig(**data.get("drawing", {})),
                log_level=str(data.get("log_level", "INFO")),
            )
        except TypeError as e:
            raise ValueError(f"Unknown config key in {yaml_path}: {e}")
