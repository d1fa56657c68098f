"""
Lookout AOI v1.0
================

Bounded Context: Areas of interest over geolocated events.

Design Philosophy:
- Separation of Concerns: Geometry, Analytics, Clustering, Drawing separated
- Pure core: validation, containment and cluster queries never mutate inputs
- Validation failures are results, not exceptions
- Pragmatism > Purism: numpy masks, scipy KD-trees, supervision palettes

Architecture:

    lookout_aoi/
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── shapes.py      # MapPoint, Triangle, Circle, Polygon, POI
    │   ├── predicates.py  # Haversine, point-in-shape (vectorised)
    │   ├── validation.py  # Area, self-intersection, size limits
    │   └── detector.py    # AOIDetector (stateless containment masks)
    │
    ├── analytics/         # Containment analysis & summary statistics
    │   └── analyzer.py    # AOIAnalysis, SpatialAnalysisSummary
    │
    ├── clustering/        # Zoom-dependent marker aggregation
    │   ├── projection.py  # WGS84 <-> unit spherical Mercator
    │   ├── index.py       # ClusterIndex, ClusterFeature
    │   └── engine.py      # initialize_clustering, get_clusters, ...
    │
    ├── policies/          # Colour cycling, POI rules
    ├── drawing/           # Drawing state machines + map controller
    ├── registry.py        # AOIRegistry (append-only session collection)
    ├── datasets.py        # Event dataset loader
    └── config.py          # YAML configuration

Usage:

    # 1. Load locations
    from lookout_aoi import load_events

    dataset = load_events("data/sample_events.yaml")
    locations = dataset.all_locations()

    # 2. Validate and collect shapes
    from lookout_aoi import AOIRegistry, Circle

    registry = AOIRegistry()
    error = registry.submit(Circle(
        id="circle_1",
        name="Investigation Circle A",
        center=(-0.1235, 51.512),
        radius=500,
        color=registry.next_color("circle"),
    ))

    # 3. Analyse containment
    analyses = registry.analyze(locations)
    summary = registry.summary(locations)

    # 4. Cluster markers for a viewport
    from lookout_aoi import initialize_clustering, get_clusters

    index = initialize_clustering(locations)
    features = get_clusters(index, (-0.13, 51.51, -0.12, 51.52), zoom=12)
"""

# Geometry Layer (immutable, stateless)
from lookout_aoi.geometry import (
    AOI,
    AOIType,
    Circle,
    MapPoint,
    POI,
    Polygon,
    Triangle,
    AOIDetector,
    calculate_distance,
    haversine_distance,
    is_point_in_circle,
    is_point_in_polygon,
    is_point_in_triangle,
    validate_circle,
    validate_polygon,
    validate_triangle,
)

# Analytics Layer
from lookout_aoi.analytics import (
    AOIAnalysis,
    SpatialAnalysisSummary,
    analyze_all_aois,
    get_spatial_analysis_summary,
)

# Clustering Layer
from lookout_aoi.clustering import (
    ClusterFeature,
    ClusterIndex,
    ClusterNotFoundError,
    get_cluster_points,
    get_clusters,
    initialize_clustering,
    should_cluster,
)

# Policies
from lookout_aoi.policies import (
    assign_circle_color,
    assign_poi_color,
    assign_polygon_color,
    assign_triangle_color,
    snap_poi_coordinates,
    validate_poi,
    validate_poi_location,
)

# Stateful collaborators
from lookout_aoi.config import LookoutConfig
from lookout_aoi.registry import AOIRegistry, load_aois
from lookout_aoi.datasets import EventDataset, MessageGroup, load_events
from lookout_aoi.drawing import DrawingController

__version__ = "1.0.0"

__all__ = [
    # Geometry
    "AOI",
    "AOIType",
    "Circle",
    "MapPoint",
    "POI",
    "Polygon",
    "Triangle",
    "AOIDetector",
    "calculate_distance",
    "haversine_distance",
    "is_point_in_circle",
    "is_point_in_polygon",
    "is_point_in_triangle",
    "validate_circle",
    "validate_polygon",
    "validate_triangle",
    # Analytics
    "AOIAnalysis",
    "SpatialAnalysisSummary",
    "analyze_all_aois",
    "get_spatial_analysis_summary",
    # Clustering
    "ClusterFeature",
    "ClusterIndex",
    "ClusterNotFoundError",
    "get_cluster_points",
    "get_clusters",
    "initialize_clustering",
    "should_cluster",
    # Policies
    "assign_circle_color",
    "assign_poi_color",
    "assign_polygon_color",
    "assign_triangle_color",
    "snap_poi_coordinates",
    "validate_poi",
    "validate_poi_location",
    # Collaborators
    "LookoutConfig",
    "AOIRegistry",
    "load_aois",
    "EventDataset",
    "MessageGroup",
    "load_events",
    "DrawingController",
]
