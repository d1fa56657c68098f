"""
Clustering Layer
================

Bounded Context: Zoom-dependent aggregation of nearby markers.

Responsibilities:
- Build a per-zoom cluster hierarchy (build once, query many)
- Answer viewport queries with clusters or single points
- Expand clusters into children / leaves
"""

from lookout_aoi.clustering.index import (
    CLUSTER_EXTENT,
    CLUSTER_MAX_ZOOM,
    CLUSTER_MIN_POINTS,
    CLUSTER_MIN_ZOOM,
    CLUSTER_RADIUS,
    ClusterFeature,
    ClusterIndex,
    ClusterNotFoundError,
    abbreviate_count,
)
from lookout_aoi.clustering.engine import (
    create_cluster_index,
    get_cluster_points,
    get_clustering_distance,
    get_clusters,
    initialize_clustering,
    map_points_to_geojson,
    should_cluster,
)

__all__ = [
    "CLUSTER_EXTENT",
    "CLUSTER_MAX_ZOOM",
    "CLUSTER_MIN_POINTS",
    "CLUSTER_MIN_ZOOM",
    "CLUSTER_RADIUS",
    "ClusterFeature",
    "ClusterIndex",
    "ClusterNotFoundError",
    "abbreviate_count",
    "create_cluster_index",
    "get_cluster_points",
    "get_clustering_distance",
    "get_clusters",
    "initialize_clustering",
    "map_points_to_geojson",
    "should_cluster",
]
