"""
Clustering Engine
=================

Module-level entry points over ClusterIndex, the surface the map layer
calls once per render frame.

Usage:
    index = initialize_clustering(points)
    if should_cluster(zoom):
        features = get_clusters(index, bbox, zoom)
"""

import math
from typing import Any, Dict, List, Optional, Sequence

from lookout_aoi.geometry.shapes import MapPoint
from lookout_aoi.clustering.index import (
    CLUSTER_MAX_ZOOM,
    BBox,
    ClusterFeature,
    ClusterIndex,
    ClusterNotFoundError,
)
from lookout_aoi.logging import StructuredLogger


def create_cluster_index(config=None, logger: Optional[StructuredLogger] = None) -> ClusterIndex:
    """Empty index with default or configured parameters."""
    if config is None:
        return ClusterIndex(logger=logger)
    return ClusterIndex.from_config(config, logger=logger)


def initialize_clustering(
    points: Sequence[MapPoint],
    config=None,
    logger: Optional[StructuredLogger] = None
) -> ClusterIndex:
    """
    Build a cluster index for a point set.

    Args:
        points: Locations to cluster
        config: Optional ClusterConfig (radius 50, zooms 0..15, 2 points)
        logger: Optional structured logger

    Returns:
        Loaded ClusterIndex
    """
    return create_cluster_index(config, logger).load(points)


def get_clusters(index: ClusterIndex, bbox: BBox, zoom: float) -> List[ClusterFeature]:
    """Markers (clusters and single points) for a viewport at a zoom."""
    return index.get_clusters(bbox, math.floor(zoom))


def should_cluster(zoom: float) -> bool:
    return zoom < CLUSTER_MAX_ZOOM


def get_cluster_points(index: ClusterIndex, cluster_id: int) -> List[ClusterFeature]:
    """
    Every original point aggregated into a cluster.

    Unknown cluster ids yield an empty list.
    """
    try:
        return index.get_leaves(cluster_id)
    except ClusterNotFoundError:
        return []


def get_clustering_distance(zoom: float) -> float:
    """Merge distance in degrees for direct (non-index) decisions; halves per zoom."""
    return 1.0 / (2 ** zoom)


def map_points_to_geojson(points: Sequence[MapPoint]) -> List[Dict[str, Any]]:
    """GeoJSON Point features with the MapPoint fields as properties."""
    return [
        {
            'type': 'Feature',
            'geometry': {'type': 'Point', 'coordinates': [point.lng, point.lat]},
            'properties': point.to_dict(),
        }
        for point in points
    ]
