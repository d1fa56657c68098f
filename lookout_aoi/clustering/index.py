"""
Cluster Index Module
====================

Hierarchical greedy point clustering, one level per zoom.

Design:
- Points are projected once onto the unit Mercator square
- Level max_zoom + 1 holds the raw points; each coarser level is built by
  greedily merging points of the level below within
  radius / (extent * 2^zoom) of a seed into a weighted-centre cluster
- Each level keeps a KD-tree (scipy cKDTree) for radius queries and plain
  numpy arrays for bounding-box queries
- Built once per point set, then queried read-only (get_clusters never
  mutates the index)
- Non-finite coordinates are left out of the index instead of raising

Cluster ids encode their origin: id = (index_in_level << 5) + origin_zoom
+ number_of_points, so a cluster can be expanded without a lookup table.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np
from scipy.spatial import cKDTree

from lookout_aoi.geometry.shapes import Coordinate, MapPoint
from lookout_aoi.clustering.projection import clamp_lat, lat_y, lng_x, wrap_lng, x_lng, y_lat
from lookout_aoi.logging import LogEvent, StructuredLogger, create_logger

CLUSTER_RADIUS = 50  # pixels
CLUSTER_MAX_ZOOM = 15  # individual markers from city block level up
CLUSTER_MIN_ZOOM = 0
CLUSTER_MIN_POINTS = 2
CLUSTER_EXTENT = 512  # tile extent the radius is measured in

BBox = Tuple[float, float, float, float]  # (west, south, east, north)


class ClusterNotFoundError(KeyError):
    """Raised when a cluster id does not belong to this index."""
    pass


def abbreviate_count(count: int) -> str:
    """'950', '1.2k', '12k'."""
    if count >= 10000:
        return f"{math.floor(count / 1000 + 0.5)}k"
    if count >= 1000:
        return f"{math.floor(count / 100 + 0.5) / 10:g}k"
    return str(count)


@dataclass(frozen=True)
class ClusterFeature:
    """
    One marker to display: either an aggregate cluster or a single point.

    Attributes:
        coordinates: (lng, lat) of the marker
        cluster: True for aggregates
        cluster_id: Aggregate id (None for leaves)
        point_count: Number of original points represented
        point: Original MapPoint (leaves only)
    """

    coordinates: Coordinate
    cluster: bool
    cluster_id: Optional[int] = None
    point_count: int = 1
    point: Optional[MapPoint] = None

    @property
    def point_count_abbreviated(self) -> str:
        return abbreviate_count(self.point_count)

    def to_geojson(self) -> Dict[str, Any]:
        """GeoJSON Feature; leaves carry the MapPoint fields as properties."""
        geometry = {'type': 'Point', 'coordinates': list(self.coordinates)}
        if self.cluster:
            return {
                'type': 'Feature',
                'id': self.cluster_id,
                'geometry': geometry,
                'properties': {
                    'cluster': True,
                    'cluster_id': self.cluster_id,
                    'point_count': self.point_count,
                    'point_count_abbreviated': self.point_count_abbreviated,
                },
            }
        properties = self.point.to_dict() if self.point else {}
        properties['cluster'] = False
        return {'type': 'Feature', 'geometry': geometry, 'properties': properties}


@dataclass
class _ZoomLevel:
    """
    Column store for one zoom level.

    zooms/parents are written while the next coarser level is built and
    are read-only afterwards.
    """

    xs: np.ndarray
    ys: np.ndarray
    ids: np.ndarray
    num_points: np.ndarray
    zooms: np.ndarray = field(init=False)
    parents: np.ndarray = field(init=False)
    tree: Optional[cKDTree] = field(init=False)

    def __post_init__(self):
        self.zooms = np.full(len(self.xs), np.inf)
        self.parents = np.full(len(self.xs), -1, dtype=np.int64)
        if len(self.xs) > 0:
            self.tree = cKDTree(np.column_stack((self.xs, self.ys)))
        else:
            self.tree = None

    @classmethod
    def from_rows(cls, rows: List[Tuple[float, float, int, int]]) -> "_ZoomLevel":
        if not rows:
            empty = np.empty(0)
            return cls(empty, empty, np.empty(0, dtype=np.int64), np.empty(0, dtype=np.int64))
        xs, ys, ids, num_points = zip(*rows)
        return cls(
            np.asarray(xs, dtype=float),
            np.asarray(ys, dtype=float),
            np.asarray(ids, dtype=np.int64),
            np.asarray(num_points, dtype=np.int64),
        )

    def __len__(self) -> int:
        return len(self.xs)

    def within(self, x: float, y: float, r: float) -> List[int]:
        """Indices within Euclidean distance r of (x, y), ascending."""
        if self.tree is None:
            return []
        return sorted(self.tree.query_ball_point([x, y], r))

    def range(self, min_x: float, min_y: float, max_x: float, max_y: float) -> np.ndarray:
        """Indices inside the axis-aligned box, ascending."""
        inside = (
            (self.xs >= min_x) & (self.xs <= max_x)
            & (self.ys >= min_y) & (self.ys <= max_y)
        )
        return np.nonzero(inside)[0]


class ClusterIndex:
    """
    Zoom-aware point cluster index.

    Lifecycle: build (load) -> query repeatedly -> rebuild when the point
    set changes.

    Usage:
        index = ClusterIndex().load(points)
        features = index.get_clusters((-0.2, 51.4, -0.05, 51.6), zoom=12)
        leaves = index.get_leaves(features[0].cluster_id)
    """

    def __init__(
        self,
        radius: float = CLUSTER_RADIUS,
        max_zoom: int = CLUSTER_MAX_ZOOM,
        min_zoom: int = CLUSTER_MIN_ZOOM,
        min_points: int = CLUSTER_MIN_POINTS,
        extent: int = CLUSTER_EXTENT,
        logger: Optional[StructuredLogger] = None,
    ):
        if not 0 <= min_zoom <= max_zoom <= 30:
            raise ValueError(
                f"Zoom range must satisfy 0 <= min_zoom <= max_zoom <= 30, "
                f"got [{min_zoom}, {max_zoom}]"
            )
        self.radius = radius
        self.max_zoom = max_zoom
        self.min_zoom = min_zoom
        self.min_points = min_points
        self.extent = extent
        self.logger = logger or create_logger("clustering")

        self._points: Tuple[MapPoint, ...] = ()
        self._leaves: Tuple[ClusterFeature, ...] = ()
        self._levels: Dict[int, _ZoomLevel] = {}
        self.skipped_points: Tuple[MapPoint, ...] = ()

    @classmethod
    def from_config(cls, config, logger: Optional[StructuredLogger] = None) -> "ClusterIndex":
        """Build an empty index from a ClusterConfig."""
        return cls(
            radius=config.radius,
            max_zoom=config.max_zoom,
            min_zoom=config.min_zoom,
            min_points=config.min_points,
            extent=config.extent,
            logger=logger,
        )

    @property
    def points(self) -> Tuple[MapPoint, ...]:
        """Points held by the index (non-finite ones excluded)."""
        return self._points

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"ClusterIndex(points={len(self._points)}, zooms=[{self.min_zoom}, {self.max_zoom}])"

    def load(self, points: Sequence[MapPoint]) -> "ClusterIndex":
        """
        (Re)build the index for a point set.

        Points whose coordinates are not finite are skipped, recorded in
        skipped_points and logged; they never raise.

        Returns:
            Self for chaining
        """
        kept: List[MapPoint] = []
        skipped: List[MapPoint] = []
        for point in points:
            if math.isfinite(point.lng) and math.isfinite(point.lat):
                kept.append(point)
            else:
                skipped.append(point)

        self._points = tuple(kept)
        self.skipped_points = tuple(skipped)
        self._leaves = tuple(
            ClusterFeature(coordinates=point.coordinates, cluster=False, point=point)
            for point in kept
        )

        if skipped:
            self.logger.warning(
                event=LogEvent.CLUSTER_POINTS_SKIPPED,
                message="Skipped points with non-finite coordinates",
                metadata={'skipped': len(skipped), 'ids': [p.id for p in skipped][:20]},
            )

        rows = [
            (lng_x(point.lng), lat_y(point.lat), index, 1)
            for index, point in enumerate(kept)
        ]
        levels = {self.max_zoom + 1: _ZoomLevel.from_rows(rows)}
        for zoom in range(self.max_zoom, self.min_zoom - 1, -1):
            levels[zoom] = _ZoomLevel.from_rows(self._cluster(levels[zoom + 1], zoom))
        self._levels = levels

        self.logger.debug(
            event=LogEvent.CLUSTER_INDEX_BUILT,
            message="Cluster index built",
            metadata={
                'points': len(kept),
                'clusters_at_min_zoom': len(levels[self.min_zoom]),
            },
        )
        return self

    def _cluster(self, level: _ZoomLevel, zoom: int) -> List[Tuple[float, float, int, int]]:
        """Greedily merge level (zoom + 1) into the rows of level zoom."""
        r = self.radius / (self.extent * 2 ** zoom)
        next_rows: List[Tuple[float, float, int, int]] = []
        n_points = len(self._points)

        for i in range(len(level)):
            if level.zooms[i] <= zoom:
                continue
            level.zooms[i] = zoom

            x = float(level.xs[i])
            y = float(level.ys[i])
            neighbor_ids = level.within(x, y, r)

            num_points_origin = int(level.num_points[i])
            num_points = num_points_origin
            for k in neighbor_ids:
                if level.zooms[k] > zoom:
                    num_points += int(level.num_points[k])

            if num_points > num_points_origin and num_points >= self.min_points:
                wx = x * num_points_origin
                wy = y * num_points_origin
                cluster_id = (i << 5) + (zoom + 1) + n_points

                for k in neighbor_ids:
                    if level.zooms[k] <= zoom:
                        continue
                    level.zooms[k] = zoom
                    weight = int(level.num_points[k])
                    wx += float(level.xs[k]) * weight
                    wy += float(level.ys[k]) * weight
                    level.parents[k] = cluster_id

                level.parents[i] = cluster_id
                next_rows.append((wx / num_points, wy / num_points, cluster_id, num_points))
            else:
                next_rows.append((x, y, int(level.ids[i]), num_points_origin))

                if num_points > 1:
                    # too few to form a cluster: carry neighbours up unmerged
                    for k in neighbor_ids:
                        if level.zooms[k] <= zoom:
                            continue
                        level.zooms[k] = zoom
                        next_rows.append((
                            float(level.xs[k]),
                            float(level.ys[k]),
                            int(level.ids[k]),
                            int(level.num_points[k]),
                        ))

        return next_rows

    def _limit_zoom(self, zoom: float) -> int:
        return max(self.min_zoom, min(math.floor(zoom), self.max_zoom + 1))

    def _feature(self, level: _ZoomLevel, k: int) -> ClusterFeature:
        if level.num_points[k] > 1:
            return ClusterFeature(
                coordinates=(x_lng(float(level.xs[k])), y_lat(float(level.ys[k]))),
                cluster=True,
                cluster_id=int(level.ids[k]),
                point_count=int(level.num_points[k]),
            )
        return self._leaves[int(level.ids[k])]

    def get_clusters(self, bbox: BBox, zoom: float) -> List[ClusterFeature]:
        """
        Markers visible in a bounding box at a zoom level.

        Args:
            bbox: (west, south, east, north) in degrees; west > east means
                the box crosses the antimeridian
            zoom: Map zoom, floored and limited to [min_zoom, max_zoom + 1]

        Returns:
            Cluster and leaf features
        """
        west, south, east, north = bbox
        min_lng = wrap_lng(west)
        min_lat = clamp_lat(south)
        max_lng = 180.0 if east == 180 else wrap_lng(east)
        max_lat = clamp_lat(north)

        if east - west >= 360:
            min_lng = -180.0
            max_lng = 180.0
        elif min_lng > max_lng:
            eastern = self.get_clusters((min_lng, min_lat, 180.0, max_lat), zoom)
            western = self.get_clusters((-180.0, min_lat, max_lng, max_lat), zoom)
            return eastern + western

        level = self._levels.get(self._limit_zoom(zoom))
        if level is None:
            return []

        ids = level.range(lng_x(min_lng), lat_y(max_lat), lng_x(max_lng), lat_y(min_lat))
        return [self._feature(level, int(k)) for k in ids]

    def _origin(self, cluster_id: int) -> Tuple[int, int]:
        offset = cluster_id - len(self._points)
        return offset >> 5, offset % 32

    def get_children(self, cluster_id: int) -> List[ClusterFeature]:
        """
        Direct children of a cluster (one zoom level finer).

        Raises:
            ClusterNotFoundError: If cluster_id is not a cluster of this index
        """
        origin_id, origin_zoom = self._origin(cluster_id)
        level = self._levels.get(origin_zoom)
        if cluster_id < len(self._points) or level is None or origin_id >= len(level):
            raise ClusterNotFoundError(f"No cluster with id {cluster_id}")

        r = self.radius / (self.extent * 2 ** (origin_zoom - 1))
        neighbor_ids = level.within(float(level.xs[origin_id]), float(level.ys[origin_id]), r)

        children = [
            self._feature(level, k)
            for k in neighbor_ids
            if level.parents[k] == cluster_id
        ]
        if not children:
            raise ClusterNotFoundError(f"No cluster with id {cluster_id}")
        return children

    def get_leaves(
        self,
        cluster_id: int,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[ClusterFeature]:
        """
        Original points aggregated into a cluster.

        Args:
            cluster_id: Aggregate id
            limit: Maximum number of leaves (None = all)
            offset: Number of leaves to skip

        Raises:
            ClusterNotFoundError: If cluster_id is not a cluster of this index
        """
        leaves: List[ClusterFeature] = []
        self._append_leaves(leaves, cluster_id, limit, offset, 0)
        return leaves

    def _append_leaves(
        self,
        result: List[ClusterFeature],
        cluster_id: int,
        limit: Optional[int],
        offset: int,
        skipped: int
    ) -> int:
        for child in self.get_children(cluster_id):
            if child.cluster:
                if skipped + child.point_count <= offset:
                    skipped += child.point_count
                else:
                    skipped = self._append_leaves(result, child.cluster_id, limit, offset, skipped)
            elif skipped < offset:
                skipped += 1
            else:
                result.append(child)

            if limit is not None and len(result) >= limit:
                break

        return skipped

    def get_cluster_expansion_zoom(self, cluster_id: int) -> int:
        """Lowest zoom at which the cluster splits into several markers."""
        expansion_zoom = self._origin(cluster_id)[1] - 1
        while expansion_zoom <= self.max_zoom:
            children = self.get_children(cluster_id)
            expansion_zoom += 1
            if len(children) != 1:
                break
            cluster_id = children[0].cluster_id
        return expansion_zoom
