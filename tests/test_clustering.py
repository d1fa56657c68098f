import logging
import math

import pytest

from lookout_aoi.clustering import (
    CLUSTER_MAX_ZOOM,
    ClusterIndex,
    ClusterNotFoundError,
    abbreviate_count,
    get_cluster_points,
    get_clustering_distance,
    get_clusters,
    initialize_clustering,
    map_points_to_geojson,
    should_cluster,
)
from lookout_aoi.clustering.projection import lat_y, lng_x, wrap_lng, x_lng, y_lat
from lookout_aoi.config import ClusterConfig
from lookout_aoi.geometry.shapes import MapPoint

COVENT_GARDEN_BBOX = (-0.13, 51.51, -0.12, 51.52)
WORLD = (-180.0, -90.0, 180.0, 90.0)


def point(point_id, lng, lat):
    return MapPoint(id=point_id, coordinates=(lng, lat), label=point_id, message_id="msg")


@pytest.fixture
def spread_points(covent_garden_points):
    """Covent Garden plus a few far-apart cities."""
    return covent_garden_points + [
        point("paris", 2.3522, 48.8566),
        point("new_york", -74.0060, 40.7128),
        point("tokyo", 139.6917, 35.6895),
        point("kings_cross", -0.1240, 51.5308),
    ]


def _represented(features):
    return sum(feature.point_count for feature in features)


def test_covent_garden_single_cluster_at_zoom_12(covent_garden_points) -> None:
    index = initialize_clustering(covent_garden_points)
    features = get_clusters(index, COVENT_GARDEN_BBOX, 12)

    assert len(features) == 1
    assert features[0].cluster is True
    assert features[0].point_count == 8


def test_covent_garden_individual_points_at_zoom_16(covent_garden_points) -> None:
    index = initialize_clustering(covent_garden_points)
    features = get_clusters(index, COVENT_GARDEN_BBOX, 16)

    assert len(features) == 8
    assert all(not feature.cluster for feature in features)
    assert {feature.point.id for feature in features} == {p.id for p in covent_garden_points}


def test_leaves_keep_original_points(covent_garden_points) -> None:
    index = initialize_clustering(covent_garden_points)
    features = get_clusters(index, COVENT_GARDEN_BBOX, 16)
    originals = {id(p) for p in covent_garden_points}
    assert all(id(feature.point) in originals for feature in features)
    assert all(feature.coordinates == feature.point.coordinates for feature in features)


def test_fractional_zoom_is_floored(covent_garden_points) -> None:
    index = initialize_clustering(covent_garden_points)
    assert get_clusters(index, COVENT_GARDEN_BBOX, 12.9) == get_clusters(index, COVENT_GARDEN_BBOX, 12)


def test_get_clusters_is_idempotent(spread_points) -> None:
    index = initialize_clustering(spread_points)
    first = get_clusters(index, WORLD, 3)
    second = get_clusters(index, WORLD, 3)
    assert first == second


@pytest.mark.parametrize("zoom", range(0, 17))
def test_every_point_represented_once_at_every_zoom(spread_points, zoom) -> None:
    index = initialize_clustering(spread_points)
    assert _represented(get_clusters(index, WORLD, zoom)) == len(spread_points)


def test_marker_count_never_decreases_with_zoom(spread_points) -> None:
    index = initialize_clustering(spread_points)
    counts = [len(get_clusters(index, WORLD, zoom)) for zoom in range(0, 17)]
    assert counts == sorted(counts)
    assert counts[-1] == len(spread_points)


@pytest.mark.parametrize("zoom", [0, 5, 10, 12, 14])
def test_leaf_count_matches_point_count(spread_points, zoom) -> None:
    index = initialize_clustering(spread_points)
    for feature in get_clusters(index, WORLD, zoom):
        if feature.cluster:
            leaves = get_cluster_points(index, feature.cluster_id)
            assert len(leaves) == feature.point_count
            assert all(not leaf.cluster for leaf in leaves)


def test_leaves_are_distinct_original_points(covent_garden_points) -> None:
    index = initialize_clustering(covent_garden_points)
    cluster = get_clusters(index, COVENT_GARDEN_BBOX, 12)[0]
    leaves = get_cluster_points(index, cluster.cluster_id)
    assert sorted(leaf.point.id for leaf in leaves) == sorted(p.id for p in covent_garden_points)


def test_get_leaves_pagination(covent_garden_points) -> None:
    index = initialize_clustering(covent_garden_points)
    cluster = get_clusters(index, COVENT_GARDEN_BBOX, 12)[0]
    everything = index.get_leaves(cluster.cluster_id)

    first_page = index.get_leaves(cluster.cluster_id, limit=3)
    second_page = index.get_leaves(cluster.cluster_id, limit=3, offset=3)

    assert first_page == everything[:3]
    assert second_page == everything[3:6]


def test_get_children_sum_to_parent(covent_garden_points) -> None:
    index = initialize_clustering(covent_garden_points)
    cluster = get_clusters(index, COVENT_GARDEN_BBOX, 12)[0]
    children = index.get_children(cluster.cluster_id)
    assert sum(child.point_count for child in children) == cluster.point_count


def test_expansion_zoom_splits_cluster(covent_garden_points) -> None:
    index = initialize_clustering(covent_garden_points)
    cluster = get_clusters(index, COVENT_GARDEN_BBOX, 12)[0]
    expansion_zoom = index.get_cluster_expansion_zoom(cluster.cluster_id)

    assert 12 < expansion_zoom <= CLUSTER_MAX_ZOOM + 1
    assert len(get_clusters(index, COVENT_GARDEN_BBOX, expansion_zoom)) > 1


def test_unknown_cluster_id(covent_garden_points) -> None:
    index = initialize_clustering(covent_garden_points)
    with pytest.raises(ClusterNotFoundError):
        index.get_children(999_999)
    with pytest.raises(KeyError):
        index.get_leaves(3)
    assert get_cluster_points(index, 999_999) == []


def test_bbox_excludes_points_outside(spread_points) -> None:
    index = initialize_clustering(spread_points)
    features = get_clusters(index, COVENT_GARDEN_BBOX, 16)
    assert len(features) == 8


def test_antimeridian_bbox(spread_points) -> None:
    index = initialize_clustering(spread_points)
    features = get_clusters(index, (130.0, 20.0, -60.0, 60.0), 16)
    ids = {feature.point.id for feature in features}
    assert ids == {"tokyo", "new_york"}


def test_full_longitude_span_is_world(spread_points) -> None:
    index = initialize_clustering(spread_points)
    assert get_clusters(index, (-200.0, -90.0, 200.0, 90.0), 16) == get_clusters(index, WORLD, 16)


def test_non_finite_points_skipped(covent_garden_points, caplog) -> None:
    bad = [point("nan", float("nan"), 51.5), point("inf", 0.0, float("inf"))]
    with caplog.at_level(logging.WARNING, logger="lookout.clustering"):
        index = initialize_clustering(covent_garden_points + bad)

    assert len(index) == 8
    assert [p.id for p in index.skipped_points] == ["nan", "inf"]
    assert "cluster.points.skipped" in caplog.text
    assert _represented(get_clusters(index, WORLD, 0)) == 8


def test_out_of_range_points_do_not_raise() -> None:
    index = initialize_clustering([point("far", 500.0, 95.0), point("ok", 0.0, 0.0)])
    assert len(index) == 2


def test_empty_index() -> None:
    index = initialize_clustering([])
    assert get_clusters(index, WORLD, 5) == []


def test_configured_index() -> None:
    index = initialize_clustering([point("a", 0.0, 0.0)], config=ClusterConfig(max_zoom=10, radius=80))
    assert index.max_zoom == 10
    assert index.radius == 80


def test_invalid_zoom_range() -> None:
    with pytest.raises(ValueError):
        ClusterIndex(min_zoom=5, max_zoom=3)


def test_should_cluster_boundary() -> None:
    assert should_cluster(14) is True
    assert should_cluster(14.9) is True
    assert should_cluster(15) is False


def test_clustering_distance_halves_per_zoom() -> None:
    assert get_clustering_distance(0) == 1.0
    assert get_clustering_distance(3) == pytest.approx(get_clustering_distance(2) / 2)
    distances = [get_clustering_distance(zoom) for zoom in range(20)]
    assert distances == sorted(distances, reverse=True)


@pytest.mark.parametrize(
    "count, expected",
    [(8, "8"), (999, "999"), (1234, "1.2k"), (2000, "2k"), (12_345, "12k")],
)
def test_abbreviate_count(count, expected) -> None:
    assert abbreviate_count(count) == expected


def test_cluster_geojson(covent_garden_points) -> None:
    index = initialize_clustering(covent_garden_points)
    feature = get_clusters(index, COVENT_GARDEN_BBOX, 12)[0].to_geojson()

    assert feature['type'] == 'Feature'
    assert feature['geometry']['type'] == 'Point'
    assert feature['properties']['cluster'] is True
    assert feature['properties']['point_count'] == 8
    assert feature['properties']['point_count_abbreviated'] == "8"

    lng, lat = feature['geometry']['coordinates']
    assert -0.1242 < lng < -0.1228
    assert 51.5115 < lat < 51.5125


def test_leaf_geojson(covent_garden_points) -> None:
    index = initialize_clustering(covent_garden_points)
    leaf = get_clusters(index, COVENT_GARDEN_BBOX, 16)[0].to_geojson()
    assert leaf['properties']['cluster'] is False
    assert leaf['properties']['message_id'] == "msg_covent_garden"


def test_map_points_to_geojson_keeps_lng_lat_order(covent_garden_points) -> None:
    features = map_points_to_geojson(covent_garden_points[:1])
    assert features[0]['geometry']['coordinates'] == [-0.1235, 51.5120]
    assert features[0]['properties']['id'] == "cg_001"


def test_projection_round_trip() -> None:
    assert x_lng(lng_x(-0.1235)) == pytest.approx(-0.1235)
    assert y_lat(lat_y(51.512)) == pytest.approx(51.512)
    assert lat_y(90.0) == 0.0
    assert lat_y(-90.0) == 1.0
    assert wrap_lng(190.0) == pytest.approx(-170.0)
    assert math.isclose(lng_x(180.0), 1.0)
