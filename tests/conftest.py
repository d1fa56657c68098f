import sys
from pathlib import Path

import pytest


def _ensure_repo_root_first() -> Path:
    repo_root = Path(__file__).resolve().parents[1]
    repo_root_str = str(repo_root)
    if repo_root_str in sys.path:
        sys.path.remove(repo_root_str)
    sys.path.insert(0, repo_root_str)
    return repo_root


REPO_ROOT = _ensure_repo_root_first()

from lookout_aoi.geometry.shapes import MapPoint  # noqa: E402


# Eight events within ~200 m around Covent Garden piazza
COVENT_GARDEN = [
    ("cg_001", (-0.1235, 51.5120)),
    ("cg_002", (-0.1230, 51.5122)),
    ("cg_003", (-0.1240, 51.5118)),
    ("cg_004", (-0.1238, 51.5124)),
    ("cg_005", (-0.1229, 51.5116)),
    ("cg_006", (-0.1241, 51.5121)),
    ("cg_007", (-0.1233, 51.5117)),
    ("cg_008", (-0.1236, 51.5123)),
]


def make_point(point_id, coordinates, message_id="msg_test"):
    return MapPoint(
        id=point_id,
        coordinates=coordinates,
        label=point_id,
        message_id=message_id,
    )


@pytest.fixture
def covent_garden_points():
    return [make_point(point_id, coords, "msg_covent_garden") for point_id, coords in COVENT_GARDEN]


@pytest.fixture
def sample_dataset_path():
    return REPO_ROOT / "data" / "sample_events.yaml"


@pytest.fixture
def sample_aois_path():
    return REPO_ROOT / "config" / "aois.yaml"
