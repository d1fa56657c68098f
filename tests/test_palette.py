import pytest

from lookout_aoi.geometry.shapes import AOIType
from lookout_aoi.policies.palette import (
    CIRCLE_COLORS,
    POLYGON_COLORS,
    TRIANGLE_COLORS,
    assign_circle_color,
    assign_color,
    assign_poi_color,
    assign_polygon_color,
    assign_triangle_color,
)

EXPECTED = ["#4CBACB", "#E74C3C", "#F39C12", "#27AE60", "#8E44AD", "#3498DB"]


def test_palettes_have_six_colors() -> None:
    assert TRIANGLE_COLORS == EXPECTED
    assert CIRCLE_COLORS == EXPECTED
    assert POLYGON_COLORS == EXPECTED


@pytest.mark.parametrize(
    "assign",
    [assign_triangle_color, assign_circle_color, assign_polygon_color, assign_poi_color],
)
def test_colors_cycle_by_count(assign) -> None:
    for count in range(len(EXPECTED) * 2):
        assert assign(count) == EXPECTED[count % len(EXPECTED)]
    assert assign(100) == EXPECTED[100 % 6]


def test_assign_color_accepts_kind_string() -> None:
    assert assign_color("circle", 1) == "#E74C3C"
    assert assign_color(AOIType.POLYGON, 0) == "#4CBACB"
