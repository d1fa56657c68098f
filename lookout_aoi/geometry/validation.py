"""
Geometry Validation Module
==========================

Rejects shapes that are too small, too large or self-intersecting before
they are committed to the AOI collection.

Design:
- Validation failures are returned as result records, never raised
- Checks are ordered and short-circuit: the first failing check is the
  single reported error
- Areas are planar, in square degrees (shoelace formula)
"""

import math
from dataclasses import dataclass
from typing import Optional, Sequence

from lookout_aoi.geometry.shapes import Coordinate

MIN_AREA_DEGREES = 0.001  # ~100 m² at the equator
MIN_AREA_THRESHOLD = MIN_AREA_DEGREES
CIRCLE_MIN_RADIUS = 10  # meters
CIRCLE_MAX_RADIUS = 50000  # meters
COLLINEAR_EPSILON = 1e-10


@dataclass(frozen=True)
class TriangleValidationResult:
    valid: bool
    area: float
    error: Optional[str] = None


@dataclass(frozen=True)
class CircleValidationResult:
    valid: bool
    radius: float
    area: Optional[float] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class PolygonValidationResult:
    valid: bool
    area: Optional[float] = None
    self_intersects: Optional[bool] = None
    error: Optional[str] = None


def calculate_triangle_area(vertices: Sequence[Coordinate]) -> float:
    """
    Shoelace area of a triangle: 0.5 * |x1(y2-y3) + x2(y3-y1) + x3(y1-y2)|.

    Independent of winding order.
    """
    (x1, y1), (x2, y2), (x3, y3) = vertices
    return abs(0.5 * (x1 * (y2 - y3) + x2 * (y3 - y1) + x3 * (y1 - y2)))


def calculate_polygon_area(vertices: Sequence[Coordinate]) -> float:
    """
    Shoelace area over all vertices (modulo n). 0 for fewer than 3 vertices.
    """
    n = len(vertices)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        j = (i + 1) % n
        area += vertices[i][0] * vertices[j][1]
        area -= vertices[j][0] * vertices[i][1]

    return abs(area) / 2


def _orientation(p: Coordinate, q: Coordinate, r: Coordinate) -> int:
    """0 = collinear, 1 = clockwise, 2 = counterclockwise."""
    val = (q[1] - p[1]) * (r[0] - q[0]) - (q[0] - p[0]) * (r[1] - q[1])
    if abs(val) < COLLINEAR_EPSILON:
        return 0
    return 1 if val > 0 else 2


def _on_segment(p: Coordinate, q: Coordinate, r: Coordinate) -> bool:
    """Whether q lies within the bounding box of segment pr."""
    return (
        min(p[0], r[0]) <= q[0] <= max(p[0], r[0])
        and min(p[1], r[1]) <= q[1] <= max(p[1], r[1])
    )


def segments_intersect(
    p1: Coordinate,
    q1: Coordinate,
    p2: Coordinate,
    q2: Coordinate
) -> bool:
    """Orientation test for segments p1q1 and p2q2, collinear overlap included."""
    o1 = _orientation(p1, q1, p2)
    o2 = _orientation(p1, q1, q2)
    o3 = _orientation(p2, q2, p1)
    o4 = _orientation(p2, q2, q1)

    if o1 != o2 and o3 != o4:
        return True

    if o1 == 0 and _on_segment(p1, p2, q1):
        return True
    if o2 == 0 and _on_segment(p1, q2, q1):
        return True
    if o3 == 0 and _on_segment(p2, p1, q2):
        return True
    if o4 == 0 and _on_segment(p2, q1, q2):
        return True

    return False


def check_self_intersection(vertices: Sequence[Coordinate]) -> bool:
    """
    Test every pair of non-adjacent edges, closing edge included.

    Triangles (and anything smaller) never self-intersect.
    """
    n = len(vertices)
    if n < 4:
        return False

    for i in range(n):
        current = vertices[i]
        following = vertices[(i + 1) % n]

        for j in range(i + 2, n):
            # first and closing edge share vertex 0
            if i == 0 and j == n - 1:
                continue

            other = vertices[j]
            other_next = vertices[(j + 1) % n]

            if segments_intersect(current, following, other, other_next):
                return True

    return False


def validate_triangle(
    vertices: Sequence[Coordinate],
    min_area: float = MIN_AREA_DEGREES
) -> TriangleValidationResult:
    """Reject triangles smaller than min_area square degrees."""
    area = calculate_triangle_area(vertices)

    if not area >= min_area:
        return TriangleValidationResult(
            valid=False,
            area=area,
            error="Triangle too small - please draw a larger area",
        )

    return TriangleValidationResult(valid=True, area=area)


def validate_circle(
    center: Coordinate,
    radius: float,
    min_radius: float = CIRCLE_MIN_RADIUS,
    max_radius: float = CIRCLE_MAX_RADIUS
) -> CircleValidationResult:
    """
    Bound the radius to [min_radius, max_radius] meters (both inclusive).

    The centre is not checked; it is accepted for signature symmetry with
    the other validators.
    """
    if not radius >= min_radius:
        return CircleValidationResult(
            valid=False,
            radius=radius,
            error=f"Circle too small - minimum radius is {min_radius:g}m",
        )

    if radius > max_radius:
        return CircleValidationResult(
            valid=False,
            radius=radius,
            error=f"Circle too large - maximum radius is {max_radius / 1000:g}km",
        )

    return CircleValidationResult(
        valid=True,
        radius=radius,
        area=math.pi * radius * radius,
    )


def validate_polygon(
    vertices: Sequence[Coordinate],
    min_area: float = MIN_AREA_THRESHOLD
) -> PolygonValidationResult:
    """
    Ordered checks: vertex count, self-intersection, minimum area.
    """
    if len(vertices) < 3:
        return PolygonValidationResult(
            valid=False,
            error="Polygon must have at least 3 vertices",
        )

    if check_self_intersection(vertices):
        return PolygonValidationResult(
            valid=False,
            self_intersects=True,
            error="Polygon cannot intersect itself",
        )

    area = calculate_polygon_area(vertices)
    if not area >= min_area:
        return PolygonValidationResult(
            valid=False,
            area=area,
            self_intersects=False,
            error="Polygon too small - please draw a larger area",
        )

    return PolygonValidationResult(valid=True, area=area, self_intersects=False)


def format_radius(radius: float) -> str:
    """'850m' below 1 km, '1.5km' above."""
    if radius < 1000:
        return f"{round(radius)}m"
    return f"{radius / 1000:.1f}km"


def format_area(area: float) -> str:
    """'1200 m²' below 1 km², '2.35 km²' above."""
    if area < 1000000:
        return f"{round(area)} m²"
    return f"{area / 1000000:.2f} km²"
