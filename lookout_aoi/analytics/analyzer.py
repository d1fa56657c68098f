"""
AOI Analysis Module
===================

Maps a collection of AOIs and a location set to per-AOI containment.

Design:
- Pure functions: inputs are never mutated, output is deterministic
- Immutable snapshots (AOIAnalysis, SpatialAnalysisSummary)
- Coordinates converted to an array once, reused for every AOI
- No spatial index: O(|AOIs| x |locations|), AOI counts are small
"""

from dataclasses import dataclass
from datetime import datetime
from itertools import chain
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from lookout_aoi.geometry.shapes import AOI, AOIType, Circle, MapPoint, Polygon, Triangle
from lookout_aoi.geometry.detector import AOIDetector, location_array


@dataclass(frozen=True)
class AOIAnalysis:
    """
    Immutable containment snapshot for one AOI.

    Derived and recomputed, never persisted. contained_locations holds the
    same MapPoint instances as the input location set.
    """

    id: str
    name: str
    type: AOIType
    color: str
    created_at: datetime
    contained_locations: Tuple[MapPoint, ...] = ()

    @property
    def location_count(self) -> int:
        return len(self.contained_locations)

    def __str__(self) -> str:
        return f"{self.name} ({self.type.value}): {self.location_count} locations"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type.value,
            'color': self.color,
            'created_at': self.created_at.isoformat(),
            'location_count': self.location_count,
            'contained_locations': [location.id for location in self.contained_locations],
        }


@dataclass(frozen=True)
class SpatialAnalysisSummary:
    """Aggregate statistics over a list of analyses."""

    total_aois: int = 0
    total_locations: int = 0
    empty_aois: int = 0
    non_empty_aois: int = 0
    average_locations_per_aoi: float = 0.0
    most_populated_aoi: Optional[AOIAnalysis] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_aois': self.total_aois,
            'total_locations': self.total_locations,
            'empty_aois': self.empty_aois,
            'non_empty_aois': self.non_empty_aois,
            'average_locations_per_aoi': self.average_locations_per_aoi,
            'most_populated_aoi': (
                self.most_populated_aoi.id if self.most_populated_aoi else None
            ),
        }


def analyze_aoi(aoi: AOI, locations: Sequence[MapPoint], coordinates=None) -> AOIAnalysis:
    """
    Containment analysis for a single AOI.

    Args:
        aoi: Triangle, Circle or Polygon
        locations: Full location set
        coordinates: Optional precomputed location_array(locations)
    """
    if coordinates is None:
        coordinates = location_array(locations)

    mask = AOIDetector.detect(aoi, coordinates)
    return AOIAnalysis(
        id=aoi.id,
        name=aoi.name,
        type=aoi.kind,
        color=aoi.color,
        created_at=aoi.created_at,
        contained_locations=tuple(AOIDetector.select(locations, mask)),
    )


def analyze_aois(aois: Iterable[AOI], locations: Sequence[MapPoint]) -> List[AOIAnalysis]:
    """Analyse AOIs in the order given."""
    coordinates = location_array(locations)
    return [analyze_aoi(aoi, locations, coordinates) for aoi in aois]


def analyze_all_aois(
    triangles: Sequence[Triangle],
    circles: Sequence[Circle],
    polygons: Sequence[Polygon],
    locations: Sequence[MapPoint]
) -> List[AOIAnalysis]:
    """
    Analyse every AOI: triangles first, then circles, then polygons.

    Returns:
        One AOIAnalysis per AOI, in that fixed order
    """
    return analyze_aois(chain(triangles, circles, polygons), locations)


def get_spatial_analysis_summary(analyses: Sequence[AOIAnalysis]) -> SpatialAnalysisSummary:
    """
    Reduce analyses to summary statistics.

    most_populated_aoi is the first AOI with the highest count, or None when
    every AOI is empty. The average is 0 when there are no AOIs.
    """
    total_aois = len(analyses)
    total_locations = sum(analysis.location_count for analysis in analyses)
    empty_aois = sum(1 for analysis in analyses if analysis.location_count == 0)

    most_populated: Optional[AOIAnalysis] = None
    for analysis in analyses:
        best = most_populated.location_count if most_populated else 0
        if analysis.location_count > best:
            most_populated = analysis

    return SpatialAnalysisSummary(
        total_aois=total_aois,
        total_locations=total_locations,
        empty_aois=empty_aois,
        non_empty_aois=total_aois - empty_aois,
        average_locations_per_aoi=total_locations / total_aois if total_aois > 0 else 0.0,
        most_populated_aoi=most_populated,
    )
