"""
Analytics Layer
===============

Bounded Context: AOI containment analysis and summary statistics.

Responsibilities:
- Recompute per-AOI contained locations from scratch
- Generate immutable analysis snapshots
- Aggregate summary statistics
"""

from lookout_aoi.analytics.analyzer import (
    AOIAnalysis,
    SpatialAnalysisSummary,
    analyze_all_aois,
    analyze_aoi,
    analyze_aois,
    get_spatial_analysis_summary,
)

__all__ = [
    "AOIAnalysis",
    "SpatialAnalysisSummary",
    "analyze_all_aois",
    "analyze_aoi",
    "analyze_aois",
    "get_spatial_analysis_summary",
]
