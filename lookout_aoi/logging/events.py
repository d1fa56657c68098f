"""
Structured Log Event Types
==========================

Bounded Context: Observability Event Taxonomy

Typed event names for structured logging.

Design:
- Enum-based (prevents typos, enables autocomplete)
- Hierarchical naming (namespace.category.action)
- Searchable in log aggregators

Event Naming Convention:
    <component>.<category>.<action>

    component: aoi, analysis, cluster, dataset, drawing, error
"""

from enum import Enum


class LogEvent(str, Enum):
    """
    Typed log event names for structured logging.

    Categories:
    - aoi.*: AOI collection changes
    - analysis.*: Containment analysis runs
    - cluster.*: Clustering index lifecycle
    - dataset.*: Location dataset loading
    - drawing.*: Drawing session lifecycle
    - error.*: Error conditions
    """

    # ========== AOI Events ==========
    AOI_ADDED = "aoi.added"
    """AOI appended to the session collection."""

    AOI_REJECTED = "aoi.rejected"
    """AOI failed validation and was not added."""

    # ========== Analysis Events ==========
    ANALYSIS_COMPUTED = "analysis.computed"
    """Containment recomputed for all AOIs."""

    # ========== Cluster Events ==========
    CLUSTER_INDEX_BUILT = "cluster.index.built"
    """Hierarchical cluster index (re)built."""

    CLUSTER_POINTS_SKIPPED = "cluster.points.skipped"
    """Points with non-finite coordinates left out of the index."""

    # ========== Dataset Events ==========
    DATASET_LOADED = "dataset.loaded"
    """Location dataset loaded from disk."""

    # ========== Drawing Events ==========
    DRAWING_ATTACHED = "drawing.attached"
    """Drawing controller attached to a map surface."""

    DRAWING_DETACHED = "drawing.detached"
    """Drawing controller detached from a map surface."""

    DRAWING_COMPLETED = "drawing.completed"
    """Shape drawn and validated."""

    DRAWING_DISCARDED = "drawing.discarded"
    """Shape discarded (invalid or cancelled)."""

    # ========== Error Events ==========
    CONFIG_ERROR = "error.config"
    """Configuration could not be loaded."""

    DATASET_ERROR = "error.dataset"
    """Dataset could not be parsed."""

    COMMAND_ERROR = "error.command"
    """CLI command failed."""
