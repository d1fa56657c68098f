"""
AOI colour cycling.

Colours are keyed by how many shapes of a kind already exist:
COLORS[count % len(COLORS)]. Palettes are supervision ColorPalettes so the
same objects can be handed to supervision annotators.
"""

from typing import List

import supervision as sv

from lookout_aoi.geometry.shapes import AOIType

INVESTIGATION_HEX = [
    "#4CBACB",  # teal (default)
    "#E74C3C",  # red
    "#F39C12",  # orange
    "#27AE60",  # green
    "#8E44AD",  # purple
    "#3498DB",  # blue
]

TRIANGLE_PALETTE = sv.ColorPalette.from_hex(INVESTIGATION_HEX)
CIRCLE_PALETTE = sv.ColorPalette.from_hex(INVESTIGATION_HEX)
POLYGON_PALETTE = sv.ColorPalette.from_hex(INVESTIGATION_HEX)
POI_PALETTE = sv.ColorPalette.from_hex(INVESTIGATION_HEX)

_PALETTES = {
    AOIType.TRIANGLE: TRIANGLE_PALETTE,
    AOIType.CIRCLE: CIRCLE_PALETTE,
    AOIType.POLYGON: POLYGON_PALETTE,
    AOIType.POI: POI_PALETTE,
}


def palette_hex(palette: sv.ColorPalette) -> List[str]:
    """'#RRGGBB' strings of a palette, in order."""
    return [color.as_hex().upper() for color in palette.colors]


TRIANGLE_COLORS = palette_hex(TRIANGLE_PALETTE)
CIRCLE_COLORS = palette_hex(CIRCLE_PALETTE)
POLYGON_COLORS = palette_hex(POLYGON_PALETTE)
POI_COLORS = palette_hex(POI_PALETTE)


def assign_color(kind: AOIType, existing_count: int) -> str:
    """Next colour for a shape kind given how many already exist."""
    palette = _PALETTES[AOIType(kind)]
    return palette.by_idx(existing_count).as_hex().upper()


def assign_triangle_color(existing_count: int) -> str:
    return assign_color(AOIType.TRIANGLE, existing_count)


def assign_circle_color(existing_count: int) -> str:
    return assign_color(AOIType.CIRCLE, existing_count)


def assign_polygon_color(existing_count: int) -> str:
    return assign_color(AOIType.POLYGON, existing_count)


def assign_poi_color(existing_count: int) -> str:
    return assign_color(AOIType.POI, existing_count)
