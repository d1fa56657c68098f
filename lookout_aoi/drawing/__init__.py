"""
Drawing Layer
=============

Bounded Context: Turning map input into validated shapes.

Responsibilities:
- Pure per-shape state machines (Idle -> Placing -> Complete / Rejected)
- Map surface wiring with explicit attach/detach lifecycle
"""

from lookout_aoi.drawing.state import (
    BACKSPACE,
    ENTER,
    ESCAPE,
    CircleMachine,
    Click,
    Complete,
    DoubleClick,
    DrawingMachine,
    Idle,
    KeyPress,
    MouseMove,
    Placing,
    POIMachine,
    PolygonMachine,
    Rejected,
    TriangleMachine,
    create_machine,
    default_name,
    is_terminal,
)
from lookout_aoi.drawing.controller import DrawingController, MapEvent, MapSurface

__all__ = [
    "BACKSPACE",
    "ENTER",
    "ESCAPE",
    "CircleMachine",
    "Click",
    "Complete",
    "DoubleClick",
    "DrawingMachine",
    "Idle",
    "KeyPress",
    "MouseMove",
    "Placing",
    "POIMachine",
    "PolygonMachine",
    "Rejected",
    "TriangleMachine",
    "create_machine",
    "default_name",
    "is_terminal",
    "DrawingController",
    "MapEvent",
    "MapSurface",
]
