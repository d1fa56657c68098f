"""
Drawing State Machines
======================

Per-shape finite-state machines driven by discrete map input events,
decoupled from rendering.

Design:
- States and events are frozen dataclasses (values, not widgets)
- machine.handle(state, event) -> new state, never mutates its inputs
- Escape returns to Idle from any state
- Complete / Rejected are terminal: any other event is ignored
- Validation reuses geometry.validation and policies.poi

States:
    Idle -> Placing(vertices) -> Complete(shape)
                              -> Rejected(error)
"""

import uuid
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple, Union

from lookout_aoi.geometry.shapes import AOIType, Circle, Coordinate, POI, Polygon, Triangle, to_coordinate
from lookout_aoi.geometry.predicates import haversine_distance, is_point_nearby
from lookout_aoi.geometry.validation import validate_circle, validate_polygon, validate_triangle
from lookout_aoi.policies.palette import assign_color
from lookout_aoi.policies.poi import (
    assign_poi_icon,
    snap_poi_coordinates,
    validate_poi,
    validate_poi_location,
)
from lookout_aoi.config import LookoutConfig

ESCAPE = "Escape"
ENTER = "Enter"
BACKSPACE = "Backspace"

DEFAULT_USER_ID = "current_user"


# ========== States ==========

@dataclass(frozen=True)
class Idle:
    pass


@dataclass(frozen=True)
class Placing:
    """
    Shape in progress.

    vertices: points placed so far (circle: the centre)
    cursor: last mouse position, for previews
    preview_radius: circle radius under the cursor, meters
    """

    vertices: Tuple[Coordinate, ...]
    cursor: Optional[Coordinate] = None
    preview_radius: float = 0.0


@dataclass(frozen=True)
class Complete:
    shape: Union[Triangle, Circle, Polygon, POI]
    snapped: bool = False


@dataclass(frozen=True)
class Rejected:
    error: str
    vertices: Tuple[Coordinate, ...] = ()


DrawingState = Union[Idle, Placing, Complete, Rejected]


# ========== Events ==========

@dataclass(frozen=True)
class Click:
    point: Coordinate


@dataclass(frozen=True)
class DoubleClick:
    point: Optional[Coordinate] = None


@dataclass(frozen=True)
class MouseMove:
    point: Coordinate


@dataclass(frozen=True)
class KeyPress:
    key: str


DrawingEvent = Union[Click, DoubleClick, MouseMove, KeyPress]


def is_terminal(state: DrawingState) -> bool:
    return isinstance(state, (Complete, Rejected))


def default_name(kind: AOIType, existing_count: int) -> str:
    """'Investigation Area A', 'Investigation Circle B', 'POI C'."""
    letter = chr(65 + existing_count)
    if kind is AOIType.CIRCLE:
        return f"Investigation Circle {letter}"
    if kind is AOIType.POI:
        return f"POI {letter}"
    return f"Investigation Area {letter}"


def new_shape_id(kind: AOIType) -> str:
    return f"{kind.value}_{uuid.uuid4().hex}"


class DrawingMachine:
    """
    Base machine: Escape handling, terminal states, event dispatch.

    Subclasses implement on_click and may override on_double_click,
    on_mouse_move and on_key.
    """

    kind: AOIType

    def __init__(
        self,
        existing_count: int = 0,
        config: Optional[LookoutConfig] = None,
        user_id: str = DEFAULT_USER_ID
    ):
        self.existing_count = existing_count
        self.config = config or LookoutConfig()
        self.user_id = user_id

    def handle(self, state: DrawingState, event: DrawingEvent) -> DrawingState:
        """Next state for an input event."""
        if isinstance(event, KeyPress) and event.key == ESCAPE:
            return Idle()

        if is_terminal(state):
            return state

        if isinstance(event, Click):
            return self.on_click(state, to_coordinate(event.point))
        if isinstance(event, DoubleClick):
            return self.on_double_click(state)
        if isinstance(event, MouseMove):
            return self.on_mouse_move(state, to_coordinate(event.point))
        if isinstance(event, KeyPress):
            return self.on_key(state, event.key)

        raise TypeError(f"Unsupported drawing event: {type(event).__name__}")

    def on_click(self, state: DrawingState, point: Coordinate) -> DrawingState:
        raise NotImplementedError

    def on_double_click(self, state: DrawingState) -> DrawingState:
        return state

    def on_mouse_move(self, state: DrawingState, point: Coordinate) -> DrawingState:
        if isinstance(state, Placing):
            return replace(state, cursor=point)
        return state

    def on_key(self, state: DrawingState, key: str) -> DrawingState:
        return state

    @property
    def color(self) -> str:
        return assign_color(self.kind, self.existing_count)

    @property
    def name(self) -> str:
        return default_name(self.kind, self.existing_count)


class TriangleMachine(DrawingMachine):
    """Three clicks; the third validates."""

    kind = AOIType.TRIANGLE

    def on_click(self, state: DrawingState, point: Coordinate) -> DrawingState:
        if isinstance(state, Idle):
            return Placing(vertices=(point,))

        vertices = state.vertices + (point,)
        if len(vertices) < 3:
            return replace(state, vertices=vertices)

        result = validate_triangle(vertices, self.config.validation.min_area_degrees)
        if not result.valid:
            return Rejected(error=result.error, vertices=vertices)

        return Complete(shape=Triangle(
            id=new_shape_id(self.kind),
            name=self.name,
            vertices=vertices,
            color=self.color,
            user_id=self.user_id,
        ))


class CircleMachine(DrawingMachine):
    """First click sets the centre, second click the radius."""

    kind = AOIType.CIRCLE

    def on_click(self, state: DrawingState, point: Coordinate) -> DrawingState:
        if isinstance(state, Idle):
            return Placing(vertices=(point,))

        center = state.vertices[0]
        radius = haversine_distance(center, point)
        validation = self.config.validation
        result = validate_circle(
            center,
            radius,
            validation.circle_min_radius,
            validation.circle_max_radius,
        )
        if not result.valid:
            return Rejected(error=result.error, vertices=(center,))

        return Complete(shape=Circle(
            id=new_shape_id(self.kind),
            name=self.name,
            center=center,
            radius=radius,
            color=self.color,
            user_id=self.user_id,
        ))

    def on_mouse_move(self, state: DrawingState, point: Coordinate) -> DrawingState:
        if isinstance(state, Placing):
            radius = haversine_distance(state.vertices[0], point)
            return replace(state, cursor=point, preview_radius=radius)
        return state


class PolygonMachine(DrawingMachine):
    """
    Clicks add vertices. Completes on double-click, Enter, or a click near
    the first vertex once there are at least 3 vertices. With fewer, the
    completion gestures are ignored and drawing continues.

    Map widgets deliver a double-click as click, click, dblclick; a click
    on the last placed vertex is not a new vertex.
    """

    kind = AOIType.POLYGON

    def on_click(self, state: DrawingState, point: Coordinate) -> DrawingState:
        if isinstance(state, Idle):
            return Placing(vertices=(point,))

        vertices = state.vertices
        if point == vertices[-1]:
            return state

        threshold = self.config.drawing.close_threshold_degrees
        if len(vertices) >= 3 and is_point_nearby(point, vertices[0], threshold):
            return self.complete(vertices)

        return replace(state, vertices=vertices + (point,))

    def on_double_click(self, state: DrawingState) -> DrawingState:
        if isinstance(state, Placing) and len(state.vertices) >= 3:
            return self.complete(state.vertices)
        return state

    def on_key(self, state: DrawingState, key: str) -> DrawingState:
        if not isinstance(state, Placing):
            return state

        if key == ENTER:
            if len(state.vertices) < 3:
                return state
            return self.complete(state.vertices)

        if key == BACKSPACE:
            vertices = state.vertices[:-1]
            if not vertices:
                return Idle()
            return replace(state, vertices=vertices)

        return state

    def complete(self, vertices: Sequence[Coordinate]) -> DrawingState:
        vertices = tuple(vertices)
        result = validate_polygon(vertices, self.config.validation.min_area_degrees)
        if not result.valid:
            return Rejected(error=result.error, vertices=vertices)

        return Complete(shape=Polygon(
            id=new_shape_id(self.kind),
            name=self.name,
            vertices=vertices,
            color=self.color,
            user_id=self.user_id,
        ))


class POIMachine(DrawingMachine):
    """
    One click: validate, check proximity to existing POIs, then snap onto
    an existing POI if one is close enough.
    """

    kind = AOIType.POI

    def __init__(
        self,
        existing_pois: Sequence[POI] = (),
        category: str = "general",
        config: Optional[LookoutConfig] = None,
        user_id: str = DEFAULT_USER_ID
    ):
        super().__init__(len(existing_pois), config, user_id)
        self.existing_pois = tuple(existing_pois)
        self.category = category

    def on_click(self, state: DrawingState, point: Coordinate) -> DrawingState:
        if not isinstance(state, Idle):
            return state

        poi_config = self.config.poi
        result = validate_poi(
            point,
            name_max_length=poi_config.name_max_length,
            precision=poi_config.coordinate_precision,
        )
        if not result.valid:
            return Rejected(error=result.error, vertices=(point,))

        coordinates = result.coordinates
        location = validate_poi_location(coordinates, self.existing_pois, poi_config.min_distance)
        if not location.valid:
            return Rejected(error=location.error, vertices=(coordinates,))

        snap = snap_poi_coordinates(
            coordinates,
            [poi.coordinates for poi in self.existing_pois],
            poi_config.snap_distance,
        )

        return Complete(
            shape=POI(
                id=new_shape_id(self.kind),
                name=self.name,
                coordinates=snap.coordinates,
                color=self.color,
                icon=assign_poi_icon(self.category, self.existing_count),
                category=self.category,
                user_id=self.user_id,
            ),
            snapped=snap.snapped,
        )


def create_machine(
    kind: Union[AOIType, str],
    existing_count: int = 0,
    existing_pois: Sequence[POI] = (),
    config: Optional[LookoutConfig] = None,
    category: str = "general"
) -> DrawingMachine:
    """
    Machine for a shape kind.

    Raises:
        ValueError: If kind is not a known AOIType
    """
    kind = AOIType(kind)
    if kind is AOIType.TRIANGLE:
        return TriangleMachine(existing_count, config)
    if kind is AOIType.CIRCLE:
        return CircleMachine(existing_count, config)
    if kind is AOIType.POLYGON:
        return PolygonMachine(existing_count, config)
    return POIMachine(existing_pois, category, config)
