from collections import defaultdict

import pytest

from lookout_aoi.config import DrawingConfig, LookoutConfig
from lookout_aoi.drawing import (
    BACKSPACE,
    ENTER,
    ESCAPE,
    CircleMachine,
    Click,
    Complete,
    DoubleClick,
    DrawingController,
    Idle,
    KeyPress,
    MapEvent,
    MouseMove,
    Placing,
    POIMachine,
    PolygonMachine,
    Rejected,
    TriangleMachine,
    default_name,
)
from lookout_aoi.geometry.shapes import AOIType, Circle, POI, Polygon, Triangle

TRIANGLE_CLICKS = [(-0.16, 51.49), (-0.08, 51.49), (-0.12, 51.54)]
SQUARE_CLICKS = [(-0.15, 51.50), (-0.10, 51.50), (-0.10, 51.54), (-0.15, 51.54)]


def run(machine, events, state=None):
    state = state or Idle()
    for event in events:
        state = machine.handle(state, event)
    return state


class FakeMap:
    """In-memory MapSurface."""

    def __init__(self):
        self.handlers = defaultdict(list)
        self.cursor = ""

    def on(self, event, handler):
        self.handlers[event].append(handler)

    def off(self, event, handler):
        self.handlers[event].remove(handler)

    def set_cursor(self, cursor):
        self.cursor = cursor

    def fire(self, event, payload):
        for handler in list(self.handlers[event]):
            handler(payload)


# ========== Triangle ==========

def test_triangle_three_clicks() -> None:
    machine = TriangleMachine(existing_count=2)
    state = run(machine, [Click(p) for p in TRIANGLE_CLICKS[:2]])
    assert isinstance(state, Placing)
    assert len(state.vertices) == 2

    state = machine.handle(state, Click(TRIANGLE_CLICKS[2]))
    assert isinstance(state, Complete)
    triangle = state.shape
    assert isinstance(triangle, Triangle)
    assert triangle.name == "Investigation Area C"
    assert triangle.color == "#F39C12"
    assert triangle.id.startswith("triangle_")
    assert triangle.user_id == "current_user"


def test_triangle_too_small_rejected() -> None:
    state = run(TriangleMachine(), [Click((0, 0)), Click((0.001, 0)), Click((0, 0.001))])
    assert isinstance(state, Rejected)
    assert "too small" in state.error


def test_inputs_are_not_mutated() -> None:
    machine = TriangleMachine()
    placing = Placing(vertices=(TRIANGLE_CLICKS[0],))
    machine.handle(placing, Click(TRIANGLE_CLICKS[1]))
    assert placing.vertices == (TRIANGLE_CLICKS[0],)


# ========== Circle ==========

def test_circle_center_then_radius() -> None:
    machine = CircleMachine()
    state = run(machine, [Click((-0.1235, 51.512)), MouseMove((-0.1235, 51.513))])
    assert isinstance(state, Placing)
    assert state.preview_radius == pytest.approx(111, rel=0.01)

    state = machine.handle(state, Click((-0.1235, 51.515)))
    assert isinstance(state, Complete)
    circle = state.shape
    assert isinstance(circle, Circle)
    assert circle.center == (-0.1235, 51.512)
    assert circle.radius == pytest.approx(333.6, rel=0.01)
    assert circle.name == "Investigation Circle A"


def test_circle_too_small_rejected() -> None:
    state = run(CircleMachine(), [Click((0.0, 0.0)), Click((0.00001, 0.0))])
    assert isinstance(state, Rejected)
    assert state.error == "Circle too small - minimum radius is 10m"


def test_circle_too_large_rejected() -> None:
    state = run(CircleMachine(), [Click((0.0, 0.0)), Click((1.0, 0.0))])
    assert isinstance(state, Rejected)
    assert "too large" in state.error


# ========== Polygon ==========

def test_polygon_completes_on_double_click() -> None:
    state = run(PolygonMachine(), [Click(p) for p in SQUARE_CLICKS] + [DoubleClick()])
    assert isinstance(state, Complete)
    assert isinstance(state.shape, Polygon)
    assert state.shape.vertices == tuple(SQUARE_CLICKS)


def test_polygon_completes_on_enter() -> None:
    state = run(PolygonMachine(), [Click(p) for p in SQUARE_CLICKS] + [KeyPress(ENTER)])
    assert isinstance(state, Complete)


def test_polygon_closes_near_first_vertex() -> None:
    near_first = (SQUARE_CLICKS[0][0] + 0.001, SQUARE_CLICKS[0][1])
    state = run(PolygonMachine(), [Click(p) for p in SQUARE_CLICKS] + [Click(near_first)])
    assert isinstance(state, Complete)
    assert len(state.shape.vertices) == 4


def test_polygon_close_threshold_from_config() -> None:
    config = LookoutConfig(drawing=DrawingConfig(close_threshold_degrees=0.0001))
    near_first = (SQUARE_CLICKS[0][0] + 0.001, SQUARE_CLICKS[0][1])
    state = run(PolygonMachine(config=config), [Click(p) for p in SQUARE_CLICKS] + [Click(near_first)])
    assert isinstance(state, Placing)
    assert len(state.vertices) == 5


@pytest.mark.parametrize("finish", [KeyPress(ENTER), DoubleClick()])
def test_polygon_completion_needs_three_vertices(finish) -> None:
    machine = PolygonMachine()
    state = run(machine, [Click(p) for p in SQUARE_CLICKS[:2]] + [finish])
    assert isinstance(state, Placing)
    assert state.vertices == tuple(SQUARE_CLICKS[:2])

    # drawing continues
    state = run(machine, [Click(p) for p in SQUARE_CLICKS[2:]] + [finish], state)
    assert isinstance(state, Complete)


def test_polygon_repeated_click_adds_no_vertex() -> None:
    state = run(PolygonMachine(), [Click(p) for p in SQUARE_CLICKS[:2]] + [Click(SQUARE_CLICKS[1])])
    assert state.vertices == tuple(SQUARE_CLICKS[:2])


def test_polygon_self_intersection_rejected() -> None:
    bowtie = [SQUARE_CLICKS[0], SQUARE_CLICKS[2], SQUARE_CLICKS[1], SQUARE_CLICKS[3]]
    state = run(PolygonMachine(), [Click(p) for p in bowtie] + [DoubleClick()])
    assert isinstance(state, Rejected)
    assert state.error == "Polygon cannot intersect itself"


def test_polygon_backspace() -> None:
    machine = PolygonMachine()
    state = run(machine, [Click(p) for p in SQUARE_CLICKS[:2]] + [KeyPress(BACKSPACE)])
    assert state.vertices == (SQUARE_CLICKS[0],)

    state = machine.handle(state, KeyPress(BACKSPACE))
    assert isinstance(state, Idle)


# ========== Common rules ==========

@pytest.mark.parametrize(
    "state",
    [Idle(), Placing(vertices=((0.0, 0.0),)), Rejected(error="boom")],
)
def test_escape_returns_to_idle(state) -> None:
    assert isinstance(PolygonMachine().handle(state, KeyPress(ESCAPE)), Idle)


def test_events_after_terminal_state_are_ignored() -> None:
    machine = TriangleMachine()
    complete = run(machine, [Click(p) for p in TRIANGLE_CLICKS])
    assert machine.handle(complete, Click((1.0, 1.0))) is complete

    rejected = Rejected(error="Triangle too small - please draw a larger area")
    assert machine.handle(rejected, MouseMove((1.0, 1.0))) is rejected


def test_mouse_move_tracks_cursor() -> None:
    state = run(PolygonMachine(), [Click(SQUARE_CLICKS[0]), MouseMove((1.0, 2.0))])
    assert state.cursor == (1.0, 2.0)
    assert isinstance(PolygonMachine().handle(Idle(), MouseMove((1.0, 2.0))), Idle)


def test_default_names() -> None:
    assert default_name(AOIType.TRIANGLE, 0) == "Investigation Area A"
    assert default_name(AOIType.POLYGON, 1) == "Investigation Area B"
    assert default_name(AOIType.CIRCLE, 2) == "Investigation Circle C"
    assert default_name(AOIType.POI, 0) == "POI A"


# ========== POI ==========

def test_poi_single_click() -> None:
    state = POIMachine(category="food").handle(Idle(), Click((-0.1276049, 51.5074051)))
    assert isinstance(state, Complete)
    poi = state.shape
    assert isinstance(poi, POI)
    assert poi.coordinates == (-0.1276, 51.50741)
    assert poi.icon == "coffee"
    assert poi.category == "food"
    assert poi.name == "POI A"
    assert state.snapped is False


def test_poi_invalid_coordinates_rejected() -> None:
    state = POIMachine().handle(Idle(), Click((200.0, 0.0)))
    assert isinstance(state, Rejected)
    assert state.error == "Longitude must be between -180 and 180 degrees"


def test_poi_too_close_rejected() -> None:
    existing = [POI(id="poi_1", name="Nelson", coordinates=(0.0, 0.0), color="#4CBACB")]
    state = POIMachine(existing_pois=existing).handle(Idle(), Click((0.00003, 0.0)))
    assert isinstance(state, Rejected)
    assert state.error.startswith('POI too close to existing POI "Nelson"')


def test_poi_snaps_onto_existing() -> None:
    existing = [POI(id="poi_1", name="Nelson", coordinates=(0.0, 0.0), color="#4CBACB")]
    machine = POIMachine(existing_pois=existing)
    state = machine.handle(Idle(), Click((0.00014, 0.0)))
    assert isinstance(state, Complete)
    assert state.snapped is True
    assert state.shape.coordinates == (0.0, 0.0)
    assert state.shape.color == "#E74C3C"
    assert state.shape.name == "POI B"


# ========== Controller ==========

def test_controller_attach_detach_idempotent() -> None:
    surface = FakeMap()
    controller = DrawingController(surface, AOIType.TRIANGLE, on_complete=lambda shape: None)

    controller.attach()
    controller.attach()
    assert surface.cursor == "crosshair"
    assert all(len(surface.handlers[event]) == 1 for event in ("click", "dblclick", "mousemove", "keydown"))

    controller.detach()
    controller.detach()
    assert surface.cursor == ""
    assert all(len(handlers) == 0 for handlers in surface.handlers.values())


def test_controller_delivers_completed_shape() -> None:
    surface = FakeMap()
    completed = []
    with DrawingController(surface, "triangle", on_complete=completed.append) as controller:
        for p in TRIANGLE_CLICKS:
            surface.fire("click", MapEvent(lng_lat=p))
        assert isinstance(controller.state, Complete)

    assert len(completed) == 1
    assert isinstance(completed[0], Triangle)
    assert not controller.attached
    assert isinstance(controller.state, Idle)


def test_controller_reports_rejection() -> None:
    surface = FakeMap()
    errors = []
    controller = DrawingController(
        surface,
        AOIType.CIRCLE,
        on_complete=lambda shape: pytest.fail("circle should be rejected"),
        on_reject=errors.append,
    )
    controller.attach()
    surface.fire("click", MapEvent(lng_lat=(0.0, 0.0)))
    surface.fire("click", MapEvent(lng_lat=(0.00001, 0.0)))

    assert errors == ["Circle too small - minimum radius is 10m"]
    controller.reset()
    assert isinstance(controller.state, Idle)


def test_controller_polygon_double_click_sequence() -> None:
    surface = FakeMap()
    completed = []
    DrawingController(surface, AOIType.POLYGON, on_complete=completed.append).attach()

    for p in [(0.0, 0.0), (0.1, 0.0), (0.1, 0.1)]:
        surface.fire("click", MapEvent(lng_lat=p))
    # one double-click on the map: click, click, dblclick
    surface.fire("click", MapEvent(lng_lat=(0.0, 0.1)))
    surface.fire("click", MapEvent(lng_lat=(0.0, 0.1)))
    surface.fire("dblclick", MapEvent(lng_lat=(0.0, 0.1)))

    assert len(completed) == 1
    assert completed[0].vertices == ((0.0, 0.0), (0.1, 0.0), (0.1, 0.1), (0.0, 0.1))


def test_controller_escape_and_keys() -> None:
    surface = FakeMap()
    controller = DrawingController(surface, AOIType.POLYGON, on_complete=lambda shape: None).attach()
    surface.fire("click", MapEvent(lng_lat=SQUARE_CLICKS[0]))
    surface.fire("mousemove", MapEvent(lng_lat=SQUARE_CLICKS[1]))
    assert isinstance(controller.state, Placing)

    surface.fire("keydown", MapEvent(key=ESCAPE))
    assert isinstance(controller.state, Idle)


def test_controller_ignores_events_when_detached() -> None:
    surface = FakeMap()
    completed = []
    controller = DrawingController(surface, AOIType.POI, on_complete=completed.append)
    surface.fire("click", MapEvent(lng_lat=(0.0, 0.0)))
    assert completed == []
    assert isinstance(controller.state, Idle)
