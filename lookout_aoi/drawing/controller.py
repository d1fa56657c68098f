"""
DrawingController - drawing session bound to a map surface

Bounded Context: Map input wiring for one drawing tool
Responsibilities:
  - Handler registration lifecycle (attach, detach)
  - Translating map events into drawing events
  - Holding the current DrawingState
  - Delivering completed shapes to the caller

Lifecycle:
  - attach() registers click / dblclick / mousemove / keydown handlers and
    sets the crosshair cursor
  - detach() removes exactly those handlers, resets cursor and state
  - Both are idempotent; the controller is also a context manager

Example:
    with DrawingController(surface, AOIType.POLYGON, on_complete=registry.add):
        ...  # surface delivers events until the block exits
"""

from dataclasses import dataclass
from typing import Callable, Optional, Protocol, Sequence, Tuple, Union

from lookout_aoi.geometry.shapes import AOIType, Coordinate, POI
from lookout_aoi.drawing.state import (
    Click,
    Complete,
    DoubleClick,
    DrawingEvent,
    DrawingMachine,
    DrawingState,
    Idle,
    KeyPress,
    MouseMove,
    Rejected,
    create_machine,
)
from lookout_aoi.config import LookoutConfig
from lookout_aoi.logging import LogEvent, StructuredLogger, create_logger

DRAWING_CURSOR = "crosshair"
DEFAULT_CURSOR = ""


@dataclass(frozen=True)
class MapEvent:
    """Payload a map surface passes to handlers."""

    lng_lat: Optional[Coordinate] = None
    key: Optional[str] = None


Handler = Callable[[MapEvent], None]


class MapSurface(Protocol):
    """What the controller needs from a map widget."""

    def on(self, event: str, handler: Handler) -> None: ...

    def off(self, event: str, handler: Handler) -> None: ...

    def set_cursor(self, cursor: str) -> None: ...


class DrawingController:
    """
    One drawing session for one shape kind on one map surface.

    Features:
      - Explicit attach/detach instead of import-time side effects
      - Pure state machine underneath (see drawing.state)
      - on_complete receives the finished shape, on_reject the error string
    """

    def __init__(
        self,
        surface: MapSurface,
        kind: Union[AOIType, str],
        on_complete: Callable,
        on_reject: Optional[Callable[[str], None]] = None,
        existing_count: int = 0,
        existing_pois: Sequence[POI] = (),
        category: str = "general",
        config: Optional[LookoutConfig] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        """
        Args:
            surface: Map widget implementing MapSurface
            kind: Shape kind to draw
            on_complete: Called with the completed shape
            on_reject: Called with the validation error of a rejected shape
            existing_count: Shapes of this kind already present (names, colours)
            existing_pois: Existing POIs (POI proximity and snapping)
            category: POI category (icon)
            config: Validation thresholds
            logger: Structured logger
        """
        self.surface = surface
        self.kind = AOIType(kind)
        self.on_complete = on_complete
        self.on_reject = on_reject
        self.machine: DrawingMachine = create_machine(
            self.kind,
            existing_count=existing_count,
            existing_pois=existing_pois,
            config=config,
            category=category,
        )
        self.logger = logger or create_logger("drawing")

        self.state: DrawingState = Idle()
        self._attached = False
        self._handlers: Tuple[Tuple[str, Handler], ...] = (
            ("click", self._on_click),
            ("dblclick", self._on_double_click),
            ("mousemove", self._on_mouse_move),
            ("keydown", self._on_key_down),
        )

    @property
    def attached(self) -> bool:
        return self._attached

    def attach(self) -> "DrawingController":
        """Register map handlers. Safe to call multiple times."""
        if self._attached:
            return self

        for event, handler in self._handlers:
            self.surface.on(event, handler)
        self.surface.set_cursor(DRAWING_CURSOR)
        self._attached = True

        self.logger.debug(
            event=LogEvent.DRAWING_ATTACHED,
            message=f"{self.kind.value} drawing attached",
            metadata={'kind': self.kind.value},
        )
        return self

    def detach(self) -> None:
        """Remove map handlers and reset state. Safe to call multiple times."""
        if not self._attached:
            return

        for event, handler in self._handlers:
            self.surface.off(event, handler)
        self.surface.set_cursor(DEFAULT_CURSOR)
        self._attached = False
        self.state = Idle()

        self.logger.debug(
            event=LogEvent.DRAWING_DETACHED,
            message=f"{self.kind.value} drawing detached",
            metadata={'kind': self.kind.value},
        )

    def reset(self) -> None:
        """Start over (after a completed or rejected shape)."""
        self.state = Idle()

    def dispatch(self, event: DrawingEvent) -> DrawingState:
        """Feed one event to the machine; deliver the shape on completion."""
        previous = self.state
        self.state = self.machine.handle(previous, event)

        if self.state is previous:
            return self.state

        if isinstance(self.state, Complete):
            self.logger.info(
                event=LogEvent.DRAWING_COMPLETED,
                message=f"{self.kind.value} completed",
                metadata={'aoi_id': self.state.shape.id, 'snapped': self.state.snapped},
            )
            self.on_complete(self.state.shape)

        elif isinstance(self.state, Rejected):
            self.logger.info(
                event=LogEvent.DRAWING_DISCARDED,
                message=f"{self.kind.value} rejected",
                metadata={'error': self.state.error},
            )
            if self.on_reject is not None:
                self.on_reject(self.state.error)

        elif isinstance(self.state, Idle) and not isinstance(previous, Idle):
            self.logger.debug(
                event=LogEvent.DRAWING_DISCARDED,
                message=f"{self.kind.value} cancelled",
            )

        return self.state

    # ===== Map handlers =====

    def _on_click(self, event: MapEvent) -> None:
        self.dispatch(Click(event.lng_lat))

    def _on_double_click(self, event: MapEvent) -> None:
        self.dispatch(DoubleClick(event.lng_lat))

    def _on_mouse_move(self, event: MapEvent) -> None:
        self.dispatch(MouseMove(event.lng_lat))

    def _on_key_down(self, event: MapEvent) -> None:
        self.dispatch(KeyPress(event.key))

    def __enter__(self) -> "DrawingController":
        return self.attach()

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.detach()
