"""
Draw Session State Machine
==========================

Stateful capture of a hand-drawn polygon.

States:
    IDLE -> DRAWING            start()
    DRAWING -> DRAWING         pointer_down() far from the first vertex
    DRAWING -> COMPLETED       pointer_down() within close tolerance of the
                               first vertex (>= 3 vertices), double_click()
                               (>= 3 vertices), stop() (>= 3 vertices)
    DRAWING -> IDLE            stop() with < 3 distinct vertices, cancel()
    COMPLETED -> IDLE          immediately after hand-off

Design:
- No vertex cap and no proximity auto-close beyond the close tolerance
- The finished feature is handed to `on_complete` (the collection manager)
- Leaving DRAWING without completing has no effect on the collection
- A close gesture (closing tap, double-click) over fewer than 3 distinct
  vertices is rejected: the session stays open and nothing is appended
"""

import uuid
from enum import Enum
from typing import Callable, List, Optional

from aoi_zone.geometry.shapes import (
    Feature,
    Geometry,
    Point,
    close_ring,
    planar_distance_m,
)
from aoi_zone.logging import LogEvent, StructuredLogger, create_logger

MIN_VERTICES = 3
CLOSE_TOLERANCE_M = 0.5


class DrawState(str, Enum):
    IDLE = "idle"
    DRAWING = "drawing"
    COMPLETED = "completed"


def _new_feature_id() -> str:
    return uuid.uuid4().hex


class DrawSession:
    """
    Vertices of an in-progress polygon.

    Exists only while drawing is active; the machine discards it on commit
    or cancellation.
    """

    def __init__(self, min_vertices: int = MIN_VERTICES):
        self.vertices: List[Point] = []
        self.min_vertices = min_vertices

    @property
    def first(self) -> Optional[Point]:
        return self.vertices[0] if self.vertices else None

    def can_complete(self) -> bool:
        return len(self.vertices) >= self.min_vertices

    def append(self, point: Point) -> None:
        self.vertices.append(point)

    def __len__(self) -> int:
        return len(self.vertices)

    def __repr__(self) -> str:
        return f"DrawSession(vertices={len(self.vertices)})"


class DrawSessionMachine:
    """
    Owns the draw interaction: vertex collection and completion gestures.

    Usage:
        machine = DrawSessionMachine(on_complete=collection.add)
        machine.start()
        for lon, lat in clicks:
            machine.pointer_down(lon, lat)
        machine.double_click()
    """

    def __init__(
        self,
        on_complete: Callable[[Feature], object],
        close_tolerance_m: float = CLOSE_TOLERANCE_M,
        min_vertices: int = MIN_VERTICES,
        distance: Callable[[Point, Point], float] = planar_distance_m,
        id_factory: Callable[[], str] = _new_feature_id,
        logger: Optional[StructuredLogger] = None,
    ):
        if close_tolerance_m < 0:
            raise ValueError(f"close_tolerance_m must be >= 0, got {close_tolerance_m}")
        if min_vertices < 3:
            raise ValueError(f"min_vertices must be >= 3, got {min_vertices}")

        self.on_complete = on_complete
        self.close_tolerance_m = close_tolerance_m
        self.min_vertices = min_vertices
        self.distance = distance
        self.id_factory = id_factory
        self.logger = logger or create_logger("draw")

        self._state = DrawState.IDLE
        self._session: Optional[DrawSession] = None

    @property
    def state(self) -> DrawState:
        return self._state

    @property
    def is_drawing(self) -> bool:
        return self._state == DrawState.DRAWING

    @property
    def vertices(self) -> List[Point]:
        """Copy of the vertices collected so far (empty when idle)."""
        return list(self._session.vertices) if self._session else []

    def start(self) -> None:
        """IDLE -> DRAWING. Restarting discards the current session."""
        if self.is_drawing:
            self._discard("restarted")

        self._session = DrawSession(min_vertices=self.min_vertices)
        self._state = DrawState.DRAWING
        self.logger.info(event=LogEvent.DRAW_STARTED, message="Drawing started")

    def pointer_down(self, lon: float, lat: float) -> Optional[Feature]:
        """
        Evaluate a pointer-down/tap at (lon, lat).

        Returns:
            The committed feature when this tap closed the ring, else None
        """
        if not self.is_drawing:
            return None

        point = (lon, lat)
        session = self._session

        if session.can_complete():
            distance = self.distance(session.first, point)
            if distance <= self.close_tolerance_m:
                return self._complete("closing_tap")

        session.append(point)
        self.logger.debug(
            event=LogEvent.DRAW_VERTEX_ADDED,
            message="Vertex added",
            metadata={'vertices': len(session)},
        )
        return None

    def double_click(
        self,
        lon: Optional[float] = None,
        lat: Optional[float] = None,
    ) -> Optional[Feature]:
        """
        Explicit finish request.

        Completes with the vertices accumulated so far, whatever the distance
        to the first vertex; the double-click itself adds no vertex. Ignored
        with fewer than the minimum vertices.
        """
        if not self.is_drawing or not self._session.can_complete():
            return None
        return self._complete("double_click")

    def stop(self) -> Optional[Feature]:
        """
        External stop signal.

        Completes the ring when enough vertices exist, otherwise discards the
        session silently.
        """
        if not self.is_drawing:
            return None
        if self._session.can_complete():
            return self._complete("stop")

        self._discard("stopped_before_min_vertices")
        return None

    def cancel(self) -> None:
        """Discard the session regardless of its vertices."""
        if self.is_drawing:
            self._discard("cancelled")

    def _complete(self, trigger: str) -> Optional[Feature]:
        ring = close_ring(self._session.vertices)

        # Closing vertex excluded
        distinct = len(set(ring[:-1]))
        if distinct < self.min_vertices:
            if trigger == "stop":
                self._discard("too_few_distinct_vertices")
            else:
                self.logger.info(
                    event=LogEvent.DRAW_COMPLETION_REJECTED,
                    message="Too few distinct vertices to close the ring",
                    metadata={'trigger': trigger, 'distinct': distinct},
                )
            return None

        feature = Feature(
            geometry=Geometry.polygon(ring),
            properties={},
            id=self.id_factory(),
        )

        self._state = DrawState.COMPLETED
        self._session = None
        self.logger.info(
            event=LogEvent.DRAW_COMPLETED,
            message="Polygon completed",
            metadata={'trigger': trigger, 'vertices': len(ring) - 1, 'feature_id': feature.id},
        )

        try:
            self.on_complete(feature)
        finally:
            self._state = DrawState.IDLE

        return feature

    def _discard(self, reason: str) -> None:
        vertices = len(self._session) if self._session else 0
        self._session = None
        self._state = DrawState.IDLE
        self.logger.info(
            event=LogEvent.DRAW_DISCARDED,
            message="Draw session discarded",
            metadata={'reason': reason, 'vertices': vertices},
        )

    def __repr__(self) -> str:
        return f"DrawSessionMachine(state={self._state.value}, session={self._session!r})"
