"""
Drawing Layer
=============

Bounded Context: Interactive polygon capture.

The draw session state machine is owned end to end by this package; the
map renderer only reports pointer events and renders finished layers.
"""

from aoi_zone.drawing.session import (
    CLOSE_TOLERANCE_M,
    MIN_VERTICES,
    DrawSession,
    DrawSessionMachine,
    DrawState,
)

__all__ = [
    "CLOSE_TOLERANCE_M",
    "MIN_VERTICES",
    "DrawSession",
    "DrawSessionMachine",
    "DrawState",
]
