"""
Rendering Layer
===============

Bounded Context: Feeding polygons to the map renderer.

Responsibilities:
- Batch scheduling of large render passes (cooperative, non-blocking)
- Polygon style
- Renderer collaborator interface and a frame-based renderer

Non-responsibilities:
- Culling and simplification (handled by geometry)
- Deciding what to render (handled by pipeline)
"""

from aoi_zone.rendering.batch import (
    BATCH_THRESHOLD,
    DEFAULT_BATCH_SIZE,
    process_all,
    run_batched,
)
from aoi_zone.rendering.style import PolygonStyle
from aoi_zone.rendering.visualizer import FrameRenderer, MapRenderer, RenderedShape

__all__ = [
    "BATCH_THRESHOLD",
    "DEFAULT_BATCH_SIZE",
    "process_all",
    "run_batched",
    "PolygonStyle",
    "FrameRenderer",
    "MapRenderer",
    "RenderedShape",
]
