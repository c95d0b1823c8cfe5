"""
AOI Zone Core
=============

Bounded Context: Drawing, holding and rendering areas-of-interest over a map.

Design Philosophy:
- Separation of Concerns: Geometry, Drawing, Rendering, Collection separated
- Pure functions for geometry, explicit state objects for everything else
- The map renderer is a collaborator: it draws styled layers and reports
  pointer events, it never owns interaction logic

Architecture:

    aoi_zone/
    ├── geometry/          # Pure geometry (immutable, stateless)
    │   ├── shapes.py      # Feature, Geometry, Viewport, BBox
    │   ├── simplify.py    # Zoom-proportional ring simplification
    │   └── culling.py     # Viewport culling + visible-set cache
    │
    ├── drawing/           # Interactive capture (stateful)
    │   └── session.py     # DrawSessionMachine
    │
    ├── rendering/         # Emission to the renderer
    │   ├── batch.py       # Cooperative batch scheduler
    │   ├── style.py       # PolygonStyle
    │   └── visualizer.py  # MapRenderer protocol, FrameRenderer
    │
    ├── logging/           # Structured JSON logging
    ├── collection.py      # PolygonCollection (authoritative set)
    └── pipeline.py        # RenderPipeline (cull -> simplify -> batch)

Usage:

    from aoi_zone import (
        DrawSessionMachine, PolygonCollection, PipelineBuilder,
        FrameRenderer, Viewport,
    )

    collection = PolygonCollection(store)
    collection.load()

    machine = DrawSessionMachine(on_complete=collection.add)
    machine.start()
    for lon, lat in [(7.0, 51.0), (7.1, 51.0), (7.1, 51.1)]:
        machine.pointer_down(lon, lat)
    machine.stop()

    renderer = FrameRenderer(width=1280, height=720)
    renderer.set_viewport(Viewport(west=6.9, south=50.9, east=7.2, north=51.2))
    pipeline = PipelineBuilder().with_renderer(renderer).build()
    render_pass = asyncio.run(pipeline.render(collection.features, renderer.viewport, zoom=11))
"""

# Geometry Layer (immutable, stateless)
from aoi_zone.geometry import (
    BBox,
    Feature,
    FeatureDecodeError,
    Geometry,
    Viewport,
    VisibleSetCache,
    filter_visible,
    simplify_ring,
    tolerance_for_zoom,
)

# Drawing Layer (stateful)
from aoi_zone.drawing import DrawSessionMachine, DrawState

# Rendering Layer
from aoi_zone.rendering import (
    FrameRenderer,
    MapRenderer,
    PolygonStyle,
    RenderedShape,
    run_batched,
)

# Collection + Pipeline (orchestration)
from aoi_zone.collection import PolygonCollection
from aoi_zone.pipeline import PipelineBuilder, PipelineConfig, RenderPass, RenderPipeline

__all__ = [
    # Geometry
    "BBox",
    "Feature",
    "FeatureDecodeError",
    "Geometry",
    "Viewport",
    "VisibleSetCache",
    "filter_visible",
    "simplify_ring",
    "tolerance_for_zoom",
    # Drawing
    "DrawSessionMachine",
    "DrawState",
    # Rendering
    "FrameRenderer",
    "MapRenderer",
    "PolygonStyle",
    "RenderedShape",
    "run_batched",
    # Collection + Pipeline
    "PolygonCollection",
    "PipelineBuilder",
    "PipelineConfig",
    "RenderPass",
    "RenderPipeline",
]

__version__ = "1.0.0"
