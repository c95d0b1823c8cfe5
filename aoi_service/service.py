"""
Map Session Service - Wires renderer events to the AOI core.

This module provides the MapSessionService class which owns the explicit
map state (center, zoom, viewport, drawing mode), the polygon collection,
the draw session state machine and the render pipeline, and routes every
renderer event to a named operation on them.

Concurrency Model:
- Single asyncio event loop, no threads touch shared state
- View changes debounced: store update at 150 ms, culling at 300 ms
- Every collection change schedules a fresh render pass; an in-flight
  pass is superseded, not cancelled
"""

import asyncio
import math
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from aoi_service.config import MapConfig
from aoi_service.debounce import Debouncer
from aoi_service.geocoding import GeocodeResult, NominatimClient, SearchController
from aoi_service.registry import EventRegistry
from aoi_zone.collection import FeatureStore, PolygonCollection
from aoi_zone.drawing.session import DrawSessionMachine
from aoi_zone.geometry.shapes import Feature, Geometry, Viewport
from aoi_zone.logging import LogEvent, StructuredLogger, create_logger
from aoi_zone.pipeline import PipelineBuilder, RenderPass
from aoi_zone.rendering.visualizer import MapRenderer

SELECT_MODE = "simple_select"
DRAW_MODE = "draw_polygon"

TILE_SIZE = 256
MAX_MERCATOR_LAT = 85.05112878


def viewport_around(
    center: Tuple[float, float],
    zoom: float,
    width: int,
    height: int,
) -> Viewport:
    """
    Rectangle shown by a width x height pixel map at `zoom` around `center`.

    Uses the Web Mercator scale at the center latitude (planar approximation).
    """
    lon, lat = center
    degrees_per_pixel = 360.0 / (TILE_SIZE * 2 ** zoom)
    half_w = degrees_per_pixel * width / 2
    half_h = degrees_per_pixel * height / 2 * math.cos(math.radians(lat))

    return Viewport(
        west=max(lon - half_w, -180.0),
        south=max(lat - half_h, -MAX_MERCATOR_LAT),
        east=min(lon + half_w, 180.0),
        north=min(lat + half_h, MAX_MERCATOR_LAT),
    )


@dataclass
class MapState:
    """
    Explicit view state shared by the UI and the pipeline.

    Mutated only through MapSessionService operations.
    """

    center: Tuple[float, float]
    zoom: float
    viewport: Viewport
    drawing_mode: str = SELECT_MODE


class MapSessionService:
    """
    Main map session service.

    Usage:
        service = MapSessionService(config, store, renderer)
        service.load()
        service.registry.dispatch('draw_start')
        service.registry.dispatch('vertex_add', 7.10, 51.20)
        ...
        service.registry.dispatch('double_click')
        await service.wait_idle()
    """

    def __init__(
        self,
        config: MapConfig,
        store: FeatureStore,
        renderer: MapRenderer,
        geocoder: Optional[NominatimClient] = None,
        logger: Optional[StructuredLogger] = None,
    ):
        self.config = config
        self.logger = logger or create_logger("service")
        self.renderer = renderer

        self.state = MapState(
            center=config.center,
            zoom=config.zoom,
            viewport=viewport_around(
                config.center, config.zoom, config.canvas.width, config.canvas.height
            ),
        )
        self._sync_renderer_viewport()

        self.collection = PolygonCollection(store)
        self.machine = DrawSessionMachine(
            on_complete=self._on_draw_complete,
            close_tolerance_m=config.drawing.close_tolerance_m,
            min_vertices=config.drawing.min_vertices,
        )
        self.pipeline = (
            PipelineBuilder()
            .with_renderer(renderer)
            .with_style(config.style)
            .with_config(config.performance.pipeline_config())
            .build()
        )

        self.search: Optional[SearchController] = None
        if geocoder is not None:
            self.search = SearchController(
                geocoder,
                on_results=self._on_search_results,
                debounce_ms=config.geocoding.debounce_ms,
            )
        self.search_results: List[GeocodeResult] = []

        self._view_debouncer = Debouncer(config.performance.view_debounce_ms, self._apply_view)
        self._cull_debouncer = Debouncer(config.performance.cull_debounce_ms, self._recompute_visible)

        self.render_task: Optional[asyncio.Task] = None
        self.last_render: Optional[RenderPass] = None

        self.registry = EventRegistry()
        self._register_events()
        self.collection.subscribe(lambda _: self.request_render())

    def _register_events(self) -> None:
        self.registry.register('draw_start', self.start_drawing, "Begin a draw session")
        self.registry.register('vertex_add', self.machine.pointer_down, "Pointer-down at lon, lat")
        self.registry.register('double_click', self._double_click, "Explicit finish gesture")
        self.registry.register('draw_stop', self.stop_drawing, "Stop drawing, completing if possible")
        self.registry.register('shape_created', self.collection.add, "Shape created outside the draw session")
        self.registry.register('shapes_edited', self.apply_edits, "Edited shapes with their previous geometry")
        self.registry.register('shapes_deleted', self.collection.delete, "Layers remaining after a delete")
        self.registry.register('view_changed', self.view_changed, "Map panned or zoomed")

    # ----- Drawing -----

    def start_drawing(self) -> None:
        self.state.drawing_mode = DRAW_MODE
        self.machine.start()

    def stop_drawing(self) -> Optional[Feature]:
        feature = self.machine.stop()
        self.state.drawing_mode = SELECT_MODE
        return feature

    def _double_click(self, lon: Optional[float] = None, lat: Optional[float] = None) -> Optional[Feature]:
        return self.machine.double_click(lon, lat)

    def _on_draw_complete(self, feature: Feature) -> None:
        self.state.drawing_mode = SELECT_MODE
        self.collection.add(feature)

    # ----- Collection -----

    def load(self) -> None:
        self.collection.load()

    def apply_edits(self, edits: Iterable[Tuple[Feature, Optional[Geometry]]]) -> int:
        """Apply (edited feature, previous geometry) pairs; returns replaced count."""
        return sum(self.collection.edit(feature, previous) for feature, previous in edits)

    # ----- View -----

    def view_changed(
        self,
        center: Tuple[float, float],
        zoom: float,
        viewport: Optional[Viewport] = None,
    ) -> None:
        """Renderer reports a pan/zoom; applied after 150 ms of quiet."""
        self._view_debouncer(center, zoom, viewport)

    def set_view(
        self,
        center: Tuple[float, float],
        zoom: float,
        viewport: Optional[Viewport] = None,
    ) -> None:
        """
        Update center, zoom and viewport immediately.

        Without an explicit viewport the rectangle is derived from the canvas
        size. Renderers that project through a viewport receive the new one.
        """
        self.state.center = center
        self.state.zoom = zoom
        self.state.viewport = viewport or viewport_around(
            center, zoom, self.config.canvas.width, self.config.canvas.height
        )
        self._sync_renderer_viewport()

    def _sync_renderer_viewport(self) -> None:
        set_viewport = getattr(self.renderer, "set_viewport", None)
        if set_viewport is not None:
            set_viewport(self.state.viewport)

    def _apply_view(
        self,
        center: Tuple[float, float],
        zoom: float,
        viewport: Optional[Viewport],
    ) -> None:
        self.set_view(center, zoom, viewport)
        self.logger.debug(
            event=LogEvent.VIEWPORT_CHANGED,
            message="View changed",
            metadata={'center': list(center), 'zoom': zoom},
        )
        self._cull_debouncer()

    def _recompute_visible(self) -> None:
        self.pipeline.visible(
            self.collection.features, self.state.viewport, self.collection.revision
        )
        self.request_render()

    def select_search_result(self, result: GeocodeResult) -> None:
        """Center the map on a search result at the configured zoom."""
        self._apply_view(
            (result.longitude, result.latitude), self.config.geocoding.result_zoom, None
        )

    def _on_search_results(self, results: List[GeocodeResult]) -> None:
        self.search_results = results

    # ----- Rendering -----

    def request_render(self) -> Optional[asyncio.Task]:
        """
        Schedule a render pass on the running loop.

        Without a running loop nothing is scheduled; call `render()` directly.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return None

        self.render_task = loop.create_task(self.render())
        return self.render_task

    async def render(self) -> RenderPass:
        render_pass = await self.pipeline.render(
            self.collection.features,
            self.state.viewport,
            self.state.zoom,
            revision=self.collection.revision,
        )
        if not render_pass.superseded:
            self.last_render = render_pass
        return render_pass

    async def wait_idle(self) -> None:
        """Wait for pending debounced work and the latest render pass."""
        while True:
            if self._view_debouncer.pending or self._cull_debouncer.pending:
                await asyncio.sleep(0.01)
                continue
            task = self.render_task
            if task is not None and not task.done():
                await task
                continue
            return
