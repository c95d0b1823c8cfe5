"""
Render Pipeline Module
======================

Bounded Context: Turning the polygon collection into drawn shapes.

Design:
- Orchestrator: cull -> simplify -> batch -> renderer
- Builder pattern: fluent configuration
- Last pass wins: a superseded pass keeps running but stops emitting
- Fail fast: thresholds validated at build time

Stages per pass:
1. Snapshot the input
2. Viewport culling (large collections only, cached by viewport value)
3. Simplification decision from zoom and visible count
4. Emission, batched for large visible sets, synchronous otherwise
"""

from dataclasses import dataclass, replace
from typing import List, Optional, Sequence

from aoi_zone.geometry.culling import CULL_THRESHOLD, VisibleSetCache, filter_visible
from aoi_zone.geometry.shapes import Feature, Viewport
from aoi_zone.geometry.simplify import (
    SIMPLIFY_MAX_ZOOM,
    SIMPLIFY_MIN_COUNT,
    should_simplify,
    simplify_feature,
    tolerance_for_zoom,
)
from aoi_zone.logging import LogEvent, StructuredLogger, create_logger
from aoi_zone.rendering.batch import (
    BATCH_THRESHOLD,
    DEFAULT_BATCH_SIZE,
    process_all,
    run_batched,
)
from aoi_zone.rendering.style import PolygonStyle
from aoi_zone.rendering.visualizer import MapRenderer, RenderedShape


@dataclass
class PipelineConfig:
    """Thresholds driving culling, simplification and batching."""

    cull_threshold: int = CULL_THRESHOLD
    batch_threshold: int = BATCH_THRESHOLD
    batch_size: int = DEFAULT_BATCH_SIZE
    simplify_max_zoom: float = SIMPLIFY_MAX_ZOOM
    simplify_min_count: int = SIMPLIFY_MIN_COUNT

    def __post_init__(self):
        if self.batch_size < 1:
            raise ValueError(f"batch_size must be >= 1, got {self.batch_size}")
        if self.cull_threshold < 0 or self.batch_threshold < 0:
            raise ValueError("thresholds must be >= 0")


@dataclass
class RenderPass:
    """Outcome of one render pass."""

    pass_id: int
    shapes: List[RenderedShape]
    candidate_count: int
    visible_count: int
    simplified: bool
    batched: bool
    superseded: bool = False

    @property
    def failed_count(self) -> int:
        return self.visible_count - len(self.shapes)


class RenderPipeline:
    """
    Feeds the visible, simplified polygons to the renderer.

    Usage:
        pipeline = (
            PipelineBuilder()
            .with_renderer(renderer)
            .with_style(PolygonStyle())
            .build()
        )
        render_pass = await pipeline.render(collection.features, viewport, zoom)
    """

    def __init__(
        self,
        renderer: MapRenderer,
        style: PolygonStyle,
        config: PipelineConfig,
        logger: StructuredLogger,
    ):
        self.renderer = renderer
        self.style = style
        self.config = config
        self.logger = logger
        self.cache = VisibleSetCache()
        self._pass_id = 0

    @property
    def latest_pass_id(self) -> int:
        return self._pass_id

    def visible(
        self,
        features: Sequence[Feature],
        viewport: Viewport,
        revision: Optional[int] = None,
    ) -> Sequence[Feature]:
        """
        Culled subset for the viewport, reusing the cached result when the
        viewport bounds and the collection revision are unchanged.
        """
        if len(features) < self.config.cull_threshold:
            return features

        if revision is not None:
            cached = self.cache.get(viewport, revision)
            if cached is not None:
                return cached

        visible = filter_visible(features, viewport, self.config.cull_threshold)
        if revision is not None:
            self.cache.put(viewport, revision, visible)
        return visible

    async def render(
        self,
        features: Sequence[Feature],
        viewport: Viewport,
        zoom: float,
        revision: Optional[int] = None,
    ) -> RenderPass:
        """
        Run one render pass.

        Args:
            features: Collection snapshot (copied; later edits are not observed)
            viewport: Visible rectangle
            zoom: Current zoom level
            revision: Collection revision, enables the visible-set cache

        Returns:
            RenderPass with the shapes emitted by this pass
        """
        self._pass_id += 1
        pass_id = self._pass_id

        snapshot = tuple(features)
        visible = self.visible(snapshot, viewport, revision)
        simplify = should_simplify(
            zoom,
            len(visible),
            self.config.simplify_max_zoom,
            self.config.simplify_min_count,
        )
        tolerance = tolerance_for_zoom(zoom)
        batched = len(visible) > self.config.batch_threshold

        self.logger.info(
            event=LogEvent.RENDER_PASS_STARTED,
            message="Render pass started",
            metadata={
                'pass_id': pass_id,
                'candidates': len(snapshot),
                'visible': len(visible),
                'zoom': zoom,
                'simplify': simplify,
                'batched': batched,
            },
        )

        def step(feature: Feature) -> Optional[RenderedShape]:
            prepared = simplify_feature(feature, tolerance) if simplify else feature
            if pass_id != self._pass_id:
                return None
            return self.renderer.draw(prepared, self.style)

        def on_batch_done(results: List[Optional[RenderedShape]]) -> None:
            self.logger.debug(
                event=LogEvent.RENDER_BATCH_DONE,
                message="Batch emitted",
                metadata={'pass_id': pass_id, 'size': len(results)},
            )

        self.renderer.clear()
        if batched:
            results = await run_batched(
                visible,
                step,
                batch_size=self.config.batch_size,
                on_batch_done=on_batch_done,
                logger=self.logger,
            )
        else:
            results = process_all(visible, step, logger=self.logger)

        render_pass = RenderPass(
            pass_id=pass_id,
            shapes=[shape for shape in results if shape is not None],
            candidate_count=len(snapshot),
            visible_count=len(visible),
            simplified=simplify,
            batched=batched,
            superseded=pass_id != self._pass_id,
        )

        self.logger.info(
            event=LogEvent.RENDER_PASS_COMPLETED,
            message="Render pass completed",
            metadata={
                'pass_id': pass_id,
                'shapes': len(render_pass.shapes),
                'superseded': render_pass.superseded,
            },
        )
        return render_pass


class PipelineBuilder:
    """
    Builder for RenderPipeline.

    Usage:
        pipeline = (
            PipelineBuilder()
            .with_renderer(FrameRenderer(1280, 720))
            .with_batch_size(50)
            .build()
        )
    """

    def __init__(self):
        self._renderer: Optional[MapRenderer] = None
        self._style: Optional[PolygonStyle] = None
        self._config = PipelineConfig()
        self._logger: Optional[StructuredLogger] = None

    def with_renderer(self, renderer: MapRenderer) -> "PipelineBuilder":
        self._renderer = renderer
        return self

    def with_style(self, style: PolygonStyle) -> "PipelineBuilder":
        self._style = style
        return self

    def with_config(self, config: PipelineConfig) -> "PipelineBuilder":
        self._config = config
        return self

    def with_batch_size(self, batch_size: int) -> "PipelineBuilder":
        """Set slice length for batched passes."""
        self._config = replace(self._config, batch_size=batch_size)
        return self

    def with_logger(self, logger: StructuredLogger) -> "PipelineBuilder":
        self._logger = logger
        return self

    def build(self) -> RenderPipeline:
        """
        Raises:
            ValueError: If no renderer was configured
        """
        if self._renderer is None:
            raise ValueError("Renderer is required (use .with_renderer())")

        return RenderPipeline(
            renderer=self._renderer,
            style=self._style or PolygonStyle(),
            config=self._config,
            logger=self._logger or create_logger("pipeline"),
        )
