"""
Map Renderer Module
===================

Renderer collaborator interface and a frame-based implementation.

Design:
- MapRenderer protocol: the pipeline only asks a renderer to clear and to
  draw a styled feature; it never owns interaction logic
- FrameRenderer draws onto a numpy image using supervision drawing
  utilities, projecting lon/lat linearly into the current viewport

Dependencies:
- supervision (draw utilities, Color)
- numpy (arrays)
- cv2 (stroke opacity blending)
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple

import cv2
import numpy as np
import supervision as sv

from aoi_zone.geometry.shapes import Feature, Ring, Viewport, POLYGON
from aoi_zone.rendering.style import PolygonStyle


@dataclass(frozen=True)
class RenderedShape:
    """A feature as it was handed to the renderer (after simplification)."""

    feature: Feature
    vertex_count: int


class MapRenderer(Protocol):
    """
    Protocol for renderer collaborators (interface).

    Renderers that project through the map view may also provide
    `set_viewport(viewport)`; the session service calls it on every view
    change.
    """

    def clear(self) -> None:
        """Remove every shape drawn by previous passes."""
        ...

    def draw(self, feature: Feature, style: PolygonStyle) -> RenderedShape:
        """Draw one feature; raise on malformed geometry."""
        ...


def count_vertices(feature: Feature) -> int:
    geometry = feature.geometry
    if geometry.type == POLYGON:
        return sum(len(ring) for ring in geometry.coordinates)
    return sum(len(ring) for polygon in geometry.coordinates for ring in polygon)


class FrameRenderer:
    """
    Draws polygons onto an image covering a viewport.

    Usage:
        renderer = FrameRenderer(width=1280, height=720)
        renderer.set_viewport(Viewport(west=7.0, south=51.0, east=8.0, north=52.0))
        renderer.clear()
        renderer.draw(feature, PolygonStyle())
        cv2.imwrite("map.png", renderer.frame)
    """

    def __init__(
        self,
        width: int = 1280,
        height: int = 720,
        background: sv.Color = sv.Color(r=255, g=255, b=255),
    ):
        if width <= 0 or height <= 0:
            raise ValueError(f"Frame size must be positive, got {(width, height)}")

        self.width = width
        self.height = height
        self.background = background
        self.viewport: Optional[Viewport] = None
        self.shapes: List[RenderedShape] = []
        self._frame = self._blank()

    def _blank(self) -> np.ndarray:
        frame = np.zeros((self.height, self.width, 3), dtype=np.uint8)
        frame[:] = self.background.as_bgr()
        return frame

    @property
    def frame(self) -> np.ndarray:
        return self._frame

    def set_viewport(self, viewport: Viewport) -> None:
        if viewport.east == viewport.west or viewport.north == viewport.south:
            raise ValueError(f"Viewport has zero extent: {viewport}")
        self.viewport = viewport

    def clear(self) -> None:
        self._frame = self._blank()
        self.shapes = []

    def project(self, ring: Ring) -> np.ndarray:
        """Convert lon/lat points to an Nx2 int32 pixel array."""
        if self.viewport is None:
            raise RuntimeError("FrameRenderer has no viewport (use set_viewport())")

        coords = np.asarray([(p[0], p[1]) for p in ring], dtype=float)
        if coords.ndim != 2 or len(coords) < 3:
            raise ValueError(f"Ring needs at least 3 points, got {len(coords)}")

        vp = self.viewport
        x = (coords[:, 0] - vp.west) / (vp.east - vp.west) * (self.width - 1)
        y = (vp.north - coords[:, 1]) / (vp.north - vp.south) * (self.height - 1)
        return np.round(np.stack([x, y], axis=1)).astype(np.int32)

    def _rings(self, feature: Feature) -> List[Tuple[Ring, bool]]:
        """(ring, is_outer) pairs for every ring of the feature."""
        geometry = feature.geometry
        polygons = [geometry.coordinates] if geometry.type == POLYGON else list(geometry.coordinates)
        return [
            (ring, index == 0)
            for rings in polygons
            for index, ring in enumerate(rings)
        ]

    def draw(self, feature: Feature, style: PolygonStyle) -> RenderedShape:
        projected = [(self.project(ring), is_outer) for ring, is_outer in self._rings(feature)]

        frame = self._frame
        for polygon, is_outer in projected:
            if is_outer:
                frame = sv.draw_filled_polygon(
                    scene=frame,
                    polygon=polygon,
                    color=style.fill,
                    opacity=style.fill_opacity,
                )

        # Stroke drawn on an overlay and blended for opacity
        overlay = frame.copy()
        for polygon, _ in projected:
            overlay = sv.draw_polygon(
                scene=overlay,
                polygon=polygon,
                color=style.stroke,
                thickness=style.weight,
            )
        self._frame = cv2.addWeighted(overlay, style.opacity, frame, 1 - style.opacity, 0)

        shape = RenderedShape(feature=feature, vertex_count=count_vertices(feature))
        self.shapes.append(shape)
        return shape
