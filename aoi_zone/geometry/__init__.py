"""
Geometry Layer
==============

Bounded Context: Polygon data model and pure spatial functions.

Responsibilities:
- Feature / Geometry / Viewport representation (immutable)
- Ring simplification by zoom level
- Viewport culling
- NO state, NO persistence, NO drawing
"""

from aoi_zone.geometry.shapes import (
    BBox,
    Feature,
    FeatureDecodeError,
    Geometry,
    Viewport,
    close_ring,
    planar_distance_m,
)
from aoi_zone.geometry.simplify import (
    simplify_feature,
    simplify_ring,
    should_simplify,
    tolerance_for_zoom,
)
from aoi_zone.geometry.culling import (
    VisibleSetCache,
    bounding_box,
    filter_visible,
    is_in_viewport,
)

__all__ = [
    "BBox",
    "Feature",
    "FeatureDecodeError",
    "Geometry",
    "Viewport",
    "close_ring",
    "planar_distance_m",
    "simplify_feature",
    "simplify_ring",
    "should_simplify",
    "tolerance_for_zoom",
    "VisibleSetCache",
    "bounding_box",
    "filter_visible",
    "is_in_viewport",
]
