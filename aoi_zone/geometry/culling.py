"""
Viewport Culling Filter
=======================

Selects which polygons are worth rendering for the current view.

Design:
- Bounding-box intersection, not exact polygon clipping (false positives
  are accepted, false negatives are not)
- Stable filter: output order matches input order
- Only Polygon geometries are evaluated; anything else counts as not visible
- Caching is the caller's job (VisibleSetCache), keyed by value
"""

from typing import Optional, Sequence, Tuple

import numpy as np

from aoi_zone.geometry.shapes import BBox, Feature, Point, Viewport, POLYGON

CULL_THRESHOLD = 100


def bounding_box(ring: Sequence[Point]) -> Optional[BBox]:
    """Axis-aligned bounds of a ring, None for an empty ring."""
    if len(ring) == 0:
        return None

    coords = np.asarray([(p[0], p[1]) for p in ring], dtype=float)
    west, south = coords.min(axis=0)
    east, north = coords.max(axis=0)
    return BBox(west=float(west), south=float(south), east=float(east), north=float(north))


def is_in_viewport(feature: Feature, viewport: Viewport) -> bool:
    """Check whether a feature's outer-ring bbox intersects the viewport."""
    if feature.geometry.type != POLYGON:
        return False

    ring = feature.geometry.outer_ring
    if not ring:
        return False

    bbox = bounding_box(ring)
    return bbox is not None and viewport.intersects(bbox)


def filter_visible(
    features: Sequence[Feature],
    viewport: Viewport,
    threshold: int = CULL_THRESHOLD,
) -> Sequence[Feature]:
    """
    Filter features to those visible in the viewport.

    Below `threshold` members the input is returned unchanged; the scan
    would cost more than it saves.
    """
    if len(features) < threshold:
        return features

    return [feature for feature in features if is_in_viewport(feature, viewport)]


class VisibleSetCache:
    """
    Caller-side cache of the last culling result.

    Keyed on the viewport's four bounds (value equality, never identity)
    and on the collection revision the subset was computed from.

    Usage:
        cache = VisibleSetCache()
        visible = cache.get(viewport, revision)
        if visible is None:
            visible = filter_visible(features, viewport)
            cache.put(viewport, revision, visible)
    """

    def __init__(self):
        self._key: Optional[Tuple[Viewport, int]] = None
        self._visible: Sequence[Feature] = ()

    def get(self, viewport: Viewport, revision: int) -> Optional[Sequence[Feature]]:
        if self._key == (viewport, revision):
            return self._visible
        return None

    def put(self, viewport: Viewport, revision: int, visible: Sequence[Feature]) -> None:
        self._key = (viewport, revision)
        self._visible = visible

    def invalidate(self) -> None:
        self._key = None
        self._visible = ()

    def __repr__(self) -> str:
        return f"VisibleSetCache(cached={self._key is not None}, size={len(self._visible)})"
