"""
Geometry Simplifier
===================

Zoom-proportional vertex reduction for polygon rings.

Design:
- Single-pass local importance filter, O(n)
- Each interior vertex is measured against the segment joining its
  neighbours in the ORIGINAL ring, never against already-simplified output
- Strict comparison: a vertex exactly at the tolerance is dropped
- Tolerance in decimal degrees (distorts near the poles)
"""

from typing import Sequence, Tuple

import numpy as np

from aoi_zone.geometry.shapes import Feature, Geometry, Point, POLYGON

# (min_zoom, tolerance), checked top to bottom
TOLERANCE_STEPS: Tuple[Tuple[float, float], ...] = (
    (15, 0.00001),
    (12, 0.0001),
    (10, 0.001),
)
DEFAULT_TOLERANCE = 0.01

SIMPLIFY_MAX_ZOOM = 12
SIMPLIFY_MIN_COUNT = 50


def segment_distances(
    points: np.ndarray,
    starts: np.ndarray,
    ends: np.ndarray,
) -> np.ndarray:
    """
    Vectorized distance from each point to the segment start-end.

    The projection parameter is clamped to [0, 1]; a degenerate segment
    measures the distance to its start point.

    Args:
        points, starts, ends: Nx2 arrays

    Returns:
        Array of N distances
    """
    seg = ends - starts
    rel = points - starts

    len_sq = np.einsum("ij,ij->i", seg, seg)
    dot = np.einsum("ij,ij->i", rel, seg)

    param = np.full(len(points), -1.0)
    nonzero = len_sq != 0
    param[nonzero] = dot[nonzero] / len_sq[nonzero]
    param = np.clip(param, 0.0, 1.0)

    closest = starts + param[:, None] * seg
    diff = points - closest
    return np.sqrt(np.einsum("ij,ij->i", diff, diff))


def simplify_ring(ring: Sequence[Point], tolerance: float) -> Tuple[Point, ...]:
    """
    Drop interior vertices lying within `tolerance` of their neighbours' segment.

    Args:
        ring: Sequence of (lon, lat) points
        tolerance: Minimum deviation (degrees) a vertex needs to survive

    Returns:
        Tuple of the retained input points, first and last always included
    """
    if len(ring) <= 2:
        return tuple(ring)

    coords = np.asarray([(p[0], p[1]) for p in ring], dtype=float)
    distances = segment_distances(coords[1:-1], coords[:-2], coords[2:])
    keep = np.flatnonzero(distances > tolerance) + 1

    return (ring[0],) + tuple(ring[i] for i in keep) + (ring[-1],)


def tolerance_for_zoom(zoom: float) -> float:
    """Higher zoom = smaller tolerance = more detail."""
    for min_zoom, tolerance in TOLERANCE_STEPS:
        if zoom >= min_zoom:
            return tolerance
    return DEFAULT_TOLERANCE


def should_simplify(
    zoom: float,
    count: int,
    max_zoom: float = SIMPLIFY_MAX_ZOOM,
    min_count: int = SIMPLIFY_MIN_COUNT,
) -> bool:
    """Simplify only when zoomed out AND the candidate set is large."""
    return zoom < max_zoom and count > min_count


def simplify_feature(feature: Feature, tolerance: float) -> Feature:
    """
    Simplify the outer ring of a Polygon feature.

    Holes pass through unchanged; MultiPolygon features are returned as-is.
    """
    geometry = feature.geometry
    if geometry.type != POLYGON or not geometry.coordinates:
        return feature

    outer, *holes = geometry.coordinates
    simplified = simplify_ring(outer, tolerance)
    if len(simplified) == len(outer):
        return feature

    return feature.with_geometry(
        Geometry(type=POLYGON, coordinates=(simplified, *holes))
    )
