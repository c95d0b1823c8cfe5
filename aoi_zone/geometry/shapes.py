"""
Geometric Shapes Module
========================

Pure geometric representations - NO state, NO side effects.

Design:
- Immutable shapes (frozen dataclass pattern)
- Tuple coordinates so that == is deep structural equality
- Planar approximations for distances (no geodesic math)
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple, Union

Point = Tuple[float, float]
Ring = Tuple[Point, ...]

POLYGON = "Polygon"
MULTI_POLYGON = "MultiPolygon"
GEOMETRY_TYPES = (POLYGON, MULTI_POLYGON)

# Mean earth radius (IUGG), meters
EARTH_RADIUS_M = 6371008.8


class FeatureDecodeError(ValueError):
    """Raised when a GeoJSON mapping cannot be turned into a Feature."""
    pass


def _to_point(position: Any) -> Point:
    if not isinstance(position, (list, tuple)) or len(position) < 2:
        raise FeatureDecodeError(f"Position must be a [lon, lat] pair, got {position!r}")

    lon, lat = position[0], position[1]
    for value in (lon, lat):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise FeatureDecodeError(f"Coordinate must be a number, got {value!r}")
        try:
            finite = math.isfinite(float(value))
        except OverflowError:
            finite = False
        if not finite:
            raise FeatureDecodeError(f"Coordinate must be finite, got {value!r}")

    return (lon, lat)


def _to_ring(ring: Any) -> Ring:
    if not isinstance(ring, (list, tuple)):
        raise FeatureDecodeError(f"Ring must be a sequence of positions, got {type(ring).__name__}")
    return tuple(_to_point(position) for position in ring)


def _to_rings(rings: Any) -> Tuple[Ring, ...]:
    if not isinstance(rings, (list, tuple)) or len(rings) == 0:
        raise FeatureDecodeError("Polygon must have at least an outer ring")

    parsed = tuple(_to_ring(ring) for ring in rings)
    distinct = len(set(parsed[0]))
    if distinct < 3:
        raise FeatureDecodeError(
            f"Outer ring must have at least 3 distinct vertices, got {distinct}"
        )
    return parsed


def close_ring(vertices: Sequence[Point]) -> Ring:
    """Return the vertices as a ring whose last point equals the first."""
    ring = tuple(tuple(v) for v in vertices)
    if ring and ring[0] != ring[-1]:
        ring = ring + (ring[0],)
    return ring


@dataclass(frozen=True)
class Geometry:
    """
    Immutable polygon geometry payload.

    Attributes:
        type: "Polygon" or "MultiPolygon"
        coordinates: For Polygon a tuple of rings (outer first, then holes);
            for MultiPolygon a tuple of such ring sets.
    """

    type: str
    coordinates: Tuple[Any, ...]

    def __post_init__(self):
        if self.type not in GEOMETRY_TYPES:
            raise FeatureDecodeError(
                f"Invalid geometry type: {self.type!r}. Must be one of {GEOMETRY_TYPES}"
            )

    @property
    def outer_ring(self) -> Optional[Ring]:
        """Outer ring of a Polygon, None for any other geometry."""
        if self.type != POLYGON or not self.coordinates:
            return None
        return self.coordinates[0]

    @classmethod
    def polygon(cls, outer: Sequence[Point], *holes: Sequence[Point]) -> "Geometry":
        rings = (close_ring(outer),) + tuple(close_ring(h) for h in holes)
        return cls(type=POLYGON, coordinates=rings)

    @classmethod
    def from_dict(cls, data: Any) -> "Geometry":
        if not isinstance(data, dict):
            raise FeatureDecodeError("Geometry must be an object")

        geom_type = data.get("type")
        coordinates = data.get("coordinates")

        if geom_type == POLYGON:
            return cls(type=POLYGON, coordinates=_to_rings(coordinates))
        if geom_type == MULTI_POLYGON:
            if not isinstance(coordinates, (list, tuple)) or len(coordinates) == 0:
                raise FeatureDecodeError("MultiPolygon must contain at least one polygon")
            return cls(
                type=MULTI_POLYGON,
                coordinates=tuple(_to_rings(polygon) for polygon in coordinates),
            )
        raise FeatureDecodeError(f"Unsupported geometry type: {geom_type!r}")

    def to_dict(self) -> Dict[str, Any]:
        if self.type == POLYGON:
            coordinates = [[list(p) for p in ring] for ring in self.coordinates]
        else:
            coordinates = [
                [[list(p) for p in ring] for ring in polygon]
                for polygon in self.coordinates
            ]
        return {"type": self.type, "coordinates": coordinates}


@dataclass(frozen=True)
class Feature:
    """
    Immutable polygon record: geometry plus optional properties and identifier.

    Rendering components receive Features as read-only views; the collection
    manager replaces whole Features instead of mutating them. Properties are
    copied into a read-only mapping; the hash covers geometry and id only.
    """

    geometry: Geometry
    properties: Mapping[str, Any] = field(default_factory=dict)
    id: Optional[Union[str, int]] = None

    def __post_init__(self):
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def __hash__(self) -> int:
        return hash((self.geometry, self.id))

    @classmethod
    def from_dict(cls, data: Any) -> "Feature":
        """
        Build a Feature from a GeoJSON mapping.

        Raises:
            FeatureDecodeError: If the mapping is not a valid polygon feature
        """
        if not isinstance(data, dict):
            raise FeatureDecodeError(f"Feature must be an object, got {type(data).__name__}")
        if data.get("type", "Feature") != "Feature":
            raise FeatureDecodeError(f"Expected a Feature, got {data.get('type')!r}")
        if "geometry" not in data:
            raise FeatureDecodeError("Feature has no geometry")

        properties = data.get("properties") or {}
        if not isinstance(properties, dict):
            raise FeatureDecodeError("Feature properties must be an object")

        feature_id = data.get("id")
        if feature_id is not None and not isinstance(feature_id, (str, int)):
            raise FeatureDecodeError(f"Feature id must be a string or integer, got {feature_id!r}")

        return cls(
            geometry=Geometry.from_dict(data["geometry"]),
            properties=dict(properties),
            id=feature_id,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "type": "Feature",
            "geometry": self.geometry.to_dict(),
            "properties": dict(self.properties),
        }
        if self.id is not None:
            data["id"] = self.id
        return data

    def with_geometry(self, geometry: Geometry) -> "Feature":
        return Feature(geometry=geometry, properties=self.properties, id=self.id)


@dataclass(frozen=True)
class BBox:
    """Axis-aligned bounding box in lon/lat degrees."""

    west: float
    south: float
    east: float
    north: float

    @classmethod
    def of_points(cls, points: Iterable[Point]) -> Optional["BBox"]:
        points = list(points)
        if not points:
            return None
        lons = [p[0] for p in points]
        lats = [p[1] for p in points]
        return cls(west=min(lons), south=min(lats), east=max(lons), north=max(lats))

    def intersects(self, other: "BBox") -> bool:
        """Inclusive test: boxes sharing only an edge intersect."""
        return (
            other.east >= self.west
            and other.west <= self.east
            and other.north >= self.south
            and other.south <= self.north
        )


@dataclass(frozen=True)
class Viewport(BBox):
    """
    Visible map rectangle (west, south, east, north).

    Recomputed on every view change, never mutated; compared by value.
    """

    def __post_init__(self):
        if self.west > self.east or self.south > self.north:
            raise ValueError(
                f"Viewport bounds must satisfy west <= east and south <= north, got {self}"
            )

    @property
    def center(self) -> Point:
        return ((self.west + self.east) / 2, (self.south + self.north) / 2)


def planar_distance_m(a: Point, b: Point) -> float:
    """
    Distance in meters between two lon/lat points.

    Equirectangular projection around the mean latitude; accurate enough at
    the sub-meter scales used for the closing gesture.
    """
    mean_lat = math.radians((a[1] + b[1]) / 2)
    dx = math.radians(b[0] - a[0]) * math.cos(mean_lat)
    dy = math.radians(b[1] - a[1])
    return math.hypot(dx, dy) * EARTH_RADIUS_M
