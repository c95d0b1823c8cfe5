from typing import List, Optional, Set

import pytest

from aoi_store import MemoryStore
from aoi_zone.geometry.shapes import Feature, Geometry
from aoi_zone.rendering.style import PolygonStyle
from aoi_zone.rendering.visualizer import RenderedShape, count_vertices


def square(x: float, y: float, size: float = 1.0, feature_id=None) -> Feature:
    """Closed axis-aligned square with its south-west corner at (x, y)."""
    return Feature(
        geometry=Geometry.polygon([(x, y), (x + size, y), (x + size, y + size), (x, y + size)]),
        properties={},
        id=feature_id,
    )


class FakeRenderer:
    """Renderer that records draw calls; raises for features whose id is in `fail_ids`."""

    def __init__(self, fail_ids: Optional[Set] = None):
        self.fail_ids = fail_ids or set()
        self.drawn: List[Feature] = []
        self.clears = 0

    def clear(self) -> None:
        self.clears += 1
        self.drawn = []

    def draw(self, feature: Feature, style: PolygonStyle) -> RenderedShape:
        if feature.id in self.fail_ids:
            raise ValueError(f"cannot draw {feature.id}")
        self.drawn.append(feature)
        return RenderedShape(feature=feature, vertex_count=count_vertices(feature))


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def renderer():
    return FakeRenderer()
