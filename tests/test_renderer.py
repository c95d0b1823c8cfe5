import numpy as np
import pytest

from aoi_zone.geometry.shapes import Viewport
from aoi_zone.rendering.style import PolygonStyle
from aoi_zone.rendering.visualizer import FrameRenderer
from tests.conftest import square


@pytest.fixture
def frame_renderer():
    renderer = FrameRenderer(width=101, height=51)
    renderer.set_viewport(Viewport(west=0, south=0, east=10, north=5))
    return renderer


class TestFrameRenderer:

    def test_project_maps_corners(self, frame_renderer):
        pixels = frame_renderer.project(((0, 5), (10, 5), (10, 0), (0, 0)))
        assert pixels.dtype == np.int32
        assert pixels.tolist() == [[0, 0], [100, 0], [100, 50], [0, 50]]

    def test_project_requires_viewport(self):
        with pytest.raises(RuntimeError):
            FrameRenderer(width=10, height=10).project(((0, 0), (1, 0), (1, 1)))

    def test_zero_extent_viewport_rejected(self, frame_renderer):
        with pytest.raises(ValueError):
            frame_renderer.set_viewport(Viewport(west=1, south=0, east=1, north=5))

    def test_draw_fills_polygon(self, frame_renderer):
        shape = frame_renderer.draw(square(2, 1, 2), PolygonStyle())

        assert shape.vertex_count == 5
        assert frame_renderer.shapes == [shape]
        # Inside the square the white background is tinted
        assert (frame_renderer.frame[30, 30] != 255).any()
        # Far outside it stays white
        assert (frame_renderer.frame[5, 90] == 255).all()

    def test_clear_resets_frame(self, frame_renderer):
        frame_renderer.draw(square(2, 1, 2), PolygonStyle())
        frame_renderer.clear()

        assert frame_renderer.shapes == []
        assert (frame_renderer.frame == 255).all()


class TestPolygonStyle:

    def test_defaults(self):
        style = PolygonStyle()
        assert style.color == "#3b82f6"
        assert style.weight == 2
        assert style.opacity == 0.8
        assert style.fill_opacity == 0.2

    @pytest.mark.parametrize("kwargs", [
        {"weight": 0},
        {"opacity": 1.5},
        {"fill_opacity": -0.1},
    ])
    def test_invalid_style(self, kwargs):
        with pytest.raises(ValueError):
            PolygonStyle(**kwargs)
